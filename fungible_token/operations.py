"""
Host Adapter Module

Explicit table of the token's public operations and the adapter that
dispatches host invocations onto the token core. Each entry names its
capability, so attached value and read-only access are checked before the
core is ever reached.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Type

from pydantic import ValidationError

from .contract import CallContext, FungibleToken
from .errors import (
    DepositNotAccepted, InvalidArguments, OperationNotFound, TokenError, ViewOnlyViolation,
)
from .logging_config import get_logger, log_action
from .schemas import (
    AccountArgs, InitializeArgs, NoArgs, OperationArgs, StorageDepositArgs, TransferArgs,
)


class Capability(Enum):
    """How an operation may be invoked"""
    VIEW = "view"        # Read-only, no attached value, caller optional
    CALL = "call"        # Mutating, no attached value
    PAYABLE = "payable"  # Mutating, accepts attached value

    @property
    def mutating(self) -> bool:
        return self is not Capability.VIEW


Handler = Callable[[FungibleToken, Any, Optional[CallContext]], Any]


@dataclass(frozen=True)
class Operation:
    """One public entry point of the token"""
    name: str
    handler: Handler
    capability: Capability
    args_model: Type[OperationArgs] = NoArgs


def _initialize(token: FungibleToken, args: InitializeArgs, context: Optional[CallContext]):
    token.initialize(args.owner_id, args.total_supply)
    return None


def _total_supply(token: FungibleToken, args: NoArgs, context: Optional[CallContext]):
    return token.total_supply()


def _balance_of(token: FungibleToken, args: AccountArgs, context: Optional[CallContext]):
    return token.balance_of(args.account_id)


def _metadata(token: FungibleToken, args: NoArgs, context: Optional[CallContext]):
    return token.metadata().to_dict()


def _storage_deposit(token: FungibleToken, args: StorageDepositArgs, context: Optional[CallContext]):
    return token.storage_deposit(context, args.account_id, args.register_only)


def _transfer(token: FungibleToken, args: TransferArgs, context: Optional[CallContext]):
    token.transfer(context, args.receiver_id, args.amount, args.memo)
    return None


def _storage_balance_of(token: FungibleToken, args: AccountArgs, context: Optional[CallContext]):
    return token.storage_balance_of(args.account_id)


def _storage_balance_bounds(token: FungibleToken, args: NoArgs, context: Optional[CallContext]):
    return token.storage_balance_bounds()


def _build_table() -> Dict[str, Operation]:
    entries = [
        (("initialize", "init", "new"), _initialize, Capability.CALL, InitializeArgs),
        (("total_supply", "ft_total_supply"), _total_supply, Capability.VIEW, NoArgs),
        (("balance_of", "ft_balance_of"), _balance_of, Capability.VIEW, AccountArgs),
        (("metadata", "ft_metadata"), _metadata, Capability.VIEW, NoArgs),
        (("storage_deposit",), _storage_deposit, Capability.PAYABLE, StorageDepositArgs),
        (("transfer", "ft_transfer"), _transfer, Capability.PAYABLE, TransferArgs),
        (("storage_balance_of",), _storage_balance_of, Capability.VIEW, AccountArgs),
        (("storage_balance_bounds",), _storage_balance_bounds, Capability.VIEW, NoArgs),
    ]
    table = {}
    for names, handler, capability, args_model in entries:
        for name in names:
            table[name] = Operation(name, handler, capability, args_model)
    return table


# Operation name (including NEP-141 aliases) -> Operation
OPERATIONS: Dict[str, Operation] = _build_table()


class HostAdapter:
    """
    Dispatches named invocations onto a FungibleToken

    Args are validated with the operation's pydantic model and results are
    returned JSON-ready (strings, dicts, None). Invocations are serialized:
    one lock is held across validation, ledger writes and event delivery.
    """

    def __init__(self, token: FungibleToken, operations: Optional[Mapping[str, Operation]] = None):
        self.token = token
        self.operations = dict(operations if operations is not None else OPERATIONS)
        self._lock = threading.RLock()
        self.logger = get_logger("fungible_token.operations")

    def lookup(self, name: str) -> Operation:
        operation = self.operations.get(name)
        if operation is None:
            raise OperationNotFound(f"Unknown operation: {name}")
        return operation

    def view(self, name: str, args: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Invoke a read-only operation

        Raises:
            OperationNotFound: If name is not in the table
            ViewOnlyViolation: If the operation mutates state
        """
        try:
            operation = self.lookup(name)
            if operation.capability.mutating:
                raise ViewOnlyViolation(f"Operation {name} mutates state and cannot be invoked as a view")
            return self._invoke(operation, args, None)
        except TokenError as e:
            self._log_failure(name, None, e)
            raise

    def call(self, name: str, args: Optional[Mapping[str, Any]], context: CallContext) -> Any:
        """
        Invoke any operation on behalf of an authenticated caller

        Raises:
            OperationNotFound: If name is not in the table
            DepositNotAccepted: If value is attached to a non-payable operation
        """
        try:
            operation = self.lookup(name)
            if context.attached_deposit > 0 and operation.capability is not Capability.PAYABLE:
                raise DepositNotAccepted(f"Operation {name} does not accept an attached deposit")
            return self._invoke(operation, args, context)
        except TokenError as e:
            self._log_failure(name, context, e)
            raise

    def _invoke(self, operation: Operation, args: Optional[Mapping[str, Any]],
                context: Optional[CallContext]) -> Any:
        try:
            parsed = operation.args_model.model_validate(dict(args or {}))
        except ValidationError as e:
            raise InvalidArguments(f"Invalid arguments for {operation.name}: {e}")
        with self._lock:
            return operation.handler(self.token, parsed, context)

    def _log_failure(self, name: str, context: Optional[CallContext], error: TokenError) -> None:
        log_action(
            self.logger, "warning", f"Operation {name} failed: {error}",
            account_id=context.predecessor_account_id if context else None,
            action=name, resource="token",
            extra={"error": type(error).__name__}
        )
