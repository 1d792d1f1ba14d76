"""
Fungible Token Core Module

Public operations of the token: one-shot initialization (mint), supply and
balance views, metadata, storage registration and transfer. Each operation
is a single unit of work invoked by the host with an authenticated caller
and, for payable operations, an attached value.

State machine: Uninitialized -> Initialized (one-shot, never reversed).
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .amounts import AmountLike, format_amount, parse_amount
from .errors import AlreadyInitialized, InvalidArguments, NotInitialized
from .events import (
    EventNotifier, FtEvent, NEP141_STANDARD, NEP141_VERSION,
    mint_event, transfer_event,
)
from .ledger import Ledger
from .logging_config import get_logger, log_action
from .metadata import MetadataProvider, TokenMetadata
from .registration import RegistrationGate, MIN_STORAGE_BALANCE
from .transfer import TransferProtocol

MINT_MEMO = "Initial tokens supply is minted"


@dataclass(frozen=True)
class CallContext:
    """
    Identity and value supplied by the host for one invocation

    Attributes:
        predecessor_account_id: Authenticated caller
        attached_deposit: Value attached to the call, in the host's smallest unit
    """
    predecessor_account_id: str
    attached_deposit: int = 0

    def __post_init__(self):
        if not self.predecessor_account_id:
            raise ValueError("Caller account id cannot be empty")
        if isinstance(self.attached_deposit, bool) or not isinstance(self.attached_deposit, int):
            raise ValueError("Attached deposit must be int")
        if self.attached_deposit < 0:
            raise ValueError("Attached deposit must be non-negative")


class FungibleToken:
    """
    Token core wiring the ledger, registration gate, transfer protocol,
    metadata provider and event notifier together.
    """

    def __init__(
        self,
        ledger: Ledger,
        metadata_provider: MetadataProvider,
        notifier: EventNotifier,
        min_storage_balance: int = MIN_STORAGE_BALANCE,
        event_standard: str = NEP141_STANDARD,
        event_version: str = NEP141_VERSION
    ):
        self.ledger = ledger
        self.metadata_provider = metadata_provider
        self.notifier = notifier
        self.registration = RegistrationGate(ledger, min_storage_balance)
        self.transfers = TransferProtocol(ledger)
        self.event_standard = event_standard
        self.event_version = event_version
        self.logger = get_logger("fungible_token.contract")

    def _require_initialized(self) -> None:
        if not self.ledger.is_initialized():
            raise NotInitialized("The token ledger has not been initialized")

    def _notify(self, event: FtEvent) -> None:
        self.notifier.notify(event)

    # Initialization

    def initialize(self, owner_id: str, total_supply: AmountLike) -> None:
        """
        Mint the entire starting supply into the owner account

        Args:
            owner_id: Account receiving the initial supply
            total_supply: Decimal string (or int) amount; zero is allowed

        Raises:
            AlreadyInitialized: On any call after the first success
            InvalidAmount: If total_supply is not a non-negative integer
        """
        if self.ledger.is_initialized():
            raise AlreadyInitialized("The token ledger is already initialized")
        if not owner_id:
            raise InvalidArguments("Owner account id cannot be empty")
        supply = parse_amount(total_supply, "total_supply")

        with self.ledger.atomic():
            self.ledger.set_total_supply(supply)
            self.ledger.set_balance(owner_id, supply)
            self.ledger.mark_initialized(owner_id)

        log_action(
            self.logger, "info", f"Token initialized with supply {supply}",
            account_id=owner_id, action="initialize", resource="token",
            extra={"total_supply": str(supply)}
        )
        self._notify(mint_event(
            owner_id, supply, MINT_MEMO,
            standard=self.event_standard, version=self.event_version,
        ))

    # Views

    def total_supply(self) -> str:
        """Total supply as a decimal string"""
        self._require_initialized()
        return format_amount(self.ledger.total_supply())

    def balance_of(self, account_id: str) -> str:
        """Balance of an account as a decimal string; unregistered accounts hold "0" """
        self._require_initialized()
        return format_amount(self.ledger.get_balance(account_id))

    def metadata(self) -> TokenMetadata:
        """Token metadata, available in every lifecycle state"""
        return self.metadata_provider.metadata()

    def storage_balance_bounds(self) -> Dict[str, str]:
        return self.registration.storage_balance_bounds()

    def storage_balance_of(self, account_id: str) -> Optional[Dict[str, Any]]:
        self._require_initialized()
        return self.registration.storage_balance_of(account_id)

    # Mutations

    def storage_deposit(
        self,
        context: CallContext,
        account_id: Optional[str] = None,
        register_only: Optional[bool] = None
    ) -> Dict[str, Any]:
        """
        Register an account (defaults to the caller) against the attached deposit

        The whole deposit is retained; register_only is accepted for
        interface compatibility and does not change the outcome since
        storage pricing and refunds belong to the host.

        Returns:
            The account's storage balance record

        Raises:
            NotInitialized: Before initialization
            InsufficientDeposit: If the attached deposit does not exceed the threshold
        """
        self._require_initialized()
        target = account_id or context.predecessor_account_id

        created = self.registration.ensure_registered(target, context.attached_deposit)
        if not created:
            log_action(
                self.logger, "debug", f"Storage deposit for registered account {target}",
                account_id=context.predecessor_account_id, action="storage_deposit",
                resource=f"account:{target}",
                extra={"register_only": register_only}
            )
        return self.registration.storage_balance_of(target)

    def transfer(
        self,
        context: CallContext,
        receiver_id: str,
        amount: AmountLike,
        memo: Optional[str] = None
    ) -> None:
        """
        Move amount from the caller to receiver_id

        Raises:
            NotInitialized: Before initialization
            InvalidAmount: If amount is not a non-negative integer
            SenderNotRegistered: If the caller holds no balance entry
            ReceiverNotRegistered: If receiver_id never registered
            InsufficientBalance: If the caller's balance is below amount
        """
        self._require_initialized()
        value = parse_amount(amount)

        receipt = self.transfers.transfer(
            context.predecessor_account_id, receiver_id, value, memo
        )
        self._notify(transfer_event(
            receipt.sender_id, receipt.receiver_id, receipt.amount, receipt.memo,
            standard=self.event_standard, version=self.event_version,
        ))
