"""
Registration Gate Module

An account must reserve storage before it may hold a balance entry. The
reservation is gated by a fixed minimum attached value covering one entry's
storage footprint on the host.
"""

from typing import Any, Dict, Optional

from .amounts import format_amount
from .errors import InsufficientDeposit
from .ledger import Ledger
from .logging_config import get_logger, log_action

# 0.00125 of the host's base unit (10^24 smallest units)
MIN_STORAGE_BALANCE = 1_250_000_000_000_000_000_000


class RegistrationGate:
    """
    Decides whether an account may hold a balance entry and creates it

    Registration is one-time and idempotent: once the entry exists, further
    deposits for the same account leave the balance untouched.
    """

    def __init__(self, ledger: Ledger, min_storage_balance: int = MIN_STORAGE_BALANCE):
        if min_storage_balance < 0:
            raise ValueError("Minimum storage balance must be non-negative")
        self.ledger = ledger
        self.min_storage_balance = min_storage_balance
        self.logger = get_logger("fungible_token.registration")

    def ensure_registered(self, account_id: str, attached_value: int) -> bool:
        """
        Register an account if it has no balance entry yet

        Args:
            account_id: Account to register
            attached_value: Value attached by the caller

        Returns:
            True if a new entry was created, False if already registered

        Raises:
            InsufficientDeposit: If attached_value does not exceed the threshold
        """
        if attached_value <= self.min_storage_balance:
            raise InsufficientDeposit(
                f"The attached deposit is less than the minimum storage balance "
                f"({self.min_storage_balance})"
            )

        if self.ledger.has_account(account_id):
            self.logger.debug(f"Account {account_id} already registered")
            return False

        self.ledger.set_balance(account_id, 0)
        log_action(
            self.logger, "info", f"Account registered: {account_id}",
            account_id=account_id, action="register", resource=f"account:{account_id}",
            extra={"attached_deposit": str(attached_value)}
        )
        return True

    def storage_balance_bounds(self) -> Dict[str, str]:
        """Minimum and maximum storage reservation; every account costs the same"""
        bound = format_amount(self.min_storage_balance)
        return {"min": bound, "max": bound}

    def storage_balance_of(self, account_id: str) -> Optional[Dict[str, Any]]:
        """Storage reservation held by an account, or None if unregistered"""
        if not self.ledger.has_account(account_id):
            return None
        return {"total": format_amount(self.min_storage_balance), "available": "0"}
