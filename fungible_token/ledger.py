"""
Token Ledger Module

Owns the mapping from account id to balance and the scalar total supply.
Balances are kept in the injected storage backend as decimal strings and
handled as ints everywhere else.

The ledger does not itself enforce conservation: every mutating operation
above this layer must keep sum(balances) == total_supply.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from .amounts import format_amount
from .storage import StorageInterface
from .logging_config import get_logger


BALANCES_TABLE = "balances"
STATE_TABLE = "token_state"

_TOTAL_SUPPLY_KEY = "total_supply"
_OWNER_KEY = "owner_id"
_INITIALIZED_KEY = "initialized"


class Ledger:
    """
    Account balances and total supply on top of a key-value store

    Accounts without an entry hold zero. An entry, even with a zero balance,
    marks the account as registered.
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.logger = get_logger("fungible_token.ledger")

    # Balances

    def get_balance(self, account_id: str) -> int:
        """Return the stored balance, or 0 if the account has no entry"""
        value = self.storage.get(BALANCES_TABLE, account_id)
        if value is None:
            return 0
        return int(value)

    def set_balance(self, account_id: str, value: int) -> None:
        """
        Overwrite the balance for an account, creating the entry if needed

        Args:
            account_id: Account to update
            value: New balance, must be non-negative

        Raises:
            ValueError: If value is negative
        """
        self.storage.set(BALANCES_TABLE, account_id, format_amount(value))
        self.logger.debug(f"Balance set: {account_id} = {value}")

    def has_account(self, account_id: str) -> bool:
        """Check whether the account holds a balance entry"""
        return self.storage.exists(BALANCES_TABLE, account_id)

    def account_count(self) -> int:
        """Number of accounts holding a balance entry"""
        return self.storage.count(BALANCES_TABLE)

    def iter_balances(self) -> Iterator[tuple]:
        """Yield (account_id, balance) pairs for every entry"""
        for account_id, value in self.storage.items(BALANCES_TABLE).items():
            yield account_id, int(value)

    # Supply and lifecycle

    def total_supply(self) -> int:
        """Return the current total supply (0 before initialization)"""
        value = self.storage.get(STATE_TABLE, _TOTAL_SUPPLY_KEY)
        if value is None:
            return 0
        return int(value)

    def set_total_supply(self, value: int) -> None:
        """Overwrite the total supply scalar; only initialization calls this"""
        self.storage.set(STATE_TABLE, _TOTAL_SUPPLY_KEY, format_amount(value))

    def is_initialized(self) -> bool:
        """Check whether the one-shot initialization has happened"""
        return self.storage.get(STATE_TABLE, _INITIALIZED_KEY) == "true"

    def mark_initialized(self, owner_id: str) -> None:
        """Record the terminal Uninitialized -> Initialized transition"""
        self.storage.set(STATE_TABLE, _OWNER_KEY, owner_id)
        self.storage.set(STATE_TABLE, _INITIALIZED_KEY, "true")

    def owner_id(self) -> Optional[str]:
        """Account that received the initial supply"""
        return self.storage.get(STATE_TABLE, _OWNER_KEY)

    @contextmanager
    def atomic(self):
        """Group several writes into one storage transaction"""
        with self.storage.atomic():
            yield

    # Invariant checks

    def verify_conservation(self) -> Dict[str, Any]:
        """
        Verify that total supply equals the sum of all stored balances

        Returns:
            Dict with keys:
            - 'valid': bool - True if the conservation invariant holds
            - 'total_supply': int - Current total supply
            - 'sum_of_balances': int - Sum over all balance entries
            - 'difference': int - total_supply - sum_of_balances
            - 'negative_accounts': List[str] - Accounts holding a negative balance
        """
        total = 0
        negative_accounts = []
        for account_id, balance in self.iter_balances():
            total += balance
            if balance < 0:
                negative_accounts.append(account_id)

        supply = self.total_supply()
        difference = supply - total
        return {
            'valid': difference == 0 and not negative_accounts,
            'total_supply': supply,
            'sum_of_balances': total,
            'difference': difference,
            'negative_accounts': negative_accounts,
        }
