"""
Test suite for the token ledger

Validates balance bookkeeping, the lifecycle flag and the conservation
check: total supply must always equal the sum of all balances.
"""

import pytest

from fungible_token.ledger import BALANCES_TABLE, STATE_TABLE, Ledger
from fungible_token.storage import InMemoryStorage, SQLiteStorage


class TestLedgerBalances:
    """Test balance reads and writes"""

    def setup_method(self):
        self.storage = InMemoryStorage()
        self.ledger = Ledger(self.storage)

    def test_unknown_account_reads_zero(self):
        assert self.ledger.get_balance("nobody") == 0
        assert not self.ledger.has_account("nobody")

    def test_zero_balance_entry_marks_registration(self):
        self.ledger.set_balance("bob", 0)
        assert self.ledger.has_account("bob")
        assert self.ledger.get_balance("bob") == 0

    def test_balances_stored_as_decimal_strings(self):
        self.ledger.set_balance("alice", 10 ** 30)
        assert self.storage.get(BALANCES_TABLE, "alice") == "1" + "0" * 30
        assert self.ledger.get_balance("alice") == 10 ** 30

    def test_negative_balance_rejected(self):
        with pytest.raises(ValueError):
            self.ledger.set_balance("alice", -1)
        assert not self.ledger.has_account("alice")

    def test_account_listing(self):
        self.ledger.set_balance("alice", 5)
        self.ledger.set_balance("bob", 0)
        assert self.ledger.account_count() == 2
        assert dict(self.ledger.iter_balances()) == {"alice": 5, "bob": 0}


class TestLedgerLifecycle:
    """Test supply scalar and initialization flag"""

    def setup_method(self):
        self.storage = InMemoryStorage()
        self.ledger = Ledger(self.storage)

    def test_fresh_ledger(self):
        assert not self.ledger.is_initialized()
        assert self.ledger.total_supply() == 0
        assert self.ledger.owner_id() is None

    def test_mark_initialized(self):
        self.ledger.set_total_supply(1000)
        self.ledger.mark_initialized("alice")
        assert self.ledger.is_initialized()
        assert self.ledger.owner_id() == "alice"
        assert self.ledger.total_supply() == 1000
        assert self.storage.get(STATE_TABLE, "total_supply") == "1000"

    def test_atomic_rollback(self):
        self.ledger.set_balance("alice", 100)

        with pytest.raises(RuntimeError):
            with self.ledger.atomic():
                self.ledger.set_balance("alice", 0)
                self.ledger.set_balance("bob", 100)
                raise RuntimeError("abort")

        assert self.ledger.get_balance("alice") == 100
        assert not self.ledger.has_account("bob")


class TestConservation:
    """Test verify_conservation on consistent and broken ledgers"""

    def setup_method(self):
        self.ledger = Ledger(SQLiteStorage())

    def teardown_method(self):
        self.ledger.storage.close()

    def test_empty_ledger_is_consistent(self):
        result = self.ledger.verify_conservation()
        assert result["valid"]
        assert result["total_supply"] == 0
        assert result["sum_of_balances"] == 0

    def test_consistent_ledger(self):
        self.ledger.set_total_supply(1000)
        self.ledger.set_balance("alice", 600)
        self.ledger.set_balance("bob", 400)
        self.ledger.set_balance("carol", 0)

        result = self.ledger.verify_conservation()
        assert result["valid"]
        assert result["difference"] == 0
        assert result["negative_accounts"] == []

    def test_detects_mismatch(self):
        self.ledger.set_total_supply(1000)
        self.ledger.set_balance("alice", 999)

        result = self.ledger.verify_conservation()
        assert not result["valid"]
        assert result["difference"] == 1

    def test_detects_negative_entry(self):
        """A corrupted store holding a negative value is reported"""
        self.ledger.set_total_supply(0)
        self.ledger.storage.set(BALANCES_TABLE, "mallory", "-5")
        self.ledger.storage.set(BALANCES_TABLE, "alice", "5")

        result = self.ledger.verify_conservation()
        assert not result["valid"]
        assert result["negative_accounts"] == ["mallory"]
