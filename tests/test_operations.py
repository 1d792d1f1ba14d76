"""
Tests for the operation table and host adapter
"""

import logging
import sys
from concurrent.futures import ThreadPoolExecutor

import pytest
from unittest.mock import Mock

from fungible_token.contract import CallContext, FungibleToken
from fungible_token.errors import (
    AlreadyInitialized, DepositNotAccepted, InsufficientBalance, InvalidArguments, NotInitialized,
    OperationNotFound, ViewOnlyViolation,
)
from fungible_token.events import InMemoryEventNotifier
from fungible_token.ledger import Ledger
from fungible_token.metadata import MetadataProvider, TokenMetadata
from fungible_token.operations import OPERATIONS, Capability, HostAdapter, Operation
from fungible_token.registration import MIN_STORAGE_BALANCE
from fungible_token.storage import InMemoryStorage

DEPOSIT = str(MIN_STORAGE_BALANCE + 1)


class TestOperationTable:
    """Test the declared capabilities"""

    @pytest.mark.parametrize("name,capability", [
        ("initialize", Capability.CALL),
        ("init", Capability.CALL),
        ("new", Capability.CALL),
        ("total_supply", Capability.VIEW),
        ("ft_total_supply", Capability.VIEW),
        ("balance_of", Capability.VIEW),
        ("ft_balance_of", Capability.VIEW),
        ("metadata", Capability.VIEW),
        ("ft_metadata", Capability.VIEW),
        ("storage_deposit", Capability.PAYABLE),
        ("transfer", Capability.PAYABLE),
        ("ft_transfer", Capability.PAYABLE),
        ("storage_balance_of", Capability.VIEW),
        ("storage_balance_bounds", Capability.VIEW),
    ])
    def test_capabilities(self, name, capability):
        assert OPERATIONS[name].capability is capability

    def test_aliases_share_handlers(self):
        assert OPERATIONS["ft_transfer"].handler is OPERATIONS["transfer"].handler
        assert OPERATIONS["init"].args_model is OPERATIONS["initialize"].args_model

    def test_mutating_flag(self):
        assert not Capability.VIEW.mutating
        assert Capability.CALL.mutating
        assert Capability.PAYABLE.mutating


class TestHostAdapter:
    """Test dispatch, capability checks and argument validation"""

    def setup_method(self):
        self.notifier = InMemoryEventNotifier()
        self.token = FungibleToken(
            Ledger(InMemoryStorage()),
            MetadataProvider(TokenMetadata(spec="ft-1.0.0", name="Token", symbol="TKN", decimals=18)),
            self.notifier,
        )
        self.adapter = HostAdapter(self.token)

    def _init(self):
        self.adapter.call("init", {"owner_id": "alice", "total_supply": "1000"}, CallContext("alice"))

    def test_full_flow_through_aliases(self):
        self._init()
        result = self.adapter.call(
            "storage_deposit", {"account_id": "bob"}, CallContext("alice", int(DEPOSIT))
        )
        assert result == {"total": str(MIN_STORAGE_BALANCE), "available": "0"}

        assert self.adapter.call(
            "ft_transfer", {"receiver_id": "bob", "amount": "100"}, CallContext("alice", 1)
        ) is None

        assert self.adapter.view("ft_balance_of", {"account_id": "alice"}) == "900"
        assert self.adapter.view("ft_balance_of", {"account_id": "bob"}) == "100"
        assert self.adapter.view("ft_total_supply") == "1000"

    def test_metadata_view_is_json_ready(self):
        result = self.adapter.view("ft_metadata", {})
        assert isinstance(result, dict)
        assert result["symbol"] == "TKN"

    def test_storage_views(self):
        self._init()
        assert self.adapter.view("storage_balance_of", {"account_id": "nobody"}) is None
        assert self.adapter.view("storage_balance_bounds")["max"] == str(MIN_STORAGE_BALANCE)

    def test_unknown_operation(self):
        with pytest.raises(OperationNotFound):
            self.adapter.view("ft_burn")
        with pytest.raises(OperationNotFound):
            self.adapter.call("ft_burn", {}, CallContext("alice"))

    def test_deposit_on_call_operation_rejected(self):
        with pytest.raises(DepositNotAccepted):
            self.adapter.call(
                "initialize", {"owner_id": "alice", "total_supply": "1"}, CallContext("alice", 1)
            )
        assert not self.token.ledger.is_initialized()

    def test_deposit_on_view_rejected(self):
        self._init()
        with pytest.raises(DepositNotAccepted):
            self.adapter.call("total_supply", {}, CallContext("alice", 1))

    def test_view_through_call_without_deposit(self):
        self._init()
        assert self.adapter.call("total_supply", {}, CallContext("alice")) == "1000"

    def test_mutation_through_view_rejected(self):
        with pytest.raises(ViewOnlyViolation):
            self.adapter.view("initialize", {"owner_id": "alice", "total_supply": "1"})
        with pytest.raises(ViewOnlyViolation):
            self.adapter.view("ft_transfer", {"receiver_id": "bob", "amount": "1"})
        assert not self.token.ledger.is_initialized()

    @pytest.mark.parametrize("args", [
        {},
        {"owner_id": "alice"},
        {"owner_id": "", "total_supply": "1"},
        {"owner_id": "alice", "total_supply": "1", "extra": True},
    ])
    def test_invalid_arguments(self, args):
        with pytest.raises(InvalidArguments):
            self.adapter.call("initialize", args, CallContext("alice"))

    def test_core_errors_propagate(self):
        with pytest.raises(NotInitialized):
            self.adapter.view("ft_total_supply")
        self._init()
        with pytest.raises(AlreadyInitialized):
            self._init()

    def test_failure_logged_at_warning(self):
        records = []
        handler = logging.Handler()
        handler.emit = records.append
        logger = logging.getLogger("test_fungible_token.operations")
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        logger.addHandler(handler)
        self.adapter.logger = logger

        try:
            with pytest.raises(NotInitialized):
                self.adapter.view("total_supply")
        finally:
            logger.removeHandler(handler)

        assert len(records) == 1
        assert records[0].levelname == "WARNING"
        assert records[0].action == "total_supply"
        assert records[0].extra == {"error": "NotInitialized"}

    def test_custom_operation_table(self):
        handler = Mock(return_value="pong")
        adapter = HostAdapter(self.token, {
            "ping": Operation("ping", handler, Capability.VIEW),
        })
        assert adapter.view("ping") == "pong"
        with pytest.raises(OperationNotFound):
            adapter.view("total_supply")

    def test_parallel_calls_are_serialized(self):
        self._init()
        for account in ("bob", "carol"):
            self.adapter.call("storage_deposit", {}, CallContext(account, int(DEPOSIT)))

        def send(i):
            self.adapter.call(
                "ft_transfer",
                {"receiver_id": "bob" if i % 2 else "carol", "amount": "2"},
                CallContext("alice"),
            )

        interval = sys.getswitchinterval()
        sys.setswitchinterval(1e-6)
        try:
            with ThreadPoolExecutor(max_workers=8) as pool:
                list(pool.map(send, range(500)))
        finally:
            sys.setswitchinterval(interval)

        assert self.token.ledger.verify_conservation()["valid"]
        assert self.adapter.view("balance_of", {"account_id": "alice"}) == "0"
        assert self.adapter.view("balance_of", {"account_id": "bob"}) == "500"
        assert self.adapter.view("balance_of", {"account_id": "carol"}) == "500"

        # The next transfer finds the balance exhausted
        with pytest.raises(InsufficientBalance):
            send(0)
