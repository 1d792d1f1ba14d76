"""
Tests for configuration and system wiring
"""

import pytest

from fungible_token import config as config_module
from fungible_token.config import DEFAULT_MIN_STORAGE_BALANCE, TokenConfig, get_config, reload_config
from fungible_token.errors import InvalidAmount
from fungible_token.events import InMemoryEventNotifier, LogEventNotifier
from fungible_token.registration import MIN_STORAGE_BALANCE
from fungible_token.storage import InMemoryStorage, SQLiteStorage
from fungible_token.system import TokenSystem, get_token_system, set_token_system


class TestTokenConfig:
    """Test settings defaults and environment overrides"""

    def test_defaults(self):
        config = TokenConfig(_env_file=None)
        assert config.storage_backend == "sqlite"
        assert config.event_sink == "log"
        assert config.event_standard == "nep141"
        assert config.event_version == "1.0.0"
        assert config.log_format == "json"
        assert config.api_port == 8090
        assert config.min_storage_balance == DEFAULT_MIN_STORAGE_BALANCE
        assert int(DEFAULT_MIN_STORAGE_BALANCE) == MIN_STORAGE_BALANCE

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("FT_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("FT_TOKEN_DECIMALS", "6")
        monkeypatch.setenv("FT_MIN_STORAGE_BALANCE", "42")

        config = TokenConfig(_env_file=None)
        assert config.storage_backend == "memory"
        assert config.token_decimals == 6
        assert config.min_storage_balance == "42"

    def test_reload_config(self, monkeypatch):
        original = get_config()
        try:
            monkeypatch.setenv("FT_API_PORT", "9999")
            reloaded = reload_config()
            assert reloaded.api_port == 9999
            assert get_config() is reloaded
        finally:
            config_module.config = original


class TestTokenSystem:
    """Test component wiring from configuration"""

    def test_memory_system(self):
        system = TokenSystem(TokenConfig(_env_file=None, storage_backend="memory", event_sink="memory"))
        assert isinstance(system.storage, InMemoryStorage)
        assert isinstance(system.notifier, InMemoryEventNotifier)
        assert system.token.registration.min_storage_balance == MIN_STORAGE_BALANCE
        assert system.adapter.token is system.token

    def test_sqlite_system(self, tmp_path):
        config = TokenConfig(
            _env_file=None, storage_backend="sqlite",
            database_path=str(tmp_path / "ft.db"), event_sink="log",
        )
        system = TokenSystem(config)
        assert isinstance(system.storage, SQLiteStorage)
        assert isinstance(system.notifier, LogEventNotifier)
        system.close()

    def test_custom_threshold_and_event_tag(self):
        config = TokenConfig(
            _env_file=None, storage_backend="memory", event_sink="memory",
            min_storage_balance="10", event_standard="custom", event_version="9.9.9",
        )
        system = TokenSystem(config)
        system.token.initialize("alice", "5")
        event = system.notifier.events[0]
        assert system.token.registration.min_storage_balance == 10
        assert event.standard == "custom"
        assert event.version == "9.9.9"

    def test_invalid_threshold(self):
        config = TokenConfig(_env_file=None, storage_backend="memory", min_storage_balance="-1")
        with pytest.raises(InvalidAmount):
            TokenSystem(config)

    def test_global_system(self):
        system = TokenSystem(TokenConfig(_env_file=None, storage_backend="memory"))
        set_token_system(system)
        try:
            assert get_token_system() is system
        finally:
            set_token_system(None)
