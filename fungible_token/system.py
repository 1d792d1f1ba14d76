"""
Token system wiring: storage, ledger, token core and host adapter built from configuration
"""

from typing import Optional

from .amounts import parse_amount
from .config import TokenConfig, get_config
from .contract import FungibleToken
from .events import EventNotifier, create_event_notifier
from .ledger import Ledger
from .logging_config import get_logger
from .metadata import MetadataProvider
from .operations import HostAdapter
from .storage import StorageInterface, create_storage


class TokenSystem:
    """Fungible token ledger with all components initialized"""

    def __init__(
        self,
        config: Optional[TokenConfig] = None,
        storage: Optional[StorageInterface] = None,
        notifier: Optional[EventNotifier] = None
    ):
        self.config = config or get_config()
        self.logger = get_logger("fungible_token.system")

        # Initialize storage
        self.storage = storage or create_storage(
            self.config.storage_backend, self.config.database_path
        )
        self.notifier = notifier or create_event_notifier(self.config.event_sink)

        # Initialize core components
        self.ledger = Ledger(self.storage)
        self.metadata_provider = MetadataProvider.from_config(self.config)
        self.token = FungibleToken(
            self.ledger,
            self.metadata_provider,
            self.notifier,
            min_storage_balance=parse_amount(self.config.min_storage_balance, "min_storage_balance"),
            event_standard=self.config.event_standard,
            event_version=self.config.event_version,
        )
        self.adapter = HostAdapter(self.token)

        self.logger.info(
            f"Token system ready (storage={type(self.storage).__name__}, "
            f"notifier={type(self.notifier).__name__})"
        )

    def close(self) -> None:
        self.storage.close()


# Global token system instance, created on first use
_token_system: Optional[TokenSystem] = None


def get_token_system() -> TokenSystem:
    """Dependency returning the process-wide token system"""
    global _token_system
    if _token_system is None:
        _token_system = TokenSystem()
    return _token_system


def set_token_system(system: Optional[TokenSystem]) -> None:
    """Replace the process-wide token system (None resets it)"""
    global _token_system
    _token_system = system
