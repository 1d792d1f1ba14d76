"""
Event Notification Module

Typed NEP-141 / NEP-297 event records and the notifier sinks that receive
them. Delivery is fire-and-forget: the token core hands each event to the
notifier once the state change behind it has committed.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

EVENT_LOG_PREFIX = "EVENT_JSON:"
NEP141_STANDARD = "nep141"
NEP141_VERSION = "1.0.0"


class FtEventKind(Enum):
    """Kinds of token events"""
    MINT = "ft_mint"
    TRANSFER = "ft_transfer"


@dataclass(frozen=True)
class FtMintRecord:
    """One minted amount credited to an owner"""
    owner_id: str
    amount: int
    memo: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"owner_id": self.owner_id, "amount": str(self.amount)}
        if self.memo is not None:
            result["memo"] = self.memo
        return result


@dataclass(frozen=True)
class FtTransferRecord:
    """One value movement between two accounts"""
    old_owner_id: str
    new_owner_id: str
    amount: int
    memo: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "old_owner_id": self.old_owner_id,
            "new_owner_id": self.new_owner_id,
            "amount": str(self.amount),
        }
        if self.memo is not None:
            result["memo"] = self.memo
        return result


EventRecord = Union[FtMintRecord, FtTransferRecord]


@dataclass(frozen=True)
class FtEvent:
    """
    Structured event: standard/version tag, kind and an ordered list of records

    Serializes to the same key order and shape as the on-chain
    ``EVENT_JSON:{"standard":..,"version":..,"event":..,"data":[..]}`` log line.
    """
    event: FtEventKind
    data: List[EventRecord] = field(default_factory=list)
    standard: str = NEP141_STANDARD
    version: str = NEP141_VERSION

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "standard": self.standard,
            "version": self.version,
            "event": self.event.value,
            "data": [record.to_dict() for record in self.data],
        }

    def to_json(self) -> str:
        """Compact JSON body"""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    def to_log_line(self) -> str:
        """Full log line including the EVENT_JSON: prefix"""
        return f"{EVENT_LOG_PREFIX}{self.to_json()}"


def mint_event(owner_id: str, amount: int, memo: Optional[str] = None,
               standard: str = NEP141_STANDARD, version: str = NEP141_VERSION) -> FtEvent:
    """Create an ft_mint event with a single record"""
    return FtEvent(
        event=FtEventKind.MINT,
        data=[FtMintRecord(owner_id=owner_id, amount=amount, memo=memo)],
        standard=standard,
        version=version,
    )


def transfer_event(old_owner_id: str, new_owner_id: str, amount: int, memo: Optional[str] = None,
                   standard: str = NEP141_STANDARD, version: str = NEP141_VERSION) -> FtEvent:
    """Create an ft_transfer event with a single record"""
    return FtEvent(
        event=FtEventKind.TRANSFER,
        data=[FtTransferRecord(
            old_owner_id=old_owner_id,
            new_owner_id=new_owner_id,
            amount=amount,
            memo=memo,
        )],
        standard=standard,
        version=version,
    )


class EventNotifier(ABC):
    """Abstract event notifier interface"""

    @abstractmethod
    def notify(self, event: FtEvent) -> None:
        """Deliver an event; no acknowledgment is awaited"""
        pass

    @abstractmethod
    def subscribe(self, handler: Callable[[FtEvent], None]) -> None:
        """Register a handler called for every delivered event"""
        pass


class _SubscriberMixin:
    """Handler bookkeeping shared by the notifier implementations"""

    def _init_subscribers(self, logger: logging.Logger) -> None:
        self._handlers: List[Callable[[FtEvent], None]] = []
        self._lock = threading.RLock()
        self.logger = logger

    def subscribe(self, handler: Callable[[FtEvent], None]) -> None:
        with self._lock:
            self._handlers.append(handler)
            self.logger.debug(f"Subscribed handler {getattr(handler, '__name__', repr(handler))}")

    def _dispatch(self, event: FtEvent) -> None:
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                # A failing subscriber must not undo a committed operation
                self.logger.error(
                    f"Error in event handler {getattr(handler, '__name__', repr(handler))} "
                    f"for {event.event.value}: {e}"
                )


class InMemoryEventNotifier(_SubscriberMixin, EventNotifier):
    """In-memory notifier for testing and inspection"""

    def __init__(self):
        self.events: List[FtEvent] = []
        self._init_subscribers(logging.getLogger("fungible_token.events"))

    def notify(self, event: FtEvent) -> None:
        with self._lock:
            self.events.append(event)
        self._dispatch(event)

    def get_events(self, kind: Optional[FtEventKind] = None) -> List[FtEvent]:
        """Get all events or events of a specific kind"""
        with self._lock:
            if kind:
                return [e for e in self.events if e.event == kind]
            return list(self.events)

    def clear_events(self) -> None:
        """Clear all events (for testing)"""
        with self._lock:
            self.events.clear()


class LogEventNotifier(_SubscriberMixin, EventNotifier):
    """Notifier that writes EVENT_JSON log lines, the host's event transport"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._init_subscribers(logger or logging.getLogger("fungible_token.events"))

    def notify(self, event: FtEvent) -> None:
        self.logger.info(event.to_log_line())
        self._dispatch(event)


def create_event_notifier(sink: str) -> EventNotifier:
    """
    Build an event notifier by name

    Args:
        sink: "log" or "memory"
    """
    if sink == "log":
        return LogEventNotifier()
    if sink == "memory":
        return InMemoryEventNotifier()
    raise ValueError(f"Unknown event sink: {sink}")
