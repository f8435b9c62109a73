"""
Notifications emitted by vesting and lottery operations.

Events exist for observability. They are appended to an ``EventLog`` after
the operation that produced them has committed, so a failed operation never
leaves an event behind.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, List, Optional, Type, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="Event")


@dataclass(frozen=True)
class Event:
    name: ClassVar[str] = "event"
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.name
        data["event"] = self.name
        return data


@dataclass(frozen=True)
class ClassUpdated(Event):
    name: ClassVar[str] = "vesting.class_updated"
    designation: Any
    total_tokens: int
    vesting_rate_bps: int
    cliff_period_seconds: int
    tokens_per_period: int
    total_periods: int


@dataclass(frozen=True)
class EquityGranted(Event):
    name: ClassVar[str] = "vesting.equity_granted"
    employee: str
    designation: Any
    total_tokens: int
    vesting_rate_bps: int
    cliff_period_seconds: int


@dataclass(frozen=True)
class TokensClaimed(Event):
    name: ClassVar[str] = "vesting.tokens_claimed"
    employee: str
    amount: int
    # Vested total the grant is now claimed up to
    claimed_total: int
    requested_by: str


@dataclass(frozen=True)
class LotteryEntered(Event):
    name: ClassVar[str] = "lottery.entered"
    round_id: int
    participant: str
    ticket: int


@dataclass(frozen=True)
class LotteryDrawn(Event):
    name: ClassVar[str] = "lottery.drawn"
    round_id: int
    winner: str
    prize: int
    participants: int


@dataclass(frozen=True)
class LotteryRefunded(Event):
    name: ClassVar[str] = "lottery.refunded"
    round_id: int
    refunded: int
    participants: int


class EventLog:
    """
    Append-only in-memory event log with synchronous subscribers.

    Events are emitted after the producing operation has committed, so a
    failing subscriber cannot undo it. Subscriber errors are logged and the
    remaining subscribers still run.
    """

    def __init__(self) -> None:
        self._events: List[Event] = []
        self._subscribers: List[Callable[[Event], None]] = []
        self._lock = threading.Lock()

    def emit(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)
            subscribers = list(self._subscribers)
        logger.info(event.name, extra=event.to_dict())
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Event subscriber failed",
                    extra={"event": "events.subscriber_failed", "failed_event": event.name},
                )

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def events(self) -> List[Event]:
        with self._lock:
            return list(self._events)

    def of_type(self, event_cls: Type[E]) -> List[E]:
        return [e for e in self.events() if isinstance(e, event_cls)]

    def last(self, event_cls: Optional[Type[E]] = None) -> Optional[Event]:
        events = self.events() if event_cls is None else self.of_type(event_cls)
        return events[-1] if events else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
