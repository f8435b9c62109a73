"""
Fixed-capacity lottery pool.

Participants each deposit ``ticket_price`` into the pool's custody until the
round is full; the admin then draws a single winner who receives the whole
pot. A round can also be cancelled, refunding every deposit.

Winner selection uses ``secrets.SystemRandom`` by default. A different
``random.Random``-compatible source can be injected for tests.
"""

from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Sequence

from ..core import metrics
from ..core.access_control import AdminAuthority, normalize_address
from ..core.clock import TimeProvider, read_timestamp, system_time
from ..core.events import EventLog, LotteryDrawn, LotteryEntered, LotteryRefunded
from ..core.exceptions import (
    AlreadyEntered,
    LotteryClosed,
    LotteryFull,
    LotteryNotReady,
    TransferFailed,
    ValidationError,
)
from ..core.protocols import DepositCapability

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def choice(self, seq: Sequence[str]) -> str: ...


class RoundStatus(Enum):
    OPEN = "open"
    DRAWN = "drawn"
    CANCELLED = "cancelled"


@dataclass
class LotteryRound:
    round_id: int
    ticket_price: int
    capacity: int
    participants: List[str] = field(default_factory=list)
    status: RoundStatus = RoundStatus.OPEN
    winner: Optional[str] = None
    prize: int = 0
    closed_at: Optional[int] = None

    @property
    def pot(self) -> int:
        return self.ticket_price * len(self.participants)

    @property
    def is_full(self) -> bool:
        return len(self.participants) >= self.capacity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round_id": self.round_id,
            "ticket_price": self.ticket_price,
            "capacity": self.capacity,
            "participants": list(self.participants),
            "status": self.status.value,
            "winner": self.winner,
            "prize": self.prize,
            "closed_at": self.closed_at,
        }


class LotteryPool:
    """
    Pooled-deposit lottery with one open round at a time.

    Args:
        authority: Admin authority allowed to draw and cancel
        custody: Deposit-capable custody holding the pot
        capacity: Tickets per round (>= 2)
        ticket_price: Deposit per ticket (> 0)
        events: Event log
        time_provider: Clock
        rng: Randomness source with a ``choice`` method
    """

    def __init__(
        self,
        authority: AdminAuthority,
        custody: DepositCapability,
        capacity: int,
        ticket_price: int,
        events: Optional[EventLog] = None,
        time_provider: Optional[TimeProvider] = None,
        rng: Optional[RandomSource] = None,
    ):
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 2:
            raise ValidationError("Lottery capacity must be an integer >= 2.", details={"capacity": capacity})
        if isinstance(ticket_price, bool) or not isinstance(ticket_price, int) or ticket_price <= 0:
            raise ValidationError(
                "Ticket price must be a positive integer.", details={"ticket_price": ticket_price}
            )
        self._authority = authority
        self._custody = custody
        self.capacity = capacity
        self.ticket_price = ticket_price
        self._events = events if events is not None else EventLog()
        self._time_provider = time_provider or system_time
        self._rng = rng or secrets.SystemRandom()
        self._lock = threading.RLock()
        self._history: List[LotteryRound] = []
        self._round = self._new_round(1)

    @property
    def round_id(self) -> int:
        return self._round.round_id

    def participants(self) -> List[str]:
        with self._lock:
            return list(self._round.participants)

    def pot(self) -> int:
        with self._lock:
            return self._round.pot

    def history(self) -> List[LotteryRound]:
        with self._lock:
            return list(self._history)

    def enter(self, participant: str) -> int:
        """
        Buy a ticket in the current round.

        Returns:
            The zero-based ticket index

        Raises:
            LotteryClosed, LotteryFull, AlreadyEntered, TransferFailed
        """
        if not isinstance(participant, str) or not participant.strip():
            raise ValidationError("Participant address cannot be empty.")
        key = normalize_address(participant)

        with self._lock:
            now = read_timestamp(self._time_provider)
            current = self._round
            if current.status is not RoundStatus.OPEN:
                raise LotteryClosed(f"Round {current.round_id} is not open")
            if current.is_full:
                raise LotteryFull(
                    f"Round {current.round_id} is full",
                    details={"capacity": current.capacity},
                )
            if key in current.participants:
                raise AlreadyEntered(
                    f"{key} already entered round {current.round_id}",
                    details={"participant": key, "round_id": current.round_id},
                )
            if not self._custody.collect(key, current.ticket_price):
                raise TransferFailed(
                    "Ticket deposit failed",
                    details={"participant": key, "amount": current.ticket_price},
                )
            current.participants.append(key)
            ticket = len(current.participants) - 1

        self._events.emit(
            LotteryEntered(timestamp=now, round_id=current.round_id, participant=key, ticket=ticket)
        )
        return ticket

    def draw(self, caller: str) -> LotteryRound:
        """
        Pick a winner for the full current round and pay out the pot (admin only).

        Raises:
            Unauthorized, LotteryNotReady, TransferFailed
        """
        self._authority.require_admin(caller, "draw")

        with self._lock:
            now = read_timestamp(self._time_provider)
            current = self._round
            if not current.is_full:
                raise LotteryNotReady(
                    f"Round {current.round_id} has {len(current.participants)}/{current.capacity} tickets",
                    details={"round_id": current.round_id, "entries": len(current.participants)},
                )
            winner = self._rng.choice(current.participants)
            prize = current.pot
            if not self._custody.pay(winner, prize):
                raise TransferFailed(
                    "Prize payout failed", details={"winner": winner, "amount": prize}
                )
            current.status = RoundStatus.DRAWN
            current.winner = winner
            current.prize = prize
            current.closed_at = now
            self._close(current)

        metrics.record_lottery_round(RoundStatus.DRAWN.value)
        self._events.emit(
            LotteryDrawn(
                timestamp=now,
                round_id=current.round_id,
                winner=winner,
                prize=prize,
                participants=len(current.participants),
            )
        )
        return current

    def cancel(self, caller: str) -> LotteryRound:
        """
        Cancel the current round and refund every deposit (admin only).

        Raises:
            Unauthorized, TransferFailed (refunds already made stay made and
            the unrefunded participants remain in the round)
        """
        self._authority.require_admin(caller, "cancel")

        with self._lock:
            now = read_timestamp(self._time_provider)
            current = self._round
            refunded = 0
            for participant in list(current.participants):
                if not self._custody.pay(participant, current.ticket_price):
                    del current.participants[:refunded]
                    raise TransferFailed(
                        "Refund failed",
                        details={"participant": participant, "amount": current.ticket_price},
                    )
                refunded += 1
            current.status = RoundStatus.CANCELLED
            current.closed_at = now
            self._close(current)

        metrics.record_lottery_round(RoundStatus.CANCELLED.value)
        self._events.emit(
            LotteryRefunded(
                timestamp=now,
                round_id=current.round_id,
                refunded=refunded * current.ticket_price,
                participants=refunded,
            )
        )
        return current

    def _close(self, finished: LotteryRound) -> None:
        self._history.append(finished)
        self._round = self._new_round(finished.round_id + 1)

    def _new_round(self, round_id: int) -> LotteryRound:
        return LotteryRound(round_id=round_id, ticket_price=self.ticket_price, capacity=self.capacity)
