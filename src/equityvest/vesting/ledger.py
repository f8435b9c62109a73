"""
Per-employee grant ledger.

A grant snapshots its class parameters at grant time. Re-granting replaces
the record wholesale, claimed history included. Grants are never deleted.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Iterator, List, Optional

from ..core import metrics
from ..core.access_control import AdminAuthority, normalize_address
from ..core.clock import TimeProvider, read_timestamp, system_time
from ..core.events import EquityGranted, EventLog
from ..core.exceptions import EquityVestError, GrantNotFound, ValidationError
from .class_registry import ClassRegistry
from .designations import Designation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Grant:
    """Immutable grant record; the ledger swaps in a new one when a claim advances."""

    employee: str
    designation: Designation
    total_tokens: int
    tokens_per_period: int
    total_periods: int
    vesting_rate_bps: int
    cliff_period_seconds: int
    granted_at: int
    claimed_tokens: int = 0

    @property
    def vesting_start_time(self) -> int:
        return self.granted_at + self.cliff_period_seconds

    @property
    def max_vestable(self) -> int:
        return self.total_periods * self.tokens_per_period

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["designation"] = self.designation.name
        data["vesting_start_time"] = self.vesting_start_time
        return data


class VestingLedger:
    """
    Grant records keyed by normalized employee identity.

    Thread Safety: ``employee_lock`` yields a re-entrant lock per employee.
    Grant and claim hold it across their whole read-modify-write.
    """

    def __init__(
        self,
        registry: ClassRegistry,
        authority: AdminAuthority,
        events: Optional[EventLog] = None,
        time_provider: Optional[TimeProvider] = None,
    ):
        self._registry = registry
        self._authority = authority
        self._events = events if events is not None else EventLog()
        self._time_provider = time_provider or system_time
        self._grants: Dict[str, Grant] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def employee_lock(self, employee: str) -> Iterator[str]:
        """Hold the employee's lock; yields the normalized identity."""
        key = self._key(employee)
        with self._locks_guard:
            lock = self._locks.setdefault(key, threading.RLock())
        with lock:
            yield key

    def grant_equity(self, caller: str, employee: str, designation: Designation | str) -> Grant:
        """
        Grant equity under the current class for ``designation`` (admin only).

        Any existing grant for ``employee`` is replaced and its claimed
        history discarded.

        Raises:
            Unauthorized: Caller is not the admin
            ValidationError: Empty employee identity
            ClassNotConfigured: No class set for the designation
        """
        self._authority.require_admin(caller, "grant_equity")
        params = self._registry.require_class(designation)

        with self.employee_lock(employee) as key:
            now = read_timestamp(self._time_provider)
            previous = self._grants.get(key)
            grant = Grant(
                employee=key,
                designation=params.designation,
                total_tokens=params.total_tokens,
                tokens_per_period=params.tokens_per_period,
                total_periods=params.total_periods,
                vesting_rate_bps=params.vesting_rate_bps,
                cliff_period_seconds=params.cliff_period_seconds,
                granted_at=now,
            )
            self._grants[key] = grant

        if previous is not None:
            logger.warning(
                "Existing grant replaced; claimed history discarded",
                extra={
                    "event": "vesting.grant_replaced",
                    "employee": key[:10],
                    "previous_claimed": previous.claimed_tokens,
                    "previous_designation": previous.designation.name,
                },
            )

        self._events.emit(
            EquityGranted(
                timestamp=now,
                employee=key,
                designation=grant.designation,
                total_tokens=grant.total_tokens,
                vesting_rate_bps=grant.vesting_rate_bps,
                cliff_period_seconds=grant.cliff_period_seconds,
            )
        )
        metrics.record_grant(grant.designation.name)
        return grant

    def get_grant(self, employee: str) -> Optional[Grant]:
        """Committed grant snapshot; waits for an in-flight claim on the same employee."""
        with self.employee_lock(employee) as key:
            return self._grants.get(key)

    def require_grant(self, employee: str) -> Grant:
        grant = self.get_grant(employee)
        if grant is None:
            raise GrantNotFound(
                f"No grant found for {employee}",
                details={"employee": employee},
            )
        return grant

    def employees(self) -> List[str]:
        return list(self._grants)

    def record_claim(self, employee: str, claimed_to: int) -> int:
        """
        Advance ``claimed_tokens`` to ``claimed_to``.

        Sets the value rather than adding to it, so the grant is claimed up to
        the vested total exactly.

        Returns:
            The previous claimed value, for rollback
        """
        with self.employee_lock(employee):
            grant = self.require_grant(employee)
            if claimed_to < grant.claimed_tokens:
                raise EquityVestError(
                    "claimed_tokens cannot decrease",
                    details={"current": grant.claimed_tokens, "requested": claimed_to},
                )
            self._grants[grant.employee] = replace(grant, claimed_tokens=claimed_to)
            return grant.claimed_tokens

    def restore_claim(self, employee: str, previous: int) -> None:
        """Compensating rollback for a claim whose payout failed."""
        with self.employee_lock(employee):
            grant = self.require_grant(employee)
            self._grants[grant.employee] = replace(grant, claimed_tokens=previous)
        logger.warning(
            "Claim rolled back",
            extra={"event": "vesting.claim_rolled_back", "employee": employee[:10], "claimed": previous},
        )

    def _key(self, employee: str) -> str:
        if not isinstance(employee, str) or not employee.strip():
            raise ValidationError("Employee address cannot be empty.")
        return normalize_address(employee)
