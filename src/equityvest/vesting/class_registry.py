"""
Vesting class registry.

Holds exactly one live parameter record per designation. Updating a class
replaces the record outright; grants already issued keep the snapshot they
were created with.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..core.access_control import AdminAuthority
from ..core.clock import TimeProvider, read_timestamp, system_time
from ..core.events import ClassUpdated, EventLog
from ..core.exceptions import (
    ClassNotConfigured,
    InvalidCliffPeriod,
    InvalidTotalTokens,
    InvalidVestingRate,
    ValidationError,
)
from .designations import Designation

logger = logging.getLogger(__name__)

BASIS_POINTS = 10_000
MIN_VESTING_RATE_BPS = 100
SECONDS_PER_DAY = 86_400


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class VestingClassParams:
    """
    Parameters for one designation.

    ``total_periods`` uses integer division, so a rate that does not divide
    10000 yields fewer periods and a lifetime total below ``total_tokens``
    (e.g. 3333 bps gives 3 periods of 33.33%).
    """

    designation: Designation
    total_tokens: int
    vesting_rate_bps: int
    cliff_period_seconds: int
    tokens_per_period: int
    total_periods: int

    @classmethod
    def create(
        cls,
        designation: Designation | str,
        total_tokens: int,
        vesting_rate_bps: int,
        cliff_period_seconds: int,
    ) -> "VestingClassParams":
        """
        Validate inputs and derive per-period values.

        Raises:
            InvalidDesignation: Unknown designation
            InvalidTotalTokens: total_tokens is zero, negative or not an int
            InvalidVestingRate: rate outside [100, 10000] basis points
            InvalidCliffPeriod: cliff negative or not an int
        """
        resolved = Designation.parse(designation)
        if not _is_int(total_tokens) or total_tokens <= 0:
            raise InvalidTotalTokens(
                "Total tokens must be a positive integer.",
                details={"total_tokens": total_tokens},
            )
        if (
            not _is_int(vesting_rate_bps)
            or vesting_rate_bps < MIN_VESTING_RATE_BPS
            or vesting_rate_bps > BASIS_POINTS
        ):
            raise InvalidVestingRate(
                f"Vesting rate must be between {MIN_VESTING_RATE_BPS} and {BASIS_POINTS} basis points.",
                details={"vesting_rate_bps": vesting_rate_bps},
            )
        if not _is_int(cliff_period_seconds) or cliff_period_seconds < 0:
            raise InvalidCliffPeriod(
                "Cliff period must be a non-negative integer number of seconds.",
                details={"cliff_period_seconds": cliff_period_seconds},
            )

        return cls(
            designation=resolved,
            total_tokens=total_tokens,
            vesting_rate_bps=vesting_rate_bps,
            cliff_period_seconds=cliff_period_seconds,
            tokens_per_period=total_tokens * vesting_rate_bps // BASIS_POINTS,
            total_periods=BASIS_POINTS // vesting_rate_bps,
        )

    @property
    def max_vestable(self) -> int:
        return self.tokens_per_period * self.total_periods

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["designation"] = self.designation.name
        data["max_vestable"] = self.max_vestable
        return data


class ClassRegistry:
    """Designation -> ``VestingClassParams`` mapping guarded by admin checks."""

    def __init__(
        self,
        authority: AdminAuthority,
        events: Optional[EventLog] = None,
        time_provider: Optional[TimeProvider] = None,
    ):
        self._authority = authority
        self._events = events if events is not None else EventLog()
        self._time_provider = time_provider or system_time
        self._classes: Dict[Designation, VestingClassParams] = {}
        self._lock = threading.Lock()

    def set_class(
        self,
        caller: str,
        designation: Designation | str,
        total_tokens: int,
        vesting_rate_bps: int,
        cliff_period_seconds: int,
    ) -> VestingClassParams:
        """
        Create or overwrite the vesting class for ``designation`` (admin only).

        Returns:
            The stored parameters, including derived fields
        """
        self._authority.require_admin(caller, "set_class")
        params = VestingClassParams.create(
            designation, total_tokens, vesting_rate_bps, cliff_period_seconds
        )
        now = read_timestamp(self._time_provider)

        with self._lock:
            self._classes[params.designation] = params

        self._events.emit(
            ClassUpdated(
                timestamp=now,
                designation=params.designation,
                total_tokens=params.total_tokens,
                vesting_rate_bps=params.vesting_rate_bps,
                cliff_period_seconds=params.cliff_period_seconds,
                tokens_per_period=params.tokens_per_period,
                total_periods=params.total_periods,
            )
        )
        return params

    def get_class(self, designation: Designation | str) -> Optional[VestingClassParams]:
        """Return the live parameters, or None if the class was never set."""
        resolved = Designation.parse(designation)
        with self._lock:
            return self._classes.get(resolved)

    def require_class(self, designation: Designation | str) -> VestingClassParams:
        params = self.get_class(designation)
        if params is None:
            raise ClassNotConfigured(
                f"No vesting class configured for {Designation.parse(designation).name}",
                details={"designation": Designation.parse(designation).name},
            )
        return params

    def list_classes(self) -> List[VestingClassParams]:
        with self._lock:
            return [self._classes[d] for d in Designation if d in self._classes]

    def load_classes(
        self, caller: str, entries: Iterable[Mapping[str, Any]]
    ) -> List[VestingClassParams]:
        """
        Apply class definitions from configuration.

        Each entry carries ``designation``, ``total_tokens``,
        ``vesting_rate_bps`` and either ``cliff_period_seconds`` or
        ``cliff_period_days``.
        """
        loaded = []
        for entry in entries:
            if "designation" not in entry:
                raise ValidationError("Class entry is missing 'designation'.", details=dict(entry))
            if "cliff_period_seconds" in entry:
                cliff = entry["cliff_period_seconds"]
            else:
                days = entry.get("cliff_period_days", 0)
                if not _is_int(days):
                    raise InvalidCliffPeriod(
                        "cliff_period_days must be an integer.",
                        details={"cliff_period_days": days},
                    )
                cliff = days * SECONDS_PER_DAY
            loaded.append(
                self.set_class(
                    caller,
                    entry["designation"],
                    entry.get("total_tokens", 0),
                    entry.get("vesting_rate_bps", 0),
                    cliff,
                )
            )
        logger.info(
            "Loaded %d vesting classes",
            len(loaded),
            extra={"event": "vesting.classes_loaded", "count": len(loaded)},
        )
        return loaded
