"""
Trusted clock collaborator.

Every state-changing operation reads the clock exactly once through
``read_timestamp`` so the whole operation observes a single instant.
"""

from __future__ import annotations

import time
from typing import Callable

from .exceptions import InvalidTimestamp

TimeProvider = Callable[[], int]


def system_time() -> int:
    """Wall-clock seconds since the epoch."""
    return int(time.time())


def read_timestamp(provider: TimeProvider) -> int:
    """
    Read and validate one timestamp from ``provider``.

    Raises:
        InvalidTimestamp: If the provider returns a non-integer or negative value
    """
    timestamp = provider()
    if isinstance(timestamp, bool) or not isinstance(timestamp, int):
        raise InvalidTimestamp(
            "time_provider must return an integer timestamp",
            details={"value": repr(timestamp)},
        )
    if timestamp < 0:
        raise InvalidTimestamp(
            "time_provider returned a negative timestamp",
            details={"value": timestamp},
        )
    return timestamp
