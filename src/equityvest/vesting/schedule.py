"""
Vesting schedule arithmetic.

Pure functions over a grant (or class parameters) and a timestamp. Vesting
is released in whole periods of ``VESTING_PERIOD_SECONDS`` starting at the
end of the cliff; nothing here mutates state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .class_registry import VestingClassParams
from .ledger import Grant

VESTING_PERIOD_SECONDS = 365 * 86_400


@dataclass(frozen=True)
class UnlockPoint:
    period: int
    unlock_time: int
    tokens_released: int
    cumulative_vested: int


def periods_elapsed(grant: Grant, now: int) -> int:
    if now < grant.vesting_start_time:
        return 0
    elapsed = (now - grant.vesting_start_time) // VESTING_PERIOD_SECONDS
    return min(elapsed, grant.total_periods)


def compute_vested_amount(grant: Grant, now: int) -> int:
    """
    Tokens vested for ``grant`` at ``now``.

    Zero before the vesting start; afterwards whole elapsed periods times
    ``tokens_per_period``, capped at ``total_periods``.
    """
    return periods_elapsed(grant, now) * grant.tokens_per_period


def compute_claimable_amount(grant: Grant, now: int) -> int:
    vested = compute_vested_amount(grant, now)
    if vested < grant.claimed_tokens:
        return 0
    return vested - grant.claimed_tokens


def next_unlock_time(grant: Grant, now: int) -> Optional[int]:
    """Timestamp of the next period boundary, or None once fully vested."""
    if grant.total_periods == 0 or grant.tokens_per_period == 0:
        return None
    elapsed = periods_elapsed(grant, now)
    if elapsed >= grant.total_periods:
        return None
    if now < grant.vesting_start_time:
        return grant.vesting_start_time + VESTING_PERIOD_SECONDS
    return grant.vesting_start_time + (elapsed + 1) * VESTING_PERIOD_SECONDS


def _timeline(vesting_start: int, tokens_per_period: int, total_periods: int) -> List[UnlockPoint]:
    return [
        UnlockPoint(
            period=period,
            unlock_time=vesting_start + period * VESTING_PERIOD_SECONDS,
            tokens_released=tokens_per_period,
            cumulative_vested=period * tokens_per_period,
        )
        for period in range(1, total_periods + 1)
    ]


def vesting_timeline(grant: Grant) -> List[UnlockPoint]:
    return _timeline(grant.vesting_start_time, grant.tokens_per_period, grant.total_periods)


def project_schedule(params: VestingClassParams, granted_at: int = 0) -> List[UnlockPoint]:
    """Unlock timeline for a grant of ``params`` issued at ``granted_at``."""
    return _timeline(
        granted_at + params.cliff_period_seconds,
        params.tokens_per_period,
        params.total_periods,
    )
