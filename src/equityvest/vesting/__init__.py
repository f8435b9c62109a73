"""
equityvest Vesting Module

Designation-keyed linear vesting:
- ClassRegistry: live vesting parameters per designation
- VestingLedger: per-employee grant snapshots
- schedule: pure vested/claimable computations
- ClaimProcessor: atomic claim orchestration and read-only reports
"""

from .claims import ClaimProcessor, ClaimResult, VestingReport
from .class_registry import ClassRegistry, VestingClassParams
from .designations import Designation
from .ledger import Grant, VestingLedger
from .schedule import (
    VESTING_PERIOD_SECONDS,
    compute_claimable_amount,
    compute_vested_amount,
)

__all__ = [
    "ClaimProcessor",
    "ClaimResult",
    "ClassRegistry",
    "Designation",
    "Grant",
    "VESTING_PERIOD_SECONDS",
    "VestingClassParams",
    "VestingLedger",
    "VestingReport",
    "compute_claimable_amount",
    "compute_vested_amount",
]
