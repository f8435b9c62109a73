"""
Claim orchestration and read-only vesting projections.

A claim is a single atomic unit: precondition checks, the ledger update and
the payout either all take effect or none do. The payout is the only call
that leaves this process; the ledger mutation is compensated if it fails.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

from ..core import metrics
from ..core.access_control import AdminAuthority, normalize_address
from ..core.clock import TimeProvider, read_timestamp, system_time
from ..core.events import EventLog, TokensClaimed
from ..core.exceptions import (
    CliffNotReached,
    EquityVestError,
    InsufficientPoolBalance,
    NothingToClaim,
    TransferFailed,
    Unauthorized,
    get_error_context,
)
from ..core.protocols import TransferCapability
from .ledger import Grant, VestingLedger
from .schedule import compute_claimable_amount, compute_vested_amount, next_unlock_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimResult:
    employee: str
    amount: int
    claimed_total: int
    claimed_at: int


@dataclass(frozen=True)
class VestingReport:
    employee: str
    designation: str
    total_tokens: int
    tokens_per_period: int
    total_periods: int
    claimed_tokens: int
    vested_amount: int
    claimable_amount: int
    vesting_start_time: int
    next_unlock_time: Optional[int]
    generated_at: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ClaimProcessor:
    """
    Executes claims against the ledger and pays out from custody.

    Args:
        ledger: Grant ledger
        custody: Transfer capability holding the payout pool
        authority: Admin authority (the admin may claim for any employee)
        events: Event log for TokensClaimed notifications
        time_provider: Clock, read once per operation
        pool_name: Label for the custody balance gauge
    """

    def __init__(
        self,
        ledger: VestingLedger,
        custody: TransferCapability,
        authority: AdminAuthority,
        events: Optional[EventLog] = None,
        time_provider: Optional[TimeProvider] = None,
        pool_name: str = "vesting",
    ):
        self._ledger = ledger
        self._custody = custody
        self._authority = authority
        self._events = events if events is not None else EventLog()
        self._time_provider = time_provider or system_time
        self._pool_name = pool_name
        # Serializes balance check + payout across employees sharing one pool
        self._payout_lock = threading.Lock()

    def claim(self, employee: str, requested_by: str) -> ClaimResult:
        """
        Pay out everything vested and not yet claimed for ``employee``.

        Raises:
            Unauthorized: requested_by is neither the employee nor the admin
            GrantNotFound: employee has no grant
            CliffNotReached: now is at or before the vesting start time
            NothingToClaim: vested amount does not exceed claimed tokens
            InsufficientPoolBalance: custody cannot cover the payout
            TransferFailed: payout rejected; claimed tokens unchanged
        """
        try:
            result = self._claim(employee, requested_by)
        except EquityVestError as exc:
            metrics.record_claim_outcome(type(exc).__name__)
            logger.info(
                "Claim rejected",
                extra={"event": "vesting.claim_rejected", "employee": str(employee)[:10], **get_error_context(exc)},
            )
            raise
        metrics.record_claim_outcome("success", result.amount)
        return result

    def _claim(self, employee: str, requested_by: str) -> ClaimResult:
        self._require_claimant(employee, requested_by)

        with self._ledger.employee_lock(employee) as key:
            now = read_timestamp(self._time_provider)
            grant = self._ledger.require_grant(key)

            if now <= grant.vesting_start_time:
                raise CliffNotReached(
                    "Cliff period not reached",
                    details={"employee": key, "vesting_start_time": grant.vesting_start_time, "now": now},
                )

            vested = compute_vested_amount(grant, now)
            if vested <= grant.claimed_tokens:
                raise NothingToClaim(
                    "No tokens available to claim",
                    details={
                        "employee": key,
                        "vested": vested,
                        "claimed": grant.claimed_tokens,
                        "next_unlock_time": next_unlock_time(grant, now),
                    },
                )
            to_claim = vested - grant.claimed_tokens

            with self._payout_lock:
                balance = self._custody.balance()
                if balance < to_claim:
                    raise InsufficientPoolBalance(
                        "Insufficient tokens in custodial pool",
                        details={"required": to_claim, "available": balance},
                    )

                previous = self._ledger.record_claim(key, vested)
                try:
                    paid = self._custody.pay(key, to_claim)
                except Exception as exc:
                    self._ledger.restore_claim(key, previous)
                    raise TransferFailed(
                        f"Token transfer raised {type(exc).__name__}: {exc}",
                        details={"employee": key, "amount": to_claim},
                    ) from exc
                if not paid:
                    self._ledger.restore_claim(key, previous)
                    raise TransferFailed(
                        "Token transfer failed",
                        details={"employee": key, "amount": to_claim},
                    )
                metrics.update_custody_balance(self._pool_name, self._custody.balance())

        self._events.emit(
            TokensClaimed(
                timestamp=now,
                employee=key,
                amount=to_claim,
                claimed_total=vested,
                requested_by=normalize_address(requested_by),
            )
        )
        return ClaimResult(employee=key, amount=to_claim, claimed_total=vested, claimed_at=now)

    def _require_claimant(self, employee: str, requested_by: str) -> None:
        if requested_by and employee and normalize_address(requested_by) == normalize_address(employee):
            return
        if self._authority.is_authorized_admin(requested_by):
            return
        raise Unauthorized(
            "Only the employee or the admin can claim",
            details={"employee": employee, "requested_by": requested_by},
        )

    # ==================== Read-only projections ====================
    # Each reads the grant under the employee lock so an in-flight claim is
    # seen either fully committed or not at all.

    def _committed_grant(self, employee: str) -> Tuple[Grant, int]:
        with self._ledger.employee_lock(employee) as key:
            return self._ledger.require_grant(key), read_timestamp(self._time_provider)

    def get_vested_amount(self, employee: str) -> int:
        grant, now = self._committed_grant(employee)
        return compute_vested_amount(grant, now)

    def get_claimable_amount(self, employee: str) -> int:
        grant, now = self._committed_grant(employee)
        return compute_claimable_amount(grant, now)

    def generate_vesting_report(self, employee: str) -> VestingReport:
        grant, now = self._committed_grant(employee)
        return VestingReport(
            employee=grant.employee,
            designation=grant.designation.name,
            total_tokens=grant.total_tokens,
            tokens_per_period=grant.tokens_per_period,
            total_periods=grant.total_periods,
            claimed_tokens=grant.claimed_tokens,
            vested_amount=compute_vested_amount(grant, now),
            claimable_amount=compute_claimable_amount(grant, now),
            vesting_start_time=grant.vesting_start_time,
            next_unlock_time=next_unlock_time(grant, now),
            generated_at=now,
        )
