"""
Prometheus instrumentation for vesting and lottery activity.

Helpers are safe to call from the hot path: non-positive amounts are ignored.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

grants_counter = Counter(
    "equityvest_grants_total", "Equity grants issued", ["designation"]
)

claims_counter = Counter(
    "equityvest_claims_total", "Claim attempts by outcome", ["outcome"]
)

tokens_claimed_counter = Counter(
    "equityvest_tokens_claimed_total", "Tokens paid out to employees by claims"
)

custody_balance_gauge = Gauge(
    "equityvest_custody_balance", "Current balance of a custodial pool", ["pool"]
)

lottery_rounds_counter = Counter(
    "equityvest_lottery_rounds_total", "Completed lottery rounds by outcome", ["outcome"]
)


def record_grant(designation: str) -> None:
    grants_counter.labels(designation=designation).inc()


def record_claim_outcome(outcome: str, amount: int = 0) -> None:
    """Count a claim attempt; ``amount`` is added to paid-out tokens on success."""
    claims_counter.labels(outcome=outcome).inc()
    if amount > 0:
        tokens_claimed_counter.inc(amount)


def update_custody_balance(pool: str, balance: int) -> None:
    custody_balance_gauge.labels(pool=pool).set(balance)


def record_lottery_round(outcome: str) -> None:
    lottery_rounds_counter.labels(outcome=outcome).inc()
