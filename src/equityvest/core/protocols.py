"""
equityvest - Collaborator Protocol Interfaces

Structural interfaces for the external capabilities the vesting engine and
lottery rely on. Tests supply lightweight fakes; production wiring uses
``TokenCustody``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TransferCapability(Protocol):
    """
    Moves units of a fungible balance out of a custodial pool.

    Thread Safety: ``balance`` followed by ``pay`` is not atomic on its own;
    callers that need check-then-pay semantics must serialize the pair.
    """

    def balance(self) -> int:
        """Current custodial balance."""
        ...

    def pay(self, recipient: str, amount: int) -> bool:
        """
        Transfer ``amount`` units from the pool to ``recipient``.

        Returns:
            True on success, False if the transfer was rejected
        """
        ...


@runtime_checkable
class DepositCapability(TransferCapability, Protocol):
    """Custody that can also pull deposits into the pool."""

    def collect(self, payer: str, amount: int) -> bool:
        """
        Transfer ``amount`` units from ``payer`` into the pool.

        Returns:
            True on success, False if the payer could not fund the deposit
        """
        ...
