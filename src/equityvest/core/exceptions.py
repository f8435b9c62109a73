"""
Exception hierarchy for equityvest.

Provides typed exceptions for vesting, custody and lottery operations so
callers can distinguish input validation, authorization, claim preconditions
and funding problems without parsing messages.
"""

from __future__ import annotations
from typing import Optional, Any, Dict


class EquityVestError(Exception):
    """Base exception for all equityvest errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the operation can succeed later without
            operator intervention (e.g. after more time has elapsed)
    """

    recoverable = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if recoverable is not None:
            self.recoverable = recoverable


# ==================== Validation Errors ====================


class ValidationError(EquityVestError):
    """Raised when input fails validation before any state change."""
    pass


class InvalidDesignation(ValidationError):
    """Raised when a designation is outside the enumerated set."""
    pass


class InvalidTotalTokens(ValidationError):
    """Raised when a class total is zero, negative or not an integer."""
    pass


class InvalidVestingRate(ValidationError):
    """Raised when a vesting rate falls outside [100, 10000] basis points."""
    pass


class InvalidCliffPeriod(ValidationError):
    """Raised when a cliff period is negative or not an integer."""
    pass


class InvalidTimestamp(ValidationError):
    """Raised when the clock yields something other than a non-negative int."""
    pass


# ==================== Configuration Errors ====================


class ConfigurationError(EquityVestError):
    """Raised when configuration is missing or invalid."""
    pass


class ClassNotConfigured(ConfigurationError):
    """Raised when granting against a designation with no vesting class."""
    pass


# ==================== Authorization Errors ====================


class AuthorizationError(EquityVestError):
    """Raised when a caller lacks the role an operation requires."""
    pass


class Unauthorized(AuthorizationError):
    """Raised when the caller is neither the admin nor the permitted party."""
    pass


# ==================== Claim Errors ====================


class ClaimError(EquityVestError):
    """Raised when a claim precondition is not met."""
    pass


class GrantNotFound(ClaimError):
    """Raised when an employee has no grant on the ledger."""
    pass


class CliffNotReached(ClaimError):
    """Raised when claiming at or before the vesting start time."""
    recoverable = True  # Succeeds once the cliff has passed


class NothingToClaim(ClaimError):
    """Raised when everything vested so far has already been claimed."""
    recoverable = True  # Succeeds after the next period boundary


# ==================== Funding Errors ====================


class FundingError(EquityVestError):
    """Raised when the custodial pool cannot fund a payout."""
    pass


class InsufficientPoolBalance(FundingError):
    """Raised when the custodial balance is below the payout amount."""
    pass


class TransferFailed(FundingError):
    """Raised when the transfer collaborator reports failure."""
    pass


class TokenError(EquityVestError):
    """Raised when a token contract operation is rejected."""
    pass


# ==================== Lottery Errors ====================


class LotteryError(EquityVestError):
    """Raised when a lottery operation is not allowed in the current round."""
    pass


class LotteryClosed(LotteryError):
    """Raised when entering a round that is not open."""
    pass


class LotteryFull(LotteryError):
    """Raised when a round has reached its capacity."""
    pass


class AlreadyEntered(LotteryError):
    """Raised when a participant enters the same round twice."""
    pass


class LotteryNotReady(LotteryError):
    """Raised when drawing a round that has not filled up."""
    recoverable = True


# ==================== Utility Functions ====================


def is_recoverable_error(exc: Exception) -> bool:
    """Check if an exception represents a condition that may clear by itself.

    Args:
        exc: The exception to check

    Returns:
        True if retrying later can succeed without intervention
    """
    if isinstance(exc, EquityVestError):
        return exc.recoverable
    return isinstance(exc, (ConnectionError, TimeoutError))


def get_error_context(exc: Exception) -> Dict[str, Any]:
    """Extract error context from an exception for logging.

    Args:
        exc: The exception to extract context from

    Returns:
        Dictionary containing error type, message, and any additional details
    """
    context = {
        "error_type": type(exc).__name__,
        "error_message": str(exc),
    }

    if isinstance(exc, EquityVestError):
        context["recoverable"] = exc.recoverable
        if exc.details:
            context["details"] = exc.details

    return context
