"""Fixed-capacity pooled-deposit lottery."""

from .pool import LotteryPool, LotteryRound, RoundStatus

__all__ = ["LotteryPool", "LotteryRound", "RoundStatus"]
