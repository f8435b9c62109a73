"""
Custodial pool over an ERC20 token.

The custodial address holds every unit that will ever be paid out to
employees or lottery winners. Token contract rejections are reported as a
``False`` result and logged, matching the success/failure contract of the
transfer capability.
"""

from __future__ import annotations

import logging
import threading

from .contracts.erc20 import ERC20Token
from .exceptions import TokenError, ValidationError

logger = logging.getLogger(__name__)


class TokenCustody:
    """
    Transfer capability backed by an ``ERC20Token`` balance.

    Args:
        token: Token contract holding the balances
        custodian: Address of the custodial pool
    """

    def __init__(self, token: ERC20Token, custodian: str) -> None:
        if not custodian or not custodian.strip():
            raise ValidationError("Custodian address cannot be empty.")
        self.token = token
        self.custodian = custodian.strip().lower()
        self._lock = threading.RLock()

    def balance(self) -> int:
        return self.token.balance_of(self.custodian)

    def pay(self, recipient: str, amount: int) -> bool:
        return self._move(self.custodian, recipient, amount, "custody.pay")

    def collect(self, payer: str, amount: int) -> bool:
        return self._move(payer, self.custodian, amount, "custody.collect")

    def fund(self, funder: str, amount: int) -> bool:
        """Move ``amount`` from ``funder`` into the pool."""
        funded = self._move(funder, self.custodian, amount, "custody.fund")
        if funded:
            logger.info(
                "Custodial pool funded",
                extra={
                    "event": "custody.funded",
                    "funder": funder[:10],
                    "amount": amount,
                    "balance": self.balance(),
                },
            )
        return funded

    def _move(self, sender: str, recipient: str, amount: int, event: str) -> bool:
        with self._lock:
            try:
                return self.token.transfer(sender, recipient, amount)
            except TokenError as exc:
                logger.warning(
                    "Token transfer rejected: %s",
                    exc,
                    extra={
                        "event": f"{event}_rejected",
                        "from": sender[:10],
                        "to": recipient[:10],
                        "amount": amount,
                    },
                )
                return False
