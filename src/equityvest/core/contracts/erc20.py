"""
In-memory equity token backing the custodial pools.

Only what custody needs is modelled: balances, plain transfers, the one-off
owner mint that seeds a pool, and a pause switch that freezes transfers.
Every rejection raises ``TokenError``; ``TokenCustody`` turns those into a
``False`` transfer result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..exceptions import TokenError

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x" + "0" * 40
MAX_AMOUNT = 2**256 - 1


def _normalize(address: str) -> str:
    return address.strip().lower()


@dataclass
class ERC20Token:
    """
    Balance sheet keyed by lower-cased address.

    Not thread-safe on its own; ``TokenCustody`` serializes the transfers
    it makes.
    """

    name: str
    symbol: str
    owner: str = ""
    balances: dict[str, int] = field(default_factory=dict)
    paused: bool = False

    def __post_init__(self) -> None:
        self.owner = _normalize(self.owner)

    def balance_of(self, account: str) -> int:
        return self.balances.get(_normalize(account), 0)

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """
        Move ``amount`` from ``sender`` to ``recipient``.

        Raises:
            TokenError: Token paused, bad recipient or amount, or short balance
        """
        self._check_open()
        source, target = _normalize(sender), _normalize(recipient)
        self._check_recipient(target)
        self._check_amount(amount)

        available = self.balances.get(source, 0)
        if available < amount:
            raise TokenError(
                f"{self.symbol}: balance of {source} is {available}, cannot send {amount}",
                details={"sender": source, "amount": amount, "balance": available},
            )
        self.balances[source] = available - amount
        self.balances[target] = self.balances.get(target, 0) + amount

        logger.debug(
            "Token transfer",
            extra={"event": "token.transfer", "token": self.symbol, "from": source[:10], "to": target[:10], "amount": amount},
        )
        return True

    def mint(self, minter: str, to: str, amount: int) -> bool:
        """Credit new units to ``to``; only the owner may mint."""
        self._check_open()
        self._check_owner(minter)
        target = _normalize(to)
        self._check_recipient(target)
        self._check_amount(amount)

        self.balances[target] = self.balances.get(target, 0) + amount
        logger.info(
            "Token minted",
            extra={"event": "token.minted", "token": self.symbol, "to": target[:10], "amount": amount},
        )
        return True

    def pause(self, caller: str) -> bool:
        """Freeze every transfer and mint (owner only)."""
        self._check_owner(caller)
        self.paused = True
        logger.warning("Token paused", extra={"event": "token.paused", "token": self.symbol})
        return True

    def _check_open(self) -> None:
        if self.paused:
            raise TokenError(f"{self.symbol}: token is paused")

    def _check_owner(self, caller: str) -> None:
        if not self.owner or _normalize(caller) != self.owner:
            raise TokenError(f"{self.symbol}: only the owner may do this", details={"caller": caller})

    def _check_recipient(self, address: str) -> None:
        if not address or address == ZERO_ADDRESS:
            raise TokenError(f"{self.symbol}: recipient is the zero address")

    def _check_amount(self, amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise TokenError(f"{self.symbol}: amount must be an integer", details={"amount": repr(amount)})
        if amount < 0 or amount > MAX_AMOUNT:
            raise TokenError(f"{self.symbol}: amount out of range", details={"amount": amount})
