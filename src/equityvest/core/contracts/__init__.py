"""In-memory token backing the custodial pools."""

from .erc20 import ERC20Token

__all__ = ["ERC20Token"]
