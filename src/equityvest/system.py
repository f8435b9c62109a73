"""
equityvest - System wiring

Builds every component from a ``ConfigManager`` so applications and the CLI
share one construction path.
"""

from __future__ import annotations

import logging
from typing import Optional

from .core import metrics
from .core.access_control import AdminAuthority
from .core.clock import TimeProvider, system_time
from .core.config import ConfigManager
from .core.contracts.erc20 import ERC20Token
from .core.custody import TokenCustody
from .core.events import EventLog
from .core.logging_config import setup_logging
from .lottery.pool import LotteryPool, RandomSource
from .vesting.claims import ClaimProcessor
from .vesting.class_registry import ClassRegistry
from .vesting.ledger import VestingLedger

logger = logging.getLogger(__name__)


class EquityVestSystem:
    """
    Vesting engine, custodial pool and optional lottery built from configuration.

    Attributes:
        token: Token contract; the admin owns it and may mint
        custody: Vesting payout pool
        registry, ledger, claims: Vesting components
        lottery: LotteryPool, or None when disabled
        events: Shared event log
    """

    def __init__(
        self,
        config: ConfigManager,
        time_provider: Optional[TimeProvider] = None,
        rng: Optional[RandomSource] = None,
    ):
        self.config = config
        self.time_provider = time_provider or system_time
        self.events = EventLog()

        vesting_cfg = config.vesting
        self.authority = AdminAuthority(vesting_cfg.admin)
        self.token = ERC20Token(
            name=vesting_cfg.token_name,
            symbol=vesting_cfg.token_symbol,
            owner=vesting_cfg.admin,
        )
        self.custody = TokenCustody(self.token, vesting_cfg.custody_address)
        if vesting_cfg.pool_supply:
            self.token.mint(vesting_cfg.admin, self.custody.custodian, vesting_cfg.pool_supply)
        metrics.update_custody_balance("vesting", self.custody.balance())

        self.registry = ClassRegistry(self.authority, self.events, self.time_provider)
        if config.classes:
            self.registry.load_classes(self.authority.admin, config.classes)
        self.ledger = VestingLedger(self.registry, self.authority, self.events, self.time_provider)
        self.claims = ClaimProcessor(
            self.ledger, self.custody, self.authority, self.events, self.time_provider
        )

        self.lottery: Optional[LotteryPool] = None
        if config.lottery.enabled:
            self.lottery_custody = TokenCustody(self.token, config.lottery.custody_address)
            self.lottery = LotteryPool(
                self.authority,
                self.lottery_custody,
                capacity=config.lottery.capacity,
                ticket_price=config.lottery.ticket_price,
                events=self.events,
                time_provider=self.time_provider,
                rng=rng,
            )

        logger.info(
            "equityvest system initialized",
            extra={
                "event": "system.initialized",
                "environment": config.environment.value,
                "classes": len(self.registry.list_classes()),
                "pool_balance": self.custody.balance(),
                "lottery_enabled": self.lottery is not None,
            },
        )

    @classmethod
    def from_config(
        cls,
        environment: Optional[str] = None,
        config_dir: Optional[str] = None,
        time_provider: Optional[TimeProvider] = None,
    ) -> "EquityVestSystem":
        return cls(ConfigManager(environment=environment, config_dir=config_dir), time_provider)

    def configure_logging(self) -> logging.Logger:
        """Install JSON logging for the ``equityvest`` package from ``config.logging``."""
        logging_cfg = self.config.logging
        return setup_logging(
            name="equityvest",
            log_file=logging_cfg.log_file or None,
            level=logging_cfg.level,
            environment=self.config.environment.value,
            enable_console=logging_cfg.enable_console,
        )
