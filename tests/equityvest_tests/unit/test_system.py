import json
import logging

import pytest
from prometheus_client import REGISTRY

from equityvest.core.config import ConfigManager
from equityvest.core.events import LotteryDrawn
from equityvest.core.exceptions import CliffNotReached, InvalidVestingRate
from equityvest.system import EquityVestSystem
from equityvest.vesting.designations import Designation

YEAR = 365 * 86_400
ADMIN = "0x00000000000000000000000000000000000a11ce"
LOTTERY_POT = "0x00000000000000000000000000000000001077e2"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    import os

    for key in list(os.environ):
        if key.startswith("EQUITYVEST_"):
            monkeypatch.delenv(key)


class FirstEntrant:
    def choice(self, seq):
        return seq[0]


def build(clock, **overrides):
    config = ConfigManager(environment="development", overrides=overrides)
    return EquityVestSystem(config, time_provider=clock.now, rng=FirstEntrant())


def sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def test_system_installs_configured_classes_and_funds_pool(clock):
    system = build(clock)

    assert [p.designation for p in system.registry.list_classes()] == list(Designation)
    assert system.custody.balance() == 1_000_000
    assert system.token.owner == ADMIN
    assert system.lottery is not None


def test_end_to_end_grant_and_claim(clock):
    system = build(clock)
    employee = "0xemployee"
    system.ledger.grant_equity(ADMIN, employee, Designation.CXO)

    with pytest.raises(CliffNotReached):
        system.claims.claim(employee, employee)

    before = sample("equityvest_claims_total", {"outcome": "success"})
    clock.advance(2 * YEAR)
    result = system.claims.claim(employee, employee)

    assert result.amount == 250
    assert system.token.balance_of(employee) == 250
    assert system.custody.balance() == 1_000_000 - 250
    assert sample("equityvest_claims_total", {"outcome": "success"}) == before + 1
    assert sample("equityvest_custody_balance", {"pool": "vesting"}) == 1_000_000 - 250


def test_lottery_uses_separate_custody(clock):
    system = build(clock, **{"lottery.capacity": 2, "lottery.ticket_price": 50})
    for player in ("0xp1", "0xp2"):
        system.token.mint(ADMIN, player, 50)
        system.lottery.enter(player)

    assert system.token.balance_of(LOTTERY_POT) == 100
    system.lottery.draw(ADMIN)

    assert system.token.balance_of("0xp1") == 100
    assert system.custody.balance() == 1_000_000
    assert system.events.last(LotteryDrawn).prize == 100


def test_lottery_can_be_disabled(clock):
    system = build(clock, **{"lottery.enabled": False})
    assert system.lottery is None


def test_invalid_class_in_config_fails_construction(clock):
    with pytest.raises(InvalidVestingRate):
        build(clock, classes=[{"designation": "CXO", "total_tokens": 1000, "vesting_rate_bps": 50}])


def test_configure_logging_emits_json(clock, tmp_path):
    log_file = tmp_path / "equityvest.json"
    system = build(clock, **{"logging.log_file": str(log_file), "logging.enable_console": False})

    logger = system.configure_logging()
    try:
        logging.getLogger("equityvest.test").info("hello", extra={"event": "test.hello"})
        for handler in logger.handlers:
            handler.flush()
        record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    finally:
        for handler in logger.handlers:
            handler.close()
        logger.handlers = []

    assert record["message"] == "hello"
    assert record["event"] == "test.hello"
    assert record["environment"] == "development"
    assert record["service"] == "equityvest"


def test_lottery_pot_cannot_reuse_vesting_pool(clock):
    from equityvest.core.exceptions import ConfigurationError

    with pytest.raises(ConfigurationError):
        build(clock, **{"lottery.custody_address": "0x0000000000000000000000000000000000c0ffee"})
