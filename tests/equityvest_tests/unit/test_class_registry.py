import pytest

from equityvest.core.events import ClassUpdated
from equityvest.core.exceptions import (
    ClassNotConfigured,
    InvalidCliffPeriod,
    InvalidDesignation,
    InvalidTotalTokens,
    InvalidVestingRate,
    Unauthorized,
    ValidationError,
)
from equityvest.vesting.class_registry import VestingClassParams
from equityvest.vesting.designations import Designation

YEAR = 365 * 86_400


def test_set_class_derives_period_values(registry, admin):
    params = registry.set_class(admin, Designation.CXO, 1000, 2500, YEAR)

    assert params.tokens_per_period == 250
    assert params.total_periods == 4
    assert params.max_vestable == 1000
    assert registry.get_class(Designation.CXO) == params


def test_set_class_emits_event_with_derived_fields(registry, admin, events, clock):
    registry.set_class(admin, "manager", 400, 2000, 0)

    event = events.last(ClassUpdated)
    assert event.designation is Designation.MANAGER
    assert event.tokens_per_period == 80
    assert event.total_periods == 5
    assert event.timestamp == clock.now()
    assert event.to_dict()["designation"] == "MANAGER"


def test_non_divisor_rate_truncates_periods():
    params = VestingClassParams.create(Designation.OTHERS, 1000, 3333, 0)
    assert params.total_periods == 3
    assert params.tokens_per_period == 333
    assert params.max_vestable == 999
    assert params.max_vestable < params.total_tokens


def test_get_class_returns_none_when_unset(registry):
    assert registry.get_class(Designation.SENIOR_MANAGER) is None
    with pytest.raises(ClassNotConfigured):
        registry.require_class(Designation.SENIOR_MANAGER)


def test_overwrite_keeps_single_record(registry, admin):
    registry.set_class(admin, Designation.CXO, 1000, 2500, YEAR)
    registry.set_class(admin, Designation.CXO, 5000, 1000, 0)

    params = registry.get_class(Designation.CXO)
    assert params.total_tokens == 5000
    assert params.total_periods == 10
    assert [p.designation for p in registry.list_classes()] == [Designation.CXO]


@pytest.mark.parametrize(
    "total_tokens, rate, cliff, error",
    [
        (0, 2500, 0, InvalidTotalTokens),
        (-5, 2500, 0, InvalidTotalTokens),
        (10.5, 2500, 0, InvalidTotalTokens),
        (1000, 99, 0, InvalidVestingRate),
        (1000, 10001, 0, InvalidVestingRate),
        (1000, 0, 0, InvalidVestingRate),
        (1000, 2500, -1, InvalidCliffPeriod),
    ],
)
def test_set_class_validation(registry, admin, total_tokens, rate, cliff, error):
    with pytest.raises(error):
        registry.set_class(admin, Designation.CXO, total_tokens, rate, cliff)
    assert registry.get_class(Designation.CXO) is None


def test_rate_bounds_are_inclusive(registry, admin):
    assert registry.set_class(admin, Designation.CXO, 1000, 100, 0).total_periods == 100
    assert registry.set_class(admin, Designation.CXO, 1000, 10000, 0).total_periods == 1


def test_unknown_designation_rejected(registry, admin):
    with pytest.raises(InvalidDesignation):
        registry.set_class(admin, "intern", 1000, 2500, 0)


def test_set_class_requires_admin(registry, other, events):
    with pytest.raises(Unauthorized):
        registry.set_class(other, Designation.CXO, 1000, 2500, 0)
    assert registry.get_class(Designation.CXO) is None
    assert len(events) == 0


def test_load_classes_from_config_entries(registry, admin):
    loaded = registry.load_classes(
        admin,
        [
            {"designation": "CXO", "total_tokens": 1000, "vesting_rate_bps": 2500, "cliff_period_days": 365},
            {"designation": "others", "total_tokens": 200, "vesting_rate_bps": 2000, "cliff_period_seconds": 10},
        ],
    )

    assert len(loaded) == 2
    assert registry.get_class(Designation.CXO).cliff_period_seconds == YEAR
    assert registry.get_class(Designation.OTHERS).cliff_period_seconds == 10


def test_load_classes_rejects_missing_designation(registry, admin):
    with pytest.raises(ValidationError):
        registry.load_classes(admin, [{"total_tokens": 10, "vesting_rate_bps": 1000}])


def test_designation_parse():
    assert Designation.parse("cxo") is Designation.CXO
    assert Designation.parse("Senior_Manager") is Designation.SENIOR_MANAGER
    assert Designation.parse(Designation.OTHERS) is Designation.OTHERS
    with pytest.raises(InvalidDesignation):
        Designation.parse("")
    with pytest.raises(InvalidDesignation):
        Designation.parse(3)
