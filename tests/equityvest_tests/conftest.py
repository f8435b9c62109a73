import pytest

from equityvest.core.access_control import AdminAuthority
from equityvest.core.contracts.erc20 import ERC20Token
from equityvest.core.custody import TokenCustody
from equityvest.core.events import EventLog
from equityvest.vesting.claims import ClaimProcessor
from equityvest.vesting.class_registry import ClassRegistry
from equityvest.vesting.ledger import VestingLedger

ADMIN = "0xAdmin000000000000000000000000000000000001"
CUSTODIAN = "0xCustody0000000000000000000000000000000002"
EMPLOYEE = "0xEmployee000000000000000000000000000000003"
OTHER = "0xOther000000000000000000000000000000000004"

DAY = 86_400
YEAR = 365 * DAY
GENESIS = 1_700_000_000


class ManualClock:
    def __init__(self, start_time: int):
        self.current_time = start_time

    def now(self) -> int:
        return self.current_time

    def advance(self, seconds: int):
        self.current_time += seconds

    def set(self, timestamp: int):
        self.current_time = timestamp


class FakeCustody:
    """Transfer capability whose payouts can be made to fail."""

    def __init__(self, balance: int = 0):
        self._balance = balance
        self.payments = []
        self.fail_next = False
        self.raise_next = None

    def balance(self) -> int:
        return self._balance

    def pay(self, recipient: str, amount: int) -> bool:
        if self.raise_next is not None:
            exc, self.raise_next = self.raise_next, None
            raise exc
        if self.fail_next:
            self.fail_next = False
            return False
        self._balance -= amount
        self.payments.append((recipient, amount))
        return True

    def collect(self, payer: str, amount: int) -> bool:
        self._balance += amount
        return True


@pytest.fixture
def clock():
    return ManualClock(start_time=GENESIS)


@pytest.fixture
def authority():
    return AdminAuthority(ADMIN)


@pytest.fixture
def events():
    return EventLog()


@pytest.fixture
def registry(authority, events, clock):
    return ClassRegistry(authority, events, clock.now)


@pytest.fixture
def ledger(registry, authority, events, clock):
    return VestingLedger(registry, authority, events, clock.now)


@pytest.fixture
def token():
    return ERC20Token(name="Equity Token", symbol="EQT", owner=ADMIN)


@pytest.fixture
def custody(token):
    custody = TokenCustody(token, CUSTODIAN)
    token.mint(ADMIN, CUSTODIAN, 1_000_000)
    return custody


@pytest.fixture
def processor(ledger, custody, authority, events, clock):
    return ClaimProcessor(ledger, custody, authority, events, clock.now)


@pytest.fixture
def admin():
    return ADMIN


@pytest.fixture
def employee():
    return EMPLOYEE


@pytest.fixture
def other():
    return OTHER


@pytest.fixture
def fake_custody():
    return FakeCustody(balance=1_000_000)


@pytest.fixture
def fake_processor(ledger, fake_custody, authority, events, clock):
    return ClaimProcessor(ledger, fake_custody, authority, events, clock.now)
