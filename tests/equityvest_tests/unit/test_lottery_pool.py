import pytest

from equityvest.core.custody import TokenCustody
from equityvest.core.events import LotteryDrawn, LotteryEntered, LotteryRefunded
from equityvest.core.exceptions import (
    AlreadyEntered,
    LotteryFull,
    LotteryNotReady,
    TransferFailed,
    Unauthorized,
    ValidationError,
)
from equityvest.lottery import LotteryPool, RoundStatus

ADMIN = "0xAdmin000000000000000000000000000000000001"
POT = "0xlotterypot"
PLAYERS = ["0xplayer1", "0xplayer2", "0xplayer3"]


class PickLast:
    def __init__(self):
        self.seen = []

    def choice(self, seq):
        self.seen.append(list(seq))
        return seq[-1]


@pytest.fixture
def pot_custody(token):
    for player in PLAYERS:
        token.mint(ADMIN, player, 500)
    return TokenCustody(token, POT)


@pytest.fixture
def rng():
    return PickLast()


@pytest.fixture
def pool(authority, pot_custody, events, clock, rng):
    return LotteryPool(authority, pot_custody, capacity=3, ticket_price=100, events=events, time_provider=clock.now, rng=rng)


def fill(pool):
    return [pool.enter(player) for player in PLAYERS]


def test_entries_deposit_ticket_price(pool, token, events):
    assert fill(pool) == [0, 1, 2]

    assert pool.pot() == 300
    assert token.balance_of(POT) == 300
    assert token.balance_of(PLAYERS[0]) == 400
    assert [e.ticket for e in events.of_type(LotteryEntered)] == [0, 1, 2]


def test_draw_pays_whole_pot_to_winner(pool, token, admin, events, rng):
    fill(pool)

    finished = pool.draw(admin)

    assert finished.status is RoundStatus.DRAWN
    assert finished.winner == PLAYERS[-1]
    assert finished.prize == 300
    assert rng.seen == [PLAYERS]
    assert token.balance_of(PLAYERS[-1]) == 400 + 300
    assert token.balance_of(POT) == 0
    assert events.last(LotteryDrawn).winner == PLAYERS[-1]

    assert pool.round_id == 2
    assert pool.participants() == []
    assert pool.history() == [finished]


def test_draw_requires_full_round_and_admin(pool, admin, other):
    pool.enter(PLAYERS[0])
    with pytest.raises(LotteryNotReady):
        pool.draw(admin)
    with pytest.raises(Unauthorized):
        pool.draw(other)
    assert pool.round_id == 1


def test_duplicate_and_overflow_entries_rejected(pool, token):
    pool.enter(PLAYERS[0])
    with pytest.raises(AlreadyEntered):
        pool.enter(PLAYERS[0].upper())
    pool.enter(PLAYERS[1])
    pool.enter(PLAYERS[2])

    token.mint(ADMIN, "0xlate", 500)
    with pytest.raises(LotteryFull):
        pool.enter("0xlate")
    assert token.balance_of("0xlate") == 500


def test_entry_without_funds_fails(pool):
    with pytest.raises(TransferFailed):
        pool.enter("0xbroke")
    assert pool.participants() == []


def test_cancel_refunds_everyone(pool, token, admin, events):
    pool.enter(PLAYERS[0])
    pool.enter(PLAYERS[1])

    cancelled = pool.cancel(admin)

    assert cancelled.status is RoundStatus.CANCELLED
    assert token.balance_of(PLAYERS[0]) == 500
    assert token.balance_of(PLAYERS[1]) == 500
    assert token.balance_of(POT) == 0
    refund = events.last(LotteryRefunded)
    assert (refund.refunded, refund.participants) == (200, 2)
    assert pool.round_id == 2


def test_failed_draw_payout_keeps_round_open(authority, fake_custody, clock, admin, rng):
    pool = LotteryPool(authority, fake_custody, capacity=2, ticket_price=10, time_provider=clock.now, rng=rng)
    pool.enter(PLAYERS[0])
    pool.enter(PLAYERS[1])

    fake_custody.fail_next = True
    with pytest.raises(TransferFailed):
        pool.draw(admin)
    assert pool.round_id == 1
    assert pool.participants() == PLAYERS[:2]

    assert pool.draw(admin).winner == PLAYERS[1]


@pytest.mark.parametrize("capacity, price", [(1, 10), (2, 0), (True, 10), (2, 1.5)])
def test_pool_parameters_validated(authority, fake_custody, capacity, price):
    with pytest.raises(ValidationError):
        LotteryPool(authority, fake_custody, capacity=capacity, ticket_price=price)
