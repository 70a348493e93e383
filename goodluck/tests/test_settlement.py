import pytest

from goodluck.constants import DELAY_BLOCKS, FINALIZED_LOOKBACK
from goodluck.errors import (
    ContractPaused,
    InsufficientFunds,
    InvalidInput,
    NotYetAvailable,
    StateConflict,
    TransferFailed,
    Unauthorized,
)
from goodluck.events import BET_CANCELLED, BET_PLACED, BET_REQUESTED, EMERGENCY_WITHDRAW
from goodluck.game import payout_for

from .conftest import BANKROLL, OWNER

WIN_BIT = 1
LOSE_BIT = 0


@pytest.mark.parametrize("amount,payout", [(1, 1), (10, 19), (100, 197), (333, 656)])
def test_payout_floors(amount, payout):
    assert payout_for(amount) == payout


@pytest.mark.parametrize(
    "amount,choice,msg",
    [
        (10, 2, "Invalid choice"),
        (10, -1, "Invalid choice"),
        (10, True, "Invalid choice"),
        (0, 1, "Amount must be greater than 0"),
        (-3, 0, "Amount must be greater than 0"),
    ],
)
def test_bad_bets_are_rejected(game, fund, amount, choice, msg):
    fund("p", 100)
    with pytest.raises(InvalidInput, match=msg):
        game.place_bet_instant("p", amount, choice)
    with pytest.raises(InvalidInput, match=msg):
        game.place_bet_safe("p", amount, choice)
    assert not game.has_pending_bet("p")


# ---- instant ------------------------------------------------------------------


def test_instant_win_pays_from_custody(chain, token, game, fund, pin_instant):
    fund("p", 100)
    pin_instant(WIN_BIT)
    result = game.place_bet_instant("p", 10, 1)
    assert result.won and result.outcome == 1
    assert result.payout == 19
    assert token.balance_of("p") == 109
    assert game.custody_balance() == BANKROLL - 9
    assert chain.events.last(BET_PLACED).args == {"user": "p", "amount": 10, "choice": 1, "won": True}


def test_instant_loss_feeds_the_pool(chain, token, game, fund, pin_instant):
    fund("lp", 1000)
    game.deposit("lp", 1000)
    fund("p", 100)
    pin_instant(LOSE_BIT)

    result = game.place_bet_instant("p", 10, 1)
    assert not result.won and result.payout == 0
    assert token.balance_of("p") == 90
    assert game.preview_pending("lp") == 10
    assert game.claim("lp") == 10
    assert chain.events.last(BET_PLACED).args["won"] is False


def test_loss_with_no_stakers_is_kept_for_the_first_depositor(game, fund, pin_instant):
    fund("p", 100)
    pin_instant(LOSE_BIT)
    game.place_bet_instant("p", 10, 1)
    assert game.pending_rewards() == 10
    assert game.acc_reward_per_share() == 0

    fund("lp", 50)
    game.deposit("lp", 50)
    assert game.preview_pending("lp") == 10


def test_win_without_bankroll_rolls_back(chain, token, game, fund, pin_instant):
    game.emergency_withdraw(OWNER, BANKROLL)
    fund("p", 100)
    pin_instant(WIN_BIT)
    n = len(chain.events)
    with pytest.raises(InsufficientFunds):
        game.place_bet_instant("p", 10, 1)
    assert token.balance_of("p") == 100
    assert game.custody_balance() == 0
    assert len(chain.events) == n


def test_unapproved_bettor_cannot_bet(token, game):
    token.mint("p", 100)
    with pytest.raises(TransferFailed):
        game.place_bet_instant("p", 10, 0)
    assert token.balance_of("p") == 100


# ---- safe -------------------------------------------------------------------------


def test_safe_bet_escrows_then_resolves(chain, token, beacon, game, fund):
    fund("p", 100)
    ticket = game.place_bet_safe("p", 10, 1)
    assert game.has_pending_bet("p")
    assert game.pending_bet_amount("p") == 10
    assert game.pending_bet("p").ticket == ticket
    assert token.balance_of("p") == 90
    assert chain.events.last(BET_REQUESTED).args == {"user": "p", "amount": 10, "choice": 1}

    with pytest.raises(NotYetAvailable):
        game.finalize_bet("p")
    assert game.has_pending_bet("p")
    assert beacon.delayed_request(ticket) is not None

    chain.mine(DELAY_BLOCKS + 1)
    result = game.finalize_bet("p")
    assert not game.has_pending_bet("p")
    assert game.pending_bet_amount("p") == 0
    assert beacon.delayed_request(ticket) is None
    if result.won:
        assert token.balance_of("p") == 90 + 19
    else:
        assert game.pending_rewards() == 10
    assert chain.events.last(BET_PLACED).args["won"] is result.won


def test_one_pending_safe_bet_per_user(game, fund):
    fund("p", 100)
    game.place_bet_safe("p", 10, 0)
    with pytest.raises(StateConflict):
        game.place_bet_safe("p", 10, 1)
    fund("q", 10)
    game.place_bet_safe("q", 10, 1)


def test_finalize_without_pending_bet(game):
    with pytest.raises(StateConflict):
        game.finalize_bet("nobody")
    with pytest.raises(StateConflict):
        game.cancel_pending_bet("nobody")


def test_cancel_before_target_refunds(chain, token, beacon, game, fund):
    fund("p", 100)
    ticket = game.place_bet_safe("p", 25, 0)
    chain.mine(DELAY_BLOCKS - 1)
    assert game.cancel_pending_bet("p") == 25
    assert token.balance_of("p") == 100
    assert not game.has_pending_bet("p")
    assert beacon.delayed_request(ticket) is None
    assert chain.events.last(BET_CANCELLED).args == {"user": "p", "amount": 25}


def test_cancel_refused_once_outcome_is_drawable(chain, token, game, fund):
    fund("p", 100)
    game.place_bet_safe("p", 25, 0)
    chain.mine(DELAY_BLOCKS + 1)
    with pytest.raises(StateConflict):
        game.cancel_pending_bet("p")
    assert game.has_pending_bet("p")
    assert token.balance_of("p") == 75


def test_expired_bet_can_only_be_refunded(chain, token, game, fund):
    fund("p", 100)
    game.place_bet_safe("p", 25, 0)
    chain.mine(DELAY_BLOCKS + FINALIZED_LOOKBACK + 1)
    with pytest.raises(NotYetAvailable):
        game.finalize_bet("p")
    assert game.cancel_pending_bet("p") == 25
    assert token.balance_of("p") == 100


# ---- pause and administration -------------------------------------------------------


def test_pause_blocks_new_money_but_not_exits(chain, token, game, fund, pin_instant):
    fund("lp", 100)
    game.deposit("lp", 100)
    fund("p", 100)
    game.place_bet_safe("p", 10, 1)

    with pytest.raises(Unauthorized):
        game.pause("p")
    game.pause(OWNER)

    with pytest.raises(ContractPaused):
        game.place_bet_instant("p", 10, 1)
    with pytest.raises(ContractPaused):
        game.deposit("lp", 1)

    chain.mine(DELAY_BLOCKS + 1)
    game.finalize_bet("p")
    game.claim("lp")
    game.withdraw("lp", 100)
    assert game.total_staked() == 0

    game.unpause(OWNER)
    pin_instant(WIN_BIT)
    game.place_bet_instant("p", 1, 1)


def test_emergency_withdraw_is_owner_only(chain, token, game):
    with pytest.raises(Unauthorized):
        game.emergency_withdraw("mallory", 1)
    with pytest.raises(InsufficientFunds):
        game.emergency_withdraw(OWNER, BANKROLL + 1)
    with pytest.raises(InvalidInput):
        game.emergency_withdraw(OWNER, 0)

    game.pause(OWNER)
    game.emergency_withdraw(OWNER, 400)
    assert token.balance_of(OWNER) == 400
    assert game.custody_balance() == BANKROLL - 400
    assert chain.events.last(EMERGENCY_WITHDRAW).args == {"owner": OWNER, "amount": 400}


def test_ownership_transfer(game):
    with pytest.raises(Unauthorized):
        game.transfer_ownership("mallory", "mallory")
    game.transfer_ownership(OWNER, "new-owner")
    assert game.owner() == "new-owner"
    assert game.is_owner("new-owner")
    with pytest.raises(Unauthorized):
        game.pause(OWNER)


def test_staker_view(game, fund):
    fund("lp", 300)
    game.deposit("lp", 300)
    s = game.stakers("lp")
    assert s.amount == 300
    assert s.reward_debt == 0
    assert game.total_staked() == 300
