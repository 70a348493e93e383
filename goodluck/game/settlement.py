"""
LuckyGame: binary wager settlement on top of the beacon and the reward pool.

A bettor stakes `amount` tokens on a `choice` of 0 or 1. The outcome bit is
the beacon value modulo 2:

- win:  the game pays floor(amount * 197 / 100) from its custody balance;
- loss: the stake becomes a reward for liquidity providers (`RewardLedger`).

Two modes:

instant  `place_bet_instant` resolves in the same call with the beacon's
         instant value. Cheap, and only as fair as the block producer.
safe     `place_bet_safe` escrows the stake and requests delayed randomness;
         `finalize_bet` resolves once the target block is finalized.
         `cancel_pending_bet` refunds the stake while the outcome is still
         unknowable (before the target is finalized) or after the target has
         dropped out of the host's lookback window.

The game is also the custody account and owner-facing surface of the reward
ledger: `deposit`, `withdraw`, `claim` and `preview_pending` delegate to it and
share the game's reentrancy guard and pause flag.

Pause gating: bets and deposits are refused while paused; finalize, cancel,
withdraw, claim and the owner's emergency withdrawal keep working.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..beacon import RandomnessBeacon
from ..constants import PAYOUT_DENOMINATOR, PAYOUT_MULTIPLIER, VALID_CHOICES
from ..contract import Contract, entry_point
from ..errors import InsufficientFunds, InvalidInput, StateConflict, TransferFailed
from ..events import BET_CANCELLED, BET_PLACED, BET_REQUESTED, EMERGENCY_WITHDRAW
from ..host import HostEnvironment
from ..ledger import RewardLedger
from ..metrics import METRICS, Metrics
from ..safe_math import require_u128, u256_mul_div_down
from ..token import FungibleToken
from ..types import EMPTY_BET, Address, BetResult, PendingBet, Staker

log = logging.getLogger(__name__)


def payout_for(amount: int) -> int:
    """Winning payout for a stake of `amount`."""
    return u256_mul_div_down(amount, PAYOUT_MULTIPLIER, PAYOUT_DENOMINATOR)


def _check_bet(amount: int, choice: int) -> None:
    if not isinstance(choice, int) or isinstance(choice, bool) or choice not in VALID_CHOICES:
        raise InvalidInput("Invalid choice", data={"choice": repr(choice)})
    if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
        raise InvalidInput("Amount must be greater than 0", data={"amount": repr(amount)})
    require_u128(amount)


class LuckyGame(Contract):
    """
    Args:
        host:    host environment.
        token:   wager and reward token.
        beacon:  randomness source.
        owner:   account allowed to pause, unpause and emergency-withdraw.
        address: the game's address, which is also its custody account.
        metrics: Prometheus instruments.
    """

    def __init__(
        self,
        host: HostEnvironment,
        token: FungibleToken,
        beacon: RandomnessBeacon,
        *,
        owner: Address,
        address: Address = Address("game"),
        metrics: Optional[Metrics] = None,
    ) -> None:
        self.token = token
        self.beacon = beacon
        self.metrics = metrics or METRICS
        self._bets: Dict[str, PendingBet] = {}
        super().__init__(host, address, owner=owner)
        self.ledger = RewardLedger(
            host,
            token,
            address=address,
            guard=self._guard,
            pausable=self._pausable,
            metrics=self.metrics,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _pay(self, to: str, amount: int, op: str) -> None:
        if not self.token.transfer(self.address, to, amount):
            raise TransferFailed(op=op, amount=amount, data={"to": to})

    def _pull(self, frm: str, amount: int, op: str) -> None:
        if not self.token.transfer_from(self.address, frm, self.address, amount):
            raise TransferFailed(op=op, amount=amount, data={"from": frm})

    def _resolve(self, user: Address, amount: int, choice: int, value: int, mode: str) -> BetResult:
        outcome = value % 2
        won = outcome == choice
        payout = 0
        if won:
            payout = payout_for(amount)
            available = self.token.balance_of(self.address)
            if available < payout:
                raise InsufficientFunds("game cannot cover payout", required=payout, available=available)
        else:
            self.ledger.add_reward(amount)

        if payout:
            self._pay(user, payout, "payout")
        self._emit(BET_PLACED, user=user, amount=amount, choice=choice, won=won)
        self.metrics.record_bet(mode, "won" if won else "lost")
        log.debug("%s bet %d on %d (%s): %s", user, amount, choice, mode, "won" if won else "lost")
        return BetResult(
            user=user,
            amount=amount,
            choice=choice,
            outcome=outcome,
            won=won,
            payout=payout,
            random_value=value,
        )

    # ------------------------------------------------------------------
    # Bets
    # ------------------------------------------------------------------

    @entry_point()
    def place_bet_instant(self, caller: Address, amount: int, choice: int) -> BetResult:
        _check_bet(amount, choice)
        self._pull(caller, amount, "bet")
        value = self.beacon.get_instant_random(self.address)
        return self._resolve(caller, amount, choice, value, "instant")

    @entry_point()
    def place_bet_safe(self, caller: Address, amount: int, choice: int) -> int:
        """Escrow the stake and request delayed randomness. Returns the beacon ticket."""
        _check_bet(amount, choice)
        if self._bets.get(caller, EMPTY_BET).active:
            raise StateConflict("pending bet already exists", data={"user": caller})
        ticket = self.beacon.request_delayed_random(self.address)
        self._bets[caller] = PendingBet(amount=amount, choice=choice, active=True, ticket=ticket)

        self._pull(caller, amount, "bet")
        self._emit(BET_REQUESTED, user=caller, amount=amount, choice=choice)
        self.metrics.record_bet("safe", "pending")
        return ticket

    def _require_pending(self, caller: str) -> PendingBet:
        bet = self._bets.get(caller, EMPTY_BET)
        if not bet.active:
            raise StateConflict("no pending bet", data={"user": caller})
        return bet

    @entry_point(pausable=False)
    def finalize_bet(self, caller: Address) -> BetResult:
        """
        Resolve `caller`'s safe bet.

        Raises NotYetAvailable (and changes nothing) until the target block is
        finalized, or once it has fallen out of the lookback window.
        """
        bet = self._require_pending(caller)
        value = self.beacon.get_delayed_random(self.address, bet.ticket)
        del self._bets[caller]
        return self._resolve(caller, bet.amount, bet.choice, value, "safe")

    @entry_point(pausable=False)
    def cancel_pending_bet(self, caller: Address) -> int:
        """
        Refund `caller`'s safe bet and release its ticket. Returns the refund.

        Narrower than "any pending bet": while the outcome is drawable the
        bettor could read it first and cancel only losers, so cancelling is
        refused between target+1 and target+lookback. Expired bets refund.
        """
        bet = self._require_pending(caller)
        if self.beacon.is_delayed_ready(bet.ticket):
            raise StateConflict("bet outcome is available; finalize instead", data={"user": caller})
        self.beacon.cancel_delayed_random(self.address, bet.ticket)
        del self._bets[caller]

        self._pay(caller, bet.amount, "refund")
        self._emit(BET_CANCELLED, user=caller, amount=bet.amount)
        self.metrics.record_bet("safe", "cancelled")
        return bet.amount

    # ------------------------------------------------------------------
    # Reward pool (delegates)
    # ------------------------------------------------------------------

    def deposit(self, caller: Address, amount: int) -> None:
        self.ledger.deposit(caller, amount)

    def withdraw(self, caller: Address, amount: int) -> None:
        self.ledger.withdraw(caller, amount)

    def claim(self, caller: Address) -> int:
        return self.ledger.claim(caller)

    def preview_pending(self, account: str) -> int:
        return self.ledger.preview_pending(account)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    @entry_point(pausable=False)
    def emergency_withdraw(self, caller: Address, amount: int) -> None:
        self._ownable.require_owner(caller)
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise InvalidInput("Amount must be greater than 0", data={"amount": repr(amount)})
        available = self.token.balance_of(self.address)
        if amount > available:
            raise InsufficientFunds(required=amount, available=available)
        self._pay(caller, amount, "emergency_withdraw")
        self._emit(EMERGENCY_WITHDRAW, owner=caller, amount=amount)
        self.metrics.record_ledger_op("emergency_withdraw")
        log.warning("emergency withdrawal of %d by %s", amount, caller)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def has_pending_bet(self, account: str) -> bool:
        return self._bets.get(account, EMPTY_BET).active

    def pending_bet_amount(self, account: str) -> int:
        return self._bets.get(account, EMPTY_BET).amount

    def pending_bet(self, account: str) -> PendingBet:
        return self._bets.get(account, EMPTY_BET)

    def stakers(self, account: str) -> Staker:
        return self.ledger.staker(account)

    def pending_rewards(self) -> int:
        return self.ledger.pending_rewards

    def total_staked(self) -> int:
        return self.ledger.total_staked

    def acc_reward_per_share(self) -> int:
        return self.ledger.acc_reward_per_share

    def custody_balance(self) -> int:
        return self.token.balance_of(self.address)

    # ------------------------------------------------------------------
    # Journaling
    # ------------------------------------------------------------------

    def _snapshot_state(self) -> Any:
        return dict(self._bets)

    def _restore_state(self, snap: Any) -> None:
        self._bets = dict(snap)


__all__ = ["LuckyGame", "payout_for"]
