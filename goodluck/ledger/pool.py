"""
Pool: accumulated-reward-per-share accounting.

Globals
-------
total_staked          sum of every staker's `amount`
acc_reward_per_share  rewards per staked unit, scaled by SCALE (1e18); never decreases
pending_rewards       rewards added but not yet folded into the accumulator

Per staker
----------
amount       deposited balance
reward_debt  amount * acc_reward_per_share // SCALE as of the last change of amount

The reward a staker can claim at any moment is

    amount * acc_reward_per_share // SCALE - reward_debt

so distributing a reward costs O(1) regardless of how many stakers exist.

Flooring the debt on every rebase can leave a staker one unit ahead of its
exact share, so payouts are capped at the reward reserve (folded rewards not
yet paid). Whoever settles against an exhausted reserve forfeits the dust.

Folding (`accrue`) only happens while `total_staked > 0`. A reward added while
nobody is staked stays in `pending_rewards` until the next depositor arrives,
who then receives all of it on the next fold.

All arithmetic is integer-only and overflow-checked.
"""

from __future__ import annotations

import logging
from typing import Dict, Tuple

from ..constants import SCALE
from ..errors import InsufficientStake
from ..safe_math import u128_add, u128_sub, u256_add, u256_mul_div_down, u256_sub
from ..types import Staker

log = logging.getLogger(__name__)

_Snap = Tuple[int, int, int, int, int, Dict[str, Staker]]


class Pool:
    def __init__(self) -> None:
        self.total_staked = 0
        self.acc_reward_per_share = 0
        self.pending_rewards = 0
        # lifetime totals, for audits and invariant checks
        self.rewards_added = 0
        self.rewards_paid = 0
        self._stakers: Dict[str, Staker] = {}

    # ---- views ----

    def staker(self, account: str) -> Staker:
        """A copy of `account`'s position (zeroed if it never deposited)."""
        s = self._stakers.get(account)
        return s.copy() if s is not None else Staker()

    def _accrued(self, amount: int, acc: int) -> int:
        return u256_mul_div_down(amount, acc, SCALE)

    def reserve(self) -> int:
        """Folded rewards not yet paid out."""
        return u128_sub(u128_sub(self.rewards_added, self.pending_rewards), self.rewards_paid)

    def _fold_increment(self) -> int:
        if self.total_staked == 0 or self.pending_rewards == 0:
            return 0
        return u256_mul_div_down(self.pending_rewards, SCALE, self.total_staked)

    def pending_of(self, account: str) -> int:
        """Claimable reward against the accumulator as it stands (no fold)."""
        s = self._stakers.get(account)
        if s is None or s.amount == 0:
            return 0
        owed = u256_sub(self._accrued(s.amount, self.acc_reward_per_share), s.reward_debt)
        return min(owed, self.reserve())

    def preview_pending(self, account: str) -> int:
        """Claimable reward as if `accrue` ran first; touches nothing."""
        s = self._stakers.get(account)
        if s is None or s.amount == 0:
            return 0
        acc = u256_add(self.acc_reward_per_share, self._fold_increment())
        owed = u256_sub(self._accrued(s.amount, acc), s.reward_debt)
        # a fold leaves nothing pending
        return min(owed, u128_sub(self.rewards_added, self.rewards_paid))

    # ---- mutations ----

    def accrue(self) -> int:
        """Fold `pending_rewards` into the accumulator. Returns the amount folded."""
        if self.total_staked == 0 or self.pending_rewards == 0:
            return 0
        inc = self._fold_increment()
        self.acc_reward_per_share = u256_add(self.acc_reward_per_share, inc)
        folded, self.pending_rewards = self.pending_rewards, 0
        log.debug("folded %d into acc (+%d -> %d)", folded, inc, self.acc_reward_per_share)
        return folded

    def add_reward(self, amount: int) -> None:
        self.pending_rewards = u128_add(self.pending_rewards, amount)
        self.rewards_added = u128_add(self.rewards_added, amount)
        self.accrue()

    def _rebase(self, s: Staker) -> None:
        s.reward_debt = self._accrued(s.amount, self.acc_reward_per_share)

    def settle(self, account: str) -> int:
        """
        Take `account`'s pending reward (capped at the reserve): re-base its debt
        and return the amount. Call `accrue` first.
        """
        s = self._stakers.get(account)
        if s is None:
            return 0
        pending = self.pending_of(account)
        self._rebase(s)
        if pending:
            self.rewards_paid = u128_add(self.rewards_paid, pending)
        return pending

    def increase(self, account: str, amount: int) -> None:
        s = self._stakers.setdefault(account, Staker())
        s.amount = u128_add(s.amount, amount)
        self.total_staked = u128_add(self.total_staked, amount)
        self._rebase(s)

    def decrease(self, account: str, amount: int) -> None:
        s = self._stakers.get(account)
        have = s.amount if s is not None else 0
        if s is None or amount > have:
            raise InsufficientStake(required=amount, available=have)
        s.amount = u128_sub(s.amount, amount)
        self.total_staked = u128_sub(self.total_staked, amount)
        self._rebase(s)

    # ---- journaling ----

    def snapshot(self) -> _Snap:
        return (
            self.total_staked,
            self.acc_reward_per_share,
            self.pending_rewards,
            self.rewards_added,
            self.rewards_paid,
            {k: v.copy() for k, v in self._stakers.items()},
        )

    def restore(self, snap: _Snap) -> None:
        (
            self.total_staked,
            self.acc_reward_per_share,
            self.pending_rewards,
            self.rewards_added,
            self.rewards_paid,
            stakers,
        ) = snap
        self._stakers = {k: v.copy() for k, v in stakers.items()}


__all__ = ["Pool"]
