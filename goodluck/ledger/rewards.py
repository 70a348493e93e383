"""
RewardLedger: deposit / withdraw / claim entry points over a `Pool`.

Liquidity providers deposit the game token and receive, pro rata to their
share of `total_staked`, the stakes of every losing bet (see `Pool`).

Entry points
------------
deposit(caller, amount)      pause-gated; pays any pending reward first
withdraw(caller, amount)     returns principal plus pending reward in one transfer
claim(caller) -> int         pays the pending reward; zero is a silent no-op
preview_pending(account)     what `claim` would pay right now; no side effects

`add_reward(amount)` is the internal hook used by the settlement game when a
bet is lost. It must be called from inside one of the owning contract's entry
points so it shares that call's atomic scope.

Each entry point follows checks, effects, transfers: validation first, then
pool bookkeeping, then token movements. A token that reports failure raises
`TransferFailed` and the host scope rolls the whole call back.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..control import Pausable, ReentrancyGuard
from ..contract import entry_point
from ..errors import InsufficientStake, InvalidInput, TransferFailed
from ..events import REWARD_CLAIMED, STAKED, UNSTAKED
from ..host import HostEnvironment
from ..metrics import METRICS, Metrics
from ..safe_math import require_u128, u128_add
from ..token import FungibleToken
from ..types import Address, Staker
from .pool import Pool

log = logging.getLogger(__name__)


def _require_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise InvalidInput("amount must be an integer", data={"amount": repr(amount)})
    if amount <= 0:
        raise InvalidInput("Amount must be greater than 0", data={"amount": amount})
    require_u128(amount)


class RewardLedger:
    """
    Args:
        host:     host environment (atomic scopes, events).
        token:    the staked and rewarded token.
        address:  custody account; the owning contract's address.
        guard:    reentrancy guard shared with the owning contract.
        pausable: pause flag shared with the owning contract.
        metrics:  Prometheus instruments.
    """

    def __init__(
        self,
        host: HostEnvironment,
        token: FungibleToken,
        *,
        address: Address,
        guard: Optional[ReentrancyGuard] = None,
        pausable: Optional[Pausable] = None,
        metrics: Optional[Metrics] = None,
    ) -> None:
        self.host = host
        self.token = token
        self.address = address
        self._guard = guard or ReentrancyGuard(address)
        self._pausable = pausable or Pausable()
        self.metrics = metrics or METRICS
        self.pool = Pool()
        host.register(self)

    # ---- internals ----

    def _emit(self, name: str, **args) -> None:
        self.host.events.emit(self.address, name, **args)

    def _pay(self, to: str, amount: int, op: str) -> None:
        if not self.token.transfer(self.address, to, amount):
            raise TransferFailed(op=op, amount=amount, data={"to": to})

    def _pull(self, frm: str, amount: int, op: str) -> None:
        if not self.token.transfer_from(self.address, frm, self.address, amount):
            raise TransferFailed(op=op, amount=amount, data={"from": frm})

    def add_reward(self, amount: int) -> None:
        """Route a lost stake into the pool and fold it when anyone is staked."""
        if amount <= 0:
            return
        self.pool.add_reward(amount)
        self.metrics.add_reward_tokens(amount)
        if self.pool.total_staked == 0:
            log.info("reward of %d stranded until a depositor exists (pending=%d)", amount, self.pool.pending_rewards)

    # ---- entry points ----

    @entry_point()
    def deposit(self, caller: Address, amount: int) -> None:
        _require_amount(amount)
        self.pool.accrue()
        reward = self.pool.settle(caller)
        self.pool.increase(caller, amount)

        self._pull(caller, amount, "deposit")
        if reward:
            self._pay(caller, reward, "deposit_reward")
            self._emit(REWARD_CLAIMED, user=caller, amount=reward)
        self._emit(STAKED, user=caller, amount=amount)
        self.metrics.record_ledger_op("deposit")
        log.debug("%s staked %d (total=%d)", caller, amount, self.pool.total_staked)

    @entry_point(pausable=False)
    def withdraw(self, caller: Address, amount: int) -> None:
        _require_amount(amount)
        have = self.pool.staker(caller).amount
        if amount > have:
            raise InsufficientStake(required=amount, available=have)
        self.pool.accrue()
        reward = self.pool.settle(caller)
        self.pool.decrease(caller, amount)

        self._pay(caller, u128_add(amount, reward), "withdraw")
        self._emit(UNSTAKED, user=caller, amount=amount)
        if reward:
            self._emit(REWARD_CLAIMED, user=caller, amount=reward)
        self.metrics.record_ledger_op("withdraw")
        log.debug("%s unstaked %d (+%d reward, total=%d)", caller, amount, reward, self.pool.total_staked)

    @entry_point(pausable=False)
    def claim(self, caller: Address) -> int:
        self.pool.accrue()
        reward = self.pool.settle(caller)
        if reward == 0:
            self.metrics.record_ledger_op("claim", "noop")
            return 0
        self._pay(caller, reward, "claim")
        self._emit(REWARD_CLAIMED, user=caller, amount=reward)
        self.metrics.record_ledger_op("claim")
        return reward

    # ---- views ----

    def preview_pending(self, account: str) -> int:
        return self.pool.preview_pending(account)

    def staker(self, account: str) -> Staker:
        return self.pool.staker(account)

    @property
    def total_staked(self) -> int:
        return self.pool.total_staked

    @property
    def acc_reward_per_share(self) -> int:
        return self.pool.acc_reward_per_share

    @property
    def pending_rewards(self) -> int:
        return self.pool.pending_rewards

    # ---- journaling ----

    def snapshot(self):
        return self.pool.snapshot()

    def restore(self, snap) -> None:
        self.pool.restore(snap)


__all__ = ["RewardLedger"]
