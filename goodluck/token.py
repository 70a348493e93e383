"""
Fungible token boundary and an in-memory reference ledger.

The game and the reward ledger only ever talk to a :class:`FungibleToken`:

    balance_of(account) -> int
    transfer(caller, to, amount) -> bool
    transfer_from(caller, owner, to, amount) -> bool

Mutating calls take an explicit `caller` (no ambient sender) and report
failure by returning ``False``; callers turn that into `TransferFailed` and
the surrounding atomic scope undoes the whole call.

:class:`InMemoryToken` is an ERC-20-like implementation with allowances, a
faucet-style `mint`, `Transfer`/`Approval` events, U128-checked balances and
journaling, so it rolls back together with the contracts that use it.
"""

from __future__ import annotations

import logging
from typing import Dict, Protocol, Tuple, runtime_checkable

from .constants import U128_MAX
from .events import APPROVAL, TRANSFER
from .host import HostEnvironment
from .safe_math import u128_add, u128_sub

log = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0"


@runtime_checkable
class FungibleToken(Protocol):
    def balance_of(self, account: str) -> int: ...

    def transfer(self, caller: str, to: str, amount: int) -> bool: ...

    def transfer_from(self, caller: str, owner: str, to: str, amount: int) -> bool: ...


def _valid_amount(amount: int) -> bool:
    return isinstance(amount, int) and not isinstance(amount, bool) and 0 <= amount <= U128_MAX


class InMemoryToken:
    """
    Reference token.

    Args:
        host:     host whose event log and journal this ledger joins.
        address:  token contract address (emitter of Transfer/Approval).
        symbol:   display symbol.
        decimals: display precision.
    """

    def __init__(
        self,
        host: HostEnvironment,
        address: str = "token",
        *,
        symbol: str = "LUCK",
        decimals: int = 18,
    ) -> None:
        self.host = host
        self.address = address
        self.symbol = symbol
        self.decimals = decimals
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._total_supply = 0
        host.register(self)

    # ---- views ------------------------------------------------------------

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    # ---- mutations --------------------------------------------------------

    def mint(self, to: str, amount: int) -> bool:
        if not to or not _valid_amount(amount):
            return False
        if self._total_supply + amount > U128_MAX:
            return False
        self._total_supply += amount
        self._balances[to] = u128_add(self.balance_of(to), amount)
        self.host.events.emit(self.address, TRANSFER, **{"from": ZERO_ADDRESS, "to": to, "value": amount})
        return True

    def approve(self, caller: str, spender: str, amount: int) -> bool:
        if not caller or not spender or not _valid_amount(amount):
            return False
        self._allowances[(caller, spender)] = amount
        self.host.events.emit(self.address, APPROVAL, owner=caller, spender=spender, value=amount)
        return True

    def transfer(self, caller: str, to: str, amount: int) -> bool:
        return self._move(caller, to, amount)

    def transfer_from(self, caller: str, owner: str, to: str, amount: int) -> bool:
        if not _valid_amount(amount):
            return False
        allowed = self.allowance(owner, caller)
        if allowed < amount:
            log.debug("transfer_from rejected: allowance %d < %d (%s by %s)", allowed, amount, owner, caller)
            return False
        if not self._move(owner, to, amount):
            return False
        self._allowances[(owner, caller)] = allowed - amount
        return True

    def _move(self, frm: str, to: str, amount: int) -> bool:
        if not frm or not to or not _valid_amount(amount):
            return False
        bal = self.balance_of(frm)
        if bal < amount:
            log.debug("transfer rejected: balance %d < %d (%s)", bal, amount, frm)
            return False
        if frm != to:
            self._balances[frm] = u128_sub(bal, amount)
            self._balances[to] = u128_add(self.balance_of(to), amount)
        self.host.events.emit(self.address, TRANSFER, **{"from": frm, "to": to, "value": amount})
        return True

    # ---- journaling -------------------------------------------------------

    def snapshot(self) -> Tuple[Dict[str, int], Dict[Tuple[str, str], int], int]:
        return dict(self._balances), dict(self._allowances), self._total_supply

    def restore(self, snap: Tuple[Dict[str, int], Dict[Tuple[str, str], int], int]) -> None:
        balances, allowances, supply = snap
        self._balances = dict(balances)
        self._allowances = dict(allowances)
        self._total_supply = supply


__all__ = ["FungibleToken", "InMemoryToken", "ZERO_ADDRESS"]
