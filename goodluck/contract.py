"""
goodluck.contract: shared plumbing for host-bound contracts.

A contract is a journaled participant of its host with an address, an owner,
a pause flag and a reentrancy guard. Public state-changing methods are wrapped
with :func:`entry_point`, which

1. opens an all-or-nothing host scope (`host.atomic()`),
2. takes the reentrancy latch,
3. checks the pause flag (unless the entry point stays available while paused),

and only then runs the method body. Any exception raised by the body rolls
back every journaled participant and leaves the latch released.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Optional, TypeVar

from .control import Ownable, Pausable, ReentrancyGuard
from .events import OWNERSHIP_TRANSFERRED, PAUSED, UNPAUSED, EventRecord
from .host import HostEnvironment
from .types import Address

log = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def entry_point(*, pausable: bool = True) -> Callable[[F], F]:
    """
    Decorate a method of an object exposing `host`, `_guard` and `_pausable`.

    pausable=False keeps the entry point callable while the contract is paused
    (withdrawals, claims, refunds, administrative unpause).
    """

    def deco(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(self, *args: Any, **kwargs: Any) -> Any:
            with self.host.atomic(), self._guard.enter():
                if pausable:
                    self._pausable.require_not_paused()
                return fn(self, *args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return deco


class Contract:
    """
    Base class for the beacon and the settlement game.

    Subclasses implement `_snapshot_state` / `_restore_state` for their own
    storage; ownership and the pause flag are journaled here.
    """

    def __init__(
        self,
        host: HostEnvironment,
        address: Address,
        *,
        owner: Address,
        guard: Optional[ReentrancyGuard] = None,
    ) -> None:
        if not address:
            raise ValueError("contract address must be non-empty")
        self.host = host
        self.address = address
        self._ownable = Ownable(owner)
        self._pausable = Pausable()
        self._guard = guard or ReentrancyGuard(address)
        host.register(self)

    def _emit(self, name: str, **args: Any) -> EventRecord:
        return self.host.events.emit(self.address, name, **args)

    # ---- views ------------------------------------------------------------

    def owner(self) -> Optional[Address]:
        return self._ownable.owner

    def is_owner(self, account: str) -> bool:
        return self._ownable.is_owner(account)

    def paused(self) -> bool:
        return self._pausable.paused

    # ---- administration ---------------------------------------------------

    @entry_point(pausable=False)
    def pause(self, caller: Address) -> None:
        self._ownable.require_owner(caller)
        if self._pausable.pause():
            log.info("%s paused by %s", self.address, caller)
            self._emit(PAUSED, account=caller)

    @entry_point(pausable=False)
    def unpause(self, caller: Address) -> None:
        self._ownable.require_owner(caller)
        if self._pausable.unpause():
            log.info("%s unpaused by %s", self.address, caller)
            self._emit(UNPAUSED, account=caller)

    @entry_point(pausable=False)
    def transfer_ownership(self, caller: Address, new_owner: Address) -> None:
        previous, new = self._ownable.transfer_ownership(caller, new_owner)
        self._emit(OWNERSHIP_TRANSFERRED, previousOwner=previous, newOwner=new)

    # ---- journaling -------------------------------------------------------

    def _snapshot_state(self) -> Any:
        raise NotImplementedError

    def _restore_state(self, snap: Any) -> None:
        raise NotImplementedError

    def snapshot(self) -> Any:
        return (self._ownable.snapshot(), self._pausable.snapshot(), self._snapshot_state())

    def restore(self, snap: Any) -> None:
        owner, paused, state = snap
        self._ownable.restore(owner)
        self._pausable.restore(paused)
        self._restore_state(state)


__all__ = ["Contract", "entry_point"]
