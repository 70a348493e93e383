"""
goodluck.control
================

Small, composable control primitives shared by every contract:

1) **Ownable**
   - `owner`, `is_owner(account)`, `require_owner(caller)`
   - `transfer_ownership(caller, new_owner)`
   Non-owners are rejected with `Unauthorized`.

2) **Pausable**
   - `paused`, `require_not_paused()`
   - `pause()` / `unpause()` (idempotent; return whether the flag changed)
   Gated entry points raise `ContractPaused` while the flag is set.

3) **ReentrancyGuard**
   A non-reentrancy latch keyed by a scope tag. Typical pattern:

       with guard.enter():
           # critical section
           ...

   A nested `enter()` on the same guard raises `ReentrancyRejected`. The latch
   is released on every exit path, including exceptions.

Ownership and the pause flag are contract state: the owning contract includes
them in its snapshot so a rolled-back call cannot leave either changed.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from .errors import ContractPaused, ReentrancyRejected, Unauthorized
from .types import Address

log = logging.getLogger(__name__)


# ---- Ownable ----------------------------------------------------------------


class Ownable:
    def __init__(self, owner: Address) -> None:
        if not owner:
            raise ValueError("owner must be a non-empty address")
        self._owner: Optional[Address] = owner

    @property
    def owner(self) -> Optional[Address]:
        return self._owner

    def is_owner(self, account: str) -> bool:
        return self._owner is not None and account == self._owner

    def require_owner(self, caller: str) -> None:
        if not self.is_owner(caller):
            raise Unauthorized(caller=caller)

    def transfer_ownership(self, caller: str, new_owner: Address) -> Tuple[Optional[Address], Address]:
        self.require_owner(caller)
        if not new_owner:
            raise ValueError("new owner must be a non-empty address")
        previous, self._owner = self._owner, new_owner
        log.info("ownership transferred %s -> %s", previous, new_owner)
        return previous, new_owner

    def snapshot(self) -> Optional[Address]:
        return self._owner

    def restore(self, snap: Optional[Address]) -> None:
        self._owner = snap


# ---- Pausable ---------------------------------------------------------------


class Pausable:
    def __init__(self, paused: bool = False) -> None:
        self._paused = bool(paused)

    @property
    def paused(self) -> bool:
        return self._paused

    def require_not_paused(self) -> None:
        if self._paused:
            raise ContractPaused()

    def pause(self) -> bool:
        changed = not self._paused
        self._paused = True
        return changed

    def unpause(self) -> bool:
        changed = self._paused
        self._paused = False
        return changed

    def snapshot(self) -> bool:
        return self._paused

    def restore(self, snap: bool) -> None:
        self._paused = snap


# ---- Reentrancy Guard -------------------------------------------------------


class ReentrancyGuard:
    def __init__(self, scope: str = "default") -> None:
        self.scope = scope
        self._entered = False

    @property
    def entered(self) -> bool:
        return self._entered

    @contextmanager
    def enter(self) -> Iterator[None]:
        if self._entered:
            log.warning("reentrant call rejected (scope=%s)", self.scope)
            raise ReentrancyRejected(self.scope)
        self._entered = True
        try:
            yield
        finally:
            self._entered = False


__all__ = ["Ownable", "Pausable", "ReentrancyGuard"]
