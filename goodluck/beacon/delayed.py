"""
Delayed randomness tickets.

A request records a target height `DELAY_BLOCKS` ahead of the current one and
a seed hash bound to the current block context. The value can be drawn once
the chain has moved past the target and the host still exposes the target's
finalized value; it mixes the seed, that finalized value and fresh entropy.

Every request gets its own ticket, so concurrent requesters never overwrite
one another. Tickets are read-once: drawing consumes them, and only the
original requester may draw or cancel.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from ..errors import StateConflict, Unauthorized
from ..types import Address, DelayedRequest

log = logging.getLogger(__name__)


class DelayedArena:
    __slots__ = ("_next_ticket", "_requests")

    def __init__(self) -> None:
        self._next_ticket = 1
        self._requests: Dict[int, DelayedRequest] = {}

    def open(self, requester: Address, target_height: int, seed_hash: bytes) -> DelayedRequest:
        req = DelayedRequest(
            ticket=self._next_ticket,
            requester=requester,
            target_height=target_height,
            seed_hash=seed_hash,
        )
        self._requests[req.ticket] = req
        self._next_ticket += 1
        log.debug("ticket %d opened for %s (target=%d)", req.ticket, requester, target_height)
        return req

    @property
    def next_ticket(self) -> int:
        """Ticket id the next request will receive."""
        return self._next_ticket

    def get(self, ticket: int) -> Optional[DelayedRequest]:
        return self._requests.get(ticket)

    def require_owned(self, ticket: int, caller: str) -> DelayedRequest:
        req = self._requests.get(ticket)
        if req is None:
            raise StateConflict("unknown or already consumed ticket", data={"ticket": ticket})
        if req.requester != caller:
            raise Unauthorized("ticket belongs to another requester", caller=caller)
        return req

    def consume(self, ticket: int) -> DelayedRequest:
        req = self._requests.pop(ticket, None)
        if req is None:
            raise StateConflict("unknown or already consumed ticket", data={"ticket": ticket})
        return req

    def outstanding(self, requester: Optional[str] = None) -> List[DelayedRequest]:
        return [r for r in self._requests.values() if requester is None or r.requester == requester]

    def __len__(self) -> int:
        return len(self._requests)

    def snapshot(self) -> Tuple[int, Dict[int, DelayedRequest]]:
        return self._next_ticket, dict(self._requests)

    def restore(self, snap: Tuple[int, Dict[int, DelayedRequest]]) -> None:
        self._next_ticket, requests = snap
        self._requests = dict(requests)


__all__ = ["DelayedArena"]
