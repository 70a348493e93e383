"""
EntropySource: hashes host-provided context into 32-byte outputs.

Each draw is

    SHA3-256( DOMAIN || prev_finalized || timestamp || caller || gas_left || nonce )

where `prev_finalized` is the finalized value of the previous block,
`gas_left` the host's remaining-budget figure and `nonce` a counter that
strictly increases with every draw or salt. The counter is the only state.

Trust level: **low value only**. Every input is known to, or chosen by, the
block producer and the caller at call time; a motivated producer can grind
outcomes. Use the delayed or commit-reveal strategies for anything that
matters.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..constants import DOMAIN_INSTANT, DOMAIN_SALT, HASH_LEN
from ..events import RANDOM_NUMBER_GENERATED
from ..host import HostEnvironment
from ..utils.hash import digest_to_int, dsha3_256

log = logging.getLogger(__name__)

_ZERO32 = b"\x00" * HASH_LEN


class EntropySource:
    def __init__(self, host: HostEnvironment, address: str) -> None:
        self.host = host
        self.address = address
        self._nonce = 0

    @property
    def nonce(self) -> int:
        return self._nonce

    def _context(self) -> bytes:
        prev: Optional[bytes] = self.host.finalized_value(self.host.height - 1)
        return prev if prev is not None else _ZERO32

    def _next(self, domain: bytes, caller: str) -> bytes:
        d = dsha3_256(
            domain,
            self._context(),
            self.host.timestamp,
            caller,
            self.host.gas_left(),
            self._nonce,
        )
        self._nonce += 1
        return d

    def draw(self, caller: str) -> bytes:
        """Produce a value for `caller` and announce it."""
        d = self._next(DOMAIN_INSTANT, caller)
        value = digest_to_int(d)
        self.host.events.emit(self.address, RANDOM_NUMBER_GENERATED, requester=caller, value=value)
        log.debug("instant draw for %s (nonce=%d)", caller, self._nonce - 1)
        return d

    def salt(self, caller: str) -> bytes:
        """Fresh entropy for mixing into delayed and reveal outputs; emits nothing."""
        return self._next(DOMAIN_SALT, caller)

    def snapshot(self) -> int:
        return self._nonce

    def restore(self, nonce: int) -> None:
        self._nonce = nonce


__all__ = ["EntropySource"]
