"""
goodluck.host: the execution environment contracts run against.

`HostEnvironment` is the boundary every contract depends on: block height and
timestamp, finalized per-height values (the source of delayed randomness), a
remaining-budget figure, the shared event log and all-or-nothing call scopes.

`Chain` is the in-process implementation used by tests, the CLI simulator and
local experiments:

- Heights advance only through :meth:`Chain.mine`; each block moves the
  timestamp forward by ``block_time_s``.
- The finalized value of height ``h`` is readable only while
  ``h < height`` and ``height - h <= lookback``. Values older than the
  lookback horizon are gone for good.
- :meth:`Chain.atomic` snapshots every registered journaled participant
  (token ledgers, contracts, the event log) on entry and restores all of them
  if the scope raises. Scopes nest; the host lock serializes calls.

Typical usage
-------------
    chain = Chain()
    token = InMemoryToken(chain)
    beacon = RandomnessBeacon(chain, owner="owner")
    chain.mine(DELAY_BLOCKS + 1)
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, ContextManager, Dict, Iterator, List, Optional, Protocol, runtime_checkable

from .config import ChainParams, GameConfig
from .constants import DOMAIN_BLOCK, FINALIZED_LOOKBACK, HASH_LEN
from .events import EventLog
from .utils.hash import dsha3_256

log = logging.getLogger(__name__)


class Journaled(Protocol):
    """Anything whose state the host can capture and put back."""

    def snapshot(self) -> Any: ...

    def restore(self, snap: Any) -> None: ...


@runtime_checkable
class HostEnvironment(Protocol):
    events: EventLog

    @property
    def height(self) -> int: ...

    @property
    def timestamp(self) -> int: ...

    def finalized_value(self, height: int) -> Optional[bytes]: ...

    def gas_left(self) -> int: ...

    def register(self, participant: Journaled) -> None: ...

    def atomic(self) -> ContextManager[None]: ...


class Chain:
    """
    Simulated host.

    Args:
        params:    block interval, genesis timestamp and start height.
        lookback:  number of past heights whose finalized value stays readable.
        seed:      mixes into every block value so separate chains diverge.
        gas_limit: per-block budget reported by :meth:`gas_left`.
        call_gas:  budget consumed by each atomic call scope.
    """

    def __init__(
        self,
        params: Optional[ChainParams] = None,
        *,
        lookback: int = FINALIZED_LOOKBACK,
        seed: bytes = b"goodluck-devnet",
        gas_limit: int = 30_000_000,
        call_gas: int = 21_000,
    ) -> None:
        p = params or ChainParams()
        p.validate()
        if lookback <= 0:
            raise ValueError("lookback must be > 0")
        self._block_time = p.block_time_s
        self._height = p.start_height
        self._timestamp = p.genesis_time_unix + p.start_height * p.block_time_s
        self._lookback = lookback
        self._seed = bytes(seed)
        self._overrides: Dict[int, bytes] = {}
        self._gas_limit = gas_limit
        self._call_gas = call_gas
        self._gas_used = 0
        self._participants: List[Journaled] = []
        self._depth = 0
        self._lock = threading.RLock()
        self.events = EventLog(lambda: self._height)
        self.register(self.events)

    @classmethod
    def from_config(cls, cfg: GameConfig, **kwargs: Any) -> "Chain":
        return cls(cfg.chain, lookback=cfg.beacon.finalized_lookback, **kwargs)

    # ---- clock ------------------------------------------------------------

    @property
    def height(self) -> int:
        return self._height

    @property
    def timestamp(self) -> int:
        return self._timestamp

    @property
    def lookback(self) -> int:
        return self._lookback

    def mine(self, n: int = 1) -> int:
        """Produce `n` blocks and return the new height."""
        if n < 0:
            raise ValueError("cannot mine a negative number of blocks")
        with self._lock:
            for _ in range(n):
                self._height += 1
                self._timestamp += self._block_time
                self._gas_used = 0
            log.debug("mined %d block(s); height=%d ts=%d", n, self._height, self._timestamp)
            return self._height

    def advance_time(self, seconds: int) -> int:
        """Move the timestamp forward without producing blocks."""
        if seconds < 0:
            raise ValueError("time only moves forward")
        with self._lock:
            self._timestamp += seconds
            return self._timestamp

    def set_timestamp(self, ts: int) -> None:
        with self._lock:
            if ts < self._timestamp:
                raise ValueError(f"timestamp {ts} is before current {self._timestamp}")
            self._timestamp = ts

    # ---- finalized values -------------------------------------------------

    def block_value(self, height: int) -> bytes:
        """Value of the block at `height`, regardless of availability."""
        v = self._overrides.get(height)
        if v is not None:
            return v
        return dsha3_256(DOMAIN_BLOCK, self._seed, height)

    def set_block_value(self, height: int, value: bytes) -> None:
        """Pin the value of a block (test hook for deterministic outcomes)."""
        if len(value) != HASH_LEN:
            raise ValueError(f"block value must be {HASH_LEN} bytes")
        self._overrides[height] = bytes(value)

    def finalized_value(self, height: int) -> Optional[bytes]:
        if height < 0 or height >= self._height:
            return None
        if self._height - height > self._lookback:
            return None
        return self.block_value(height)

    # ---- budget -----------------------------------------------------------

    def gas_left(self) -> int:
        return max(0, self._gas_limit - self._gas_used)

    def consume_gas(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("gas amount must be non-negative")
        self._gas_used += amount

    # ---- journaling -------------------------------------------------------

    def register(self, participant: Journaled) -> None:
        with self._lock:
            if any(p is participant for p in self._participants):
                return
            self._participants.append(participant)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """
        All-or-nothing call scope.

        Every registered participant is snapshotted on entry; any exception
        leaving the scope restores them all (in reverse registration order)
        and propagates unchanged.
        """
        with self._lock:
            snaps = [(p, p.snapshot()) for p in self._participants]
            self.consume_gas(self._call_gas)
            self._depth += 1
            try:
                yield
            except BaseException as exc:
                for p, s in reversed(snaps):
                    p.restore(s)
                log.debug("rolled back call at depth %d: %s", self._depth, exc)
                raise
            finally:
                self._depth -= 1

    @property
    def in_call(self) -> bool:
        return self._depth > 0


__all__ = ["Journaled", "HostEnvironment", "Chain"]
