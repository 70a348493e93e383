"""
goodluck.events: event names and the in-memory notification log.

Every state-changing entry point announces what happened through an
:class:`EventLog`. Records are immutable and carry the emitting contract's
address, the block height and a strictly increasing log index.

The log is a journaled participant of the host: when an atomic call scope
fails, events emitted inside it are dropped together with the state changes
they describe.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

log = logging.getLogger(__name__)

# =============================================================================
# Canonical event names
# =============================================================================

# Settlement
BET_PLACED = "BetPlaced"                    # user, amount, choice, won
BET_REQUESTED = "BetRequested"              # user, amount, choice
BET_CANCELLED = "BetCancelled"              # user, amount
EMERGENCY_WITHDRAW = "EmergencyWithdraw"    # owner, amount

# Reward ledger
STAKED = "Staked"                           # user, amount
UNSTAKED = "Unstaked"                       # user, amount
REWARD_CLAIMED = "RewardClaimed"            # user, amount

# Beacon
RANDOM_NUMBER_REQUESTED = "RandomNumberRequested"   # requester, targetHeight
RANDOM_NUMBER_GENERATED = "RandomNumberGenerated"   # requester, value
NEW_ROUND_STARTED = "NewRoundStarted"               # timestamp, roundId
COMMITMENT_SUBMITTED = "CommitmentSubmitted"        # participant, hash
NUMBER_REVEALED = "NumberRevealed"                  # participant, number

# Control
PAUSED = "Paused"                           # account
UNPAUSED = "Unpaused"                       # account
OWNERSHIP_TRANSFERRED = "OwnershipTransferred"  # previousOwner, newOwner

# Token
TRANSFER = "Transfer"                       # from, to, value
APPROVAL = "Approval"                       # owner, spender, value


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class EventRecord:
    """
    block_number : height at which the event was emitted
    log_index    : 0-based position in the whole log, in emission order
    address      : emitting contract
    name         : event name (one of the constants above)
    args         : event arguments
    """

    block_number: int
    log_index: int
    address: str
    name: str
    args: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "blockNumber": self.block_number,
            "logIndex": self.log_index,
            "address": self.address,
            "event": self.name,
        }
        out["args"] = {k: ("0x" + v.hex() if isinstance(v, bytes) else v) for k, v in self.args.items()}
        return out


# =============================================================================
# Log
# =============================================================================


class EventLog:
    """
    A thread-safe in-memory event log.

    Args:
        height_fn: returns the current block height (stamped on each record).
    """

    def __init__(self, height_fn: Callable[[], int]) -> None:
        self._height_fn = height_fn
        self._lock = threading.RLock()
        self._records: List[EventRecord] = []

    def emit(self, address: str, name: str, **args: Any) -> EventRecord:
        with self._lock:
            rec = EventRecord(
                block_number=self._height_fn(),
                log_index=len(self._records),
                address=address,
                name=name,
                args=dict(args),
            )
            self._records.append(rec)
        log.debug("event %s from %s: %s", name, address, args)
        return rec

    def get_logs(
        self,
        *,
        address: Optional[str] = None,
        name: Optional[str] = None,
        from_block: Optional[int] = None,
        to_block: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Iterable[EventRecord]:
        with self._lock:
            records = list(self._records)
        n = 0
        for rec in records:
            if address is not None and rec.address != address:
                continue
            if name is not None and rec.name != name:
                continue
            if from_block is not None and rec.block_number < from_block:
                continue
            if to_block is not None and rec.block_number > to_block:
                continue
            yield rec
            n += 1
            if limit is not None and n >= limit:
                break

    def named(self, name: str) -> List[EventRecord]:
        return list(self.get_logs(name=name))

    def last(self, name: Optional[str] = None) -> Optional[EventRecord]:
        with self._lock:
            for rec in reversed(self._records):
                if name is None or rec.name == name:
                    return rec
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # ---- journaling -------------------------------------------------------

    def snapshot(self) -> int:
        with self._lock:
            return len(self._records)

    def restore(self, marker: int) -> None:
        with self._lock:
            dropped = len(self._records) - marker
            del self._records[marker:]
        if dropped:
            log.debug("dropped %d event(s) on rollback", dropped)


__all__ = [
    "EventRecord",
    "EventLog",
    "BET_PLACED",
    "BET_REQUESTED",
    "BET_CANCELLED",
    "EMERGENCY_WITHDRAW",
    "STAKED",
    "UNSTAKED",
    "REWARD_CLAIMED",
    "RANDOM_NUMBER_REQUESTED",
    "RANDOM_NUMBER_GENERATED",
    "NEW_ROUND_STARTED",
    "COMMITMENT_SUBMITTED",
    "NUMBER_REVEALED",
    "PAUSED",
    "UNPAUSED",
    "OWNERSHIP_TRANSFERRED",
    "TRANSFER",
    "APPROVAL",
]
