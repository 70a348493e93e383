"""
RandomnessBeacon: three ways to get a random value, from cheap to robust.

1. **Instant** (`get_instant_random`, `get_instant_bit`): one hash over the
   current block context. Same-call latency, low-value use only.
2. **Delayed** (`request_delayed_random` → `get_delayed_random`): the value
   depends on the finalized value of a block that did not exist when the
   request was made. Each request is an independent ticket.
3. **Commit-reveal** (`start_new_round`, `commit`, `reveal`): participants
   bind themselves to a number before anyone reveals; reveals open only after
   the commit window has closed.

Round state machine::

    IDLE --start_new_round--> COMMIT_OPEN --(now >= start + window)--> REVEAL_OPEN
                                   ^                                       |
                                   +------------start_new_round------------+

Gating: every mutating entry point runs in an atomic host scope behind the
beacon's reentrancy guard. All of them except the instant draws and ticket
cancellation refuse to run while the beacon is paused.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from ..commit_reveal import RoundManager, build_commitment, normalize_commitment, verify_reveal
from ..config import BeaconTiming
from ..constants import DOMAIN_DELAYED_OUT, DOMAIN_DELAYED_SEED, DOMAIN_REVEAL_OUT
from ..contract import Contract, entry_point
from ..errors import (
    BadReveal,
    CommitTooLate,
    InvalidInput,
    NotYetAvailable,
    RevealTooEarly,
    StateConflict,
)
from ..events import (
    COMMITMENT_SUBMITTED,
    NEW_ROUND_STARTED,
    NUMBER_REVEALED,
    RANDOM_NUMBER_GENERATED,
    RANDOM_NUMBER_REQUESTED,
)
from ..host import HostEnvironment
from ..metrics import METRICS, Metrics
from ..types import Address, DelayedRequest, Phase, Round
from ..utils.hash import digest_to_int, dsha3_256
from .delayed import DelayedArena
from .entropy import EntropySource

log = logging.getLogger(__name__)


class RandomnessBeacon(Contract):
    """
    Args:
        host:       host environment.
        owner:      account allowed to pause/unpause.
        address:    the beacon's own address.
        timing:     commit window and delay distance.
        metrics:    Prometheus instruments (module singleton by default).
        open_round: open round 1 at construction instead of starting IDLE.
    """

    def __init__(
        self,
        host: HostEnvironment,
        *,
        owner: Address,
        address: Address = Address("beacon"),
        timing: Optional[BeaconTiming] = None,
        metrics: Optional[Metrics] = None,
        open_round: bool = False,
    ) -> None:
        timing = timing or BeaconTiming()
        timing.validate()
        self.delay_blocks = timing.delay_blocks
        self.metrics = metrics or METRICS
        self.entropy = EntropySource(host, address)
        self._arena = DelayedArena()
        self._rounds = RoundManager(timing.commit_phase_s)
        super().__init__(host, address, owner=owner)
        if open_round:
            self._open_round()

    # ------------------------------------------------------------------
    # Instant
    # ------------------------------------------------------------------

    @entry_point(pausable=False)
    def get_instant_random(self, caller: Address) -> int:
        value = digest_to_int(self.entropy.draw(caller))
        self.metrics.record_draw("instant", "fulfilled")
        return value

    def get_instant_bit(self, caller: Address) -> int:
        return self.get_instant_random(caller) % 2

    # ------------------------------------------------------------------
    # Delayed
    # ------------------------------------------------------------------

    @entry_point()
    def request_delayed_random(self, caller: Address) -> int:
        """Open a ticket whose value is drawable `delay_blocks` from now. Returns the ticket id."""
        height = self.host.height
        target = height + self.delay_blocks
        seed = dsha3_256(DOMAIN_DELAYED_SEED, self.entropy.salt(caller), height, self._arena.next_ticket)
        req = self._arena.open(caller, target, seed)
        self._emit(RANDOM_NUMBER_REQUESTED, requester=caller, targetHeight=target)
        self.metrics.record_draw("delayed", "requested")
        return req.ticket

    def _require_drawable(self, req: DelayedRequest) -> bytes:
        height = self.host.height
        if height < req.target_height:
            raise NotYetAvailable(height=height, target_height=req.target_height)
        fv = self.host.finalized_value(req.target_height)
        if fv is None:
            raise NotYetAvailable(
                "finalized value for the target height is not available",
                height=height,
                target_height=req.target_height,
            )
        return fv

    @entry_point()
    def get_delayed_random(self, caller: Address, ticket: int) -> int:
        """
        Draw the value of `ticket` and consume it.

        Raises:
            StateConflict    unknown or already consumed ticket.
            Unauthorized     `caller` is not the requester.
            NotYetAvailable  target not reached, not yet finalized, or out of lookback.
        """
        req = self._arena.require_owned(ticket, caller)
        try:
            finalized = self._require_drawable(req)
        except NotYetAvailable:
            self.metrics.record_draw("delayed", "not_available")
            raise
        self._arena.consume(ticket)
        value = digest_to_int(dsha3_256(DOMAIN_DELAYED_OUT, req.seed_hash, finalized, self.entropy.salt(caller)))
        self._emit(RANDOM_NUMBER_GENERATED, requester=caller, value=value)
        self.metrics.record_draw("delayed", "fulfilled")
        self.metrics.observe_delayed_wait(self.host.height - (req.target_height - self.delay_blocks))
        log.debug("ticket %d fulfilled for %s at height %d", ticket, caller, self.host.height)
        return value

    @entry_point(pausable=False)
    def cancel_delayed_random(self, caller: Address, ticket: int) -> None:
        """Release a ticket without drawing it."""
        self._arena.require_owned(ticket, caller)
        self._arena.consume(ticket)
        self.metrics.record_draw("delayed", "cancelled")
        log.debug("ticket %d cancelled by %s", ticket, caller)

    def delayed_request(self, ticket: int) -> Optional[DelayedRequest]:
        return self._arena.get(ticket)

    def outstanding_requests(self, requester: Optional[str] = None) -> List[DelayedRequest]:
        return self._arena.outstanding(requester)

    def is_delayed_ready(self, ticket: int) -> bool:
        req = self._arena.get(ticket)
        if req is None:
            return False
        try:
            self._require_drawable(req)
        except NotYetAvailable:
            return False
        return True

    # ------------------------------------------------------------------
    # Commit-reveal
    # ------------------------------------------------------------------

    def _open_round(self) -> Round:
        r = self._rounds.start_new_round(self.host.timestamp)
        self._emit(NEW_ROUND_STARTED, timestamp=r.round_start, roundId=r.round_id)
        return r

    @entry_point()
    def start_new_round(self, caller: Address) -> Round:
        r = self._open_round()
        log.info("round %d started by %s at t=%d", r.round_id, caller, r.round_start)
        return r

    @entry_point()
    def commit(self, caller: Address, commitment: Any) -> None:
        """Store `commitment` (32 bytes or hex) for `caller` in the current round."""
        try:
            c = normalize_commitment(commitment)
        except (TypeError, ValueError) as e:
            self.metrics.record_commit("invalid")
            raise InvalidInput(str(e)) from e
        now = self.host.timestamp
        try:
            self._rounds.enforce_commit_timing(now)
            self._rounds.add_commitment(caller, c)
        except CommitTooLate:
            self.metrics.record_commit("too_late")
            raise
        except StateConflict:
            self.metrics.record_commit("duplicate" if self._rounds.current.opened else "invalid")
            raise
        self._emit(COMMITMENT_SUBMITTED, participant=caller, hash=c)
        self.metrics.record_commit("accepted")

    @entry_point()
    def reveal(self, caller: Address, number: int, salt: bytes) -> int:
        """
        Open `caller`'s commitment and return the resulting value.

        A mismatching reveal raises BadReveal and leaves the commitment in
        place, so the participant can retry with the right preimage.
        """
        try:
            build_commitment(number, salt)
        except (TypeError, ValueError) as e:
            self.metrics.record_reveal("invalid")
            raise InvalidInput(str(e)) from e
        now = self.host.timestamp
        try:
            self._rounds.enforce_reveal_timing(now)
        except RevealTooEarly:
            self.metrics.record_reveal("too_early")
            raise
        except StateConflict:
            self.metrics.record_reveal("invalid")
            raise
        try:
            rec = self._rounds.require_commitment(caller)
        except StateConflict:
            self.metrics.record_reveal("missing")
            raise
        try:
            verify_reveal(rec.commitment, number, salt, round_id=rec.round_id)
        except BadReveal:
            self.metrics.record_reveal("bad_reveal")
            raise
        self._rounds.consume_commitment(caller)
        value = digest_to_int(dsha3_256(DOMAIN_REVEAL_OUT, number, bytes(salt), self.entropy.salt(caller)))
        self._emit(NUMBER_REVEALED, participant=caller, number=number)
        self._emit(RANDOM_NUMBER_GENERATED, requester=caller, value=value)
        self.metrics.record_reveal("accepted")
        self.metrics.record_draw("reveal", "fulfilled")
        return value

    # ---- views ----

    @staticmethod
    def build_commitment(number: int, salt: bytes) -> bytes:
        return build_commitment(number, salt)

    def phase(self, now: Optional[int] = None) -> Phase:
        return self._rounds.phase_at(self.host.timestamp if now is None else now)

    def current_round(self) -> Round:
        return self._rounds.current

    def commitment_of(self, participant: str) -> Optional[bytes]:
        rec = self._rounds.commitment_of(participant)
        return rec.commitment if rec is not None else None

    def time_to_reveal(self) -> int:
        return self._rounds.time_to_reveal(self.host.timestamp)

    # ------------------------------------------------------------------
    # Journaling
    # ------------------------------------------------------------------

    def _snapshot_state(self) -> Any:
        return self.entropy.snapshot(), self._arena.snapshot(), self._rounds.snapshot()

    def _restore_state(self, snap: Any) -> None:
        nonce, arena, rounds = snap
        self.entropy.restore(nonce)
        self._arena.restore(arena)
        self._rounds.restore(rounds)


__all__ = ["RandomnessBeacon"]
