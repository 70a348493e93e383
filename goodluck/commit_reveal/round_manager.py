# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Round state and timing guards for commit-reveal.

There is a single live round at a time. Its windows are derived from the
timestamp at which it was opened and the commit window length:

    [round_start, round_start + commit_phase_s) → COMMIT_OPEN (commits only)
    [round_start + commit_phase_s, next start)  → REVEAL_OPEN (reveals only)

Before the first round is opened the phase is IDLE and both commits and
reveals are refused.

Commitments are stored per (participant, round_id). Opening a new round drops
every commitment of earlier rounds, so leftovers can neither block a
participant's next commit nor be revealed into a later round.

All helpers take `now` from the caller (host block time) so unit tests are
deterministic.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from ..constants import COMMIT_PHASE_LENGTH
from ..errors import CommitTooLate, RevealTooEarly, StateConflict
from ..types import Address, Commitment, Phase, Round

log = logging.getLogger(__name__)

_Key = Tuple[str, int]


class RoundManager:
    """
    Owns the current `Round` and the commitment table.

    Args:
        commit_phase_s: commit window length in seconds.
    """

    __slots__ = ("commit_phase_s", "_round", "_commitments")

    def __init__(self, commit_phase_s: int = COMMIT_PHASE_LENGTH) -> None:
        if commit_phase_s <= 0:
            raise ValueError("commit_phase_s must be > 0")
        self.commit_phase_s = commit_phase_s
        self._round = Round(round_id=0, round_start=0, participant_count=0, commit_phase_s=commit_phase_s)
        self._commitments: Dict[_Key, Commitment] = {}

    # ---- Round lifecycle ----

    @property
    def current(self) -> Round:
        return self._round

    def start_new_round(self, now: int) -> Round:
        """Open the next round at `now`, discarding commitments of older rounds."""
        rid = self._round.round_id + 1
        stale = len(self._commitments)
        self._commitments.clear()
        self._round = Round(
            round_id=rid,
            round_start=now,
            participant_count=0,
            commit_phase_s=self.commit_phase_s,
        )
        log.debug("round %d opened at t=%d (dropped %d unrevealed commitment(s))", rid, now, stale)
        return self._round

    # ---- Phase calculations ----

    def phase_at(self, now: int) -> Phase:
        return self._round.phase_at(now)

    def time_to_reveal(self, now: int) -> int:
        """Seconds until reveals open (0 once open or while idle)."""
        if not self._round.opened:
            return 0
        return max(0, self._round.commit_end - now)

    # ---- Acceptance rules ----

    def enforce_commit_timing(self, now: int) -> None:
        r = self._round
        if not r.opened:
            raise StateConflict("no commit-reveal round has been started", data={"phase": Phase.IDLE.value})
        if now >= r.commit_end:
            raise CommitTooLate(round_id=r.round_id, now_ts=now, cutoff_ts=r.commit_end)

    def enforce_reveal_timing(self, now: int) -> None:
        r = self._round
        if not r.opened:
            raise StateConflict("no commit-reveal round has been started", data={"phase": Phase.IDLE.value})
        if now < r.commit_end:
            raise RevealTooEarly(round_id=r.round_id, now_ts=now, reveal_open_ts=r.commit_end)

    # ---- Commitment table ----

    def commitment_of(self, participant: str, round_id: Optional[int] = None) -> Optional[Commitment]:
        rid = self._round.round_id if round_id is None else round_id
        return self._commitments.get((participant, rid))

    def add_commitment(self, participant: Address, commitment: bytes) -> Commitment:
        rid = self._round.round_id
        key = (participant, rid)
        if key in self._commitments:
            raise StateConflict(
                "participant already committed this round",
                data={"participant": participant, "round_id": rid},
            )
        rec = Commitment(participant=participant, round_id=rid, commitment=bytes(commitment))
        self._commitments[key] = rec
        self._round = Round(
            round_id=rid,
            round_start=self._round.round_start,
            participant_count=self._round.participant_count + 1,
            commit_phase_s=self._round.commit_phase_s,
        )
        return rec

    def require_commitment(self, participant: str) -> Commitment:
        rec = self.commitment_of(participant)
        if rec is None:
            raise StateConflict(
                "no commitment to reveal",
                data={"participant": participant, "round_id": self._round.round_id},
            )
        return rec

    def consume_commitment(self, participant: str) -> Commitment:
        rec = self.require_commitment(participant)
        del self._commitments[(participant, rec.round_id)]
        return rec

    def live_commitments(self) -> int:
        return len(self._commitments)

    # ---- journaling ----

    def snapshot(self) -> Tuple[Round, Dict[_Key, Commitment]]:
        return self._round, dict(self._commitments)

    def restore(self, snap: Tuple[Round, Dict[_Key, Commitment]]) -> None:
        self._round, commitments = snap
        self._commitments = dict(commitments)


__all__ = ["RoundManager"]
