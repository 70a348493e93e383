from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NewType, Optional

"""
Core typed records shared by the beacon, the settlement game and the ledger.

Types provided:
  • Address         opaque account identifier (the host's caller identity)
  • Digest          32-byte SHA3-256 output
  • Phase           commit-reveal round phase
  • Round           the single commit-reveal round record
  • Commitment      a participant's hash bound to one round
  • DelayedRequest  one ticket in the delayed-randomness arena
  • PendingBet      a bettor's outstanding safe bet
  • Staker          a depositor's position in the reward pool
  • BetResult       outcome of a resolved bet
"""

# ---- Simple newtypes ---------------------------------------------------------

Address = NewType("Address", str)
Digest = NewType("Digest", bytes)

_HASH32 = 32


def _require_len(name: str, b: bytes, n: int) -> None:
    if len(b) != n:
        raise ValueError(f"{name} must be exactly {n} bytes (got {len(b)})")


def _require_nonneg(name: str, v: int) -> None:
    if not isinstance(v, int) or isinstance(v, bool):
        raise TypeError(f"{name} must be an int")
    if v < 0:
        raise ValueError(f"{name} must be non-negative (got {v})")


def _require_address(name: str, a: str) -> None:
    if not isinstance(a, str) or not a:
        raise TypeError(f"{name} must be a non-empty string address")


# ---- Commit-reveal -----------------------------------------------------------


class Phase(str, Enum):
    """Lifecycle phases of the commit-reveal round."""

    IDLE = "idle"  # no round has been opened yet
    COMMIT_OPEN = "commit_open"
    REVEAL_OPEN = "reveal_open"


@dataclass(frozen=True, slots=True)
class Round:
    """
    The current commit-reveal round.

    Fields:
      round_id          increments on every start_new_round (0 before the first)
      round_start       host timestamp at which the round opened
      participant_count commitments accepted in this round
      commit_phase_s    commit window length the round was opened with
    """

    round_id: int
    round_start: int
    participant_count: int
    commit_phase_s: int

    def __post_init__(self) -> None:  # type: ignore[override]
        _require_nonneg("round_id", self.round_id)
        _require_nonneg("round_start", self.round_start)
        _require_nonneg("participant_count", self.participant_count)
        _require_nonneg("commit_phase_s", self.commit_phase_s)
        if self.commit_phase_s == 0:
            raise ValueError("commit_phase_s must be > 0")

    @property
    def opened(self) -> bool:
        return self.round_id > 0

    @property
    def commit_end(self) -> int:
        """First timestamp at which commits are refused and reveals accepted."""
        return self.round_start + self.commit_phase_s

    def phase_at(self, now: int) -> Phase:
        if not self.opened:
            return Phase.IDLE
        return Phase.COMMIT_OPEN if now < self.commit_end else Phase.REVEAL_OPEN


@dataclass(frozen=True, slots=True)
class Commitment:
    """A participant's commitment for a given round."""

    participant: Address
    round_id: int
    commitment: bytes

    def __post_init__(self) -> None:  # type: ignore[override]
        _require_address("participant", self.participant)
        _require_nonneg("round_id", self.round_id)
        if not isinstance(self.commitment, (bytes, bytearray)):
            raise TypeError("commitment must be bytes")
        _require_len("commitment", self.commitment, _HASH32)


# ---- Delayed randomness ------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DelayedRequest:
    """
    One outstanding delayed-randomness ticket.

    The value becomes drawable once the host height reaches `target_height`
    and the host still exposes the finalized value of that height.
    """

    ticket: int
    requester: Address
    target_height: int
    seed_hash: bytes

    def __post_init__(self) -> None:  # type: ignore[override]
        _require_nonneg("ticket", self.ticket)
        _require_address("requester", self.requester)
        _require_nonneg("target_height", self.target_height)
        _require_len("seed_hash", self.seed_hash, _HASH32)


# ---- Settlement --------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PendingBet:
    """A bettor's outstanding safe bet. The empty record has amount 0 and is inactive."""

    amount: int = 0
    choice: int = 0
    active: bool = False
    ticket: Optional[int] = None

    def __post_init__(self) -> None:  # type: ignore[override]
        _require_nonneg("amount", self.amount)
        if self.choice not in (0, 1):
            raise ValueError("choice must be 0 or 1")
        if self.active and self.amount == 0:
            raise ValueError("an active pending bet must have a positive amount")


EMPTY_BET = PendingBet()


@dataclass(frozen=True, slots=True)
class BetResult:
    """Outcome of a resolved bet."""

    user: Address
    amount: int
    choice: int
    outcome: int
    won: bool
    payout: int
    random_value: int

    def to_dict(self) -> dict:
        return {
            "user": self.user,
            "amount": self.amount,
            "choice": self.choice,
            "outcome": self.outcome,
            "won": self.won,
            "payout": self.payout,
            "randomValue": self.random_value,
        }


# ---- Reward ledger -----------------------------------------------------------


@dataclass(slots=True)
class Staker:
    """
    A depositor's position.

    `reward_debt` is re-based to amount * acc_reward_per_share // SCALE after
    every change of `amount`; pending = that product minus the debt.
    """

    amount: int = 0
    reward_debt: int = 0

    def copy(self) -> "Staker":
        return Staker(self.amount, self.reward_debt)


__all__ = [
    "Address",
    "Digest",
    "Phase",
    "Round",
    "Commitment",
    "DelayedRequest",
    "PendingBet",
    "EMPTY_BET",
    "BetResult",
    "Staker",
]
