"""
goodluck.errors: typed exceptions raised by the beacon, settlement and ledger.

Every public entry point communicates failure by raising one of these. A raised
error always means the call had no effect: the host's atomic scope restores
every journaled participant (see `goodluck.host.Chain.atomic`).

Hierarchy
---------
GoodluckError (base)
 ├─ InvalidInput          : bad choice value, zero amount, malformed argument
 ├─ InsufficientFunds     : custody or caller balance too small for the transfer
 │   └─ InsufficientStake : withdrawing more than the caller has deposited
 ├─ TransferFailed        : the token collaborator reported failure
 ├─ TemporalPrecondition  : call arrived at the wrong height/time
 │   ├─ NotYetAvailable   : delayed value not drawable (too early or never finalized)
 │   ├─ CommitTooLate     : commit after the commit window closed
 │   ├─ RevealTooEarly    : reveal before the commit window closed
 │   └─ BadReveal         : reveal does not open the stored commitment
 ├─ ReentrancyRejected    : nested call into a guarded entry point
 ├─ StateConflict         : duplicate pending bet / commitment, missing record
 ├─ Unauthorized          : administrative call by a non-owner
 ├─ ContractPaused        : gated entry point called while paused
 └─ ArithmeticOverflow    : checked integer arithmetic left its range

Each error carries a stable machine `code` and optional JSON-safe `data`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class GoodluckError(Exception):
    """
    Base error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'INVALID_INPUT').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "goodluck error"
    code: str = "GOODLUCK_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for logs and CLI output."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


def _init(err: GoodluckError, message: str, code: str, data: Optional[Dict[str, Any]]) -> None:
    GoodluckError.__init__(err, message=message, code=code, data=data or None)


class InvalidInput(GoodluckError):
    def __init__(self, message: str = "invalid input", *, data: Optional[Dict[str, Any]] = None):
        _init(self, message, "INVALID_INPUT", data)


class InsufficientFunds(GoodluckError):
    def __init__(
        self,
        message: str = "insufficient funds",
        *,
        required: Optional[int] = None,
        available: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        d: Dict[str, Any] = dict(data or {})
        if required is not None:
            d.setdefault("required", required)
        if available is not None:
            d.setdefault("available", available)
        _init(self, message, "INSUFFICIENT_FUNDS", d)


class InsufficientStake(InsufficientFunds):
    def __init__(
        self,
        message: str = "insufficient stake",
        *,
        required: Optional[int] = None,
        available: Optional[int] = None,
    ):
        super().__init__(message, required=required, available=available)
        self.code = "INSUFFICIENT_STAKE"


class TransferFailed(GoodluckError):
    """The token collaborator returned failure; the whole call rolls back."""

    def __init__(
        self,
        message: str = "token transfer failed",
        *,
        op: Optional[str] = None,
        amount: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        d: Dict[str, Any] = dict(data or {})
        if op is not None:
            d.setdefault("op", op)
        if amount is not None:
            d.setdefault("amount", amount)
        _init(self, message, "TRANSFER_FAILED", d)


class TemporalPrecondition(GoodluckError):
    """Base for height/time window violations. Callers retry later or lose the chance."""

    def __init__(
        self,
        message: str = "temporal precondition failed",
        *,
        code: str = "TEMPORAL_PRECONDITION",
        data: Optional[Dict[str, Any]] = None,
    ):
        _init(self, message, code, data)


class NotYetAvailable(TemporalPrecondition):
    def __init__(
        self,
        message: str = "random value not yet available",
        *,
        height: Optional[int] = None,
        target_height: Optional[int] = None,
    ):
        d: Dict[str, Any] = {}
        if height is not None:
            d["height"] = height
        if target_height is not None:
            d["target_height"] = target_height
        super().__init__(message, code="NOT_YET_AVAILABLE", data=d)


class CommitTooLate(TemporalPrecondition):
    def __init__(self, *, round_id: int, now_ts: int, cutoff_ts: int):
        super().__init__(
            f"commit at t={now_ts} after window closed at t={cutoff_ts}",
            code="COMMIT_TOO_LATE",
            data={"round_id": round_id, "now_ts": now_ts, "cutoff_ts": cutoff_ts},
        )


class RevealTooEarly(TemporalPrecondition):
    def __init__(self, *, round_id: int, now_ts: int, reveal_open_ts: int):
        super().__init__(
            f"reveal at t={now_ts} before reveals open at t={reveal_open_ts}",
            code="REVEAL_TOO_EARLY",
            data={"round_id": round_id, "now_ts": now_ts, "reveal_open_ts": reveal_open_ts},
        )


class BadReveal(TemporalPrecondition):
    def __init__(
        self,
        *,
        round_id: int,
        expected_commitment_hex: str,
        got_commitment_hex: str,
    ):
        super().__init__(
            "reveal does not match prior commitment",
            code="BAD_REVEAL",
            data={
                "round_id": round_id,
                "expected": expected_commitment_hex,
                "got": got_commitment_hex,
            },
        )


class ReentrancyRejected(GoodluckError):
    def __init__(self, scope: str = "default"):
        _init(self, f"reentrant call into guarded scope {scope!r}", "REENTRANCY_REJECTED", {"scope": scope})


class StateConflict(GoodluckError):
    def __init__(self, message: str = "state conflict", *, data: Optional[Dict[str, Any]] = None):
        _init(self, message, "STATE_CONFLICT", data)


class Unauthorized(GoodluckError):
    def __init__(self, message: str = "caller is not the owner", *, caller: Optional[str] = None):
        _init(self, message, "UNAUTHORIZED", {"caller": caller} if caller else None)


class ContractPaused(GoodluckError):
    def __init__(self, message: str = "contract is paused"):
        _init(self, message, "PAUSED", None)


class ArithmeticOverflow(GoodluckError):
    def __init__(self, message: str = "arithmetic overflow", *, op: Optional[str] = None):
        _init(self, message, "ARITHMETIC_OVERFLOW", {"op": op} if op else None)


__all__ = [
    "GoodluckError",
    "InvalidInput",
    "InsufficientFunds",
    "InsufficientStake",
    "TransferFailed",
    "TemporalPrecondition",
    "NotYetAvailable",
    "CommitTooLate",
    "RevealTooEarly",
    "BadReveal",
    "ReentrancyRejected",
    "StateConflict",
    "Unauthorized",
    "ContractPaused",
    "ArithmeticOverflow",
]
