"""
goodluck.types: typed records shared across the beacon, game and ledger.

    from goodluck.types import Address, Phase, PendingBet, Staker
"""

from __future__ import annotations

from .core import (
    EMPTY_BET,
    Address,
    BetResult,
    Commitment,
    DelayedRequest,
    Digest,
    PendingBet,
    Phase,
    Round,
    Staker,
)

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
