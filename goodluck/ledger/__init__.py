"""
goodluck.ledger: pari-mutuel reward pool for liquidity providers.

    from goodluck.ledger import RewardLedger
"""

from __future__ import annotations

from .pool import Pool
from .rewards import RewardLedger

__all__ = ["Pool", "RewardLedger"]
