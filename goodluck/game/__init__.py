"""
goodluck.game: wager settlement.

    from goodluck.game import LuckyGame
"""

from __future__ import annotations

from .settlement import LuckyGame, payout_for

__all__ = ["LuckyGame", "payout_for"]
