"""
Goodluck: randomness beacon and pari-mutuel reward ledger.

This package provides:
- a randomness beacon with three retrieval strategies (instant, delayed,
  commit→reveal),
- a binary wager settlement contract that resolves bets against the beacon,
- a reward ledger that hands losing stakes to liquidity providers using
  accumulated-reward-per-share accounting.

Only light, stable exports are surfaced here to avoid import cycles.
"""

from __future__ import annotations

from .version import __version__

__all__ = ["__version__"]
