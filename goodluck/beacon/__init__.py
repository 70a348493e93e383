"""
goodluck.beacon: randomness for the settlement game.

    from goodluck.beacon import RandomnessBeacon

See `randomness.py` for the three retrieval strategies and their trust levels.
"""

from __future__ import annotations

from .delayed import DelayedArena
from .entropy import EntropySource
from .randomness import RandomnessBeacon

__all__ = ["EntropySource", "DelayedArena", "RandomnessBeacon"]
