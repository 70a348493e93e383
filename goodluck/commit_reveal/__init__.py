# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
goodluck.commit_reveal
======================

Commit-reveal helpers for the randomness beacon.

Typical flow (block-time driven):
    1) Anyone opens a round (`RandomnessBeacon.start_new_round`).
    2) Participants submit `build_commitment(number, salt)` while the commit
       window is open.
    3) Once the window closes, each participant reveals (number, salt); the
       beacon checks it with `verify_reveal` and folds it into a fresh value.

Submodules:
    - commit.py        : commitment construction.
    - verify.py        : reveal verification (constant-time).
    - round_manager.py : round state, windows and the commitment table.
"""

from __future__ import annotations

from .commit import SALT_LEN, build_commitment, build_commitment_hex
from .round_manager import RoundManager
from .verify import matches, normalize_commitment, verify_reveal

__all__ = [
    "SALT_LEN",
    "build_commitment",
    "build_commitment_hex",
    "verify_reveal",
    "matches",
    "normalize_commitment",
    "RoundManager",
]
