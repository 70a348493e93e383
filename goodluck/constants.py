"""
Protocol constants.

This module centralizes:
- fixed-point scale used by the reward ledger,
- the payout ratio for a winning bet (a protocol constant, never configured),
- beacon timing defaults (delay in blocks, commit window length),
- domain separation tags for every hash the beacon produces,
- integer bounds for checked arithmetic.

Operational knobs that networks may tune live in `goodluck.config.GameConfig`;
code that needs stable compile-time defaults imports from here.
"""

from __future__ import annotations

# -----------------------------
# Integer bounds
# -----------------------------
U64_MAX: int = (1 << 64) - 1
U128_MAX: int = (1 << 128) - 1
U256_MAX: int = (1 << 256) - 1

# -----------------------------
# Reward ledger
# -----------------------------
# Fixed-point scale of acc_reward_per_share and reward debts.
SCALE: int = 10**18

# -----------------------------
# Wager settlement
# -----------------------------
# A win pays floor(amount * PAYOUT_MULTIPLIER / PAYOUT_DENOMINATOR).
PAYOUT_MULTIPLIER: int = 197
PAYOUT_DENOMINATOR: int = 100

VALID_CHOICES = (0, 1)

# -----------------------------
# Beacon timing
# -----------------------------
# Blocks between a delayed request and the block whose finalized value seeds it.
DELAY_BLOCKS: int = 5

# Seconds the commit window stays open after a round starts.
COMMIT_PHASE_LENGTH: int = 3600

# How many past heights the host keeps finalized values for. A delayed request
# whose target falls out of this window can never be fulfilled.
FINALIZED_LOOKBACK: int = 256

# -----------------------------
# Domain separation (bytes tags)
# -----------------------------
# Keep these stable; changing them changes every derived value.
DOMAIN_PREFIX: bytes = b"goodluck.rand."

DOMAIN_INSTANT: bytes = DOMAIN_PREFIX + b"instant.v1"
DOMAIN_SALT: bytes = DOMAIN_PREFIX + b"salt.v1"
DOMAIN_DELAYED_SEED: bytes = DOMAIN_PREFIX + b"delayed.seed.v1"
DOMAIN_DELAYED_OUT: bytes = DOMAIN_PREFIX + b"delayed.out.v1"
DOMAIN_REVEAL_OUT: bytes = DOMAIN_PREFIX + b"reveal.out.v1"
DOMAIN_BLOCK: bytes = DOMAIN_PREFIX + b"block.v1"

HASH_LEN: int = 32

__all__ = [
    "U64_MAX",
    "U128_MAX",
    "U256_MAX",
    "SCALE",
    "PAYOUT_MULTIPLIER",
    "PAYOUT_DENOMINATOR",
    "VALID_CHOICES",
    "DELAY_BLOCKS",
    "COMMIT_PHASE_LENGTH",
    "FINALIZED_LOOKBACK",
    "DOMAIN_PREFIX",
    "DOMAIN_INSTANT",
    "DOMAIN_SALT",
    "DOMAIN_DELAYED_SEED",
    "DOMAIN_DELAYED_OUT",
    "DOMAIN_REVEAL_OUT",
    "DOMAIN_BLOCK",
    "HASH_LEN",
]
