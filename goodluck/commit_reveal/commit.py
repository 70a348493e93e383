# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Commitment construction for the beacon's commit-reveal path.

Definition
----------
C = SHA3-256( number || salt )

- `number` is encoded as a 32-byte big-endian word (0 <= number < 2**256).
- `salt` is exactly 32 bytes chosen uniformly at random by the committer.

The encoding is a plain packed concatenation so that any client able to
hash 64 bytes can precompute its commitment offline. `build_commitment_hex`
is the hex-friendly variant used by the CLI.
"""

from __future__ import annotations

from ..constants import HASH_LEN, U256_MAX
from ..utils.bytes import to_hex
from ..utils.hash import hash_packed

SALT_LEN = 32


def _validate(number: int, salt: bytes) -> None:
    if not isinstance(number, int) or isinstance(number, bool):
        raise TypeError("number must be an int")
    if number < 0 or number > U256_MAX:
        raise ValueError("number must fit in 256 bits")
    if not isinstance(salt, (bytes, bytearray)):
        raise TypeError("salt must be bytes")
    if len(salt) != SALT_LEN:
        raise ValueError(f"salt must be exactly {SALT_LEN} bytes (got {len(salt)})")


def build_commitment(number: int, salt: bytes) -> bytes:
    """
    Return the 32-byte commitment to (number, salt).

    Raises:
        TypeError / ValueError on malformed inputs.
    """
    _validate(number, salt)
    c = hash_packed(number, bytes(salt))
    assert len(c) == HASH_LEN
    return c


def build_commitment_hex(number: int, salt: bytes) -> str:
    return to_hex(build_commitment(number, salt))


__all__ = ["SALT_LEN", "build_commitment", "build_commitment_hex"]
