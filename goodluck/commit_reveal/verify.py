# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Verify that a reveal (number, salt) opens a prior commitment.

Given a stored commitment C and a reveal (number, salt) we recompute

    C' = SHA3-256( number || salt )

and compare C' to C in constant time.

- `verify_reveal(...)`  : returns True on success, raises BadReveal on mismatch.
- `matches(...)`        : boolean form, never raises on mismatch.
- `normalize_commitment(...)` : hex or bytes to exactly 32 bytes.
"""

from __future__ import annotations

from typing import Union

from ..constants import HASH_LEN
from ..errors import BadReveal
from ..utils.bytes import BytesLike, as_bytes, consteq, from_hex, to_hex
from .commit import build_commitment


def normalize_commitment(commitment: Union[BytesLike, str]) -> bytes:
    if isinstance(commitment, str):
        b = from_hex(commitment)
    else:
        b = as_bytes(commitment)
    if len(b) != HASH_LEN:
        raise ValueError(f"commitment must be {HASH_LEN} bytes (got {len(b)})")
    return b


def matches(commitment: BytesLike, number: int, salt: bytes) -> bool:
    return consteq(build_commitment(number, salt), commitment)


def verify_reveal(commitment: BytesLike, number: int, salt: bytes, *, round_id: int = 0) -> bool:
    """
    Raises:
        BadReveal if the reveal does not reproduce `commitment`.
        TypeError / ValueError on malformed inputs.
    """
    expected = normalize_commitment(commitment)
    got = build_commitment(number, salt)
    if not consteq(expected, got):
        raise BadReveal(
            round_id=round_id,
            expected_commitment_hex=to_hex(expected),
            got_commitment_hex=to_hex(got),
        )
    return True


__all__ = ["normalize_commitment", "matches", "verify_reveal"]
