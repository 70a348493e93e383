# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
goodluck.utils.bytes
====================

Hex/bytes conversion with strict validation, plus a timing-safe equality.
Used wherever digests cross a text boundary (CLI, logs, error payloads).
"""

from __future__ import annotations

import hmac
import re
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

_HEX_RE = re.compile(r"^(0x)?[0-9a-fA-F]*$")

__all__ = ["to_hex", "from_hex", "is_hex", "as_bytes", "consteq"]


def as_bytes(x: BytesLike) -> bytes:
    if isinstance(x, (bytes, bytearray, memoryview)):
        return bytes(x)
    raise TypeError(f"expected bytes-like object, got {type(x).__name__}")


def to_hex(b: BytesLike) -> str:
    """0x-prefixed lowercase hex."""
    return "0x" + as_bytes(b).hex()


def is_hex(s: str) -> bool:
    if not isinstance(s, str) or not _HEX_RE.match(s):
        return False
    body = s[2:] if s[:2].lower() == "0x" else s
    return len(body) % 2 == 0


def from_hex(s: str) -> bytes:
    """Decode hex with or without 0x prefix; odd lengths and non-hex chars are rejected."""
    if not is_hex(s):
        raise ValueError(f"invalid hex string: {s!r}")
    body = s[2:] if s[:2].lower() == "0x" else s
    return bytes.fromhex(body)


def consteq(a: BytesLike, b: BytesLike) -> bool:
    return hmac.compare_digest(as_bytes(a), as_bytes(b))
