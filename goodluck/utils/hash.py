# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
goodluck.utils.hash
===================

SHA3-256 helpers plus two encodings used by the beacon:

- :func:`pack`: fixed-width *packed* concatenation (ints as 32-byte
  big-endian words, bytes verbatim, str as UTF-8, bool as one byte). This is
  the encoding a commitment ``H(number ‖ salt)`` is built from, so clients can
  reproduce it with any tool that does tight packing.
- :func:`dsha3_256`: domain-separated hash over a self-delimiting TLV
  encoding. Every internally derived value (entropy draws, delayed seeds,
  reveal outputs, block values of the simulated host) goes through this so
  that independent contexts can never collide.
"""

from __future__ import annotations

from hashlib import sha3_256 as _sha3_256
from typing import Any, Iterable

from ..constants import U256_MAX

__all__ = [
    "sha3_256",
    "pack",
    "hash_packed",
    "dsha3_256",
    "digest_to_int",
]


def sha3_256(data: bytes) -> bytes:
    """Return SHA3-256(data)."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("sha3_256 expects a bytes-like object")
    return _sha3_256(bytes(data)).digest()


# --------------------------------
# Packed encoding
# --------------------------------


def _pack_one(x: Any) -> bytes:
    if isinstance(x, (bytes, bytearray, memoryview)):
        return bytes(x)
    if isinstance(x, bool):
        return b"\x01" if x else b"\x00"
    if isinstance(x, int):
        if x < 0 or x > U256_MAX:
            raise ValueError("packed ints must fit in 256 bits")
        return x.to_bytes(32, "big")
    if isinstance(x, str):
        return x.encode("utf-8")
    raise TypeError(f"unsupported part type: {type(x)!r}")


def pack(*parts: Any) -> bytes:
    return b"".join(_pack_one(p) for p in parts)


def hash_packed(*parts: Any) -> bytes:
    """SHA3-256 over :func:`pack` of *parts*."""
    return sha3_256(pack(*parts))


# --------------------------------
# Stable, self-delimiting encoding
# --------------------------------

# Item type tags (single-byte, stable):
_TT_BYTES = b"\x01"
_TT_STR = b"\x02"
_TT_INT = b"\x03"
_TT_BOOL = b"\x04"
_TT_NONE = b"\x06"


def _varint_u(n: int) -> bytes:
    """LEB128 unsigned varint."""
    if n < 0:
        raise ValueError("varint only supports non-negative integers")
    out = bytearray()
    while True:
        b = n & 0x7F
        n >>= 7
        if n:
            out.append(b | 0x80)
        else:
            out.append(b)
            break
    return bytes(out)


def _encode_one(x: Any) -> bytes:
    if x is None:
        return _TT_NONE
    if isinstance(x, (bytes, bytearray, memoryview)):
        b = bytes(x)
        return _TT_BYTES + _varint_u(len(b)) + b
    if isinstance(x, str):
        b = x.encode("utf-8")
        return _TT_STR + _varint_u(len(b)) + b
    if isinstance(x, bool):
        return _TT_BOOL + (b"\x01" if x else b"\x00")
    if isinstance(x, int):
        if x < 0:
            raise ValueError("only non-negative integers are supported")
        b = x.to_bytes(max(1, (x.bit_length() + 7) // 8), "big")
        return _TT_INT + _varint_u(len(b)) + b
    raise TypeError(f"unsupported part type: {type(x)!r}")


def _encode_parts(parts: Iterable[Any]) -> bytes:
    items = [_encode_one(p) for p in parts]
    payload = b"".join(items)
    return _varint_u(len(items)) + _varint_u(len(payload)) + payload


def dsha3_256(domain: bytes, *parts: Any) -> bytes:
    """
    Domain-separated SHA3-256 over *parts*:

        SHA3-256( len(domain) || domain || '|' || ENCODE(parts) )
    """
    if not isinstance(domain, bytes) or not domain:
        raise ValueError("domain must be non-empty bytes")
    h = _sha3_256()
    h.update(_varint_u(len(domain)) + domain + b"|")
    h.update(_encode_parts(parts))
    return h.digest()


def digest_to_int(d: bytes) -> int:
    """Interpret a digest as an unsigned big-endian integer."""
    return int.from_bytes(d, "big")
