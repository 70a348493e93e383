"""
goodluck.safe_math
==================

Checked unsigned-integer helpers for ledger and payout arithmetic.

Goals
-----
- Integer-only arithmetic; floats never touch balances.
- **Checked** semantics: leaving [0, MAX] raises `ArithmeticOverflow` rather
  than wrapping or clamping.
- U128 for token amounts (balances, stakes, pending rewards), U256 for the
  fixed-point accumulator and the intermediate products it feeds.
"""

from __future__ import annotations

from .constants import U128_MAX, U256_MAX
from .errors import ArithmeticOverflow


# ---------------------------------------------------------------------------
# Domain guards
# ---------------------------------------------------------------------------

def _require_range(op: str, bound: int, *xs: int) -> None:
    for x in xs:
        if not isinstance(x, int) or isinstance(x, bool):
            raise TypeError(f"{op}: expected int, got {type(x).__name__}")
        if x < 0 or x > bound:
            raise ArithmeticOverflow(f"{op}: operand {x} out of range", op=op)


def require_u128(*xs: int) -> None:
    _require_range("u128", U128_MAX, *xs)


def require_u256(*xs: int) -> None:
    _require_range("u256", U256_MAX, *xs)


# ---------------------------------------------------------------------------
# U128 (token amounts)
# ---------------------------------------------------------------------------

def u128_add(x: int, y: int) -> int:
    """Checked add in U128."""
    require_u128(x, y)
    s = x + y
    if s > U128_MAX:
        raise ArithmeticOverflow(f"u128_add: {x} + {y} overflows", op="u128_add")
    return s


def u128_sub(x: int, y: int) -> int:
    """Checked sub in U128: raise on underflow (y > x)."""
    require_u128(x, y)
    if y > x:
        raise ArithmeticOverflow(f"u128_sub: {x} - {y} underflows", op="u128_sub")
    return x - y


# ---------------------------------------------------------------------------
# U256 (accumulator and products)
# ---------------------------------------------------------------------------

def u256_add(x: int, y: int) -> int:
    require_u256(x, y)
    s = x + y
    if s > U256_MAX:
        raise ArithmeticOverflow(f"u256_add: {x} + {y} overflows", op="u256_add")
    return s


def u256_sub(x: int, y: int) -> int:
    require_u256(x, y)
    if y > x:
        raise ArithmeticOverflow(f"u256_sub: {x} - {y} underflows", op="u256_sub")
    return x - y


def u256_mul(x: int, y: int) -> int:
    require_u256(x, y)
    p = x * y
    if p > U256_MAX:
        raise ArithmeticOverflow(f"u256_mul: {x} * {y} overflows", op="u256_mul")
    return p


def u256_mul_div_down(x: int, y: int, d: int) -> int:
    """
    Checked floor((x*y)/d).

    The product must itself fit in U256, matching how the accumulator would
    behave on a 256-bit machine word; a zero divisor raises.
    """
    p = u256_mul(x, y)
    require_u256(d)
    if d == 0:
        raise ArithmeticOverflow("u256_mul_div_down: division by zero", op="u256_div")
    return p // d


__all__ = [
    "require_u128",
    "require_u256",
    "u128_add",
    "u128_sub",
    "u256_add",
    "u256_sub",
    "u256_mul",
    "u256_mul_div_down",
]
