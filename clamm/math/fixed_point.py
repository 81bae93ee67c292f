"""Q64.96 / Q128.128 fixed-point constants and rounding-aware mul-div.

Square-root prices are stored as Q64.96 (an integer scaled by 2^96) and
fee-growth accumulators as Q128.128 (scaled by 2^128). The helpers here are
the only place where full-precision products are divided back down, so the
rounding direction is always explicit at the call site.

Python integers do not overflow, so every helper checks that its result fits
the 256-bit width the value is stored in and raises Overflow otherwise.
"""

from __future__ import annotations

from clamm.errors import Overflow
from clamm.safe_int import UINT256_MAX, S

__all__ = [
    "RESOLUTION_96",
    "Q96",
    "RESOLUTION_128",
    "Q128",
    "mul_div",
    "mul_div_rounding_up",
    "div_rounding_up",
    "add_delta",
]

RESOLUTION_96 = 96
Q96 = 1 << RESOLUTION_96

RESOLUTION_128 = 128
Q128 = 1 << RESOLUTION_128


def mul_div(a: int, b: int, denominator: int) -> int:
    """Compute floor(a * b / denominator) with full-precision intermediate.

    Args:
        a: Multiplicand (uint256)
        b: Multiplier (uint256)
        denominator: Divisor, must be non-zero

    Returns:
        The 256-bit result

    Raises:
        DivisionByZero: If denominator is zero
        Overflow: If the result does not fit in 256 bits
    """
    return ((S(a) * S(b)) // S(denominator)).to_uint256()


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """Compute ceil(a * b / denominator) with full-precision intermediate."""
    product = S(a) * S(b)
    result = product // S(denominator)
    if product % S(denominator) > 0:
        if result >= UINT256_MAX:
            raise Overflow(f"mul_div_rounding_up overflow: {a} * {b} / {denominator}")
        result = result + 1
    return result.to_uint256()


def div_rounding_up(x: int, y: int) -> int:
    """Compute ceil(x / y) for non-negative x and positive y."""
    return S(x).ceiling_div(y).value


def add_delta(x: int, y: int) -> int:
    """Add a signed liquidity delta to an unsigned liquidity value.

    Raises:
        Overflow: If the result is negative or exceeds uint128
    """
    return (S(x) + S(y)).to_uint128()
