"""Conversion between tick indices and Q64.96 square-root prices.

price(tick) = 1.0001^tick, so sqrt_price(tick) = sqrt(1.0001)^tick * 2^96.

Both directions are pure integer arithmetic so that every implementation
agrees on every tick boundary bit for bit:
- get_sqrt_ratio_at_tick multiplies together precomputed Q128.128 values of
  1/sqrt(1.0001)^(2^i) for each set bit of |tick|.
- get_tick_at_sqrt_ratio takes a fixed-point log2, rescales it to base
  sqrt(1.0001) and picks between the two candidate ticks its error bounds allow.
"""

from __future__ import annotations

from clamm.errors import DomainError

__all__ = [
    "MIN_TICK",
    "MAX_TICK",
    "MIN_SQRT_RATIO",
    "MAX_SQRT_RATIO",
    "get_sqrt_ratio_at_tick",
    "get_tick_at_sqrt_ratio",
]

# The minimum tick that may be passed to get_sqrt_ratio_at_tick, computed from log base 1.0001 of 2**-128
MIN_TICK = -887272
MAX_TICK = -MIN_TICK

# get_sqrt_ratio_at_tick(MIN_TICK) and get_sqrt_ratio_at_tick(MAX_TICK)
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

_MAX_UINT256 = 2**256 - 1

# (bit of |tick|, 2^128 / sqrt(1.0001)^bit) for bits 1..2^19
_TICK_BIT_FACTORS = (
    (0x2, 0xFFF97272373D413259A46990580E213A),
    (0x4, 0xFFF2E50F5F656932EF12357CF3C7FDCC),
    (0x8, 0xFFE5CACA7E10E4E61C3624EAA0941CD0),
    (0x10, 0xFFCB9843D60F6159C9DB58835C926644),
    (0x20, 0xFF973B41FA98C081472E6896DFB254C0),
    (0x40, 0xFF2EA16466C96A3843EC78B326B52861),
    (0x80, 0xFE5DEE046A99A2A811C461F1969C3053),
    (0x100, 0xFCBE86C7900A88AEDCFFC83B479AA3A4),
    (0x200, 0xF987A7253AC413176F2B074CF7815E54),
    (0x400, 0xF3392B0822B70005940C7A398E4B70F3),
    (0x800, 0xE7159475A2C29B7443B29C7FA6E889D9),
    (0x1000, 0xD097F3BDFD2022B8845AD8F792AA5825),
    (0x2000, 0xA9F746462D870FDF8A65DC1F90E061E5),
    (0x4000, 0x70D869A156D2A1B890BB3DF62BAF32F7),
    (0x8000, 0x31BE135F97D08FD981231505542FCFA6),
    (0x10000, 0x9AA508B5B7A84E1C677DE54F3E99BC9),
    (0x20000, 0x5D6AF8DEDB81196699C329225EE604),
    (0x40000, 0x2216E584F5FA1EA926041BEDFE98),
    (0x80000, 0x48A170391F7DC42444E8FA2),
)

# log2(sqrt(1.0001)) inverse, Q64.64 -> Q128.128 scaling factor
_LOG_SQRT10001_FACTOR = 255738958999603826347141
# Error bounds of the log approximation, Q128.128
_TICK_LOW_ERROR = 3402992956809132418596140100660247210
_TICK_HIGH_ERROR = 291339464771989622907027621153398088495


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """Calculate sqrt(1.0001^tick) * 2^96.

    Args:
        tick: Tick index in [MIN_TICK, MAX_TICK]

    Returns:
        Q64.96 square-root price (fits in 160 bits)

    Raises:
        DomainError: If |tick| > MAX_TICK
    """
    abs_tick = abs(tick)
    if abs_tick > MAX_TICK:
        raise DomainError(f"Tick {tick} outside [{MIN_TICK}, {MAX_TICK}]")

    if abs_tick & 0x1:
        ratio = 0xFFFCB933BD6FAD37AA2D162D1A594001
    else:
        ratio = 0x100000000000000000000000000000000
    for bit, factor in _TICK_BIT_FACTORS:
        if abs_tick & bit:
            ratio = (ratio * factor) >> 128

    if tick > 0:
        ratio = _MAX_UINT256 // ratio

    # Q128.128 -> Q128.96, rounding up so that get_tick_at_sqrt_ratio of the
    # result is consistent
    return (ratio >> 32) + (0 if ratio % (1 << 32) == 0 else 1)


def get_tick_at_sqrt_ratio(sqrt_price_x96: int) -> int:
    """Calculate the greatest tick whose sqrt ratio is <= sqrt_price_x96.

    Args:
        sqrt_price_x96: Q64.96 square-root price in [MIN_SQRT_RATIO, MAX_SQRT_RATIO)

    Returns:
        The tick index

    Raises:
        DomainError: If the price is outside the legal domain
    """
    if not MIN_SQRT_RATIO <= sqrt_price_x96 < MAX_SQRT_RATIO:
        raise DomainError(
            f"Sqrt price {sqrt_price_x96} outside [{MIN_SQRT_RATIO}, {MAX_SQRT_RATIO})"
        )

    ratio = sqrt_price_x96 << 32
    msb = ratio.bit_length() - 1

    # Normalize to a Q1.127 mantissa in [1, 2)
    if msb >= 128:
        r = ratio >> (msb - 127)
    else:
        r = ratio << (127 - msb)

    # Integer part of log2, Q64.64
    log_2 = (msb - 128) << 64

    # Fractional bits by repeated squaring
    for shift in range(63, 49, -1):
        r = (r * r) >> 127
        f = r >> 128
        log_2 |= f << shift
        r >>= f

    log_sqrt10001 = log_2 * _LOG_SQRT10001_FACTOR

    tick_low = (log_sqrt10001 - _TICK_LOW_ERROR) >> 128
    tick_high = (log_sqrt10001 + _TICK_HIGH_ERROR) >> 128

    if tick_low == tick_high:
        return tick_low
    return tick_high if get_sqrt_ratio_at_tick(tick_high) <= sqrt_price_x96 else tick_low
