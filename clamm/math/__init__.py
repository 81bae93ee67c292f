"""Fixed-point math for concentrated-liquidity pools.

This package provides the numeric primitives the pool is built on:
- fixed_point: Q96/Q128 constants and rounding-aware mul-div
- tick_math: tick <-> sqrt price conversion
- sqrt_price_math: token amounts between prices, next price after a trade
- swap_math: a single swap step within one liquidity range
"""

from clamm.math.fixed_point import (
    Q96,
    Q128,
    add_delta,
    div_rounding_up,
    mul_div,
    mul_div_rounding_up,
)
from clamm.math.sqrt_price_math import (
    get_amount0_delta,
    get_amount0_delta_signed,
    get_amount1_delta,
    get_amount1_delta_signed,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)
from clamm.math.swap_math import FEE_DENOMINATOR, SwapStepResult, compute_swap_step
from clamm.math.tick_math import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
)

__all__ = [
    # Fixed point
    "Q96",
    "Q128",
    "mul_div",
    "mul_div_rounding_up",
    "div_rounding_up",
    "add_delta",
    # Tick math
    "MIN_TICK",
    "MAX_TICK",
    "MIN_SQRT_RATIO",
    "MAX_SQRT_RATIO",
    "get_sqrt_ratio_at_tick",
    "get_tick_at_sqrt_ratio",
    # Sqrt price math
    "get_amount0_delta",
    "get_amount1_delta",
    "get_amount0_delta_signed",
    "get_amount1_delta_signed",
    "get_next_sqrt_price_from_input",
    "get_next_sqrt_price_from_output",
    # Swap math
    "FEE_DENOMINATOR",
    "SwapStepResult",
    "compute_swap_step",
]
