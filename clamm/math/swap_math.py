"""Result of a swap confined to a single liquidity range."""

from __future__ import annotations

from typing import NamedTuple

from clamm.math.fixed_point import mul_div, mul_div_rounding_up
from clamm.math.sqrt_price_math import (
    get_amount0_delta,
    get_amount1_delta,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)
from clamm.safe_int import S

__all__ = ["FEE_DENOMINATOR", "SwapStepResult", "compute_swap_step"]

# Fees are expressed in hundredths of a basis point (3000 = 0.3%)
FEE_DENOMINATOR = 1_000_000


class SwapStepResult(NamedTuple):
    """Outcome of one swap step."""

    sqrt_price_next_x96: int
    amount_in: int
    amount_out: int
    fee_amount: int


def compute_swap_step(
    sqrt_price_current_x96: int,
    sqrt_price_target_x96: int,
    liquidity: int,
    amount_remaining: int,
    fee_pips: int,
) -> SwapStepResult:
    """Compute how far one range can fill a swap.

    The direction is inferred from the prices: a target at or below the
    current price means token0 is sold for token1.

    amount_in and amount_out are always derived from the price actually
    reached, never from amount_remaining, so both branches agree on the
    amount as a function of price.

    Args:
        sqrt_price_current_x96: Current sqrt price
        sqrt_price_target_x96: Price that cannot be passed (next tick or limit)
        liquidity: Active liquidity, must be non-zero
        amount_remaining: Input still to swap (>= 0), or output still to
            receive as a negative number
        fee_pips: Fee in hundredths of a bip

    Returns:
        SwapStepResult with the reached price, amounts and fee. The fee plus
        amount_in never exceed a positive amount_remaining.
    """
    zero_for_one = sqrt_price_current_x96 >= sqrt_price_target_x96
    exact_in = amount_remaining >= 0
    amount_in = 0
    amount_out = 0

    if exact_in:
        amount_remaining_less_fee = mul_div(
            amount_remaining, FEE_DENOMINATOR - fee_pips, FEE_DENOMINATOR
        )
        if zero_for_one:
            amount_in = get_amount0_delta(
                sqrt_price_target_x96, sqrt_price_current_x96, liquidity, True
            )
        else:
            amount_in = get_amount1_delta(
                sqrt_price_current_x96, sqrt_price_target_x96, liquidity, True
            )
        if amount_remaining_less_fee >= amount_in:
            sqrt_price_next_x96 = sqrt_price_target_x96
        else:
            sqrt_price_next_x96 = get_next_sqrt_price_from_input(
                sqrt_price_current_x96, liquidity, amount_remaining_less_fee, zero_for_one
            )
    else:
        if zero_for_one:
            amount_out = get_amount1_delta(
                sqrt_price_target_x96, sqrt_price_current_x96, liquidity, False
            )
        else:
            amount_out = get_amount0_delta(
                sqrt_price_current_x96, sqrt_price_target_x96, liquidity, False
            )
        if -amount_remaining >= amount_out:
            sqrt_price_next_x96 = sqrt_price_target_x96
        else:
            sqrt_price_next_x96 = get_next_sqrt_price_from_output(
                sqrt_price_current_x96, liquidity, -amount_remaining, zero_for_one
            )

    reached_target = sqrt_price_target_x96 == sqrt_price_next_x96

    if zero_for_one:
        if not (reached_target and exact_in):
            amount_in = get_amount0_delta(
                sqrt_price_next_x96, sqrt_price_current_x96, liquidity, True
            )
        if not (reached_target and not exact_in):
            amount_out = get_amount1_delta(
                sqrt_price_next_x96, sqrt_price_current_x96, liquidity, False
            )
    else:
        if not (reached_target and exact_in):
            amount_in = get_amount1_delta(
                sqrt_price_current_x96, sqrt_price_next_x96, liquidity, True
            )
        if not (reached_target and not exact_in):
            amount_out = get_amount0_delta(
                sqrt_price_current_x96, sqrt_price_next_x96, liquidity, False
            )

    # Never hand out more than was asked for
    if not exact_in and amount_out > -amount_remaining:
        amount_out = -amount_remaining

    if exact_in and not reached_target:
        # Target not reached: the whole remainder is consumed, the excess is fee
        fee_amount = (S(amount_remaining) - amount_in).value
    else:
        fee_amount = mul_div_rounding_up(amount_in, fee_pips, FEE_DENOMINATOR - fee_pips)

    return SwapStepResult(sqrt_price_next_x96, amount_in, amount_out, fee_amount)
