"""Token amounts between square-root prices, and prices reached after a trade.

Liquidity math is linear in sqrt(price):
    amount0 = L * (sqrt_b - sqrt_a) / (sqrt_a * sqrt_b)
    amount1 = L * (sqrt_b - sqrt_a)

Rounding rule: whatever a trader pays into the pool is rounded up, whatever
the pool pays out is rounded down, so the pool can never end up net short.
"""

from __future__ import annotations

from clamm.errors import DomainError, NotEnoughLiquidity
from clamm.math.fixed_point import (
    Q96,
    RESOLUTION_96,
    div_rounding_up,
    mul_div,
    mul_div_rounding_up,
)
from clamm.safe_int import UINT256_MAX, S

__all__ = [
    "get_next_sqrt_price_from_amount0_rounding_up",
    "get_next_sqrt_price_from_amount1_rounding_down",
    "get_next_sqrt_price_from_input",
    "get_next_sqrt_price_from_output",
    "get_amount0_delta",
    "get_amount1_delta",
    "get_amount0_delta_signed",
    "get_amount1_delta_signed",
]


def get_next_sqrt_price_from_amount0_rounding_up(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool,
) -> int:
    """Next sqrt price after adding or removing `amount` of token0.

    Rounds up so the price moves less than exact when token0 is added and
    more than exact when it is removed, both in the pool's favour.

    Precise formula: L * sqrtP / (L + amount * sqrtP)
    Fallback when amount * sqrtP overflows 256 bits: L / (L / sqrtP + amount)

    Args:
        sqrt_price_x96: Starting Q64.96 sqrt price
        liquidity: Usable liquidity
        amount: Token0 amount to add or remove
        add: True when token0 flows into the pool

    Returns:
        The next Q64.96 sqrt price

    Raises:
        NotEnoughLiquidity: If removing more token0 than the virtual reserves hold
        Overflow: If the fallback denominator overflows
    """
    if amount == 0:
        return sqrt_price_x96
    numerator1 = liquidity << RESOLUTION_96
    product = amount * sqrt_price_x96

    if add:
        if product <= UINT256_MAX:
            denominator = numerator1 + product
            if denominator <= UINT256_MAX:
                return mul_div_rounding_up(numerator1, sqrt_price_x96, denominator)
        denominator = (S(numerator1 // sqrt_price_x96) + amount).to_uint256()
        return div_rounding_up(numerator1, denominator)

    if product > UINT256_MAX or numerator1 <= product:
        raise NotEnoughLiquidity(
            f"Removing {amount} token0 exceeds reserves at sqrt price {sqrt_price_x96}"
        )
    denominator = numerator1 - product
    return S(mul_div_rounding_up(numerator1, sqrt_price_x96, denominator)).to_uint160()


def get_next_sqrt_price_from_amount1_rounding_down(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool,
) -> int:
    """Next sqrt price after adding or removing `amount` of token1.

    Formula: sqrtP +/- amount / L, rounded down in both directions.
    """
    if add:
        quotient = mul_div(amount, Q96, liquidity)
        return (S(sqrt_price_x96) + quotient).to_uint160()

    quotient = mul_div_rounding_up(amount, Q96, liquidity)
    if sqrt_price_x96 <= quotient:
        raise NotEnoughLiquidity(
            f"Removing {amount} token1 exceeds reserves at sqrt price {sqrt_price_x96}"
        )
    return sqrt_price_x96 - quotient


def _check_price_and_liquidity(sqrt_price_x96: int, liquidity: int) -> None:
    if sqrt_price_x96 <= 0:
        raise DomainError("Sqrt price must be positive")
    if liquidity <= 0:
        raise DomainError("Liquidity must be positive")


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int,
    liquidity: int,
    amount_in: int,
    zero_for_one: bool,
) -> int:
    """Next sqrt price after a trader pays `amount_in` into the pool.

    Rounds so the target price is never overshot.

    Args:
        sqrt_price_x96: Starting sqrt price
        liquidity: Usable liquidity
        amount_in: Amount of the input token
        zero_for_one: True when token0 is the input (price moves down)

    Raises:
        DomainError: If price or liquidity is zero
    """
    _check_price_and_liquidity(sqrt_price_x96, liquidity)
    if zero_for_one:
        return get_next_sqrt_price_from_amount0_rounding_up(
            sqrt_price_x96, liquidity, amount_in, True
        )
    return get_next_sqrt_price_from_amount1_rounding_down(
        sqrt_price_x96, liquidity, amount_in, True
    )


def get_next_sqrt_price_from_output(
    sqrt_price_x96: int,
    liquidity: int,
    amount_out: int,
    zero_for_one: bool,
) -> int:
    """Next sqrt price after the pool pays `amount_out` to a trader.

    Rounds so the target price is always passed.
    """
    _check_price_and_liquidity(sqrt_price_x96, liquidity)
    if zero_for_one:
        return get_next_sqrt_price_from_amount1_rounding_down(
            sqrt_price_x96, liquidity, amount_out, False
        )
    return get_next_sqrt_price_from_amount0_rounding_up(
        sqrt_price_x96, liquidity, amount_out, False
    )


def get_amount0_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool,
) -> int:
    """Amount of token0 between two prices: L * 2^96 * (b - a) / (a * b).

    The prices may be passed in either order.

    Raises:
        DomainError: If the lower price is zero
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_a_x96 <= 0:
        raise DomainError("Sqrt price must be positive")

    numerator1 = liquidity << RESOLUTION_96
    numerator2 = sqrt_ratio_b_x96 - sqrt_ratio_a_x96

    if round_up:
        return div_rounding_up(
            mul_div_rounding_up(numerator1, numerator2, sqrt_ratio_b_x96),
            sqrt_ratio_a_x96,
        )
    return mul_div(numerator1, numerator2, sqrt_ratio_b_x96) // sqrt_ratio_a_x96


def get_amount1_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool,
) -> int:
    """Amount of token1 between two prices: L * (b - a) / 2^96."""
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)
    return mul_div(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)


def get_amount0_delta_signed(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int) -> int:
    """Signed token0 delta for a signed liquidity change.

    Adding liquidity (positive) rounds up what the provider owes; removing
    liquidity (negative) returns a negated, rounded-down amount.
    """
    if liquidity < 0:
        return -get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity, False)
    return get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, True)


def get_amount1_delta_signed(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, liquidity: int) -> int:
    """Signed token1 delta for a signed liquidity change."""
    if liquidity < 0:
        return -get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity, False)
    return get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, True)
