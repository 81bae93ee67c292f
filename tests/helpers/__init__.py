"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Account addresses and the 5000 token1/token0 price scenario
- factories: Pool, token and settlement helpers
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    FUNDING,
    LIQUIDITY,
    MINT_AMOUNT0,
    MINT_AMOUNT1,
    OTHER_POOL_ADDRESS,
    POOL_ADDRESS,
    ROUTER,
    SQRT_PRICE_5000,
    TICK_5000,
    TICK_LOWER,
    TICK_UPPER,
    TOKEN0,
    TOKEN1,
    TOKEN2,
)
from tests.helpers.factories import (
    FakeClock,
    fund,
    make_pool,
    make_tokens,
    mint_position,
    payload_for,
    swap,
)

__all__ = [
    # Constants
    "ALICE",
    "BOB",
    "FUNDING",
    "POOL_ADDRESS",
    "OTHER_POOL_ADDRESS",
    "ROUTER",
    "TOKEN0",
    "TOKEN1",
    "TOKEN2",
    "SQRT_PRICE_5000",
    "TICK_5000",
    "TICK_LOWER",
    "TICK_UPPER",
    "LIQUIDITY",
    "MINT_AMOUNT0",
    "MINT_AMOUNT1",
    # Factories
    "FakeClock",
    "make_tokens",
    "make_pool",
    "fund",
    "payload_for",
    "mint_position",
    "swap",
]
