"""Factory functions for creating test objects.

Usage:
    from tests.helpers import make_pool, mint_position
    # or
    from tests.helpers.factories import make_pool, mint_position

    pool = make_pool()
    mint_position(pool, payer, ALICE, TICK_LOWER, TICK_UPPER, LIQUIDITY)
"""

from clamm.math.tick_math import MAX_SQRT_RATIO, MIN_SQRT_RATIO
from clamm.pool import InMemoryToken, Pool, TokenPayer, encode_callback_data
from tests.helpers.constants import (
    FUNDING,
    POOL_ADDRESS,
    ROUTER,
    SQRT_PRICE_5000,
    TOKEN0,
    TOKEN1,
)


class FakeClock:
    """Manually advanced time source for pools."""

    def __init__(self, start: int = 1_700_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


def make_tokens() -> tuple[InMemoryToken, InMemoryToken]:
    """Create the token0/token1 pair used by most tests."""
    return InMemoryToken(TOKEN0, symbol="ETH"), InMemoryToken(TOKEN1, symbol="USDC")


def make_pool(
    fee: int = 0,
    tick_spacing: int = 1,
    sqrt_price_x96: int | None = SQRT_PRICE_5000,
    clock: FakeClock | None = None,
    tokens: tuple[InMemoryToken, InMemoryToken] | None = None,
    address: str = POOL_ADDRESS,
) -> Pool:
    """Create a pool, initialized at sqrt_price_x96 unless it is None.

    Args:
        fee: Fee in hundredths of a bip (default: 0, no fee)
        tick_spacing: Tick spacing (default: 1)
        sqrt_price_x96: Initial price (default: 5000 token1 per token0)
        clock: Time source (default: a fresh FakeClock)
        tokens: (token0, token1) (default: make_tokens())
        address: Pool address (default: POOL_ADDRESS)
    """
    token0, token1 = tokens or make_tokens()
    pool = Pool(
        address=address,
        token0=token0,
        token1=token1,
        fee=fee,
        tick_spacing=tick_spacing,
        clock=clock or FakeClock(),
    )
    if sqrt_price_x96 is not None:
        pool.initialize(sqrt_price_x96)
    return pool


def fund(pool: Pool, holder: str, amount: int = FUNDING, spender: str = ROUTER) -> None:
    """Mint both pool tokens to holder and approve spender for all of it."""
    for token in (pool.token0, pool.token1):
        token.mint(holder, amount)
        token.approve(holder, spender, amount)


def payload_for(pool: Pool, payer: str) -> bytes:
    """Callback payload telling TokenPayer to pull from payer."""
    return encode_callback_data(pool.token0.address, pool.token1.address, payer)


def mint_position(
    pool: Pool,
    payer: TokenPayer,
    owner: str,
    tick_lower: int,
    tick_upper: int,
    liquidity: int,
) -> tuple[int, int]:
    """Mint liquidity for owner, paid from owner's own balances."""
    return pool.mint(
        owner, tick_lower, tick_upper, liquidity, payer, payload_for(pool, owner)
    )


def swap(
    pool: Pool,
    payer: TokenPayer,
    trader: str,
    zero_for_one: bool,
    amount_specified: int,
    sqrt_price_limit_x96: int | None = None,
) -> tuple[int, int]:
    """Swap for trader, paid from and delivered to trader.

    Without a limit the swap may move the price anywhere in the domain.
    """
    if sqrt_price_limit_x96 is None:
        sqrt_price_limit_x96 = MIN_SQRT_RATIO + 1 if zero_for_one else MAX_SQRT_RATIO - 1
    return pool.swap(
        trader,
        zero_for_one,
        amount_specified,
        sqrt_price_limit_x96,
        payer,
        payload_for(pool, trader),
    )
