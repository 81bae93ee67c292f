"""Pytest configuration and fixtures."""

import pytest

from clamm.pool import Pool, TokenPayer
from tests.helpers.constants import ALICE, BOB, ROUTER
from tests.helpers.factories import FakeClock, fund, make_pool


@pytest.fixture
def clock() -> FakeClock:
    """Time source shared by a test's pools."""
    return FakeClock()


@pytest.fixture
def pool(clock: FakeClock) -> Pool:
    """Fee-free pool at 5000 token1 per token0, tick spacing 1."""
    return make_pool(clock=clock)


@pytest.fixture
def fee_pool(clock: FakeClock) -> Pool:
    """0.3% pool at 5000 token1 per token0, tick spacing 60."""
    return make_pool(fee=3000, tick_spacing=60, clock=clock)


@pytest.fixture
def payer() -> TokenPayer:
    """Settlement callback pulling from approved accounts."""
    return TokenPayer(ROUTER)


@pytest.fixture
def funded_pool(pool: Pool) -> Pool:
    """The fee-free pool with ALICE and BOB funded and approved."""
    fund(pool, ALICE)
    fund(pool, BOB)
    return pool


@pytest.fixture
def funded_fee_pool(fee_pool: Pool) -> Pool:
    """The 0.3% pool with ALICE and BOB funded and approved."""
    fund(fee_pool, ALICE)
    fund(fee_pool, BOB)
    return fee_pool
