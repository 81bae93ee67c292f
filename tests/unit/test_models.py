"""Tests for pool snapshot models."""

import pytest
from pydantic import ValidationError

from clamm.models import PoolSnapshot, PositionSnapshot, Slot0, TickSnapshot
from clamm.models.types import normalize_address
from tests.helpers import (
    ALICE,
    LIQUIDITY,
    POOL_ADDRESS,
    SQRT_PRICE_5000,
    TICK_5000,
    TICK_LOWER,
    TICK_UPPER,
    TOKEN0,
    TOKEN1,
    mint_position,
)


def make_slot0(**overrides) -> Slot0:
    fields = {
        "sqrt_price_x96": SQRT_PRICE_5000,
        "tick": TICK_5000,
        "observation_index": 0,
        "observation_cardinality": 1,
        "observation_cardinality_next": 1,
        "unlocked": True,
    }
    fields.update(overrides)
    return Slot0(**fields)


class TestSlot0:
    def test_frozen(self):
        slot0 = make_slot0()
        with pytest.raises(ValidationError):
            slot0.tick = 0

    def test_tick_bounds(self):
        make_slot0(tick=-(2**23))
        with pytest.raises(ValidationError):
            make_slot0(tick=2**23)

    def test_price_bounds(self):
        with pytest.raises(ValidationError):
            make_slot0(sqrt_price_x96=2**160)
        with pytest.raises(ValidationError):
            make_slot0(sqrt_price_x96=-1)


class TestTickSnapshot:
    def test_liquidity_net_may_be_negative(self):
        snapshot = TickSnapshot(
            tick=TICK_UPPER,
            liquidity_gross=LIQUIDITY,
            liquidity_net=-LIQUIDITY,
            fee_growth_outside0_x128=0,
            fee_growth_outside1_x128=2**256 - 1,
            initialized=True,
        )
        assert snapshot.liquidity_net == -LIQUIDITY

    def test_gross_must_fit_uint128(self):
        with pytest.raises(ValidationError):
            TickSnapshot(
                tick=0,
                liquidity_gross=2**128,
                liquidity_net=0,
                fee_growth_outside0_x128=0,
                fee_growth_outside1_x128=0,
                initialized=True,
            )


class TestPositionSnapshot:
    def test_owner_must_be_normalized_address(self):
        fields = {
            "tick_lower": TICK_LOWER,
            "tick_upper": TICK_UPPER,
            "liquidity": 0,
            "fee_growth_inside0_last_x128": 0,
            "fee_growth_inside1_last_x128": 0,
            "tokens_owed0": 0,
            "tokens_owed1": 0,
        }
        PositionSnapshot(owner=ALICE, **fields)
        with pytest.raises(ValidationError):
            PositionSnapshot(owner=ALICE.upper(), **fields)
        with pytest.raises(ValidationError):
            PositionSnapshot(owner="alice", **fields)


class TestPoolSnapshot:
    def test_reflects_pool_state(self, funded_pool, payer):
        pool = funded_pool
        mint_position(pool, payer, ALICE, TICK_LOWER, TICK_UPPER, LIQUIDITY)

        snapshot = pool.snapshot()
        assert isinstance(snapshot, PoolSnapshot)
        assert snapshot.address == POOL_ADDRESS
        assert (snapshot.token0, snapshot.token1) == (TOKEN0, TOKEN1)
        assert snapshot.slot0.tick == TICK_5000
        assert snapshot.slot0.unlocked is True
        assert snapshot.liquidity == LIQUIDITY
        assert [t.tick for t in snapshot.ticks] == [TICK_LOWER, TICK_UPPER]
        assert [t.liquidity_net for t in snapshot.ticks] == [LIQUIDITY, -LIQUIDITY]

    def test_detached_from_pool(self, funded_pool, payer):
        pool = funded_pool
        before = pool.snapshot()
        mint_position(pool, payer, ALICE, TICK_LOWER, TICK_UPPER, LIQUIDITY)

        assert before.liquidity == 0
        assert before.ticks == []
        assert pool.snapshot() != before

    def test_serializes(self, pool):
        data = pool.snapshot().model_dump()
        assert data["slot0"]["sqrt_price_x96"] == SQRT_PRICE_5000
        assert data["ticks"] == []


class TestAddressHelpers:
    def test_normalize_adds_prefix_and_lowercases(self):
        assert normalize_address("ABCDEF0000000000000000000000000000000000") == (
            "0xabcdef0000000000000000000000000000000000"
        )

    def test_normalize_keeps_prefixed_address(self):
        assert normalize_address(TOKEN0) == TOKEN0
