"""Read-only snapshots of pool state.

Pool queries return these models rather than references to live state, so a
caller can hold, compare or serialize them without touching the pool.
"""

from pydantic import BaseModel, ConfigDict, Field

from clamm.models.types import Address, Int24, Int128, Uint128, Uint160, Uint256


class Slot0(BaseModel):
    """Current price and oracle pointers."""

    model_config = ConfigDict(frozen=True)

    sqrt_price_x96: Uint160
    tick: Int24
    observation_index: int = Field(ge=0)
    observation_cardinality: int = Field(ge=0)
    observation_cardinality_next: int = Field(ge=0)
    unlocked: bool


class TickSnapshot(BaseModel):
    """State of one initialized tick."""

    model_config = ConfigDict(frozen=True)

    tick: Int24
    liquidity_gross: Uint128
    liquidity_net: Int128
    fee_growth_outside0_x128: Uint256
    fee_growth_outside1_x128: Uint256
    initialized: bool


class PositionSnapshot(BaseModel):
    """State of one position."""

    model_config = ConfigDict(frozen=True)

    owner: Address
    tick_lower: Int24
    tick_upper: Int24
    liquidity: Uint128
    fee_growth_inside0_last_x128: Uint256
    fee_growth_inside1_last_x128: Uint256
    tokens_owed0: int = Field(ge=0)
    tokens_owed1: int = Field(ge=0)


class PoolSnapshot(BaseModel):
    """Full pool state at a point in time."""

    model_config = ConfigDict(frozen=True)

    address: Address
    token0: Address
    token1: Address
    fee: int = Field(ge=0, lt=1_000_000)
    tick_spacing: int = Field(gt=0)
    max_liquidity_per_tick: Uint128
    slot0: Slot0
    liquidity: Uint128
    fee_growth_global0_x128: Uint256
    fee_growth_global1_x128: Uint256
    ticks: list[TickSnapshot] = Field(default_factory=list)
