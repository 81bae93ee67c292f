"""Pydantic models for pool state snapshots."""

from clamm.models.state import (
    PoolSnapshot,
    PositionSnapshot,
    Slot0,
    TickSnapshot,
)
from clamm.models.types import (
    Address,
    Int24,
    Int128,
    Uint128,
    Uint160,
    Uint256,
    normalize_address,
)

__all__ = [
    # State snapshots
    "Slot0",
    "TickSnapshot",
    "PositionSnapshot",
    "PoolSnapshot",
    # Types
    "Address",
    "Int24",
    "Int128",
    "Uint128",
    "Uint160",
    "Uint256",
    "normalize_address",
]
