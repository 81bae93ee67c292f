"""Liquidity positions and the fees they have earned.

A position is identified by (owner, tick_lower, tick_upper). Fees are not
tracked per trade; instead each position remembers the fee growth inside its
range at its last update and is credited L * (growth_now - growth_then)
whenever it is touched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

from clamm.errors import ZeroLiquidity
from clamm.math.fixed_point import Q128, add_delta, mul_div
from clamm.safe_int import S

__all__ = ["PositionKey", "PositionInfo", "PositionLedger"]


class PositionKey(NamedTuple):
    """Immutable identity of a position."""

    owner: str
    tick_lower: int
    tick_upper: int


@dataclass
class PositionInfo:
    """State stored for one position."""

    liquidity: int = 0
    fee_growth_inside0_last_x128: int = 0
    fee_growth_inside1_last_x128: int = 0
    # Fees plus burned principal awaiting collect()
    tokens_owed0: int = 0
    tokens_owed1: int = 0

    def update(
        self,
        liquidity_delta: int,
        fee_growth_inside0_x128: int,
        fee_growth_inside1_x128: int,
    ) -> None:
        """Credit accrued fees and apply a liquidity change.

        Args:
            liquidity_delta: Signed liquidity change (0 only accrues fees)
            fee_growth_inside0_x128: Current token0 fee growth inside the range
            fee_growth_inside1_x128: Current token1 fee growth inside the range

        Raises:
            ZeroLiquidity: If poking a position that holds no liquidity
            Overflow: If liquidity would go negative or exceed uint128
        """
        if liquidity_delta == 0:
            if self.liquidity == 0:
                raise ZeroLiquidity("Cannot poke a position with no liquidity")
            liquidity_next = self.liquidity
        else:
            liquidity_next = add_delta(self.liquidity, liquidity_delta)

        # Growth differences wrap modulo 2^256 like the accumulators themselves
        tokens_owed0 = mul_div(
            S(fee_growth_inside0_x128).wrapping_sub(self.fee_growth_inside0_last_x128).value,
            self.liquidity,
            Q128,
        )
        tokens_owed1 = mul_div(
            S(fee_growth_inside1_x128).wrapping_sub(self.fee_growth_inside1_last_x128).value,
            self.liquidity,
            Q128,
        )

        if liquidity_delta != 0:
            self.liquidity = liquidity_next
        self.fee_growth_inside0_last_x128 = fee_growth_inside0_x128
        self.fee_growth_inside1_last_x128 = fee_growth_inside1_x128
        if tokens_owed0 > 0 or tokens_owed1 > 0:
            self.tokens_owed0 += tokens_owed0
            self.tokens_owed1 += tokens_owed1


class PositionLedger:
    """Positions keyed by owner and tick range."""

    def __init__(self) -> None:
        self._positions: dict[PositionKey, PositionInfo] = {}

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, key: PositionKey) -> bool:
        return key in self._positions

    def get(self, owner: str, tick_lower: int, tick_upper: int) -> PositionInfo:
        """Return the position, creating an empty one if it does not exist."""
        key = PositionKey(owner, tick_lower, tick_upper)
        info = self._positions.get(key)
        if info is None:
            info = PositionInfo()
            self._positions[key] = info
        return info

    def find(self, owner: str, tick_lower: int, tick_upper: int) -> PositionInfo | None:
        """Return the position without creating it."""
        return self._positions.get(PositionKey(owner, tick_lower, tick_upper))

    def keys(self) -> list[PositionKey]:
        return list(self._positions)
