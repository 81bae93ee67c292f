"""Per-tick liquidity and fee-growth accounting.

Each initialized tick records:
- liquidity_gross: total liquidity of positions using the tick as a boundary
- liquidity_net: change in active liquidity when the price crosses the tick
  moving up (positions' lower ticks add, upper ticks subtract)
- fee_growth_outside{0,1}: fee growth per unit of liquidity on the side of
  the tick away from the current price

fee_growth_outside is relative: only differences between ticks are
meaningful. Seeding it with the global value for ticks at or below the
current price assumes all fees so far were earned below the tick.
"""

from __future__ import annotations

from dataclasses import dataclass

from clamm.errors import Overflow
from clamm.math.fixed_point import add_delta
from clamm.math.tick_math import MAX_TICK, MIN_TICK
from clamm.safe_int import UINT128_MAX, S

__all__ = ["TickInfo", "TickLedger", "tick_spacing_to_max_liquidity_per_tick"]


@dataclass
class TickInfo:
    """State stored for one tick."""

    liquidity_gross: int = 0
    liquidity_net: int = 0
    fee_growth_outside0_x128: int = 0
    fee_growth_outside1_x128: int = 0
    initialized: bool = False


def tick_spacing_to_max_liquidity_per_tick(tick_spacing: int) -> int:
    """Maximum gross liquidity per tick such that the sum over every usable
    tick still fits in uint128.

    Args:
        tick_spacing: Required tick separation (e.g. 60)

    Returns:
        Max liquidity per tick
    """
    # Round the domain edges toward zero onto the spacing grid
    min_tick = -(-MIN_TICK // tick_spacing) * tick_spacing
    max_tick = (MAX_TICK // tick_spacing) * tick_spacing
    num_ticks = (max_tick - min_tick) // tick_spacing + 1
    return UINT128_MAX // num_ticks


class TickLedger:
    """Sparse mapping from tick index to TickInfo.

    Only ticks that some position uses as a boundary are stored.
    """

    def __init__(self, max_liquidity_per_tick: int = UINT128_MAX) -> None:
        self.max_liquidity_per_tick = max_liquidity_per_tick
        self._ticks: dict[int, TickInfo] = {}

    def __contains__(self, tick: int) -> bool:
        return tick in self._ticks

    def __len__(self) -> int:
        return len(self._ticks)

    def get(self, tick: int) -> TickInfo | None:
        """Stored info for a tick, or None if the tick is not initialized."""
        return self._ticks.get(tick)

    def initialized_ticks(self) -> list[int]:
        """All initialized ticks in ascending order."""
        return sorted(self._ticks)

    def update(
        self,
        tick: int,
        tick_current: int,
        liquidity_delta: int,
        fee_growth_global0_x128: int,
        fee_growth_global1_x128: int,
        upper: bool,
    ) -> bool:
        """Apply a liquidity change to a tick.

        Args:
            tick: Tick being updated
            tick_current: Pool's current tick
            liquidity_delta: Signed liquidity change of the position
            fee_growth_global0_x128: Global token0 fee growth
            fee_growth_global1_x128: Global token1 fee growth
            upper: True if the tick is the position's upper boundary

        Returns:
            True if the tick flipped between initialized and uninitialized

        Raises:
            Overflow: If gross liquidity would go negative or above the cap
        """
        info = self._ticks.get(tick)
        if info is None:
            info = TickInfo()

        liquidity_gross_before = info.liquidity_gross
        liquidity_gross_after = add_delta(liquidity_gross_before, liquidity_delta)
        if liquidity_gross_after > self.max_liquidity_per_tick:
            raise Overflow(
                f"Tick {tick} liquidity {liquidity_gross_after} exceeds "
                f"max {self.max_liquidity_per_tick}"
            )

        flipped = (liquidity_gross_after == 0) != (liquidity_gross_before == 0)

        if liquidity_gross_before == 0:
            if tick <= tick_current:
                info.fee_growth_outside0_x128 = fee_growth_global0_x128
                info.fee_growth_outside1_x128 = fee_growth_global1_x128
            info.initialized = True

        info.liquidity_gross = liquidity_gross_after
        # Upper ticks subtract: crossing one upward leaves the position's range
        net_delta = -liquidity_delta if upper else liquidity_delta
        info.liquidity_net = (S(info.liquidity_net) + net_delta).to_int128()

        self._ticks[tick] = info
        return flipped

    def clear(self, tick: int) -> None:
        """Delete a tick whose gross liquidity has returned to zero."""
        self._ticks.pop(tick, None)

    def cross(
        self,
        tick: int,
        fee_growth_global0_x128: int,
        fee_growth_global1_x128: int,
    ) -> int:
        """Transition to the other side of a tick during a swap.

        Returns:
            liquidity_net of the tick; the caller negates it when moving down
        """
        info = self._ticks[tick]
        info.fee_growth_outside0_x128 = (
            S(fee_growth_global0_x128).wrapping_sub(info.fee_growth_outside0_x128).value
        )
        info.fee_growth_outside1_x128 = (
            S(fee_growth_global1_x128).wrapping_sub(info.fee_growth_outside1_x128).value
        )
        return info.liquidity_net

    def get_fee_growth_inside(
        self,
        tick_lower: int,
        tick_upper: int,
        tick_current: int,
        fee_growth_global0_x128: int,
        fee_growth_global1_x128: int,
    ) -> tuple[int, int]:
        """Fee growth per unit of liquidity inside [tick_lower, tick_upper).

        inside = global - below(lower) - above(upper), modulo 2^256.

        Returns:
            (fee_growth_inside0_x128, fee_growth_inside1_x128)
        """
        lower = self._ticks.get(tick_lower) or TickInfo()
        upper = self._ticks.get(tick_upper) or TickInfo()

        if tick_current >= tick_lower:
            below0 = lower.fee_growth_outside0_x128
            below1 = lower.fee_growth_outside1_x128
        else:
            below0 = S(fee_growth_global0_x128).wrapping_sub(lower.fee_growth_outside0_x128).value
            below1 = S(fee_growth_global1_x128).wrapping_sub(lower.fee_growth_outside1_x128).value

        if tick_current < tick_upper:
            above0 = upper.fee_growth_outside0_x128
            above1 = upper.fee_growth_outside1_x128
        else:
            above0 = S(fee_growth_global0_x128).wrapping_sub(upper.fee_growth_outside0_x128).value
            above1 = S(fee_growth_global1_x128).wrapping_sub(upper.fee_growth_outside1_x128).value

        inside0 = S(fee_growth_global0_x128).wrapping_sub(below0).wrapping_sub(above0).value
        inside1 = S(fee_growth_global1_x128).wrapping_sub(below1).wrapping_sub(above1).value
        return inside0, inside1
