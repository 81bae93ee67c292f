"""Tests for tick <-> sqrt price conversion."""

import pytest

from clamm.errors import DomainError
from clamm.math.fixed_point import Q96
from clamm.math.tick_math import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
)
from tests.helpers import SQRT_PRICE_5000, TICK_5000, TICK_LOWER, TICK_UPPER


class TestGetSqrtRatioAtTick:
    """Tests for get_sqrt_ratio_at_tick."""

    def test_tick_zero_is_price_one(self):
        assert get_sqrt_ratio_at_tick(0) == Q96

    def test_domain_bounds(self):
        assert get_sqrt_ratio_at_tick(MIN_TICK) == MIN_SQRT_RATIO
        assert get_sqrt_ratio_at_tick(MAX_TICK) == MAX_SQRT_RATIO

    @pytest.mark.parametrize(
        "tick,expected",
        [
            (1, 79232123823359799118286999568),
            (-1, 79224201403219477170569942574),
            (60, 79466191966197645195421774833),
            (-60, 78990846045029531151608375686),
            (TICK_LOWER, 5341283623238412454227108479223),
            (TICK_UPPER, 5875617940067453351001625213169),
        ],
    )
    def test_known_values(self, tick, expected):
        assert get_sqrt_ratio_at_tick(tick) == expected

    def test_out_of_domain_raises(self):
        with pytest.raises(DomainError):
            get_sqrt_ratio_at_tick(MAX_TICK + 1)
        with pytest.raises(DomainError):
            get_sqrt_ratio_at_tick(MIN_TICK - 1)

    def test_strictly_increasing(self):
        ticks = [MIN_TICK, -500000, -1000, -1, 0, 1, 1000, 500000, MAX_TICK]
        prices = [get_sqrt_ratio_at_tick(t) for t in ticks]
        assert prices == sorted(prices)
        assert len(set(prices)) == len(prices)


class TestGetTickAtSqrtRatio:
    """Tests for get_tick_at_sqrt_ratio."""

    def test_domain_bounds(self):
        assert get_tick_at_sqrt_ratio(MIN_SQRT_RATIO) == MIN_TICK
        assert get_tick_at_sqrt_ratio(MAX_SQRT_RATIO - 1) == MAX_TICK - 1

    def test_scenario_price(self):
        assert get_tick_at_sqrt_ratio(SQRT_PRICE_5000) == TICK_5000

    def test_out_of_domain_raises(self):
        with pytest.raises(DomainError):
            get_tick_at_sqrt_ratio(MIN_SQRT_RATIO - 1)
        with pytest.raises(DomainError):
            get_tick_at_sqrt_ratio(MAX_SQRT_RATIO)

    @pytest.mark.parametrize(
        "tick", [MIN_TICK, -887000, -85176, -60, -1, 0, 1, 60, 85176, 887000, MAX_TICK - 1]
    )
    def test_round_trip(self, tick):
        """The tick of a tick's own price is that tick."""
        assert get_tick_at_sqrt_ratio(get_sqrt_ratio_at_tick(tick)) == tick

    @pytest.mark.parametrize("tick", [-100000, -1, 0, 1, 85176])
    def test_one_below_tick_price_is_previous_tick(self, tick):
        """The returned tick is the greatest tick whose price is <= the input."""
        assert get_tick_at_sqrt_ratio(get_sqrt_ratio_at_tick(tick) - 1) == tick - 1

    def test_between_ticks_rounds_down(self):
        lower = get_sqrt_ratio_at_tick(85184)
        upper = get_sqrt_ratio_at_tick(85185)
        assert get_tick_at_sqrt_ratio((lower + upper) // 2) == 85184
