"""Tick-accumulator oracle stored in a growable ring buffer.

The pool writes at most one observation per timestamp, only when a swap moves
the tick. Each observation stores the running sum tick * seconds, so the
time-weighted average tick between two moments is the difference of their
cumulatives divided by the elapsed seconds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import structlog

from clamm.errors import OracleError

__all__ = ["Observation", "PriceOracle", "Oracle"]

logger = structlog.get_logger()

# Placeholder timestamp for pre-allocated slots, so they are not confused with empty ones
_RESERVED_TIMESTAMP = 1


@dataclass(frozen=True)
class Observation:
    block_timestamp: int = 0
    tick_cumulative: int = 0
    initialized: bool = False


def _transform(last: Observation, block_timestamp: int, tick: int) -> Observation:
    """Extrapolate an observation forward to a later timestamp."""
    delta = block_timestamp - last.block_timestamp
    return Observation(
        block_timestamp=block_timestamp,
        tick_cumulative=last.tick_cumulative + tick * delta,
        initialized=True,
    )


def _div_trunc(a: int, b: int) -> int:
    """Signed division rounding toward zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


class PriceOracle(Protocol):
    """Collaborator contract the pool writes tick observations to."""

    def initialize(self, block_timestamp: int) -> tuple[int, int]: ...

    def write(
        self,
        index: int,
        block_timestamp: int,
        tick: int,
        cardinality: int,
        cardinality_next: int,
    ) -> tuple[int, int]: ...

    def grow(self, current: int, next_: int) -> int: ...

    def observe(
        self,
        block_timestamp: int,
        seconds_agos: list[int],
        tick: int,
        index: int,
        cardinality: int,
    ) -> list[int]: ...


class Oracle:
    """In-memory observation ring buffer."""

    def __init__(self) -> None:
        self.observations: list[Observation] = []

    def _slot(self, index: int) -> Observation:
        if index < len(self.observations):
            return self.observations[index]
        return Observation()

    def _store(self, index: int, observation: Observation) -> None:
        while len(self.observations) <= index:
            self.observations.append(Observation())
        self.observations[index] = observation

    def initialize(self, block_timestamp: int) -> tuple[int, int]:
        """Write the first observation.

        Returns:
            (cardinality, cardinality_next), both 1
        """
        self._store(0, Observation(block_timestamp=block_timestamp, initialized=True))
        return 1, 1

    def write(
        self,
        index: int,
        block_timestamp: int,
        tick: int,
        cardinality: int,
        cardinality_next: int,
    ) -> tuple[int, int]:
        """Append an observation, growing into reserved slots when at the end.

        Args:
            index: Index of the most recent observation
            block_timestamp: Time of the new observation
            tick: Active tick since the previous observation
            cardinality: Number of populated slots
            cardinality_next: Number of slots the buffer may grow to

        Returns:
            (index_updated, cardinality_updated)
        """
        last = self._slot(index)
        if last.block_timestamp == block_timestamp:
            return index, cardinality

        if cardinality_next > cardinality and index == cardinality - 1:
            cardinality_updated = cardinality_next
        else:
            cardinality_updated = cardinality

        index_updated = (index + 1) % cardinality_updated
        self._store(index_updated, _transform(last, block_timestamp, tick))
        return index_updated, cardinality_updated

    def grow(self, current: int, next_: int) -> int:
        """Reserve slots up to `next_`; takes effect once the ring wraps.

        Raises:
            OracleError: If the buffer was never initialized
        """
        if current <= 0:
            raise OracleError("Oracle is not initialized")
        if next_ <= current:
            return current
        for i in range(current, next_):
            self._store(i, Observation(block_timestamp=_RESERVED_TIMESTAMP))
        logger.debug("oracle_grow", current=current, next=next_)
        return next_

    def _binary_search(
        self,
        target: int,
        index: int,
        cardinality: int,
    ) -> tuple[Observation, Observation]:
        left = (index + 1) % cardinality
        right = left + cardinality - 1
        while True:
            i = (left + right) // 2
            before_or_at = self._slot(i % cardinality)
            if not before_or_at.initialized:
                left = i + 1
                continue
            at_or_after = self._slot((i + 1) % cardinality)
            target_at_or_after = before_or_at.block_timestamp <= target
            if target_at_or_after and target <= at_or_after.block_timestamp:
                return before_or_at, at_or_after
            if not target_at_or_after:
                right = i - 1
            else:
                left = i + 1

    def _surrounding_observations(
        self,
        block_timestamp: int,
        target: int,
        tick: int,
        index: int,
        cardinality: int,
    ) -> tuple[Observation, Observation]:
        before_or_at = self._slot(index)
        if before_or_at.block_timestamp <= target:
            if before_or_at.block_timestamp == target:
                return before_or_at, before_or_at
            return before_or_at, _transform(before_or_at, target, tick)

        oldest = self._slot((index + 1) % cardinality)
        if not oldest.initialized:
            oldest = self._slot(0)
        if not oldest.block_timestamp <= target:
            raise OracleError(
                f"Target {target} is older than oldest observation {oldest.block_timestamp}"
            )
        return self._binary_search(target, index, cardinality)

    def observe_single(
        self,
        block_timestamp: int,
        seconds_ago: int,
        tick: int,
        index: int,
        cardinality: int,
    ) -> int:
        """Tick cumulative `seconds_ago` before `block_timestamp`."""
        if seconds_ago == 0:
            last = self._slot(index)
            if last.block_timestamp != block_timestamp:
                last = _transform(last, block_timestamp, tick)
            return last.tick_cumulative

        target = block_timestamp - seconds_ago
        before_or_at, at_or_after = self._surrounding_observations(
            block_timestamp, target, tick, index, cardinality
        )

        if target == before_or_at.block_timestamp:
            return before_or_at.tick_cumulative
        if target == at_or_after.block_timestamp:
            return at_or_after.tick_cumulative

        # Linear interpolation between the surrounding observations
        observation_time_delta = at_or_after.block_timestamp - before_or_at.block_timestamp
        target_delta = target - before_or_at.block_timestamp
        return (
            before_or_at.tick_cumulative
            + _div_trunc(
                at_or_after.tick_cumulative - before_or_at.tick_cumulative,
                observation_time_delta,
            )
            * target_delta
        )

    def observe(
        self,
        block_timestamp: int,
        seconds_agos: list[int],
        tick: int,
        index: int,
        cardinality: int,
    ) -> list[int]:
        """Tick cumulatives for each of `seconds_agos`.

        Raises:
            OracleError: If the oracle is empty or a target predates the oldest observation
        """
        if cardinality <= 0:
            raise OracleError("Oracle is not initialized")
        return [
            self.observe_single(block_timestamp, seconds_ago, tick, index, cardinality)
            for seconds_ago in seconds_agos
        ]
