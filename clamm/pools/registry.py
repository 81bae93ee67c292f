"""Pool registry.

Owns every pool created by the engine, keyed by (token0, token1, fee) so a
token pair can have one pool per enabled fee tier. Pools never reference each
other; anything spanning pools goes through the registry.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable, Iterator
from typing import NamedTuple

import structlog
from eth_abi import encode  # type: ignore[attr-defined]

from clamm.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from clamm.models.types import normalize_address
from clamm.pool.pool import Pool
from clamm.pool.token import Token

__all__ = ["PoolKey", "PoolRegistry", "compute_pool_address", "sort_tokens"]

logger = structlog.get_logger()


class PoolKey(NamedTuple):
    token0: str
    token1: str
    fee: int


def sort_tokens(token_a: str, token_b: str) -> tuple[str, str]:
    """Order two token addresses the way pools store them (token0 < token1).

    Raises:
        ValueError: If both addresses are the same token
    """
    a = normalize_address(token_a)
    b = normalize_address(token_b)
    if a == b:
        raise ValueError(f"Pool tokens must differ, got {a} twice")
    return (a, b) if int(a, 16) < int(b, 16) else (b, a)


def compute_pool_address(token0: str, token1: str, fee: int) -> str:
    """Deterministic pool address derived from its key.

    The last 20 bytes of sha256(abi.encode(token0, token1, fee)), so the same
    key always maps to the same holder identity in the token ledgers.
    """
    digest = hashlib.sha256(encode(["address", "address", "uint24"], [token0, token1, fee])).digest()
    return "0x" + digest[-20:].hex()


class PoolRegistry:
    """Creates pools and looks them up by token pair and fee tier."""

    def __init__(self, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> None:
        self.config = config
        self._pools: dict[PoolKey, Pool] = {}
        # Secondary index: (token0, token1) -> pools across all fee tiers
        self._pools_by_pair: dict[tuple[str, str], list[Pool]] = {}

    def __len__(self) -> int:
        return len(self._pools)

    def __iter__(self) -> Iterator[Pool]:
        return iter(self._pools.values())

    def __contains__(self, key: PoolKey) -> bool:
        return key in self._pools

    def create_pool(
        self,
        token_a: Token,
        token_b: Token,
        fee: int,
        sqrt_price_x96: int | None = None,
        clock: Callable[[], int] | None = None,
    ) -> Pool:
        """Create a pool for a token pair at a fee tier.

        Args:
            token_a: Either token of the pair
            token_b: The other token
            fee: Fee tier; must be enabled in the config
            sqrt_price_x96: If given, initialize the pool at this price
            clock: Time source for the pool's oracle

        Returns:
            The new pool

        Raises:
            ValueError: If the tokens are identical, the fee tier is not
                enabled, or the pool already exists
        """
        address0, address1 = sort_tokens(token_a.address, token_b.address)
        if normalize_address(token_a.address) == address0:
            token0, token1 = token_a, token_b
        else:
            token0, token1 = token_b, token_a
        key = PoolKey(address0, address1, fee)

        tick_spacing = self.config.tick_spacing_for(fee)
        if tick_spacing is None:
            raise ValueError(f"Fee tier {fee} is not enabled")
        if key in self._pools:
            raise ValueError(f"Pool already exists for {key.token0}/{key.token1} at fee {fee}")

        pool = Pool(
            address=compute_pool_address(key.token0, key.token1, fee),
            token0=token0,
            token1=token1,
            fee=fee,
            tick_spacing=tick_spacing,
            clock=clock,
        )
        if sqrt_price_x96 is not None:
            pool.initialize(sqrt_price_x96)
            if self.config.observation_cardinality > 1:
                pool.increase_observation_cardinality_next(self.config.observation_cardinality)

        self._pools[key] = pool
        self._pools_by_pair.setdefault((key.token0, key.token1), []).append(pool)

        logger.info(
            "pool_created",
            pool=pool.address,
            token0=key.token0,
            token1=key.token1,
            fee=fee,
            tick_spacing=tick_spacing,
        )
        return pool

    def get_pool(self, token_a: str, token_b: str, fee: int) -> Pool | None:
        """Pool for a pair at a fee tier, in either token order."""
        token0, token1 = sort_tokens(token_a, token_b)
        return self._pools.get(PoolKey(token0, token1, fee))

    def get_pools(self, token_a: str, token_b: str) -> list[Pool]:
        """All pools for a pair, across fee tiers."""
        token0, token1 = sort_tokens(token_a, token_b)
        return list(self._pools_by_pair.get((token0, token1), []))
