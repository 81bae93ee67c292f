"""Concentrated-liquidity AMM pool engine."""

from clamm.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from clamm.pool import InMemoryToken, Pool, TokenPayer
from clamm.pools import PoolRegistry

__version__ = "0.1.0"
__all__ = [
    "Pool",
    "PoolRegistry",
    "InMemoryToken",
    "TokenPayer",
    "EngineConfig",
    "DEFAULT_ENGINE_CONFIG",
    "__version__",
]
