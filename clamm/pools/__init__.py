"""Pool management package.

Provides PoolRegistry for creating and finding pools.
"""

from .registry import PoolKey, PoolRegistry, compute_pool_address, sort_tokens

__all__ = ["PoolKey", "PoolRegistry", "compute_pool_address", "sort_tokens"]
