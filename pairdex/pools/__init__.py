"""Pool management package.

Provides PoolRegistry for creating and looking up pools, plus the
deterministic addressing helpers it uses.
"""

from .addressing import pair_for, pair_salt, sort_assets
from .registry import PoolRegistry

__all__ = [
    "PoolRegistry",
    "pair_for",
    "pair_salt",
    "sort_assets",
]
