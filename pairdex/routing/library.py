"""Read-only routing helpers over a registry.

These functions resolve pools, remap canonical reserves to caller order
and chain the pricing formulas along a path. None of them mutate state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pairdex.amm.pricing import constant_product, get_amount_in, get_amount_out, quote
from pairdex.errors import PathTooShort, PoolNotFound
from pairdex.models.types import normalize_address
from pairdex.pools.addressing import pair_for, sort_assets

if TYPE_CHECKING:
    from pairdex.amm.pool import Pool
    from pairdex.pools.registry import PoolRegistry


def resolve_pool(registry: PoolRegistry, asset_a: str, asset_b: str) -> Pool:
    """Get the pool for a pair or fail.

    Raises:
        PoolNotFound: If the pair has no pool
    """
    pool = registry.get_pool(asset_a, asset_b)
    if pool is None:
        raise PoolNotFound(f"No pool for {asset_a[-8:]}/{asset_b[-8:]}")
    return pool


def get_reserves(registry: PoolRegistry, asset_a: str, asset_b: str) -> tuple[int, int]:
    """Reserves of the pair's pool ordered as (reserve_a, reserve_b)."""
    asset0, _ = sort_assets(asset_a, asset_b)
    reserve0, reserve1, _ = resolve_pool(registry, asset_a, asset_b).get_reserves()
    if normalize_address(asset_a) == asset0:
        return reserve0, reserve1
    return reserve1, reserve0


def validate_path(path: list[str]) -> list[str]:
    """Normalize a swap path.

    Raises:
        PathTooShort: If the path has fewer than two assets
    """
    if len(path) < 2:
        raise PathTooShort(f"Path needs at least two assets, got {len(path)}")
    return [normalize_address(asset) for asset in path]


def get_amounts_out(registry: PoolRegistry, amount_in: int, path: list[str]) -> list[int]:
    """Chain get_amount_out along a path.

    Returns:
        [amount_in, hop1_out, ..., final_out]
    """
    path = validate_path(path)
    amounts = [amount_in]
    for asset_in, asset_out in zip(path, path[1:]):
        pool = resolve_pool(registry, asset_in, asset_out)
        reserve_in, reserve_out = pool.reserves_for(asset_in)
        amounts.append(
            constant_product.get_amount_out(
                amounts[-1], reserve_in, reserve_out, pool.fee_multiplier
            )
        )
    return amounts


def get_amounts_in(registry: PoolRegistry, amount_out: int, path: list[str]) -> list[int]:
    """Chain get_amount_in backwards along a path.

    Returns:
        [required_in, hop1_out, ..., amount_out]
    """
    path = validate_path(path)
    amounts = [amount_out]
    for asset_in, asset_out in reversed(list(zip(path, path[1:]))):
        pool = resolve_pool(registry, asset_in, asset_out)
        reserve_in, reserve_out = pool.reserves_for(asset_in)
        amounts.insert(
            0,
            constant_product.get_amount_in(
                amounts[0], reserve_in, reserve_out, pool.fee_multiplier
            ),
        )
    return amounts


__all__ = [
    "sort_assets",
    "pair_for",
    "quote",
    "get_amount_out",
    "get_amount_in",
    "resolve_pool",
    "get_reserves",
    "validate_path",
    "get_amounts_out",
    "get_amounts_in",
]
