"""Pool registry.

The registry creates at most one pool per unordered asset pair, deploys it
at its deterministic address and keeps an append-only list of every pool
in creation order.
"""

from __future__ import annotations

from typing import Any

import structlog

from pairdex.amm.pool import Pool
from pairdex.config import DEFAULT_CONFIG, AmmConfig
from pairdex.errors import PairExists
from pairdex.models.events import PoolCreated
from pairdex.models.types import normalize_address
from pairdex.pools.addressing import pair_for, sort_assets
from pairdex.runtime import GENESIS_DEPLOYER, Runtime

logger = structlog.get_logger()


class PoolRegistry:
    """Registry of constant product pools keyed by unordered asset pair.

    Args:
        runtime: Runtime the registry and its pools live in
        address: Registry address (part of every pool address)
        config: Settings passed to every pool the registry creates
    """

    def __init__(self, runtime: Runtime, address: str, config: AmmConfig = DEFAULT_CONFIG) -> None:
        self.runtime = runtime
        self.address = normalize_address(address, validate=True)
        self.config = config
        self._pools: dict[frozenset[str], Pool] = {}
        self._all_pools: list[Pool] = []

    @classmethod
    def deploy(cls, runtime: Runtime, config: AmmConfig = DEFAULT_CONFIG) -> PoolRegistry:
        """Create a registry at a fresh address and register it with the runtime."""
        registry = cls(runtime, runtime.next_address(GENESIS_DEPLOYER), config)
        return runtime.deploy(registry)

    def __len__(self) -> int:
        return len(self._all_pools)

    @property
    def all_pools(self) -> tuple[Pool, ...]:
        """Every pool created, in creation order."""
        return tuple(self._all_pools)

    @property
    def all_pools_length(self) -> int:
        return len(self._all_pools)

    def pool_address(self, asset_a: str, asset_b: str) -> str:
        """Deterministic address of the pool for a pair, created or not."""
        return pair_for(self.address, asset_a, asset_b, self.config.init_code_hash)

    def get_pool(self, asset_a: str, asset_b: str) -> Pool | None:
        """Get the pool for a pair (order independent).

        Args:
            asset_a: First asset address (any case)
            asset_b: Second asset address (any case)

        Returns:
            Pool if one was created, None otherwise
        """
        pair_key = frozenset([normalize_address(asset_a), normalize_address(asset_b)])
        return self._pools.get(pair_key)

    def create_pool(self, asset_a: str, asset_b: str) -> Pool:
        """Create, deploy and initialize the pool for a new pair.

        Raises:
            IdenticalAssets: If both assets are the same
            ZeroAsset: If either asset is the null address
            PairExists: If the pair already has a pool
        """
        with self.runtime.atomic():
            asset0, asset1 = sort_assets(asset_a, asset_b)
            pair_key = frozenset([asset0, asset1])
            if pair_key in self._pools:
                raise PairExists(
                    f"Pool already exists for {asset0[-8:]}/{asset1[-8:]}: "
                    f"{self._pools[pair_key].address}"
                )

            address = pair_for(self.address, asset0, asset1, self.config.init_code_hash)
            pool = self.runtime.deploy(Pool(self.runtime, address, self.address, self.config))
            pool.initialize(self.address, asset0, asset1)

            self.runtime.touch(self)
            self._pools[pair_key] = pool
            self._all_pools.append(pool)
            self.runtime.emit(
                PoolCreated(
                    emitter=self.address,
                    asset0=asset0,
                    asset1=asset1,
                    pool=pool.address,
                    index=len(self._all_pools),
                )
            )
            logger.info(
                "pool_created",
                pool=pool.address[-8:],
                asset0=asset0[-8:],
                asset1=asset1[-8:],
                index=len(self._all_pools),
            )
        return pool

    # --- Runtime snapshots ---

    def snapshot(self) -> Any:
        return dict(self._pools), list(self._all_pools)

    def restore(self, state: Any) -> None:
        pools, all_pools = state
        self._pools = dict(pools)
        self._all_pools = list(all_pools)


__all__ = ["PoolRegistry"]
