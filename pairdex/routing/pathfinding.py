"""Asset graph and pathfinding for multi-hop routing.

Edges are pools in a registry; paths are simple (no asset repeats) and
enumerated breadth first, so shorter routes come first.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from pairdex.models.types import normalize_address

if TYPE_CHECKING:
    from pairdex.pools.registry import PoolRegistry


class AssetGraph:
    """Adjacency list of assets connected by at least one pool."""

    def __init__(self) -> None:
        self._adjacency: dict[str, set[str]] = {}

    @classmethod
    def from_registry(cls, registry: PoolRegistry) -> AssetGraph:
        graph = cls()
        for pool in registry.all_pools:
            if pool.asset0 is not None and pool.asset1 is not None:
                graph._add_edge(pool.asset0, pool.asset1)
        return graph

    def _add_edge(self, asset_a: str, asset_b: str) -> None:
        self._adjacency.setdefault(asset_a, set()).add(asset_b)
        self._adjacency.setdefault(asset_b, set()).add(asset_a)

    def neighbors(self, asset: str) -> set[str]:
        return self._adjacency.get(normalize_address(asset), set())

    def has_asset(self, asset: str) -> bool:
        return normalize_address(asset) in self._adjacency

    @property
    def asset_count(self) -> int:
        return len(self._adjacency)


class PathFinder:
    """Enumerates candidate paths through a registry's pools.

    The graph is rebuilt lazily whenever the registry has gained pools
    since it was last built.

    Usage:
        finder = PathFinder(registry)
        paths = finder.find_all_paths(asset_in, asset_out, max_hops=2)
    """

    def __init__(self, registry: PoolRegistry) -> None:
        self._registry = registry
        self._graph: AssetGraph | None = None
        self._built_for = -1

    @property
    def graph(self) -> AssetGraph:
        """Get or rebuild the asset graph."""
        if self._graph is None or self._built_for != len(self._registry):
            self._graph = AssetGraph.from_registry(self._registry)
            self._built_for = len(self._registry)
        return self._graph

    def find_all_paths(
        self,
        asset_in: str,
        asset_out: str,
        max_hops: int = 3,
        max_paths: int = 20,
    ) -> list[list[str]]:
        """Find candidate paths from asset_in to asset_out.

        Args:
            asset_in: Starting asset address
            asset_out: Target asset address
            max_hops: Maximum number of swaps allowed (default 3)
            max_paths: Maximum number of paths to return (default 20)

        Returns:
            Paths as lists of asset addresses, shortest first. Empty if the
            assets are identical or not connected within max_hops.
        """
        start = normalize_address(asset_in)
        target = normalize_address(asset_out)
        graph = self.graph
        if start == target or not graph.has_asset(start) or not graph.has_asset(target):
            return []

        paths: list[list[str]] = []
        queue: deque[list[str]] = deque([[start]])
        while queue and len(paths) < max_paths:
            path = queue.popleft()
            for neighbor in sorted(graph.neighbors(path[-1])):
                if neighbor == target:
                    paths.append(path + [target])
                    if len(paths) >= max_paths:
                        break
                elif neighbor not in path and len(path) < max_hops:
                    queue.append(path + [neighbor])
        return paths

    def find_shortest_path(
        self, asset_in: str, asset_out: str, max_hops: int = 3
    ) -> list[str] | None:
        """Find the path with the fewest hops, or None."""
        paths = self.find_all_paths(asset_in, asset_out, max_hops=max_hops, max_paths=1)
        return paths[0] if paths else None


__all__ = ["AssetGraph", "PathFinder"]
