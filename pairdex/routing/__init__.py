"""Routing package: quoting, pathfinding and the liquidity/swap router."""

from pairdex.routing.library import (
    get_amounts_in,
    get_amounts_out,
    get_reserves,
    resolve_pool,
    validate_path,
)
from pairdex.routing.pathfinding import AssetGraph, PathFinder
from pairdex.routing.router import Router
from pairdex.routing.types import HopResult, LiquidityReceipt, PathQuote, SwapReceipt

__all__ = [
    # Router
    "Router",
    # Library
    "resolve_pool",
    "get_reserves",
    "validate_path",
    "get_amounts_out",
    "get_amounts_in",
    # Pathfinding
    "AssetGraph",
    "PathFinder",
    # Types
    "HopResult",
    "SwapReceipt",
    "LiquidityReceipt",
    "PathQuote",
]
