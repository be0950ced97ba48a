"""pairdex: a constant product automated market maker."""

from pairdex.amm import Pool, constant_product, get_amount_in, get_amount_out, quote
from pairdex.assets import FeeOnTransferToken, Token
from pairdex.config import DEFAULT_CONFIG, AmmConfig, configure_logging
from pairdex.pools import PoolRegistry, pair_for, sort_assets
from pairdex.routing import PathFinder, Router
from pairdex.runtime import Runtime

__version__ = "0.1.0"

__all__ = [
    "Runtime",
    "AmmConfig",
    "DEFAULT_CONFIG",
    "configure_logging",
    "Token",
    "FeeOnTransferToken",
    "Pool",
    "PoolRegistry",
    "Router",
    "PathFinder",
    "sort_assets",
    "pair_for",
    "quote",
    "get_amount_out",
    "get_amount_in",
    "constant_product",
]
