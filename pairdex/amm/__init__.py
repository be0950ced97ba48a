"""Constant product AMM: pool engine, reconciliation math and pricing."""

from pairdex.amm.accounting import PendingDelta, invariant_holds
from pairdex.amm.pool import Pool
from pairdex.amm.pricing import (
    ConstantProduct,
    SwapResult,
    constant_product,
    get_amount_in,
    get_amount_out,
    quote,
)

__all__ = [
    # Engine
    "Pool",
    "PendingDelta",
    "invariant_holds",
    # Pricing
    "ConstantProduct",
    "SwapResult",
    "constant_product",
    "quote",
    "get_amount_out",
    "get_amount_in",
]
