"""Type definitions for routing module."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class HopResult:
    """Result of a single hop in a swap route."""

    pool_address: str
    asset_in: str
    asset_out: str
    amount_in: int
    amount_out: int


@dataclass
class SwapReceipt:
    """Result of an executed swap, direct or multi-hop."""

    path: list[str]
    amount_in: int
    amount_out: int
    recipient: str
    hops: list[HopResult] = field(default_factory=list)

    @property
    def is_multihop(self) -> bool:
        """Check if this is a multi-hop route."""
        return len(self.path) > 2


@dataclass
class LiquidityReceipt:
    """Result of adding liquidity through the router."""

    pool_address: str
    amount_a: int
    amount_b: int
    shares: int


@dataclass
class PathQuote:
    """Quoted output for a candidate path."""

    path: list[str]
    amounts: list[int]

    @property
    def amount_in(self) -> int:
        return self.amounts[0]

    @property
    def amount_out(self) -> int:
        return self.amounts[-1]


__all__ = ["HopResult", "SwapReceipt", "LiquidityReceipt", "PathQuote"]
