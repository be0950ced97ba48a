"""Constant product pricing.

Pools use the constant product formula x * y = k with a fee charged on
the input amount (0.3% by default).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pairdex.constants import DEFAULT_FEE_BPS, FEE_DENOMINATOR
from pairdex.errors import (
    InsufficientAmount,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
)
from pairdex.safe_int import S

if TYPE_CHECKING:
    from pairdex.amm.pool import Pool

DEFAULT_FEE_MULTIPLIER = FEE_DENOMINATOR - DEFAULT_FEE_BPS


@dataclass
class SwapResult:
    """Result of simulating a swap through a pool."""

    amount_in: int
    amount_out: int
    pool_address: str
    asset_in: str
    asset_out: str


class ConstantProduct:
    """Constant product AMM math.

    Formula: amount_out = (amount_in * 9970 * reserve_out) / (reserve_in * 10000 + amount_in * 9970)

    The 9970/10000 factor (equivalently 997/1000) accounts for the 0.3% fee.
    """

    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        """Project an amount of A onto B at the current reserve ratio.

        Raises:
            InsufficientAmount: If amount_a is zero
            InsufficientLiquidity: If either reserve is zero
        """
        if amount_a <= 0:
            raise InsufficientAmount(f"Quote amount must be positive, got {amount_a}")
        if reserve_a <= 0 or reserve_b <= 0:
            raise InsufficientLiquidity(f"Empty reserves ({reserve_a}, {reserve_b})")
        return (S(amount_a) * reserve_b // reserve_a).value

    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
    ) -> int:
        """Calculate output amount for an exact input.

        Formula: amount_out = (in * fee * res_out) / (res_in * 10000 + in * fee)

        Args:
            amount_in: Input token amount
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool
            fee_multiplier: Fee multiplier (default 9970 for 0.3% fee)

        Returns:
            Output token amount, always strictly below reserve_out

        Raises:
            InsufficientInputAmount: If amount_in is zero
            InsufficientLiquidity: If either reserve is zero
        """
        if amount_in <= 0:
            raise InsufficientInputAmount(f"Input amount must be positive, got {amount_in}")
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidity(f"Empty reserves ({reserve_in}, {reserve_out})")

        amount_in_with_fee = S(amount_in) * fee_multiplier
        numerator = amount_in_with_fee * reserve_out
        denominator = S(reserve_in) * FEE_DENOMINATOR + amount_in_with_fee

        return (numerator // denominator).value

    def get_amount_in(
        self,
        amount_out: int,
        reserve_in: int,
        reserve_out: int,
        fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
    ) -> int:
        """Calculate required input for a desired output.

        Formula: amount_in = (res_in * out * 10000) / ((res_out - out) * fee) + 1

        Raises:
            InsufficientOutputAmount: If amount_out is zero
            InsufficientLiquidity: If either reserve is zero or the output
                would drain the reserve
        """
        if amount_out <= 0:
            raise InsufficientOutputAmount(f"Output amount must be positive, got {amount_out}")
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidity(f"Empty reserves ({reserve_in}, {reserve_out})")
        if amount_out >= reserve_out:
            raise InsufficientLiquidity(
                f"Output {amount_out} would drain reserve {reserve_out}"
            )

        numerator = S(reserve_in) * amount_out * FEE_DENOMINATOR
        denominator = (S(reserve_out) - amount_out) * fee_multiplier

        return (numerator // denominator + 1).value

    def simulate_swap(self, pool: Pool, asset_in: str, amount_in: int) -> SwapResult:
        """Simulate an exact-input swap against a pool's current reserves.

        Args:
            pool: The liquidity pool
            asset_in: Input asset address
            amount_in: Amount to swap

        Returns:
            SwapResult with amounts and pool info
        """
        reserve_in, reserve_out = pool.reserves_for(asset_in)
        amount_out = self.get_amount_out(amount_in, reserve_in, reserve_out, pool.fee_multiplier)

        return SwapResult(
            amount_in=amount_in,
            amount_out=amount_out,
            pool_address=pool.address,
            asset_in=asset_in,
            asset_out=pool.other_asset(asset_in),
        )


# Singleton instance
constant_product = ConstantProduct()


def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Module-level alias for ConstantProduct.quote."""
    return constant_product.quote(amount_a, reserve_a, reserve_b)


def get_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
) -> int:
    """Module-level alias for ConstantProduct.get_amount_out."""
    return constant_product.get_amount_out(amount_in, reserve_in, reserve_out, fee_multiplier)


def get_amount_in(
    amount_out: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
) -> int:
    """Module-level alias for ConstantProduct.get_amount_in."""
    return constant_product.get_amount_in(amount_out, reserve_in, reserve_out, fee_multiplier)


__all__ = [
    "ConstantProduct",
    "SwapResult",
    "constant_product",
    "quote",
    "get_amount_out",
    "get_amount_in",
    "DEFAULT_FEE_MULTIPLIER",
]
