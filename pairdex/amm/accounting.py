"""Reserve reconciliation and constant-product invariant math.

A pool never receives amounts as arguments. It compares the balances its
asset ledgers report (observed state) with the reserves it last recorded
(declared state); the difference is the pending delta that a mint, swap or
skim then accounts for. Keeping that comparison here, as pure integer
functions, lets the pool engine stay a thin sequence of reads, checks and
transfers.

All arithmetic goes through SafeInt. A balance below its reserve surfaces as
InsufficientLiquidity and a balance wider than a reserve slot as
ReserveOverflow.
"""

from __future__ import annotations

from dataclasses import dataclass

from pairdex.constants import FEE_DENOMINATOR, RESERVE_BITS
from pairdex.errors import InsufficientLiquidity, ReserveOverflow
from pairdex.safe_int import S, Underflow, WidthOverflow


@dataclass(frozen=True)
class PendingDelta:
    """Per-asset amounts observed in custody but not yet in reserves."""

    amount0: int
    amount1: int

    @classmethod
    def observe(cls, balance0: int, balance1: int, reserve0: int, reserve1: int) -> PendingDelta:
        """Amounts deposited since the last reconciliation.

        Raises:
            InsufficientLiquidity: If a balance has fallen below its reserve
        """
        try:
            return cls(
                amount0=(S(balance0) - reserve0).value,
                amount1=(S(balance1) - reserve1).value,
            )
        except Underflow as err:
            raise InsufficientLiquidity(
                f"Balances ({balance0}, {balance1}) below reserves ({reserve0}, {reserve1})"
            ) from err

    @classmethod
    def swap_inputs(
        cls,
        balance0: int,
        balance1: int,
        reserve0: int,
        reserve1: int,
        amount0_out: int,
        amount1_out: int,
    ) -> PendingDelta:
        """Infer swap inputs from post-output balances.

        The expected balance after paying out is `reserve - amount_out`;
        anything above that baseline is treated as input.

        Raises:
            Underflow: If an output exceeds its reserve
        """
        baseline0 = S(reserve0) - amount0_out
        baseline1 = S(reserve1) - amount1_out
        return cls(
            amount0=S(balance0).saturating_sub(baseline0).value,
            amount1=S(balance1).saturating_sub(baseline1).value,
        )

    @property
    def is_empty(self) -> bool:
        return self.amount0 == 0 and self.amount1 == 0


def initial_shares(amount0: int, amount1: int) -> int:
    """Shares for the first deposit into an empty pool: floor(sqrt(a0 * a1))."""
    return (S(amount0) * amount1).isqrt().value


def proportional_shares(delta: PendingDelta, reserve0: int, reserve1: int, total_shares: int) -> int:
    """Shares for a deposit into a funded pool.

    Uses the asset contributed least relative to the current ratio; any
    excess of the other asset is left to existing holders.

    Raises:
        DivisionByZero: If either reserve is zero
    """
    shares0 = S(delta.amount0) * total_shares // reserve0
    shares1 = S(delta.amount1) * total_shares // reserve1
    return shares0.min(shares1).value


def mint_shares(delta: PendingDelta, reserve0: int, reserve1: int, total_shares: int) -> int:
    """Shares owed for a pending deposit, bootstrap or proportional."""
    if total_shares == 0:
        return initial_shares(delta.amount0, delta.amount1)
    return proportional_shares(delta, reserve0, reserve1, total_shares)


def burn_amounts(
    liquidity: int, balance0: int, balance1: int, total_shares: int
) -> tuple[int, int]:
    """Pro-rata payout of `liquidity` shares against true balances.

    Raises:
        DivisionByZero: If no shares are outstanding
    """
    amount0 = S(liquidity) * balance0 // total_shares
    amount1 = S(liquidity) * balance1 // total_shares
    return amount0.value, amount1.value


def adjusted_balance(balance: int, amount_in: int, fee_bps: int) -> int:
    """Balance scaled by the fee denominator with the input fee removed."""
    return (S(balance) * FEE_DENOMINATOR - S(amount_in) * fee_bps).value


def invariant_holds(
    balance0: int,
    balance1: int,
    inputs: PendingDelta,
    reserve0: int,
    reserve1: int,
    fee_bps: int,
) -> bool:
    """Fee-adjusted constant product check for a swap.

    Requires (b0 * D - in0 * fee) * (b1 * D - in1 * fee) >= r0 * r1 * D**2
    with D = 10_000. For fee_bps = 30 this is the 1000/3 form scaled by 10.
    """
    lhs = S(adjusted_balance(balance0, inputs.amount0, fee_bps)) * adjusted_balance(
        balance1, inputs.amount1, fee_bps
    )
    rhs = S(reserve0) * reserve1 * (FEE_DENOMINATOR**2)
    return lhs >= rhs


def checked_reserve(balance: int, bits: int = RESERVE_BITS) -> int:
    """Validate a balance fits in a reserve slot.

    Raises:
        ReserveOverflow: If the balance exceeds 2**bits - 1
    """
    try:
        return S(balance).to_bits(bits)
    except WidthOverflow as err:
        raise ReserveOverflow(f"Balance {balance} does not fit in uint{bits}") from err


__all__ = [
    "PendingDelta",
    "initial_shares",
    "proportional_shares",
    "mint_shares",
    "burn_amounts",
    "adjusted_balance",
    "invariant_holds",
    "checked_reserve",
]
