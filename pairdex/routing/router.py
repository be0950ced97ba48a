"""Liquidity and swap routing over a pool registry.

The router is the caller-facing layer: it sizes contributions to the
current pool ratio, moves assets into pools with transfer_from and then
triggers mint/burn/swap. Multi-hop swaps send each hop's output straight
into the next pool, so only the final hop pays the recipient.

Every public operation is one runtime atomic block. A failure in any hop
reverts the transfers and reserve updates of all earlier hops.
"""

from __future__ import annotations

from typing import Any, cast

import structlog

from pairdex.amm.pool import Pool
from pairdex.amm.pricing import constant_product
from pairdex.assets.base import AssetLedger
from pairdex.errors import (
    ExcessiveInputAmount,
    Expired,
    InsufficientAAmount,
    InsufficientBAmount,
    InsufficientInputAmount,
    InsufficientLiquidity,
    SlippageTooLow,
)
from pairdex.models.types import normalize_address
from pairdex.pools.addressing import sort_assets
from pairdex.pools.registry import PoolRegistry
from pairdex.routing.library import (
    get_amounts_in,
    get_amounts_out,
    resolve_pool,
    validate_path,
)
from pairdex.routing.pathfinding import PathFinder
from pairdex.routing.types import HopResult, LiquidityReceipt, PathQuote, SwapReceipt
from pairdex.runtime import GENESIS_DEPLOYER, Runtime
from pairdex.safe_int import S

logger = structlog.get_logger()


class Router:
    """Routes liquidity and swaps through a registry's pools.

    Callers must approve the router on every asset (and on pool shares for
    remove_liquidity) before using it; the router moves funds with
    transfer_from and never holds them between calls.

    Args:
        runtime: Runtime the router is deployed into
        address: Router address (the spender callers approve)
        registry: Registry used to resolve and create pools
    """

    def __init__(self, runtime: Runtime, address: str, registry: PoolRegistry) -> None:
        self.runtime = runtime
        self.address = normalize_address(address, validate=True)
        self.registry = registry
        self.pathfinder = PathFinder(registry)

    @classmethod
    def deploy(cls, runtime: Runtime, registry: PoolRegistry) -> Router:
        """Create a router at a fresh address and register it with the runtime."""
        router = cls(runtime, runtime.next_address(GENESIS_DEPLOYER), registry)
        return runtime.deploy(router)

    # --- Helpers ---

    def _ensure(self, deadline: int | None) -> None:
        if deadline is not None and self.runtime.timestamp > deadline:
            raise Expired(f"Deadline {deadline} passed at {self.runtime.timestamp}")

    def _ledger(self, asset: str) -> AssetLedger:
        return cast(AssetLedger, self.runtime.contract(asset))

    # --- Quoting ---

    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        return constant_product.quote(amount_a, reserve_a, reserve_b)

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        return constant_product.get_amount_out(
            amount_in, reserve_in, reserve_out, self.registry.config.fee_multiplier
        )

    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int) -> int:
        return constant_product.get_amount_in(
            amount_out, reserve_in, reserve_out, self.registry.config.fee_multiplier
        )

    def get_amounts_out(self, amount_in: int, path: list[str]) -> list[int]:
        return get_amounts_out(self.registry, amount_in, path)

    def get_amounts_in(self, amount_out: int, path: list[str]) -> list[int]:
        return get_amounts_in(self.registry, amount_out, path)

    def best_path(
        self,
        asset_in: str,
        asset_out: str,
        amount_in: int,
        max_hops: int = 3,
    ) -> PathQuote | None:
        """Quote every candidate path and return the one with the largest output.

        Paths that cannot carry the amount (an empty pool, or an intermediate
        hop rounding to zero) are skipped.
        """
        best: PathQuote | None = None
        for path in self.pathfinder.find_all_paths(asset_in, asset_out, max_hops=max_hops):
            try:
                amounts = get_amounts_out(self.registry, amount_in, path)
            except (InsufficientLiquidity, InsufficientInputAmount) as err:
                logger.debug("path_skipped", hops=len(path) - 1, reason=type(err).__name__)
                continue
            if best is None or amounts[-1] > best.amount_out:
                best = PathQuote(path=path, amounts=amounts)
        return best

    # --- Liquidity ---

    def _optimal_amounts(
        self,
        pool: Pool,
        asset_a: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
    ) -> tuple[int, int]:
        """Size a contribution to the pool's current ratio.

        One side is used in full; the other is reduced to its ratio-optimal
        amount. An empty pool takes the desired amounts verbatim.
        """
        reserve_a, reserve_b = pool.reserves_for(asset_a)
        if reserve_a == 0 and reserve_b == 0:
            return amount_a_desired, amount_b_desired

        amount_b_optimal = constant_product.quote(amount_a_desired, reserve_a, reserve_b)
        if amount_b_optimal <= amount_b_desired:
            if amount_b_optimal < amount_b_min:
                raise InsufficientBAmount(
                    f"Optimal B amount {amount_b_optimal} below minimum {amount_b_min}"
                )
            return amount_a_desired, amount_b_optimal

        amount_a_optimal = constant_product.quote(amount_b_desired, reserve_b, reserve_a)
        if amount_a_optimal < amount_a_min:
            raise InsufficientAAmount(
                f"Optimal A amount {amount_a_optimal} below minimum {amount_a_min}"
            )
        return amount_a_optimal, amount_b_desired

    def add_liquidity(
        self,
        caller: str,
        asset_a: str,
        asset_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int = 0,
        amount_b_min: int = 0,
        recipient: str | None = None,
        deadline: int | None = None,
    ) -> LiquidityReceipt:
        """Deposit a ratio-preserving pair of amounts and mint shares.

        Creates the pool if the pair has none.

        Args:
            caller: Account paying the assets (must have approved the router)
            asset_a: First asset, in the caller's order
            asset_b: Second asset
            amount_a_desired: Most of asset_a the caller will deposit
            amount_b_desired: Most of asset_b the caller will deposit
            amount_a_min: Least of asset_a the caller accepts depositing
            amount_b_min: Least of asset_b the caller accepts depositing
            recipient: Account credited with shares (defaults to caller)
            deadline: Latest runtime timestamp at which the call may execute

        Returns:
            LiquidityReceipt with the amounts used and shares minted

        Raises:
            InsufficientAAmount: If asset_a would be reduced below amount_a_min
            InsufficientBAmount: If asset_b would be reduced below amount_b_min
        """
        recipient = recipient if recipient is not None else caller
        with self.runtime.atomic():
            self._ensure(deadline)
            pool = self.registry.get_pool(asset_a, asset_b)
            if pool is None:
                pool = self.registry.create_pool(asset_a, asset_b)

            amount_a, amount_b = self._optimal_amounts(
                pool, asset_a, amount_a_desired, amount_b_desired, amount_a_min, amount_b_min
            )
            self._ledger(asset_a).transfer_from(self.address, caller, pool.address, amount_a)
            self._ledger(asset_b).transfer_from(self.address, caller, pool.address, amount_b)
            shares = pool.mint(self.address, recipient)

        logger.debug(
            "liquidity_added",
            pool=pool.address[-8:],
            amount_a=amount_a,
            amount_b=amount_b,
            shares=shares,
        )
        return LiquidityReceipt(
            pool_address=pool.address, amount_a=amount_a, amount_b=amount_b, shares=shares
        )

    def remove_liquidity(
        self,
        caller: str,
        asset_a: str,
        asset_b: str,
        shares: int,
        amount_a_min: int = 0,
        amount_b_min: int = 0,
        recipient: str | None = None,
        deadline: int | None = None,
    ) -> tuple[int, int]:
        """Burn shares and return both assets in the caller's order.

        The caller must have approved the router on the pool's shares.

        Returns:
            (amount_a, amount_b) paid to recipient

        Raises:
            InsufficientAAmount: If amount_a is below amount_a_min
            InsufficientBAmount: If amount_b is below amount_b_min
        """
        recipient = recipient if recipient is not None else caller
        with self.runtime.atomic():
            self._ensure(deadline)
            pool = resolve_pool(self.registry, asset_a, asset_b)
            pool.transfer_from(self.address, caller, pool.address, shares)
            amount0, amount1 = pool.burn(self.address, recipient)

            asset0, _ = sort_assets(asset_a, asset_b)
            if normalize_address(asset_a) == asset0:
                amount_a, amount_b = amount0, amount1
            else:
                amount_a, amount_b = amount1, amount0

            if amount_a < amount_a_min:
                raise InsufficientAAmount(f"Received {amount_a} of A, minimum {amount_a_min}")
            if amount_b < amount_b_min:
                raise InsufficientBAmount(f"Received {amount_b} of B, minimum {amount_b_min}")

        logger.debug(
            "liquidity_removed",
            pool=pool.address[-8:],
            shares=shares,
            amount_a=amount_a,
            amount_b=amount_b,
        )
        return amount_a, amount_b

    # --- Swaps ---

    def _hop_outputs(self, pool: Pool, asset_in: str, amount_out: int) -> tuple[int, int]:
        """Map an output amount onto the pool's (amount0_out, amount1_out)."""
        if normalize_address(asset_in) == pool.asset0:
            return 0, amount_out
        return amount_out, 0

    def _hop_destination(self, path: list[str], index: int, recipient: str) -> str:
        """Next pool on the path, or the recipient after the last hop."""
        if index < len(path) - 2:
            return self.registry.pool_address(path[index + 1], path[index + 2])
        return recipient

    def _swap(self, amounts: list[int], path: list[str], recipient: str) -> list[HopResult]:
        """Execute precomputed hop amounts. Input must already be in the first pool."""
        hops: list[HopResult] = []
        for i, (asset_in, asset_out) in enumerate(zip(path, path[1:])):
            pool = resolve_pool(self.registry, asset_in, asset_out)
            amount0_out, amount1_out = self._hop_outputs(pool, asset_in, amounts[i + 1])
            pool.swap(
                self.address, amount0_out, amount1_out, self._hop_destination(path, i, recipient)
            )
            hops.append(
                HopResult(
                    pool_address=pool.address,
                    asset_in=asset_in,
                    asset_out=asset_out,
                    amount_in=amounts[i],
                    amount_out=amounts[i + 1],
                )
            )
        return hops

    def swap_token_for_token(
        self,
        caller: str,
        asset_in: str,
        asset_out: str,
        amount_in: int,
        min_amount_out: int,
        recipient: str | None = None,
        deadline: int | None = None,
    ) -> SwapReceipt:
        """Swap an exact input through the pair's single pool.

        Raises:
            PoolNotFound: If the pair has no pool
            SlippageTooLow: If the output is below min_amount_out
        """
        recipient = recipient if recipient is not None else caller
        with self.runtime.atomic():
            self._ensure(deadline)
            pool = resolve_pool(self.registry, asset_in, asset_out)
            reserve_in, reserve_out = pool.reserves_for(asset_in)
            amount_out = constant_product.get_amount_out(
                amount_in, reserve_in, reserve_out, pool.fee_multiplier
            )
            if amount_out < min_amount_out:
                raise SlippageTooLow(f"Output {amount_out} below minimum {min_amount_out}")

            self._ledger(asset_in).transfer_from(self.address, caller, pool.address, amount_in)
            amount0_out, amount1_out = self._hop_outputs(pool, asset_in, amount_out)
            pool.swap(self.address, amount0_out, amount1_out, recipient)

        path = [normalize_address(asset_in), normalize_address(asset_out)]
        logger.debug("swap_routed", hops=1, amount_in=amount_in, amount_out=amount_out)
        return SwapReceipt(
            path=path,
            amount_in=amount_in,
            amount_out=amount_out,
            recipient=normalize_address(recipient),
            hops=[HopResult(pool.address, path[0], path[1], amount_in, amount_out)],
        )

    def multi_hop_swap(
        self,
        caller: str,
        path: list[str],
        amount_in: int,
        min_amount_out: int,
        recipient: str | None = None,
        deadline: int | None = None,
    ) -> SwapReceipt:
        """Swap an exact input along a path of pools.

        Raises:
            PathTooShort: If path has fewer than two assets
            PoolNotFound: If a hop has no pool
            SlippageTooLow: If the final output is below min_amount_out
        """
        recipient = recipient if recipient is not None else caller
        with self.runtime.atomic():
            self._ensure(deadline)
            path = validate_path(path)
            amounts = get_amounts_out(self.registry, amount_in, path)
            if amounts[-1] < min_amount_out:
                raise SlippageTooLow(f"Output {amounts[-1]} below minimum {min_amount_out}")

            first_pool = resolve_pool(self.registry, path[0], path[1])
            self._ledger(path[0]).transfer_from(
                self.address, caller, first_pool.address, amounts[0]
            )
            hops = self._swap(amounts, path, recipient)

        logger.debug(
            "swap_routed", hops=len(hops), amount_in=amounts[0], amount_out=amounts[-1]
        )
        return SwapReceipt(
            path=path,
            amount_in=amounts[0],
            amount_out=amounts[-1],
            recipient=normalize_address(recipient),
            hops=hops,
        )

    def swap_tokens_for_exact_tokens(
        self,
        caller: str,
        path: list[str],
        amount_out: int,
        max_amount_in: int,
        recipient: str | None = None,
        deadline: int | None = None,
    ) -> SwapReceipt:
        """Buy an exact output along a path, paying at most max_amount_in.

        Raises:
            ExcessiveInputAmount: If the required input exceeds max_amount_in
        """
        recipient = recipient if recipient is not None else caller
        with self.runtime.atomic():
            self._ensure(deadline)
            path = validate_path(path)
            amounts = get_amounts_in(self.registry, amount_out, path)
            if amounts[0] > max_amount_in:
                raise ExcessiveInputAmount(
                    f"Required input {amounts[0]} exceeds maximum {max_amount_in}"
                )

            first_pool = resolve_pool(self.registry, path[0], path[1])
            self._ledger(path[0]).transfer_from(
                self.address, caller, first_pool.address, amounts[0]
            )
            hops = self._swap(amounts, path, recipient)

        return SwapReceipt(
            path=path,
            amount_in=amounts[0],
            amount_out=amounts[-1],
            recipient=normalize_address(recipient),
            hops=hops,
        )

    def swap_exact_tokens_for_tokens_supporting_fee_on_transfer(
        self,
        caller: str,
        path: list[str],
        amount_in: int,
        min_amount_out: int,
        recipient: str | None = None,
        deadline: int | None = None,
    ) -> SwapReceipt:
        """Exact-input swap for assets that skim a fee on every transfer.

        Each hop's input is read from the pool's balance above its reserve
        rather than precomputed, and slippage is checked against what the
        recipient actually received.

        Raises:
            SlippageTooLow: If the recipient's balance grew by less than
                min_amount_out
        """
        recipient = normalize_address(recipient if recipient is not None else caller)
        with self.runtime.atomic():
            self._ensure(deadline)
            path = validate_path(path)
            out_ledger = self._ledger(path[-1])
            balance_before = out_ledger.balance_of(recipient)

            first_pool = resolve_pool(self.registry, path[0], path[1])
            self._ledger(path[0]).transfer_from(
                self.address, caller, first_pool.address, amount_in
            )

            hops: list[HopResult] = []
            for i, (asset_in, asset_out) in enumerate(zip(path, path[1:])):
                pool = resolve_pool(self.registry, asset_in, asset_out)
                reserve_in, reserve_out = pool.reserves_for(asset_in)
                hop_in = (S(self._ledger(asset_in).balance_of(pool.address)) - reserve_in).value
                hop_out = constant_product.get_amount_out(
                    hop_in, reserve_in, reserve_out, pool.fee_multiplier
                )
                amount0_out, amount1_out = self._hop_outputs(pool, asset_in, hop_out)
                pool.swap(
                    self.address,
                    amount0_out,
                    amount1_out,
                    self._hop_destination(path, i, recipient),
                )
                hops.append(HopResult(pool.address, asset_in, asset_out, hop_in, hop_out))

            received = (S(out_ledger.balance_of(recipient)) - balance_before).value
            if received < min_amount_out:
                raise SlippageTooLow(f"Received {received} below minimum {min_amount_out}")

        return SwapReceipt(
            path=path,
            amount_in=amount_in,
            amount_out=received,
            recipient=recipient,
            hops=hops,
        )

    # --- Runtime snapshots ---

    def snapshot(self) -> Any:
        return None

    def restore(self, state: Any) -> None:
        pass


__all__ = ["Router"]
