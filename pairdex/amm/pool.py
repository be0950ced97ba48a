"""Two-asset constant product pool.

The pool is the accounting engine: it holds custody of two assets, tracks
reserves, issues liquidity shares and enforces the fee-adjusted constant
product invariant on swaps.

Callers never pass deposit amounts. They transfer assets (or shares) into
the pool first, then call mint/swap/burn; the pool infers what arrived by
comparing its true balances with its recorded reserves. Every mutating call
runs inside a runtime atomic block and under the pool's own reentrancy
guard, so a failure at any step undoes every transfer made by the call.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, cast

import structlog

from pairdex.amm.accounting import (
    PendingDelta,
    burn_amounts,
    checked_reserve,
    invariant_holds,
    mint_shares,
)
from pairdex.assets.base import AssetLedger, ShareLedger
from pairdex.config import DEFAULT_CONFIG, AmmConfig
from pairdex.errors import (
    AlreadyInitialized,
    Forbidden,
    InsufficientInput,
    InsufficientLiquidity,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InvalidOutputRequest,
    InvalidRecipient,
    InvariantViolation,
    NoLiquidityToBurn,
    Reentrant,
)
from pairdex.models.events import Burn, Mint, Swap, Sync
from pairdex.models.types import normalize_address

if TYPE_CHECKING:
    from pairdex.runtime import Runtime

logger = structlog.get_logger()


class Pool(ShareLedger):
    """Constant product pool between `asset0` and `asset1`.

    The pool is also the ledger of its own liquidity shares: `total_shares`
    is the share supply and `share_balance_of` the per-holder balance.

    Args:
        runtime: Runtime the pool is deployed into
        address: Pool address (derived by the registry)
        registry: Address of the registry allowed to initialize the pool
        config: Fee and reserve-width settings
    """

    def __init__(
        self,
        runtime: Runtime,
        address: str,
        registry: str,
        config: AmmConfig = DEFAULT_CONFIG,
    ) -> None:
        super().__init__(runtime, address, symbol="PDX-LP")
        self.registry = normalize_address(registry)
        self.config = config
        self.asset0: str | None = None
        self.asset1: str | None = None
        self._reserve0 = 0
        self._reserve1 = 0
        self._last_update = 0
        self._unlocked = True

    def __repr__(self) -> str:
        return f"Pool({self.address}, {self.asset0}/{self.asset1})"

    # --- Setup ---

    def initialize(self, caller: str, asset0: str, asset1: str) -> None:
        """Assign the pool's sorted assets. Single use, registry only.

        Raises:
            Forbidden: If caller is not the registry
            AlreadyInitialized: If assets were already assigned
        """
        if normalize_address(caller) != self.registry:
            raise Forbidden(f"Only registry {self.registry[-8:]} may initialize pool")
        if self.asset0 is not None:
            raise AlreadyInitialized(f"Pool {self.address[-8:]} already initialized")
        self.runtime.touch(self)
        self.asset0 = normalize_address(asset0)
        self.asset1 = normalize_address(asset1)

    # --- Views ---

    @property
    def fee_bps(self) -> int:
        return self.config.fee_bps

    @property
    def fee_multiplier(self) -> int:
        """Fee multiplier for AMM math (10000 - fee_bps)."""
        return self.config.fee_multiplier

    @property
    def reserve0(self) -> int:
        return self._reserve0

    @property
    def reserve1(self) -> int:
        return self._reserve1

    @property
    def last_update(self) -> int:
        return self._last_update

    @property
    def total_shares(self) -> int:
        return self.total_supply

    def share_balance_of(self, holder: str) -> int:
        return self.balance_of(holder)

    def get_reserves(self) -> tuple[int, int, int]:
        """Return (reserve0, reserve1, last_update)."""
        return self._reserve0, self._reserve1, self._last_update

    def reserves_for(self, asset_in: str) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        asset_in_norm = normalize_address(asset_in)
        if asset_in_norm == self.asset0:
            return self._reserve0, self._reserve1
        elif asset_in_norm == self.asset1:
            return self._reserve1, self._reserve0
        else:
            raise ValueError(f"Asset {asset_in} not in pool")

    def other_asset(self, asset: str) -> str:
        """Get the counterpart of `asset` in this pool."""
        asset_norm = normalize_address(asset)
        if asset_norm == self.asset0:
            return cast(str, self.asset1)
        elif asset_norm == self.asset1:
            return cast(str, self.asset0)
        else:
            raise ValueError(f"Asset {asset} not in pool")

    # --- Guard ---

    @contextmanager
    def _guard(self) -> Iterator[None]:
        if not self._unlocked:
            logger.warning("reentrant_call_rejected", pool=self.address[-8:])
            raise Reentrant(f"Pool {self.address[-8:]} is locked")
        self._unlocked = False
        try:
            yield
        finally:
            self._unlocked = True

    @contextmanager
    def _operation(self) -> Iterator[None]:
        with self.runtime.atomic(), self._guard():
            if self.asset0 is None:
                raise Forbidden(f"Pool {self.address[-8:]} not initialized")
            yield

    # --- Asset access ---

    def _ledgers(self) -> tuple[AssetLedger, AssetLedger]:
        return (
            cast(AssetLedger, self.runtime.contract(cast(str, self.asset0))),
            cast(AssetLedger, self.runtime.contract(cast(str, self.asset1))),
        )

    def _held_balances(self) -> tuple[int, int]:
        ledger0, ledger1 = self._ledgers()
        return ledger0.balance_of(self.address), ledger1.balance_of(self.address)

    def _update(self, balance0: int, balance1: int) -> None:
        """Reconcile reserves to true balances."""
        reserve0 = checked_reserve(balance0, self.config.reserve_bits)
        reserve1 = checked_reserve(balance1, self.config.reserve_bits)
        self.runtime.touch(self)
        self._reserve0 = reserve0
        self._reserve1 = reserve1
        self._last_update = max(self._last_update, self.runtime.timestamp)
        self.runtime.emit(Sync(emitter=self.address, reserve0=reserve0, reserve1=reserve1))
        logger.debug(
            "pool_synced",
            pool=self.address[-8:],
            reserve0=reserve0,
            reserve1=reserve1,
        )

    # --- Operations ---

    def mint(self, caller: str, recipient: str) -> int:
        """Issue shares for assets deposited since the last reconciliation.

        Args:
            caller: Account invoking the pool (recorded in the Mint event)
            recipient: Account credited with the new shares

        Returns:
            Number of shares issued

        Raises:
            InsufficientLiquidityMinted: If the deposit is worth zero shares
        """
        with self._operation():
            reserve0, reserve1 = self._reserve0, self._reserve1
            balance0, balance1 = self._held_balances()
            delta = PendingDelta.observe(balance0, balance1, reserve0, reserve1)

            shares = mint_shares(delta, reserve0, reserve1, self.total_shares)
            if shares == 0:
                raise InsufficientLiquidityMinted(
                    f"Deposit ({delta.amount0}, {delta.amount1}) mints no shares"
                )

            self._mint(recipient, shares)
            self._update(balance0, balance1)
            self.runtime.emit(
                Mint(
                    emitter=self.address,
                    sender=caller,
                    amount0=delta.amount0,
                    amount1=delta.amount1,
                    recipient=recipient,
                    shares=shares,
                )
            )
            logger.debug(
                "liquidity_minted",
                pool=self.address[-8:],
                amount0=delta.amount0,
                amount1=delta.amount1,
                shares=shares,
            )
        return shares

    def burn(self, caller: str, recipient: str) -> tuple[int, int]:
        """Redeem the shares the pool holds for a pro-rata cut of its balances.

        Payouts are computed from true balances, so assets sent to the pool
        outside of mint are distributed to the burner as well.

        Returns:
            (amount0, amount1) paid to `recipient`

        Raises:
            NoLiquidityToBurn: If the pool holds none of its own shares
            InsufficientLiquidityBurned: If either payout rounds to zero
        """
        with self._operation():
            ledger0, ledger1 = self._ledgers()
            balance0, balance1 = self._held_balances()
            liquidity = self.balance_of(self.address)
            if liquidity == 0:
                raise NoLiquidityToBurn(f"Pool {self.address[-8:]} holds no shares")

            amount0, amount1 = burn_amounts(liquidity, balance0, balance1, self.total_shares)
            if amount0 == 0 or amount1 == 0:
                raise InsufficientLiquidityBurned(
                    f"Burning {liquidity} shares pays ({amount0}, {amount1})"
                )

            self._burn(self.address, liquidity)
            ledger0.transfer(self.address, recipient, amount0)
            ledger1.transfer(self.address, recipient, amount1)
            self._update(*self._held_balances())
            self.runtime.emit(
                Burn(
                    emitter=self.address,
                    sender=caller,
                    amount0=amount0,
                    amount1=amount1,
                    recipient=recipient,
                    shares=liquidity,
                )
            )
            logger.debug(
                "liquidity_burned",
                pool=self.address[-8:],
                amount0=amount0,
                amount1=amount1,
                shares=liquidity,
            )
        return amount0, amount1

    def swap(self, caller: str, amount0_out: int, amount1_out: int, recipient: str) -> None:
        """Pay out one asset, then verify enough input arrived.

        The output is transferred optimistically; the input is inferred from
        the post-transfer balances and must keep the fee-adjusted product
        of balances at or above the product of the old reserves.

        Raises:
            InvalidOutputRequest: Unless exactly one output is positive
            InsufficientLiquidity: If an output would drain its reserve
            InvalidRecipient: If recipient is one of the pool's assets
            InsufficientInput: If no input was observed
            InvariantViolation: If the fee-adjusted product would decrease
        """
        if amount0_out < 0 or amount1_out < 0 or (amount0_out > 0) == (amount1_out > 0):
            raise InvalidOutputRequest(
                f"Exactly one output must be positive, got ({amount0_out}, {amount1_out})"
            )

        with self._operation():
            reserve0, reserve1 = self._reserve0, self._reserve1
            if amount0_out >= reserve0 or amount1_out >= reserve1:
                raise InsufficientLiquidity(
                    f"Output ({amount0_out}, {amount1_out}) exceeds reserves "
                    f"({reserve0}, {reserve1})"
                )

            recipient_norm = normalize_address(recipient)
            if recipient_norm in (self.asset0, self.asset1):
                raise InvalidRecipient(f"Recipient {recipient_norm[-8:]} is a pool asset")

            ledger0, ledger1 = self._ledgers()
            if amount0_out > 0:
                ledger0.transfer(self.address, recipient_norm, amount0_out)
            if amount1_out > 0:
                ledger1.transfer(self.address, recipient_norm, amount1_out)

            balance0, balance1 = self._held_balances()
            inputs = PendingDelta.swap_inputs(
                balance0, balance1, reserve0, reserve1, amount0_out, amount1_out
            )
            if inputs.is_empty:
                raise InsufficientInput("Swap observed no input in either asset")

            if not invariant_holds(balance0, balance1, inputs, reserve0, reserve1, self.fee_bps):
                raise InvariantViolation(
                    f"Balances ({balance0}, {balance1}) with inputs "
                    f"({inputs.amount0}, {inputs.amount1}) break k of reserves "
                    f"({reserve0}, {reserve1})"
                )

            self._update(balance0, balance1)
            self.runtime.emit(
                Swap(
                    emitter=self.address,
                    sender=caller,
                    amount0_in=inputs.amount0,
                    amount1_in=inputs.amount1,
                    amount0_out=amount0_out,
                    amount1_out=amount1_out,
                    recipient=recipient_norm,
                )
            )
            logger.debug(
                "swap_executed",
                pool=self.address[-8:],
                amount0_in=inputs.amount0,
                amount1_in=inputs.amount1,
                amount0_out=amount0_out,
                amount1_out=amount1_out,
            )

    def skim(self, caller: str, recipient: str) -> tuple[int, int]:
        """Send balances in excess of reserves to `recipient`.

        Returns:
            (amount0, amount1) transferred
        """
        with self._operation():
            ledger0, ledger1 = self._ledgers()
            balance0, balance1 = self._held_balances()
            excess = PendingDelta.observe(balance0, balance1, self._reserve0, self._reserve1)
            if excess.amount0:
                ledger0.transfer(self.address, recipient, excess.amount0)
            if excess.amount1:
                ledger1.transfer(self.address, recipient, excess.amount1)
            logger.debug(
                "pool_skimmed",
                pool=self.address[-8:],
                caller=normalize_address(caller)[-8:],
                amount0=excess.amount0,
                amount1=excess.amount1,
            )
        return excess.amount0, excess.amount1

    def sync(self, caller: str) -> None:
        """Force reserves to match true balances."""
        with self._operation():
            logger.debug("pool_sync_requested", caller=normalize_address(caller)[-8:])
            self._update(*self._held_balances())

    # --- Runtime snapshots ---

    def snapshot(self) -> Any:
        return (
            super().snapshot(),
            self._reserve0,
            self._reserve1,
            self._last_update,
            self.asset0,
            self.asset1,
        )

    def restore(self, state: Any) -> None:
        ledger_state, self._reserve0, self._reserve1, self._last_update, asset0, asset1 = state
        super().restore(ledger_state)
        self.asset0 = asset0
        self.asset1 = asset1


__all__ = ["Pool"]
