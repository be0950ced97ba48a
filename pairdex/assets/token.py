"""In-memory fungible assets.

Token is the reference AssetLedger used for simulations and tests.
FeeOnTransferToken burns a cut of every transfer, so the amount a pool
receives is less than the amount the sender sent.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pairdex.constants import FEE_DENOMINATOR
from pairdex.runtime import GENESIS_DEPLOYER
from pairdex.safe_int import S

from .base import ShareLedger, _check_amount

if TYPE_CHECKING:
    from pairdex.runtime import Runtime


class Token(ShareLedger):
    """Plain fungible asset with an unrestricted faucet."""

    @classmethod
    def deploy(
        cls,
        runtime: Runtime,
        symbol: str,
        address: str | None = None,
        **kwargs: int,
    ) -> Token:
        """Create a token and register it with the runtime.

        Args:
            runtime: Target runtime
            symbol: Display symbol
            address: Explicit address; derived from the runtime nonce if None
            **kwargs: Extra constructor arguments for subclasses
        """
        if address is None:
            address = runtime.next_address(GENESIS_DEPLOYER)
        token = cls(runtime, address, symbol, **kwargs)
        return runtime.deploy(token)

    def mint(self, recipient: str, amount: int) -> None:
        """Create `amount` new units for `recipient`."""
        with self.runtime.atomic():
            self._mint(recipient, amount)

    def burn(self, holder: str, amount: int) -> None:
        """Destroy `amount` units held by `holder`."""
        with self.runtime.atomic():
            self._burn(holder, amount)


class FeeOnTransferToken(Token):
    """Token that burns `transfer_fee_bps` of every transfer.

    Args:
        transfer_fee_bps: Share of each transfer destroyed, in basis points
    """

    def __init__(
        self,
        runtime: Runtime,
        address: str,
        symbol: str,
        transfer_fee_bps: int = 100,
    ) -> None:
        super().__init__(runtime, address, symbol)
        if not 0 <= transfer_fee_bps < FEE_DENOMINATOR:
            raise ValueError(f"transfer_fee_bps out of range: {transfer_fee_bps}")
        self.transfer_fee_bps = transfer_fee_bps

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        amount = _check_amount(amount)
        fee = (S(amount) * self.transfer_fee_bps // FEE_DENOMINATOR).value
        super()._move(sender, recipient, amount)
        if fee:
            self._burn(recipient, fee)
