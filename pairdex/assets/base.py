"""Fungible balance ledgers.

AssetLedger is the capability the pool engine depends on: it only ever reads
a balance and moves value. ShareLedger implements the balance/allowance
mechanics once; Token uses it for plain assets and Pool uses it for its
liquidity shares.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import structlog

from pairdex.constants import AMOUNT_BITS, NULL_ADDRESS
from pairdex.errors import TransferFailed
from pairdex.models.events import Approval, Transfer
from pairdex.models.types import normalize_address
from pairdex.safe_int import S, SafeIntError

if TYPE_CHECKING:
    from pairdex.runtime import Runtime

logger = structlog.get_logger()

# Allowance value that is never decremented by transfer_from
INFINITE_ALLOWANCE = 2**AMOUNT_BITS - 1


@runtime_checkable
class AssetLedger(Protocol):
    """Capability interface for a fungible asset.

    Callers identify themselves explicitly: `sender` moves its own balance,
    `spender` moves `owner`'s balance against an allowance. Implementations
    raise TransferFailed when their own accounting rejects a move.
    """

    address: str

    def balance_of(self, holder: str) -> int: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool: ...

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool: ...


def _check_amount(amount: int) -> int:
    try:
        return S(amount).to_bits(AMOUNT_BITS)
    except (SafeIntError, TypeError) as err:
        raise TransferFailed(f"Invalid transfer amount: {amount!r}") from err


class ShareLedger:
    """Balances, allowances and total supply for one fungible unit.

    Args:
        runtime: Runtime the ledger is deployed into
        address: Ledger address
        symbol: Short display name used in logs
    """

    def __init__(self, runtime: Runtime, address: str, symbol: str) -> None:
        self.runtime = runtime
        self.address = normalize_address(address, validate=True)
        self.symbol = symbol
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.symbol}, {self.address})"

    # --- Views ---

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        return self._balances.get(normalize_address(holder), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    # --- Mutations ---

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Let `spender` move up to `amount` of `owner`'s balance."""
        owner_norm = normalize_address(owner)
        spender_norm = normalize_address(spender)
        self.runtime.touch(self)
        self._allowances[(owner_norm, spender_norm)] = _check_amount(amount)
        self.runtime.emit(
            Approval(emitter=self.address, owner=owner_norm, spender=spender_norm, amount=amount)
        )
        return True

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move `amount` from `sender` to `recipient`.

        Raises:
            TransferFailed: If the sender's balance is insufficient
        """
        with self.runtime.atomic():
            self._move(normalize_address(sender), normalize_address(recipient), amount)
        return True

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        """Move `amount` of `owner`'s balance on behalf of `spender`.

        Raises:
            TransferFailed: If the allowance or the owner's balance is insufficient
        """
        owner_norm = normalize_address(owner)
        spender_norm = normalize_address(spender)
        amount = _check_amount(amount)
        with self.runtime.atomic():
            if spender_norm != owner_norm:
                allowed = self.allowance(owner_norm, spender_norm)
                if allowed < amount:
                    raise TransferFailed(
                        f"{self.symbol}: allowance {allowed} < {amount} "
                        f"for {spender_norm[-8:]} on {owner_norm[-8:]}"
                    )
                if allowed != INFINITE_ALLOWANCE:
                    self.runtime.touch(self)
                    self._allowances[(owner_norm, spender_norm)] = allowed - amount
            self._move(owner_norm, normalize_address(recipient), amount)
        return True

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        amount = _check_amount(amount)
        balance = self._balances.get(sender, 0)
        if balance < amount:
            logger.debug(
                "transfer_rejected",
                ledger=self.symbol,
                sender=sender[-8:],
                balance=balance,
                amount=amount,
            )
            raise TransferFailed(
                f"{self.symbol}: balance {balance} < {amount} for {sender[-8:]}"
            )
        self.runtime.touch(self)
        self._balances[sender] = balance - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        self.runtime.emit(
            Transfer(emitter=self.address, sender=sender, recipient=recipient, amount=amount)
        )

    def _mint(self, recipient: str, amount: int) -> None:
        amount = _check_amount(amount)
        recipient = normalize_address(recipient)
        self.runtime.touch(self)
        self._total_supply = S(self._total_supply + amount).to_bits(AMOUNT_BITS)
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        self.runtime.emit(
            Transfer(emitter=self.address, sender=NULL_ADDRESS, recipient=recipient, amount=amount)
        )

    def _burn(self, holder: str, amount: int) -> None:
        amount = _check_amount(amount)
        holder = normalize_address(holder)
        self.runtime.touch(self)
        self._balances[holder] = (S(self._balances.get(holder, 0)) - amount).value
        self._total_supply = (S(self._total_supply) - amount).value
        self.runtime.emit(
            Transfer(emitter=self.address, sender=holder, recipient=NULL_ADDRESS, amount=amount)
        )

    # --- Runtime snapshots ---

    def snapshot(self) -> Any:
        return (dict(self._balances), dict(self._allowances), self._total_supply)

    def restore(self, state: Any) -> None:
        balances, allowances, total_supply = state
        self._balances = dict(balances)
        self._allowances = dict(allowances)
        self._total_supply = total_supply


__all__ = ["AssetLedger", "ShareLedger", "INFINITE_ALLOWANCE"]
