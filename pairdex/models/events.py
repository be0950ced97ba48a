"""Pydantic records for events emitted by tokens, pools and the registry.

Events are appended to the runtime's event log when an operation commits.
A reverted operation leaves no events behind.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field

from pairdex.models.types import Address, Uint256


class Event(BaseModel):
    """Common fields for every event record."""

    emitter: Address = Field(description="Contract that emitted the event")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Transfer(Event):
    """Movement of a fungible balance (assets or pool shares).

    Minting uses the null address as sender, burning uses it as recipient.
    """

    kind: Literal["transfer"] = "transfer"
    sender: Address
    recipient: Address
    amount: Uint256


class Approval(Event):
    kind: Literal["approval"] = "approval"
    owner: Address
    spender: Address
    amount: Uint256


class PoolCreated(Event):
    """A registry created and initialized a new pool."""

    kind: Literal["pool_created"] = "pool_created"
    asset0: Address
    asset1: Address
    pool: Address
    index: int = Field(description="Number of pools after creation")


class Mint(Event):
    kind: Literal["mint"] = "mint"
    sender: Address
    amount0: Uint256
    amount1: Uint256
    recipient: Address
    shares: Uint256


class Burn(Event):
    kind: Literal["burn"] = "burn"
    sender: Address
    amount0: Uint256
    amount1: Uint256
    recipient: Address
    shares: Uint256


class Swap(Event):
    kind: Literal["swap"] = "swap"
    sender: Address
    amount0_in: Uint256 = Field(alias="amount0In")
    amount1_in: Uint256 = Field(alias="amount1In")
    amount0_out: Uint256 = Field(alias="amount0Out")
    amount1_out: Uint256 = Field(alias="amount1Out")
    recipient: Address


class Sync(Event):
    """Reserves were reconciled to true balances."""

    kind: Literal["sync"] = "sync"
    reserve0: Uint256
    reserve1: Uint256


AnyEvent = Annotated[
    Transfer | Approval | PoolCreated | Mint | Burn | Swap | Sync,
    Discriminator("kind"),
]


__all__ = [
    "Event",
    "Transfer",
    "Approval",
    "PoolCreated",
    "Mint",
    "Burn",
    "Swap",
    "Sync",
    "AnyEvent",
]
