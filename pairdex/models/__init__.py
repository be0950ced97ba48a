"""Pydantic models and shared types."""

from pairdex.models.events import (
    AnyEvent,
    Approval,
    Burn,
    Event,
    Mint,
    PoolCreated,
    Swap,
    Sync,
    Transfer,
)
from pairdex.models.types import (
    Address,
    Uint256,
    address_to_int,
    is_valid_address,
    normalize_address,
)

__all__ = [
    # Events
    "Event",
    "AnyEvent",
    "Transfer",
    "Approval",
    "PoolCreated",
    "Mint",
    "Burn",
    "Swap",
    "Sync",
    # Types
    "Address",
    "Uint256",
    "address_to_int",
    "is_valid_address",
    "normalize_address",
]
