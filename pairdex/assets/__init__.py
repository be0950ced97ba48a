"""Fungible asset ledgers consumed by the pool engine."""

from .base import INFINITE_ALLOWANCE, AssetLedger, ShareLedger
from .token import FeeOnTransferToken, Token

__all__ = [
    "AssetLedger",
    "ShareLedger",
    "INFINITE_ALLOWANCE",
    "Token",
    "FeeOnTransferToken",
]
