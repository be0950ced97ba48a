"""Test helpers module for shared test utilities.

- constants: Asset and account addresses, clock and funding amounts
- factories: Clock, funding and pool seeding
- doubles: Hostile asset implementations
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    FUNDING,
    GENESIS_TIME,
    LP,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    TOKEN_D,
    TOKEN_FEE,
)
from tests.helpers.doubles import CallbackToken
from tests.helpers.factories import Clock, fund, seed_pool

__all__ = [
    # Constants
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "TOKEN_D",
    "TOKEN_FEE",
    "ALICE",
    "BOB",
    "LP",
    "GENESIS_TIME",
    "FUNDING",
    # Factories
    "Clock",
    "fund",
    "seed_pool",
    # Doubles
    "CallbackToken",
]
