"""Protocol constants for the pairdex AMM.

Centralizes fee parameters, reserve width and address-derivation inputs.
"""

from eth_utils import keccak

from pairdex.models.types import is_valid_address

# Fee in basis points charged on swap input (30 = 0.3%)
DEFAULT_FEE_BPS = 30
FEE_DENOMINATOR = 10_000

# Reserve slots are uint112 so that reserve0 * reserve1 fits comfortably in uint256
RESERVE_BITS = 112

# Share balances and transfer amounts are uint256
AMOUNT_BITS = 256

# Hash of the pool "creation code": the salt-independent input to pool addresses.
# Derived from a fixed label so every registry computes the same pool addresses.
POOL_INIT_CODE_HASH: bytes = keccak(text="pairdex.amm.pool.Pool/v1")

# Prefix byte for CREATE2-style address derivation
CREATE2_PREFIX = b"\xff"


def _validate_address(name: str, address: str) -> str:
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# Null asset identifier; never a valid pool asset
NULL_ADDRESS = _validate_address("NULL", "0x0000000000000000000000000000000000000000")
