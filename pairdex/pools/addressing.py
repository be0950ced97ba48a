"""Canonical pair ordering and deterministic pool addresses.

A pool's address depends only on the registry address, the sorted asset
pair and the pool init-code hash, so anyone can compute it without asking
the registry:

    salt = keccak256(asset0 ++ asset1)
    pool = keccak256(0xff ++ registry ++ salt ++ init_code_hash)[12:]
"""

from eth_abi.packed import encode_packed
from eth_utils import keccak

from pairdex.constants import CREATE2_PREFIX, NULL_ADDRESS, POOL_INIT_CODE_HASH
from pairdex.errors import IdenticalAssets, InvalidAddress, ZeroAsset
from pairdex.models.types import address_to_int, is_valid_address, normalize_address


def sort_assets(asset_a: str, asset_b: str) -> tuple[str, str]:
    """Order a pair canonically (lower numeric address first).

    Raises:
        InvalidAddress: If either identifier is not a 20-byte hex address
        IdenticalAssets: If both identifiers are the same asset
        ZeroAsset: If the lower identifier is the null address
    """
    a = normalize_address(asset_a)
    b = normalize_address(asset_b)
    for asset in (a, b):
        if not is_valid_address(asset):
            raise InvalidAddress(f"Invalid asset address: {asset}")
    if a == b:
        raise IdenticalAssets(f"Pair uses the same asset twice: {a}")
    asset0, asset1 = (a, b) if address_to_int(a) < address_to_int(b) else (b, a)
    if asset0 == NULL_ADDRESS:
        raise ZeroAsset("Pair includes the null address")
    return asset0, asset1


def pair_salt(asset0: str, asset1: str) -> bytes:
    """Salt for an already sorted pair."""
    return keccak(encode_packed(["address", "address"], [asset0, asset1]))


def pair_for(
    registry: str,
    asset_a: str,
    asset_b: str,
    init_code_hash: bytes = POOL_INIT_CODE_HASH,
) -> str:
    """Compute the address of the pool for a pair, in either order.

    Args:
        registry: Address of the registry that creates the pool
        asset_a: One asset of the pair
        asset_b: The other asset
        init_code_hash: Pool init-code hash used by that registry

    Returns:
        Lowercase pool address
    """
    asset0, asset1 = sort_assets(asset_a, asset_b)
    registry_norm = normalize_address(registry, validate=True)
    digest = keccak(
        CREATE2_PREFIX
        + bytes.fromhex(registry_norm[2:])
        + pair_salt(asset0, asset1)
        + init_code_hash
    )
    return "0x" + digest[12:].hex()


__all__ = ["sort_assets", "pair_salt", "pair_for"]
