"""Exception hierarchy for pool, registry and router operations.

Every error aborts the whole operation it was raised in; the runtime rolls
back any transfers already made. Errors fall into three families:

- InputValidationError: malformed requests, avoidable by the caller
- EconomicError: conditions that depend on pool state and concurrent
  activity; the caller may retry with updated amounts
- StateGuardError: misuse of lifecycle or locking rules
"""


class AmmError(Exception):
    """Base error for all AMM operations."""

    code = "AMM_ERROR"


# --- Input validation ---


class InputValidationError(AmmError):
    """Request is malformed independent of pool state."""

    code = "INVALID_INPUT"


class IdenticalAssets(InputValidationError):
    """Both sides of a pair are the same asset."""

    code = "IDENTICAL_ADDRESSES"


class ZeroAsset(InputValidationError):
    """An asset identifier is the null address."""

    code = "ZERO_ADDRESS"


class InvalidAddress(InputValidationError):
    """Identifier is not a 20-byte hex address."""

    code = "INVALID_ADDRESS"


class PathTooShort(InputValidationError):
    """Swap path has fewer than two assets."""

    code = "INVALID_PATH"


class InvalidOutputRequest(InputValidationError):
    """Swap must request output in exactly one asset."""

    code = "INSUFFICIENT_OUTPUT_AMOUNT"


class InvalidRecipient(InputValidationError):
    """Swap output cannot be sent to one of the pool's own assets."""

    code = "INVALID_TO"


class InsufficientAmount(InputValidationError):
    code = "INSUFFICIENT_AMOUNT"


class InsufficientInputAmount(InputValidationError):
    code = "INSUFFICIENT_INPUT_AMOUNT"


class InsufficientOutputAmount(InputValidationError):
    code = "INSUFFICIENT_OUTPUT_AMOUNT"


class PoolNotFound(InputValidationError):
    """No pool exists for a pair on the requested path."""

    code = "POOL_NOT_FOUND"


class Expired(InputValidationError):
    """Router call submitted after its deadline."""

    code = "EXPIRED"


# --- Economic / invariant ---


class EconomicError(AmmError):
    """Operation rejected by pool economics; retry with new parameters."""

    code = "ECONOMIC"


class InsufficientLiquidity(EconomicError):
    code = "INSUFFICIENT_LIQUIDITY"


class InsufficientLiquidityMinted(EconomicError):
    code = "INSUFFICIENT_LIQUIDITY_MINTED"


class NoLiquidityToBurn(EconomicError):
    """Pool holds none of its own shares."""

    code = "NO_LIQUIDITY_TO_BURN"


class InsufficientLiquidityBurned(EconomicError):
    code = "INSUFFICIENT_LIQUIDITY_BURNED"


class InsufficientInput(EconomicError):
    """Swap observed no input in either asset."""

    code = "INSUFFICIENT_INPUT_AMOUNT"


class InvariantViolation(EconomicError):
    """Fee-adjusted constant product would decrease."""

    code = "K"


class ReserveOverflow(EconomicError):
    """Balance does not fit in a reserve slot."""

    code = "OVERFLOW"


class TransferFailed(EconomicError):
    """Asset ledger rejected a transfer (balance or allowance)."""

    code = "TRANSFER_FAILED"


class SlippageError(EconomicError):
    """Executed amounts fall outside caller-supplied bounds."""

    code = "SLIPPAGE"


class SlippageTooLow(SlippageError):
    """Final swap output is below the caller's minimum."""

    code = "INSUFFICIENT_OUTPUT_AMOUNT"


class InsufficientAAmount(SlippageError):
    code = "INSUFFICIENT_A_AMOUNT"


class InsufficientBAmount(SlippageError):
    code = "INSUFFICIENT_B_AMOUNT"


class ExcessiveInputAmount(SlippageError):
    code = "EXCESSIVE_INPUT_AMOUNT"


# --- State guards ---


class StateGuardError(AmmError):
    """Lifecycle or locking rule broken; indicates a programming error or attack."""

    code = "STATE_GUARD"


class AlreadyInitialized(StateGuardError):
    code = "ALREADY_INITIALIZED"


class Forbidden(StateGuardError):
    """Caller is not allowed to perform this operation."""

    code = "FORBIDDEN"


class Reentrant(StateGuardError):
    """Pool entered again while an operation on it is in flight."""

    code = "LOCKED"


class PairExists(StateGuardError):
    code = "PAIR_EXISTS"


__all__ = [
    "AmmError",
    "InputValidationError",
    "IdenticalAssets",
    "ZeroAsset",
    "InvalidAddress",
    "PathTooShort",
    "InvalidOutputRequest",
    "InvalidRecipient",
    "InsufficientAmount",
    "InsufficientInputAmount",
    "InsufficientOutputAmount",
    "PoolNotFound",
    "Expired",
    "EconomicError",
    "InsufficientLiquidity",
    "InsufficientLiquidityMinted",
    "NoLiquidityToBurn",
    "InsufficientLiquidityBurned",
    "InsufficientInput",
    "InvariantViolation",
    "ReserveOverflow",
    "TransferFailed",
    "SlippageError",
    "SlippageTooLow",
    "InsufficientAAmount",
    "InsufficientBAmount",
    "ExcessiveInputAmount",
    "StateGuardError",
    "AlreadyInitialized",
    "Forbidden",
    "Reentrant",
    "PairExists",
]
