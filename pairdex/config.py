"""Configuration and logging setup for pairdex."""

import logging
import os
from dataclasses import dataclass

import structlog

from pairdex.constants import DEFAULT_FEE_BPS, FEE_DENOMINATOR, POOL_INIT_CODE_HASH, RESERVE_BITS


@dataclass(frozen=True)
class AmmConfig:
    """Centralized configuration for pools created by a registry.

    Attributes:
        fee_bps: Swap fee charged on input, in basis points (default: 30 = 0.3%)
        reserve_bits: Width of the reserve slots; balances above 2**bits - 1
            cannot be reconciled (default: 112)
        init_code_hash: Salt-independent input to pool address derivation
    """

    fee_bps: int = DEFAULT_FEE_BPS
    reserve_bits: int = RESERVE_BITS
    init_code_hash: bytes = POOL_INIT_CODE_HASH

    def __post_init__(self) -> None:
        if not 0 <= self.fee_bps < FEE_DENOMINATOR:
            raise ValueError(f"fee_bps must be in [0, {FEE_DENOMINATOR}), got {self.fee_bps}")
        if not 0 < self.reserve_bits <= 128:
            raise ValueError(f"reserve_bits must be in (0, 128], got {self.reserve_bits}")
        if len(self.init_code_hash) != 32:
            raise ValueError("init_code_hash must be 32 bytes")

    @property
    def fee_multiplier(self) -> int:
        """Fee multiplier for AMM math (10000 - fee_bps).

        For 30 bps (0.3%), this returns 9970.
        """
        return FEE_DENOMINATOR - self.fee_bps

    @classmethod
    def from_env(cls) -> "AmmConfig":
        """Build a config from environment variables.

        - PAIRDEX_FEE_BPS: swap fee in basis points (default: 30)
        """
        fee_bps = int(os.environ.get("PAIRDEX_FEE_BPS", str(DEFAULT_FEE_BPS)))
        return cls(fee_bps=fee_bps)


# Default configuration instance
DEFAULT_CONFIG = AmmConfig()


def configure_logging(level: str | int | None = None) -> None:
    """Configure structlog for console output.

    Args:
        level: Log level name or number. Defaults to PAIRDEX_LOG_LEVEL,
            falling back to INFO.
    """
    if level is None:
        level = os.environ.get("PAIRDEX_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
