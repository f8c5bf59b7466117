"""Chain log models: raw JSON-RPC logs and their decoded forms."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Mapping

# A log object exactly as the node delivered it over eth_subscribe.
# Untrusted: any key may be missing or carry the wrong type.
RawLogEvent = Mapping[str, Any]


class FeeTier(IntEnum):
    """Pool fee tiers enabled on the V3 factory (hundredths of a bip)."""

    LOWEST = 100  # 0.01%
    LOW = 500  # 0.05%
    MEDIUM = 3000  # 0.3%
    HIGH = 10000  # 1%

    @classmethod
    def coerce(cls, value: int) -> FeeTier | int:
        """Map a raw fee to a known tier, keeping unknown tiers as ints."""
        try:
            return cls(value)
        except ValueError:
            return value


@dataclass(frozen=True)
class DecodedTransfer:
    """ERC20 Transfer(address indexed from, address indexed to, uint256 value)."""

    from_address: str
    to_address: str
    value: int  # raw token units, never narrowed
    contract: str
    block_number: int | None = None
    transaction_hash: str | None = None


@dataclass(frozen=True)
class DecodedPoolCreated:
    """Factory PoolCreated(token0, token1, fee, tickSpacing, pool)."""

    token0: str
    token1: str
    fee: FeeTier | int
    tick_spacing: int
    pool_address: str
    block_number: int | None = None
    transaction_hash: str | None = None


@dataclass(frozen=True)
class DecodeFailure:
    """Why a log could not be decoded.

    ``expected`` marks noise (short buffers, foreign events sharing the
    topic hash) that is logged at debug level only.
    """

    reason: str
    detail: str = ""
    expected: bool = False
