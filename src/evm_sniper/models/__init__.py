"""Data models for the evm_sniper service."""

from evm_sniper.models.events import (
    DecodedPoolCreated,
    DecodedTransfer,
    DecodeFailure,
    FeeTier,
    RawLogEvent,
)
from evm_sniper.models.records import (
    ActivityRecord,
    BuyResult,
    ExecutionRecord,
    SniperTarget,
    DEFAULT_SLIPPAGE_BPS,
)
from evm_sniper.models.config import (
    ConfigError,
    Network,
    NetworkDefaults,
    NETWORK_DEFAULTS,
    SniperConfig,
)
from evm_sniper.models.snapshots import ServiceStatus

__all__ = [
    "DecodedPoolCreated", "DecodedTransfer", "DecodeFailure", "FeeTier", "RawLogEvent",
    "ActivityRecord", "BuyResult", "ExecutionRecord", "SniperTarget",
    "DEFAULT_SLIPPAGE_BPS",
    "ConfigError", "Network", "NetworkDefaults", "NETWORK_DEFAULTS", "SniperConfig",
    "ServiceStatus",
]
