"""EVM chain access: log subscriptions, ABI decoding, swaps."""

from evm_sniper.chain.decoder import (
    POOL_CREATED_TOPIC,
    TRANSFER_TOPIC,
    EventDecoder,
)
from evm_sniper.chain.source import WebSocketLogSource
from evm_sniper.chain.trader import DisabledTrader, UniswapV3Trader

__all__ = [
    "POOL_CREATED_TOPIC", "TRANSFER_TOPIC", "EventDecoder",
    "WebSocketLogSource",
    "DisabledTrader", "UniswapV3Trader",
]
