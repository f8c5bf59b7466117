"""Protocol interfaces for all evm_sniper components."""

from evm_sniper.interfaces.source import ChainEventSource, LogCallback
from evm_sniper.interfaces.trader import Trader, WalletResolver
from evm_sniper.interfaces.notifier import Notifier
from evm_sniper.interfaces.store import TargetStore

__all__ = [
    "ChainEventSource", "LogCallback",
    "Trader", "WalletResolver",
    "Notifier",
    "TargetStore",
]
