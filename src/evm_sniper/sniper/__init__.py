"""Target registry, pair matching and sniper execution."""

from evm_sniper.sniper.executor import SniperExecutor
from evm_sniper.sniper.matcher import PairMatcher
from evm_sniper.sniper.registry import TargetRegistry
from evm_sniper.sniper.wallets import StaticWalletResolver

__all__ = ["SniperExecutor", "PairMatcher", "TargetRegistry", "StaticWalletResolver"]
