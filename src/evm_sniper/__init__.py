"""evm_sniper - event-driven pool sniper for EVM chains."""

__version__ = "0.1.0"
