from evm_sniper.notify.telegram import LogNotifier, TelegramNotifier

__all__ = ["LogNotifier", "TelegramNotifier"]
