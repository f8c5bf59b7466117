"""Configuration models for the sniper service."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


class ConfigError(ValueError):
    """Required configuration is missing or malformed."""


def is_address(value: object) -> bool:
    """True for a 0x-prefixed 20-byte hex string (any case)."""
    return isinstance(value, str) and bool(_ADDRESS_RE.match(value))


class Network(str, Enum):
    """Which chain deployment the service talks to."""

    MAINNET = "mainnet"
    TESTNET = "testnet"


@dataclass(frozen=True)
class NetworkDefaults:
    """Well-known contract addresses for a network."""

    chain_id: int
    factory_address: str
    wrapped_native_address: str
    router_address: str
    quoter_address: str


# Base mainnet / Base Sepolia Uniswap V3 deployments
NETWORK_DEFAULTS = {
    Network.MAINNET: NetworkDefaults(
        chain_id=8453,
        factory_address="0x33128a8fC17869897dcE68Ed026d694621f6FDfD",
        wrapped_native_address="0x4200000000000000000000000000000000000006",
        router_address="0x2626664c2603336E57B271c5C0b26F421741e481",
        quoter_address="0x3d4e44Eb1374240CE5F1B871ab261CD16335B76a",
    ),
    Network.TESTNET: NetworkDefaults(
        chain_id=84532,
        factory_address="0x4752ba5DBc23f44D87826276BF6Fd6b1C372aD24",
        wrapped_native_address="0x4200000000000000000000000000000000000006",
        router_address="0x94cC0AaC535CCDB3C01d6787D6413C739ae12bc4",
        quoter_address="0xC5290058841028F1614F3A6F0F5816cAd0df5E27",
    ),
}


@dataclass
class SniperConfig:
    """Complete service configuration."""

    # Service
    log_level: str = "info"
    reconnect_delay: float = 5.0  # seconds before a full resubscribe
    pacing_delay: float = 0.1  # seconds between queue items
    redrain_delay: float = 1.0  # seconds before picking up leftovers
    max_queue_depth: int | None = None  # None = unbounded

    # Chain
    network: Network = Network.MAINNET
    rpc_url: str = ""
    testnet_rpc_url: str = ""
    wss_url: str = ""
    factory_address: str = ""
    wrapped_native_address: str = ""
    router_address: str = ""
    quoter_address: str = ""
    gas_price_multiplier: float = 1.2

    # Sniper
    default_slippage_bps: int = 500

    # Storage
    db_path: str = "~/.evm_sniper/state.db"

    # Telegram
    telegram_bot_token: str = ""

    # owner id -> private key, for StaticWalletResolver
    wallets: dict[str, str] = field(default_factory=dict)

    def active_rpc_url(self) -> str:
        """HTTP RPC endpoint for the selected network."""
        if self.network == Network.TESTNET:
            return self.testnet_rpc_url
        return self.rpc_url

    def stream_url(self) -> str | None:
        """Websocket endpoint, derived from the RPC URL when not set."""
        if self.wss_url:
            return self.wss_url
        rpc = self.active_rpc_url()
        if rpc:
            return rpc.replace("https://", "wss://")
        return None

    def validate(self) -> None:
        """Raise ConfigError unless the service has what it needs to start."""
        if not self.stream_url():
            raise ConfigError(
                "No websocket URL: set wss_url, or an https RPC URL to derive one from"
            )
        for name in ("factory_address", "wrapped_native_address"):
            value = getattr(self, name)
            if not value:
                raise ConfigError(f"{name} is not configured")
            if not is_address(value):
                raise ConfigError(f"{name} is not a 20-byte hex address: {value!r}")
