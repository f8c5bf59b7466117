"""Configuration loading: TOML file + environment variables + network defaults."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from evm_sniper.models.config import (
    NETWORK_DEFAULTS,
    ConfigError,
    Network,
    SniperConfig,
)

__all__ = ["ConfigError", "load_config"]


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "EVM_SNIPER_",
) -> SniperConfig:
    """Load service configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (EVM_SNIPER_WSS_URL, etc.)
        2. TOML config file
        3. Per-network contract defaults
        4. Defaults from SniperConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = SniperConfig()

    # ── Service section ────────────────────────────────────
    service = raw.get("service", {})
    if v := service.get("log_level"):
        cfg.log_level = str(v)
    if (v := service.get("reconnect_delay")) is not None:
        cfg.reconnect_delay = float(v)
    if (v := service.get("pacing_delay")) is not None:
        cfg.pacing_delay = float(v)
    if (v := service.get("redrain_delay")) is not None:
        cfg.redrain_delay = float(v)
    if v := service.get("max_queue_depth"):
        cfg.max_queue_depth = int(v)

    # ── Chain section ──────────────────────────────────────
    chain = raw.get("chain", {})
    if v := chain.get("network"):
        cfg.network = _network(v)
    if v := chain.get("rpc_url"):
        cfg.rpc_url = str(v)
    if v := chain.get("testnet_rpc_url"):
        cfg.testnet_rpc_url = str(v)
    if v := chain.get("wss_url"):
        cfg.wss_url = str(v)
    if v := chain.get("factory_address"):
        cfg.factory_address = str(v)
    if v := chain.get("wrapped_native_address"):
        cfg.wrapped_native_address = str(v)
    if v := chain.get("router_address"):
        cfg.router_address = str(v)
    if v := chain.get("quoter_address"):
        cfg.quoter_address = str(v)
    if v := chain.get("gas_price_multiplier"):
        cfg.gas_price_multiplier = float(v)

    # ── Sniper section ─────────────────────────────────────
    sniper = raw.get("sniper", {})
    if v := sniper.get("default_slippage_bps"):
        cfg.default_slippage_bps = int(v)

    # ── Storage section ────────────────────────────────────
    storage = raw.get("storage", {})
    if v := storage.get("db_path"):
        cfg.db_path = str(v)

    # ── Telegram section ───────────────────────────────────
    telegram = raw.get("telegram", {})
    if v := telegram.get("bot_token"):
        cfg.telegram_bot_token = str(v)

    # ── Wallets section ────────────────────────────────────
    wallets = raw.get("wallets", {})
    cfg.wallets = {str(owner): str(key) for owner, key in wallets.items()}

    # ── Environment variable overrides (highest priority) ──
    if net := os.environ.get(f"{env_prefix}NETWORK"):
        cfg.network = _network(net)
    if rpc := os.environ.get(f"{env_prefix}RPC_URL"):
        cfg.rpc_url = rpc
    if rpc := os.environ.get(f"{env_prefix}TESTNET_RPC_URL"):
        cfg.testnet_rpc_url = rpc
    if wss := os.environ.get(f"{env_prefix}WSS_URL"):
        cfg.wss_url = wss
    if factory := os.environ.get(f"{env_prefix}FACTORY_ADDRESS"):
        cfg.factory_address = factory
    if router := os.environ.get(f"{env_prefix}ROUTER_ADDRESS"):
        cfg.router_address = router
    if token := os.environ.get(f"{env_prefix}TELEGRAM_TOKEN"):
        cfg.telegram_bot_token = token
    if db := os.environ.get(f"{env_prefix}DB_PATH"):
        cfg.db_path = db
    if level := os.environ.get(f"{env_prefix}LOG_LEVEL"):
        cfg.log_level = level

    _apply_network_defaults(cfg)

    # Expand ~ in paths
    if cfg.db_path != ":memory:":
        cfg.db_path = str(Path(cfg.db_path).expanduser())

    return cfg


def _network(value: object) -> Network:
    try:
        return Network(str(value).lower())
    except ValueError:
        raise ConfigError(
            f"Unknown network {value!r} (expected 'mainnet' or 'testnet')"
        ) from None


def _apply_network_defaults(cfg: SniperConfig) -> None:
    """Fill contract addresses the user did not set from the network table."""
    defaults = NETWORK_DEFAULTS[cfg.network]
    if not cfg.factory_address:
        cfg.factory_address = defaults.factory_address
    if not cfg.wrapped_native_address:
        cfg.wrapped_native_address = defaults.wrapped_native_address
    if not cfg.router_address:
        cfg.router_address = defaults.router_address
    if not cfg.quoter_address:
        cfg.quoter_address = defaults.quoter_address
