"""CLI entry point for the evm_sniper service."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from evm_sniper.config import ConfigError, load_config
from evm_sniper.service import run_service
from evm_sniper.sniper.registry import TargetRegistry
from evm_sniper.storage.sqlite import SQLiteTargetStore


def _mask(secret: str) -> str:
    return "***configured***" if secret else "(not set)"


def _load(ctx: click.Context):
    try:
        return load_config(ctx.obj["config_path"])
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """evm-sniper - Buy tokens the moment their native pool is created."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Service ────────────────────────────────────────────


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Start the sniper service in the foreground."""
    cfg = _load(ctx)
    if not ctx.obj["verbose"]:
        logging.getLogger().setLevel(cfg.log_level.upper())

    click.echo(f"Starting evm-sniper (network: {cfg.network.value})")
    try:
        asyncio.run(run_service(cfg))
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@cli.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show the effective configuration."""
    cfg = _load(ctx)
    click.echo(f"Network:        {cfg.network.value}")
    click.echo(f"RPC URL:        {cfg.active_rpc_url() or '(not set)'}")
    click.echo(f"Stream URL:     {cfg.stream_url() or '(not set)'}")
    click.echo(f"Factory:        {cfg.factory_address or '(not set)'}")
    click.echo(f"Wrapped native: {cfg.wrapped_native_address or '(not set)'}")
    click.echo(f"Router:         {cfg.router_address or '(not set)'}")
    click.echo(f"Quoter:         {cfg.quoter_address or '(not set)'}")
    click.echo(f"Gas multiplier: {cfg.gas_price_multiplier}")
    click.echo(f"Slippage:       {cfg.default_slippage_bps} bps")
    click.echo(f"Queue depth:    {cfg.max_queue_depth or 'unbounded'}")
    click.echo(f"DB path:        {cfg.db_path}")
    click.echo(f"Telegram:       {_mask(cfg.telegram_bot_token)}")
    click.echo(f"Wallets:        {len(cfg.wallets)} configured")
    try:
        cfg.validate()
    except ConfigError as exc:
        click.echo(f"\nWarning: {exc}", err=True)


# ── Targets ────────────────────────────────────────────


@cli.group()
def targets() -> None:
    """Stage and inspect persisted sniper targets."""


@targets.command("add")
@click.argument("owner")
@click.argument("token")
@click.argument("amount")
@click.option("--max-gas", default=None, help="Gas price ceiling in gwei")
@click.option("--slippage-bps", type=int, default=None, help="Slippage tolerance in basis points, e.g. 500")
@click.pass_context
def targets_add(
    ctx: click.Context,
    owner: str,
    token: str,
    amount: str,
    max_gas: str | None,
    slippage_bps: int | None,
) -> None:
    """Add a target that fires when TOKEN gets a native pool."""
    cfg = _load(ctx)
    registry = TargetRegistry()
    slippage = cfg.default_slippage_bps if slippage_bps is None else slippage_bps
    if not registry.add(owner, token, amount, max_gas, slippage):
        click.echo("Error: invalid target (check token address, amount and limits).", err=True)
        sys.exit(1)
    target = registry.get(owner, token)

    async def _add():
        store = SQLiteTargetStore(cfg.db_path)
        await store.initialize()
        try:
            await store.save_target(target)
            await store.log_activity(
                "target_added",
                f"Target {target.token_address} for {target.buy_amount_native} ETH",
                owner_id=target.owner_id,
                token_address=target.token_address,
            )
        finally:
            await store.close()

    asyncio.run(_add())
    click.echo(f"Target added: {target.buy_amount_native} ETH of {target.token_address} for {owner}")


@targets.command("remove")
@click.argument("owner")
@click.argument("token")
@click.pass_context
def targets_remove(ctx: click.Context, owner: str, token: str) -> None:
    """Remove a persisted target."""
    cfg = _load(ctx)

    async def _remove() -> bool:
        store = SQLiteTargetStore(cfg.db_path)
        await store.initialize()
        try:
            return await store.delete_target(owner, token)
        finally:
            await store.close()

    if asyncio.run(_remove()):
        click.echo(f"Target removed: {token.lower()}")
    else:
        click.echo(f"No target for {token.lower()} owned by {owner}", err=True)
        sys.exit(1)


@targets.command("list")
@click.argument("owner")
@click.pass_context
def targets_list(ctx: click.Context, owner: str) -> None:
    """List an owner's active targets."""
    cfg = _load(ctx)

    async def _list():
        store = SQLiteTargetStore(cfg.db_path)
        await store.initialize()
        try:
            return await store.load_targets()
        finally:
            await store.close()

    registry = TargetRegistry()
    for target in asyncio.run(_list()):
        registry.restore(target)

    active = registry.list_active(owner)
    if not active:
        click.echo("No active targets.")
        return

    click.echo(f"{'TOKEN':<44} {'AMOUNT':>12} {'MAX GAS':>10} {'SLIPPAGE':>9}")
    click.echo("-" * 78)
    for t in active:
        max_gas = f"{t.max_gas_price} gwei" if t.max_gas_price is not None else "-"
        click.echo(
            f"{t.token_address:<44} {t.buy_amount_native:>12} "
            f"{max_gas:>10} {t.slippage_bps:>5} bps"
        )


# ── History ────────────────────────────────────────────


@cli.command()
@click.option("--owner", default=None, help="Only show this owner's attempts")
@click.option("--limit", type=int, default=20, help="Max rows to show")
@click.pass_context
def executions(ctx: click.Context, owner: str | None, limit: int) -> None:
    """Show recorded sniper attempts."""
    cfg = _load(ctx)

    async def _executions():
        store = SQLiteTargetStore(cfg.db_path)
        await store.initialize()
        try:
            return await store.get_executions(owner, limit)
        finally:
            await store.close()

    rows = asyncio.run(_executions())
    if not rows:
        click.echo("No sniper executions recorded.")
        return

    for r in rows:
        outcome = f"tx {r.tx_hash}" if r.dispatched else f"failed: {r.error}"
        click.echo(
            f"{r.executed_at}  user {r.owner_id}  {r.amount_native} ETH of "
            f"{r.token_address} via {r.pool_address}  {outcome}"
        )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
