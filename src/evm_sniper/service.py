"""Sniper service - wires the log pipeline, registry and executor together."""

from __future__ import annotations

import asyncio
import logging
import signal
import time
from decimal import Decimal

from evm_sniper.chain.decoder import EventDecoder
from evm_sniper.chain.source import WebSocketLogSource
from evm_sniper.chain.trader import DisabledTrader, UniswapV3Trader
from evm_sniper.interfaces.source import ChainEventSource
from evm_sniper.interfaces.trader import Trader
from evm_sniper.models.config import ConfigError, SniperConfig
from evm_sniper.models.events import DecodedPoolCreated, DecodeFailure, RawLogEvent
from evm_sniper.models.records import SniperTarget
from evm_sniper.models.snapshots import ServiceStatus
from evm_sniper.notify.telegram import LogNotifier, TelegramNotifier
from evm_sniper.pipeline.queue import EventQueue
from evm_sniper.pipeline.validator import rejection_reason
from evm_sniper.sniper.executor import SniperExecutor
from evm_sniper.sniper.matcher import PairMatcher
from evm_sniper.sniper.registry import TargetRegistry
from evm_sniper.sniper.wallets import StaticWalletResolver
from evm_sniper.storage.sqlite import SQLiteTargetStore

log = logging.getLogger(__name__)

# Log one decoded Transfer in this many at debug level
TRANSFER_SAMPLE_RATE = 100


def _build_trader(cfg: SniperConfig) -> Trader:
    rpc_url = cfg.active_rpc_url()
    if not rpc_url or not cfg.router_address:
        log.warning("No RPC URL or router configured, sniper buys are disabled")
        return DisabledTrader()
    return UniswapV3Trader(
        rpc_url=rpc_url,
        router_address=cfg.router_address,
        wrapped_native_address=cfg.wrapped_native_address,
        quoter_address=cfg.quoter_address or None,
        gas_price_multiplier=cfg.gas_price_multiplier,
    )


class SniperService:
    """Event-driven pool sniper.

    Raw Transfer logs pass the validator gate into the event queue and are
    decoded one at a time by its drain loop. PoolCreated logs are decoded
    on arrival and matched against the target registry in their own task,
    so a slow buy never stalls the socket reader.
    """

    def __init__(self, cfg: SniperConfig) -> None:
        self._cfg = cfg
        self._running = False
        self._start_time = time.monotonic()
        self._pool_tasks: set[asyncio.Task] = set()

        # Core components
        self.store = SQLiteTargetStore(cfg.db_path)
        self.registry = TargetRegistry()
        self.decoder = EventDecoder()
        self.queue = EventQueue(
            self._process_log,
            pacing_delay=cfg.pacing_delay,
            redrain_delay=cfg.redrain_delay,
            max_depth=cfg.max_queue_depth,
            should_run=lambda: self._running,
        )

        # Collaborators
        self.trader: Trader = _build_trader(cfg)
        self.wallets = StaticWalletResolver(cfg.wallets)
        self.notifier = (
            TelegramNotifier(cfg.telegram_bot_token)
            if cfg.telegram_bot_token else LogNotifier()
        )
        self.executor = SniperExecutor(self.trader, self.wallets, self.notifier, self.store)
        self.matcher = PairMatcher(cfg.wrapped_native_address, self.registry, self.executor)

        # Built at start(), after the config has been validated
        self.source: ChainEventSource | None = None

        # Stats
        self.events_received = 0
        self.events_rejected = 0
        self.transfers_decoded = 0
        self.decode_failures = 0
        self.pools_seen = 0
        self.snipes_dispatched = 0

    @property
    def running(self) -> bool:
        return self._running

    # ── Lifecycle ──────────────────────────────────────────

    async def start(self) -> None:
        """Validate config, restore targets and open the chain subscriptions.

        Raises ConfigError when the streaming endpoint or a required
        contract address is missing.
        """
        if self._running:
            log.warning("Sniper service is already running")
            return

        self._cfg.validate()

        log.info("Starting sniper service")
        log.info("  Network: %s", self._cfg.network.value)
        log.info("  Stream: %s", self._cfg.stream_url())
        log.info("  Factory: %s", self._cfg.factory_address)
        log.info("  Wrapped native: %s", self._cfg.wrapped_native_address)

        await self._ensure_store()
        restored = await self._restore_targets()
        if restored:
            log.info("Restored %d sniper targets", restored)

        if self.source is None:
            self.source = WebSocketLogSource(
                ws_url=self._cfg.stream_url() or "",
                factory_address=self._cfg.factory_address,
                on_pool_created=self._on_pool_created,
                on_raw_log=self._on_raw_log,
                reconnect_delay=self._cfg.reconnect_delay,
            )

        self._running = True
        await self._activity("service_started", "Sniper service started")
        await self.source.start()
        log.info(
            "Sniper service started successfully (%d active targets)",
            self.registry.count_active(),
        )

    async def stop(self) -> None:
        """Stop accepting events and let in-flight work finish."""
        log.info("Stop requested")
        self._running = False

        if self.source is not None:
            await self.source.stop()
        await self.queue.close()
        if self._pool_tasks:
            await asyncio.gather(*self._pool_tasks, return_exceptions=True)

        if self.store.is_open:
            await self._activity("service_stopped", "Sniper service stopped")
            await self.store.close()
        log.info("Sniper service stopped")

    # ── Command surface ────────────────────────────────────

    async def add_target(
        self,
        owner_id: object,
        token_address: str,
        amount: Decimal | str | float,
        max_gas: Decimal | str | float | None = None,
        slippage_bps: int | None = None,
    ) -> bool:
        """Register a target and write it through to the store.

        ``slippage_bps`` is in basis points (500 = 5%), not percent. Values
        below 10 bps are rejected; None uses the configured default.
        """
        slippage = self._cfg.default_slippage_bps if slippage_bps is None else slippage_bps
        if not self.registry.add(owner_id, token_address, amount, max_gas, slippage):
            return False

        target = self.registry.get(owner_id, token_address)
        if target is not None:
            await self._persist(target)
            await self._activity(
                "target_added",
                f"Target {target.token_address} for {target.buy_amount_native} ETH",
                owner_id=target.owner_id,
                token_address=target.token_address,
            )
        return True

    async def remove_target(self, owner_id: object, token_address: str) -> bool:
        removed = self.registry.remove(owner_id, token_address)
        if removed:
            try:
                await self._ensure_store()
                await self.store.delete_target(str(owner_id), token_address)
            except Exception as exc:
                log.error("Could not delete persisted target: %s", exc)
            await self._activity(
                "target_removed",
                f"Target {token_address.lower()} removed",
                owner_id=str(owner_id),
                token_address=token_address.lower(),
            )
        return removed

    def list_targets(self, owner_id: object) -> list[SniperTarget]:
        return self.registry.list_active(owner_id)

    def clear_queue(self) -> int:
        return self.queue.clear()

    def status(self) -> ServiceStatus:
        return ServiceStatus(
            running=self._running,
            active_targets=self.registry.count_active(),
            queue_depth=self.queue.depth,
            is_draining=self.queue.is_draining,
            has_live_connection=bool(self.source is not None and self.source.connected),
            events_received=self.events_received,
            events_rejected=self.events_rejected,
            transfers_decoded=self.transfers_decoded,
            decode_failures=self.decode_failures,
            pools_seen=self.pools_seen,
            snipes_dispatched=self.snipes_dispatched,
            queue_dropped=self.queue.dropped_total,
        )

    def uptime(self) -> int:
        return int(time.monotonic() - self._start_time)

    # ── Source callbacks ───────────────────────────────────

    async def _on_raw_log(self, raw: RawLogEvent) -> None:
        """Validator gate in front of the queue."""
        self.events_received += 1
        reason = rejection_reason(raw)
        if reason is not None:
            self.events_rejected += 1
            log.debug("Dropping log before decode: %s", reason)
            return
        self.queue.enqueue(raw)

    async def _on_pool_created(self, raw: RawLogEvent) -> None:
        pool = self.decoder.decode_pool_created(raw)
        if isinstance(pool, DecodeFailure):
            self.decode_failures += 1
            return

        self.pools_seen += 1
        log.info(
            "New pool created: %s for tokens %s/%s (fee %s)",
            pool.pool_address, pool.token0, pool.token1, int(pool.fee),
        )
        if not self._running:
            return

        task = asyncio.create_task(self._match_pool(pool))
        self._pool_tasks.add(task)
        task.add_done_callback(self._pool_tasks.discard)

    # ── Pipeline steps ─────────────────────────────────────

    async def _process_log(self, raw: RawLogEvent) -> None:
        """Queue handler: decode one Transfer log."""
        result = self.decoder.decode_transfer(raw)
        if isinstance(result, DecodeFailure):
            self.decode_failures += 1
            return

        self.transfers_decoded += 1
        if self.transfers_decoded % TRANSFER_SAMPLE_RATE == 1:
            log.debug(
                "Transfer event: from=%s, to=%s, value=%d",
                result.from_address, result.to_address, result.value,
            )

    async def _match_pool(self, pool: DecodedPoolCreated) -> None:
        try:
            self.snipes_dispatched += await self.matcher.dispatch(pool)
        except Exception as exc:
            log.error("Error checking sniper targets: %s", exc, exc_info=True)

    # ── Persistence ────────────────────────────────────────

    async def _ensure_store(self) -> None:
        if not self.store.is_open:
            await self.store.initialize()

    async def _restore_targets(self) -> int:
        targets = await self.store.load_targets()
        for target in targets:
            self.registry.restore(target)
        return sum(1 for t in targets if t.is_active)

    async def _persist(self, target: SniperTarget) -> None:
        try:
            await self._ensure_store()
            await self.store.save_target(target)
        except Exception as exc:
            log.error("Could not persist target %s: %s", target.key, exc)

    async def _activity(self, event_type: str, message: str, **kwargs) -> None:
        if not self.store.is_open:
            return
        try:
            await self.store.log_activity(event_type, message, **kwargs)
        except Exception as exc:
            log.error("Could not write activity log: %s", exc)


async def run_service(cfg: SniperConfig) -> None:
    """Entry point: run the service until SIGINT/SIGTERM."""
    service = SniperService(cfg)

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    try:
        await service.start()
    except ConfigError as exc:
        log.error("Cannot start sniper service: %s", exc)
        raise

    try:
        await stop_event.wait()
    finally:
        await service.stop()
