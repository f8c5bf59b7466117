"""Websocket log source - eth_subscribe streams for new pools and transfers."""

from __future__ import annotations

import asyncio
import json
import logging

import websockets
from web3 import Web3
from websockets.asyncio.client import ClientConnection, connect

from evm_sniper.chain.decoder import POOL_CREATED_TOPIC, TRANSFER_TOPIC
from evm_sniper.interfaces.source import LogCallback

log = logging.getLogger(__name__)

POOLS = "pools"
TRANSFERS = "transfers"


class SubscriptionError(RuntimeError):
    """The node refused an eth_subscribe request."""


class WebSocketLogSource:
    """Streams factory PoolCreated logs and network-wide Transfer logs.

    Recovery is a full restart: whenever the socket drops while the source
    is meant to be running, it waits ``reconnect_delay`` seconds, opens a
    new connection and resubscribes both streams from scratch. Callbacks
    are awaited inside a catch-all so a failing handler never kills the
    reader.
    """

    def __init__(
        self,
        ws_url: str,
        factory_address: str,
        on_pool_created: LogCallback,
        on_raw_log: LogCallback,
        reconnect_delay: float = 5.0,
        subscribe_timeout: float = 10.0,
    ) -> None:
        self._ws_url = ws_url
        self._factory = Web3.to_checksum_address(factory_address)
        self._on_pool_created = on_pool_created
        self._on_raw_log = on_raw_log
        self._reconnect_delay = reconnect_delay
        self._subscribe_timeout = subscribe_timeout
        self._ws: ClientConnection | None = None
        self._subs: dict[str, str] = {}  # subscription id -> stream
        self._running = False
        self._task: asyncio.Task | None = None
        self.sessions = 0

    @property
    def connected(self) -> bool:
        return self._ws is not None and len(self._subs) == 2

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._task is not None and not self._task.done():
            log.warning("Log source is already running")
            return
        self._running = True
        self._task = asyncio.create_task(self._run(), name="chain-log-source")

    async def stop(self) -> None:
        self._running = False
        if self._ws is not None:
            await self._ws.close()
        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
        log.info("Log source stopped")

    # ── Connection loop ────────────────────────────────────

    async def _run(self) -> None:
        while self._running:
            try:
                await self._session()
            except asyncio.CancelledError:
                raise
            except websockets.ConnectionClosed as exc:
                log.warning("WebSocket connection closed: %s", exc)
            except Exception as exc:
                log.error("WebSocket provider error: %s", exc)
            finally:
                self._ws = None
                self._subs.clear()

            if self._running:
                log.info("Reconnecting WebSocket in %.1f seconds...", self._reconnect_delay)
                await asyncio.sleep(self._reconnect_delay)

    async def _session(self) -> None:
        log.info("Connecting to WebSocket: %s", self._ws_url)
        async with connect(self._ws_url, max_size=16 * 1024 * 1024) as ws:
            self._ws = ws
            self.sessions += 1
            await self._subscribe(ws)
            log.info("Monitoring new pools on factory %s and Transfer logs", self._factory)

            async for message in ws:
                await self._dispatch(message)

        log.warning("WebSocket connection closed by peer")

    async def _subscribe(self, ws: ClientConnection) -> None:
        """Open both subscriptions and wait for the node to acknowledge them."""
        requests = {
            1: (POOLS, {"address": self._factory, "topics": [POOL_CREATED_TOPIC]}),
            2: (TRANSFERS, {"topics": [TRANSFER_TOPIC]}),
        }
        for req_id, (_, log_filter) in requests.items():
            await ws.send(json.dumps({
                "jsonrpc": "2.0",
                "id": req_id,
                "method": "eth_subscribe",
                "params": ["logs", log_filter],
            }))

        pending = dict(requests)
        while pending:
            raw = await asyncio.wait_for(ws.recv(), timeout=self._subscribe_timeout)
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                log.debug("Non-JSON message during subscribe: %s", str(raw)[:100])
                continue
            if not isinstance(message, dict):
                continue

            req_id = message.get("id")
            if req_id in pending:
                stream, _ = pending.pop(req_id)
                if "error" in message:
                    raise SubscriptionError(f"{stream} subscription refused: {message['error']}")
                self._subs[str(message.get("result"))] = stream
                log.info("Subscribed to %s (id %s)", stream, message.get("result"))
            else:
                # The first stream can start delivering before the second ack
                await self._dispatch(raw)

    # ── Notifications ──────────────────────────────────────

    async def _dispatch(self, raw: str | bytes) -> None:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            log.debug("Non-JSON message: %s", str(raw)[:100])
            return
        if not isinstance(message, dict) or message.get("method") != "eth_subscription":
            return

        params = message.get("params")
        if not isinstance(params, dict):
            return
        stream = self._subs.get(str(params.get("subscription")))
        if stream is None:
            log.debug("Notification for unknown subscription %s", params.get("subscription"))
            return

        callback = self._on_pool_created if stream == POOLS else self._on_raw_log
        try:
            await callback(params.get("result"))
        except Exception as exc:
            log.error("Error in %s callback: %s", stream, exc, exc_info=True)
