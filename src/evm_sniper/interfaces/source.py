"""ChainEventSource protocol - live log subscriptions against a chain node."""

from __future__ import annotations

from typing import Awaitable, Callable, Protocol

from evm_sniper.models.events import RawLogEvent

LogCallback = Callable[[RawLogEvent], Awaitable[None]]


class ChainEventSource(Protocol):
    """Streams factory PoolCreated logs and Transfer-topic logs.

    Implementations deliver each notification to ``on_pool_created`` or
    ``on_raw_log`` and never let an exception escape a callback.
    """

    @property
    def connected(self) -> bool:
        """True while a subscribed connection is live."""
        ...

    async def start(self) -> None:
        """Open the connection and subscribe to both streams."""
        ...

    async def stop(self) -> None:
        """Tear down the connection and stop reconnecting."""
        ...
