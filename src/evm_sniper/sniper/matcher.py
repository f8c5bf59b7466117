"""Pair matcher - decides whether a new pool is one a user is waiting for."""

from __future__ import annotations

import asyncio
import logging

from evm_sniper.models.events import DecodedPoolCreated
from evm_sniper.sniper.executor import SniperExecutor
from evm_sniper.sniper.registry import TargetRegistry

log = logging.getLogger(__name__)


class PairMatcher:
    """Matches new wrapped-native pools against active sniper targets."""

    def __init__(
        self,
        wrapped_native_address: str,
        registry: TargetRegistry,
        executor: SniperExecutor,
    ) -> None:
        self._native = wrapped_native_address.lower()
        self._registry = registry
        self._executor = executor

    def match(self, token0: str, token1: str) -> str | None:
        """Return the non-native token of a native pair, else None.

        Exactly one side must be the wrapped native asset; a pool with
        neither or both is not a tradeable target.
        """
        t0, t1 = token0.lower(), token1.lower()
        if t0 == self._native and t1 != self._native:
            return t1
        if t1 == self._native and t0 != self._native:
            return t0
        return None

    async def dispatch(self, pool: DecodedPoolCreated) -> int:
        """Execute every active target for the pool's token. Returns dispatch count.

        Targets fire concurrently; one owner's buy never waits on another's
        confirmation.
        """
        token = self.match(pool.token0, pool.token1)
        if token is None:
            return 0

        # Snapshot before awaiting: executions mutate the registry
        targets = self._registry.active_for_token(token)
        if not targets:
            return 0

        for target in targets:
            log.info(
                "Sniper target matched for user %s! Pool %s for %s",
                target.owner_id, pool.pool_address, token,
            )
        results = await asyncio.gather(
            *(self._executor.execute(t, pool.pool_address, pool.fee) for t in targets),
            return_exceptions=True,
        )

        dispatched = 0
        for target, result in zip(targets, results):
            if isinstance(result, BaseException):
                log.error(
                    "Error executing sniper target %s: %s", target.key, result,
                    exc_info=result,
                )
            elif result is True:
                dispatched += 1
        return dispatched
