"""Sniper executor - consumes a matched target and dispatches the buy."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from evm_sniper.interfaces.notifier import Notifier
from evm_sniper.interfaces.store import TargetStore
from evm_sniper.interfaces.trader import Trader, WalletResolver
from evm_sniper.models.events import FeeTier
from evm_sniper.models.records import BuyResult, ExecutionRecord, SniperTarget

log = logging.getLogger(__name__)


class SniperExecutor:
    """Fires one priority buy per matched target.

    The target is marked consumed before the first await, so a redelivered
    pool event or a slow trade cannot fire it twice. A failed buy is
    terminal: the owner is told and has to add the target again.
    """

    def __init__(
        self,
        trader: Trader,
        wallets: WalletResolver,
        notifier: Notifier,
        store: TargetStore | None = None,
    ) -> None:
        self.trader = trader
        self.wallets = wallets
        self.notifier = notifier
        self.store = store
        self.dispatched_total = 0

    async def execute(
        self,
        target: SniperTarget,
        pool_address: str,
        fee: FeeTier | int = FeeTier.MEDIUM,
    ) -> bool:
        """Consume ``target`` and submit its buy.

        Returns whether the buy was dispatched (a transaction went out),
        not whether it ultimately succeeded on-chain.
        """
        if not target.is_active:
            log.debug("Target %s/%s already consumed", target.owner_id, target.token_address)
            return False
        target.is_active = False

        log.info(
            "Executing sniper buy for user %s: %s ETH of %s via pool %s",
            target.owner_id, target.buy_amount_native, target.token_address, pool_address,
        )
        await self._persist(target)

        result = await self._buy(target, fee)
        dispatched = result.success or result.tx_hash is not None
        if dispatched:
            self.dispatched_total += 1
            log.info(
                "Sniper buy dispatched for user %s (tx=%s, status=%s)",
                target.owner_id, result.tx_hash, result.status,
            )
        else:
            log.warning(
                "Sniper buy failed for user %s on %s: %s",
                target.owner_id, target.token_address, result.error,
            )

        await self._record(target, pool_address, dispatched, result)
        await self._notify(target, pool_address, result)
        return dispatched

    async def _buy(self, target: SniperTarget, fee: FeeTier | int) -> BuyResult:
        try:
            wallet_ref = await self.wallets.resolve(target.owner_id)
        except Exception as exc:
            log.error("Wallet lookup failed for user %s: %s", target.owner_id, exc)
            return BuyResult(success=False, error=f"wallet lookup failed: {exc}")
        if wallet_ref is None:
            return BuyResult(success=False, error="no wallet configured")

        try:
            return await self.trader.buy(
                wallet_ref,
                target.token_address,
                target.buy_amount_native,
                fee=int(fee),
                slippage_bps=target.slippage_bps,
                max_gas_price_gwei=target.max_gas_price,
            )
        except Exception as exc:
            log.error("Trader raised for user %s: %s", target.owner_id, exc, exc_info=True)
            return BuyResult(success=False, error=str(exc))

    async def _persist(self, target: SniperTarget) -> None:
        if self.store is None:
            return
        try:
            await self.store.save_target(target)
        except Exception as exc:
            log.error("Could not persist consumed target %s: %s", target.key, exc)

    async def _record(
        self,
        target: SniperTarget,
        pool_address: str,
        dispatched: bool,
        result: BuyResult,
    ) -> None:
        if self.store is None:
            return
        try:
            await self.store.record_execution(ExecutionRecord(
                owner_id=target.owner_id,
                token_address=target.token_address,
                pool_address=pool_address,
                amount_native=target.buy_amount_native,
                dispatched=dispatched,
                tx_hash=result.tx_hash,
                error=result.error,
                executed_at=datetime.now(timezone.utc).isoformat(),
            ))
            await self.store.log_activity(
                "snipe_dispatched" if dispatched else "snipe_failed",
                f"Pool {pool_address}: {result.tx_hash or result.error}",
                owner_id=target.owner_id,
                token_address=target.token_address,
            )
        except Exception as exc:
            log.error("Could not record sniper execution: %s", exc)

    async def _notify(self, target: SniperTarget, pool_address: str, result: BuyResult) -> None:
        if result.success:
            message = (
                f"Sniper bought {target.buy_amount_native} ETH of {target.token_address}\n"
                f"Pool: {pool_address}\nTx: {result.tx_hash}"
            )
        elif result.tx_hash:
            message = (
                f"Sniper buy for {target.token_address} was sent but failed on-chain\n"
                f"Tx: {result.tx_hash}"
            )
        else:
            message = (
                f"Sniper buy for {target.token_address} failed: {result.error}\n"
                "The target has been used up; add it again to retry."
            )
        try:
            await self.notifier.notify(target.owner_id, message)
        except Exception as exc:
            log.error("Could not notify user %s: %s", target.owner_id, exc)
