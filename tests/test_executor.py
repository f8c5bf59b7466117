"""SniperExecutor consumption, dispatch and reporting."""

from __future__ import annotations

from decimal import Decimal

from evm_sniper.models.events import FeeTier
from evm_sniper.models.records import SniperTarget
from evm_sniper.sniper.executor import SniperExecutor

from tests.factories import POOL, TOKEN
from tests.mocks import TEST_TX_HASH, MockNotifier, MockTrader, MockWallets


def _target(**overrides) -> SniperTarget:
    defaults = dict(
        owner_id="42",
        token_address=TOKEN,
        buy_amount_native=Decimal("0.5"),
        max_gas_price=Decimal("3"),
        slippage_bps=250,
    )
    defaults.update(overrides)
    return SniperTarget(**defaults)


async def test_successful_buy(store):
    trader, notifier = MockTrader(), MockNotifier()
    executor = SniperExecutor(trader, MockWallets(), notifier, store)
    target = _target()

    assert await executor.execute(target, POOL, FeeTier.LOW)

    assert not target.is_active
    assert trader.buy_calls == [{
        "wallet_ref": "0x" + "11" * 32,
        "token_address": TOKEN,
        "native_amount": Decimal("0.5"),
        "fee": 500,
        "slippage_bps": 250,
        "max_gas_price_gwei": Decimal("3"),
    }]
    assert executor.dispatched_total == 1
    assert "Sniper bought" in notifier.for_owner("42")[0]

    (record,) = await store.get_executions("42")
    assert record.dispatched
    assert record.tx_hash == TEST_TX_HASH
    assert record.pool_address == POOL

    (saved,) = await store.load_targets()
    assert not saved.is_active


async def test_failed_buy_still_consumes_and_notifies(store):
    trader = MockTrader(succeed=False, tx_hash=None, error="insufficient funds")
    notifier = MockNotifier()
    executor = SniperExecutor(trader, MockWallets(), notifier, store)
    target = _target()

    assert not await executor.execute(target, POOL)

    assert not target.is_active
    assert "insufficient funds" in notifier.for_owner("42")[0]
    (record,) = await store.get_executions()
    assert not record.dispatched
    assert record.error == "insufficient funds"
    activity = await store.get_recent_activity()
    assert activity[0].event_type == "snipe_failed"


async def test_reverted_buy_counts_as_dispatched():
    trader = MockTrader(succeed=False, error="transaction reverted")
    notifier = MockNotifier()
    executor = SniperExecutor(trader, MockWallets(), notifier)

    assert await executor.execute(_target(), POOL)
    assert "failed on-chain" in notifier.for_owner("42")[0]


async def test_trader_exception_is_contained():
    trader = MockTrader(raises=RuntimeError("rpc exploded"))
    notifier = MockNotifier()
    executor = SniperExecutor(trader, MockWallets(), notifier)
    target = _target()

    assert not await executor.execute(target, POOL)
    assert not target.is_active
    assert "rpc exploded" in notifier.for_owner("42")[0]


async def test_no_wallet_skips_trader():
    trader, notifier = MockTrader(), MockNotifier()
    executor = SniperExecutor(trader, MockWallets({}), notifier)
    target = _target()

    assert not await executor.execute(target, POOL)
    assert not target.is_active
    assert trader.buy_calls == []
    assert "no wallet configured" in notifier.for_owner("42")[0]


async def test_consumed_target_never_fires_again():
    trader = MockTrader()
    executor = SniperExecutor(trader, MockWallets(), MockNotifier())
    target = _target(is_active=False)

    assert not await executor.execute(target, POOL)
    assert trader.buy_calls == []


async def test_notifier_failure_does_not_raise():
    executor = SniperExecutor(MockTrader(), MockWallets(), MockNotifier(fail=True))
    assert await executor.execute(_target(), POOL)
