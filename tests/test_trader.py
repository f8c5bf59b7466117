"""UniswapV3Trader pricing helpers and failure reporting (no node required)."""

from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

from evm_sniper.chain.trader import DisabledTrader, UniswapV3Trader

from tests.factories import TOKEN, WETH

ROUTER = "0x2626664c2603336E57B271c5C0b26F421741e481"
QUOTER = "0x3d4e44Eb1374240CE5F1B871ab261CD16335B76a"


class FakeCall:
    def __init__(self, result=None, error: Exception | None = None) -> None:
        self._result = result
        self._error = error
        self.args = None

    def __call__(self, params):
        self.args = params
        return self

    async def call(self):
        if self._error is not None:
            raise self._error
        return self._result


class FakeQuoter:
    def __init__(self, call: FakeCall) -> None:
        self.functions = SimpleNamespace(quoteExactInputSingle=call)


class FakeEth:
    def __init__(self, gas_price: int) -> None:
        self._gas_price = gas_price

    @property
    async def gas_price(self) -> int:
        return self._gas_price


class FakeWeb3:
    def __init__(self, gas_price: int) -> None:
        self.eth = FakeEth(gas_price)


def _trader(**kw) -> UniswapV3Trader:
    return UniswapV3Trader(
        rpc_url="http://127.0.0.1:8545",
        router_address=ROUTER,
        wrapped_native_address=WETH,
        **kw,
    )


async def test_min_amount_out_applies_slippage():
    trader = _trader(quoter_address=QUOTER)
    call = FakeCall(result=(1_000_000, 0, 0, 0))
    trader._quoter = FakeQuoter(call)

    assert await trader._min_amount_out(TOKEN, 10**17, 3000, 500) == 950_000
    assert call.args[2] == 10**17
    assert call.args[3] == 3000


async def test_min_amount_out_without_liquidity_is_zero():
    trader = _trader(quoter_address=QUOTER)
    trader._quoter = FakeQuoter(FakeCall(error=RuntimeError("execution reverted")))

    assert await trader._min_amount_out(TOKEN, 10**17, 3000, 500) == 0


async def test_min_amount_out_without_quoter_is_zero():
    assert await _trader()._min_amount_out(TOKEN, 10**17, 3000, 500) == 0


async def test_gas_price_multiplier_and_cap():
    trader = _trader(gas_price_multiplier=1.5)
    trader._w3 = FakeWeb3(gas_price=2_000_000_000)

    assert await trader._gas_price(None) == 3_000_000_000
    assert await trader._gas_price(Decimal("2.5")) == 2_500_000_000
    assert await trader._gas_price(Decimal("10")) == 3_000_000_000


async def test_bad_wallet_key_is_reported_not_raised():
    result = await _trader().buy("not-a-private-key", TOKEN, Decimal("0.1"))
    assert not result.success
    assert result.tx_hash is None
    assert result.error


async def test_disabled_trader():
    result = await DisabledTrader().buy("0xkey", TOKEN, Decimal("1"))
    assert not result.success
    assert result.error == "trading is not configured"
