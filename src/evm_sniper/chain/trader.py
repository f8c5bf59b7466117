"""Uniswap V3 trader - native-asset buys through SwapRouter02."""

from __future__ import annotations

import logging
from decimal import Decimal

from web3 import AsyncHTTPProvider, AsyncWeb3

from evm_sniper.models.records import BuyResult

log = logging.getLogger(__name__)

ROUTER_ABI = [
    {
        "name": "exactInputSingle",
        "type": "function",
        "stateMutability": "payable",
        "inputs": [{
            "name": "params",
            "type": "tuple",
            "components": [
                {"name": "tokenIn", "type": "address"},
                {"name": "tokenOut", "type": "address"},
                {"name": "fee", "type": "uint24"},
                {"name": "recipient", "type": "address"},
                {"name": "amountIn", "type": "uint256"},
                {"name": "amountOutMinimum", "type": "uint256"},
                {"name": "sqrtPriceLimitX96", "type": "uint160"},
            ],
        }],
        "outputs": [{"name": "amountOut", "type": "uint256"}],
    },
]

QUOTER_ABI = [
    {
        "name": "quoteExactInputSingle",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{
            "name": "params",
            "type": "tuple",
            "components": [
                {"name": "tokenIn", "type": "address"},
                {"name": "tokenOut", "type": "address"},
                {"name": "amountIn", "type": "uint256"},
                {"name": "fee", "type": "uint24"},
                {"name": "sqrtPriceLimitX96", "type": "uint160"},
            ],
        }],
        "outputs": [
            {"name": "amountOut", "type": "uint256"},
            {"name": "sqrtPriceX96After", "type": "uint160"},
            {"name": "initializedTicksCrossed", "type": "uint32"},
            {"name": "gasEstimate", "type": "uint256"},
        ],
    },
]


class UniswapV3Trader:
    """Submits exactInputSingle buys paying the native asset.

    ``wallet_ref`` is the hex private key of the buying account. Every
    failure is returned as a BuyResult; nothing raises to the caller.
    """

    def __init__(
        self,
        rpc_url: str,
        router_address: str,
        wrapped_native_address: str,
        quoter_address: str | None = None,
        gas_price_multiplier: float = 1.2,
        receipt_timeout: int = 120,
    ) -> None:
        self._w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        self._router = self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(router_address), abi=ROUTER_ABI,
        )
        self._quoter = None
        if quoter_address:
            self._quoter = self._w3.eth.contract(
                address=AsyncWeb3.to_checksum_address(quoter_address), abi=QUOTER_ABI,
            )
        self._weth = AsyncWeb3.to_checksum_address(wrapped_native_address)
        self._gas_multiplier = gas_price_multiplier
        self._receipt_timeout = receipt_timeout

    async def buy(
        self,
        wallet_ref: str,
        token_address: str,
        native_amount: Decimal,
        *,
        fee: int = 3000,
        slippage_bps: int = 500,
        max_gas_price_gwei: Decimal | None = None,
    ) -> BuyResult:
        log.info("Buying %s ETH worth of %s (fee tier %d)", native_amount, token_address, fee)
        try:
            account = self._w3.eth.account.from_key(wallet_ref)
            token = AsyncWeb3.to_checksum_address(token_address)
            amount_in = AsyncWeb3.to_wei(native_amount, "ether")
            min_out = await self._min_amount_out(token, amount_in, fee, slippage_bps)
            gas_price = await self._gas_price(max_gas_price_gwei)

            params = (self._weth, token, fee, account.address, amount_in, min_out, 0)
            tx = await self._router.functions.exactInputSingle(params).build_transaction({
                "from": account.address,
                "value": amount_in,
                "gasPrice": gas_price,
                "nonce": await self._w3.eth.get_transaction_count(account.address, "pending"),
            })
            signed = account.sign_transaction(tx)
            tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as exc:
            log.error("Error buying token %s: %s", token_address, exc)
            return BuyResult(success=False, error=str(exc))

        tx_hex = AsyncWeb3.to_hex(tx_hash)
        log.info("Buy transaction sent: %s", tx_hex)

        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._receipt_timeout,
            )
        except Exception as exc:
            log.warning("No receipt for %s: %s", tx_hex, exc)
            return BuyResult(success=False, tx_hash=tx_hex, status="pending", error=str(exc))

        ok = receipt["status"] == 1
        return BuyResult(
            success=ok,
            tx_hash=tx_hex,
            gas_used=receipt["gasUsed"],
            status="success" if ok else "failed",
            error=None if ok else "transaction reverted",
        )

    async def _min_amount_out(
        self, token: str, amount_in: int, fee: int, slippage_bps: int,
    ) -> int:
        """Quote the swap and shave off the slippage allowance.

        A pool seconds old usually has no liquidity to quote against; the
        buy then goes out without a floor.
        """
        if self._quoter is None:
            log.warning("No quoter configured, buying %s without a minimum output", token)
            return 0
        try:
            quote = await self._quoter.functions.quoteExactInputSingle(
                (self._weth, token, amount_in, fee, 0)
            ).call()
        except Exception as exc:
            log.warning("Quote failed for %s (%s), buying without a minimum output", token, exc)
            return 0
        return quote[0] * (10_000 - slippage_bps) // 10_000

    async def _gas_price(self, max_gas_price_gwei: Decimal | None) -> int:
        """Outbid the current gas price, capped by the target's limit."""
        current = await self._w3.eth.gas_price
        price = int(current * self._gas_multiplier)
        if max_gas_price_gwei is not None:
            price = min(price, AsyncWeb3.to_wei(max_gas_price_gwei, "gwei"))
        return price


class DisabledTrader:
    """Stand-in when no RPC endpoint or router is configured."""

    async def buy(
        self,
        wallet_ref: str,
        token_address: str,
        native_amount: Decimal,
        *,
        fee: int = 3000,
        slippage_bps: int = 500,
        max_gas_price_gwei: Decimal | None = None,
    ) -> BuyResult:
        return BuyResult(success=False, error="trading is not configured")
