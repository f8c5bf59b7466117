"""Trading collaborators - swap execution and wallet lookup."""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol

from evm_sniper.models.records import BuyResult


class Trader(Protocol):
    """Buys tokens with the native asset through the DEX router."""

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
        """Submit a buy. Failures are returned, not raised."""
        ...


class WalletResolver(Protocol):
    """Finds the signing wallet for a target owner."""

    async def resolve(self, owner_id: str) -> str | None:
        """Return a wallet reference for the owner, or None if they have none."""
        ...
