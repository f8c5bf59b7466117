"""Static wallet resolver backed by the [wallets] config table."""

from __future__ import annotations

from collections.abc import Mapping


class StaticWalletResolver:
    """Maps owner ids to signing keys loaded from configuration."""

    def __init__(self, wallets: Mapping[str, str]) -> None:
        self._wallets = {str(owner): key for owner, key in wallets.items()}

    async def resolve(self, owner_id: str) -> str | None:
        return self._wallets.get(str(owner_id))
