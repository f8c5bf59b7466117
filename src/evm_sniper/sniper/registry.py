"""In-memory table of sniper targets, keyed by (owner, token)."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from evm_sniper.models.config import is_address
from evm_sniper.models.records import (
    DEFAULT_SLIPPAGE_BPS,
    MAX_SLIPPAGE_BPS,
    MIN_SLIPPAGE_BPS,
    SniperTarget,
)

log = logging.getLogger(__name__)


def target_key(owner_id: object, token_address: str) -> tuple[str, str]:
    return (str(owner_id), token_address.lower())


class TargetRegistry:
    """Owns every SniperTarget for the life of the process.

    All methods are synchronous: a mutation completes within the caller's
    turn of the event loop and is never split across an await. Durability
    is layered on top by the service, which writes through to the store.
    """

    def __init__(self) -> None:
        self._targets: dict[tuple[str, str], SniperTarget] = {}

    def add(
        self,
        owner_id: object,
        token_address: str,
        buy_amount_native: Decimal | str | float,
        max_gas_price: Decimal | str | float | None = None,
        slippage_bps: int = DEFAULT_SLIPPAGE_BPS,
    ) -> bool:
        """Register (or overwrite) a target. Returns False instead of raising.

        ``slippage_bps`` is in basis points (500 = 5%) and must be at least
        MIN_SLIPPAGE_BPS.
        """
        try:
            if not is_address(token_address):
                raise ValueError(f"not a 20-byte hex address: {token_address!r}")
            amount = Decimal(str(buy_amount_native))
            if amount <= 0:
                raise ValueError(f"buy amount must be positive, got {amount}")
            max_gas = Decimal(str(max_gas_price)) if max_gas_price is not None else None
            if max_gas is not None and max_gas <= 0:
                raise ValueError(f"max gas price must be positive, got {max_gas}")
            slippage = int(slippage_bps)
            if slippage < MIN_SLIPPAGE_BPS:
                raise ValueError(
                    f"slippage_bps={slippage_bps} is below {MIN_SLIPPAGE_BPS}; "
                    "the value is in basis points (500 = 5%)"
                )
            if slippage > MAX_SLIPPAGE_BPS:
                raise ValueError(f"slippage out of range: {slippage_bps} bps")

            owner, token = target_key(owner_id, token_address)
            target = SniperTarget(
                owner_id=owner,
                token_address=token,
                buy_amount_native=amount,
                max_gas_price=max_gas,
                slippage_bps=slippage,
            )
        except (ValueError, TypeError, InvalidOperation) as exc:
            log.error("Error adding sniper target for user %s: %s", owner_id, exc)
            return False

        self._targets[target.key] = target
        log.info("Sniper target added for user %s: %s", owner, token)
        return True

    def restore(self, target: SniperTarget) -> None:
        """Put back a target loaded from persistent storage."""
        self._targets[target.key] = target

    def get(self, owner_id: object, token_address: str) -> SniperTarget | None:
        return self._targets.get(target_key(owner_id, token_address))

    def remove(self, owner_id: object, token_address: str) -> bool:
        """Delete a target. Returns whether one existed."""
        removed = self._targets.pop(target_key(owner_id, token_address), None)
        if removed is not None:
            log.info("Sniper target removed for user %s: %s", owner_id, token_address)
        return removed is not None

    def list_active(self, owner_id: object) -> list[SniperTarget]:
        owner = str(owner_id)
        return [
            t for t in self._targets.values()
            if t.owner_id == owner and t.is_active
        ]

    def active_for_token(self, token_address: str) -> list[SniperTarget]:
        """Snapshot of active targets for a token, across all owners."""
        token = token_address.lower()
        return [
            t for t in self._targets.values()
            if t.token_address == token and t.is_active
        ]

    def count_active(self) -> int:
        return sum(1 for t in self._targets.values() if t.is_active)

    def __len__(self) -> int:
        return len(self._targets)
