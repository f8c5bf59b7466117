"""Sniper targets and operation result records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

DEFAULT_SLIPPAGE_BPS = 500  # 5%
# Anything lower is almost certainly a percent passed where bps belong
MIN_SLIPPAGE_BPS = 10
MAX_SLIPPAGE_BPS = 10_000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SniperTarget:
    """A user's standing order to buy a token once a pool for it appears.

    Keyed by (owner_id, token_address). ``is_active`` flips to False the
    moment an execution is attempted and never flips back.
    """

    owner_id: str
    token_address: str  # lower-case 0x-prefixed
    buy_amount_native: Decimal
    max_gas_price: Decimal | None = None  # gwei
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS
    is_active: bool = True
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def key(self) -> tuple[str, str]:
        return (self.owner_id, self.token_address)


@dataclass
class BuyResult:
    """Result of a swap submitted by the trading collaborator."""

    success: bool
    tx_hash: str | None = None
    gas_used: int | None = None
    status: str | None = None  # "success" | "failed" from the receipt
    error: str | None = None


@dataclass
class ExecutionRecord:
    """A sniper attempt as persisted in the state store."""

    owner_id: str
    token_address: str
    pool_address: str
    amount_native: Decimal
    dispatched: bool
    tx_hash: str | None = None
    error: str | None = None
    executed_at: str = ""


@dataclass
class ActivityRecord:
    """A single activity log entry."""

    id: int
    event_type: str
    owner_id: str | None
    token_address: str | None
    message: str
    created_at: str
