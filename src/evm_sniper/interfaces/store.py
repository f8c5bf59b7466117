"""TargetStore protocol - durable record of sniper targets and attempts."""

from __future__ import annotations

from typing import Protocol

from evm_sniper.models.records import ActivityRecord, ExecutionRecord, SniperTarget


class TargetStore(Protocol):
    """Persists targets across restarts; the registry stays the hot cache."""

    # ── Lifecycle ──────────────────────────────────────────

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        ...

    async def close(self) -> None:
        ...

    @property
    def is_open(self) -> bool:
        ...

    # ── Targets ────────────────────────────────────────────

    async def save_target(self, target: SniperTarget) -> None:
        """Insert or overwrite the target for its (owner, token) key."""
        ...

    async def delete_target(self, owner_id: str, token_address: str) -> bool:
        ...

    async def load_targets(self) -> list[SniperTarget]:
        ...

    # ── Executions ─────────────────────────────────────────

    async def record_execution(self, record: ExecutionRecord) -> None:
        ...

    async def get_executions(
        self, owner_id: str | None = None, limit: int = 50
    ) -> list[ExecutionRecord]:
        ...

    # ── Activity log ───────────────────────────────────────

    async def log_activity(
        self,
        event_type: str,
        message: str,
        owner_id: str | None = None,
        token_address: str | None = None,
    ) -> None:
        ...

    async def get_recent_activity(self, limit: int = 50) -> list[ActivityRecord]:
        ...
