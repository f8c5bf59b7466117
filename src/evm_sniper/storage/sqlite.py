"""SQLite implementation of the TargetStore protocol."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import aiosqlite

from evm_sniper.models.records import ActivityRecord, ExecutionRecord, SniperTarget

SCHEMA = """
-- Sniper targets, one row per (owner, token)
CREATE TABLE IF NOT EXISTS sniper_targets (
    owner_id TEXT NOT NULL,
    token_address TEXT NOT NULL,
    buy_amount_native TEXT NOT NULL,
    max_gas_price TEXT,
    slippage_bps INTEGER NOT NULL DEFAULT 500,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (owner_id, token_address)
);
CREATE INDEX IF NOT EXISTS idx_targets_token ON sniper_targets(token_address);

-- Sniper attempts
CREATE TABLE IF NOT EXISTS sniper_executions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id TEXT NOT NULL,
    token_address TEXT NOT NULL,
    pool_address TEXT NOT NULL,
    amount_native TEXT NOT NULL,
    dispatched INTEGER NOT NULL,
    tx_hash TEXT,
    error TEXT,
    executed_at TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_executions_owner ON sniper_executions(owner_id);

-- Activity log
CREATE TABLE IF NOT EXISTS activity_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    event_type TEXT NOT NULL,
    owner_id TEXT,
    token_address TEXT,
    message TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_activity_created ON activity_log(created_at);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_target(row: aiosqlite.Row) -> SniperTarget:
    return SniperTarget(
        owner_id=row["owner_id"],
        token_address=row["token_address"],
        buy_amount_native=Decimal(row["buy_amount_native"]),
        max_gas_price=Decimal(row["max_gas_price"]) if row["max_gas_price"] else None,
        slippage_bps=row["slippage_bps"],
        is_active=bool(row["is_active"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class SQLiteTargetStore:
    """SQLite-backed implementation of the TargetStore protocol."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self._db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.executescript(SCHEMA)
        await self._db.commit()

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def is_open(self) -> bool:
        return self._db is not None

    @property
    def db(self) -> aiosqlite.Connection:
        assert self._db is not None, "Store not initialized. Call initialize() first."
        return self._db

    # ── Targets ────────────────────────────────────────────

    async def save_target(self, target: SniperTarget) -> None:
        await self.db.execute(
            "INSERT INTO sniper_targets"
            " (owner_id, token_address, buy_amount_native, max_gas_price,"
            "  slippage_bps, is_active, created_at, updated_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?)"
            " ON CONFLICT(owner_id, token_address) DO UPDATE SET"
            " buy_amount_native=excluded.buy_amount_native,"
            " max_gas_price=excluded.max_gas_price,"
            " slippage_bps=excluded.slippage_bps,"
            " is_active=excluded.is_active,"
            " created_at=excluded.created_at,"
            " updated_at=excluded.updated_at",
            (
                target.owner_id,
                target.token_address,
                str(target.buy_amount_native),
                str(target.max_gas_price) if target.max_gas_price is not None else None,
                target.slippage_bps,
                int(target.is_active),
                target.created_at.isoformat(),
                _now(),
            ),
        )
        await self.db.commit()

    async def delete_target(self, owner_id: str, token_address: str) -> bool:
        cur = await self.db.execute(
            "DELETE FROM sniper_targets WHERE owner_id=? AND token_address=?",
            (str(owner_id), token_address.lower()),
        )
        await self.db.commit()
        return cur.rowcount > 0

    async def load_targets(self) -> list[SniperTarget]:
        async with self.db.execute(
            "SELECT * FROM sniper_targets ORDER BY created_at"
        ) as cur:
            rows = await cur.fetchall()
            return [_row_to_target(r) for r in rows]

    # ── Executions ─────────────────────────────────────────

    async def record_execution(self, record: ExecutionRecord) -> None:
        await self.db.execute(
            "INSERT INTO sniper_executions"
            " (owner_id, token_address, pool_address, amount_native,"
            "  dispatched, tx_hash, error, executed_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                record.owner_id,
                record.token_address,
                record.pool_address,
                str(record.amount_native),
                int(record.dispatched),
                record.tx_hash,
                record.error,
                record.executed_at or _now(),
            ),
        )
        await self.db.commit()

    async def get_executions(
        self, owner_id: str | None = None, limit: int = 50
    ) -> list[ExecutionRecord]:
        if owner_id is not None:
            sql = ("SELECT * FROM sniper_executions WHERE owner_id=?"
                   " ORDER BY id DESC LIMIT ?")
            params: tuple = (str(owner_id), limit)
        else:
            sql = "SELECT * FROM sniper_executions ORDER BY id DESC LIMIT ?"
            params = (limit,)
        async with self.db.execute(sql, params) as cur:
            rows = await cur.fetchall()
            return [
                ExecutionRecord(
                    owner_id=r["owner_id"],
                    token_address=r["token_address"],
                    pool_address=r["pool_address"],
                    amount_native=Decimal(r["amount_native"]),
                    dispatched=bool(r["dispatched"]),
                    tx_hash=r["tx_hash"],
                    error=r["error"],
                    executed_at=r["executed_at"],
                )
                for r in rows
            ]

    # ── Activity log ───────────────────────────────────────

    async def log_activity(
        self,
        event_type: str,
        message: str,
        owner_id: str | None = None,
        token_address: str | None = None,
    ) -> None:
        await self.db.execute(
            "INSERT INTO activity_log (event_type, owner_id, token_address, message, created_at)"
            " VALUES (?, ?, ?, ?, ?)",
            (event_type, owner_id, token_address, message, _now()),
        )
        await self.db.commit()

    async def get_recent_activity(self, limit: int = 50) -> list[ActivityRecord]:
        async with self.db.execute(
            "SELECT * FROM activity_log ORDER BY id DESC LIMIT ?", (limit,)
        ) as cur:
            rows = await cur.fetchall()
            return [
                ActivityRecord(
                    id=r["id"],
                    event_type=r["event_type"],
                    owner_id=r["owner_id"],
                    token_address=r["token_address"],
                    message=r["message"],
                    created_at=r["created_at"],
                )
                for r in rows
            ]
