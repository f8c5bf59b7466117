"""Click command surface: config display, staged targets, execution history."""

from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest
from click.testing import CliRunner

from evm_sniper.cli import cli
from evm_sniper.models.records import ExecutionRecord
from evm_sniper.storage.sqlite import SQLiteTargetStore

from tests.factories import POOL, TOKEN

USER_TOKEN = "0xABCDEFABCDEFABCDEFABCDEFABCDEFABCDEFABCD"


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = str(tmp_path / "state.db")
    monkeypatch.setenv("EVM_SNIPER_DB_PATH", path)
    monkeypatch.delenv("EVM_SNIPER_TELEGRAM_TOKEN", raising=False)
    monkeypatch.delenv("EVM_SNIPER_NETWORK", raising=False)
    return path


def _load_targets(db_path: str):
    async def _load():
        store = SQLiteTargetStore(db_path)
        await store.initialize()
        try:
            return await store.load_targets()
        finally:
            await store.close()

    return asyncio.run(_load())


def test_targets_add_list_remove(db_path):
    runner = CliRunner()

    result = runner.invoke(
        cli, ["targets", "add", "42", USER_TOKEN, "0.5", "--max-gas", "3", "--slippage-bps", "200"],
    )
    assert result.exit_code == 0, result.output
    assert "Target added" in result.output

    (saved,) = _load_targets(db_path)
    assert saved.owner_id == "42"
    assert saved.token_address == TOKEN
    assert saved.max_gas_price == Decimal("3")
    assert saved.slippage_bps == 200

    result = runner.invoke(cli, ["targets", "list", "42"])
    assert result.exit_code == 0
    assert TOKEN in result.output

    result = runner.invoke(cli, ["targets", "list", "7"])
    assert "No active targets" in result.output

    result = runner.invoke(cli, ["targets", "remove", "42", USER_TOKEN])
    assert result.exit_code == 0
    assert _load_targets(db_path) == []

    result = runner.invoke(cli, ["targets", "remove", "42", USER_TOKEN])
    assert result.exit_code == 1


def test_targets_add_rejects_bad_address(db_path):
    result = CliRunner().invoke(cli, ["targets", "add", "42", "0x1234", "0.5"])
    assert result.exit_code == 1
    assert _load_targets(db_path) == []


def test_config_masks_secrets(db_path, monkeypatch):
    monkeypatch.setenv("EVM_SNIPER_TELEGRAM_TOKEN", "123:secret")
    monkeypatch.setenv("EVM_SNIPER_RPC_URL", "https://rpc.example")

    result = CliRunner().invoke(cli, ["config"])

    assert result.exit_code == 0
    assert "123:secret" not in result.output
    assert "***configured***" in result.output
    assert "wss://rpc.example" in result.output


def test_executions(db_path):
    async def _seed():
        store = SQLiteTargetStore(db_path)
        await store.initialize()
        await store.record_execution(ExecutionRecord(
            owner_id="42",
            token_address=TOKEN,
            pool_address=POOL,
            amount_native=Decimal("0.5"),
            dispatched=True,
            tx_hash="0xfeed",
        ))
        await store.close()

    asyncio.run(_seed())
    runner = CliRunner()

    result = runner.invoke(cli, ["executions", "--owner", "42"])
    assert result.exit_code == 0
    assert "tx 0xfeed" in result.output

    result = runner.invoke(cli, ["executions", "--owner", "7"])
    assert "No sniper executions recorded" in result.output


def test_bad_network_exits(db_path, monkeypatch):
    monkeypatch.setenv("EVM_SNIPER_NETWORK", "solana")
    result = CliRunner().invoke(cli, ["config"])
    assert result.exit_code == 1
