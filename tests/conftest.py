"""Shared fixtures for evm_sniper tests."""

from __future__ import annotations

import asyncio

import pytest
from pytest_metadata.plugin import metadata_key

from evm_sniper.models.config import SniperConfig
from evm_sniper.pipeline.queue import EventQueue
from evm_sniper.service import SniperService
from evm_sniper.sniper.executor import SniperExecutor
from evm_sniper.sniper.matcher import PairMatcher
from evm_sniper.storage.sqlite import SQLiteTargetStore

from tests.factories import FACTORY, WETH
from tests.mocks import MockNotifier, MockSource, MockTrader, MockWallets

TEST_WSS_URL = "ws://127.0.0.1:8546"


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add chain info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Network"] = "Base (synthetic logs)"
    meta["Factory"] = FACTORY
    meta["Wrapped Native"] = WETH


def basescan_link(kind: str, value: str) -> str:
    """Return an HTML anchor to a Basescan page."""
    return f'<a href="https://basescan.org/{kind}/{value}" target="_blank">{value}</a>'


def pytest_html_results_summary(prefix, summary, postfix):
    """Inject clickable explorer links for the contracts the logs are built from."""
    prefix.append(
        '<div style="margin:8px 0;padding:10px;background:#f8f9fa;border:1px solid #dee2e6;'
        'border-radius:4px;font-family:monospace;font-size:13px;">'
        "<strong>Base Explorer Links</strong><br/>"
        f'Factory: {basescan_link("address", FACTORY)}<br/>'
        f'Wrapped Native: {basescan_link("token", WETH)}'
        "</div>"
    )


def make_test_config(**overrides) -> SniperConfig:
    """Build a SniperConfig suitable for testing."""
    defaults = dict(
        reconnect_delay=0.05,
        pacing_delay=0.0,
        redrain_delay=0.01,
        wss_url=TEST_WSS_URL,
        factory_address=FACTORY,
        wrapped_native_address=WETH,
        db_path=":memory:",
    )
    defaults.update(overrides)
    return SniperConfig(**defaults)


async def wait_for_queue(queue: EventQueue, timeout: float = 2.0) -> None:
    """Block until the queue is empty and no drain loop is active."""
    async def _idle():
        while queue.depth or queue.is_draining:
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_idle(), timeout)


async def wait_for_pools(service: SniperService, timeout: float = 2.0) -> None:
    """Block until every spawned pool-matching task has finished."""
    async def _idle():
        while service._pool_tasks:
            await asyncio.gather(*list(service._pool_tasks), return_exceptions=True)

    await asyncio.wait_for(_idle(), timeout)


@pytest.fixture
def test_config():
    """Default SniperConfig for tests."""
    return make_test_config()


@pytest.fixture
async def store():
    """Initialized in-memory SQLiteTargetStore."""
    s = SQLiteTargetStore(":memory:")
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
def mock_trader():
    return MockTrader(succeed=True)


@pytest.fixture
def mock_wallets():
    return MockWallets()


@pytest.fixture
def mock_notifier():
    return MockNotifier()


@pytest.fixture
def mock_source():
    return MockSource()


def wire_executor(service: SniperService, trader, wallets, notifier) -> None:
    """Swap the trading collaborators on a built service."""
    service.trader = trader
    service.wallets = wallets
    service.notifier = notifier
    service.executor = SniperExecutor(trader, wallets, notifier, service.store)
    service.matcher = PairMatcher(
        service._cfg.wrapped_native_address, service.registry, service.executor,
    )


@pytest.fixture
async def service(test_config, store, mock_trader, mock_wallets,
                  mock_notifier, mock_source):
    """SniperService wired with mocks, not yet started."""
    s = SniperService(test_config)
    s.store = store
    s.source = mock_source
    wire_executor(s, mock_trader, mock_wallets, mock_notifier)
    yield s
    if s.running:
        await s.stop()


@pytest.fixture
async def running_service(service):
    """The mocked SniperService after start()."""
    await service.start()
    return service
