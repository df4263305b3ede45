"""Pytest configuration and fixtures."""

import fakeredis
import pytest
from httpx import ASGITransport, AsyncClient

from walletrecon.api.reconcile import get_store
from walletrecon.main import app
from walletrecon.services.reconcile import ReconciliationEngine
from walletrecon.services.session import SessionStore

HEADER = ["Date", "Description", "Debit", "Credit", "Balance"]


@pytest.fixture
async def redis_client():
    """In-process Redis with its own data per test."""
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def store(redis_client):
    """Fresh session store per test."""
    store = SessionStore(client=redis_client, ttl_seconds=3600)
    app.dependency_overrides[get_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_store, None)


@pytest.fixture
async def client(store):
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def engine():
    """Engine with fixed labels and the default match type policy."""
    return ReconciliationEngine(
        match_type_policy="last",
        source_label="Bank Sheet",
        wallet1_label="Wallet 1",
        wallet2_label="Wallet 2",
    )


@pytest.fixture
def bank_table():
    """Bank sheet with a title block above the header."""
    return [
        ["Account Statement"],
        ["Account", "SA0000123"],
        HEADER,
        ["01-03-2024", "Salary March", "", "5,000.00", "5,000.00"],
        ["02-03-2024", "INV1234TP2P", "250.00", "", "4,750.00"],
        ["03-03-2024", "SELL RATE 47.250", "", "1000", "5,750.00"],
        ["04-03-2024", "Coffee shop", "12.50", "", "5,737.50"],
        ["05-03-2024", "", "", "", ""],
    ]


@pytest.fixture
def wallet_table():
    """Wallet ledger with an FX rate column."""
    return [
        ["Date", "Description", "Debit", "Credit", "FxRate", "Balance"],
        ["01-03-2024", "salary march", "", "5000", "", "5000"],
        ["02-03-2024", "INV1234", "", "250", "", "5250"],
        ["03-03-2024", "TRANSFER FX", "", "1000.00", "47.2498", "6250"],
        ["06-03-2024", "Wallet fee", "3.00", "", "", "6247"],
    ]
