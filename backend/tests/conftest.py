"""Shared test fixtures."""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from barber_finance.api.deps import get_cashflow_source, get_current_user, get_forecast_cache
from barber_finance.core.cache import MemoryCacheBackend
from barber_finance.core.security import AuthContext
from barber_finance.main import app
from barber_finance.services.cashflow_source import (
    CashflowEntry,
    CashflowSource,
    EntryType,
    LedgerBalance,
)
from barber_finance.services.forecast_cache import ForecastCache

UNIT_ID = "6f1c2d3e-0000-4000-8000-000000000001"
EMPTY_UNIT_ID = "6f1c2d3e-0000-4000-8000-000000000002"
FOREIGN_UNIT_ID = "6f1c2d3e-0000-4000-8000-000000000003"


class InMemoryCashflowSource(CashflowSource):
    """Cash-flow source over a dict of unit id → entries."""

    def __init__(self, entries_by_unit=None, initial_balance=Decimal("0")):
        self.entries_by_unit = entries_by_unit or {}
        self.initial_balance = Decimal(initial_balance)
        self.ledger_offset = Decimal("0")
        self.calls: list[tuple] = []

    def _entries(self, unit_id):
        return self.entries_by_unit.get(unit_id, [])

    async def fetch_entries(self, unit_id, account_id, start, end):
        self.calls.append(("fetch_entries", unit_id, account_id, start, end))
        return [e for e in self._entries(unit_id) if start <= e.date <= end]

    async def get_opening_balance(self, unit_id, account_id, before):
        prior = sum(
            (e.signed_value for e in self._entries(unit_id) if e.date < before), Decimal("0")
        )
        return self.initial_balance + prior

    async def fetch_ledger_balances(self, unit_id, account_id, start, end):
        balance = await self.get_opening_balance(unit_id, account_id, start)
        daily: dict[date, Decimal] = {}
        for e in self._entries(unit_id):
            if start <= e.date <= end:
                daily[e.date] = daily.get(e.date, Decimal("0")) + e.signed_value
        rows = []
        for day in sorted(daily):
            balance += daily[day]
            rows.append(LedgerBalance(date=day, balance=balance + self.ledger_offset))
        return rows


class FailingCacheBackend(MemoryCacheBackend):
    async def get(self, key):
        raise ConnectionError("cache down")

    async def set(self, key, value, ttl_seconds):
        raise ConnectionError("cache down")


def hockey_stick_entries(end: date, days: int = 90) -> list[CashflowEntry]:
    """Flat first half, then +100/day (250 in, 150 out) until ``end``."""
    entries = []
    for index in range(days // 2, days):
        day = end - timedelta(days=days - 1 - index)
        entries.append(CashflowEntry(date=day, value=Decimal("250.00"), type=EntryType.REVENUE))
        entries.append(CashflowEntry(date=day, value=Decimal("150.00"), type=EntryType.EXPENSE))
    return entries


@pytest.fixture
def today() -> date:
    return date.today()


@pytest.fixture
def cashflow_source(today) -> InMemoryCashflowSource:
    return InMemoryCashflowSource(
        {UNIT_ID: hockey_stick_entries(today)},
        initial_balance=Decimal("10000.00"),
    )


@pytest.fixture
def cache_backend() -> MemoryCacheBackend:
    return MemoryCacheBackend()


@pytest.fixture
def auth_context() -> AuthContext:
    return AuthContext(
        user_id="b0a7c1d2-0000-4000-8000-00000000abcd",
        email="gerente@barbearia.com",
        unit_ids=frozenset({UNIT_ID, EMPTY_UNIT_ID}),
    )


@pytest.fixture
async def client(cashflow_source, cache_backend, auth_context):
    """Async test client with data source, cache and caller overridden."""
    app.dependency_overrides[get_cashflow_source] = lambda: cashflow_source
    app.dependency_overrides[get_forecast_cache] = lambda: ForecastCache(cache_backend)
    app.dependency_overrides[get_current_user] = lambda: auth_context
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def anonymous_client():
    """Async test client with the real authentication dependency."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
