"""Accumulated balance validation against the ledger."""

from datetime import date
from decimal import Decimal

import pytest

from barber_finance.services.balance_validation import BalanceValidationService
from conftest import EMPTY_UNIT_ID, FOREIGN_UNIT_ID, UNIT_ID, InMemoryCashflowSource, hockey_stick_entries

AS_OF = date(2026, 9, 30)
URL = "/api/v1/forecasts/cashflow/validation"


@pytest.fixture
def source() -> InMemoryCashflowSource:
    return InMemoryCashflowSource(
        {UNIT_ID: hockey_stick_entries(AS_OF)}, initial_balance=Decimal("10000.00")
    )


@pytest.mark.asyncio
async def test_matching_ledger_is_valid(source):
    result = await BalanceValidationService(source).validate(UNIT_ID, None, days=30, as_of=AS_OF)

    assert result.is_valid
    assert result.differences == 0
    assert result.total_records == 30


@pytest.mark.asyncio
async def test_drifting_ledger_is_reported(source):
    source.ledger_offset = Decimal("12.34")

    result = await BalanceValidationService(source).validate(UNIT_ID, None, days=30, as_of=AS_OF)

    assert not result.is_valid
    assert result.differences == 30
    assert result.max_difference == Decimal("12.34")


@pytest.mark.asyncio
async def test_one_cent_drift_is_tolerated(source):
    source.ledger_offset = Decimal("0.01")

    result = await BalanceValidationService(source).validate(UNIT_ID, None, days=30, as_of=AS_OF)

    assert result.is_valid


@pytest.mark.asyncio
async def test_empty_ledger_is_valid(source):
    result = await BalanceValidationService(source).validate(EMPTY_UNIT_ID, None, days=30, as_of=AS_OF)

    assert result.is_valid
    assert result.total_records == 0


@pytest.mark.asyncio
async def test_validation_endpoint(client):
    response = await client.get(URL, params={"unitId": UNIT_ID, "days": 15})

    assert response.status_code == 200
    data = response.json()
    assert data["isValid"] is True
    assert data["totalRecords"] == 15
    assert data["period"] == 15
    assert data["correlationId"]


@pytest.mark.asyncio
async def test_validation_endpoint_rejects_bad_days(client):
    response = await client.get(URL, params={"unitId": UNIT_ID, "days": 0})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_validation_endpoint_checks_unit_access(client):
    response = await client.get(URL, params={"unitId": FOREIGN_UNIT_ID})

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_validation_endpoint_rejects_malformed_account_id(client):
    response = await client.get(URL, params={"unitId": UNIT_ID, "accountId": "acc-1"})

    assert response.status_code == 400
    assert response.json()["message"] == "accountId must be a valid UUID"
