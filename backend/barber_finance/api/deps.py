"""Shared API dependencies."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from barber_finance.config import settings
from barber_finance.core.cache import get_cache_backend
from barber_finance.core.database import get_db
from barber_finance.core.security import get_current_user
from barber_finance.services.cashflow_forecast import CashflowForecastService
from barber_finance.services.cashflow_source import CashflowSource, SqlCashflowSource
from barber_finance.services.forecast_cache import ForecastCache

__all__ = [
    "get_db",
    "get_current_user",
    "get_cashflow_source",
    "get_forecast_service",
    "get_forecast_cache",
]


def get_cashflow_source(db: AsyncSession = Depends(get_db)) -> CashflowSource:
    return SqlCashflowSource(db)


def get_forecast_service(
    source: CashflowSource = Depends(get_cashflow_source),
) -> CashflowForecastService:
    return CashflowForecastService.from_settings(source)


def get_forecast_cache() -> ForecastCache:
    return ForecastCache(get_cache_backend(), ttl_seconds=settings.forecast_cache_ttl_seconds)
