"""Forecast API routes: cash-flow projection and balance validation."""

import uuid

import structlog
from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError

from barber_finance.api.deps import (
    get_cashflow_source,
    get_current_user,
    get_forecast_cache,
    get_forecast_service,
)
from barber_finance.config import settings
from barber_finance.core.exceptions import (
    ApiError,
    BadRequestError,
    ForbiddenError,
    InternalServerError,
)
from barber_finance.core.middleware import correlation_id_for, elapsed_ms
from barber_finance.core.security import AuthContext, has_unit_access
from barber_finance.schemas.forecast import (
    BalanceValidationResponse,
    CashflowForecastResponse,
    ForecastPointOut,
    ForecastSummaryOut,
    HistoricalWindowOut,
)
from barber_finance.services.balance_validation import BalanceValidationService
from barber_finance.services.cashflow_forecast import CashflowForecastService
from barber_finance.services.cashflow_source import CashflowSource
from barber_finance.services.forecast_cache import ForecastCache

logger = structlog.get_logger()

router = APIRouter()

FORECAST_PERIODS = (30, 60, 90)
DEFAULT_PERIOD = 30
MAX_VALIDATION_DAYS = 365


def _parse_uuid(raw: str, name: str) -> str:
    try:
        return str(uuid.UUID(raw))
    except ValueError:
        raise BadRequestError(f"{name} must be a valid UUID") from None


def _require_unit_access(current_user: AuthContext, unit_id: str | None) -> str:
    if not unit_id:
        raise BadRequestError("unitId is required")
    unit_id = _parse_uuid(unit_id, "unitId")
    if not has_unit_access(current_user, unit_id):
        logger.warning(
            "Unauthorized unit access attempt",
            user_id=current_user.user_id,
            unit_id=unit_id,
        )
        raise ForbiddenError("You do not have access to this unit")
    return unit_id


def _parse_forecast_days(raw: str | None) -> int:
    if raw is None or raw == "":
        return DEFAULT_PERIOD
    try:
        days = int(raw)
    except ValueError:
        days = None
    if days not in FORECAST_PERIODS:
        raise BadRequestError("days must be 30, 60, or 90")
    return days


def _parse_validation_days(raw: str | None) -> int:
    if raw is None or raw == "":
        return DEFAULT_PERIOD
    try:
        days = int(raw)
    except ValueError:
        days = 0
    if not 1 <= days <= MAX_VALIDATION_DAYS:
        raise BadRequestError(f"days must be between 1 and {MAX_VALIDATION_DAYS}")
    return days


@router.get("/cashflow", response_model=CashflowForecastResponse)
async def get_cashflow_forecast(
    request: Request,
    unit_id: str | None = Query(None, alias="unitId"),
    account_id: str | None = Query(None, alias="accountId"),
    days: str | None = Query(None, description="Forecast horizon: 30, 60 or 90"),
    current_user: AuthContext = Depends(get_current_user),
    service: CashflowForecastService = Depends(get_forecast_service),
    cache: ForecastCache = Depends(get_forecast_cache),
):
    """Project the cash balance of a unit (or one bank account) 30/60/90 days ahead.

    The projection always uses a 90-day history and a 90-day horizon, then
    keeps the first ``days`` points. Results are cached per
    (unit, account, days) for ``forecast_cache_ttl_seconds``.
    """
    unit_id = _require_unit_access(current_user, unit_id)
    period = _parse_forecast_days(days)
    account_id = _parse_uuid(account_id, "accountId") if account_id else None
    correlation_id = correlation_id_for(request)

    logger.info(
        "Cash-flow forecast requested",
        user_id=current_user.user_id,
        unit_id=unit_id,
        account_id=account_id or "all",
        days=period,
    )

    cache_key = ForecastCache.build_key(unit_id, account_id, period)
    cached = await cache.get(cache_key)
    if cached is not None:
        try:
            response = CashflowForecastResponse(
                unit_id=unit_id,
                account_id=account_id,
                period=period,
                forecast=cached["forecast"],
                summary=cached["summary"],
                cached=True,
                correlation_id=correlation_id,
                duration_ms=elapsed_ms(request),
            )
        except (KeyError, TypeError, ValidationError) as e:
            logger.warning("Discarding malformed forecast cache entry", cache_key=cache_key, error=str(e))
        else:
            logger.info("Forecast served from cache", cache_key=cache_key)
            return response

    try:
        result = await service.generate_forecast(
            unit_id,
            account_id,
            historical_days=settings.forecast_history_days,
            horizon=max(FORECAST_PERIODS),
        )
    except ApiError:
        raise
    except Exception as e:
        logger.exception("Cash-flow forecast failed", unit_id=unit_id, account_id=account_id)
        raise InternalServerError("Failed to generate forecast") from e

    result = result.truncated(period)
    response = CashflowForecastResponse(
        unit_id=unit_id,
        account_id=account_id,
        period=period,
        historical=HistoricalWindowOut.from_result(result),
        forecast=[ForecastPointOut.from_point(p) for p in result.forecast],
        summary=ForecastSummaryOut.from_summary(result.summary),
        cached=False,
        correlation_id=correlation_id,
        duration_ms=elapsed_ms(request),
    )

    await cache.set(cache_key, response.cache_payload())

    logger.info(
        "Cash-flow forecast served",
        unit_id=unit_id,
        forecast_count=len(response.forecast),
        duration_ms=response.duration_ms,
    )
    return response


@router.get("/cashflow/validation", response_model=BalanceValidationResponse)
async def validate_cashflow_balance(
    request: Request,
    unit_id: str | None = Query(None, alias="unitId"),
    account_id: str | None = Query(None, alias="accountId"),
    days: str | None = Query(None, description="Days to validate (1-365)"),
    current_user: AuthContext = Depends(get_current_user),
    source: CashflowSource = Depends(get_cashflow_source),
):
    """Compare the aggregated running balance with the ledger's own running balance."""
    unit_id = _require_unit_access(current_user, unit_id)
    period = _parse_validation_days(days)
    account_id = _parse_uuid(account_id, "accountId") if account_id else None

    try:
        validation = await BalanceValidationService(source).validate(unit_id, account_id, period)
    except ApiError:
        raise
    except Exception as e:
        logger.exception("Balance validation failed", unit_id=unit_id, account_id=account_id)
        raise InternalServerError("Failed to validate balance") from e

    return BalanceValidationResponse.from_validation(
        validation,
        unit_id=unit_id,
        account_id=account_id,
        period=period,
        correlation_id=correlation_id_for(request),
        duration_ms=elapsed_ms(request),
    )
