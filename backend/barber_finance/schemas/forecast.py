"""Forecast schemas (camelCase on the wire)."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from barber_finance.services.balance_validation import BalanceValidation
from barber_finance.services.cashflow_forecast import ForecastPoint, ForecastResult, ForecastSummary


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConfidenceIntervalOut(CamelModel):
    lower: float
    upper: float


class ForecastPointOut(CamelModel):
    date: date
    forecasted_balance: float
    confidence_interval: ConfidenceIntervalOut
    trend: str

    @classmethod
    def from_point(cls, point: ForecastPoint) -> "ForecastPointOut":
        return cls(
            date=point.date,
            forecasted_balance=float(point.forecasted_balance),
            confidence_interval=ConfidenceIntervalOut(
                lower=float(point.confidence_interval.lower),
                upper=float(point.confidence_interval.upper),
            ),
            trend=point.trend.value,
        )


def _as_float(value) -> float | None:
    return float(value) if value is not None else None


class ForecastSummaryOut(CamelModel):
    current_balance: float
    forecasted_balance_30d: float | None = Field(None, alias="forecastedBalance30d")
    forecasted_balance_60d: float | None = Field(None, alias="forecastedBalance60d")
    forecasted_balance_90d: float | None = Field(None, alias="forecastedBalance90d")
    trend: str

    @classmethod
    def from_summary(cls, summary: ForecastSummary) -> "ForecastSummaryOut":
        return cls(
            current_balance=float(summary.current_balance),
            forecasted_balance_30d=_as_float(summary.forecasted_balance_30d),
            forecasted_balance_60d=_as_float(summary.forecasted_balance_60d),
            forecasted_balance_90d=_as_float(summary.forecasted_balance_90d),
            trend=summary.trend.value,
        )


class HistoricalWindowOut(CamelModel):
    count: int
    start_date: date | None = None
    end_date: date | None = None

    @classmethod
    def from_result(cls, result: ForecastResult) -> "HistoricalWindowOut":
        historical = result.historical
        return cls(
            count=len(historical),
            start_date=historical[0].date if historical else None,
            end_date=historical[-1].date if historical else None,
        )


class CashflowForecastResponse(CamelModel):
    success: bool = True
    unit_id: str
    account_id: str | None = None
    period: int
    historical: HistoricalWindowOut | None = None  # not kept in the cache
    forecast: list[ForecastPointOut]
    summary: ForecastSummaryOut
    cached: bool = False
    correlation_id: str
    duration_ms: float

    def cache_payload(self) -> dict:
        """JSON-ready ``{forecast, summary}`` stored in the forecast cache."""
        return self.model_dump(mode="json", by_alias=True, include={"forecast", "summary"})


class BalanceValidationResponse(CamelModel):
    success: bool = True
    unit_id: str
    account_id: str | None = None
    period: int
    is_valid: bool
    differences: int
    max_difference: float
    total_records: int
    correlation_id: str
    duration_ms: float

    @classmethod
    def from_validation(cls, validation: BalanceValidation, **extra) -> "BalanceValidationResponse":
        return cls(
            is_valid=validation.is_valid,
            differences=validation.differences,
            max_difference=float(validation.max_difference),
            total_records=validation.total_records,
            **extra,
        )
