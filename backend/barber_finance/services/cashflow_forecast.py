"""Cash-flow forecast: daily history → trend → projected balances.

Pipeline
--------
1. ``aggregate_daily_cashflow`` reduces settled revenues/expenses to a
   contiguous daily series of net flow and running balance.
2. ``estimate_trend`` fits a least-squares line to the trailing running
   balances and classifies the slope as up / down / stable, using a dead zone
   relative to the mean balance so the cutoff scales with the size of the unit.
3. ``project_forecast`` extrapolates the slope day by day with a confidence
   band that grows with sqrt(day), sized from the volatility of daily net flow.

The three steps are pure; ``CashflowForecastService`` fetches the data and
chains them. Money leaving the pipeline is quantised to cents.
"""

import math
from dataclasses import dataclass, replace
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

import numpy as np
import structlog

from barber_finance.config import settings
from barber_finance.core.exceptions import InsufficientDataError
from barber_finance.services.cashflow_source import CashflowEntry, CashflowSource, EntryType

logger = structlog.get_logger()

CENT = Decimal("0.01")
SUMMARY_CHECKPOINTS = (30, 60, 90)


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass(frozen=True)
class HistoricalPoint:
    date: date
    net_flow: Decimal
    running_balance: Decimal
    inflow: Decimal = Decimal("0")
    outflow: Decimal = Decimal("0")


@dataclass(frozen=True)
class TrendEstimate:
    daily_delta: float
    trend: Trend


@dataclass(frozen=True)
class ConfidenceInterval:
    lower: Decimal
    upper: Decimal

    @property
    def width(self) -> Decimal:
        return self.upper - self.lower


@dataclass(frozen=True)
class ForecastPoint:
    date: date
    forecasted_balance: Decimal
    confidence_interval: ConfidenceInterval
    trend: Trend


@dataclass(frozen=True)
class ForecastSummary:
    current_balance: Decimal
    trend: Trend
    forecasted_balance_30d: Decimal | None = None
    forecasted_balance_60d: Decimal | None = None
    forecasted_balance_90d: Decimal | None = None


@dataclass(frozen=True)
class ForecastResult:
    historical: tuple[HistoricalPoint, ...]
    forecast: tuple[ForecastPoint, ...]
    summary: ForecastSummary

    def truncated(self, days: int) -> "ForecastResult":
        """Keep the first ``days`` forecast points; checkpoints beyond are nulled."""
        forecast = self.forecast[:days]
        return replace(
            self,
            forecast=forecast,
            summary=build_summary(self.summary.current_balance, self.summary.trend, forecast),
        )


def _to_cents(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


# ── Historical aggregation ────────────────────────


def aggregate_daily_cashflow(
    entries: list[CashflowEntry],
    start: date,
    end: date,
    opening_balance: Decimal = Decimal("0"),
) -> list[HistoricalPoint]:
    """Bucket entries per day over ``[start, end]`` and accumulate the balance.

    Every calendar day of the window gets a point, with zero flow when nothing
    happened. Entries dated outside the window are ignored.

    Raises:
        InsufficientDataError: no entry falls inside the window.
    """
    if end < start:
        raise ValueError("end must not be before start")

    inflows: dict[date, Decimal] = {}
    outflows: dict[date, Decimal] = {}
    seen = 0
    for entry in entries:
        if entry.date < start or entry.date > end:
            continue
        seen += 1
        bucket = inflows if entry.type == EntryType.REVENUE else outflows
        bucket[entry.date] = bucket.get(entry.date, Decimal("0")) + entry.value

    if seen == 0:
        raise InsufficientDataError()

    points = []
    balance = Decimal(opening_balance)
    day = start
    while day <= end:
        inflow = inflows.get(day, Decimal("0"))
        outflow = outflows.get(day, Decimal("0"))
        net = inflow - outflow
        balance += net
        points.append(
            HistoricalPoint(
                date=day,
                net_flow=net,
                running_balance=balance,
                inflow=inflow,
                outflow=outflow,
            )
        )
        day += timedelta(days=1)
    return points


# ── Trend estimation ──────────────────────────────


def estimate_trend(
    historical: list[HistoricalPoint],
    window_days: int = 30,
    threshold_ratio: float = 0.001,
) -> TrendEstimate:
    """Least-squares slope of the trailing running balance, classified.

    ``threshold_ratio`` is the dead zone as a fraction of the mean absolute
    balance over the window, per day.
    """
    window = historical[-window_days:] if window_days > 0 else historical
    if len(window) < 2:
        return TrendEstimate(daily_delta=0.0, trend=Trend.STABLE)

    balances = np.array([float(p.running_balance) for p in window])
    x = np.arange(len(balances), dtype=float)
    slope = float(np.polyfit(x, balances, 1)[0])

    threshold = threshold_ratio * abs(float(balances.mean()))
    if slope > threshold:
        trend = Trend.UP
    elif slope < -threshold:
        trend = Trend.DOWN
    else:
        trend = Trend.STABLE
    return TrendEstimate(daily_delta=slope, trend=trend)


def daily_volatility(historical: list[HistoricalPoint]) -> float | None:
    """Sample standard deviation of daily net flow (None below two points)."""
    if len(historical) < 2:
        return None
    flows = np.array([float(p.net_flow) for p in historical])
    return float(np.std(flows, ddof=1))


# ── Projection ────────────────────────────────────


def project_forecast(
    last_date: date,
    last_balance: Decimal,
    estimate: TrendEstimate,
    horizon: int,
    volatility: float | None = None,
    z: float = 1.96,
    fallback_ratio: float = 0.05,
) -> list[ForecastPoint]:
    """One point per day for ``horizon`` days after ``last_date``.

    Half width on day i is ``base * sqrt(i)`` with ``base = z * volatility``,
    or ``fallback_ratio * |last_balance|`` when volatility is unknown. The
    forecast and half width are rounded to cents before building the interval.
    """
    if volatility is None:
        base = fallback_ratio * abs(float(last_balance))
    else:
        base = z * volatility

    start = float(last_balance)
    points = []
    for i in range(1, horizon + 1):
        forecasted = _to_cents(start + estimate.daily_delta * i)
        half_width = _to_cents(base * math.sqrt(i))
        points.append(
            ForecastPoint(
                date=last_date + timedelta(days=i),
                forecasted_balance=forecasted,
                confidence_interval=ConfidenceInterval(
                    lower=forecasted - half_width,
                    upper=forecasted + half_width,
                ),
                trend=estimate.trend,
            )
        )
    return points


def build_summary(
    current_balance: Decimal, trend: Trend, forecast: tuple[ForecastPoint, ...] | list[ForecastPoint]
) -> ForecastSummary:
    checkpoints = {
        days: forecast[days - 1].forecasted_balance if len(forecast) >= days else None
        for days in SUMMARY_CHECKPOINTS
    }
    return ForecastSummary(
        current_balance=current_balance,
        trend=trend,
        forecasted_balance_30d=checkpoints[30],
        forecasted_balance_60d=checkpoints[60],
        forecasted_balance_90d=checkpoints[90],
    )


# ── Service ───────────────────────────────────────


class CashflowForecastService:
    def __init__(
        self,
        source: CashflowSource,
        trend_window_days: int = 30,
        trend_threshold: float = 0.001,
        confidence_z: float = 1.96,
        fallback_uncertainty: float = 0.05,
    ):
        self.source = source
        self.trend_window_days = trend_window_days
        self.trend_threshold = trend_threshold
        self.confidence_z = confidence_z
        self.fallback_uncertainty = fallback_uncertainty

    @classmethod
    def from_settings(cls, source: CashflowSource) -> "CashflowForecastService":
        return cls(
            source,
            trend_window_days=settings.forecast_trend_window_days,
            trend_threshold=settings.forecast_trend_threshold,
            confidence_z=settings.forecast_confidence_z,
            fallback_uncertainty=settings.forecast_fallback_uncertainty,
        )

    async def load_history(
        self,
        unit_id: str,
        account_id: str | None,
        historical_days: int,
        as_of: date | None = None,
    ) -> list[HistoricalPoint]:
        """Daily series over the ``historical_days`` days ending ``as_of``."""
        end = as_of or date.today()
        start = end - timedelta(days=historical_days - 1)

        entries = await self.source.fetch_entries(unit_id, account_id, start, end)
        if not entries:
            logger.warning(
                "No historical data for forecast",
                unit_id=unit_id,
                account_id=account_id,
                start=start.isoformat(),
                end=end.isoformat(),
            )
            raise InsufficientDataError()

        opening = await self.source.get_opening_balance(unit_id, account_id, start)
        return aggregate_daily_cashflow(entries, start, end, opening)

    async def generate_forecast(
        self,
        unit_id: str,
        account_id: str | None = None,
        historical_days: int = 90,
        horizon: int = 90,
        as_of: date | None = None,
    ) -> ForecastResult:
        """Build the full forecast for a unit (optionally one bank account)."""
        logger.info(
            "Generating cash-flow forecast",
            unit_id=unit_id,
            account_id=account_id,
            historical_days=historical_days,
            horizon=horizon,
        )
        historical = await self.load_history(unit_id, account_id, historical_days, as_of)

        estimate = estimate_trend(historical, self.trend_window_days, self.trend_threshold)
        last = historical[-1]
        forecast = project_forecast(
            last.date,
            last.running_balance,
            estimate,
            horizon,
            volatility=daily_volatility(historical),
            z=self.confidence_z,
            fallback_ratio=self.fallback_uncertainty,
        )
        current_balance = _to_cents(last.running_balance)
        result = ForecastResult(
            historical=tuple(historical),
            forecast=tuple(forecast),
            summary=build_summary(current_balance, estimate.trend, forecast),
        )

        logger.info(
            "Cash-flow forecast generated",
            unit_id=unit_id,
            account_id=account_id,
            current_balance=float(current_balance),
            daily_delta=round(estimate.daily_delta, 2),
            trend=estimate.trend.value,
        )
        return result
