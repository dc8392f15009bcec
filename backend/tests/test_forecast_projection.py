"""Forward projection and confidence intervals."""

import math
from datetime import date, timedelta
from decimal import Decimal

import pytest

from barber_finance.services.cashflow_forecast import (
    ForecastResult,
    ForecastSummary,
    Trend,
    TrendEstimate,
    build_summary,
    project_forecast,
)

LAST_DATE = date(2026, 6, 30)


def test_one_point_per_day_after_last_date():
    points = project_forecast(LAST_DATE, Decimal("1000"), TrendEstimate(10.0, Trend.UP), 60, volatility=20.0)

    assert len(points) == 60
    assert points[0].date == LAST_DATE + timedelta(days=1)
    assert points[-1].date == LAST_DATE + timedelta(days=60)


def test_linear_extrapolation():
    points = project_forecast(LAST_DATE, Decimal("1000"), TrendEstimate(12.5, Trend.UP), 30, volatility=0.0)

    assert points[0].forecasted_balance == Decimal("1012.50")
    assert points[29].forecasted_balance == Decimal("1375.00")


def test_interval_contains_forecast_and_widens():
    points = project_forecast(
        LAST_DATE, Decimal("8450.37"), TrendEstimate(-17.3, Trend.DOWN), 90, volatility=143.21
    )

    for point in points:
        interval = point.confidence_interval
        assert interval.lower <= point.forecasted_balance <= interval.upper
    widths = [p.confidence_interval.width for p in points]
    assert all(b >= a for a, b in zip(widths, widths[1:]))
    assert widths[-1] > widths[0]


def test_interval_grows_with_square_root_of_horizon():
    points = project_forecast(LAST_DATE, Decimal("0"), TrendEstimate(0.0, Trend.STABLE), 16, volatility=100.0, z=1.0)

    assert points[0].confidence_interval.width == Decimal("200.00")
    assert points[3].confidence_interval.width == Decimal("400.00")
    assert points[15].confidence_interval.width == Decimal("800.00")


def test_negative_balance_is_not_clamped():
    points = project_forecast(LAST_DATE, Decimal("-2500"), TrendEstimate(-50.0, Trend.DOWN), 10, volatility=80.0)

    first = points[0]
    assert first.forecasted_balance == Decimal("-2550.00")
    assert first.confidence_interval.upper < 0
    upper_gap = first.confidence_interval.upper - first.forecasted_balance
    lower_gap = first.forecasted_balance - first.confidence_interval.lower
    assert upper_gap == lower_gap


def test_falls_back_to_fraction_of_balance_without_volatility():
    points = project_forecast(LAST_DATE, Decimal("-4000"), TrendEstimate(0.0, Trend.STABLE), 4, volatility=None)

    # 5% of |balance| on day 1, doubled by sqrt(4) on day 4
    assert points[0].confidence_interval.lower == Decimal("-4200.00")
    assert points[0].confidence_interval.upper == Decimal("-3800.00")
    assert points[3].confidence_interval.width == Decimal("800.00")


def test_every_point_echoes_overall_trend():
    points = project_forecast(LAST_DATE, Decimal("500"), TrendEstimate(3.0, Trend.UP), 45, volatility=30.0)

    assert {p.trend for p in points} == {Trend.UP}


def test_half_width_uses_z_scaled_volatility():
    points = project_forecast(LAST_DATE, Decimal("100"), TrendEstimate(0.0, Trend.STABLE), 1, volatility=50.0)

    assert points[0].confidence_interval.upper == Decimal("100") + Decimal(str(round(1.96 * 50.0 * math.sqrt(1), 2)))


def test_summary_checkpoints_follow_horizon():
    points = project_forecast(LAST_DATE, Decimal("1000"), TrendEstimate(1.0, Trend.UP), 90, volatility=5.0)
    result = ForecastResult(
        historical=(),
        forecast=tuple(points),
        summary=build_summary(Decimal("1000.00"), Trend.UP, points),
    )

    assert result.summary.forecasted_balance_90d == Decimal("1090.00")

    truncated = result.truncated(60)
    assert len(truncated.forecast) == 60
    assert truncated.summary == ForecastSummary(
        current_balance=Decimal("1000.00"),
        trend=Trend.UP,
        forecasted_balance_30d=Decimal("1030.00"),
        forecasted_balance_60d=Decimal("1060.00"),
        forecasted_balance_90d=None,
    )
    # Original result is untouched
    assert len(result.forecast) == 90


def test_result_is_immutable():
    result = ForecastResult(historical=(), forecast=(), summary=build_summary(Decimal("0"), Trend.STABLE, []))

    with pytest.raises(AttributeError):
        result.summary = None
