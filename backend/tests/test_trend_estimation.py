"""Trend estimation over the running balance."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from barber_finance.services.cashflow_forecast import (
    HistoricalPoint,
    Trend,
    daily_volatility,
    estimate_trend,
)

START = date(2026, 1, 1)


def series(balances) -> list[HistoricalPoint]:
    points = []
    previous = None
    for i, balance in enumerate(balances):
        balance = Decimal(str(balance))
        net = balance - previous if previous is not None else Decimal("0")
        points.append(HistoricalPoint(date=START + timedelta(days=i), net_flow=net, running_balance=balance))
        previous = balance
    return points


def test_rising_balance_is_up():
    estimate = estimate_trend(series([5000 + 40 * i for i in range(30)]))

    assert estimate.trend == Trend.UP
    assert estimate.daily_delta == pytest.approx(40)


def test_falling_balance_is_down():
    estimate = estimate_trend(series([5000 - 25 * i for i in range(30)]))

    assert estimate.trend == Trend.DOWN
    assert estimate.daily_delta == pytest.approx(-25)


def test_threshold_is_relative_to_balance():
    # Same +50/day slope: noise for a large unit, growth for a small one
    large = estimate_trend(series([1_000_000 + 50 * i for i in range(30)]))
    small = estimate_trend(series([2_000 + 50 * i for i in range(30)]))

    assert large.trend == Trend.STABLE
    assert small.trend == Trend.UP
    assert large.daily_delta == pytest.approx(small.daily_delta)


def test_small_wobble_is_stable():
    estimate = estimate_trend(series([10_000 + (3 if i % 2 else -3) for i in range(30)]))

    assert estimate.trend == Trend.STABLE


def test_uses_trailing_window_only():
    balances = [10_000] * 45 + [10_000 + 100 * (i + 1) for i in range(45)]

    estimate = estimate_trend(series(balances), window_days=30)

    assert estimate.daily_delta == pytest.approx(100)
    assert estimate.trend == Trend.UP


def test_deficit_getting_deeper_is_down():
    estimate = estimate_trend(series([-1_000 - 30 * i for i in range(30)]))

    assert estimate.trend == Trend.DOWN


def test_single_point_is_stable():
    estimate = estimate_trend(series([1234]))

    assert estimate.daily_delta == 0.0
    assert estimate.trend == Trend.STABLE


def test_volatility_needs_two_points():
    assert daily_volatility(series([100])) is None
    assert daily_volatility(series([100, 100, 100])) == 0.0
