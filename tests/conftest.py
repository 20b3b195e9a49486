"""Shared fixtures for the Boondh test suite."""

from datetime import date, timedelta

import pandas as pd
import pytest

from boondh_core.config import SeasonalPair, Location, make_tables
from boondh_core.weather import WeatherSnapshot


TODAY = date(2026, 7, 15)


@pytest.fixture
def tables():
    """Two-city tables with a recognisable default pair."""
    return make_tables(
        {
            "Mumbai": (19.0760, 72.8777, 24.0, 0.4),
            "Delhi": (28.7041, 77.1025, 7.5, 0.7),
        },
        default_seasonal=SeasonalPair(8.0, 1.0),
        default_location=Location("Delhi", 28.7041, 77.1025),
    )


class FakeSource:
    """In-memory weather source with the OpenMeteoSource interface."""

    def __init__(self, daily_mm=None, forecast=None, today=TODAY):
        self.daily_mm = daily_mm if daily_mm is not None else [5.08] * 30
        self.forecast = forecast
        self.today = today
        self.calls = []

    def trailing_daily(self, lat, lon, days=30):
        self.calls.append(("trailing", lat, lon, days))
        n = len(self.daily_mm)
        idx = [self.today - timedelta(days=n - i) for i in range(n)]
        return WeatherSnapshot(pd.Series(self.daily_mm, index=idx, dtype=float), {"temperature_2m": 31.0})

    def forecast_daily(self, lat, lon, days=7):
        self.calls.append(("forecast", lat, lon, days))
        if self.forecast is not None:
            return self.forecast
        precip = [0.0, 0.3, 0.0, 12.0, 0.0, 60.0, 2.0]
        return pd.DataFrame(
            {
                "date": [self.today + timedelta(days=i) for i in range(7)],
                "max_temp": [33.0] * 7,
                "min_temp": [26.0] * 7,
                "precipitation_mm": precip,
                "wind_speed": [12.0] * 7,
                "weather_code": [0, 51, 0, 63, 1, 95, 61],
            }
        )


class FailingSource:
    """Weather source that is always down."""

    def trailing_daily(self, lat, lon, days=30):
        from boondh_core.errors import DataSourceUnavailable

        raise DataSourceUnavailable("network down")

    def forecast_daily(self, lat, lon, days=7):
        from boondh_core.errors import DataSourceUnavailable

        raise DataSourceUnavailable("network down")


@pytest.fixture
def fake_source():
    return FakeSource()


@pytest.fixture
def failing_source():
    return FailingSource()


@pytest.fixture
def make_source():
    """Factory for FakeSource with custom series / forecast."""
    return FakeSource
