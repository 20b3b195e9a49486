"""
Unit tests for the rainfall estimator.

The live source is always a fake; nothing here touches the network.
"""

import io
from datetime import date, timedelta

import pandas as pd
import pytest

from boondh_core.config import DailyForecast, Location
from boondh_core.rainfall import (
    MIN_MONTHLY_INCHES,
    estimate_rainfall,
    monthly_inches_from_daily,
    parse_precipitation_csv,
    rain_recency,
    seasonal_fallback,
)
from boondh_core.weather import CsvPrecipitationSource

MUMBAI = Location("Mumbai", 19.0760, 72.8777)


class TestMonthlyFromDaily:
    """mean(daily_mm) * 30.44 / 25.4, floored at 0.1."""

    def test_formula(self):
        assert monthly_inches_from_daily([5.08] * 30) == pytest.approx(6.088)

    def test_nan_ignored(self):
        assert monthly_inches_from_daily([2.54, None, float("nan"), 2.54]) == pytest.approx(3.044)

    def test_negative_values_count_as_zero(self):
        assert monthly_inches_from_daily([-10.0, 5.08]) == pytest.approx(2.54 * 30.44 / 25.4)

    @pytest.mark.parametrize("series", [[], [0.0] * 30, [None, None]])
    def test_floor(self, series):
        assert monthly_inches_from_daily(series) == MIN_MONTHLY_INCHES


class TestSeasonalFallback:
    """Monsoon window is June..September (0-based 5..8)."""

    def test_unknown_city_in_monsoon_uses_default_pair(self, tables):
        assert seasonal_fallback("Zzyzx", 6, tables) == 8.0

    def test_unknown_city_dry_month(self, tables):
        assert seasonal_fallback("Zzyzx", 0, tables) == 1.0

    @pytest.mark.parametrize("month,expected", [(4, 0.4), (5, 24.0), (8, 24.0), (9, 0.4)])
    def test_window_edges(self, tables, month, expected):
        assert seasonal_fallback("mumbai", month, tables) == expected

    def test_substring_matches_table_city(self, tables):
        assert seasonal_fallback("New Delhi", 6, tables) == 7.5
        assert seasonal_fallback("new delhi", 0, tables) == 0.7

    def test_never_non_positive(self):
        from boondh_core.config import SeasonalPair, make_tables

        t = make_tables({"Dry": (0.0, 0.0, 0.0, -1.0)}, default_seasonal=SeasonalPair(0.0, 0.0))
        for m in range(12):
            assert seasonal_fallback("Dry", m, t) > 0
            assert seasonal_fallback("Elsewhere", m, t) > 0


class TestEstimateRainfall:
    """Live path, fallback path, never raises."""

    def test_live(self, fake_source, tables):
        s = estimate_rainfall(MUMBAI, source=fake_source, tables=tables)
        assert s.source == "live"
        assert s.monthly_inches == pytest.approx(6.088)
        assert s.annual_inches == pytest.approx(6.088 * 12)

    def test_source_failure_falls_back(self, failing_source, tables):
        s = estimate_rainfall(MUMBAI, source=failing_source, today=date(2026, 7, 1), tables=tables)
        assert s.source == "fallback"
        assert s.monthly_inches == 24.0

    def test_unexpected_error_falls_back(self, tables):
        class Broken:
            def trailing_daily(self, lat, lon, days=30):
                raise KeyError("daily")

        s = estimate_rainfall(MUMBAI, source=Broken(), today=date(2026, 1, 10), tables=tables)
        assert s == s.__class__(0.4, "fallback")

    def test_empty_series_falls_back(self, make_source, tables):
        src = make_source(daily_mm=[None, None])
        s = estimate_rainfall(MUMBAI, source=src, today=date(2026, 7, 1), tables=tables)
        assert s.source == "fallback"

    def test_no_source(self, tables):
        s = estimate_rainfall(city="Zzyzx", today=date(2026, 7, 20), tables=tables)
        assert s.source == "fallback"
        assert s.monthly_inches == 8.0

    def test_no_location_no_city(self, tables):
        s = estimate_rainfall(today=date(2026, 2, 1), tables=tables)
        assert s.monthly_inches == 1.0

    def test_city_overrides_location_name_for_fallback(self, tables):
        s = estimate_rainfall(MUMBAI, city="Delhi", today=date(2026, 7, 1), tables=tables)
        assert s.monthly_inches == 7.5


class TestParseCsv:
    """Offline daily series."""

    def test_parse(self):
        text = "Date,Precipitation_mm\n2026-07-02,3.5\n2026-07-01,-1\n2026-07-03,\n"
        s = parse_precipitation_csv(io.StringIO(text))
        assert list(s.index) == [date(2026, 7, 1), date(2026, 7, 2), date(2026, 7, 3)]
        assert list(s) == [0.0, 3.5, 0.0]

    def test_missing_columns(self):
        with pytest.raises(ValueError, match="precipitation_mm"):
            parse_precipitation_csv(io.StringIO("when,amount\n2026-07-01,1\n"))

    def test_uploaded_series_counts_as_live(self, tables):
        rows = "\n".join(f"2026-06-{d:02d},5.08" for d in range(1, 31))
        series = parse_precipitation_csv(io.StringIO("date,rain_mm\n" + rows + "\n"))
        s = estimate_rainfall(MUMBAI, source=CsvPrecipitationSource(series), tables=tables)
        assert s.source == "live"
        assert s.monthly_inches == pytest.approx(6.088)


class TestRainRecency:

    def test_last_and_next(self):
        today = date(2026, 7, 15)
        series = pd.Series(
            [0.0, 4.0, 0.0, 0.0],
            index=[today - timedelta(days=d) for d in (4, 3, 2, 1)],
        )
        forecast = [
            DailyForecast(today + timedelta(days=d), None, None, mm, None, "x", mm > 0.5)
            for d, mm in [(0, 0.0), (1, 0.0), (2, 1.2)]
        ]
        r = rain_recency(series, forecast, today=today)
        assert r.last_rain_days_ago == 3
        assert r.next_rain_in_days == 2

    def test_unknown(self):
        r = rain_recency(None, [], today=date(2026, 7, 15))
        assert r.last_rain_days_ago is None
        assert r.next_rain_in_days is None
