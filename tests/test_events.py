"""
Unit tests for rain-event classification, forecasts and alerts.
"""

from datetime import date, timedelta

import pandas as pd
import pytest

from boondh_core.events import build_forecast, classify_rain, rain_alerts


class TestClassifyRain:
    """Step function over daily mm."""

    @pytest.mark.parametrize("mm,tier", [
        (0, "none"),
        (0.1, "light"),
        (2.4, "light"),
        (2.5, "moderate"),
        (9.99, "moderate"),
        (10, "heavy"),
        (49.9, "heavy"),
        (50, "storm"),
        (250, "storm"),
    ])
    def test_tiers(self, mm, tier):
        assert classify_rain(mm).rain_type == tier

    @pytest.mark.parametrize("mm,collectable", [(0.5, False), (0.51, True), (0.3, False), (0, False)])
    def test_collectable(self, mm, collectable):
        assert classify_rain(mm).collectable is collectable

    def test_light_but_not_collectable(self):
        e = classify_rain(0.4)
        assert e.rain_type == "light"
        assert e.collectable is False

    @pytest.mark.parametrize("bad", [-3.0, float("nan"), None, "wet"])
    def test_bad_input_is_dry(self, bad):
        e = classify_rain(bad)
        assert e.rain_type == "none"
        assert e.collectable is False

    def test_monotonic(self):
        order = ["none", "light", "moderate", "heavy", "storm"]
        ranks = [order.index(classify_rain(x / 10).rain_type) for x in range(0, 800)]
        assert ranks == sorted(ranks)


class TestBuildForecast:
    """Whole-sequence regeneration from a daily frame."""

    def _frame(self, n=9):
        start = date(2026, 7, 15)
        return pd.DataFrame(
            {
                "date": [start + timedelta(days=i) for i in reversed(range(n))],
                "max_temp": [33.0] * n,
                "min_temp": [26.0] * n,
                "precipitation_mm": [float(i) for i in reversed(range(n))],
                "wind_speed": [10.0] * n,
                "weather_code": [61] * n,
            }
        )

    def test_sorted_and_capped(self):
        out = build_forecast(self._frame())
        assert len(out) == 7
        assert out[0].date == date(2026, 7, 15)
        assert [f.date for f in out] == sorted(f.date for f in out)

    def test_classified(self):
        out = build_forecast(self._frame())
        assert out[0].rain_type == "none"
        assert out[3].rain_type == "moderate"
        assert out[3].collectable is True
        assert out[0].weather_code == 61

    def test_missing_values(self):
        df = pd.DataFrame(
            {
                "date": ["2026-07-15"],
                "max_temp": [None],
                "min_temp": [None],
                "precipitation_mm": [None],
                "wind_speed": [None],
                "weather_code": [None],
            }
        )
        (f,) = build_forecast(df)
        assert f.date == date(2026, 7, 15)
        assert f.max_temp is None
        assert f.precipitation_mm == 0.0
        assert f.weather_code is None

    def test_empty(self):
        assert build_forecast(pd.DataFrame()) == []
        assert build_forecast(None) == []


class TestRainAlerts:

    def test_only_collectable_days(self):
        df = pd.DataFrame(
            {
                "date": [date(2026, 7, 15), date(2026, 7, 16), date(2026, 7, 17)],
                "precipitation_mm": [0.4, 12.0, 60.0],
            }
        )
        alerts = rain_alerts(build_forecast(df), area_sqft=1000)
        assert [a.rain_type for a in alerts] == ["heavy", "storm"]
        assert all(a.type == "rain_alert" for a in alerts)
        assert alerts[0].expected_rainfall_mm == 12.0
        assert "L." in alerts[0].message

    def test_no_area_no_litres(self):
        df = pd.DataFrame({"date": [date(2026, 7, 15)], "precipitation_mm": [5.0]})
        (alert,) = rain_alerts(build_forecast(df))
        assert "roof" not in alert.message
