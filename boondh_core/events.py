"""
boondh_core.events
------------------
Daily rain events: classify a day's precipitation, build the 7-day forecast,
and draft rain alerts for the notification service.

Thresholds (mm per day)
-----------------------
    0            -> none
    (0, 2.5)     -> light
    [2.5, 10)    -> moderate
    [10, 50)     -> heavy
    >= 50        -> storm

A day is "collectable" when it brings more than 0.5 mm, whatever its tier.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import pandas as pd

from .config import LITRES_PER_INCH_SQFT, DailyForecast

COLLECTABLE_MIN_MM = 0.5
FORECAST_DAYS = 7

# (lower bound inclusive, tier), checked from the top
_TIERS = [
    (50.0, "storm"),
    (10.0, "heavy"),
    (2.5, "moderate"),
]


@dataclass(frozen=True)
class RainEvent:
    rain_type: str
    collectable: bool


def _clean_mm(value) -> float:
    try:
        mm = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(mm) or mm < 0.0:
        return 0.0
    return mm


def classify_rain(precipitation_mm: float) -> RainEvent:
    """
    Bucket one day's precipitation into a tier and a collectable flag.

    Negative, NaN or non-numeric input counts as a dry day.
    """
    mm = _clean_mm(precipitation_mm)
    collectable = mm > COLLECTABLE_MIN_MM
    if mm <= 0.0:
        return RainEvent("none", collectable)
    for lower, tier in _TIERS:
        if mm >= lower:
            return RainEvent(tier, collectable)
    return RainEvent("light", collectable)


def _optional_float(value) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def build_forecast(daily: pd.DataFrame, days: int = FORECAST_DAYS) -> List[DailyForecast]:
    """
    Turn a daily forecast frame into a fresh list of DailyForecast records.

    Parameters
    ----------
    daily : pandas.DataFrame
        Columns date, max_temp, min_temp, precipitation_mm, wind_speed and
        (optionally) weather_code; see `OpenMeteoSource.forecast_daily`.
    days : int
        Keep at most this many days, earliest first.

    Returns
    -------
    list[DailyForecast]
        The whole sequence; callers replace any previous forecast with it.
    """
    if daily is None or len(daily) == 0:
        return []

    df = daily.sort_values("date").head(int(days))
    out: List[DailyForecast] = []
    for _, row in df.iterrows():
        mm = _clean_mm(row.get("precipitation_mm"))
        event = classify_rain(mm)
        code = _optional_float(row.get("weather_code"))
        out.append(
            DailyForecast(
                date=pd.Timestamp(row["date"]).date(),
                max_temp=_optional_float(row.get("max_temp")),
                min_temp=_optional_float(row.get("min_temp")),
                precipitation_mm=mm,
                wind_speed=_optional_float(row.get("wind_speed")),
                rain_type=event.rain_type,
                collectable=event.collectable,
                weather_code=None if code is None else int(code),
            )
        )
    return out


# ------------------------------------------------------------
# Rain alerts
# ------------------------------------------------------------
@dataclass(frozen=True)
class RainAlert:
    """Content of a "rain_alert" notification. Delivery happens elsewhere."""
    type: str
    title: str
    message: str
    rain_type: str
    expected_rainfall_mm: float
    date: object


_ALERT_TITLES = {
    "light": "Light rain expected",
    "moderate": "Rain expected: get your tank ready",
    "heavy": "Heavy rain expected: clear gutters and filters",
    "storm": "Storm warning: check overflow outlets",
}


def rain_alerts(forecasts: Sequence[DailyForecast], area_sqft: Optional[float] = None) -> List[RainAlert]:
    """
    One alert per collectable forecast day.

    If `area_sqft` is given, the message includes a rough litres estimate for
    that day (mm -> inches x area x 0.623, no runoff losses).
    """
    alerts: List[RainAlert] = []
    for f in forecasts:
        if not f.collectable:
            continue
        msg = f"{f.precipitation_mm:.1f} mm of {f.rain_type} rain forecast for {f.date:%a %d %b}."
        if area_sqft:
            litres = f.precipitation_mm / 25.4 * float(area_sqft) * LITRES_PER_INCH_SQFT
            msg += f" Your roof could catch up to {litres:,.0f} L."
        alerts.append(
            RainAlert(
                type="rain_alert",
                title=_ALERT_TITLES.get(f.rain_type, "Rain expected"),
                message=msg,
                rain_type=f.rain_type,
                expected_rainfall_mm=f.precipitation_mm,
                date=f.date,
            )
        )
    return alerts
