"""
boondh_core.weather
-------------------
Live weather from the free Open-Meteo API.

What's here
-----------
`OpenMeteoSource` with two calls:
1) trailing_daily: the last N days of daily precipitation (mm) plus a
   current-conditions snapshot. Feeds the rainfall estimator.
2) forecast_daily: the next N days (temperatures, precipitation, wind, WMO
   weather code). Feeds the 7-day forecast.

`CsvPrecipitationSource` offers the same two calls for an uploaded daily
rainfall CSV, handing forecasts to another source when one is given.

Every failure (network, timeout, HTTP status, malformed JSON) is raised as
`DataSourceUnavailable` so callers only need to handle one exception type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
import requests

from .config import DEFAULT_WEATHER_URL
from .errors import DataSourceUnavailable
from .io import load_or_fetch_json

logger = logging.getLogger(__name__)

CURRENT_FIELDS = "temperature_2m,relative_humidity_2m,precipitation,weather_code,wind_speed_10m"
FORECAST_FIELDS = "temperature_2m_max,temperature_2m_min,precipitation_sum,weather_code,wind_speed_10m_max"

FORECAST_COLUMNS = ["date", "max_temp", "min_temp", "precipitation_mm", "wind_speed", "weather_code"]


@dataclass
class WeatherSnapshot:
    """
    Trailing daily precipitation and current conditions.

    precipitation_mm : pandas.Series
        Daily totals (mm) indexed by date, oldest first. May contain NaN.
    current : dict
        Raw Open-Meteo "current" block (temperature_2m, precipitation, ...).
    """
    precipitation_mm: pd.Series
    current: Dict[str, Any] = field(default_factory=dict)


class OpenMeteoSource:
    """
    Thin client for the Open-Meteo forecast endpoint.

    Parameters
    ----------
    base_url : str
        Forecast endpoint, e.g. "https://api.open-meteo.com/v1/forecast".
    timeout : float
        Seconds before a request is abandoned.
    cache_dir : Path | None
        Cache responses per (endpoint, coordinates, day). None disables caching.
    session : requests.Session | None
        Injected for tests; defaults to a new session.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_WEATHER_URL,
        timeout: float = 15.0,
        cache_dir: Optional[Path] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.cache_dir = cache_dir
        self.session = session or requests.Session()

    # ------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------
    def _get(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            r = self.session.get(self.base_url, params=params, timeout=self.timeout)
            r.raise_for_status()
            js = r.json()
        except requests.RequestException as e:
            raise DataSourceUnavailable(f"Open-Meteo request failed: {e}") from e
        except ValueError as e:
            raise DataSourceUnavailable(f"Open-Meteo returned invalid JSON: {e}") from e

        if not isinstance(js, dict) or "daily" not in js:
            raise DataSourceUnavailable("Open-Meteo response has no 'daily' block")
        return js

    def _fetch(self, kind: str, lat: float, lon: float, params: Dict[str, Any]) -> Dict[str, Any]:
        key = (kind, float(lat), float(lon), date.today().isoformat(), sorted(params.items()))
        return load_or_fetch_json(key, lambda: self._get(params), self.cache_dir, prefix=kind)

    # ------------------------------------------------------------
    # Public calls
    # ------------------------------------------------------------
    def trailing_daily(self, lat: float, lon: float, days: int = 30) -> WeatherSnapshot:
        """
        Last `days` days of daily precipitation plus current conditions.

        Raises
        ------
        DataSourceUnavailable
        """
        params = {
            "latitude": lat,
            "longitude": lon,
            "daily": "precipitation_sum",
            "current": CURRENT_FIELDS,
            "past_days": int(days),
            "forecast_days": 1,
            "timezone": "auto",
        }
        js = self._fetch("trailing", lat, lon, params)
        daily = js.get("daily") or {}
        times = daily.get("time") or []
        values = daily.get("precipitation_sum") or []
        if len(times) != len(values):
            raise DataSourceUnavailable("Open-Meteo daily arrays have different lengths")

        try:
            series = pd.Series(
                pd.to_numeric(pd.Series(values, dtype="object"), errors="coerce").to_numpy(dtype=float),
                index=pd.to_datetime(pd.Series(times)).dt.date,
                name="precipitation_mm",
            )
        except (ValueError, TypeError) as e:
            raise DataSourceUnavailable(f"Open-Meteo trailing series is malformed: {e}") from e
        # Drop the trailing forecast day so only observed days remain.
        series = series.iloc[: int(days)] if len(series) > int(days) else series

        logger.debug("Fetched %d trailing days for (%.4f, %.4f)", len(series), lat, lon)
        return WeatherSnapshot(precipitation_mm=series, current=dict(js.get("current") or {}))

    def forecast_daily(self, lat: float, lon: float, days: int = 7) -> pd.DataFrame:
        """
        Next `days` days as a DataFrame with FORECAST_COLUMNS.

        Raises
        ------
        DataSourceUnavailable
        """
        params = {
            "latitude": lat,
            "longitude": lon,
            "daily": FORECAST_FIELDS,
            "forecast_days": int(days),
            "timezone": "auto",
        }
        js = self._fetch("forecast", lat, lon, params)
        daily = js.get("daily") or {}
        if not daily.get("time"):
            raise DataSourceUnavailable("Open-Meteo forecast has no days")

        try:
            df = pd.DataFrame(
                {
                    "date": pd.to_datetime(pd.Series(daily["time"])).dt.date,
                    "max_temp": daily.get("temperature_2m_max"),
                    "min_temp": daily.get("temperature_2m_min"),
                    "precipitation_mm": daily.get("precipitation_sum"),
                    "wind_speed": daily.get("wind_speed_10m_max"),
                    "weather_code": daily.get("weather_code"),
                }
            )
        except (ValueError, TypeError) as e:
            raise DataSourceUnavailable(f"Open-Meteo forecast is malformed: {e}") from e

        return df[FORECAST_COLUMNS]


class CsvPrecipitationSource:
    """
    Weather source backed by an uploaded daily rainfall series.

    Parameters
    ----------
    series_mm : pandas.Series
        Daily totals (mm) indexed by date, e.g. from
        `boondh_core.rainfall.parse_precipitation_csv`.
    forecast_source : object | None
        Anything with `forecast_daily` (usually OpenMeteoSource). Without one
        there is no forecast and `forecast_daily` raises.
    """

    def __init__(self, series_mm: pd.Series, forecast_source=None):
        self.series_mm = series_mm.sort_index()
        self.forecast_source = forecast_source

    def trailing_daily(self, lat: float, lon: float, days: int = 30) -> WeatherSnapshot:
        """Last `days` values of the uploaded series; coordinates are ignored."""
        series = pd.to_numeric(self.series_mm, errors="coerce").dropna()
        if series.empty:
            raise DataSourceUnavailable("Uploaded rainfall CSV has no daily values")
        return WeatherSnapshot(precipitation_mm=series.tail(int(days)), current={})

    def forecast_daily(self, lat: float, lon: float, days: int = 7) -> pd.DataFrame:
        if self.forecast_source is None:
            raise DataSourceUnavailable("No forecast source configured for uploaded rainfall")
        return self.forecast_source.forecast_daily(lat, lon, days=days)
