"""
boondh_core.rainfall
--------------------
Monthly rainfall estimate for a location.

Audience
--------
Anyone who can read Python. We keep the math explicit and the code small.

Units
-----
- Daily series in millimetres (mm)
- Monthly / annual estimates in inches

Two paths
---------
1) "live": average the last 30 days of daily precipitation from a weather
   source and scale to a month:
       monthly_in = mean(daily_mm) * 30.44 / 25.4
2) "fallback": when there is no source, no location, or the source fails,
   use the city's seasonal pair (monsoon vs dry month).

The estimate always succeeds; failures only change `RainfallSample.source`.

Floors
------
- Negative daily values are treated as 0.
- Monthly estimates are floored at 0.1 in so nothing downstream divides by 0.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

import pandas as pd

from .config import (
    MONSOON_MONTHS,
    DailyForecast,
    Location,
    LookupTables,
    RainfallSample,
    default_tables,
)
from .geo import match_city_name

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30.44
MM_PER_INCH = 25.4
MIN_MONTHLY_INCHES = 0.1


def monthly_inches_from_daily(series_mm) -> float:
    """
    Scale a daily precipitation series (mm) to a monthly total (inches).

    Parameters
    ----------
    series_mm : pandas.Series | sequence of float
        Daily totals. NaN / None are ignored.

    Returns
    -------
    float
        mean(daily) * 30.44 / 25.4, floored at 0.1.
    """
    s = pd.to_numeric(pd.Series(series_mm, dtype="object"), errors="coerce").dropna()
    if s.empty:
        return MIN_MONTHLY_INCHES
    s = s.clip(lower=0.0)
    monthly = float(s.mean()) * DAYS_PER_MONTH / MM_PER_INCH
    return max(MIN_MONTHLY_INCHES, monthly)


def seasonal_fallback(city: str, month: int, tables: Optional[LookupTables] = None) -> float:
    """
    Typical monthly rainfall (inches) for a city and a 0-based month index.

    Parameters
    ----------
    city : str
        Matched against the seasonal table the same way the coordinate
        lookup matches (exact, then ignoring case, then substring), so
        "New Delhi" gets Delhi's pair. Unknown cities use the default pair.
    month : int
        0 = January ... 11 = December. Months 5..8 (June-September) are the
        monsoon window.
    """
    tables = tables or default_tables()
    key = match_city_name(city, tables.seasonal)
    pair = tables.seasonal[key] if key is not None else tables.default_seasonal

    inches = pair.monsoon_inches if int(month) in MONSOON_MONTHS else pair.dry_inches
    return max(MIN_MONTHLY_INCHES, float(inches))


def estimate_rainfall(
    location: Optional[Location] = None,
    city: Optional[str] = None,
    source=None,
    today: Optional[date] = None,
    tables: Optional[LookupTables] = None,
) -> RainfallSample:
    """
    Estimate monthly rainfall, never raising.

    Parameters
    ----------
    location : Location | None
        Coordinates for the live path. Its name is also used for the
        fallback when `city` is not given.
    city : str | None
        City name for the seasonal fallback.
    source : object with `trailing_daily(lat, lon, days)` | None
        Usually `boondh_core.weather.OpenMeteoSource`. None -> fallback.
    today : date | None
        Picks the fallback month; defaults to today.
    tables : LookupTables | None

    Returns
    -------
    RainfallSample
        source is "live" or "fallback".
    """
    today = today or date.today()
    name = city if city else (location.name if location is not None else "")

    if source is not None and location is not None:
        try:
            snap = source.trailing_daily(location.latitude, location.longitude, days=30)
            series = pd.to_numeric(pd.Series(snap.precipitation_mm, dtype="object"), errors="coerce").dropna()
            if not series.empty:
                monthly = monthly_inches_from_daily(series)
                logger.info("Live rainfall for %s: %.2f in/month (%d days)", name, monthly, len(series))
                return RainfallSample(monthly_inches=monthly, source="live")
            logger.warning("Live rainfall for %s returned no usable days, using seasonal fallback", name)
        except Exception as e:
            logger.warning("Live rainfall for %s unavailable, using seasonal fallback: %s", name, e)

    monthly = seasonal_fallback(name, today.month - 1, tables)
    return RainfallSample(monthly_inches=monthly, source="fallback")


def parse_precipitation_csv(file_like) -> pd.Series:
    """
    Read a daily precipitation CSV with columns like:
        date,precipitation_mm
    or   day,rain_mm

    Parameters
    ----------
    file_like : path or file-like
        Anything that pandas.read_csv can handle.

    Returns
    -------
    pandas.Series
        Daily totals (mm, negatives floored at 0) indexed by date, oldest first.

    Errors you might see and how to fix
    -----------------------------------
    - ValueError: missing columns
      -> Name the columns 'date' and 'precipitation_mm' (case-insensitive),
         or one of the accepted variants below.
    """
    df = pd.read_csv(file_like)
    # Normalize headers for easy matching
    df.columns = [c.strip().lower() for c in df.columns]

    date_col = next((c for c in ["date", "day", "time"] if c in df.columns), None)
    rain_col = next(
        (c for c in ["precipitation_mm", "precipitation_sum", "rain_mm", "precip_mm"] if c in df.columns),
        None,
    )
    if date_col is None or rain_col is None:
        raise ValueError("Precipitation CSV must include columns like 'date' and 'precipitation_mm'.")

    values = pd.to_numeric(df[rain_col], errors="coerce").fillna(0.0).clip(lower=0.0)
    series = pd.Series(values.to_numpy(dtype=float), index=pd.to_datetime(df[date_col]).dt.date, name="precipitation_mm")
    return series.sort_index()


# ------------------------------------------------------------
# Recency summary ("last rain 2 days ago", "next rain in 3 days")
# ------------------------------------------------------------
@dataclass(frozen=True)
class RainRecency:
    last_rain_days_ago: Optional[int]
    next_rain_in_days: Optional[int]


def rain_recency(
    series_mm=None,
    forecast: Sequence[DailyForecast] = (),
    today: Optional[date] = None,
    threshold_mm: float = 0.0,
) -> RainRecency:
    """
    Days since the last wet day and until the next forecast wet day.

    A day is wet when its precipitation is above `threshold_mm`. Either side is
    None when no wet day is known.
    """
    today = today or date.today()

    last = None
    if series_mm is not None and len(series_mm) > 0:
        s = pd.to_numeric(pd.Series(series_mm, dtype="object"), errors="coerce")
        # Index must be date-like; anything else is skipped.
        days = pd.to_datetime(pd.Series(s.index, dtype="object"), errors="coerce")
        wet = [
            ts.date()
            for ts, v in zip(days, s.to_numpy(dtype=float))
            if not pd.isna(ts) and not math.isnan(v) and v > threshold_mm
        ]
        past = [d for d in wet if d <= today]
        if past:
            last = (today - max(past)).days

    nxt = None
    upcoming = [f.date for f in forecast if f.precipitation_mm > threshold_mm and f.date >= today]
    if upcoming:
        nxt = (min(upcoming) - today).days

    return RainRecency(last_rain_days_ago=last, next_rain_in_days=nxt)
