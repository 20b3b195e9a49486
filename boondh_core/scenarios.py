"""
boondh_core.scenarios
---------------------
End-to-end estimate for one household, and a material comparison table.

Pipeline
--------
1) Resolve the location (explicit coordinates > city table > geocoder > Delhi)
2) Estimate monthly rainfall (live Open-Meteo, else seasonal fallback)
3) Yield: collection (L) and savings
4) Financials: setup cost, incentives, payback, ROI
5) Context: climate zone, 7-day forecast, rain alerts, rain recency

Failure policy
--------------
Nothing here raises because the weather is unavailable. A failed forecast
becomes an empty list; a failed rainfall fetch becomes the seasonal estimate.
The `*_source` fields tell the UI which path was taken.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Dict, List, Optional

import pandas as pd

from .config import (
    DailyForecast,
    FinancialProjection,
    FinancialRates,
    Location,
    RainfallSample,
    RooftopSpec,
    RoofMaterial,
    RunConfig,
    YieldResult,
)
from .events import RainAlert, build_forecast, rain_alerts
from .finance import compute_financials
from .geo import ClimateZone, Geocoder, climate_zone, resolve_location
from .hydro import collection_rating, compute_yield
from .rainfall import RainRecency, estimate_rainfall, rain_recency

logger = logging.getLogger(__name__)


@dataclass
class Estimate:
    """Everything the dashboard, the report and the exporters need."""
    location: Location
    location_source: str
    climate_zone: ClimateZone
    rooftop: RooftopSpec
    rainfall: RainfallSample
    yield_result: YieldResult
    financials: FinancialProjection
    forecast: List[DailyForecast] = field(default_factory=list)
    forecast_source: str = "unavailable"
    alerts: List[RainAlert] = field(default_factory=list)
    recency: RainRecency = field(default_factory=lambda: RainRecency(None, None))
    # Raw "current" block of the live source (temperature_2m, precipitation, ...)
    current: Dict[str, object] = field(default_factory=dict)

    @property
    def rating(self) -> str:
        return collection_rating(self.yield_result.annual_collection_l)


def _locate(cfg: RunConfig, geocoder: Optional[Geocoder]):
    if cfg.latitude is not None and cfg.longitude is not None:
        name = cfg.city or f"Location ({cfg.latitude:.2f}, {cfg.longitude:.2f})"
        return Location(name, cfg.latitude, cfg.longitude), "coordinates"
    resolved = resolve_location(cfg.city, cfg.tables, geocoder=geocoder)
    return resolved.value, resolved.source


def run_estimate(
    cfg: RunConfig,
    source=None,
    geocoder: Optional[Geocoder] = None,
    today: Optional[date] = None,
) -> Estimate:
    """
    Run the whole pipeline once.

    Parameters
    ----------
    cfg : RunConfig
    source : object | None
        Weather source with `trailing_daily` and `forecast_daily`
        (e.g. OpenMeteoSource). Ignored when `cfg.use_live_weather` is False.
    geocoder : callable | None
        Optional `name -> Location` used for cities missing from the table.
    today : date | None
        Fixed "today" for reproducible fallback months and recency.
    """
    today = today or date.today()
    live = source if cfg.use_live_weather else None

    # 1) Location
    location, location_source = _locate(cfg, geocoder)
    zone = climate_zone(location.latitude)

    # 2) Rainfall (keep the trailing series around for recency)
    # Table hits use the table name, so "New Delhi" gets Delhi's seasonal pair
    rain_city = location.name if location_source == "table" else (cfg.city or location.name)
    recorder = _TrailingRecorder(live) if live is not None else None
    rainfall = estimate_rainfall(
        location=location,
        city=rain_city,
        source=recorder,
        today=today,
        tables=cfg.tables,
    )
    trailing = recorder.series if recorder is not None else None
    current = dict(recorder.current) if recorder is not None else {}

    # 3) + 4) Yield and money
    yld = compute_yield(rainfall, cfg.rooftop)
    fin = compute_financials(yld, cfg.setup_cost_override, cfg.rates)

    # 5) Forecast, replaced as a whole
    forecast: List[DailyForecast] = []
    forecast_source = "unavailable"
    if live is not None:
        try:
            forecast = build_forecast(live.forecast_daily(location.latitude, location.longitude, days=7))
            forecast_source = "live"
        except Exception as e:
            logger.warning("Forecast for %s unavailable: %s", location.name, e)

    alerts = rain_alerts(forecast, area_sqft=yld.effective_area_sqft)
    recency = rain_recency(trailing, forecast, today=today)

    logger.info(
        "Estimate for %s (%s): %.2f in/month (%s), %.0f L/month, ROI %.1f%%",
        location.name,
        location_source,
        rainfall.monthly_inches,
        rainfall.source,
        yld.monthly_collection_l,
        fin.roi_percent,
    )

    return Estimate(
        location=location,
        location_source=location_source,
        climate_zone=zone,
        rooftop=cfg.rooftop,
        rainfall=rainfall,
        yield_result=yld,
        financials=fin,
        forecast=forecast,
        forecast_source=forecast_source,
        alerts=alerts,
        recency=recency,
        current=current,
    )


class _TrailingRecorder:
    """Pass-through source that remembers the last trailing snapshot."""

    def __init__(self, source):
        self._source = source
        self.series = None
        self.current: Dict[str, object] = {}

    def trailing_daily(self, lat, lon, days=30):
        snap = self._source.trailing_daily(lat, lon, days=days)
        self.series = snap.precipitation_mm
        self.current = snap.current or {}
        return snap


def build_material_table(
    rainfall: RainfallSample,
    rooftop: RooftopSpec,
    setup_cost_override: Optional[float] = None,
    rates: Optional[FinancialRates] = None,
) -> pd.DataFrame:
    """
    Compare every roof material for the same rainfall and area.

    Pass the run's `rates` so payback and ROI match the main estimate.

    Returns
    -------
    pandas.DataFrame
        One row per material, best collection first. Columns:
        material, runoff_coefficient, monthly_collection_l,
        annual_collection_l, annual_savings, payback_period_years, roi_percent
    """
    rows = []
    for material in RoofMaterial:
        spec = RooftopSpec(
            area_sqft=rooftop.area_sqft,
            material=material,
            length_ft=rooftop.length_ft,
            width_ft=rooftop.width_ft,
            area_source=rooftop.area_source,
        )
        yld = compute_yield(rainfall, spec)
        fin = compute_financials(yld, setup_cost_override, rates)
        rows.append(
            {
                "material": material.value,
                "runoff_coefficient": yld.runoff_coefficient,
                "monthly_collection_l": yld.monthly_collection_l,
                "annual_collection_l": yld.annual_collection_l,
                "annual_savings": yld.annual_savings,
                "payback_period_years": fin.payback_period_years,
                "roi_percent": fin.roi_percent,
            }
        )

    return (
        pd.DataFrame(rows)
        .sort_values("monthly_collection_l", ascending=False, kind="stable")
        .reset_index(drop=True)
    )


def estimate_rows(est: Estimate) -> List[Dict[str, object]]:
    """
    Flat (section, field, value) rows for spreadsheet / API serializers.
    """
    rows: List[Dict[str, object]] = [
        {"section": "location", "field": "name", "value": est.location.name},
        {"section": "location", "field": "latitude", "value": est.location.latitude},
        {"section": "location", "field": "longitude", "value": est.location.longitude},
        {"section": "location", "field": "source", "value": est.location_source},
        {"section": "location", "field": "climate_zone", "value": est.climate_zone.value},
        {"section": "rooftop", "field": "area_sqft", "value": est.yield_result.effective_area_sqft},
        {"section": "rooftop", "field": "material", "value": est.rooftop.material.value},
        {"section": "rainfall", "field": "monthly_inches", "value": est.rainfall.monthly_inches},
        {"section": "rainfall", "field": "annual_inches", "value": est.rainfall.annual_inches},
        {"section": "rainfall", "field": "source", "value": est.rainfall.source},
        {"section": "weather", "field": "last_rain_days_ago", "value": est.recency.last_rain_days_ago},
        {"section": "weather", "field": "next_rain_in_days", "value": est.recency.next_rain_in_days},
    ]
    for name, value in sorted(est.current.items()):
        if name in ("time", "interval"):
            continue
        rows.append({"section": "weather", "field": f"current_{name}", "value": value})
    for name, value in asdict(est.yield_result).items():
        rows.append({"section": "yield", "field": name, "value": value})
    for name, value in asdict(est.financials).items():
        rows.append({"section": "financials", "field": name, "value": value})
    for f in est.forecast:
        rows.append(
            {
                "section": "forecast",
                "field": f.date.isoformat(),
                "value": f"{f.precipitation_mm:.1f} mm {f.rain_type}" + (" (collectable)" if f.collectable else ""),
            }
        )
    return rows
