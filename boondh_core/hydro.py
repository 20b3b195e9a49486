"""
boondh_core.hydro
-----------------
Rooftop collection (yield) for Boondh.

Audience
--------
Anyone who can read Python. We keep the formulas explicit:
- rainfall in inches per month
- rooftop area in sq ft
- collected volume in litres

What's here
-----------
1) runoff_coefficient: share of rain a roof surface actually sheds
2) compute_yield:
       monthly_L  = rain_in * area_sqft * C * 0.623
       annual_L   = monthly_L * 12
       savings    = litres * 0.12 (currency per litre)
3) Dashboard helpers: a 12-month seasonal profile, a household usage split
   and a simple rating of the annual collection.
"""

from __future__ import annotations

import calendar
from typing import Dict

import pandas as pd

from .config import (
    COST_PER_LITER,
    LITRES_PER_INCH_SQFT,
    MONSOON_MONTHS,
    RainfallSample,
    RooftopSpec,
    RoofMaterial,
    YieldResult,
)

RUNOFF_COEFFICIENTS: Dict[RoofMaterial, float] = {
    RoofMaterial.METAL: 0.95,
    RoofMaterial.CONCRETE: 0.90,
    RoofMaterial.TILE: 0.80,
    RoofMaterial.ASBESTOS: 0.85,
    RoofMaterial.THATCHED: 0.60,
    RoofMaterial.OTHER: 0.85,
}

# Share of the monthly collection per use, and litres per "unit" of that use.
USAGE_SHARES = {
    "drinking": (0.10, 2.0, "bottles"),
    "bathing": (0.40, 150.0, "baths"),
    "laundry": (0.30, 50.0, "loads"),
    "gardening": (0.20, 10.0, "plants"),
}

MONSOON_MULTIPLIER = 1.5
DRY_MULTIPLIER = 0.7


def runoff_coefficient(material) -> float:
    """
    Runoff coefficient (0..1) for a roof material.

    Accepts a RoofMaterial or free text; unknown materials use 0.85.
    """
    return RUNOFF_COEFFICIENTS[RoofMaterial.parse(material)]


def compute_yield(rainfall: RainfallSample, rooftop: RooftopSpec) -> YieldResult:
    """
    Monthly and annual collection (L) and the money it saves.

    Parameters
    ----------
    rainfall : RainfallSample
        Monthly rainfall in inches. Negative values are floored at 0.
    rooftop : RooftopSpec
        Area and material. A missing or non-positive area uses 1000 sq ft
        (see `RooftopSpec.effective_area_sqft`).

    Returns
    -------
    YieldResult

    Formula
    -------
    monthly_L = rain_in * area_sqft * C * 0.623
    annual_L  = monthly_L * 12
    monthly_savings = monthly_L * 0.12
    annual_savings  = monthly_L * 12 * 0.12
    """
    rain_in = max(0.0, float(rainfall.monthly_inches))
    area = rooftop.effective_area_sqft
    c = runoff_coefficient(rooftop.material)

    monthly_l = rain_in * area * c * LITRES_PER_INCH_SQFT
    annual_l = monthly_l * 12

    return YieldResult(
        monthly_collection_l=monthly_l,
        annual_collection_l=annual_l,
        monthly_savings=monthly_l * COST_PER_LITER,
        annual_savings=monthly_l * 12 * COST_PER_LITER,
        runoff_coefficient=c,
        effective_area_sqft=area,
    )


def monthly_profile(result: YieldResult) -> pd.DataFrame:
    """
    Spread the monthly collection over a year with a monsoon bump.

    Months 5..8 (June-September, 0-based) get x1.5, the rest x0.7. Litres are
    rounded to whole numbers for display.

    Returns
    -------
    pandas.DataFrame
        Columns: month_index, month, multiplier, liters.
    """
    rows = []
    for i in range(12):
        mult = MONSOON_MULTIPLIER if i in MONSOON_MONTHS else DRY_MULTIPLIER
        rows.append(
            {
                "month_index": i,
                "month": calendar.month_abbr[i + 1],
                "multiplier": mult,
                "liters": round(result.monthly_collection_l * mult),
            }
        )
    return pd.DataFrame(rows)


def usage_breakdown(monthly_l: float) -> Dict[str, Dict[str, float]]:
    """
    Split a monthly collection into household uses.

    Returns
    -------
    dict
        use -> {"liters": L, "units": count, "unit": label}
    """
    monthly_l = max(0.0, float(monthly_l))
    out = {}
    for use, (share, per_unit, label) in USAGE_SHARES.items():
        liters = monthly_l * share
        out[use] = {"liters": round(liters), "units": round(liters / per_unit), "unit": label}
    return out


def collection_rating(annual_l: float) -> str:
    """'super' above 10,000 L/year, 'good' above 5,000 L, else 'okay'."""
    if annual_l > 10000:
        return "super"
    if annual_l > 5000:
        return "good"
    return "okay"
