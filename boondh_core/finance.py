"""
boondh_core.finance
-------------------
Setup cost, incentives, running costs, payback and ROI.

Formulas (rates from `FinancialRates`)
--------------------------------------
setup              = override or area_sqft * 2.5
incentives         = setup * 0.40
subsidy            = setup * 0.20
tax benefits       = setup * 0.10
maintenance / yr   = setup * 0.025
filter / yr        = 2000
inspection         = 1500 (every two years, so half per year)
upgrade options    = setup * 0.30 / 0.40 / 0.15

net setup          = setup - incentives - subsidy - tax benefits
net annual savings = annual savings - maintenance - filter - inspection / 2
payback (years)    = max(net setup, 0) / max(net annual savings, 1)
ROI (%)            = net annual savings / max(net setup, 1) * 100

Payback and ROI always use the *net* figures. The floors keep both numbers
finite when savings are tiny or incentives cover the whole setup cost.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import pandas as pd

from .config import FinancialProjection, FinancialRates, YieldResult

logger = logging.getLogger(__name__)

MIN_PAYBACK_DENOMINATOR = 1.0
MIN_ROI_DENOMINATOR = 1.0


def setup_cost(area_sqft: float, override: Optional[float] = None, rates: Optional[FinancialRates] = None) -> float:
    """
    Installation cost: the quoted override if it is a positive number, else
    area x 2.5.
    """
    rates = rates or FinancialRates()
    if override is not None:
        try:
            quoted = float(override)
        except (TypeError, ValueError):
            quoted = float("nan")
        if math.isfinite(quoted) and quoted > 0.0:
            return quoted
        logger.warning("Ignoring invalid setup cost override %r", override)
    return max(0.0, float(area_sqft)) * rates.setup_cost_per_sqft


def compute_financials(
    result: YieldResult,
    setup_cost_override: Optional[float] = None,
    rates: Optional[FinancialRates] = None,
) -> FinancialProjection:
    """
    Financial projection for one yield result.

    Parameters
    ----------
    result : YieldResult
        Supplies annual savings and the effective rooftop area.
    setup_cost_override : float | None
        Quoted installation cost; non-positive values are ignored.
    rates : FinancialRates | None

    Returns
    -------
    FinancialProjection
    """
    rates = rates or FinancialRates()
    setup = setup_cost(result.effective_area_sqft, setup_cost_override, rates)

    incentives = setup * rates.incentive_rate
    subsidy = setup * rates.subsidy_rate
    tax = setup * rates.tax_benefit_rate
    maintenance = setup * rates.maintenance_rate
    filters = rates.filter_replacement_cost
    inspection = rates.system_inspection_cost

    net_setup = setup - incentives - subsidy - tax
    net_savings = result.annual_savings - maintenance - filters - inspection / 2

    payback = max(net_setup, 0.0) / max(net_savings, MIN_PAYBACK_DENOMINATOR)
    roi = net_savings / max(net_setup, MIN_ROI_DENOMINATOR) * 100

    return FinancialProjection(
        setup_cost=setup,
        government_incentives=incentives,
        subsidy_amount=subsidy,
        tax_benefits=tax,
        annual_maintenance_cost=maintenance,
        filter_replacement_cost=filters,
        system_inspection_cost=inspection,
        upgradation_cost=setup * rates.upgradation_rate,
        capacity_expansion_cost=setup * rates.capacity_expansion_rate,
        efficiency_improvement_cost=setup * rates.efficiency_improvement_rate,
        net_setup_cost=net_setup,
        net_annual_savings=net_savings,
        payback_period_years=payback,
        roi_percent=roi,
    )


def cashflow_table(projection: FinancialProjection, years: int = 10) -> pd.DataFrame:
    """
    Year-by-year cumulative savings against the net setup cost.

    No discounting and no price escalation; each year repeats the same net
    annual savings.

    Returns
    -------
    pandas.DataFrame
        Columns: year, net_savings, cumulative_savings, balance, paid_back.
        balance = cumulative_savings - net_setup_cost.
    """
    n = max(1, int(years))
    rows = []
    cumulative = 0.0
    for year in range(1, n + 1):
        cumulative += projection.net_annual_savings
        balance = cumulative - projection.net_setup_cost
        rows.append(
            {
                "year": year,
                "net_savings": projection.net_annual_savings,
                "cumulative_savings": cumulative,
                "balance": balance,
                "paid_back": balance >= 0.0,
            }
        )
    return pd.DataFrame(rows)
