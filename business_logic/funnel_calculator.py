"""
Business plan funnel calculations.

Converts a project's PlanningData into the full set of annual targets:
units, walk-ins, leads, budgets, cost ratios and revenue.
"""

import logging
import math

import numpy as np

from models.data_models import CRORE, CalculatedMetrics, PlanningData, ViewMode

logger = logging.getLogger(__name__)


def ieee_divide(numerator: float, denominator: float) -> float:
    """
    Divide with IEEE-754 semantics: x/0 gives +/-inf and 0/0 gives NaN.

    Used only by the funnel derivation, where a zero conversion rate or ATS
    is left unguarded and surfaces as a non-finite target.
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.float64(numerator) / np.float64(denominator))


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning 0 when the denominator is zero or undefined."""
    if not denominator or math.isnan(denominator):
        return 0.0
    return numerator / denominator


def percent_of(value: float, percent: float) -> float:
    """Apply a whole-number percentage (12.5 means 12.5%) to a value."""
    return value * (percent / 100)


def round_half_up(value: float):
    """
    Round to the nearest whole number with halves going up (2.5 -> 3).

    Non-finite values (from a zero ATS or conversion rate) are returned
    unchanged so reports can still be built for such plans.
    """
    if value is None or not math.isfinite(value):
        return value
    return math.floor(value + 0.5)


def calculate_metrics(plan: PlanningData) -> CalculatedMetrics:
    """
    Derive the annual funnel targets from a business plan.

    Args:
        plan: Business plan inputs

    Returns:
        CalculatedMetrics with every intermediate value of the derivation
    """
    digital_bv = percent_of(plan.overall_bv, plan.digital_contribution_percent)
    presales_bv = percent_of(plan.overall_bv, plan.presales_contribution_percent)

    total_units = ieee_divide(plan.overall_bv, plan.ats)
    digital_units = ieee_divide(digital_bv, plan.ats)
    presales_units = ieee_divide(presales_bv, plan.ats)

    target_walkins = ieee_divide(digital_units, plan.wtb_percent / 100)
    target_leads = ieee_divide(target_walkins, plan.ltw_percent / 100)

    base_budget = target_leads * plan.cpl
    tax_amount = percent_of(base_budget, plan.tax_percent)
    all_in_budget = base_budget + tax_amount

    # CPW stays on the base budget in both view modes
    cpw = ieee_divide(base_budget, target_walkins)
    cpb = ieee_divide(base_budget, digital_units)
    revenue = plan.overall_bv * CRORE
    target_com = ieee_divide(all_in_budget, digital_bv * CRORE) * 100

    if not math.isfinite(target_leads):
        logger.warning(
            f"Non-finite target leads (ats={plan.ats}, ltw={plan.ltw_percent}%, wtb={plan.wtb_percent}%)"
        )

    return CalculatedMetrics(
        total_units=total_units,
        digital_units=digital_units,
        presales_units=presales_units,
        digital_bv=digital_bv,
        presales_bv=presales_bv,
        target_walkins=target_walkins,
        target_leads=target_leads,
        base_budget=base_budget,
        tax_amount=tax_amount,
        all_in_budget=all_in_budget,
        cpw=cpw,
        cpb=cpb,
        revenue=revenue,
        target_com=target_com
    )


def tax_multiplier(plan: PlanningData, view_mode: ViewMode) -> float:
    """1.0 in brand view, 1 + tax% in agency view."""
    if view_mode == ViewMode.AGENCY:
        return 1 + plan.tax_percent / 100
    return 1.0


def plan_budget(metrics: CalculatedMetrics, view_mode: ViewMode) -> float:
    """Planned media budget as presented in the given view mode."""
    return metrics.all_in_budget if view_mode == ViewMode.AGENCY else metrics.base_budget

