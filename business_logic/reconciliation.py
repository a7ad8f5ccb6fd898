"""
Reconciliation of recorded actuals against the weekly plan.

This module compares reported weekly actuals with the distributed targets
over a reporting window, derives achieved cost and conversion metrics,
classifies delivery, and reconciles consumed spend against the received
budget.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from models.data_models import (
    CalculatedMetrics, DeliveryStatus, Project, ReportingWindow, ViewMode, WeeklyActuals, WeeklyData
)
from .funnel_calculator import calculate_metrics, percent_of, safe_divide, tax_multiplier
from .weekly_distribution import weeks_in_window

logger = logging.getLogger(__name__)

DELIVERY_GOOD_THRESHOLD = 90.0
DELIVERY_WARNING_THRESHOLD = 70.0

ACTUAL_FIELDS = ('leads', 'ap', 'ad', 'spends', 'bookings', 'presales_bookings')


@dataclass(frozen=True)
class DeliveryMetric:
    """Target, achieved and delivery percentage for one funnel metric."""
    target: float
    achieved: float
    delivery_percent: float
    status: DeliveryStatus


@dataclass(frozen=True)
class RatioCheck:
    """An achieved conversion ratio compared with the planned one."""
    target_percent: float
    achieved_percent: float
    status: DeliveryStatus


@dataclass(frozen=True)
class BudgetReconciliation:
    """Consumed spend against the received work-order amount."""
    planned_all_in: float
    received_budget: float
    performance_spend: float
    other_spends: float
    total_spend: float
    pending: float
    # Received budget left after the planned all-in spend and other spends
    buffer: float

    @property
    def over_budget(self) -> bool:
        return self.pending < 0


@dataclass(frozen=True)
class PeriodReconciliation:
    """Plan versus actuals for one project over a reporting window."""
    window: ReportingWindow
    tax_multiplier: float
    leads: DeliveryMetric
    ap: DeliveryMetric
    ad: DeliveryMetric
    period_spend: float
    target_cpl: float
    achieved_cpl: float
    target_cpw: float
    achieved_cpw: float
    achieved_cpb: float
    l2w: RatioCheck
    wtb: RatioCheck
    digital_bookings: float
    presales_bookings: float
    total_units_achieved: float
    total_units_target: float
    units_delivery_percent: float
    digital_bv_achieved: float
    presales_bv_achieved: float
    budget: BudgetReconciliation


@dataclass(frozen=True)
class WeekPerformance:
    """One week of the performance tracker."""
    week_id: int
    week_label: str
    date_range: str
    target_leads: float
    target_ap: float
    target_ad: float
    target_spends: float
    planned_bookings: float
    actual_leads: Optional[float]
    actual_ap: Optional[float]
    actual_ad: Optional[float]
    actual_spends: Optional[float]
    actual_bookings: Optional[float]
    actual_presales_bookings: Optional[float]
    cumulative_leads: float
    cumulative_ap: float
    cumulative_ad: float
    cumulative_spends: float
    cpl: float
    cpw: float
    cpb: float
    l2w_percent: float
    wtb_percent: float

    @property
    def reported(self) -> bool:
        return any(value is not None for value in (
            self.actual_leads, self.actual_ap, self.actual_ad, self.actual_spends,
            self.actual_bookings, self.actual_presales_bookings
        ))


@dataclass(frozen=True)
class WeeklyPerformanceReport:
    """Per-week performance rows plus whole-campaign totals."""
    rows: List[WeekPerformance]
    totals: Dict[str, float]


def classify_delivery(percent: float,
                      good_threshold: float = DELIVERY_GOOD_THRESHOLD,
                      warning_threshold: float = DELIVERY_WARNING_THRESHOLD) -> DeliveryStatus:
    """
    Classify a delivery percentage into the three-tier status.

    Args:
        percent: Delivery percentage (100 means on target)
        good_threshold: Minimum percentage for GOOD
        warning_threshold: Minimum percentage for WARNING

    Returns:
        DeliveryStatus
    """
    if percent >= good_threshold:
        return DeliveryStatus.GOOD
    if percent >= warning_threshold:
        return DeliveryStatus.WARNING
    return DeliveryStatus.CRITICAL


def delivery_percent(achieved: float, target: float) -> float:
    """achieved/target as a percentage, 0 when there is no target."""
    return safe_divide(achieved, target) * 100


def actual_value(actuals: Dict[int, WeeklyActuals], week_id: int, field: str) -> float:
    """A reported value, with unreported weeks and metrics counting as 0."""
    record = actuals.get(week_id)
    if record is None:
        return 0.0
    return getattr(record, field) or 0.0


def sum_actuals(actuals: Dict[int, WeeklyActuals],
                weeks: Sequence[WeeklyData],
                field: str) -> float:
    """Sum one actuals field over the given weeks."""
    return sum(actual_value(actuals, w.id, field) for w in weeks)


def _delivery_metric(target: float, achieved: float, thresholds) -> DeliveryMetric:
    percent = delivery_percent(achieved, target)
    return DeliveryMetric(
        target=target,
        achieved=achieved,
        delivery_percent=percent,
        status=classify_delivery(percent, *thresholds)
    )


def _ratio_check(achieved_percent: float, target_percent: float, thresholds) -> RatioCheck:
    return RatioCheck(
        target_percent=target_percent,
        achieved_percent=achieved_percent,
        status=classify_delivery(delivery_percent(achieved_percent, target_percent), *thresholds)
    )


def reconcile_budget(project: Project,
                     weeks: Sequence[WeeklyData],
                     performance_spend: float) -> BudgetReconciliation:
    """
    Reconcile consumed spend with the received budget.

    Args:
        project: Project carrying received budget and other spends
        weeks: Distributed weeks (for the planned all-in budget)
        performance_spend: Actual media spend already in display terms

    Returns:
        BudgetReconciliation; negative pending marks an over-budget project
    """
    total_spend = performance_spend + project.other_spends
    pending = project.plan.received_budget - total_spend

    if pending < 0:
        logger.warning(f"Project '{project.name}' is over budget by {-pending:,.2f}")

    planned_all_in = sum(w.spends_all_in for w in weeks)

    return BudgetReconciliation(
        planned_all_in=planned_all_in,
        received_budget=project.plan.received_budget,
        performance_spend=performance_spend,
        other_spends=project.other_spends,
        total_spend=total_spend,
        pending=pending,
        buffer=project.plan.received_budget - (planned_all_in + project.other_spends)
    )


def reconcile_period(project: Project,
                     weeks: Sequence[WeeklyData],
                     window: ReportingWindow,
                     view_mode: ViewMode,
                     metrics: Optional[CalculatedMetrics] = None,
                     thresholds=(DELIVERY_GOOD_THRESHOLD, DELIVERY_WARNING_THRESHOLD)) -> PeriodReconciliation:
    """
    Compare actuals with targets for a project over a reporting window.

    Args:
        project: Project with plan, actuals and budget fields
        weeks: Distributed weeks of the project
        window: Inclusive week window to report on
        view_mode: Brand (base) or agency (all-in) spend presentation
        metrics: Precomputed metrics; derived from the plan when omitted
        thresholds: (good, warning) delivery thresholds

    Returns:
        PeriodReconciliation with delivery, cost, ratio and budget figures
    """
    if metrics is None:
        metrics = calculate_metrics(project.plan)

    plan = project.plan
    tax_mult = tax_multiplier(plan, view_mode)
    period_weeks = weeks_in_window(weeks, window)
    actuals = project.actuals

    achieved_leads = sum_actuals(actuals, period_weeks, 'leads')
    achieved_ap = sum_actuals(actuals, period_weeks, 'ap')
    achieved_ad = sum_actuals(actuals, period_weeks, 'ad')
    digital_bookings = sum_actuals(actuals, period_weeks, 'bookings')
    presales_bookings = sum_actuals(actuals, period_weeks, 'presales_bookings')
    period_spend = sum_actuals(actuals, period_weeks, 'spends') * tax_mult

    total_units_achieved = digital_bookings + presales_bookings
    achieved_l2w = safe_divide(achieved_ad, achieved_leads) * 100
    achieved_wtb = safe_divide(digital_bookings, achieved_ad) * 100

    return PeriodReconciliation(
        window=window,
        tax_multiplier=tax_mult,
        leads=_delivery_metric(sum(w.leads for w in period_weeks), achieved_leads, thresholds),
        ap=_delivery_metric(sum(w.ap for w in period_weeks), achieved_ap, thresholds),
        ad=_delivery_metric(sum(w.ad for w in period_weeks), achieved_ad, thresholds),
        period_spend=period_spend,
        target_cpl=plan.cpl,
        achieved_cpl=safe_divide(period_spend, achieved_leads),
        target_cpw=metrics.cpw,
        achieved_cpw=safe_divide(period_spend, achieved_ad),
        achieved_cpb=safe_divide(period_spend, total_units_achieved),
        l2w=_ratio_check(achieved_l2w, plan.ltw_percent, thresholds),
        wtb=_ratio_check(achieved_wtb, plan.wtb_percent, thresholds),
        digital_bookings=digital_bookings,
        presales_bookings=presales_bookings,
        total_units_achieved=total_units_achieved,
        total_units_target=metrics.total_units,
        units_delivery_percent=delivery_percent(total_units_achieved, metrics.total_units),
        digital_bv_achieved=digital_bookings * plan.ats,
        presales_bv_achieved=presales_bookings * plan.ats,
        budget=reconcile_budget(project, weeks, period_spend)
    )


def weekly_performance(project: Project,
                       weeks: Sequence[WeeklyData],
                       view_mode: ViewMode) -> WeeklyPerformanceReport:
    """
    Build the week-by-week performance tracker for a project.

    Reported values stay None where a week or metric was never entered, so
    the presentation layer can tell "not reported" from a reported zero.
    Derived ratios treat missing values as 0 and guard every division.
    """
    plan = project.plan
    tax_mult = tax_multiplier(plan, view_mode)
    cumulative = {field: 0.0 for field in ACTUAL_FIELDS}
    rows = []

    for week in weeks:
        record = project.actuals.get(week.id)

        def reported(field):
            return getattr(record, field) if record is not None else None

        leads = actual_value(project.actuals, week.id, 'leads')
        ad = actual_value(project.actuals, week.id, 'ad')
        bookings = actual_value(project.actuals, week.id, 'bookings')
        presales = actual_value(project.actuals, week.id, 'presales_bookings')
        spends = actual_value(project.actuals, week.id, 'spends') * tax_mult

        for field in ACTUAL_FIELDS:
            value = actual_value(project.actuals, week.id, field)
            cumulative[field] += value * tax_mult if field == 'spends' else value

        raw_spends = reported('spends')
        rows.append(WeekPerformance(
            week_id=week.id,
            week_label=week.week_label,
            date_range=week.date_range,
            target_leads=week.leads,
            target_ap=week.ap,
            target_ad=week.ad,
            target_spends=week.spends_all_in if view_mode == ViewMode.AGENCY else week.spends_base,
            planned_bookings=percent_of(week.ad, plan.wtb_percent),
            actual_leads=reported('leads'),
            actual_ap=reported('ap'),
            actual_ad=reported('ad'),
            actual_spends=raw_spends * tax_mult if raw_spends is not None else None,
            actual_bookings=reported('bookings'),
            actual_presales_bookings=reported('presales_bookings'),
            cumulative_leads=cumulative['leads'],
            cumulative_ap=cumulative['ap'],
            cumulative_ad=cumulative['ad'],
            cumulative_spends=cumulative['spends'],
            cpl=safe_divide(spends, leads),
            cpw=safe_divide(spends, ad),
            cpb=safe_divide(spends, bookings + presales),
            l2w_percent=safe_divide(ad, leads) * 100,
            wtb_percent=safe_divide(bookings, ad) * 100
        ))

    totals = dict(cumulative)
    totals['cpl'] = safe_divide(totals['spends'], totals['leads'])
    totals['cpw'] = safe_divide(totals['spends'], totals['ad'])
    totals['cpb'] = safe_divide(totals['spends'], totals['bookings'] + totals['presales_bookings'])
    totals['l2w_percent'] = safe_divide(totals['ad'], totals['leads']) * 100
    totals['wtb_percent'] = safe_divide(totals['bookings'], totals['ad']) * 100

    return WeeklyPerformanceReport(rows=rows, totals=totals)
