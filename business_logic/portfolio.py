"""
Portfolio-level reporting across projects.

Provides the POC filter used by the dashboard, the per-project master
report and the aggregated analytics (totals plus weekly spend trend) over
every project that is not completed.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

from models.data_models import Project, ProjectStatus, ReportingWindow, ViewMode
from .funnel_calculator import calculate_metrics, safe_divide, tax_multiplier
from .reconciliation import (
    DELIVERY_GOOD_THRESHOLD, DELIVERY_WARNING_THRESHOLD, PeriodReconciliation, actual_value, reconcile_period
)
from .weekly_distribution import project_weeks

logger = logging.getLogger(__name__)

ALL_POCS = "All"
ALL_PROJECTS = "all"


@dataclass(frozen=True)
class MasterReportRow:
    """Dashboard overview line for one project."""
    project_id: str
    project_name: str
    poc: str
    location: str
    status: ProjectStatus
    is_locked: bool
    reconciliation: PeriodReconciliation


@dataclass(frozen=True)
class TrendPoint:
    """Aggregated figures for one campaign week across projects."""
    week_id: int
    week_label: str
    planned_spend: float
    actual_spend: float
    actual_leads: float
    actual_walkins: float
    actual_bookings: float

    @property
    def calculated_cpl(self) -> float:
        return safe_divide(self.actual_spend, self.actual_leads)


@dataclass(frozen=True)
class PortfolioAnalytics:
    """Totals and weekly trend of the projects in scope."""
    project_count: int
    total_planned_budget: float
    total_actual_spend: float
    total_target_leads: float
    total_actual_leads: float
    total_target_walkins: float
    total_actual_walkins: float
    total_actual_bookings: float
    trend: List[TrendPoint]

    @property
    def spend_progress_percent(self) -> float:
        return safe_divide(self.total_actual_spend, self.total_planned_budget) * 100

    @property
    def calculated_cpl(self) -> float:
        return safe_divide(self.total_actual_spend, self.total_actual_leads)

    @property
    def leads_delivery_percent(self) -> float:
        return safe_divide(self.total_actual_leads, self.total_target_leads) * 100

    @property
    def walkins_delivery_percent(self) -> float:
        return safe_divide(self.total_actual_walkins, self.total_target_walkins) * 100


def filter_by_poc(projects: Sequence[Project], poc: str) -> List[Project]:
    """Projects owned by a POC; "All" keeps every project."""
    if poc == ALL_POCS:
        return list(projects)
    return [p for p in projects if p.poc == poc]


def master_report(projects: Sequence[Project],
                  window: ReportingWindow,
                  view_mode: ViewMode,
                  thresholds=(DELIVERY_GOOD_THRESHOLD, DELIVERY_WARNING_THRESHOLD)) -> List[MasterReportRow]:
    """
    Reconcile every project over the same reporting window.

    Args:
        projects: Projects to report on, in display order
        window: Reporting window shared by all rows
        view_mode: Spend presentation
        thresholds: (good, warning) delivery thresholds

    Returns:
        List of MasterReportRow
    """
    rows = []
    for project in projects:
        metrics = calculate_metrics(project.plan)
        weeks = project_weeks(project, metrics)

        rows.append(MasterReportRow(
            project_id=project.id,
            project_name=project.name,
            poc=project.poc,
            location=project.location,
            status=project.status,
            is_locked=project.is_locked,
            reconciliation=reconcile_period(project, weeks, window, view_mode, metrics, thresholds)
        ))

    logger.info(f"Master report built for {len(rows)} projects")
    return rows


def portfolio_analytics(projects: Sequence[Project],
                        view_mode: ViewMode,
                        project_id: str = ALL_PROJECTS) -> PortfolioAnalytics:
    """
    Aggregate plan and actuals across the active portfolio.

    Completed projects are excluded. Passing a project id narrows the scope
    to that project. Trend weeks with neither planned nor actual spend are
    dropped.
    """
    eligible = [p for p in projects if p.status != ProjectStatus.COMPLETED]
    if project_id != ALL_PROJECTS:
        eligible = [p for p in eligible if p.id == project_id]

    totals = {
        'planned': 0.0, 'actual_spend': 0.0, 'target_leads': 0.0, 'actual_leads': 0.0,
        'target_walkins': 0.0, 'actual_walkins': 0.0, 'actual_bookings': 0.0
    }
    trend = {}

    for project in eligible:
        tax_mult = tax_multiplier(project.plan, view_mode)

        for week in project_weeks(project):
            planned = week.spends_all_in if view_mode == ViewMode.AGENCY else week.spends_base
            spend = actual_value(project.actuals, week.id, 'spends') * tax_mult
            leads = actual_value(project.actuals, week.id, 'leads')
            walkins = actual_value(project.actuals, week.id, 'ad')
            bookings = actual_value(project.actuals, week.id, 'bookings')

            totals['planned'] += planned
            totals['actual_spend'] += spend
            totals['target_leads'] += week.leads
            totals['actual_leads'] += leads
            totals['target_walkins'] += week.ad
            totals['actual_walkins'] += walkins
            totals['actual_bookings'] += bookings

            point = trend.setdefault(week.id, {
                'label': week.week_label, 'planned': 0.0, 'spend': 0.0,
                'leads': 0.0, 'walkins': 0.0, 'bookings': 0.0
            })
            point['planned'] += planned
            point['spend'] += spend
            point['leads'] += leads
            point['walkins'] += walkins
            point['bookings'] += bookings

    points = [
        TrendPoint(
            week_id=week_id,
            week_label=p['label'],
            planned_spend=p['planned'],
            actual_spend=p['spend'],
            actual_leads=p['leads'],
            actual_walkins=p['walkins'],
            actual_bookings=p['bookings']
        )
        for week_id, p in sorted(trend.items())
        if p['planned'] > 0 or p['spend'] > 0
    ]

    return PortfolioAnalytics(
        project_count=len(eligible),
        total_planned_budget=totals['planned'],
        total_actual_spend=totals['actual_spend'],
        total_target_leads=totals['target_leads'],
        total_actual_leads=totals['actual_leads'],
        total_target_walkins=totals['target_walkins'],
        total_actual_walkins=totals['actual_walkins'],
        total_actual_bookings=totals['actual_bookings'],
        trend=points
    )
