"""
Week-on-week distribution of the annual plan across the campaign calendar.

This module spreads the funnel targets over the 13 campaign weeks using the
editable spend, lead and AD-conversion curves, and maps calendar dates onto
week indices for period reporting.
"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import List, Optional, Sequence

from models.data_models import CAMPAIGN_WEEKS, CalculatedMetrics, Project, ReportingWindow, WeeklyData
from .funnel_calculator import calculate_metrics, percent_of

logger = logging.getLogger(__name__)

# Appointments proposed per appointment done
AP_PER_AD = 2

DEFAULT_SPEND_DISTRIBUTION = [0, 0, 7, 8, 11, 11, 13, 13, 13, 13, 11, 0, 0]
DEFAULT_LEAD_DISTRIBUTION = [0, 0, 7, 8, 11, 11, 13, 13, 13, 13, 11, 0, 0]
DEFAULT_AD_CONVERSION = [0, 0, 3, 3, 2.5, 2.5, 2.5, 2.7, 2.7, 2.7, 3.2, 3, 0]
FALLBACK_AD_CONVERSION = 2.5


@dataclass(frozen=True)
class DistributionTotals:
    """Column totals of a distributed week sequence."""
    leads: float
    ap: float
    ad: float
    spends_base: float
    spends_all_in: float
    spend_distribution: float
    lead_distribution: float
    average_ad_conversion: float

    @property
    def spend_distribution_complete(self) -> bool:
        return math.isclose(self.spend_distribution, 100.0, abs_tol=1e-9)

    @property
    def lead_distribution_complete(self) -> bool:
        return math.isclose(self.lead_distribution, 100.0, abs_tol=1e-9)


def _format_date_range(start: date, end: date) -> str:
    return f"{start.day} {start.strftime('%b')} - {end.day} {end.strftime('%b')}"


def generate_weeks(campaign_start: date, week_count: int = CAMPAIGN_WEEKS) -> List[WeeklyData]:
    """
    Build the default campaign calendar with the standard distribution curves.

    Args:
        campaign_start: First day of week 1
        week_count: Number of weeks in the campaign

    Returns:
        List of WeeklyData with labels, date ranges and default percentages
    """
    weeks = []

    for i in range(week_count):
        start = campaign_start + timedelta(days=i * 7)
        end = start + timedelta(days=6)

        spend = DEFAULT_SPEND_DISTRIBUTION[i] if i < len(DEFAULT_SPEND_DISTRIBUTION) else 0
        lead = DEFAULT_LEAD_DISTRIBUTION[i] if i < len(DEFAULT_LEAD_DISTRIBUTION) else 0
        # A zero default conversion falls back like any missing value
        conversion = DEFAULT_AD_CONVERSION[i] if i < len(DEFAULT_AD_CONVERSION) else 0
        conversion = conversion or FALLBACK_AD_CONVERSION

        weeks.append(WeeklyData(
            id=i,
            week_label=f"Week {i + 1}",
            date_range=_format_date_range(start, end),
            spend_distribution=spend,
            lead_distribution=lead,
            ad_conversion=conversion
        ))

    return weeks


def distribute_weeks(weeks: Sequence[WeeklyData], metrics: CalculatedMetrics) -> List[WeeklyData]:
    """
    Populate per-week and cumulative targets from the annual metrics.

    A single left-to-right pass; input records are not modified.

    Args:
        weeks: Week sequence in index order (only its percentage inputs are read)
        metrics: Annual targets of the project

    Returns:
        New list of WeeklyData with derived fields filled in
    """
    cum_leads = 0.0
    cum_ap = 0.0
    cum_ad = 0.0

    distributed = []
    for week in weeks:
        leads = percent_of(metrics.target_leads, week.lead_distribution)
        cum_leads += leads

        ad = percent_of(leads, week.ad_conversion)
        ap = ad * AP_PER_AD
        cum_ap += ap
        cum_ad += ad

        distributed.append(replace(
            week,
            leads=leads,
            cumulative_leads=cum_leads,
            ap=ap,
            cumulative_ap=cum_ap,
            ad=ad,
            cumulative_ad=cum_ad,
            spends_base=percent_of(metrics.base_budget, week.spend_distribution),
            spends_all_in=percent_of(metrics.all_in_budget, week.spend_distribution)
        ))

    return distributed


def distribution_totals(weeks: Sequence[WeeklyData]) -> DistributionTotals:
    """Sum the derived columns and the distribution inputs of a week sequence."""
    count = len(weeks)
    return DistributionTotals(
        leads=sum(w.leads for w in weeks),
        ap=sum(w.ap for w in weeks),
        ad=sum(w.ad for w in weeks),
        spends_base=sum(w.spends_base for w in weeks),
        spends_all_in=sum(w.spends_all_in for w in weeks),
        spend_distribution=sum(w.spend_distribution for w in weeks),
        lead_distribution=sum(w.lead_distribution for w in weeks),
        average_ad_conversion=sum(w.ad_conversion for w in weeks) / count if count else 0.0
    )


def week_index_for_date(target: date, campaign_start: date, week_count: int = CAMPAIGN_WEEKS) -> int:
    """
    Map a calendar date to a campaign week index.

    Returns -1 for dates before the campaign start and caps at the last week.
    """
    if target < campaign_start:
        return -1

    days = (target - campaign_start).days
    return min(days // 7, week_count - 1)


def resolve_reporting_window(start_date: date,
                             end_date: date,
                             campaign_start: date,
                             week_count: int = CAMPAIGN_WEEKS) -> ReportingWindow:
    """
    Resolve a calendar date range into an inclusive week window.

    A start before the campaign clamps to week 0. An end before the campaign,
    or a start after the end, yields an empty window.
    """
    start_index = week_index_for_date(start_date, campaign_start, week_count)
    end_index = week_index_for_date(end_date, campaign_start, week_count)

    if end_index < 0 or start_index > end_index:
        logger.info(f"Reporting window {start_date} to {end_date} covers no campaign weeks")
        return ReportingWindow(start_week=0, end_week=0, empty=True)

    return ReportingWindow(start_week=max(0, start_index), end_week=end_index)


def weeks_in_window(weeks: Sequence[WeeklyData], window: Optional[ReportingWindow]) -> List[WeeklyData]:
    """Weeks inside the window; the whole campaign when no window is given."""
    if window is None:
        return list(weeks)
    return [w for w in weeks if window.contains(w.id)]


def project_weeks(project: Project, metrics: Optional[CalculatedMetrics] = None) -> List[WeeklyData]:
    """Distribute a project's plan over its own week sequence."""
    if metrics is None:
        metrics = calculate_metrics(project.plan)
    return distribute_weeks(project.weeks, metrics)
