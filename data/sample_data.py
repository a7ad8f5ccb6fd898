"""
Sample portfolio loaded on first start.
"""

from dataclasses import replace
from datetime import date
from typing import Optional

from models.data_models import CAMPAIGN_WEEKS, Poc, Project, ProjectStatus, WeeklyActuals
from business_logic.media_mix import default_media_plan
from business_logic.project_controller import AppState, default_plan
from business_logic.weekly_distribution import generate_weeks

DEFAULT_CAMPAIGN_START = date(2025, 10, 1)

DEFAULT_POCS = (
    Poc(id='1', name='Amey'),
    Poc(id='2', name='Rohan'),
    Poc(id='3', name='Pratham'),
)


def seed_portfolio(campaign_start: Optional[date] = None, week_count: int = CAMPAIGN_WEEKS) -> AppState:
    """
    Build the two sample projects and the default POC list.

    Args:
        campaign_start: First day of week 1 for both projects
        week_count: Campaign length in weeks

    Returns:
        AppState ready to hand to a ProjectController
    """
    campaign_start = campaign_start or DEFAULT_CAMPAIGN_START

    horizon = Project(
        id='1',
        name='Godrej Horizon',
        location='Wadala, Mumbai',
        poc='Amey',
        status=ProjectStatus.ACTIVE,
        plan=replace(default_plan(), overall_bv=350, received_budget=2936003),
        weeks=generate_weeks(campaign_start, week_count),
        other_spends=50000,
        media_plan=default_media_plan(),
        actuals={
            0: WeeklyActuals(week_id=0, leads=38, ap=3, ad=2, spends=137143, bookings=0, presales_bookings=0),
            1: WeeklyActuals(week_id=1, leads=76, ap=8, ad=4, spends=274286, bookings=1, presales_bookings=0),
            2: WeeklyActuals(week_id=2, leads=115, ap=12, ad=6, spends=400000, bookings=1, presales_bookings=1),
        },
        is_locked=True
    )

    reserve = Project(
        id='2',
        name='Godrej Reserve',
        location='Kandivali, Mumbai',
        poc='Rohan',
        status=ProjectStatus.PLANNING,
        plan=replace(default_plan(), overall_bv=500),
        weeks=generate_weeks(campaign_start, week_count),
        media_plan=default_media_plan()
    )

    return AppState(projects=(horizon, reserve), pocs=DEFAULT_POCS)
