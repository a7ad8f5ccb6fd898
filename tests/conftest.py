"""
Shared fixtures for the campaign planner tests.
"""

from datetime import date

import pytest

from business_logic.project_controller import default_plan
from data.sample_data import seed_portfolio

CAMPAIGN_START = date(2025, 10, 1)


@pytest.fixture
def campaign_start():
    return CAMPAIGN_START


@pytest.fixture
def plan():
    """Default business plan (350 Cr BV, 7 Cr ATS)."""
    return default_plan()


@pytest.fixture
def seed_state():
    return seed_portfolio(CAMPAIGN_START)


@pytest.fixture
def horizon(seed_state):
    """Active, locked sample project with three weeks of actuals."""
    return seed_state.get_project('1')


@pytest.fixture
def reserve(seed_state):
    """Planning-stage sample project without actuals."""
    return seed_state.get_project('2')
