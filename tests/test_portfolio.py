"""
Tests for portfolio-level reporting.
"""

from dataclasses import replace

import pytest

from models.data_models import DeliveryStatus, ProjectStatus, ReportingWindow, ViewMode
from business_logic.funnel_calculator import calculate_metrics
from business_logic.portfolio import filter_by_poc, master_report, portfolio_analytics

HORIZON_SPEND = 137143 + 274286 + 400000


class TestFilterByPoc:

    def test_all(self, seed_state):
        assert len(filter_by_poc(seed_state.projects, "All")) == 2

    def test_single_poc(self, seed_state):
        projects = filter_by_poc(seed_state.projects, "Amey")
        assert [p.name for p in projects] == ["Godrej Horizon"]

    def test_poc_without_projects(self, seed_state):
        assert filter_by_poc(seed_state.projects, "Pratham") == []


class TestMasterReport:

    def test_one_row_per_project(self, seed_state):
        rows = master_report(seed_state.projects, ReportingWindow(0, 2), ViewMode.BRAND)

        assert [r.project_name for r in rows] == ["Godrej Horizon", "Godrej Reserve"]
        assert rows[0].is_locked
        assert rows[0].status == ProjectStatus.ACTIVE
        assert rows[0].reconciliation.leads.achieved == 229
        assert rows[0].reconciliation.leads.status == DeliveryStatus.GOOD
        assert rows[1].reconciliation.leads.achieved == 0

    def test_custom_thresholds(self, seed_state):
        rows = master_report(seed_state.projects, ReportingWindow(0, 2), ViewMode.BRAND, thresholds=(95, 90))
        assert rows[0].reconciliation.leads.status == DeliveryStatus.WARNING


class TestPortfolioAnalytics:

    def test_totals(self, seed_state, horizon, reserve):
        analytics = portfolio_analytics(seed_state.projects, ViewMode.BRAND)
        horizon_metrics = calculate_metrics(horizon.plan)
        reserve_metrics = calculate_metrics(reserve.plan)

        assert analytics.project_count == 2
        assert analytics.total_actual_spend == pytest.approx(HORIZON_SPEND)
        assert analytics.total_actual_leads == 229
        assert analytics.total_actual_walkins == 12
        assert analytics.total_actual_bookings == 2
        assert analytics.total_planned_budget == pytest.approx(
            horizon_metrics.base_budget + reserve_metrics.base_budget
        )
        assert analytics.total_target_leads == pytest.approx(
            horizon_metrics.target_leads + reserve_metrics.target_leads
        )

    def test_trend_drops_idle_weeks(self, seed_state):
        trend = portfolio_analytics(seed_state.projects, ViewMode.BRAND).trend

        # Weeks 1-2 have actual spend only, weeks 12-13 have nothing
        assert [p.week_id for p in trend] == list(range(11))
        assert trend[0].planned_spend == 0
        assert trend[0].actual_spend == pytest.approx(137143)
        assert trend[0].calculated_cpl == pytest.approx(137143 / 38)

    def test_agency_view_taxes_spend(self, seed_state):
        analytics = portfolio_analytics(seed_state.projects, ViewMode.AGENCY)
        assert analytics.total_actual_spend == pytest.approx(HORIZON_SPEND * 1.18)

    def test_completed_projects_excluded(self, seed_state, horizon, reserve):
        projects = [replace(horizon, status=ProjectStatus.COMPLETED), reserve]
        analytics = portfolio_analytics(projects, ViewMode.BRAND)

        assert analytics.project_count == 1
        assert analytics.total_actual_spend == 0
        assert analytics.total_target_leads == pytest.approx(calculate_metrics(reserve.plan).target_leads)

    def test_single_project_scope(self, seed_state):
        analytics = portfolio_analytics(seed_state.projects, ViewMode.BRAND, project_id='2')

        assert analytics.project_count == 1
        assert analytics.total_actual_leads == 0
        assert analytics.calculated_cpl == 0

    def test_empty_portfolio(self):
        analytics = portfolio_analytics([], ViewMode.BRAND)

        assert analytics.trend == []
        assert analytics.spend_progress_percent == 0
        assert analytics.leads_delivery_percent == 0
