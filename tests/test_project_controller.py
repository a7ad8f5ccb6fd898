"""
Tests for the application state reducer and ProjectController.
"""

import math
from dataclasses import replace
from datetime import date

import pytest

from models.data_models import ProjectStatus, ReportingWindow, ViewMode, WeeklyActuals
from business_logic.error_handler import CommandError
from business_logic.funnel_calculator import calculate_metrics
from business_logic.media_mix import forecast_media_mix, resolve_simulation_budget
from business_logic.project_controller import (
    AddChannel, AddPoc, AddProject, AppState, DeleteChannel, DeleteProject, ProjectController,
    RenameProject, SetActualField, SetChannelBudget, SetChannelField, SetChannelPerformanceField,
    SetManualMediaBudget, SetPlanField, SetProjectField, SetProjectPoc, SetWeekField, ToggleLock,
    apply_command, project_view
)


class TestPlanCommands:
    """Plan and week edits, including lock gating."""

    def test_set_plan_field_copy_on_write(self, seed_state):
        new_state = apply_command(seed_state, SetPlanField('2', 'overall_bv', 600))

        assert new_state.get_project('2').plan.overall_bv == 600
        assert seed_state.get_project('2').plan.overall_bv == 500
        assert new_state.get_project('1') is seed_state.get_project('1')

    def test_locked_project_rejects_plan_edit(self, seed_state):
        new_state = apply_command(seed_state, SetPlanField('1', 'cpl', 9999))

        assert new_state is seed_state
        assert new_state.get_project('1').plan.cpl == 4819

    def test_locked_project_rejects_week_edit(self, seed_state):
        new_state = apply_command(seed_state, SetWeekField('1', 3, 'spend_distribution', 50))
        assert new_state is seed_state

    def test_unlock_then_edit(self, seed_state):
        state = apply_command(seed_state, ToggleLock('1'))
        state = apply_command(state, SetPlanField('1', 'cpl', 5000))

        assert not state.get_project('1').is_locked
        assert state.get_project('1').plan.cpl == 5000

    def test_set_week_field(self, seed_state):
        state = apply_command(seed_state, SetWeekField('2', 3, 'ad_conversion', 4.0))

        assert state.get_project('2').weeks[3].ad_conversion == 4.0
        assert seed_state.get_project('2').weeks[3].ad_conversion == 3

    def test_values_stored_as_given(self, seed_state):
        state = apply_command(seed_state, SetWeekField('2', 3, 'spend_distribution', -5))
        assert state.get_project('2').weeks[3].spend_distribution == -5

    def test_unknown_plan_field(self, seed_state):
        with pytest.raises(CommandError):
            apply_command(seed_state, SetPlanField('2', 'budget', 1))

    def test_unknown_week(self, seed_state):
        with pytest.raises(CommandError):
            apply_command(seed_state, SetWeekField('2', 13, 'spend_distribution', 1))

    def test_received_budget_not_a_plan_field(self, seed_state):
        with pytest.raises(CommandError):
            apply_command(seed_state, SetPlanField('2', 'received_budget', 1_000_000))

    def test_unknown_project(self, seed_state):
        with pytest.raises(CommandError):
            apply_command(seed_state, SetPlanField('99', 'cpl', 1))


class TestProjectCommands:

    def test_received_budget_writes_plan(self, seed_state):
        state = apply_command(seed_state, SetProjectField('1', 'received_budget', 4_000_000))
        assert state.get_project('1').plan.received_budget == 4_000_000

    def test_other_spends_not_lock_gated(self, seed_state):
        state = apply_command(seed_state, SetProjectField('1', 'other_spends', 75_000))
        assert state.get_project('1').other_spends == 75_000

    def test_status_from_string(self, seed_state):
        state = apply_command(seed_state, SetProjectField('2', 'status', 'Completed'))
        assert state.get_project('2').status == ProjectStatus.COMPLETED

    def test_invalid_status(self, seed_state):
        with pytest.raises(CommandError):
            apply_command(seed_state, SetProjectField('2', 'status', 'Archived'))

    def test_manual_media_budget_set_and_clear(self, seed_state):
        state = apply_command(seed_state, SetManualMediaBudget('2', 2_000_000))
        assert state.get_project('2').manual_media_budget == 2_000_000

        state = apply_command(state, SetManualMediaBudget('2', None))
        assert state.get_project('2').manual_media_budget is None

    def test_add_project(self, seed_state):
        state = apply_command(seed_state, AddProject(name="Godrej Aqua", poc="Pratham",
                                                     project_id='3', campaign_start=date(2026, 1, 5)))
        project = state.get_project('3')

        assert len(state.projects) == 3
        assert project.name == "Godrej Aqua"
        assert project.status == ProjectStatus.PLANNING
        assert len(project.weeks) == 13
        assert project.weeks[0].date_range == "5 Jan - 11 Jan"
        assert len(project.media_plan) == 5
        assert project.actuals == {}
        assert not project.is_locked

    def test_add_project_duplicate_id(self, seed_state):
        with pytest.raises(CommandError):
            apply_command(seed_state, AddProject(project_id='1', campaign_start=date(2026, 1, 5)))

    def test_delete_project(self, seed_state):
        state = apply_command(seed_state, DeleteProject('1'))

        assert [p.id for p in state.projects] == ['2']
        assert len(seed_state.projects) == 2

    def test_rename_and_reassign(self, seed_state):
        state = apply_command(seed_state, RenameProject('2', "Reserve Phase 2"))
        state = apply_command(state, SetProjectPoc('2', "Pratham"))

        assert state.get_project('2').name == "Reserve Phase 2"
        assert state.get_project('2').poc == "Pratham"

    def test_add_poc(self, seed_state):
        state = apply_command(seed_state, AddPoc("Neha", poc_id='4'))

        assert [p.name for p in state.pocs] == ["Amey", "Rohan", "Pratham", "Neha"]


class TestActualsAndChannels:

    def test_set_actual_creates_sparse_record(self, seed_state):
        state = apply_command(seed_state, SetActualField('2', 5, 'leads', 120))
        record = state.get_project('2').actuals[5]

        assert record == WeeklyActuals(week_id=5, leads=120)
        assert seed_state.get_project('2').actuals == {}

    def test_set_actual_updates_existing_record(self, seed_state):
        state = apply_command(seed_state, SetActualField('1', 2, 'bookings', 3))
        record = state.get_project('1').actuals[2]

        assert record.bookings == 3
        assert record.leads == 115
        assert seed_state.get_project('1').actuals[2].bookings == 1

    def test_actuals_not_lock_gated(self, seed_state):
        state = apply_command(seed_state, SetActualField('1', 3, 'leads', 90))
        assert state.get_project('1').actuals[3].leads == 90

    def test_set_channel_field(self, seed_state):
        state = apply_command(seed_state, SetChannelField('2', 'fb', 'estimated_cpl', 4500))
        assert state.get_project('2').media_plan[0].estimated_cpl == 4500

    def test_unknown_channel(self, seed_state):
        with pytest.raises(CommandError):
            apply_command(seed_state, SetChannelField('2', 'tv', 'estimated_cpl', 1))

    def test_channel_budget_round_trip(self, seed_state):
        state = apply_command(seed_state, SetChannelBudget('2', 'google', 750_000, ViewMode.AGENCY))
        project = state.get_project('2')
        sim_budget = resolve_simulation_budget(calculate_metrics(project.plan), ViewMode.AGENCY)

        forecast = forecast_media_mix(project.media_plan, sim_budget)
        assert forecast.by_channel()['google'].budget == pytest.approx(750_000)

    def test_channel_budget_ignored_with_zero_sim_budget(self, seed_state):
        state = apply_command(seed_state, SetManualMediaBudget('2', 0))
        after = apply_command(state, SetChannelBudget('2', 'google', 750_000))

        assert after.get_project('2').media_plan == state.get_project('2').media_plan

    def test_add_and_delete_channel(self, seed_state):
        state = apply_command(seed_state, AddChannel('2', "Radio", channel_id='radio'))
        state = apply_command(state, SetChannelPerformanceField('2', 'radio', 'leads', 40))
        assert state.get_project('2').media_plan[-1].is_custom
        assert state.get_project('2').channel_performance[0].leads == 40

        state = apply_command(state, DeleteChannel('2', 'radio'))
        assert 'radio' not in [c.id for c in state.get_project('2').media_plan]
        assert state.get_project('2').channel_performance == []

    def test_channel_performance_update(self, seed_state):
        state = apply_command(seed_state, SetChannelPerformanceField('1', 'fb', 'spends', 10_000))
        state = apply_command(state, SetChannelPerformanceField('1', 'fb', 'leads', 5))
        records = state.get_project('1').channel_performance

        assert len(records) == 1
        assert records[0].spends == 10_000
        assert records[0].leads == 5

    def test_unknown_command(self, seed_state):
        with pytest.raises(CommandError):
            apply_command(seed_state, object())


class TestProjectView:

    def test_view_of_sample_project(self, horizon):
        view = project_view(horizon, ViewMode.AGENCY)

        assert view.metrics == calculate_metrics(horizon.plan)
        assert view.window == ReportingWindow.full_campaign()
        assert view.weeks[4].leads == pytest.approx(view.metrics.target_leads * 0.11)
        assert view.reconciliation.budget.pending == pytest.approx(1_928_516.78)
        assert view.sim_budget == pytest.approx(view.metrics.all_in_budget)
        assert not view.budget_overridden
        assert view.media_mix.allocation_valid
        assert view.validation.is_valid
        assert len(view.performance.rows) == 13
        assert len(view.channel_report.rows) == 5

    def test_view_with_window_and_override(self, seed_state):
        state = apply_command(seed_state, SetManualMediaBudget('2', 1_000_000))
        view = project_view(state.get_project('2'), ViewMode.BRAND, ReportingWindow(2, 4))

        assert view.window == ReportingWindow(2, 4)
        assert view.sim_budget == 1_000_000
        assert view.budget_overridden
        assert view.media_mix.total_budget == pytest.approx(1_000_000)


    def test_zero_ltw_view(self, reserve):
        project = replace(reserve, plan=replace(reserve.plan, ltw_percent=0))
        view = project_view(project, ViewMode.AGENCY)

        assert math.isinf(view.metrics.target_leads)
        assert math.isinf(view.sim_budget)
        assert not view.validation.is_valid
        assert len(view.performance.rows) == 13
        assert view.reconciliation.leads.delivery_percent == 0

    def test_media_mix_compared_with_plan(self, horizon):
        view = project_view(horizon, ViewMode.BRAND)

        assert view.media_mix.target_walkins == view.metrics.target_walkins
        assert view.media_mix.walkins_covered


class TestProjectController:

    def setup_method(self):
        from data.sample_data import seed_portfolio
        self.controller = ProjectController(seed_portfolio(date(2025, 10, 1)))

    def test_dispatch_updates_state(self):
        before = self.controller.state
        self.controller.dispatch(RenameProject('2', "Reserve"))

        assert self.controller.get_project('2').name == "Reserve"
        assert before.get_project('2').name == "Godrej Reserve"

    def test_dispatch_error_propagates(self):
        with pytest.raises(CommandError):
            self.controller.dispatch(DeleteProject('missing'))
        assert len(self.controller.projects) == 2

    def test_rejected_command_keeps_history_clean(self):
        self.controller.dispatch(SetPlanField('1', 'cpl', 1))
        assert self.controller.history == []

    def test_undo(self):
        self.controller.dispatch(DeleteProject('2'))
        assert len(self.controller.projects) == 1

        self.controller.undo()
        assert len(self.controller.projects) == 2

    def test_history_is_bounded(self):
        controller = ProjectController(self.controller.state, history_limit=3)
        for i in range(5):
            controller.dispatch(RenameProject('2', f"Reserve {i}"))

        assert len(controller.history) == 3
        assert controller.history[0].get_project('2').name == "Reserve 1"

    def test_view_and_reports(self):
        view = self.controller.view('1', ViewMode.BRAND, ReportingWindow(0, 2))
        rows = self.controller.master_report(ViewMode.BRAND, ReportingWindow(0, 2), poc="Rohan")
        analytics = self.controller.analytics(ViewMode.BRAND)

        assert view.reconciliation.leads.achieved == 229
        assert [r.project_name for r in rows] == ["Godrej Reserve"]
        assert analytics.project_count == 2

    def test_empty_controller(self):
        controller = ProjectController()

        assert controller.state == AppState()
        assert controller.pocs == ()
