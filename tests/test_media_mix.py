"""
Unit tests for the media mix simulation.
"""

from dataclasses import replace

import pytest

from models.data_models import MediaChannel, ViewMode
from business_logic.funnel_calculator import calculate_metrics
from business_logic.media_mix import (
    PRESET_CHANNELS, add_channel, default_media_plan, delete_channel, forecast_media_mix,
    is_budget_overridden, resolve_simulation_budget, set_channel_budget, walkin_coverage
)

SIM_BUDGET = 1_000_000


class TestForecastMediaMix:
    """Forward forecast from allocation to funnel stages."""

    def setup_method(self):
        self.channels = default_media_plan()

    def test_channel_funnel(self):
        forecast = forecast_media_mix(self.channels, SIM_BUDGET)
        fb = forecast.by_channel()['fb']

        assert fb.budget == pytest.approx(400_000)
        assert fb.leads == pytest.approx(400_000 / 4200)
        assert fb.qualified == pytest.approx(fb.leads * 0.35)
        assert fb.ap == pytest.approx(10.0)
        assert fb.ad == pytest.approx(5.0)

    def test_totals_and_blended_cpl(self):
        forecast = forecast_media_mix(self.channels, SIM_BUDGET)

        assert forecast.total_budget == pytest.approx(SIM_BUDGET)
        assert forecast.total_leads == pytest.approx(sum(c.leads for c in forecast.channels))
        assert forecast.blended_cpl == pytest.approx(SIM_BUDGET / forecast.total_leads)
        assert forecast.total_allocation == pytest.approx(100)
        assert forecast.allocation_valid

    def test_zero_budget_forecasts_nothing(self):
        forecast = forecast_media_mix(self.channels, 0)

        for channel in forecast.channels:
            assert channel.budget == 0
            assert channel.leads == 0
            assert channel.ap == 0
            assert channel.ad == 0
        assert forecast.blended_cpl == 0

    def test_zero_cpl_gives_zero_leads(self):
        channels = [MediaChannel(id='x', name='X', allocation_percent=100, estimated_cpl=0)]
        forecast = forecast_media_mix(channels, SIM_BUDGET)

        assert forecast.channels[0].budget == pytest.approx(SIM_BUDGET)
        assert forecast.channels[0].leads == 0
        assert forecast.blended_cpl == 0

    def test_nan_allocation_counts_as_zero(self):
        channels = [replace(self.channels[0], allocation_percent=float('nan'))] + self.channels[1:]
        forecast = forecast_media_mix(channels, SIM_BUDGET)

        assert forecast.channels[0].budget == 0
        assert forecast.total_allocation == pytest.approx(60)

    def test_allocation_tolerance(self):
        slightly_off = [replace(self.channels[0], allocation_percent=40.4)] + self.channels[1:]
        too_far = [replace(self.channels[0], allocation_percent=41)] + self.channels[1:]

        assert forecast_media_mix(slightly_off, SIM_BUDGET).allocation_valid
        assert not forecast_media_mix(too_far, SIM_BUDGET).allocation_valid

    def test_negative_cpl_gives_zero_leads(self):
        channels = [MediaChannel(id='x', name='X', allocation_percent=100, estimated_cpl=-100)]
        forecast = forecast_media_mix(channels, 1000)

        assert forecast.channels[0].leads == 0
        assert forecast.channels[0].ad == 0

    def test_nan_stage_percent_counts_as_zero(self):
        channels = [replace(self.channels[0], capi_percent=float('nan'))] + self.channels[1:]
        fb = forecast_media_mix(channels, SIM_BUDGET).by_channel()['fb']

        assert fb.leads > 0
        assert fb.qualified == 0
        assert fb.ad == 0


class TestPlanComparison:
    """Forecast walk-ins and CPW against the business plan."""

    def setup_method(self):
        self.channels = default_media_plan()

    def test_walkin_gap(self):
        forecast = forecast_media_mix(self.channels, SIM_BUDGET, target_walkins=50)

        assert forecast.total_ad == pytest.approx(16.68, abs=0.01)
        assert not forecast.walkins_covered
        assert forecast.walkin_gap == pytest.approx(50 - forecast.total_ad)
        assert forecast.walkin_coverage_percent == pytest.approx(forecast.total_ad / 50 * 100)
        assert forecast.forecast_cpw == pytest.approx(SIM_BUDGET / forecast.total_ad)

    def test_target_covered(self):
        forecast = forecast_media_mix(self.channels, SIM_BUDGET, target_walkins=10)

        assert forecast.walkins_covered
        assert forecast.walkin_gap == 0
        assert forecast.walkin_coverage_percent == 100

    def test_plan_budget_against_plan_walkins(self, plan):
        metrics = calculate_metrics(plan)
        forecast = forecast_media_mix(self.channels, metrics.base_budget, target_walkins=metrics.target_walkins)

        assert forecast.target_walkins == pytest.approx(104.1667, rel=1e-4)
        assert forecast.walkins_covered

    def test_no_forecast_ad(self):
        forecast = forecast_media_mix(self.channels, 0, target_walkins=50)

        assert forecast.forecast_cpw == 0
        assert forecast.walkin_gap == 50
        assert forecast.walkin_coverage_percent == 0

    def test_coverage_guards(self):
        assert walkin_coverage(5, 0) == 100
        assert walkin_coverage(0.5, 0) == 50
        assert walkin_coverage(5, float('nan')) == 100
        assert walkin_coverage(5, float('inf')) == 0
        assert walkin_coverage(-5, 10) == 0


class TestSimulationBudget:

    def test_view_mode_budget(self, plan):
        metrics = calculate_metrics(plan)

        assert resolve_simulation_budget(metrics, ViewMode.BRAND) == metrics.base_budget
        assert resolve_simulation_budget(metrics, ViewMode.AGENCY) == metrics.all_in_budget

    def test_manual_override(self, plan):
        metrics = calculate_metrics(plan)

        assert resolve_simulation_budget(metrics, ViewMode.AGENCY, 2_500_000) == 2_500_000
        assert resolve_simulation_budget(metrics, ViewMode.BRAND, 0) == 0

    def test_is_budget_overridden(self):
        assert not is_budget_overridden(None, 1000)
        assert not is_budget_overridden(1000.5, 1000)
        assert is_budget_overridden(1002, 1000)


class TestChannelEdits:

    def setup_method(self):
        self.channels = default_media_plan()

    def test_budget_round_trip(self):
        edited = set_channel_budget(self.channels, 'google', 123_456.78, SIM_BUDGET)
        forecast = forecast_media_mix(edited, SIM_BUDGET)

        assert forecast.by_channel()['google'].budget == pytest.approx(123_456.78)
        assert edited[1].allocation_percent == pytest.approx(12.345678)

    def test_budget_edit_ignored_without_sim_budget(self):
        edited = set_channel_budget(self.channels, 'google', 50_000, 0)
        assert edited == self.channels

    def test_budget_edit_leaves_other_channels(self):
        edited = set_channel_budget(self.channels, 'google', 50_000, SIM_BUDGET)

        assert edited[0] == self.channels[0]
        assert self.channels[1].allocation_percent == 30

    def test_add_channel_defaults(self):
        channels = add_channel(self.channels, PRESET_CHANNELS[0])
        added = channels[-1]

        assert len(channels) == 6
        assert added.name == "LinkedIn"
        assert added.is_custom
        assert added.allocation_percent == 0
        assert added.estimated_cpl == 0
        assert (added.capi_percent, added.capi_to_ap_percent, added.ap_to_ad_percent) == (30, 30, 50)
        assert len(self.channels) == 5

    def test_add_channel_unique_ids(self):
        channels = add_channel(add_channel(self.channels), "Other")
        assert channels[-1].id != channels[-2].id

    def test_delete_channel(self):
        channels = delete_channel(self.channels, 'display')

        assert [c.id for c in channels] == ['fb', 'google', 'portals', 'native']
        assert delete_channel(channels, 'missing') == channels

    def test_default_plan_copies_are_independent(self):
        fresh = default_media_plan()
        fresh[0].allocation_percent = 0

        assert default_media_plan()[0].allocation_percent == 40
