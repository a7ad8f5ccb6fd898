"""
Tests for UI formatting helpers and command dispatch.
"""

from datetime import date

from models.data_models import DeliveryStatus
from business_logic.project_controller import ProjectController, RenameProject
from data.manager import PortfolioStore
from data.sample_data import seed_portfolio
from ui.components import delivery_badge, dispatch_command, format_currency, format_ratio_value, input_value


class TestFormatting:

    def test_format_currency(self):
        assert format_currency(19_744_513.89) == "₹1.97 Cr"
        assert format_currency(2_936_003) == "₹29.36 L"
        assert format_currency(4819) == "₹4,819"
        assert format_currency(float('nan')) == "-"

    def test_format_ratio_value(self):
        assert format_ratio_value(0) == "-"
        assert format_ratio_value(0, zero_as_dash=False) == "₹0"
        assert format_ratio_value(2360) == "₹2,360"

    def test_delivery_badge(self):
        assert delivery_badge(DeliveryStatus.GOOD, 94.21) == "🟢 94.2%"
        assert delivery_badge(DeliveryStatus.CRITICAL, 12) == "🔴 12.0%"

    def test_input_value_non_finite(self):
        assert input_value(float('inf')) == 0.0
        assert input_value(float('nan')) == 0.0
        assert input_value(12.5) == 12.5


class TestDispatchCommand:

    def test_applied_command_is_saved(self, tmp_path):
        controller = ProjectController(seed_portfolio(date(2025, 10, 1)))
        store = PortfolioStore(str(tmp_path))

        assert dispatch_command(controller, store, RenameProject('2', "Reserve"))
        assert store.load().get_project('2').name == "Reserve"

    def test_without_store(self):
        controller = ProjectController(seed_portfolio(date(2025, 10, 1)))

        assert dispatch_command(controller, None, RenameProject('1', "Horizon"))
        assert controller.get_project('1').name == "Horizon"
