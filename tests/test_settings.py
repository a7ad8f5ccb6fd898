"""
Tests for configuration loading.
"""

from datetime import date

import pytest

from models.data_models import ViewMode
from config.settings import AppConfig, ConfigManager

SETTING_KEYS = [
    "CAMPAIGN_START_DATE", "CAMPAIGN_WEEKS", "DEFAULT_VIEW_MODE", "REPORT_START_DATE",
    "REPORT_END_DATE", "EXPORT_DIR", "SNAPSHOT_DIR", "DELIVERY_GOOD_THRESHOLD",
    "DELIVERY_WARNING_THRESHOLD", "ALLOCATION_TOLERANCE",
]


@pytest.fixture
def manager(monkeypatch):
    for key in SETTING_KEYS:
        monkeypatch.delenv(key, raising=False)
    return ConfigManager()


class TestConfigManager:

    def test_defaults(self, manager):
        assert manager.load_config() == AppConfig()
        assert manager.get_campaign_start() == date(2025, 10, 1)
        assert manager.get_delivery_thresholds() == (90.0, 70.0)

    def test_environment_overrides(self, manager, monkeypatch):
        monkeypatch.setenv("CAMPAIGN_START_DATE", "2026-01-05")
        monkeypatch.setenv("CAMPAIGN_WEEKS", "10")
        monkeypatch.setenv("DEFAULT_VIEW_MODE", "agency")
        monkeypatch.setenv("DELIVERY_GOOD_THRESHOLD", "95")
        monkeypatch.setenv("EXPORT_DIR", "/tmp/reports")

        config = manager.load_config()

        assert config.campaign_start_date == date(2026, 1, 5)
        assert config.campaign_weeks == 10
        assert config.default_view_mode == ViewMode.AGENCY
        assert config.delivery_good_threshold == 95.0
        assert config.export_dir == "/tmp/reports"

    @pytest.mark.parametrize("key,value,attr", [
        ("CAMPAIGN_WEEKS", "thirteen", "campaign_weeks"),
        ("CAMPAIGN_START_DATE", "01/10/2025", "campaign_start_date"),
        ("DEFAULT_VIEW_MODE", "client", "default_view_mode"),
        ("ALLOCATION_TOLERANCE", "half", "allocation_tolerance"),
    ])
    def test_invalid_values_fall_back(self, manager, monkeypatch, key, value, attr):
        monkeypatch.setenv(key, value)
        assert getattr(manager.load_config(), attr) == getattr(AppConfig(), attr)

    def test_config_is_cached_until_reset(self, manager, monkeypatch):
        first = manager.load_config()
        monkeypatch.setenv("CAMPAIGN_WEEKS", "8")

        assert manager.load_config() is first

        manager.reset()
        assert manager.load_config().campaign_weeks == 8
