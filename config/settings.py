"""
Configuration management for the EstateFlow campaign planner.
Handles campaign calendar, reporting defaults and file locations.
"""

import os
import logging
import streamlit as st
from datetime import date
from typing import Optional
from dataclasses import dataclass
from dotenv import load_dotenv

from models.data_models import ViewMode, CAMPAIGN_WEEKS

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


@dataclass
class AppConfig:
    """Application configuration settings."""
    campaign_start_date: date = date(2025, 10, 1)
    campaign_weeks: int = CAMPAIGN_WEEKS
    default_view_mode: ViewMode = ViewMode.BRAND
    report_start_date: date = date(2025, 10, 1)
    report_end_date: date = date(2025, 11, 24)
    export_dir: str = "exports"
    snapshot_dir: str = ".estateflow"
    delivery_good_threshold: float = 90.0
    delivery_warning_threshold: float = 70.0
    allocation_tolerance: float = 0.5


class ConfigManager:
    """Manages application configuration and settings."""

    def __init__(self):
        self._config: Optional[AppConfig] = None

    def load_config(self) -> AppConfig:
        """Load configuration from Streamlit secrets, environment and defaults."""
        if self._config is not None:
            return self._config

        defaults = AppConfig()

        self._config = AppConfig(
            campaign_start_date=self._get_date_setting("CAMPAIGN_START_DATE", defaults.campaign_start_date),
            campaign_weeks=self._get_int_setting("CAMPAIGN_WEEKS", defaults.campaign_weeks),
            default_view_mode=self._get_view_mode("DEFAULT_VIEW_MODE", defaults.default_view_mode),
            report_start_date=self._get_date_setting("REPORT_START_DATE", defaults.report_start_date),
            report_end_date=self._get_date_setting("REPORT_END_DATE", defaults.report_end_date),
            export_dir=self._get_setting("EXPORT_DIR", defaults.export_dir),
            snapshot_dir=self._get_setting("SNAPSHOT_DIR", defaults.snapshot_dir),
            delivery_good_threshold=self._get_float_setting("DELIVERY_GOOD_THRESHOLD", defaults.delivery_good_threshold),
            delivery_warning_threshold=self._get_float_setting("DELIVERY_WARNING_THRESHOLD", defaults.delivery_warning_threshold),
            allocation_tolerance=self._get_float_setting("ALLOCATION_TOLERANCE", defaults.allocation_tolerance)
        )

        logger.info(f"Configuration loaded: campaign starts {self._config.campaign_start_date.isoformat()}")
        return self._config

    def reset(self):
        """Drop the cached configuration so the next load re-reads all sources."""
        self._config = None

    def _get_secret_or_env(self, key: str) -> Optional[str]:
        """Get value from Streamlit secrets or environment variables."""
        # Try Streamlit secrets first
        try:
            if hasattr(st, 'secrets') and key in st.secrets:
                return str(st.secrets[key])
        except Exception:
            # No secrets.toml present
            pass

        # Fall back to environment variables
        return os.getenv(key)

    def _get_setting(self, key: str, default: str) -> str:
        """Get string setting with default value."""
        value = self._get_secret_or_env(key)
        return value if value is not None else default

    def _get_int_setting(self, key: str, default: int) -> int:
        """Get integer setting with default value."""
        value = self._get_secret_or_env(key)
        if value is not None:
            try:
                return int(value)
            except ValueError:
                logger.warning(f"Ignoring invalid integer for {key}: {value}")
        return default

    def _get_float_setting(self, key: str, default: float) -> float:
        """Get float setting with default value."""
        value = self._get_secret_or_env(key)
        if value is not None:
            try:
                return float(value)
            except ValueError:
                logger.warning(f"Ignoring invalid number for {key}: {value}")
        return default

    def _get_date_setting(self, key: str, default: date) -> date:
        """Get ISO date setting (YYYY-MM-DD) with default value."""
        value = self._get_secret_or_env(key)
        if value is not None:
            try:
                return date.fromisoformat(value.strip())
            except ValueError:
                logger.warning(f"Ignoring invalid date for {key}: {value}")
        return default

    def _get_view_mode(self, key: str, default: ViewMode) -> ViewMode:
        """Get view mode setting (BRAND or AGENCY)."""
        value = self._get_secret_or_env(key)
        if value is not None:
            try:
                return ViewMode(value.strip().upper())
            except ValueError:
                logger.warning(f"Ignoring invalid view mode for {key}: {value}")
        return default

    def get_campaign_start(self) -> date:
        """Get the first day of week 0."""
        config = self.load_config()
        return config.campaign_start_date

    def get_delivery_thresholds(self):
        """Get the (good, warning) delivery percentage thresholds."""
        config = self.load_config()
        return config.delivery_good_threshold, config.delivery_warning_threshold


# Global configuration manager instance
config_manager = ConfigManager()
