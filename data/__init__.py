# Data layer for the campaign planner

from .manager import PortfolioStore
from .sample_data import seed_portfolio, DEFAULT_POCS
from .exporters import (
    export_master_report, export_business_plan, export_media_mix, export_wow_plan,
    export_performance, export_channel_tracker, export_analytics, workbook_bytes
)

__all__ = [
    'PortfolioStore', 'seed_portfolio', 'DEFAULT_POCS',
    'export_master_report', 'export_business_plan', 'export_media_mix', 'export_wow_plan',
    'export_performance', 'export_channel_tracker', 'export_analytics', 'workbook_bytes'
]
