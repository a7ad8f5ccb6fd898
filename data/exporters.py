"""
Excel report exports.

Each report is built as a pandas DataFrame (one sheet per report type) and
written with the openpyxl engine to `<prefix>_<YYYY-MM-DD>.xlsx`.
"""

import io
import logging
from datetime import date
from pathlib import Path
from typing import Dict, Optional, Sequence

import pandas as pd

from models.data_models import Project, ReportingWindow, ViewMode
from business_logic.channel_performance import aggregate_channel_performance
from business_logic.error_handler import ExportError, error_handler
from business_logic.funnel_calculator import calculate_metrics, round_half_up, safe_divide, tax_multiplier
from business_logic.portfolio import ALL_PROJECTS, portfolio_analytics
from business_logic.reconciliation import actual_value, reconcile_period
from business_logic.weekly_distribution import project_weeks

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MASTER_REPORT_SHEET = "Master Report"
BUSINESS_PLAN_SHEET = "Business Plan"
MEDIA_MIX_SHEET = "Media Mix"
WOW_PLAN_SHEET = "WoW Plan"
PERFORMANCE_SHEET = "Performance"
CHANNEL_TRACKER_SHEET = "Channel Tracker"
ANALYTICS_SHEET = "Analytics Data"


def _target_spends(week, view_mode: ViewMode) -> float:
    return week.spends_all_in if view_mode == ViewMode.AGENCY else week.spends_base


def build_master_report_frame(projects: Sequence[Project], view_mode: ViewMode) -> pd.DataFrame:
    """One row per project over the whole campaign. Delivery columns are ratios (1.0 = on target)."""
    rows = []
    for project in projects:
        metrics = calculate_metrics(project.plan)
        weeks = project_weeks(project, metrics)
        rec = reconcile_period(project, weeks, ReportingWindow.full_campaign(len(weeks)), view_mode, metrics)

        rows.append({
            "Project Name": project.name,
            "SPOC": project.poc,
            "Planned Budget (All-in)": rec.budget.planned_all_in,
            "Received Budget": rec.budget.received_budget,
            "Performance Spends": rec.budget.performance_spend,
            "Other Spends": rec.budget.other_spends,
            "Total Consumed": rec.budget.total_spend,
            "Pending Budget": rec.budget.pending,
            "Target Leads": round_half_up(rec.leads.target),
            "Achieved Leads": rec.leads.achieved,
            "Leads Delivery %": rec.leads.delivery_percent / 100,
            "Target AD": round_half_up(rec.ad.target),
            "Achieved AD": rec.ad.achieved,
            "AD Delivery %": rec.ad.delivery_percent / 100,
            "Target CPL": rec.target_cpl,
            "Achieved CPL": rec.achieved_cpl,
            "Achieved CPW": rec.achieved_cpw,
            "Digital Bookings": rec.digital_bookings,
            "Presales Bookings": rec.presales_bookings,
            "Total Units": rec.total_units_achieved,
            "Digital BV (Cr)": rec.digital_bv_achieved,
            "Presales BV (Cr)": rec.presales_bv_achieved,
        })

    return pd.DataFrame(rows)


def build_business_plan_frame(project: Project) -> pd.DataFrame:
    plan = project.plan
    metrics = calculate_metrics(plan)

    return pd.DataFrame([
        {"Metric": "Overall BV Target (Cr)", "Value": plan.overall_bv},
        {"Metric": "ATS (Cr)", "Value": plan.ats},
        {"Metric": "Digital Contribution %", "Value": plan.digital_contribution_percent},
        {"Metric": "Presales Contribution %", "Value": plan.presales_contribution_percent},
        {"Metric": "Lead to Walkin (LTW) %", "Value": plan.ltw_percent},
        {"Metric": "Walkin to Booking (WTB) %", "Value": plan.wtb_percent},
        {"Metric": "Planned CPL", "Value": plan.cpl},
        {"Metric": "Tax %", "Value": plan.tax_percent},
        {"Metric": "---", "Value": "---"},
        {"Metric": "Derived Total Units", "Value": metrics.total_units},
        {"Metric": "Target Leads", "Value": metrics.target_leads},
        {"Metric": "Target Walkins", "Value": metrics.target_walkins},
        {"Metric": "All-in Budget", "Value": metrics.all_in_budget},
        {"Metric": "Projected Revenue", "Value": metrics.revenue},
    ])


def build_media_mix_frame(project: Project) -> pd.DataFrame:
    """The stored channel configuration; budgets are derived and not exported."""
    return pd.DataFrame([
        {
            "Channel Name": c.name,
            "Allocation %": c.allocation_percent,
            "Est CPL": c.estimated_cpl,
            "CAPI % (Qual)": c.capi_percent,
            "CAPI to AP %": c.capi_to_ap_percent,
            "AP to AD %": c.ap_to_ad_percent,
        }
        for c in project.media_plan
    ])


def build_wow_plan_frame(project: Project, view_mode: ViewMode) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "Week": w.week_label,
            "Dates": w.date_range,
            "Spend Dist %": w.spend_distribution,
            "Lead Dist %": w.lead_distribution,
            "AD Conv %": w.ad_conversion,
            "Target Leads": round_half_up(w.leads),
            "Target AP": round_half_up(w.ap),
            "Target AD": round_half_up(w.ad),
            "Target Spends": _target_spends(w, view_mode),
        }
        for w in project_weeks(project)
    ])


def build_performance_frame(project: Project, view_mode: ViewMode) -> pd.DataFrame:
    tax_mult = tax_multiplier(project.plan, view_mode)
    rows = []

    for w in project_weeks(project):
        leads = actual_value(project.actuals, w.id, 'leads')
        ad = actual_value(project.actuals, w.id, 'ad')
        spends = actual_value(project.actuals, w.id, 'spends') * tax_mult

        rows.append({
            "Week": w.week_label,
            "Dates": w.date_range,
            "Target Leads": round_half_up(w.leads),
            "Actual Leads": leads,
            "Target AP": round_half_up(w.ap),
            "Actual AP": actual_value(project.actuals, w.id, 'ap'),
            "Target AD": round_half_up(w.ad),
            "Actual AD": ad,
            "Target Spends": _target_spends(w, view_mode),
            "Actual Spends": spends,
            "Actual Dig Bookings": actual_value(project.actuals, w.id, 'bookings'),
            "Actual Presales": actual_value(project.actuals, w.id, 'presales_bookings'),
            "Act CPL": safe_divide(spends, leads),
            "Act CPW": safe_divide(spends, ad),
        })

    return pd.DataFrame(rows)


def build_channel_tracker_frame(project: Project, view_mode: ViewMode) -> pd.DataFrame:
    report = aggregate_channel_performance(
        project.media_plan, project.channel_performance, tax_multiplier(project.plan, view_mode)
    )

    return pd.DataFrame([
        {
            "Channel": row.name,
            "Spends": row.spends,
            "Leads": row.leads,
            "CPL": row.cpl,
            "Open/Attempted": row.open_attempted,
            "Contacted": row.contacted,
            "Assigned (CAPI)": row.assigned_to_sales,
            "AP": row.ap,
            "AD": row.ad,
            "Bookings": row.bookings,
            "Lost": row.lost,
            "CP-CAPI": row.cp_qualified,
            "CP-AP": row.cp_ap,
            "CP-AD": row.cp_ad,
        }
        for row in report.rows
    ])


def build_analytics_frame(projects: Sequence[Project],
                          view_mode: ViewMode,
                          project_id: str = ALL_PROJECTS) -> pd.DataFrame:
    analytics = portfolio_analytics(projects, view_mode, project_id)
    columns = ["Week", "Planned Spend", "Actual Spend", "Actual Leads",
               "Actual Walkins", "Actual Bookings", "Calculated CPL"]

    return pd.DataFrame([
        {
            "Week": point.week_label,
            "Planned Spend": point.planned_spend,
            "Actual Spend": point.actual_spend,
            "Actual Leads": point.actual_leads,
            "Actual Walkins": point.actual_walkins,
            "Actual Bookings": point.actual_bookings,
            "Calculated CPL": point.calculated_cpl,
        }
        for point in analytics.trend
    ], columns=columns)


def export_filename(prefix: str, export_date: Optional[date] = None) -> str:
    """`<prefix>_<YYYY-MM-DD>.xlsx` with path separators removed from the prefix."""
    export_date = export_date or date.today()
    safe_prefix = prefix.replace('/', '_').replace('\\', '_')
    return f"{safe_prefix}_{export_date.isoformat()}.xlsx"


def workbook_bytes(sheets: Dict[str, pd.DataFrame]) -> bytes:
    """Render sheets into an in-memory workbook (for browser downloads)."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        for sheet_name, df in sheets.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
    return buffer.getvalue()


def write_workbook(sheets: Dict[str, pd.DataFrame],
                   prefix: str,
                   export_dir: str = "exports",
                   export_date: Optional[date] = None) -> Path:
    """
    Write sheets to a dated workbook file.

    Args:
        sheets: Sheet name to DataFrame, in sheet order
        prefix: File name prefix
        export_dir: Target directory (created if missing)
        export_date: Date stamped into the file name, today when omitted

    Returns:
        Path of the written workbook

    Raises:
        ExportError: If the workbook cannot be written
    """
    path = Path(export_dir) / export_filename(prefix, export_date)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(path, engine='openpyxl') as writer:
            for sheet_name, df in sheets.items():
                df.to_excel(writer, sheet_name=sheet_name, index=False)
    except Exception as e:
        error_info = error_handler.classify_error(e, f"export {prefix}")
        error_handler.log_error(error_info, "Workbook export")
        raise ExportError(f"Could not write {path}: {str(e)}") from e

    logger.info(f"Exported {', '.join(sheets)} to {path}")
    return path


def export_master_report(projects: Sequence[Project], view_mode: ViewMode,
                         export_dir: str = "exports", export_date: Optional[date] = None) -> Path:
    return write_workbook({MASTER_REPORT_SHEET: build_master_report_frame(projects, view_mode)},
                          "EstateFlow_Master_Report", export_dir, export_date)


def export_business_plan(project: Project, export_dir: str = "exports",
                         export_date: Optional[date] = None) -> Path:
    return write_workbook({BUSINESS_PLAN_SHEET: build_business_plan_frame(project)},
                          f"{project.name}_Business_Plan", export_dir, export_date)


def export_media_mix(project: Project, export_dir: str = "exports",
                     export_date: Optional[date] = None) -> Path:
    return write_workbook({MEDIA_MIX_SHEET: build_media_mix_frame(project)},
                          f"{project.name}_Media_Mix", export_dir, export_date)


def export_wow_plan(project: Project, view_mode: ViewMode, export_dir: str = "exports",
                    export_date: Optional[date] = None) -> Path:
    return write_workbook({WOW_PLAN_SHEET: build_wow_plan_frame(project, view_mode)},
                          f"{project.name}_WoW_Plan", export_dir, export_date)


def export_performance(project: Project, view_mode: ViewMode, export_dir: str = "exports",
                       export_date: Optional[date] = None) -> Path:
    return write_workbook({PERFORMANCE_SHEET: build_performance_frame(project, view_mode)},
                          f"{project.name}_Performance", export_dir, export_date)


def export_channel_tracker(project: Project, view_mode: ViewMode, export_dir: str = "exports",
                           export_date: Optional[date] = None) -> Path:
    return write_workbook({CHANNEL_TRACKER_SHEET: build_channel_tracker_frame(project, view_mode)},
                          f"{project.name}_Channel_Tracker", export_dir, export_date)


def export_analytics(projects: Sequence[Project], view_mode: ViewMode, project_id: str = ALL_PROJECTS,
                     export_dir: str = "exports", export_date: Optional[date] = None) -> Path:
    return write_workbook({ANALYTICS_SHEET: build_analytics_frame(projects, view_mode, project_id)},
                          f"Analytics_Export_{project_id}", export_dir, export_date)
