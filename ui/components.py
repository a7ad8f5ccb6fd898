"""
UI components for the EstateFlow campaign planner.
"""

import math
import streamlit as st
from typing import Any, Dict, List, Optional
from datetime import date
import logging
import pandas as pd

from models.data_models import DeliveryStatus, Project, ProjectStatus, ReportingWindow, ViewMode
from business_logic.error_handler import CommandError, error_handler
from business_logic.funnel_calculator import round_half_up
from business_logic.media_mix import PRESET_CHANNELS
from business_logic.portfolio import ALL_POCS, ALL_PROJECTS
from business_logic.project_controller import (
    AddChannel, AddPoc, AddProject, DeleteChannel, DeleteProject, ProjectController, ProjectView,
    RenameProject, SetActualField, SetChannelBudget, SetChannelField, SetChannelPerformanceField,
    SetManualMediaBudget, SetPlanField, SetProjectField, SetProjectPoc, SetWeekField, ToggleLock
)
from business_logic.plan_validator import ValidationSeverity
from data import exporters
from data.manager import PortfolioStore

logger = logging.getLogger(__name__)

STATUS_ICONS = {
    DeliveryStatus.GOOD: "🟢",
    DeliveryStatus.WARNING: "🟡",
    DeliveryStatus.CRITICAL: "🔴",
}

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def format_currency(amount: float) -> str:
    """Indian-style short currency: Cr above one crore, L above one lakh."""
    if amount != amount:  # NaN
        return "-"
    if abs(amount) >= 10_000_000:
        return f"₹{amount / 10_000_000:,.2f} Cr"
    if abs(amount) >= 100_000:
        return f"₹{amount / 100_000:,.2f} L"
    return f"₹{amount:,.0f}"


def format_ratio_value(value: float, zero_as_dash: bool = True) -> str:
    """Cost-per-stage display; a zero cost means the stage count was zero."""
    if zero_as_dash and value == 0:
        return "-"
    return format_currency(value)


def delivery_badge(status: DeliveryStatus, percent: float) -> str:
    return f"{STATUS_ICONS[status]} {percent:.1f}%"


def input_value(value: float) -> float:
    """Starting value for a number widget; non-finite derived values start at 0."""
    return float(value) if math.isfinite(value) else 0.0


def dispatch_command(controller: ProjectController, store: Optional[PortfolioStore], command) -> bool:
    """
    Apply a command and persist the new state.

    Args:
        controller: ProjectController held in the session
        store: Snapshot store, or None to skip persistence
        command: Command dataclass

    Returns:
        True if the command was applied
    """
    try:
        controller.dispatch(command)
    except CommandError as e:
        notification = error_handler.create_user_notification(error_handler.classify_error(e, "UI edit"))
        st.warning(f"{notification['title']}: {notification['message']}")
        return False

    if store is not None:
        try:
            store.save(controller.state)
        except OSError as e:
            error_info = error_handler.classify_error(e, "snapshot save")
            error_handler.log_error(error_info, "Snapshot save")
            st.error(error_info.user_message)
    return True


class PortfolioDashboard:
    """
    Portfolio overview: POC filter, reporting window, master report table
    and aggregate analytics.
    """

    def __init__(self, controller: ProjectController, store: Optional[PortfolioStore] = None):
        self.controller = controller
        self.store = store

    def render(self, view_mode: ViewMode, window: ReportingWindow) -> Optional[str]:
        """
        Render the dashboard.

        Returns:
            Id of the project the user opened, if any
        """
        st.subheader("📊 Portfolio Overview")

        poc_names = [ALL_POCS] + [p.name for p in self.controller.pocs]
        poc = st.selectbox("SPOC", poc_names, key="poc_filter")

        rows = self.controller.master_report(view_mode, window, poc)
        if not rows:
            st.info("No projects for this SPOC yet.")
        else:
            st.dataframe(self._master_report_table(rows), use_container_width=True, hide_index=True)

        self._render_analytics(view_mode)
        self._render_project_admin()

        project_ids = [r.project_id for r in rows]
        names = {r.project_id: r.project_name for r in rows}
        if not project_ids:
            return None
        return st.selectbox("Open project", project_ids, format_func=lambda pid: names[pid], key="open_project")

    def _master_report_table(self, rows) -> pd.DataFrame:
        return pd.DataFrame([
            {
                "Project": r.project_name,
                "SPOC": r.poc,
                "Status": r.status.value,
                "Locked": "🔒" if r.is_locked else "",
                "Leads": f"{r.reconciliation.leads.achieved:,.0f} / {r.reconciliation.leads.target:,.0f}",
                "Leads Delivery": delivery_badge(r.reconciliation.leads.status, r.reconciliation.leads.delivery_percent),
                "AD Delivery": delivery_badge(r.reconciliation.ad.status, r.reconciliation.ad.delivery_percent),
                "Spend": format_currency(r.reconciliation.period_spend),
                "CPL": format_ratio_value(r.reconciliation.achieved_cpl),
                "Buffer": format_currency(r.reconciliation.budget.buffer),
                "Pending Budget": format_currency(r.reconciliation.budget.pending),
            }
            for r in rows
        ])

    def _render_analytics(self, view_mode: ViewMode):
        with st.expander("📈 Analytics", expanded=False):
            options = [ALL_PROJECTS] + [p.id for p in self.controller.projects]
            names = {p.id: p.name for p in self.controller.projects}
            project_id = st.selectbox(
                "Scope", options, format_func=lambda pid: "All projects" if pid == ALL_PROJECTS else names[pid],
                key="analytics_scope"
            )
            analytics = self.controller.analytics(view_mode, project_id)

            col1, col2, col3, col4 = st.columns(4)
            col1.metric("Actual Spend", format_currency(analytics.total_actual_spend),
                        f"{analytics.spend_progress_percent:.1f}% of plan")
            col2.metric("Leads", f"{analytics.total_actual_leads:,.0f}",
                        f"{analytics.leads_delivery_percent:.1f}% delivered")
            col3.metric("Walk-ins", f"{analytics.total_actual_walkins:,.0f}",
                        f"{analytics.walkins_delivery_percent:.1f}% delivered")
            col4.metric("Bookings", f"{analytics.total_actual_bookings:,.0f}")

            if analytics.trend:
                trend_df = pd.DataFrame({
                    "Week": [p.week_label for p in analytics.trend],
                    "Planned Spend": [p.planned_spend for p in analytics.trend],
                    "Actual Spend": [p.actual_spend for p in analytics.trend],
                }).set_index("Week")
                st.line_chart(trend_df)

            st.download_button(
                label="📥 Download Analytics",
                data=exporters.workbook_bytes({
                    exporters.ANALYTICS_SHEET: exporters.build_analytics_frame(
                        self.controller.projects, view_mode, project_id)
                }),
                file_name=exporters.export_filename(f"Analytics_Export_{project_id}"),
                mime=XLSX_MIME,
                key="download_analytics"
            )
            st.download_button(
                label="📥 Download Master Report",
                data=exporters.workbook_bytes({
                    exporters.MASTER_REPORT_SHEET: exporters.build_master_report_frame(
                        self.controller.projects, view_mode)
                }),
                file_name=exporters.export_filename("EstateFlow_Master_Report"),
                mime=XLSX_MIME,
                key="download_master_report"
            )

    def _render_project_admin(self):
        with st.expander("➕ Projects & SPOCs", expanded=False):
            col1, col2 = st.columns(2)

            with col1:
                with st.form("add_project_form", clear_on_submit=True):
                    name = st.text_input("Project name")
                    location = st.text_input("Location")
                    poc = st.selectbox("SPOC", [p.name for p in self.controller.pocs] or [""])
                    if st.form_submit_button("Create project") and name.strip():
                        dispatch_command(self.controller, self.store,
                                         AddProject(name=name.strip(), poc=poc, location=location.strip()))

            with col2:
                with st.form("add_poc_form", clear_on_submit=True):
                    poc_name = st.text_input("New SPOC name")
                    if st.form_submit_button("Add SPOC") and poc_name.strip():
                        dispatch_command(self.controller, self.store, AddPoc(name=poc_name.strip()))


class ProjectDetailView:
    """
    Tabbed editor for a single project: business plan, media mix,
    week-on-week plan, performance tracker and channel tracker.
    """

    def __init__(self, controller: ProjectController, store: Optional[PortfolioStore] = None):
        self.controller = controller
        self.store = store

    def _dispatch(self, command) -> bool:
        return dispatch_command(self.controller, self.store, command)

    def render(self, project_id: str, view_mode: ViewMode, window: ReportingWindow):
        view = self.controller.view(project_id, view_mode, window)
        project = view.project

        self._render_header(view)

        tabs = st.tabs(["Business Plan", "Media Mix", "WoW Plan", "Performance", "Channel Tracker"])
        with tabs[0]:
            self._render_business_plan(view)
        with tabs[1]:
            self._render_media_mix(view)
        with tabs[2]:
            self._render_wow_plan(view)
        with tabs[3]:
            self._render_performance(view)
        with tabs[4]:
            self._render_channel_tracker(view)

        self._render_validation(view)
        self._render_exports(project, view_mode)

    def _render_header(self, view: ProjectView):
        project = view.project
        col1, col2, col3 = st.columns([3, 1, 1])

        with col1:
            new_name = st.text_input("Project", value=project.name, key=f"name_{project.id}")
            if new_name.strip() and new_name != project.name:
                self._dispatch(RenameProject(project.id, new_name.strip()))
            st.caption(f"{project.location} · SPOC {project.poc or '-'}")

        with col2:
            statuses = [s.value for s in ProjectStatus]
            status = st.selectbox("Status", statuses, index=statuses.index(project.status.value),
                                  key=f"status_{project.id}")
            if status != project.status.value:
                self._dispatch(SetProjectField(project.id, 'status', status))

            pocs = [p.name for p in self.controller.pocs]
            if project.poc in pocs:
                poc = st.selectbox("SPOC", pocs, index=pocs.index(project.poc), key=f"poc_{project.id}")
                if poc != project.poc:
                    self._dispatch(SetProjectPoc(project.id, poc))

        with col3:
            label = "🔓 Unlock plan" if project.is_locked else "🔒 Lock plan"
            if st.button(label, key=f"lock_{project.id}"):
                self._dispatch(ToggleLock(project.id))
            if st.button("🗑️ Delete project", key=f"delete_{project.id}"):
                self._dispatch(DeleteProject(project.id))
                st.rerun()

        rec = view.reconciliation
        m1, m2, m3, m4 = st.columns(4)
        m1.metric("Leads", f"{rec.leads.achieved:,.0f}", delivery_badge(rec.leads.status, rec.leads.delivery_percent))
        m2.metric("Walk-ins (AD)", f"{rec.ad.achieved:,.0f}", delivery_badge(rec.ad.status, rec.ad.delivery_percent))
        m3.metric("Units booked", f"{rec.total_units_achieved:,.0f}",
                  f"{rec.units_delivery_percent:.1f}% of {rec.total_units_target:,.1f}")
        m4.metric("Pending budget", format_currency(rec.budget.pending),
                  "Over budget" if rec.budget.over_budget else None,
                  delta_color="inverse" if rec.budget.over_budget else "normal")

    def _render_business_plan(self, view: ProjectView):
        project = view.project
        plan = project.plan
        locked = project.is_locked

        if locked:
            st.info("🔒 Plan is locked. Unlock it to edit plan inputs and week distribution.")

        inputs = [
            ('overall_bv', "Overall BV Target (Cr)"),
            ('ats', "ATS (Cr)"),
            ('digital_contribution_percent', "Digital Contribution %"),
            ('presales_contribution_percent', "Presales Contribution %"),
            ('ltw_percent', "Lead to Walk-in %"),
            ('wtb_percent', "Walk-in to Booking %"),
            ('cpl', "Planned CPL"),
            ('tax_percent', "Tax / Agency Fee %"),
        ]

        cols = st.columns(4)
        for i, (field, label) in enumerate(inputs):
            with cols[i % 4]:
                value = st.number_input(label, value=float(getattr(plan, field)), disabled=locked,
                                        key=f"plan_{project.id}_{field}")
                if value != getattr(plan, field):
                    self._dispatch(SetPlanField(project.id, field, value))

        col1, col2 = st.columns(2)
        with col1:
            received = st.number_input("Received Budget", value=float(plan.received_budget), step=10000.0,
                                       key=f"received_{project.id}")
            if received != plan.received_budget:
                self._dispatch(SetProjectField(project.id, 'received_budget', received))
        with col2:
            other = st.number_input("Other Spends", value=float(project.other_spends), step=10000.0,
                                    key=f"other_{project.id}")
            if other != project.other_spends:
                self._dispatch(SetProjectField(project.id, 'other_spends', other))

        m = view.metrics
        st.dataframe(pd.DataFrame([
            {"Metric": "Total Units", "Value": f"{m.total_units:,.1f}"},
            {"Metric": "Digital Units", "Value": f"{m.digital_units:,.1f}"},
            {"Metric": "Target Walk-ins", "Value": f"{m.target_walkins:,.0f}"},
            {"Metric": "Target Leads", "Value": f"{m.target_leads:,.0f}"},
            {"Metric": "Base Budget", "Value": format_currency(m.base_budget)},
            {"Metric": "All-in Budget", "Value": format_currency(m.all_in_budget)},
            {"Metric": "CPW", "Value": format_currency(m.cpw)},
            {"Metric": "CPB", "Value": format_currency(m.cpb)},
            {"Metric": "Target CoM %", "Value": f"{m.target_com:.2f}%"},
            {"Metric": "Revenue", "Value": format_currency(m.revenue)},
        ]), hide_index=True, use_container_width=True)

    def _render_media_mix(self, view: ProjectView):
        project = view.project
        forecast = view.media_mix

        col1, col2 = st.columns([2, 1])
        with col1:
            shown_budget = input_value(view.sim_budget)
            manual = st.number_input("Simulation budget", value=shown_budget, step=100000.0,
                                     key=f"sim_budget_{project.id}")
            if manual != shown_budget:
                self._dispatch(SetManualMediaBudget(project.id, manual))
        with col2:
            if view.budget_overridden:
                st.caption(f"Manual override (plan: {format_currency(view.planned_budget)})")
                if st.button("Reset to plan budget", key=f"reset_sim_{project.id}"):
                    self._dispatch(SetManualMediaBudget(project.id, None))

        if not forecast.allocation_valid:
            st.error(f"Channel allocation totals {forecast.total_allocation:.1f}%, it should be 100%.")

        forecasts = forecast.by_channel()
        for channel in project.media_plan:
            f = forecasts[channel.id]
            cols = st.columns([2, 1, 1, 1, 1, 1, 1, 1])
            cols[0].write(f"**{channel.name}**")
            allocation = cols[1].number_input("Alloc %", value=float(f.allocation_percent),
                                              key=f"alloc_{project.id}_{channel.id}")
            if allocation != f.allocation_percent:
                self._dispatch(SetChannelField(project.id, channel.id, 'allocation_percent', allocation))
            shown_budget = input_value(f.budget)
            budget = cols[2].number_input("Budget", value=shown_budget, step=10000.0,
                                          key=f"budget_{project.id}_{channel.id}")
            if abs(budget - shown_budget) > 0.5:
                self._dispatch(SetChannelBudget(project.id, channel.id, budget, view.view_mode))
            for col, field, label in ((cols[3], 'estimated_cpl', "CPL"),
                                      (cols[4], 'capi_percent', "CAPI %"),
                                      (cols[5], 'capi_to_ap_percent', "CAPI→AP %"),
                                      (cols[6], 'ap_to_ad_percent', "AP→AD %")):
                value = col.number_input(label, value=float(getattr(channel, field)),
                                         key=f"{field}_{project.id}_{channel.id}")
                if value != getattr(channel, field):
                    self._dispatch(SetChannelField(project.id, channel.id, field, value))
            if cols[7].button("✖", key=f"del_channel_{project.id}_{channel.id}"):
                self._dispatch(DeleteChannel(project.id, channel.id))

        st.dataframe(pd.DataFrame([
            {"Channel": f.name, "Budget": format_currency(f.budget), "Leads": round_half_up(f.leads),
             "Qualified": round_half_up(f.qualified), "AP": round_half_up(f.ap), "AD": round_half_up(f.ad)}
            for f in forecast.channels
        ] + [
            {"Channel": "Total", "Budget": format_currency(forecast.total_budget),
             "Leads": round_half_up(forecast.total_leads), "Qualified": round_half_up(forecast.total_qualified),
             "AP": round_half_up(forecast.total_ap), "AD": round_half_up(forecast.total_ad)}
        ]), hide_index=True, use_container_width=True)
        st.caption(f"Blended CPL: {format_ratio_value(forecast.blended_cpl)}")

        col1, col2 = st.columns(2)
        with col1:
            target = forecast.target_walkins
            target = math.ceil(target) if math.isfinite(target) else target
            st.write(f"**Walk-ins:** plan {target:,.0f} · forecast {forecast.total_ad:,.0f}")
            st.progress(forecast.walkin_coverage_percent / 100)
            if forecast.walkins_covered:
                st.success("Forecast covers the walk-in target")
            else:
                st.error(f"Gap: {forecast.walkin_gap:,.0f} walk-ins")
        with col2:
            st.metric("Simulated CPW", format_ratio_value(forecast.forecast_cpw),
                      f"Plan: {format_currency(view.metrics.cpw)}", delta_color="off")

        col1, col2 = st.columns(2)
        with col1:
            preset = st.selectbox("Quick add", PRESET_CHANNELS, key=f"preset_{project.id}")
            if st.button("Add preset channel", key=f"add_preset_{project.id}"):
                self._dispatch(AddChannel(project.id, preset))
        with col2:
            custom = st.text_input("Custom channel", key=f"custom_channel_{project.id}")
            if st.button("Add custom channel", key=f"add_custom_{project.id}") and custom.strip():
                self._dispatch(AddChannel(project.id, custom.strip()))

    def _render_wow_plan(self, view: ProjectView):
        project = view.project
        locked = project.is_locked
        totals = view.distribution

        for week in view.weeks:
            cols = st.columns([1, 2, 1, 1, 1, 1, 1, 1, 2])
            cols[0].write(week.week_label)
            cols[1].caption(week.date_range)
            for col, field in ((cols[2], 'spend_distribution'),
                               (cols[3], 'lead_distribution'),
                               (cols[4], 'ad_conversion')):
                value = col.number_input(field.replace('_', ' ').title(), value=float(getattr(week, field)),
                                         disabled=locked, label_visibility="collapsed",
                                         key=f"{field}_{project.id}_{week.id}")
                if value != getattr(week, field):
                    self._dispatch(SetWeekField(project.id, week.id, field, value))
            cols[5].write(f"{week.leads:,.0f}")
            cols[6].write(f"{week.ap:,.0f}")
            cols[7].write(f"{week.ad:,.0f}")
            spends = week.spends_all_in if view.view_mode == ViewMode.AGENCY else week.spends_base
            cols[8].write(format_currency(spends))

        if not totals.spend_distribution_complete:
            st.warning(f"Spend distribution totals {totals.spend_distribution:.1f}%")
        if not totals.lead_distribution_complete:
            st.warning(f"Lead distribution totals {totals.lead_distribution:.1f}%")
        st.caption(
            f"Totals: {totals.leads:,.0f} leads · {totals.ap:,.0f} AP · {totals.ad:,.0f} AD · "
            f"avg AD conversion {totals.average_ad_conversion:.2f}%"
        )

    def _render_performance(self, view: ProjectView):
        project = view.project
        fields = [('leads', "Leads"), ('ap', "AP"), ('ad', "AD"), ('spends', "Spends (base)"),
                  ('bookings', "Digital Bookings"), ('presales_bookings', "Presales Bookings")]

        week_labels = {w.id: f"{w.week_label} ({w.date_range})" for w in view.weeks}
        week_id = st.selectbox("Week", list(week_labels), format_func=week_labels.get, key=f"perf_week_{project.id}")
        record = project.actuals.get(week_id)

        cols = st.columns(len(fields))
        for col, (field, label) in zip(cols, fields):
            current = getattr(record, field) if record else None
            value = col.number_input(label, value=current, min_value=0.0, key=f"actual_{project.id}_{week_id}_{field}")
            if value != current:
                self._dispatch(SetActualField(project.id, week_id, field, value))

        report = view.performance
        st.dataframe(pd.DataFrame([
            {
                "Week": r.week_label,
                "Target Leads": round_half_up(r.target_leads),
                "Actual Leads": r.actual_leads,
                "Target AD": round_half_up(r.target_ad),
                "Actual AD": r.actual_ad,
                "Target Spends": format_currency(r.target_spends),
                "Actual Spends": format_currency(r.actual_spends) if r.actual_spends is not None else "-",
                "Planned Bookings": round(r.planned_bookings, 1),
                "CPL": format_ratio_value(r.cpl),
                "CPW": format_ratio_value(r.cpw),
                "L2W %": round(r.l2w_percent, 2),
            }
            for r in report.rows
        ]), hide_index=True, use_container_width=True)

    def _render_channel_tracker(self, view: ProjectView):
        project = view.project
        fields = ['spends', 'leads', 'open_attempted', 'contacted', 'assigned_to_sales', 'ap', 'ad', 'bookings', 'lost']
        records = {r.channel_id: r for r in project.channel_performance}

        channel_names = {c.id: c.name for c in project.media_plan}
        if not channel_names:
            st.info("Add channels in the Media Mix tab first.")
            return

        channel_id = st.selectbox("Channel", list(channel_names), format_func=channel_names.get,
                                  key=f"tracker_channel_{project.id}")
        record = records.get(channel_id)
        cols = st.columns(len(fields))
        for col, field in zip(cols, fields):
            current = float(getattr(record, field)) if record else 0.0
            value = col.number_input(field.replace('_', ' ').title(), value=current, min_value=0.0,
                                     key=f"cp_{project.id}_{channel_id}_{field}")
            if value != current:
                self._dispatch(SetChannelPerformanceField(project.id, channel_id, field, value))

        report = view.channel_report
        st.dataframe(pd.DataFrame([
            {
                "Channel": r.name, "Spends": format_currency(r.spends), "Leads": r.leads,
                "CPL": format_ratio_value(r.cpl), "Assigned (CAPI)": r.assigned_to_sales,
                "AP": r.ap, "AD": r.ad, "Bookings": r.bookings,
                "CP-CAPI": format_ratio_value(r.cp_qualified), "CP-AP": format_ratio_value(r.cp_ap),
                "CP-AD": format_ratio_value(r.cp_ad),
            }
            for r in report.rows + [report.totals]
        ]), hide_index=True, use_container_width=True)

    def _render_validation(self, view: ProjectView):
        result = view.validation
        if not result.issues:
            return

        with st.expander(f"⚠️ Plan checks ({len(result.issues)})", expanded=not result.is_valid):
            for issue in result.issues:
                if issue.severity == ValidationSeverity.ERROR:
                    st.error(issue.message)
                elif issue.severity == ValidationSeverity.WARNING:
                    st.warning(issue.message)
                else:
                    st.info(issue.message)

    def _render_exports(self, project: Project, view_mode: ViewMode):
        with st.expander("📥 Export", expanded=False):
            reports = {
                "Business Plan": (f"{project.name}_Business_Plan", exporters.BUSINESS_PLAN_SHEET,
                                  lambda: exporters.build_business_plan_frame(project)),
                "Media Mix": (f"{project.name}_Media_Mix", exporters.MEDIA_MIX_SHEET,
                              lambda: exporters.build_media_mix_frame(project)),
                "WoW Plan": (f"{project.name}_WoW_Plan", exporters.WOW_PLAN_SHEET,
                             lambda: exporters.build_wow_plan_frame(project, view_mode)),
                "Performance": (f"{project.name}_Performance", exporters.PERFORMANCE_SHEET,
                                lambda: exporters.build_performance_frame(project, view_mode)),
                "Channel Tracker": (f"{project.name}_Channel_Tracker", exporters.CHANNEL_TRACKER_SHEET,
                                    lambda: exporters.build_channel_tracker_frame(project, view_mode)),
            }

            cols = st.columns(len(reports))
            for col, (label, (prefix, sheet, build)) in zip(cols, reports.items()):
                with col:
                    st.download_button(
                        label=label,
                        data=exporters.workbook_bytes({sheet: build()}),
                        file_name=exporters.export_filename(prefix),
                        mime=XLSX_MIME,
                        key=f"download_{project.id}_{sheet}"
                    )


def render_sidebar(default_view_mode: ViewMode, report_start: date, report_end: date) -> Dict[str, Any]:
    """Render global controls and return the chosen view mode and report dates."""
    with st.sidebar:
        st.header("⚙️ Settings")
        modes = [ViewMode.BRAND, ViewMode.AGENCY]
        view_mode = st.radio(
            "Spend view", modes, index=modes.index(default_view_mode),
            format_func=lambda m: "Brand (base)" if m == ViewMode.BRAND else "Agency (all-in)",
            key="view_mode"
        )
        start = st.date_input("Report from", value=report_start, key="report_start")
        end = st.date_input("Report to", value=report_end, key="report_end")

    return {'view_mode': view_mode, 'report_start': start, 'report_end': end}


def render_window_caption(window: ReportingWindow, week_labels: List[str]):
    if window.empty:
        st.caption("Reporting window covers no campaign weeks.")
    elif week_labels:
        last = min(window.end_week, len(week_labels) - 1)
        st.caption(f"Reporting {week_labels[min(window.start_week, last)]} to {week_labels[last]}")
