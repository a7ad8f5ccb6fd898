"""
Project Controller - owns the portfolio state and applies edits to it.

Every edit from the front end is expressed as a command dataclass and
applied by a single reducer that returns a new AppState, leaving the
previous one untouched. Read models (metrics, distributed weeks,
reconciliation, media mix forecast) are recomputed from the current
state on every request.
"""

import logging
import uuid
from dataclasses import dataclass, fields, replace
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from models.data_models import (
    CalculatedMetrics, ChannelPerformance, MediaChannel, PlanningData, Poc, Project,
    ProjectStatus, ReportingWindow, ViewMode, WeeklyActuals, WeeklyData
)
from config.settings import config_manager
from .channel_performance import ChannelPerformanceReport, aggregate_channel_performance
from .error_handler import CommandError, error_handler
from .funnel_calculator import calculate_metrics, plan_budget, tax_multiplier
from .media_mix import (
    MediaMixForecast, add_channel, default_media_plan, delete_channel, forecast_media_mix,
    is_budget_overridden, resolve_simulation_budget, set_channel_budget
)
from .plan_validator import PlanValidator, ValidationResult
from .portfolio import (
    ALL_POCS, ALL_PROJECTS, MasterReportRow, PortfolioAnalytics, filter_by_poc, master_report,
    portfolio_analytics
)
from .reconciliation import PeriodReconciliation, WeeklyPerformanceReport, reconcile_period, weekly_performance
from .weekly_distribution import DistributionTotals, distribute_weeks, distribution_totals, generate_weeks

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Received budget is a project-level figure, edited through SetProjectField only
PLAN_FIELDS = {f.name for f in fields(PlanningData)} - {'received_budget'}
WEEK_FIELDS = {'spend_distribution', 'lead_distribution', 'ad_conversion'}
ACTUAL_FIELDS = {f.name for f in fields(WeeklyActuals)} - {'week_id'}
CHANNEL_FIELDS = {f.name for f in fields(MediaChannel)} - {'id'}
PERFORMANCE_FIELDS = {f.name for f in fields(ChannelPerformance)} - {'channel_id'}
PROJECT_FIELDS = {'received_budget', 'other_spends', 'location', 'status'}


def default_plan() -> PlanningData:
    """Business plan every new project starts from."""
    return PlanningData(
        overall_bv=350,
        ats=7,
        digital_contribution_percent=12.5,
        presales_contribution_percent=2.5,
        ltw_percent=3,
        wtb_percent=6,
        cpl=4819,
        tax_percent=18,
        received_budget=0
    )


@dataclass(frozen=True)
class AppState:
    """Immutable snapshot of every project and POC."""
    projects: Tuple[Project, ...] = ()
    pocs: Tuple[Poc, ...] = ()

    def get_project(self, project_id: str) -> Project:
        for project in self.projects:
            if project.id == project_id:
                return project
        raise CommandError(f"Unknown project '{project_id}'")


# Commands

@dataclass(frozen=True)
class SetPlanField:
    project_id: str
    field: str
    value: float


@dataclass(frozen=True)
class SetProjectField:
    project_id: str
    field: str
    value: Any


@dataclass(frozen=True)
class SetManualMediaBudget:
    project_id: str
    value: Optional[float]


@dataclass(frozen=True)
class SetWeekField:
    project_id: str
    week_id: int
    field: str
    value: float


@dataclass(frozen=True)
class SetActualField:
    project_id: str
    week_id: int
    field: str
    value: Optional[float]


@dataclass(frozen=True)
class SetChannelField:
    project_id: str
    channel_id: str
    field: str
    value: Any


@dataclass(frozen=True)
class SetChannelBudget:
    """Edit a channel's absolute budget; stored as the equivalent allocation."""
    project_id: str
    channel_id: str
    budget: float
    view_mode: ViewMode = ViewMode.BRAND


@dataclass(frozen=True)
class AddChannel:
    project_id: str
    name: Optional[str] = None
    channel_id: Optional[str] = None


@dataclass(frozen=True)
class DeleteChannel:
    project_id: str
    channel_id: str


@dataclass(frozen=True)
class SetChannelPerformanceField:
    project_id: str
    channel_id: str
    field: str
    value: float


@dataclass(frozen=True)
class ToggleLock:
    project_id: str


@dataclass(frozen=True)
class AddProject:
    name: str = "New Project"
    poc: str = ""
    location: str = ""
    project_id: Optional[str] = None
    campaign_start: Optional[date] = None


@dataclass(frozen=True)
class DeleteProject:
    project_id: str


@dataclass(frozen=True)
class RenameProject:
    project_id: str
    name: str


@dataclass(frozen=True)
class SetProjectPoc:
    project_id: str
    poc: str


@dataclass(frozen=True)
class AddPoc:
    name: str
    poc_id: Optional[str] = None


# Reducer

def _update_project(state: AppState, project_id: str, update: Callable[[Project], Project]) -> AppState:
    state.get_project(project_id)
    return replace(state, projects=tuple(
        update(p) if p.id == project_id else p for p in state.projects
    ))


def _require_field(name: str, allowed, kind: str):
    if name not in allowed:
        raise CommandError(f"Unknown {kind} field '{name}'")


def _require_week(project: Project, week_id: int):
    if not any(w.id == week_id for w in project.weeks):
        raise CommandError(f"Unknown week {week_id} in project '{project.id}'")


def _require_channel(project: Project, channel_id: str):
    if not any(c.id == channel_id for c in project.media_plan):
        raise CommandError(f"Unknown channel '{channel_id}' in project '{project.id}'")


def _rejected_when_locked(state: AppState, project_id: str, command) -> bool:
    project = state.get_project(project_id)
    if project.is_locked:
        logger.warning(f"Ignoring {type(command).__name__} on locked project '{project.name}'")
        return True
    return False


def _set_plan_field(state: AppState, command: SetPlanField) -> AppState:
    _require_field(command.field, PLAN_FIELDS, "plan")
    if _rejected_when_locked(state, command.project_id, command):
        return state
    return _update_project(state, command.project_id, lambda p: replace(
        p, plan=replace(p.plan, **{command.field: command.value})
    ))


def _set_project_field(state: AppState, command: SetProjectField) -> AppState:
    _require_field(command.field, PROJECT_FIELDS, "project")

    def update(project: Project) -> Project:
        if command.field == 'received_budget':
            return replace(project, plan=replace(project.plan, received_budget=command.value))
        if command.field == 'status':
            try:
                return replace(project, status=ProjectStatus(command.value))
            except ValueError as e:
                raise CommandError(f"Unknown project status '{command.value}'") from e
        return replace(project, **{command.field: command.value})

    return _update_project(state, command.project_id, update)


def _set_manual_media_budget(state: AppState, command: SetManualMediaBudget) -> AppState:
    return _update_project(state, command.project_id, lambda p: replace(
        p, manual_media_budget=command.value
    ))


def _set_week_field(state: AppState, command: SetWeekField) -> AppState:
    _require_field(command.field, WEEK_FIELDS, "week")
    _require_week(state.get_project(command.project_id), command.week_id)
    if _rejected_when_locked(state, command.project_id, command):
        return state
    return _update_project(state, command.project_id, lambda p: replace(p, weeks=[
        replace(w, **{command.field: command.value}) if w.id == command.week_id else w
        for w in p.weeks
    ]))


def _set_actual_field(state: AppState, command: SetActualField) -> AppState:
    _require_field(command.field, ACTUAL_FIELDS, "actuals")
    _require_week(state.get_project(command.project_id), command.week_id)

    def update(project: Project) -> Project:
        actuals = dict(project.actuals)
        record = actuals.get(command.week_id) or WeeklyActuals(week_id=command.week_id)
        actuals[command.week_id] = replace(record, **{command.field: command.value})
        return replace(project, actuals=actuals)

    return _update_project(state, command.project_id, update)


def _set_channel_field(state: AppState, command: SetChannelField) -> AppState:
    _require_field(command.field, CHANNEL_FIELDS, "channel")
    _require_channel(state.get_project(command.project_id), command.channel_id)
    return _update_project(state, command.project_id, lambda p: replace(p, media_plan=[
        replace(c, **{command.field: command.value}) if c.id == command.channel_id else c
        for c in p.media_plan
    ]))


def _set_channel_budget(state: AppState, command: SetChannelBudget) -> AppState:
    project = state.get_project(command.project_id)
    _require_channel(project, command.channel_id)
    sim_budget = resolve_simulation_budget(
        calculate_metrics(project.plan), command.view_mode, project.manual_media_budget
    )
    return _update_project(state, command.project_id, lambda p: replace(
        p, media_plan=set_channel_budget(p.media_plan, command.channel_id, command.budget, sim_budget)
    ))


def _add_channel(state: AppState, command: AddChannel) -> AppState:
    return _update_project(state, command.project_id, lambda p: replace(
        p, media_plan=add_channel(p.media_plan, command.name, command.channel_id)
    ))


def _delete_channel(state: AppState, command: DeleteChannel) -> AppState:
    _require_channel(state.get_project(command.project_id), command.channel_id)
    return _update_project(state, command.project_id, lambda p: replace(
        p,
        media_plan=delete_channel(p.media_plan, command.channel_id),
        channel_performance=[r for r in p.channel_performance if r.channel_id != command.channel_id]
    ))


def _set_channel_performance_field(state: AppState, command: SetChannelPerformanceField) -> AppState:
    _require_field(command.field, PERFORMANCE_FIELDS, "channel performance")
    _require_channel(state.get_project(command.project_id), command.channel_id)

    def update(project: Project) -> Project:
        records = list(project.channel_performance)
        for i, record in enumerate(records):
            if record.channel_id == command.channel_id:
                records[i] = replace(record, **{command.field: command.value})
                break
        else:
            records.append(ChannelPerformance(channel_id=command.channel_id, **{command.field: command.value}))
        return replace(project, channel_performance=records)

    return _update_project(state, command.project_id, update)


def _toggle_lock(state: AppState, command: ToggleLock) -> AppState:
    new_state = _update_project(state, command.project_id, lambda p: replace(p, is_locked=not p.is_locked))
    project = new_state.get_project(command.project_id)
    logger.info(f"Project '{project.name}' {'locked' if project.is_locked else 'unlocked'}")
    return new_state


def _add_project(state: AppState, command: AddProject) -> AppState:
    campaign_start = command.campaign_start or config_manager.get_campaign_start()
    config = config_manager.load_config()

    project = Project(
        id=command.project_id or uuid.uuid4().hex[:8],
        name=command.name,
        plan=default_plan(),
        weeks=generate_weeks(campaign_start, config.campaign_weeks),
        location=command.location,
        poc=command.poc,
        media_plan=default_media_plan()
    )
    if any(p.id == project.id for p in state.projects):
        raise CommandError(f"Project id '{project.id}' already exists")

    logger.info(f"Created project '{project.name}' ({project.id})")
    return replace(state, projects=state.projects + (project,))


def _delete_project(state: AppState, command: DeleteProject) -> AppState:
    project = state.get_project(command.project_id)
    logger.info(f"Deleted project '{project.name}' ({project.id})")
    return replace(state, projects=tuple(p for p in state.projects if p.id != command.project_id))


def _rename_project(state: AppState, command: RenameProject) -> AppState:
    return _update_project(state, command.project_id, lambda p: replace(p, name=command.name))


def _set_project_poc(state: AppState, command: SetProjectPoc) -> AppState:
    return _update_project(state, command.project_id, lambda p: replace(p, poc=command.poc))


def _add_poc(state: AppState, command: AddPoc) -> AppState:
    poc = Poc(id=command.poc_id or uuid.uuid4().hex[:8], name=command.name)
    logger.info(f"Added POC '{poc.name}'")
    return replace(state, pocs=state.pocs + (poc,))


COMMAND_HANDLERS: Dict[type, Callable[[AppState, Any], AppState]] = {
    SetPlanField: _set_plan_field,
    SetProjectField: _set_project_field,
    SetManualMediaBudget: _set_manual_media_budget,
    SetWeekField: _set_week_field,
    SetActualField: _set_actual_field,
    SetChannelField: _set_channel_field,
    SetChannelBudget: _set_channel_budget,
    AddChannel: _add_channel,
    DeleteChannel: _delete_channel,
    SetChannelPerformanceField: _set_channel_performance_field,
    ToggleLock: _toggle_lock,
    AddProject: _add_project,
    DeleteProject: _delete_project,
    RenameProject: _rename_project,
    SetProjectPoc: _set_project_poc,
    AddPoc: _add_poc,
}


def apply_command(state: AppState, command) -> AppState:
    """
    Apply one command and return the resulting state.

    Args:
        state: Current application state (not modified)
        command: One of the command dataclasses of this module

    Returns:
        New AppState; the same object when the command was rejected by a lock

    Raises:
        CommandError: For unknown commands, ids or field names
    """
    handler = COMMAND_HANDLERS.get(type(command))
    if handler is None:
        raise CommandError(f"Unsupported command {type(command).__name__}")
    return handler(state, command)


# Read model

@dataclass(frozen=True)
class ProjectView:
    """Everything the front end renders for one project."""
    project: Project
    view_mode: ViewMode
    window: ReportingWindow
    metrics: CalculatedMetrics
    planned_budget: float
    tax_multiplier: float
    weeks: List[WeeklyData]
    distribution: DistributionTotals
    reconciliation: PeriodReconciliation
    performance: WeeklyPerformanceReport
    sim_budget: float
    budget_overridden: bool
    media_mix: MediaMixForecast
    channel_report: ChannelPerformanceReport
    validation: ValidationResult


def project_view(project: Project,
                 view_mode: ViewMode,
                 window: Optional[ReportingWindow] = None,
                 validator: Optional[PlanValidator] = None) -> ProjectView:
    """
    Derive every read model of a project.

    Args:
        project: Project to project
        view_mode: Spend presentation
        window: Reporting window; whole campaign when omitted
        validator: Validator to run; a default one when omitted

    Returns:
        ProjectView
    """
    metrics = calculate_metrics(project.plan)
    weeks = distribute_weeks(project.weeks, metrics)
    window = window or ReportingWindow.full_campaign(len(weeks))
    config = config_manager.load_config()
    thresholds = config_manager.get_delivery_thresholds()
    validator = validator or PlanValidator(config.allocation_tolerance)

    sim_budget = resolve_simulation_budget(metrics, view_mode, project.manual_media_budget)
    tax_mult = tax_multiplier(project.plan, view_mode)

    return ProjectView(
        project=project,
        view_mode=view_mode,
        window=window,
        metrics=metrics,
        planned_budget=plan_budget(metrics, view_mode),
        tax_multiplier=tax_mult,
        weeks=weeks,
        distribution=distribution_totals(weeks),
        reconciliation=reconcile_period(project, weeks, window, view_mode, metrics, thresholds),
        performance=weekly_performance(project, weeks, view_mode),
        sim_budget=sim_budget,
        budget_overridden=is_budget_overridden(project.manual_media_budget, plan_budget(metrics, view_mode)),
        media_mix=forecast_media_mix(
            project.media_plan, sim_budget, config.allocation_tolerance, metrics.target_walkins
        ),
        channel_report=aggregate_channel_performance(project.media_plan, project.channel_performance, tax_mult),
        validation=validator.validate_project(project, view_mode)
    )


class ProjectController:
    """
    Owner of the current AppState.

    Applies commands through the reducer and serves read models for the
    front end. Rejected commands are logged through the error handler and
    re-raised to the caller.
    """

    def __init__(self, state: Optional[AppState] = None, validator: Optional[PlanValidator] = None,
                 history_limit: int = 20):
        """
        Initialize the project controller.

        Args:
            state: Initial state; an empty portfolio when omitted
            validator: Optional PlanValidator instance
            history_limit: Number of earlier states kept for undo
        """
        self._state = state or AppState()
        self.plan_validator = validator or PlanValidator(config_manager.load_config().allocation_tolerance)
        self.history: List[AppState] = []
        self.history_limit = history_limit

        logger.info(f"ProjectController initialized with {len(self._state.projects)} projects")

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def projects(self) -> Tuple[Project, ...]:
        return self._state.projects

    @property
    def pocs(self) -> Tuple[Poc, ...]:
        return self._state.pocs

    def get_project(self, project_id: str) -> Project:
        return self._state.get_project(project_id)

    def dispatch(self, command) -> AppState:
        """
        Apply a command to the current state.

        Args:
            command: Command dataclass

        Returns:
            The new current state

        Raises:
            CommandError: When the command references unknown data
        """
        try:
            new_state = apply_command(self._state, command)
        except CommandError as e:
            error_info = error_handler.classify_error(e, type(command).__name__)
            error_handler.log_error(error_info, "Command dispatch")
            raise

        if new_state is not self._state:
            self.history.append(self._state)
            self._state = new_state

            # Keep only recent states
            if len(self.history) > self.history_limit:
                self.history = self.history[len(self.history) - self.history_limit:]
        return self._state

    def undo(self) -> AppState:
        """Restore the state before the last applied command."""
        if self.history:
            self._state = self.history.pop()
        return self._state

    def view(self, project_id: str, view_mode: ViewMode, window: Optional[ReportingWindow] = None) -> ProjectView:
        return project_view(self.get_project(project_id), view_mode, window, self.plan_validator)

    def master_report(self, view_mode: ViewMode, window: ReportingWindow, poc: str = ALL_POCS) -> List[MasterReportRow]:
        projects = filter_by_poc(self._state.projects, poc)
        return master_report(projects, window, view_mode, config_manager.get_delivery_thresholds())

    def analytics(self, view_mode: ViewMode, project_id: str = ALL_PROJECTS) -> PortfolioAnalytics:
        return portfolio_analytics(self._state.projects, view_mode, project_id)
