"""
Plan validation for campaign projects.

This module inspects a project's business plan, week distribution, media
mix and budget position and reports anomalies. Validation never blocks an
edit: invalid values are stored as entered and surface here as issues.
"""

import logging
import math
from typing import List, Optional
from dataclasses import dataclass
from enum import Enum

from models.data_models import Project, ReportingWindow, ViewMode
from .funnel_calculator import calculate_metrics
from .media_mix import ALLOCATION_TOLERANCE, forecast_media_mix, resolve_simulation_budget
from .reconciliation import reconcile_period
from .weekly_distribution import distribution_totals, project_weeks

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class ValidationIssue:
    """Represents a validation issue found on a project."""
    severity: ValidationSeverity
    message: str
    field: Optional[str] = None
    week_index: Optional[int] = None
    channel_id: Optional[str] = None


@dataclass
class ValidationResult:
    """Result of project validation."""
    is_valid: bool
    issues: List[ValidationIssue]
    total_errors: int
    total_warnings: int
    total_info: int = 0


class PlanValidator:
    """
    Validates a project's plan inputs and derived state.

    ERROR issues mark states whose derived numbers are meaningless (zero
    divisors, an unbalanced channel mix); WARNING and INFO issues are
    advisory.
    """

    def __init__(self, allocation_tolerance: float = ALLOCATION_TOLERANCE):
        """
        Initialize the plan validator.

        Args:
            allocation_tolerance: Allowed deviation of total channel allocation from 100
        """
        self.allocation_tolerance = allocation_tolerance
        self.distribution_tolerance = 1e-6

    def validate_project(self, project: Project, view_mode: ViewMode = ViewMode.BRAND) -> ValidationResult:
        """
        Run every validation rule against a project.

        Args:
            project: Project to validate
            view_mode: Spend presentation used for budget checks

        Returns:
            ValidationResult with all issues found
        """
        issues = []
        issues.extend(self._validate_plan_inputs(project))
        issues.extend(self._validate_distributions(project))
        issues.extend(self._validate_media_mix(project, view_mode))
        issues.extend(self._validate_budget(project, view_mode))

        result = self._create_validation_result(issues)
        if not result.is_valid:
            logger.warning(f"Project '{project.name}' has {result.total_errors} validation errors")
        return result

    def _validate_plan_inputs(self, project: Project) -> List[ValidationIssue]:
        plan = project.plan
        issues = []

        if not plan.ats > 0:
            issues.append(ValidationIssue(
                severity=ValidationSeverity.ERROR,
                message=f"ATS must be greater than zero (got {plan.ats}); unit targets are undefined",
                field='ats'
            ))

        if plan.ltw_percent == 0:
            issues.append(ValidationIssue(
                severity=ValidationSeverity.ERROR,
                message="Lead to walk-in conversion is 0%; target leads are unbounded",
                field='ltw_percent'
            ))

        if plan.wtb_percent == 0:
            issues.append(ValidationIssue(
                severity=ValidationSeverity.ERROR,
                message="Walk-in to booking conversion is 0%; target walk-ins are unbounded",
                field='wtb_percent'
            ))

        contribution = plan.digital_contribution_percent + plan.presales_contribution_percent
        if contribution > 100:
            issues.append(ValidationIssue(
                severity=ValidationSeverity.WARNING,
                message=f"Digital and presales contributions add up to {contribution:.1f}% of overall BV",
                field='digital_contribution_percent'
            ))

        return issues

    def _validate_distributions(self, project: Project) -> List[ValidationIssue]:
        totals = distribution_totals(project.weeks)
        issues = []

        for field, total in (('spend_distribution', totals.spend_distribution),
                             ('lead_distribution', totals.lead_distribution)):
            if not math.isclose(total, 100.0, abs_tol=self.distribution_tolerance):
                label = field.replace('_', ' ')
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    message=f"Weekly {label} totals {total:.2f}%, expected 100%",
                    field=field
                ))

        return issues

    def _validate_media_mix(self, project: Project, view_mode: ViewMode) -> List[ValidationIssue]:
        issues = []
        metrics = calculate_metrics(project.plan)
        sim_budget = resolve_simulation_budget(metrics, view_mode, project.manual_media_budget)
        forecast = forecast_media_mix(project.media_plan, sim_budget, self.allocation_tolerance)

        if project.media_plan and abs(forecast.total_allocation - 100) > self.allocation_tolerance:
            issues.append(ValidationIssue(
                severity=ValidationSeverity.ERROR,
                message=f"Channel allocation totals {forecast.total_allocation:.2f}%, expected 100%",
                field='allocation_percent'
            ))

        for channel in project.media_plan:
            if channel.allocation_percent and channel.allocation_percent > 0 and not channel.estimated_cpl:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.INFO,
                    message=f"Channel '{channel.name}' has budget but no CPL; its leads forecast is 0",
                    field='estimated_cpl',
                    channel_id=channel.id
                ))

        return issues

    def _validate_budget(self, project: Project, view_mode: ViewMode) -> List[ValidationIssue]:
        weeks = project_weeks(project)
        window = ReportingWindow.full_campaign(len(weeks))
        budget = reconcile_period(project, weeks, window, view_mode).budget

        if budget.over_budget:
            return [ValidationIssue(
                severity=ValidationSeverity.WARNING,
                message=f"Consumed spend exceeds received budget by {-budget.pending:,.0f}",
                field='received_budget'
            )]
        return []

    def _create_validation_result(self, issues: List[ValidationIssue]) -> ValidationResult:
        """
        Create a ValidationResult object with summary statistics.

        Args:
            issues: List of validation issues

        Returns:
            ValidationResult object
        """
        total_errors = sum(1 for issue in issues if issue.severity == ValidationSeverity.ERROR)
        total_warnings = sum(1 for issue in issues if issue.severity == ValidationSeverity.WARNING)
        total_info = sum(1 for issue in issues if issue.severity == ValidationSeverity.INFO)

        return ValidationResult(
            is_valid=total_errors == 0,
            issues=issues,
            total_errors=total_errors,
            total_warnings=total_warnings,
            total_info=total_info
        )

    def get_validation_summary(self, validation_result: ValidationResult) -> str:
        """
        Generate a human-readable summary of validation results.

        Args:
            validation_result: ValidationResult object

        Returns:
            Formatted summary string
        """
        summary_lines = []

        status = "PASSED" if validation_result.is_valid else "FAILED"
        summary_lines.append(f"Validation Status: {status}")

        if validation_result.total_errors > 0:
            summary_lines.append(f"Errors: {validation_result.total_errors}")

        if validation_result.total_warnings > 0:
            summary_lines.append(f"Warnings: {validation_result.total_warnings}")

        if validation_result.issues:
            summary_lines.append("\nIssues:")
            for issue in validation_result.issues:
                prefix = issue.severity.name
                location = ""

                if issue.week_index is not None:
                    location = f" [Week {issue.week_index + 1}]"
                elif issue.channel_id is not None:
                    location = f" [Channel {issue.channel_id}]"

                summary_lines.append(f"  {prefix}{location}: {issue.message}")

        return "\n".join(summary_lines)
