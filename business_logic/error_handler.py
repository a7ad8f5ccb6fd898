"""
Error handling and user feedback for the campaign planner.

The calculation core never raises for numeric edge cases; exceptions only
occur at the edges (state commands, workbook export, snapshot storage).
This module defines those exceptions and turns any raised error into
structured, user-facing feedback.
"""

import logging
from typing import Dict, Any, Optional
from enum import Enum
from dataclasses import dataclass
from datetime import datetime, timedelta

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class CommandError(Exception):
    """A state command referenced an unknown project, week, channel or field."""
    pass


class ExportError(Exception):
    """A workbook could not be written."""
    pass


class SnapshotError(ValueError):
    """A stored portfolio snapshot could not be decoded."""
    pass


class ErrorSeverity(Enum):
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for better classification."""
    COMMAND_ERROR = "command_error"
    EXPORT_ERROR = "export_error"
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


@dataclass
class ErrorInfo:
    """Structured error information."""
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    user_message: str
    technical_details: Optional[str] = None
    suggested_action: Optional[str] = None
    timestamp: datetime = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()


class ErrorHandler:
    """
    Centralized error classification and user feedback.

    Maps exceptions raised by commands, exports and snapshot storage to
    ErrorInfo records, shapes them into UI notifications and keeps a short
    history for diagnostics.
    """

    def __init__(self, history_limit: int = 100):
        self.error_history = []
        self.history_limit = history_limit

    def handle_command_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """
        Handle a rejected state command.

        Args:
            error: The command exception
            context: Additional context about the operation

        Returns:
            ErrorInfo object with structured error information
        """
        return ErrorInfo(
            category=ErrorCategory.COMMAND_ERROR,
            severity=ErrorSeverity.WARNING,
            message=f"Command rejected in {context}: {str(error)}",
            user_message=f"The change could not be applied: {str(error)}",
            suggested_action="Refresh the page and check the project still exists.",
        )

    def handle_export_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """
        Handle workbook export failures.

        Args:
            error: The export or file system exception
            context: Additional context about the operation

        Returns:
            ErrorInfo object with structured error information
        """
        error_str = str(error).lower()

        if isinstance(error, PermissionError) or "permission denied" in error_str:
            return ErrorInfo(
                category=ErrorCategory.EXPORT_ERROR,
                severity=ErrorSeverity.ERROR,
                message=f"Export permission error: {str(error)}",
                user_message="The report could not be saved because the export folder is not writable.",
                suggested_action="Check the EXPORT_DIR setting and folder permissions.",
            )

        if isinstance(error, FileNotFoundError) or "no such file" in error_str:
            return ErrorInfo(
                category=ErrorCategory.EXPORT_ERROR,
                severity=ErrorSeverity.ERROR,
                message=f"Export location missing: {str(error)}",
                user_message="The export folder does not exist.",
                suggested_action="Create the export folder or point EXPORT_DIR to an existing one.",
            )

        return ErrorInfo(
            category=ErrorCategory.EXPORT_ERROR,
            severity=ErrorSeverity.ERROR,
            message=f"Export failed in {context}: {str(error)}",
            user_message="The report could not be generated.",
            technical_details=str(error),
            suggested_action="Try the export again. Contact support if the problem persists.",
        )

    def handle_storage_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """
        Handle snapshot read/write failures.

        Args:
            error: The storage exception
            context: Additional context about the operation

        Returns:
            ErrorInfo object with structured error information
        """
        if isinstance(error, SnapshotError):
            return ErrorInfo(
                category=ErrorCategory.STORAGE_ERROR,
                severity=ErrorSeverity.ERROR,
                message=f"Corrupt snapshot in {context}: {str(error)}",
                user_message="The saved portfolio could not be read.",
                technical_details=str(error),
                suggested_action="Clear the saved snapshot to start again from the sample portfolio.",
            )

        return ErrorInfo(
            category=ErrorCategory.STORAGE_ERROR,
            severity=ErrorSeverity.ERROR,
            message=f"Storage error in {context}: {str(error)}",
            user_message="The portfolio could not be saved or loaded.",
            technical_details=str(error),
            suggested_action="Check the SNAPSHOT_DIR setting and folder permissions.",
        )

    def classify_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """
        Classify an error and return appropriate ErrorInfo.

        Args:
            error: The exception to classify
            context: Additional context about the operation

        Returns:
            ErrorInfo object with structured error information
        """
        if isinstance(error, CommandError):
            return self.handle_command_error(error, context)

        elif isinstance(error, SnapshotError):
            return self.handle_storage_error(error, context)

        elif isinstance(error, (ExportError, OSError)):
            if "snapshot" in context.lower():
                return self.handle_storage_error(error, context)
            return self.handle_export_error(error, context)

        # Generic system error
        return ErrorInfo(
            category=ErrorCategory.SYSTEM_ERROR,
            severity=ErrorSeverity.ERROR,
            message=f"Unexpected error in {context}: {str(error)}",
            user_message="An unexpected error occurred. Please try again or contact support.",
            technical_details=str(error),
            suggested_action="Try again. If the problem persists, contact support with the error details.",
        )

    def create_user_notification(self, error_info: ErrorInfo) -> Dict[str, Any]:
        """
        Create a user-friendly notification from error information.

        Args:
            error_info: Structured error information

        Returns:
            Dictionary with notification data for UI display
        """
        # Map severity to UI notification types
        notification_type_map = {
            ErrorSeverity.INFO: "info",
            ErrorSeverity.WARNING: "warning",
            ErrorSeverity.ERROR: "error",
            ErrorSeverity.CRITICAL: "error"
        }

        notification = {
            'type': notification_type_map[error_info.severity],
            'title': self._get_error_title(error_info),
            'message': error_info.user_message,
            'timestamp': error_info.timestamp.isoformat(),
            'dismissible': error_info.severity in [ErrorSeverity.INFO, ErrorSeverity.WARNING],
        }

        if error_info.suggested_action:
            notification['action'] = error_info.suggested_action

        if error_info.technical_details and error_info.severity in [ErrorSeverity.ERROR, ErrorSeverity.CRITICAL]:
            notification['technical_details'] = error_info.technical_details

        return notification

    def _get_error_title(self, error_info: ErrorInfo) -> str:
        """Get appropriate title for error notification."""
        title_map = {
            ErrorCategory.COMMAND_ERROR: "Change Not Applied",
            ErrorCategory.EXPORT_ERROR: "Export Error",
            ErrorCategory.STORAGE_ERROR: "Storage Error",
            ErrorCategory.SYSTEM_ERROR: "System Error",
        }

        return title_map.get(error_info.category, "Error")

    def log_error(self, error_info: ErrorInfo, context: str = ""):
        """
        Log error information for monitoring and debugging.

        Args:
            error_info: Structured error information
            context: Additional context
        """
        self.error_history.append(error_info)

        # Keep only recent errors
        if len(self.error_history) > self.history_limit:
            self.error_history = self.error_history[-self.history_limit:]

        log_message = f"{context}: {error_info.message}"

        if error_info.severity == ErrorSeverity.CRITICAL:
            logger.critical(log_message)
        elif error_info.severity == ErrorSeverity.ERROR:
            logger.error(log_message)
        elif error_info.severity == ErrorSeverity.WARNING:
            logger.warning(log_message)
        else:
            logger.info(log_message)

    def get_error_statistics(self) -> Dict[str, Any]:
        """
        Get error statistics for monitoring.

        Returns:
            Dictionary with error statistics
        """
        if not self.error_history:
            return {'total_errors': 0}

        category_counts = {}
        severity_counts = {}

        recent_errors = [
            err for err in self.error_history
            if err.timestamp > datetime.now() - timedelta(hours=24)
        ]

        for error in recent_errors:
            category_counts[error.category.value] = category_counts.get(error.category.value, 0) + 1
            severity_counts[error.severity.value] = severity_counts.get(error.severity.value, 0) + 1

        return {
            'total_errors': len(self.error_history),
            'recent_errors_24h': len(recent_errors),
            'category_breakdown': category_counts,
            'severity_breakdown': severity_counts,
        }


# Global error handler instance
error_handler = ErrorHandler()
