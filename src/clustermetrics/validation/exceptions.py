"""
Exception types and error handling helpers.

The merge engine itself never raises. Errors come from the edges: loading
configuration and misusing the aggregation worker. These helpers give those
edges one consistent way to log before propagating.
"""

import logging
from enum import Enum
from typing import Any, Optional, Union

_module_logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


_LOG_LEVELS = {
    ErrorSeverity.DEBUG: logging.DEBUG,
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


class ValidationError(Exception):
    """
    Exception raised when a configuration value fails validation.

    Carries the offending field and value so callers can report them.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class AggregatorClosedError(RuntimeError):
    """Raised when a snapshot is submitted to an aggregator that has stopped."""


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log an error with its context, then re-raise it unless told otherwise.

    Args:
        error: The exception that occurred
        context: Where the error occurred, e.g. "parsing config.toml"
        severity: Level to log at; DEBUG and CRITICAL include the traceback
        reraise: Whether to re-raise the exception after logging
        logger: Logger to use (defaults to this module's logger)
    """
    severity = ErrorSeverity(severity.lower()) if isinstance(severity, str) else severity
    level = _LOG_LEVELS[severity]
    with_traceback = severity in (ErrorSeverity.DEBUG, ErrorSeverity.CRITICAL)

    (logger or _module_logger).log(level, f"Error in {context}: {error}", exc_info=with_traceback)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_aggregation_error(error: Exception, context: str, **kwargs) -> None:
    """Handle errors raised around the aggregation worker."""
    handle_error(error, f"aggregation {context}", **kwargs)
