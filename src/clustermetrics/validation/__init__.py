"""
Validation and error handling for the clustermetrics package.

This module provides configuration value validation and consistent
log-then-raise error handling for the package edges.
"""

from .exceptions import (
    AggregatorClosedError,
    ErrorSeverity,
    ValidationError,
    handle_aggregation_error,
    handle_config_error,
    handle_error,
)
from .validators import (
    validate_boolean,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
)

__all__ = [
    # Core functionality
    "AggregatorClosedError",
    "ErrorSeverity",
    "ValidationError",
    "handle_error",
    "handle_config_error",
    "handle_aggregation_error",
    # Validators
    "validate_boolean",
    "validate_enum_choice",
    "validate_positive_float",
    "validate_positive_integer",
]
