"""
Configuration validation utilities.

Each section of ``config.toml`` is validated into its dataclass. Missing keys
take the dataclass defaults; present keys must be well-formed.
"""

import logging
from typing import Any, Dict

from ..validation import (
    ValidationError,
    validate_boolean,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
)
from .settings import AggregationConfig, AppConfig, ExportConfig, LoggingConfig

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def validate_aggregation_config(data: Dict[str, Any]) -> AggregationConfig:
    """
    Validate the ``[aggregation]`` section.

    Args:
        data: Raw section from TOML

    Returns:
        Validated AggregationConfig instance

    Raises:
        ValidationError: If validation fails
    """
    defaults = AggregationConfig()

    queue_size = validate_positive_integer(
        data.get("queue_size", defaults.queue_size),
        min_value=1,
        max_value=1_000_000,
        field_name="aggregation.queue_size",
    )
    queue_timeout = validate_positive_float(
        data.get("queue_timeout", defaults.queue_timeout),
        min_value=0.001,  # 1ms minimum
        max_value=10.0,
        field_name="aggregation.queue_timeout",
    )
    submit_timeout = validate_positive_float(
        data.get("submit_timeout", defaults.submit_timeout),
        min_value=0.0,
        max_value=300.0,
        field_name="aggregation.submit_timeout",
    )
    join_timeout = validate_positive_float(
        data.get("join_timeout", defaults.join_timeout),
        min_value=0.1,
        max_value=600.0,
        field_name="aggregation.join_timeout",
    )

    thread_name = data.get("thread_name", defaults.thread_name)
    if not isinstance(thread_name, str) or not thread_name.strip():
        raise ValidationError(
            "aggregation.thread_name must be a non-empty string",
            field_name="aggregation.thread_name",
            value=thread_name,
        )

    return AggregationConfig(
        queue_size=queue_size,
        queue_timeout=queue_timeout,
        submit_timeout=submit_timeout,
        join_timeout=join_timeout,
        thread_name=thread_name.strip(),
    )


def validate_export_config(data: Dict[str, Any]) -> ExportConfig:
    """Validate the ``[export]`` section."""
    defaults = ExportConfig()

    include_empty = validate_boolean(
        data.get("include_empty_segments", defaults.include_empty_segments),
        field_name="export.include_empty_segments",
    )
    time_zone = data.get("time_zone", defaults.time_zone)
    if not isinstance(time_zone, str) or not time_zone:
        raise ValidationError(
            "export.time_zone must be a non-empty string",
            field_name="export.time_zone",
            value=time_zone,
        )

    return ExportConfig(include_empty_segments=include_empty, time_zone=time_zone)


def validate_logging_config(data: Dict[str, Any]) -> LoggingConfig:
    """Validate the ``[logging]`` section. The level is matched case-insensitively."""
    defaults = LoggingConfig()

    level = validate_enum_choice(
        data.get("level", defaults.level),
        valid_choices=LOG_LEVELS,
        field_name="logging.level",
        case_sensitive=False,
    )
    log_format = data.get("format", defaults.format)
    if not isinstance(log_format, str) or not log_format:
        raise ValidationError(
            "logging.format must be a non-empty string",
            field_name="logging.format",
            value=log_format,
        )

    return LoggingConfig(level=level, format=log_format)


def validate_app_config(config_data: Dict[str, Any]) -> AppConfig:
    """
    Validate a whole parsed ``config.toml``.

    Unknown top-level sections are ignored with a warning so that a config
    file shared with other tools still loads.
    """
    known = {"aggregation", "export", "logging"}
    for section in config_data:
        if section not in known:
            logger.warning(f"Ignoring unknown configuration section: [{section}]")

    for section in known:
        if not isinstance(config_data.get(section, {}), dict):
            raise ValidationError(
                f"[{section}] must be a table",
                field_name=section,
                value=config_data.get(section),
            )

    return AppConfig(
        aggregation=validate_aggregation_config(config_data.get("aggregation", {})),
        export=validate_export_config(config_data.get("export", {})),
        logging=validate_logging_config(config_data.get("logging", {})),
    )
