"""
Configuration management for the clustermetrics package.

Settings for the aggregation worker, frame export and logging are read from
``conf/config.toml``, validated section by section and cached process-wide.
"""

# Main configuration interface
from .manager import (
    clear_config_cache,
    configure_logging,
    get_config,
    get_config_info,
    is_config_loaded,
    set_config_path,
)

# Lower-level loading and per-section validation
from .loader import load_main_config, load_toml_file, resolve_config_path
from .settings import AggregationConfig, AppConfig, ExportConfig, LoggingConfig
from .validators import (
    validate_aggregation_config,
    validate_app_config,
    validate_export_config,
    validate_logging_config,
)

__all__ = [
    # Main interface
    "get_config",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    "configure_logging",
    # Settings
    "AppConfig",
    "AggregationConfig",
    "ExportConfig",
    "LoggingConfig",
    # Advanced interface
    "load_toml_file",
    "load_main_config",
    "resolve_config_path",
    "validate_app_config",
    "validate_aggregation_config",
    "validate_export_config",
    "validate_logging_config",
]
