"""
Process-wide configuration.

``get_config()`` loads ``conf/config.toml`` on first use and caches the
validated AppConfig. Loading is serialized because aggregation workers and
producers may ask for the configuration from several threads at once.
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Optional, Union

from ..validation import ErrorSeverity, handle_config_error
from .loader import load_main_config, resolve_config_path
from .settings import AppConfig
from .validators import validate_app_config

logger = logging.getLogger(__name__)

_CONFIG: Optional[AppConfig] = None
_CONFIG_LOCK = threading.Lock()

# Bundled file at <repo>/conf/config.toml; replaced by set_config_path().
_CONFIG_FILE_PATH = Path(__file__).resolve().parents[3] / "conf" / "config.toml"


def set_config_path(config_path: Union[str, Path]) -> None:
    """
    Point the package at another config file, or a directory holding one.

    The cached configuration is dropped; the new file is read lazily.
    """
    global _CONFIG_FILE_PATH, _CONFIG
    with _CONFIG_LOCK:
        _CONFIG_FILE_PATH = resolve_config_path(config_path)
        _CONFIG = None
    logger.info(f"Configuration path set to: {_CONFIG_FILE_PATH}")


def clear_config_cache() -> None:
    """Forget the cached configuration so the next get_config() re-reads the file."""
    global _CONFIG
    with _CONFIG_LOCK:
        _CONFIG = None
    logger.debug("Configuration cache cleared")


def _load_config(config_path: Path) -> AppConfig:
    try:
        app_config = validate_app_config(load_main_config(config_path))
    except FileNotFoundError as e:
        handle_config_error(e, f"locating {config_path}", severity=ErrorSeverity.CRITICAL, logger=logger)
        raise
    except Exception as e:
        handle_config_error(e, f"loading {config_path}", severity=ErrorSeverity.CRITICAL, logger=logger)
        raise

    logger.info(
        f"Loaded configuration from {config_path} "
        f"(queue_size={app_config.aggregation.queue_size}, log level={app_config.logging.level})"
    )
    return app_config


def get_config() -> AppConfig:
    """
    Return the validated configuration, loading it on first call.

    Raises:
        FileNotFoundError: If the configuration file is missing
        ValidationError: If a section holds an invalid value
        tomllib.TOMLDecodeError: If the TOML file is malformed
    """
    global _CONFIG
    with _CONFIG_LOCK:
        if _CONFIG is None:
            _CONFIG = _load_config(_CONFIG_FILE_PATH)
        return _CONFIG


def is_config_loaded() -> bool:
    return _CONFIG is not None


def get_config_info() -> dict:
    """Describe where configuration comes from and, once loaded, what it holds."""
    config = _CONFIG
    return {
        "config_loaded": config is not None,
        "config_path": str(_CONFIG_FILE_PATH),
        "settings": config.to_dict() if config else None,
    }


def configure_logging(config: Optional[AppConfig] = None) -> None:
    """
    Configure root logging from the ``[logging]`` section.

    Args:
        config: Configuration to apply; the global configuration when omitted
    """
    settings = (config or get_config()).logging
    logging.basicConfig(
        level=getattr(logging, settings.level),
        format=settings.format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    logger.debug(f"Logging configured at level {settings.level}")
