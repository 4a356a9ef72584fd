"""
Reading ``config.toml`` from disk.

Only parsing lives here; section validation is in ``validators``.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Union

from ..validation import ErrorSeverity, handle_config_error

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.toml"


def resolve_config_path(path: Union[str, Path]) -> Path:
    """
    Turn a user-supplied location into the config file path.

    A directory is taken to contain ``config.toml``.
    """
    resolved = Path(path).expanduser()
    if resolved.is_dir():
        resolved = resolved / CONFIG_FILE_NAME
    return resolved


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Parse a TOML file into a dictionary.

    Args:
        file_path: File to read
        description: Name used in log and error messages

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is malformed
    """
    if not file_path.is_file():
        logger.error(f"{description} not found: {file_path}")
        raise FileNotFoundError(f"{description} not found: {file_path}")

    logger.debug(f"Reading {description}: {file_path}")
    try:
        data = tomllib.loads(file_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {file_path.name}",
            severity=ErrorSeverity.CRITICAL,
            logger=logger,
        )
        raise

    if not data:
        logger.warning(f"{description} {file_path} is empty, using defaults")
    return data


def load_main_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load the aggregation engine's ``config.toml`` (file or containing directory)."""
    return load_toml_file(resolve_config_path(config_path), "main configuration file")
