"""
Unit tests for configuration loading and the global configuration singleton.
"""

import logging
import tomllib

import pytest

from clustermetrics.config import (
    AppConfig,
    LoggingConfig,
    clear_config_cache,
    configure_logging,
    get_config,
    get_config_info,
    is_config_loaded,
    load_toml_file,
    resolve_config_path,
    set_config_path,
)
from clustermetrics.validation import ValidationError


CONFIG_TEXT = """
[aggregation]
queue_size = 16
thread_name = "Worker"

[export]
include_empty_segments = false

[logging]
level = "warning"
"""


@pytest.fixture
def config_file(temp_dir):
    path = temp_dir / "config.toml"
    path.write_text(CONFIG_TEXT)
    return path


@pytest.mark.unit
class TestConfigLoading:
    """Test cases for loading config.toml."""

    def test_get_config_from_custom_path(self, config_file):
        set_config_path(config_file)

        config = get_config()

        assert config.aggregation.queue_size == 16
        assert config.aggregation.thread_name == "Worker"
        assert config.export.include_empty_segments is False
        assert config.logging.level == "WARNING"

    def test_config_is_cached(self, config_file):
        set_config_path(config_file)
        assert not is_config_loaded()

        first = get_config()
        assert is_config_loaded()
        assert get_config() is first

        clear_config_cache()
        assert not is_config_loaded()

    def test_config_info(self, config_file):
        set_config_path(config_file)
        get_config()

        info = get_config_info()

        assert info["config_loaded"] is True
        assert info["config_path"] == str(config_file)
        assert info["settings"]["aggregation"]["queue_size"] == 16

    def test_missing_file(self, temp_dir):
        set_config_path(temp_dir / "missing.toml")

        with pytest.raises(FileNotFoundError):
            get_config()

    def test_malformed_toml(self, temp_dir):
        path = temp_dir / "broken.toml"
        path.write_text("[aggregation\nqueue_size = ")

        with pytest.raises(tomllib.TOMLDecodeError):
            load_toml_file(path)

    def test_invalid_values(self, temp_dir):
        path = temp_dir / "invalid.toml"
        path.write_text("[aggregation]\nqueue_size = -3\n")
        set_config_path(path)

        with pytest.raises(ValidationError):
            get_config()

    def test_directory_path_resolves_to_config_file(self, config_file, temp_dir):
        assert resolve_config_path(temp_dir) == config_file

        set_config_path(temp_dir)
        assert get_config().aggregation.queue_size == 16

    def test_empty_file_uses_defaults(self, temp_dir):
        path = temp_dir / "empty.toml"
        path.write_text("")
        set_config_path(path)

        assert get_config() == AppConfig()

    def test_bundled_config_loads(self):
        """The configuration shipped in conf/ validates with default values."""
        config = get_config()

        assert config.aggregation.queue_size == 1024
        assert config.export.time_zone == "UTC"


@pytest.mark.unit
class TestConfigureLogging:
    """Test cases for applying the [logging] section."""

    def test_level_applied(self):
        root = logging.getLogger()
        previous_level = root.level
        previous_handlers = root.handlers[:]
        try:
            configure_logging(AppConfig(logging=LoggingConfig(level="ERROR")))
            assert root.level == logging.ERROR
        finally:
            root.handlers[:] = previous_handlers
            root.setLevel(previous_level)
