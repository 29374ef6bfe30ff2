"""
Unit tests for Config class.

Tests configuration defaults, environment variable handling and validation.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from suitegen.core.config import Config
from suitegen.core.exceptions import ValidationError


class TestConfig:
    """Test cases for Config class."""

    def test_default_config_creation(self):
        """Test creating config with default values."""
        config = Config()

        assert config.ci_mode is False
        assert config.log_level == "INFO"
        assert config.log_format == "text"
        assert config.esbuild_bin == "esbuild"
        assert config.bundler_options == {}
        assert config.show_browser_console is False
        assert config.output_dir == Path.cwd() / "generated"

    @patch.dict(os.environ, {"CI": "true"})
    def test_ci_mode_detection(self):
        """Test CI mode detection from environment variable."""
        config = Config()

        assert config.ci_mode is True
        assert config.is_ci_mode is True
        assert config.log_format == "json"

    @patch.dict(os.environ, {"CI": "false"})
    def test_ci_mode_false(self):
        """Test CI mode when explicitly set to false."""
        assert Config().ci_mode is False

    @patch.dict(
        os.environ,
        {
            "SUITEGEN_LOG_LEVEL": "debug",
            "SUITEGEN_LOG_FORMAT": "JSON",
            "SUITEGEN_ESBUILD_BIN": "npx esbuild",
            "SUITEGEN_OUTPUT_DIR": "/tmp/suites",
            "SUITEGEN_SHOW_BROWSER_CONSOLE": "true",
        },
    )
    def test_environment_variable_override(self):
        """Test all environment variable overrides."""
        config = Config()

        assert config.log_level == "DEBUG"
        assert config.log_format == "json"
        assert config.esbuild_command == ["npx", "esbuild"]
        assert config.output_dir == Path("/tmp/suites")
        assert config.show_browser_console is True

    @patch.dict(os.environ, {"SUITEGEN_LOG_LEVEL": "LOUD"})
    def test_invalid_log_level_falls_back(self):
        """Unknown log levels fall back to INFO."""
        assert Config().log_level == "INFO"

    def test_from_env_class_method(self):
        """Test creating config from environment using class method."""
        with patch.dict(os.environ, {"CI": "true", "SUITEGEN_LOG_LEVEL": "ERROR"}):
            config = Config.from_env()

            assert config.ci_mode is True
            assert config.log_level == "ERROR"
            assert config.log_format == "json"

    def test_validate_valid_config(self, tmp_path):
        """Test validation of a valid configuration."""
        Config(project_root=tmp_path).validate()

    def test_validate_collects_violations(self, tmp_path):
        """Every problem is reported at once."""
        config = Config(project_root=tmp_path / "missing", esbuild_timeout=0)
        config.log_format = "xml"

        with pytest.raises(ValidationError) as exc_info:
            config.validate()

        violations = exc_info.value.violations
        assert len(violations) == 3
        assert any("log format" in v for v in violations)
        assert any("timeout" in v for v in violations)
        assert any("project root" in v for v in violations)

    def test_validate_empty_esbuild_bin(self, tmp_path):
        config = Config(project_root=tmp_path, esbuild_bin="  ")
        with pytest.raises(ValidationError, match="esbuild binary must not be empty"):
            config.validate()

    def test_get_log_file_path(self, tmp_path):
        """Log directory is created on demand."""
        config = Config(logs_dir=tmp_path / "logs")

        path = config.get_log_file_path()

        assert path == tmp_path / "logs" / "suitegen.log"
        assert path.parent.is_dir()

    def test_to_dict(self, tmp_path):
        config = Config(project_root=tmp_path, bundler_options={"jsx": "automatic"})
        data = config.to_dict()

        assert data["project_root"] == str(tmp_path)
        assert data["bundler_options"] == {"jsx": "automatic"}
        assert data["log_level"] == "INFO"
