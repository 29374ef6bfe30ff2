"""
Unit tests for the configuration manager.

Tests file layering, validation, saving and hot-reload callbacks.
"""

import json
import os
from unittest.mock import MagicMock, patch

import pytest
import yaml
from watchdog.events import DirModifiedEvent, FileModifiedEvent

from suitegen.core.config import Config
from suitegen.core.config_manager import ConfigFileHandler, ConfigManager
from suitegen.core.exceptions import ValidationError


@pytest.fixture
def yaml_config_file(tmp_path):
    path = tmp_path / "suitegen.config.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "log_level": "DEBUG",
                "esbuild_bin": "npx esbuild",
                "output_dir": str(tmp_path / "suites"),
                "esbuild": {"jsx": "automatic", "external": ["react"]},
            }
        )
    )
    return path


class TestConfigManager:
    """Test cases for ConfigManager."""

    def test_load_yaml_file(self, yaml_config_file, tmp_path):
        """File values are layered over the defaults."""
        config = ConfigManager(yaml_config_file).get_config()

        assert config.log_level == "DEBUG"
        assert config.esbuild_command == ["npx", "esbuild"]
        assert config.output_dir == tmp_path / "suites"
        assert config.bundler_options == {"jsx": "automatic", "external": ["react"]}

    def test_load_json_file(self, tmp_path):
        path = tmp_path / "suitegen.config.json"
        path.write_text(json.dumps({"show_browser_console": True, "esbuild_timeout": 5}))

        config = ConfigManager(path).get_config()

        assert config.show_browser_console is True
        assert config.esbuild_timeout == 5

    def test_missing_file_gives_defaults(self, tmp_path):
        config = ConfigManager(tmp_path / "suitegen.config.yaml").get_config()
        assert config.log_level == "INFO"
        assert config.bundler_options == {}

    def test_environment_wins_over_file(self, yaml_config_file):
        with patch.dict(os.environ, {"SUITEGEN_LOG_LEVEL": "ERROR"}):
            config = ConfigManager(yaml_config_file).get_config()
        assert config.log_level == "ERROR"

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "suitegen.config.yaml"
        path.write_text("model_provider: openai\nlog_level: WARN\n")

        config = ConfigManager(path).get_config()

        assert config.log_level == "WARN"
        assert not hasattr(config, "model_provider")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "suitegen.config.yaml"
        path.write_text("log_level: [unclosed\n")

        with pytest.raises(ValidationError, match="Could not load config file"):
            ConfigManager(path).get_config()

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "suitegen.config.yaml"
        path.write_text("- one\n- two\n")

        with pytest.raises(ValidationError, match="must contain a mapping"):
            ConfigManager(path).read_config_file()

    def test_discovers_file_in_cwd(self, tmp_path, monkeypatch):
        (tmp_path / "suitegen.config.json").write_text("{}")
        monkeypatch.chdir(tmp_path)

        assert ConfigManager().config_file_path.name == "suitegen.config.json"

    def test_config_is_cached(self, yaml_config_file):
        manager = ConfigManager(yaml_config_file)
        assert manager.get_config() is manager.get_config()

    def test_validate_config(self, tmp_path):
        manager = ConfigManager(tmp_path / "none.yaml")
        config = Config(project_root=tmp_path / "missing")

        errors = manager.validate_config(config)

        assert len(errors) == 1
        assert "project root" in errors[0]

    def test_reload_picks_up_file_changes(self, yaml_config_file, tmp_path):
        """A reload reads the file again instead of returning the cached config."""
        manager = ConfigManager(yaml_config_file)
        assert manager.get_config().bundler_options["jsx"] == "automatic"

        yaml_config_file.write_text(
            yaml.safe_dump({"project_root": str(tmp_path), "esbuild": {"target": "es2020"}})
        )
        loaded = manager.reload_config()

        assert loaded.bundler_options == {"target": "es2020"}
        assert loaded.project_root == tmp_path
        assert manager.get_config() is loaded

    def test_trigger_reload_keeps_config_on_invalid_file(self, yaml_config_file):
        """A broken edit is logged and the previous configuration stays active."""
        manager = ConfigManager(yaml_config_file)
        previous = manager.get_config()
        callback = MagicMock()
        manager.add_reload_callback(callback)

        yaml_config_file.write_text("esbuild: [unclosed\n")
        manager._trigger_reload()

        callback.assert_not_called()
        assert manager.get_config() is previous


    def test_reload_callbacks(self, yaml_config_file):
        manager = ConfigManager(yaml_config_file)
        callback = MagicMock()
        failing = MagicMock(side_effect=RuntimeError("boom"))
        manager.add_reload_callback(failing)
        manager.add_reload_callback(callback)

        config = manager.reload_config()

        callback.assert_called_once_with(config)

        manager.remove_reload_callback(callback)
        manager.reload_config()
        assert callback.call_count == 1

    def test_hot_reload_lifecycle(self, yaml_config_file):
        manager = ConfigManager(yaml_config_file)
        with patch("suitegen.core.config_manager.Observer") as mock_observer_class:
            manager.start_hot_reload()
            manager.start_hot_reload()
            manager.stop_hot_reload()

        observer = mock_observer_class.return_value
        mock_observer_class.assert_called_once()
        observer.schedule.assert_called_once()
        observer.start.assert_called_once()
        observer.stop.assert_called_once()
        observer.join.assert_called_once()


class TestConfigFileHandler:
    """Test cases for ConfigFileHandler."""

    def test_reloads_on_config_change(self, yaml_config_file):
        manager = MagicMock()
        manager.config_file_path = yaml_config_file
        handler = ConfigFileHandler(manager)

        handler.on_modified(FileModifiedEvent(str(yaml_config_file)))
        handler.on_modified(FileModifiedEvent(str(yaml_config_file)))

        manager._trigger_reload.assert_called_once()

    def test_ignores_other_files(self, yaml_config_file):
        manager = MagicMock()
        manager.config_file_path = yaml_config_file
        handler = ConfigFileHandler(manager)

        handler.on_modified(FileModifiedEvent(str(yaml_config_file.parent / "other.yaml")))
        handler.on_modified(DirModifiedEvent(str(yaml_config_file.parent)))

        manager._trigger_reload.assert_not_called()
