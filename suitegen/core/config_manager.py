"""
Configuration management system for the suite generator.

Layers a YAML or JSON configuration file over environment-derived defaults,
validates the result and optionally hot-reloads it when the file changes.
"""

import json
import threading
import time
from pathlib import Path
from typing import Dict, Any, Optional, List, Callable

import yaml
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .config import Config
from .exceptions import ValidationError
from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_FILES = ["suitegen.config.yaml", "suitegen.config.yml", "suitegen.config.json"]

# Keys whose values are converted back to Path objects
PATH_KEYS = ("project_root", "output_dir", "logs_dir")


class ConfigFileHandler(FileSystemEventHandler):
    """File system event handler for configuration hot-reloading."""

    def __init__(self, config_manager: "ConfigManager"):
        self.config_manager = config_manager
        self.last_reload = 0.0
        self.reload_debounce = 1.0

    def on_modified(self, event):
        """Handle file modification events."""
        if event.is_directory:
            return

        if Path(event.src_path).name != self.config_manager.config_file_path.name:
            return

        current_time = time.time()
        if current_time - self.last_reload > self.reload_debounce:
            self.last_reload = current_time
            self.config_manager._trigger_reload()


class ConfigManager:
    """
    Configuration management with file layering, validation and hot-reloading.

    The configuration file may be YAML or JSON. Its ``esbuild`` section is
    passed to the bundler verbatim, mirroring the ``esbuild`` key of
    Nightwatch settings.
    """

    def __init__(self, config_file_path: Optional[Path] = None):
        self.config_file_path = config_file_path or self._discover_config_file()

        self._config: Optional[Config] = None
        self._reload_callbacks: List[Callable[[Config], None]] = []
        self._observer: Optional[Observer] = None
        self._lock = threading.RLock()

    @staticmethod
    def _discover_config_file() -> Path:
        for name in DEFAULT_CONFIG_FILES:
            candidate = Path.cwd() / name
            if candidate.exists():
                return candidate
        return Path.cwd() / DEFAULT_CONFIG_FILES[0]

    def get_config(self) -> Config:
        """Get current configuration, loading if necessary."""
        with self._lock:
            if self._config is None:
                self._config = self._load_config()
            return self._config

    def reload_config(self) -> Config:
        """Force reload configuration from files."""
        with self._lock:
            self._config = self._load_config()
            self._notify_reload_callbacks()
            return self._config

    def validate_config(self, config: Optional[Config] = None) -> List[str]:
        """
        Validate configuration and return list of validation errors.

        Args:
            config: Configuration to validate. If None, uses current config.

        Returns:
            List of validation error messages. Empty list if valid.
        """
        if config is None:
            config = self.get_config()

        errors = []
        try:
            config.validate()
        except ValidationError as e:
            errors.extend(e.violations)

        return errors

    def read_config_file(self) -> Dict[str, Any]:
        """
        Read the raw configuration file.

        Returns:
            Parsed mapping, empty when the file does not exist

        Raises:
            ValidationError: If the file cannot be parsed or is not a mapping
        """
        if not self.config_file_path.exists():
            return {}

        try:
            text = self.config_file_path.read_text(encoding="utf-8")
            if self.config_file_path.suffix.lower() == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError, OSError) as e:
            raise ValidationError(
                f"Could not load config file {self.config_file_path}: {e}",
                validation_type="config_file",
                violations=[str(e)],
            )

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValidationError(
                f"Config file {self.config_file_path} must contain a mapping",
                validation_type="config_file",
                violations=["top-level value is not a mapping"],
            )
        return data

    def start_hot_reload(self) -> None:
        """Start hot-reloading of the configuration file."""
        if self._observer is not None:
            return

        event_handler = ConfigFileHandler(self)
        self._observer = Observer()
        self._observer.schedule(
            event_handler, str(self.config_file_path.parent), recursive=False
        )
        self._observer.start()

    def stop_hot_reload(self) -> None:
        """Stop hot-reloading of the configuration file."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None

    def add_reload_callback(self, callback: Callable[[Config], None]) -> None:
        """Add callback to be called when configuration is reloaded."""
        self._reload_callbacks.append(callback)

    def remove_reload_callback(self, callback: Callable[[Config], None]) -> None:
        """Remove reload callback."""
        if callback in self._reload_callbacks:
            self._reload_callbacks.remove(callback)

    def _load_config(self) -> Config:
        """Load configuration from environment and the config file."""
        config = Config.from_env()
        file_config = self.read_config_file()

        for key, value in file_config.items():
            if key == "esbuild":
                config.bundler_options = dict(value or {})
            elif hasattr(config, key):
                if key in PATH_KEYS:
                    value = Path(value)
                setattr(config, key, value)
            else:
                logger.warning(f"Ignoring unknown config key: {key}")

        # Re-run normalization so environment overrides still win
        config.__post_init__()
        return config

    def _trigger_reload(self) -> None:
        """Trigger configuration reload (called by file watcher)."""
        try:
            self.reload_config()
            logger.info(f"Configuration reloaded from {self.config_file_path}")
        except ValidationError as e:
            logger.error(f"Error reloading configuration: {e}")

    def _notify_reload_callbacks(self) -> None:
        """Notify all registered callbacks of configuration reload."""
        for callback in self._reload_callbacks:
            try:
                callback(self._config)
            except Exception as e:
                logger.error(f"Error in reload callback: {e}")


_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> Config:
    """Get current configuration from global manager."""
    return get_config_manager().get_config()
