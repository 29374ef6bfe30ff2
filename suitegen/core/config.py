"""
Configuration management for the suite generator.

Handles environment variables, defaults, and configuration validation
for generation, bundling and logging.
"""

import os
import shlex
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field
from pathlib import Path


VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARN", "ERROR"]
VALID_LOG_FORMATS = ["text", "json"]


@dataclass
class Config:
    """Configuration class for the suite generator with environment variable support."""

    # Environment detection
    ci_mode: bool = field(default=False)

    # Logging configuration
    log_level: str = field(default="INFO")
    log_format: str = field(default="text")
    log_to_file: bool = field(default=False)

    # Bundler configuration
    esbuild_bin: str = field(default="esbuild")
    esbuild_timeout: float = field(default=60.0)
    bundler_options: Dict[str, Any] = field(default_factory=dict)

    # Generation defaults
    show_browser_console: bool = field(default=False)

    # Directory paths
    project_root: Path = field(default_factory=lambda: Path.cwd())
    output_dir: Path = field(default_factory=lambda: Path.cwd() / "generated")
    logs_dir: Path = field(default_factory=lambda: Path.cwd() / "logs")

    def __post_init__(self):
        """Post-initialization normalization and environment overrides."""
        ci_env = os.getenv("CI", "").lower() == "true"
        if ci_env and self.ci_mode is False:
            self.ci_mode = True

        log_env = os.getenv("SUITEGEN_LOG_LEVEL")
        if log_env:
            self.log_level = log_env
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            self.log_level = "INFO"
        else:
            self.log_level = self.log_level.upper()

        format_env = os.getenv("SUITEGEN_LOG_FORMAT")
        if format_env and format_env.lower() in VALID_LOG_FORMATS:
            self.log_format = format_env.lower()
        elif self.ci_mode and self.log_format == "text":
            # CI log collectors expect one JSON object per line
            self.log_format = "json"

        esbuild_env = os.getenv("SUITEGEN_ESBUILD_BIN")
        if esbuild_env:
            self.esbuild_bin = esbuild_env

        output_env = os.getenv("SUITEGEN_OUTPUT_DIR")
        if output_env:
            self.output_dir = Path(output_env)

        console_env = os.getenv("SUITEGEN_SHOW_BROWSER_CONSOLE")
        if console_env is not None:
            self.show_browser_console = console_env.lower() == "true"

    @property
    def is_ci_mode(self) -> bool:
        """Check if running in CI environment."""
        return self.ci_mode

    @property
    def esbuild_command(self) -> List[str]:
        """The esbuild invocation split into argv form, e.g. ``npx esbuild``."""
        return shlex.split(self.esbuild_bin)

    def get_log_file_path(self) -> Path:
        """Get the main log file path."""
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        return self.logs_dir / "suitegen.log"

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for logging."""
        return {
            "ci_mode": self.ci_mode,
            "log_level": self.log_level,
            "log_format": self.log_format,
            "log_to_file": self.log_to_file,
            "esbuild_bin": self.esbuild_bin,
            "esbuild_timeout": self.esbuild_timeout,
            "bundler_options": self.bundler_options,
            "show_browser_console": self.show_browser_console,
            "project_root": str(self.project_root),
            "output_dir": str(self.output_dir),
            "logs_dir": str(self.logs_dir),
        }

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        ci = os.getenv("CI", "").lower() == "true"
        return cls(
            ci_mode=ci,
            log_level=os.getenv("SUITEGEN_LOG_LEVEL", "INFO").upper(),
            log_format="json" if ci else "text",
            esbuild_bin=os.getenv("SUITEGEN_ESBUILD_BIN", "esbuild"),
        )

    def validate(self) -> None:
        """Validate configuration and raise ValidationError if invalid."""
        from .exceptions import ValidationError

        errors = []

        if self.log_level not in VALID_LOG_LEVELS:
            errors.append(
                f"Invalid log level: {self.log_level}. Must be one of {VALID_LOG_LEVELS}"
            )

        if self.log_format not in VALID_LOG_FORMATS:
            errors.append(
                f"Invalid log format: {self.log_format}. Must be one of {VALID_LOG_FORMATS}"
            )

        if not self.esbuild_command:
            errors.append("esbuild binary must not be empty")

        if self.esbuild_timeout <= 0:
            errors.append(f"esbuild timeout must be positive, got {self.esbuild_timeout}")

        if not isinstance(self.bundler_options, dict):
            errors.append("bundler options must be a mapping of esbuild flags")

        if not self.project_root.exists():
            errors.append(f"project root does not exist: {self.project_root}")

        if errors:
            message = "Configuration validation failed: " + "; ".join(errors)
            raise ValidationError(
                message,
                validation_type="config",
                violations=errors,
            )
