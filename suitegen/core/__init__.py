"""Core components for the suite generator."""

from .config import Config
from .exceptions import (
    SuiteGenError,
    RecipeError,
    BundleError,
    ValidationError,
)
from .logging_config import setup_logging, get_logger

__all__ = [
    "Config",
    "SuiteGenError",
    "RecipeError",
    "BundleError",
    "ValidationError",
    "setup_logging",
    "get_logger",
]
