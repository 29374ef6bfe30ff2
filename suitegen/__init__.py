"""
Component Suite Generator - browser test suites from UI component modules

Discovers a component module's exports, bundles the module for the browser
and emits a Nightwatch test suite with one case per export.
"""

__version__ = "0.1.0"
__author__ = "Component Suite Generator Team"

from .core.config import Config
from .core.exceptions import SuiteGenError
from .core.logging_config import setup_logging
from .generation import GenerationOptions, RecipeMode, SuiteGenerator, TestRecipe

__all__ = [
    "Config",
    "SuiteGenError",
    "setup_logging",
    "GenerationOptions",
    "RecipeMode",
    "SuiteGenerator",
    "TestRecipe",
]
