"""
Suite generation components for turning component modules into browser test suites.
"""

from .assembler import SuiteAssembler
from .console_bridge import generate_console_bridge
from .generator import SuiteGenerator, coerce_recipe
from .models import (
    GeneratedSuite,
    GenerationOptions,
    GenerationRequest,
    RecipeMode,
    TestCaseSpec,
    TestRecipe,
)
from .recipes import load_recipe, recipe_from_mapping
from .selector import select_exports
from .synthesizer import TestCaseSynthesizer

__all__ = [
    "SuiteAssembler",
    "generate_console_bridge",
    "SuiteGenerator",
    "coerce_recipe",
    "GeneratedSuite",
    "GenerationOptions",
    "GenerationRequest",
    "RecipeMode",
    "TestCaseSpec",
    "TestRecipe",
    "load_recipe",
    "recipe_from_mapping",
    "select_exports",
    "TestCaseSynthesizer",
]
