"""
Data models for suite generation.

Recipes, options and requests are Pydantic models validated once per
generation call; test-case specs and the generated suite are plain frozen
dataclasses handed between pipeline stages.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_ASYNC_KEYWORD = re.compile(r"async\b")


def _skip_preamble(source: str) -> str:
    """Drop leading whitespace, comments and opening parentheses."""
    while True:
        source = source.lstrip()
        if source.startswith("("):
            source = source[1:]
        elif source.startswith("//"):
            source = source.partition("\n")[2]
        elif source.startswith("/*"):
            end = source.find("*/")
            if end < 0:
                return ""
            source = source[end + 2:]
        else:
            return source


class RecipeMode(Enum):
    """How the generated case calls the recipe's create-test function."""

    SYNC = "sync"
    ASYNC = "async"


def infer_recipe_mode(create_test: str) -> RecipeMode:
    """Return ASYNC when the JavaScript source is declared ``async``."""
    if _ASYNC_KEYWORD.match(_skip_preamble(create_test)):
        return RecipeMode.ASYNC
    return RecipeMode.SYNC


class TestRecipe(BaseModel):
    """Describes how one test case is created for each export of a module.

    ``create_test`` is JavaScript source for a self-contained function. It is
    embedded verbatim in the generated suite and called there with
    ``{data, publicUrl, modulePath, exportName}``; it must return the
    function that receives the live ``browser``. Every other callable runs
    in Python at generation time.
    """

    __test__ = False

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True, extra="forbid")

    display_name: Optional[Union[str, Callable[[str], str]]] = Field(
        None, description="Case title, or a callable mapping export name to title"
    )
    create_test: Optional[str] = Field(
        None, description="JavaScript source of the test-creation function"
    )
    mode: Optional[RecipeMode] = Field(
        None, description="Rendering strategy; inferred from create_test when omitted"
    )
    export_filter: Optional[Callable[..., Any]] = Field(
        None, description="(all_exports, module_path) -> selected export names"
    )
    additional_data: Optional[Callable[[str], Any]] = Field(
        None, description="export_name -> JSON-serializable payload merged into data"
    )
    only_filter: Optional[Callable[..., Any]] = Field(
        None, description="(case_options, cli_args) -> truthy to mark the case exclusive"
    )
    show_browser_console: bool = Field(
        False, description="Relay browser console and exceptions to the host console"
    )
    post_process: Optional[Callable[[str], str]] = Field(
        None, description="Final hook applied to the transformed suite source"
    )

    @model_validator(mode="before")
    @classmethod
    def infer_mode(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("mode") is None:
            source = data.get("create_test")
            if isinstance(source, str) and source.strip():
                data = {**data, "mode": infer_recipe_mode(source)}
        return data

    @property
    def is_async(self) -> bool:
        return self.mode is RecipeMode.ASYNC

    def title_for(self, export_name: str) -> str:
        """Render the case title for an export."""
        if self.display_name is None:
            return export_name
        if isinstance(self.display_name, str):
            return self.display_name
        return str(self.display_name(export_name))


class GenerationOptions(BaseModel):
    """Per-call options passed through to predicates and the bundler."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cli_args: Dict[str, Any] = Field(
        default_factory=dict, description="Passed to export and exclusivity predicates"
    )
    bundler_options: Dict[str, Any] = Field(
        default_factory=dict, description="Passed to the bundler verbatim"
    )

    @classmethod
    def from_nightwatch_settings(
        cls,
        nightwatch_settings: Optional[Dict[str, Any]] = None,
        cli_args: Optional[Dict[str, Any]] = None,
    ) -> "GenerationOptions":
        """Build options from Nightwatch settings, using their ``esbuild`` section."""
        settings = nightwatch_settings or {}
        return cls(
            cli_args=dict(cli_args or {}),
            bundler_options=dict(settings.get("esbuild") or {}),
        )


class GenerationRequest(BaseModel):
    """One generation call: a module, its recipe and the call options."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True, extra="forbid")

    module_path: str = Field(..., description="Absolute path of the component module")
    recipe: TestRecipe
    options: GenerationOptions = Field(default_factory=GenerationOptions)

    @field_validator("module_path")
    @classmethod
    def module_path_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("module_path must not be empty")
        return value


@dataclass(frozen=True)
class TestCaseSpec:
    """Everything needed to render one test case."""

    __test__ = False

    export_name: str
    title: str
    module_path: str
    module_public_url: str
    is_exclusive: bool = False
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "export_name": self.export_name,
            "title": self.title,
            "module_path": self.module_path,
            "module_public_url": self.module_public_url,
            "is_exclusive": self.is_exclusive,
            "payload": self.payload,
        }


@dataclass
class GeneratedSuite:
    """Result of one generation call."""

    module_path: str
    virtual_path: str
    source: str
    export_names: List[str] = field(default_factory=list)
    exclusive_exports: List[str] = field(default_factory=list)
    duration: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "module_path": self.module_path,
            "virtual_path": self.virtual_path,
            "content_length": len(self.source),
            "export_names": self.export_names,
            "exclusive_exports": self.exclusive_exports,
            "duration": self.duration,
        }
