"""
Collaborator interfaces for the generation pipeline.

The generator only depends on these protocols; the esbuild gateway is one
implementation, tests substitute in-memory fakes.
"""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


class OutputFile(BaseModel):
    """One file produced by the bundler."""

    model_config = ConfigDict(frozen=True)

    path: Optional[str] = Field(None, description="Output path, if the bundler reports one")
    text: str = Field(..., description="Browser-ready module text")


class BuildResult(BaseModel):
    """Bundler output; only the first output file is consumed."""

    model_config = ConfigDict(frozen=True)

    output_files: List[OutputFile] = Field(default_factory=list)


class TransformResult(BaseModel):
    """Source transform output."""

    model_config = ConfigDict(frozen=True)

    code: str
    map: Optional[str] = None


@runtime_checkable
class ExportResolver(Protocol):
    """Lists the names a module exports."""

    async def find_export_names(self, module_path: str) -> List[str]:
        ...


@runtime_checkable
class Bundler(Protocol):
    """Bundles a module into text a browser test runner can evaluate."""

    async def build_file(self, module_path: str, bundler_options: Dict[str, Any]) -> BuildResult:
        ...


@runtime_checkable
class SourceTransformer(Protocol):
    """Converts assembled suite text into the runner's module format."""

    async def transform_file(
        self, source: str, virtual_path: str, extension: str
    ) -> TransformResult:
        ...
