"""
Bundling collaborators: protocols, the esbuild gateway and path helpers.
"""

from .esbuild import EsbuildGateway, options_to_flags
from .paths import get_virtual_file_path, module_public_url
from .protocols import (
    BuildResult,
    Bundler,
    ExportResolver,
    OutputFile,
    SourceTransformer,
    TransformResult,
)

__all__ = [
    "EsbuildGateway",
    "options_to_flags",
    "get_virtual_file_path",
    "module_public_url",
    "BuildResult",
    "Bundler",
    "ExportResolver",
    "OutputFile",
    "SourceTransformer",
    "TransformResult",
]
