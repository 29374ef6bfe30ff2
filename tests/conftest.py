"""
Pytest configuration and shared fixtures for suite generator tests.

Provides an in-memory stand-in for the esbuild gateway, sample recipes and
environment isolation for configuration tests.
"""

from typing import Any, Dict, List, Optional

import pytest

from suitegen.bundling.protocols import BuildResult, OutputFile, TransformResult
from suitegen.generation.models import TestRecipe

ENV_VARS = [
    "CI",
    "SUITEGEN_LOG_LEVEL",
    "SUITEGEN_LOG_FORMAT",
    "SUITEGEN_ESBUILD_BIN",
    "SUITEGEN_OUTPUT_DIR",
    "SUITEGEN_SHOW_BROWSER_CONSOLE",
]

SYNC_CREATE_TEST = "function ({data}) { return () => ({mounted: true}); }"

ASYNC_CREATE_TEST = """async function ({publicUrl, exportName}) {
  return async function (browser) {
    await browser.navigateTo(publicUrl);
    return {exportName};
  };
}"""


class FakeGateway:
    """In-memory export resolver, bundler and transformer recording its calls."""

    def __init__(self, exports: List[str], bundled_text: str = "/* bundled module */"):
        self.exports = exports
        self.bundled_text = bundled_text
        self.calls: List[tuple] = []
        self.transform_input: Optional[str] = None

    async def find_export_names(self, module_path: str) -> List[str]:
        self.calls.append(("find_export_names", module_path))
        return list(self.exports)

    async def build_file(self, module_path: str, bundler_options: Dict[str, Any]) -> BuildResult:
        self.calls.append(("build_file", module_path, bundler_options))
        return BuildResult(output_files=[OutputFile(text=self.bundled_text)])

    async def transform_file(self, source: str, virtual_path: str, extension: str) -> TransformResult:
        self.calls.append(("transform_file", virtual_path, extension))
        self.transform_input = source
        return TransformResult(code=source)

    @property
    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep the developer's or CI's environment out of configuration tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def button_gateway():
    """Gateway for a Button module exporting a default and one story."""
    return FakeGateway(["default", "Secondary"], bundled_text="/* bundled Button.js */")


@pytest.fixture
def sync_recipe():
    """Recipe with a synchronous create-test function."""
    return TestRecipe(
        display_name=lambda export_name: f"{export_name} story",
        create_test=SYNC_CREATE_TEST,
    )


@pytest.fixture
def async_recipe():
    """Recipe with an asynchronous create-test function."""
    return TestRecipe(display_name="renders", create_test=ASYNC_CREATE_TEST)
