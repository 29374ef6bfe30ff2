"""
esbuild-backed export resolver, bundler and source transformer.

Runs the esbuild CLI as a subprocess; nothing is written outside a
temporary directory.
"""

import asyncio
import json
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..core.exceptions import BundleError
from ..core.logging_config import get_logger, timed_stage
from .protocols import BuildResult, OutputFile, TransformResult

logger = get_logger(__name__)

DEFAULT_BUILD_OPTIONS: Dict[str, Any] = {
    "bundle": True,
    "format": "cjs",
    "platform": "browser",
    "logLevel": "error",
}

# Flags esbuild takes once per value as --flag:value
COLON_LIST_FLAGS = {"external", "inject"}

LOADERS = {
    ".js": "jsx",
    ".mjs": "jsx",
    ".cjs": "jsx",
    ".jsx": "jsx",
    ".ts": "ts",
    ".mts": "ts",
    ".cts": "ts",
    ".tsx": "tsx",
}


def _flag_name(key: str) -> str:
    """``jsxFactory`` -> ``jsx-factory``; kebab-case keys pass through."""
    return re.sub(r"(?<!^)(?=[A-Z])", "-", key).lower()


def options_to_flags(options: Dict[str, Any]) -> List[str]:
    """
    Map an esbuild options mapping onto CLI flags.

    ``True`` becomes ``--flag``, scalars ``--flag=value``, mappings
    ``--flag:key=value`` and lists either repeated ``--flag:value``
    (external, inject) or one comma-joined ``--flag=a,b``. ``False`` and
    ``None`` are omitted.

    Args:
        options: esbuild build options, camelCase or kebab-case keys

    Returns:
        List of CLI arguments
    """
    flags: List[str] = []
    for key, value in options.items():
        name = _flag_name(key)
        if value is None or value is False:
            continue
        if value is True:
            flags.append(f"--{name}")
        elif isinstance(value, dict):
            for sub_key, sub_value in value.items():
                flags.append(f"--{name}:{sub_key}={sub_value}")
        elif isinstance(value, (list, tuple)):
            if name in COLON_LIST_FLAGS:
                flags.extend(f"--{name}:{item}" for item in value)
            else:
                flags.append(f"--{name}={','.join(str(item) for item in value)}")
        else:
            flags.append(f"--{name}={value}")
    return flags


class EsbuildGateway:
    """Implements ExportResolver, Bundler and SourceTransformer over the esbuild CLI."""

    def __init__(
        self,
        command: Sequence[str] = ("esbuild",),
        cwd: Optional[Path] = None,
        timeout: float = 60.0,
    ):
        """
        Initialize the gateway.

        Args:
            command: esbuild invocation, e.g. ``("npx", "esbuild")``
            cwd: Working directory for esbuild, defaults to the current one
            timeout: Seconds before an esbuild call is abandoned
        """
        self.command = list(command)
        self.cwd = cwd
        self.timeout = timeout

    @timed_stage("resolve_exports")
    async def find_export_names(self, module_path: str) -> List[str]:
        """List the module's exports from an ESM build's metafile."""
        with tempfile.TemporaryDirectory(prefix="suitegen-") as temp_dir:
            metafile = Path(temp_dir) / "meta.json"
            await self._run(
                [
                    module_path,
                    "--bundle",
                    "--format=esm",
                    "--packages=external",
                    "--log-level=error",
                    f"--metafile={metafile}",
                    f"--outfile={Path(temp_dir) / 'out.js'}",
                ],
                operation="find_export_names",
                module_path=module_path,
            )
            try:
                meta = json.loads(metafile.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                raise BundleError(
                    f"esbuild metafile unreadable for {module_path}: {e}",
                    module_path=module_path,
                    operation="find_export_names",
                )

        outputs = meta.get("outputs", {})
        for output in outputs.values():
            if output.get("entryPoint"):
                return list(output.get("exports", []))
        for output in outputs.values():
            return list(output.get("exports", []))
        return []

    @timed_stage("bundle")
    async def build_file(self, module_path: str, bundler_options: Dict[str, Any]) -> BuildResult:
        """Bundle the module to CommonJS for the browser, output on stdout."""
        options = {_flag_name(key): value for key, value in DEFAULT_BUILD_OPTIONS.items()}
        options.update(
            {_flag_name(key): value for key, value in (bundler_options or {}).items()}
        )
        stdout = await self._run(
            [module_path, *options_to_flags(options)],
            operation="build_file",
            module_path=module_path,
        )
        return BuildResult(output_files=[OutputFile(text=stdout)])

    @timed_stage("transform")
    async def transform_file(self, source: str, virtual_path: str, extension: str) -> TransformResult:
        """Transform suite source read from stdin into CommonJS."""
        loader = LOADERS.get(extension.lower(), "jsx")
        stdout = await self._run(
            [
                f"--loader={loader}",
                "--format=cjs",
                f"--sourcefile={virtual_path}",
                "--log-level=error",
            ],
            stdin=source,
            operation="transform_file",
            module_path=virtual_path,
        )
        return TransformResult(code=stdout)

    async def _run(
        self,
        args: List[str],
        operation: str,
        module_path: str,
        stdin: Optional[str] = None,
    ) -> str:
        """Run esbuild and return its stdout, raising BundleError on failure."""
        argv = [*self.command, *args]
        logger.debug(
            f"esbuild {operation}",
            extra={"metadata": {"operation": operation, "argv": argv}},
        )

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(self.cwd) if self.cwd else None,
            )
        except FileNotFoundError:
            raise BundleError(
                f"esbuild executable not found: {self.command[0]}",
                module_path=module_path,
                operation=operation,
            )

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(stdin.encode("utf-8") if stdin is not None else None),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise BundleError(
                f"esbuild {operation} timed out after {self.timeout}s",
                module_path=module_path,
                operation=operation,
            )

        if process.returncode != 0:
            error_text = stderr.decode("utf-8", errors="replace").strip()
            raise BundleError(
                f"esbuild {operation} failed for {module_path}: {error_text}",
                module_path=module_path,
                operation=operation,
                exit_code=process.returncode,
                stderr=error_text,
            )

        return stdout.decode("utf-8")
