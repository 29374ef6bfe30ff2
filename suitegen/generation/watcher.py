"""
Watch mode: regenerate suites when their component modules change.
"""

import asyncio
import concurrent.futures
import functools
import time
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from ..bundling.paths import get_virtual_file_path
from ..core.config import Config
from ..core.exceptions import SuiteGenError, ValidationError
from ..core.logging_config import get_logger
from .generator import SuiteGenerator
from .models import GenerationOptions, TestRecipe

logger = get_logger(__name__)


class ComponentChangeHandler(FileSystemEventHandler):
    """Forwards changes of watched component files to the watcher."""

    def __init__(self, watcher: "SuiteWatcher"):
        self.watcher = watcher
        self.last_events: Dict[str, float] = {}

    def on_modified(self, event):
        """Handle file modification events."""
        self._handle(event)

    def on_created(self, event):
        """Editors that save by replacing the file emit creations."""
        self._handle(event)

    def _handle(self, event) -> None:
        if event.is_directory:
            return

        path = str(Path(event.src_path).resolve())
        if path not in self.watcher.module_paths:
            return

        now = time.monotonic()
        if now - self.last_events.get(path, 0.0) < self.watcher.debounce:
            return
        self.last_events[path] = now
        self.watcher.schedule(path)


class SuiteWatcher:
    """Keeps generated suites in an output directory up to date."""

    def __init__(
        self,
        generator: SuiteGenerator,
        recipe: TestRecipe,
        output_dir: Path,
        options: Optional[GenerationOptions] = None,
        debounce: float = 0.5,
    ):
        self.generator = generator
        self.recipe = recipe
        self.output_dir = Path(output_dir)
        self.options = options or GenerationOptions()
        self.debounce = debounce
        self.module_paths: Set[str] = set()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._observer: Optional[Observer] = None

    def output_path_for(self, module_path: str) -> Path:
        """Where the suite generated for a module is written.

        Modules under the project root keep their relative directory, so
        components sharing a file name do not overwrite each other.
        """
        module = Path(module_path)
        virtual_name = Path(get_virtual_file_path(module)).name
        root = Path(self.generator.project_root or Path.cwd()).resolve()
        try:
            relative_dir = module.parent.relative_to(root)
        except ValueError:
            return self.output_dir / virtual_name
        return self.output_dir / relative_dir / virtual_name

    async def regenerate(self, module_path: str) -> Path:
        """Generate one module's suite and write it to the output directory."""
        source = await self.generator.generate(module_path, self.recipe, self.options)
        output_path = self.output_path_for(module_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(source, encoding="utf-8")
        logger.info(f"Wrote {output_path}", extra={"metadata": {"module_path": module_path}})
        return output_path

    def schedule(self, module_path: str) -> Optional[concurrent.futures.Future]:
        """Queue a regeneration from the observer thread."""
        if self._loop is None:
            return None
        future = asyncio.run_coroutine_threadsafe(self._regenerate_logged(module_path), self._loop)
        future.add_done_callback(functools.partial(self._log_failure, module_path))
        return future

    def reconfigure(self, config: Config) -> None:
        """Rebuild the generator from a reloaded configuration and regenerate every module."""
        self.generator = SuiteGenerator.from_config(config)
        self.options = self.options.model_copy(
            update={"bundler_options": dict(config.bundler_options)}
        )
        logger.info("Configuration changed, regenerating suites")
        for module_path in sorted(self.module_paths):
            self.schedule(module_path)

    @staticmethod
    def _log_failure(module_path: str, future: concurrent.futures.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Regeneration failed for {module_path}: {error}", exc_info=error)


    async def _regenerate_logged(self, module_path: str) -> Optional[Path]:
        # A broken component must not stop the watch loop
        try:
            return await self.regenerate(module_path)
        except SuiteGenError as e:
            logger.error(f"Regeneration failed for {module_path}: {e}", extra={"metadata": e.to_dict()})
        return None

    async def run(self, module_paths: Iterable[str], stop_event: Optional[asyncio.Event] = None) -> List[Path]:
        """
        Generate every module once, then regenerate on change until stopped.

        Args:
            module_paths: Component modules to watch
            stop_event: Set to stop watching; runs until cancelled when omitted

        Returns:
            Paths written by the initial generation

        Raises:
            ValidationError: If two modules would be written to the same suite file
        """
        module_paths = sorted({str(Path(path).resolve()) for path in module_paths})
        targets: Dict[Path, str] = {}
        for module_path in module_paths:
            output_path = self.output_path_for(module_path)
            if output_path in targets:
                message = f"{targets[output_path]} and {module_path} both map to {output_path}"
                raise ValidationError(message, validation_type="watch", violations=[message])
            targets[output_path] = module_path

        self._loop = asyncio.get_running_loop()
        self.module_paths = set(module_paths)

        written = []
        for module_path in sorted(self.module_paths):
            output_path = await self._regenerate_logged(module_path)
            if output_path is not None:
                written.append(output_path)

        handler = ComponentChangeHandler(self)
        self._observer = Observer()
        for directory in sorted({str(Path(path).parent) for path in self.module_paths}):
            self._observer.schedule(handler, directory, recursive=False)
        self._observer.start()
        logger.info(f"Watching {len(self.module_paths)} component module(s)")

        try:
            await (stop_event or asyncio.Event()).wait()
        finally:
            self._observer.stop()
            self._observer.join()
            self._observer = None
            self._loop = None

        return written
