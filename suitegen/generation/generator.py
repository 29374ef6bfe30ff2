"""
Suite generator: turns a component module into browser test-suite source.
"""

import os
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..bundling.esbuild import EsbuildGateway
from ..bundling.paths import get_virtual_file_path, module_public_url
from ..bundling.protocols import Bundler, ExportResolver, SourceTransformer
from ..core.config import Config
from ..core.exceptions import RecipeError
from ..core.logging_config import get_logger, log_performance
from .assembler import SuiteAssembler
from .console_bridge import generate_console_bridge
from .models import GeneratedSuite, GenerationOptions, GenerationRequest, TestRecipe
from .selector import select_exports
from .synthesizer import TestCaseSynthesizer

logger = get_logger(__name__)

RecipeLike = Union[TestRecipe, Dict[str, Any]]


def coerce_recipe(recipe: RecipeLike, module_path: Optional[str] = None) -> TestRecipe:
    """
    Validate a recipe before any collaborator is called.

    Args:
        recipe: TestRecipe or a mapping of its fields
        module_path: Module being generated, for error context

    Returns:
        Validated TestRecipe

    Raises:
        RecipeError: If the recipe is malformed or has no create_test source
    """
    if not isinstance(recipe, TestRecipe):
        try:
            recipe = TestRecipe.model_validate(recipe)
        except PydanticValidationError as e:
            raise RecipeError(f"Invalid test recipe: {e}", module_path=module_path)

    if not isinstance(recipe.create_test, str) or not recipe.create_test.strip():
        raise RecipeError(
            "create_test function must be defined.",
            field_name="create_test",
            module_path=module_path,
        )

    return recipe


class SuiteGenerator:
    """Generates one test suite per component module.

    Stages run strictly in order: export resolution, selection, bundling,
    per-export synthesis, assembly, transform, post-processing. Failures of
    the resolver, bundler or transformer are not caught here.
    """

    def __init__(
        self,
        resolver: ExportResolver,
        bundler: Bundler,
        transformer: SourceTransformer,
        virtual_path_resolver: Callable[[str], str] = get_virtual_file_path,
        project_root: Optional[Path] = None,
        synthesizer: Optional[TestCaseSynthesizer] = None,
        assembler: Optional[SuiteAssembler] = None,
    ):
        """
        Initialize the generator.

        Args:
            resolver: Lists a module's exports
            bundler: Produces browser-ready module text
            transformer: Converts the assembled suite to the runner's format
            virtual_path_resolver: Names the transform's output context
            project_root: Root used for module public URLs, defaults to cwd
            synthesizer: Test-case synthesizer
            assembler: Suite assembler
        """
        self.resolver = resolver
        self.bundler = bundler
        self.transformer = transformer
        self.virtual_path_resolver = virtual_path_resolver
        self.project_root = project_root
        self.synthesizer = synthesizer or TestCaseSynthesizer()
        self.assembler = assembler or SuiteAssembler()

    @classmethod
    def from_config(cls, config: Config) -> "SuiteGenerator":
        """Build a generator backed by the esbuild CLI."""
        gateway = EsbuildGateway(
            command=config.esbuild_command,
            cwd=config.project_root,
            timeout=config.esbuild_timeout,
        )
        return cls(gateway, gateway, gateway, project_root=config.project_root)

    async def generate(
        self,
        module_path: str,
        recipe: RecipeLike,
        options: Optional[GenerationOptions] = None,
    ) -> str:
        """
        Generate the suite source for a module.

        Args:
            module_path: Absolute path of the component module
            recipe: Test-creation recipe
            options: CLI args and bundler options

        Returns:
            Final suite source after the recipe's post-processing

        Raises:
            RecipeError: If the recipe is invalid (before any other work)
        """
        recipe = coerce_recipe(recipe, module_path)
        request = GenerationRequest(
            module_path=module_path,
            recipe=recipe,
            options=options or GenerationOptions(),
        )
        suite = await self.generate_suite(request)
        return suite.source

    async def generate_suite(self, request: GenerationRequest) -> GeneratedSuite:
        """
        Run the full pipeline for one request.

        Args:
            request: Module, recipe and options

        Returns:
            GeneratedSuite with the final source and selected exports
        """
        recipe = coerce_recipe(request.recipe, request.module_path)
        module_path = request.module_path
        options = request.options
        start_time = time.monotonic()

        logger.info(
            f"Generating suite for {module_path}",
            extra={"metadata": {"module_path": module_path, "mode": recipe.mode.value}},
        )

        virtual_path = self.virtual_path_resolver(module_path)
        public_url = module_public_url(module_path, self.project_root)

        all_exports = await self.resolver.find_export_names(module_path)
        export_names = await select_exports(all_exports, module_path, recipe.export_filter)
        logger.debug(
            f"Selected {len(export_names)} of {len(all_exports)} exports",
            extra={"metadata": {"all_exports": list(all_exports), "selected": export_names}},
        )

        build_result = await self.bundler.build_file(module_path, dict(options.bundler_options))
        bundled_text = build_result.output_files[0].text

        specs = [
            self.synthesizer.build_spec(
                export_name, module_path, public_url, recipe, options.cli_args
            )
            for export_name in export_names
        ]
        declarations = [self.synthesizer.render(spec, recipe) for spec in specs]

        assembled = self.assembler.assemble(
            bundled_text,
            generate_console_bridge(recipe.show_browser_console),
            declarations,
            os.path.basename(module_path),
        )

        transformed = await self.transformer.transform_file(
            assembled, virtual_path, os.path.splitext(module_path)[1]
        )
        source = transformed.code
        if recipe.post_process is not None:
            source = recipe.post_process(source)

        duration = time.monotonic() - start_time
        log_performance(
            logger,
            f"suite_generation_{os.path.basename(module_path)}",
            duration,
            module_path=module_path,
            test_cases=len(specs),
        )

        return GeneratedSuite(
            module_path=module_path,
            virtual_path=virtual_path,
            source=source,
            export_names=list(export_names),
            exclusive_exports=[spec.export_name for spec in specs if spec.is_exclusive],
            duration=duration,
        )
