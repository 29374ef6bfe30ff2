"""
Test-case synthesis: one ``it(...)`` declaration per selected export.
"""

import json
from typing import Any, Dict, Optional

from ..core.exceptions import RecipeError
from ..core.logging_config import get_logger
from .models import RecipeMode, TestCaseSpec, TestRecipe
from .templating import get_environment

logger = get_logger(__name__)

TEMPLATES = {
    RecipeMode.SYNC: "test_case_sync.js.j2",
    RecipeMode.ASYNC: "test_case_async.js.j2",
}


class TestCaseSynthesizer:
    """Builds test-case specs and renders them as JavaScript declarations.

    The recipe's ``create_test`` source is spliced into every declaration and
    re-evaluated by the test runner, so it cannot close over anything from
    the place it was written. Everything else is passed as literals.
    """

    __test__ = False

    def __init__(self):
        self._env = get_environment()

    def build_spec(
        self,
        export_name: str,
        module_path: str,
        module_public_url: str,
        recipe: TestRecipe,
        cli_args: Optional[Dict[str, Any]] = None,
    ) -> TestCaseSpec:
        """
        Create the immutable spec for one export.

        Args:
            export_name: Export under test
            module_path: Path of the component module
            module_public_url: Module path relative to the project root, URL style
            recipe: Recipe supplying title, payload and exclusivity
            cli_args: Command-line arguments forwarded to the exclusivity predicate

        Returns:
            TestCaseSpec for the export

        Raises:
            RecipeError: If the additional data cannot be serialized to JSON
        """
        title = recipe.title_for(export_name)

        payload: Dict[str, Any] = {"exportName": export_name, "modulePath": module_path}
        if recipe.additional_data is not None:
            extra = recipe.additional_data(export_name)
            if extra:
                if not isinstance(extra, dict):
                    raise RecipeError(
                        f"additional_data for '{export_name}' must return a mapping, "
                        f"got {type(extra).__name__}",
                        field_name="additional_data",
                        module_path=module_path,
                    )
                payload.update(extra)

        try:
            json.dumps(payload)
        except (TypeError, ValueError) as e:
            raise RecipeError(
                f"additional_data for '{export_name}' is not JSON-serializable: {e}",
                field_name="additional_data",
                module_path=module_path,
            )

        is_exclusive = False
        if recipe.only_filter is not None:
            case_options = {
                "name": recipe.display_name,
                "exportName": export_name,
                "modulePath": module_path,
                "modulePublicUrl": module_public_url,
            }
            is_exclusive = bool(recipe.only_filter(case_options, cli_args or {}))

        return TestCaseSpec(
            export_name=export_name,
            title=title,
            module_path=module_path,
            module_public_url=module_public_url,
            is_exclusive=is_exclusive,
            payload=payload,
        )

    def render(self, spec: TestCaseSpec, recipe: TestRecipe) -> str:
        """
        Render one test-case declaration.

        Args:
            spec: Spec produced by build_spec
            recipe: Recipe whose create_test source and mode drive the rendering

        Returns:
            JavaScript source of the ``it(...)`` declaration
        """
        mode = recipe.mode or RecipeMode.SYNC
        template = self._env.get_template(TEMPLATES[mode])

        logger.debug(
            f"Rendering {mode.value} case for export {spec.export_name}",
            extra={"metadata": {"export_name": spec.export_name, "exclusive": spec.is_exclusive}},
        )

        return template.render(spec=spec, create_test=recipe.create_test.strip())
