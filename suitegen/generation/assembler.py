"""
Suite assembly: bundled module text, lifecycle hooks and test cases.
"""

from typing import Sequence

from .templating import get_environment


class SuiteAssembler:
    """Wraps rendered test cases in a ``describe`` block for one module.

    Hooks are wired to the optional ``test`` namespace of the module's
    default export. Wiring runs inside a ``try`` in the generated code, so a
    malformed default export is logged by the runner and the cases declared
    after it still register.
    """

    def __init__(self):
        self._template = get_environment().get_template("suite.js.j2")

    def assemble(
        self,
        bundled_module_text: str,
        console_bridge_snippet: str,
        test_case_declarations: Sequence[str],
        module_base_name: str,
    ) -> str:
        """
        Produce the full suite source.

        Args:
            bundled_module_text: Browser-ready module text from the bundler
            console_bridge_snippet: Setup code run first in the setup-once hook
            test_case_declarations: Rendered cases, in the order they are declared
            module_base_name: File name of the module, used for the suite title

        Returns:
            Suite source ready for the transform step
        """
        return self._template.render(
            bundled_module_text=bundled_module_text,
            console_bridge=console_bridge_snippet,
            test_cases=list(test_case_declarations),
            suite_title=f"{module_base_name} component",
        )
