"""
Export selection: which exports of a module become test cases.
"""

import inspect
from typing import Any, Callable, List, Optional, Sequence

DEFAULT_EXPORT = "default"


async def select_exports(
    all_exports: Sequence[str],
    module_path: str,
    export_filter: Optional[Callable[..., Any]] = None,
) -> List[str]:
    """Pick the export names that get a test case.

    Without a filter a lone export is always kept, otherwise the ``default``
    export is dropped. A filter's result, awaited if needed, is used as is.

    Args:
        all_exports: Export names in module order
        module_path: Path of the module, forwarded to the filter
        export_filter: Optional ``(all_exports, module_path)`` callable

    Returns:
        Selected export names, order preserved
    """
    if export_filter is not None:
        selected = export_filter(list(all_exports), module_path)
        if inspect.isawaitable(selected):
            selected = await selected
        return list(selected)

    if len(all_exports) <= 1:
        return list(all_exports)

    return [name for name in all_exports if name != DEFAULT_EXPORT]
