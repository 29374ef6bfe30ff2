"""
Path helpers for generated suites.
"""

import os
from pathlib import Path
from typing import Optional, Union

VIRTUAL_SUFFIX = ".nightwatch"


def get_virtual_file_path(module_path: Union[str, Path]) -> str:
    """Name of the generated suite, placed beside its component.

    ``/app/src/Button.jsx`` becomes ``/app/src/Button.nightwatch.jsx``; the
    extension is kept so the transform picks the component's loader.
    """
    path = Path(module_path)
    return str(path.with_name(f"{path.stem}{VIRTUAL_SUFFIX}{path.suffix}"))


def module_public_url(module_path: Union[str, Path], root: Optional[Union[str, Path]] = None) -> str:
    """URL-style path of a module relative to the project root.

    ``/app/src/Button.jsx`` with root ``/app`` gives ``/src/Button.jsx``. Modules
    outside the root keep their full path.
    """
    root = Path(root) if root is not None else Path(os.getcwd())
    try:
        relative = Path(module_path).relative_to(root)
    except ValueError:
        return "/".join(str(module_path).split(os.sep))
    return "/" + relative.as_posix()
