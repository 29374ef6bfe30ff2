"""
Recipe files: YAML descriptions of a test recipe for the command line.

Example::

    name: "{export_name} renders"
    createTest: |
      async function ({publicUrl, exportName}) {
        return async function (browser) {
          await browser.navigateTo(publicUrl);
        };
      }
    showBrowserConsole: true
    exports: [Primary, Secondary]
    only: [Primary]
    data:
      Primary: {label: Hello}
"""

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import yaml

from ..core.exceptions import RecipeError
from .models import TestRecipe

EXPORT_PLACEHOLDER = "{export_name}"

# Recipe file keys, camelCase as in Nightwatch configs or snake_case
KEY_ALIASES = {
    "name": "name",
    "displayName": "name",
    "display_name": "name",
    "createTest": "create_test",
    "create_test": "create_test",
    "mode": "mode",
    "showBrowserConsole": "show_browser_console",
    "show_browser_console": "show_browser_console",
    "exports": "exports",
    "only": "only",
    "data": "data",
}


def _display_name(name: Optional[str]) -> Optional[Union[str, Callable[[str], str]]]:
    if name is None or EXPORT_PLACEHOLDER not in name:
        return name
    return lambda export_name: name.replace(EXPORT_PLACEHOLDER, export_name)


def _export_filter(allowed: List[str]) -> Callable[[List[str], str], List[str]]:
    allowed_set = set(allowed)

    def export_filter(all_exports: List[str], module_path: str) -> List[str]:
        return [name for name in all_exports if name in allowed_set]

    return export_filter


def _only_filter(only: List[str]) -> Callable[[Dict[str, Any], Dict[str, Any]], bool]:
    only_set = set(only)

    def only_filter(case_options: Dict[str, Any], cli_args: Dict[str, Any]) -> bool:
        export_name = case_options["exportName"]
        return export_name in only_set or cli_args.get("story") == export_name

    return only_filter


def _additional_data(data: Dict[str, Any]) -> Callable[[str], Dict[str, Any]]:
    def additional_data(export_name: str) -> Dict[str, Any]:
        return dict(data.get(export_name) or {})

    return additional_data


def recipe_from_mapping(raw: Dict[str, Any], source: str = "<recipe>") -> TestRecipe:
    """
    Build a TestRecipe from a parsed recipe mapping.

    Args:
        raw: Mapping read from a recipe file
        source: Where the mapping came from, for error messages

    Returns:
        Validated TestRecipe

    Raises:
        RecipeError: On unknown keys or wrongly typed values
    """
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in KEY_ALIASES:
            raise RecipeError(f"Unknown recipe key '{key}' in {source}", field_name=key)
        values[KEY_ALIASES[key]] = value

    for list_key in ("exports", "only"):
        if list_key in values and not isinstance(values[list_key], list):
            raise RecipeError(f"'{list_key}' in {source} must be a list", field_name=list_key)
    if "data" in values and not isinstance(values["data"], dict):
        raise RecipeError(f"'data' in {source} must be a mapping", field_name="data")
    for export_name, payload in (values.get("data") or {}).items():
        if payload is not None and not isinstance(payload, dict):
            raise RecipeError(
                f"'data.{export_name}' in {source} must be a mapping", field_name="data"
            )

    fields: Dict[str, Any] = {
        "display_name": _display_name(values.get("name")),
        "create_test": values.get("create_test"),
        "mode": values.get("mode"),
        "show_browser_console": bool(values.get("show_browser_console", False)),
    }
    if values.get("exports") is not None:
        fields["export_filter"] = _export_filter(values["exports"])
    fields["only_filter"] = _only_filter(values.get("only") or [])
    if values.get("data"):
        fields["additional_data"] = _additional_data(values["data"])

    try:
        return TestRecipe(**fields)
    except ValueError as e:
        raise RecipeError(f"Invalid recipe in {source}: {e}")


def load_recipe(path: Union[str, Path]) -> TestRecipe:
    """
    Load a YAML recipe file.

    Raises:
        RecipeError: If the file is missing, unparsable or invalid
    """
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise RecipeError(f"Cannot read recipe file {path}: {e}")
    except yaml.YAMLError as e:
        raise RecipeError(f"Invalid YAML in recipe file {path}: {e}")

    if not isinstance(raw, dict):
        raise RecipeError(f"Recipe file {path} must contain a mapping")

    return recipe_from_mapping(raw, str(path))
