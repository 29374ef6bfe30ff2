"""
Jinja2 environment for rendering generated JavaScript.

Values computed at generation time reach the templates only through the
``jsliteral`` filter, so names and paths can never terminate a string
literal early or inject code.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATE_DIR = Path(__file__).parent / "templates"


def js_literal(value: Any) -> str:
    """Serialize a JSON-safe value as a JavaScript literal.

    Raises:
        TypeError: If the value is not JSON-serializable
    """
    text = json.dumps(value, ensure_ascii=False, sort_keys=False)
    # Line separators are legal in JSON strings but not in pre-ES2019 JS strings
    return text.replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")


@lru_cache(maxsize=None)
def get_environment() -> Environment:
    """Shared template environment (JavaScript output, no HTML escaping)."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
    )
    env.filters["jsliteral"] = js_literal
    return env
