"""
Browser console bridge snippet.

The snippet runs inside the suite's setup-once hook. On Chromium-based
browsers it opens a CDP connection, relays ``console.*`` calls and uncaught
exceptions from the page to the test runner's console, and stores the
connection in the suite-scoped ``cdpConnection`` variable that the
teardown-once hook closes.
"""

from typing import Sequence

from .templating import get_environment

# Engines reporting one of these browserName values speak CDP
BRIDGE_ENGINES: Sequence[str] = ("chrome", "msedge")
BROWSER_TAG = "[browser]"


def generate_console_bridge(enabled: bool) -> str:
    """Render the console bridge snippet, or an empty string when disabled."""
    if not enabled:
        return ""

    template = get_environment().get_template("console_bridge.js.j2")
    return template.render(engines=list(BRIDGE_ENGINES), tag=BROWSER_TAG)
