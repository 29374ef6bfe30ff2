"""
Main CLI interface for the suite generator.

Provides commands to generate a suite once, keep suites regenerated while
components change, and inspect the effective configuration.
"""

import argparse
import asyncio
import json
import sys
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from . import __version__
from .core.config_manager import ConfigManager, get_config_manager
from .core.exceptions import SuiteGenError
from .core.logging_config import setup_logging
from .generation.generator import SuiteGenerator
from .generation.models import GenerationOptions, TestRecipe
from .generation.recipes import load_recipe
from .generation.watcher import SuiteWatcher


def _status(message: str, to_stderr: bool = False) -> None:
    print(message, file=sys.stderr if to_stderr else sys.stdout)


def parse_cli_args(pairs: Optional[List[str]]) -> Dict[str, Any]:
    """
    Parse repeated ``--arg key=value`` pairs.

    Values are read as YAML scalars, so ``true`` and ``3`` keep their types.

    Raises:
        ValueError: If a pair has no ``=``
    """
    result: Dict[str, Any] = {}
    for pair in pairs or []:
        if "=" not in pair:
            raise ValueError(f"Expected key=value, got '{pair}'")
        key, value = pair.split("=", 1)
        result[key.strip()] = yaml.safe_load(value) if value else ""
    return result


def _config_manager(args: argparse.Namespace) -> ConfigManager:
    config_path = getattr(args, "config", None)
    return ConfigManager(Path(config_path)) if config_path else get_config_manager()


def _prepare(args: argparse.Namespace, manager: Optional[ConfigManager] = None):
    """Shared setup for generate and watch: config, logging, recipe, options."""
    config = (manager or _config_manager(args)).get_config()
    setup_logging(config, uuid.uuid4().hex)

    recipe: TestRecipe = load_recipe(args.recipe)
    if (args.show_browser_console or config.show_browser_console) and not recipe.show_browser_console:
        recipe = recipe.model_copy(update={"show_browser_console": True})

    options = GenerationOptions(
        cli_args=parse_cli_args(args.arg),
        bundler_options=dict(config.bundler_options),
    )
    return config, recipe, options


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate one suite, to a file or stdout."""
    to_stderr = args.output is None
    try:
        config, recipe, options = _prepare(args)
        module_path = str(Path(args.module).resolve())
        _status(f"🧩 Generating suite for {module_path}", to_stderr)

        generator = SuiteGenerator.from_config(config)
        source = asyncio.run(generator.generate(module_path, recipe, options))

        if args.output:
            output_path = Path(args.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(source, encoding="utf-8")
            _status(f"✅ Suite written to {output_path}")
        else:
            sys.stdout.write(source)
        return 0

    except SuiteGenError as e:
        _status(f"❌ Generation failed: {e}", to_stderr)
        if args.verbose:
            _status(json.dumps(e.to_dict(), indent=2, default=str), to_stderr)
        return 1
    except ValueError as e:
        _status(f"❌ Invalid arguments: {e}", to_stderr)
        return 1


def cmd_watch(args: argparse.Namespace) -> int:
    """Regenerate suites whenever their modules change."""
    manager = _config_manager(args)
    try:
        config, recipe, options = _prepare(args, manager)
        output_dir = Path(args.output_dir) if args.output_dir else config.output_dir

        watcher = SuiteWatcher(SuiteGenerator.from_config(config), recipe, output_dir, options)
        manager.add_reload_callback(watcher.reconfigure)
        if manager.config_file_path.parent.is_dir():
            manager.start_hot_reload()

        _status(f"👀 Watching {len(args.modules)} module(s), writing to {output_dir}")
        _status("   Press Ctrl+C to stop")
        try:
            asyncio.run(watcher.run(args.modules))
        finally:
            manager.stop_hot_reload()
            manager.remove_reload_callback(watcher.reconfigure)
        return 0

    except KeyboardInterrupt:
        _status("👋 Stopped watching")
        return 0
    except SuiteGenError as e:
        _status(f"❌ Watch failed: {e}")
        return 1
    except ValueError as e:
        _status(f"❌ Invalid arguments: {e}")
        return 1


def cmd_config(args: argparse.Namespace) -> int:
    """Show the effective configuration and its validation status."""
    manager = _config_manager(args)
    try:
        config = manager.get_config()
    except SuiteGenError as e:
        _status(f"❌ Could not load configuration: {e}")
        return 1

    _status(yaml.safe_dump(config.to_dict(), sort_keys=False).rstrip())
    errors = manager.validate_config(config)
    if errors:
        for error in errors:
            _status(f"❌ {error}")
        return 1

    _status("✅ Configuration is valid")
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    _status(f"suitegen {__version__}")
    if args.verbose:
        _status(f"  Python: {sys.version.split()[0]}")
        _status(f"  Platform: {sys.platform}")
    return 0


def _add_generation_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--recipe", "-r", required=True, help="Path to a YAML recipe file")
    parser.add_argument(
        "--arg",
        action="append",
        metavar="KEY=VALUE",
        help="CLI argument passed to recipe predicates (repeatable)",
    )
    parser.add_argument("--config", "-c", help="Path to a suitegen config file (YAML or JSON)")
    parser.add_argument(
        "--show-browser-console",
        action="store_true",
        help="Relay browser console output into the test run",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")


def create_main_parser() -> argparse.ArgumentParser:
    """Create main CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="suitegen",
        description="Generate browser test suites from UI component modules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  suitegen generate src/Button.jsx --recipe stories.yaml -o tests/Button.js
  suitegen generate src/Button.jsx --recipe stories.yaml --arg story=Primary
  suitegen watch src/Button.jsx src/Card.jsx --recipe stories.yaml --output-dir tests
  suitegen config
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    generate_parser = subparsers.add_parser("generate", help="Generate one test suite")
    generate_parser.add_argument("module", help="Path of the component module")
    generate_parser.add_argument("--output", "-o", help="Output file (default: stdout)")
    _add_generation_arguments(generate_parser)
    generate_parser.set_defaults(func=cmd_generate)

    watch_parser = subparsers.add_parser("watch", help="Regenerate suites on change")
    watch_parser.add_argument("modules", nargs="+", help="Component modules to watch")
    watch_parser.add_argument("--output-dir", help="Directory for generated suites")
    _add_generation_arguments(watch_parser)
    watch_parser.set_defaults(func=cmd_watch)

    config_parser = subparsers.add_parser("config", help="Show and validate configuration")
    config_parser.add_argument("--config", "-c", help="Path to a suitegen config file")
    config_parser.set_defaults(func=cmd_config)

    version_parser = subparsers.add_parser("version", help="Show version information")
    version_parser.add_argument("--verbose", "-v", action="store_true")
    version_parser.set_defaults(func=cmd_version)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_main_parser()

    if args is None:
        args = sys.argv[1:]

    parsed_args = parser.parse_args(args)

    if not hasattr(parsed_args, "func"):
        parser.print_help()
        return 1

    return parsed_args.func(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
