"""
taskreview CLI - Main application entry point.

This module sets up the Typer CLI application: the bare command runs the
interactive review shell, and a couple of subcommands inspect the install.
"""

import logging
import sys
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from taskreview import __version__
from taskreview.cli.errors import (
    ExitCode,
    print_backend_error,
    print_error,
    print_invalid_config_error,
)
from taskreview.cli.shell import ReviewShell
from taskreview.cli.terminal import Terminal
from taskreview.core.config.env import load_layered_env
from taskreview.core.config.loader import load_config
from taskreview.core.config.models import ReviewConfig
from taskreview.core.keys.defaults import BUILTIN_KEYS, generate_mappings
from taskreview.core.keys.registry import KeyRegistry
from taskreview.core.review.session import ReviewSession
from taskreview.core.tasks import TaskBackendError, TaskStore, get_backend
from taskreview.display.renderer import ReviewRenderer

logger = logging.getLogger(__name__)

# Create the main Typer app
app = typer.Typer(
    name="taskreview",
    help="Keyboard-driven review console for Taskwarrior",
    no_args_is_help=False,
    invoke_without_command=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console(highlight=False)


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for the CLI.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def resolve_config(
    filter_expression: str | None = None,
    keys_path: Path | None = None,
    rtag: str | None = None,
) -> ReviewConfig:
    """
    Load layered configuration and apply CLI options on top.

    Raises:
        typer.Exit: With USER_ERROR if the configuration does not validate
    """
    overrides: dict[str, object] = {}
    if filter_expression is not None:
        overrides["filter"] = filter_expression
    if keys_path is not None:
        overrides["keys_path"] = keys_path
    if rtag is not None:
        overrides["reviewer_tag"] = rtag

    try:
        config = load_config()
        if overrides:
            config = ReviewConfig(**{**config.model_dump(), **overrides})
    except ValidationError as e:
        print_invalid_config_error(str(e))
        raise typer.Exit(ExitCode.USER_ERROR)
    return config


def run_review(config: ReviewConfig) -> ExitCode:
    """
    Run the interactive shell until the user quits.

    The key map is saved on every exit path, including fatal backend errors
    and Ctrl+C.

    Returns:
        Exit code for the process
    """
    keys = KeyRegistry.load(config.keys_path)
    exit_code = ExitCode.SUCCESS
    try:
        store = TaskStore(
            get_backend(task_command=config.task_command),
            completion_period=config.completion_period,
        )
        generate_mappings(keys, store.vocabulary())

        session = ReviewSession.from_config(config)
        renderer = ReviewRenderer(session, console)
        console.print(f"Taskreview version {__version__}")
        with Terminal(console=console) as terminal:
            ReviewShell(store, keys, session, terminal, renderer).run(config.filter)
    except TaskBackendError as e:
        logger.debug("Fatal backend error", exc_info=True)
        print_backend_error(e)
        exit_code = ExitCode.GENERAL_ERROR
    except KeyboardInterrupt:
        console.print()
        exit_code = ExitCode.SIGINT
    finally:
        try:
            keys.save(config.keys_path)
        except OSError as e:
            print_error(f"Could not save key map to {config.keys_path}", reason=str(e))
    return exit_code


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    filter_expression: str | None = typer.Option(
        None,
        "--filter",
        "-f",
        help="Initial filter expression (e.g. 'project:home +@alice')",
    ),
    keys_path: Path | None = typer.Option(
        None,
        "--keys",
        help="Path of the persisted key map (default: ~/.taskreview)",
    ),
    rtag: str | None = typer.Option(
        None,
        "--rtag",
        help="Tag used to mark completed tasks as reviewed (default: r:$USER)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    taskreview - review Taskwarrior tasks one keystroke at a time.

    Build a filter with single keys, press Enter to page through the matching
    tasks, and edit, color, assign or mark them as you go. Every write checks
    that the task was not modified elsewhere since it was shown.

    Quick Start:
        taskreview                       # Start with an empty filter
        taskreview -f "project:home"     # Start with a filter
        taskreview keys                  # Show the key map
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()
    setup_logging(debug)

    ctx.obj = {"debug": debug}

    if ctx.invoked_subcommand is not None:
        return

    config = resolve_config(filter_expression, keys_path, rtag)
    exit_code = run_review(config)
    if exit_code != ExitCode.SUCCESS:
        raise typer.Exit(exit_code)


@app.command()
def version() -> None:
    """Show taskreview version and exit."""
    console.print(f"taskreview version {__version__}")
    raise typer.Exit(0)


@app.command()
def keys(
    context: str | None = typer.Argument(
        None,
        help="Only show this context (e.g. item-editor, project)",
    ),
    generate: bool = typer.Option(
        False,
        "--generate",
        "-g",
        help="Regenerate keys from Taskwarrior before showing them",
    ),
    keys_path: Path | None = typer.Option(
        None,
        "--keys",
        help="Path of the persisted key map (default: ~/.taskreview)",
    ),
) -> None:
    """Show the persisted key map, optionally regenerated from Taskwarrior."""
    config = resolve_config(keys_path=keys_path)
    registry = KeyRegistry.load(config.keys_path)

    if generate:
        try:
            store = TaskStore(get_backend(task_command=config.task_command))
            generate_mappings(registry, store.vocabulary())
        except TaskBackendError as e:
            print_backend_error(e)
            raise typer.Exit(ExitCode.GENERAL_ERROR)
        registry.save(config.keys_path)

    contexts = [context] if context else registry.contexts() or list(BUILTIN_KEYS)

    table = Table(title=f"Key map ({config.keys_path})")
    table.add_column("Context", style="cyan")
    table.add_column("Key", style="bold yellow")
    table.add_column("Value")
    table.add_column("State", style="dim")

    rows = 0
    for name in contexts:
        for key, value, live in registry.entries(name):
            table.add_row(name, key, value, "live" if live else "stale")
            rows += 1

    if rows == 0:
        console.print("[dim]No keys assigned yet. Use --generate to build them.[/dim]")
        return
    console.print(table)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
