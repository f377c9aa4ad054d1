"""Meetflow CLI -- manage automation rules and run them against meetings.

This module is NEVER imported from meetflow/__init__.py.
It is only loaded via the ``meetflow`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

try:
    import click
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install meetflow[cli]"
    ) from None

from meetflow.cli.formatting import format_error, get_console

if TYPE_CHECKING:
    from collections.abc import Iterator

    from rich.console import Console

    from meetflow.engine import AutomationEngine


@click.group()
@click.option(
    "--db",
    default=".meetflow.db",
    envvar="MEETFLOW_DB",
    help="Path to the rule database.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log engine activity to stderr.")
@click.pass_context
def cli(ctx: click.Context, db: str, verbose: bool) -> None:
    """Meetflow: rule-based automation for processed meetings."""
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db
    if verbose:
        _configure_logging()


def _configure_logging() -> None:
    from rich.logging import RichHandler

    handler = RichHandler(console=get_console(stderr=True), show_path=False)
    root = logging.getLogger("meetflow")
    root.setLevel(logging.INFO)
    root.addHandler(handler)


def _get_engine(ctx: click.Context) -> AutomationEngine:
    """Open an AutomationEngine from Click context and the environment."""
    from meetflow.engine import AutomationEngine
    from meetflow.models.config import EngineConfig

    config = EngineConfig.from_env(db_path=ctx.obj["db_path"])
    return AutomationEngine.open(config=config)


@contextmanager
def _engine_session(ctx: click.Context) -> Iterator[tuple[AutomationEngine, Console]]:
    """Open an engine, yield (engine, console), and handle cleanup.

    Ensures the engine is closed on exit and formats exceptions as CLI errors.
    """
    console = get_console()
    try:
        engine = _get_engine(ctx)
        try:
            yield engine, console
        finally:
            engine.close()
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None


def main() -> None:
    """Console-script entry point."""
    cli(obj={})


# Register subcommands after cli group is defined
from meetflow.cli.commands.rules import (  # noqa: E402
    create,
    delete,
    disable,
    enable,
    list_rules,
    show,
)
from meetflow.cli.commands.run import run  # noqa: E402

cli.add_command(create)
cli.add_command(list_rules)
cli.add_command(show)
cli.add_command(enable)
cli.add_command(disable)
cli.add_command(delete)
cli.add_command(run)
