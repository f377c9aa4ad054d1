"""meetflow create / list / show / enable / disable / delete -- rule management."""

from __future__ import annotations

import json

import click

from meetflow.cli.formatting import format_rule_detail, format_rules_table


@click.command()
@click.argument("spec_file", type=click.File("r"))
@click.pass_context
def create(ctx: click.Context, spec_file) -> None:  # type: ignore[no-untyped-def]
    """Create a rule from a JSON file (use - for stdin).

    The file holds name, description, enabled, triggers and actions.
    """
    from meetflow.cli import _engine_session

    with _engine_session(ctx) as (engine, console):
        spec = json.load(spec_file)
        rule = engine.create_rule(spec)
        console.print(f"Created rule [yellow]{rule.rule_id}[/yellow] ({rule.name})")


@click.command(name="list")
@click.pass_context
def list_rules(ctx: click.Context) -> None:
    """List all rules."""
    from meetflow.cli import _engine_session

    with _engine_session(ctx) as (engine, console):
        format_rules_table(engine.list_rules(), console)


@click.command()
@click.argument("rule_id")
@click.pass_context
def show(ctx: click.Context, rule_id: str) -> None:
    """Show one rule with its triggers and actions."""
    from meetflow.cli import _engine_session

    with _engine_session(ctx) as (engine, console):
        format_rule_detail(engine.get_rule(rule_id), console)


@click.command()
@click.argument("rule_id")
@click.pass_context
def enable(ctx: click.Context, rule_id: str) -> None:
    """Enable RULE_ID."""
    from meetflow.cli import _engine_session

    with _engine_session(ctx) as (engine, console):
        rule = engine.set_enabled(rule_id, True)
        console.print(f"Enabled [yellow]{rule.rule_id}[/yellow] ({rule.name})")


@click.command()
@click.argument("rule_id")
@click.pass_context
def disable(ctx: click.Context, rule_id: str) -> None:
    """Disable RULE_ID. Disabled rules are skipped by every run."""
    from meetflow.cli import _engine_session

    with _engine_session(ctx) as (engine, console):
        rule = engine.set_enabled(rule_id, False)
        console.print(f"Disabled [yellow]{rule.rule_id}[/yellow] ({rule.name})")


@click.command()
@click.argument("rule_id")
@click.option("--force", is_flag=True, help="Required; deletion cannot be undone.")
@click.pass_context
def delete(ctx: click.Context, rule_id: str, force: bool) -> None:
    """Delete RULE_ID with its triggers and actions."""
    from meetflow.cli import _engine_session
    from meetflow.cli.formatting import format_error, get_console

    if not force:
        format_error("Deleting a rule requires --force flag.", get_console())
        raise SystemExit(1)

    with _engine_session(ctx) as (engine, console):
        engine.delete_rule(rule_id)
        console.print(f"Deleted rule [yellow]{rule_id}[/yellow]")
