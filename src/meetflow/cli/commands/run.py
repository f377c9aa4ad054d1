"""meetflow run -- run rules against a processed meeting."""

from __future__ import annotations

import json

import click

from meetflow.cli.formatting import format_outcome


@click.command()
@click.argument("context_file", type=click.File("r"))
@click.option("--rule", "rule_id", default=None, help="Run only this rule.")
@click.option("--json", "as_json", is_flag=True, help="Print the raw outcome as JSON.")
@click.pass_context
def run(ctx: click.Context, context_file, rule_id: str | None, as_json: bool) -> None:  # type: ignore[no-untyped-def]
    """Run enabled rules against CONTEXT_FILE (use - for stdin).

    The file holds transcript, summary and metadata (duration in minutes,
    optional sentiment).
    """
    from meetflow.cli import _engine_session

    with _engine_session(ctx) as (engine, console):
        context = json.load(context_file)
        outcome = engine.run_workflows(context, rule_id)
        if as_json:
            click.echo(json.dumps(outcome.to_dict(), indent=2, default=str))
        else:
            format_outcome(outcome, console)
