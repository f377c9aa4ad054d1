"""Rich formatting helpers for the Meetflow CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from meetflow.models.outcome import ExecutionOutcome
    from meetflow.models.rule import RuleInfo


def get_console(*, stderr: bool = False) -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=stderr)


def format_rules_table(rules: list[RuleInfo], console: Console) -> None:
    """Display rules as a compact table."""
    if not rules:
        console.print("[dim]No rules.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("ID", style="yellow", width=8)
    table.add_column("Name")
    table.add_column("On", width=3)
    table.add_column("Triggers", justify="right")
    table.add_column("Actions", justify="right")
    table.add_column("Runs", justify="right", style="green")
    table.add_column("Last fired", style="dim")

    for rule in rules:
        last = rule.last_triggered.strftime("%Y-%m-%d %H:%M") if rule.last_triggered else "-"
        table.add_row(
            rule.rule_id[:8],
            escape(rule.name),
            "yes" if rule.enabled else "no",
            str(len(rule.triggers)),
            str(len(rule.actions)),
            str(rule.execution_count),
            last,
        )

    console.print(table)


def format_rule_detail(rule: RuleInfo, console: Console) -> None:
    """Display one rule with its triggers and actions."""
    state = "[green]enabled[/green]" if rule.enabled else "[red]disabled[/red]"
    console.print(f"[yellow]rule {rule.rule_id}[/yellow]")
    console.print(f"  Name:      {escape(rule.name)} ({state})")
    if rule.description:
        console.print(f"  About:     {escape(rule.description)}")
    console.print(f"  Runs:      [green]{rule.execution_count}[/green]")
    if rule.last_triggered:
        console.print(f"  Last:      {rule.last_triggered.strftime('%Y-%m-%d %H:%M:%S')}")
    console.print("  Triggers:")
    for t in rule.triggers:
        value = f" {t.value}" if t.value is not None else ""
        console.print(f"    - [cyan]{t.kind}[/cyan] {escape(t.condition)}{escape(value)}")
    console.print("  Actions:")
    for a in rule.actions:
        config = escape(json.dumps(a.config, sort_keys=True)) if a.config else ""
        console.print(f"    - [cyan]{a.kind}[/cyan] {config}")


def format_outcome(outcome: ExecutionOutcome, console: Console) -> None:
    """Display the result of one automation pass."""
    if not outcome.triggered_workflows:
        console.print("[dim]No rules fired.[/dim]")
        return

    console.print(
        f"Fired {len(outcome.triggered_workflows)} rule(s): "
        + ", ".join(escape(name) for name in outcome.triggered_workflows)
    )
    for action in outcome.actions_executed:
        if action.success:
            mark = "[green]ok[/green]  "
            detail = json.dumps(action.result, default=str) if action.result is not None else ""
        else:
            mark = "[red]fail[/red]"
            detail = action.error or ""
        console.print(
            f"  {mark} {escape(action.rule_name)} / [cyan]{action.action_type}[/cyan] "
            f"{escape(detail)}",
            highlight=False,
        )


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
