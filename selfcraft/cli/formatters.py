"""CLI formatters — consoles, tables and capability-result output."""

from __future__ import annotations

import json as json_mod
from typing import Any

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from selfcraft.capabilities.executor import CapabilityResult, render_result


def get_console(no_color: bool = False) -> Console:
    """Get a Rich Console, optionally with color disabled."""
    return Console(no_color=no_color)


def lock_indicator(is_locked: bool) -> Text:
    if is_locked:
        return Text("locked ", style="bold red")
    return Text("unlocked ", style="green")


def build_table(title: str, columns: list[str], rows: list[list[Any]]) -> Table:
    """Build a Rich table with standard styling."""
    table = Table(title=title, show_header=True, header_style="bold")
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*(str(v) for v in row))
    return table


def emit_result(ctx: click.Context, result: CapabilityResult) -> None:
    """Print a capability result; failures go to stderr with exit code 1."""
    if ctx.obj.get("json"):
        click.echo(json_mod.dumps({
            "name": result.name,
            "success": result.success,
            "result": json_mod.loads(render_result(result.result))
            if result.success and not isinstance(result.result, str)
            else result.result,
            "error": result.error,
        }, indent=2))
    elif result.success:
        click.echo(render_result(result.result))
    else:
        click.echo(f"Error: {result.error}", err=True)
    if not result.success:
        ctx.exit(1)
