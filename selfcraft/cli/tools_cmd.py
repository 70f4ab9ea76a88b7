"""Capability commands — list and call capabilities."""

from __future__ import annotations

import json as json_mod

import click

from selfcraft.cli.app import async_cmd, get_runtime
from selfcraft.cli.formatters import build_table, emit_result, get_console


@click.command("tools")
@click.option("--category", "categories", multiple=True, help="Filter by category")
@click.pass_context
def tools_cmd(ctx: click.Context, categories: tuple[str, ...]) -> None:
    """List the capabilities exposed to the agent."""
    runtime = get_runtime(ctx)
    if ctx.obj.get("json"):
        click.echo(json_mod.dumps(runtime.api_tools(list(categories) or None), indent=2))
        return
    rows = [
        [c["name"], c["category"], ", ".join(c["arguments"]) or "-"]
        for c in runtime.registry.list_capabilities()
        if not categories or c["category"] in categories
    ]
    console = get_console(no_color=ctx.obj.get("no_color", False))
    console.print(build_table("Capabilities", ["Name", "Category", "Arguments"], rows))


@click.command("call")
@click.argument("name")
@click.option("--args", "raw_args", default="{}", help="Arguments as a JSON object")
@click.option("--events", "show_events", is_flag=True, help="Print agent events raised by the call")
@click.pass_context
@async_cmd
async def call_cmd(ctx: click.Context, name: str, raw_args: str, show_events: bool) -> None:
    """Invoke capability NAME the way the agent would."""
    try:
        arguments = json_mod.loads(raw_args)
    except json_mod.JSONDecodeError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}", param_hint="--args") from exc
    if not isinstance(arguments, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--args")

    runtime = get_runtime(ctx)
    result = await runtime.call(name, arguments)
    pending = runtime.drain_events()
    if show_events and pending:
        click.echo(pending, err=True)
    emit_result(ctx, result)

