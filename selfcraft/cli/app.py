"""CLI application — click command hierarchy for selfcraft.

The main group and its global flags. Subcommand modules register themselves
by importing and adding to the group.
"""

from __future__ import annotations

import asyncio
import functools
from typing import Any

import click


def async_cmd(func):
    """Decorator to run an async click command via asyncio.run()."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return asyncio.run(func(*args, **kwargs))

    return wrapper


def get_runtime(ctx: click.Context):
    """The runtime for this invocation, built on first use.

    Tests inject a pre-built runtime through ``obj={"runtime": ...}``.
    """
    root = ctx.find_root()
    root.ensure_object(dict)
    runtime = root.obj.get("runtime")
    if runtime is None:
        from selfcraft.runtime import SelfcraftRuntime

        runtime = SelfcraftRuntime()
        root.obj["runtime"] = runtime
    return runtime


@click.group()
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors")
@click.pass_context
def cli(ctx: click.Context, json_output: bool, no_color: bool) -> None:
    """selfcraft - persisted self-improvement records for your agent."""
    ctx.ensure_object(dict)
    ctx.obj["json"] = json_output
    ctx.obj["no_color"] = no_color


# ---------------------------------------------------------------------------
# Register subcommand modules
# ---------------------------------------------------------------------------

def _register_subcommands() -> None:
    """Import and register all subcommand groups/commands."""
    from selfcraft.cli.activity_cmd import activity_group
    from selfcraft.cli.profile_cmd import profile_group
    from selfcraft.cli.safe_cmd import safe_group
    from selfcraft.cli.tools_cmd import call_cmd, tools_cmd

    cli.add_command(safe_group)
    cli.add_command(profile_group)
    cli.add_command(activity_group)
    cli.add_command(tools_cmd)
    cli.add_command(call_cmd)


_register_subcommands()
