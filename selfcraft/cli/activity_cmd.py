"""Activity commands — the log as the agent sees it."""

from __future__ import annotations

import click

from selfcraft.cli.app import async_cmd, get_runtime
from selfcraft.cli.formatters import emit_result


@click.group("activity")
def activity_group() -> None:
    """Inspect the activity log."""


@activity_group.command("log")
@click.option("--days", type=click.IntRange(1, 30), default=None, help="Days to look back")
@click.option("--limit", type=click.IntRange(1, 100), default=None, help="Maximum entries")
@click.pass_context
@async_cmd
async def log_cmd(ctx: click.Context, days: int | None, limit: int | None) -> None:
    """Show the grouped activity report."""
    arguments = {k: v for k, v in {"days": days, "limit": limit}.items() if v is not None}
    emit_result(ctx, await get_runtime(ctx).call("get_activity_log", arguments))


@activity_group.command("summary")
@click.pass_context
@async_cmd
async def summary_cmd(ctx: click.Context) -> None:
    """One-line summary of recent activity."""
    emit_result(ctx, await get_runtime(ctx).call("get_activity_summary"))


@activity_group.command("stats")
@click.option("--days", type=click.IntRange(1, 365), default=None, help="Days to count")
@click.pass_context
@async_cmd
async def stats_cmd(ctx: click.Context, days: int | None) -> None:
    """Counts per activity type."""
    arguments = {"days": days} if days is not None else {}
    emit_result(ctx, await get_runtime(ctx).call("get_activity_stats", arguments))
