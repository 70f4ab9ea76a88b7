"""Profile commands — show and edit the profile and its achievements."""

from __future__ import annotations

import json as json_mod
from datetime import datetime

import click

from selfcraft.cli.app import async_cmd, get_runtime
from selfcraft.cli.formatters import build_table, emit_result, get_console
from selfcraft.profile import sort_by_date_descending


def _format_date(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


@click.group("profile")
def profile_group() -> None:
    """Read and edit the profile."""


@profile_group.command("show")
@click.pass_context
def show_cmd(ctx: click.Context) -> None:
    """Show title, description and achievement count."""
    record = get_runtime(ctx).profile.current()
    if ctx.obj.get("json"):
        click.echo(json_mod.dumps(record.to_payload(), indent=2))
        return
    console = get_console(no_color=ctx.obj.get("no_color", False))
    console.print(f"[bold]{record.title}[/bold]", markup=True)
    console.print(record.description, markup=False)
    for name, value in record.fields.items():
        console.print(f"  {name}: {value}", markup=False)
    console.print(f"Achievements: {len(record.achievements)}")


@profile_group.command("achievements")
@click.pass_context
def achievements_cmd(ctx: click.Context) -> None:
    """List achievements, newest first."""
    record = get_runtime(ctx).profile.current()
    ordered = sort_by_date_descending(record.achievements)
    if ctx.obj.get("json"):
        click.echo(json_mod.dumps([a.to_payload() for a in ordered], indent=2))
        return
    if not ordered:
        click.echo("No achievements yet.")
        return
    console = get_console(no_color=ctx.obj.get("no_color", False))
    console.print(build_table(
        "Achievements",
        ["Date", "Title", "Description", "ID"],
        [[_format_date(a.date), a.title, a.description, a.id] for a in ordered],
    ))


@profile_group.command("title")
@click.argument("title")
@click.pass_context
@async_cmd
async def title_cmd(ctx: click.Context, title: str) -> None:
    """Set the profile title."""
    emit_result(ctx, await get_runtime(ctx).call("setTitle", {"title": title}))


@profile_group.command("description")
@click.argument("description")
@click.pass_context
@async_cmd
async def description_cmd(ctx: click.Context, description: str) -> None:
    """Set the profile description."""
    emit_result(ctx, await get_runtime(ctx).call("setDescription", {"description": description}))


@profile_group.command("add")
@click.argument("title")
@click.option("--description", "-d", default="", help="What was achieved")
@click.pass_context
@async_cmd
async def add_cmd(ctx: click.Context, title: str, description: str) -> None:
    """Add an achievement called TITLE."""
    emit_result(
        ctx,
        await get_runtime(ctx).call("addAchievement", {"title": title, "description": description}),
    )


@profile_group.command("remove")
@click.argument("achievement_id")
@click.pass_context
@async_cmd
async def remove_cmd(ctx: click.Context, achievement_id: str) -> None:
    """Remove the achievement with ACHIEVEMENT_ID."""
    emit_result(ctx, await get_runtime(ctx).call("removeAchievement", {"id": achievement_id}))
