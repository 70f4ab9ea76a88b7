"""Safe commands — status, lock, unlock."""

from __future__ import annotations

import json as json_mod

import click

from selfcraft.cli.app import async_cmd, get_runtime
from selfcraft.cli.formatters import emit_result, get_console, lock_indicator


@click.group("safe")
def safe_group() -> None:
    """Lock a key away and check on it."""


@safe_group.command("status")
@click.pass_context
def status_cmd(ctx: click.Context) -> None:
    """Show whether the safe is locked and for how long."""
    safe = get_runtime(ctx).safe
    record = safe.current()
    status = safe.status()
    if ctx.obj.get("json"):
        click.echo(json_mod.dumps({
            "isLocked": record.is_locked,
            "lockedAt": record.locked_at,
            "status": status,
        }, indent=2))
        return
    console = get_console(no_color=ctx.obj.get("no_color", False))
    console.print(lock_indicator(record.is_locked), status, sep="")


@safe_group.command("lock")
@click.argument("key")
@click.pass_context
@async_cmd
async def lock_cmd(ctx: click.Context, key: str) -> None:
    """Lock KEY in the safe."""
    result = await get_runtime(ctx).call("Lock", {"key": key})
    emit_result(ctx, result)


@safe_group.command("unlock")
@click.option("--show-key", is_flag=True, help="Print the stored key before unlocking")
@click.pass_context
@async_cmd
async def unlock_cmd(ctx: click.Context, show_key: bool) -> None:
    """Unlock the safe and release the key."""
    runtime = get_runtime(ctx)
    key = runtime.safe.current().key
    result = await runtime.call("Unlock")
    emit_result(ctx, result)
    if show_key and key:
        click.echo(f"Key: {key}")
