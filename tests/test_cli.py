"""Tests for selfcraft/cli/ — click commands over an injected runtime."""

from __future__ import annotations

import asyncio
import json

import pytest
from click.testing import CliRunner

from selfcraft.cli.app import async_cmd, cli
from selfcraft.cli.formatters import build_table, get_console, lock_indicator

MINUTE = 60 * 1000


@pytest.fixture()
def invoke(runtime):
    runner = CliRunner()

    def _invoke(*args: str):
        return runner.invoke(cli, list(args), obj={"runtime": runtime})

    return _invoke


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


class TestFormatters:
    def test_lock_indicator(self) -> None:
        assert lock_indicator(True).plain.strip() == "locked"
        assert lock_indicator(False).plain.strip() == "unlocked"

    def test_build_table(self) -> None:
        table = build_table("T", ["A", "B"], [[1, "x"], [2, "y"]])
        assert table.row_count == 2
        assert len(table.columns) == 2

    def test_get_console_no_color(self) -> None:
        assert get_console(no_color=True).no_color is True


class TestAsyncCmd:
    def test_wraps_async_function(self) -> None:
        @async_cmd
        async def _double(x: int) -> int:
            await asyncio.sleep(0)
            return x * 2

        assert _double(21) == 42
        assert _double.__name__ == "_double"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class TestGroup:
    def test_help_lists_subcommands(self) -> None:
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("safe", "profile", "activity", "tools", "call"):
            assert name in result.output


class TestSafeCommands:
    def test_lock_status_unlock(self, invoke, clock) -> None:
        locked = invoke("safe", "lock", "pin-1234")
        assert locked.exit_code == 0
        assert "The key is locked" in locked.output

        clock.advance(5 * MINUTE)
        status = invoke("safe", "status")
        assert status.exit_code == 0
        assert "The safe has been locked for 5 minutes, 0 seconds" in status.output

        unlocked = invoke("safe", "unlock", "--show-key")
        assert unlocked.exit_code == 0
        assert "The key is unlocked" in unlocked.output
        assert "Key: pin-1234" in unlocked.output

    def test_status_json(self, invoke, clock) -> None:
        invoke("safe", "lock", "k")
        result = invoke("--json", "safe", "status")
        payload = json.loads(result.output)
        assert payload == {
            "isLocked": True,
            "lockedAt": clock.now,
            "status": "The safe has been locked for 0 seconds",
        }

    def test_unlock_when_unlocked_exits_nonzero(self, invoke) -> None:
        result = invoke("safe", "unlock")
        assert result.exit_code == 1
        assert "Error: Safe is not locked" in result.output

    def test_blank_key_rejected(self, invoke, runtime) -> None:
        result = invoke("safe", "lock", "   ")
        assert result.exit_code == 1
        assert "Key cannot be empty" in result.output
        assert runtime.safe.current().is_locked is False


class TestProfileCommands:
    def test_edit_and_show(self, invoke) -> None:
        assert invoke("profile", "title", "Early riser").exit_code == 0
        assert invoke("profile", "description", "Up at six").exit_code == 0

        shown = invoke("profile", "show")
        assert "Early riser" in shown.output
        assert "Up at six" in shown.output
        assert "Achievements: 0" in shown.output

    def test_add_list_remove(self, invoke, runtime, clock) -> None:
        added = invoke("--json", "profile", "add", "Ran 5k", "-d", "No walking")
        achievement = json.loads(added.output)["result"]
        assert achievement["title"] == "Ran 5k"

        clock.advance(MINUTE)
        invoke("profile", "add", "Ran 10k")

        listed = json.loads(invoke("--json", "profile", "achievements").output)
        assert [a["title"] for a in listed] == ["Ran 10k", "Ran 5k"]

        table = invoke("profile", "achievements")
        assert "Achievements" in table.output
        assert "Ran" in table.output

        removed = invoke("profile", "remove", achievement["id"])
        assert removed.exit_code == 0
        assert [a.title for a in runtime.profile.current().achievements] == ["Ran 10k"]

    def test_no_achievements(self, invoke) -> None:
        assert "No achievements yet." in invoke("profile", "achievements").output


class TestActivityCommands:
    def test_log_summary_stats(self, invoke) -> None:
        invoke("safe", "lock", "k")

        log = invoke("activity", "log", "--days", "1")
        assert "## User Activity Summary (Last 1 day)" in log.output

        summary = invoke("activity", "summary")
        assert "Recent activity: 1 action in the last 24 hours." in summary.output

        stats = invoke("activity", "stats")
        assert "Activity Statistics (All Time):" in stats.output

    def test_days_out_of_range(self, invoke) -> None:
        result = invoke("activity", "log", "--days", "31")
        assert result.exit_code == 2


class TestToolCommands:
    def test_tools_table_and_json(self, invoke) -> None:
        table = invoke("tools", "--category", "safe")
        assert "Lock" in table.output
        assert "getProfile" not in table.output

        tools = json.loads(invoke("--json", "tools").output)
        names = {t["name"] for t in tools}
        assert {"Lock", "Unlock", "CheckLock", "getProfile", "get_activity_log"} <= names

    def test_call_with_events(self, invoke) -> None:
        result = invoke("call", "Lock", "--args", '{"key": "k"}', "--events")
        assert result.exit_code == 0
        assert "Event: safe" in result.output
        assert "The key is locked" in result.output

    def test_call_rejects_bad_json(self, invoke) -> None:
        assert invoke("call", "Lock", "--args", "{oops").exit_code == 2
        assert invoke("call", "Lock", "--args", "[1]").exit_code == 2

    def test_call_unknown_capability(self, invoke) -> None:
        result = invoke("call", "Teleport")
        assert result.exit_code == 1
        assert "Unknown capability: Teleport" in result.output

    def test_events_only_reported_for_the_call_that_raised_them(self, invoke, runtime) -> None:
        quiet = invoke("call", "Lock", "--args", '{"key": "k"}')
        assert "Event: safe" not in quiet.output
        assert runtime.events.pending_count == 0

        assert invoke("events").exit_code == 2
