from __future__ import annotations

import json

import pytest

from selfcraft.activity import ActivityType
from selfcraft.safe import SAFE_STORAGE_KEY

MINUTE = 60 * 1000


@pytest.mark.asyncio
async def test_lock_then_check(runtime, clock) -> None:
    locked = await runtime.call("Lock", {"key": "  tv-remote-code "})
    assert locked.success is True
    assert locked.result == "The key is locked"

    clock.advance(90 * MINUTE)
    status = await runtime.call("CheckLock")
    assert status.result == "The safe has been locked for 1 hour, 30 minutes"

    record = runtime.safe.current()
    assert record.key == "tv-remote-code"
    assert record.locked_at == clock.now - 90 * MINUTE


@pytest.mark.asyncio
async def test_check_unlocked_safe(runtime) -> None:
    result = await runtime.call("CheckLock", {})
    assert result.success is True
    assert result.result == "The safe is not locked"


@pytest.mark.asyncio
async def test_check_with_missing_timestamp(runtime, backend) -> None:
    backend.set_item(SAFE_STORAGE_KEY, json.dumps({"key": "k", "lockedAt": None, "isLocked": True}))
    result = await runtime.call("CheckLock")
    assert result.result == "The safe is locked (duration unknown)"


@pytest.mark.asyncio
async def test_blank_key_leaves_record_untouched(runtime, backend) -> None:
    result = await runtime.call("Lock", {"key": "   "})
    assert result.success is False
    assert result.error == "Key cannot be empty"
    assert backend.get_item(SAFE_STORAGE_KEY) is None
    assert runtime.activity_log.load() == []
    assert runtime.events.pending_count == 0


@pytest.mark.asyncio
async def test_unlock_unlocked_safe_fails(runtime) -> None:
    result = await runtime.call("Unlock")
    assert result.success is False
    assert result.to_content() == "Error: Safe is not locked"


@pytest.mark.asyncio
async def test_full_cycle_records_activity_and_events(runtime, clock) -> None:
    await runtime.call("Lock", {"key": "k"})
    clock.advance(2 * MINUTE)
    unlocked = await runtime.call("Unlock")
    assert unlocked.result == "The key is unlocked"

    record = runtime.safe.current()
    assert record.is_locked is False
    assert record.key is None
    assert record.locked_at is None

    kinds = [a.type for a in runtime.activity_log.load()]
    assert kinds == [ActivityType.SAFE_LOCKED, ActivityType.SAFE_UNLOCKED]
    unlock_entry = runtime.activity_log.load()[-1]
    assert unlock_entry.description == "Key retrieved after 2 minutes, 0 seconds"
    assert unlock_entry.metadata == {"lockedDuration": 2 * MINUTE}

    assert runtime.drain_events() == "Got events:\nEvent: safe\nKey is locked"
    assert runtime.drain_events() == ""


@pytest.mark.asyncio
async def test_relock_replaces_key_and_restarts_timer(runtime, clock) -> None:
    await runtime.call("Lock", {"key": "first"})
    clock.advance(10 * MINUTE)
    await runtime.call("Lock", {"key": "second"})

    record = runtime.safe.current()
    assert record.key == "second"
    assert record.locked_at == clock.now
    assert (await runtime.call("CheckLock")).result == "The safe has been locked for 0 seconds"
