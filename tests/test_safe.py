"""Tests for selfcraft.safe transitions and helpers."""

from __future__ import annotations

import pytest

from selfcraft.effects import LogActivity, PushEvent
from selfcraft.errors import InvalidArgument, InvalidState
from selfcraft.safe import (
    SafeRecord,
    describe_lock_status,
    get_key,
    is_safe_locked,
    lock_safe,
    locked_duration,
    unlock_safe,
)

NOW = 1_700_000_000_000


def _locked(key: str = "secret", locked_at: int | None = NOW) -> SafeRecord:
    return SafeRecord(key=key, locked_at=locked_at, is_locked=True)


class TestLockSafe:
    def test_locks_unlocked_record(self) -> None:
        transition = lock_safe(SafeRecord(), "  phone-pin  ", now=NOW)
        record = transition.record
        assert record.is_locked is True
        assert record.key == "phone-pin"
        assert record.locked_at == NOW

    def test_defaults_to_wall_clock(self) -> None:
        record = lock_safe(SafeRecord(), "k").record
        assert record.locked_at is not None and record.locked_at > NOW

    @pytest.mark.parametrize("key", ["", "   ", "\t\n"])
    def test_blank_key_rejected(self, key: str) -> None:
        current = SafeRecord()
        with pytest.raises(InvalidArgument, match="Key cannot be empty"):
            lock_safe(current, key, now=NOW)
        assert current == SafeRecord()

    def test_relocking_replaces_key_and_timestamp(self) -> None:
        record = lock_safe(_locked("old", NOW - 5000), "new", now=NOW).record
        assert record.key == "new"
        assert record.locked_at == NOW

    def test_emits_event_and_activity(self) -> None:
        effects = lock_safe(SafeRecord(), "k", now=NOW).effects
        assert PushEvent(category="safe", message="Key is locked") in effects
        logs = [e for e in effects if isinstance(e, LogActivity)]
        assert [e.kind for e in logs] == ["safe_locked"]
        assert logs[0].title == "Safe locked"


class TestUnlockSafe:
    def test_unlock_clears_every_field(self) -> None:
        record = unlock_safe(_locked(), now=NOW + 1000).record
        assert record == SafeRecord(key=None, locked_at=None, is_locked=False)

    def test_unlock_unlocked_fails(self) -> None:
        with pytest.raises(InvalidState, match="Safe is not locked"):
            unlock_safe(SafeRecord(), now=NOW)

    def test_activity_reports_locked_duration(self) -> None:
        effects = unlock_safe(_locked(locked_at=NOW), now=NOW + 90_000).effects
        assert len(effects) == 1
        log = effects[0]
        assert isinstance(log, LogActivity)
        assert log.kind == "safe_unlocked"
        assert log.description == "Key retrieved after 1 minute, 30 seconds"
        assert log.metadata == {"lockedDuration": 90_000}

    def test_missing_locked_at_counts_as_zero(self) -> None:
        effects = unlock_safe(_locked(locked_at=None), now=NOW).effects
        assert effects[0].metadata == {"lockedDuration": 0}


class TestHelpers:
    def test_accessors(self) -> None:
        record = _locked("abc")
        assert is_safe_locked(record) is True
        assert get_key(record) == "abc"
        assert is_safe_locked(SafeRecord()) is False
        assert get_key(SafeRecord()) is None

    def test_locked_duration(self) -> None:
        assert locked_duration(_locked(locked_at=NOW), now=NOW + 61_000) == 61_000
        assert locked_duration(SafeRecord(), now=NOW) is None
        assert locked_duration(_locked(locked_at=None), now=NOW) is None

    def test_describe_lock_status(self) -> None:
        assert describe_lock_status(SafeRecord(), now=NOW) == "The safe is not locked"
        assert (
            describe_lock_status(_locked(locked_at=None), now=NOW)
            == "The safe is locked (duration unknown)"
        )
        assert (
            describe_lock_status(_locked(locked_at=NOW), now=NOW + 90_061_000)
            == "The safe has been locked for 1 day, 1 hour"
        )
