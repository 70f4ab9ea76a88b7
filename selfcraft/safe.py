"""
Safe — a key the user deliberately locks away.

The safe holds one secret (a key, a password, a phone PIN) while the user
practises going without it. It is either empty and unlocked, or it holds a
trimmed, non-empty key together with the moment it was locked. The three
fields always move together; there is no half-locked state.

Transitions are pure: they validate, compute the next SafeRecord, and list
the notifications the change should produce. Persisting and notifying is the
façade's job (see selfcraft.capabilities.safe_tools).
"""

from __future__ import annotations

from typing import Optional

from selfcraft.effects import LogActivity, PushEvent, Transition
from selfcraft.errors import InvalidArgument, InvalidState
from selfcraft.formatting import format_duration
from selfcraft.records import Record, now_ms

SAFE_STORAGE_KEY = "self-improvement-safe"


class SafeRecord(Record):
    """Persisted state of the safe."""

    key: Optional[str] = None
    locked_at: Optional[int] = None  # epoch ms
    is_locked: bool = False


def lock_safe(current: SafeRecord, key: str, now: Optional[int] = None) -> Transition[SafeRecord]:
    """
    Lock ``key`` into the safe.

    Locking an already-locked safe replaces the key and restarts the clock.
    """
    if not isinstance(key, str) or not key.strip():
        raise InvalidArgument("Key cannot be empty")
    locked_at = now_ms() if now is None else now
    return Transition(
        SafeRecord(key=key.strip(), locked_at=locked_at, is_locked=True),
        (
            PushEvent(category="safe", message="Key is locked"),
            LogActivity(
                kind="safe_locked",
                title="Safe locked",
                description="Key has been secured in the safe",
            ),
        ),
    )


def unlock_safe(current: SafeRecord, now: Optional[int] = None) -> Transition[SafeRecord]:
    """Empty the safe. Fails with InvalidState when it is not locked."""
    if not current.is_locked:
        raise InvalidState("Safe is not locked")
    if now is None:
        now = now_ms()
    duration = max(0, now - current.locked_at) if current.locked_at else 0
    return Transition(
        SafeRecord(),
        (
            LogActivity(
                kind="safe_unlocked",
                title="Safe unlocked",
                description=f"Key retrieved after {format_duration(duration)}",
                metadata={"lockedDuration": duration},
            ),
        ),
    )


def is_safe_locked(record: SafeRecord) -> bool:
    return record.is_locked


def get_key(record: SafeRecord) -> Optional[str]:
    return record.key


def locked_duration(record: SafeRecord, now: Optional[int] = None) -> Optional[int]:
    """Milliseconds since locking, or None if unlocked or the lock time is unknown."""
    if not record.is_locked or not record.locked_at:
        return None
    if now is None:
        now = now_ms()
    return max(0, now - record.locked_at)


def describe_lock_status(record: SafeRecord, now: Optional[int] = None) -> str:
    """The sentence the agent reads back when asked whether the safe is locked."""
    if not record.is_locked:
        return "The safe is not locked"
    duration = locked_duration(record, now)
    if duration is None:
        return "The safe is locked (duration unknown)"
    return f"The safe has been locked for {format_duration(duration)}"
