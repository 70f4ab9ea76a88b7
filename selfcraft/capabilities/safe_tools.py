"""
Safe capabilities — how the agent locks, unlocks and checks the safe.

CheckLock recomputes the locked duration from the live clock on every call;
nothing about the duration is cached or stored.
"""

from __future__ import annotations

from pydantic import Field

from selfcraft.capabilities.facade import RecordFacade
from selfcraft.capabilities.registry import CapabilityArguments, CapabilityRegistry
from selfcraft.safe import (
    SAFE_STORAGE_KEY,
    SafeRecord,
    describe_lock_status,
    lock_safe,
    unlock_safe,
)


class LockArguments(CapabilityArguments):
    capability_name = "Lock"
    capability_description = (
        "Lock a key in the safe. Use this when the user hands over a key, code "
        "or password they want kept away from themselves. Locking an already "
        "locked safe replaces the stored key and restarts the timer."
    )

    key: str = Field(description="The key to secure. Surrounding whitespace is ignored.")


class UnlockArguments(CapabilityArguments):
    capability_name = "Unlock"
    capability_description = "Unlock the key"


class CheckLockArguments(CapabilityArguments):
    capability_name = "CheckLock"
    capability_description = "Check if the safe is locked and how long it has been locked"


class SafeCapabilities(RecordFacade[SafeRecord]):
    category = "safe"
    storage_key = SAFE_STORAGE_KEY
    operations = (LockArguments, UnlockArguments, CheckLockArguments)

    def default_record(self) -> SafeRecord:
        return SafeRecord()

    def _handlers(self):
        return {
            LockArguments: self._lock,
            UnlockArguments: self._unlock,
            CheckLockArguments: self._check_lock,
        }

    def _lock(self, op: LockArguments) -> str:
        self._commit_transition(lambda current: lock_safe(current, op.key, now=self._clock()))
        return "The key is locked"

    def _unlock(self, op: UnlockArguments) -> str:
        self._commit_transition(lambda current: unlock_safe(current, now=self._clock()))
        return "The key is unlocked"

    def _check_lock(self, op: CheckLockArguments) -> str:
        return self.status()

    def status(self) -> str:
        """Lock status sentence against the live clock."""
        return describe_lock_status(self.current(), now=self._clock())


def register_safe_capabilities(registry: CapabilityRegistry, safe: SafeCapabilities) -> None:
    registry.register_all(safe.definitions())
