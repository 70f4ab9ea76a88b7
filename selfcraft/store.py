"""
Record Store — typed persistence over a synchronous key-value backend.

Every domain record lives under one fixed storage key as a single JSON text
value. The backend only knows about strings; the RecordStore knows about
pydantic models and owns the recovery rules:

  - load() never raises. A missing key, an unreadable backend or a value that
    no longer decodes all yield a fresh copy of the caller's default.
  - save() never raises. A failed write is logged and dropped; the value the
    caller computed is still correct for the current call.
  - transact() runs load → transition → save under a per-key lock so two
    invocations in one process cannot interleave and lose an update.

Across processes sharing one data directory the last write still wins.
"""

from __future__ import annotations

import os
import re
import tempfile
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, Protocol, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from selfcraft.effects import Transition
from selfcraft.errors import InvalidArgument, SelfcraftError, StorageFailure

if TYPE_CHECKING:
    from selfcraft.config import StoreConfig

logger = structlog.get_logger(__name__)

R = TypeVar("R", bound=BaseModel)
T = TypeVar("T")

_STORAGE_KEY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class KeyValueStore(Protocol):
    """Synchronous string store, one value per key."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryKeyValueStore:
    """Process-local backend. Used by tests and the ``memory`` store mode."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._items)


class FileKeyValueStore:
    """
    One JSON file per key under a data directory.

    Writes go to a temp file in the same directory followed by an atomic
    rename, so a crash mid-write leaves the previous value intact.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageFailure(f"Cannot create data directory {root}: {exc}") from exc

    def _path_for(self, key: str) -> Path:
        if not _STORAGE_KEY_RE.match(key):
            raise InvalidArgument(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageFailure(f"Cannot read {path}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.root, suffix=".tmp", prefix=f".{key}_"
            )
        except OSError as exc:
            raise StorageFailure(f"Cannot write {path}: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, path)
        except BaseException as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            if isinstance(exc, OSError):
                raise StorageFailure(f"Cannot write {path}: {exc}") from exc
            raise

    def remove_item(self, key: str) -> None:
        try:
            self._path_for(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageFailure(f"Cannot remove {key}: {exc}") from exc

    def keys(self) -> list[str]:
        return sorted(p.stem for p in self.root.glob("*.json"))


def create_backend(config: "StoreConfig") -> KeyValueStore:
    """Build the backend selected by configuration."""
    if config.backend == "memory":
        return MemoryKeyValueStore()
    return FileKeyValueStore(config.data_dir)


class RecordStore:
    """Typed load/save of whole records, one record per storage key."""

    def __init__(self, backend: KeyValueStore) -> None:
        self._backend = backend
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    @property
    def backend(self) -> KeyValueStore:
        return self._backend

    def load(self, storage_key: str, default: R) -> R:
        """Read the record at ``storage_key``, or a copy of ``default``.

        The model type to decode into is taken from ``default``. The returned
        value is always detached from ``default`` and from storage.
        """
        try:
            raw = self._backend.get_item(storage_key)
        except SelfcraftError as exc:
            logger.warning(
                "record_store.read_failed",
                storage_key=storage_key,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return default.model_copy(deep=True)

        if raw is None:
            return default.model_copy(deep=True)

        try:
            return type(default).model_validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "record_store.load_failed",
                storage_key=storage_key,
                errors=exc.error_count(),
            )
            return default.model_copy(deep=True)

    def save(self, storage_key: str, record: BaseModel) -> None:
        """Encode and write ``record``. Failures are logged, never raised."""
        try:
            payload = record.model_dump_json(by_alias=True)
            self._backend.set_item(storage_key, payload)
        except Exception as exc:
            logger.error("record_store.save_failed", storage_key=storage_key, error=str(exc))
            return
        logger.debug("record_store.saved", storage_key=storage_key, size=len(payload))

    def lock_for(self, storage_key: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(storage_key)
            if lock is None:
                lock = threading.RLock()
                self._locks[storage_key] = lock
            return lock

    def transact(
        self,
        storage_key: str,
        default: R,
        fn: Callable[[R], tuple[Transition[R], T]],
    ) -> tuple[Transition[R], T]:
        """
        Load, apply ``fn`` and save as one unit.

        ``fn`` receives the current record and returns the transition plus a
        result for the caller. If ``fn`` raises, nothing is written and the
        exception propagates unchanged.
        """
        with self.lock_for(storage_key):
            current = self.load(storage_key, default)
            transition, result = fn(current)
            self.save(storage_key, transition.record)
        return transition, result
