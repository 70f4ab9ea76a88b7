# selfcraft/config.py
"""
Configuration for selfcraft.

All configuration flows through this module. Values are loaded from
environment variables (optionally via a .env file) and validated with
Pydantic. Out-of-range values are clamped rather than rejected so a typo in
the environment degrades to a sensible default instead of refusing to start.
"""

from __future__ import annotations

from pathlib import Path

import structlog
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

logger = structlog.get_logger(__name__)

# Resolve .env relative to the project root (one level above selfcraft/),
# so the config works regardless of the current working directory.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

_STORE_BACKENDS = frozenset({"file", "memory"})


class StoreConfig(BaseSettings):
    """Where records are persisted."""

    data_dir: Path = Field(Path("./selfcraft_data"), alias="SELFCRAFT_DATA_DIR")
    # file: one JSON file per record under data_dir; memory: process-local only.
    backend: str = Field("file", alias="SELFCRAFT_STORE_BACKEND")

    model_config = {"env_file": _ENV_FILE, "extra": "ignore", "populate_by_name": True}

    @model_validator(mode="after")
    def normalize_backend(self) -> "StoreConfig":
        backend = str(self.backend).strip().lower()
        if backend not in _STORE_BACKENDS:
            logger.warning("config.unknown_store_backend", backend=self.backend, coerced_to="file")
            backend = "file"
        self.backend = backend
        return self


class ActivityConfig(BaseSettings):
    """Activity log retention and agent-report defaults."""

    max_activities: int = Field(500, alias="SELFCRAFT_MAX_ACTIVITIES")
    default_days: int = Field(7, alias="SELFCRAFT_ACTIVITY_DEFAULT_DAYS")

    model_config = {"env_file": _ENV_FILE, "extra": "ignore", "populate_by_name": True}

    @model_validator(mode="after")
    def normalize_limits(self) -> "ActivityConfig":
        self.max_activities = max(1, int(self.max_activities))
        self.default_days = max(1, min(30, int(self.default_days)))
        return self


class EventConfig(BaseSettings):
    """Agent event queue limits."""

    max_pending_events: int = Field(1000, alias="SELFCRAFT_MAX_PENDING_EVENTS")

    model_config = {"env_file": _ENV_FILE, "extra": "ignore", "populate_by_name": True}

    @model_validator(mode="after")
    def normalize_limits(self) -> "EventConfig":
        self.max_pending_events = max(1, int(self.max_pending_events))
        return self


class SelfcraftConfig:
    """
    Master configuration that composes all subsystem configs.

    Every component receives its settings from here; nothing reads the
    environment on its own.
    """

    def __init__(self) -> None:
        self.store = StoreConfig()
        self.activity = ActivityConfig()
        self.events = EventConfig()
        self._resolve_paths()

    def _resolve_paths(self) -> None:
        """Resolve relative paths against the project root, not the CWD."""
        if not self.store.data_dir.is_absolute():
            self.store.data_dir = (_PROJECT_ROOT / self.store.data_dir).resolve()

    def __repr__(self) -> str:
        return (
            f"SelfcraftConfig(backend={self.store.backend}, "
            f"data_dir={self.store.data_dir}, "
            f"max_activities={self.activity.max_activities})"
        )
