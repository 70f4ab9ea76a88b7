"""
Shared fixtures for the selfcraft test suite.

Provides a controllable clock, an in-memory backend and a fully wired
runtime so individual test modules can focus on behavior rather than setup.
"""

from __future__ import annotations

import logging

import pytest

from selfcraft.config import SelfcraftConfig
from selfcraft.main import configure_logging
from selfcraft.runtime import SelfcraftRuntime
from selfcraft.store import MemoryKeyValueStore, RecordStore

# 2023-11-14T22:13:20Z
START_MS = 1_700_000_000_000


class FakeClock:
    """Epoch-ms clock that only moves when told to."""

    def __init__(self, start: int = START_MS) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture(autouse=True, scope="session")
def _structured_logging() -> None:
    """Route structlog through stdlib logging so CLI output stays clean."""
    configure_logging(logging.WARNING)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def backend() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def store(backend: MemoryKeyValueStore) -> RecordStore:
    return RecordStore(backend)


@pytest.fixture()
def runtime(backend: MemoryKeyValueStore, clock: FakeClock) -> SelfcraftRuntime:
    return SelfcraftRuntime(config=SelfcraftConfig(), backend=backend, clock=clock)
