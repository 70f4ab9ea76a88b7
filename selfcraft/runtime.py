"""
Runtime — wires stores, collaborators and capabilities together.

One SelfcraftRuntime is everything an agent host needs: the capability tool
list to give the model, call() to run what the model asks for, and
drain_events() to collect notifications for the model's next turn. The CLI
uses the same object for its read paths.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import structlog

from selfcraft.activity import ActivityLog, ActivityType
from selfcraft.capabilities.activity_tools import (
    ActivityCapabilities,
    register_activity_capabilities,
)
from selfcraft.capabilities.executor import CapabilityExecutor, CapabilityResult
from selfcraft.capabilities.profile_tools import (
    ProfileCapabilities,
    register_profile_capabilities,
)
from selfcraft.capabilities.registry import CapabilityRegistry
from selfcraft.capabilities.safe_tools import SafeCapabilities, register_safe_capabilities
from selfcraft.config import SelfcraftConfig
from selfcraft.effects import EffectDispatcher
from selfcraft.events import AgentEventBus, format_events_for_agent
from selfcraft.records import now_ms
from selfcraft.store import KeyValueStore, RecordStore, create_backend

logger = structlog.get_logger(__name__)


class SelfcraftRuntime:
    """Composition root for the capability façade."""

    def __init__(
        self,
        config: Optional[SelfcraftConfig] = None,
        backend: Optional[KeyValueStore] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.config = config or SelfcraftConfig()
        self.backend = backend if backend is not None else create_backend(self.config.store)
        self.store = RecordStore(self.backend)

        self.activity_log = ActivityLog(
            self.store,
            max_activities=self.config.activity.max_activities,
            clock=clock,
        )
        self.events = AgentEventBus(max_pending=self.config.events.max_pending_events)
        self.dispatcher = EffectDispatcher(self.activity_log, self.events)

        self.safe = SafeCapabilities(self.store, self.dispatcher, clock=clock)
        self.profile = ProfileCapabilities(self.store, self.dispatcher, clock=clock)
        self.activity = ActivityCapabilities(
            self.activity_log, default_days=self.config.activity.default_days
        )

        self.registry = CapabilityRegistry()
        register_safe_capabilities(self.registry, self.safe)
        register_profile_capabilities(self.registry, self.profile)
        register_activity_capabilities(self.registry, self.activity)
        self.executor = CapabilityExecutor(self.registry)

        logger.info(
            "runtime.initialized",
            backend=type(self.backend).__name__,
            capabilities=self.registry.count,
        )

    def api_tools(self, categories: Optional[list[str]] = None) -> list[dict[str, Any]]:
        return self.registry.get_api_tools(categories)

    async def call(
        self,
        name: str,
        arguments: Optional[dict[str, Any]] = None,
        call_id: Optional[str] = None,
    ) -> CapabilityResult:
        return await self.executor.execute(call_id, name, arguments or {})

    def start_session(self) -> None:
        self.activity_log.log_activity(ActivityType.SESSION_STARTED, "Session started", "App opened")

    def drain_events(self) -> str:
        """Pending agent events as one message, or "" when there are none."""
        return format_events_for_agent(self.events.drain())
