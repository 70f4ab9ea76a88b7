"""
Agent Event Bus — notifications waiting for the agent's next turn.

State-changing transitions can ask for the agent to be told about them
("Key is locked"). push_event() queues the event and fans it out to any
pattern subscribers straight away; the agent runtime later calls drain() to
collect everything pending and feeds it to the model as one message.

Concurrency model:
  - push_event() is synchronous and never raises into the caller
  - Subscriber exceptions are logged and isolated
  - drain() returns events in push order and empties the queue
"""

from __future__ import annotations

import fnmatch
import re
import threading
import uuid
from typing import Any, Callable

import structlog
from pydantic import BaseModel, ConfigDict

logger = structlog.get_logger(__name__)

EventHandler = Callable[["AgentEvent"], Any]


class AgentEvent(BaseModel):
    """Something the agent should hear about on its next turn."""

    model_config = ConfigDict(frozen=True)

    category: str
    message: str


class _Subscription:
    """Internal subscription record."""

    __slots__ = ("sub_id", "pattern", "handler", "_compiled")

    def __init__(self, sub_id: str, pattern: str, handler: EventHandler) -> None:
        self.sub_id = sub_id
        self.pattern = pattern
        self.handler = handler
        self._compiled: re.Pattern[str] = re.compile(fnmatch.translate(pattern))

    def matches(self, category: str) -> bool:
        return self._compiled.match(category) is not None


class AgentEventBus:
    """Pending-event queue with fnmatch-style category subscriptions.

      "safe"     matches only "safe"
      "profile*" matches "profile", "profile.achievement"
      "*"        matches everything
    """

    def __init__(self, max_pending: int = 1000) -> None:
        self._max_pending = max(1, int(max_pending))
        self._pending: list[AgentEvent] = []
        self._subscriptions: dict[str, _Subscription] = {}
        self._lock = threading.Lock()

    def subscribe(self, pattern: str, handler: EventHandler) -> str:
        """Subscribe to events whose category matches ``pattern``.

        Returns a subscription ID that can be passed to unsubscribe().
        """
        sub_id = uuid.uuid4().hex[:12]
        self._subscriptions[sub_id] = _Subscription(sub_id, pattern, handler)
        logger.debug("event_bus.subscribed", pattern=pattern, sub_id=sub_id)
        return sub_id

    def unsubscribe(self, subscription_id: str) -> None:
        removed = self._subscriptions.pop(subscription_id, None)
        if removed:
            logger.debug("event_bus.unsubscribed", sub_id=subscription_id)

    def push_event(self, event: AgentEvent) -> None:
        """Queue an event for the agent. Drops it with a warning when full."""
        with self._lock:
            if len(self._pending) >= self._max_pending:
                logger.warning(
                    "event_bus.queue_full",
                    category=event.category,
                    dropped=True,
                )
                return
            self._pending.append(event)

        for sub in list(self._subscriptions.values()):
            if sub.matches(event.category):
                self._invoke_handler(sub, event)

    def drain(self) -> list[AgentEvent]:
        """Return all pending events in push order and clear the queue."""
        with self._lock:
            events = self._pending
            self._pending = []
        return events

    @staticmethod
    def _invoke_handler(sub: _Subscription, event: AgentEvent) -> None:
        try:
            sub.handler(event)
        except Exception:
            logger.error(
                "event_bus.handler_error",
                pattern=sub.pattern,
                category=event.category,
                exc_info=True,
            )

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)


def create_event_bus(max_pending: int = 1000) -> AgentEventBus:
    """Factory function to create an AgentEventBus instance."""
    return AgentEventBus(max_pending=max_pending)


def format_events_for_agent(events: list[AgentEvent]) -> str:
    """Render drained events as the single message the agent receives."""
    if not events:
        return ""
    body = "\n".join(f"Event: {e.category}\n{e.message}" for e in events)
    return ("Got events:\n" + body).strip()
