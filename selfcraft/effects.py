"""
Effects — side effects described as values.

Transition functions stay pure: instead of writing to the activity log or
pinging the agent themselves, they return the next record together with a
tuple of effect values. The façade saves the record first and only then
hands the effects to an EffectDispatcher, which executes them against the
activity log and the agent event bus.

A failing collaborator never propagates back into the capability call. The
record has already been saved and the caller's result is already correct.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Iterable, Optional, TypeVar, Union

import structlog
from pydantic import BaseModel, ConfigDict

from selfcraft.events import AgentEvent

if TYPE_CHECKING:
    from selfcraft.activity import ActivityLog
    from selfcraft.events import AgentEventBus

logger = structlog.get_logger(__name__)

R = TypeVar("R")


class LogActivity(BaseModel):
    """Append an entry to the user's activity log."""

    model_config = ConfigDict(frozen=True)

    kind: str
    title: str
    description: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class PushEvent(BaseModel):
    """Queue a notification for the agent's next turn."""

    model_config = ConfigDict(frozen=True)

    category: str
    message: str


Effect = Union[LogActivity, PushEvent]


@dataclass(frozen=True)
class Transition(Generic[R]):
    """The next record value plus the effects the change should trigger."""

    record: R
    effects: tuple[Effect, ...] = ()


class EffectDispatcher:
    """Executes effects against the activity log and the agent event bus.

    Either collaborator may be absent (tests, read-only tooling); effects
    aimed at a missing collaborator are skipped with a debug log.
    """

    def __init__(
        self,
        activity_log: Optional["ActivityLog"] = None,
        event_bus: Optional["AgentEventBus"] = None,
    ) -> None:
        self._activity_log = activity_log
        self._event_bus = event_bus
        self._dispatched = 0
        self._failed = 0

    def dispatch(self, effects: Iterable[Effect]) -> int:
        """Run each effect in order. Returns how many ran without error."""
        ok = 0
        for effect in effects:
            try:
                if self._run(effect):
                    ok += 1
            except Exception:
                self._failed += 1
                logger.error(
                    "effect_dispatcher.effect_failed",
                    effect_type=type(effect).__name__,
                    exc_info=True,
                )
        self._dispatched += ok
        return ok

    def _run(self, effect: Effect) -> bool:
        if isinstance(effect, LogActivity):
            if self._activity_log is None:
                logger.debug("effect_dispatcher.no_activity_log", kind=effect.kind)
                return False
            self._activity_log.log_activity(
                effect.kind,
                effect.title,
                effect.description,
                effect.metadata,
            )
            return True

        if isinstance(effect, PushEvent):
            if self._event_bus is None:
                logger.debug("effect_dispatcher.no_event_bus", category=effect.category)
                return False
            self._event_bus.push_event(
                AgentEvent(category=effect.category, message=effect.message)
            )
            return True

        logger.warning("effect_dispatcher.unknown_effect", effect_type=type(effect).__name__)
        return False

    @property
    def stats(self) -> dict[str, int]:
        return {"dispatched": self._dispatched, "failed": self._failed}
