"""
Activity Log — what the user has been doing, as the agent sees it.

Every meaningful state change in the app (locking the safe, earning an
achievement, editing the profile) is recorded here as a timestamped entry.
The log is itself a persisted record: a JSON array under one storage key,
capped to the most recent entries.

The log is also the main source of context for the agent. for_agent() and
summary_for_agent() turn raw entries into short, grouped, relative-time text
the model can read without further processing.

log_activity() is fire-and-forget: a failure is logged and swallowed so that
recording history can never break the action being recorded.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Iterable, Optional

import structlog
from pydantic import Field, RootModel, ValidationError, field_validator, model_validator

from selfcraft.effects import Transition
from selfcraft.formatting import format_relative_time
from selfcraft.records import Record, new_id, now_ms
from selfcraft.store import RecordStore

logger = structlog.get_logger(__name__)

ACTIVITY_STORAGE_KEY = "user-activity-log"
MAX_ACTIVITIES = 500

_DAY_MS = 24 * 60 * 60 * 1000
_WEEK_MS = 7 * _DAY_MS


class ActivityType(str, Enum):
    CHALLENGE_COMPLETED = "challenge_completed"
    CHALLENGE_ADDED = "challenge_added"
    RITUAL_COMPLETED = "ritual_completed"
    RITUAL_MISSED = "ritual_missed"
    RITUAL_ADDED = "ritual_added"
    RITUAL_REMOVED = "ritual_removed"
    REFLECTION_SAVED = "reflection_saved"
    SAFE_LOCKED = "safe_locked"
    SAFE_UNLOCKED = "safe_unlocked"
    VOICE_ASSIGNMENT_COMPLETED = "voice_assignment_completed"
    VOICE_ASSIGNMENT_ADDED = "voice_assignment_added"
    RULE_ADDED = "rule_added"
    RULE_REMOVED = "rule_removed"
    RULE_UPDATED = "rule_updated"
    PROFILE_UPDATED = "profile_updated"
    ACHIEVEMENT_ADDED = "achievement_added"
    AFFIRM_GENERATED = "affirm_generated"
    INVENTORY_ITEM_ADDED = "inventory_item_added"
    INVENTORY_ITEM_REMOVED = "inventory_item_removed"
    MOOD_INCREASED = "mood_increased"
    MOOD_DECREASED = "mood_decreased"
    SESSION_STARTED = "session_started"
    CUSTOM = "custom"


ACTIVITY_LABELS: dict[ActivityType, str] = {
    ActivityType.CHALLENGE_COMPLETED: "Challenge Completed",
    ActivityType.CHALLENGE_ADDED: "Challenge Added",
    ActivityType.RITUAL_COMPLETED: "Ritual Completed",
    ActivityType.RITUAL_MISSED: "Ritual Missed",
    ActivityType.RITUAL_ADDED: "Ritual Added",
    ActivityType.RITUAL_REMOVED: "Ritual Removed",
    ActivityType.REFLECTION_SAVED: "Reflection Saved",
    ActivityType.SAFE_LOCKED: "Safe Locked",
    ActivityType.SAFE_UNLOCKED: "Safe Unlocked",
    ActivityType.VOICE_ASSIGNMENT_COMPLETED: "Voice Assignment Completed",
    ActivityType.VOICE_ASSIGNMENT_ADDED: "Voice Assignment Added",
    ActivityType.RULE_ADDED: "Rule Added",
    ActivityType.RULE_REMOVED: "Rule Removed",
    ActivityType.RULE_UPDATED: "Rule Updated",
    ActivityType.PROFILE_UPDATED: "Profile Updated",
    ActivityType.ACHIEVEMENT_ADDED: "Achievement Added",
    ActivityType.AFFIRM_GENERATED: "Affirmation Generated",
    ActivityType.INVENTORY_ITEM_ADDED: "Inventory Item Added",
    ActivityType.INVENTORY_ITEM_REMOVED: "Inventory Item Removed",
    ActivityType.MOOD_INCREASED: "Mood Increased",
    ActivityType.MOOD_DECREASED: "Mood Decreased",
    ActivityType.SESSION_STARTED: "Session Started",
    ActivityType.CUSTOM: "Activity",
}


class Activity(Record):
    """A single entry in the activity log."""

    id: str = Field(default_factory=new_id)
    type: ActivityType
    title: str
    description: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    timestamp: int = Field(default_factory=now_ms)

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> Any:
        # Kinds written by newer or older clients load as CUSTOM.
        if isinstance(value, str):
            return coerce_activity_type(value)
        return value

    @property
    def label(self) -> str:
        return ACTIVITY_LABELS.get(self.type, "Activity")


class ActivityList(RootModel[list[Activity]]):
    root: list[Activity] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _drop_unreadable_entries(cls, value: Any) -> Any:
        """Validate entry by entry so one damaged entry cannot discard the log."""
        if not isinstance(value, list):
            return value
        kept = []
        for index, entry in enumerate(value):
            try:
                kept.append(Activity.model_validate(entry))
            except ValidationError as exc:
                logger.warning(
                    "activity.entry_dropped", index=index, errors=exc.error_count()
                )
        return kept


def coerce_activity_type(kind: str | ActivityType) -> ActivityType:
    """Map a kind string onto ActivityType; unknown kinds become CUSTOM."""
    if isinstance(kind, ActivityType):
        return kind
    try:
        return ActivityType(kind)
    except ValueError:
        logger.warning("activity.unknown_type", kind=kind)
        return ActivityType.CUSTOM


def _format_line(activity: Activity, now: int) -> str:
    when = format_relative_time(activity.timestamp, now=now)
    desc = f" - {activity.description}" if activity.description else ""
    return f"- [{when}] {activity.title}{desc}"


def _days_phrase(days: int) -> str:
    return f"{days} day" if days == 1 else f"{days} days"


class ActivityLog:
    """Persisted, capped activity history with change listeners."""

    def __init__(
        self,
        store: RecordStore,
        max_activities: int = MAX_ACTIVITIES,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._store = store
        self._max_activities = max(1, int(max_activities))
        self._clock = clock
        self._listeners: dict[int, Callable[[list[Activity]], None]] = {}
        self._next_listener_id = 0

    def now(self) -> int:
        return self._clock()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> list[Activity]:
        return list(self._store.load(ACTIVITY_STORAGE_KEY, ActivityList()).root)

    def _replace(self, fn: Callable[[list[Activity]], list[Activity]]) -> list[Activity]:
        def _apply(current: ActivityList) -> tuple[Transition[ActivityList], None]:
            updated = fn(list(current.root))[-self._max_activities:]
            return Transition(ActivityList(updated)), None

        transition, _ = self._store.transact(ACTIVITY_STORAGE_KEY, ActivityList(), _apply)
        activities = list(transition.record.root)
        self._notify(activities)
        return activities

    def on_change(self, callback: Callable[[list[Activity]], None]) -> Callable[[], None]:
        """Register a listener called with the full list after every write.

        Returns a function that removes the listener.
        """
        listener_id = self._next_listener_id
        self._next_listener_id += 1
        self._listeners[listener_id] = callback

        def _unsubscribe() -> None:
            self._listeners.pop(listener_id, None)

        return _unsubscribe

    def _notify(self, activities: list[Activity]) -> None:
        for callback in list(self._listeners.values()):
            try:
                callback(list(activities))
            except Exception:
                logger.error("activity.listener_error", exc_info=True)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def log_activity(
        self,
        kind: str | ActivityType,
        title: str,
        description: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Optional[Activity]:
        """Append an entry. Returns it, or None if recording failed."""
        try:
            activity = Activity(
                type=coerce_activity_type(kind),
                title=title,
                description=description,
                metadata=metadata,
                timestamp=self._clock(),
            )
            self._replace(lambda items: items + [activity])
        except Exception as exc:
            logger.error("activity.log_failed", kind=str(kind), error=str(exc))
            return None
        logger.info("activity.logged", kind=activity.type.value, title=activity.title)
        return activity

    def delete(self, activity_id: str) -> None:
        self._replace(lambda items: [a for a in items if a.id != activity_id])

    def clear(self) -> None:
        self._replace(lambda items: [])

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def by_type(self, kind: str | ActivityType) -> list[Activity]:
        wanted = coerce_activity_type(kind)
        return [a for a in self.load() if a.type == wanted]

    def in_range(self, start: int, end: int) -> list[Activity]:
        return [a for a in self.load() if start <= a.timestamp <= end]

    def recent(self, days: int) -> list[Activity]:
        now = self._clock()
        return self.in_range(now - days * _DAY_MS, now)

    def stats(self, activities: Optional[Iterable[Activity]] = None) -> dict[str, Any]:
        """Counts per activity type plus a total."""
        data = list(activities) if activities is not None else self.load()
        counts = Counter(a.type.value for a in data)
        return {
            "total": len(data),
            "by_type": {t.value: counts.get(t.value, 0) for t in ActivityType},
        }

    # ------------------------------------------------------------------
    # Agent-facing text
    # ------------------------------------------------------------------

    def for_agent(
        self,
        days: int = 7,
        limit: int = 50,
        types: Optional[list[ActivityType]] = None,
    ) -> str:
        """
        A grouped, newest-first activity report for the agent's context.

        Entries are bucketed into Today, Yesterday, Earlier This Week and
        Earlier (local time), followed by per-type counts.
        """
        now = self._clock()
        activities = self.recent(days)
        if types:
            activities = [a for a in activities if a.type in types]
        activities.sort(key=lambda a: a.timestamp, reverse=True)
        activities = activities[:limit]

        if not activities:
            return f"No activity recorded in the last {_days_phrase(days)}."

        today_start = int(
            datetime.fromtimestamp(now / 1000)
            .replace(hour=0, minute=0, second=0, microsecond=0)
            .timestamp()
            * 1000
        )
        yesterday_start = today_start - _DAY_MS

        groups: dict[str, list[Activity]] = {
            "Today": [],
            "Yesterday": [],
            "Earlier This Week": [],
            "Earlier": [],
        }
        for activity in activities:
            if activity.timestamp >= today_start:
                groups["Today"].append(activity)
            elif activity.timestamp >= yesterday_start:
                groups["Yesterday"].append(activity)
            elif now - activity.timestamp < _WEEK_MS:
                groups["Earlier This Week"].append(activity)
            else:
                groups["Earlier"].append(activity)

        sections = [f"## User Activity Summary (Last {_days_phrase(days)})"]
        for heading, items in groups.items():
            if items:
                lines = "\n".join(_format_line(a, now) for a in items)
                sections.append(f"### {heading}\n{lines}")

        stats = self.stats(activities)
        summary = [f"- Total activities: {stats['total']}"]
        for kind, count in stats["by_type"].items():
            if count:
                summary.append(f"- {ACTIVITY_LABELS[ActivityType(kind)]}: {count}")
        sections.append("### Summary\n" + "\n".join(summary))

        return "\n\n".join(sections).strip()

    def summary_for_agent(self) -> str:
        """One or two sentences of recent-activity context."""
        last_day = self.recent(1)
        week = self.stats(self.recent(7))

        if not last_day:
            summary = "Recent activity: No activity in the last 24 hours."
        else:
            n = len(last_day)
            summary = f"Recent activity: {n} action{'' if n == 1 else 's'} in the last 24 hours."

        highlights = []
        achievements = week["by_type"][ActivityType.ACHIEVEMENT_ADDED.value]
        if achievements:
            highlights.append(
                f"{achievements} achievement{'' if achievements == 1 else 's'} earned this week"
            )
        locks = week["by_type"][ActivityType.SAFE_LOCKED.value]
        if locks:
            highlights.append(f"safe locked {locks} time{'' if locks == 1 else 's'} this week")
        if highlights:
            summary += " " + "; ".join(highlights).capitalize() + "."
        return summary
