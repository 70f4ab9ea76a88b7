"""
Profile — who the user is becoming.

A title, a free-text description, a handful of named fields and an ordered
list of achievements. Achievements are stored in the order they were added;
listings for people (and for the agent) sort them newest first.
"""

from __future__ import annotations

from typing import Iterable, Optional

from pydantic import AliasChoices, Field

from selfcraft.effects import LogActivity, Transition
from selfcraft.records import Record, new_id, now_ms

PROFILE_STORAGE_KEY = "self-improvement-profile"
DEFAULT_TITLE = "Unknown"
DEFAULT_DESCRIPTION = "There is no data for this profile yet."


class Achievement(Record):
    """A milestone the user reached."""

    id: str = Field(default_factory=new_id)
    title: str
    description: str
    # Stored as "createdAt" for compatibility with existing profile data.
    date: int = Field(
        default_factory=now_ms,
        validation_alias=AliasChoices("createdAt", "date"),
        serialization_alias="createdAt",
    )


class ProfileRecord(Record):
    """Persisted state of the profile."""

    title: str = DEFAULT_TITLE
    description: str = DEFAULT_DESCRIPTION
    achievements: list[Achievement] = Field(default_factory=list)
    fields: dict[str, str] = Field(default_factory=dict)


def update_title(current: ProfileRecord, title: str) -> Transition[ProfileRecord]:
    return Transition(
        current.model_copy(update={"title": title}),
        (
            LogActivity(
                kind="profile_updated",
                title="Updated profile title",
                description=f"New title: {title}",
            ),
        ),
    )


def update_description(current: ProfileRecord, description: str) -> Transition[ProfileRecord]:
    return Transition(
        current.model_copy(update={"description": description}),
        (LogActivity(kind="profile_updated", title="Updated profile description"),),
    )


def update_field(current: ProfileRecord, name: str, value: str) -> Transition[ProfileRecord]:
    """Set one named profile field, leaving the others alone."""
    return Transition(current.model_copy(update={"fields": {**current.fields, name: value}}))


def create_achievement(title: str, description: str, now: Optional[int] = None) -> Achievement:
    return Achievement(
        id=new_id(),
        title=title,
        description=description,
        date=now_ms() if now is None else now,
    )


def add_achievement(
    current: ProfileRecord,
    title: str,
    description: str,
    now: Optional[int] = None,
) -> Transition[ProfileRecord]:
    """Append a freshly created achievement to the end of the list."""
    achievement = create_achievement(title, description, now=now)
    return Transition(
        current.model_copy(update={"achievements": [*current.achievements, achievement]}),
        (
            LogActivity(
                kind="achievement_added",
                title=f"Earned achievement: {title}",
                description=description,
                metadata={"achievementId": achievement.id},
            ),
        ),
    )


def remove_achievement(current: ProfileRecord, achievement_id: str) -> Transition[ProfileRecord]:
    """Drop the achievement with ``achievement_id``; unknown ids are a no-op."""
    return Transition(
        current.model_copy(
            update={"achievements": [a for a in current.achievements if a.id != achievement_id]}
        )
    )


def get_achievement_by_id(record: ProfileRecord, achievement_id: str) -> Optional[Achievement]:
    return next((a for a in record.achievements if a.id == achievement_id), None)


def get_achievement_count(record: ProfileRecord) -> int:
    return len(record.achievements)


def sort_by_date_descending(achievements: Iterable[Achievement]) -> list[Achievement]:
    """Newest first. Stable: equal dates keep their stored order."""
    return sorted(achievements, key=lambda a: a.date, reverse=True)
