"""
Activity capabilities — read-only views of the activity log for the agent.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from selfcraft.activity import ACTIVITY_LABELS, ActivityLog, ActivityType
from selfcraft.capabilities.facade import CapabilitySet
from selfcraft.capabilities.registry import CapabilityArguments, CapabilityRegistry
from selfcraft.formatting import format_relative_time


class ActivityLogArguments(CapabilityArguments):
    capability_name = "get_activity_log"
    capability_description = (
        "Get the user's recent activity log. Shows what the user has been doing "
        "in the app: safe locks and unlocks, achievements, profile edits. Use this "
        "to understand the user's engagement and progress."
    )

    days: Optional[int] = Field(
        None, ge=1, le=30, description="Number of days to look back (default: 7, max: 30)"
    )
    limit: Optional[int] = Field(
        None, ge=1, le=100, description="Maximum number of activities to return (default: 50)"
    )


class ActivitySummaryArguments(CapabilityArguments):
    capability_name = "get_activity_summary"
    capability_description = (
        "Get a brief summary of the user's recent activity. Use this for quick "
        "context about what the user has been doing."
    )


class ActivityStatsArguments(CapabilityArguments):
    capability_name = "get_activity_stats"
    capability_description = "Get counts of the user's activities by type."

    days: Optional[int] = Field(
        None, ge=1, le=365, description="Number of days to calculate stats for (default: all time)"
    )


class ActivitiesByTypeArguments(CapabilityArguments):
    capability_name = "get_activities_by_type"
    capability_description = (
        "Get activities filtered by a specific type. Useful for checking specific "
        "kinds of user actions."
    )

    type: ActivityType = Field(description="The type of activity to filter by")
    limit: Optional[int] = Field(
        None, ge=1, le=50, description="Maximum number of activities to return (default: 20)"
    )


class ActivityCapabilities(CapabilitySet):
    category = "activity"
    operations = (
        ActivityLogArguments,
        ActivitySummaryArguments,
        ActivityStatsArguments,
        ActivitiesByTypeArguments,
    )

    def __init__(self, activity_log: ActivityLog, default_days: int = 7) -> None:
        self._log = activity_log
        self._default_days = default_days
        super().__init__()

    def _handlers(self):
        return {
            ActivityLogArguments: self._get_log,
            ActivitySummaryArguments: self._get_summary,
            ActivityStatsArguments: self._get_stats,
            ActivitiesByTypeArguments: self._get_by_type,
        }

    def _get_log(self, op: ActivityLogArguments) -> str:
        return self._log.for_agent(days=op.days or self._default_days, limit=op.limit or 50)

    def _get_summary(self, op: ActivitySummaryArguments) -> str:
        return self._log.summary_for_agent()

    def _get_stats(self, op: ActivityStatsArguments) -> str:
        activities = self._log.recent(op.days) if op.days else None
        stats = self._log.stats(activities)
        scope = f"Last {op.days} days" if op.days else "All Time"
        lines = [f"Activity Statistics ({scope}):", f"- Total activities logged: {stats['total']}"]
        for kind, count in stats["by_type"].items():
            lines.append(f"- {ACTIVITY_LABELS[ActivityType(kind)]}: {count}")
        return "\n".join(lines)

    def _get_by_type(self, op: ActivitiesByTypeArguments) -> str:
        activities = sorted(self._log.by_type(op.type), key=lambda a: a.timestamp, reverse=True)
        activities = activities[: op.limit or 20]
        kind = op.type.value
        if not activities:
            return f'No activities of type "{kind}" found.'
        now = self._log.now()
        lines = []
        for a in activities:
            desc = f" - {a.description}" if a.description else ""
            lines.append(f"- [{format_relative_time(a.timestamp, now=now)}] {a.title}{desc}")
        return f'Activities of type "{kind}" ({len(activities)} found):\n' + "\n".join(lines)


def register_activity_capabilities(
    registry: CapabilityRegistry, activity: ActivityCapabilities
) -> None:
    registry.register_all(activity.definitions())
