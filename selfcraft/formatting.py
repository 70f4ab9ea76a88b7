"""Human-facing formatting of durations and timestamps."""

from __future__ import annotations

from typing import Optional

from selfcraft.records import now_ms


def _count(n: int, unit: str) -> str:
    return f"{n} {unit}{'' if n == 1 else 's'}"


def format_duration(milliseconds: float) -> str:
    """
    Format an elapsed duration using its two largest units.

    The largest non-zero unit among days, hours, minutes and seconds leads,
    followed by the remainder in the next lower unit. Below one minute only
    seconds are shown:

        format_duration(90000)    -> "1 minute, 30 seconds"
        format_duration(30000)    -> "30 seconds"
        format_duration(90061000) -> "1 day, 1 hour"
    """
    seconds = max(0, int(milliseconds // 1000))
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{_count(days, 'day')}, {_count(hours % 24, 'hour')}"
    if hours > 0:
        return f"{_count(hours, 'hour')}, {_count(minutes % 60, 'minute')}"
    if minutes > 0:
        return f"{_count(minutes, 'minute')}, {_count(seconds % 60, 'second')}"
    return _count(seconds, "second")


def format_relative_time(timestamp: int, now: Optional[int] = None) -> str:
    """Describe an epoch-ms timestamp relative to now ("2 hours ago", "yesterday")."""
    if now is None:
        now = now_ms()
    seconds = max(0, (now - timestamp) // 1000)
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    weeks = days // 7
    months = days // 30

    if seconds < 60:
        return "just now"
    if minutes < 60:
        return f"{_count(minutes, 'minute')} ago"
    if hours < 24:
        return f"{_count(hours, 'hour')} ago"
    if days == 1:
        return "yesterday"
    if days < 7:
        return f"{days} days ago"
    if weeks < 4:
        return f"{_count(weeks, 'week')} ago"
    if months < 12:
        return f"{_count(months, 'month')} ago"
    return f"{_count(months // 12, 'year')} ago"
