"""Human-readable formatting helpers for distances, durations and arrival times."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Sequence, TypeVar

T = TypeVar("T")


def format_distance(meters: float) -> str:
    """Format a distance in meters, e.g. ``"5.2 km"`` or ``"850 m"``."""
    if meters >= 1000:
        return f"{meters / 1000:.1f} km"
    return f"{round(meters)} m"


def format_duration(seconds: float) -> str:
    """Format a duration in seconds, e.g. ``"1h 25m"`` or ``"45 mins"``."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes} mins"


def calculate_eta(duration_seconds: float, now: datetime | None = None) -> datetime:
    start = now or datetime.now(timezone.utc)
    return start + timedelta(seconds=duration_seconds)


def split_into_batches(items: Sequence[T], max_per_batch: int = 25) -> list[list[T]]:
    """Split items into consecutive batches of at most ``max_per_batch``.

    The directions and distance services both cap the number of locations per request at 25.
    """
    if max_per_batch < 1:
        raise ValueError("max_per_batch must be at least 1.")
    return [list(items[i : i + max_per_batch]) for i in range(0, len(items), max_per_batch)]
