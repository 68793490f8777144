"""Human readable formatting helpers."""

from __future__ import annotations

from datetime import timedelta


def human_duration(seconds: float | int | timedelta, include_hours: bool = False) -> str:
    """Format a duration as ``MM:SS``, or ``HH:MM:SS`` when hours are present or requested.

    Fractions of a second are truncated.
    """
    if isinstance(seconds, timedelta):
        seconds = seconds.total_seconds()
    if seconds < 0:
        raise ValueError(f"duration cannot be negative: {seconds}")

    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0 or include_hours:
        return f"{hours:02}:{minutes:02}:{secs:02}"
    return f"{minutes:02}:{secs:02}"