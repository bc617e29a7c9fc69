"""Display helpers."""

from __future__ import annotations


def format_duration(duration_secs: float) -> str:
    """Format seconds as ``MM:SS.ss`` (minutes are not wrapped into hours)."""
    duration_secs = max(0.0, duration_secs)
    minutes = int(duration_secs // 60)
    seconds = round(duration_secs - minutes * 60, 2)
    if seconds >= 60.0:
        minutes += 1
        seconds -= 60.0
    return f"{minutes:02d}:{seconds:05.2f}"


def format_position(offset: int, sample_rate: int) -> str:
    return format_duration(offset / sample_rate if sample_rate else 0.0)
