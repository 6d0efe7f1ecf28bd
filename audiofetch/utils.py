"""
audiofetch.utils - Shared utility functions.

Contains small formatting helpers used by the CLI and the HTTP layer.
"""

from __future__ import annotations


def format_duration(seconds: float) -> str:
    """Format seconds as HH:MM:SS or MM:SS.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (HH:MM:SS if >= 1 hour, otherwise MM:SS)
    """
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def truncate(text: str, limit: int) -> str:
    """Cut diagnostic text to at most ``limit`` characters plus a marker."""
    if len(text) <= limit:
        return text
    return text[:limit] + "… [truncated]"
