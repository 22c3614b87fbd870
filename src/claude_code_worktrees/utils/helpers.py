"""General helper functions."""

from datetime import datetime

from claude_code_worktrees.utils.datetime_utils import ensure_aware, now_utc


def format_duration(seconds: float) -> str:
    """Format duration in seconds to human-readable string."""
    if seconds < 60:
        return f"{int(seconds)}s"
    if seconds < 3600:
        minutes = int(seconds / 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"
    if seconds < 86400:
        hours = int(seconds / 3600)
        minutes = int((seconds % 3600) / 60)
        return f"{hours}h {minutes}m"
    days = int(seconds / 86400)
    hours = int((seconds % 86400) / 3600)
    return f"{days}d {hours}h"


def format_age(moment: datetime) -> str:
    """Format how long ago a timestamp was."""
    elapsed = (now_utc() - ensure_aware(moment)).total_seconds()
    return format_duration(max(0.0, elapsed))


def truncate(text: str, max_length: int) -> str:
    """Shorten text to max_length characters, marking the cut with an ellipsis."""
    if len(text) <= max_length:
        return text
    return f"{text[: max_length - 1]}…"
