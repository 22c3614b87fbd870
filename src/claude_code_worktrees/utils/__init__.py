"""Utility functions for Claude Code Worktrees."""

from claude_code_worktrees.utils.datetime_utils import ensure_aware, now_utc
from claude_code_worktrees.utils.helpers import format_age, format_duration, truncate
from claude_code_worktrees.utils.shell import run

__all__ = [
    "ensure_aware",
    "format_age",
    "format_duration",
    "now_utc",
    "run",
    "truncate",
]
