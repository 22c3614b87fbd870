"""Configuration management for Claude Code Worktrees."""

from claude_code_worktrees.config import constants
from claude_code_worktrees.config.settings import Settings, load_settings

__all__ = ["Settings", "constants", "load_settings"]
