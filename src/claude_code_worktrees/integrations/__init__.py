"""Integrations with git and pseudo-terminals."""

from claude_code_worktrees.integrations.git import GitWorktrees, find_repo_root
from claude_code_worktrees.integrations.sessions import SessionRegistry
from claude_code_worktrees.integrations.terminal import TerminalEmulator, TerminalSession

__all__ = ["GitWorktrees", "SessionRegistry", "TerminalEmulator", "TerminalSession", "find_repo_root"]
