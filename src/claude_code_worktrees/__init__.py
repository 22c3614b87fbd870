"""Claude Code Worktrees - run parallel Claude Code agents in isolated git worktrees."""

__version__ = "1.0.0"

from claude_code_worktrees.core.coordinator import Coordinator, Tab
from claude_code_worktrees.core.lifecycle import AgentLifecycleManager
from claude_code_worktrees.integrations.sessions import SessionRegistry
from claude_code_worktrees.integrations.terminal import TerminalSession

__all__ = [
    "AgentLifecycleManager",
    "Coordinator",
    "SessionRegistry",
    "Tab",
    "TerminalSession",
]
