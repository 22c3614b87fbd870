"""Core managers: identity, persisted registry, lifecycle and coordination."""

from claude_code_worktrees.core.coordinator import Coordinator, Tab
from claude_code_worktrees.core.identity import generate_identifier, slugify
from claude_code_worktrees.core.lifecycle import AgentLifecycleManager
from claude_code_worktrees.core.store import RegistryStore

__all__ = [
    "AgentLifecycleManager",
    "Coordinator",
    "RegistryStore",
    "Tab",
    "generate_identifier",
    "slugify",
]
