"""Pydantic models for Claude Code Worktrees.

This module provides strongly-typed models for the persisted agent
registry.
"""

from claude_code_worktrees.models.agent import Agent, AgentStatus, MergeRecord
from claude_code_worktrees.models.base import SerializableModel
from claude_code_worktrees.models.registry import RegistrySnapshot

__all__ = [
    "Agent",
    "AgentStatus",
    "MergeRecord",
    "RegistrySnapshot",
    "SerializableModel",
]
