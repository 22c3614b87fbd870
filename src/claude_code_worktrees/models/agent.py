"""Agent models: status taxonomy, agent record and merge history."""

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import Field, field_validator

from claude_code_worktrees.models.base import SerializableModel
from claude_code_worktrees.utils.datetime_utils import ensure_aware, now_utc


class AgentStatus(str, Enum):
    """Agent status enumeration."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    MERGING = "merging"
    MERGED = "merged"
    FAILED = "failed"


class Agent(SerializableModel):
    """One unit of work: a worktree, its branch and the task it was created for.

    Only ``status`` and ``merged_at`` change after creation.
    """

    id: str = Field(..., frozen=True, description="Agent identifier")
    branch: str = Field(..., frozen=True, description="Branch checked out in the worktree")
    worktree_path: Path = Field(..., frozen=True, description="Absolute worktree location")
    task: str = Field(..., frozen=True, description="Task description supplied by the user")
    status: AgentStatus = Field(default=AgentStatus.RUNNING)
    base_branch: str = Field(..., frozen=True, description="Branch the agent forked from")
    base_commit: str = Field(..., frozen=True, description="Commit the agent forked from")
    created_at: datetime = Field(default_factory=now_utc, frozen=True)
    merged_at: datetime | None = Field(default=None)

    @field_validator("created_at", "merged_at")
    @classmethod
    def validate_timestamp(cls, v: datetime | None) -> datetime | None:
        """Store timestamps as aware UTC."""
        return ensure_aware(v)

    @property
    def is_active(self) -> bool:
        """Whether the agent should own a live session."""
        return self.status == AgentStatus.RUNNING

    def mark_merged(self, when: datetime | None = None) -> None:
        """Record a successful merge."""
        self.status = AgentStatus.MERGED
        self.merged_at = ensure_aware(when) if when else now_utc()


class MergeRecord(SerializableModel):
    """A completed merge of an agent branch into its base branch."""

    agent_id: str
    branch: str
    base_branch: str
    merge_commit: str
    merged_at: datetime = Field(default_factory=now_utc)

    @field_validator("merged_at")
    @classmethod
    def validate_timestamp(cls, v: datetime) -> datetime:
        """Store timestamps as aware UTC."""
        return ensure_aware(v)
