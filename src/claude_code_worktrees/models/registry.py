"""Registry snapshot: the single durable record of all known agents."""

from pathlib import Path

from pydantic import Field

from claude_code_worktrees.config import constants
from claude_code_worktrees.models.agent import Agent, AgentStatus, MergeRecord
from claude_code_worktrees.models.base import SerializableModel


class RegistrySnapshot(SerializableModel):
    """In-memory copy of the persisted state file."""

    format_version: str = Field(default=constants.STATE_FORMAT_VERSION)
    repo_root: Path
    worktree_dir_name: str = Field(default=constants.DEFAULT_WORKTREE_DIR)
    agents: dict[str, Agent] = Field(default_factory=dict)
    merge_history: list[MergeRecord] = Field(default_factory=list)

    @property
    def worktrees_path(self) -> Path:
        """Absolute path of the directory holding all agent worktrees."""
        return self.repo_root / self.worktree_dir_name

    def add_agent(self, agent: Agent) -> None:
        self.agents[agent.id] = agent

    def get_agent(self, agent_id: str) -> Agent | None:
        return self.agents.get(agent_id)

    def remove_agent(self, agent_id: str) -> Agent | None:
        return self.agents.pop(agent_id, None)

    def list_agents(self) -> list[Agent]:
        """All agents, oldest first."""
        return sorted(self.agents.values(), key=lambda agent: (agent.created_at, agent.id))

    def list_by_status(self, status: AgentStatus) -> list[Agent]:
        return [agent for agent in self.list_agents() if agent.status == status]
