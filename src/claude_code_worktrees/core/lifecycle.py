"""Agent lifecycle manager: create, remove, merge and track agents."""

import logging
from pathlib import Path
from typing import List, Optional

from claude_code_worktrees.config import constants
from claude_code_worktrees.config.settings import Settings
from claude_code_worktrees.core.identity import branch_name, generate_identifier
from claude_code_worktrees.core.store import RegistryStore
from claude_code_worktrees.errors import AgentNotFoundError, NotAGitRepositoryError, VcsCommandError
from claude_code_worktrees.integrations.git import GitWorktrees
from claude_code_worktrees.models import Agent, AgentStatus, MergeRecord, RegistrySnapshot
from claude_code_worktrees.utils import now_utc

logger = logging.getLogger(__name__)


class AgentLifecycleManager:
    """Own the registry snapshot and drive agents through their states.

    Every mutating operation ends by rewriting the whole snapshot. Agents
    handed out by this class are copies; the snapshot is only changed
    through its methods.

    Reachable transitions are ``running -> merging -> merged``. The other
    statuses exist for ``update_status`` and for files written by other
    tools.
    """

    def __init__(
        self,
        repo_root: Path,
        settings: Optional[Settings] = None,
        git: Optional[GitWorktrees] = None,
        store: Optional[RegistryStore] = None,
    ):
        self.repo_root = Path(repo_root)
        if not (self.repo_root / ".git").exists():
            raise NotAGitRepositoryError(self.repo_root)

        self.settings = settings or Settings()
        self.git = git or GitWorktrees(self.repo_root)
        self.store = store or RegistryStore(self.repo_root, self.settings)
        self.snapshot: RegistrySnapshot = self.store.load()

    @property
    def worktrees_path(self) -> Path:
        return self.snapshot.worktrees_path

    def _require(self, agent_id: str) -> Agent:
        agent = self.snapshot.get_agent(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        return agent

    def _persist(self) -> None:
        self.store.save(self.snapshot)

    def _new_identifier(self) -> str:
        for _ in range(constants.MAX_ID_ATTEMPTS):
            agent_id = generate_identifier(self.settings.id_prefix)
            if agent_id not in self.snapshot.agents and not (self.worktrees_path / agent_id).exists():
                return agent_id
            logger.debug("Identifier %s already taken, drawing another", agent_id)
        raise RuntimeError(f"Could not generate a free agent identifier after {constants.MAX_ID_ATTEMPTS} attempts")

    # Mutating operations

    def create_agent(self, task: str) -> Agent:
        """Create a worktree and branch for ``task`` and record a running agent.

        Nothing is recorded unless ``git worktree add`` succeeds.

        Raises:
            ValueError: If the task is blank
            VcsCommandError: If a git query or the worktree creation fails
        """
        task = task.strip()
        if not task:
            raise ValueError("Task description cannot be empty")

        agent_id = self._new_identifier()
        branch = branch_name(self.settings.branch_namespace, agent_id, task)
        worktree_path = self.worktrees_path / agent_id

        base_branch = self.git.current_branch()
        base_commit = self.git.current_commit()

        self.git.add_worktree(worktree_path, branch)

        agent = Agent(
            id=agent_id,
            branch=branch,
            worktree_path=worktree_path,
            task=task,
            status=AgentStatus.RUNNING,
            base_branch=base_branch,
            base_commit=base_commit,
            created_at=now_utc(),
        )
        self.snapshot.add_agent(agent)
        try:
            self._persist()
        except OSError:
            # Do not leave a worktree behind for an agent nobody knows about
            self.snapshot.remove_agent(agent_id)
            self._cleanup(worktree_path, branch)
            raise

        logger.info("Created agent %s for task %r", agent_id, task)
        return agent.model_copy()

    def remove_agent(self, agent_id: str) -> None:
        """Remove an agent's worktree and branch, then forget the agent.

        Worktree and branch cleanup is best effort; a failure there never
        keeps the agent in the registry. Live sessions are not touched.

        Raises:
            AgentNotFoundError: If the identifier is unknown
        """
        agent = self._require(agent_id)
        self._cleanup(agent.worktree_path, agent.branch)
        self.snapshot.remove_agent(agent_id)
        self._persist()
        logger.info("Removed agent %s", agent_id)

    def merge_agent(self, agent_id: str) -> Agent:
        """Merge an agent's branch into the branch it was forked from.

        The agent is persisted as ``merging`` before git runs. If checkout
        or merge fails the error propagates and the agent stays ``merging``.

        Raises:
            AgentNotFoundError: If the identifier is unknown
            VcsCommandError: If checkout or merge fails
        """
        agent = self._require(agent_id)
        agent.status = AgentStatus.MERGING
        self._persist()

        message = constants.MERGE_MESSAGE_TEMPLATE.format(agent_id=agent.id, task=agent.task)
        self.git.merge(agent.base_branch, agent.branch, message)

        agent.mark_merged()
        merge_commit = self._merge_commit()
        self.snapshot.merge_history.append(
            MergeRecord(
                agent_id=agent.id,
                branch=agent.branch,
                base_branch=agent.base_branch,
                merge_commit=merge_commit,
                merged_at=agent.merged_at,
            )
        )
        self._persist()
        logger.info("Merged agent %s into %s", agent_id, agent.base_branch)
        return agent.model_copy()

    def update_status(self, agent_id: str, status: AgentStatus) -> Agent:
        """Overwrite an agent's status.

        Raises:
            AgentNotFoundError: If the identifier is unknown
        """
        agent = self._require(agent_id)
        agent.status = AgentStatus(status)
        self._persist()
        return agent.model_copy()

    # Read-only operations

    def get_agent(self, agent_id: str) -> Optional[Agent]:
        agent = self.snapshot.get_agent(agent_id)
        return agent.model_copy() if agent else None

    def list_agents(self) -> List[Agent]:
        return [agent.model_copy() for agent in self.snapshot.list_agents()]

    def list_by_status(self, status: AgentStatus) -> List[Agent]:
        return [agent.model_copy() for agent in self.snapshot.list_by_status(status)]

    def diff(self, agent_id: str) -> str:
        agent = self._require(agent_id)
        return self.git.diff(agent.base_branch, agent.branch)

    def commits(self, agent_id: str) -> str:
        agent = self._require(agent_id)
        return self.git.log(agent.base_branch, agent.branch)

    def has_conflicts(self, agent_id: str) -> bool:
        agent = self._require(agent_id)
        return self.git.has_conflicts(agent.base_branch, agent.branch)

    # Helpers

    def _merge_commit(self) -> str:
        try:
            return self.git.current_commit()
        except VcsCommandError as e:
            logger.warning("Could not read merge commit: %s", e)
            return ""

    def _cleanup(self, worktree_path: Path, branch: str) -> None:
        """Remove a worktree and its branch, falling back to forced variants."""
        try:
            self.git.remove_worktree(worktree_path)
        except VcsCommandError:
            try:
                self.git.remove_worktree(worktree_path, force=True)
            except VcsCommandError as e:
                logger.warning("Could not remove worktree %s: %s", worktree_path, e)

        try:
            self.git.delete_branch(branch)
        except VcsCommandError:
            try:
                self.git.delete_branch(branch, force=True)
            except VcsCommandError as e:
                logger.warning("Could not delete branch %s: %s", branch, e)
