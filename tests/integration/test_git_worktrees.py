"""Integration tests for agent worktrees against a real git repository."""

import json

import pytest

from claude_code_worktrees.core.lifecycle import AgentLifecycleManager
from claude_code_worktrees.errors import VcsCommandError
from claude_code_worktrees.integrations.git import GitWorktrees, find_repo_root
from claude_code_worktrees.models import AgentStatus


def commit_file(git, path, name: str, content: str, message: str) -> None:
    (path / name).write_text(content)
    git(path, "add", name)
    git(path, "commit", "-q", "-m", message)


@pytest.fixture
def manager(git_repo, settings) -> AgentLifecycleManager:
    return AgentLifecycleManager(git_repo, settings)


@pytest.mark.integration
@pytest.mark.git
class TestGitWorktreesIntegration:
    """Test the full agent lifecycle with real git commands."""

    def test_find_repo_root_from_subdirectory(self, git_repo):
        sub = git_repo / "pkg" / "module"
        sub.mkdir(parents=True)

        assert find_repo_root(sub).resolve() == git_repo.resolve()

    def test_create_agent(self, manager, git_repo, git):
        """Test that a worktree and branch are created from the current HEAD."""
        agent = manager.create_agent("Add feature flag")

        assert agent.worktree_path.is_dir()
        assert (agent.worktree_path / "README.md").read_text() == "hello\n"
        assert git(agent.worktree_path, "rev-parse", "--abbrev-ref", "HEAD") == agent.branch
        assert agent.base_branch == "main"
        assert agent.base_commit == git(git_repo, "rev-parse", "HEAD")

        state = json.loads((git_repo / ".cwt" / "state.json").read_text())
        assert state["agents"][agent.id]["baseBranch"] == "main"

    def test_remove_agent(self, manager, git_repo, git):
        agent = manager.create_agent("Throwaway")

        manager.remove_agent(agent.id)

        assert not agent.worktree_path.exists()
        assert git(git_repo, "branch", "--list", agent.branch) == ""
        assert manager.list_agents() == []

    def test_remove_agent_with_unmerged_work(self, manager, git_repo, git):
        """Test that forced cleanup handles dirty worktrees and unmerged branches."""
        agent = manager.create_agent("Dirty work")
        commit_file(git, agent.worktree_path, "feature.txt", "feature\n", "Add feature")
        (agent.worktree_path / "scratch.txt").write_text("uncommitted\n")

        manager.remove_agent(agent.id)

        assert not agent.worktree_path.exists()
        assert git(git_repo, "branch", "--list", agent.branch) == ""

    def test_diff_commits_and_merge(self, manager, git_repo, git):
        """Test the branch queries and a clean merge."""
        agent = manager.create_agent("Add feature")
        commit_file(git, agent.worktree_path, "feature.txt", "feature\n", "Add feature file")

        assert "feature.txt" in manager.diff(agent.id)
        assert "Add feature file" in manager.commits(agent.id)
        assert manager.has_conflicts(agent.id) is False

        merged = manager.merge_agent(agent.id)

        assert merged.status == AgentStatus.MERGED
        assert (git_repo / "feature.txt").read_text() == "feature\n"
        assert git(git_repo, "log", "-1", "--format=%s") == f"Merge {agent.id}: Add feature"
        assert manager.snapshot.merge_history[0].merge_commit == git(git_repo, "rev-parse", "HEAD")

    def test_conflicting_merge(self, manager, git_repo, git):
        """Test that a conflicting merge is detected and leaves the agent merging."""
        agent = manager.create_agent("Rewrite readme")
        commit_file(git, agent.worktree_path, "README.md", "agent version\n", "Agent edit")
        commit_file(git, git_repo, "README.md", "main version\n", "Main edit")

        assert manager.has_conflicts(agent.id) is True

        with pytest.raises(VcsCommandError):
            manager.merge_agent(agent.id)

        assert manager.get_agent(agent.id).status == AgentStatus.MERGING
        git(git_repo, "merge", "--abort")

    def test_git_errors_carry_stderr(self, git_repo):
        with pytest.raises(VcsCommandError) as exc_info:
            GitWorktrees(git_repo).checkout("no-such-branch")

        assert exc_info.value.returncode != 0
        assert exc_info.value.stderr
