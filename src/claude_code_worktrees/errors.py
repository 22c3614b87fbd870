"""Exception taxonomy for Claude Code Worktrees."""

from pathlib import Path
from typing import Sequence


class WorktreeFarmError(Exception):
    """Base class for all errors raised by this package."""


class SpawnError(WorktreeFarmError):
    """The pseudo-terminal or the agent process could not be started."""

    def __init__(self, session_id: str, reason: str):
        self.session_id = session_id
        self.reason = reason
        super().__init__(f"Failed to start session {session_id}: {reason}")


class VcsCommandError(WorktreeFarmError):
    """A git command exited with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = self.stderr or f"exit code {returncode}"
        super().__init__(f"Git command failed ({' '.join(self.args_list)}): {detail}")


class AgentNotFoundError(WorktreeFarmError, KeyError):
    """No agent with the given identifier is recorded."""

    def __init__(self, agent_id: str):
        self.agent_id = agent_id
        super().__init__(f"Agent not found: {agent_id}")

    def __str__(self) -> str:
        return f"Agent not found: {self.agent_id}"


class CorruptStateError(WorktreeFarmError):
    """The snapshot file exists but cannot be parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse state file {path}: {reason}")


class NotAGitRepositoryError(WorktreeFarmError):
    """The given directory is not the root of a git repository."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Not a git repository: {path}")


class TerminalIOError(WorktreeFarmError):
    """Writing to or resizing a session's pseudo-terminal failed."""


class SessionExistsError(WorktreeFarmError):
    """A live session with the same identifier is already registered."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} already exists")


class SessionNotFoundError(WorktreeFarmError, KeyError):
    """No live session with the given identifier is registered."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")

    def __str__(self) -> str:
        return f"Session {self.session_id} not found"
