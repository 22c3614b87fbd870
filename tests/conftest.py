"""Shared pytest fixtures and configuration for Claude Code Worktrees tests."""

import os
import queue
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Generator, List, Optional

import pexpect
import pytest
from ptyprocess import PtyProcessError

from claude_code_worktrees.config.settings import Settings
from claude_code_worktrees.errors import SpawnError, VcsCommandError


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: fast tests with no external processes")
    config.addinivalue_line("markers", "integration: tests that drive real git or pseudo-terminals")
    config.addinivalue_line("markers", "slow: tests that wait on real processes")
    config.addinivalue_line("markers", "git: tests that need the git executable")
    config.addinivalue_line("markers", "pty: tests that need pseudo-terminal support")


# Test environment setup
@pytest.fixture(autouse=True)
def test_environment(monkeypatch):
    """Keep the developer's CWT_* variables out of the tests."""
    for key in list(os.environ):
        if key.startswith("CWT_"):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults only, ignoring any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def fake_repo(tmp_path: Path) -> Path:
    """A directory that looks like a repository root."""
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)
    return repo


class FakeGit:
    """In-memory stand-in for GitWorktrees.

    Names in ``failing`` make the matching call raise. The forced variants
    of remove and delete are keyed with a ``_force`` suffix. ``merge`` runs
    ``on_merge`` first, then records a checkout and a merge step.
    """

    def __init__(self, branch: str = "main", commit: str = "abc123"):
        self.branch = branch
        self.commit = commit
        self.calls: List[tuple] = []
        self.failing: set = set()
        self.diff_output = "diff --git a/file b/file"
        self.log_output = "abc123 Add file"
        self.conflicts = False
        self.on_merge: Optional[Callable[[], None]] = None

    def _call(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.failing:
            raise VcsCommandError(["git", name], 1, f"{name} failed")

    def called(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]

    def current_branch(self) -> str:
        self._call("current_branch")
        return self.branch

    def current_commit(self) -> str:
        self._call("current_commit")
        return self.commit

    def add_worktree(self, path, new_branch: str) -> None:
        self._call("add_worktree", Path(path), new_branch)
        Path(path).mkdir(parents=True)

    def remove_worktree(self, path, force: bool = False) -> None:
        self._call("remove_worktree_force" if force else "remove_worktree", Path(path))

    def delete_branch(self, name: str, force: bool = False) -> None:
        self._call("delete_branch_force" if force else "delete_branch", name)

    def merge(self, base_branch: str, source_branch: str, message: str) -> None:
        if self.on_merge is not None:
            self.on_merge()
        self._call("checkout", base_branch)
        self._call("merge", base_branch, source_branch, message)

    def diff(self, base: str, branch: str) -> str:
        self._call("diff", base, branch)
        return self.diff_output

    def log(self, base: str, branch: str) -> str:
        self._call("log", base, branch)
        return self.log_output

    def has_conflicts(self, base: str, branch: str) -> bool:
        self._call("has_conflicts", base, branch)
        return self.conflicts


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


class FakeProcess:
    """Stand-in for a pexpect.spawn child fed from a queue.

    ``push`` hands a chunk to the reader; ``finish`` or ``close`` ends the
    stream with EOF.
    """

    def __init__(self, pid: int = 4242):
        self.pid = pid
        self.closed = False
        self.sent: List[bytes] = []
        self.winsizes: List[tuple] = []
        self.fail_send = False
        self.fail_setwinsize = False
        self.fail_close = False
        self.close_force: Optional[bool] = None
        self._chunks: "queue.Queue[Optional[bytes]]" = queue.Queue()

    def push(self, data: bytes) -> None:
        self._chunks.put(data)

    def finish(self) -> None:
        self._chunks.put(None)

    def read_nonblocking(self, size: int = 1, timeout=None) -> bytes:
        chunk = self._chunks.get()
        if chunk is None:
            raise pexpect.EOF("end of stream")
        return chunk

    def send(self, data: bytes) -> int:
        if self.fail_send:
            raise OSError("broken pipe")
        self.sent.append(data)
        return len(data)

    def setwinsize(self, rows: int, cols: int) -> None:
        if self.fail_setwinsize:
            raise OSError("bad ioctl")
        self.winsizes.append((rows, cols))

    def close(self, force: bool = True) -> None:
        self.close_force = force
        self.finish()
        if self.fail_close:
            raise PtyProcessError("Could not terminate the child.")
        self.closed = True


@pytest.fixture
def fake_process() -> Generator[FakeProcess, None, None]:
    process = FakeProcess()
    yield process
    process.finish()


class FakeSession:
    """Minimal session object for registry and coordinator tests."""

    def __init__(self, session_id: str, working_directory, label: str, rows: int = 24, cols: int = 80, **options):
        self.id = session_id
        self.working_directory = Path(working_directory)
        self.label = label
        self.rows = rows
        self.cols = cols
        self.options = options
        self.written: List[bytes] = []
        self.closed = False
        self.resize_error: Optional[Exception] = None

    def write(self, data: bytes) -> None:
        self.written.append(data)

    def resize(self, rows: int, cols: int) -> None:
        if self.resize_error is not None:
            raise self.resize_error
        self.rows, self.cols = rows, cols

    def close(self) -> None:
        self.closed = True


class FakeSessionFactory:
    """Records every session it builds; ids in ``failing`` raise SpawnError."""

    def __init__(self):
        self.created: List[FakeSession] = []
        self.failing: set = set()

    def __call__(self, session_id, working_directory, label, **options) -> FakeSession:
        if session_id in self.failing:
            raise SpawnError(session_id, "refused")
        session = FakeSession(session_id, working_directory, label, **options)
        self.created.append(session)
        return session


@pytest.fixture
def session_factory() -> FakeSessionFactory:
    return FakeSessionFactory()


# Real git repositories for integration tests
def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True, text=True)
    return result.stdout.strip()


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """A fresh repository with one commit on ``main``."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    repo = tmp_path / "project"
    repo.mkdir()
    _git(repo, "init", "-q")
    _git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(repo, "config", "user.email", "tests@example.com")
    _git(repo, "config", "user.name", "Tests")
    _git(repo, "config", "commit.gpgsign", "false")
    (repo / "README.md").write_text("hello\n")
    _git(repo, "add", "README.md")
    _git(repo, "commit", "-q", "-m", "Initial commit")
    return repo


@pytest.fixture
def git():
    """Helper that runs git in a given repository and returns stdout."""
    return _git
