"""Wrapper around the git command line for worktree management."""

import logging
from pathlib import Path
from typing import Union

from claude_code_worktrees.config import constants
from claude_code_worktrees.errors import NotAGitRepositoryError, VcsCommandError
from claude_code_worktrees.utils import run

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def find_repo_root(start: PathLike = ".") -> Path:
    """Find the top-level directory of the repository containing ``start``.

    Falls back to ``start`` itself when git cannot answer but the
    directory has a ``.git`` entry.

    Raises:
        NotAGitRepositoryError: If no repository can be found
    """
    start_path = Path(start).expanduser().resolve()
    try:
        returncode, stdout, _ = run(
            ["git", "rev-parse", "--show-toplevel"], check=False, quiet=True, capture=True, cwd=start_path,
        )
    except OSError:
        returncode, stdout = 1, ""

    if returncode == 0 and stdout.strip():
        return Path(stdout.strip())
    if (start_path / ".git").exists():
        return start_path
    raise NotAGitRepositoryError(start_path)


class GitWorktrees:
    """Synchronous git operations rooted at one repository.

    Each method runs one git command (``merge`` runs two) and raises
    ``VcsCommandError`` on a non-zero exit. Nothing is retried here;
    callers decide whether a failure is fatal.
    """

    def __init__(self, repo_root: PathLike):
        self.repo_root = Path(repo_root)

    def git(self, *args: str) -> str:
        """Run a git command in the repository and return its trimmed stdout.

        Raises:
            VcsCommandError: If git exits non-zero or cannot be executed
        """
        cmd = ["git", *args]
        try:
            returncode, stdout, stderr = run(cmd, check=False, quiet=True, capture=True, cwd=self.repo_root)
        except OSError as e:
            raise VcsCommandError(cmd, -1, str(e)) from e

        if returncode != 0:
            raise VcsCommandError(cmd, returncode, stderr or stdout)
        return stdout.strip()

    # Read-only queries

    def current_branch(self) -> str:
        return self.git("rev-parse", "--abbrev-ref", "HEAD")

    def current_commit(self) -> str:
        return self.git("rev-parse", "HEAD")

    def diff(self, base: str, branch: str) -> str:
        """Changes on ``branch`` since it diverged from ``base``."""
        return self.git("diff", f"{base}...{branch}")

    def log(self, base: str, branch: str) -> str:
        """One-line log of commits on ``branch`` that ``base`` lacks."""
        return self.git("log", "--oneline", f"{base}..{branch}")

    def merge_base(self, base: str, branch: str) -> str:
        return self.git("merge-base", base, branch)

    def has_conflicts(self, base: str, branch: str) -> bool:
        """Check whether merging ``branch`` into ``base`` would conflict.

        Uses the three-way ``merge-tree`` form, which never touches the
        working tree or the index.
        """
        ancestor = self.merge_base(base, branch)
        output = self.git("merge-tree", ancestor, base, branch)
        return constants.CONFLICT_MARKER in output

    # Worktree and branch management

    def add_worktree(self, path: PathLike, new_branch: str) -> None:
        """Create a worktree at ``path`` on a new branch forked from HEAD."""
        self.git("worktree", "add", "-b", new_branch, str(path))
        logger.info("Created worktree %s on branch %s", path, new_branch)

    def remove_worktree(self, path: PathLike, force: bool = False) -> None:
        args = ["worktree", "remove"]
        if force:
            args.append("--force")
        self.git(*args, str(path))

    def delete_branch(self, name: str, force: bool = False) -> None:
        self.git("branch", "-D" if force else "-d", name)

    def checkout(self, branch: str) -> None:
        self.git("checkout", branch)

    def merge(self, base_branch: str, source_branch: str, message: str) -> None:
        """Check out ``base_branch`` and merge ``source_branch`` with a merge commit.

        A failure in either step is raised as-is; the repository is left in
        whatever state git left it (no ``merge --abort``).
        """
        self.checkout(base_branch)
        self.git("merge", "--no-ff", "-m", message, source_branch)
        logger.info("Merged %s into %s", source_branch, base_branch)
