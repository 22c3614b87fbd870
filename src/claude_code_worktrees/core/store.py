"""Persisted registry store: load and save the agent snapshot file."""

import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from claude_code_worktrees.config import constants
from claude_code_worktrees.config.settings import Settings
from claude_code_worktrees.errors import CorruptStateError
from claude_code_worktrees.models import RegistrySnapshot

logger = logging.getLogger(__name__)


class RegistryStore:
    """Read and rewrite ``<repo>/<state_dir>/<state_file>`` as a whole.

    Writes are plain overwrites; a crash in the middle of one can leave a
    truncated file, which the next ``load`` reports as corrupt.
    """

    def __init__(self, repo_root: Path, settings: Optional[Settings] = None):
        self.repo_root = Path(repo_root)
        self.settings = settings or Settings()
        self.path = self.settings.state_path(self.repo_root)

    def fresh(self) -> RegistrySnapshot:
        """Build an empty snapshot for this repository."""
        return RegistrySnapshot(
            format_version=constants.STATE_FORMAT_VERSION,
            repo_root=self.repo_root,
            worktree_dir_name=self.settings.worktree_dir,
        )

    def load(self) -> RegistrySnapshot:
        """Load the snapshot, or a fresh one when no file exists.

        Raises:
            CorruptStateError: If the file exists but cannot be read or parsed
        """
        if not self.path.exists():
            logger.debug("No state file at %s, starting fresh", self.path)
            return self.fresh()

        try:
            content = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CorruptStateError(self.path, str(e)) from e

        try:
            snapshot = RegistrySnapshot.model_validate_json(content)
        except ValidationError as e:
            raise CorruptStateError(self.path, str(e)) from e

        # The repository may have moved since the file was written
        snapshot.repo_root = self.repo_root
        logger.debug("Loaded %d agents from %s", len(snapshot.agents), self.path)
        return snapshot

    def save(self, snapshot: RegistrySnapshot) -> None:
        """Overwrite the state file with the full snapshot."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(snapshot.to_json(indent=2), encoding="utf-8")
        logger.debug("Saved %d agents to %s", len(snapshot.agents), self.path)
