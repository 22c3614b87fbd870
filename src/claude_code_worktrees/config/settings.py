"""Pydantic Settings for Claude Code Worktrees configuration.

Values are read, in order of precedence, from explicit keyword arguments,
``CWT_``-prefixed environment variables and a ``.env`` file in the
current directory.
"""

import sys
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console

from claude_code_worktrees.config import constants

console = Console(stderr=True)


class Settings(BaseSettings):
    """Settings for the agent lifecycle and terminal session managers."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CWT_",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # Agent process
    agent_command: str = Field(default=constants.DEFAULT_AGENT_COMMAND, description="Executable spawned per session")

    agent_args: list[str] = Field(default_factory=list, description="Extra arguments for the agent executable")

    term: str = Field(default=constants.DEFAULT_TERM, description="TERM value given to agent processes")

    # Repository layout
    worktree_dir: str = Field(
        default=constants.DEFAULT_WORKTREE_DIR, description="Worktree directory name under the repository root",
    )

    state_dir: str = Field(default=constants.DEFAULT_STATE_DIR, description="Control directory under the repository root")

    state_file: str = Field(default=constants.DEFAULT_STATE_FILE, description="Snapshot file name")

    branch_namespace: str = Field(
        default=constants.DEFAULT_BRANCH_NAMESPACE, description="First path component of agent branches",
        pattern=r"^[A-Za-z0-9._-]+$",
    )

    id_prefix: str = Field(
        default=constants.DEFAULT_ID_PREFIX, description="Prefix of agent identifiers", pattern=r"^[a-z0-9]+$",
    )

    # Terminal
    default_rows: int = Field(default=constants.DEFAULT_ROWS, ge=1, le=1000, description="Initial session rows")

    default_cols: int = Field(default=constants.DEFAULT_COLS, ge=1, le=1000, description="Initial session columns")

    chrome_rows: int = Field(
        default=constants.DEFAULT_CHROME_ROWS, ge=0, le=10, description="Rows reserved for the tab and status bars",
    )

    scrollback_lines: int = Field(
        default=constants.DEFAULT_SCROLLBACK_LINES, ge=0, le=100_000, description="Emulator history per session",
    )

    read_chunk_size: int = Field(
        default=constants.DEFAULT_READ_CHUNK_SIZE, ge=64, le=1_048_576, description="Bytes per pseudo-terminal read",
    )

    tab_label_length: int = Field(
        default=constants.DEFAULT_TAB_LABEL_LENGTH, ge=2, le=80, description="Maximum tab label length",
    )

    log_level: str = Field(
        default="INFO", description="Logging level", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )

    @field_validator("worktree_dir", "state_dir", "state_file")
    @classmethod
    def validate_relative_name(cls, v: str) -> str:
        """Keep layout names inside the repository root."""
        if not v or not v.strip():
            raise ValueError("Name cannot be empty")
        path = Path(v)
        if path.is_absolute() or ".." in path.parts:
            raise ValueError(f"Name must be relative to the repository root: {v}")
        return v.strip()

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lower-case level names."""
        return v.upper() if isinstance(v, str) else v

    def state_path(self, repo_root: Path) -> Path:
        """Get the snapshot file location for a repository."""
        return Path(repo_root) / self.state_dir / self.state_file

    def session_rows(self, terminal_rows: int) -> int:
        """Rows left for a session once the chrome rows are taken."""
        return max(1, terminal_rows - self.chrome_rows)


def load_settings(**overrides) -> Settings:
    """Load settings, reporting configuration errors and exiting."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        console.print(f"[red]Configuration Error:[/red] {e}")
        console.print("\n[yellow]Hint:[/yellow] settings come from CWT_* environment variables or a .env file")
        sys.exit(1)
