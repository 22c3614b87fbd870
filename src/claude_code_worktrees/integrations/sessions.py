"""Registry of live terminal sessions keyed by agent identifier."""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from claude_code_worktrees.config.settings import Settings
from claude_code_worktrees.errors import SessionExistsError, SessionNotFoundError, TerminalIOError
from claude_code_worktrees.integrations.terminal import TerminalSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[..., TerminalSession]


class SessionRegistry:
    """Live sessions, one per identifier.

    Only the control thread touches the mapping; reader threads only see
    their own session's emulator, so no locking is needed here.
    """

    def __init__(self, settings: Optional[Settings] = None, factory: Optional[SessionFactory] = None):
        self.settings = settings or Settings()
        self._factory: SessionFactory = factory or TerminalSession.start
        self._sessions: Dict[str, TerminalSession] = {}

    def spawn(
        self,
        session_id: str,
        working_directory: Union[str, Path],
        label: str,
        rows: Optional[int] = None,
        cols: Optional[int] = None,
    ) -> TerminalSession:
        """Start a session running the configured agent command and register it.

        Raises:
            SessionExistsError: If the identifier already has a live session
            SpawnError: If the session cannot be started
        """
        if session_id in self._sessions:
            raise SessionExistsError(session_id)

        session = self._factory(
            session_id,
            working_directory,
            label,
            rows=rows or self.settings.default_rows,
            cols=cols or self.settings.default_cols,
            command=self.settings.agent_command,
            args=self.settings.agent_args,
            term=self.settings.term,
            scrollback=self.settings.scrollback_lines,
            read_chunk_size=self.settings.read_chunk_size,
        )
        self._sessions[session_id] = session
        return session

    def get(self, session_id: str) -> Optional[TerminalSession]:
        return self._sessions.get(session_id)

    def get_mutable(self, session_id: str) -> TerminalSession:
        """Fetch a session for writing or resizing.

        Raises:
            SessionNotFoundError: If no session has this identifier
        """
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def write(self, session_id: str, data: bytes) -> None:
        self.get_mutable(session_id).write(data)

    def remove(self, session_id: str) -> Optional[TerminalSession]:
        """Unregister a session and release its pseudo-terminal."""
        session = self._sessions.pop(session_id, None)
        if session is not None:
            session.close()
        return session

    def resize_all(self, rows: int, cols: int) -> None:
        """Resize every session, skipping the ones that fail."""
        for session in self._sessions.values():
            try:
                session.resize(rows, cols)
            except (TerminalIOError, ValueError) as e:
                logger.debug("Resize of %s skipped: %s", session.id, e)

    def list_ids(self) -> List[str]:
        return list(self._sessions)

    def stop_all(self) -> None:
        for session_id in self.list_ids():
            self.remove(session_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
