"""Pseudo-terminal sessions with an in-memory screen emulator.

A ``TerminalSession`` runs one agent process inside a pseudo-terminal.
A background reader thread feeds everything the process prints into a
``TerminalEmulator``; the control thread takes snapshots, writes input
and resizes. The emulator lock is the only point where the two meet and
is never held across process I/O.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import pexpect
import pyte
from ptyprocess import PtyProcessError

from claude_code_worktrees.config import constants
from claude_code_worktrees.errors import SpawnError, TerminalIOError

logger = logging.getLogger(__name__)


class TerminalEmulator:
    """Screen state of a virtual terminal, guarded by a single lock."""

    def __init__(
        self,
        rows: int = constants.DEFAULT_ROWS,
        cols: int = constants.DEFAULT_COLS,
        history: int = constants.DEFAULT_SCROLLBACK_LINES,
    ):
        self._lock = threading.Lock()
        self._screen = pyte.HistoryScreen(cols, rows, history=history)
        # ByteStream decodes incrementally, so split multibyte characters survive
        self._stream = pyte.ByteStream(self._screen)

    @property
    def size(self) -> tuple[int, int]:
        """Current (rows, cols)."""
        with self._lock:
            return self._screen.lines, self._screen.columns

    def feed(self, data: bytes) -> None:
        if not data:
            return
        with self._lock:
            self._stream.feed(data)

    def snapshot(self) -> List[str]:
        """Copy of the visible screen, one string per row, padded to the width."""
        with self._lock:
            return list(self._screen.display)

    def cursor(self) -> tuple[int, int]:
        """Cursor position as (row, col)."""
        with self._lock:
            return self._screen.cursor.y, self._screen.cursor.x

    def resize(self, rows: int, cols: int) -> None:
        with self._lock:
            if (rows, cols) != (self._screen.lines, self._screen.columns):
                self._screen.resize(lines=rows, columns=cols)


class TerminalSession:
    """One interactive agent process bound to a pseudo-terminal.

    Build instances with ``TerminalSession.start``. The session never
    restarts its process; once the reader sees end-of-stream the session
    simply stops updating.
    """

    def __init__(
        self,
        session_id: str,
        working_directory: Union[str, Path],
        label: str,
        process: "pexpect.spawn",
        emulator: TerminalEmulator,
        read_chunk_size: int = constants.DEFAULT_READ_CHUNK_SIZE,
    ):
        self.id = session_id
        self.working_directory = Path(working_directory)
        self.label = label
        self._process = process
        self._emulator = emulator
        self._read_chunk_size = read_chunk_size
        self._done = threading.Event()
        self._reader = threading.Thread(target=self._read_loop, name=f"pty-reader-{session_id}", daemon=True)

    @classmethod
    def start(
        cls,
        session_id: str,
        working_directory: Union[str, Path],
        label: str,
        rows: int = constants.DEFAULT_ROWS,
        cols: int = constants.DEFAULT_COLS,
        command: str = constants.DEFAULT_AGENT_COMMAND,
        args: Optional[Sequence[str]] = None,
        term: str = constants.DEFAULT_TERM,
        scrollback: int = constants.DEFAULT_SCROLLBACK_LINES,
        read_chunk_size: int = constants.DEFAULT_READ_CHUNK_SIZE,
    ) -> "TerminalSession":
        """Spawn ``command`` in a rows x cols pseudo-terminal and start reading it.

        Raises:
            SpawnError: If the pseudo-terminal or the process cannot be started
        """
        cwd = Path(working_directory)
        if not cwd.is_dir():
            raise SpawnError(session_id, f"working directory does not exist: {cwd}")

        env: Dict[str, str] = dict(os.environ)
        env["TERM"] = term

        try:
            process = pexpect.spawn(
                command,
                list(args or []),
                cwd=str(cwd),
                env=env,
                dimensions=(rows, cols),
                encoding=None,
            )
        except (pexpect.ExceptionPexpect, OSError) as e:
            raise SpawnError(session_id, str(e)) from e
        # Input goes straight to the pseudo-terminal
        process.delaybeforesend = None

        session = cls(
            session_id,
            cwd,
            label,
            process,
            TerminalEmulator(rows, cols, history=scrollback),
            read_chunk_size=read_chunk_size,
        )
        session.start_reader()
        logger.info("Started session %s (%s) in %s", session_id, command, cwd)
        return session

    def start_reader(self) -> None:
        """Launch the background thread that feeds the emulator."""
        self._reader.start()

    def _read_loop(self) -> None:
        try:
            while True:
                try:
                    data = self._process.read_nonblocking(self._read_chunk_size, timeout=None)
                except (pexpect.EOF, OSError, ValueError):
                    break
                self._emulator.feed(data)
        finally:
            self._done.set()
            logger.debug("Reader for session %s finished", self.id)

    # Control-thread surface

    @property
    def rows(self) -> int:
        return self._emulator.size[0]

    @property
    def cols(self) -> int:
        return self._emulator.size[1]

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid

    @property
    def is_running(self) -> bool:
        """Whether the reader is still receiving output."""
        return not self._done.is_set()

    def wait_closed(self, timeout: Optional[float] = None) -> bool:
        """Block until the reader has finished; returns False on timeout."""
        return self._done.wait(timeout)

    def write(self, data: bytes) -> None:
        """Send raw bytes to the process's input.

        Raises:
            TerminalIOError: If the pseudo-terminal is closed
        """
        if self._process.closed:
            raise TerminalIOError(f"Session {self.id} is closed")
        try:
            self._process.send(data)
        except (OSError, ValueError) as e:
            raise TerminalIOError(f"Write to session {self.id} failed: {e}") from e

    def snapshot(self) -> List[str]:
        return self._emulator.snapshot()

    def screen_text(self) -> str:
        """Visible screen with trailing blanks trimmed from each line."""
        return "\n".join(line.rstrip() for line in self.snapshot())

    def resize(self, rows: int, cols: int) -> None:
        """Resize the emulator and the pseudo-terminal; repeating a size is a no-op.

        Raises:
            TerminalIOError: If the pseudo-terminal rejects the new size
        """
        if rows < 1 or cols < 1:
            raise ValueError(f"Invalid terminal size {rows}x{cols}")
        self._emulator.resize(rows, cols)
        if self._process.closed:
            return
        try:
            self._process.setwinsize(rows, cols)
        except (OSError, ValueError) as e:
            raise TerminalIOError(f"Resize of session {self.id} failed: {e}") from e

    def close(self) -> None:
        """Release the pseudo-terminal; the process is hung up and the reader ends.

        The child is never killed. One that survives the hangup is left to
        the operating system once its terminal is gone.
        """
        if not self._process.closed:
            try:
                self._process.close(force=False)
            except (OSError, pexpect.ExceptionPexpect, PtyProcessError) as e:
                logger.debug("Closing session %s: %s", self.id, e)
        logger.info("Closed session %s", self.id)

    def __repr__(self) -> str:
        return f"TerminalSession(id={self.id!r}, label={self.label!r}, running={self.is_running})"
