"""Coordinator tying persisted agents to live terminal sessions."""

import contextlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from claude_code_worktrees.config import constants
from claude_code_worktrees.config.settings import Settings
from claude_code_worktrees.core.lifecycle import AgentLifecycleManager
from claude_code_worktrees.errors import AgentNotFoundError, SpawnError, VcsCommandError
from claude_code_worktrees.integrations.sessions import SessionRegistry
from claude_code_worktrees.integrations.terminal import TerminalSession
from claude_code_worktrees.models import Agent
from claude_code_worktrees.utils import truncate

logger = logging.getLogger(__name__)


@dataclass
class Tab:
    """One entry in the tab bar; tab 0 is always the main session."""

    id: str
    name: str
    is_main: bool = False
    agent: Optional[Agent] = None


class Coordinator:
    """Drive the lifecycle manager and the session registry together.

    Agent ids and session ids are the same string. The coordinator keeps
    the ordered tab list the rendering layer paints.
    """

    def __init__(
        self,
        repo_root: Path,
        settings: Optional[Settings] = None,
        lifecycle: Optional[AgentLifecycleManager] = None,
        sessions: Optional[SessionRegistry] = None,
    ):
        self.repo_root = Path(repo_root)
        self.settings = settings if settings is not None else Settings()
        self.lifecycle = (
            lifecycle if lifecycle is not None else AgentLifecycleManager(self.repo_root, self.settings)
        )
        # An empty registry is falsy
        self.sessions = sessions if sessions is not None else SessionRegistry(self.settings)
        self.tabs: List[Tab] = []
        self.active_tab = 0
        self.term_rows = self.settings.default_rows
        self.term_cols = self.settings.default_cols

    @property
    def session_rows(self) -> int:
        return self.settings.session_rows(self.term_rows)

    def start(self) -> None:
        """Spawn the main session and re-attach every running agent.

        A running agent whose session cannot be started is skipped and
        keeps its registry entry.

        Raises:
            SpawnError: If the main session cannot be started
        """
        self.sessions.spawn(
            constants.MAIN_SESSION_ID,
            self.repo_root,
            constants.MAIN_SESSION_LABEL,
            rows=self.session_rows,
            cols=self.term_cols,
        )
        self.tabs = [Tab(id=constants.MAIN_SESSION_ID, name=constants.MAIN_TAB_NAME, is_main=True)]
        self.active_tab = 0

        for agent in self.lifecycle.list_agents():
            if not agent.is_active:
                continue
            try:
                self._spawn_agent_session(agent)
            except SpawnError as e:
                logger.debug("Agent %s has no live session: %s", agent.id, e)
                continue
            self.tabs.append(self._tab_for(agent))

    def _spawn_agent_session(self, agent: Agent) -> TerminalSession:
        return self.sessions.spawn(
            agent.id,
            agent.worktree_path,
            agent.task,
            rows=self.session_rows,
            cols=self.term_cols,
        )

    def _tab_for(self, agent: Agent) -> Tab:
        return Tab(id=agent.id, name=truncate(agent.task, self.settings.tab_label_length), agent=agent)

    @property
    def current_tab(self) -> Tab:
        return self.tabs[self.active_tab]

    def current_session(self) -> Optional[TerminalSession]:
        if not self.tabs:
            return None
        return self.sessions.get(self.current_tab.id)

    # Navigation and input

    def next_tab(self) -> None:
        if self.active_tab < len(self.tabs) - 1:
            self.active_tab += 1

    def previous_tab(self) -> None:
        if self.active_tab > 0:
            self.active_tab -= 1

    def forward_input(self, data: bytes) -> None:
        """Send bytes to the active tab's session, if it has one."""
        session = self.current_session()
        if session is not None and data:
            session.write(data)

    def resize(self, rows: int, cols: int) -> None:
        """Record the terminal size and resize every session to the area below the chrome."""
        self.term_rows = rows
        self.term_cols = cols
        self.sessions.resize_all(self.session_rows, cols)

    # User actions

    def create_agent(self, task: str) -> Tab:
        """Create an agent, start its session and focus its new tab.

        Raises:
            ValueError: If the task is blank
            VcsCommandError: If the worktree cannot be created
            SpawnError: If the agent's session cannot be started
        """
        agent = self.lifecycle.create_agent(task)
        self._spawn_agent_session(agent)
        tab = self._tab_for(agent)
        self.tabs.append(tab)
        self.active_tab = len(self.tabs) - 1
        return tab

    def close_current_tab(self) -> None:
        """Close the active agent tab; the main tab is never closed."""
        if self.active_tab == 0:
            return
        self.close_tab(self.current_tab.id)

    def close_tab(self, agent_id: str) -> None:
        """Drop the session first, then remove the agent and worktree best effort."""
        index = self._index_of(agent_id)
        if index is None or self.tabs[index].is_main:
            return
        tab = self.tabs[index]

        self.sessions.remove(tab.id)
        if tab.agent is not None:
            with contextlib.suppress(AgentNotFoundError, VcsCommandError, OSError):
                self.lifecycle.remove_agent(tab.id)

        del self.tabs[index]
        if index < self.active_tab or self.active_tab >= len(self.tabs):
            self.active_tab -= 1

    def merge_current_tab(self) -> None:
        if self.active_tab == 0:
            return
        self.merge_tab(self.current_tab.id)

    def merge_tab(self, agent_id: str) -> None:
        """Merge the agent's branch, then close its tab.

        A merge failure propagates and leaves the tab open.
        """
        index = self._index_of(agent_id)
        if index is None or self.tabs[index].is_main:
            return
        tab = self.tabs[index]
        if tab.agent is not None:
            tab.agent = self.lifecycle.merge_agent(tab.id)
        self.close_tab(tab.id)

    def shutdown(self) -> None:
        """Release every session; agents stay recorded for the next start."""
        self.sessions.stop_all()

    def _index_of(self, agent_id: str) -> Optional[int]:
        for index, tab in enumerate(self.tabs):
            if tab.id == agent_id:
                return index
        return None
