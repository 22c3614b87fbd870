"""Unit tests for the session registry."""

import pytest

from claude_code_worktrees.config.settings import Settings
from claude_code_worktrees.errors import SessionExistsError, SessionNotFoundError, SpawnError, TerminalIOError
from claude_code_worktrees.integrations.sessions import SessionRegistry


@pytest.fixture
def registry(settings, session_factory) -> SessionRegistry:
    return SessionRegistry(settings, factory=session_factory)


@pytest.mark.unit
class TestSessionRegistry:
    """Test spawning, lookup and removal of sessions."""

    def test_spawn_uses_settings(self, session_factory, tmp_path):
        """Test that the configured command and terminal options reach the factory."""
        settings = Settings(_env_file=None, agent_command="bash", agent_args=["-i"], scrollback_lines=50)
        registry = SessionRegistry(settings, factory=session_factory)

        session = registry.spawn("cwt-1", tmp_path, "Fix login")

        assert session.id == "cwt-1"
        assert session.label == "Fix login"
        assert (session.rows, session.cols) == (24, 80)
        assert session.options["command"] == "bash"
        assert session.options["args"] == ["-i"]
        assert session.options["scrollback"] == 50
        assert session.options["term"] == "xterm-256color"
        assert "cwt-1" in registry

    def test_spawn_with_size(self, registry, tmp_path):
        session = registry.spawn("cwt-1", tmp_path, "x", rows=10, cols=40)
        assert (session.rows, session.cols) == (10, 40)

    def test_duplicate_id(self, registry, tmp_path):
        registry.spawn("cwt-1", tmp_path, "x")

        with pytest.raises(SessionExistsError):
            registry.spawn("cwt-1", tmp_path, "again")

        assert len(registry) == 1

    def test_spawn_failure_registers_nothing(self, registry, session_factory, tmp_path):
        session_factory.failing.add("cwt-1")

        with pytest.raises(SpawnError):
            registry.spawn("cwt-1", tmp_path, "x")

        assert "cwt-1" not in registry

    def test_get(self, registry, tmp_path):
        session = registry.spawn("cwt-1", tmp_path, "x")

        assert registry.get("cwt-1") is session
        assert registry.get("missing") is None

    def test_get_mutable(self, registry, tmp_path):
        session = registry.spawn("cwt-1", tmp_path, "x")

        assert registry.get_mutable("cwt-1") is session
        with pytest.raises(SessionNotFoundError):
            registry.get_mutable("missing")

    def test_write(self, registry, tmp_path):
        session = registry.spawn("cwt-1", tmp_path, "x")

        registry.write("cwt-1", b"hi")

        assert session.written == [b"hi"]
        with pytest.raises(KeyError):
            registry.write("missing", b"hi")

    def test_remove_closes_session(self, registry, tmp_path):
        """Test that removal releases the session."""
        session = registry.spawn("cwt-1", tmp_path, "x")

        assert registry.remove("cwt-1") is session
        assert session.closed
        assert registry.get("cwt-1") is None
        assert registry.remove("cwt-1") is None

    def test_resize_all_skips_failures(self, registry, tmp_path):
        """Test that one failing session does not stop the others."""
        broken = registry.spawn("cwt-1", tmp_path, "x")
        healthy = registry.spawn("cwt-2", tmp_path, "y")
        broken.resize_error = TerminalIOError("gone")

        registry.resize_all(30, 100)

        assert (healthy.rows, healthy.cols) == (30, 100)
        assert (broken.rows, broken.cols) == (24, 80)

    def test_list_ids_and_stop_all(self, registry, tmp_path):
        first = registry.spawn("cwt-1", tmp_path, "x")
        second = registry.spawn("cwt-2", tmp_path, "y")

        assert registry.list_ids() == ["cwt-1", "cwt-2"]

        registry.stop_all()

        assert len(registry) == 0
        assert first.closed and second.closed
