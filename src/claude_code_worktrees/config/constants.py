"""Constants and fixed values for Claude Code Worktrees."""

# Snapshot format
STATE_FORMAT_VERSION = "1.0"

# Default values
DEFAULT_AGENT_COMMAND = "claude"
DEFAULT_TERM = "xterm-256color"
DEFAULT_WORKTREE_DIR = ".worktrees"
DEFAULT_STATE_DIR = ".cwt"
DEFAULT_STATE_FILE = "state.json"
DEFAULT_BRANCH_NAMESPACE = "cwt"
DEFAULT_ID_PREFIX = "cwt"
DEFAULT_ROWS = 24
DEFAULT_COLS = 80
DEFAULT_CHROME_ROWS = 2  # Tab bar + status bar
DEFAULT_SCROLLBACK_LINES = 1000
DEFAULT_READ_CHUNK_SIZE = 4096
DEFAULT_TAB_LABEL_LENGTH = 15

# Identity
ID_SUFFIX_LENGTH = 4
ID_DATE_FORMAT = "%Y%m%d"
MAX_ID_ATTEMPTS = 8
SLUG_MAX_LENGTH = 30
SLUG_SEPARATOR = "-"
SLUG_FALLBACK = "task"

# Main orchestrator session
MAIN_SESSION_ID = "main"
MAIN_SESSION_LABEL = "Main orchestrator"
MAIN_TAB_NAME = "Main"

# Merge
MERGE_MESSAGE_TEMPLATE = "Merge {agent_id}: {task}"
CONFLICT_MARKER = "<<<<<<<"

# Status emojis
STATUS_EMOJIS = {
    "pending": "⏳",
    "running": "🔧",
    "completed": "✅",
    "merging": "🔀",
    "merged": "🎉",
    "failed": "❌",
}
