"""Shell command execution utilities."""

import logging
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from rich.console import Console

console = Console(stderr=True)
logger = logging.getLogger(__name__)


def run(
    cmd: Union[str, Sequence[str]],
    *,
    check: bool = True,
    quiet: bool = False,
    capture: bool = False,
    cwd: Optional[Path] = None,
) -> Tuple[int, str, str]:
    """Execute a command with optional output capture.

    When capture=False, output is streamed to terminal unless quiet=True
    When capture=True, output is captured and returned

    Args:
        cmd: Command line string or argument list
        check: Raise exception on non-zero exit code
        quiet: Suppress command echo and output
        capture: Capture output instead of streaming
        cwd: Working directory for the command

    Returns:
        Tuple of (returncode, stdout, stderr)
    """
    cmd_list: List[str] = shlex.split(cmd) if isinstance(cmd, str) else list(cmd)
    display = shlex.join(cmd_list)

    if quiet:
        logger.debug("run: %s (cwd=%s)", display, cwd)
    else:
        console.log(display, style="cyan")

    if capture or quiet:
        # Preserve stderr even in quiet-mode so that exceptions contain detail
        result = subprocess.run(cmd_list, cwd=cwd, capture_output=True, text=True, check=check)
        return result.returncode, result.stdout or "", result.stderr or ""

    try:
        result = subprocess.run(cmd_list, cwd=cwd, check=check, stderr=subprocess.STDOUT, text=True)
        return result.returncode, "", ""
    except subprocess.CalledProcessError as e:
        console.print(f"[red]Command failed with exit code {e.returncode}: {display}[/red]")
        raise
