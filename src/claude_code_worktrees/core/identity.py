"""Agent identifiers and branch-name slugs."""

import random
import re
import string
from datetime import datetime
from typing import Optional

from claude_code_worktrees.config import constants
from claude_code_worktrees.utils.datetime_utils import now_utc

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def generate_identifier(prefix: str = constants.DEFAULT_ID_PREFIX, now: Optional[datetime] = None) -> str:
    """Generate an agent identifier of the form ``<prefix>-<YYYYMMDD>-<suffix>``.

    The suffix is random; uniqueness against existing agents is the
    caller's concern.
    """
    moment = now or now_utc()
    suffix = "".join(random.choices(_SUFFIX_ALPHABET, k=constants.ID_SUFFIX_LENGTH))
    return f"{prefix}-{moment.strftime(constants.ID_DATE_FORMAT)}-{suffix}"


def slugify(text: str, max_length: int = constants.SLUG_MAX_LENGTH) -> str:
    """Turn free text into a lowercase, dash-separated branch fragment.

    Example:
        >>> slugify("Fix the Bug!! in parser")
        'fix-the-bug-in-parser'
    """
    sep = constants.SLUG_SEPARATOR
    slug = _SLUG_INVALID.sub(sep, text.lower()).strip(sep)
    # Truncation can expose a separator at the cut
    return slug[:max_length].rstrip(sep)


def branch_name(namespace: str, agent_id: str, task: str) -> str:
    """Build ``<namespace>/<id>/<slug>`` for a new agent branch."""
    slug = slugify(task) or constants.SLUG_FALLBACK
    return f"{namespace}/{agent_id}/{slug}"
