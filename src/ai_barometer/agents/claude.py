"""Claude Code transcript locations.

Claude Code keeps one JSONL transcript per session under
``~/.claude/projects/<encoded project path>/<session id>.jsonl``, where the
project path has every non-alphanumeric character replaced with ``-``.
"""

import os
import re
from pathlib import Path
from typing import Set

from ai_barometer.models.session import AgentKind, LogDir


def claude_home() -> Path:
    configured = os.getenv("CLAUDE_CONFIG_DIR")
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".claude"


def encode_repo_path(repo_root: Path) -> str:
    """Encode a project path the way Claude Code names its project folders."""
    return re.sub(r"[^A-Za-z0-9]", "-", str(repo_root))


def log_dirs(repo_root: Path) -> Set[LogDir]:
    """Existing Claude Code project directories for ``repo_root``."""
    projects = claude_home() / "projects"
    variants = {Path(repo_root), Path(os.path.realpath(repo_root))}

    dirs = set()
    for variant in variants:
        candidate = projects / encode_repo_path(variant)
        if candidate.is_dir():
            dirs.add(LogDir(path=candidate, agent=AgentKind.CLAUDE_CODE))
    return dirs
