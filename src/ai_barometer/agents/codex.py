"""Codex CLI transcript locations.

Codex writes rollouts to ``$CODEX_HOME/sessions/YYYY/MM/DD/*.jsonl`` for every
project, so the whole sessions tree is a candidate and the commit-time window
does the narrowing.
"""

import os
from pathlib import Path
from typing import Set

from ai_barometer.models.session import AgentKind, LogDir


def codex_home() -> Path:
    return Path(os.getenv("CODEX_HOME", str(Path.home() / ".codex"))).expanduser()


def log_dirs(repo_root: Path) -> Set[LogDir]:
    sessions = codex_home() / "sessions"
    if not sessions.is_dir():
        return set()
    return {LogDir(path=sessions, agent=AgentKind.CODEX)}
