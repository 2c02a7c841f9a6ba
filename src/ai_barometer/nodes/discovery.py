"""Candidate discovery: which transcripts could belong to a commit."""

import os
from pathlib import Path
from typing import Iterable, List, Set

from loguru import logger

from ai_barometer.agents import claude, codex
from ai_barometer.models.session import CandidateFile, LogDir
from ai_barometer.models.state import AttachState
from ai_barometer.settings import DEFAULT_WINDOW_SECONDS

INTEGRATIONS = (claude, codex)


def all_log_dirs(repo_root: Path) -> Set[LogDir]:
    """Union of the log directories of every supported integration."""
    dirs: Set[LogDir] = set()
    for integration in INTEGRATIONS:
        dirs |= integration.log_dirs(repo_root)
    return dirs


def _iter_transcripts(log_dir: LogDir) -> Iterable[Path]:
    try:
        yield from log_dir.path.rglob("*.jsonl")
    except OSError as e:
        logger.debug(f"Skipping unreadable log directory {log_dir.path}: {e}")


def candidate_files(
    dirs: Iterable[LogDir], target_time: int, window_seconds: int = DEFAULT_WINDOW_SECONDS
) -> List[CandidateFile]:
    """Transcripts modified within ``target_time ± window_seconds`` (inclusive).

    Ordered most recently modified first, ties broken by path, so the first
    matching candidate is always the same one for the same inputs.
    """
    low = target_time - window_seconds
    high = target_time + window_seconds
    seen = set()
    candidates = []

    for log_dir in sorted(dirs, key=lambda d: (str(d.path), d.agent.value)):
        for path in _iter_transcripts(log_dir):
            real = os.path.realpath(path)
            if real in seen:
                continue
            try:
                stat = path.stat()
            except OSError:
                continue
            if not path.is_file() or not (low <= stat.st_mtime <= high):
                continue
            seen.add(real)
            candidates.append(CandidateFile(path=path, agent=log_dir.agent, mtime=stat.st_mtime))

    candidates.sort(key=lambda c: (-c.mtime, str(c.path)))
    return candidates


def discovery_node(state: AttachState) -> AttachState:
    """Collect candidate transcripts around the commit time."""
    commit = state["commit"]
    window = state.get("window_seconds", DEFAULT_WINDOW_SECONDS)

    dirs = all_log_dirs(commit.repo_root)
    candidates = candidate_files(dirs, commit.timestamp, window)
    logger.debug(f"Found {len(candidates)} candidate transcripts in {len(dirs)} log directories")

    return {
        **state,
        "log_dirs": sorted(dirs, key=lambda d: str(d.path)),
        "candidates": candidates,
    }
