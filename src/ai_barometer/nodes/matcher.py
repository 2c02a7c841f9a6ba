"""Session matching: find the transcript that mentions a commit."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from ai_barometer.models.session import CandidateFile, SessionMetadata
from ai_barometer.models.state import AttachState

SHORT_HASH_LENGTH = 7


def _hash_needle(commit_hash: str) -> str:
    # git prints the abbreviated hash after a commit ("[main abc1234] ..."),
    # and the full hash contains it too.
    return commit_hash[:SHORT_HASH_LENGTH]


def _mentions(path: Path, needle: str) -> bool:
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            return any(needle in line for line in handle)
    except OSError as e:
        logger.debug(f"Skipping unreadable transcript {path}: {e}")
        return False


def find_sessions_for_commit(commit_hash: str, candidates: Iterable[CandidateFile]) -> List[CandidateFile]:
    """All candidates whose content mentions ``commit_hash``, in candidate order."""
    if not commit_hash:
        return []
    needle = _hash_needle(commit_hash)
    return [candidate for candidate in candidates if _mentions(candidate.path, needle)]


def find_session_for_commit(commit_hash: str, candidates: Iterable[CandidateFile]) -> Optional[CandidateFile]:
    """Return the first candidate whose content mentions ``commit_hash``.

    Candidates are expected in discovery order (newest first), so when several
    transcripts mention the commit the most recently modified one wins.
    """
    matches = find_sessions_for_commit(commit_hash, candidates)
    return matches[0] if matches else None


def _first_string(*values: Any) -> Optional[str]:
    for value in values:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _extract(entry: Dict[str, Any]):
    payload = entry.get("payload")
    if not isinstance(payload, dict):
        payload = {}

    session_id = _first_string(entry.get("session_id"), entry.get("sessionId"))
    if session_id is None and entry.get("type") == "session_meta":
        session_id = _first_string(payload.get("id"), payload.get("session_id"))
    cwd = _first_string(entry.get("cwd"), payload.get("cwd"))
    return session_id, cwd


def parse_session_metadata(path: Path) -> SessionMetadata:
    """Stream a JSONL transcript, keeping the first session id and cwd seen.

    The transcript is read as bytes. When it is valid UTF-8, ``raw_log`` is the
    decoded text; otherwise it holds the bytes unchanged so the note writer can
    refuse it instead of attaching a mangled copy. Lines that are not JSON
    objects are skipped. An unreadable file yields empty metadata rather than
    an error.
    """
    metadata = SessionMetadata()
    chunks = []

    try:
        with open(path, "rb") as handle:
            for line in handle:
                chunks.append(line)
                if metadata.session_id and metadata.recorded_cwd:
                    continue
                try:
                    entry = json.loads(line.decode("utf-8"))
                except (UnicodeDecodeError, json.JSONDecodeError):
                    continue
                if not isinstance(entry, dict):
                    continue

                session_id, cwd = _extract(entry)
                if metadata.session_id is None:
                    metadata.session_id = session_id
                if metadata.recorded_cwd is None:
                    metadata.recorded_cwd = cwd
    except OSError as e:
        logger.debug(f"Could not read transcript {path}: {e}")
        return SessionMetadata()

    data = b"".join(chunks)
    try:
        metadata.raw_log = data.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.debug(f"Transcript {path} is not valid UTF-8: {e}")
        metadata.raw_log = data
    return metadata


def match_node(state: AttachState) -> AttachState:
    """Collect every candidate transcript that mentions the commit."""
    commit = state["commit"]
    matches = find_sessions_for_commit(commit.hash, state.get("candidates", []))

    if not matches:
        logger.debug(f"No transcript mentions {commit.short_hash}")
        return {**state, "matches": [], "matched": None, "metadata": None}

    logger.debug(f"{len(matches)} transcript(s) mention {commit.short_hash}")
    return {**state, "matches": matches, "matched": matches[0], "metadata": None}
