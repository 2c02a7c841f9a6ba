"""Match verification: decide whether a matched transcript may be attached."""

from pathlib import Path
from typing import Optional, Union

from loguru import logger

from ai_barometer.git_gateway import canonical_path
from ai_barometer.models.session import Confidence, MatchResult, SessionMetadata
from ai_barometer.models.state import AttachState
from ai_barometer.nodes.matcher import SHORT_HASH_LENGTH, parse_session_metadata


def _mentions_hash(raw_log: Union[str, bytes], commit_hash: str) -> bool:
    needle = commit_hash[:SHORT_HASH_LENGTH]
    if isinstance(raw_log, bytes):
        return needle.encode("ascii") in raw_log
    return needle in raw_log


def verify_match(
    metadata: Optional[SessionMetadata], repo_root: Union[str, Path], commit_hash: str
) -> Optional[Confidence]:
    """Cross-check a transcript against the repository and commit.

    A hash mention alone is not enough: abbreviated hashes collide across
    repositories, so the transcript's recorded working directory must also be
    the repository root. Returns None unless both hold.
    """
    if metadata is None or not commit_hash:
        return None

    if not _mentions_hash(metadata.raw_log, commit_hash):
        return None

    if not metadata.recorded_cwd:
        return None
    if canonical_path(metadata.recorded_cwd) != canonical_path(repo_root):
        logger.debug(f"Transcript cwd {metadata.recorded_cwd} is not {repo_root}")
        return None

    return Confidence.EXACT_HASH_MATCH


def verify_node(state: AttachState) -> AttachState:
    """Verify the hash-matching candidates in order; the first verified one wins.

    An unverified newer transcript (say, a rollout from another checkout whose
    text happens to contain the same abbreviated hash) does not hide an older
    transcript that does belong to this repository.
    """
    commit = state["commit"]
    for candidate in state.get("matches") or []:
        metadata = parse_session_metadata(candidate.path)
        confidence = verify_match(metadata, commit.repo_root, commit.hash)
        if confidence is not None:
            return {
                **state,
                "matched": candidate,
                "metadata": metadata,
                "confidence": confidence,
                "match": MatchResult(candidate=candidate, confidence=confidence),
            }
        logger.debug(f"Transcript {candidate.path} mentions {commit.short_hash} but does not verify")

    return {**state, "confidence": None, "match": None}


def route_after_match(state: AttachState) -> str:
    return "verify" if state.get("matches") else "miss"


def route_after_verify(state: AttachState) -> str:
    match = state.get("match")
    return "attach" if match is not None and match.confidence == Confidence.EXACT_HASH_MATCH else "miss"
