"""Note formatting and attachment."""

from pathlib import Path
from typing import Callable, Optional, Union

from loguru import logger

from ai_barometer.errors import NoteFormatError
from ai_barometer.git_gateway import GitGateway
from ai_barometer.models.session import AgentKind, Confidence
from ai_barometer.models.state import AttachState

NOTE_SEPARATOR = "---"
UNKNOWN_SESSION = "unknown"


def format_note(
    agent: Union[AgentKind, str],
    session_id: Optional[str],
    repo_root: Union[str, Path],
    commit_hash: str,
    raw_log: Union[str, bytes],
    confidence: Confidence = Confidence.EXACT_HASH_MATCH,
) -> str:
    """Render the note body: provenance header, separator, transcript verbatim."""
    if isinstance(raw_log, bytes):
        raise NoteFormatError("transcript is not valid UTF-8")
    if not isinstance(raw_log, str):
        raise NoteFormatError(f"transcript must be text, got {type(raw_log).__name__}")
    if "\x00" in raw_log:
        raise NoteFormatError("transcript contains NUL bytes")

    agent_name = agent.value if isinstance(agent, AgentKind) else str(agent)
    header = [
        f"agent: {agent_name}",
        f"session_id: {session_id or UNKNOWN_SESSION}",
        f"repo: {repo_root}",
        f"commit: {commit_hash}",
        f"confidence: {confidence.value}",
        NOTE_SEPARATOR,
    ]
    return "\n".join(header) + "\n" + raw_log


def make_attach_node(gateway: GitGateway) -> Callable[[AttachState], AttachState]:
    """Build the node that writes the note for a verified match."""

    def attach_node(state: AttachState) -> AttachState:
        commit = state["commit"]
        match = state["match"]
        metadata = state["metadata"]

        body = format_note(
            match.candidate.agent,
            metadata.session_id,
            commit.repo_root,
            commit.hash,
            metadata.raw_log,
            match.confidence,
        )
        gateway.add_note(commit.hash, body)
        logger.info(f"attached session {metadata.session_id or UNKNOWN_SESSION} to commit {commit.short_hash}")

        return {**state, "attached": True, "deferred": False, "outcome": "attached"}

    return attach_node
