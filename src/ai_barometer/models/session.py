"""Types describing commits, candidate transcripts and match outcomes."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union


class AgentKind(str, Enum):
    """Coding agent integrations whose transcripts we can attach."""

    CLAUDE_CODE = "claude-code"
    CODEX = "codex"


class Confidence(str, Enum):
    """How strongly a transcript is tied to a commit."""

    EXACT_HASH_MATCH = "exact_hash_match"


@dataclass(frozen=True)
class Commit:
    """A commit as seen by the pipeline. Never modified."""

    hash: str
    timestamp: int
    repo_root: Path

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


@dataclass(frozen=True)
class LogDir:
    """A directory an agent integration writes session transcripts to."""

    path: Path
    agent: AgentKind


@dataclass(frozen=True)
class CandidateFile:
    """A transcript considered for matching against a commit."""

    path: Path
    agent: AgentKind
    mtime: float


@dataclass
class SessionMetadata:
    """Metadata extracted from a transcript. Every field may be missing.

    ``raw_log`` is the transcript text, or its raw bytes when it is not UTF-8.
    """

    session_id: Optional[str] = None
    recorded_cwd: Optional[str] = None
    raw_log: Union[str, bytes] = ""


@dataclass(frozen=True)
class MatchResult:
    """A candidate that passed verification, with its confidence tier."""

    candidate: CandidateFile
    confidence: Confidence
