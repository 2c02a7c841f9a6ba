"""State passed between the nodes of the attach workflow."""

from typing import List, Optional, TypedDict

from ai_barometer.models.session import CandidateFile, Commit, Confidence, LogDir, MatchResult, SessionMetadata


class AttachState(TypedDict, total=False):
    """
    Shared state passed between nodes.
    Each node adds or modifies specific fields.
    """

    # Inputs
    commit: Commit
    window_seconds: int
    defer_on_miss: bool

    # Discovery Node Output
    log_dirs: List[LogDir]
    candidates: List[CandidateFile]

    # Match Node Output
    matches: List[CandidateFile]
    matched: Optional[CandidateFile]

    # Verify Node Output
    metadata: Optional[SessionMetadata]
    confidence: Optional[Confidence]
    match: Optional[MatchResult]

    # Attach / Defer Node Output
    attached: bool
    deferred: bool
    outcome: str
