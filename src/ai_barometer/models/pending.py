"""Persisted record of a commit whose session could not be resolved yet."""

from pydantic import BaseModel, Field


class PendingRecord(BaseModel):
    """One unresolved commit, stored as ``<pending dir>/<commit>.json``."""

    commit: str = Field(..., min_length=1, description="Full commit hash")
    repo: str = Field(..., description="Canonical repository root")
    commit_time: int = Field(..., description="Commit timestamp in unix seconds")
    attempts: int = Field(default=1, ge=0, description="Resolution attempts so far")
    last_attempt: int = Field(default=0, description="Unix time of the last attempt")
