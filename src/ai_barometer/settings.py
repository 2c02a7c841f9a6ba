"""Runtime settings for ai-barometer, read from the environment."""

import os
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_WINDOW_SECONDS = 600
NOTES_REF = "refs/notes/ai-sessions"
LOG_PREFIX = "[ai-barometer]"


def default_home() -> Path:
    """Per-user configuration directory (``~/.ai-barometer``)."""
    return Path.home() / ".ai-barometer"


class Settings(BaseModel):
    """Settings shared by every command."""

    home: Path = Field(default_factory=default_home, description="Per-user config directory")
    window_seconds: int = Field(
        default=DEFAULT_WINDOW_SECONDS, ge=0, description="Candidate window around the commit time"
    )
    log_level: str = Field(default="INFO", description="Minimum level written to stderr")

    @property
    def pending_dir(self) -> Path:
        return self.home / "pending"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``AI_BAROMETER_*`` environment variables."""
        values = {}
        home = os.getenv("AI_BAROMETER_HOME")
        if home:
            values["home"] = Path(home).expanduser()
        window = os.getenv("AI_BAROMETER_WINDOW_SECONDS")
        if window:
            values["window_seconds"] = int(window)
        level = os.getenv("AI_BAROMETER_LOG_LEVEL")
        if level:
            values["log_level"] = level.upper()
        return cls(**values)
