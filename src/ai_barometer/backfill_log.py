"""JSON-lines event log written during backfill runs."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger


def _filename_timestamp(now: datetime) -> str:
    return now.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")


class BackfillLog:
    """Append-only ``backfill.<timestamp>.log`` file. A disabled log drops events."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path

    @classmethod
    def disabled(cls) -> "BackfillLog":
        return cls(None)

    @classmethod
    def create(cls, directory: Path, now: Optional[datetime] = None) -> "BackfillLog":
        """Create a fresh log file in ``directory``; disabled if that fails."""
        now = now or datetime.now(timezone.utc)
        path = Path(directory) / f"backfill.{_filename_timestamp(now)}.log"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "x", encoding="utf-8"):
                pass
        except OSError as e:
            logger.warning(f"warning: backfill log disabled: {e}")
            return cls.disabled()
        return cls(path)

    def event(self, event: str, payload: Dict[str, Any]) -> None:
        if self.path is None:
            return
        row = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event,
            "payload": payload,
        }
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(row, default=str) + "\n")
        except OSError as e:
            logger.debug(f"Dropped backfill event {event}: {e}")
