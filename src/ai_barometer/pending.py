"""Durable queue of commits whose session could not be resolved yet.

Each commit gets its own JSON file so that one torn or corrupted record never
hides the others. Reads are best effort: anything unreadable is treated as
absent.
"""

import re
import time
from pathlib import Path
from typing import Callable, List, Optional, Union

from loguru import logger
from pydantic import ValidationError

from ai_barometer.errors import PendingStoreError
from ai_barometer.git_gateway import canonical_path
from ai_barometer.models.pending import PendingRecord

_COMMIT_HASH = re.compile(r"^[0-9a-fA-F]{4,64}$")


class PendingStore:
    """Directory of ``<commit>.json`` pending records."""

    def __init__(self, directory: Union[str, Path], clock: Callable[[], float] = time.time):
        self.directory = Path(directory)
        self.clock = clock

    def _path_for(self, commit: str) -> Path:
        if not _COMMIT_HASH.match(commit or ""):
            raise PendingStoreError(f"not a commit hash: {commit!r}")
        return self.directory / f"{commit}.json"

    def _load(self, path: Path) -> Optional[PendingRecord]:
        try:
            return PendingRecord.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.debug(f"Skipping unreadable pending record {path.name}: {e.__class__.__name__}")
            return None

    def get(self, commit: str) -> Optional[PendingRecord]:
        path = self._path_for(commit)
        if not path.is_file():
            return None
        return self._load(path)

    def write_pending(self, commit: str, repo: str, commit_time: int) -> PendingRecord:
        """Create or overwrite the record for ``commit``.

        A record that already exists keeps its history: the attempt counter
        is incremented rather than reset.
        """
        path = self._path_for(commit)
        previous = self._load(path) if path.is_file() else None
        record = PendingRecord(
            commit=commit,
            repo=repo,
            commit_time=int(commit_time),
            attempts=previous.attempts + 1 if previous else 1,
            last_attempt=int(self.clock()),
        )

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(record.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise PendingStoreError(f"failed to write {path}: {e}") from e
        return record

    def list_all(self) -> List[PendingRecord]:
        try:
            paths = sorted(self.directory.glob("*.json"))
        except OSError as e:
            logger.debug(f"Pending directory unreadable: {e}")
            return []

        records = []
        for path in paths:
            record = self._load(path)
            if record is not None:
                records.append(record)
        return records

    def list_for_repo(self, repo: Union[str, Path]) -> List[PendingRecord]:
        """Records belonging to ``repo``, oldest commit first."""
        if not self.directory.is_dir():
            return []
        target = canonical_path(repo)
        records = [r for r in self.list_all() if canonical_path(r.repo) == target]
        return sorted(records, key=lambda r: (r.commit_time, r.commit))

    def remove(self, commit: str) -> bool:
        """Delete the record for ``commit``. Returns False if nothing was removed."""
        try:
            self._path_for(commit).unlink()
        except FileNotFoundError:
            return False
        except (OSError, PendingStoreError) as e:
            logger.warning(f"warning: failed to remove pending record {commit[:7]}: {e}")
            return False
        return True
