"""Retry sweep over the pending records of one repository."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from git.exc import GitError
from loguru import logger

from ai_barometer.errors import BarometerError
from ai_barometer.git_gateway import GitGateway, canonical_path
from ai_barometer.models.session import Commit
from ai_barometer.pending import PendingStore
from ai_barometer.settings import DEFAULT_WINDOW_SECONDS
from ai_barometer.workflow import create_attach_workflow, run_attach


@dataclass
class SweepResult:
    """What a sweep did with each pending commit."""

    resolved: List[str] = field(default_factory=list)  # noted elsewhere, record dropped
    attached: List[str] = field(default_factory=list)
    remaining: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def sweep_pending(
    gateway: GitGateway,
    store: PendingStore,
    repo_root: Union[str, Path],
    window_seconds: int = DEFAULT_WINDOW_SECONDS,
    exclude: Iterable[str] = (),
    app: Optional[object] = None,
) -> SweepResult:
    """Re-attempt every pending commit of ``repo_root``.

    Records whose commit already has a note are removed. The rest go through
    the attach workflow again at their stored commit time; a verified match is
    attached and its record removed, anything else leaves the record as is.
    """
    result = SweepResult()
    skip = set(exclude)
    root = canonical_path(repo_root)
    records = [r for r in store.list_for_repo(root) if r.commit not in skip]
    if not records:
        return result

    app = app or create_attach_workflow(gateway, store)
    for record in records:
        try:
            if gateway.note_exists(record.commit):
                store.remove(record.commit)
                result.resolved.append(record.commit)
                continue

            commit = Commit(hash=record.commit, timestamp=record.commit_time, repo_root=root)
            state = run_attach(app, commit, window_seconds, defer_on_miss=False)
        except (BarometerError, GitError) as e:
            logger.warning(f"warning: retry of {record.commit[:7]} failed: {e}")
            result.failed.append(record.commit)
            continue

        if state.get("attached"):
            store.remove(record.commit)
            result.attached.append(record.commit)
            logger.info(f"retry: resolved pending commit {record.commit[:7]}")
        else:
            result.remaining.append(record.commit)

    logger.debug(
        f"Sweep: {len(result.attached)} attached, {len(result.resolved)} resolved elsewhere, "
        f"{len(result.remaining)} still pending"
    )
    return result
