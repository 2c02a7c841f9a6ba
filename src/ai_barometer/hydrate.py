"""Backfill notes for recent commits."""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from git.exc import GitError
from loguru import logger

from ai_barometer.backfill_log import BackfillLog
from ai_barometer.errors import BarometerError
from ai_barometer.git_gateway import GitGateway
from ai_barometer.pending import PendingStore
from ai_barometer.push import PushGate
from ai_barometer.settings import DEFAULT_WINDOW_SECONDS
from ai_barometer.workflow import create_attach_workflow, run_attach

_DURATION = re.compile(r"^\s*(\d+)\s*([dhm])\s*$", re.IGNORECASE)
_UNITS = {"d": "days", "h": "hours", "m": "minutes"}


def parse_since(value: str) -> timedelta:
    """Parse durations such as ``7d``, ``12h`` or ``30m``."""
    match = _DURATION.match(value or "")
    if not match:
        raise ValueError(f"invalid duration {value!r} (expected e.g. 7d, 12h, 30m)")
    amount, unit = match.groups()
    return timedelta(**{_UNITS[unit.lower()]: int(amount)})


@dataclass
class HydrateResult:
    attached: int = 0
    skipped: int = 0
    unmatched: int = 0
    failed: int = 0
    pushed: bool = False

    @property
    def scanned(self) -> int:
        return self.attached + self.skipped + self.unmatched + self.failed


def hydrate(
    gateway: GitGateway,
    store: PendingStore,
    since: timedelta,
    push: bool = False,
    window_seconds: int = DEFAULT_WINDOW_SECONDS,
    log: Optional[BackfillLog] = None,
    now: Optional[datetime] = None,
) -> HydrateResult:
    """Try to attach a session to every commit newer than ``since``.

    Unlike the hook, misses are not written to the pending queue.
    """
    log = log or BackfillLog.disabled()
    now = now or datetime.now(timezone.utc)
    commits = gateway.iter_commits_since(now - since)
    logger.info(f"Scanning {len(commits)} commits")
    log.event("hydrate_started", {"repo": str(gateway.repo_root()), "commits": len(commits)})

    result = HydrateResult()
    app = create_attach_workflow(gateway, store)
    for commit in commits:
        if gateway.note_exists(commit.hash):
            store.remove(commit.hash)
            result.skipped += 1
            log.event("commit_skipped", {"commit": commit.hash, "reason": "note_exists"})
            continue

        try:
            state = run_attach(app, commit, window_seconds, defer_on_miss=False)
        except (BarometerError, GitError) as e:
            result.failed += 1
            logger.warning(f"warning: could not attach {commit.short_hash}: {e}")
            log.event("commit_failed", {"commit": commit.hash, "error": str(e)})
            continue

        if state.get("attached"):
            store.remove(commit.hash)
            result.attached += 1
            log.event(
                "session_attached",
                {
                    "commit": commit.hash,
                    "session_id": state["metadata"].session_id,
                    "agent": state["matched"].agent.value,
                    "file": str(state["matched"].path),
                },
            )
        else:
            result.unmatched += 1
            log.event("commit_unmatched", {"commit": commit.hash, "reason": state.get("outcome")})

    if push and result.attached:
        gate = PushGate(gateway)
        if gate.should_push():
            result.pushed = gate.attempt_push()

    log.event(
        "hydrate_finished",
        {"attached": result.attached, "skipped": result.skipped, "unmatched": result.unmatched, "failed": result.failed},
    )
    return result
