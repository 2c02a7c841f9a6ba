"""Post-commit hook entry point.

This is the hot path and it must never fail the commit: every error raised
below :func:`run_hook_post_commit` is caught there, logged once and dropped.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from git.exc import GitError
from loguru import logger

from ai_barometer.errors import BarometerError, PendingStoreError
from ai_barometer.git_gateway import GitGateway
from ai_barometer.models.session import Commit
from ai_barometer.pending import PendingStore
from ai_barometer.push import PushGate
from ai_barometer.settings import Settings
from ai_barometer.sweeper import SweepResult, sweep_pending
from ai_barometer.workflow import create_attach_workflow, run_attach


@dataclass
class HookOutcome:
    """Summary of one post-commit run."""

    outcome: str
    commit: Optional[str] = None
    sweep: Optional[SweepResult] = None
    pushed: bool = False


def _defer(store: PendingStore, commit: Commit) -> None:
    try:
        store.write_pending(commit.hash, str(commit.repo_root), commit.timestamp)
    except PendingStoreError as e:
        logger.warning(f"warning: failed to write pending record: {e}")


def post_commit(gateway: GitGateway, store: PendingStore, window_seconds: int) -> HookOutcome:
    """Attach a session to HEAD, sweep pending commits, maybe push.

    Raises on failure; callers outside tests go through
    :func:`run_hook_post_commit`.
    """
    gate = PushGate(gateway)
    if not gate.enabled():
        logger.debug("Disabled for this repository")
        return HookOutcome(outcome="disabled")

    commit = gateway.head_commit()
    if gateway.note_exists(commit.hash):
        logger.debug(f"Commit {commit.short_hash} already has a note")
        return HookOutcome(outcome="already_noted", commit=commit.hash)

    app = create_attach_workflow(gateway, store)
    try:
        state = run_attach(app, commit, window_seconds, defer_on_miss=True)
    except (BarometerError, GitError) as e:
        # Keep HEAD queued and carry on with the sweep
        logger.warning(f"warning: could not attach session to {commit.short_hash}: {e}")
        _defer(store, commit)
        state = {"attached": False, "deferred": True, "outcome": "failed"}

    sweep = sweep_pending(gateway, store, commit.repo_root, window_seconds, exclude={commit.hash}, app=app)

    result = HookOutcome(outcome=state.get("outcome", "unknown"), commit=commit.hash, sweep=sweep)
    if (state.get("attached") or sweep.attached) and gate.should_push():
        result.pushed = gate.attempt_push()
    return result


def run_hook_post_commit(cwd: Union[str, Path, None] = None, settings: Optional[Settings] = None) -> int:
    """Run the hook and always report success."""
    try:
        settings = settings or Settings.from_env()
        gateway = GitGateway(cwd)
        post_commit(gateway, PendingStore(settings.pending_dir), settings.window_seconds)
    except (BarometerError, GitError) as e:
        logger.warning(f"warning: hook failed: {e}")
    except Exception as e:
        logger.warning(f"warning: hook crashed unexpectedly (this is a bug): {e!r}")
    return 0
