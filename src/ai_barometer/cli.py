"""Command-line entry point for ai-barometer."""

import argparse
import sys
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv
from git.exc import GitError
from loguru import logger

from ai_barometer.backfill_log import BackfillLog
from ai_barometer.config import ORG_KEY
from ai_barometer.errors import BarometerError
from ai_barometer.git_gateway import GitGateway
from ai_barometer.hook import run_hook_post_commit
from ai_barometer.hydrate import hydrate, parse_since
from ai_barometer.install import install_hook
from ai_barometer.pending import PendingStore
from ai_barometer.push import PushGate
from ai_barometer.settings import LOG_PREFIX, Settings
from ai_barometer.status import collect_status, format_status
from ai_barometer.sweeper import sweep_pending


def configure_logging(level: str = "INFO") -> None:
    """Send log lines to stderr with the fixed ``[ai-barometer]`` prefix."""
    logger.remove()
    try:
        logger.add(sys.stderr, level=level, format=f"{LOG_PREFIX} {{message}}")
    except ValueError:
        logger.add(sys.stderr, level="INFO", format=f"{LOG_PREFIX} {{message}}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-barometer",
        description="Attach AI coding agent session logs to git commits via git notes",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    install = commands.add_parser("install", help="Install the post-commit hook and backfill recent commits")
    install.add_argument("--org", help="Only push notes to remotes of this organization")
    install.add_argument("--since", type=parse_since, default=parse_since("7d"), help="Backfill window (default: 7d)")

    hook = commands.add_parser("hook", help="Git hook entry points")
    hook_commands = hook.add_subparsers(dest="hook_command", required=True)
    hook_commands.add_parser("post-commit", help="Attach an AI session note to HEAD")

    hydrate_cmd = commands.add_parser("hydrate", help="Backfill AI session notes for recent commits")
    hydrate_cmd.add_argument("--since", type=parse_since, default=parse_since("7d"), help="How far back to scan, e.g. 7d")
    hydrate_cmd.add_argument("--push", action="store_true", help="Push notes to the remote afterwards")

    commands.add_parser("retry", help="Retry attaching notes for pending commits")
    commands.add_parser("status", help="Show AI Barometer status for the current repository")
    return parser


def _hydrate(gateway: GitGateway, settings: Settings, since, push: bool) -> None:
    store = PendingStore(settings.pending_dir)
    result = hydrate(
        gateway,
        store,
        since,
        push=push,
        window_seconds=settings.window_seconds,
        log=BackfillLog.create(settings.home),
    )
    logger.info(
        f"hydrate: {result.attached} attached, {result.skipped} already noted, "
        f"{result.unmatched} unmatched, {result.failed} failed"
    )


def run_install(args, settings: Settings) -> None:
    gateway = GitGateway()
    install_hook(gateway)
    if args.org:
        gateway.config_set_global(ORG_KEY, args.org)
        logger.info(f"Notes will only be pushed to remotes of {args.org}")
    _hydrate(gateway, settings, args.since, push=False)


def run_hydrate(args, settings: Settings) -> None:
    _hydrate(GitGateway(), settings, args.since, push=args.push)


def run_retry(args, settings: Settings) -> None:
    gateway = GitGateway()
    result = sweep_pending(gateway, PendingStore(settings.pending_dir), gateway.repo_root(), settings.window_seconds)
    logger.info(
        f"retry: {len(result.attached)} attached, {len(result.resolved)} already noted, "
        f"{len(result.remaining)} still pending, {len(result.failed)} failed"
    )
    if result.attached:
        gate = PushGate(gateway)
        if gate.should_push():
            gate.attempt_push()


def run_status(args, settings: Settings) -> None:
    gateway = GitGateway()
    print(format_status(collect_status(gateway, PendingStore(settings.pending_dir))))


COMMANDS = {
    "install": run_install,
    "hydrate": run_hydrate,
    "retry": run_retry,
    "status": run_status,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Provisional sink until the configured level is known
    configure_logging("DEBUG" if args.verbose else "INFO")
    try:
        load_dotenv(find_dotenv(usecwd=True))
    except OSError as e:
        logger.warning(f"warning: could not read .env: {e}")

    try:
        settings = Settings.from_env()
    except ValueError as e:
        logger.warning(f"warning: ignoring invalid AI_BAROMETER_* settings: {e}")
        settings = Settings()
    configure_logging("DEBUG" if args.verbose else settings.log_level)

    if args.command == "hook":
        # Never block the commit, whatever happens
        return run_hook_post_commit(settings=settings)

    try:
        COMMANDS[args.command](args, settings)
    except (BarometerError, GitError, ValueError) as e:
        logger.error(f"error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
