"""Push gate: decide whether attached notes leave the machine.

Checks, in order:

1. Per-repo kill switch ``ai.barometer.enabled``. ``false`` disables the whole
   hook, not only the push.
2. At least one remote is configured.
3. Org filter: when ``ai.barometer.org`` is set globally, some remote must
   belong to that organization (case-insensitive).
4. Autopush consent ``ai.barometer.autopush``: the first push for a repository
   prints a disclosure and records ``true``; ``false`` keeps the gate closed.

Push failures are logged and dropped. They never block the commit and are
never retried within the same run.
"""

from typing import Optional

from git.exc import GitError
from loguru import logger

from ai_barometer.config import AUTOPUSH_KEY, ENABLED_KEY, ORG_KEY, ConfigProvider, Scope
from ai_barometer.errors import BarometerError, ConfigError
from ai_barometer.git_gateway import GitGateway


class PushGate:
    """Composite policy around pushing ``refs/notes/ai-sessions``."""

    def __init__(self, gateway: GitGateway, config: Optional[ConfigProvider] = None):
        self.gateway = gateway
        self.config = config or gateway.config

    def _read(self, scope: Scope, key: str) -> Optional[str]:
        try:
            value = self.config.get(scope, key)
        except ConfigError as e:
            logger.debug(f"Treating {key} as unset: {e}")
            return None
        return value.strip() if value else None

    def enabled(self) -> bool:
        """False only when the repository explicitly sets ``enabled = false``."""
        value = self._read(Scope.REPO, ENABLED_KEY)
        return (value or "").lower() != "false"

    def has_upstream(self) -> bool:
        try:
            return self.gateway.has_upstream()
        except (BarometerError, GitError) as e:
            logger.debug(f"Could not list remotes: {e}")
            return False

    def org_filter_allows(self) -> bool:
        configured = self._read(Scope.GLOBAL, ORG_KEY)
        if not configured:
            return True

        try:
            remote_orgs = self.gateway.remote_orgs()
        except (BarometerError, GitError) as e:
            logger.debug(f"Could not read remote organizations: {e}")
            return False

        wanted = configured.lower()
        return any(org.lower() == wanted for org in remote_orgs)

    def consent(self) -> bool:
        value = self._read(Scope.REPO, AUTOPUSH_KEY)
        if value is not None and value.lower() == "true":
            return True
        if value is not None and value.lower() == "false":
            return False

        remote = self.gateway.push_remote() or "origin"
        logger.warning("This is the first time AI Barometer will push notes for this repository.")
        logger.warning("AI session notes will be pushed to the remote via:")
        logger.warning(f"  git push {remote} {self.gateway.notes_ref}")
        logger.warning(f"To disable, run: git config {AUTOPUSH_KEY} false")

        try:
            self.config.set(Scope.REPO, AUTOPUSH_KEY, "true")
        except ConfigError as e:
            # Still allow this push even though the consent could not be saved
            logger.warning(f"warning: failed to record autopush consent: {e}")
        return True

    def should_push(self) -> bool:
        if not self.has_upstream():
            logger.debug("No remote configured; notes stay local")
            return False
        if not self.org_filter_allows():
            logger.debug("No remote matches the configured org; notes stay local")
            return False
        return self.consent()

    def attempt_push(self) -> bool:
        """Push notes once. Returns whether the push succeeded."""
        try:
            self.gateway.push_notes()
        except (BarometerError, GitError) as e:
            logger.warning(f"warning: failed to push notes: {e}")
            return False
        logger.debug("Pushed notes")
        return True
