"""What happens when no transcript could be verified for a commit."""

from typing import Callable

from loguru import logger

from ai_barometer.errors import PendingStoreError
from ai_barometer.models.state import AttachState
from ai_barometer.pending import PendingStore


def make_miss_node(store: PendingStore) -> Callable[[AttachState], AttachState]:
    """Build the node that records an unresolved commit for a later sweep."""

    def miss_node(state: AttachState) -> AttachState:
        commit = state["commit"]
        reason = "unverified" if state.get("matched") is not None else "unmatched"

        if not state.get("defer_on_miss", True):
            return {**state, "attached": False, "deferred": False, "outcome": reason}

        try:
            store.write_pending(commit.hash, str(commit.repo_root), commit.timestamp)
        except PendingStoreError as e:
            logger.warning(f"warning: failed to write pending record: {e}")
            return {**state, "attached": False, "deferred": False, "outcome": reason}

        logger.debug(f"Commit {commit.short_hash} {reason}; deferred to a later sweep")
        return {**state, "attached": False, "deferred": True, "outcome": reason}

    return miss_node
