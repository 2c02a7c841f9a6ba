"""Status report for the current repository."""

from typing import Any, Dict

from ai_barometer.config import AUTOPUSH_KEY, ORG_KEY, Scope
from ai_barometer.git_gateway import GitGateway
from ai_barometer.pending import PendingStore
from ai_barometer.push import PushGate


def collect_status(gateway: GitGateway, store: PendingStore) -> Dict[str, Any]:
    gate = PushGate(gateway)
    repo_root = gateway.repo_root()
    head = gateway.head_hash()

    return {
        "repo": str(repo_root),
        "enabled": gate.enabled(),
        "notes_ref": gateway.notes_ref,
        "head": head,
        "head_noted": gateway.note_exists(head),
        "pending": len(store.list_for_repo(repo_root)),
        "remote_orgs": sorted(gateway.remote_orgs()),
        "org_filter": gateway.config.get(Scope.GLOBAL, ORG_KEY),
        "autopush": gateway.config.get(Scope.REPO, AUTOPUSH_KEY),
    }


def format_status(status: Dict[str, Any]) -> str:
    lines = [
        f"repository:   {status['repo']}",
        f"enabled:      {'yes' if status['enabled'] else 'no'}",
        f"notes ref:    {status['notes_ref']}",
        f"HEAD:         {status['head'][:7]} ({'noted' if status['head_noted'] else 'no note'})",
        f"pending:      {status['pending']}",
        f"remote orgs:  {', '.join(status['remote_orgs']) or '-'}",
        f"org filter:   {status['org_filter'] or '-'}",
        f"autopush:     {status['autopush'] or 'not yet asked'}",
    ]
    return "\n".join(lines)
