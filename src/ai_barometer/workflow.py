"""Attach workflow using LangGraph for orchestration.

discovery -> match -> verify -> attach
                 \\         \\
                  +---------+--> miss (write pending, or just report)
"""

from langgraph.graph import END, StateGraph
from loguru import logger

from ai_barometer.git_gateway import GitGateway
from ai_barometer.models.session import Commit
from ai_barometer.models.state import AttachState
from ai_barometer.nodes.discovery import discovery_node
from ai_barometer.nodes.matcher import match_node
from ai_barometer.nodes.note_writer import make_attach_node
from ai_barometer.nodes.pending_node import make_miss_node
from ai_barometer.nodes.verifier import route_after_match, route_after_verify, verify_node
from ai_barometer.pending import PendingStore
from ai_barometer.settings import DEFAULT_WINDOW_SECONDS


def create_attach_workflow(gateway: GitGateway, store: PendingStore):
    """Create the per-commit attach graph."""
    workflow = StateGraph(AttachState)

    # Add nodes
    workflow.add_node("discovery", discovery_node)
    workflow.add_node("match", match_node)
    workflow.add_node("verify", verify_node)
    workflow.add_node("attach", make_attach_node(gateway))
    workflow.add_node("miss", make_miss_node(store))

    workflow.set_entry_point("discovery")

    # Define edges
    workflow.add_edge("discovery", "match")
    workflow.add_conditional_edges("match", route_after_match, {"verify": "verify", "miss": "miss"})
    workflow.add_conditional_edges("verify", route_after_verify, {"attach": "attach", "miss": "miss"})
    workflow.add_edge("attach", END)
    workflow.add_edge("miss", END)

    return workflow.compile()


def run_attach(
    app,
    commit: Commit,
    window_seconds: int = DEFAULT_WINDOW_SECONDS,
    defer_on_miss: bool = True,
) -> AttachState:
    """Run the attach graph for one commit and return the final state."""
    initial_state: AttachState = {
        "commit": commit,
        "window_seconds": window_seconds,
        "defer_on_miss": defer_on_miss,
        "attached": False,
        "deferred": False,
    }
    final_state = app.invoke(initial_state)
    logger.debug(f"Commit {commit.short_hash}: {final_state.get('outcome')}")
    return final_state
