"""stateflow - flow graph storage, node runs and session history."""

from stateflow.models.flow import (
    FlowEdge,
    FlowGraph,
    FlowNode,
    NodePosition,
)
from stateflow.models.node_run import (
    RunNodeRequest,
    RunNodeResponse,
)
from stateflow.models.session import (
    SessionHistoryItem,
    SessionInfo,
)
from stateflow.execution.node_runner import NodeRunner, NodeRunResult
from stateflow.utils.request_fields import RequestFields

__all__ = [
    # Flow graph
    "FlowEdge",
    "FlowGraph",
    "FlowNode",
    "NodePosition",
    # Node runs
    "RunNodeRequest",
    "RunNodeResponse",
    # Sessions
    "SessionHistoryItem",
    "SessionInfo",
    # High-level APIs
    "NodeRunner",
    "NodeRunResult",
    "RequestFields",
]
