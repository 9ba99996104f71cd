"""Core data models for stateflow."""

from stateflow.models.flow import (
    FlowCreate,
    FlowDetail,
    FlowEdge,
    FlowGraph,
    FlowNode,
    FlowPage,
    FlowSummary,
    FlowUpdate,
    NodePosition,
    OkResponse,
    SaveGraphResponse,
)
from stateflow.models.node_run import (
    RunNodeData,
    RunNodePayload,
    RunNodeRequest,
    RunNodeResponse,
)
from stateflow.models.session import (
    RUN_NODE_EVENT,
    SESSION_ENDED,
    SESSION_RUNNING,
    SESSION_SUSPENDED,
    SessionHistoryItem,
    SessionHistoryPage,
    SessionInfo,
    SessionPage,
)

__all__ = [
    # Flow graph
    "FlowCreate",
    "FlowDetail",
    "FlowEdge",
    "FlowGraph",
    "FlowNode",
    "FlowPage",
    "FlowSummary",
    "FlowUpdate",
    "NodePosition",
    "OkResponse",
    "SaveGraphResponse",
    # Node runs
    "RunNodeData",
    "RunNodePayload",
    "RunNodeRequest",
    "RunNodeResponse",
    # Sessions
    "RUN_NODE_EVENT",
    "SESSION_ENDED",
    "SESSION_RUNNING",
    "SESSION_SUSPENDED",
    "SessionHistoryItem",
    "SessionHistoryPage",
    "SessionInfo",
    "SessionPage",
]
