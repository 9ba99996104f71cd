"""Session and session-history models.

A session is a logical run context inside one flow. Logical session 0 is
the design-time/preview session; any other number is a caller-chosen run.
Each session keeps one history row per node: the latest run of that node.
"""

from pydantic import BaseModel, Field

from stateflow.models.flow import WIRE_CONFIG

SESSION_RUNNING = "running"
SESSION_ENDED = "ended"
SESSION_SUSPENDED = "suspended"

RUN_NODE_EVENT = "run_node"


class SessionInfo(BaseModel):
    """session list/detail item; ids are string-encoded integers."""

    model_config = WIRE_CONFIG

    id: str
    session_id: str  # same as id, kept for clients that read sessionId
    logical_session_id: int = 0
    state_machine_id: str
    state: str = ""
    status: str = SESSION_RUNNING
    created_at: str
    updated_at: str


class SessionHistoryItem(BaseModel):
    """latest run of one node within one session."""

    model_config = WIRE_CONFIG

    id: str
    session_id: str
    node_id: str
    event: str = RUN_NODE_EVENT
    from_state: str = ""
    to_state: str = ""
    path: str = ""
    request_data: str = ""
    response_data: str = ""
    created_at: str


class SessionPage(BaseModel):
    model_config = WIRE_CONFIG

    items: list[SessionInfo] = Field(default_factory=list, alias="list")
    total: int = 0


class SessionHistoryPage(BaseModel):
    model_config = WIRE_CONFIG

    items: list[SessionHistoryItem] = Field(default_factory=list, alias="list")
    total: int = 0
