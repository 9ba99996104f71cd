"""Run-node request/response models.

Running a node is a single outbound HTTP call built from the node's
request fields (path + method + body). The outcome is always returned as
a structured response, even when the target could not be reached.
"""

from pydantic import BaseModel, Field

from stateflow.models.flow import WIRE_CONFIG, NodePosition
from stateflow.utils.identifiers import INT64_MAX, INT64_MIN


class RunNodeData(BaseModel):
    """request-related part of the node data; other designer fields are ignored."""

    model_config = {**WIRE_CONFIG, "extra": "ignore"}

    # None means "not sent", so the stored node value is used instead
    request_path: str | None = None
    request_method: str | None = None
    request_data: str | None = None


class RunNodePayload(BaseModel):
    model_config = WIRE_CONFIG

    id: str = ""
    type: str = ""
    position: NodePosition | None = None
    data: RunNodeData | None = None


class RunNodeRequest(BaseModel):
    """Request body for POST /nodes/run."""

    model_config = WIRE_CONFIG

    node: RunNodePayload
    # logical session id, 0 = design-time session
    session_id: int = Field(0, ge=INT64_MIN, le=INT64_MAX)
    # scopes the node lookup when given
    flow_id: int | None = Field(None, ge=INT64_MIN, le=INT64_MAX)


class RunNodeResponse(BaseModel):
    """Outcome of a node run as seen by the caller."""

    model_config = WIRE_CONFIG

    ok: bool
    status_code: int = 0
    body: str = ""
    error: str | None = None
