"""Data models for flows and their node/edge graph.

The graph shapes mirror what the visual designer sends and expects back,
so field names on the wire are camelCase. Node ``data`` is kept opaque:
designer-defined fields must survive a save/load round trip untouched.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

WIRE_CONFIG = {"alias_generator": to_camel, "populate_by_name": True}


class NodePosition(BaseModel):
    """canvas position of a node."""

    x: float = 0
    y: float = 0


class FlowNode(BaseModel):
    """a node as exchanged with the designer."""

    model_config = WIRE_CONFIG

    id: str = ""
    type: str = ""
    position: NodePosition = Field(default_factory=NodePosition)
    data: Any = None  # label, requestPath/Method/Data, UI fields, anything else

    @field_validator("position", mode="before")
    @classmethod
    def _default_position(cls, value: Any) -> Any:
        return {} if value is None else value


class FlowEdge(BaseModel):
    """a directed edge; endpoints are external node ids and need not exist."""

    model_config = WIRE_CONFIG

    id: str = ""
    source: str = ""
    target: str = ""


class FlowGraph(BaseModel):
    """nodes + edges of one flow; absent or null arrays mean empty."""

    model_config = WIRE_CONFIG

    nodes: list[FlowNode] = Field(default_factory=list)
    edges: list[FlowEdge] = Field(default_factory=list)

    @field_validator("nodes", "edges", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class FlowSummary(BaseModel):
    """flow list item."""

    model_config = WIRE_CONFIG

    id: str  # string-encoded integer
    name: str
    description: str = ""
    base_url: str = ""
    created_at: str
    updated_at: str


class FlowDetail(FlowSummary):
    """flow with its identifier and full graph."""

    identifier: str = ""
    flow_data: FlowGraph = Field(default_factory=FlowGraph)


class FlowPage(BaseModel):
    model_config = WIRE_CONFIG

    items: list[FlowSummary] = Field(default_factory=list, alias="list")
    total: int = 0


class FlowCreate(BaseModel):
    """Request body for creating a flow."""

    model_config = WIRE_CONFIG

    name: str
    description: str = ""
    base_url: str = ""
    identifier: str = ""


class FlowUpdate(BaseModel):
    """Request body for a partial flow update; None means leave unchanged."""

    model_config = WIRE_CONFIG

    name: str | None = None
    description: str | None = None
    base_url: str | None = None
    identifier: str | None = None


class SaveGraphResponse(BaseModel):
    model_config = WIRE_CONFIG

    ok: bool = True
    updated_at: str


class OkResponse(BaseModel):
    ok: bool = True
