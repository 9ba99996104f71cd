"""Flow orchestration: CRUD, graph save/load and single-node edits."""

from stateflow.errors import InvalidInputError, NotFoundError
from stateflow.models.flow import (
    FlowCreate,
    FlowDetail,
    FlowGraph,
    FlowNode,
    FlowPage,
    FlowSummary,
    FlowUpdate,
    SaveGraphResponse,
)
from stateflow.utils.pagination import Page
from stateserver.flow_db import FlowRow, FlowStore
from stateserver.graph_db import FlowGraphStore


def flow_summary(row: FlowRow) -> FlowSummary:
    return FlowSummary(
        id=str(row.id),
        name=row.name,
        description=row.description,
        base_url=row.base_url,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _check_unique(kind: str, ids: list[str]) -> None:
    seen = set()
    for item_id in ids:
        if item_id in seen:
            raise InvalidInputError(f"duplicate {kind} id in graph: {item_id!r}")
        seen.add(item_id)


class FlowService:
    def __init__(self, flows: FlowStore, graphs: FlowGraphStore) -> None:
        self.flows = flows
        self.graphs = graphs

    def _require_flow(self, flow_id: int) -> FlowRow:
        flow = self.flows.get_flow(flow_id)
        if flow is None:
            raise NotFoundError(f"flow not found: {flow_id}")
        return flow

    def list_flows(self, page: Page, keyword: str | None = None) -> FlowPage:
        rows, total = self.flows.list_flows(
            keyword=keyword or None,
            limit=page.limit,
            offset=page.offset,
        )
        return FlowPage(items=[flow_summary(row) for row in rows], total=total)

    def create_flow(self, request: FlowCreate) -> FlowSummary:
        name = request.name.strip()
        if not name:
            raise InvalidInputError("name is required")
        row = self.flows.create_flow(
            name=name,
            description=request.description,
            base_url=request.base_url,
            identifier=request.identifier,
        )
        return flow_summary(row)

    def get_flow(self, flow_id: int) -> FlowDetail:
        flow = self._require_flow(flow_id)
        return FlowDetail(
            **flow_summary(flow).model_dump(),
            identifier=flow.identifier,
            flow_data=self.graphs.load_graph(flow_id),
        )

    def update_flow(self, flow_id: int, request: FlowUpdate) -> FlowSummary:
        changes = request.model_dump(exclude_none=True)
        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if not changes["name"]:
                raise InvalidInputError("name cannot be empty")
        row = self.flows.update_flow(flow_id, changes)
        if row is None:
            raise NotFoundError(f"flow not found: {flow_id}")
        return flow_summary(row)

    def delete_flow(self, flow_id: int) -> None:
        if not self.flows.delete_flow(flow_id):
            raise NotFoundError(f"flow not found: {flow_id}")

    def get_graph(self, flow_id: int) -> FlowGraph:
        self._require_flow(flow_id)
        return self.graphs.load_graph(flow_id)

    def save_graph(self, flow_id: int, graph: FlowGraph) -> SaveGraphResponse:
        self._require_flow(flow_id)
        _check_unique("node", [node.id for node in graph.nodes])
        _check_unique("edge", [edge.id for edge in graph.edges])
        updated_at = self.graphs.save_graph(flow_id, graph.nodes, graph.edges)
        return SaveGraphResponse(ok=True, updated_at=updated_at)

    def save_node(self, flow_id: int, node: FlowNode) -> None:
        """create the node, or replace it if the flow already has one with that id."""
        self._require_flow(flow_id)
        if not node.id.strip():
            raise InvalidInputError("node id is required")
        self.graphs.upsert_node(flow_id, node)

    def update_node(self, flow_id: int, node_id: str, node: FlowNode) -> None:
        if not node_id.strip():
            raise InvalidInputError("node id is required")
        self._require_flow(flow_id)
        # the path id wins over whatever id the body carries
        node = node.model_copy(update={"id": node_id})
        if not self.graphs.update_node(flow_id, node_id, node):
            raise NotFoundError(f"node not found: {node_id}")
