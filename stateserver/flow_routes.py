"""API routes for flows and their graphs."""

from fastapi import APIRouter, Depends, Query, Response

from stateflow.models.flow import (
    FlowCreate,
    FlowDetail,
    FlowGraph,
    FlowNode,
    FlowPage,
    FlowSummary,
    FlowUpdate,
    OkResponse,
    SaveGraphResponse,
)
from stateflow.utils.identifiers import parse_int_id
from stateflow.utils.pagination import Page
from stateserver.dependencies import get_flow_service
from stateserver.flow_service import FlowService

router = APIRouter(prefix="/flow")

DEFAULT_PAGE_SIZE = 10


@router.get("")
def list_flows(
    page: int = 1,
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize"),
    keyword: str | None = None,
    service: FlowService = Depends(get_flow_service),
) -> FlowPage:
    """list live flows, most recently updated first."""
    return service.list_flows(Page.clamp(page, page_size, DEFAULT_PAGE_SIZE), keyword)


@router.post("")
def create_flow(
    request: FlowCreate,
    service: FlowService = Depends(get_flow_service),
) -> FlowSummary:
    return service.create_flow(request)


# registered before /{flow_id} so "/123/flow" is never read as an id
@router.get("/{flow_id}/flow")
def get_flow_graph(
    flow_id: str,
    service: FlowService = Depends(get_flow_service),
) -> FlowGraph:
    """get the nodes and edges of a flow."""
    return service.get_graph(parse_int_id(flow_id))


@router.put("/{flow_id}/flow")
def save_flow_graph(
    flow_id: str,
    graph: FlowGraph,
    service: FlowService = Depends(get_flow_service),
) -> SaveGraphResponse:
    """replace the whole graph of a flow.

    Every node and edge row is replaced, so saving the same graph twice
    leaves the stored graph unchanged.
    """
    return service.save_graph(parse_int_id(flow_id), graph)


@router.post("/{flow_id}/nodes")
def create_flow_node(
    flow_id: str,
    node: FlowNode,
    service: FlowService = Depends(get_flow_service),
) -> OkResponse:
    """create a single node (or replace it if the id already exists)."""
    service.save_node(parse_int_id(flow_id), node)
    return OkResponse()


@router.put("/{flow_id}/nodes/{node_id}")
def update_flow_node(
    flow_id: str,
    node_id: str,
    node: FlowNode,
    service: FlowService = Depends(get_flow_service),
) -> OkResponse:
    service.update_node(parse_int_id(flow_id), node_id, node)
    return OkResponse()


@router.get("/{flow_id}")
def get_flow(
    flow_id: str,
    service: FlowService = Depends(get_flow_service),
) -> FlowDetail:
    """get a flow with its graph."""
    return service.get_flow(parse_int_id(flow_id))


@router.put("/{flow_id}")
def update_flow(
    flow_id: str,
    request: FlowUpdate,
    service: FlowService = Depends(get_flow_service),
) -> FlowSummary:
    """update name, description, baseUrl or identifier."""
    return service.update_flow(parse_int_id(flow_id), request)


@router.delete("/{flow_id}", status_code=204)
def delete_flow(
    flow_id: str,
    service: FlowService = Depends(get_flow_service),
) -> Response:
    service.delete_flow(parse_int_id(flow_id))
    return Response(status_code=204)
