"""Run a node and record the outcome in its session history.

The outbound call happens outside any database transaction; only the
session bookkeeping afterwards is transactional. If that bookkeeping
fails the call is not undone or retried, the caller just gets a
TransactionFailedError instead of the call result.
"""

import logging

from stateflow.errors import (
    InvalidInputError,
    NotFoundError,
    PersistenceError,
    TransactionFailedError,
)
from stateflow.execution.node_runner import NodeRunner
from stateflow.models.node_run import RunNodeData, RunNodeRequest, RunNodeResponse
from stateflow.utils.request_fields import RequestFields
from stateserver.flow_db import FlowStore
from stateserver.graph_db import FlowGraphStore
from stateserver.session_db import RunContext, SessionTracker

logger = logging.getLogger(__name__)


def resolve_request_fields(stored: RequestFields, data: RunNodeData | None) -> RequestFields:
    """Fields sent with the run request win; unsent ones fall back to the stored node."""
    if data is None:
        return stored
    return RequestFields(
        request_path=stored.request_path if data.request_path is None else data.request_path,
        request_method=(
            stored.request_method if data.request_method is None else data.request_method
        ),
        request_data=stored.request_data if data.request_data is None else data.request_data,
    )


class NodeRunService:
    def __init__(
        self,
        flows: FlowStore,
        graphs: FlowGraphStore,
        tracker: SessionTracker,
        runner: NodeRunner,
    ) -> None:
        self.flows = flows
        self.graphs = graphs
        self.tracker = tracker
        self.runner = runner

    def run_node(self, request: RunNodeRequest) -> RunNodeResponse:
        """Run one node for a logical session.

        Raises:
            InvalidInputError: empty node id or unbuildable request.
            NotFoundError: node or its flow is missing.
            InvalidConfigError: the flow has no base URL.
            TransactionFailedError: the call ran but could not be recorded.
        """
        node_id = request.node.id.strip()
        if not node_id:
            raise InvalidInputError("node id is required")

        node = self.graphs.find_node(node_id, flow_id=request.flow_id)
        if node is None:
            raise NotFoundError(f"node not found or not saved to a flow: {node_id}")
        flow = self.flows.get_flow(node.flow_id)
        if flow is None:
            raise NotFoundError(f"flow of node {node_id} not found: {node.flow_id}")

        fields = resolve_request_fields(node.request_fields, request.node.data)
        result = self.runner.run(flow.base_url, fields)
        if result.error is not None:
            # no response to record
            return RunNodeResponse(ok=False, status_code=0, body="", error=result.error)

        try:
            self.tracker.record_run(
                flow_id=flow.id,
                logical_session_id=request.session_id,
                node_id=node_id,
                context=RunContext(
                    path=result.path,
                    request_data=result.request_body,
                    response_data=result.body,
                ),
            )
        except PersistenceError as exc:
            logger.exception("failed to record run of node %s in flow %s", node_id, flow.id)
            raise TransactionFailedError(f"failed to record session history: {exc.message}") from exc

        return RunNodeResponse(
            ok=result.ok,
            status_code=result.status_code,
            body=result.body,
            error=result.error,
        )
