"""API route for running a single node."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from stateflow.errors import StateFlowError
from stateflow.models.node_run import RunNodeRequest, RunNodeResponse
from stateserver.dependencies import get_node_run_service
from stateserver.node_run_service import NodeRunService

router = APIRouter()


@router.post("/nodes/run", response_model=RunNodeResponse, response_model_exclude_none=True)
def run_node(
    request: RunNodeRequest,
    service: NodeRunService = Depends(get_node_run_service),
):
    """Send the node's request to its flow's base URL and record it.

    An unreachable target is still a 200 with ok=false; the caller wants the
    structured result. Validation, lookup, config and recording failures
    come back in the same shape with the matching status code.
    """
    try:
        return service.run_node(request)
    except StateFlowError as exc:
        failure = RunNodeResponse(ok=False, error=exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=failure.model_dump(by_alias=True),
        )
