"""FastAPI dependencies wiring the shared Database into stores and services."""

from fastapi import Depends, Request

from stateflow.execution.node_runner import NodeRunner
from stateserver.db import Database
from stateserver.flow_db import FlowStore
from stateserver.flow_service import FlowService
from stateserver.graph_db import FlowGraphStore
from stateserver.node_run_service import NodeRunService
from stateserver.session_db import SessionTracker


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_node_runner(request: Request) -> NodeRunner:
    return request.app.state.node_runner


def get_flow_service(db: Database = Depends(get_database)) -> FlowService:
    return FlowService(FlowStore(db), FlowGraphStore(db))


def get_session_tracker(db: Database = Depends(get_database)) -> SessionTracker:
    return SessionTracker(db)


def get_node_run_service(
    db: Database = Depends(get_database),
    runner: NodeRunner = Depends(get_node_runner),
) -> NodeRunService:
    return NodeRunService(FlowStore(db), FlowGraphStore(db), SessionTracker(db), runner)
