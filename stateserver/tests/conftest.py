"""Pytest configuration and fixtures."""

import httpx
import pytest
from fastapi.testclient import TestClient

from stateflow.execution.node_runner import NodeRunner
from stateserver.app import create_app
from stateserver.config import Settings
from stateserver.db import Database
from stateserver.dependencies import get_node_runner
from stateserver.flow_db import FlowStore
from stateserver.flow_service import FlowService
from stateserver.graph_db import FlowGraphStore
from stateserver.node_run_service import NodeRunService
from stateserver.session_db import SessionTracker


class FakeTarget:
    """Stand-in for the external service a node calls."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body = "ok"
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.body)


@pytest.fixture
def db(tmp_path):
    """Create a fresh database in a temp directory."""
    database = Database(tmp_path / "stateflow.db")
    database.init_schema()
    return database


@pytest.fixture
def flow_store(db):
    return FlowStore(db)


@pytest.fixture
def graph_store(db):
    return FlowGraphStore(db)


@pytest.fixture
def tracker(db):
    return SessionTracker(db)


@pytest.fixture
def target():
    return FakeTarget()


@pytest.fixture
def runner(target):
    return NodeRunner(timeout=5.0, transport=httpx.MockTransport(target))


@pytest.fixture
def flow_service(flow_store, graph_store):
    return FlowService(flow_store, graph_store)


@pytest.fixture
def run_service(flow_store, graph_store, tracker, runner):
    return NodeRunService(flow_store, graph_store, tracker, runner)


@pytest.fixture
def client(tmp_path, runner):
    """Create a test client backed by a temp database and the fake target."""
    app = create_app(Settings(db_path=tmp_path / "api.db"))
    app.dependency_overrides[get_node_runner] = lambda: runner
    with TestClient(app) as test_client:
        yield test_client
