"""API tests for the stateflow server."""

import httpx

GRAPH = {
    "nodes": [
        {
            "id": "start",
            "type": "state",
            "position": {"x": 0, "y": 0},
            "data": {"label": "Start", "nodeKind": "start"},
        },
        {
            "id": "fetch",
            "type": "state",
            "position": {"x": 120, "y": 40},
            "data": {
                "label": "Fetch users",
                "requestPath": "users",
                "requestMethod": "GET",
            },
        },
    ],
    "edges": [{"id": "start->fetch", "source": "start", "target": "fetch"}],
}


def _create_flow(client, name="demo", **extra) -> dict:
    response = client.post("/flow", json={"name": name, **extra})
    assert response.status_code == 200
    return response.json()


def test_health_endpoint(client):
    """Test the root endpoint reports ok."""
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


class TestFlows:
    def test_create_and_get(self, client):
        """Test a created flow is returned and readable with an empty graph."""
        created = _create_flow(client, description="a flow", baseUrl="https://api.example.com")

        assert created["id"].isdigit()
        assert created["name"] == "demo"
        assert created["baseUrl"] == "https://api.example.com"
        assert created["createdAt"].endswith("+00:00")

        detail = client.get(f"/flow/{created['id']}").json()
        assert detail["identifier"] == ""
        assert detail["flowData"] == {"nodes": [], "edges": []}

    def test_create_requires_name(self, client):
        """Test a blank or missing name is a 400."""
        assert client.post("/flow", json={"name": "  "}).status_code == 400
        response = client.post("/flow", json={"description": "no name"})
        assert response.status_code == 400
        assert "error" in response.json()

    def test_list_with_keyword_and_pagination(self, client):
        """Test listing filters by keyword and clamps page values."""
        for name in ["alpha", "beta", "alphabet"]:
            _create_flow(client, name=name)

        everything = client.get("/flow", params={"pageSize": 1000}).json()
        assert everything["total"] == 3
        assert len(everything["list"]) == 3

        first_page = client.get("/flow", params={"page": 0, "pageSize": 2}).json()
        assert len(first_page["list"]) == 2
        # newest first
        assert first_page["list"][0]["name"] == "alphabet"

        filtered = client.get("/flow", params={"keyword": "alpha"}).json()
        assert filtered["total"] == 2

    def test_update_flow(self, client):
        """Test a partial update changes only the fields sent."""
        created = _create_flow(client)
        response = client.put(
            f"/flow/{created['id']}",
            json={"baseUrl": "https://api.example.com/", "identifier": "demo-v1"},
        )

        assert response.status_code == 200
        assert response.json()["baseUrl"] == "https://api.example.com/"
        assert response.json()["name"] == "demo"
        assert client.get(f"/flow/{created['id']}").json()["identifier"] == "demo-v1"

    def test_delete_flow(self, client):
        """Test a deleted flow is gone from reads and deletes."""
        created = _create_flow(client)

        assert client.delete(f"/flow/{created['id']}").status_code == 204
        assert client.get(f"/flow/{created['id']}").status_code == 404
        assert client.delete(f"/flow/{created['id']}").status_code == 404

    def test_invalid_and_missing_ids(self, client):
        """Test malformed ids are 400 and unknown ids are 404."""
        assert client.get("/flow/abc").status_code == 400
        assert client.get("/flow/abc/flow").status_code == 400
        response = client.get("/flow/999")
        assert response.status_code == 404
        assert response.json() == {"error": "flow not found: 999"}

    def test_ids_beyond_64_bits(self, client):
        """Test ids too large to store are 400s, not server errors."""
        huge = "99999999999999999999"

        for response in [
            client.get(f"/flow/{huge}"),
            client.get(f"/flow/{huge}/flow"),
            client.put(f"/flow/{huge}/flow", json=GRAPH),
            client.delete(f"/flow/{huge}"),
        ]:
            assert response.status_code == 400
            assert "out of range" in response.json()["error"]

    def test_huge_page_is_clamped(self, client):
        """Test a page number beyond 64 bits still lists (an empty page)."""
        _create_flow(client)

        response = client.get("/flow", params={"page": 10**30})

        assert response.status_code == 200
        assert response.json()["list"] == []
        assert response.json()["total"] == 1


class TestGraph:
    def test_save_and_load_graph(self, client):
        """Test a saved graph reads back the same and stamps the flow."""
        created = _create_flow(client)
        saved = client.put(f"/flow/{created['id']}/flow", json=GRAPH)

        assert saved.status_code == 200
        assert saved.json()["ok"] is True
        assert saved.json()["updatedAt"]

        graph = client.get(f"/flow/{created['id']}/flow").json()
        assert graph["edges"] == GRAPH["edges"]
        assert [node["id"] for node in graph["nodes"]] == ["start", "fetch"]
        assert graph["nodes"][1]["data"] == GRAPH["nodes"][1]["data"]
        assert graph["nodes"][1]["position"] == {"x": 120, "y": 40}

        detail = client.get(f"/flow/{created['id']}").json()
        assert detail["flowData"] == graph
        assert detail["updatedAt"] == saved.json()["updatedAt"]

    def test_absent_arrays_are_empty(self, client):
        """Test a graph without arrays saves as empty."""
        created = _create_flow(client)
        client.put(f"/flow/{created['id']}/flow", json=GRAPH)

        assert client.put(f"/flow/{created['id']}/flow", json={}).status_code == 200
        assert client.get(f"/flow/{created['id']}/flow").json() == {"nodes": [], "edges": []}

    def test_duplicate_node_ids_rejected(self, client):
        """Test duplicate node ids are rejected without touching the stored graph."""
        created = _create_flow(client)
        client.put(f"/flow/{created['id']}/flow", json=GRAPH)
        payload = {"nodes": [GRAPH["nodes"][0], GRAPH["nodes"][0]], "edges": []}

        assert client.put(f"/flow/{created['id']}/flow", json=payload).status_code == 400
        # previous graph untouched
        assert len(client.get(f"/flow/{created['id']}/flow").json()["nodes"]) == 2

    def test_save_graph_for_missing_flow(self, client):
        """Test saving a graph for an unknown flow is a 404."""
        assert client.put("/flow/999/flow", json=GRAPH).status_code == 404

    def test_single_node_create_and_update(self, client):
        """Test single-node create and update, with the path id winning."""
        created = _create_flow(client)
        node = {"id": "solo", "type": "state", "data": {"label": "Solo"}}

        assert client.post(f"/flow/{created['id']}/nodes", json=node).json() == {"ok": True}
        updated = client.put(
            f"/flow/{created['id']}/nodes/solo",
            json={"id": "ignored", "data": {"label": "Solo", "requestPath": "/solo"}},
        )
        assert updated.status_code == 200

        graph = client.get(f"/flow/{created['id']}/flow").json()
        assert [n["id"] for n in graph["nodes"]] == ["solo"]
        assert graph["nodes"][0]["data"]["requestPath"] == "/solo"

        missing = client.put(f"/flow/{created['id']}/nodes/ghost", json={"data": {}})
        assert missing.status_code == 404


class TestRunNode:
    def _flow_with_graph(self, client, base_url="https://api.example.com/") -> dict:
        created = _create_flow(client, baseUrl=base_url)
        client.put(f"/flow/{created['id']}/flow", json=GRAPH)
        return created

    def test_run_ok(self, client, target):
        """Test a successful run returns status and body without an error key."""
        self._flow_with_graph(client)
        target.status_code = 201
        target.body = "[]"

        response = client.post("/nodes/run", json={"node": {"id": "fetch"}})

        assert response.status_code == 200
        assert response.json() == {"ok": True, "statusCode": 201, "body": "[]"}
        assert str(target.requests[0].url) == "https://api.example.com/users"

    def test_run_not_ok_status(self, client, target):
        """Test a non-2xx answer is a 200 with ok false."""
        self._flow_with_graph(client)
        target.status_code = 404

        response = client.post("/nodes/run", json={"node": {"id": "fetch"}, "sessionId": 3})

        assert response.status_code == 200
        assert response.json()["ok"] is False
        assert response.json()["statusCode"] == 404

    def test_run_transport_failure(self, client, target):
        """Test an unreachable target is a structured failure."""
        self._flow_with_graph(client)
        target.error = httpx.ConnectError("connection refused")

        response = client.post("/nodes/run", json={"node": {"id": "fetch"}})

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is False
        assert "connection refused" in body["error"]

    def test_run_without_base_url(self, client, target):
        """Test a flow without a base URL is a 400 and nothing is sent or recorded."""
        self._flow_with_graph(client, base_url="")

        response = client.post("/nodes/run", json={"node": {"id": "fetch"}})

        assert response.status_code == 400
        assert response.json()["ok"] is False
        assert "base URL" in response.json()["error"]
        assert target.requests == []
        assert client.get("/sessions").json()["total"] == 0

    def test_run_unknown_node(self, client):
        """Test running an unknown node is a 404 in the run shape."""
        response = client.post("/nodes/run", json={"node": {"id": "ghost"}})

        assert response.status_code == 404
        assert response.json()["ok"] is False

    def test_run_blank_node_id(self, client):
        """Test a blank node id is a 400."""
        response = client.post("/nodes/run", json={"node": {"id": " "}})

        assert response.status_code == 400
        assert response.json()["error"] == "node id is required"

    def test_run_with_ids_beyond_64_bits(self, client, target):
        """Test oversized sessionId or flowId is rejected before anything is sent."""
        self._flow_with_graph(client)

        for extra in [{"sessionId": 2**70}, {"flowId": 2**70}, {"sessionId": -(2**70)}]:
            response = client.post("/nodes/run", json={"node": {"id": "fetch"}, **extra})
            assert response.status_code == 400
            assert "error" in response.json()

        assert target.requests == []
        assert client.get("/sessions").json()["total"] == 0

    def test_run_with_invalid_method(self, client, target):
        """Test a stored method that is not an HTTP token is a structured 400."""
        created = _create_flow(client, baseUrl="https://api.example.com")
        node = {"id": "odd", "data": {"requestPath": "/x", "requestMethod": "gét"}}
        client.post(f"/flow/{created['id']}/nodes", json=node)

        response = client.post("/nodes/run", json={"node": {"id": "odd"}})

        assert response.status_code == 400
        body = response.json()
        assert body["ok"] is False
        assert body["statusCode"] == 0
        assert body["error"].startswith("failed to build request: invalid method")
        assert target.requests == []
        assert client.get("/sessions").json()["total"] == 0


class TestSessions:
    def _run(self, client, session_id: int, node_id: str = "fetch"):
        return client.post("/nodes/run", json={"node": {"id": node_id}, "sessionId": session_id})

    def test_sessions_and_history(self, client):
        """Test runs show up as sessions with one history row per node."""
        created = _create_flow(client, baseUrl="https://api.example.com")
        client.put(f"/flow/{created['id']}/flow", json=GRAPH)
        self._run(client, 0)
        self._run(client, 0)
        self._run(client, 0, node_id="start")
        self._run(client, 8)

        sessions = client.get("/sessions", params={"stateMachineId": created["id"]}).json()
        assert sessions["total"] == 2
        item = sessions["list"][0]
        assert item["stateMachineId"] == created["id"]
        assert item["status"] == "running"
        assert item["sessionId"] == item["id"]

        design = next(s for s in sessions["list"] if s["logicalSessionId"] == 0)
        history = client.get("/sessions/history", params={"sessionId": design["id"]}).json()
        assert history["total"] == 2
        assert {row["toState"] for row in history["list"]} == {"fetch", "start"}
        assert all(row["event"] == "run_node" for row in history["list"])
        assert all(row["fromState"] == "" for row in history["list"])

        detail = client.get(f"/sessions/{design['id']}").json()
        assert detail["id"] == design["id"]
        assert "updatedAt" in detail

    def test_session_errors(self, client):
        """Test malformed session ids are 400 and unknown ones 404."""
        assert client.get("/sessions/abc").status_code == 400
        assert client.get("/sessions/999").status_code == 404
        assert client.get("/sessions", params={"stateMachineId": "x"}).status_code == 400
        assert client.get("/sessions/history", params={"sessionId": "x"}).status_code == 400

    def test_session_ids_beyond_64_bits(self, client):
        """Test oversized session and flow ids are 400s."""
        huge = str(2**70)

        assert client.get(f"/sessions/{huge}").status_code == 400
        assert client.get("/sessions", params={"stateMachineId": huge}).status_code == 400
        assert client.get("/sessions/history", params={"sessionId": huge}).status_code == 400

    def test_history_page_size_clamped(self, client):
        """Test history pagination clamps out-of-range values."""
        response = client.get("/sessions/history", params={"page": 0, "pageSize": 1000})

        assert response.status_code == 200
        assert response.json() == {"list": [], "total": 0}
