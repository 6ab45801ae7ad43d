"""
Integration Tests for the REST API

These tests drive complete flows through FastAPI:
- Build a workflow (create, add nodes, connect, attach integration)
- Execute it and read the node trace
- Integration CRUD and connectivity test
- 404 handling for unknown ids
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from bonfire.api.main import Services, app, get_services
from bonfire.core.engine import WorkflowExecutor
from bonfire.core.integrations.tester import IntegrationTester
from bonfire.core.manager import WorkflowManager
from bonfire.core.store import InMemoryRepository


@pytest.fixture
def transport_requests():
    return []


@pytest.fixture
def services(transport_requests):
    """Fresh in-memory services; outbound HTTP goes to a mock transport"""

    def handler(request):
        transport_requests.append(request)
        return httpx.Response(200, json={"ok": True})

    workflows, integrations = InMemoryRepository(), InMemoryRepository()
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return Services(
        manager=WorkflowManager(workflows, integrations),
        executor=WorkflowExecutor(workflows),
        tester=IntegrationTester(integrations, client=client),
    )


@pytest.fixture
def client(services):
    app.dependency_overrides[get_services] = lambda: services
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


# ============================================================================
# HEALTH TESTS
# ============================================================================

@pytest.mark.integration
def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.integration
def test_request_id_echoed(client):
    response = client.get("/", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


# ============================================================================
# WORKFLOW FLOW TESTS
# ============================================================================

@pytest.mark.integration
def test_build_and_execute_workflow(client):
    """
    Flow: create → Start(trigger) → Send(action) → connect → execute
    """
    workflow = client.post("/workflows", json={"name": "Notify", "description": "desc"}).json()

    start = client.post(f"/workflows/{workflow['id']}/nodes", json={
        "type": "trigger",
        "name": "Start",
        "position": {"x": 0, "y": 0, "z": 0},
    })
    send = client.post(f"/workflows/{workflow['id']}/nodes", json={
        "type": "action",
        "name": "Send",
        "config": {"msg": "hi"},
    })
    assert start.status_code == 201
    assert send.status_code == 201
    start, send = start.json(), send.json()

    connected = client.post(
        f"/workflows/{workflow['id']}/connections",
        json={"source_node_id": start["id"], "target_node_id": send["id"]},
    )
    assert connected.json() == {"success": True}

    stored = client.get(f"/workflows/{workflow['id']}").json()
    assert [n["id"] for n in stored["nodes"]] == [start["id"], send["id"]]
    assert stored["nodes"][0]["connections"] == [send["id"]]

    report = client.post(f"/workflows/{workflow['id']}/execute")
    assert report.status_code == 200
    report = report.json()
    assert report["status"] == "success"
    assert report["failed_at_node"] is None
    assert [r["node_id"] for r in report["results"]] == [start["id"], send["id"]]
    assert report["results"][1]["result"] == {"message": "Action executed", "config": {"msg": "hi"}}


@pytest.mark.integration
def test_execute_failure_report(client):
    workflow = client.post("/workflows", json={"name": "Broken"}).json()
    node = client.post(f"/workflows/{workflow['id']}/nodes", json={
        "type": "integration",
        "name": "Post",
        "config": {"integrationId": "ghost"},
    }).json()

    report = client.post(f"/workflows/{workflow['id']}/execute").json()

    assert report["status"] == "failed"
    assert report["failed_at_node"] == node["id"]
    assert report["results"][0]["error"] == "Integration not found: ghost"


@pytest.mark.integration
def test_update_and_delete_workflow(client):
    workflow = client.post("/workflows", json={"name": "Notify"}).json()

    updated = client.put(f"/workflows/{workflow['id']}", json={"name": "Renamed", "active": True})
    assert updated.status_code == 200
    assert updated.json()["name"] == "Renamed"
    assert updated.json()["active"] is True
    assert updated.json()["created_at"] == workflow["created_at"]

    assert client.delete(f"/workflows/{workflow['id']}").json() == {"success": True}
    assert client.get(f"/workflows/{workflow['id']}").status_code == 404


@pytest.mark.integration
@pytest.mark.parametrize("payload", [
    {"active": None},
    {"name": None},
    {"nodes": None},
])
def test_update_with_null_for_required_field(client, payload):
    """An explicit null on a non-nullable field is rejected with 422"""
    workflow = client.post("/workflows", json={"name": "Notify"}).json()

    response = client.put(f"/workflows/{workflow['id']}", json=payload)

    assert response.status_code == 422
    assert response.json()["status_code"] == 422
    stored = client.get(f"/workflows/{workflow['id']}").json()
    assert stored["name"] == "Notify"
    assert stored["active"] is False


@pytest.mark.integration
def test_update_with_null_description(client):
    workflow = client.post("/workflows", json={"name": "Notify", "description": "desc"}).json()

    response = client.put(f"/workflows/{workflow['id']}", json={"description": None})

    assert response.status_code == 200
    assert response.json()["description"] is None


@pytest.mark.integration
def test_list_workflows(client):
    client.post("/workflows", json={"name": "A"})
    client.post("/workflows", json={"name": "B"})

    assert [w["name"] for w in client.get("/workflows").json()] == ["A", "B"]


# ============================================================================
# INTEGRATION FLOW TESTS
# ============================================================================

@pytest.mark.integration
def test_integration_flow(client, transport_requests):
    created = client.post("/integrations", json={
        "name": "Team Slack",
        "config": {"type": "slack", "webhook_url": "https://hooks.slack.com/services/T/B/X"},
    })
    assert created.status_code == 201
    integration = created.json()
    assert integration["type"] == "slack"
    assert integration["status"] == "disconnected"

    tested = client.post(f"/integrations/{integration['id']}/test")
    assert tested.json() == {"success": True, "status": "connected"}
    assert len(transport_requests) == 1

    workflow = client.post("/workflows", json={"name": "Notify"}).json()
    attached = client.post(f"/workflows/{workflow['id']}/integrations/{integration['id']}")
    assert attached.status_code == 200
    assert [i["id"] for i in attached.json()["integrations"]] == [integration["id"]]

    client.post(f"/workflows/{workflow['id']}/nodes", json={
        "type": "integration",
        "name": "Post",
        "config": {"integrationId": integration["id"]},
    })
    report = client.post(f"/workflows/{workflow['id']}/execute").json()
    assert report["results"][0]["result"] == {"message": "Integration called", "integration": "slack"}


@pytest.mark.integration
def test_integration_test_missing_config(client, transport_requests):
    integration = client.post("/integrations", json={
        "name": "Empty",
        "config": {"type": "slack"},
    }).json()

    tested = client.post(f"/integrations/{integration['id']}/test")

    assert tested.json() == {"success": False, "status": "error"}
    assert transport_requests == []


@pytest.mark.integration
def test_create_integration_unknown_type(client):
    response = client.post("/integrations", json={"name": "Fax", "config": {"type": "fax"}})

    assert response.status_code == 422


@pytest.mark.integration
def test_presets(client):
    presets = client.get("/integrations/presets").json()

    assert presets["postgres"]["type"] == "database"


@pytest.mark.integration
def test_delete_integration(client):
    integration = client.post("/integrations", json={
        "name": "GitHub",
        "config": {"type": "github", "token": "ghp_x"},
    }).json()

    assert client.delete(f"/integrations/{integration['id']}").json() == {"success": True}
    assert client.get("/integrations").json() == []


# ============================================================================
# NOT FOUND TESTS
# ============================================================================

@pytest.mark.integration
@pytest.mark.parametrize("method,path", [
    ("get", "/workflows/missing"),
    ("put", "/workflows/missing"),
    ("delete", "/workflows/missing"),
    ("post", "/workflows/missing/execute"),
    ("get", "/integrations/missing"),
    ("post", "/integrations/missing/test"),
    ("delete", "/integrations/missing"),
])
def test_unknown_ids_return_404(client, method, path):
    kwargs = {"json": {}} if method == "put" else {}

    response = getattr(client, method)(path, **kwargs)

    assert response.status_code == 404
    assert response.json()["status_code"] == 404


@pytest.mark.integration
def test_add_node_unknown_workflow(client):
    response = client.post("/workflows/missing/nodes", json={"type": "trigger", "name": "Start"})

    assert response.status_code == 404
    assert response.json()["error"] == "Workflow not found: missing"


@pytest.mark.integration
def test_connect_unknown_source(client):
    workflow = client.post("/workflows", json={"name": "Notify"}).json()

    response = client.post(
        f"/workflows/{workflow['id']}/connections",
        json={"source_node_id": "nope", "target_node_id": "other"},
    )

    assert response.status_code == 404
    assert response.json()["error"] == "Source node not found: nope"
