import pytest
from fastapi.testclient import TestClient

from src.server.routes import get_registry
from src.server.web_app import app


@pytest.fixture
def client(mocked_registry):
    app.dependency_overrides[get_registry] = lambda: mocked_registry
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "Application is healthy"}


def test_list_and_describe_tools(client):
    response = client.get("/api/tools")

    assert response.status_code == 200
    assert response.json()["total"] == 2
    assert client.get("/api/tools/evaluator_tool").json()["target_service"] == "evaluator"
    assert client.get("/api/tools/unknown").status_code == 404


def test_invoke_tool_returns_normalized_result(client):
    response = client.post("/api/tools/gateway_tool/invoke", json={"parameters": {"prompt": "Capital of France?"}})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["payload"]["completion"] == "Paris is the capital of France."
    assert body["payload"]["usage"]["total_tokens"] == 20


def test_invoke_tool_error_result_is_not_an_http_error(client):
    response = client.post("/api/tools/gateway_tool/invoke", json={"parameters": {}})

    assert response.status_code == 200
    assert response.json()["status"] == "error"
    assert response.json()["error_kind"] == "validation"


def test_invoke_unknown_tool_is_404(client):
    assert client.post("/api/tools/unknown/invoke", json={"parameters": {}}).status_code == 404


def test_run_task(client):
    response = client.post("/api/tasks", json={
        "query": "answer then evaluate",
        "steps": [
            {"tool_name": "gateway_tool", "parameters": {"prompt": "Capital of France?"}},
            {"tool_name": "evaluator_tool", "parameters": {"evaluator": "judge", "output": {"$ref": "0.completion"}}},
        ],
    })

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert len(body["output"]["tool_results"]) == 2


def test_run_task_rejects_blank_query(client):
    response = client.post("/api/tasks", json={"query": "  ", "steps": [{"tool_name": "gateway_tool"}]})

    assert response.status_code == 400
