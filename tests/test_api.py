import pytest
from fastapi.testclient import TestClient

from code_interpreter.main import app
from code_interpreter.sandbox.executor import CodeExecutor
from code_interpreter.services.sandbox_service import get_tool_executor
from code_interpreter.tools.base import ToolExecutor
from code_interpreter.tools.register import register_default_tools
from tests.runtimes import ECHO_SOURCE


@pytest.fixture
def client(make_config):
    tools = register_default_tools(ToolExecutor(), CodeExecutor(make_config(ECHO_SOURCE)))
    app.dependency_overrides[get_tool_executor] = lambda: tools
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root(client):
    body = client.get("/").json()
    assert body["name"] == "typescript-javascript-code-interpreter"
    assert body["health"] == "/health"


def test_list_tools(client):
    response = client.get("/api/v1/tools")
    assert response.status_code == 200
    names = {tool["name"] for tool in response.json()["tools"]}
    assert names == {"execute-typescript", "execute-javascript", "validate-code", "server-status"}


def test_call_execute_javascript(client):
    response = client.post(
        "/api/v1/tools/call",
        json={"name": "execute-javascript", "arguments": {"code": 'console.log("hi")'}},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["is_error"] is False
    assert body["content"][0]["type"] == "text"
    assert body["content"][0]["text"].startswith("Output:\n")


def test_call_validate_code(client):
    response = client.post(
        "/api/v1/tools/call",
        json={"name": "validate-code", "arguments": {"code": "console.log(1)"}},
    )
    assert response.json()["content"][0]["text"] == "✅ Code validation: no security issues found\n"


def test_unknown_tool_is_404(client):
    response = client.post("/api/v1/tools/call", json={"name": "execute-python", "arguments": {}})
    assert response.status_code == 404
    assert response.json() == {
        "error": "Tool 'execute-python' not found",
        "code": "TOOL_NOT_FOUND",
        "details": None,
    }


def test_missing_arguments_is_422(client):
    response = client.post("/api/v1/tools/call", json={"name": "validate-code", "arguments": {}})
    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "Missing required arguments: code"
    assert body["code"] == "INVALID_ARGUMENTS"


def test_non_string_code_is_422(client):
    response = client.post("/api/v1/tools/call", json={"name": "validate-code", "arguments": {"code": 1}})
    assert response.status_code == 422
    assert response.json()["error"] == "Argument 'code' must be a string"


def test_malformed_body_is_422(client):
    response = client.post("/api/v1/tools/call", json={"arguments": {}})
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"
