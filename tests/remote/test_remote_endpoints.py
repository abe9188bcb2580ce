import json

import pytest
from fastapi.testclient import TestClient

from handlers import build_default_tools
from observability.metrics import metrics_payload_bytes
from remote_server import create_app

from conftest import ECHO_SCHEMA, VALID_WALLET


@pytest.fixture
def client(echo_tool, failing_tool, test_config):
    return TestClient(create_app([echo_tool, failing_tool], test_config))


def _assert_cors(r):
    assert r.headers["access-control-allow-origin"] == "*"
    assert r.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
    assert r.headers["access-control-allow-headers"] == "Content-Type"


def test_echo_scenario(client):
    r = client.post("/", json={"type": "tool_call", "tool_name": "echo", "parameters": {"x": 1}})
    assert r.status_code == 200
    assert r.json() == {"result": {"x": 1}}
    _assert_cors(r)


def test_capabilities_scenario(client):
    r = client.post("/", json={"type": "capabilities"})
    assert r.status_code == 200
    data = r.json()
    assert data["protocol_version"] == "0.1"
    tools = data["capabilities"]["tools"]
    assert tools[0] == {"name": "echo", "description": "Returns its input", "parameters": ECHO_SCHEMA}
    assert [t["name"] for t in tools] == ["echo", "boom"]


def test_unknown_tool_404(client):
    r = client.post("/", json={"type": "tool_call", "tool_name": "ghost", "parameters": {}})
    assert r.status_code == 404
    assert r.json() == {"error": "Tool not found: ghost"}
    _assert_cors(r)


def test_tool_failure_500(client):
    r = client.post("/", json={"type": "tool_call", "tool_name": "boom", "parameters": {}})
    assert r.status_code == 500
    assert r.json() == {"error": "Error executing tool boom: kaboom"}


def test_preflight_204_empty_body(client):
    r = client.request("OPTIONS", "/", content=b"{broken", headers={"Origin": "http://example.com"})
    assert r.status_code == 204
    assert r.content == b""
    _assert_cors(r)


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH"])
def test_non_post_405(client, method):
    r = client.request(method, "/")
    assert r.status_code == 405
    assert r.json() == {"error": "Method not allowed"}
    _assert_cors(r)


def test_malformed_body_400(client):
    r = client.post("/", content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid request"}
    _assert_cors(r)


def test_unknown_type_400(client):
    r = client.post("/", content=json.dumps({"type": "ping"}))
    assert r.status_code == 400
    assert r.json() == {"error": "Unknown request type: ping"}


def test_any_path_reaches_dispatcher(client):
    r = client.post("/mcp/v1", json={"type": "capabilities"})
    assert r.status_code == 200
    assert "capabilities" in r.json()


def test_dispatch_is_recorded_in_metrics_registry(client):
    client.post("/", json={"type": "tool_call", "tool_name": "echo", "parameters": {"x": 3}})
    body = metrics_payload_bytes().decode()
    assert "mcp_requests_total" in body
    assert "mcp_tool_calls_total" in body
    assert 'tool="echo"' in body


def test_metrics_path_is_not_served_on_protocol_app(client, test_config):
    assert test_config.metrics_enabled is True
    r = client.get("/metrics")
    assert r.status_code == 405
    assert r.json() == {"error": "Method not allowed"}
    _assert_cors(r)


@pytest.mark.parametrize("raw", [
    b'{"type":"tool_call","tool_name":"echo","parameters":{"x":NaN}}',
    b'{"type":"capabilities","pad":-Infinity}',
])
def test_non_finite_json_constants_400(client, raw):
    r = client.post("/", content=raw, headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid request"}
    _assert_cors(r)


def test_default_wallet_tools_end_to_end(test_config):
    c = TestClient(create_app(build_default_tools(test_config), test_config))
    caps = c.post("/", json={"type": "capabilities"}).json()
    assert [t["name"] for t in caps["capabilities"]["tools"]] == ["cluster_wallet", "fetch_wallet_data"]

    r = c.post("/", json={"type": "tool_call", "tool_name": "cluster_wallet", "parameters": {"wallet_address": VALID_WALLET}})
    assert r.status_code == 200
    assert r.json()["result"]["cluster"] == "Hodler"

    bad = c.post("/", json={"type": "tool_call", "tool_name": "fetch_wallet_data", "parameters": {"wallet_address": "0xdeadbeef"}})
    assert bad.status_code == 500
    assert bad.json() == {
        "error": "Error executing tool fetch_wallet_data: Failed to fetch wallet data: Invalid Solana wallet address"
    }
