"""
Tests for the stdio and HTTP transports.
"""

import io
import json

import pytest
from fastapi.testclient import TestClient

from user_mcp.jsonrpc import INVALID_REQUEST, PARSE_ERROR, JSONRPCHandler
from user_mcp.mcp_server import UserManagementServer
from user_mcp.transports import StdioTransport, create_http_app
from user_mcp.transports.stdio import encode


def lines(*messages):
    return "".join(
        (message if isinstance(message, str) else json.dumps(message)) + "\n"
        for message in messages
    )


async def run_stdio(server: UserManagementServer, text: str):
    stdout = io.StringIO()
    transport = StdioTransport(server, stdin=io.StringIO(text), stdout=stdout)
    await transport.run()
    return [json.loads(line) for line in stdout.getvalue().splitlines()]


def test_encode_is_one_compact_line():
    response = JSONRPCHandler.create_response(1, {"text": "a\nb"})

    encoded = encode(response)
    assert "\n" not in encoded
    assert json.loads(encoded) == {"jsonrpc": "2.0", "id": 1, "result": {"text": "a\nb"}}


@pytest.mark.asyncio
async def test_stdio_answers_in_order(mcp_server: UserManagementServer):
    output = await run_stdio(
        mcp_server,
        lines(
            {"jsonrpc": "2.0", "id": 1, "method": "ping"},
            {"jsonrpc": "2.0", "method": "notifications/initialized"},
            "",
            {"jsonrpc": "2.0", "id": 2, "method": "tools/call",
             "params": {"name": "get-user", "arguments": {"id": 4}}},
        ),
    )

    assert [message["id"] for message in output] == [1, 2]
    assert output[1]["result"]["structuredContent"]["name"] == "Jane Smith"


@pytest.mark.asyncio
async def test_stdio_parse_error_keeps_serving(mcp_server: UserManagementServer):
    output = await run_stdio(
        mcp_server, lines("{not json", {"jsonrpc": "2.0", "id": 7, "method": "ping"})
    )

    assert output[0]["id"] is None
    assert output[0]["error"]["code"] == PARSE_ERROR
    assert output[1] == {"jsonrpc": "2.0", "id": 7, "result": {}}


@pytest.mark.asyncio
async def test_stdio_invalid_request(mcp_server: UserManagementServer):
    output = await run_stdio(mcp_server, lines({"jsonrpc": "2.0", "params": {}}))

    assert output[0]["error"]["code"] == INVALID_REQUEST


@pytest.mark.asyncio
async def test_stdio_stops_at_eof(mcp_server: UserManagementServer):
    transport = StdioTransport(mcp_server, stdin=io.StringIO(""), stdout=io.StringIO())

    await transport.run()

    assert transport.running is False
    assert transport.stdout.getvalue() == ""


@pytest.fixture
def client(mcp_server: UserManagementServer) -> TestClient:
    return TestClient(create_http_app(mcp_server))


def test_health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_jsonrpc_request(client: TestClient):
    response = client.post(
        "/mcp/jsonrpc", json={"jsonrpc": "2.0", "id": "a", "method": "resources/list"}
    )

    assert response.status_code == 200
    assert response.json()["result"]["resources"][0]["uri"] == "users://all"


def test_jsonrpc_batch(client: TestClient):
    response = client.post(
        "/mcp/jsonrpc",
        json=[
            {"jsonrpc": "2.0", "id": 1, "method": "ping"},
            {"jsonrpc": "2.0", "id": 2, "method": "prompts/list"},
        ],
    )

    assert [item["id"] for item in response.json()] == [1, 2]


def test_jsonrpc_notification(client: TestClient):
    response = client.post(
        "/mcp/jsonrpc", json={"jsonrpc": "2.0", "method": "notifications/initialized"}
    )

    assert response.status_code == 202
    assert response.content == b""


def test_jsonrpc_parse_error(client: TestClient):
    response = client.post(
        "/mcp/jsonrpc", content=b"{oops", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == PARSE_ERROR


def test_jsonrpc_invalid_request(client: TestClient):
    response = client.post("/mcp/jsonrpc", json={"jsonrpc": "2.0"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == INVALID_REQUEST


def test_jsonrpc_empty_batch(client: TestClient):
    response = client.post("/mcp/jsonrpc", json=[])

    assert response.status_code == 200
    assert response.json()["id"] is None
    assert response.json()["error"]["code"] == INVALID_REQUEST
