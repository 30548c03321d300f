"""Tests for the HTTP/SSE ASGI application."""

import json

import pytest

from postman_mcp.config import Config, PostmanConfig
from postman_mcp.http_server import CORSMiddleware, MCPHttpServer
from postman_mcp.server import PostmanMCPServer


async def _request(app, method, path, body=b""):
    """Drive an ASGI app with one HTTP request and collect what it sends."""
    scope = {"type": "http", "method": method, "path": path, "headers": []}
    incoming = [{"type": "http.request", "body": body, "more_body": False}]
    sent = []

    async def receive():
        return incoming.pop(0) if incoming else {"type": "http.disconnect"}

    async def send(message):
        sent.append(message)

    await app(scope, receive, send)
    return sent


def _status(sent):
    return sent[0]["status"]


def _json(sent):
    return json.loads(sent[1]["body"])


@pytest.fixture
def http_app(sample_config, mock_postman_client):
    """An HTTP server around an MCP server with a mocked client."""
    return MCPHttpServer(PostmanMCPServer(sample_config, client=mock_postman_client))


class TestRoutes:
    """Tests for the HTTP routes."""

    @pytest.mark.asyncio
    async def test_health(self, http_app):
        """Test the health check initializes lazily and reports tools."""
        sent = await _request(http_app, "GET", "/health")

        assert _status(sent) == 200
        body = _json(sent)
        assert body["status"] == "healthy"
        assert body["initialized"] is True
        assert body["tool_count"] == 36

    @pytest.mark.asyncio
    async def test_tools(self, http_app):
        """Test tool definitions are listed."""
        body = _json(await _request(http_app, "GET", "/tools"))

        assert body["count"] == 36
        assert {"name", "description", "inputSchema"} == set(body["tools"][0])

    @pytest.mark.asyncio
    async def test_not_found(self, http_app):
        """Test unknown routes return 404."""
        sent = await _request(http_app, "GET", "/nope")

        assert _status(sent) == 404
        assert _json(sent) == {"error": "Not found"}

    @pytest.mark.asyncio
    async def test_call(self, http_app, mock_postman_client):
        """Test a direct tool call."""
        mock_postman_client.list_workspaces.return_value = [{"id": "w1"}]
        payload = json.dumps({"tool": "list_workspaces", "arguments": {}}).encode()

        body = _json(await _request(http_app, "POST", "/call", payload))

        assert body["success"] is True
        assert json.loads(body["content"][0]["text"]) == [{"id": "w1"}]

    @pytest.mark.asyncio
    async def test_call_error_result(self, http_app):
        """Test tool errors are reported with success false."""
        payload = json.dumps({"tool": "nope"}).encode()

        body = _json(await _request(http_app, "POST", "/call", payload))

        assert body == {"success": False, "content": [{"type": "text", "text": "Error: Unknown tool: nope"}]}

    @pytest.mark.asyncio
    async def test_call_invalid_json(self, http_app):
        """Test malformed bodies are rejected."""
        sent = await _request(http_app, "POST", "/call", b"{not json")

        assert _status(sent) == 400
        assert _json(sent) == {"error": "Invalid JSON"}

    @pytest.mark.asyncio
    async def test_call_missing_tool(self, http_app):
        """Test the tool name is required."""
        sent = await _request(http_app, "POST", "/call", b'{"arguments": {}}')

        assert _status(sent) == 400
        assert _json(sent) == {"error": "Missing 'tool' parameter"}

    @pytest.mark.asyncio
    async def test_initialization_failure(self, env_without_api_key):
        """Test a server that cannot start answers 503."""
        app = MCPHttpServer(
            PostmanMCPServer(Config(postman=PostmanConfig(validate_connection=False)))
        )

        sent = await _request(app, "GET", "/health")

        assert _status(sent) == 503
        assert "POSTMAN_API_KEY" in _json(sent)["error"]


class TestLifespan:
    """Tests for ASGI lifespan handling."""

    @pytest.mark.asyncio
    async def test_startup_and_shutdown(self, http_app, mock_postman_client):
        """Test startup initializes and shutdown closes the client."""
        incoming = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        sent = []

        async def receive():
            return incoming.pop(0)

        async def send(message):
            sent.append(message)

        await http_app({"type": "lifespan"}, receive, send)

        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
        mock_postman_client.close.assert_awaited_once()


class TestCORSMiddleware:
    """Tests for CORSMiddleware."""

    @pytest.mark.asyncio
    async def test_preflight(self, http_app):
        """Test OPTIONS is answered without reaching the app."""
        sent = await _request(CORSMiddleware(http_app), "OPTIONS", "/call")

        assert _status(sent) == 204
        headers = dict(sent[0]["headers"])
        assert headers[b"access-control-allow-origin"] == b"*"
        assert headers[b"access-control-max-age"] == b"86400"
        assert http_app._initialized is False

    @pytest.mark.asyncio
    async def test_headers_added(self, http_app):
        """Test CORS headers are added to normal responses."""
        sent = await _request(CORSMiddleware(http_app), "GET", "/health")

        headers = dict(sent[0]["headers"])
        assert headers[b"access-control-allow-origin"] == b"*"
        assert headers[b"content-type"] == b"application/json"
