"""HTTP/SSE server for the Postman MCP Server.

Serves the same tools as the stdio entry point to web clients. The MCP SSE
transport writes responses straight to the ASGI ``send`` callable, so the
routing here is plain ASGI rather than a framework router.

Routes:
    GET  /health    liveness and tool count
    GET  /tools     tool definitions
    GET  /sse       MCP SSE stream
    POST /messages  MCP messages for an SSE session
    POST /call      direct tool call: ``{"tool": name, "arguments": {...}}``

Example:
    Running with uvicorn::

        $ uvicorn postman_mcp.http_server:app --host 0.0.0.0 --port 3000
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any

from mcp.server.sse import SseServerTransport

from . import __version__
from .config import load_config
from .logging_config import get_logger, setup_logging
from .server import SERVER_NAME, PostmanMCPServer

logger = get_logger(__name__)

# Type aliases for ASGI
Scope = dict[str, Any]
Receive = Callable[[], Awaitable[dict[str, Any]]]
Send = Callable[[dict[str, Any]], Awaitable[None]]

_CORS_HEADERS = [
    (b"access-control-allow-origin", b"*"),
    (b"access-control-allow-methods", b"GET, POST, OPTIONS"),
    (b"access-control-allow-headers", b"*"),
]

_DESCRIPTION_PREVIEW = 200


class CORSMiddleware:
    """Allow any origin; answer preflight requests directly."""

    def __init__(self, app: Callable) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        if scope["method"] == "OPTIONS":
            await send(
                {
                    "type": "http.response.start",
                    "status": 204,
                    "headers": [*_CORS_HEADERS, (b"access-control-max-age", b"86400")],
                }
            )
            await send({"type": "http.response.body", "body": b""})
            return

        async def send_with_cors(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.extend([*_CORS_HEADERS, (b"access-control-expose-headers", b"*")])
                message = {**message, "headers": headers}
            await send(message)

        await self.app(scope, receive, send_with_cors)


async def _read_body(receive: Receive) -> bytes:
    body = b""
    while True:
        message = await receive()
        body += message.get("body", b"")
        if not message.get("more_body", False):
            return body


async def _send_json(send: Send, data: Any, status: int = 200) -> None:
    body = json.dumps(data).encode()
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": [
                (b"content-type", b"application/json"),
                (b"content-length", str(len(body)).encode()),
            ],
        }
    )
    await send({"type": "http.response.body", "body": body})


class MCPHttpServer:
    """ASGI application hosting a :class:`PostmanMCPServer`.

    Initialization is lazy: it runs on ASGI lifespan startup, or on the
    first request when the host does not send lifespan events.
    """

    def __init__(self, mcp_server: PostmanMCPServer | None = None) -> None:
        self.mcp_server = mcp_server
        self.sse_transport: SseServerTransport | None = None
        self._initialized = False

    async def initialize(self) -> None:
        if self._initialized:
            return

        if self.mcp_server is None:
            config = load_config()
            setup_logging(
                log_level=config.server.log_level,
                json_format=config.server.log_json,
                log_file=config.server.log_file,
            )
            self.mcp_server = PostmanMCPServer(config)

        logger.info("Initializing Postman MCP HTTP Server")
        await self.mcp_server.initialize()

        # Path must match the messages route.
        self.sse_transport = SseServerTransport("/messages")
        self._initialized = True

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        if scope["type"] != "http":
            return

        if not self._initialized:
            try:
                await self.initialize()
            except Exception as e:
                logger.error(f"Initialization failed: {e}")
                await _send_json(send, {"error": f"Server not initialized: {e}"}, status=503)
                return

        routes = {
            ("GET", "/health"): self._handle_health,
            ("GET", "/tools"): self._handle_tools,
            ("GET", "/sse"): self._handle_sse,
            ("POST", "/messages"): self._handle_messages,
            ("POST", "/call"): self._handle_call,
        }
        handler = routes.get((scope["method"], scope["path"]))
        if handler is None:
            await _send_json(send, {"error": "Not found"}, status=404)
            return
        await handler(scope, receive, send)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    await self.initialize()
                    await send({"type": "lifespan.startup.complete"})
                except Exception as e:
                    logger.error(f"Startup failed: {e}")
                    await send({"type": "lifespan.startup.failed", "message": str(e)})
            elif message["type"] == "lifespan.shutdown":
                logger.info("Shutting down Postman MCP HTTP Server")
                if self.mcp_server is not None and self.mcp_server.client is not None:
                    await self.mcp_server.client.close()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def _handle_health(self, scope: Scope, receive: Receive, send: Send) -> None:
        await _send_json(
            send,
            {
                "status": "healthy",
                "server": SERVER_NAME,
                "version": __version__,
                "initialized": self._initialized,
                "tool_count": len(self.mcp_server.tools) if self.mcp_server else 0,
            },
        )

    async def _handle_tools(self, scope: Scope, receive: Receive, send: Send) -> None:
        tools = [
            {
                "name": tool["name"],
                "description": (
                    tool["description"][:_DESCRIPTION_PREVIEW] + "..."
                    if len(tool["description"]) > _DESCRIPTION_PREVIEW
                    else tool["description"]
                ),
                "inputSchema": tool["inputSchema"],
            }
            for tool in self.mcp_server.tools
        ]
        await _send_json(send, {"tools": tools, "count": len(tools)})

    async def _handle_sse(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            async with self.sse_transport.connect_sse(scope, receive, send) as (read, write):
                await self.mcp_server.server.run(
                    read, write, self.mcp_server.initialization_options()
                )
        except Exception as e:
            logger.error(f"SSE error: {e}")

    async def _handle_messages(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await self.sse_transport.handle_post_message(scope, receive, send)
        except Exception as e:
            logger.error(f"Messages error: {e}")
            await _send_json(send, {"error": str(e)}, status=500)

    async def _handle_call(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Run one tool without an MCP session."""
        try:
            data = json.loads((await _read_body(receive)).decode() or "{}")
        except (json.JSONDecodeError, UnicodeDecodeError):
            await _send_json(send, {"error": "Invalid JSON"}, status=400)
            return

        tool_name = data.get("tool") if isinstance(data, dict) else None
        if not tool_name:
            await _send_json(send, {"error": "Missing 'tool' parameter"}, status=400)
            return

        result = await self.mcp_server._execute_tool(tool_name, data.get("arguments") or {})
        await _send_json(
            send,
            {
                "success": not result.isError,
                "content": [
                    {"type": c.type, "text": c.text} for c in result.content if hasattr(c, "text")
                ],
            },
        )


_server = MCPHttpServer()
app = CORSMiddleware(_server)
