"""MCP server exposing the Postman tools.

Example:
    >>> from postman_mcp.config import load_config
    >>> server = PostmanMCPServer(load_config())
    >>> await server.initialize()
    >>> await server.run_stdio()
"""

from __future__ import annotations

from typing import Any

from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool
from pydantic import ValidationError

from . import __version__
from .api_client import PostmanAPIClient
from .config import Config
from .exceptions import InvalidToolArgumentsError, PostmanMCPError, ToolExecutionError
from .logging_config import get_logger
from .tools import ALL_TOOLS, TOOLS_BY_NAME, ToolContext

logger = get_logger(__name__)

SERVER_NAME = "postman-mcp-server"


def _describe_validation_error(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "arguments"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)


class PostmanMCPServer:
    """MCP server wiring the tool registry to a Postman API client.

    Attributes:
        server: Underlying MCP server.
        tools: Tool definitions (name, description, inputSchema).
    """

    def __init__(self, config: Config, client: PostmanAPIClient | None = None) -> None:
        self.config = config
        self.client = client
        self.context: ToolContext | None = None
        self.server = Server(SERVER_NAME)
        self.tools: list[dict[str, Any]] = [tool.definition() for tool in ALL_TOOLS]
        self._register_handlers()

    async def initialize(self) -> None:
        """Create the API client and, if configured, validate the API key.

        Raises:
            EnvironmentVariableError: If no API key is configured.
            AuthenticationError: If the API key is rejected.
        """
        if self.client is None:
            self.client = PostmanAPIClient.from_config(self.config)

        if self.config.postman.validate_connection:
            user = await self.client.validate_connection()
            logger.info(
                "Connected to Postman API",
                extra={"user": user.get("username") if isinstance(user, dict) else None},
            )

        self.context = ToolContext(client=self.client, synthesis=self.config.synthesis)
        logger.info("Server initialized", extra={"tool_count": len(self.tools)})

    def _register_handlers(self) -> None:
        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return [Tool(**tool) for tool in self.tools]

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
            result = await self._execute_tool(name, arguments or {})
            if result.isError:
                raise ToolExecutionError(name, result.content[0].text)
            return list(result.content)

    async def _execute_tool(self, name: str, arguments: dict[str, Any]) -> CallToolResult:
        """Validate arguments, run a tool and wrap the outcome.

        Every failure becomes an error result with text ``Error: <message>``.
        """
        try:
            spec = TOOLS_BY_NAME.get(name)
            if spec is None:
                raise ToolExecutionError(name, f"Unknown tool: {name}")
            if self.context is None:
                raise ToolExecutionError(name, "Server not initialized")

            try:
                args = spec.arguments.model_validate(arguments)
            except ValidationError as e:
                raise InvalidToolArgumentsError(name, _describe_validation_error(e)) from e

            logger.debug(f"Calling tool {name}", extra={"tool": name})
            text = await spec.handler(self.context, args)
            return CallToolResult(content=[TextContent(type="text", text=text)], isError=False)

        except PostmanMCPError as e:
            logger.warning(f"Tool {name} failed: {e.message}", extra={"tool": name})
            message = e.message
        except Exception as e:
            logger.error(f"Tool {name} raised an unexpected error: {e}", extra={"tool": name})
            message = str(e)

        return CallToolResult(content=[TextContent(type="text", text=f"Error: {message}")], isError=True)

    def initialization_options(self) -> InitializationOptions:
        return InitializationOptions(
            server_name=SERVER_NAME,
            server_version=__version__,
            capabilities=self.server.get_capabilities(NotificationOptions(), {}),
        )

    async def run_stdio(self) -> None:
        """Serve MCP over stdin/stdout until the client disconnects."""
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(read_stream, write_stream, self.initialization_options())
        finally:
            if self.client is not None:
                await self.client.close()
