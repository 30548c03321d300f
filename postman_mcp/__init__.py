"""Postman MCP Server - Postman API tools with format conversion and sample data.

This package provides a Model Context Protocol (MCP) server for the Postman
API. Besides CRUD tools for workspaces, collections, environments,
requests, folders and mock servers, it converts collections between
Postman v2.1, Insomnia v4 and OpenAPI 3.0 and fills requests with
plausible sample data.

Features:
    - Workspace, collection, environment, request/folder and mock server tools
    - Export to Postman v2.1, Insomnia v4 and OpenAPI 3.0
    - Synthesized query parameters, headers and bodies on export
    - Environment templates for every referenced ``{{variable}}``
    - Mock servers pre-populated with success and error examples
    - stdio transport for desktop clients, SSE transport for web clients

Example:
    Using as a CLI tool (stdio transport)::

        $ python -m postman_mcp

    Using as HTTP server (SSE transport)::

        $ uvicorn postman_mcp.http_server:app --host 0.0.0.0 --port 3000

    Using as a library::

        from postman_mcp.config import load_config
        from postman_mcp.server import PostmanMCPServer

        config = load_config()
        server = PostmanMCPServer(config)
        await server.initialize()

Attributes:
    __version__: Package version following semantic versioning.
"""

__version__ = "1.0.0"

# Import public API
from .api_client import PostmanAPIClient
from .config import load_config
from .converters import FormatConverter
from .server import PostmanMCPServer

__all__ = [
    "__version__",
    "FormatConverter",
    "PostmanMCPServer",
    "PostmanAPIClient",
    "load_config",
]
