"""MCP tool definitions, grouped by Postman resource."""

from . import collection, environment, import_export, mock_server, request_folder, workspace
from .base import ToolArguments, ToolContext, ToolDefinition

ALL_TOOLS: list[ToolDefinition] = [
    *workspace.TOOLS,
    *collection.TOOLS,
    *environment.TOOLS,
    *request_folder.TOOLS,
    *mock_server.TOOLS,
    *import_export.TOOLS,
]

TOOLS_BY_NAME: dict[str, ToolDefinition] = {tool.name: tool for tool in ALL_TOOLS}

__all__ = ["ALL_TOOLS", "TOOLS_BY_NAME", "ToolArguments", "ToolContext", "ToolDefinition"]
