"""Tests for the MCP server and its tools."""

import json

import pytest

from postman_mcp.config import Config, PostmanConfig
from postman_mcp.exceptions import EnvironmentVariableError, ResourceNotFoundError
from postman_mcp.server import SERVER_NAME, PostmanMCPServer
from postman_mcp.tools import ALL_TOOLS, TOOLS_BY_NAME


@pytest.fixture
def server(sample_config, mock_postman_client):
    """A server wired to the mocked Postman client (not yet initialized)."""
    return PostmanMCPServer(sample_config, client=mock_postman_client)


async def _run(server, name, arguments=None):
    await server.initialize()
    return await server._execute_tool(name, arguments or {})


def _text(result):
    return result.content[0].text


class TestToolRegistry:
    """Tests for the tool definitions."""

    def test_tool_count(self, server):
        """Test every tool is registered once."""
        names = [tool["name"] for tool in server.tools]

        assert len(names) == 36
        assert len(set(names)) == 36
        assert set(names) == set(TOOLS_BY_NAME)

    def test_expected_tools(self):
        """Test a sample of tool names from each group."""
        for name in (
            "list_workspaces",
            "create_collection",
            "update_environment",
            "move_request",
            "create_ai_mock_server",
            "get_mock_server_call_logs",
            "export_collection_with_samples",
            "import_collection_from_file",
        ):
            assert name in TOOLS_BY_NAME

    def test_schemas_are_camel_case(self):
        """Test argument names are published in camelCase."""
        schema = TOOLS_BY_NAME["create_request"].definition()["inputSchema"]

        assert schema["type"] == "object"
        assert "title" not in schema
        assert {"collectionId", "folderId", "headers", "body"} <= set(schema["properties"])
        assert set(schema["required"]) == {"collectionId", "name", "url", "method"}

    def test_workspace_type_alias(self):
        """Test the workspace type argument is published as ``type``."""
        schema = TOOLS_BY_NAME["create_workspace"].definition()["inputSchema"]
        assert "type" in schema["properties"]

    def test_no_argument_tools(self):
        """Test tools without arguments still publish an object schema."""
        schema = TOOLS_BY_NAME["list_workspaces"].definition()["inputSchema"]
        assert schema["properties"] == {}

    def test_every_tool_has_description(self):
        """Test descriptions are present."""
        assert all(tool.description for tool in ALL_TOOLS)


class TestInitialize:
    """Tests for server initialization."""

    @pytest.mark.asyncio
    async def test_skips_validation(self, server, mock_postman_client):
        """Test /me is not called when validation is disabled."""
        await server.initialize()

        assert server.context is not None
        mock_postman_client.validate_connection.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_validates_connection(self, mock_postman_client):
        """Test the key is checked when validation is enabled."""
        mock_postman_client.validate_connection.return_value = {"username": "dev"}
        server = PostmanMCPServer(
            Config(postman=PostmanConfig(api_key="PMAK-1")), client=mock_postman_client
        )

        await server.initialize()

        mock_postman_client.validate_connection.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_api_key(self, env_without_api_key):
        """Test initialization fails without an API key."""
        server = PostmanMCPServer(Config(postman=PostmanConfig(validate_connection=False)))

        with pytest.raises(EnvironmentVariableError):
            await server.initialize()

    def test_name(self, server):
        """Test the advertised server name."""
        assert server.initialization_options().server_name == SERVER_NAME


class TestExecuteTool:
    """Tests for tool dispatch and error wrapping."""

    @pytest.mark.asyncio
    async def test_unknown_tool(self, server):
        """Test an unknown tool name is an error result."""
        result = await _run(server, "nope")

        assert result.isError
        assert _text(result) == "Error: Unknown tool: nope"

    @pytest.mark.asyncio
    async def test_not_initialized(self, server):
        """Test calls before initialization are rejected."""
        result = await server._execute_tool("list_workspaces", {})

        assert result.isError
        assert _text(result) == "Error: Server not initialized"

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, server, mock_postman_client):
        """Test missing required arguments are reported."""
        result = await _run(server, "get_workspace", {})

        assert result.isError
        assert _text(result).startswith("Error: Invalid arguments for get_workspace:")
        mock_postman_client.get_workspace.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_api_error(self, server, mock_postman_client):
        """Test API errors are surfaced with their message."""
        mock_postman_client.get_collection.side_effect = ResourceNotFoundError("/collections/x")

        result = await _run(server, "get_collection", {"collectionId": "x"})

        assert result.isError
        assert _text(result) == "Error: Resource not found: /collections/x"

    @pytest.mark.asyncio
    async def test_unexpected_error(self, server, mock_postman_client):
        """Test unexpected exceptions are wrapped too."""
        mock_postman_client.list_workspaces.side_effect = RuntimeError("kaput")

        result = await _run(server, "list_workspaces")

        assert result.isError
        assert _text(result) == "Error: kaput"

    @pytest.mark.asyncio
    async def test_snake_case_arguments_accepted(self, server, mock_postman_client):
        """Test arguments may also be passed by field name."""
        mock_postman_client.get_collection.return_value = {"info": {"name": "A"}}

        result = await _run(server, "get_collection", {"collection_id": "c1"})

        assert not result.isError
        mock_postman_client.get_collection.assert_awaited_once_with("c1")


class TestResourceTools:
    """Tests for the CRUD tool handlers."""

    @pytest.mark.asyncio
    async def test_list_workspaces(self, server, mock_postman_client):
        """Test list results are returned as JSON."""
        mock_postman_client.list_workspaces.return_value = [{"id": "w1", "name": "Team"}]

        result = await _run(server, "list_workspaces")

        assert json.loads(_text(result)) == [{"id": "w1", "name": "Team"}]

    @pytest.mark.asyncio
    async def test_create_workspace(self, server, mock_postman_client):
        """Test the creation message and arguments."""
        mock_postman_client.create_workspace.return_value = {"id": "w1"}

        result = await _run(server, "create_workspace", {"name": "Team", "type": "team"})

        mock_postman_client.create_workspace.assert_awaited_once_with("Team", "team", None)
        assert _text(result) == 'Workspace created successfully:\n{\n  "id": "w1"\n}'

    @pytest.mark.asyncio
    async def test_update_workspace_sends_only_set_fields(self, server, mock_postman_client):
        """Test unset fields are not sent."""
        mock_postman_client.update_workspace.return_value = {"id": "w1"}

        result = await _run(server, "update_workspace", {"workspaceId": "w1", "name": "New"})

        mock_postman_client.update_workspace.assert_awaited_once_with("w1", {"name": "New"})
        assert _text(result).startswith("Workspace updated successfully:")

    @pytest.mark.asyncio
    async def test_delete_collection(self, server, mock_postman_client):
        """Test the deletion message."""
        result = await _run(server, "delete_collection", {"collectionId": "c1"})

        mock_postman_client.delete_collection.assert_awaited_once_with("c1")
        assert _text(result) == "Collection c1 deleted successfully"

    @pytest.mark.asyncio
    async def test_create_environment(self, server, mock_postman_client):
        """Test environment values are forwarded without unset keys."""
        mock_postman_client.create_environment.return_value = {"id": "e1"}

        await _run(
            server,
            "create_environment",
            {"name": "Dev", "values": [{"key": "base_url", "value": "http://localhost"}]},
        )

        mock_postman_client.create_environment.assert_awaited_once_with(
            "Dev", values=[{"key": "base_url", "value": "http://localhost"}], workspace_id=None
        )

    @pytest.mark.asyncio
    async def test_create_request(self, server, mock_postman_client):
        """Test the request body excludes routing arguments."""
        mock_postman_client.create_request.return_value = {"id": "r1"}

        await _run(
            server,
            "create_request",
            {
                "collectionId": "c1",
                "folderId": "f1",
                "name": "Ping",
                "url": "https://x.test/ping",
                "method": "GET",
            },
        )

        mock_postman_client.create_request.assert_awaited_once_with(
            "c1", {"name": "Ping", "url": "https://x.test/ping", "method": "GET"}, folder_id="f1"
        )

    @pytest.mark.asyncio
    async def test_invalid_method(self, server):
        """Test unsupported HTTP methods are rejected."""
        result = await _run(
            server,
            "create_request",
            {"collectionId": "c1", "name": "X", "url": "/x", "method": "FETCH"},
        )
        assert result.isError

    @pytest.mark.asyncio
    async def test_move_request(self, server, mock_postman_client):
        """Test move messages for folder and root targets."""
        to_folder = await _run(
            server, "move_request", {"collectionId": "c1", "requestId": "r1", "targetFolderId": "f1"}
        )
        to_root = await server._execute_tool("move_request", {"collectionId": "c1", "requestId": "r2"})

        assert _text(to_folder) == "Request r1 moved successfully to folder f1"
        assert _text(to_root) == "Request r2 moved successfully to collection root"
        mock_postman_client.move_request.assert_any_await("c1", "r2", None)


class TestMockServerTools:
    """Tests for the mock server tool handlers."""

    @pytest.mark.asyncio
    async def test_create_mock_server_payload(self, server, mock_postman_client):
        """Test tool arguments are mapped to the API mock definition."""
        mock_postman_client.create_mock_server.return_value = {"id": "m1"}

        await _run(
            server,
            "create_mock_server",
            {
                "name": "Mock",
                "collectionId": "c1",
                "environmentId": "e1",
                "versionTag": "v1",
                "config": {"matchBody": True, "delay": {"type": "fixed", "preset": "low"}},
            },
        )

        mock_postman_client.create_mock_server.assert_awaited_once_with(
            {
                "name": "Mock",
                "collection": "c1",
                "environment": "e1",
                "versionTag": "v1",
                "config": {"matchBody": True, "delay": {"type": "fixed", "preset": "low"}},
            }
        )

    @pytest.mark.asyncio
    async def test_create_ai_mock_server(self, server, mock_postman_client):
        """Test examples are generated, saved and summarized."""
        mock_postman_client.create_mock_server.return_value = {"id": "m1", "mockUrl": "https://m1.mock"}

        result = await _run(server, "create_ai_mock_server", {"name": "AI", "collectionId": "c1"})

        text = _text(result)
        assert text.startswith("AI-powered mock server created successfully!\n\n")
        assert "Generated 19 examples for 4 requests in 'Sample API'" in text
        assert "Realistic data: enabled" in text
        assert "Mock Server Details:" in text
        mock_postman_client.replace_collection.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_call_logs_limit_bounds(self, server):
        """Test the call log limit is validated."""
        result = await _run(server, "get_mock_server_call_logs", {"mockId": "m1", "limit": 0})
        assert result.isError


class TestImportExportTools:
    """Tests for the import/export tool handlers."""

    @pytest.mark.asyncio
    async def test_export_alias(self, server):
        """Test format aliases are accepted by the tool schema."""
        result = await _run(server, "export_collection", {"collectionId": "c1", "format": "openapi"})

        payload = json.loads(_text(result))
        assert payload["success"] is True
        assert payload["format"] == "api-description"
        assert payload["collectionData"]["openapi"] == "3.0.0"

    @pytest.mark.asyncio
    async def test_export_unknown_format_rejected(self, server):
        """Test unknown formats fail argument validation."""
        result = await _run(server, "export_collection", {"collectionId": "c1", "format": "har"})
        assert result.isError

    @pytest.mark.asyncio
    async def test_export_with_samples(self, server):
        """Test samples and environment are always included."""
        result = await _run(server, "export_collection_with_samples", {"collectionId": "c1"})

        payload = json.loads(_text(result))
        assert payload["environmentData"]["name"] == "Sample API Environment"

    @pytest.mark.asyncio
    async def test_validate(self, server):
        """Test validation results are returned as JSON."""
        result = await _run(
            server, "validate_collection_export", {"collectionId": "c1", "format": "alternate"}
        )

        payload = json.loads(_text(result))
        assert payload["isValid"] is True
        assert payload["compatibility"]["alternateFormat"] is True

    @pytest.mark.asyncio
    async def test_import_object(self, server, mock_postman_client, sample_collection_data):
        """Test collection data may be passed as an object."""
        mock_postman_client.create_collection.return_value = {"id": "c9"}

        result = await _run(server, "import_collection", {"collectionData": sample_collection_data})

        payload = json.loads(_text(result))
        assert payload == {"success": True, "collectionId": "c9", "errors": [], "warnings": [], "skippedItems": []}

    @pytest.mark.asyncio
    async def test_export_workspace(self, server, mock_postman_client):
        """Test workspace exports return one result per collection."""
        mock_postman_client.list_collections.return_value = [{"id": "c1", "name": "A"}]

        result = await _run(server, "export_workspace_collections", {"workspaceId": "w1"})

        assert len(json.loads(_text(result))) == 1
