"""Mock server tools."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..mock_data import create_mock_server_with_examples
from .base import NoArguments, ToolArguments, ToolContext, ToolDefinition, created, deleted, present, to_json, updated

DelayPreset = Literal["low", "medium", "high"]


class MockHeader(BaseModel):
    key: str
    value: str


class MockDelay(BaseModel):
    type: Literal["fixed", "random"]
    preset: DelayPreset | None = None
    value: int | None = Field(default=None, ge=0, description="Delay in milliseconds")


class MockConfig(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    headers: list[MockHeader] | None = Field(default=None, description="Default headers for mock responses")
    match_body: bool | None = Field(default=None, description="Whether to match request body")
    match_query_params: bool | None = Field(default=None, description="Whether to match query parameters")
    match_wildcards: bool | None = Field(default=None, description="Whether to match wildcards")
    delay: MockDelay | None = Field(default=None, description="Response delay configuration")


class GetMockServerArgs(ToolArguments):
    mock_id: str = Field(description="The ID of the mock server to retrieve")


class CreateMockServerArgs(ToolArguments):
    name: str = Field(description="Name of the mock server")
    collection_id: str = Field(description="ID of the collection to create mock server for")
    environment_id: str | None = Field(default=None, description="Optional environment ID to use")
    private: bool | None = Field(default=None, description="Whether the mock server should be private")
    version_tag: str | None = Field(default=None, description="Version tag for the collection")
    config: MockConfig | None = Field(default=None, description="Mock server configuration")


class CreateAIMockServerArgs(ToolArguments):
    name: str = Field(description="Name of the AI-powered mock server")
    collection_id: str = Field(description="ID of the collection to create mock server for")
    environment_id: str | None = Field(default=None, description="Optional environment ID to use")
    private: bool | None = Field(default=None, description="Whether the mock server should be private")
    generate_realistic_data: bool | None = Field(
        default=None, description="Generate realistic data using Postman dynamic variables"
    )
    include_error_responses: bool = Field(
        default=True, description="Include error response examples (400, 401, 404, 500)"
    )
    response_delay: DelayPreset | None = Field(default=None, description="Response delay preset")


class UpdateMockServerArgs(ToolArguments):
    mock_id: str = Field(description="The ID of the mock server to update")
    name: str | None = Field(default=None, description="New name for the mock server")
    environment_id: str | None = Field(default=None, description="New environment ID")
    private: bool | None = Field(default=None, description="Whether the mock server should be private")
    config: MockConfig | None = Field(default=None, description="Mock server configuration")


class DeleteMockServerArgs(ToolArguments):
    mock_id: str = Field(description="The ID of the mock server to delete")


class GetMockServerCallLogsArgs(ToolArguments):
    mock_id: str = Field(description="The ID of the mock server")
    limit: int | None = Field(default=None, ge=1, le=1000, description="Maximum number of log entries")


def _mock_payload(args: CreateMockServerArgs | UpdateMockServerArgs) -> dict:
    """Translate tool arguments into the API's mock definition."""
    payload = present(args, "mock_id", "collection_id", "environment_id", "version_tag")
    if getattr(args, "collection_id", None):
        payload["collection"] = args.collection_id
    if args.environment_id:
        payload["environment"] = args.environment_id
    if getattr(args, "version_tag", None):
        payload["versionTag"] = args.version_tag
    return payload


async def list_mock_servers(ctx: ToolContext, args: NoArguments) -> str:
    return to_json(await ctx.client.list_mock_servers())


async def get_mock_server(ctx: ToolContext, args: GetMockServerArgs) -> str:
    return to_json(await ctx.client.get_mock_server(args.mock_id))


async def create_mock_server(ctx: ToolContext, args: CreateMockServerArgs) -> str:
    return created("Mock server", await ctx.client.create_mock_server(_mock_payload(args)))


async def create_ai_mock_server(ctx: ToolContext, args: CreateAIMockServerArgs) -> str:
    realistic = args.generate_realistic_data
    if realistic is None:
        realistic = ctx.synthesis.use_realistic_values

    result = await create_mock_server_with_examples(
        ctx.client,
        args.collection_id,
        args.name,
        environment_id=args.environment_id,
        private=args.private,
        generate_realistic_data=realistic,
        include_error_responses=args.include_error_responses,
        response_delay=args.response_delay,
        generator=ctx.examples,
    )
    return (
        "AI-powered mock server created successfully!\n\n"
        f"{result['summary']}\n\n"
        f"Mock Server Details:\n{to_json(result['mockServer'])}"
    )


async def update_mock_server(ctx: ToolContext, args: UpdateMockServerArgs) -> str:
    mock = await ctx.client.update_mock_server(args.mock_id, _mock_payload(args))
    return updated("Mock server", mock)


async def delete_mock_server(ctx: ToolContext, args: DeleteMockServerArgs) -> str:
    await ctx.client.delete_mock_server(args.mock_id)
    return deleted("Mock server", args.mock_id)


async def get_mock_server_call_logs(ctx: ToolContext, args: GetMockServerCallLogsArgs) -> str:
    return to_json(await ctx.client.get_mock_server_call_logs(args.mock_id, args.limit))


TOOLS = [
    ToolDefinition("list_mock_servers", "List all mock servers", NoArguments, list_mock_servers),
    ToolDefinition("get_mock_server", "Get details of a specific mock server", GetMockServerArgs, get_mock_server),
    ToolDefinition(
        "create_mock_server",
        "Create a mock server for a collection",
        CreateMockServerArgs,
        create_mock_server,
    ),
    ToolDefinition(
        "create_ai_mock_server",
        "Create an AI-powered mock server with automatically generated realistic examples and error responses",
        CreateAIMockServerArgs,
        create_ai_mock_server,
    ),
    ToolDefinition("update_mock_server", "Update an existing mock server", UpdateMockServerArgs, update_mock_server),
    ToolDefinition("delete_mock_server", "Delete a mock server", DeleteMockServerArgs, delete_mock_server),
    ToolDefinition(
        "get_mock_server_call_logs",
        "Get the call logs of a mock server",
        GetMockServerCallLogsArgs,
        get_mock_server_call_logs,
    ),
]
