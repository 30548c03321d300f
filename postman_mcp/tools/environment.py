"""Environment tools."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .base import ToolArguments, ToolContext, ToolDefinition, created, deleted, to_json, updated


class EnvironmentValue(BaseModel):
    key: str = Field(description="Variable name")
    value: str = Field(description="Variable value")
    type: Literal["default", "secret"] | None = Field(default=None, description="Variable type")
    enabled: bool | None = Field(default=None, description="Whether the variable is enabled")


class ListEnvironmentsArgs(ToolArguments):
    workspace_id: str | None = Field(
        default=None, description="Only list environments in this workspace"
    )


class GetEnvironmentArgs(ToolArguments):
    environment_id: str = Field(description="The ID of the environment to retrieve")


class CreateEnvironmentArgs(ToolArguments):
    name: str = Field(description="Name of the environment")
    values: list[EnvironmentValue] | None = Field(default=None, description="Environment variables")
    workspace_id: str | None = Field(
        default=None, description="Workspace to create the environment in"
    )


class UpdateEnvironmentArgs(ToolArguments):
    environment_id: str = Field(description="The ID of the environment to update")
    name: str | None = Field(default=None, description="New name for the environment")
    values: list[EnvironmentValue] | None = Field(
        default=None, description="Replacement set of environment variables"
    )


class DeleteEnvironmentArgs(ToolArguments):
    environment_id: str = Field(description="The ID of the environment to delete")


def _values(values: list[EnvironmentValue] | None) -> list[dict] | None:
    if values is None:
        return None
    return [value.model_dump(exclude_none=True) for value in values]


async def list_environments(ctx: ToolContext, args: ListEnvironmentsArgs) -> str:
    return to_json(await ctx.client.list_environments(args.workspace_id))


async def get_environment(ctx: ToolContext, args: GetEnvironmentArgs) -> str:
    return to_json(await ctx.client.get_environment(args.environment_id))


async def create_environment(ctx: ToolContext, args: CreateEnvironmentArgs) -> str:
    environment = await ctx.client.create_environment(
        args.name, values=_values(args.values), workspace_id=args.workspace_id
    )
    return created("Environment", environment)


async def update_environment(ctx: ToolContext, args: UpdateEnvironmentArgs) -> str:
    updates: dict = {}
    if args.name is not None:
        updates["name"] = args.name
    if args.values is not None:
        updates["values"] = _values(args.values)
    environment = await ctx.client.update_environment(args.environment_id, updates)
    return updated("Environment", environment)


async def delete_environment(ctx: ToolContext, args: DeleteEnvironmentArgs) -> str:
    await ctx.client.delete_environment(args.environment_id)
    return deleted("Environment", args.environment_id)


TOOLS = [
    ToolDefinition(
        "list_environments",
        "List environments, optionally restricted to a workspace",
        ListEnvironmentsArgs,
        list_environments,
    ),
    ToolDefinition("get_environment", "Get an environment and its variables", GetEnvironmentArgs, get_environment),
    ToolDefinition("create_environment", "Create a new environment", CreateEnvironmentArgs, create_environment),
    ToolDefinition(
        "update_environment",
        "Rename an environment or replace its variables",
        UpdateEnvironmentArgs,
        update_environment,
    ),
    ToolDefinition("delete_environment", "Delete an environment", DeleteEnvironmentArgs, delete_environment),
]
