"""Workspace tools."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from .base import NoArguments, ToolArguments, ToolContext, ToolDefinition, created, deleted, present, to_json, updated


class GetWorkspaceArgs(ToolArguments):
    workspace_id: str = Field(description="The ID of the workspace to retrieve")


class CreateWorkspaceArgs(ToolArguments):
    name: str = Field(description="Name of the workspace")
    workspace_type: Literal["personal", "team"] = Field(
        default="personal", alias="type", description="Type of workspace"
    )
    description: str | None = Field(default=None, description="Description of the workspace")


class UpdateWorkspaceArgs(ToolArguments):
    workspace_id: str = Field(description="The ID of the workspace to update")
    name: str | None = Field(default=None, description="New name for the workspace")
    description: str | None = Field(default=None, description="New description for the workspace")


class DeleteWorkspaceArgs(ToolArguments):
    workspace_id: str = Field(description="The ID of the workspace to delete")


async def list_workspaces(ctx: ToolContext, args: NoArguments) -> str:
    return to_json(await ctx.client.list_workspaces())


async def get_workspace(ctx: ToolContext, args: GetWorkspaceArgs) -> str:
    return to_json(await ctx.client.get_workspace(args.workspace_id))


async def create_workspace(ctx: ToolContext, args: CreateWorkspaceArgs) -> str:
    workspace = await ctx.client.create_workspace(args.name, args.workspace_type, args.description)
    return created("Workspace", workspace)


async def update_workspace(ctx: ToolContext, args: UpdateWorkspaceArgs) -> str:
    workspace = await ctx.client.update_workspace(args.workspace_id, present(args, "workspace_id"))
    return updated("Workspace", workspace)


async def delete_workspace(ctx: ToolContext, args: DeleteWorkspaceArgs) -> str:
    await ctx.client.delete_workspace(args.workspace_id)
    return deleted("Workspace", args.workspace_id)


TOOLS = [
    ToolDefinition("list_workspaces", "List all accessible Postman workspaces", NoArguments, list_workspaces),
    ToolDefinition("get_workspace", "Get details of a specific workspace", GetWorkspaceArgs, get_workspace),
    ToolDefinition("create_workspace", "Create a new Postman workspace", CreateWorkspaceArgs, create_workspace),
    ToolDefinition("update_workspace", "Update an existing workspace", UpdateWorkspaceArgs, update_workspace),
    ToolDefinition("delete_workspace", "Delete a workspace", DeleteWorkspaceArgs, delete_workspace),
]
