"""Request and folder tools."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .base import ToolArguments, ToolContext, ToolDefinition, created, deleted, present, to_json, updated

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


class HeaderArg(BaseModel):
    key: str
    value: str
    disabled: bool | None = None
    description: str | None = None


class FormRowArg(BaseModel):
    key: str
    value: str
    type: Literal["text", "file"] | None = None
    disabled: bool | None = None


class BodyArg(BaseModel):
    mode: Literal["raw", "formdata", "urlencoded", "binary", "graphql"]
    raw: str | None = None
    formdata: list[FormRowArg] | None = None
    urlencoded: list[FormRowArg] | None = None


class CreateRequestArgs(ToolArguments):
    collection_id: str = Field(description="The ID of the collection to add the request to")
    name: str = Field(description="Name of the request")
    url: str = Field(description="URL for the request")
    method: HttpMethod = Field(description="HTTP method")
    description: str | None = Field(default=None, description="Description of the request")
    headers: list[HeaderArg] | None = Field(default=None, description="Request headers")
    body: BodyArg | None = Field(default=None, description="Request body")
    folder_id: str | None = Field(
        default=None, description="ID of the folder to add the request to (optional)"
    )


class GetRequestArgs(ToolArguments):
    collection_id: str = Field(description="The ID of the collection containing the request")
    request_id: str = Field(description="The ID of the request to retrieve")


class UpdateRequestArgs(ToolArguments):
    collection_id: str = Field(description="The ID of the collection containing the request")
    request_id: str = Field(description="The ID of the request to update")
    name: str | None = Field(default=None, description="New name for the request")
    url: str | None = Field(default=None, description="New URL for the request")
    method: HttpMethod | None = Field(default=None, description="New HTTP method")
    description: str | None = Field(default=None, description="New description for the request")
    headers: list[HeaderArg] | None = Field(default=None, description="New request headers")
    body: BodyArg | None = Field(default=None, description="New request body")


class DeleteRequestArgs(ToolArguments):
    collection_id: str = Field(description="The ID of the collection containing the request")
    request_id: str = Field(description="The ID of the request to delete")


class CreateFolderArgs(ToolArguments):
    collection_id: str = Field(description="The ID of the collection to add the folder to")
    name: str = Field(description="Name of the folder")
    description: str | None = Field(default=None, description="Description of the folder")
    parent_folder_id: str | None = Field(
        default=None, description="ID of the parent folder (optional)"
    )


class UpdateFolderArgs(ToolArguments):
    collection_id: str = Field(description="The ID of the collection containing the folder")
    folder_id: str = Field(description="The ID of the folder to update")
    name: str | None = Field(default=None, description="New name for the folder")
    description: str | None = Field(default=None, description="New description for the folder")


class DeleteFolderArgs(ToolArguments):
    collection_id: str = Field(description="The ID of the collection containing the folder")
    folder_id: str = Field(description="The ID of the folder to delete")


class MoveRequestArgs(ToolArguments):
    collection_id: str = Field(description="The ID of the collection containing the request")
    request_id: str = Field(description="The ID of the request to move")
    target_folder_id: str | None = Field(
        default=None, description="ID of the target folder (omit to move to collection root)"
    )


async def create_request(ctx: ToolContext, args: CreateRequestArgs) -> str:
    request = await ctx.client.create_request(
        args.collection_id,
        present(args, "collection_id", "folder_id"),
        folder_id=args.folder_id,
    )
    return created("Request", request)


async def get_request(ctx: ToolContext, args: GetRequestArgs) -> str:
    return to_json(await ctx.client.get_request(args.collection_id, args.request_id))


async def update_request(ctx: ToolContext, args: UpdateRequestArgs) -> str:
    request = await ctx.client.update_request(
        args.collection_id, args.request_id, present(args, "collection_id", "request_id")
    )
    return updated("Request", request)


async def delete_request(ctx: ToolContext, args: DeleteRequestArgs) -> str:
    await ctx.client.delete_request(args.collection_id, args.request_id)
    return deleted("Request", args.request_id)


async def create_folder(ctx: ToolContext, args: CreateFolderArgs) -> str:
    folder = await ctx.client.create_folder(
        args.collection_id,
        args.name,
        description=args.description,
        parent_folder_id=args.parent_folder_id,
    )
    return created("Folder", folder)


async def update_folder(ctx: ToolContext, args: UpdateFolderArgs) -> str:
    folder = await ctx.client.update_folder(
        args.collection_id, args.folder_id, present(args, "collection_id", "folder_id")
    )
    return updated("Folder", folder)


async def delete_folder(ctx: ToolContext, args: DeleteFolderArgs) -> str:
    await ctx.client.delete_folder(args.collection_id, args.folder_id)
    return deleted("Folder", args.folder_id)


async def move_request(ctx: ToolContext, args: MoveRequestArgs) -> str:
    await ctx.client.move_request(args.collection_id, args.request_id, args.target_folder_id)
    destination = f"folder {args.target_folder_id}" if args.target_folder_id else "collection root"
    return f"Request {args.request_id} moved successfully to {destination}"


TOOLS = [
    ToolDefinition("create_request", "Create a new request in a Postman collection", CreateRequestArgs, create_request),
    ToolDefinition("get_request", "Get details of a specific request", GetRequestArgs, get_request),
    ToolDefinition("update_request", "Update an existing request", UpdateRequestArgs, update_request),
    ToolDefinition("delete_request", "Delete a request from a collection", DeleteRequestArgs, delete_request),
    ToolDefinition("create_folder", "Create a new folder in a collection", CreateFolderArgs, create_folder),
    ToolDefinition("update_folder", "Update an existing folder", UpdateFolderArgs, update_folder),
    ToolDefinition("delete_folder", "Delete a folder and everything in it", DeleteFolderArgs, delete_folder),
    ToolDefinition(
        "move_request",
        "Move a request to a different folder or to the collection root",
        MoveRequestArgs,
        move_request,
    ),
]
