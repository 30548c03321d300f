"""Collection tools."""

from __future__ import annotations

from pydantic import Field

from .base import ToolArguments, ToolContext, ToolDefinition, created, deleted, to_json, updated


class ListCollectionsArgs(ToolArguments):
    workspace_id: str | None = Field(
        default=None, description="Only list collections in this workspace"
    )


class GetCollectionArgs(ToolArguments):
    collection_id: str = Field(description="The ID of the collection to retrieve")


class CreateCollectionArgs(ToolArguments):
    name: str = Field(description="Name of the collection")
    description: str | None = Field(default=None, description="Description of the collection")
    workspace_id: str | None = Field(
        default=None, description="Workspace to create the collection in"
    )


class UpdateCollectionArgs(ToolArguments):
    collection_id: str = Field(description="The ID of the collection to update")
    name: str | None = Field(default=None, description="New name for the collection")
    description: str | None = Field(default=None, description="New description for the collection")


class DeleteCollectionArgs(ToolArguments):
    collection_id: str = Field(description="The ID of the collection to delete")


async def list_collections(ctx: ToolContext, args: ListCollectionsArgs) -> str:
    return to_json(await ctx.client.list_collections(args.workspace_id))


async def get_collection(ctx: ToolContext, args: GetCollectionArgs) -> str:
    return to_json(await ctx.client.get_collection(args.collection_id))


async def create_collection(ctx: ToolContext, args: CreateCollectionArgs) -> str:
    collection = await ctx.client.create_collection(
        name=args.name,
        description=args.description,
        workspace_id=args.workspace_id,
    )
    return created("Collection", collection)


async def update_collection(ctx: ToolContext, args: UpdateCollectionArgs) -> str:
    collection = await ctx.client.update_collection(
        args.collection_id, name=args.name, description=args.description
    )
    return updated("Collection", collection)


async def delete_collection(ctx: ToolContext, args: DeleteCollectionArgs) -> str:
    await ctx.client.delete_collection(args.collection_id)
    return deleted("Collection", args.collection_id)


TOOLS = [
    ToolDefinition(
        "list_collections",
        "List collections, optionally restricted to a workspace",
        ListCollectionsArgs,
        list_collections,
    ),
    ToolDefinition(
        "get_collection",
        "Get the full definition of a collection, including requests and folders",
        GetCollectionArgs,
        get_collection,
    ),
    ToolDefinition("create_collection", "Create a new, empty collection", CreateCollectionArgs, create_collection),
    ToolDefinition(
        "update_collection",
        "Rename a collection or change its description",
        UpdateCollectionArgs,
        update_collection,
    ),
    ToolDefinition("delete_collection", "Delete a collection", DeleteCollectionArgs, delete_collection),
]
