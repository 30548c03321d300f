"""Import, export and validation tools."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field

from .. import import_export
from .base import FormatName, ToolArguments, ToolContext, ToolDefinition, export_format, to_json

ConflictResolution = Literal["skip", "overwrite", "rename"]

_FORMAT_HELP = (
    "Export format: native (Postman v2.1), alternate (Insomnia v4) or "
    "api-description (OpenAPI 3.0); postman, insomnia and openapi are accepted aliases"
)


class ExportCollectionArgs(ToolArguments):
    collection_id: str = Field(description="The ID of the collection to export")
    format: FormatName = Field(default="native", description=_FORMAT_HELP)
    include_synthesized_data: bool = Field(
        default=True, description="Enrich requests with generated parameters, headers and bodies"
    )
    generate_environment_template: bool = Field(
        default=True, description="Generate an environment template for referenced variables"
    )
    output_path: str | None = Field(
        default=None, description="Local file path to save the export (optional)"
    )


class ExportWithSamplesArgs(ToolArguments):
    collection_id: str = Field(description="The ID of the collection to export")
    format: FormatName = Field(default="native", description=_FORMAT_HELP)
    output_path: str | None = Field(
        default=None, description="Local file path to save the export (optional)"
    )


class ExportWorkspaceArgs(ToolArguments):
    workspace_id: str = Field(description="The ID of the workspace to export collections from")
    format: FormatName = Field(default="native", description=_FORMAT_HELP)
    include_synthesized_data: bool = Field(
        default=True, description="Enrich requests with generated parameters, headers and bodies"
    )
    output_directory: str | None = Field(
        default=None, description="Local directory to save exports (optional)"
    )


class ValidateExportArgs(ToolArguments):
    collection_id: str = Field(description="The ID of the collection to validate")
    format: FormatName = Field(default="native", description=_FORMAT_HELP)


class ImportCollectionArgs(ToolArguments):
    collection_data: str | dict[str, Any] = Field(
        description="Postman v2.1 collection, as a JSON string or object"
    )
    target_workspace_id: str | None = Field(default=None, description="Target workspace ID (optional)")
    conflict_resolution: ConflictResolution = Field(
        default="rename", description="How to handle a collection with the same name"
    )
    validate_before_import: bool = Field(default=True, description="Validate before importing")


class ImportFromFileArgs(ToolArguments):
    file_path: str = Field(description="Path to a JSON or YAML collection file")
    target_workspace_id: str | None = Field(default=None, description="Target workspace ID (optional)")
    conflict_resolution: ConflictResolution = Field(
        default="rename", description="How to handle a collection with the same name"
    )
    validate_before_import: bool = Field(default=True, description="Validate before importing")


async def export_collection(ctx: ToolContext, args: ExportCollectionArgs) -> str:
    result = await import_export.export_collection(
        ctx.client,
        args.collection_id,
        export_format(args.format),
        include_synthesized_data=args.include_synthesized_data,
        generate_environment_template=args.generate_environment_template,
        output_path=args.output_path,
        converter=ctx.converter,
    )
    return to_json(result.to_dict())


async def export_collection_with_samples(ctx: ToolContext, args: ExportWithSamplesArgs) -> str:
    result = await import_export.export_collection(
        ctx.client,
        args.collection_id,
        export_format(args.format),
        include_synthesized_data=True,
        generate_environment_template=True,
        output_path=args.output_path,
        converter=ctx.converter,
    )
    return to_json(result.to_dict())


async def export_workspace_collections(ctx: ToolContext, args: ExportWorkspaceArgs) -> str:
    results = await import_export.export_workspace_collections(
        ctx.client,
        args.workspace_id,
        export_format(args.format),
        include_synthesized_data=args.include_synthesized_data,
        output_directory=args.output_directory,
        converter=ctx.converter,
    )
    return to_json([result.to_dict() for result in results])


async def validate_collection_export(ctx: ToolContext, args: ValidateExportArgs) -> str:
    result = await import_export.validate_collection_export(
        ctx.client, args.collection_id, export_format(args.format), converter=ctx.converter
    )
    return to_json(result.to_dict())


async def import_collection(ctx: ToolContext, args: ImportCollectionArgs) -> str:
    result = await import_export.import_collection(
        ctx.client,
        args.collection_data,
        target_workspace_id=args.target_workspace_id,
        conflict_resolution=args.conflict_resolution,
        validate_before_import=args.validate_before_import,
    )
    return to_json(result.to_dict())


async def import_collection_from_file(ctx: ToolContext, args: ImportFromFileArgs) -> str:
    result = await import_export.import_collection_from_file(
        ctx.client,
        args.file_path,
        target_workspace_id=args.target_workspace_id,
        conflict_resolution=args.conflict_resolution,
        validate_before_import=args.validate_before_import,
    )
    return to_json(result.to_dict())


TOOLS = [
    ToolDefinition(
        "export_collection",
        "Export a collection as Postman v2.1, Insomnia v4 or OpenAPI 3.0, "
        "optionally enriched with generated sample data",
        ExportCollectionArgs,
        export_collection,
    ),
    ToolDefinition(
        "export_collection_with_samples",
        "Export a collection with generated sample data and an environment template",
        ExportWithSamplesArgs,
        export_collection_with_samples,
    ),
    ToolDefinition(
        "export_workspace_collections",
        "Export every collection in a workspace",
        ExportWorkspaceArgs,
        export_workspace_collections,
    ),
    ToolDefinition(
        "validate_collection_export",
        "Check whether a collection can be exported cleanly to a format",
        ValidateExportArgs,
        validate_collection_export,
    ),
    ToolDefinition(
        "import_collection",
        "Import a Postman v2.1 collection, resolving name conflicts",
        ImportCollectionArgs,
        import_collection,
    ),
    ToolDefinition(
        "import_collection_from_file",
        "Import a collection from a local JSON or YAML file",
        ImportFromFileArgs,
        import_collection_from_file,
    ),
]
