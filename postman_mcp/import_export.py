"""Collection export, validation and import.

These are the service functions behind the import/export tools. They talk
to the Postman API through a :class:`~postman_mcp.api_client.PostmanAPIClient`,
convert with a :class:`~postman_mcp.converters.FormatConverter`, and may
read or write local files.

None of them raise: every failure is reported in the returned result
model, so a tool call always gets a structured answer.

Example:
    >>> result = await export_collection(client, "12345-abc", "alternate",
    ...                                  output_path="exports/api.json")
    >>> result.success, result.file_path
    (True, 'exports/api.json')
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import ValidationError

from .converters import FormatConverter
from .logging_config import get_logger
from .models import (
    Collection,
    Compatibility,
    ExportFormat,
    ExportResult,
    ImportResult,
    ValidationResult,
    description_text,
)
from .variables import environment_variables_for

logger = get_logger(__name__)

ConflictResolution = Literal["skip", "overwrite", "rename"]

_YAML_SUFFIXES = (".yaml", ".yml")

_UNSAFE_FILENAME = re.compile(r'[\\/:*?"<>|]+')


def _resolve_format(export_format: ExportFormat | str) -> ExportFormat | None:
    try:
        return ExportFormat(export_format)
    except ValueError:
        return None


def environment_path_for(output_path: str | Path) -> Path:
    """Return the sibling path for an export's environment template."""
    path = Path(output_path)
    return path.with_name(f"{path.stem}.environment.json")


def write_document(path: str | Path, document: dict[str, Any]) -> Path:
    """Write a document as JSON, or YAML for ``.yaml``/``.yml`` paths.

    Parent directories are created as needed.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() in _YAML_SUFFIXES:
        text = yaml.safe_dump(document, sort_keys=False, allow_unicode=True)
    else:
        text = json.dumps(document, indent=2, ensure_ascii=False)
    path.write_text(text, encoding="utf-8")
    return path


def read_document(path: str | Path) -> Any:
    """Read a JSON or YAML document from disk."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in _YAML_SUFFIXES:
        return yaml.safe_load(text)
    return json.loads(text)


def environment_template(collection: Collection) -> dict[str, Any]:
    """Build ``{name, values}`` for every variable the collection references."""
    return {
        "name": f"{collection.name} Environment",
        "values": [variable.to_dict() for variable in environment_variables_for(collection)],
    }


async def export_collection(
    client: Any,
    collection_id: str,
    export_format: ExportFormat | str = ExportFormat.NATIVE,
    include_synthesized_data: bool = True,
    generate_environment_template: bool = True,
    output_path: str | None = None,
    converter: FormatConverter | None = None,
) -> ExportResult:
    """Export one collection in the requested format.

    Args:
        client: Postman API client.
        collection_id: Collection to export.
        export_format: Target format (or one of its aliases).
        include_synthesized_data: Enrich requests with synthesized data.
        generate_environment_template: Also build an environment template.
            Only honoured together with ``include_synthesized_data``.
        output_path: Optional file to write; ``.yaml``/``.yml`` selects YAML.
        converter: Converter to use; a default one is built when omitted.

    Returns:
        ExportResult; ``success`` is false if fetching failed or any item
        could not be converted.
    """
    fmt = _resolve_format(export_format)
    if fmt is None:
        return ExportResult(
            success=False,
            errors=[f"Unsupported export format: {export_format}"],
            format=ExportFormat.NATIVE,
        )

    converter = converter or FormatConverter()

    try:
        collection = Collection.from_api(await client.get_collection(collection_id))

        errors: list[str] = []
        warnings: list[str] = []
        document = converter.convert(collection, fmt, include_synthesized_data, errors)
        if collection.count_items() == 0:
            warnings.append("Collection has no requests")

        environment = None
        if generate_environment_template and include_synthesized_data:
            environment = environment_template(collection)

        file_path = None
        if output_path:
            file_path = str(write_document(output_path, document))
            if environment is not None:
                write_document(environment_path_for(output_path), environment)

        logger.info(
            f"Exported collection {collection_id} as {fmt.value}",
            extra={"collection_id": collection_id, "format": fmt.value, "failed_items": len(errors)},
        )
        return ExportResult(
            success=not errors,
            collection_data=document,
            environment_data=environment,
            file_path=file_path,
            errors=errors,
            warnings=warnings,
            format=fmt,
        )

    except Exception as e:
        logger.error(f"Export of collection {collection_id} failed: {e}")
        return ExportResult(success=False, errors=[str(e)], format=fmt)


async def export_workspace_collections(
    client: Any,
    workspace_id: str,
    export_format: ExportFormat | str = ExportFormat.NATIVE,
    include_synthesized_data: bool = True,
    output_directory: str | None = None,
    converter: FormatConverter | None = None,
) -> list[ExportResult]:
    """Export every collection in a workspace.

    With ``output_directory`` each export is written to
    ``<directory>/<collection name>.<format>.json``.
    """
    fmt = _resolve_format(export_format)
    if fmt is None:
        return [
            ExportResult(
                success=False,
                errors=[f"Unsupported export format: {export_format}"],
                format=ExportFormat.NATIVE,
            )
        ]

    try:
        summaries = await client.list_collections(workspace_id)
    except Exception as e:
        logger.error(f"Listing collections of workspace {workspace_id} failed: {e}")
        return [ExportResult(success=False, errors=[str(e)], format=fmt)]

    converter = converter or FormatConverter()
    results = []
    for summary in summaries:
        collection_id = summary.get("uid") or summary.get("id")
        output_path = None
        if output_directory:
            filename = _UNSAFE_FILENAME.sub("_", summary.get("name") or "").strip() or collection_id
            output_path = str(Path(output_directory) / f"{filename}.{fmt.value}.json")
        results.append(
            await export_collection(
                client,
                collection_id,
                fmt,
                include_synthesized_data,
                True,
                output_path,
                converter,
            )
        )
    return results


async def validate_collection_export(
    client: Any,
    collection_id: str,
    export_format: ExportFormat | str = ExportFormat.NATIVE,
    converter: FormatConverter | None = None,
) -> ValidationResult:
    """Check whether a collection converts cleanly to a format.

    An empty name is an error, an empty collection only a warning. The
    conversion itself is attempted with synthesis enabled; any failure is
    reported as ``Failed to convert to <format>: <reason>``.
    """
    fmt = _resolve_format(export_format)
    if fmt is None:
        return ValidationResult(
            is_valid=False,
            errors=[f"Unsupported export format: {export_format}"],
            format=ExportFormat.NATIVE,
        )

    converter = converter or FormatConverter()

    try:
        collection = Collection.from_api(await client.get_collection(collection_id))
    except Exception as e:
        logger.error(f"Validation of collection {collection_id} failed: {e}")
        return ValidationResult(is_valid=False, errors=[str(e)], format=fmt)

    errors: list[str] = []
    warnings: list[str] = []

    if not collection.name:
        errors.append("Collection name is required")
    if not collection.item:
        warnings.append("Collection has no requests")

    try:
        converter.convert(collection, fmt, include_synthesized=True)
    except Exception as e:
        errors.append(f"Failed to convert to {fmt.value}: {e}")

    is_valid = not errors
    return ValidationResult(
        is_valid=is_valid,
        errors=errors,
        warnings=warnings,
        format=fmt,
        compatibility=Compatibility(
            native_format=is_valid and fmt is ExportFormat.NATIVE,
            alternate_format=is_valid and fmt is ExportFormat.ALTERNATE,
        ),
    )


def _unique_name(name: str, existing: set[str]) -> str:
    candidate = name
    counter = 1
    while candidate in existing:
        candidate = f"{name} ({counter})"
        counter += 1
    return candidate


async def import_collection(
    client: Any,
    collection_data: str | dict[str, Any],
    target_workspace_id: str | None = None,
    conflict_resolution: ConflictResolution = "rename",
    validate_before_import: bool = True,
) -> ImportResult:
    """Create a collection from a Postman v2.1 document.

    Args:
        client: Postman API client.
        collection_data: The document, as a JSON string or already parsed.
        target_workspace_id: Workspace to import into.
        conflict_resolution: What to do when a collection with the same
            name exists: ``rename`` appends `` (1)``, `` (2)``, ...;
            ``skip`` creates nothing; ``overwrite`` replaces the first
            same-named collection.
        validate_before_import: Require ``info.name`` to be present.

    Returns:
        ImportResult with the new (or overwritten) collection id.
    """
    try:
        data = json.loads(collection_data) if isinstance(collection_data, str) else collection_data
    except json.JSONDecodeError as e:
        return ImportResult(success=False, errors=[f"Invalid collection JSON: {e}"])

    if not isinstance(data, dict):
        return ImportResult(success=False, errors=["Invalid collection: expected a JSON object"])

    try:
        collection = Collection.model_validate(data)
    except ValidationError as e:
        return ImportResult(success=False, errors=[f"Invalid collection: {e}"])

    warnings: list[str] = []
    name = collection.name
    if not name:
        if validate_before_import:
            return ImportResult(success=False, errors=["Invalid collection: missing name"])
        name = "Imported Collection"
        warnings.append(f"Collection has no name; imported as '{name}'")

    try:
        existing = await client.list_collections(target_workspace_id)
        same_name = [c for c in existing if c.get("name") == name]

        if same_name and conflict_resolution == "skip":
            logger.info(f"Skipping import of '{name}': collection already exists")
            return ImportResult(
                success=True,
                warnings=[*warnings, f"Collection '{name}' already exists; skipped"],
                skipped_items=[name],
            )

        if same_name and conflict_resolution == "overwrite":
            target_id = same_name[0].get("uid") or same_name[0].get("id")
            document = collection.model_copy(
                update={"info": collection.info.model_copy(update={"name": name})}
            ).to_dict()
            await client.replace_collection(target_id, document)
            logger.info(f"Overwrote collection '{name}' ({target_id})")
            return ImportResult(
                success=True,
                collection_id=target_id,
                warnings=[*warnings, f"Overwrote existing collection '{name}'"],
            )

        if same_name:
            renamed = _unique_name(name, {c.get("name") for c in existing})
            warnings.append(f"Collection '{name}' already exists; imported as '{renamed}'")
            name = renamed

        created = await client.create_collection(
            name=name,
            description=description_text(collection.info.description) or None,
            workspace_id=target_workspace_id,
            items=[item.to_dict() for item in collection.item],
            variables=[variable.to_dict() for variable in collection.variable or []],
            auth=collection.auth,
        )
        collection_id = created.get("uid") or created.get("id")
        logger.info(f"Imported collection '{name}' ({collection_id})")
        return ImportResult(success=True, collection_id=collection_id, warnings=warnings)

    except Exception as e:
        logger.error(f"Import of collection '{name}' failed: {e}")
        return ImportResult(success=False, errors=[str(e)], warnings=warnings)


async def import_collection_from_file(
    client: Any,
    file_path: str,
    target_workspace_id: str | None = None,
    conflict_resolution: ConflictResolution = "rename",
    validate_before_import: bool = True,
) -> ImportResult:
    """Import a collection from a local JSON or YAML file."""
    path = Path(file_path)
    if not path.is_file():
        return ImportResult(success=False, errors=[f"File not found: {file_path}"])

    try:
        data = read_document(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        return ImportResult(success=False, errors=[f"Could not read {file_path}: {e}"])

    return await import_collection(
        client,
        data,
        target_workspace_id=target_workspace_id,
        conflict_resolution=conflict_resolution,
        validate_before_import=validate_before_import,
    )
