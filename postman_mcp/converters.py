"""Render a collection into the supported export formats.

Three targets are supported:

- **native**: Postman Collection v2.1, the same recursive tree, optionally
  enriched with synthesized query parameters, headers and bodies;
- **alternate**: Insomnia v4 export, a flat resource list where folders
  and requests point back to their container through ``parentId``;
- **api-description**: OpenAPI 3.0, one path entry per request URL.

Every conversion is a pure function of the collection. The only
non-deterministic inputs, resource ids and timestamps in the alternate
format, come from an injectable :class:`IdSource` and clock.

Example:
    >>> converter = FormatConverter(id_source=SequentialIdSource())
    >>> document = converter.to_native_format(collection, include_synthesized=True)
    >>> openapi = converter.to_api_description_format(collection)
    >>> sorted(openapi["paths"])
    ['/users', '/users/{id}']
"""

from __future__ import annotations

import itertools
import json
import re
import uuid
from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from typing import Any, Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit

from .exceptions import ConversionError
from .logging_config import get_logger
from .models import (
    NATIVE_SCHEMA_URI,
    WRITE_METHODS,
    Body,
    Collection,
    ExportFormat,
    FolderItem,
    Header,
    QueryParam,
    RequestItem,
    Url,
    description_text,
)
from .synthesizer import FALLBACK_BASE_URL, RequestSynthesizer, absolute_url
from .variables import environment_variables_for

logger = get_logger(__name__)

EXPORT_SOURCE = "postman-mcp-server"

_PATH_FALLBACK = re.compile(r"^(?:https?://[^/]+)?(/.*)?$")

_CONVERSION_FAILURES = (ValueError, TypeError, KeyError)

_RAW_MIME_TYPES = {
    "json": "application/json",
    "xml": "application/xml",
    "html": "text/html",
    "javascript": "application/javascript",
    "text": "text/plain",
}

_CANNED_SUCCESS_RESPONSE = {
    "200": {
        "description": "Successful response",
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "properties": {
                        "message": {"type": "string", "example": "Success"},
                    },
                },
            },
        },
    },
}

_CANNED_REQUEST_BODY = {
    "content": {
        "application/json": {
            "schema": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "example": "Sample Item"},
                    "description": {"type": "string", "example": "Sample description"},
                    "status": {"type": "string", "example": "active"},
                },
            },
        },
    },
}

_SECURITY_SCHEMES = {
    "bearerAuth": {"type": "http", "scheme": "bearer"},
    "apiKey": {"type": "apiKey", "in": "header", "name": "X-API-Key"},
}


class IdSource(Protocol):
    """Source of opaque resource identifiers."""

    def next_id(self, prefix: str = "") -> str: ...


class RandomIdSource:
    """Random ids; unique within an export, not stable across exports."""

    def next_id(self, prefix: str = "") -> str:
        return f"{prefix}{uuid.uuid4().hex[:12]}"


class SequentialIdSource:
    """Deterministic ids (``req_1``, ``fld_2``, ...) for reproducible output."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)

    def next_id(self, prefix: str = "") -> str:
        return f"{prefix}{next(self._counter)}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def extract_path_from_url(url: str) -> str:
    """Return the path component of a URL, without query string.

    Scheme-less URLs are resolved against a placeholder host first. If the
    URL cannot be parsed, the path is cut out with a regex instead.
    """
    try:
        return urlsplit(absolute_url(url)).path or "/"
    except ValueError:
        match = _PATH_FALLBACK.match(url)
        if match and match.group(1):
            return match.group(1).split("?", 1)[0] or "/"
        return "/"


def _template_path(path: str) -> str:
    """Rewrite ``:name`` segments as ``{name}`` path templates."""
    return "/".join(
        f"{{{segment[1:]}}}" if segment.startswith(":") and len(segment) > 1 else segment
        for segment in path.split("/")
    )


def _merge_query(existing: list[QueryParam], synthesized: list[QueryParam]) -> list[QueryParam]:
    """Fill empty/placeholder values in place, then append new keys."""
    by_key = {param.key.lower(): param for param in synthesized}
    merged: list[QueryParam] = []
    for param in existing:
        replacement = by_key.get(param.key.lower())
        if replacement is not None and (not param.value or param.value.startswith("{{")):
            param = param.model_copy(
                update={
                    "value": replacement.value,
                    "description": param.description or replacement.description,
                }
            )
        merged.append(param)

    existing_keys = {param.key.lower() for param in existing}
    merged.extend(
        param.model_copy(update={"disabled": False})
        for param in synthesized
        if param.key.lower() not in existing_keys
    )
    return merged


def _merge_headers(existing: list[Header], generated: list[Header]) -> list[Header]:
    """Append generated headers whose key is not already present."""
    present = {header.key.lower() for header in existing}
    return list(existing) + [
        header.model_copy(update={"disabled": False})
        for header in generated
        if header.key.lower() not in present
    ]


def _append_query(url: str, params: list[QueryParam]) -> str:
    """Append parameters to a URL string, skipping keys it already has."""
    try:
        present = {key for key, _ in parse_qsl(urlsplit(absolute_url(url)).query, keep_blank_values=True)}
    except ValueError:
        return url

    additions = [(param.key, param.value or "") for param in params if param.key not in present]
    if not additions:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode(additions)}"


def _with_query(raw: str, params: list[QueryParam]) -> str:
    """Replace the query string of a raw URL with the enabled ``params``."""
    base, hash_mark, fragment = raw.partition("#")
    base = base.split("?", 1)[0]
    pairs = [
        param.key if param.value is None else f"{param.key}={param.value}"
        for param in params
        if not param.disabled
    ]
    query = "?" + "&".join(pairs) if pairs else ""
    return f"{base}{query}{hash_mark}{fragment}"


def _insomnia_body(body: Body) -> dict[str, Any]:
    if body.mode == "raw" or (body.mode is None and body.raw is not None):
        raw = body.raw or ""
        mime_type = _RAW_MIME_TYPES.get(body.language or "")
        if mime_type is None:
            mime_type = "application/json" if raw.lstrip().startswith(("{", "[")) else "text/plain"
        return {"mimeType": mime_type, "text": raw}
    if body.mode == "urlencoded":
        return {
            "mimeType": "application/x-www-form-urlencoded",
            "params": [
                {"name": row.key, "value": row.value or "", "disabled": bool(row.disabled)}
                for row in body.urlencoded or []
            ],
        }
    if body.mode == "formdata":
        params = []
        for row in body.formdata or []:
            param: dict[str, Any] = {"name": row.key, "value": row.value or "", "disabled": bool(row.disabled)}
            if row.type == "file":
                param.update(type="file", fileName="")
            params.append(param)
        return {"mimeType": "multipart/form-data", "params": params}
    if body.mode == "graphql":
        return {"mimeType": "application/graphql", "text": json.dumps(body.graphql or {})}
    return {"mimeType": "application/octet-stream"}


class FormatConverter:
    """Convert collections between export formats.

    Args:
        synthesizer: Source of synthesized request data.
        id_source: Resource id generator for the alternate format.
        clock: Returns the current time; used for export timestamps.
    """

    def __init__(
        self,
        synthesizer: RequestSynthesizer | None = None,
        id_source: IdSource | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.synthesizer = synthesizer or RequestSynthesizer()
        self.id_source = id_source or RandomIdSource()
        self.clock = clock or _utc_now

    def convert(
        self,
        collection: Collection,
        export_format: ExportFormat,
        include_synthesized: bool = True,
        errors: list[str] | None = None,
    ) -> dict[str, Any]:
        """Dispatch to the converter for ``export_format``."""
        if export_format is ExportFormat.ALTERNATE:
            return self.to_alternate_format(collection, include_synthesized, errors)
        if export_format is ExportFormat.API_DESCRIPTION:
            return self.to_api_description_format(collection, errors)
        return self.to_native_format(collection, include_synthesized, errors)

    @staticmethod
    def _record_failure(
        item: RequestItem | FolderItem,
        error: Exception,
        errors: list[str] | None,
    ) -> None:
        """Record a per-item conversion failure.

        With an ``errors`` list the failure is logged and appended, and the
        caller skips the item. Without one it is raised as ConversionError.
        """
        failure = ConversionError(item.name, str(error))
        if errors is None:
            raise failure from error
        logger.warning(failure.message, extra={"item": item.name})
        errors.append(failure.message)

    # Native (Postman v2.1)

    def to_native_format(
        self,
        collection: Collection,
        include_synthesized: bool = True,
        errors: list[str] | None = None,
    ) -> dict[str, Any]:
        """Render a Postman v2.1 document, optionally with synthesized data."""
        info: dict[str, Any] = {"name": collection.info.name}
        if collection.info.description:
            info["description"] = collection.info.description
        info["schema"] = NATIVE_SCHEMA_URI
        info["version"] = {"major": 1, "minor": 0, "patch": 0}

        document: dict[str, Any] = {
            "info": info,
            "item": [
                item.to_dict()
                for item in self._native_items(collection.item, include_synthesized, errors)
            ],
            "variable": [variable.to_dict() for variable in collection.variable or []],
        }
        if collection.auth:
            document["auth"] = collection.auth
        return document

    def _native_items(
        self,
        items: list[RequestItem | FolderItem],
        include_synthesized: bool,
        errors: list[str] | None,
    ) -> list[RequestItem | FolderItem]:
        converted: list[RequestItem | FolderItem] = []
        for item in items:
            try:
                if item.kind == "folder":
                    children = self._native_items(item.item, include_synthesized, errors)
                    converted.append(item.model_copy(update={"item": children}))
                elif include_synthesized:
                    converted.append(self._enrich_request(item))
                else:
                    converted.append(item)
            except _CONVERSION_FAILURES as e:
                self._record_failure(item, e, errors)
        return converted

    def _enrich_request(self, item: RequestItem) -> RequestItem:
        details = item.request
        method = details.method
        update: dict[str, Any] = {}

        # Bare string URLs are left as-is; only structured URLs get a query list.
        if isinstance(details.url, Url):
            synthesized = self.synthesizer.query_params_for(details.url_string, method)
            if synthesized:
                existing = details.url.query or []
                merged = _merge_query(existing, synthesized)
                url_update: dict[str, Any] = {"query": merged}
                if details.url.raw and merged != existing:
                    url_update["raw"] = _with_query(details.url.raw, merged)
                update["url"] = details.url.model_copy(update=url_update)

        generated = self.synthesizer.headers_for(method, method in WRITE_METHODS)
        headers = _merge_headers(details.header or [], generated)
        if headers or details.header is not None:
            update["header"] = headers

        if details.body is None and method in WRITE_METHODS:
            content_type = next(
                (h.value for h in headers if h.key.lower() == "content-type" and h.value),
                "application/json",
            )
            body = self.synthesizer.body_for(method, content_type)
            if body is not None:
                update["body"] = body

        return item.model_copy(update={"request": details.model_copy(update=update)})

    # Alternate (Insomnia v4)

    def to_alternate_format(
        self,
        collection: Collection,
        include_synthesized: bool = True,
        errors: list[str] | None = None,
    ) -> dict[str, Any]:
        """Render an Insomnia v4 export with a flat, parent-linked resource list."""
        now = self.clock()
        stamp = int(now.timestamp() * 1000)
        order = itertools.count()

        workspace_id = self.id_source.next_id("wrk_")
        resources: list[dict[str, Any]] = [
            {
                "_id": workspace_id,
                "_type": "workspace",
                "name": collection.info.name,
                "description": description_text(collection.info.description),
                "parentId": None,
                "created": stamp,
                "modified": stamp,
            }
        ]

        env_data = {
            variable.key: variable.value if include_synthesized else ""
            for variable in environment_variables_for(collection)
        }
        resources.append(
            {
                "_id": self.id_source.next_id("env_"),
                "_type": "environment",
                "name": "Base Environment",
                "data": env_data,
                "dataPropertyOrder": None,
                "color": None,
                "isPrivate": False,
                "metaSortKey": next(order),
                "parentId": workspace_id,
                "created": stamp,
                "modified": stamp,
            }
        )

        self._alternate_items(
            collection.item, workspace_id, include_synthesized, resources, order, stamp, errors
        )

        return {
            "_type": "export",
            "__export_format": 4,
            "__export_date": now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "__export_source": EXPORT_SOURCE,
            "resources": resources,
        }

    def _alternate_items(
        self,
        items: list[RequestItem | FolderItem],
        parent_id: str,
        include_synthesized: bool,
        resources: list[dict[str, Any]],
        order: Iterator[int],
        stamp: int,
        errors: list[str] | None,
    ) -> None:
        for item in items:
            try:
                if item.kind == "folder":
                    folder_id = self.id_source.next_id("fld_")
                    resources.append(
                        {
                            "_id": folder_id,
                            "_type": "request_group",
                            "name": item.name,
                            "description": description_text(item.description),
                            "environment": {},
                            "environmentPropertyOrder": None,
                            "metaSortKey": next(order),
                            "parentId": parent_id,
                            "created": stamp,
                            "modified": stamp,
                        }
                    )
                    self._alternate_items(
                        item.item, folder_id, include_synthesized, resources, order, stamp, errors
                    )
                else:
                    resource = self._alternate_request(item, include_synthesized)
                    resource.update(
                        parentId=parent_id,
                        metaSortKey=next(order),
                        created=stamp,
                        modified=stamp,
                    )
                    resources.append(resource)
            except _CONVERSION_FAILURES as e:
                self._record_failure(item, e, errors)

    def _alternate_request(self, item: RequestItem, include_synthesized: bool) -> dict[str, Any]:
        details = item.request
        method = details.method
        url = details.url_string

        headers = [
            {
                "name": header.key,
                "value": header.value or "",
                "description": description_text(header.description),
                "disabled": bool(header.disabled),
            }
            for header in details.header or []
        ]
        body: dict[str, Any] = {}

        if include_synthesized:
            url = _append_query(url, self.synthesizer.query_params_for(url, method))
            present = {header["name"].lower() for header in headers}
            headers.extend(
                {
                    "name": header.key,
                    "value": header.value or "",
                    "description": description_text(header.description),
                    "disabled": False,
                }
                for header in self.synthesizer.headers_for(method, method in WRITE_METHODS)
                if header.key.lower() not in present
            )
            if details.body is None and method in WRITE_METHODS:
                generated = self.synthesizer.body_for(method)
                if generated is not None:
                    body = _insomnia_body(generated)

        if details.body is not None:
            body = _insomnia_body(details.body)

        return {
            "_id": self.id_source.next_id("req_"),
            "_type": "request",
            "name": item.name,
            "description": description_text(item.description or details.description),
            "url": url,
            "method": method,
            "headers": headers,
            "body": body,
            "parameters": [],
            "authentication": {},
            "isPrivate": False,
            "settingStoreCookies": True,
            "settingSendCookies": True,
            "settingDisableRenderRequestBody": False,
            "settingEncodeUrl": True,
            "settingRebuildPath": True,
            "settingFollowRedirects": "global",
        }

    # API description (OpenAPI 3.0)

    def to_api_description_format(
        self,
        collection: Collection,
        errors: list[str] | None = None,
    ) -> dict[str, Any]:
        """Render an OpenAPI 3.0 document. Output is fully deterministic."""
        info: dict[str, Any] = {"title": collection.info.name, "version": "1.0.0"}
        description = description_text(collection.info.description)
        if description:
            info["description"] = description

        document: dict[str, Any] = {
            "openapi": "3.0.0",
            "info": info,
            "servers": [{"url": FALLBACK_BASE_URL, "description": "API Server"}],
            "paths": {},
            "components": {
                "schemas": {},
                "securitySchemes": json.loads(json.dumps(_SECURITY_SCHEMES)),
            },
        }
        self._api_description_items(collection.item, document["paths"], errors)
        return document

    def _api_description_items(
        self,
        items: list[RequestItem | FolderItem],
        paths: dict[str, Any],
        errors: list[str] | None,
    ) -> None:
        for item in items:
            try:
                if item.kind == "folder":
                    self._api_description_items(item.item, paths, errors)
                    continue

                method = item.request.method.lower()
                url = item.request.url_string
                path = _template_path(extract_path_from_url(url))

                operation: dict[str, Any] = {
                    "summary": item.name,
                    "description": description_text(item.description or item.request.description),
                    "parameters": self._operation_parameters(item),
                    "responses": json.loads(json.dumps(_CANNED_SUCCESS_RESPONSE)),
                }
                if method in ("post", "put", "patch"):
                    operation["requestBody"] = json.loads(json.dumps(_CANNED_REQUEST_BODY))

                paths.setdefault(path, {})[method] = operation
            except _CONVERSION_FAILURES as e:
                self._record_failure(item, e, errors)

    def _operation_parameters(self, item: RequestItem) -> list[dict[str, Any]]:
        details = item.request
        parameters: list[dict[str, Any]] = [
            {
                "name": name,
                "in": "path",
                "required": True,
                "schema": {"type": "string", "example": value},
            }
            for name, value in self.synthesizer.path_variables_for(details.url_string).items()
        ]

        if isinstance(details.url, Url):
            for param in details.url.query or []:
                parameter: dict[str, Any] = {
                    "name": param.key,
                    "in": "query",
                    "required": False,
                    "schema": {"type": "string", "example": param.value},
                }
                description = description_text(param.description)
                if description:
                    parameter["description"] = description
                parameters.append(parameter)

        return parameters
