"""Synthesis of query parameters, bodies, headers and path variables.

The :class:`RequestSynthesizer` turns a bare request (method + URL) into one
that can be sent as-is: conventional headers, plausible query parameters and
a sample body matching the declared content type. All operations are pure.

Example:
    >>> synthesizer = RequestSynthesizer()
    >>> [p.key for p in synthesizer.query_params_for("/api/users", "GET")]
    ['page', 'limit', 'sort', 'format']
    >>> synthesizer.body_for("GET") is None
    True
"""

from __future__ import annotations

import json
import re
from typing import Any
from urllib.parse import parse_qsl, urlsplit

from .config import SynthesisConfig
from .models import WRITE_METHODS, Body, FormField, Header, KeyValue, QueryParam
from .placeholders import description_for, value_for

FALLBACK_BASE_URL = "https://api.example.com"

USER_AGENT = "PostmanMCPServer/1.0"

_NO_BODY_METHODS = ("GET", "HEAD", "DELETE")

_BRACED_SEGMENT = re.compile(r"^\{([^{}]+)\}$")

# (URL keywords, parameters added for GET requests matching any of them)
_GET_QUERY_RULES: tuple[tuple[tuple[str, ...], tuple[tuple[str, str, str], ...]], ...] = (
    (
        ("/users", "/user"),
        (
            ("page", "1", "Page number for pagination"),
            ("limit", "10", "Number of items per page"),
            ("sort", "created_at", "Sort field"),
        ),
    ),
    (("/search",), (("q", "example search", "Search query"),)),
    (("/filter",), (("status", "active", "Filter by status"),)),
)

SAMPLE_TEXT_BODY = "Sample text content for the request body"

SAMPLE_XML_BODY = """<?xml version="1.0" encoding="UTF-8"?>
<request>
    <name>Sample Item</name>
    <description>This is a sample XML request</description>
    <status>active</status>
    <metadata>
        <created_by>api_user</created_by>
        <tags>
            <tag>sample</tag>
            <tag>demo</tag>
        </tags>
    </metadata>
</request>"""


def absolute_url(url: str) -> str:
    """Prefix a scheme-less URL with the fallback base so it can be parsed."""
    return url if url.startswith("http") else f"{FALLBACK_BASE_URL}{url}"


def _json_payload(method: str) -> dict[str, Any]:
    if method == "POST":
        return {
            "name": "Sample Item",
            "description": "This is a sample item created via API",
            "status": "active",
            "metadata": {
                "created_by": "api_user",
                "tags": ["sample", "demo"],
            },
        }
    if method == "PUT":
        return {
            "id": 12345,
            "name": "Updated Item",
            "description": "This item has been updated",
            "status": "active",
            "updated_at": "2024-01-01T00:00:00Z",
        }
    if method == "PATCH":
        return {
            "status": "inactive",
            "updated_at": "2024-01-01T00:00:00Z",
        }
    return {"data": "sample_value"}


def _form_rows(multipart: bool = False) -> list[FormField]:
    rows = [
        FormField(key="name", value="Sample Name", description="Item name"),
        FormField(key="description", value="Sample description", description="Item description"),
        FormField(key="status", value="active", description="Item status"),
    ]
    if multipart:
        rows.append(FormField(key="file", value="", type="file", description="File upload"))
    return rows


class RequestSynthesizer:
    """Generate placeholder request data.

    Args:
        config: Switches for each kind of synthesis; all enabled by default.
    """

    def __init__(self, config: SynthesisConfig | None = None) -> None:
        self.config = config or SynthesisConfig()

    def query_params_for(self, url: str, method: str) -> list[QueryParam]:
        """Synthesize query parameters for a request.

        Existing parameters with an empty or ``{{...}}`` value get a concrete
        value. GET requests additionally get pagination/search/filter
        parameters by URL keyword, and ``format=json``. A key already present
        in the URL is never added again.
        """
        if not self.config.generate_query_params:
            return []

        params: list[QueryParam] = []
        present: set[str] = set()

        try:
            query = urlsplit(absolute_url(url)).query
            for key, value in parse_qsl(query, keep_blank_values=True):
                present.add(key)
                if not value or value.startswith("{{"):
                    params.append(
                        QueryParam(key=key, value=value_for(key), description=description_for(key))
                    )
        except ValueError:
            # Unparseable URL: fall through to method-based generation.
            pass

        if method.upper() != "GET":
            return params

        def add(key: str, value: str, description: str) -> None:
            if key not in present:
                present.add(key)
                params.append(QueryParam(key=key, value=value, description=description))

        for keywords, additions in _GET_QUERY_RULES:
            if any(keyword in url for keyword in keywords):
                for key, value, description in additions:
                    add(key, value, description)

        add("format", "json", "Response format")
        return params

    def body_for(self, method: str, content_type: str = "application/json") -> Body | None:
        """Synthesize a request body, or ``None`` for methods that carry none."""
        method = method.upper()
        if not self.config.generate_request_bodies or method in _NO_BODY_METHODS:
            return None

        media_type = (content_type or "").split(";", 1)[0].strip().lower()

        if media_type == "application/x-www-form-urlencoded":
            rows = [
                KeyValue(key=row.key, value=row.value, description=row.description)
                for row in _form_rows()
            ]
            return Body(mode="urlencoded", urlencoded=rows)
        if media_type == "multipart/form-data":
            return Body(mode="formdata", formdata=_form_rows(multipart=True))
        if media_type == "text/plain":
            return Body(mode="raw", raw=SAMPLE_TEXT_BODY, options={"raw": {"language": "text"}})
        if media_type in ("application/xml", "text/xml"):
            return Body(mode="raw", raw=SAMPLE_XML_BODY, options={"raw": {"language": "xml"}})

        return Body(
            mode="raw",
            raw=json.dumps(_json_payload(method), indent=2),
            options={"raw": {"language": "json"}},
        )

    def headers_for(self, method: str, has_body: bool = False) -> list[Header]:
        """Return conventional headers in a fixed order."""
        if not self.config.generate_headers:
            return []

        headers: list[Header] = []
        if has_body and method.upper() in WRITE_METHODS:
            headers.append(
                Header(
                    key="Content-Type",
                    value="application/json",
                    description="Content type of the request body",
                )
            )
        headers.extend(
            [
                Header(key="Accept", value="application/json", description="Accepted response content types"),
                Header(key="Authorization", value="Bearer {{access_token}}", description="Authentication token"),
                Header(key="User-Agent", value=USER_AGENT, description="Client identifier"),
                Header(key="X-API-Key", value="{{api_key}}", description="API key for authentication"),
            ]
        )
        return headers

    def path_variables_for(self, url: str) -> dict[str, str]:
        """Map each ``:name`` or ``{name}`` path segment to a placeholder value."""
        try:
            path = urlsplit(absolute_url(url)).path
        except ValueError:
            path = url.split("?", 1)[0]

        variables: dict[str, str] = {}
        for segment in path.split("/"):
            name = None
            if segment.startswith(":") and len(segment) > 1:
                name = segment[1:]
            else:
                match = _BRACED_SEGMENT.match(segment)
                if match:
                    name = match.group(1)
            if name:
                variables[name] = value_for(name)
        return variables
