"""Data model for Postman collections and tool results.

Collections arrive from the Postman API as loosely-typed JSON. They are
parsed once into these models; request vs. folder is decided at that point
and recorded in the ``kind`` tag, which is never serialized back out.

Unknown keys are preserved (``extra="allow"``) so a collection exported
without synthesis carries everything the API returned.

Example:
    >>> collection = Collection.from_api(api_payload)
    >>> collection.count_items()
    12
    >>> [r.name for r in collection.iter_requests()]
    ['List users', 'Create user', ...]
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

# "file" is what the Postman app writes for binary uploads.
BodyMode = Literal["raw", "formdata", "urlencoded", "file", "binary", "graphql"]

WRITE_METHODS = ("POST", "PUT", "PATCH")

NATIVE_SCHEMA_URI = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"


def description_text(description: Any) -> str:
    """Flatten a Postman description (plain string or ``{content, type}``)."""
    if description is None:
        return ""
    if isinstance(description, dict):
        return str(description.get("content") or "")
    return str(description)


class _Document(BaseModel):
    """Base for models that mirror Postman JSON documents."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class KeyValue(_Document):
    key: str = ""
    value: str | None = ""
    description: str | dict[str, Any] | None = None
    disabled: bool | None = None

    @field_validator("value", mode="before")
    @classmethod
    def _stringify_value(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        return str(v).lower() if isinstance(v, bool) else str(v)


class QueryParam(KeyValue):
    pass


class Header(KeyValue):
    pass


class FormField(KeyValue):
    type: Literal["text", "file"] | None = None


class Body(_Document):
    """Request body; only the payload matching ``mode`` is populated."""

    mode: BodyMode | None = None
    raw: str | None = None
    file: dict[str, Any] | None = None
    formdata: list[FormField] | None = None
    urlencoded: list[KeyValue] | None = None
    graphql: dict[str, Any] | None = None
    options: dict[str, Any] | None = None

    @property
    def language(self) -> str | None:
        raw_options = (self.options or {}).get("raw") or {}
        return raw_options.get("language")


class Url(_Document):
    """Structured Postman URL."""

    raw: str = ""
    protocol: str | None = None
    host: list[str] | str | None = None
    port: str | None = None
    path: list[str] | str | None = None
    query: list[QueryParam] | None = None
    variable: list[dict[str, Any]] | None = None

    def to_string(self) -> str:
        """Return ``raw``, or rebuild the URL from its parts when it is empty."""
        if self.raw:
            return self.raw

        host = ".".join(self.host) if isinstance(self.host, list) else (self.host or "")
        path = "/".join(self.path) if isinstance(self.path, list) else (self.path or "")
        url = f"{self.protocol}://{host}" if self.protocol else host
        if self.port:
            url += f":{self.port}"
        if path:
            url += "/" + path.lstrip("/")
        if self.query:
            url += "?" + "&".join(f"{q.key}={q.value or ''}" for q in self.query)
        return url


class RequestDetails(_Document):
    method: str = "GET"
    url: Url | str = ""
    header: list[Header] | None = None
    body: Body | None = None
    description: str | dict[str, Any] | None = None
    auth: dict[str, Any] | None = None

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("body", mode="before")
    @classmethod
    def _drop_empty_body(cls, v: Any) -> Any:
        # Postman writes "body": {} for requests that never had one.
        if isinstance(v, dict) and not v:
            return None
        return v

    @property
    def url_string(self) -> str:
        if isinstance(self.url, Url):
            return self.url.to_string()
        return self.url or ""


class RequestItem(_Document):
    kind: Literal["request"] = Field(default="request", exclude=True)
    id: str | None = None
    name: str = ""
    description: str | dict[str, Any] | None = None
    request: RequestDetails
    response: list[dict[str, Any]] | None = None

    @field_validator("request", mode="before")
    @classmethod
    def _expand_shorthand(cls, v: Any) -> Any:
        # Postman allows "request": "<url>" as a GET shorthand.
        if isinstance(v, str):
            return {"method": "GET", "url": v}
        return v


class FolderItem(_Document):
    kind: Literal["folder"] = Field(default="folder", exclude=True)
    id: str | None = None
    name: str = ""
    description: str | dict[str, Any] | None = None
    item: ItemList = Field(default_factory=list)


def _tag_items(value: Any) -> Any:
    """Attach the ``kind`` tag to raw item dicts before union validation."""
    if not isinstance(value, list):
        return value
    tagged = []
    for entry in value:
        if isinstance(entry, dict) and "kind" not in entry:
            entry = {**entry, "kind": "request" if "request" in entry else "folder"}
        tagged.append(entry)
    return tagged


Item = Annotated[Union[RequestItem, FolderItem], Field(discriminator="kind")]
ItemList = Annotated[list[Item], BeforeValidator(_tag_items)]

FolderItem.model_rebuild()


class Variable(_Document):
    key: str
    value: Any = ""
    type: str | None = None
    description: str | dict[str, Any] | None = None


class CollectionInfo(_Document):
    name: str = ""
    description: str | dict[str, Any] | None = None
    schema_: str | None = Field(default=None, alias="schema")
    version: dict[str, Any] | str | None = None


class Collection(_Document):
    info: CollectionInfo = Field(default_factory=CollectionInfo)
    item: ItemList = Field(default_factory=list)
    variable: list[Variable] | None = None
    auth: dict[str, Any] | None = None

    @model_validator(mode="before")
    @classmethod
    def _unwrap_envelope(cls, data: Any) -> Any:
        # GET /collections/{id} wraps the document in {"collection": {...}}.
        if isinstance(data, dict) and "collection" in data and "info" not in data:
            return data["collection"]
        return data

    @classmethod
    def from_api(cls, data: Any) -> Collection:
        return cls.model_validate(data)

    @property
    def name(self) -> str:
        return self.info.name

    def count_items(self) -> int:
        """Count requests and folders in the whole tree."""
        return _count(self.item)

    def iter_requests(self) -> Iterator[RequestItem]:
        """Yield every request depth-first, in document order."""
        yield from _walk_requests(self.item)


def _count(items: list[RequestItem | FolderItem]) -> int:
    total = 0
    for item in items:
        total += 1
        if item.kind == "folder":
            total += _count(item.item)
    return total


def _walk_requests(items: list[RequestItem | FolderItem]) -> Iterator[RequestItem]:
    for item in items:
        if item.kind == "request":
            yield item
        else:
            yield from _walk_requests(item.item)


class ExampleRequest(BaseModel):
    method: str
    url: str
    headers: list[Header] = Field(default_factory=list)
    body: str | None = None


class ExampleResponse(BaseModel):
    code: int
    status: str
    headers: list[Header] = Field(default_factory=list)
    body: str = ""
    language: str | None = "json"


class MockExample(BaseModel):
    """A synthesized request/response pair for one endpoint."""

    name: str
    request: ExampleRequest
    response: ExampleResponse

    def to_postman_response(self) -> dict[str, Any]:
        """Render as a Postman saved response (what mock servers serve)."""
        original: dict[str, Any] = {
            "method": self.request.method,
            "header": [h.to_dict() for h in self.request.headers],
            "url": self.request.url,
        }
        if self.request.body:
            original["body"] = {
                "mode": "raw",
                "raw": self.request.body,
                "options": {"raw": {"language": "json"}},
            }
        return {
            "name": self.name,
            "originalRequest": original,
            "status": self.response.status,
            "code": self.response.code,
            "_postman_previewlanguage": self.response.language,
            "header": [h.to_dict() for h in self.response.headers],
            "cookie": [],
            "body": self.response.body,
        }


class ExportFormat(str, Enum):
    NATIVE = "native"
    ALTERNATE = "alternate"
    API_DESCRIPTION = "api-description"

    @classmethod
    def _missing_(cls, value: object) -> ExportFormat | None:
        aliases = {
            "postman": cls.NATIVE,
            "insomnia": cls.ALTERNATE,
            "openapi": cls.API_DESCRIPTION,
        }
        if isinstance(value, str):
            return aliases.get(value.lower())
        return None


class _Result(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ExportResult(_Result):
    success: bool
    collection_data: dict[str, Any] | None = None
    environment_data: dict[str, Any] | None = None
    file_path: str | None = None
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    format: ExportFormat


class Compatibility(_Result):
    native_format: bool = False
    alternate_format: bool = False


class ValidationResult(_Result):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    format: ExportFormat
    compatibility: Compatibility = Field(default_factory=Compatibility)


class ImportResult(_Result):
    success: bool
    collection_id: str | None = None
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    skipped_items: list[str] = Field(default_factory=list)
