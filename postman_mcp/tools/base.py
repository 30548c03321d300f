"""Building blocks shared by every tool module.

A tool is a :class:`ToolDefinition`: a name, a description, a pydantic argument
model and an async handler. The argument model's JSON schema (camelCase
property names) is published as the MCP ``inputSchema``, and incoming
arguments are validated against the same model before the handler runs.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..api_client import PostmanAPIClient
from ..config import SynthesisConfig
from ..converters import FormatConverter
from ..mock_data import ExampleGenerator
from ..models import ExportFormat
from ..synthesizer import RequestSynthesizer

FormatName = Literal["native", "alternate", "api-description", "postman", "insomnia", "openapi"]


class ToolArguments(BaseModel):
    """Base for tool argument models; fields are exposed in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @classmethod
    def input_schema(cls) -> dict[str, Any]:
        schema = cls.model_json_schema(by_alias=True)
        schema.pop("title", None)
        schema.setdefault("properties", {})
        return schema


class NoArguments(ToolArguments):
    pass


@dataclass
class ToolContext:
    """Collaborators available to tool handlers."""

    client: PostmanAPIClient
    synthesis: SynthesisConfig = field(default_factory=SynthesisConfig)
    converter: FormatConverter | None = None
    examples: ExampleGenerator | None = None

    def __post_init__(self) -> None:
        synthesizer = RequestSynthesizer(self.synthesis)
        if self.converter is None:
            self.converter = FormatConverter(synthesizer)
        if self.examples is None:
            self.examples = ExampleGenerator(synthesizer)


Handler = Callable[[ToolContext, Any], Awaitable[str]]


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    arguments: type[ToolArguments]
    handler: Handler

    def definition(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.arguments.input_schema(),
        }


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, default=str)


def created(thing: str, data: Any) -> str:
    return f"{thing} created successfully:\n{to_json(data)}"


def updated(thing: str, data: Any) -> str:
    return f"{thing} updated successfully:\n{to_json(data)}"


def deleted(thing: str, resource_id: str) -> str:
    return f"{thing} {resource_id} deleted successfully"


def export_format(name: str) -> ExportFormat:
    return ExportFormat(name)


def present(model: BaseModel, *exclude: str) -> dict[str, Any]:
    """Dump the fields the caller actually set, camelCased, without ``exclude``."""
    return model.model_dump(by_alias=True, exclude_none=True, exclude=set(exclude))
