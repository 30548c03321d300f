"""Collection variable scanning and environment templates.

Finds every ``{{name}}`` reference in a collection document and derives an
environment template for it, with placeholder values and secrecy inferred
from the variable name.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel

from .models import Variable

VARIABLE_PATTERN = re.compile(r"\{\{([^}]+)\}\}")

_SECRET_MARKERS = ("token", "key", "password", "secret")

_ENV_VALUE_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("url", "host"), "https://api.example.com"),
    (("token", "key"), "your_api_key_here"),
    (("user",), "demo_user"),
    (("password",), "demo_password"),
    (("version",), "v1"),
    (("port",), "443"),
)

_ENV_DESCRIPTION_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("url", "host"), "Base URL for the API"),
    (("token",), "Authentication token"),
    (("key",), "API key for authentication"),
    (("version",), "API version"),
    (("user",), "Username for authentication"),
    (("password",), "Password for authentication"),
)


def extract_variables(document: Any) -> set[str]:
    """Collect the names of all ``{{name}}`` references in a document.

    Walks dicts, lists, tuples and pydantic models; every string leaf is
    scanned. The document must be acyclic.

    Args:
        document: Any JSON-like structure or pydantic model.

    Returns:
        Set of variable names, braces stripped.
    """
    found: set[str] = set()
    _scan(document, found)
    return found


def _scan(node: Any, found: set[str]) -> None:
    if isinstance(node, str):
        found.update(VARIABLE_PATTERN.findall(node))
    elif isinstance(node, BaseModel):
        _scan(node.model_dump(by_alias=True, exclude_none=True), found)
    elif isinstance(node, dict):
        for value in node.values():
            _scan(value, found)
    elif isinstance(node, (list, tuple)):
        for value in node:
            _scan(value, found)


def _first_match(name: str, rules: tuple[tuple[tuple[str, ...], str], ...]) -> str | None:
    lowered = name.lower()
    for markers, result in rules:
        if any(marker in lowered for marker in markers):
            return result
    return None


def environment_value_for(name: str) -> str:
    return _first_match(name, _ENV_VALUE_RULES) or "sample_value"


def is_secret(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in _SECRET_MARKERS)


def environment_description_for(name: str) -> str:
    return _first_match(name, _ENV_DESCRIPTION_RULES) or f"Environment variable: {name}"


def environment_variables_for(document: Any) -> list[Variable]:
    """Build an environment template for every variable a document references.

    Postman dynamic variables (``{{$randomUUID}}`` and friends) are resolved
    by Postman at run time and are left out.

    Returns:
        Variables sorted by name.
    """
    return [
        Variable(
            key=name,
            value=environment_value_for(name),
            type="secret" if is_secret(name) else "default",
            description=environment_description_for(name),
        )
        for name in sorted(extract_variables(document))
        if not name.startswith("$")
    ]
