"""Placeholder values for request parameters.

Given a parameter name, produce a plausible literal value and a short
description. Both are driven by ordered rule tables evaluated against the
lower-cased name; the first matching rule wins, so the order of the tables
is significant.

Example:
    >>> value_for("userId")
    'usr_123456'
    >>> value_for("limit")
    '10'
    >>> description_for("page")
    'Page number for pagination'
"""

from __future__ import annotations

from collections.abc import Callable

Rule = tuple[Callable[[str], bool], str]

DEFAULT_VALUE = "sample_value"

# Checked only when the name contains "id".
_ID_RULES: tuple[tuple[str, str], ...] = (
    ("user", "usr_123456"),
    ("product", "prod_789012"),
    ("order", "ord_345678"),
)
_PLAIN_ID = "12345"

_VALUE_RULES: tuple[Rule, ...] = (
    (lambda n: "email" in n, "user@example.com"),
    (lambda n: "name" in n and "username" not in n, "John Doe"),
    (lambda n: n == "username", "johndoe"),
    (lambda n: "status" in n, "active"),
    (lambda n: n == "page", "1"),
    (lambda n: n in ("limit", "size"), "10"),
    (lambda n: n == "offset", "0"),
    (lambda n: "search" in n or n == "q", "example"),
    (lambda n: "date" in n, "2024-01-01"),
    (lambda n: "time" in n, "2024-01-01T00:00:00Z"),
    (lambda n: "active" in n or "enabled" in n, "true"),
)

_DESCRIPTION_RULES: tuple[tuple[Callable[[str], bool], Callable[[str], str]], ...] = (
    (lambda n: "id" in n, lambda name: f"Unique identifier for {name}"),
    (lambda n: n == "page", lambda name: "Page number for pagination"),
    (lambda n: n in ("limit", "size"), lambda name: "Number of items to return"),
    (lambda n: n == "offset", lambda name: "Number of items to skip"),
    (lambda n: "search" in n or n == "q", lambda name: "Search query string"),
    (lambda n: "sort" in n, lambda name: "Field to sort by"),
    (lambda n: "order" in n, lambda name: "Sort order (asc/desc)"),
    (lambda n: "filter" in n, lambda name: "Filter criteria"),
    (lambda n: "status" in n, lambda name: "Status filter"),
)


def value_for(param_name: str) -> str:
    """Return a placeholder value for a parameter name."""
    name = param_name.lower()

    if "id" in name:
        for keyword, value in _ID_RULES:
            if keyword in name:
                return value
        return _PLAIN_ID

    for matches, value in _VALUE_RULES:
        if matches(name):
            return value
    return DEFAULT_VALUE


def description_for(param_name: str) -> str:
    """Return a human-readable description for a parameter name."""
    name = param_name.lower()
    for matches, describe in _DESCRIPTION_RULES:
        if matches(name):
            return describe(param_name)
    return f"Parameter: {param_name}"
