"""Logging configuration for the Postman MCP Server.

Logs always go to stderr: when the server runs over stdio, stdout carries
the MCP protocol stream and must stay clean.

Example:
    >>> from postman_mcp.logging_config import setup_logging, get_logger
    >>> setup_logging(log_level="DEBUG", json_format=True)
    >>> logger = get_logger(__name__)
    >>> logger.info("Exported collection", extra={"format": "native"})
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import MutableMapping
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER_NAME = "postman_mcp"

# Attributes present on every LogRecord; anything else came in via ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime"}

_TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects, keeping ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class LoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that merges fixed context into every record's ``extra``.

    Example:
        >>> adapter = LoggerAdapter(get_logger(__name__), {"base_url": "https://api.getpostman.com"})
        >>> adapter.debug("GET /collections", extra={"attempt": 1})
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def setup_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
) -> None:
    """Configure the package logger.

    Args:
        log_level: Logging level name.
        json_format: Emit JSON lines instead of plain text.
        log_file: Optional file to write logs to, in addition to stderr.
    """
    formatter: logging.Formatter = (
        JSONFormatter() if json_format else logging.Formatter(_TEXT_FORMAT)
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(log_level.upper())
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under the package logger."""
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
