"""Exception hierarchy for the Postman MCP Server.

All errors raised by this package derive from :class:`PostmanMCPError` so the
server layer can turn any of them into an MCP error result.

Hierarchy::

    PostmanMCPError
    ├── ConfigurationError
    │   └── EnvironmentVariableError
    ├── PostmanAPIError
    │   ├── AuthenticationError
    │   ├── AuthorizationError
    │   ├── ResourceNotFoundError
    │   ├── RateLimitError
    │   ├── APIResponseError
    │   └── ConnectionError
    ├── ToolExecutionError
    │   └── InvalidToolArgumentsError
    └── ConversionError
"""

from __future__ import annotations

from typing import Any


class PostmanMCPError(Exception):
    """Base exception for all Postman MCP Server errors.

    Attributes:
        message: Human-readable error message.
        details: Optional structured context for logging.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ConfigurationError(PostmanMCPError):
    """Raised when configuration is invalid or incomplete."""


class EnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    def __init__(self, variable: str, message: str | None = None) -> None:
        self.variable = variable
        super().__init__(
            message or f"Required environment variable not set: {variable}",
            details={"variable": variable},
        )


class PostmanAPIError(PostmanMCPError):
    """Base class for errors returned by the Postman API.

    Attributes:
        status_code: HTTP status code, when one was received.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class AuthenticationError(PostmanAPIError):
    """Raised when the API key is missing, invalid or expired (401)."""


class AuthorizationError(PostmanAPIError):
    """Raised when the API key lacks permission for an operation (403)."""


class ResourceNotFoundError(PostmanAPIError):
    """Raised when the requested resource does not exist (404)."""

    def __init__(self, resource: str) -> None:
        self.resource = resource
        super().__init__(
            f"Resource not found: {resource}",
            status_code=404,
            details={"resource": resource},
        )


class RateLimitError(PostmanAPIError):
    """Raised when the API rate limit is exceeded (429).

    Attributes:
        retry_after: Seconds to wait before retrying, if the API said so.
    """

    def __init__(self, retry_after: int | None = None) -> None:
        self.retry_after = retry_after
        message = "Rate limit exceeded. Please try again later"
        if retry_after:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(message, status_code=429)


class APIResponseError(PostmanAPIError):
    """Raised for any other error status returned by the API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.response_body = response_body


class ConnectionError(PostmanAPIError):  # noqa: A001
    """Raised when the API cannot be reached after all retries."""

    def __init__(self, host: str, original_error: Exception | None = None) -> None:
        self.host = host
        self.original_error = original_error
        reason = f": {original_error}" if original_error else ""
        super().__init__(f"Failed to connect to {host}{reason}")


class ToolExecutionError(PostmanMCPError):
    """Raised when a tool cannot be executed."""

    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        super().__init__(message, details={"tool": tool_name})


class InvalidToolArgumentsError(ToolExecutionError):
    """Raised when tool arguments fail validation."""

    def __init__(self, tool_name: str, reason: str) -> None:
        super().__init__(tool_name, f"Invalid arguments for {tool_name}: {reason}")


class ConversionError(PostmanMCPError):
    """Raised when a collection item cannot be rendered into an export format."""

    def __init__(self, item_name: str, reason: str) -> None:
        self.item_name = item_name
        super().__init__(
            f"Failed to convert item '{item_name}': {reason}",
            details={"item": item_name},
        )
