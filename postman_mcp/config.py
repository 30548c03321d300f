"""Configuration loader for Postman MCP Server.

This module provides configuration management using Pydantic models
for validation and environment variable loading.

Example:
    >>> from postman_mcp.config import load_config
    >>> config = load_config()
    >>> print(config.server.port)
    3000

Environment Variables:
    POSTMAN_API_KEY: Postman API key (required to call the API).
    POSTMAN_API_BASE_URL: Postman API base URL (default: https://api.getpostman.com).
    POSTMAN_VALIDATE_CONNECTION: Check the key against /me on startup (default: true).
    HTTP_SERVER_PORT: HTTP server port (default: 3000).
    LOG_LEVEL: Logging level (default: INFO).
    LOG_JSON: Emit JSON logs (default: false).
    LOG_FILE: Optional log file path.
    MAX_RETRIES: API retry attempts for transient errors (default: 3).
    REQUEST_TIMEOUT: API request timeout in milliseconds (default: 30000).
    SYNTHESIZE_QUERY_PARAMS: Generate query parameters on export (default: true).
    SYNTHESIZE_BODIES: Generate request bodies on export (default: true).
    SYNTHESIZE_HEADERS: Generate headers on export (default: true).
    SYNTHESIZE_REALISTIC_VALUES: Use dynamic variables in mock examples (default: true).
"""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError, EnvironmentVariableError
from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_API_BASE_URL = "https://api.getpostman.com"


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class PostmanConfig(BaseModel):
    """Postman API connection configuration.

    Attributes:
        api_key: Postman API key sent as ``X-API-Key``.
        base_url: Postman API base URL.
        validate_connection: Whether to call ``/me`` when the server starts.
    """

    api_key: str | None = Field(
        default=None,
        description="Postman API key",
    )
    base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        description="Postman API base URL",
    )
    validate_connection: bool = Field(
        default=True,
        description="Validate the API key on startup",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an absolute http(s) URL and strip any trailing slash.

        Raises:
            ValueError: If the URL is not http or https.
        """
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Postman API base URL must be http(s): {v}")
        return v.rstrip("/")

    model_config = {"extra": "ignore"}


class ServerConfig(BaseModel):
    """Server configuration.

    Attributes:
        port: HTTP server port.
        log_level: Logging level.
        log_json: Use JSON format for logs.
        log_file: Optional log file path.
        max_retries: Max API retry attempts.
        request_timeout: Request timeout in milliseconds.
    """

    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="HTTP server port",
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum API retry attempts",
    )
    request_timeout: int = Field(
        default=30000,
        ge=1000,
        le=300000,
        description="Request timeout in milliseconds",
    )

    model_config = {"extra": "ignore"}


class SynthesisConfig(BaseModel):
    """Switches for placeholder data synthesis.

    Attributes:
        generate_query_params: Add synthesized query parameters.
        generate_request_bodies: Add synthesized bodies to write requests.
        generate_headers: Add conventional headers.
        use_realistic_values: Use Postman dynamic variables in mock examples.
    """

    generate_query_params: bool = True
    generate_request_bodies: bool = True
    generate_headers: bool = True
    use_realistic_values: bool = True

    model_config = {"extra": "ignore"}


class Config(BaseModel):
    """Main configuration container.

    Attributes:
        postman: Postman API settings.
        server: Server settings.
        synthesis: Placeholder data synthesis settings.
    """

    postman: PostmanConfig = Field(default_factory=PostmanConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    synthesis: SynthesisConfig = Field(default_factory=SynthesisConfig)

    model_config = {"extra": "ignore"}


def load_config(env_file: str | None = None) -> Config:
    """Load configuration from environment variables.

    Args:
        env_file: Optional path to .env file.

    Returns:
        Validated Config object.

    Raises:
        ConfigurationError: If a value is present but invalid.
    """
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    logger.debug("Loading configuration from environment")

    try:
        postman_config = PostmanConfig(
            api_key=os.getenv("POSTMAN_API_KEY") or None,
            base_url=os.getenv("POSTMAN_API_BASE_URL", DEFAULT_API_BASE_URL),
            validate_connection=_env_flag("POSTMAN_VALIDATE_CONNECTION"),
        )

        server_config = ServerConfig(
            port=int(os.getenv("HTTP_SERVER_PORT", "3000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_json=_env_flag("LOG_JSON", "false"),
            log_file=os.getenv("LOG_FILE"),
            max_retries=int(os.getenv("MAX_RETRIES", "3")),
            request_timeout=int(os.getenv("REQUEST_TIMEOUT", "30000")),
        )

        synthesis_config = SynthesisConfig(
            generate_query_params=_env_flag("SYNTHESIZE_QUERY_PARAMS"),
            generate_request_bodies=_env_flag("SYNTHESIZE_BODIES"),
            generate_headers=_env_flag("SYNTHESIZE_HEADERS"),
            use_realistic_values=_env_flag("SYNTHESIZE_REALISTIC_VALUES"),
        )

        config = Config(
            postman=postman_config,
            server=server_config,
            synthesis=synthesis_config,
        )

        logger.info(
            "Configuration loaded successfully",
            extra={
                "base_url": config.postman.base_url,
                "api_key_set": config.postman.api_key is not None,
            },
        )

        return config

    except (ValueError, ValidationError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def get_api_key() -> str:
    """Get the Postman API key from the environment.

    Returns:
        The configured API key.

    Raises:
        EnvironmentVariableError: If no API key is configured.
    """
    api_key = os.getenv("POSTMAN_API_KEY")
    if not api_key:
        raise EnvironmentVariableError(
            "POSTMAN_API_KEY",
            message="POSTMAN_API_KEY environment variable is required",
        )
    return api_key
