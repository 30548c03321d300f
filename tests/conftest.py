"""Pytest configuration and fixtures for Postman MCP Server tests."""

import copy
from datetime import datetime, timezone
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest

from postman_mcp.api_client import PostmanAPIClient
from postman_mcp.config import Config, PostmanConfig, ServerConfig
from postman_mcp.converters import FormatConverter, SequentialIdSource
from postman_mcp.models import NATIVE_SCHEMA_URI, Collection

FIXED_NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)

ENV_VARS = [
    "POSTMAN_API_KEY",
    "POSTMAN_API_BASE_URL",
    "POSTMAN_VALIDATE_CONNECTION",
    "HTTP_SERVER_PORT",
    "LOG_LEVEL",
    "LOG_JSON",
    "LOG_FILE",
    "MAX_RETRIES",
    "REQUEST_TIMEOUT",
    "SYNTHESIZE_QUERY_PARAMS",
    "SYNTHESIZE_BODIES",
    "SYNTHESIZE_HEADERS",
    "SYNTHESIZE_REALISTIC_VALUES",
]


@pytest.fixture
def sample_postman_config() -> PostmanConfig:
    """Create a sample Postman configuration for testing."""
    return PostmanConfig(
        api_key="PMAK-test-key",
        base_url="https://api.getpostman.com",
        validate_connection=False,
    )


@pytest.fixture
def sample_server_config() -> ServerConfig:
    """Create a sample server configuration for testing."""
    return ServerConfig(
        log_level="DEBUG",
        log_json=False,
    )


@pytest.fixture
def sample_config(sample_postman_config, sample_server_config) -> Config:
    """Create a full configuration that skips connection validation."""
    return Config(postman=sample_postman_config, server=sample_server_config)


@pytest.fixture
def sample_collection_data() -> Dict[str, Any]:
    """A small collection: one folder with three requests plus a root request."""
    return {
        "info": {
            "_postman_id": "5f1c2f0e-0000-4000-8000-000000000001",
            "name": "Sample API",
            "description": "Sample collection",
            "schema": NATIVE_SCHEMA_URI,
        },
        "item": [
            {
                "name": "Users",
                "description": "User endpoints",
                "item": [
                    {
                        "name": "List users",
                        "request": {
                            "method": "GET",
                            "url": {
                                "raw": "{{base_url}}/users?page=1",
                                "host": ["{{base_url}}"],
                                "path": ["users"],
                                "query": [{"key": "page", "value": "1"}],
                            },
                        },
                    },
                    {
                        "name": "Create user",
                        "request": {
                            "method": "POST",
                            "header": [{"key": "Content-Type", "value": "application/json"}],
                            "url": "{{base_url}}/users",
                        },
                    },
                    {
                        "name": "Get user",
                        "request": {
                            "method": "GET",
                            "url": {
                                "raw": "{{base_url}}/users/:userId",
                                "host": ["{{base_url}}"],
                                "path": ["users", ":userId"],
                            },
                        },
                    },
                ],
            },
            {
                "name": "Health",
                "request": "https://api.example.com/health",
            },
        ],
        "variable": [{"key": "base_url", "value": "https://api.example.com"}],
    }


@pytest.fixture
def sample_collection(sample_collection_data) -> Collection:
    """Parsed form of ``sample_collection_data``."""
    return Collection.from_api(copy.deepcopy(sample_collection_data))


@pytest.fixture
def fixed_clock():
    """A clock frozen at 2024-01-01T00:00:00Z."""
    return lambda: FIXED_NOW


@pytest.fixture
def converter(fixed_clock) -> FormatConverter:
    """A converter with deterministic ids and timestamps."""
    return FormatConverter(id_source=SequentialIdSource(), clock=fixed_clock)


@pytest.fixture
def mock_httpx_response():
    """Create a mock httpx response."""
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.json.return_value = {"status": "ok", "data": {}}
    mock_response.headers = {}
    mock_response.text = '{"status": "ok"}'
    return mock_response


@pytest.fixture
def mock_httpx_client(mock_httpx_response):
    """Create a mock httpx async client."""
    mock_client = AsyncMock()
    mock_client.get.return_value = mock_httpx_response
    mock_client.post.return_value = mock_httpx_response
    mock_client.put.return_value = mock_httpx_response
    mock_client.patch.return_value = mock_httpx_response
    mock_client.delete.return_value = mock_httpx_response
    mock_client.aclose = AsyncMock()
    return mock_client


@pytest.fixture
def mock_postman_client(sample_collection_data):
    """A Postman API client double whose methods are AsyncMocks."""
    client = AsyncMock(spec=PostmanAPIClient)
    client.get_collection.return_value = copy.deepcopy(sample_collection_data)
    client.list_collections.return_value = []
    return client


@pytest.fixture
def env_with_api_key(monkeypatch):
    """Set environment variables with a test API key."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("POSTMAN_API_KEY", "PMAK-test-key")
    monkeypatch.setenv("HTTP_SERVER_PORT", "8080")
    monkeypatch.setenv("LOG_LEVEL", "debug")


@pytest.fixture
def env_without_api_key(monkeypatch):
    """Clear all configuration environment variables."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
