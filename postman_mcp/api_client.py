"""Postman API client with API key authentication.

This module provides an async HTTP client for the Postman REST API. Every
request carries the ``X-API-Key`` header.

Example:
    >>> async with PostmanAPIClient(api_key="PMAK-...") as client:
    ...     workspaces = await client.list_workspaces()
    ...     print(f"Found {len(workspaces)} workspaces")

Note:
    Postman wraps most payloads in an envelope named after the resource,
    e.g. ``{"collection": {...}}`` or ``{"workspaces": [...]}``. The typed
    helpers unwrap it; :meth:`PostmanAPIClient.execute_operation` returns
    the raw body.
"""

from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import urljoin

import httpx

from .config import DEFAULT_API_BASE_URL, Config, get_api_key
from .exceptions import (
    APIResponseError,
    AuthenticationError,
    AuthorizationError,
    ConnectionError,
    RateLimitError,
    ResourceNotFoundError,
)
from .logging_config import LoggerAdapter, get_logger

logger = get_logger(__name__)

JSON = dict[str, Any]


def _unwrap(data: Any, key: str) -> Any:
    if isinstance(data, dict) and key in data:
        return data[key]
    return data


class PostmanAPIClient:
    """Postman API client using API key authentication.

    Attributes:
        base_url: Postman API base URL.

    Example:
        >>> client = PostmanAPIClient(api_key="PMAK-...")
        >>> try:
        ...     collection = await client.get_collection("12345-abcdef")
        ... finally:
        ...     await client.close()
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 30,
        max_retries: int = 3,
    ) -> None:
        """Initialize the Postman API client.

        Args:
            api_key: Postman API key.
            base_url: Postman API base URL.
            timeout: Request timeout in seconds.
            max_retries: Maximum number of retry attempts for transient errors.

        Raises:
            ValueError: If api_key is empty.
        """
        if not api_key:
            raise ValueError("api_key is required")

        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries

        self._logger = LoggerAdapter(logger, {"base_url": self.base_url})

        # HTTP client (created lazily)
        self.client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(cls, config: Config) -> PostmanAPIClient:
        """Build a client from loaded configuration.

        Raises:
            EnvironmentVariableError: If no API key is configured.
        """
        return cls(
            api_key=config.postman.api_key or get_api_key(),
            base_url=config.postman.base_url,
            timeout=config.server.request_timeout / 1000,
            max_retries=config.server.max_retries,
        )

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={
                    "X-API-Key": self.api_key,
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            )
        return self.client

    async def execute_operation(
        self,
        path: str,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Execute an API operation.

        Timeouts and connection failures are retried with exponential
        backoff. A 429 with ``Retry-After`` is retried after that delay.

        Args:
            path: API endpoint path (e.g., "/collections/12345").
            method: HTTP method (GET, POST, PUT, DELETE, PATCH).
            params: Query parameters; ``None`` values are dropped.
            body: Request body for POST/PUT/PATCH requests.

        Returns:
            Parsed JSON response.

        Raises:
            AuthenticationError: If the API key is invalid.
            AuthorizationError: If permissions are insufficient.
            ConnectionError: If the API cannot be reached.
            APIResponseError: If the API returns an error.
            RateLimitError: If rate limit is exceeded.
            ResourceNotFoundError: If the resource is not found.
        """
        client = await self._ensure_client()
        url = urljoin(self.base_url + "/", path.lstrip("/"))
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        self._logger.debug(
            f"Executing {method} {path}",
            extra={"params": params, "has_body": body is not None},
        )

        last_error: Exception | None = None

        for attempt in range(self.max_retries + 1):
            try:
                response = await self._make_request(client, method, url, params or None, body)
                return self._parse_response(response, path)

            except (httpx.TimeoutException, httpx.ConnectError) as e:
                last_error = e
                if attempt < self.max_retries:
                    wait_time = (2**attempt) * 0.5  # Exponential backoff
                    self._logger.warning(
                        f"Request failed, retrying in {wait_time}s (attempt {attempt + 1}/{self.max_retries})",
                        extra={"error": str(e)},
                    )
                    await asyncio.sleep(wait_time)
                else:
                    raise ConnectionError(self.base_url, e) from e

            except AuthenticationError:
                raise

            except RateLimitError as e:
                if e.retry_after and attempt < self.max_retries:
                    self._logger.warning(f"Rate limited, waiting {e.retry_after}s")
                    await asyncio.sleep(e.retry_after)
                else:
                    raise

        raise ConnectionError(self.base_url, last_error)

    async def _make_request(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        params: dict[str, Any] | None,
        body: dict[str, Any] | None,
    ) -> httpx.Response:
        method = method.upper()

        if method == "GET":
            response = await client.get(url, params=params)
        elif method == "POST":
            response = await client.post(url, params=params, json=body)
        elif method == "PUT":
            response = await client.put(url, params=params, json=body)
        elif method == "DELETE":
            response = await client.delete(url, params=params)
        elif method == "PATCH":
            response = await client.patch(url, params=params, json=body)
        else:
            raise ValueError(f"Unsupported HTTP method: {method}")

        return response

    def _parse_response(self, response: httpx.Response, path: str = "") -> Any:
        """Parse and validate an API response.

        Args:
            response: HTTP response object.
            path: Original request path for error context.

        Returns:
            Parsed JSON data.

        Raises:
            AuthenticationError: If authentication failed (401).
            AuthorizationError: If authorization failed (403).
            ResourceNotFoundError: If resource not found (404).
            RateLimitError: If rate limit exceeded (429).
            APIResponseError: For other API errors.
        """
        if response.status_code == 401:
            raise AuthenticationError(
                "Invalid or expired Postman API key",
                status_code=401,
            )

        if response.status_code == 403:
            raise AuthorizationError(
                "Insufficient permissions for this operation",
                status_code=403,
            )

        if response.status_code == 404:
            raise ResourceNotFoundError(path)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(retry_after=int(retry_after) if retry_after else None)

        if response.status_code >= 400:
            try:
                error_body = response.json()
                # Postman error format: {"error": {"name": ..., "message": ...}}
                error = error_body.get("error") or {}
                if isinstance(error, dict) and error.get("message"):
                    error_message = error["message"]
                else:
                    error_message = error_body.get("message") or str(error_body)
            except (ValueError, AttributeError):
                error_message = response.text or f"HTTP {response.status_code}"

            raise APIResponseError(
                message=error_message,
                status_code=response.status_code,
                response_body=response.text,
            )

        if response.status_code == 204:
            return {"status": "success", "message": "Operation completed"}

        try:
            data = response.json()
        except ValueError as e:
            self._logger.warning(
                f"Response is not JSON: {e}",
                extra={"content_type": response.headers.get("content-type")},
            )
            return {"raw_response": response.text}

        self._logger.debug(
            "Request successful",
            extra={"status_code": response.status_code},
        )
        return data

    async def validate_connection(self) -> JSON:
        """Check the API key against ``/me``.

        Returns:
            The authenticated user.
        """
        data = await self.execute_operation("/me")
        return _unwrap(data, "user")

    # Workspaces

    async def list_workspaces(self) -> list[JSON]:
        return _unwrap(await self.execute_operation("/workspaces"), "workspaces")

    async def get_workspace(self, workspace_id: str) -> JSON:
        return _unwrap(await self.execute_operation(f"/workspaces/{workspace_id}"), "workspace")

    async def create_workspace(
        self,
        name: str,
        workspace_type: str = "personal",
        description: str | None = None,
    ) -> JSON:
        workspace: JSON = {"name": name, "type": workspace_type}
        if description is not None:
            workspace["description"] = description
        data = await self.execute_operation("/workspaces", "POST", body={"workspace": workspace})
        return _unwrap(data, "workspace")

    async def update_workspace(self, workspace_id: str, updates: JSON) -> JSON:
        data = await self.execute_operation(
            f"/workspaces/{workspace_id}", "PUT", body={"workspace": updates}
        )
        return _unwrap(data, "workspace")

    async def delete_workspace(self, workspace_id: str) -> None:
        await self.execute_operation(f"/workspaces/{workspace_id}", "DELETE")

    # Collections

    async def list_collections(self, workspace_id: str | None = None) -> list[JSON]:
        data = await self.execute_operation("/collections", params={"workspace": workspace_id})
        return _unwrap(data, "collections")

    async def get_collection(self, collection_id: str) -> JSON:
        """Fetch the full collection document (info, items, variables)."""
        data = await self.execute_operation(f"/collections/{collection_id}")
        return _unwrap(data, "collection")

    async def create_collection(
        self,
        name: str,
        description: str | None = None,
        workspace_id: str | None = None,
        items: list[JSON] | None = None,
        variables: list[JSON] | None = None,
        auth: JSON | None = None,
    ) -> JSON:
        """Create a collection, optionally with its full item tree.

        Args:
            name: Collection name.
            description: Collection description.
            workspace_id: Workspace to create the collection in.
            items: Item tree in Postman v2.1 form.
            variables: Collection variables.
            auth: Collection-level auth.

        Returns:
            The created collection summary (id, name, uid).
        """
        info: JSON = {
            "name": name,
            "schema": "https://schema.getpostman.com/json/collection/v2.1.0/collection.json",
        }
        if description:
            info["description"] = description
        collection: JSON = {"info": info, "item": items or []}
        if variables:
            collection["variable"] = variables
        if auth:
            collection["auth"] = auth

        data = await self.execute_operation(
            "/collections",
            "POST",
            params={"workspace": workspace_id},
            body={"collection": collection},
        )
        return _unwrap(data, "collection")

    async def update_collection(
        self,
        collection_id: str,
        name: str | None = None,
        description: str | None = None,
    ) -> JSON:
        """Update a collection's name and/or description, leaving items alone."""
        info: JSON = {}
        if name is not None:
            info["name"] = name
        if description is not None:
            info["description"] = description
        data = await self.execute_operation(
            f"/collections/{collection_id}", "PATCH", body={"collection": {"info": info}}
        )
        return _unwrap(data, "collection")

    async def replace_collection(self, collection_id: str, collection: JSON) -> JSON:
        """Replace a whole collection document."""
        data = await self.execute_operation(
            f"/collections/{collection_id}", "PUT", body={"collection": collection}
        )
        return _unwrap(data, "collection")

    async def delete_collection(self, collection_id: str) -> None:
        await self.execute_operation(f"/collections/{collection_id}", "DELETE")

    # Environments

    async def list_environments(self, workspace_id: str | None = None) -> list[JSON]:
        data = await self.execute_operation("/environments", params={"workspace": workspace_id})
        return _unwrap(data, "environments")

    async def get_environment(self, environment_id: str) -> JSON:
        data = await self.execute_operation(f"/environments/{environment_id}")
        return _unwrap(data, "environment")

    async def create_environment(
        self,
        name: str,
        values: list[JSON] | None = None,
        workspace_id: str | None = None,
    ) -> JSON:
        data = await self.execute_operation(
            "/environments",
            "POST",
            params={"workspace": workspace_id},
            body={"environment": {"name": name, "values": values or []}},
        )
        return _unwrap(data, "environment")

    async def update_environment(self, environment_id: str, updates: JSON) -> JSON:
        data = await self.execute_operation(
            f"/environments/{environment_id}", "PUT", body={"environment": updates}
        )
        return _unwrap(data, "environment")

    async def delete_environment(self, environment_id: str) -> None:
        await self.execute_operation(f"/environments/{environment_id}", "DELETE")

    # Requests and folders

    async def create_request(
        self,
        collection_id: str,
        request: JSON,
        folder_id: str | None = None,
    ) -> JSON:
        data = await self.execute_operation(
            f"/collections/{collection_id}/requests",
            "POST",
            params={"folder": folder_id},
            body=request,
        )
        return _unwrap(data, "data")

    async def get_request(self, collection_id: str, request_id: str) -> JSON:
        data = await self.execute_operation(f"/collections/{collection_id}/requests/{request_id}")
        return _unwrap(data, "data")

    async def update_request(self, collection_id: str, request_id: str, updates: JSON) -> JSON:
        data = await self.execute_operation(
            f"/collections/{collection_id}/requests/{request_id}", "PUT", body=updates
        )
        return _unwrap(data, "data")

    async def delete_request(self, collection_id: str, request_id: str) -> None:
        await self.execute_operation(f"/collections/{collection_id}/requests/{request_id}", "DELETE")

    async def create_folder(
        self,
        collection_id: str,
        name: str,
        description: str | None = None,
        parent_folder_id: str | None = None,
    ) -> JSON:
        folder: JSON = {"name": name}
        if description is not None:
            folder["description"] = description
        if parent_folder_id:
            folder["folder"] = parent_folder_id
        data = await self.execute_operation(
            f"/collections/{collection_id}/folders", "POST", body=folder
        )
        return _unwrap(data, "data")

    async def update_folder(self, collection_id: str, folder_id: str, updates: JSON) -> JSON:
        data = await self.execute_operation(
            f"/collections/{collection_id}/folders/{folder_id}", "PUT", body=updates
        )
        return _unwrap(data, "data")

    async def delete_folder(self, collection_id: str, folder_id: str) -> None:
        await self.execute_operation(f"/collections/{collection_id}/folders/{folder_id}", "DELETE")

    async def move_request(
        self,
        collection_id: str,
        request_id: str,
        target_folder_id: str | None = None,
    ) -> JSON:
        """Move a request into a folder, or to the collection root."""
        if target_folder_id:
            target = {"id": target_folder_id, "model": "folder"}
        else:
            target = {"id": collection_id, "model": "collection"}
        return await self.execute_operation(
            "/collection-requests-transfers",
            "POST",
            body={
                "ids": [request_id],
                "mode": "move",
                "target": target,
                "location": {"position": "end"},
            },
        )

    # Mock servers

    async def list_mock_servers(self) -> list[JSON]:
        return _unwrap(await self.execute_operation("/mocks"), "mocks")

    async def get_mock_server(self, mock_id: str) -> JSON:
        return _unwrap(await self.execute_operation(f"/mocks/{mock_id}"), "mock")

    async def create_mock_server(self, mock: JSON) -> JSON:
        """Create a mock server.

        Args:
            mock: Mock definition (``name``, ``collection``, ``environment``,
                ``private``, ``versionTag``, ``config``).
        """
        data = await self.execute_operation("/mocks", "POST", body={"mock": mock})
        return _unwrap(data, "mock")

    async def update_mock_server(self, mock_id: str, updates: JSON) -> JSON:
        data = await self.execute_operation(f"/mocks/{mock_id}", "PUT", body={"mock": updates})
        return _unwrap(data, "mock")

    async def delete_mock_server(self, mock_id: str) -> None:
        await self.execute_operation(f"/mocks/{mock_id}", "DELETE")

    async def get_mock_server_call_logs(self, mock_id: str, limit: int | None = None) -> list[JSON]:
        data = await self.execute_operation(f"/mocks/{mock_id}/call-logs", params={"limit": limit})
        return _unwrap(data, "call-logs")

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self.client:
            await self.client.aclose()
            self.client = None
            self._logger.debug("HTTP client closed")

    async def __aenter__(self) -> PostmanAPIClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
