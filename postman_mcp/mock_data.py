"""Example request/response generation for mock servers.

For every request in a collection the :class:`ExampleGenerator` builds one
success example, shaped by method and URL keyword, plus a fixed set of
error examples. In realistic mode response values are Postman dynamic
variables (``{{$randomUUID}}``, ``{{$randomFullName}}``, ...) which the mock
server expands on each call; otherwise fixed literals are used.

Example:
    >>> generator = ExampleGenerator()
    >>> examples = generator.generate_examples_for(item, realistic=False)
    >>> [e.response.code for e in examples]
    [200, 400, 401, 404, 500]
"""

from __future__ import annotations

import json
from collections.abc import Callable
from http import HTTPStatus
from typing import Any
from urllib.parse import urlencode

from .logging_config import get_logger
from .models import (
    WRITE_METHODS,
    Collection,
    ExampleRequest,
    ExampleResponse,
    FolderItem,
    Body,
    Header,
    MockExample,
    RequestItem,
)
from .synthesizer import RequestSynthesizer

logger = get_logger(__name__)

Entity = Callable[[bool], dict[str, Any]]


def _user(realistic: bool) -> dict[str, Any]:
    if realistic:
        return {
            "id": "{{$randomUUID}}",
            "name": "{{$randomFullName}}",
            "email": "{{$randomEmail}}",
            "username": "{{$randomUserName}}",
            "avatar": "{{$randomAvatarImage}}",
            "status": "active",
            "createdAt": "{{$isoTimestamp}}",
        }
    return {
        "id": "usr_123456",
        "name": "John Doe",
        "email": "john.doe@example.com",
        "username": "johndoe",
        "avatar": "https://example.com/avatars/johndoe.png",
        "status": "active",
        "createdAt": "2024-01-01T00:00:00Z",
    }


def _product(realistic: bool) -> dict[str, Any]:
    if realistic:
        return {
            "id": "{{$randomUUID}}",
            "name": "{{$randomProductName}}",
            "description": "{{$randomLoremSentence}}",
            "price": "{{$randomPrice}}",
            "category": "{{$randomProductMaterial}}",
            "inStock": "{{$randomBoolean}}",
            "createdAt": "{{$isoTimestamp}}",
        }
    return {
        "id": "prod_789012",
        "name": "Sample Product",
        "description": "A sample product for testing",
        "price": 29.99,
        "category": "general",
        "inStock": True,
        "createdAt": "2024-01-01T00:00:00Z",
    }


def _order(realistic: bool) -> dict[str, Any]:
    if realistic:
        return {
            "id": "{{$randomUUID}}",
            "customerId": "{{$randomUUID}}",
            "total": "{{$randomPrice}}",
            "currency": "{{$randomCurrencyCode}}",
            "status": "pending",
            "items": [{"productId": "{{$randomUUID}}", "quantity": "{{$randomInt}}"}],
            "createdAt": "{{$isoTimestamp}}",
        }
    return {
        "id": "ord_345678",
        "customerId": "usr_123456",
        "total": 59.98,
        "currency": "USD",
        "status": "pending",
        "items": [{"productId": "prod_789012", "quantity": 2}],
        "createdAt": "2024-01-01T00:00:00Z",
    }


def _generic(realistic: bool) -> dict[str, Any]:
    if realistic:
        return {
            "id": "{{$randomUUID}}",
            "name": "{{$randomWords}}",
            "description": "{{$randomLoremSentence}}",
            "status": "active",
            "createdAt": "{{$isoTimestamp}}",
        }
    return {
        "id": "12345",
        "name": "Sample Item",
        "description": "This is a sample item",
        "status": "active",
        "createdAt": "2024-01-01T00:00:00Z",
    }


# (URL keywords, entity shape); first match wins.
_ENTITY_RULES: tuple[tuple[tuple[str, ...], Entity], ...] = (
    (("/users", "/user"), _user),
    (("/products", "/product"), _product),
    (("/orders", "/order"), _order),
)

# (code, error code, message); 404 is dropped for POST.
_ERROR_CASES: tuple[tuple[int, str, str], ...] = (
    (400, "BAD_REQUEST", "The request was invalid or cannot be served"),
    (401, "UNAUTHORIZED", "Authentication credentials are missing or invalid"),
    (404, "NOT_FOUND", "The requested resource was not found"),
    (500, "INTERNAL_SERVER_ERROR", "An unexpected error occurred on the server"),
)


def _entity_for(url: str) -> Entity | None:
    for keywords, entity in _ENTITY_RULES:
        if any(keyword in url for keyword in keywords):
            return entity
    return None


def _timestamp(realistic: bool) -> str:
    return "{{$isoTimestamp}}" if realistic else "2024-01-01T00:00:00Z"


def _body_text(body: Body) -> str | None:
    """Render a declared body as the text stored on a saved example."""
    if body.mode == "urlencoded":
        return urlencode([(row.key, row.value or "") for row in body.urlencoded or [] if not row.disabled])
    if body.mode == "formdata":
        return "\n".join(f"{row.key}={row.value or ''}" for row in body.formdata or [] if not row.disabled)
    if body.mode == "graphql":
        return json.dumps(body.graphql or {})
    return body.raw


class ExampleGenerator:
    """Build mock examples for collection requests.

    Args:
        synthesizer: Used for request headers and bodies when a request
            declares none.
    """

    def __init__(self, synthesizer: RequestSynthesizer | None = None) -> None:
        self.synthesizer = synthesizer or RequestSynthesizer()

    def generate_examples_for(
        self,
        request_item: RequestItem,
        realistic: bool = True,
        include_errors: bool = True,
    ) -> list[MockExample]:
        """Generate one success example and, optionally, error examples.

        Args:
            request_item: Request to build examples for.
            realistic: Use dynamic variables instead of literal values.
            include_errors: Append 400/401/404/500 examples (no 404 for POST).

        Returns:
            Examples, success first.
        """
        captured = self._capture_request(request_item)
        method = captured.method

        examples = [
            MockExample(
                name=f"{request_item.name} - Success",
                request=captured,
                response=self._success_response(method, captured.url, realistic),
            )
        ]

        if include_errors:
            for code, error_code, message in _ERROR_CASES:
                if code == 404 and method == "POST":
                    continue
                phrase = HTTPStatus(code).phrase
                examples.append(
                    MockExample(
                        name=f"{request_item.name} - {phrase} ({code})",
                        request=captured,
                        response=self._error_response(code, error_code, message, realistic),
                    )
                )
        return examples

    def _capture_request(self, request_item: RequestItem) -> ExampleRequest:
        details = request_item.request
        method = details.method

        body: str | None = None
        if details.body is not None:
            body = _body_text(details.body)
        elif method in WRITE_METHODS:
            generated = self.synthesizer.body_for(method)
            body = _body_text(generated) if generated is not None else None

        headers = list(details.header or [])
        if not headers:
            headers = self.synthesizer.headers_for(method, body is not None)

        return ExampleRequest(method=method, url=details.url_string, headers=headers, body=body)

    def _success_response(self, method: str, url: str, realistic: bool) -> ExampleResponse:
        """GET on a known resource returns that entity; any other GET returns a paginated list."""
        if method == "DELETE":
            return ExampleResponse(code=204, status=HTTPStatus(204).phrase, body="", language="text")

        matched = _entity_for(url)
        entity = matched or _generic
        if method == "POST":
            code = 201
            payload = {
                "message": "Resource created successfully",
                "data": entity(realistic),
            }
        elif method in ("PUT", "PATCH"):
            code = 200
            payload = {
                "message": "Resource updated successfully",
                "data": {**entity(realistic), "updatedAt": _timestamp(realistic)},
            }
        elif matched is not None:
            code = 200
            payload = {"data": entity(realistic)}
        else:
            code = 200
            payload = {
                "data": [entity(realistic)],
                "pagination": {"page": 1, "limit": 10, "total": 1, "totalPages": 1},
            }

        return ExampleResponse(
            code=code,
            status=HTTPStatus(code).phrase,
            headers=self._response_headers(realistic),
            body=json.dumps(payload, indent=2),
        )

    def _error_response(
        self,
        code: int,
        error_code: str,
        message: str,
        realistic: bool,
    ) -> ExampleResponse:
        payload = {
            "error": {
                "code": error_code,
                "message": message,
                "status": code,
                "timestamp": _timestamp(realistic),
                "requestId": "{{$randomUUID}}" if realistic else "req_000000",
            }
        }
        return ExampleResponse(
            code=code,
            status=HTTPStatus(code).phrase,
            headers=self._response_headers(realistic),
            body=json.dumps(payload, indent=2),
        )

    @staticmethod
    def _response_headers(realistic: bool) -> list[Header]:
        return [
            Header(key="Content-Type", value="application/json"),
            Header(key="X-Request-Id", value="{{$randomUUID}}" if realistic else "req_000000"),
        ]

    def attach_examples(
        self,
        collection: Collection,
        realistic: bool = True,
        include_errors: bool = True,
    ) -> tuple[Collection, int]:
        """Return a copy of the collection with examples saved on every request.

        Existing saved responses are kept; generated ones are appended.

        Returns:
            The new collection and the number of examples generated.
        """
        counter = [0]
        items = self._attach(collection.item, realistic, include_errors, counter)
        return collection.model_copy(update={"item": items}), counter[0]

    def _attach(
        self,
        items: list[RequestItem | FolderItem],
        realistic: bool,
        include_errors: bool,
        counter: list[int],
    ) -> list[RequestItem | FolderItem]:
        attached: list[RequestItem | FolderItem] = []
        for item in items:
            if item.kind == "folder":
                children = self._attach(item.item, realistic, include_errors, counter)
                attached.append(item.model_copy(update={"item": children}))
                continue
            examples = self.generate_examples_for(item, realistic, include_errors)
            counter[0] += len(examples)
            responses = list(item.response or []) + [e.to_postman_response() for e in examples]
            attached.append(item.model_copy(update={"response": responses}))
        return attached


async def create_mock_server_with_examples(
    client: Any,
    collection_id: str,
    name: str,
    environment_id: str | None = None,
    private: bool | None = None,
    generate_realistic_data: bool = True,
    include_error_responses: bool = True,
    response_delay: str | None = None,
    generator: ExampleGenerator | None = None,
) -> dict[str, Any]:
    """Generate examples for a collection, save them, and mock the collection.

    The examples are stored on the collection with ``PUT /collections/{id}``
    before the mock server is created, so the mock serves them right away.

    Args:
        client: Postman API client.
        collection_id: Collection to enrich and mock.
        name: Mock server name.
        environment_id: Optional environment for the mock.
        private: Whether the mock requires an API key.
        generate_realistic_data: Use dynamic variables in responses.
        include_error_responses: Also save 400/401/404/500 examples.
        response_delay: Delay preset (``low``, ``medium`` or ``high``).
        generator: Example generator; a default one is built when omitted.

    Returns:
        ``{"mockServer", "examplesGenerated", "summary"}``.
    """
    generator = generator or ExampleGenerator()

    collection = Collection.from_api(await client.get_collection(collection_id))
    enriched, count = generator.attach_examples(
        collection, generate_realistic_data, include_error_responses
    )
    logger.info(
        f"Generated {count} examples for collection {collection_id}",
        extra={"collection_id": collection_id},
    )
    await client.replace_collection(collection_id, enriched.to_dict())

    mock: dict[str, Any] = {"name": name, "collection": collection_id}
    if environment_id:
        mock["environment"] = environment_id
    if private is not None:
        mock["private"] = private
    if response_delay:
        mock["config"] = {"delay": {"type": "fixed", "preset": response_delay}}

    mock_server = await client.create_mock_server(mock)

    request_count = sum(1 for _ in enriched.iter_requests())
    summary = "\n".join(
        [
            f"Generated {count} examples for {request_count} requests in '{collection.name}'",
            f"Realistic data: {'enabled' if generate_realistic_data else 'disabled'}",
            f"Error responses: {'included' if include_error_responses else 'excluded'}",
            f"Mock URL: {(mock_server or {}).get('mockUrl', 'n/a')}",
        ]
    )
    return {"mockServer": mock_server, "examplesGenerated": count, "summary": summary}
