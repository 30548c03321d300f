"""Tests for the collection data model."""

import pytest

from postman_mcp.models import (
    Collection,
    ExportFormat,
    FolderItem,
    ImportResult,
    RequestItem,
    Url,
    description_text,
)


class TestCollectionParsing:
    """Tests for Collection.from_api."""

    def test_items_tagged(self, sample_collection):
        """Test requests and folders are told apart on parse."""
        folder, health = sample_collection.item

        assert isinstance(folder, FolderItem)
        assert isinstance(health, RequestItem)
        assert all(isinstance(child, RequestItem) for child in folder.item)

    def test_envelope_unwrapped(self, sample_collection_data):
        """Test the API's collection envelope is removed."""
        collection = Collection.from_api({"collection": sample_collection_data})
        assert collection.name == "Sample API"

    def test_string_request_shorthand(self, sample_collection):
        """Test a bare URL request means GET."""
        health = sample_collection.item[1]

        assert health.request.method == "GET"
        assert health.request.url == "https://api.example.com/health"

    def test_method_upper_cased(self):
        """Test methods are normalised."""
        item = RequestItem.model_validate({"name": "x", "request": {"method": "post", "url": "/x"}})
        assert item.request.method == "POST"

    def test_kind_not_serialized(self, sample_collection):
        """Test the tag never appears in output."""
        dumped = sample_collection.to_dict()

        assert "kind" not in dumped["item"][0]
        assert "kind" not in dumped["item"][0]["item"][0]

    def test_unknown_keys_kept(self):
        """Test extra keys survive a round trip."""
        collection = Collection.from_api(
            {"info": {"name": "X", "updatedAt": "abc"}, "item": [], "event": [{"listen": "test"}]}
        )

        dumped = collection.to_dict()
        assert dumped["event"] == [{"listen": "test"}]
        assert dumped["info"]["updatedAt"] == "abc"

    def test_file_mode_body(self):
        """Test binary uploads saved by the Postman app parse and round trip."""
        item = RequestItem.model_validate(
            {
                "name": "Upload",
                "request": {"method": "POST", "url": "/f", "body": {"mode": "file", "file": {"src": "a.bin"}}},
            }
        )

        assert item.request.body.mode == "file"
        assert item.to_dict()["request"]["body"] == {"mode": "file", "file": {"src": "a.bin"}}

    def test_empty_body_dropped(self):
        """Test an empty body object means no body."""
        item = RequestItem.model_validate({"name": "x", "request": {"method": "GET", "url": "/x", "body": {}}})
        assert item.request.body is None

    def test_body_without_mode(self):
        """Test a body missing its mode still parses."""
        item = RequestItem.model_validate(
            {"name": "x", "request": {"method": "POST", "url": "/x", "body": {"raw": "hello"}}}
        )

        assert item.request.body.mode is None
        assert item.request.body.raw == "hello"

    def test_non_string_values(self):
        """Test numeric and boolean values are stored as strings."""
        url = Url.model_validate({"raw": "/x", "query": [{"key": "n", "value": 5}, {"key": "b", "value": True}]})
        assert [q.value for q in url.query] == ["5", "true"]


class TestCollectionTraversal:
    """Tests for counting and walking."""

    def test_count_items(self, sample_collection):
        """Test folders and requests are both counted."""
        assert sample_collection.count_items() == 5

    def test_iter_requests_order(self, sample_collection):
        """Test requests are yielded depth-first in document order."""
        assert [r.name for r in sample_collection.iter_requests()] == [
            "List users",
            "Create user",
            "Get user",
            "Health",
        ]


class TestUrl:
    """Tests for Url.to_string."""

    def test_raw_preferred(self):
        """Test raw is returned when present."""
        assert Url(raw="https://x.test/a").to_string() == "https://x.test/a"

    def test_rebuilt_from_parts(self):
        """Test the URL is rebuilt when raw is empty."""
        url = Url.model_validate(
            {
                "protocol": "https",
                "host": ["api", "example", "com"],
                "port": "8443",
                "path": ["v1", "users"],
                "query": [{"key": "page", "value": "2"}],
            }
        )

        assert url.to_string() == "https://api.example.com:8443/v1/users?page=2"


class TestHelpers:
    """Tests for small model helpers."""

    def test_description_text(self):
        """Test both description shapes are flattened."""
        assert description_text("plain") == "plain"
        assert description_text({"content": "rich", "type": "text/markdown"}) == "rich"
        assert description_text(None) == ""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("native", ExportFormat.NATIVE),
            ("postman", ExportFormat.NATIVE),
            ("Insomnia", ExportFormat.ALTERNATE),
            ("openapi", ExportFormat.API_DESCRIPTION),
            ("api-description", ExportFormat.API_DESCRIPTION),
        ],
    )
    def test_format_aliases(self, name, expected):
        """Test canonical names and aliases resolve."""
        assert ExportFormat(name) is expected

    def test_unknown_format(self):
        """Test unknown names are rejected."""
        with pytest.raises(ValueError):
            ExportFormat("har")

    def test_result_camel_case(self):
        """Test result models serialize with camelCase keys."""
        result = ImportResult(success=True, collection_id="c1", skipped_items=["A"])

        assert result.to_dict() == {
            "success": True,
            "collectionId": "c1",
            "errors": [],
            "warnings": [],
            "skippedItems": ["A"],
        }
