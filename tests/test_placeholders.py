"""Tests for parameter placeholder values."""

import pytest

from postman_mcp.placeholders import DEFAULT_VALUE, description_for, value_for


class TestValueFor:
    """Tests for value_for."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("userId", "usr_123456"),
            ("product_id", "prod_789012"),
            ("orderId", "ord_345678"),
            ("id", "12345"),
            ("contactEmail", "user@example.com"),
            ("firstName", "John Doe"),
            ("username", "johndoe"),
            ("status", "active"),
            ("page", "1"),
            ("limit", "10"),
            ("size", "10"),
            ("offset", "0"),
            ("q", "example"),
            ("searchTerm", "example"),
            ("startDate", "2024-01-01"),
            ("startTime", "2024-01-01T00:00:00Z"),
            ("isEnabled", "true"),
        ],
    )
    def test_rules(self, name, expected):
        """Test each name rule yields its placeholder."""
        assert value_for(name) == expected

    def test_id_rules_checked_first(self):
        """Test an id-bearing name never falls through to later rules."""
        assert value_for("statusId") == "12345"

    def test_default(self):
        """Test unknown names get the default placeholder."""
        assert value_for("colour") == DEFAULT_VALUE


class TestDescriptionFor:
    """Tests for description_for."""

    def test_identifier(self):
        """Test id names keep their original spelling in the description."""
        assert description_for("userId") == "Unique identifier for userId"

    def test_pagination(self):
        """Test pagination descriptions."""
        assert description_for("page") == "Page number for pagination"
        assert description_for("limit") == "Number of items to return"
        assert description_for("offset") == "Number of items to skip"

    def test_sort_before_order(self):
        """Test the first matching rule wins."""
        assert description_for("sort_order") == "Field to sort by"
        assert description_for("order") == "Sort order (asc/desc)"

    def test_fallback(self):
        """Test unknown names get a generic description."""
        assert description_for("colour") == "Parameter: colour"
