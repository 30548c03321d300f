"""Tests for collection variable scanning and environment templates."""

from postman_mcp.models import Collection
from postman_mcp.variables import (
    environment_description_for,
    environment_value_for,
    environment_variables_for,
    extract_variables,
    is_secret,
)


class TestExtractVariables:
    """Tests for extract_variables."""

    def test_nested_document(self):
        """Test references are found anywhere in the structure."""
        document = {
            "url": "{{base_url}}/users/{{user_id}}",
            "header": [{"key": "Authorization", "value": "Bearer {{token}}"}],
            "nested": [("{{a}}", {"deeper": "x{{b}}y"})],
            "number": 3,
        }

        assert extract_variables(document) == {"base_url", "user_id", "token", "a", "b"}

    def test_models(self, sample_collection):
        """Test pydantic models are scanned through their dump."""
        assert extract_variables(sample_collection) == {"base_url"}

    def test_idempotent(self, sample_collection):
        """Test scanning twice gives the same result."""
        assert extract_variables(sample_collection) == extract_variables(sample_collection)

    def test_no_references(self):
        """Test an empty set when nothing is referenced."""
        assert extract_variables({"url": "https://example.test"}) == set()


class TestEnvironmentRules:
    """Tests for the per-name environment rules."""

    def test_values(self):
        """Test placeholder values by name."""
        assert environment_value_for("base_url") == "https://api.example.com"
        assert environment_value_for("apiKey") == "your_api_key_here"
        assert environment_value_for("username") == "demo_user"
        assert environment_value_for("password") == "demo_password"
        assert environment_value_for("api_version") == "v1"
        assert environment_value_for("port") == "443"
        assert environment_value_for("tenant") == "sample_value"

    def test_secrets(self):
        """Test secrecy is inferred from the name."""
        assert is_secret("access_token")
        assert is_secret("API_KEY")
        assert is_secret("client_secret")
        assert not is_secret("base_url")

    def test_descriptions(self):
        """Test descriptions by name."""
        assert environment_description_for("host") == "Base URL for the API"
        assert environment_description_for("token") == "Authentication token"
        assert environment_description_for("tenant") == "Environment variable: tenant"


class TestEnvironmentVariablesFor:
    """Tests for environment_variables_for."""

    def test_sorted_and_typed(self):
        """Test variables are sorted and secrets are marked."""
        document = {"url": "{{base_url}}/x", "header": "{{access_token}}"}

        variables = environment_variables_for(document)

        assert [v.key for v in variables] == ["access_token", "base_url"]
        assert variables[0].type == "secret"
        assert variables[1].type == "default"
        assert variables[1].value == "https://api.example.com"

    def test_dynamic_variables_skipped(self):
        """Test Postman dynamic variables are left out."""
        document = {"body": '{"id": "{{$randomUUID}}", "owner": "{{owner}}"}'}

        assert [v.key for v in environment_variables_for(document)] == ["owner"]

    def test_collection(self, sample_collection_data):
        """Test a parsed collection yields its variables."""
        collection = Collection.from_api(sample_collection_data)

        assert [v.key for v in environment_variables_for(collection)] == ["base_url"]
