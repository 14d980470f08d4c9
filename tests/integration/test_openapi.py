"""
Integration tests for OpenAPI documentation.

Verifies OpenAPI schema is correctly generated for all endpoints.
The lifespan is not entered, so no database is required.
"""

import pytest
from fastapi.testclient import TestClient

from src.api.main import app


@pytest.fixture
def client() -> TestClient:
    """Create test client for the application."""
    return TestClient(app)


@pytest.fixture
def schema(client: TestClient) -> dict:
    response = client.get("/openapi.json")
    assert response.status_code == 200
    return response.json()


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    def test_openapi_title_and_description(self, schema: dict) -> None:
        """OpenAPI schema has correct title and description."""
        assert schema["info"]["title"] == "farcaster-names"
        assert "farcaster.celo" in schema["info"]["description"]
        assert schema["info"]["version"] == "0.1.0"

    @pytest.mark.parametrize(
        "path, method",
        [
            ("/v1/frame", "get"),
            ("/v1/frame", "post"),
            ("/v1/register", "post"),
            ("/v1/gas-estimate", "get"),
            ("/v1/domains/suggestions", "get"),
            ("/v1/metadata/{domain}", "get"),
            ("/health", "get"),
        ],
    )
    def test_endpoint_in_schema(self, schema: dict, path: str, method: str) -> None:
        """Every endpoint is documented."""
        assert method in schema["paths"][path]

    def test_register_responses_documented(self, schema: dict) -> None:
        """Registration error statuses are documented."""
        responses = schema["paths"]["/v1/register"]["post"]["responses"]
        assert {"200", "400", "409", "429", "500"} <= set(responses)

    def test_register_request_schema(self, schema: dict) -> None:
        """RegisterDomainRequest uses camelCase wire names."""
        props = schema["components"]["schemas"]["RegisterDomainRequest"]["properties"]
        assert {"domain", "farcasterUsername", "fid", "walletAddress", "metadataURI"} <= set(
            props
        )

    def test_endpoints_tagged_with_v1(self, schema: dict) -> None:
        """v1 endpoints carry the v1 tag."""
        assert "v1" in [t["name"] for t in schema.get("tags", [])]
        assert "v1" in schema["paths"]["/v1/register"]["post"]["tags"]


class TestSwaggerUI:
    """Tests for Swagger UI availability."""

    def test_docs_endpoint_accessible(self, client: TestClient) -> None:
        """Swagger UI is accessible at /docs."""
        response = client.get("/docs")
        assert response.status_code == 200
        assert "swagger" in response.text.lower()
