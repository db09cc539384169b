# tests/api/test_generate_email_api.py
"""
Integration tests for the generate-email endpoint.
"""

import logging

import pytest
from unittest.mock import AsyncMock

from competitor_email.core.config import Settings, get_settings
from competitor_email.core.exceptions import GenerationError, RetrievalError
from competitor_email.main import app

URL = "/api/generate-email"
VALID_BODY = {"org_id": "org_1", "competitor_id": "comp_9"}


def _assert_cors(response):
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type, Authorization"


@pytest.fixture
def development_mode():
    app.dependency_overrides[get_settings] = lambda: Settings(ENVIRONMENT="development")
    yield
    app.dependency_overrides.pop(get_settings, None)


class TestMethods:
    """Method handling and pre-flight."""

    def test_options_is_a_noop(self, client, mock_store, mock_llm_client):
        response = client.request("OPTIONS", URL, json={"org_id": ""})

        assert response.status_code == 200
        assert response.content == b""
        _assert_cors(response)
        mock_store.find_signals.assert_not_called()
        mock_llm_client.complete.assert_not_called()

    @pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE"])
    def test_other_methods_not_allowed(self, client, method, mock_store):
        response = client.request(method, URL)

        assert response.status_code == 405
        assert response.json() == {
            "error": "Method not allowed",
            "message": "This endpoint only accepts POST requests",
        }
        _assert_cors(response)
        mock_store.find_signals.assert_not_called()


class TestValidation:
    """Missing or empty identifiers."""

    def test_missing_competitor_id(self, client, mock_store):
        response = client.post(URL, json={"org_id": "org_1"})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Missing required fields"
        assert data["message"] == "Both org_id and competitor_id are required"
        assert data["received"] == {"org_id": "org_1", "competitor_id": None}
        mock_store.find_signals.assert_not_called()

    def test_empty_org_id_is_echoed(self, client):
        response = client.post(URL, json={"org_id": "", "competitor_id": "comp_9"})

        assert response.status_code == 400
        assert response.json()["received"] == {"org_id": "", "competitor_id": "comp_9"}

    def test_empty_body(self, client):
        response = client.post(URL)

        assert response.status_code == 400
        assert response.json()["received"] == {"org_id": None, "competitor_id": None}

    def test_non_json_body(self, client):
        response = client.post(
            URL, content=b"org_id=org_1", headers={"Content-Type": "text/plain"}
        )

        assert response.status_code == 400

    def test_json_array_body(self, client, mock_store):
        response = client.post(URL, json=["org_1", "comp_9"])

        assert response.status_code == 400
        assert response.json()["received"] == {"org_id": None, "competitor_id": None}
        mock_store.find_signals.assert_not_called()

    def test_extra_fields_are_ignored(self, client):
        response = client.post(URL, json={**VALID_BODY, "campaign": "q3"})

        assert response.status_code == 200

    def test_non_string_identifier(self, client):
        response = client.post(URL, json={"org_id": 42, "competitor_id": "comp_9"})

        assert response.status_code == 400
        assert response.json()["received"]["org_id"] == 42

    def test_oversized_body(self, client):
        app.dependency_overrides[get_settings] = lambda: Settings(MAX_REQUEST_BODY_BYTES=16)
        try:
            response = client.post(URL, json={**VALID_BODY, "padding": "x" * 64})
        finally:
            app.dependency_overrides.pop(get_settings, None)

        assert response.status_code == 413
        assert response.json()["error"] == "Payload too large"


class TestRetrieval:
    """Signals and knowledge chunk lookups."""

    def test_no_signals_is_404(self, client, mock_store, mock_llm_client):
        mock_store.find_signals = AsyncMock(return_value=None)

        response = client.post(URL, json=VALID_BODY)

        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "No signals found"
        assert "org_1" in data["message"]
        assert "comp_9" in data["message"]
        mock_store.find_knowledge_chunks.assert_not_called()
        mock_llm_client.complete.assert_not_called()

    def test_zero_chunks_still_generates(self, client, mock_store, caplog):
        mock_store.find_knowledge_chunks = AsyncMock(return_value=[])

        with caplog.at_level(logging.WARNING):
            response = client.post(URL, json=VALID_BODY)

        assert response.status_code == 200
        assert response.json()["metadata"]["knowledge_chunks_count"] == 0
        assert "No knowledge chunks found, proceeding with signals only" in caplog.text

    def test_chunks_requested_with_limit_five(self, client, mock_store):
        client.post(URL, json=VALID_BODY)

        mock_store.find_signals.assert_awaited_once_with("org_1", "comp_9")
        mock_store.find_knowledge_chunks.assert_awaited_once_with(
            "org_1", "comp_9", limit=5
        )

    def test_retrieval_failure_is_generic_500(self, client, mock_store):
        mock_store.find_signals = AsyncMock(
            side_effect=RetrievalError("signals lookup", message="connection refused")
        )

        response = client.post(URL, json=VALID_BODY)

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Internal server error"
        assert data["message"] == "Failed to retrieve competitor intelligence"
        assert "connection refused" not in response.text
        assert "stack" not in data


class TestGeneration:
    """End-to-end generation through the real service with a mocked LLM."""

    def test_success(self, client):
        response = client.post(URL, json=VALID_BODY)

        assert response.status_code == 200
        _assert_cors(response)
        data = response.json()
        assert data["success"] is True

        email = data["email"]
        assert email["tone"] == "conversational"
        assert email["subject"] == "Security without the headaches"
        assert email["word_count"] == len(email["body"].split())

        metadata = data["metadata"]
        assert metadata["org_id"] == "org_1"
        assert metadata["competitor_id"] == "comp_9"
        assert metadata["knowledge_chunks_count"] == 2
        assert metadata["signals_used"] == {
            "compliance_mentions": 3,
            "pricing_mentions": 1,
            "product_mentions": 5,
        }
        assert "T" in metadata["generated_at"]

    def test_body_failure_is_500_without_email(self, client, mock_llm_client):
        mock_llm_client.complete = AsyncMock(side_effect=GenerationError("rate_limit_error"))

        response = client.post(URL, json=VALID_BODY)

        assert response.status_code == 500
        data = response.json()
        assert data["message"] == "Failed to generate email: rate_limit_error"
        assert "email" not in data
        assert "stack" not in data

    def test_subject_failure_is_500_without_email(self, client, mock_llm_client):
        mock_llm_client.complete = AsyncMock(
            side_effect=["Body text.", GenerationError("overloaded_error")]
        )

        response = client.post(URL, json=VALID_BODY)

        assert response.status_code == 500
        data = response.json()
        assert data["message"].startswith("Failed to generate email")
        assert "email" not in data

    def test_unexpected_error_hides_details(self, client, mock_store):
        mock_store.find_knowledge_chunks = AsyncMock(side_effect=KeyError("content"))

        response = client.post(URL, json=VALID_BODY)

        assert response.status_code == 500
        assert response.json()["message"] == "An unexpected error occurred"


class TestDevelopmentMode:
    def test_stack_included(self, client, mock_llm_client, development_mode):
        mock_llm_client.complete = AsyncMock(side_effect=GenerationError("boom"))

        response = client.post(URL, json=VALID_BODY)

        assert response.status_code == 500
        data = response.json()
        assert "Traceback" in data["stack"]
        assert "EmailGenerationError" in data["stack"]

    def test_unexpected_error_message_exposed(self, client, mock_store, development_mode):
        mock_store.find_signals = AsyncMock(side_effect=RuntimeError("cursor exploded"))

        response = client.post(URL, json=VALID_BODY)

        assert response.json()["message"] == "cursor exploded"


class TestHealth:
    def test_store_reachable(self, client, mock_store):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "intelligence_store": "reachable"}
        mock_store.ping.assert_awaited_once()

    def test_store_unreachable(self, client, mock_store):
        mock_store.ping = AsyncMock(return_value=False)

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json() == {"status": "degraded", "intelligence_store": "unreachable"}
