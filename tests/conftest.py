import os

# Required settings must exist before the application module is imported
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")
os.environ.setdefault("ENVIRONMENT", "production")

import pytest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from competitor_email.db.models import KnowledgeChunk, SignalsRecord
from competitor_email.features.email_generation.dependencies import (
    get_intelligence_store,
    get_llm_client,
)
from competitor_email.main import app


@pytest.fixture
def signals_record() -> SignalsRecord:
    return SignalsRecord.from_document(
        {
            "org_id": "org_1",
            "entity_id": "comp_9",
            "entity_type": "competitor",
            "signals": {
                "compliance_mentions": 3,
                "pricing_mentions": 1,
                "product_mentions": 5,
            },
        }
    )


@pytest.fixture
def knowledge_chunks() -> list[KnowledgeChunk]:
    return [
        KnowledgeChunk(content="Comp9 recently announced ISO/IEC 27001 compliance work."),
        KnowledgeChunk(content="Their pricing page lists three tiers."),
    ]


@pytest.fixture
def mock_store(signals_record, knowledge_chunks):
    """Intelligence store returning the example signals and two chunks."""
    store = MagicMock()
    store.find_signals = AsyncMock(return_value=signals_record)
    store.find_knowledge_chunks = AsyncMock(return_value=knowledge_chunks)
    store.ping = AsyncMock(return_value=True)
    return store


@pytest.fixture
def mock_llm_client():
    """LLM client answering the body call, then the subject call."""
    llm = MagicMock()
    llm.complete = AsyncMock(
        side_effect=[
            "  Hi there,\n\nWe noticed you're using comp_9. Happy to chat.\n\nBest  ",
            '"Security without the headaches."',
        ]
    )
    return llm


@pytest.fixture
def client(mock_store, mock_llm_client):
    """
    A test client with the store and LLM client replaced.
    Lifespan is not run, so no real connections are opened.
    """
    app.dependency_overrides[get_intelligence_store] = lambda: mock_store
    app.dependency_overrides[get_llm_client] = lambda: mock_llm_client
    yield TestClient(app)
    app.dependency_overrides.clear()
