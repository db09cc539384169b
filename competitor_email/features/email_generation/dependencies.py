# competitor_email/features/email_generation/dependencies.py
"""FastAPI dependency providers. Clients are created in the app lifespan and live on app.state."""

from fastapi import Depends, Request

from competitor_email.core.llm_client import LLMClient
from competitor_email.db.intelligence_store import IntelligenceStore
from competitor_email.features.email_generation.service import EmailGenerationService


def get_intelligence_store(request: Request) -> IntelligenceStore:
    return request.app.state.intelligence_store


def get_llm_client(request: Request) -> LLMClient:
    return request.app.state.llm_client


def get_email_generation_service(
    llm_client: LLMClient = Depends(get_llm_client),
) -> EmailGenerationService:
    return EmailGenerationService(llm_client)
