# competitor_email/features/email_generation/__init__.py
"""Competitor email generation feature module."""

from competitor_email.features.email_generation.router import router
from competitor_email.features.email_generation.schemas import (
    GeneratedEmail,
    GenerateEmailResponse,
)
from competitor_email.features.email_generation.service import EmailGenerationService

__all__ = [
    "router",
    "GeneratedEmail",
    "GenerateEmailResponse",
    "EmailGenerationService",
]
