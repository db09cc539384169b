# competitor_email/features/email_generation/schemas.py
"""API schemas for competitor email generation."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


def _is_present(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class GenerateEmailRequest(BaseModel):
    """
    Request body. Fields are lenient so missing or mistyped identifiers
    are echoed back in the 400 body instead of failing schema validation.
    """

    model_config = ConfigDict(extra="ignore")

    org_id: Any = Field(None, description="Organization identifier")
    competitor_id: Any = Field(None, description="Competitor identifier")

    def has_required_fields(self) -> bool:
        """Both identifiers are non-empty strings."""
        return _is_present(self.org_id) and _is_present(self.competitor_id)


class GeneratedEmail(BaseModel):
    """A generated email. Created once per request, never persisted."""

    subject: str = Field(..., description="Short subject, no quotes or terminal punctuation")
    body: str = Field(..., description="Plain text body, target 150 words or fewer")
    tone: str = Field(..., description="Fixed descriptive tone tag")
    word_count: int = Field(..., description="Whitespace-delimited tokens in body")


class EmailMetadata(BaseModel):
    generated_at: datetime
    competitor_id: str
    org_id: str
    signals_used: Any = None
    knowledge_chunks_count: int


class GenerateEmailResponse(BaseModel):
    success: bool = True
    email: GeneratedEmail
    metadata: EmailMetadata


class ErrorResponse(BaseModel):
    error: str
    message: str
    received: Optional[dict[str, Any]] = None
    stack: Optional[str] = None
