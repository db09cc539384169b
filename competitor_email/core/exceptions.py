# competitor_email/core/exceptions.py
"""
Custom exception hierarchy for the competitor email service.
All exceptions inherit from EmailServiceError for consistent handling.
"""

from typing import Any, Optional


class EmailServiceError(Exception):
    """Base exception for all competitor email service errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "EMAIL_SERVICE_ERROR",
        details: Optional[dict] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# ===========================================
# Request Exceptions
# ===========================================


class ValidationError(EmailServiceError):
    """Input validation error."""

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR", **kwargs):
        super().__init__(message, error_code=error_code, **kwargs)


class MissingFieldsError(ValidationError):
    """org_id and/or competitor_id absent or empty."""

    def __init__(self, org_id: Any = None, competitor_id: Any = None):
        self.received = {"org_id": org_id, "competitor_id": competitor_id}
        super().__init__(
            message="Both org_id and competitor_id are required",
            error_code="MISSING_REQUIRED_FIELDS",
            details={"received": self.received},
        )


class MethodNotAllowedError(EmailServiceError):
    """HTTP method other than POST/OPTIONS."""

    def __init__(self, method: str):
        self.method = method
        super().__init__(
            message="This endpoint only accepts POST requests",
            error_code="METHOD_NOT_ALLOWED",
            details={"method": method},
        )


class PayloadTooLargeError(EmailServiceError):
    """Request body exceeds the configured cap."""

    def __init__(self, max_bytes: int, actual_bytes: int):
        self.max_bytes = max_bytes
        self.actual_bytes = actual_bytes
        super().__init__(
            message=f"Request body exceeds maximum size of {max_bytes} bytes (got {actual_bytes})",
            error_code="PAYLOAD_TOO_LARGE",
            details={"max_bytes": max_bytes, "actual_bytes": actual_bytes},
        )


# ===========================================
# Intelligence Store Exceptions
# ===========================================


class SignalsNotFoundError(EmailServiceError):
    """No signals record exists for the organization/competitor pair."""

    def __init__(self, org_id: str, competitor_id: str):
        self.org_id = org_id
        self.competitor_id = competitor_id
        super().__init__(
            message=f"No website signals found for org_id: {org_id}, competitor_id: {competitor_id}",
            error_code="SIGNALS_NOT_FOUND",
            details={"org_id": org_id, "competitor_id": competitor_id},
        )


class RetrievalError(EmailServiceError):
    """Intelligence store connectivity or query failure."""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        super().__init__(
            message=message or f"Intelligence store {operation} failed",
            error_code="RETRIEVAL_ERROR",
            details={"operation": operation},
        )


# ===========================================
# Generation Exceptions
# ===========================================


class GenerationError(EmailServiceError):
    """Hosted model call failed (transport, auth, model-side, timeout)."""

    def __init__(self, message: str, model: Optional[str] = None):
        self.model = model
        super().__init__(
            message=message,
            error_code="GENERATION_ERROR",
            details={"model": model} if model else {},
        )


class EmailGenerationError(EmailServiceError):
    """Body or subject generation failed; no partial email is produced."""

    def __init__(self, cause: Exception, stage: str):
        self.cause = cause
        self.stage = stage
        super().__init__(
            message=f"Failed to generate email: {cause}",
            error_code="EMAIL_GENERATION_FAILED",
            details={"stage": stage},
        )
