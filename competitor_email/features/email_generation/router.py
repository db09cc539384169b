# competitor_email/features/email_generation/router.py
"""
API endpoint for competitor email generation.

Provides:
- POST /generate-email - Generate a subject + body for a competitor
- OPTIONS /generate-email - CORS pre-flight (no processing)
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from competitor_email.core.config import Settings, get_settings
from competitor_email.core.exceptions import (
    EmailGenerationError,
    MethodNotAllowedError,
    MissingFieldsError,
    PayloadTooLargeError,
    RetrievalError,
    SignalsNotFoundError,
)
from competitor_email.db.intelligence_store import (
    KNOWLEDGE_CHUNK_LIMIT,
    IntelligenceStore,
)
from competitor_email.features.email_generation.dependencies import (
    get_email_generation_service,
    get_intelligence_store,
)
from competitor_email.features.email_generation.schemas import (
    EmailMetadata,
    ErrorResponse,
    GenerateEmailRequest,
    GenerateEmailResponse,
)
from competitor_email.features.email_generation.service import (
    EmailGenerationService,
    PipelineStage,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Email Generation"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

# Every method is routed here so disallowed ones get the JSON 405 body
ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _json(status_code: int, content: dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        headers=CORS_HEADERS,
    )


def _error(status_code: int, error: str, message: str, **extra: Any) -> JSONResponse:
    return _json(status_code, {"error": error, "message": message, **extra})


async def _read_payload(request: Request, max_bytes: int) -> GenerateEmailRequest:
    """Parse the JSON body. Anything that is not a JSON object reads as an empty request."""
    content_length = request.headers.get("content-length", "")
    if content_length.isdigit() and int(content_length) > max_bytes:
        raise PayloadTooLargeError(max_bytes, int(content_length))

    raw = await request.body()
    if len(raw) > max_bytes:
        raise PayloadTooLargeError(max_bytes, len(raw))
    if not raw:
        return GenerateEmailRequest()

    try:
        return GenerateEmailRequest.model_validate_json(raw)
    except ValidationError:
        logger.info("Request body is not a JSON object")
        return GenerateEmailRequest()


@router.api_route(
    "/generate-email",
    methods=ROUTED_METHODS,
    response_model=GenerateEmailResponse,
    summary="Generate competitor email",
    description="Generate a short, human-sounding email highlighting a competitive advantage.",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        405: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def generate_email(
    request: Request,
    store: IntelligenceStore = Depends(get_intelligence_store),
    service: EmailGenerationService = Depends(get_email_generation_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Generate an email for customers of a competitor.

    Body: {"org_id": str, "competitor_id": str}

    Returns the email plus metadata (timestamp, identifiers, the raw
    signals payload and the number of knowledge chunks used).
    """
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)

    if request.method != "POST":
        err = MethodNotAllowedError(request.method)
        return _error(405, "Method not allowed", err.message)

    stage = PipelineStage.VALIDATING
    try:
        payload = await _read_payload(request, settings.MAX_REQUEST_BODY_BYTES)
        org_id = payload.org_id
        competitor_id = payload.competitor_id
        if not payload.has_required_fields():
            raise MissingFieldsError(org_id, competitor_id)

        stage = PipelineStage.RETRIEVING
        logger.debug(f"Stage {stage.value}: org_id={org_id} competitor_id={competitor_id}")
        signals = await store.find_signals(org_id, competitor_id)
        if signals is None:
            raise SignalsNotFoundError(org_id, competitor_id)

        knowledge_chunks = await store.find_knowledge_chunks(
            org_id, competitor_id, limit=KNOWLEDGE_CHUNK_LIMIT
        )
        if not knowledge_chunks:
            logger.warning("No knowledge chunks found, proceeding with signals only")

        stage = PipelineStage.BODY_GENERATING
        email = await service.generate_email(
            signals, knowledge_chunks, competitor_id, org_id
        )
        stage = PipelineStage.DONE

    except PayloadTooLargeError as e:
        logger.info(e.message)
        return _error(413, "Payload too large", e.message)

    except MissingFieldsError as e:
        logger.info(f"Rejected request with missing fields: {e.received}")
        return _error(400, "Missing required fields", e.message, received=e.received)

    except SignalsNotFoundError as e:
        logger.info(e.message)
        return _error(404, "No signals found", e.message)

    except Exception as e:
        failed_at = e.stage if isinstance(e, EmailGenerationError) else stage.value
        logger.error(
            f"API Error at stage {failed_at} ({PipelineStage.FAILED.value}): {e}",
            exc_info=True,
        )
        return _internal_error(e, settings)

    response = GenerateEmailResponse(
        email=email,
        metadata=EmailMetadata(
            generated_at=datetime.now(timezone.utc),
            competitor_id=competitor_id,
            org_id=org_id,
            signals_used=signals.signals,
            knowledge_chunks_count=len(knowledge_chunks),
        ),
    )
    return _json(200, response.model_dump(mode="json"))


def _internal_error(error: Exception, settings: Settings) -> JSONResponse:
    if isinstance(error, EmailGenerationError):
        message = error.message
    elif isinstance(error, RetrievalError):
        message = "Failed to retrieve competitor intelligence"
    elif settings.is_development:
        message = str(error)
    else:
        message = "An unexpected error occurred"

    extra = {}
    if settings.is_development:
        extra["stack"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
    return _error(500, "Internal server error", message, **extra)
