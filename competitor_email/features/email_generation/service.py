# competitor_email/features/email_generation/service.py
"""
Business logic for competitor email generation.
"""

import logging
from enum import Enum

from competitor_email.core.exceptions import EmailGenerationError, GenerationError
from competitor_email.core.llm_client import LLMClient
from competitor_email.db.models import KnowledgeChunk, SignalsRecord
from competitor_email.features.email_generation.prompts import (
    BODY_SYSTEM_PROMPT,
    build_body_prompt,
    build_subject_prompt,
)
from competitor_email.features.email_generation.schemas import GeneratedEmail

logger = logging.getLogger(__name__)

EMAIL_TONE = "conversational"

BODY_TEMPERATURE = 0.7
BODY_MAX_TOKENS = 400
SUBJECT_TEMPERATURE = 0.8
SUBJECT_MAX_TOKENS = 20

QUOTE_CHARS = "\"'“”‘’"
TERMINAL_PUNCTUATION = ".!?"


class PipelineStage(str, Enum):
    """Per-request pipeline states. Nothing is retained once a request completes."""

    VALIDATING = "validating"
    RETRIEVING = "retrieving"
    BODY_GENERATING = "body_generating"
    SUBJECT_GENERATING = "subject_generating"
    DONE = "done"
    FAILED = "failed"


def clean_subject(raw: str) -> str:
    """Strip whitespace, surrounding quotes and trailing . ! ? until nothing changes."""
    subject = raw.strip()
    while True:
        cleaned = subject.strip(QUOTE_CHARS).rstrip(TERMINAL_PUNCTUATION).strip()
        if cleaned == subject:
            return subject
        subject = cleaned


def count_words(text: str) -> int:
    return len(text.split())


class EmailGenerationService:
    """
    Two-call email generation: body first, then a subject conditioned on
    the finished body. Either both calls succeed or the whole operation
    fails with EmailGenerationError.
    """

    def __init__(self, llm_client: LLMClient):
        self.llm_client = llm_client

    async def generate_email(
        self,
        signals: SignalsRecord,
        knowledge_chunks: list[KnowledgeChunk],
        competitor_id: str,
        org_id: str,
    ) -> GeneratedEmail:
        """
        Generate a competitor email.

        Args:
            signals: Signals record for the competitor
            knowledge_chunks: Evidence chunks (may be empty)
            competitor_id: Competitor identifier
            org_id: Organization identifier

        Returns:
            The generated email

        Raises:
            EmailGenerationError: If either generation call fails
        """
        stage = PipelineStage.BODY_GENERATING
        try:
            logger.debug(f"Stage {stage.value}: org_id={org_id} competitor_id={competitor_id}")
            body_prompt = build_body_prompt(signals, knowledge_chunks, competitor_id, org_id)
            body = (
                await self.llm_client.complete(
                    body_prompt,
                    system_prompt=BODY_SYSTEM_PROMPT,
                    temperature=BODY_TEMPERATURE,
                    max_tokens=BODY_MAX_TOKENS,
                )
            ).strip()

            stage = PipelineStage.SUBJECT_GENERATING
            logger.debug(f"Stage {stage.value}: org_id={org_id} competitor_id={competitor_id}")
            subject = clean_subject(
                await self.llm_client.complete(
                    build_subject_prompt(body),
                    temperature=SUBJECT_TEMPERATURE,
                    max_tokens=SUBJECT_MAX_TOKENS,
                )
            )
            if not subject:
                raise GenerationError("LLM returned an empty subject line")
        except Exception as e:
            step = "body" if stage is PipelineStage.BODY_GENERATING else "subject"
            logger.debug(f"Email generation failed during {stage.value}: {e}")
            raise EmailGenerationError(e, stage=step) from e

        email = GeneratedEmail(
            subject=subject,
            body=body,
            tone=EMAIL_TONE,
            word_count=count_words(body),
        )
        logger.info(
            f"Generated email for org_id={org_id} competitor_id={competitor_id} "
            f"({email.word_count} words, {len(knowledge_chunks)} chunks)"
        )
        return email
