"""
LLM Client for Anthropic Claude
Wraps a single chat completion call; every failure surfaces as GenerationError
"""
import asyncio
import logging
import time
from typing import Optional

from anthropic import AsyncAnthropic
from anthropic.types import Message

from competitor_email.core.exceptions import GenerationError

logger = logging.getLogger(__name__)


class LLMClient:
    """
    Async client for the Anthropic Messages API.

    One call per `complete()`, no retries and no fallback model: the SDK
    client is built with max_retries=0 and every call is bounded by
    `timeout` seconds.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout: float = 30.0,
        base_url: Optional[str] = None,
        client: Optional[AsyncAnthropic] = None,
    ):
        """
        Initialize LLM client.

        Args:
            api_key: Anthropic API key
            model: Model identifier used for every call
            timeout: Per-call timeout in seconds
            base_url: Optional API base URL override
            client: Pre-built SDK client (tests)
        """
        self.model = model
        self.timeout = timeout
        self.client = client or AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )

    async def complete(
        self,
        user_prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 400,
    ) -> str:
        """
        Generate text for a single user message.

        Args:
            user_prompt: User message content
            system_prompt: Optional system instruction
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum tokens to generate

        Returns:
            Generated text (not trimmed)

        Raises:
            GenerationError: On any transport, authentication, model-side
                failure, timeout, or empty response
        """
        start_time = time.time()

        request = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        if system_prompt:
            request["system"] = system_prompt

        try:
            response: Message = await asyncio.wait_for(
                self.client.messages.create(**request),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            latency_ms = (time.time() - start_time) * 1000
            logger.error(f"LLM timeout after {latency_ms:.0f}ms: {self.model}")
            raise GenerationError(
                f"LLM generation timed out after {self.timeout}s", model=self.model
            )
        except Exception as e:
            logger.error(f"LLM generation failed: {self.model} - {e}")
            raise GenerationError(str(e), model=self.model) from e

        text = "".join(
            block.text for block in response.content if block.type == "text"
        )
        if not text.strip():
            raise GenerationError("LLM returned an empty response", model=self.model)

        latency_ms = (time.time() - start_time) * 1000
        logger.info(
            f"LLM generation successful: {self.model} - {latency_ms:.0f}ms - "
            f"Tokens: {response.usage.input_tokens}in/{response.usage.output_tokens}out"
        )
        return text

    async def close(self) -> None:
        await self.client.close()
