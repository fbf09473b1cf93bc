"""
Side Quest Backend — Groq Text Polishing Service
==================================================

What:  Concrete LLMService using Groq's OpenAI-compatible chat completions API.
How:   The official `openai` SDK (AsyncOpenAI pointed at Groq's base URL) sends
       one chat completion per polish() call with a single user-role message,
       fixed sampling temperature (0.7) and output ceiling (500 tokens).
Who:   Built once in the application lifespan; called by POST /polish.

Failure handling:
    No API key                         → ConfigError   ("AI service not configured")
    openai.APIError / empty completion → UpstreamError ("Failed to polish description")
    No retries, no backoff (the SDK client is built with max_retries=0).
"""

import logging
import time
import uuid
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from sidequest.exceptions import ConfigError, UpstreamError
from sidequest.services.llm_base import LLMService

logger = logging.getLogger(__name__)


def create_groq_client(api_key: str, base_url: str) -> Optional[AsyncOpenAI]:
    """
    SDK client for Groq, or None when no key is configured.

    The caller owns the client and closes it at shutdown.
    """
    if not api_key:
        return None
    return AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)


class GroqService(LLMService):
    """
    Description polishing backed by a Groq-hosted Llama model.

    `client` is None when GROQ_API_KEY is unset; every polish() call then
    fails with ConfigError while the rest of the API keeps working.
    """

    TEMPERATURE = 0.7
    MAX_TOKENS = 500

    POLISH_PROMPT = """Polish this business/service description to be more professional, engaging, and compelling. Keep it concise (under 250 words). Maintain the original meaning and key details. Only return the polished description, no preamble or explanation.

Original description:
{description}"""

    def __init__(
        self,
        client: Optional[AsyncOpenAI],
        model: str = "llama-3.3-70b-versatile",
    ):
        self.client = client
        self.model = model

        logger.info(
            "GroqService initialized with model=%s (configured=%s)",
            model,
            self.is_configured,
        )

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def build_messages(self, text: str) -> List[Dict[str, Any]]:
        return [
            {
                "role": "user",
                "content": self.POLISH_PROMPT.format(description=text),
            }
        ]

    async def polish(self, text: str) -> str:
        """
        Rewrite a description with the configured model.

        Flow:
            1. Refuse early when no API key is configured
            2. Create the single-message chat completion
            3. Return choices[0].message.content, stripped

        Raises:
            ConfigError: GROQ_API_KEY is not set.
            UpstreamError: the SDK raised (connection, timeout, non-2xx
                status) or the completion carried no text.
        """
        if not self.is_configured:
            raise ConfigError()

        # Short id to correlate the request and result log lines
        call_id = uuid.uuid4().hex[:8]
        start_time = time.perf_counter()

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(text),
                temperature=self.TEMPERATURE,
                max_tokens=self.MAX_TOKENS,
            )
        except openai.APIError as e:
            status = getattr(e, "status_code", None)
            logger.error(
                "[%s] Groq API error after %.0fms (status=%s): %s",
                call_id,
                (time.perf_counter() - start_time) * 1000,
                status,
                e,
            )
            raise UpstreamError(
                context={"call_id": call_id, "status": status, "error_type": type(e).__name__}
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000

        try:
            polished = response.choices[0].message.content.strip()
        except (IndexError, AttributeError, TypeError) as e:
            logger.error("[%s] Groq returned no completion text: %s", call_id, e)
            raise UpstreamError(
                context={"call_id": call_id, "error_type": type(e).__name__}
            ) from e

        logger.info(
            "[%s] Groq polish completed in %.0fms, %d -> %d chars",
            call_id,
            duration_ms,
            len(text),
            len(polished),
        )
        return polished
