"""
Revisio Backend — Google Gemini Service Implementation
=======================================================

What:  Concrete LLM service using Google Gemini with JSON structured output.
How:   Sends text + inline image parts with a declared response schema,
       returns the raw JSON text, with tenacity retry and latency logging.
Who:   Instantiated once at import; used by both generation stages.
When:  Once per stage per submission (two calls per revision sheet).

Resilience Strategy:
    1. Tenacity retry with exponential backoff + jitter for transient failures
    2. Timeout on the response phase (settings.gemini_timeout)
    3. Every failure wrapped in LLMServiceError; the stages turn it into an
       upstream-failure placeholder
"""

import logging
import time
import uuid
from typing import Any, List

import google.generativeai as genai
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential_jitter,
    retry_if_exception_type,
    before_sleep_log,
)

from revisio.config import settings
from revisio.exceptions import LLMServiceError
from revisio.middleware.request_id import request_id_var
from revisio.services.llm_base import LLMService

logger = logging.getLogger(__name__)


class GeminiService(LLMService):
    """
    Google Gemini implementation of schema-constrained generation.

    Error Handling Chain:
        API call fails → tenacity retries (settings.retry_max_attempts)
        → all retries fail → LLMServiceError with the last error text
    """

    def __init__(self):
        # The SDK keeps auth in module-level state
        if settings.gemini_api_key and settings.gemini_api_key != "your_gemini_api_key_here":
            genai.configure(api_key=settings.gemini_api_key)

        self.model = genai.GenerativeModel(settings.gemini_model)

        logger.info(
            "GeminiService initialized with model=%s, retry(attempts=%d, wait=%d-%ds)",
            settings.gemini_model,
            settings.retry_max_attempts,
            settings.retry_min_wait,
            settings.retry_max_wait,
        )

    async def generate_json(self, parts: List[Any], response_schema: Any) -> str:
        """
        Generate JSON output for the given prompt parts.

        Flow:
            1. Tag the call with the HTTP request ID (or a fresh short ID)
            2. Call Gemini with retry logic
            3. Wrap any failure in LLMServiceError

        Returns:
            Raw response text ("" when the model returned no text).

        Raises:
            LLMServiceError: Gemini failed after all retry attempts
        """
        call_id = request_id_var.get("") or str(uuid.uuid4())[:8]
        image_count = sum(1 for p in parts if isinstance(p, dict))

        logger.info(
            "[%s] Starting Gemini generation: %d parts (%d images)",
            call_id,
            len(parts),
            image_count,
        )

        try:
            return await self._call_gemini_with_retry(parts, response_schema, call_id)
        except Exception as e:
            logger.error(
                "[%s] Gemini generation failed: %s",
                call_id,
                str(e),
                exc_info=True,
            )
            raise LLMServiceError(
                message=str(e) or type(e).__name__,
                context={"request_id": call_id, "error_type": type(e).__name__},
            )

    @retry(
        # The SDK raises generic exceptions for API errors
        retry=retry_if_exception_type(Exception),
        stop=stop_after_attempt(settings.retry_max_attempts),
        # wait = min(max_wait, min_wait * 2^attempt) + random(0, 1)
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _call_gemini_with_retry(
        self, parts: List[Any], response_schema: Any, call_id: str
    ) -> str:
        """
        Makes the actual Gemini API call; only this method is retried.

        Logs duration and response size for each call.
        """
        start_time = time.time()

        try:
            response = await self.model.generate_content_async(
                parts,
                generation_config=genai.GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=response_schema,
                ),
                request_options={"timeout": settings.gemini_timeout},
            )

            duration_ms = (time.time() - start_time) * 1000
            text = response.text.strip() if response.text else ""

            logger.info(
                "[%s] Gemini generation completed in %.0fms, received %d chars",
                call_id,
                duration_ms,
                len(text),
            )
            return text

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.warning(
                "[%s] Gemini API call failed after %.0fms: %s",
                call_id,
                duration_ms,
                str(e),
            )
            raise  # Let tenacity handle the retry

    async def health_check(self) -> bool:
        """
        Check if Gemini API is reachable.

        How:     Lists available models (no token cost).
        Returns: True if reachable and authenticated, False otherwise.
        """
        try:
            models = genai.list_models()
            model_names = [m.name for m in models]
            target = f"models/{settings.gemini_model}"
            if target not in model_names:
                logger.warning("Configured model %s not found in available models", target)
            return True
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False


# ── Singleton Instance ────────────────────────────────────────────────────
gemini_service = GeminiService()
