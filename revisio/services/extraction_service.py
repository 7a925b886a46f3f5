"""
Revisio Backend — Extraction Stage
===================================

What:  First generation stage: text and/or images in, a list of
       {title, summary} revision points out, in the requested language.
How:   Builds a multimodal prompt, asks the LLM for JSON matching the
       declared schema, validates the answer with pydantic.
Who:   Called by RevisionService (step 1/2) and by POST /api/extract.

Failure handling (never raises past this boundary after validation):
    Model answer has the wrong shape → StageFailure(schema_violation, raw output)
    Remote call fails                → StageFailure(upstream_failure, error text)
"""

import logging
from typing import Any, List, Optional

import pydantic
from typing_extensions import TypedDict

from revisio.exceptions import LLMServiceError, SchemaViolationError, ValidationError
from revisio.schemas.revision import ExtractionRequest, ExtractionResponse, RevisionPoint
from revisio.services.gemini_service import gemini_service
from revisio.services.image_service import parse_data_uri
from revisio.services.llm_base import LLMService
from revisio.services.localization import LANGUAGE_NAMES
from revisio.services.outcomes import ExtractionOutcome, StageFailure

logger = logging.getLogger(__name__)


# ── Declared output schema (sent to Gemini) ───────────────────────────────

class RevisionPointSchema(TypedDict):
    title: str
    summary: str


class ExtractionSchema(TypedDict):
    revisionPoints: list[RevisionPointSchema]


class ExtractionService:
    """
    Extracts revision points from user content.

    Usage:
        outcome = await extraction_service.extract(request)
        if outcome.ok:
            titles = [p.title for p in outcome.points]
    """

    INSTRUCTIONS = """You are an expert at extracting key concepts and information from various types of content to create concise and effective revision sheets.

Analyze the provided content and extract the most important revision points. Each revision point should include a title and a short summary.
The revision sheet should be in the language specified by the user.

Language for the output: {language_name} ({language})
"""

    TEXT_SECTION = """
The content to analyze is the following text:
{text}
"""

    IMAGE_SECTION = """
The content to analyze are the following images. Extract text, concepts, and key information visible in them:"""

    CLOSING = """
Your output should be a list of revision points, where each point has a title and a short summary.
Make sure the output is in the language: {language_name} ({language})."""

    def __init__(self, llm: Optional[LLMService] = None):
        self.llm = llm or gemini_service

    def build_prompt(self, request: ExtractionRequest) -> List[Any]:
        """
        Assemble the ordered prompt parts.

        Images become inline blobs, each preceded by its "Image <n>:" label.
        """
        language = request.language
        names = {"language": language.value, "language_name": LANGUAGE_NAMES[language]}

        parts: List[Any] = [self.INSTRUCTIONS.format(**names)]

        if request.text_content and request.text_content.strip():
            parts.append(self.TEXT_SECTION.format(text=request.text_content))

        if request.images:
            parts.append(self.IMAGE_SECTION)
            for image in request.images:
                mime_type, data = parse_data_uri(image.data_uri)
                parts.append(f"Image {image.display_index}:")
                parts.append({"mime_type": mime_type, "data": data})

        parts.append(self.CLOSING.format(**names))
        return parts

    def parse_output(self, raw: str) -> List[RevisionPoint]:
        """
        Validate the model's JSON against ExtractionResponse.

        Raises:
            SchemaViolationError: Missing, empty or malformed list, or an invalid point.
        """
        try:
            return ExtractionResponse.model_validate_json(raw).revision_points
        except pydantic.ValidationError as e:
            raise SchemaViolationError(
                message="Invalid, empty or missing revisionPoints in model output.",
                raw_output=raw,
                context={"errors": e.error_count()},
            )

    async def extract(self, request: ExtractionRequest) -> ExtractionOutcome:
        """
        Run the extraction stage.

        Raises:
            ValidationError: Neither text nor image present (no remote call).

        Returns:
            ExtractionOutcome with the points, or with an explicit failure.
        """
        if not request.has_content():
            raise ValidationError(
                message="Either textContent or at least one image must be provided.",
                field="textContent",
            )

        image_count = len(request.images or [])
        logger.info(
            "Extraction requested: language=%s, text_chars=%d, images=%d",
            request.language.value,
            len(request.text_content or ""),
            image_count,
        )

        parts = self.build_prompt(request)

        try:
            raw = await self.llm.generate_json(parts, ExtractionSchema)
            points = self.parse_output(raw)
        except SchemaViolationError as e:
            logger.error("%s Output received: %r", e.message, e.raw_output[:500])
            return ExtractionOutcome(
                failure=StageFailure(
                    kind="schema_violation",
                    detail=e.raw_output,
                    language=request.language,
                )
            )
        except LLMServiceError as e:
            logger.error("Extraction call failed: %s", e.message)
            return ExtractionOutcome(
                failure=StageFailure(
                    kind="upstream_failure",
                    detail=e.message,
                    language=request.language,
                )
            )

        logger.info("Extraction succeeded: %d revision points", len(points))
        return ExtractionOutcome(points=points)


# ── Singleton Instance ────────────────────────────────────────────────────
extraction_service = ExtractionService()
