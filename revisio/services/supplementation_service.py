"""
Revisio Backend — Supplementation Stage
========================================

What:  Second generation stage: the folded "## Title" heading string in,
       one continuous Markdown document out, each heading expanded with
       definitions, explanations and examples in the target language.
How:   Prompt + declared schema {supplementedPoints: string}; the returned
       string is validated with pydantic, then passed through the sanitizer.
Who:   Called by RevisionService (step 2/2) and by POST /api/supplement.

Failure handling:
    Model answer has the wrong shape → StageFailure(schema_violation, raw output)
    Remote call fails                → StageFailure(upstream_failure, error text)
    Field-name leaks after cleanup   → logged, content still returned
"""

import logging
from typing import Any, List, Optional

import pydantic
from typing_extensions import TypedDict

from revisio.exceptions import LLMServiceError, SchemaViolationError
from revisio.schemas.revision import SupplementationRequest, SupplementationResponse
from revisio.services.gemini_service import gemini_service
from revisio.services.llm_base import LLMService
from revisio.services.localization import LANGUAGE_NAMES
from revisio.services.outcomes import StageFailure, SupplementationOutcome
from revisio.services.sanitizer import find_leaks, sanitize_markdown

logger = logging.getLogger(__name__)


class SupplementationSchema(TypedDict):
    supplementedPoints: str


class SupplementationService:
    """Expands revision point headings into a full Markdown revision sheet."""

    # The topic is context only; it must not appear as a section of its own.
    PROMPT = """You are an AI assistant creating comprehensive revision material in {language_name}.
Your task is to generate the content for the 'supplementedPoints' field.
The content for 'supplementedPoints' MUST be a single string of well-formatted Markdown.
This Markdown string will contain expanded explanations for revision points.

The input below provides the initial point titles as a single string, where each point title starts with a Markdown heading like '## Point Title'.

For each point title starting with '## ' in the input string:
1.  Take the title (the text after '## ').
2.  Expand on this title by providing detailed definitions, clear explanations, and illustrative examples related to it.
3.  Format your expansion for this point starting with the original '## Point Title' Markdown heading, followed by your detailed content.

RULES FOR THE CONTENT OF THE 'supplementedPoints' FIELD:
- The content MUST be ONLY Markdown text.
- Use standard Markdown for formatting:
    - Headings: Start with '## ' for main section titles.
    - Paragraphs: Standard text.
    - Lists: Use asterisks ('* '), hyphens ('- '), or numbers ('1. ') followed by a space for list items.
    - Bold text: Use double asterisks, e.g., `**bold text**`.
    - Italic text: Use single asterisks, e.g., `*italic text*`.
- **CRITICAL: Ensure Markdown emphasis characters (`*`, `_`) are used correctly and are NOT left as stray characters between words, at the beginning/end of unformatted text, or used incorrectly in lists. For example, DO NOT produce `some * text`, `text *`, or `* List item with misplaced asterisk`. Correct usage is `*italic text*`, `**bold text**`, and `* List item` (with a space after the asterisk for lists).**
- ABSOLUTELY NO JSON structures, keys (like "topic", "points", "point", "title", "summary"), or array-like syntax (square brackets, commas separating items as if in an array) should appear within the Markdown text.
- The Markdown text should be a continuous flow of headings (##) and paragraphs/lists.

Topic (for context only, do not include in the output): {topic}

Initial Revision Point Titles string (each starting with '## '):
{revision_points}

Example of how ONE point title is expanded in your Markdown output:
If a line in the input is:
## Photosynthesis

Your supplemented output for THIS ONE POINT should be structured like this:
## Photosynthesis
Photosynthesis is the fundamental process by which green plants, algae, and some bacteria convert light energy into chemical energy, stored in the form of glucose (sugar). This vital process occurs in chloroplasts and is crucial for life on Earth.
**Key Components involved:**
- **Sunlight:** Provides the necessary energy for the reactions.
- **Chlorophyll:** The green pigment located in chloroplasts that absorbs light energy.
- **Water (H2O):** Absorbed through the roots and transported to the leaves.
- **Carbon Dioxide (CO2):** Taken in from the atmosphere through small pores on the leaves called stomata.
**Main Stages:**
1.  **Light-dependent reactions:** Occur in the thylakoid membranes of chloroplasts. Light energy is captured by chlorophyll and used to split water molecules (photolysis), releasing oxygen (O2) as a byproduct. This stage also produces energy-carrying molecules ATP and NADPH.
2.  **Light-independent reactions (Calvin Cycle):** Occur in the stroma of chloroplasts. ATP and NADPH from the light reactions are used to convert CO2 into glucose (C6H12O6).
**Overall Equation:**
6CO2 + 6H2O + Light Energy → C6H12O6 + 6O2
**Importance:**
- Produces oxygen, which is essential for respiration in most living organisms.
- Forms the base of most food chains by producing organic compounds from inorganic materials.
- Plays a key role in regulating Earth's atmospheric composition.

Now, process ALL the point titles provided in the input string in this manner.
Combine your supplemented explanations for all points into a single, flowing Markdown text to be used as the value for the 'supplementedPoints' field.
Ensure the entire output for 'supplementedPoints' is in {language_name} ({language}) and strictly adheres to the Markdown-only rule.
**Critically, ensure that Markdown emphasis (like asterisks for bold/italics) and list formatting are applied correctly and do not result in stray asterisks or broken formatting. The output must be clean and directly readable as Markdown.**

Begin generating the Markdown content for 'supplementedPoints' now:
"""

    def __init__(self, llm: Optional[LLMService] = None):
        self.llm = llm or gemini_service

    def build_prompt(self, request: SupplementationRequest) -> List[Any]:
        return [
            self.PROMPT.format(
                language=request.language.value,
                language_name=LANGUAGE_NAMES[request.language],
                topic=request.topic,
                revision_points=request.revision_points,
            )
        ]

    def parse_output(self, raw: str) -> str:
        """
        Validate the model's JSON against SupplementationResponse.

        Raises:
            SchemaViolationError: Payload missing or supplementedPoints not a string.
        """
        try:
            return SupplementationResponse.model_validate_json(raw, strict=True).supplemented_points
        except pydantic.ValidationError as e:
            raise SchemaViolationError(
                message="Invalid output: supplementedPoints is not a string or is missing.",
                raw_output=raw,
                context={"errors": e.error_count()},
            )

    async def supplement(self, request: SupplementationRequest) -> SupplementationOutcome:
        """
        Run the supplementation stage.

        Returns:
            SupplementationOutcome with sanitized Markdown, or an explicit failure.
        """
        logger.info(
            "Supplementation requested: language=%s, headings=%d",
            request.language.value,
            request.revision_points.count("## "),
        )

        try:
            raw = await self.llm.generate_json(self.build_prompt(request), SupplementationSchema)
            markdown = self.parse_output(raw)
        except SchemaViolationError as e:
            logger.error("%s Output received: %r", e.message, e.raw_output[:500])
            return SupplementationOutcome(
                failure=StageFailure(
                    kind="schema_violation",
                    detail=e.raw_output,
                    language=request.language,
                )
            )
        except LLMServiceError as e:
            logger.error("Supplementation call failed: %s", e.message)
            return SupplementationOutcome(
                failure=StageFailure(
                    kind="upstream_failure",
                    detail=e.message,
                    language=request.language,
                )
            )

        cleaned = sanitize_markdown(markdown)
        if cleaned != markdown:
            logger.warning(
                "Removed structured-data fragments from supplementation output (%d chars -> %d chars)",
                len(markdown),
                len(cleaned),
            )

        leaks = find_leaks(cleaned)
        if leaks:
            logger.warning("Supplementation output still contains field names: %s", leaks[:5])

        logger.info("Supplementation succeeded: %d chars of Markdown", len(cleaned))
        return SupplementationOutcome(markdown=cleaned)


# ── Singleton Instance ────────────────────────────────────────────────────
supplementation_service = SupplementationService()
