"""
Revisio Backend — Revision Service (Pipeline Orchestrator)
===========================================================

What:  Sequences extraction then supplementation and assembles the
       RevisionSheet that the client renders and exports.
How:   Composes ExtractionService and SupplementationService; converts every
       failure into notifications on a RevisionOutcome.
Who:   Called by the revision-sheet routes.
When:  Once per user submission.

Orchestration Flow:
    ┌──────────┐    ┌─────────────┐    ┌──────────┐    ┌──────────────────┐    ┌──────────┐
    │  Form    │───▶│  Extraction │───▶│  Fold    │───▶│  Supplementation │───▶│  Sheet   │
    │  state   │    │  (step 1/2) │    │ ## Title │    │  (step 2/2)      │    │          │
    └──────────┘    └─────────────┘    └──────────┘    └──────────────────┘    └──────────┘

    Failure handling:
    - Invalid form content  → failed outcome, error=validation_error, no remote call
    - Extraction failed or
      returned zero points  → failed outcome, error=extraction_failed,
                              supplementation is never invoked
    - Supplementation failed → completed outcome; the sheet content is the
                              localized error Markdown, plus a warning
    - Anything unexpected   → failed outcome, error=internal_error

    generate() never raises.
"""

import logging
from typing import List, Optional, Sequence

import pydantic

from revisio.config import settings
from revisio.exceptions import ValidationError
from revisio.schemas.revision import (
    ExtractionRequest,
    ImageInput,
    Language,
    Notification,
    RevisionOutcome,
    RevisionPoint,
    RevisionSheet,
    RevisionSheetRequest,
    SupplementationRequest,
)
from revisio.services.extraction_service import ExtractionService, extraction_service
from revisio.services.localization import message, notification_text
from revisio.services.supplementation_service import (
    SupplementationService,
    supplementation_service,
)

logger = logging.getLogger(__name__)

# Failure notifications disappear on their own after this long
FAILURE_NOTIFICATION_MS = 5000


def fold_revision_points(points: Sequence[RevisionPoint]) -> str:
    """
    Fold extracted points into the heading string the supplementation stage
    expects: one "## <title>" line per point, in order, joined by a blank line.

    Whitespace inside a title (including newlines) is collapsed so each point
    yields exactly one heading line.
    """
    return "\n\n".join("## " + " ".join(point.title.split()) for point in points)


def build_extraction_request(form: RevisionSheetRequest) -> ExtractionRequest:
    """
    Translate form state into the extraction request.

    Decision rule:
        image mode with >= 1 image  → all images, display indexes 1..N
        text mode with enough text  → the text
        anything else               → ValidationError (before any remote call)
    """
    language = form.language

    if form.input_type == "image" and form.images:
        try:
            images = [
                ImageInput(data_uri=uri, display_index=index)
                for index, uri in enumerate(form.images, start=1)
            ]
        except pydantic.ValidationError as e:
            raise ValidationError(
                message=message("bad_image", language),
                field="images",
                context={"errors": e.error_count()},
            )
        return ExtractionRequest(images=images, language=language)

    if form.input_type == "text" and form.text_content and form.text_content.strip():
        if len(form.text_content.strip()) < settings.min_text_length:
            raise ValidationError(
                message=message("text_too_short", language, min_length=settings.min_text_length),
                field="textContent",
            )
        return ExtractionRequest(text_content=form.text_content, language=language)

    raise ValidationError(message=message("missing_content", language), field="textContent")


def _notify(key: str, language: Language, variant: str = "default", **kwargs) -> Notification:
    title, description = notification_text(key, language, **kwargs)
    duration = FAILURE_NOTIFICATION_MS if variant == "destructive" else None
    return Notification(title=title, description=description, variant=variant, duration_ms=duration)


class RevisionService:
    """
    Orchestrates one revision sheet submission.

    Stateless apart from its two stage services; concurrent submissions do
    not share anything.
    """

    def __init__(
        self,
        extraction: Optional[ExtractionService] = None,
        supplementation: Optional[SupplementationService] = None,
    ):
        self.extraction = extraction or extraction_service
        self.supplementation = supplementation or supplementation_service

    async def generate(self, form: RevisionSheetRequest) -> RevisionOutcome:
        """
        Run the whole pipeline for one submission.

        Returns:
            RevisionOutcome — completed with a sheet, or failed with an error
            code. Notifications are in the order the client should show them.
        """
        language = form.language
        notifications: List[Notification] = []

        def failed(error: str, detail: str) -> RevisionOutcome:
            notifications.append(
                _notify("generation_failed", language, variant="destructive", detail=detail)
            )
            return RevisionOutcome(status="failed", error=error, notifications=notifications)

        try:
            extraction_request = build_extraction_request(form)

            notifications.append(_notify("extraction_started", language))
            extracted = await self.extraction.extract(extraction_request)

            if not extracted.ok:
                placeholder = extracted.to_response().revision_points[0]
                logger.warning(
                    "Extraction failed (%s); skipping supplementation",
                    extracted.failure.kind,
                )
                return failed("extraction_failed", f"{placeholder.title}: {placeholder.summary}")

            if not extracted.points:
                logger.warning("Extraction returned no revision points; skipping supplementation")
                return failed("extraction_failed", message("no_points", language))

            supplementation_request = SupplementationRequest(
                topic=form.topic,
                revision_points=fold_revision_points(extracted.points),
                language=language,
            )

            notifications.append(_notify("supplementation_started", language))
            supplemented = await self.supplementation.supplement(supplementation_request)

            sheet = RevisionSheet(
                topic=form.topic,
                language=language,
                extracted_points=extracted.points,
                supplemented_content=supplemented.to_response().supplemented_points,
            )

            if supplemented.ok:
                notifications.append(_notify("completed", language, variant="success"))
            else:
                notifications.append(
                    _notify("supplementation_failed", language, variant="destructive")
                )

            logger.info(
                "Revision sheet generated: topic=%r, points=%d, content_chars=%d",
                form.topic,
                len(extracted.points),
                len(sheet.supplemented_content),
            )
            return RevisionOutcome(status="completed", sheet=sheet, notifications=notifications)

        except ValidationError as e:
            logger.warning("Revision sheet request rejected: %s", e.message)
            return failed("validation_error", e.message)
        except Exception as e:
            logger.error("Error generating revision sheet: %s", str(e), exc_info=True)
            return failed("internal_error", message("unexpected", language))


# ── Singleton Instance ────────────────────────────────────────────────────
revision_service = RevisionService()
