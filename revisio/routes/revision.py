"""
Revisio Backend — Revision Route Handlers
==========================================

What:  HTTP entry points for both generation stages and the full pipeline.
How:   Each handler validates input through its pydantic model, delegates to
       a service, and maps the result to a status code.
Who:   Called by the frontend form and by API clients.

Status codes for the full pipeline (the body is always a RevisionOutcome):
    200  completed (the sheet may still show a supplementation error)
    400  validation_error   — nothing was sent to the model
    502  extraction_failed  — the model gave no usable revision points
    500  internal_error
"""

import logging
from typing import List, Optional

import pydantic
from fastapi import APIRouter, File, Form, Response, UploadFile

from revisio.exceptions import ValidationError
from revisio.schemas.revision import (
    ErrorResponse,
    ExtractionRequest,
    ExtractionResponse,
    Language,
    RevisionOutcome,
    RevisionSheetRequest,
    SupplementationRequest,
    SupplementationResponse,
)
from revisio.services.extraction_service import extraction_service
from revisio.services.image_service import image_service
from revisio.services.revision_service import revision_service
from revisio.services.supplementation_service import supplementation_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Revision"])

OUTCOME_STATUS_CODES = {
    None: 200,
    "validation_error": 400,
    "extraction_failed": 502,
    "internal_error": 500,
}


@router.post(
    "/extract",
    response_model=ExtractionResponse,
    summary="Extract revision points from text and/or images",
)
async def extract_revision_points(request: ExtractionRequest) -> ExtractionResponse:
    """
    Stage 1 on its own.

    Always answers with a list of points: a failed extraction is rendered as
    one localized placeholder point carrying the diagnostic detail.
    """
    outcome = await extraction_service.extract(request)
    return outcome.to_response()


@router.post(
    "/supplement",
    response_model=SupplementationResponse,
    summary="Expand revision point headings into a Markdown revision sheet",
)
async def supplement_revision_points(request: SupplementationRequest) -> SupplementationResponse:
    """
    Stage 2 on its own.

    A failed supplementation is rendered as Markdown with a visible,
    localized error heading.
    """
    outcome = await supplementation_service.supplement(request)
    return outcome.to_response()


@router.post(
    "/revision-sheets",
    response_model=RevisionOutcome,
    responses={
        400: {"description": "No usable content was submitted", "model": RevisionOutcome},
        502: {"description": "No revision points could be extracted", "model": RevisionOutcome},
    },
    summary="Generate a revision sheet (JSON body, images as data URIs)",
)
async def create_revision_sheet(form: RevisionSheetRequest, response: Response) -> RevisionOutcome:
    outcome = await revision_service.generate(form)
    response.status_code = OUTCOME_STATUS_CODES[outcome.error]
    return outcome


@router.post(
    "/revision-sheets/upload",
    response_model=RevisionOutcome,
    responses={
        400: {"description": "Invalid upload or form content", "model": ErrorResponse},
        502: {"description": "No revision points could be extracted", "model": RevisionOutcome},
    },
    summary="Generate a revision sheet from uploaded image files or text",
)
async def upload_revision_sheet(
    response: Response,
    topic: str = Form(..., description="Subject of the revision sheet (min 3 characters)"),
    language: Language = Form(Language.FR),
    input_type: str = Form("image", description="'image' or 'text'"),
    text_content: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(
        None,
        description="Image files (PNG, JPG, or JPEG); read concurrently",
    ),
) -> RevisionOutcome:
    """
    Multipart variant of POST /api/revision-sheets.

    In image mode every file is validated and encoded as a data URI before
    the pipeline starts, and an invalid file rejects the whole submission
    with 400. In text mode attached files are ignored, unread.
    """
    uploads = files or []
    logger.info(
        "Received revision sheet upload: input_type=%s, files=%d",
        input_type,
        len(uploads),
    )

    images = []
    if input_type == "image" and uploads:
        images = await image_service.read_uploads(uploads)

    try:
        form = RevisionSheetRequest(
            topic=topic,
            language=language,
            input_type=input_type,
            text_content=text_content,
            images=images,
        )
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        raise ValidationError(
            message=f"Invalid form field '{'.'.join(str(p) for p in first['loc'])}': {first['msg']}",
            field=str(first["loc"][0]) if first["loc"] else None,
        )

    outcome = await revision_service.generate(form)
    response.status_code = OUTCOME_STATUS_CODES[outcome.error]
    return outcome
