"""
Revisio Backend — Pydantic Request/Response Schemas
====================================================

What:  Pydantic models defining the contracts of both generation stages, the
       orchestrator, and the HTTP API.
How:   FastAPI uses these models to validate request bodies, serialize
       responses, and generate OpenAPI documentation. The stages use the same
       models to validate what the model sends back.
Who:   Route handlers, services, and the frontend (as API contracts).

Wire format:
    Field names travel in camelCase (`textContent`, `revisionPoints`,
    `supplementedPoints`) and are exposed as snake_case attributes in Python.
    Both spellings are accepted on input.
"""

import re
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


# What: "data:<mime>;base64,<data>", the only image transport format accepted
DATA_URI_PATTERN = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>[A-Za-z0-9+/=\s]+)$"
)


class CamelModel(BaseModel):
    """Base model serializing to camelCase while accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Language(str, Enum):
    """Target language of a revision sheet."""

    EN = "en"
    DE = "de"
    FR = "fr"


# ══════════════════════════════════════════════════════════════════════════
# Extraction Stage Contract
# ══════════════════════════════════════════════════════════════════════════


class RevisionPoint(CamelModel):
    """
    What:  A short, titled unit of extracted knowledge.
    Who:   Produced only by the extraction stage; its title feeds the
           supplementation stage.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: str = Field(min_length=1, description="The title of the revision point")
    summary: str = Field(min_length=1, description="A short summary of the revision point")

    @field_validator("title", "summary")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class ImageInput(CamelModel):
    """
    What:  One image of the submission, carried inline as a data URI.

    Example:
        {"dataUri": "data:image/png;base64,iVBORw0KGgo...", "displayIndex": 1}
    """

    data_uri: str = Field(
        description="A data URI of the image content: 'data:<mimetype>;base64,<encoded_data>'"
    )
    display_index: int = Field(ge=1, description="1-based index of the image for display purposes")

    @field_validator("data_uri")
    @classmethod
    def validate_data_uri(cls, v: str) -> str:
        """Rejects anything that is not a base64 data URI."""
        if not DATA_URI_PATTERN.match(v):
            raise ValueError("Expected format: 'data:<mimetype>;base64,<encoded_data>'")
        return v


class ExtractionRequest(CamelModel):
    """
    What:  Input of the extraction stage: optional text, optional ordered
           image list, and the target language.

    Invariant:
        At least one of a non-blank text_content or a non-empty images list.
        Violating it fails validation; no remote call is attempted.
    """

    text_content: Optional[str] = Field(
        default=None, description="The text content to extract revision points from"
    )
    images: Optional[List[ImageInput]] = Field(
        default=None, description="Images to extract revision points from, in display order"
    )
    language: Language = Field(description="The language of the revision sheet")

    @model_validator(mode="after")
    def validate_has_content(self) -> "ExtractionRequest":
        if not self.has_content():
            raise ValueError("Either textContent or at least one image must be provided.")
        return self

    def has_content(self) -> bool:
        has_text = bool(self.text_content and self.text_content.strip())
        return has_text or bool(self.images)


class ExtractionResponse(CamelModel):
    """Output of the extraction stage. Never empty: no points is a failed extraction."""

    revision_points: List[RevisionPoint] = Field(
        min_length=1, description="The extracted revision points"
    )


# ══════════════════════════════════════════════════════════════════════════
# Supplementation Stage Contract
# ══════════════════════════════════════════════════════════════════════════


class SupplementationRequest(CamelModel):
    """
    What:  Input of the supplementation stage.

    revision_points is ONE string holding a "## Title" heading per point,
    separated by blank lines (see revision_service.fold_revision_points).
    """

    topic: str = Field(description="The topic of the revision sheet (context only)")
    revision_points: str = Field(
        min_length=1,
        description=(
            'A single string containing the revision point titles, each formatted '
            'as a Markdown heading (e.g., "## Point Title\\n\\n## Another Point Title").'
        ),
    )
    language: Language = Field(description="The language of the revision sheet")


class SupplementationResponse(CamelModel):
    """
    Output of the supplementation stage: a single Markdown document with no
    embedded structured-data fragments.
    """

    supplemented_points: str = Field(
        description="The revision points expanded into one continuous Markdown string"
    )


# ══════════════════════════════════════════════════════════════════════════
# Orchestrator Contract
# ══════════════════════════════════════════════════════════════════════════


class RevisionSheetRequest(CamelModel):
    """
    What:  Form state submitted by the client for a full revision sheet.

    input_type decides which content is used: "image" sends every image,
    "text" sends the text. The other field is ignored.
    """

    topic: str = Field(min_length=3, description="Subject of the revision sheet")
    language: Language = Field(default=Language.FR, description="Language of the revision sheet")
    input_type: Literal["text", "image"] = Field(default="text")
    text_content: Optional[str] = Field(default=None)
    images: List[str] = Field(
        default_factory=list,
        description="Images as data URIs, in the order they were selected",
    )


class RevisionSheet(CamelModel):
    """
    What:  The displayable aggregate, assembled only after both stages ran.
    Who:   Handed to the client, which renders supplemented_content as
           Markdown and may export it to PDF.
    """

    topic: str
    language: Language
    extracted_points: List[RevisionPoint]
    supplemented_content: str


class Notification(CamelModel):
    """
    What:  A user-visible, non-fatal message (progress, success, or failure).

    duration_ms is set on failures: the client dismisses them automatically.
    """

    title: str
    description: str
    variant: Literal["default", "success", "destructive"] = "default"
    duration_ms: Optional[int] = None


class RevisionOutcome(CamelModel):
    """
    What:  Result of one orchestrated submission. Never an exception.

    status="completed" carries a sheet; status="failed" carries an error code
    and no sheet (no partial result is shown).
    """

    status: Literal["completed", "failed"]
    sheet: Optional[RevisionSheet] = None
    error: Optional[Literal["validation_error", "extraction_failed", "internal_error"]] = None
    notifications: List[Notification] = Field(default_factory=list)


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Response Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "File type '.gif' is not supported",
            "details": {"field": "files"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    gemini: str = Field(description="Gemini API status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
