"""
Revisio Backend — Explicit Stage Results
=========================================

What:  Result types returned by the extraction and supplementation stages.
How:   An outcome is either ok (carries data) or failed (carries a
       StageFailure). Failures are rendered into localized placeholder
       content only when to_response() is asked for a displayable shape.
Who:   Produced by the stage services; consumed by RevisionService (which
       branches on .ok) and by the stage routes (which call to_response()).

    ExtractionOutcome(points=[...])                    → ok
    ExtractionOutcome(failure=StageFailure(...))       → failed
    outcome.to_response()                              → ExtractionResponse
                                                         (placeholder point on failure)
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from revisio.schemas.revision import (
    ExtractionResponse,
    Language,
    RevisionPoint,
    SupplementationResponse,
)
from revisio.services.localization import (
    render_extraction_failure,
    render_supplementation_failure,
)


FailureKind = Literal["schema_violation", "upstream_failure"]


class StageFailure(BaseModel):
    """
    Why a stage did not produce a result.

    Attributes:
        kind:     schema_violation (model answered with the wrong shape) or
                  upstream_failure (the call itself failed)
        detail:   raw model output or underlying error text, for diagnosis
        language: language the failure should be rendered in
    """

    kind: FailureKind
    detail: str = ""
    language: Language


class ExtractionOutcome(BaseModel):
    points: List[RevisionPoint] = Field(default_factory=list)
    failure: Optional[StageFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_response(self) -> ExtractionResponse:
        if self.failure is None:
            return ExtractionResponse(revision_points=self.points)
        point = render_extraction_failure(
            self.failure.kind, self.failure.detail, self.failure.language
        )
        return ExtractionResponse(revision_points=[point])


class SupplementationOutcome(BaseModel):
    markdown: Optional[str] = None
    failure: Optional[StageFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_response(self) -> SupplementationResponse:
        if self.failure is None:
            return SupplementationResponse(supplemented_points=self.markdown or "")
        text = render_supplementation_failure(
            self.failure.kind, self.failure.detail, self.failure.language
        )
        return SupplementationResponse(supplemented_points=text)
