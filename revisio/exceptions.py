"""
Revisio Backend — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for the revision sheet pipeline.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) turn the ones that
       reach the HTTP layer into structured JSON error responses.
Who:   Raised by services; caught by the stages, the orchestrator, or the
       global handlers.

Exception Hierarchy:
    RevisioError (base)
    ├── ValidationError        → 400 Bad Request (no remote call was made)
    ├── LLMServiceError        → 503 Service Unavailable (upstream failure)
    └── SchemaViolationError   → never leaves a stage (converted to StageFailure)

Propagation:
    Neither stage lets LLMServiceError or SchemaViolationError escape; they are
    recorded as an explicit StageFailure in the stage outcome. ValidationError
    is the one error a stage raises, and only before any remote call.
"""

from typing import Any, Dict, Optional


class RevisioError(Exception):
    """
    Base exception for all Revisio application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RevisioError):
    """
    Raised when a request is malformed or insufficient at the core boundary.

    When:    No text and no image, text too short, bad upload, empty point list.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Either text content or at least one image must be provided.",
            "details": {"field": "textContent"}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class LLMServiceError(RevisioError):
    """
    Raised when the remote model call itself fails (network, quota, timeout).

    When:    After tenacity retries are exhausted in GeminiService.
    HTTP:    503 Service Unavailable (only if it ever reaches a route)
    """

    def __init__(
        self,
        message: str = "AI generation service is temporarily unavailable",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class SchemaViolationError(RevisioError):
    """
    Raised when the model answered but the payload does not match the
    declared output schema.

    Attributes:
        raw_output: The unparsed model output, kept for diagnosis.
    """

    def __init__(
        self,
        message: str = "Model output does not match the expected schema",
        raw_output: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.raw_output = raw_output
