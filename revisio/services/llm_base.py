"""
Revisio Backend — Abstract LLM Service Interface
=================================================

What:  Abstract base class defining the contract for structured generation.
How:   Concrete implementations inherit from LLMService and implement
       generate_json() and health_check().
Who:   Called by ExtractionService and SupplementationService.

The stages treat the model as an opaque function:
    (prompt parts, declared output schema) -> raw JSON text | LLMServiceError
Output content is non-deterministic; validating it is the caller's job.
"""

from abc import ABC, abstractmethod
from typing import Any, List


class LLMService(ABC):
    """
    Abstract interface for schema-constrained content generation.

    Contract:
        - generate_json() sends prompt parts (text and inline images) and
          returns the model's raw text, expected to be JSON
        - Implementations handle their own retry logic
        - All implementation-specific errors are wrapped in LLMServiceError
    """

    @abstractmethod
    async def generate_json(self, parts: List[Any], response_schema: Any) -> str:
        """
        Generate a JSON payload conforming to response_schema.

        Args:
            parts: Ordered prompt parts. Strings are text; dicts with
                   "mime_type" and "data" (bytes) are inline images.
            response_schema: Declared output schema (TypedDict class).

        Returns:
            str: The raw model output. May be empty or malformed; the caller
                 validates it against its own pydantic model.

        Raises:
            LLMServiceError: When the remote call fails after all retries.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the LLM service is reachable and operational.

        Returns: True if service is reachable, False otherwise.
        """
        ...
