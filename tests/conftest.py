"""
Revisio Backend — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures (function-scoped):
    ├── mock_llm: LLMService double whose generate_json is an AsyncMock
    ├── png_bytes / png_data_uri: A tiny valid PNG and its data URI
    ├── photosynthesis_form: Text-mode RevisionSheetRequest
    └── test_client: HTTPX AsyncClient for API endpoint testing

No test talks to Gemini: every model answer comes from mock_llm.
"""

import base64
import os
from unittest.mock import AsyncMock, MagicMock

# Override settings BEFORE any revisio import
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RETRY_MAX_ATTEMPTS"] = "1"  # No backoff sleeps in tests

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from revisio.schemas.revision import RevisionSheetRequest
from revisio.services.llm_base import LLMService


@pytest.fixture
def mock_llm():
    """
    An LLMService double.

    Usage:
        mock_llm.generate_json.return_value = '{"revisionPoints": [...]}'
        mock_llm.generate_json.side_effect = LLMServiceError(message="quota")
    """
    llm = MagicMock(spec=LLMService)
    llm.generate_json = AsyncMock()
    llm.health_check = AsyncMock(return_value=True)
    return llm


@pytest.fixture
def png_bytes():
    """Minimal 1x1 transparent PNG."""
    return base64.b64decode(
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
    )


@pytest.fixture
def png_data_uri(png_bytes):
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def photosynthesis_form():
    return RevisionSheetRequest(
        topic="Biology",
        language="en",
        input_type="text",
        text_content="Photosynthesis converts light into chemical energy.",
    )


@pytest_asyncio.fixture
async def test_client():
    """
    HTTPX AsyncClient routed directly to the FastAPI app via ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    from revisio.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
