"""
Revisio Backend — Middleware Tests
===================================

What we test:
    ✅ Well-formed client request IDs are reused, others replaced
    ✅ The request ID is echoed in the X-Request-ID header
    ✅ Access-log level follows the status code; quiet paths are not logged
"""

import logging
from unittest.mock import AsyncMock, patch

import pytest

from revisio.middleware.logging import level_for_status
from revisio.middleware.request_id import request_id_var, resolve_request_id
from revisio.services.gemini_service import gemini_service


class TestResolveRequestId:

    def test_well_formed_client_id_is_reused(self):
        assert resolve_request_id("sheet-42_a") == "sheet-42_a"

    @pytest.mark.parametrize(
        "header",
        ["", "   ", "bad id with spaces", "x" * 65, "line\nbreak"],
        ids=["empty", "blank", "spaces", "too-long", "newline"],
    )
    def test_malformed_client_id_is_replaced(self, header):
        rid = resolve_request_id(header)
        assert rid != header
        assert len(rid) == 8


class TestRequestIdHeader:

    @pytest.mark.asyncio
    async def test_client_id_is_echoed(self, test_client):
        with patch.object(gemini_service, "health_check", AsyncMock(return_value=True)):
            response = await test_client.get("/health", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_unsafe_client_id_is_not_echoed(self, test_client):
        with patch.object(gemini_service, "health_check", AsyncMock(return_value=True)):
            response = await test_client.get("/health", headers={"X-Request-ID": "a b;c"})

        assert response.headers["X-Request-ID"] != "a b;c"

    @pytest.mark.asyncio
    async def test_context_is_reset_after_the_request(self, test_client):
        with patch.object(gemini_service, "health_check", AsyncMock(return_value=True)):
            await test_client.get("/health", headers={"X-Request-ID": "abc123"})

        assert request_id_var.get("") == ""


class TestAccessLog:

    @pytest.mark.parametrize(
        "status,level",
        [(200, logging.INFO), (400, logging.WARNING), (422, logging.WARNING), (502, logging.ERROR)],
    )
    def test_level_follows_status(self, status, level):
        assert level_for_status(status) == level

    @pytest.mark.asyncio
    async def test_rejected_submission_is_logged_as_warning(self, test_client, caplog):
        with caplog.at_level(logging.INFO, logger="revisio.access"):
            response = await test_client.post(
                "/api/revision-sheets",
                json={"topic": "Biology", "language": "en"},
                headers={"X-Request-ID": "rid-400"},
            )

        assert response.status_code == 400
        records = [r for r in caplog.records if r.name == "revisio.access"]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert "rid-400" in records[0].getMessage()
        assert "/api/revision-sheets" in records[0].getMessage()

    @pytest.mark.asyncio
    async def test_health_is_not_logged(self, test_client, caplog):
        with caplog.at_level(logging.INFO, logger="revisio.access"):
            with patch.object(gemini_service, "health_check", AsyncMock(return_value=True)):
                await test_client.get("/health")

        assert not [r for r in caplog.records if r.name == "revisio.access"]
