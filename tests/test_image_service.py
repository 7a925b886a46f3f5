"""
Revisio Backend — Image Intake Unit Tests
==========================================

What we test:
    ✅ Extension validation (allowed and rejected)
    ✅ Size validation (empty, reported and actual size over the limit)
    ✅ MIME validation against sniffed content
    ✅ Data URI encode / parse, including malformed input
    ✅ Concurrent reads keep upload order and close every file
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from revisio.config import settings
from revisio.exceptions import ValidationError
from revisio.services.image_service import ImageService, encode_data_uri, parse_data_uri


def fake_upload(filename, content):
    upload = MagicMock()
    upload.filename = filename
    upload.size = len(content)
    upload.read = AsyncMock(return_value=content)
    upload.close = AsyncMock()
    return upload


class TestExtensionValidation:

    def setup_method(self):
        self.service = ImageService()

    @pytest.mark.parametrize("filename", ["notes.png", "NOTES.PNG", "board.jpg", "board.jpeg"])
    def test_allowed_extensions(self, filename):
        assert self.service.validate_extension(filename).startswith(".")

    @pytest.mark.parametrize("filename", ["notes.gif", "notes.pdf", "notes"])
    def test_rejected_extensions(self, filename):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_extension(filename)
        assert exc_info.value.field == "files"


class TestSizeValidation:

    def setup_method(self):
        self.service = ImageService()

    def test_empty_file_is_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(0, 0)

    def test_reported_size_over_limit_is_rejected(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_size(settings.max_image_size + 1, 100)

    def test_actual_size_over_limit_is_rejected(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_size(None, settings.max_image_size + 1)

    def test_size_within_limit_passes(self):
        self.service.validate_size(1024, 1024)


class TestMimeValidation:

    def test_sniffed_image_type_is_accepted(self, png_bytes):
        service = ImageService()
        with patch.object(service, "_sniff_mime_type", return_value="image/png"):
            assert service.validate_mime_type(png_bytes, "notes.png") == "image/png"

    def test_disguised_file_is_rejected(self):
        service = ImageService()
        with patch.object(service, "_sniff_mime_type", return_value="application/pdf"):
            with pytest.raises(ValidationError, match="application/pdf"):
                service.validate_mime_type(b"%PDF-1.4", "notes.png")


class TestDataUris:

    def test_encode_then_parse(self, png_bytes, png_data_uri):
        assert encode_data_uri(png_bytes, "image/png") == png_data_uri
        assert parse_data_uri(png_data_uri) == ("image/png", png_bytes)

    @pytest.mark.parametrize(
        "uri",
        ["https://example.com/a.png", "data:image/png,rawbytes", "data:image/png;base64,abc$"],
        ids=["url", "not-base64-uri", "bad-characters"],
    )
    def test_malformed_uri_is_rejected(self, uri):
        with pytest.raises(ValidationError):
            parse_data_uri(uri)

    def test_bad_padding_is_rejected(self):
        with pytest.raises(ValidationError, match="valid base64"):
            parse_data_uri("data:image/png;base64,abc")


class TestReadUploads:

    @pytest.mark.asyncio
    async def test_order_is_preserved(self, png_bytes):
        service = ImageService()
        uploads = [
            fake_upload("first.png", png_bytes + b"1"),
            fake_upload("second.png", png_bytes + b"2"),
        ]

        with patch.object(service, "_sniff_mime_type", return_value="image/png"):
            uris = await service.read_uploads(uploads)

        assert [parse_data_uri(u)[1] for u in uris] == [png_bytes + b"1", png_bytes + b"2"]
        for upload in uploads:
            upload.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_file_closes_and_raises(self):
        service = ImageService()
        upload = fake_upload("notes.gif", b"GIF89a")

        with pytest.raises(ValidationError):
            await service.read_uploads([upload])

        upload.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_too_many_files_are_rejected(self, png_bytes):
        service = ImageService()
        uploads = [fake_upload(f"{i}.png", png_bytes) for i in range(settings.max_images + 1)]

        with pytest.raises(ValidationError, match="Too many images"):
            await service.read_uploads(uploads)

        for upload in uploads:
            upload.read.assert_not_awaited()
