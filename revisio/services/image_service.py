"""
Revisio Backend — Image Intake Service
=======================================

What:  Turns uploaded image files into validated base64 data URIs, and data
       URIs back into (mime type, bytes) for the model call.
How:   Validates extension, size and sniffed MIME type of each upload, then
       encodes it. Multiple uploads are read concurrently; all of them finish
       before the extraction request is built.
Who:   Called by the upload route; parse_data_uri is used by the
       extraction stage to build inline image parts.

Data URI format:
    data:<mime>;base64,<data>     e.g. data:image/png;base64,iVBORw0KGgo...
"""

import asyncio
import base64
import binascii
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from fastapi import UploadFile

from revisio.config import settings
from revisio.exceptions import ValidationError
from revisio.schemas.revision import DATA_URI_PATTERN

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}


def encode_data_uri(content: bytes, mime_type: str) -> str:
    """Encode raw bytes as a base64 data URI."""
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def parse_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """
    Split a base64 data URI into its MIME type and decoded bytes.

    Raises:
        ValidationError: Not a data URI, or the payload is not valid base64.
    """
    match = DATA_URI_PATTERN.match(data_uri)
    if not match:
        raise ValidationError(
            message="Expected an image data URI of the form 'data:<mimetype>;base64,<data>'.",
            field="images",
        )
    payload = "".join(match.group("data").split())
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(
            message="Image data URI does not contain valid base64 data.",
            field="images",
            context={"error": str(e)},
        )
    return match.group("mime"), data


class ImageService:
    """
    Validates uploads and converts them to data URIs.

    Validation order (cheapest first):
        1. Extension check — no content needed
        2. Size check — Content-Length header, then actual byte count
        3. MIME type check — libmagic reads the first bytes
    """

    def validate_extension(self, filename: str) -> str:
        """
        Returns: Normalized extension (lowercase with dot).
        Raises:  ValidationError if extension is not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="files",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Reject empty files and files over settings.max_image_size.

        Args:
            content_length: Size reported by the client (may be None or wrong)
            actual_size: Actual byte count of the uploaded file
        """
        max_mb = settings.max_image_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(
                message="The uploaded image is empty.",
                field="files",
            )

        if content_length and content_length > settings.max_image_size:
            raise ValidationError(
                message=f"Image size exceeds maximum of {max_mb:.0f}MB. Please upload a smaller image.",
                field="files",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_image_size:
            raise ValidationError(
                message=f"Image size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="files",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def _sniff_mime_type(self, content: bytes) -> str:
        import magic

        return magic.from_buffer(content, mime=True)

    def validate_mime_type(self, content: bytes, filename: str) -> str:
        """
        Determine the true MIME type from the file header bytes.

        Returns:
            Detected MIME type string (e.g., "image/jpeg")

        Raises:
            ValidationError if the MIME type is not an allowed image type
        """
        mime_type = self._sniff_mime_type(content)

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    f"'{filename}' must be a valid image (PNG or JPEG)."
                ),
                field="files",
                context={"detected_mime": mime_type, "allowed": list(ALLOWED_MIME_TYPES.keys())},
            )
        return mime_type

    def to_data_uri(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        """Validate one image and return it as a data URI."""
        self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        mime_type = self.validate_mime_type(content, filename)
        return encode_data_uri(content, mime_type)

    async def read_upload(self, upload: UploadFile) -> str:
        """Read and validate one uploaded file; always closes it."""
        try:
            content = await upload.read()
            return self.to_data_uri(
                filename=upload.filename or "upload.jpg",
                content=content,
                content_length=upload.size,
            )
        finally:
            await upload.close()

    async def read_uploads(self, uploads: Sequence[UploadFile]) -> List[str]:
        """
        Read every upload concurrently and return data URIs in upload order.

        Raises:
            ValidationError: Too many files, or any single file is invalid.
        """
        if len(uploads) > settings.max_images:
            raise ValidationError(
                message=f"Too many images: at most {settings.max_images} can be submitted at once.",
                field="files",
                context={"count": len(uploads), "max_images": settings.max_images},
            )

        data_uris = await asyncio.gather(*(self.read_upload(u) for u in uploads))

        logger.info(
            "Read %d images (%d bytes encoded)",
            len(data_uris),
            sum(len(uri) for uri in data_uris),
        )
        return list(data_uris)


# ── Singleton Instance ────────────────────────────────────────────────────
image_service = ImageService()
