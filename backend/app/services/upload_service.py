"""Upload validation and storage naming.

Nothing is written anywhere: the service checks the payload, picks a unique
name and returns the URL the file would live at.
"""

import base64
import binascii
import logging
import re
import time
import uuid
from typing import NamedTuple, Optional
from app.config import settings
from app.errors import InvalidFormatError, TooLargeError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_UNDERSCORE_RUNS = re.compile(r"_+")

JPEG_SIGNATURE = b"\xff\xd8\xff"
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
RIFF_SIGNATURE = b"RIFF"
WEBP_SIGNATURE = b"WEBP"


class StoredUpload(NamedTuple):
    file_url: str
    file_size: int


def sanitize_filename(filename: str) -> str:
    """
    Make a filename safe to embed in a URL.

    Every character outside [A-Za-z0-9._-] becomes "_", runs of "_" are
    collapsed and leading/trailing "_" are stripped.

    Args:
        filename: Client supplied file name

    Returns:
        Sanitized name, or "upload" if nothing survives
    """
    cleaned = _UNSAFE_CHARS.sub("_", filename)
    cleaned = _UNDERSCORE_RUNS.sub("_", cleaned).strip("_")
    return cleaned or "upload"


def matches_signature(data: bytes, mime_type: str) -> bool:
    """Check the leading magic bytes against the claimed MIME type."""
    if mime_type in ("image/jpeg", "image/jpg"):
        return data.startswith(JPEG_SIGNATURE)
    if mime_type == "image/png":
        return data.startswith(PNG_SIGNATURE)
    if mime_type == "image/webp":
        return data.startswith(RIFF_SIGNATURE) and data[8:12] == WEBP_SIGNATURE
    return False


def unique_token() -> str:
    """Millisecond timestamp plus a random suffix."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


class UploadService:
    """Validates uploaded images and assigns them storage URLs."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        min_bytes: Optional[int] = None,
        max_bytes: Optional[int] = None,
    ):
        self.base_url = base_url or settings.STORAGE_BASE_URL
        self.min_bytes = settings.MIN_UPLOAD_BYTES if min_bytes is None else min_bytes
        self.max_bytes = settings.MAX_UPLOAD_BYTES if max_bytes is None else max_bytes

    def decode(self, file_data: str) -> bytes:
        """
        Decode a base64 payload.

        Args:
            file_data: Base64 text

        Returns:
            Raw bytes

        Raises:
            InvalidFormatError: Payload is empty or not base64
        """
        if not file_data:
            raise InvalidFormatError("File data is empty")
        try:
            return base64.b64decode(file_data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidFormatError(f"File data is not valid base64: {e}")

    def validate(self, data: bytes, mime_type: str):
        """
        Check size bounds and magic bytes.

        Raises:
            InvalidFormatError: Too small, or signature does not match mime_type
            TooLargeError: Larger than the upload ceiling
        """
        size = len(data)
        if size < self.min_bytes:
            raise InvalidFormatError(
                f"File is too small to be a valid image ({size} bytes)"
            )
        if not matches_signature(data, mime_type):
            raise InvalidFormatError(
                f"File content does not match declared type {mime_type}"
            )
        if size > self.max_bytes:
            raise TooLargeError(
                f"File size {size} bytes exceeds the maximum of {self.max_bytes} bytes"
            )

    def upload(self, filename: str, file_data: str, mime_type: str) -> StoredUpload:
        """
        Validate an upload and return where it is stored.

        Args:
            filename: Original file name
            file_data: Base64 encoded contents
            mime_type: Claimed MIME type

        Returns:
            StoredUpload with the file URL and decoded size
        """
        data = self.decode(file_data)
        self.validate(data, mime_type)

        stored_name = f"{unique_token()}-{sanitize_filename(filename)}"
        file_url = f"{self.base_url}/uploads/{stored_name}"

        logger.info(f"Accepted upload {filename!r} ({len(data)} bytes) as {stored_name}")
        return StoredUpload(file_url=file_url, file_size=len(data))


# Global upload service instance
upload_service = UploadService()
