"""Upload validation and base64 helpers.

Validation order is fixed: size first (so an oversized upload can be turned
away before its body is read), then the declared content type.  Accepted
bytes are returned base64-encoded and otherwise untouched: no resizing,
re-encoding or metadata stripping.
"""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Iterable

from silkify.core.config import DEFAULT_ALLOWED_MIME_TYPES, MAX_UPLOAD_BYTES
from silkify.core.errors import InvalidUpload

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = "data:"


def sniff_mime_type(data: bytes) -> str:
    """Guess the image type from its magic bytes.

    Only the three accepted formats are recognised; anything else is
    reported as ``image/jpeg``, which is what the vision provider is sent
    when the format cannot be told.
    """
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def strip_data_url(image_base64: str) -> str:
    """Drop a ``data:<mime>;base64,`` prefix and surrounding whitespace."""
    payload = image_base64.strip()
    if payload.startswith(_DATA_URL_PREFIX) and "," in payload:
        payload = payload.split(",", 1)[1]
    return payload


def decode_image_base64(image_base64: str) -> bytes:
    """Strictly decode a base64 image payload.

    A leading ``data:<mime>;base64,`` prefix is tolerated so that data URLs
    produced by browsers can be passed through unchanged.

    Raises:
        InvalidUpload: If the payload is empty or not valid base64.
    """
    payload = strip_data_url(image_base64 or "")
    if not payload:
        raise InvalidUpload("No image data provided", reason="missing")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidUpload("Image data is not valid base64", reason="encoding") from e

    if not data:
        raise InvalidUpload("No image data provided", reason="empty")
    return data


class UploadHandler:
    """Validates uploaded images and converts them to base64.

    Args:
        max_bytes: Largest accepted payload, inclusive.
        allowed_mime_types: Declared content types that are accepted.
    """

    def __init__(
        self,
        max_bytes: int = MAX_UPLOAD_BYTES,
        allowed_mime_types: Iterable[str] = DEFAULT_ALLOWED_MIME_TYPES,
    ) -> None:
        self.max_bytes = max_bytes
        self.allowed_mime_types = frozenset(allowed_mime_types)

    def check_declared(self, declared_mime_type: str | None, declared_size: int | None) -> None:
        """Validate the declared size and type without looking at the content.

        ``declared_size`` may be ``None`` when the client did not send one;
        the size check is then left to :meth:`accept`.

        Raises:
            InvalidUpload: ``reason="size"`` or ``reason="type"``.
        """
        if declared_size is not None and declared_size > self.max_bytes:
            limit_mib = self.max_bytes / (1024 * 1024)
            raise InvalidUpload(
                f"Image size should not exceed {limit_mib:g}MB",
                reason="size",
            )

        if (declared_mime_type or "").lower() not in self.allowed_mime_types:
            raise InvalidUpload(
                "Please upload a valid image (JPG, PNG, WEBP)",
                reason="type",
            )

    def accept(
        self,
        raw_bytes: bytes,
        declared_mime_type: str | None,
        declared_size: int | None = None,
    ) -> str:
        """Validate an upload and return it base64-encoded.

        Args:
            raw_bytes: The uploaded file content.
            declared_mime_type: Content type reported by the client.
            declared_size: Size reported by the client.  Defaults to the
                length of *raw_bytes*; the actual length is checked too.

        Returns:
            The base64 encoding of *raw_bytes* as an ASCII string.

        Raises:
            InvalidUpload: If the payload is too large, of a disallowed
                type, or empty.
        """
        size = len(raw_bytes) if declared_size is None else max(declared_size, len(raw_bytes))
        self.check_declared(declared_mime_type, size)

        if not raw_bytes:
            raise InvalidUpload("Uploaded image is empty", reason="empty")

        logger.debug(f"Accepted {declared_mime_type} upload of {len(raw_bytes)} bytes")
        return base64.b64encode(raw_bytes).decode("ascii")
