"""Error taxonomy for Silkify.

Every failure the service can report is one of the classes below.  Each
carries a user-facing ``message``, the pipeline ``stage`` it came from and,
for upstream failures, the original exception as ``cause`` (also chained via
``raise ... from``).  The HTTP layer maps ``status_code`` straight onto the
response, so callers branch on the class rather than on message text.

Client errors (400):
    InvalidUpload, UnknownStyle

Upstream errors (500):
    DescriptionUnavailable, GenerationFailed, TransformationFailed
"""

from __future__ import annotations

from typing import Literal

Stage = Literal["upload", "catalog", "describe", "generate", "store"]


class SilkifyError(Exception):
    """Base class for all Silkify errors.

    Attributes:
        message: Human-readable description, safe to return to the caller.
        stage: Which part of the request flow raised the error.
        cause: The upstream exception this error wraps, if any.
        status_code: HTTP status the API layer responds with.
    """

    status_code: int = 500
    default_stage: Stage = "store"

    def __init__(
        self,
        message: str,
        *,
        stage: Stage | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage: Stage = stage or self.default_stage
        self.cause = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}(stage={self.stage!r}, message={self.message!r})"


class InvalidUpload(SilkifyError):
    """The uploaded payload is missing, empty, too large or of the wrong type.

    ``reason`` is one of ``"missing"``, ``"empty"``, ``"size"``, ``"type"``
    or ``"encoding"``.
    """

    status_code = 400
    default_stage = "upload"

    def __init__(self, message: str, *, reason: str, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.reason = reason


class UnknownStyle(SilkifyError):
    """The requested style id is not in the catalog."""

    status_code = 400
    default_stage = "catalog"

    def __init__(self, style_id: object) -> None:
        super().__init__(f"Invalid style selected: {style_id!r}")
        self.style_id = style_id


class DescriptionUnavailable(SilkifyError):
    """The description provider answered but returned no usable text."""

    default_stage = "describe"


class GenerationFailed(SilkifyError):
    """The generation provider answered but returned no image reference."""

    default_stage = "generate"


class TransformationFailed(SilkifyError):
    """An upstream call raised; ``cause`` holds the original exception."""


class ProviderNotConfigured(SilkifyError):
    """A capability provider was used without credentials."""


class DuplicateUsername(SilkifyError):
    status_code = 409

    def __init__(self, username: str) -> None:
        super().__init__(f"Username already exists: {username}")
        self.username = username
