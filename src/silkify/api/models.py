"""Pydantic request and response models for the Silkify API.

These models define the JSON schema for every API endpoint.  Field names
are snake_case in Python and camelCase on the wire (``imageBase64``,
``transformedImageUrl``), matching the frontend's expectations.

Models
------
StyleSummary
    One entry of ``GET /api/styles``.
UploadResponse
    Response of ``POST /api/upload``.
TransformRequest / TransformResponse
    Payload and response of ``POST /api/transform``.
ErrorResponse
    Body of every non-2xx response.
HealthResponse
    Response of ``GET /api/health``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StyleSummary(_ApiModel):
    """Public view of a catalog style (the prompt template is not exposed)."""

    id: str
    name: str
    description: str


class UploadResponse(_ApiModel):
    """Response body for ``POST /api/upload``.

    Attributes:
        image_base64: The uploaded bytes, base64-encoded.
        original_name: Filename reported by the client.
        image_id: Id of the ``Image`` record created for the upload.
    """

    image_base64: str
    original_name: str
    image_id: int


class TransformRequest(_ApiModel):
    """Request body for ``POST /api/transform``.

    ``style`` and ``image_base64`` are optional at the schema level so the
    route can answer missing values with a 400 ``{message}`` body instead
    of a schema error.

    Attributes:
        style: One of the five catalog style ids.
        image_base64: The source image, base64-encoded.
        image_id: Optional id of the uploaded ``Image``; when present a
            ``Transformation`` record is stored for the result.
    """

    style: str | None = Field(
        default=None,
        description="Style id: lego, anime, ghibli, futuristic or vintage.",
    )
    image_base64: str | None = Field(
        default=None,
        description="Base64-encoded source image.",
    )
    image_id: int | None = Field(
        default=None,
        description="Id returned by /api/upload; links the result to that image.",
    )


class TransformResponse(_ApiModel):
    transformed_image_url: str
    transformation_id: int | None = None


class ErrorResponse(BaseModel):
    message: str


class HealthResponse(_ApiModel):
    status: str
    version: str
    provider_configured: bool
