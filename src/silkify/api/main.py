"""Silkify — FastAPI Application.

This module defines the application factory, the REST routes and the
``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Configuration** comes from :class:`~silkify.core.config.SilkifyConfig`
  (environment variables with the ``SILKIFY_`` prefix).
- **Records** live in a :class:`~silkify.core.store.MemoryStore` created by
  :func:`create_app` and kept on ``app.state``; nothing is persisted.
- **Transformations** run through
  :class:`~silkify.core.pipeline.TransformationPipeline`, which calls the
  description and generation providers in sequence.
- **Errors** from the :mod:`silkify.core.errors` taxonomy are turned into
  ``{"message": ...}`` JSON bodies by the exception handlers registered
  here; the status code comes from the error class.

Endpoints
---------
========  ======================================  ================================
Method    Path                                    Purpose
========  ======================================  ================================
GET       ``/api/styles``                         The five art styles, in order
POST      ``/api/upload``                         Validate and base64-encode an image
POST      ``/api/transform``                      Describe + regenerate in a style
GET       ``/api/images/{id}``                    Uploaded image metadata
GET       ``/api/images/{id}/transformations``    Results generated from an image
GET       ``/api/health``                         Liveness and provider status
========  ======================================  ================================

Usage
-----
CLI (installed entry point)::

    silkify

Direct invocation::

    python -m silkify.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from silkify import __version__
from silkify.api.models import (
    HealthResponse,
    StyleSummary,
    TransformRequest,
    TransformResponse,
    UploadResponse,
)
from silkify.core.config import SilkifyConfig, config as default_config
from silkify.core.errors import InvalidUpload, SilkifyError, UnknownStyle
from silkify.core.pipeline import TransformationPipeline
from silkify.core.providers import (
    DescriptionProvider,
    GenerationProvider,
    OpenAIDescriptionProvider,
    OpenAIGenerationProvider,
)
from silkify.core.store import Image, MemoryStore, NewImage, NewTransformation, Transformation
from silkify.core.styles import is_valid_style, list_styles
from silkify.core.upload import UploadHandler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ---------------------------------------------------------------------------
# Application lifecycle.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log provider status on startup.

    A missing API key does not stop the server; the styles and upload
    endpoints keep working and every transform fails with a 500.
    """
    cfg: SilkifyConfig = app.state.config
    if cfg.provider_configured:
        logger.info(f"Providers configured: vision={cfg.vision_model}, image={cfg.image_model}")
    else:
        logger.warning("OPENAI API key is not set; /api/transform will fail until it is configured")

    yield


# ---------------------------------------------------------------------------
# Error translation.
# ---------------------------------------------------------------------------


async def _silkify_error_handler(request: Request, exc: SilkifyError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"message": message})


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"message": str(exc) or "Internal server error"})


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@router.get("/styles", response_model=list[StyleSummary])
async def get_styles() -> list[StyleSummary]:
    """Return the five art styles in display order."""
    return [
        StyleSummary(id=style.id, name=style.name, description=style.description)
        for style in list_styles()
    ]


@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    request: Request,
    image: UploadFile | None = File(default=None),
) -> UploadResponse:
    """Validate an uploaded image and return it base64-encoded.

    The declared size and content type are checked before the file is
    read, and at most ``max_upload_bytes + 1`` bytes are read from it.  An
    ``Image`` record is created for every accepted upload.

    Raises:
        InvalidUpload: 400 if the file is missing, empty, too large or of a
            disallowed type.
        HTTPException: 500 on any unexpected failure.
    """
    if image is None:
        raise InvalidUpload("No image file uploaded", reason="missing")

    handler: UploadHandler = request.app.state.upload_handler
    store: MemoryStore = request.app.state.store

    try:
        handler.check_declared(image.content_type, image.size)
        content = await image.read(handler.max_bytes + 1)
        image_base64 = handler.accept(content, image.content_type, image.size)

        original_name = image.filename or "upload"
        record = store.create_image(
            NewImage(
                original_filename=original_name,
                original_url=f"data:{image.content_type};base64,{image_base64}",
            )
        )
    except SilkifyError:
        raise
    except Exception as e:
        logger.error(f"Error uploading image: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e) or "Failed to upload image") from e
    finally:
        await image.close()

    logger.info(f"Accepted upload {original_name!r} as image {record.id} ({len(content)} bytes)")
    return UploadResponse(
        image_base64=image_base64,
        original_name=original_name,
        image_id=record.id,
    )


@router.post(
    "/transform",
    response_model=TransformResponse,
    response_model_exclude_none=True,
)
async def transform_image(req: TransformRequest, request: Request) -> TransformResponse:
    """Transform an image into the selected art style.

    Validates the style and image payload, runs the describe-then-generate
    pipeline and, when ``imageId`` is given, records the result against
    that image.

    Raises:
        UnknownStyle: 400 for a style outside the catalog.
        InvalidUpload: 400 when the image payload is missing or not base64.
        SilkifyError: 500 for any provider-side failure.
    """
    if not is_valid_style(req.style):
        raise UnknownStyle(req.style)
    if not req.image_base64:
        raise InvalidUpload("No image data provided", reason="missing")

    pipeline: TransformationPipeline = request.app.state.pipeline
    store: MemoryStore = request.app.state.store

    logger.info(f"Starting image transformation with style: {req.style}")
    transformed_url = await pipeline.transform(req.image_base64, req.style)

    transformation_id = None
    if req.image_id is not None:
        transformation = store.create_transformation(
            NewTransformation(
                image_id=req.image_id,
                style=req.style,
                transformed_url=transformed_url,
            )
        )
        transformation_id = transformation.id

    return TransformResponse(
        transformed_image_url=transformed_url,
        transformation_id=transformation_id,
    )


@router.get(
    "/images/{image_id}",
    response_model=Image,
    response_model_exclude={"original_url"},
)
async def get_image(image_id: int, request: Request) -> Image:
    """Return an uploaded image's metadata (without the image data).

    Raises:
        HTTPException: 404 if the image is not found.
    """
    image = request.app.state.store.get_image(image_id)
    if image is None:
        raise HTTPException(status_code=404, detail="Image not found")
    return image


@router.get("/images/{image_id}/transformations", response_model=list[Transformation])
async def get_image_transformations(image_id: int, request: Request) -> list[Transformation]:
    """Return the transformations generated from an image, oldest first.

    Raises:
        HTTPException: 404 if the image is not found.
    """
    store: MemoryStore = request.app.state.store
    if store.get_image(image_id) is None:
        raise HTTPException(status_code=404, detail="Image not found")
    return store.list_transformations_by_image_id(image_id)


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        provider_configured=request.app.state.config.provider_configured,
    )


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    config: SilkifyConfig | None = None,
    *,
    store: MemoryStore | None = None,
    describer: DescriptionProvider | None = None,
    generator: GenerationProvider | None = None,
) -> FastAPI:
    """Build a Silkify application.

    Every collaborator can be supplied explicitly; anything omitted is
    built from *config* (the global configuration by default).

    Args:
        config: Application configuration.
        store: Record store shared by all requests of this app.
        describer: Description provider (OpenAI vision by default).
        generator: Generation provider (OpenAI images by default).

    Returns:
        A configured :class:`FastAPI` instance.
    """
    cfg = config or default_config

    app = FastAPI(
        title="Silkify",
        description=(
            "Turn a photo into one of five art styles with a describe-then-generate pipeline."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    app.state.config = cfg
    app.state.store = store if store is not None else MemoryStore()
    app.state.upload_handler = UploadHandler(
        max_bytes=cfg.max_upload_bytes,
        allowed_mime_types=cfg.allowed_mime_types,
    )
    app.state.pipeline = TransformationPipeline(
        cfg,
        describer or OpenAIDescriptionProvider(cfg),
        generator or OpenAIGenerationProvider(cfg),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SilkifyError, _silkify_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)

    app.include_router(router)
    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from the global configuration
    (``SILKIFY_SERVER_HOST``, ``SILKIFY_SERVER_PORT``, ``SILKIFY_LOG_LEVEL``).
    Registered as the ``silkify`` console script in ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=default_config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "silkify.api.main:app",
        host=default_config.server_host,
        port=default_config.server_port,
        log_level=default_config.log_level.lower(),
        reload=False,
    )


if __name__ == "__main__":
    main()
