"""Configuration management for Silkify.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the SILKIFY_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (SILKIFY_* prefix)
2. .env file in the project root
3. Default values defined in SilkifyConfig

The OpenAI API key is additionally read from the conventional
``OPENAI_API_KEY`` variable so existing shells work unchanged.

Example .env file:
    SILKIFY_OPENAI_API_KEY=sk-...
    SILKIFY_VISION_MODEL=gpt-4o
    SILKIFY_IMAGE_MODEL=dall-e-3
    SILKIFY_IMAGE_QUALITY=hd

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time and
is used by the default application in :mod:`silkify.api.main`.  Tests and
embedders construct their own :class:`SilkifyConfig` and pass it to
:func:`silkify.api.main.create_app` instead.

Usage Example
-------------
    from silkify.core.config import config

    print(config.vision_model)
    print(config.max_upload_bytes)

Provider Settings
-----------------
- vision_model: chat model used to describe the uploaded image
- image_model: image model used to render the styled result
- image_size / image_quality: fixed output resolution and quality tier
- openai_timeout: per-request timeout; ``None`` keeps the SDK default
"""

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
DEFAULT_ALLOWED_MIME_TYPES = ["image/jpeg", "image/png", "image/webp"]


class SilkifyConfig(BaseSettings):
    """Main configuration for Silkify.

    Values are loaded from environment variables with the SILKIFY_ prefix,
    with fallback to defaults defined here.

    Attributes
    ----------
    Provider Settings:
        openai_api_key : str
            OpenAI credentials.  Empty means "not configured"; the server
            still starts but logs a warning and every transform fails.
        vision_model : str
            Chat model with image input used for the description stage
        image_model : str
            Image model used for the generation stage
        image_size : Literal["1024x1024", "1792x1024", "1024x1792"]
            Output resolution requested from the image model
        image_quality : Literal["standard", "hd"]
            Output quality tier requested from the image model
        description_max_tokens : int
            Token cap for the description completion
        openai_timeout : float | None
            Request timeout in seconds passed to the OpenAI client

    Upload Settings:
        max_upload_bytes : int
            Largest accepted upload in bytes (5 MiB)
        allowed_mime_types : list[str]
            Declared content types accepted by the upload endpoint

    Server Settings:
        server_host : str
            Bind address for uvicorn
        server_port : int
            Bind port (1024-65535)
        cors_origins : list[str]
            Origins allowed by the CORS middleware
        log_level : Literal["DEBUG", "INFO", "WARNING", "ERROR"]
            Root log level configured by the CLI entry point

    Examples
    --------
        >>> custom_config = SilkifyConfig(
        ...     openai_api_key="sk-test",
        ...     image_quality="hd",
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SILKIFY_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Provider credentials and models
    openai_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "openai_api_key", "SILKIFY_OPENAI_API_KEY", "OPENAI_API_KEY"
        ),
        description="OpenAI API key used by both capability providers",
    )
    vision_model: str = Field(
        default="gpt-4o",
        description="Vision-capable chat model for the description stage",
    )
    image_model: str = Field(
        default="dall-e-3",
        description="Image generation model for the generation stage",
    )
    image_size: Literal["1024x1024", "1792x1024", "1024x1792"] = Field(
        default="1024x1024",
        description="Output resolution requested from the image model",
    )
    image_quality: Literal["standard", "hd"] = Field(
        default="standard",
        description="Output quality tier requested from the image model",
    )
    description_max_tokens: int = Field(
        default=300,
        description="Token cap for the description completion",
        ge=1,
        le=4096,
    )
    openai_timeout: float | None = Field(
        default=None,
        description="OpenAI request timeout in seconds (None = SDK default)",
        gt=0,
    )

    # Upload limits
    max_upload_bytes: int = Field(
        default=MAX_UPLOAD_BYTES,
        description="Largest accepted upload in bytes",
        ge=1,
    )
    allowed_mime_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_MIME_TYPES),
        description="Accepted upload content types",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=5000,
        description="Server port",
        ge=1024,
        le=65535,
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level configured by the CLI entry point",
    )

    @property
    def provider_configured(self) -> bool:
        """Whether credentials for the OpenAI providers are present."""
        return bool(self.openai_api_key.strip())


# Global configuration instance
# Loads values from environment variables (SILKIFY_* prefix) and .env file.
config = SilkifyConfig()
