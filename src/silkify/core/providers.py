"""Capability providers for the transformation pipeline.

The pipeline depends on two capabilities only:

- **description** — image in, free text out (``DescriptionProvider``)
- **generation** — prompt in, image URL out (``GenerationProvider``)

Both are abstract base classes so that tests and alternative backends can
plug in without touching :mod:`silkify.core.pipeline`.  The OpenAI
implementations below are what the server uses by default: a vision-capable
chat model for description and DALL-E 3 for generation.

Provider contract
-----------------
Implementations return ``None`` (or an empty string) when the upstream
service answered but produced nothing usable, and let exceptions propagate
when the call itself failed.  Classifying those two cases is the pipeline's
job, not the provider's.

Usage
-----
::

    from silkify.core.config import config
    from silkify.core.providers import (
        OpenAIDescriptionProvider,
        OpenAIGenerationProvider,
    )

    describer = OpenAIDescriptionProvider(config)
    text = await describer.describe("Describe this.", image_b64, "image/png")
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from silkify.core.config import SilkifyConfig
from silkify.core.errors import ProviderNotConfigured

if TYPE_CHECKING:
    from openai import AsyncOpenAI

logger = logging.getLogger(__name__)


class DescriptionProvider(ABC):
    """Turns an image into a textual description."""

    name: str = "description provider"

    @abstractmethod
    async def describe(self, instruction: str, image_base64: str, mime_type: str) -> str | None:
        """Describe an image.

        Args:
            instruction: What to describe and in how much detail.
            image_base64: The image, base64-encoded.
            mime_type: Content type of the encoded image.

        Returns:
            The description, or ``None`` if the provider produced none.
        """


class GenerationProvider(ABC):
    """Renders an image from a text prompt."""

    name: str = "generation provider"

    @abstractmethod
    async def generate(self, prompt: str, *, n: int, size: str, quality: str) -> str | None:
        """Generate an image.

        Args:
            prompt: Full generation instruction.
            n: Number of images to request.
            size: Output resolution, e.g. ``"1024x1024"``.
            quality: Quality tier, e.g. ``"standard"``.

        Returns:
            URL of the first generated image, or ``None`` if the provider
            returned no reference.
        """


class _OpenAIProvider:
    """Shared lazy ``AsyncOpenAI`` client handling.

    The client is created on first use rather than at construction so the
    server can start without credentials; the missing key then surfaces as
    a per-request failure.
    """

    def __init__(self, config: SilkifyConfig, client: AsyncOpenAI | None = None) -> None:
        self._config = config
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._config.provider_configured:
                raise ProviderNotConfigured("OpenAI API key is not set (SILKIFY_OPENAI_API_KEY)")

            from openai import AsyncOpenAI

            kwargs: dict = {"api_key": self._config.openai_api_key}
            if self._config.openai_timeout is not None:
                kwargs["timeout"] = self._config.openai_timeout
            self._client = AsyncOpenAI(**kwargs)
            logger.info("OpenAI client created")
        return self._client


class OpenAIDescriptionProvider(_OpenAIProvider, DescriptionProvider):
    """Describes images with an OpenAI vision chat model."""

    name = "openai-vision"

    async def describe(self, instruction: str, image_base64: str, mime_type: str) -> str | None:
        model = self._config.vision_model
        logger.info(f"Requesting image description from {model}")

        response = await self.client.chat.completions.create(
            model=model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": instruction},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{mime_type};base64,{image_base64}"},
                        },
                    ],
                }
            ],
            max_tokens=self._config.description_max_tokens,
        )

        if not response.choices:
            return None
        return response.choices[0].message.content


class OpenAIGenerationProvider(_OpenAIProvider, GenerationProvider):
    """Generates images with an OpenAI image model (DALL-E 3 by default)."""

    name = "openai-images"

    async def generate(self, prompt: str, *, n: int, size: str, quality: str) -> str | None:
        model = self._config.image_model
        logger.info(f"Requesting {n} image(s) from {model} at {size}/{quality}")

        response = await self.client.images.generate(
            model=model,
            prompt=prompt,
            n=n,
            size=size,
            quality=quality,
        )

        if not response.data:
            return None
        return getattr(response.data[0], "url", None)
