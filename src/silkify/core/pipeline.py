"""Two-stage image transformation: describe, then generate.

:class:`TransformationPipeline` turns an uploaded image and a style id into
the URL of a newly generated image:

1. **Resolve** the style's prompt template (``UnknownStyle`` if the id is not
   in the catalog) and decode the image locally.  Both checks happen before
   any provider is called, so bad input never costs a paid request.
2. **Describe** the image with the description provider.  An empty answer
   is an error (``DescriptionUnavailable``); generating from nothing would
   return an unrelated picture.
3. **Compose** the generation prompt: style directive first, then the
   description, then the instruction to preserve identity and layout.
4. **Generate** exactly one image at the configured size and quality.  No
   reference back is ``GenerationFailed``.

Provider exceptions are caught at this boundary and re-raised as
``TransformationFailed`` with a stage-specific message and the original
exception as ``cause``.  There are no retries; a failed generation discards
the description that was already paid for.

The pipeline does not write to the record store.

Usage
-----
::

    pipeline = TransformationPipeline(config, describer, generator)
    url = await pipeline.transform(image_base64, "anime")
"""

from __future__ import annotations

import logging

from silkify.core.config import SilkifyConfig
from silkify.core.errors import (
    DescriptionUnavailable,
    GenerationFailed,
    TransformationFailed,
)
from silkify.core.providers import DescriptionProvider, GenerationProvider
from silkify.core.styles import prompt_for
from silkify.core.upload import decode_image_base64, sniff_mime_type, strip_data_url

logger = logging.getLogger(__name__)

DESCRIPTION_INSTRUCTION = (
    "Describe this person and the overall scene in detail — include facial features, "
    "expression, clothing, posture, and background."
)

CONTENT_SEPARATOR = "Here is the image content to transform:"

PRESERVE_INSTRUCTION = (
    "Preserve the identity, pose, and scene layout while applying the style."
)


def build_generation_prompt(style_template: str, description: str) -> str:
    """Combine a style template and an image description into one prompt.

    Sections, in order: style directive, content separator and description,
    preservation instruction.  Sections are separated by blank lines.
    """
    return (
        f"{style_template.strip()}\n\n"
        f"{CONTENT_SEPARATOR}\n{description.strip()}\n\n"
        f"{PRESERVE_INSTRUCTION}"
    )


class TransformationPipeline:
    """Chains a description provider and a generation provider.

    Attributes:
        _config (SilkifyConfig):
            Supplies the output size and quality requested from the
            generation provider.
        describer (DescriptionProvider):
            Stage-one provider.
        generator (GenerationProvider):
            Stage-two provider.
    """

    def __init__(
        self,
        config: SilkifyConfig,
        describer: DescriptionProvider,
        generator: GenerationProvider,
    ) -> None:
        self._config = config
        self.describer = describer
        self.generator = generator

    async def transform(self, image_base64: str, style: str) -> str:
        """Transform an image into *style* and return the result's URL.

        Args:
            image_base64: The source image, base64-encoded (a ``data:`` URL
                prefix is accepted).
            style: One of the catalog style ids.

        Returns:
            URL of the generated image.

        Raises:
            UnknownStyle: *style* is not in the catalog.
            InvalidUpload: *image_base64* is empty or not valid base64.
            DescriptionUnavailable: The describer returned no text.
            GenerationFailed: The generator returned no URL.
            TransformationFailed: A provider call raised.
        """
        # --- Local validation (no provider calls yet) ----------------------
        style_template = prompt_for(style)
        image_bytes = decode_image_base64(image_base64)
        mime_type = sniff_mime_type(image_bytes)
        image_base64 = strip_data_url(image_base64)

        logger.info(f"Starting {style} transformation ({len(image_bytes)} bytes, {mime_type})")

        # --- Stage 1: describe ---------------------------------------------
        description = await self._describe(image_base64, mime_type)

        # --- Stage 2: compose + generate -----------------------------------
        prompt = build_generation_prompt(style_template, description)
        image_url = await self._generate(prompt)

        logger.info(f"{style} transformation complete: {image_url[:60]}...")
        return image_url

    async def _describe(self, image_base64: str, mime_type: str) -> str:
        try:
            description = await self.describer.describe(
                DESCRIPTION_INSTRUCTION, image_base64, mime_type
            )
        except Exception as e:
            logger.error(f"Description call failed: {type(e).__name__}: {e}", exc_info=True)
            raise TransformationFailed(
                f"Failed to transform image: failed to describe image: {e}",
                stage="describe",
                cause=e,
            ) from e

        description = (description or "").strip()
        if not description:
            logger.error(f"{self.describer.name} returned an empty description")
            raise DescriptionUnavailable("Could not generate description from image.")

        logger.info(f"Description received ({len(description)} chars)")
        return description

    async def _generate(self, prompt: str) -> str:
        try:
            image_url = await self.generator.generate(
                prompt,
                n=1,
                size=self._config.image_size,
                quality=self._config.image_quality,
            )
        except Exception as e:
            logger.error(f"Generation call failed: {type(e).__name__}: {e}", exc_info=True)
            raise TransformationFailed(
                f"Failed to transform image: failed to generate image: {e}",
                stage="generate",
                cause=e,
            ) from e

        if not image_url:
            logger.error(f"{self.generator.name} returned no image reference")
            raise GenerationFailed("Failed to generate image URL")
        return image_url
