"""Core functionality for Silkify.

This package holds everything below the HTTP layer:

- **config**: Configuration management using Pydantic Settings
- **errors**: The error taxonomy shared by every layer
- **styles**: The five-entry style catalog
- **store**: In-memory record store (users, images, transformations)
- **upload**: Upload validation and base64 helpers
- **providers**: Description and generation capability providers
- **pipeline**: The describe-then-generate transformation pipeline

Usage Example
-------------
    from silkify.core import TransformationPipeline, config
    from silkify.core.providers import (
        OpenAIDescriptionProvider,
        OpenAIGenerationProvider,
    )

    pipeline = TransformationPipeline(
        config,
        OpenAIDescriptionProvider(config),
        OpenAIGenerationProvider(config),
    )
    url = await pipeline.transform(image_base64, "ghibli")
"""

from silkify.core.config import SilkifyConfig, config
from silkify.core.pipeline import TransformationPipeline
from silkify.core.store import MemoryStore
from silkify.core.styles import list_styles, prompt_for

__all__ = [
    "MemoryStore",
    "SilkifyConfig",
    "TransformationPipeline",
    "config",
    "list_styles",
    "prompt_for",
]
