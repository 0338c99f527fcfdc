"""Silkify - turn a photo into one of five art styles."""

__version__ = "0.1.0"

from silkify.core.config import SilkifyConfig, config
from silkify.core.pipeline import TransformationPipeline
from silkify.core.store import MemoryStore

__all__ = [
    "MemoryStore",
    "SilkifyConfig",
    "TransformationPipeline",
    "config",
]
