"""Shared pytest fixtures for Silkify tests."""

from __future__ import annotations

import base64

import pytest
from fastapi.testclient import TestClient

from silkify.api.main import create_app
from silkify.core.config import SilkifyConfig
from silkify.core.providers import DescriptionProvider, GenerationProvider
from silkify.core.store import MemoryStore

STUB_DESCRIPTION = "a smiling person outdoors"
STUB_IMAGE_URL = "https://images.example.com/generated/abc123.png"

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8\xff\xe0"


class StubDescriber(DescriptionProvider):
    """Description provider that returns canned text and records calls.

    Attributes:
        description: Value returned by :meth:`describe`.
        error: If set, raised instead of returning.
        calls: ``(instruction, image_base64, mime_type)`` per call.
    """

    name = "stub-describer"

    def __init__(self, description: str | None = STUB_DESCRIPTION) -> None:
        self.description = description
        self.error: Exception | None = None
        self.calls: list[tuple[str, str, str]] = []

    async def describe(self, instruction: str, image_base64: str, mime_type: str) -> str | None:
        self.calls.append((instruction, image_base64, mime_type))
        if self.error is not None:
            raise self.error
        return self.description


class StubGenerator(GenerationProvider):
    """Generation provider that returns a fixed URL and records calls.

    Attributes:
        url: Value returned by :meth:`generate`.
        error: If set, raised instead of returning.
        calls: Keyword arguments of each call, including ``prompt``.
    """

    name = "stub-generator"

    def __init__(self, url: str | None = STUB_IMAGE_URL) -> None:
        self.url = url
        self.error: Exception | None = None
        self.calls: list[dict] = []

    async def generate(self, prompt: str, *, n: int, size: str, quality: str) -> str | None:
        self.calls.append({"prompt": prompt, "n": n, "size": size, "quality": quality})
        if self.error is not None:
            raise self.error
        return self.url


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep real credentials and SILKIFY_* overrides out of the tests."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    for name in (
        "SILKIFY_OPENAI_API_KEY",
        "SILKIFY_VISION_MODEL",
        "SILKIFY_IMAGE_MODEL",
        "SILKIFY_IMAGE_SIZE",
        "SILKIFY_IMAGE_QUALITY",
        "SILKIFY_MAX_UPLOAD_BYTES",
        "SILKIFY_SERVER_PORT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def test_config() -> SilkifyConfig:
    """Create a configuration with a dummy key and no .env file.

    Returns:
        SilkifyConfig instance for testing
    """
    return SilkifyConfig(_env_file=None, openai_api_key="sk-test")


@pytest.fixture
def describer() -> StubDescriber:
    return StubDescriber()


@pytest.fixture
def generator() -> StubGenerator:
    return StubGenerator()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def test_client(test_config, store, describer, generator) -> TestClient:
    """FastAPI TestClient wired to stub providers and a fresh store.

    Returns:
        TestClient for an app built by :func:`create_app`
    """
    app = create_app(test_config, store=store, describer=describer, generator=generator)
    return TestClient(app)


@pytest.fixture
def png_bytes() -> bytes:
    """A small payload that starts with the PNG signature."""
    return PNG_SIGNATURE + b"\x00" * 256


@pytest.fixture
def png_base64(png_bytes: bytes) -> str:
    return base64.b64encode(png_bytes).decode("ascii")
