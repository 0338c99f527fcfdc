"""Tests for silkify.core.pipeline — the describe-then-generate pipeline.

All tests use stub providers from ``conftest.py`` so no network access
occurs.  Coroutines are driven with ``asyncio.run``.  Tests cover:

- The happy path: returned URL and the composed generation prompt.
- Validation that happens before any provider call.
- Empty provider answers (DescriptionUnavailable, GenerationFailed).
- Provider exceptions wrapped as TransformationFailed with a stage.
"""

from __future__ import annotations

import asyncio
import base64

import pytest

from silkify.core.config import SilkifyConfig
from silkify.core.errors import (
    DescriptionUnavailable,
    GenerationFailed,
    InvalidUpload,
    TransformationFailed,
    UnknownStyle,
)
from silkify.core.pipeline import (
    CONTENT_SEPARATOR,
    DESCRIPTION_INSTRUCTION,
    PRESERVE_INSTRUCTION,
    TransformationPipeline,
    build_generation_prompt,
)
from silkify.core.styles import prompt_for


@pytest.fixture
def pipeline(test_config, describer, generator) -> TransformationPipeline:
    return TransformationPipeline(test_config, describer, generator)


def _run(pipeline: TransformationPipeline, image_base64: str, style: str) -> str:
    return asyncio.run(pipeline.transform(image_base64, style))


class TestBuildGenerationPrompt:
    def test_sections_in_order(self):
        prompt = build_generation_prompt("STYLE", "DESCRIPTION")
        assert prompt == (
            f"STYLE\n\n{CONTENT_SEPARATOR}\nDESCRIPTION\n\n{PRESERVE_INSTRUCTION}"
        )

    def test_inputs_are_stripped(self):
        prompt = build_generation_prompt("  STYLE \n", "\n DESCRIPTION  ")
        assert prompt.startswith("STYLE\n\n")
        assert "\nDESCRIPTION\n\n" in prompt


class TestTransformSuccess:
    """Happy-path behaviour with stubbed providers."""

    def test_returns_generator_url(self, pipeline, generator, png_base64):
        assert _run(pipeline, png_base64, "anime") == generator.url

    def test_prompt_has_style_before_description(
        self, pipeline, describer, generator, png_base64
    ):
        """The anime template should precede the literal description text."""
        _run(pipeline, png_base64, "anime")

        prompt = generator.calls[0]["prompt"]
        template = prompt_for("anime")
        assert template in prompt
        assert describer.description in prompt
        assert prompt.index(template) < prompt.index(describer.description)
        assert prompt.rstrip().endswith(PRESERVE_INSTRUCTION)

    def test_generator_called_once_with_config_settings(self, describer, generator, png_base64):
        cfg = SilkifyConfig(
            _env_file=None, openai_api_key="sk-test", image_size="1792x1024", image_quality="hd"
        )
        pipeline = TransformationPipeline(cfg, describer, generator)

        _run(pipeline, png_base64, "lego")

        assert len(generator.calls) == 1
        call = generator.calls[0]
        assert call["n"] == 1
        assert call["size"] == "1792x1024"
        assert call["quality"] == "hd"

    def test_describer_receives_instruction_image_and_mime(self, pipeline, describer, png_base64):
        _run(pipeline, png_base64, "ghibli")

        instruction, image_b64, mime_type = describer.calls[0]
        assert instruction == DESCRIPTION_INSTRUCTION
        assert image_b64 == png_base64
        assert mime_type == "image/png"

    def test_data_url_prefix_is_removed_before_describe(self, pipeline, describer, png_base64):
        _run(pipeline, f"data:image/png;base64,{png_base64}", "vintage")
        assert describer.calls[0][1] == png_base64

    def test_unknown_format_sent_as_jpeg(self, pipeline, describer):
        payload = base64.b64encode(b"not really an image").decode()
        _run(pipeline, payload, "futuristic")
        assert describer.calls[0][2] == "image/jpeg"


class TestTransformValidation:
    """Bad input should fail before any provider is called."""

    def test_unknown_style(self, pipeline, describer, generator, png_base64):
        with pytest.raises(UnknownStyle):
            _run(pipeline, png_base64, "cubism")
        assert describer.calls == []
        assert generator.calls == []

    def test_empty_image(self, pipeline, describer):
        with pytest.raises(InvalidUpload):
            _run(pipeline, "", "anime")
        assert describer.calls == []

    def test_undecodable_image(self, pipeline, describer):
        with pytest.raises(InvalidUpload) as exc_info:
            _run(pipeline, "%%%not-base64%%%", "anime")
        assert exc_info.value.reason == "encoding"
        assert describer.calls == []


class TestTransformFailures:
    """Provider failures and empty answers."""

    @pytest.mark.parametrize("empty", ["", "   \n", None])
    def test_empty_description(self, pipeline, describer, generator, png_base64, empty):
        """An empty description should stop the pipeline before generation."""
        describer.description = empty

        with pytest.raises(DescriptionUnavailable) as exc_info:
            _run(pipeline, png_base64, "anime")

        assert exc_info.value.stage == "describe"
        assert exc_info.value.status_code == 500
        assert generator.calls == []

    def test_missing_generation_url(self, pipeline, generator, png_base64):
        generator.url = None
        with pytest.raises(GenerationFailed) as exc_info:
            _run(pipeline, png_base64, "anime")
        assert exc_info.value.stage == "generate"

    def test_describe_exception_wrapped(self, pipeline, describer, generator, png_base64):
        cause = ConnectionError("connection reset")
        describer.error = cause

        with pytest.raises(TransformationFailed) as exc_info:
            _run(pipeline, png_base64, "anime")

        err = exc_info.value
        assert err.stage == "describe"
        assert "failed to describe image" in err.message
        assert "connection reset" in err.message
        assert err.cause is cause
        assert err.__cause__ is cause
        assert generator.calls == []

    def test_generate_exception_wrapped(self, pipeline, generator, png_base64):
        cause = RuntimeError("content policy violation")
        generator.error = cause

        with pytest.raises(TransformationFailed) as exc_info:
            _run(pipeline, png_base64, "anime")

        err = exc_info.value
        assert err.stage == "generate"
        assert "failed to generate image" in err.message
        assert err.cause is cause

    def test_no_retry_on_failure(self, pipeline, describer, generator, png_base64):
        generator.error = TimeoutError("timed out")
        with pytest.raises(TransformationFailed):
            _run(pipeline, png_base64, "anime")
        assert len(describer.calls) == 1
        assert len(generator.calls) == 1
