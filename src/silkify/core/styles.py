"""The five preset art styles.

The catalog is the single source of truth for valid style ids: the API layer
validates requests against it and the pipeline resolves the prompt template
from it before spending anything on provider calls.

Order matters — :func:`list_styles` returns the styles in the order the UI
shows them, and ``GET /api/styles`` serves them unchanged.
"""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict

from silkify.core.errors import UnknownStyle

StyleId = Literal["lego", "anime", "ghibli", "futuristic", "vintage"]

STYLE_IDS: tuple[str, ...] = get_args(StyleId)


class StyleDefinition(BaseModel):
    """Display metadata and prompt template for one style.

    Attributes:
        id: Style identifier used on the wire.
        name: Short display name.
        description: One-line description shown under the name.
        prompt_template: Style directive placed at the start of the
            generation prompt.
    """

    model_config = ConfigDict(frozen=True)

    id: StyleId
    name: str
    description: str
    prompt_template: str


_STYLES: tuple[StyleDefinition, ...] = (
    StyleDefinition(
        id="lego",
        name="Lego",
        description="Transform into Lego brick style art",
        prompt_template=(
            "Transform this image into a LEGO brick style artwork, with clear plastic brick "
            "textures, vibrant primary colors, and the characteristic blocky LEGO aesthetic. "
            "Make it look like it was built with actual LEGO bricks."
        ),
    ),
    StyleDefinition(
        id="anime",
        name="Anime",
        description="Transform into Japanese anime style",
        prompt_template=(
            "Transform this image into a Japanese anime style illustration with vibrant colors, "
            "distinctive facial features like large expressive eyes, simplified details, and "
            "smooth outlines. Use the style commonly seen in popular anime."
        ),
    ),
    StyleDefinition(
        id="ghibli",
        name="Ghibli",
        description="Transform into Studio Ghibli style",
        prompt_template=(
            "Transform this image into a Studio Ghibli style illustration with soft "
            "watercolor-like textures, muted pastel colors, delicate details in nature elements, "
            "and the dreamlike quality characteristic of Hayao Miyazaki's films."
        ),
    ),
    StyleDefinition(
        id="futuristic",
        name="Futuristic",
        description="Transform into sci-fi futuristic style",
        prompt_template=(
            "Transform this image into a sci-fi futuristic style with holographic elements, "
            "neon lighting, sleek metallic surfaces, advanced technology aesthetics, and a "
            "high-contrast color scheme dominated by blues and purples."
        ),
    ),
    StyleDefinition(
        id="vintage",
        name="Vintage",
        description="Transform into vintage/retro style",
        prompt_template=(
            "Transform this image into a vintage/retro style with faded colors, subtle film "
            "grain, slightly washed-out contrast, and the aged aesthetic of photographs from "
            "the 1960s-70s."
        ),
    ),
)

_BY_ID: dict[str, StyleDefinition] = {style.id: style for style in _STYLES}


def list_styles() -> tuple[StyleDefinition, ...]:
    """Return every style in display order."""
    return _STYLES


def is_valid_style(value: object) -> bool:
    return isinstance(value, str) and value in _BY_ID


def get_style(style_id: object) -> StyleDefinition:
    """Look up a style definition.

    Raises:
        UnknownStyle: If *style_id* is not one of the catalog ids.
    """
    if not is_valid_style(style_id):
        raise UnknownStyle(style_id)
    return _BY_ID[style_id]  # type: ignore[index]


def prompt_for(style_id: object) -> str:
    """Return the prompt template for *style_id*.

    Raises:
        UnknownStyle: If *style_id* is not one of the catalog ids.
    """
    return get_style(style_id).prompt_template
