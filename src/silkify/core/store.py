"""In-memory record store for users, uploaded images and transformations.

The store is a plain object constructed once at startup and handed to the
application factory, so tests can pass their own instance (or a replacement
with the same methods) without touching module state.

Storage model:

- one ``dict`` per record kind, keyed by integer id
- ids start at 1 and increase by one per kind; they are never reused
- records are immutable once created; nothing is updated or deleted
- everything lives for the lifetime of the process only

All methods are synchronous.  Under the asyncio server a ``create_*`` call
runs start to finish without yielding, so two requests can never observe the
same counter value.

Referential integrity is *not* enforced: a transformation may point at an
image id that was never created.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from itertools import count

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from silkify.core.errors import DuplicateUsername
from silkify.core.styles import StyleId

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _Record(BaseModel):
    """Shared model configuration: frozen, camelCase on the wire."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ---------------------------------------------------------------------------
# Insert payloads (no id, no timestamp).
# ---------------------------------------------------------------------------


class NewUser(_Record):
    username: str
    password: str


class NewImage(_Record):
    original_filename: str
    original_url: str
    user_id: int | None = None


class NewTransformation(_Record):
    image_id: int
    style: StyleId
    transformed_url: str


# ---------------------------------------------------------------------------
# Stored records.
# ---------------------------------------------------------------------------


class User(NewUser):
    id: int


class Image(NewImage):
    id: int
    created_at: datetime = Field(default_factory=_utcnow)


class Transformation(NewTransformation):
    id: int
    created_at: datetime = Field(default_factory=_utcnow)


class MemoryStore:
    """Keyed in-memory collections for the three record kinds.

    Attributes:
        _users, _images, _transformations:
            Records keyed by id, in insertion order.
        _user_ids, _image_ids, _transformation_ids:
            Per-kind id counters starting at 1.
    """

    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._images: dict[int, Image] = {}
        self._transformations: dict[int, Transformation] = {}

        self._user_ids = count(1)
        self._image_ids = count(1)
        self._transformation_ids = count(1)

    # -- Users --------------------------------------------------------------

    def create_user(self, new_user: NewUser) -> User:
        """Insert a user and return it with its assigned id.

        Raises:
            DuplicateUsername: If the username is already taken.
        """
        if self.get_user_by_username(new_user.username) is not None:
            raise DuplicateUsername(new_user.username)

        user = User(id=next(self._user_ids), **new_user.model_dump())
        self._users[user.id] = user
        logger.debug(f"Created user {user.id}")
        return user

    def get_user(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> User | None:
        return next((u for u in self._users.values() if u.username == username), None)

    # -- Images -------------------------------------------------------------

    def create_image(self, new_image: NewImage) -> Image:
        """Insert an image record, stamping its creation time."""
        image = Image(id=next(self._image_ids), **new_image.model_dump())
        self._images[image.id] = image
        logger.debug(f"Created image {image.id} ({image.original_filename})")
        return image

    def get_image(self, image_id: int) -> Image | None:
        return self._images.get(image_id)

    # -- Transformations ----------------------------------------------------

    def create_transformation(self, new_transformation: NewTransformation) -> Transformation:
        """Insert a transformation record, stamping its creation time.

        ``image_id`` is stored as given; no existence check is made.
        """
        transformation = Transformation(
            id=next(self._transformation_ids), **new_transformation.model_dump()
        )
        self._transformations[transformation.id] = transformation
        logger.debug(
            f"Created transformation {transformation.id} "
            f"(image {transformation.image_id}, style {transformation.style})"
        )
        return transformation

    def get_transformation(self, transformation_id: int) -> Transformation | None:
        return self._transformations.get(transformation_id)

    def list_transformations_by_image_id(self, image_id: int) -> list[Transformation]:
        """Return every transformation of *image_id* in creation order."""
        return [t for t in self._transformations.values() if t.image_id == image_id]
