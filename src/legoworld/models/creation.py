"""
Creation and media models for legoworld.

A Creation is one physical build and owns an ordered list of MediaItems.
The same dataclasses are used for the Supabase rows, the local cache and
the JSON returned by the search endpoint, so parsing is strict: a record
with a missing or mistyped required field is rejected instead of patched.
"""

import time
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from legoworld.ui.handlers.error import ValidationError


class MediaType(Enum):
    """Kind of media stored for a creation."""

    IMAGE = "image"
    VIDEO = "video"


def generate_creation_id() -> str:
    """Generate a time-based creation id (milliseconds since the epoch)."""
    return str(int(time.time() * 1000))


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(UTC).isoformat()


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp, accepting the trailing ``Z`` JavaScript emits.

    Naive timestamps are treated as UTC so mixed sources sort together.
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _require(data: dict[str, Any], key: str, expected: type | tuple[type, ...], record: str) -> Any:
    if key not in data or data[key] is None:
        raise ValidationError(f"{record} is missing required field '{key}'", details={"field": key})
    value = data[key]
    if not isinstance(value, expected):
        raise ValidationError(
            f"{record} field '{key}' has type {type(value).__name__}",
            details={"field": key},
        )
    return value


def _optional_dimension(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValidationError(f"MediaItem field '{key}' must be a number", details={"field": key})
    return int(value)


@dataclass
class MediaItem:
    """One photo or video belonging to a creation."""

    url: str
    name: str
    public_id: str | None = None
    width: int | None = None
    height: int | None = None
    media_type: MediaType = MediaType.IMAGE

    @property
    def is_video(self) -> bool:
        return self.media_type == MediaType.VIDEO

    @property
    def is_inline(self) -> bool:
        """True when the media is embedded as a data URI rather than hosted remotely."""
        return self.url.startswith("data:")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase shape used by the cache and the HTTP API."""
        return {
            "url": self.url,
            "publicId": self.public_id,
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "mediaType": self.media_type.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MediaItem":
        """
        Parse a MediaItem from its camelCase dictionary form.

        Raises:
            ValidationError: If ``url`` or ``name`` is missing, or a field has the wrong type
        """
        if not isinstance(data, dict):
            raise ValidationError("MediaItem must be a mapping")

        media_type_value = data.get("mediaType") or MediaType.IMAGE.value
        try:
            media_type = MediaType(media_type_value)
        except ValueError as e:
            raise ValidationError(f"Unknown media type '{media_type_value}'", details={"field": "mediaType"}) from e

        public_id = data.get("publicId")
        if public_id is not None and not isinstance(public_id, str):
            raise ValidationError("MediaItem field 'publicId' must be a string", details={"field": "publicId"})

        return cls(
            url=_require(data, "url", str, "MediaItem"),
            name=_require(data, "name", str, "MediaItem"),
            public_id=public_id,
            width=_optional_dimension(data, "width"),
            height=_optional_dimension(data, "height"),
            media_type=media_type,
        )

    def to_row(self, creation_id: str) -> dict[str, Any]:
        """Convert to a row of the ``photos`` table."""
        return {
            "creation_id": creation_id,
            "url": self.url,
            "public_id": self.public_id,
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "media_type": self.media_type.value,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "MediaItem":
        """Build a MediaItem from a ``photos`` row."""
        return cls.from_dict(
            {
                "url": row.get("url"),
                "publicId": row.get("public_id"),
                "name": row.get("name"),
                "width": row.get("width"),
                "height": row.get("height"),
                "mediaType": row.get("media_type"),
            }
        )


@dataclass
class Creation:
    """A named collection of media representing one physical build."""

    id: str
    name: str
    date_added: str
    photos: list[MediaItem] = field(default_factory=list)

    @classmethod
    def create_new(cls, name: str, photos: Iterable[MediaItem], creation_id: str | None = None) -> "Creation":
        """
        Create a new Creation with a time-based id and the current timestamp.

        Args:
            name: Display name, surrounding whitespace is stripped
            photos: Media belonging to the creation, duplicates by URL are dropped
            creation_id: Reuse an id already encoded into uploaded media

        Returns:
            New Creation instance
        """
        creation = cls(id=creation_id or generate_creation_id(), name=name.strip(), date_added=now_iso())
        creation.add_media(photos)
        return creation

    @property
    def added_at(self) -> datetime:
        return parse_timestamp(self.date_added)

    @property
    def media_count(self) -> int:
        return len(self.photos)

    def has_media(self, url: str) -> bool:
        return any(photo.url == url for photo in self.photos)

    def add_media(self, items: Iterable[MediaItem]) -> list[MediaItem]:
        """
        Append media, skipping any whose URL is already present.

        Returns:
            The items that were actually added
        """
        added = []
        for item in items:
            if self.has_media(item.url):
                continue
            self.photos.append(item)
            added.append(item)
        return added

    def remove_media(self, url: str) -> bool:
        """Remove the media with the given URL. Returns True if something was removed."""
        before = len(self.photos)
        self.photos = [photo for photo in self.photos if photo.url != url]
        return len(self.photos) != before

    def renamed(self, new_name: str) -> "Creation":
        return replace(self, name=new_name, photos=list(self.photos))

    def validate(self) -> None:
        """
        Check that the creation can be persisted.

        Raises:
            ValidationError: If the id or name is blank, there is no media, or URLs repeat
        """
        if not self.id or not self.name.strip():
            raise ValidationError("A creation needs an id and a name", details={"creation_id": self.id})

        if not self.photos:
            raise ValidationError(
                f"Creation '{self.name}' has no photos",
                user_message="Please add at least one photo or video.",
                details={"creation_id": self.id},
            )

        urls = [photo.url for photo in self.photos]
        if len(urls) != len(set(urls)):
            raise ValidationError("Media URLs must be unique within a creation", details={"creation_id": self.id})

        parse_timestamp(self.date_added)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase shape used by the cache and the HTTP API."""
        return {
            "id": self.id,
            "name": self.name,
            "dateAdded": self.date_added,
            "photos": [photo.to_dict() for photo in self.photos],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Creation":
        """
        Parse a Creation from its camelCase dictionary form.

        Legacy records stored numeric ids, these are converted to strings.

        Raises:
            ValidationError: If a required field is missing or malformed
        """
        if not isinstance(data, dict):
            raise ValidationError("Creation must be a mapping")

        creation_id = _require(data, "id", (str, int), "Creation")
        date_added = _require(data, "dateAdded", str, "Creation")
        try:
            parse_timestamp(date_added)
        except ValueError as e:
            raise ValidationError(f"Invalid dateAdded '{date_added}'", details={"field": "dateAdded"}) from e

        photos = _require(data, "photos", list, "Creation")

        return cls(
            id=str(creation_id),
            name=_require(data, "name", str, "Creation"),
            date_added=date_added,
            photos=[MediaItem.from_dict(photo) for photo in photos],
        )

    def to_row(self, user_id: str | None = None) -> dict[str, Any]:
        """Convert to a row of the ``creations`` table."""
        row = {"id": self.id, "name": self.name, "date_added": self.date_added}
        if user_id:
            row["user_id"] = user_id
        return row

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Creation":
        """Build a Creation from a ``creations`` row with embedded ``photos``."""
        creation = cls.from_dict(
            {
                "id": row.get("id"),
                "name": row.get("name"),
                "dateAdded": row.get("date_added"),
                "photos": [],
            }
        )
        creation.photos = [MediaItem.from_row(photo_row) for photo_row in row.get("photos") or []]
        return creation


def sort_newest_first(creations: Iterable[Creation]) -> list[Creation]:
    """Sort creations by date added, newest first."""
    return sorted(creations, key=lambda creation: creation.added_at, reverse=True)


def displayable(creations: Iterable[Creation]) -> list[Creation]:
    """Drop creations without media, they are never shown."""
    return [creation for creation in creations if creation.photos]
