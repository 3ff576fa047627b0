"""
Unit tests for the Creation and MediaItem models.
"""

import pytest

from legoworld.models.creation import (
    Creation,
    MediaItem,
    MediaType,
    displayable,
    generate_creation_id,
    parse_timestamp,
    sort_newest_first,
)
from legoworld.ui.handlers.error import ValidationError


class TestMediaItem:
    """Test cases for MediaItem."""

    def test_to_dict_uses_wire_names(self):
        item = MediaItem(url="https://x/a.jpg", name="a.jpg", public_id="lego-creations/1-a", width=10, height=20)

        assert item.to_dict() == {
            "url": "https://x/a.jpg",
            "publicId": "lego-creations/1-a",
            "name": "a.jpg",
            "width": 10,
            "height": 20,
            "mediaType": "image",
        }

    def test_from_dict_defaults_media_type_to_image(self):
        """Legacy records have no mediaType."""
        item = MediaItem.from_dict({"url": "https://x/a.jpg", "name": "a.jpg"})

        assert item.media_type == MediaType.IMAGE
        assert item.public_id is None
        assert item.width is None

    def test_from_dict_video(self):
        item = MediaItem.from_dict({"url": "https://x/a.mp4", "name": "a.mp4", "mediaType": "video"})

        assert item.is_video

    @pytest.mark.parametrize(
        "data",
        [
            {"name": "a.jpg"},
            {"url": "https://x/a.jpg"},
            {"url": 5, "name": "a.jpg"},
            {"url": "https://x/a.jpg", "name": "a.jpg", "width": "wide"},
            {"url": "https://x/a.jpg", "name": "a.jpg", "mediaType": "audio"},
        ],
    )
    def test_from_dict_rejects_malformed(self, data):
        with pytest.raises(ValidationError):
            MediaItem.from_dict(data)

    def test_is_inline(self):
        assert MediaItem(url="data:image/jpeg;base64,AAAA", name="a.jpg").is_inline
        assert not MediaItem(url="https://x/a.jpg", name="a.jpg").is_inline

    def test_row_mapping(self):
        item = MediaItem(url="https://x/a.mp4", name="a.mp4", public_id="p", media_type=MediaType.VIDEO)

        row = item.to_row("123")

        assert row["creation_id"] == "123"
        assert row["media_type"] == "video"
        assert MediaItem.from_row(row) == item


class TestCreation:
    """Test cases for Creation."""

    def test_create_new(self):
        photos = [MediaItem(url="https://x/a.jpg", name="a.jpg"), MediaItem(url="https://x/a.jpg", name="dup.jpg")]

        creation = Creation.create_new("  Castle  ", photos)

        assert creation.name == "Castle"
        assert creation.id.isdigit()
        assert creation.media_count == 1
        parse_timestamp(creation.date_added)

    def test_create_new_reuses_id(self):
        creation = Creation.create_new("Castle", [MediaItem(url="https://x/a.jpg", name="a.jpg")], creation_id="42")

        assert creation.id == "42"

    def test_generate_creation_id_is_milliseconds(self):
        assert len(generate_creation_id()) >= 13

    def test_add_media_skips_known_urls(self, make_creation):
        creation = make_creation(photo_count=1)
        existing = creation.photos[0]
        new = MediaItem(url="https://x/new.jpg", name="new.jpg")

        added = creation.add_media([existing, new])

        assert added == [new]
        assert creation.media_count == 2

    def test_remove_media(self, make_creation):
        creation = make_creation(photo_count=2)
        url = creation.photos[0].url

        assert creation.remove_media(url) is True
        assert creation.remove_media(url) is False
        assert creation.media_count == 1

    def test_validate_rejects_empty_creation(self, make_creation):
        creation = make_creation(photo_count=0)

        with pytest.raises(ValidationError, match="has no photos"):
            creation.validate()

    def test_validate_rejects_duplicate_urls(self, make_creation):
        creation = make_creation(photo_count=1)
        creation.photos.append(creation.photos[0])

        with pytest.raises(ValidationError, match="unique"):
            creation.validate()

    def test_dict_round_trip(self, make_creation):
        creation = make_creation()

        data = creation.to_dict()

        assert set(data) == {"id", "name", "dateAdded", "photos"}
        assert Creation.from_dict(data) == creation

    def test_from_dict_converts_numeric_id(self):
        creation = Creation.from_dict({"id": 171234, "name": "Castle", "dateAdded": "2024-01-01T00:00:00Z", "photos": []})

        assert creation.id == "171234"

    @pytest.mark.parametrize(
        "data",
        [
            {"name": "Castle", "dateAdded": "2024-01-01T00:00:00Z", "photos": []},
            {"id": "1", "dateAdded": "2024-01-01T00:00:00Z", "photos": []},
            {"id": "1", "name": "Castle", "dateAdded": "yesterday", "photos": []},
            {"id": "1", "name": "Castle", "dateAdded": "2024-01-01T00:00:00Z", "photos": "none"},
            ["not", "a", "mapping"],
        ],
    )
    def test_from_dict_rejects_malformed(self, data):
        with pytest.raises(ValidationError):
            Creation.from_dict(data)

    def test_from_row_with_embedded_photos(self):
        row = {
            "id": "5",
            "name": "Ship",
            "date_added": "2024-02-01T00:00:00+00:00",
            "photos": [{"url": "https://x/a.jpg", "name": "a.jpg", "public_id": None, "media_type": "image"}],
        }

        creation = Creation.from_row(row)

        assert creation.id == "5"
        assert creation.media_count == 1
        assert creation.to_row("user-1") == {
            "id": "5",
            "name": "Ship",
            "date_added": "2024-02-01T00:00:00+00:00",
            "user_id": "user-1",
        }

    def test_renamed_keeps_photos(self, make_creation):
        creation = make_creation(photo_count=3)

        renamed = creation.renamed("Castle v2")

        assert renamed.name == "Castle v2"
        assert renamed.media_count == 3
        assert creation.name == "Castle"


class TestCollectionHelpers:
    """Test cases for sorting and filtering helpers."""

    def test_sort_newest_first_mixes_z_and_offset_timestamps(self, make_creation):
        older = make_creation(creation_id="1", date_added="2024-01-01T00:00:00Z")
        newer = make_creation(creation_id="2", date_added="2024-03-01T00:00:00+00:00")
        naive = make_creation(creation_id="3", date_added="2024-02-01T00:00:00")

        assert [c.id for c in sort_newest_first([older, newer, naive])] == ["2", "3", "1"]

    def test_displayable_drops_empty_creations(self, make_creation):
        full = make_creation(creation_id="1")
        empty = make_creation(creation_id="2", photo_count=0)

        assert displayable([full, empty]) == [full]
