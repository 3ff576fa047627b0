"""Tests for gallery handlers."""

from unittest.mock import MagicMock

import pytest

from legoworld.models.creation import Creation
from legoworld.services.sync import FetchResult, FetchSource
from legoworld.ui.handlers.error import ValidationError
from legoworld.ui.handlers.gallery import (
    delete_creation,
    delete_media,
    find_creation,
    flatten_media,
    format_date_added,
    get_recent_creations,
    load_creations,
    rename_creation,
)


class TestLoadCreations:
    """Test loading creations for display."""

    def test_empty_creations_hidden(self, make_creation):
        sync_service = MagicMock()
        sync_service.fetch.return_value = FetchResult(
            creations=[make_creation("2"), Creation(id="1", name="Empty", date_added="2024-01-01T00:00:00Z")],
            source=FetchSource.CACHE,
            degraded=True,
            status_message="Database unavailable",
        )

        result = load_creations(sync_service)

        assert [creation.id for creation in result.creations] == ["2"]
        assert result.degraded
        assert result.status_message == "Database unavailable"

    def test_recent_creations(self, make_creation):
        creations = [make_creation(str(i)) for i in range(5)]

        assert [c.id for c in get_recent_creations(creations)] == ["0", "1", "2"]
        assert get_recent_creations(creations[:2]) == creations[:2]

    def test_find_creation(self, make_creation):
        creations = [make_creation("1"), make_creation("2")]

        assert find_creation(creations, "2") is creations[1]
        assert find_creation(creations, "3") is None
        assert find_creation(creations, None) is None


class TestFlattenMedia:
    """Test the view-all ordering."""

    def test_keeps_creation_then_media_order(self, make_creation):
        first = make_creation("2", photo_count=2)
        second = make_creation("1", photo_count=1)

        pairs = flatten_media([first, second])

        assert [(creation.id, media.name) for creation, media in pairs] == [
            ("2", "photo-0.jpg"),
            ("2", "photo-1.jpg"),
            ("1", "photo-0.jpg"),
        ]


class TestFormatDateAdded:
    """Test date display."""

    def test_iso_timestamp(self):
        assert format_date_added("2024-03-05T10:00:00Z") == "March 05, 2024"

    def test_unparseable_value_returned_as_is(self):
        assert format_date_added("last summer") == "last summer"


class TestEditing:
    """Test rename and delete operations."""

    def setup_method(self):
        """Set up test fixtures."""
        self.sync_service = MagicMock()

    def test_rename(self, make_creation):
        creation = make_creation(name="Castle")

        renamed = rename_creation(creation, "  Big Castle ", self.sync_service, user_id="admin")

        assert renamed.name == "Big Castle"
        assert renamed.photos == creation.photos
        self.sync_service.rename.assert_called_once_with(creation.id, "Big Castle", user_id="admin")

    def test_rename_blank(self, make_creation):
        with pytest.raises(ValidationError):
            rename_creation(make_creation(), "   ", self.sync_service)

        self.sync_service.rename.assert_not_called()

    def test_delete_creation(self, make_creation):
        creation = make_creation()

        delete_creation(creation, self.sync_service)

        self.sync_service.delete.assert_called_once_with(creation.id, user_id=None)

    def test_delete_media(self, make_creation):
        creation = make_creation(photo_count=2)
        target = creation.photos[0]

        updated = delete_media(creation, target, self.sync_service)

        assert updated.media_count == 1
        assert not updated.has_media(target.url)
        assert creation.media_count == 2
        self.sync_service.delete_media.assert_called_once_with(creation.id, target.url, user_id=None)

    def test_delete_last_media_refused(self, make_creation):
        creation = make_creation(photo_count=1)

        with pytest.raises(ValidationError):
            delete_media(creation, creation.photos[0], self.sync_service)

        self.sync_service.delete_media.assert_not_called()
