"""Gallery handlers for the Lego World application."""

from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime

import structlog

from legoworld.models.creation import Creation, MediaItem, displayable
from legoworld.services.sync import FetchResult, SyncService, get_sync_service
from legoworld.ui.handlers.error import ValidationError

logger = structlog.get_logger(__name__)

RECENT_CREATIONS_COUNT = 3


def load_creations(sync_service: SyncService | None = None) -> FetchResult:
    """
    Fetch creations for display.

    Creations without media are dropped here rather than in the stores.

    Returns:
        FetchResult: Displayable creations, newest first, and where they came from
    """
    sync_service = sync_service or get_sync_service()
    result = sync_service.fetch()

    visible = displayable(result.creations)
    if len(visible) != len(result.creations):
        logger.info("empty_creations_hidden", hidden=len(result.creations) - len(visible))

    return replace(result, creations=visible)


def get_recent_creations(creations: list[Creation], count: int = RECENT_CREATIONS_COUNT) -> list[Creation]:
    """The newest creations, for the home page."""
    return creations[:count]


def find_creation(creations: Iterable[Creation], creation_id: str | None) -> Creation | None:
    if not creation_id:
        return None
    return next((creation for creation in creations if creation.id == creation_id), None)


def flatten_media(creations: Iterable[Creation]) -> list[tuple[Creation, MediaItem]]:
    """
    All media across creations, for the view-all mode.

    Returns:
        list: (creation, media) pairs, keeping creation order then media order
    """
    return [(creation, media) for creation in creations for media in creation.photos]


def format_date_added(date_added: str) -> str:
    """Human readable date for a creation, the raw value if it cannot be parsed."""
    try:
        return datetime.fromisoformat(date_added.replace("Z", "+00:00")).strftime("%B %d, %Y")
    except ValueError:
        return date_added


def rename_creation(
    creation: Creation, new_name: str, sync_service: SyncService | None = None, user_id: str | None = None
) -> Creation:
    """
    Rename a creation, keeping its media.

    Raises:
        ValidationError: If the new name is blank
    """
    new_name = new_name.strip()
    if not new_name:
        raise ValidationError("Creation name cannot be empty", user_message="Please enter a name.")

    sync_service = sync_service or get_sync_service()
    sync_service.rename(creation.id, new_name, user_id=user_id)
    return creation.renamed(new_name)


def delete_creation(creation: Creation, sync_service: SyncService | None = None, user_id: str | None = None) -> None:
    sync_service = sync_service or get_sync_service()
    sync_service.delete(creation.id, user_id=user_id)


def delete_media(
    creation: Creation, media: MediaItem, sync_service: SyncService | None = None, user_id: str | None = None
) -> Creation:
    """
    Remove one media item from a creation.

    Raises:
        ValidationError: If it is the creation's last media item; delete the creation instead
    """
    if creation.media_count <= 1:
        raise ValidationError(
            "Cannot remove the last media item of a creation",
            user_message="A creation needs at least one photo. Delete the creation instead.",
            details={"creation_id": creation.id},
        )

    sync_service = sync_service or get_sync_service()
    sync_service.delete_media(creation.id, media.url, user_id=user_id)

    updated = replace(creation, photos=list(creation.photos))
    updated.remove_media(media.url)
    return updated
