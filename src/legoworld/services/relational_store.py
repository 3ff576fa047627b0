"""Relational store client for creation and media rows in Supabase."""

import time
from collections.abc import Iterable
from typing import Any

from supabase import Client, create_client

from ..config import get_supabase_anon_key, get_supabase_url
from ..logging_config import get_logger, log_performance
from ..models.creation import Creation, MediaItem, sort_newest_first
from ..models.schema import CREATION_SELECT, CREATIONS_TABLE, PHOTOS_TABLE, SCHEMA_RPCS
from ..ui.handlers.error import ConfigError, PersistenceError, ValidationError

logger = get_logger(__name__)


class RelationalStore:
    """
    Persists creations in a ``creations`` table and their media in ``photos``.

    Photos reference their creation with ``ON DELETE CASCADE``, so deleting a
    creation removes its media rows. All writes are idempotent per record
    except ``save``, which fails when the client-generated id already exists.
    """

    def __init__(self, url: str | None = None, anon_key: str | None = None, client: Client | None = None) -> None:
        """
        Initialize the relational store.

        Args:
            url: Supabase project URL (defaults to SUPABASE_URL)
            anon_key: Supabase anonymous key (defaults to SUPABASE_ANON_KEY)
            client: Pre-built Supabase client, skips credential lookup

        Raises:
            ConfigError: If the URL or key is missing
            PersistenceError: If the client cannot be created
        """
        if client is None:
            url = url or get_supabase_url()
            anon_key = anon_key or get_supabase_anon_key()

            if not url or not anon_key:
                raise ConfigError(
                    "Supabase credentials not configured",
                    details={"has_url": bool(url), "has_key": bool(anon_key)},
                )

            try:
                client = create_client(url, anon_key)
            except Exception as e:
                raise PersistenceError(f"Failed to initialize Supabase client: {e}", original_exception=e) from e

            logger.info("relational_store_initialized", url_prefix=url[:20])

        self.client = client

    def _execute(self, operation: str, query: Any, **context: Any) -> Any:
        """Run a PostgREST query, wrapping any failure in PersistenceError."""
        try:
            return query.execute()
        except Exception as e:
            raise PersistenceError(
                f"Failed to {operation.replace('_', ' ')}: {e}",
                details={"operation": operation, **context},
                original_exception=e,
            ) from e

    def save(self, creation: Creation, user_id: str | None = None) -> Creation:
        """
        Insert one creation row and one row per media item.

        Args:
            creation: Creation to insert, must have at least one media item
            user_id: Owner recorded on the creation row

        Returns:
            The saved creation

        Raises:
            ValidationError: If the creation is not persistable
            PersistenceError: If the backend is unreachable or rejects the insert
        """
        creation.validate()
        start_time = time.perf_counter()

        self._execute(
            "save_creation",
            self.client.table(CREATIONS_TABLE).insert(creation.to_row(user_id)),
            creation_id=creation.id,
        )

        try:
            self._execute(
                "save_photos",
                self.client.table(PHOTOS_TABLE).insert([photo.to_row(creation.id) for photo in creation.photos]),
                creation_id=creation.id,
                photo_count=creation.media_count,
            )
        except PersistenceError:
            # Do not leave a creation without media behind
            try:
                self.client.table(CREATIONS_TABLE).delete().eq("id", creation.id).execute()
            except Exception as cleanup_error:
                logger.warning("creation_cleanup_failed", creation_id=creation.id, error=str(cleanup_error))
            raise

        log_performance("store_save", time.perf_counter() - start_time, photo_count=creation.media_count)
        logger.info("creation_saved", creation_id=creation.id, name=creation.name, photo_count=creation.media_count)
        return creation

    def fetch_all(self) -> list[Creation]:
        """
        Fetch all creations with their media, newest first.

        Raises:
            PersistenceError: If the backend fails or returns malformed rows
        """
        start_time = time.perf_counter()
        response = self._execute(
            "fetch_creations",
            self.client.table(CREATIONS_TABLE).select(CREATION_SELECT).order("date_added", desc=True),
        )

        rows = response.data or []
        try:
            creations = [Creation.from_row(row) for row in rows]
        except (ValidationError, AttributeError, TypeError) as e:
            raise PersistenceError(f"Store returned a malformed creation: {e}", original_exception=e) from e

        log_performance("store_fetch_all", time.perf_counter() - start_time, creation_count=len(creations))
        return sort_newest_first(creations)

    def rename(self, creation_id: str, new_name: str) -> None:
        """Rename a creation. Renaming a missing id is a no-op."""
        new_name = new_name.strip()
        if not new_name:
            raise ValidationError("Creation name cannot be empty", details={"creation_id": creation_id})

        self._execute(
            "rename_creation",
            self.client.table(CREATIONS_TABLE).update({"name": new_name}).eq("id", creation_id),
            creation_id=creation_id,
        )
        logger.info("creation_renamed", creation_id=creation_id, new_name=new_name)

    def delete(self, creation_id: str) -> None:
        """Delete a creation, its media rows go with it."""
        self._execute(
            "delete_creation",
            self.client.table(CREATIONS_TABLE).delete().eq("id", creation_id),
            creation_id=creation_id,
        )
        logger.info("creation_deleted", creation_id=creation_id)

    def add_media(self, creation_id: str, items: Iterable[MediaItem]) -> list[MediaItem]:
        """
        Attach media to an existing creation.

        Rows are upserted on ``(creation_id, url)`` so re-adding the same URL
        does not create a duplicate.
        """
        items = list(items)
        if not items:
            return []

        self._execute(
            "add_media",
            self.client.table(PHOTOS_TABLE).upsert(
                [item.to_row(creation_id) for item in items], on_conflict="creation_id,url"
            ),
            creation_id=creation_id,
            media_count=len(items),
        )
        logger.info("media_added", creation_id=creation_id, media_count=len(items))
        return items

    def delete_media(self, creation_id: str, url: str) -> None:
        """Remove one media item, identified by its URL within the creation."""
        self._execute(
            "delete_media",
            self.client.table(PHOTOS_TABLE).delete().eq("creation_id", creation_id).eq("url", url),
            creation_id=creation_id,
        )
        logger.info("media_deleted", creation_id=creation_id)

    def initialize_schema(self) -> None:
        """
        Create the tables through their installer RPCs.

        Tables that already exist are left alone.
        """
        for rpc_name in SCHEMA_RPCS:
            try:
                self.client.rpc(rpc_name).execute()
                logger.info("store_table_ready", rpc=rpc_name)
            except Exception as e:
                if "already exists" in str(e):
                    logger.info("store_table_ready", rpc=rpc_name, already_existed=True)
                    continue
                raise PersistenceError(f"Failed to run {rpc_name}: {e}", original_exception=e) from e


_relational_store: RelationalStore | None = None


def get_relational_store() -> RelationalStore:
    """
    Get the global relational store.

    Raises:
        ConfigError: If Supabase credentials are missing
    """
    global _relational_store

    if _relational_store is None:
        _relational_store = RelationalStore()

    return _relational_store
