"""Local fallback cache of creation metadata."""

import json
from collections.abc import Callable

from ..config import get_cache_path
from ..logging_config import get_logger
from ..models.creation import Creation, sort_newest_first
from ..models.database import CacheStore, DuckDBCacheStore
from ..ui.handlers.error import ValidationError

logger = get_logger(__name__)

CACHE_KEY = "aidens-lego-creations"


class LocalCache:
    """
    Mirror of creation metadata kept under a single key of a ``CacheStore``.

    Only read when the relational store cannot be reached, or to seed the
    store the first time it is found empty. Reads are best effort: a corrupt
    payload reads as empty and malformed entries are skipped.
    """

    def __init__(self, store: CacheStore, key: str = CACHE_KEY):
        self.store = store
        self.key = key

    def get(self) -> list[Creation]:
        """Return cached creations, newest first."""
        raw = self.store.get(self.key)
        if not raw:
            return []

        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning("local_cache_corrupt", key=self.key, error=str(e))
            return []

        if not isinstance(payload, list):
            logger.warning("local_cache_unexpected_shape", key=self.key, payload_type=type(payload).__name__)
            return []

        creations = []
        for entry in payload:
            try:
                creations.append(Creation.from_dict(entry))
            except ValidationError as e:
                logger.warning("local_cache_entry_skipped", key=self.key, error=str(e))

        return sort_newest_first(creations)

    def _write(self, creations: list[Creation]) -> None:
        self.store.set(self.key, json.dumps([creation.to_dict() for creation in sort_newest_first(creations)]))

    def upsert(self, creation: Creation) -> None:
        """Insert the creation, replacing any cached entry with the same id."""
        creations = [cached for cached in self.get() if cached.id != creation.id]
        creations.append(creation)
        self._write(creations)
        logger.debug("local_cache_upserted", creation_id=creation.id, cached_count=len(creations))

    def update(self, creation_id: str, mutate: Callable[[Creation], None]) -> bool:
        """
        Apply ``mutate`` to the cached creation with ``creation_id``.

        Returns:
            bool: True if the creation was cached and updated
        """
        creations = self.get()
        for creation in creations:
            if creation.id == creation_id:
                mutate(creation)
                self._write(creations)
                return True
        return False

    def remove(self, creation_id: str) -> None:
        """Drop the creation from the cache if present."""
        creations = self.get()
        remaining = [creation for creation in creations if creation.id != creation_id]
        if len(remaining) != len(creations):
            self._write(remaining)
            logger.debug("local_cache_removed", creation_id=creation_id)

    def clear(self) -> None:
        self.store.delete(self.key)


_local_cache: LocalCache | None = None


def get_local_cache() -> LocalCache:
    """
    Get the global local cache backed by the configured DuckDB file.

    Returns:
        LocalCache: Global local cache instance
    """
    global _local_cache

    if _local_cache is None:
        _local_cache = LocalCache(DuckDBCacheStore(get_cache_path()))

    return _local_cache
