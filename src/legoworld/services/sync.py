"""
Synchronization between the relational store and the local cache.

Reads follow a fixed fallback order. The store is tried once, then the
strategies below are evaluated top-down and the first that produces a
result wins:

1. ``return_store_data``: the store answered with at least one creation.
   Its answer is authoritative.
2. ``try_cache_migrate``: the store answered but is empty while the cache
   is not. Every cached creation is copied into the store (failures are
   counted and skipped) and the cache snapshot is returned.
3. ``fallback_cache``: the store failed or is not configured. The cache
   snapshot is returned unmodified and the result is marked degraded.
4. ``return_empty``: nothing anywhere.

Writes go to the store first and are mirrored into the cache only after
the store accepted them. A failed store write propagates; nothing is ever
written to the cache alone.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from ..logging_config import get_logger, log_user_action
from ..models.creation import Creation, MediaItem
from ..ui.handlers.error import ConfigError, PersistenceError, ValidationError
from .local_cache import LocalCache, get_local_cache
from .relational_store import get_relational_store

logger = get_logger(__name__)


class CreationStore(Protocol):
    """Operations the facade needs from the relational store."""

    def save(self, creation: Creation, user_id: str | None = None) -> Creation: ...

    def fetch_all(self) -> list[Creation]: ...

    def rename(self, creation_id: str, new_name: str) -> None: ...

    def delete(self, creation_id: str) -> None: ...

    def add_media(self, creation_id: str, items: Iterable[MediaItem]) -> list[MediaItem]: ...

    def delete_media(self, creation_id: str, url: str) -> None: ...


class FetchSource(Enum):
    """Where the creations of a fetch came from."""

    STORE = "store"
    CACHE_MIGRATED = "cache_migrated"
    CACHE = "cache"


@dataclass
class FetchResult:
    """Outcome of one fetch attempt."""

    creations: list[Creation]
    source: FetchSource
    degraded: bool = False
    status_message: str | None = None
    migrated: int = 0
    migration_failures: int = 0


@dataclass
class StoreAttempt:
    """Result of the single store read every fetch starts with."""

    creations: list[Creation] = field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


FetchStrategy = Callable[[StoreAttempt], FetchResult | None]


class SyncService:
    """Facade over the relational store with the local cache as fallback."""

    def __init__(self, store: CreationStore | None, cache: LocalCache) -> None:
        """
        Args:
            store: Relational store, None when it is not configured
            cache: Local cache used for degraded reads and migration
        """
        self.store = store
        self.cache = cache
        self.strategies: list[tuple[str, FetchStrategy]] = [
            ("return_store_data", self._return_store_data),
            ("try_cache_migrate", self._try_cache_migrate),
            ("fallback_cache", self._fallback_cache),
            ("return_empty", self._return_empty),
        ]

    # Reads

    def fetch(self) -> FetchResult:
        """Fetch all creations, falling back as described in the module docstring."""
        attempt = self._try_store()

        for name, strategy in self.strategies:
            result = strategy(attempt)
            if result is not None:
                logger.info(
                    "creations_fetched",
                    strategy=name,
                    source=result.source.value,
                    count=len(result.creations),
                    degraded=result.degraded,
                )
                return result

        raise AssertionError("return_empty always produces a result")

    def fetch_all(self) -> list[Creation]:
        """Fetch all creations, newest first."""
        return self.fetch().creations

    def _try_store(self) -> StoreAttempt:
        if self.store is None:
            return StoreAttempt(error="Relational store is not configured")

        try:
            return StoreAttempt(creations=self.store.fetch_all())
        except (PersistenceError, ConfigError) as e:
            logger.warning("store_fetch_failed", error=str(e))
            return StoreAttempt(error=str(e))
        except Exception as e:
            # Any other read failure still falls back to the cache
            logger.error("store_fetch_failed_unexpectedly", error=str(e), error_type=type(e).__name__)
            return StoreAttempt(error=str(e))

    def _return_store_data(self, attempt: StoreAttempt) -> FetchResult | None:
        if attempt.succeeded and attempt.creations:
            return FetchResult(creations=attempt.creations, source=FetchSource.STORE)
        return None

    def _try_cache_migrate(self, attempt: StoreAttempt) -> FetchResult | None:
        if not attempt.succeeded:
            return None

        cached = self.cache.get()
        if not cached:
            return None

        migrated = 0
        failures = 0
        for creation in cached:
            try:
                self.store.save(creation)
                migrated += 1
            except (PersistenceError, ValidationError) as e:
                failures += 1
                logger.warning("cache_migration_item_failed", creation_id=creation.id, error=str(e))

        logger.info("cache_migrated_to_store", migrated=migrated, failures=failures)
        return FetchResult(
            creations=cached,
            source=FetchSource.CACHE_MIGRATED,
            migrated=migrated,
            migration_failures=failures,
        )

    def _fallback_cache(self, attempt: StoreAttempt) -> FetchResult | None:
        if attempt.succeeded:
            return None

        return FetchResult(
            creations=self.cache.get(),
            source=FetchSource.CACHE,
            degraded=True,
            status_message=f"Showing creations saved on this device. The database is unavailable: {attempt.error}",
        )

    def _return_empty(self, attempt: StoreAttempt) -> FetchResult:
        return FetchResult(creations=[], source=FetchSource.STORE)

    # Writes

    def _require_store(self, operation: str) -> CreationStore:
        if self.store is None:
            raise ConfigError(
                "Database not available",
                user_message="The database is not configured, changes cannot be saved.",
                details={"operation": operation},
            )
        return self.store

    def _mirror(self, operation: str, creation_id: str, apply: Callable[[], object]) -> None:
        """Repeat a successful store write in the cache. A cache failure never fails the write."""
        try:
            apply()
        except Exception as e:
            logger.warning("cache_mirror_failed", operation=operation, creation_id=creation_id, error=str(e))

    def save(self, creation: Creation, user_id: str | None = None) -> Creation:
        """
        Persist a new creation.

        Raises:
            ValidationError: If the creation has no media
            ConfigError: If the store is not configured
            PersistenceError: If the store rejects the creation
        """
        creation.validate()
        self._require_store("save").save(creation, user_id=user_id)
        self._mirror("save", creation.id, lambda: self.cache.upsert(creation))
        log_user_action(user_id, "creation_saved", creation_id=creation.id, photo_count=creation.media_count)
        return creation

    def rename(self, creation_id: str, new_name: str, user_id: str | None = None) -> None:
        new_name = new_name.strip()
        self._require_store("rename").rename(creation_id, new_name)

        def apply_rename(creation: Creation) -> None:
            creation.name = new_name

        self._mirror("rename", creation_id, lambda: self.cache.update(creation_id, apply_rename))
        log_user_action(user_id, "creation_renamed", creation_id=creation_id, new_name=new_name)

    def delete(self, creation_id: str, user_id: str | None = None) -> None:
        self._require_store("delete").delete(creation_id)
        self._mirror("delete", creation_id, lambda: self.cache.remove(creation_id))
        log_user_action(user_id, "creation_deleted", creation_id=creation_id)

    def add_media(self, creation_id: str, items: Iterable[MediaItem], user_id: str | None = None) -> list[MediaItem]:
        items = list(items)
        added = self._require_store("add_media").add_media(creation_id, items)
        self._mirror("add_media", creation_id, lambda: self.cache.update(creation_id, lambda c: c.add_media(items)))
        log_user_action(user_id, "media_added", creation_id=creation_id, media_count=len(items))
        return added

    def delete_media(self, creation_id: str, url: str, user_id: str | None = None) -> None:
        self._require_store("delete_media").delete_media(creation_id, url)
        self._mirror("delete_media", creation_id, lambda: self.cache.update(creation_id, lambda c: c.remove_media(url)))
        log_user_action(user_id, "media_deleted", creation_id=creation_id)


_sync_service: SyncService | None = None


def get_sync_service() -> SyncService:
    """
    Get the global sync service.

    A missing store configuration is not fatal: the service is built
    without a store and serves every read from the cache.
    """
    global _sync_service

    if _sync_service is None:
        try:
            store = get_relational_store()
        except (ConfigError, PersistenceError) as e:
            logger.warning("relational_store_unavailable", error=str(e))
            store = None
        _sync_service = SyncService(store, get_local_cache())

    return _sync_service
