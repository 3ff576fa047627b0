"""
Key/value stores backing the local cache.

The local cache never talks to a storage engine directly; it is handed a
``CacheStore``. ``DuckDBCacheStore`` keeps entries in a DuckDB file so they
survive restarts, ``MemoryCacheStore`` keeps them in a dict.
"""

import logging
import threading
from pathlib import Path
from typing import Protocol

import duckdb

from .schema import CACHE_TABLE, get_cache_schema_statements

logger = logging.getLogger(__name__)


class CacheStore(Protocol):
    """Minimal persisted key/value interface."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryCacheStore:
    """In-process cache store, used for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._entries: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._entries.get(key)

    def set(self, key: str, value: str) -> None:
        self._entries[key] = value

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)


class DuckDBCacheStore:
    """
    Cache store persisted in a DuckDB database file.
    """

    def __init__(self, db_path: str):
        """
        Initialize DuckDBCacheStore.

        Args:
            db_path: Path to the DuckDB database file, ``:memory:`` for a private in-memory database
        """
        self.db_path = db_path
        self._connection: duckdb.DuckDBPyConnection | None = None
        self._lock = threading.Lock()

    def connect(self) -> duckdb.DuckDBPyConnection:
        """
        Get or create the database connection, creating the schema on first use.

        Returns:
            DuckDB connection object
        """
        if self._connection is None:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self._connection = duckdb.connect(self.db_path)
            for statement in get_cache_schema_statements():
                self._connection.execute(statement)
            logger.info(f"Connected to DuckDB cache at {self.db_path}")

        return self._connection

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            logger.info("Closed DuckDB cache connection")

    def get(self, key: str) -> str | None:
        with self._lock:
            row = self.connect().execute(f"SELECT value FROM {CACHE_TABLE} WHERE key = ?", [key]).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self.connect().execute(
                f"""
                INSERT INTO {CACHE_TABLE} (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT (key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                [key, value],
            )

    def delete(self, key: str) -> None:
        with self._lock:
            self.connect().execute(f"DELETE FROM {CACHE_TABLE} WHERE key = ?", [key])

    def __enter__(self) -> "DuckDBCacheStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
