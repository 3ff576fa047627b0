"""
Database schema definitions for legoworld.

Two schemas live here: the key/value table of the local DuckDB cache, and
the Supabase (Postgres) tables the relational store reads and writes. The
Supabase DDL is applied once by hand or through the ``create_*_table`` RPCs.
"""

CACHE_TABLE = "cache_entries"

CACHE_TABLE_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {CACHE_TABLE} (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

CREATIONS_TABLE = "creations"
PHOTOS_TABLE = "photos"

CREATIONS_TABLE_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {CREATIONS_TABLE} (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    date_added TIMESTAMPTZ NOT NULL DEFAULT now(),
    user_id TEXT
);
"""

PHOTOS_TABLE_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {PHOTOS_TABLE} (
    id BIGSERIAL PRIMARY KEY,
    creation_id TEXT NOT NULL REFERENCES {CREATIONS_TABLE}(id) ON DELETE CASCADE,
    url TEXT NOT NULL,
    public_id TEXT,
    name TEXT NOT NULL,
    width INTEGER,
    height INTEGER,
    media_type TEXT NOT NULL DEFAULT 'image' CHECK (media_type IN ('image', 'video')),
    UNIQUE (creation_id, url)
);
"""

STORE_INDEXES = [
    f"CREATE INDEX IF NOT EXISTS idx_creations_date_added ON {CREATIONS_TABLE}(date_added DESC);",
    f"CREATE INDEX IF NOT EXISTS idx_photos_creation_id ON {PHOTOS_TABLE}(creation_id);",
]

# Columns embedded when fetching creations through PostgREST
CREATION_SELECT = f"id, name, date_added, {PHOTOS_TABLE} (url, public_id, name, width, height, media_type)"

# RPCs installed in Supabase that run the DDL above
SCHEMA_RPCS = ["create_creations_table", "create_photos_table"]


def get_cache_schema_statements() -> list[str]:
    """Statements creating the local cache table."""
    return [CACHE_TABLE_SCHEMA]


def get_store_schema_statements() -> list[str]:
    """
    Statements creating the relational store tables and indexes.

    Returns:
        List of Postgres statements, creations first so the foreign key resolves
    """
    return [CREATIONS_TABLE_SCHEMA, PHOTOS_TABLE_SCHEMA, *STORE_INDEXES]
