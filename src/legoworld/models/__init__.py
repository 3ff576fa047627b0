"""
Models module for legoworld.

This module contains data models and schemas:
- Creation / MediaItem: creation metadata and its media
- Cache stores: key/value persistence behind the local cache
- Schema definitions for the cache and the relational store
"""

from .creation import Creation, MediaItem, MediaType, displayable, sort_newest_first
from .database import CacheStore, DuckDBCacheStore, MemoryCacheStore
from .schema import get_cache_schema_statements, get_store_schema_statements

__all__ = [
    "Creation",
    "MediaItem",
    "MediaType",
    "displayable",
    "sort_newest_first",
    "CacheStore",
    "DuckDBCacheStore",
    "MemoryCacheStore",
    "get_cache_schema_statements",
    "get_store_schema_statements",
]
