"""
Services module for legoworld.

This module contains all service classes that handle business logic:
- MediaHostClient: Cloudinary uploads and creation recovery
- RelationalStore: Supabase creation and media rows
- LocalCache: offline mirror of creation metadata
- SyncService: store-first reads and writes with cache fallback
- ImageProcessor: upload validation and image compression
- AdminAuthService: admin sign-in
"""

from .auth import AdminAuthService, AdminUser, get_auth_service
from .image_processor import ImageProcessor, get_image_processor
from .local_cache import LocalCache, get_local_cache
from .media_host import MediaHostClient, UploadMetadata, UploadResult, get_media_host_client
from .relational_store import RelationalStore, get_relational_store
from .sync import FetchResult, FetchSource, SyncService, get_sync_service

__all__ = [
    "AdminAuthService",
    "AdminUser",
    "get_auth_service",
    "ImageProcessor",
    "get_image_processor",
    "LocalCache",
    "get_local_cache",
    "MediaHostClient",
    "UploadMetadata",
    "UploadResult",
    "get_media_host_client",
    "RelationalStore",
    "get_relational_store",
    "FetchResult",
    "FetchSource",
    "SyncService",
    "get_sync_service",
]
