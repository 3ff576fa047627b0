"""Configuration management for legoworld.

Values come from environment variables with Streamlit secrets as fallback.
Every credential is optional at import time: a missing media host or store
credential only degrades the tier that needs it.
"""

import os
from typing import Any

import streamlit as st

from .logging_config import get_logger
from .ui.handlers.error import ConfigError

logger = get_logger(__name__)

DEFAULT_CACHE_PATH = "/tmp/legoworld_cache.duckdb"  # nosec B108


class Config:
    """Centralized configuration management using environment variables."""

    def __init__(self):
        """Initialize configuration."""
        self._cache = {}

    def get(self, key: str, default: Any = None, cast_type: type = str) -> Any:
        """Get configuration value from environment variables or Streamlit secrets.

        Args:
            key: Configuration key
            default: Default value if not found
            cast_type: Type to cast the value to (str, int, bool, float)

        Returns:
            Configuration value cast to the specified type
        """
        cache_key = f"{key}:{cast_type.__name__}"
        if cache_key in self._cache:
            return self._cache[cache_key]

        value = os.getenv(key)

        if value is None:
            try:
                value = st.secrets.get(key)
            except Exception:  # nosec B110
                # No secrets.toml outside a Streamlit deployment
                pass

        if value is None or value == "":
            value = default

        if value is not None:
            try:
                if cast_type is bool:
                    if isinstance(value, str):
                        value = value.lower() in ("true", "1", "yes", "on")  # type: ignore[assignment]
                    else:
                        value = bool(value)  # type: ignore[assignment]
                elif cast_type is not str:
                    value = cast_type(value)
            except (ValueError, TypeError) as e:
                logger.warning("config_cast_failed", key=key, cast_type=cast_type.__name__, error=str(e))
                value = default

        self._cache[cache_key] = value
        return value

    def get_required(self, key: str, cast_type: type = str) -> Any:
        """Get required configuration value.

        Raises:
            ConfigError: If the required configuration is not found
        """
        value = self.get(key, cast_type=cast_type)
        if value is None:
            raise ConfigError(f"Required configuration '{key}' not found", details={"key": key})
        return value

    def is_development(self) -> bool:
        """Check if running in development mode."""
        environment = self.get("ENVIRONMENT", "development").lower()
        return environment in ["development", "dev", "local"]

    def clear_cache(self):
        """Clear configuration cache."""
        self._cache.clear()


_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_env(key: str, default: Any = None, cast_type: type = str) -> Any:
    """Get a configuration value with type casting."""
    return get_config().get(key, default, cast_type)


def is_development() -> bool:
    """Check if running in development mode."""
    return get_config().is_development()


# Media host (Cloudinary)
def get_cloudinary_cloud_name() -> str | None:
    return get_env("CLOUDINARY_CLOUD_NAME")


def get_cloudinary_api_key() -> str | None:
    return get_env("CLOUDINARY_API_KEY")


def get_cloudinary_api_secret() -> str | None:
    return get_env("CLOUDINARY_API_SECRET")


def get_cloudinary_upload_preset() -> str | None:
    return get_env("CLOUDINARY_UPLOAD_PRESET")


# Relational store (Supabase)
def get_supabase_url() -> str | None:
    return get_env("SUPABASE_URL")


def get_supabase_anon_key() -> str | None:
    return get_env("SUPABASE_ANON_KEY")


def get_admin_email() -> str | None:
    """Email of the single admin allowed to upload and edit."""
    return get_env("ADMIN_EMAIL")


def get_cache_path() -> str:
    """Location of the DuckDB file backing the local cache."""
    return str(get_env("LOCAL_CACHE_PATH", DEFAULT_CACHE_PATH))


def get_debug_mode() -> bool:
    """Get debug mode setting."""
    return get_env("DEBUG", False, bool) or is_development()
