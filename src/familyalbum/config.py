"""Configuration management for the familyalbum application.

Values come from environment variables first and Streamlit secrets second,
cast to the requested type and cached for the life of the process.
"""

import os
from typing import Any

try:
    import streamlit as st

    STREAMLIT_AVAILABLE = True
except ImportError:
    STREAMLIT_AVAILABLE = False

from .logging_config import get_logger

logger = get_logger(__name__)

DEVELOPMENT_ENVIRONMENTS = ("development", "dev", "local", "test")
PRODUCTION_ENVIRONMENTS = ("production", "prod")


class Config:
    """Centralized configuration management using environment variables."""

    def __init__(self):
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

        if value is None and STREAMLIT_AVAILABLE:
            try:
                value = st.secrets.get(key)
            except Exception:  # nosec B110
                # No secrets.toml or not inside a Streamlit run
                pass

        if value is None:
            value = default

        if value is not None:
            try:
                if cast_type is bool:
                    if isinstance(value, str):
                        value = value.strip().lower() in ("true", "1", "yes", "on")  # type: ignore[assignment]
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
            ValueError: If the required configuration is not found
        """
        value = self.get(key, cast_type=cast_type)
        if value is None or value == "":
            raise ValueError(f"Required configuration '{key}' not found")
        return value

    def get_list(self, key: str) -> list[str]:
        """Get a comma separated configuration value as a list of trimmed, non-empty items."""
        raw = self.get(key, "")
        return [item.strip() for item in str(raw).split(",") if item.strip()]

    def is_development(self) -> bool:
        """Check if running in development mode."""
        return str(self.get("ENVIRONMENT", "development")).lower() in DEVELOPMENT_ENVIRONMENTS

    def is_production(self) -> bool:
        """Check if running in production mode."""
        return str(self.get("ENVIRONMENT", "development")).lower() in PRODUCTION_ENVIRONMENTS

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
    """Get environment variable with type casting."""
    return get_config().get(key, default, cast_type)


def get_required_env(key: str, cast_type: type = str) -> Any:
    """Get required environment variable.

    Raises:
        ValueError: If the required environment variable is not found
    """
    return get_config().get_required(key, cast_type)


def is_development() -> bool:
    """Check if running in development mode."""
    return get_config().is_development()


def is_production() -> bool:
    """Check if running in production mode."""
    return get_config().is_production()


def get_database_path() -> str:
    """Get the DuckDB database file path."""
    return str(get_env("DATABASE_PATH", "data/familyalbum.duckdb"))


def get_storage_backend() -> str:
    """Get the object storage backend name ("gcs" or "local")."""
    default = "local" if is_development() else "gcs"
    return str(get_env("STORAGE_BACKEND", default)).lower()


def get_recent_photos_limit() -> int:
    """Get how many photos the dashboard shows in its recent strip."""
    return int(get_env("RECENT_PHOTOS_LIMIT", 6, int))


def get_admin_emails() -> list[str]:
    """Get emails granted the admin role when signing in through Cloud IAP."""
    return [email.lower() for email in get_config().get_list("ADMIN_EMAILS")]


def get_debug_mode() -> bool:
    """Get debug mode setting."""
    return bool(get_env("DEBUG", False, bool))
