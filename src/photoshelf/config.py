"""Configuration management for photoshelf.

This module reads configuration from environment variables, with a ``.env``
file loaded through python-dotenv as the fallback source. Both the catalog
builder and the gallery server read the same options.
"""

import os
from dataclasses import dataclass
from typing import Any

from dotenv import find_dotenv, load_dotenv

from .logging_config import get_logger

logger = get_logger(__name__)

# Options without which listing, fetching or URL building degrade silently
REQUIRED_SETTINGS = (
    "R2_BUCKET_NAME",
    "R2_IMAGE_BASE_URL",
    "IMAGE_COMPRESSION_QUALITY",
    "R2_ENDPOINT",
    "R2_ACCESS_KEY_ID",
    "R2_SECRET_ACCESS_KEY",
)


class Config:
    """Centralized configuration management using environment variables."""

    def __init__(self, env_file: str | None = None):
        """Initialize configuration, loading ``env_file`` (or ``.env``) if present."""
        self._cache: dict[str, Any] = {}
        self.env_file = env_file
        self._dotenv_loaded = False

    def _ensure_dotenv(self) -> None:
        if self._dotenv_loaded:
            return
        # Never overrides variables that are already exported
        load_dotenv(dotenv_path=self.env_file or find_dotenv(usecwd=True), override=False)
        self._dotenv_loaded = True

    def get(self, key: str, default: Any = None, cast_type: type = str) -> Any:
        """Get configuration value from the environment.

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

        self._ensure_dotenv()
        value = os.getenv(key)

        if value is None:
            value = default

        if value is not None:
            try:
                if cast_type is bool:
                    if isinstance(value, str):
                        value = value.lower() in ("true", "1", "yes", "on")
                    else:
                        value = bool(value)
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
        if value is None:
            raise ValueError(f"Required configuration '{key}' not found")
        return value

    def is_development(self) -> bool:
        """Check if running in development mode."""
        environment = self.get("ENVIRONMENT", "development").lower()
        return environment in ["development", "dev", "local"]

    def clear_cache(self) -> None:
        """Clear configuration cache."""
        self._cache.clear()


@dataclass(frozen=True)
class GallerySettings:
    """Every option recognised by the catalog builder and the gallery server."""

    bucket_name: str | None = None
    image_dir: str = ""
    image_base_url: str = ""
    compression_quality: int | None = None
    region: str | None = None
    endpoint: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    host: str = "0.0.0.0"
    port: int = 3000
    snapshot_path: str = "data.json"
    exif_timeout: float = 5.0
    static_dir: str = "public"
    notify_url: str | None = None
    environment: str = "development"

    def missing(self) -> list[str]:
        """Return the names of required options that are unset."""
        values = {
            "R2_BUCKET_NAME": self.bucket_name,
            "R2_IMAGE_BASE_URL": self.image_base_url,
            "IMAGE_COMPRESSION_QUALITY": self.compression_quality,
            "R2_ENDPOINT": self.endpoint,
            "R2_ACCESS_KEY_ID": self.access_key_id,
            "R2_SECRET_ACCESS_KEY": self.secret_access_key,
        }
        return [name for name in REQUIRED_SETTINGS if values[name] in (None, "")]


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config(env_file: str | None = None) -> Config:
    """Replace the global configuration, e.g. to load a different ``.env`` file."""
    global _config
    _config = Config(env_file=env_file)
    return _config


def get_env(key: str, default: Any = None, cast_type: type = str) -> Any:
    """Get environment variable with type casting."""
    return get_config().get(key, default, cast_type)


def load_settings() -> GallerySettings:
    """Build a :class:`GallerySettings` from the global configuration."""
    settings = GallerySettings(
        bucket_name=get_env("R2_BUCKET_NAME"),
        image_dir=get_env("R2_IMAGE_DIR", ""),
        image_base_url=get_env("R2_IMAGE_BASE_URL", ""),
        compression_quality=get_env("IMAGE_COMPRESSION_QUALITY", None, int),
        region=get_env("R2_REGION"),
        endpoint=get_env("R2_ENDPOINT"),
        access_key_id=get_env("R2_ACCESS_KEY_ID"),
        secret_access_key=get_env("R2_SECRET_ACCESS_KEY"),
        host=get_env("HOST", "0.0.0.0"),
        port=get_env("PORT", 3000, int),
        snapshot_path=get_env("CATALOG_SNAPSHOT_PATH", "data.json"),
        exif_timeout=get_env("EXIF_FETCH_TIMEOUT", 5.0, float),
        static_dir=get_env("STATIC_DIR", "public"),
        notify_url=get_env("GALLERY_NOTIFY_URL"),
        environment=get_env("ENVIRONMENT", "development"),
    )

    missing = settings.missing()
    if missing:
        logger.warning("settings_incomplete", missing=missing)

    return settings
