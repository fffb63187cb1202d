"""
Guest Reviews Configuration Module
==================================

Centralized configuration management using environment variables.
Supports both .env files and system environment variables.

Environment Variables:
    HOSTAWAY_BASE_URL: Hostaway API root (default: https://api.hostaway.com/v1)
    HOSTAWAY_ACCOUNT_ID: Hostaway account id
    HOSTAWAY_API_KEY: Hostaway bearer token (missing = fallback dataset only)
    HOSTAWAY_TIMEOUT_SECONDS: Request timeout (default: 10)
    HOSTAWAY_PAGE_LIMIT: Reviews requested per call (default: 100)

    GOOGLE_PLACES_API_KEY: Google Places key (missing = fallback dataset only)
    GOOGLE_PLACES_BASE_URL: Places API root
    GOOGLE_PLACES_TIMEOUT_SECONDS: Request timeout (default: 10)
    GOOGLE_PLACES_LANGUAGE: Review language (default: en)
    GOOGLE_PLACE_MAPPING: property_id=place_id pairs, comma separated

    CACHE_TTL_SECONDS: Provider cache lifetime (default: 900)
    CACHE_PREFIX: Cache key namespace (default: guestreviews)
    REDIS_URL: Redis URL (unset = in-memory cache)

    STORAGE_BACKEND: memory | file | sql (default: memory)
    STORAGE_DATA_DIR: Directory for the file backend (default: data)
    DATABASE_URL: SQLAlchemy URL for the sql backend (default: sqlite:///data/reviews.db)

    ANALYTICS_TOP_PROPERTIES: Dashboard top-N properties (default: 5)
    ANALYTICS_RECENT_ACTIVITY: Dashboard activity entries (default: 10)
    ANALYTICS_STALE_PENDING_DAYS: Age that makes a pending review stale (default: 7)
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Optional
from pathlib import Path
from dotenv import load_dotenv


# Load environment variables from .env file if present
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """
    Get environment variable with optional default and required validation.

    Args:
        key: Environment variable name
        default: Default value if not set
        required: If True, raises ValueError when not set

    Returns:
        Environment variable value or default

    Raises:
        ValueError: If required=True and variable is not set
    """
    value = os.getenv(key, default)
    if required and value is None:
        raise ValueError(f"Required environment variable '{key}' is not set")
    return value


def get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be an integer, got: {value}")


def get_env_float(key: str, default: float) -> float:
    """Get environment variable as float."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be a float, got: {value}")


def get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as boolean."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def parse_mapping(raw: Optional[str]) -> Dict[str, str]:
    """Parse "a=1,b=2" into {"a": "1", "b": "2"} (blank entries ignored)."""
    mapping: Dict[str, str] = {}
    if not raw:
        return mapping
    for pair in raw.split(","):
        if "=" not in pair:
            continue
        key, value = pair.split("=", 1)
        if key.strip() and value.strip():
            mapping[key.strip()] = value.strip()
    return mapping


# Places known to the demo deployment
DEFAULT_PLACE_MAPPING: Dict[str, str] = {
    "2b-n1-a-29-shoreditch-heights": "ChIJyRJx9Z0cdkgRF8MmZ6vZ6_c",
    "1b-s2-c-15-camden-lock-apartments": "ChIJmRJx9Z0cdkgRF8MmZ6vZ6_d",
    "2b-e1-b-42-canary-wharf-tower": "ChIJnRJx9Z0cdkgRF8MmZ6vZ6_e",
}


@dataclass
class HostawayConfig:
    """Hostaway property-management API configuration."""

    base_url: str = field(default_factory=lambda: get_env("HOSTAWAY_BASE_URL", "https://api.hostaway.com/v1"))
    account_id: Optional[str] = field(default_factory=lambda: get_env("HOSTAWAY_ACCOUNT_ID"))
    api_key: Optional[str] = field(default_factory=lambda: get_env("HOSTAWAY_API_KEY"))

    # Bounded wait before the fallback dataset kicks in
    timeout_seconds: float = field(default_factory=lambda: get_env_float("HOSTAWAY_TIMEOUT_SECONDS", 10.0))
    page_limit: int = field(default_factory=lambda: get_env_int("HOSTAWAY_PAGE_LIMIT", 100))

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.timeout_seconds <= 0:
            raise ValueError("HOSTAWAY_TIMEOUT_SECONDS must be positive")
        if self.page_limit <= 0:
            raise ValueError("HOSTAWAY_PAGE_LIMIT must be positive")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.account_id)


@dataclass
class GooglePlacesConfig:
    """Google Places reviews configuration."""

    api_key: Optional[str] = field(default_factory=lambda: get_env("GOOGLE_PLACES_API_KEY"))
    base_url: str = field(default_factory=lambda: get_env(
        "GOOGLE_PLACES_BASE_URL", "https://maps.googleapis.com/maps/api/place"
    ))
    timeout_seconds: float = field(default_factory=lambda: get_env_float("GOOGLE_PLACES_TIMEOUT_SECONDS", 10.0))
    language: str = field(default_factory=lambda: get_env("GOOGLE_PLACES_LANGUAGE", "en"))

    # property_id -> Google place_id
    place_mapping: Dict[str, str] = field(default_factory=lambda: (
        parse_mapping(get_env("GOOGLE_PLACE_MAPPING")) or dict(DEFAULT_PLACE_MAPPING)
    ))

    def __post_init__(self):
        if self.timeout_seconds <= 0:
            raise ValueError("GOOGLE_PLACES_TIMEOUT_SECONDS must be positive")


@dataclass
class CacheConfig:
    """Provider response cache configuration."""

    ttl_seconds: int = field(default_factory=lambda: get_env_int("CACHE_TTL_SECONDS", 15 * 60))
    prefix: str = field(default_factory=lambda: get_env("CACHE_PREFIX", "guestreviews"))
    redis_url: Optional[str] = field(default_factory=lambda: get_env("REDIS_URL"))

    def __post_init__(self):
        if self.ttl_seconds < 0:
            raise ValueError("CACHE_TTL_SECONDS cannot be negative")


@dataclass
class StorageConfig:
    """Review storage adapter selection."""

    backend: str = field(default_factory=lambda: get_env("STORAGE_BACKEND", "memory"))
    data_dir: str = field(default_factory=lambda: get_env("STORAGE_DATA_DIR", "data"))
    database_url: str = field(default_factory=lambda: get_env("DATABASE_URL", "sqlite:///data/reviews.db"))

    def __post_init__(self):
        self.backend = self.backend.lower()
        if self.backend not in ("memory", "file", "sql"):
            raise ValueError(f"STORAGE_BACKEND must be memory, file or sql, got: {self.backend}")


@dataclass
class AnalyticsConfig:
    """Dashboard and issue detection tuning."""

    top_properties: int = field(default_factory=lambda: get_env_int("ANALYTICS_TOP_PROPERTIES", 5))
    recent_activity: int = field(default_factory=lambda: get_env_int("ANALYTICS_RECENT_ACTIVITY", 10))
    stale_pending_days: int = field(default_factory=lambda: get_env_int("ANALYTICS_STALE_PENDING_DAYS", 7))

    def __post_init__(self):
        if self.top_properties <= 0:
            raise ValueError("ANALYTICS_TOP_PROPERTIES must be positive")
        if self.recent_activity <= 0:
            raise ValueError("ANALYTICS_RECENT_ACTIVITY must be positive")


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: get_env("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: get_env("LOG_FILE"))

    # Structured logging
    json_logs: bool = field(default_factory=lambda: get_env_bool("LOG_JSON", False))


@dataclass
class Settings:
    """Main application settings container."""

    hostaway: HostawayConfig = field(default_factory=HostawayConfig)
    google: GooglePlacesConfig = field(default_factory=GooglePlacesConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_settings() -> Settings:
    """
    Load and validate all application settings.

    Returns:
        Fully configured Settings instance

    Raises:
        ValueError: If configuration is invalid
    """
    return Settings()


# Global settings instance (lazy-loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton pattern).

    Returns:
        Global Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
