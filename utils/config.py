"""Configuration management utilities for the advocate directory.

Provides:
- A small Config base class (dict round-tripping for tests and debugging)
- AppConfig, the environment-driven settings used by the API and the
  seeding job
"""

import os as _os
from pathlib import Path
from typing import Any, Dict, Optional


# ── Known values ─────────────────────────────────────────────────────────────

STORE_FALLBACK_FIXTURE = "fixture"
STORE_FALLBACK_ERROR = "error"
STORE_FALLBACK_POLICIES = frozenset({STORE_FALLBACK_FIXTURE, STORE_FALLBACK_ERROR})

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_PAGE = 1000
MAX_LIMIT = 100
MAX_SEARCH_LENGTH = 100


class Config:
    """Base configuration class for organizing application settings."""

    def __init__(self):
        """Initialize configuration with default values."""
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary.

        Returns:
            Dictionary of all config attributes
        """
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create config from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Config instance with values from dictionary
        """
        config = cls()
        for key, value in data.items():
            setattr(config, key, value)
        return config


def _optional_path(raw: Optional[str]) -> Optional[Path]:
    if raw is None or not raw.strip():
        return None
    return Path(raw.strip())


class AppConfig(Config):
    """Application-level configuration loaded from environment variables.

    All env vars have sensible defaults so the application works out of the
    box without any configuration.

    Environment variables:
        APP_DB_PATH: Path to the SQLite store file (default: unset, no store)
        APP_STORE_FALLBACK: "fixture" or "error" when no store is configured
            (default: fixture)
        APP_PORT: API server port (default: 8000)
        APP_HOST: API server bind address (default: 127.0.0.1)
        APP_LOG_FORMAT: Logging format, "text" or "json" (default: text)
        APP_CORS_ORIGINS: Comma-separated allowed origins (default: *)
        APP_DB_POOL_SIZE: Max DB connections in pool (default: 20)
        APP_DB_IDLE_TIMEOUT: Seconds before an idle pooled connection is
            closed (default: 20)
        APP_DB_CONNECT_TIMEOUT: Seconds to wait for a locked database
            (default: 10)
    """

    def __init__(self) -> None:
        super().__init__()
        self.db_path: Optional[Path] = _optional_path(_os.getenv("APP_DB_PATH"))
        self.store_fallback = _os.getenv(
            "APP_STORE_FALLBACK", STORE_FALLBACK_FIXTURE
        ).strip().lower()
        self.api_port = int(_os.getenv("APP_PORT", "8000"))
        self.api_host = _os.getenv("APP_HOST", "127.0.0.1")
        self.log_format = _os.getenv("APP_LOG_FORMAT", "text")
        raw_origins = _os.getenv("APP_CORS_ORIGINS", "*")
        self.cors_origins: list[str] = (
            ["*"] if raw_origins == "*"
            else [o.strip() for o in raw_origins.split(",") if o.strip()]
        )
        self.pool_size = int(_os.getenv("APP_DB_POOL_SIZE", "20"))
        self.pool_idle_timeout = float(_os.getenv("APP_DB_IDLE_TIMEOUT", "20"))
        self.connect_timeout = float(_os.getenv("APP_DB_CONNECT_TIMEOUT", "10"))

    @property
    def has_store(self) -> bool:
        return self.db_path is not None

    def validate(self) -> None:
        """Raise ValueError for settings that cannot work together."""
        if self.store_fallback not in STORE_FALLBACK_POLICIES:
            raise ValueError(
                f"APP_STORE_FALLBACK must be one of "
                f"{sorted(STORE_FALLBACK_POLICIES)}, got {self.store_fallback!r}"
            )
        if self.pool_size < 1:
            raise ValueError("APP_DB_POOL_SIZE must be at least 1")
        if self.log_format not in ("text", "json"):
            raise ValueError("APP_LOG_FORMAT must be 'text' or 'json'")

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create an AppConfig instance populated from environment variables."""
        return cls()
