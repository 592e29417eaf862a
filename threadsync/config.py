"""Application configuration."""

from datetime import timedelta
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseModel):
    """Remote forum API configuration."""

    # Base URL of the forum backend, without a trailing slash
    base_url: str = "http://localhost:8080"

    # Bearer token attached to every request (None for anonymous browsing)
    auth_token: str | None = None

    # Per-request timeout enforced by the transport, never by the store
    timeout_seconds: float = Field(default=30.0, gt=0)


class SyncSettings(BaseModel):
    """Thread store synchronization configuration."""

    # Number of threads requested per page
    page_size: int = Field(default=10, ge=1, le=100)

    # How long a persisted snapshot stays usable before a refetch is forced
    cache_ttl_seconds: float = Field(default=300.0, ge=0)

    # Quiet period before a burst of mutations is written to disk
    persist_debounce_seconds: float = Field(default=0.5, ge=0)

    @computed_field
    @property
    def cache_ttl(self) -> timedelta:
        """Snapshot time-to-live as a timedelta."""
        return timedelta(seconds=self.cache_ttl_seconds)


class CacheSettings(BaseModel):
    """Persistent snapshot cache configuration."""

    # Directory holding the snapshot blob and its timestamp
    directory: Path = Path(".threadsync")

    # Storage key; files are written as <key>.json and <key>.last_updated
    key: str = "threadStoreData"


class ObservabilitySettings(BaseModel):
    """Observability configuration for Logfire."""

    # Logfire API token (optional - if not set, logs only go to console)
    # Can be set via OBSERVABILITY__LOGFIRE_TOKEN env var
    logfire_token: str | None = None

    # Whether to send telemetry to Logfire cloud
    # If None, will auto-determine: sends if token is present, otherwise console-only
    send_to_logfire: bool | None = None


class Settings(BaseSettings):
    """Application settings.

    Loaded from the environment and an optional ``.env`` file. Nested values
    use a double underscore, for example::

        API__BASE_URL=https://forum.example.org
        API__AUTH_TOKEN=...
        SYNC__PAGE_SIZE=20
        SYNC__CACHE_TTL_SECONDS=600
        CACHE__DIRECTORY=/var/cache/threadsync
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",  # Allows SYNC__PAGE_SIZE syntax
    )

    environment: Literal["test", "development", "staging", "production"] = "development"
    debug: bool = False

    # Nested settings
    api: ApiSettings = ApiSettings()
    sync: SyncSettings = SyncSettings()
    cache: CacheSettings = CacheSettings()
    observability: ObservabilitySettings = ObservabilitySettings()
