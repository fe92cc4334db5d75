"""Configuration schema module.

This module defines the data structures used for starmap configuration.
The schemas are minimal but extensible through Pydantic.
"""

from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class SyncSettings(BaseModel):
    """Defaults for the sync command.

    Attributes:
        concurrency: Maximum number of provider fetches in flight at once.
        timeout_seconds: Per-provider fetch timeout.
        output_dir: Directory receiving per-model YAML files.
        cleanup_modelsdev: Remove the models.dev working copy after a sync.
    """

    concurrency: int = 5
    timeout_seconds: float = 30.0
    output_dir: Optional[str] = None
    cleanup_modelsdev: bool = False

    model_config = {"extra": "allow"}

    @field_validator("concurrency")
    @classmethod
    def _positive_concurrency(cls, value: int) -> int:
        if value < 1:
            raise ValueError("concurrency must be at least 1")
        return value

    @field_validator("timeout_seconds")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be positive")
        return value


class ModelsDevSettings(BaseModel):
    """Where and how the models.dev dataset is obtained."""

    enabled: bool = True
    mode: Literal["http", "git"] = "http"
    cache_dir: str = "~/.starmap/cache"
    api_url: str = "https://models.dev/api.json"
    repo_url: str = "https://github.com/sst/models.dev.git"
    branch: str = "dev"
    cache_ttl_seconds: float = 3600.0

    model_config = {"extra": "allow"}


class ProviderSettings(BaseModel):
    """Per-provider overrides.

    Attributes:
        api_key: Explicit API key, used when the provider's env var is unset.
    """

    api_key: Optional[str] = None

    model_config = {"extra": "allow"}


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: str = "INFO"

    model_config = {"extra": "allow"}


class StarmapConfig(BaseModel):
    """Root configuration object."""

    sync: SyncSettings = Field(default_factory=SyncSettings)
    modelsdev: ModelsDevSettings = Field(default_factory=ModelsDevSettings)
    providers: Dict[str, ProviderSettings] = Field(default_factory=dict)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"extra": "allow"}

    def get_provider(self, name: str) -> Optional[ProviderSettings]:
        """Get provider settings by name (case-insensitive)."""
        return self.providers.get(name.lower())
