"""Exception hierarchy for starmap.

Every error raised by the package derives from :class:`StarmapError`. Errors
can carry a ``context`` mapping with structured details (provider, model,
operation) that callers surface in summaries and logs.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional


class StarmapError(Exception):
    """Base class for all custom exceptions in starmap."""

    def __init__(self, message: str = "", *, context: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = dict(context or {})


class ProviderAPIError(StarmapError):
    """Raised when an external provider API call fails."""


class ProviderConfigError(StarmapError):
    """Raised when a provider is unknown or misconfigured."""


class UnsupportedProviderError(StarmapError):
    """Raised when no client implementation exists for a provider."""


class MissingCredentialsError(StarmapError):
    """Raised when a provider's required API key or environment is absent."""


class FetchCancelledError(StarmapError):
    """Raised when a fetch is cancelled or its deadline has passed."""


class ValidationError(StarmapError):
    """Raised when entity data fails validation."""


class CatalogLoadError(StarmapError):
    """Raised when catalog files cannot be read or parsed."""


class PersistenceError(StarmapError):
    """Raised when a model file cannot be written or removed."""


class ApplyError(StarmapError):
    """Raised when applying a provider changeset fails."""


class EnrichmentError(StarmapError):
    """Raised when the models.dev dataset cannot be obtained or parsed."""


class SyncError(StarmapError):
    """Raised for invalid sync workflow transitions."""


class ConfigurationError(StarmapError):
    """Raised when there's a configuration error."""


__all__ = [
    "StarmapError",
    "ProviderAPIError",
    "ProviderConfigError",
    "UnsupportedProviderError",
    "MissingCredentialsError",
    "FetchCancelledError",
    "ValidationError",
    "CatalogLoadError",
    "PersistenceError",
    "ApplyError",
    "EnrichmentError",
    "SyncError",
    "ConfigurationError",
]
