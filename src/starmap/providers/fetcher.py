"""Credential-aware front door to the provider clients.

:class:`ProviderFetcher` is the single capability the sync engine depends on
for live data: ``has_client`` to filter the provider set and ``fetch_models``
to list one provider's models within a context deadline. Every failure mode
maps to a distinct exception so the orchestrator can report unsupported,
unauthenticated and failing providers differently.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from starmap._internal.concurrency.context import FetchContext
from starmap.catalogs.types import Model, Provider
from starmap.core.exceptions import (
    MissingCredentialsError,
    ProviderAPIError,
    StarmapError,
    UnsupportedProviderError,
)
from starmap.providers.base import ProviderClient
from starmap.providers.registry import registered_clients

logger = logging.getLogger(__name__)


class ProviderFetcher:
    def __init__(
        self,
        clients: Optional[Mapping[str, ProviderClient]] = None,
        *,
        environ: Optional[Mapping[str, str]] = None,
        api_keys: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Args:
            clients: Provider ID to client. Defaults to the registered clients.
            environ: Environment used to resolve credentials. Defaults to os.environ.
            api_keys: Configured keys used when the provider's env var is unset.
        """
        self._clients = dict(registered_clients() if clients is None else clients)
        self._environ = os.environ if environ is None else environ
        self._api_keys = dict(api_keys or {})

    def has_client(self, provider_id: str) -> bool:
        return provider_id in self._clients

    def client_ids(self) -> list[str]:
        return sorted(self._clients)

    def prepare(self, provider: Provider) -> Provider:
        """Copy of the provider with credentials loaded; the original is untouched."""
        working = provider.without_models()
        working.load_api_key(self._environ)
        working.load_env_vars(self._environ)
        if not working.has_api_key() and self._api_keys.get(provider.id):
            working.api_key_value = self._api_keys[provider.id]
        return working

    def check_credentials(self, provider: Provider) -> None:
        """Raise MissingCredentialsError if a prepared provider cannot authenticate."""
        if provider.is_api_key_required() and not provider.has_api_key():
            key_name = provider.api_key.name if provider.api_key else "API key"
            raise MissingCredentialsError(
                f"{provider.id}: {key_name} is not set",
                context={"provider": provider.id, "env_var": key_name},
            )
        missing = provider.missing_env_vars()
        if missing:
            raise MissingCredentialsError(
                f"{provider.id}: missing environment variables {', '.join(missing)}",
                context={"provider": provider.id, "env_vars": missing},
            )

    def fetch_models(self, ctx: FetchContext, provider: Provider) -> list[Model]:
        """List a provider's live models.

        Raises:
            UnsupportedProviderError: No client is registered for the provider.
            MissingCredentialsError: A required API key or env var is absent.
            FetchCancelledError: The context was cancelled or its deadline passed.
            ProviderAPIError: The API call or response parsing failed.
        """
        client = self._clients.get(provider.id)
        if client is None:
            raise UnsupportedProviderError(
                f"no client implementation for provider {provider.id}",
                context={"provider": provider.id},
            )

        ctx.raise_if_cancelled()
        working = self.prepare(provider)
        self.check_credentials(working)

        try:
            models = client.list_models(working, timeout=ctx.remaining())
        except StarmapError:
            raise
        except Exception as exc:
            raise ProviderAPIError(
                f"{provider.id}: {exc}",
                context={
                    "provider": provider.id,
                    "error_type": type(exc).__name__,
                    "status_code": getattr(exc, "status_code", None),
                },
            ) from exc

        ctx.raise_if_cancelled()
        logger.debug("Fetched %d models from %s", len(models), provider.id)
        return models


__all__ = ["ProviderFetcher"]
