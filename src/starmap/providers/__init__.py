"""Live provider clients and the fetcher that drives them.

Importing this package registers the built-in clients.
"""

from starmap.providers import anthropic as _anthropic  # noqa: F401
from starmap.providers import google as _google  # noqa: F401
from starmap.providers import openai_compat as _openai_compat  # noqa: F401
from starmap.providers.base import ProviderClient
from starmap.providers.fetcher import ProviderFetcher
from starmap.providers.registry import (
    get_client,
    has_client,
    list_clients,
    register_client,
    registered_clients,
    unregister_client,
)

__all__ = [
    "ProviderClient",
    "ProviderFetcher",
    "get_client",
    "has_client",
    "list_clients",
    "register_client",
    "registered_clients",
    "unregister_client",
]
