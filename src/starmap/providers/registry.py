"""Registry for provider clients."""

from __future__ import annotations

from typing import Dict

from starmap.providers.base import ProviderClient

_REGISTRY: Dict[str, ProviderClient] = {}


def register_client(client: ProviderClient) -> None:
    """Register a provider client implementation under ``client.name``."""

    _REGISTRY[client.name] = client


def unregister_client(name: str) -> bool:
    return _REGISTRY.pop(name, None) is not None


def get_client(name: str) -> ProviderClient:
    """Return a previously registered provider client."""

    try:
        return _REGISTRY[name]
    except KeyError as exc:
        available = ", ".join(sorted(_REGISTRY)) or "<none>"
        raise KeyError(f"Provider client '{name}' not registered. Known: {available}") from exc


def has_client(name: str) -> bool:
    return name in _REGISTRY


def list_clients() -> list[str]:
    """Return the list of registered provider client names."""

    return sorted(_REGISTRY)


def registered_clients() -> Dict[str, ProviderClient]:
    """Snapshot of the registry, keyed by provider ID."""

    return dict(_REGISTRY)


__all__ = [
    "register_client",
    "unregister_client",
    "get_client",
    "has_client",
    "list_clients",
    "registered_clients",
]
