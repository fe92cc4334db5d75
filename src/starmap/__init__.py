"""
starmap: AI Model Catalog Synchronization
=========================================

starmap maintains a catalog of AI model metadata (providers, authors, models,
pricing and capabilities). It starts from an embedded YAML dataset, refreshes
it from live provider APIs, fills gaps from the models.dev community dataset
and writes the result as one YAML file per model.

Examples:
    from starmap import Catalog, ProviderFetcher, SyncOptions, Syncer
    from starmap.modelsdev import ModelsDevSource

    syncer = Syncer(Catalog.embedded(), ProviderFetcher(), ModelsDevSource())
    preview = syncer.sync(SyncOptions(provider="openai"))
    print(preview.summary())
    if preview.has_changes():
        syncer.apply(preview)
"""

from __future__ import annotations

import importlib.metadata

from starmap.catalogs import Catalog, Model, Provider
from starmap.core.exceptions import StarmapError
from starmap.providers import ProviderFetcher
from starmap.sync import ProviderChangeset, SyncOptions, SyncResult, Syncer

try:
    __version__ = importlib.metadata.version("starmap")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = [
    "Catalog",
    "Model",
    "Provider",
    "ProviderChangeset",
    "ProviderFetcher",
    "StarmapError",
    "SyncOptions",
    "SyncResult",
    "Syncer",
    "__version__",
]
