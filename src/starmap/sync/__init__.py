"""Catalog synchronization: fetch, compare, preview and apply."""

from starmap.sync.changeset import (
    FieldChange,
    ModelUpdate,
    ProviderChangeset,
    compare_provider_models,
    describe_changeset,
    format_tokens,
    fresh_changeset,
)
from starmap.sync.options import SyncOptions
from starmap.sync.orchestrator import FetchOutcome, Syncer
from starmap.sync.result import ProviderResult, SyncResult

__all__ = [
    "FetchOutcome",
    "FieldChange",
    "ModelUpdate",
    "ProviderChangeset",
    "ProviderResult",
    "SyncOptions",
    "SyncResult",
    "Syncer",
    "compare_provider_models",
    "describe_changeset",
    "format_tokens",
    "fresh_changeset",
]
