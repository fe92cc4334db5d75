"""Catalog entities, the in-memory store and per-model YAML persistence."""

from starmap.catalogs.catalog import EMBEDDED_CATALOG_DIR, Catalog, Collection
from starmap.catalogs.types import (
    Author,
    AuthorCatalog,
    Model,
    ModelArchitecture,
    ModelFeatures,
    ModelLimits,
    ModelMetadata,
    ModelModalities,
    ModelOperationPricing,
    ModelPricing,
    ModelTokenPricing,
    Provider,
    ProviderAPIKey,
    ProviderCatalog,
    ProviderChatCompletions,
    ProviderEnvVar,
    TokenPrice,
)

__all__ = [
    "EMBEDDED_CATALOG_DIR",
    "Catalog",
    "Collection",
    "Author",
    "AuthorCatalog",
    "Model",
    "ModelArchitecture",
    "ModelFeatures",
    "ModelLimits",
    "ModelMetadata",
    "ModelModalities",
    "ModelOperationPricing",
    "ModelPricing",
    "ModelTokenPricing",
    "Provider",
    "ProviderAPIKey",
    "ProviderCatalog",
    "ProviderChatCompletions",
    "ProviderEnvVar",
    "TokenPrice",
]
