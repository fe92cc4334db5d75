"""models.dev enrichment: download or build the dataset, index it, fill gaps."""

from starmap.modelsdev.client import GitClient, HTTPClient
from starmap.modelsdev.enhance import enhance_models
from starmap.modelsdev.parser import parse, parse_date, parse_payload
from starmap.modelsdev.source import ModelsDevSource
from starmap.modelsdev.types import ModelsDevIndex, ModelsDevModel, ModelsDevProvider

__all__ = [
    "GitClient",
    "HTTPClient",
    "ModelsDevIndex",
    "ModelsDevModel",
    "ModelsDevProvider",
    "ModelsDevSource",
    "enhance_models",
    "parse",
    "parse_date",
    "parse_payload",
]
