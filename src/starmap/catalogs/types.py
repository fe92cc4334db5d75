"""Catalog entities: providers, authors and models.

Entities are plain dataclasses that round-trip through the YAML shape used on
disk. ``to_dict`` omits unset values so persisted files stay compact and two
models with the same content always serialize identically. Fields marked
``runtime`` (model maps, loaded credentials) are never serialized.
"""

from __future__ import annotations

import copy
import logging
import os
from dataclasses import dataclass, field, fields, is_dataclass, replace
from datetime import date, datetime
from typing import Any, ClassVar, Mapping, Optional

from starmap.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

_RUNTIME = {"runtime": True}

# Bookkeeping fields excluded from content comparison.
TIMESTAMP_FIELDS = ("created_at", "updated_at")


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (str, list, tuple, dict)) and len(value) == 0)


def _serialize(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    return value


def _date_str(value: Any) -> Any:
    """YAML loads bare dates and timestamps as objects; keep them as ISO strings."""
    if isinstance(value, datetime):
        return value.isoformat().replace("+00:00", "Z")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, int):
        return str(value)
    return value


class _Record:
    """Mixin providing dict conversion for catalog dataclasses."""

    _nested: ClassVar[Mapping[str, type]] = {}
    _dates: ClassVar[tuple[str, ...]] = ()

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            if f.metadata.get("runtime"):
                continue
            value = _serialize(getattr(self, f.name))
            if _is_empty(value):
                continue
            out[f.name] = value
        return out

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]):
        if data is None:
            return None
        if not isinstance(data, Mapping):
            raise ValidationError(
                f"{cls.__name__} expects a mapping, got {type(data).__name__}",
                context={"type": cls.__name__},
            )
        known = {f.name for f in fields(cls) if not f.metadata.get("runtime")}  # type: ignore[arg-type]
        kwargs: dict[str, Any] = {}
        for name, value in data.items():
            if name not in known:
                logger.debug("Ignoring unknown %s field %r", cls.__name__, name)
                continue
            if value is None:
                continue
            nested = cls._nested.get(name)
            if nested is not None:
                if isinstance(value, list):
                    value = [nested.from_dict(item) for item in value]
                else:
                    value = nested.from_dict(value)
            elif name in cls._dates:
                value = _date_str(value)
            kwargs[name] = value
        return cls(**kwargs)


# ---------------------------------------------------------------------------
# Authors
# ---------------------------------------------------------------------------


@dataclass
class AuthorCatalog(_Record):
    """Which provider's catalog is authoritative for an author's models."""

    provider_id: str = ""
    patterns: list[str] = field(default_factory=list)
    description: Optional[str] = None


@dataclass
class Author(_Record):
    id: str = ""
    name: str = ""
    description: Optional[str] = None
    website: Optional[str] = None
    huggingface: Optional[str] = None
    github: Optional[str] = None
    twitter: Optional[str] = None
    catalog: Optional[AuthorCatalog] = None
    models: dict[str, "Model"] = field(default_factory=dict, metadata=_RUNTIME)

    _nested = {"catalog": AuthorCatalog}


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


@dataclass
class ModelModalities(_Record):
    input: list[str] = field(default_factory=list)
    output: list[str] = field(default_factory=list)


@dataclass
class ModelFeatures(_Record):
    """Capability flags. None means unknown, which enrichment may fill in."""

    modalities: Optional[ModelModalities] = None
    tool_calls: Optional[bool] = None
    tools: Optional[bool] = None
    tool_choice: Optional[bool] = None
    web_search: Optional[bool] = None
    attachments: Optional[bool] = None
    reasoning: Optional[bool] = None
    reasoning_effort: Optional[bool] = None
    temperature: Optional[bool] = None
    top_p: Optional[bool] = None
    max_tokens: Optional[bool] = None
    streaming: Optional[bool] = None
    structured_outputs: Optional[bool] = None

    _nested = {"modalities": ModelModalities}


@dataclass
class ModelLimits(_Record):
    context_window: Optional[int] = None
    output_tokens: Optional[int] = None


@dataclass
class TokenPrice(_Record):
    """Price for one token class, per million tokens and per single token."""

    per_1m: Optional[float] = None
    per_token: Optional[float] = None

    @classmethod
    def from_per_1m(cls, per_1m: float) -> "TokenPrice":
        return cls(per_1m=per_1m, per_token=per_1m / 1_000_000)

    @classmethod
    def from_dict(cls, data):
        if isinstance(data, (int, float)) and not isinstance(data, bool):
            return cls.from_per_1m(float(data))
        return super().from_dict(data)


@dataclass
class ModelTokenPricing(_Record):
    input: Optional[TokenPrice] = None
    output: Optional[TokenPrice] = None
    reasoning: Optional[TokenPrice] = None
    cache_read: Optional[TokenPrice] = None
    cache_write: Optional[TokenPrice] = None

    _nested = {
        "input": TokenPrice,
        "output": TokenPrice,
        "reasoning": TokenPrice,
        "cache_read": TokenPrice,
        "cache_write": TokenPrice,
    }


@dataclass
class ModelOperationPricing(_Record):
    """Flat per-operation prices (per request, per image, per audio minute, ...)."""

    request: Optional[float] = None
    image_input: Optional[float] = None
    audio_input: Optional[float] = None
    video_input: Optional[float] = None
    image_gen: Optional[float] = None
    audio_gen: Optional[float] = None
    video_gen: Optional[float] = None
    web_search: Optional[float] = None
    function_call: Optional[float] = None
    tool_use: Optional[float] = None


@dataclass
class ModelPricing(_Record):
    tokens: Optional[ModelTokenPricing] = None
    operations: Optional[ModelOperationPricing] = None
    currency: Optional[str] = None

    _nested = {"tokens": ModelTokenPricing, "operations": ModelOperationPricing}


@dataclass
class ModelArchitecture(_Record):
    parameter_count: Optional[str] = None
    type: Optional[str] = None
    tokenizer: Optional[str] = None
    quantization: Optional[str] = None
    quantized: Optional[bool] = None
    fine_tuned: Optional[bool] = None
    base_model: Optional[str] = None


@dataclass
class ModelMetadata(_Record):
    release_date: Optional[str] = None
    open_weights: Optional[bool] = None
    knowledge_cutoff: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    architecture: Optional[ModelArchitecture] = None

    _nested = {"architecture": ModelArchitecture}
    _dates = ("release_date", "knowledge_cutoff")


@dataclass
class Model(_Record):
    """A model as served by one provider.

    ``id`` must be non-empty and may contain path-like segments
    (``meta-llama/llama-4-scout``).
    """

    id: str = ""
    name: str = ""
    description: Optional[str] = None
    authors: list[Author] = field(default_factory=list)
    metadata: Optional[ModelMetadata] = None
    features: Optional[ModelFeatures] = None
    limits: Optional[ModelLimits] = None
    pricing: Optional[ModelPricing] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    _nested = {
        "authors": Author,
        "metadata": ModelMetadata,
        "features": ModelFeatures,
        "limits": ModelLimits,
        "pricing": ModelPricing,
    }
    _dates = TIMESTAMP_FIELDS

    @classmethod
    def from_dict(cls, data):
        if isinstance(data, Mapping):
            raw_id = data.get("id")
            if raw_id is None or str(raw_id).strip() == "":
                raise ValidationError("model ID must not be empty", context={"data": dict(data)})
            if not isinstance(raw_id, str):
                data = {**data, "id": str(raw_id)}
        return super().from_dict(data)

    def content_dict(self) -> dict[str, Any]:
        """Serialized form without bookkeeping timestamps; the comparison basis."""
        data = self.to_dict()
        for name in TIMESTAMP_FIELDS:
            data.pop(name, None)
        return data

    def same_content(self, other: "Model") -> bool:
        return self.content_dict() == other.content_dict()

    def copy(self) -> "Model":
        return copy.deepcopy(self)

    @property
    def display_name(self) -> str:
        return self.name or self.id


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


@dataclass
class ProviderAPIKey(_Record):
    """How a provider's API key is named and sent."""

    name: str = ""
    pattern: Optional[str] = None
    header: Optional[str] = None
    scheme: Optional[str] = None
    query_param: Optional[str] = None


@dataclass
class ProviderEnvVar(_Record):
    name: str = ""
    required: bool = False
    description: Optional[str] = None
    pattern: Optional[str] = None


@dataclass
class ProviderCatalog(_Record):
    docs_url: Optional[str] = None
    api_url: Optional[str] = None
    api_key_required: Optional[bool] = None


@dataclass
class ProviderChatCompletions(_Record):
    url: Optional[str] = None
    health_api_url: Optional[str] = None


@dataclass
class Provider(_Record):
    """A vendor serving models through an API.

    ``models`` holds the models currently attributed to the provider; it is
    populated at load time and replaced by the sync apply phase.
    """

    id: str = ""
    name: str = ""
    headquarters: Optional[str] = None
    icon_url: Optional[str] = None
    status_page_url: Optional[str] = None
    api_key: Optional[ProviderAPIKey] = None
    env_vars: list[ProviderEnvVar] = field(default_factory=list)
    catalog: Optional[ProviderCatalog] = None
    chat_completions: Optional[ProviderChatCompletions] = None
    authors: list[str] = field(default_factory=list)

    models: dict[str, Model] = field(default_factory=dict, metadata=_RUNTIME)
    api_key_value: Optional[str] = field(default=None, metadata=_RUNTIME, repr=False)
    env_var_values: dict[str, str] = field(default_factory=dict, metadata=_RUNTIME, repr=False)

    _nested = {
        "api_key": ProviderAPIKey,
        "env_vars": ProviderEnvVar,
        "catalog": ProviderCatalog,
        "chat_completions": ProviderChatCompletions,
    }

    @classmethod
    def from_dict(cls, data):
        if isinstance(data, Mapping) and not str(data.get("id") or "").strip():
            raise ValidationError("provider ID must not be empty", context={"data": dict(data)})
        return super().from_dict(data)

    def load_api_key(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """Populate ``api_key_value`` from the environment variable named by ``api_key``."""
        if self.api_key is None or not self.api_key.name:
            return
        env = os.environ if environ is None else environ
        value = env.get(self.api_key.name)
        if value:
            self.api_key_value = value

    def load_env_vars(self, environ: Optional[Mapping[str, str]] = None) -> None:
        env = os.environ if environ is None else environ
        for var in self.env_vars:
            value = env.get(var.name)
            if value:
                self.env_var_values[var.name] = value

    def is_api_key_required(self) -> bool:
        if self.catalog is not None and self.catalog.api_key_required is not None:
            return self.catalog.api_key_required
        return self.api_key is not None

    def has_api_key(self) -> bool:
        return bool(self.api_key_value)

    def missing_env_vars(self) -> list[str]:
        return [var.name for var in self.env_vars if var.required and var.name not in self.env_var_values]

    def without_models(self) -> "Provider":
        """Deep copy of the provider definition with an empty model map."""
        return copy.deepcopy(replace(self, models={}))


__all__ = [
    "TIMESTAMP_FIELDS",
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
