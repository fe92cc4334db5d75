"""models.dev dataset types and lookup index.

The dataset (``api.json``) maps provider IDs to provider records, each
holding a map of model records. Costs are USD per million tokens.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from starmap.catalogs.types import (
    Model,
    ModelFeatures,
    ModelLimits,
    ModelMetadata,
    ModelModalities,
    ModelPricing,
    ModelTokenPricing,
    TokenPrice,
)

# starmap provider IDs whose models.dev entries live under other IDs. The
# provider's own ID is always tried first.
PROVIDER_ALIASES: dict[str, tuple[str, ...]] = {
    "google-ai-studio": ("google",),
    "google-vertex": ("google-vertex-anthropic",),
    "moonshot-ai": ("moonshotai",),
}

# Author prefixes tried when a model ID has no exact match.
_AUTHOR_PREFIXES = ("openai/", "anthropic/", "google/", "meta/", "mistral/")


@dataclass(frozen=True)
class ModelsDevCost:
    input: Optional[float] = None
    output: Optional[float] = None
    reasoning: Optional[float] = None
    cache_read: Optional[float] = None
    cache_write: Optional[float] = None


@dataclass(frozen=True)
class ModelsDevLimit:
    context: int = 0
    output: int = 0


@dataclass(frozen=True)
class ModelsDevModel:
    id: str
    name: str = ""
    attachment: Optional[bool] = None
    reasoning: Optional[bool] = None
    temperature: Optional[bool] = None
    tool_call: Optional[bool] = None
    knowledge: Optional[str] = None
    release_date: Optional[str] = None
    last_updated: Optional[str] = None
    modalities_input: tuple[str, ...] = ()
    modalities_output: tuple[str, ...] = ()
    open_weights: Optional[bool] = None
    cost: Optional[ModelsDevCost] = None
    limit: ModelsDevLimit = field(default_factory=ModelsDevLimit)

    def to_model(self) -> Model:
        """Express this record as a catalog model, leaving unknowns unset."""
        model = Model(id=self.id, name=self.name)

        if self.release_date or self.knowledge or self.open_weights is not None:
            model.metadata = ModelMetadata(
                release_date=self.release_date,
                knowledge_cutoff=self.knowledge,
                open_weights=self.open_weights,
            )

        features = ModelFeatures(
            tool_calls=self.tool_call,
            tools=self.tool_call,
            reasoning=self.reasoning,
            temperature=self.temperature,
            attachments=self.attachment,
        )
        if self.modalities_input or self.modalities_output:
            features.modalities = ModelModalities(
                input=list(self.modalities_input), output=list(self.modalities_output)
            )
        model.features = features

        if self.limit.context > 0 or self.limit.output > 0:
            model.limits = ModelLimits(
                context_window=self.limit.context or None,
                output_tokens=self.limit.output or None,
            )

        cost = self.cost
        if cost is not None and (cost.input is not None or cost.output is not None):
            tokens = ModelTokenPricing()
            for name in ("input", "output", "reasoning", "cache_read", "cache_write"):
                value = getattr(cost, name)
                if value is not None and value > 0:
                    setattr(tokens, name, TokenPrice.from_per_1m(value))
            model.pricing = ModelPricing(tokens=tokens, currency="USD")

        return model


@dataclass(frozen=True)
class ModelsDevProvider:
    id: str
    name: str = ""
    env: tuple[str, ...] = ()
    npm: Optional[str] = None
    api: Optional[str] = None
    doc: Optional[str] = None
    models: dict[str, ModelsDevModel] = field(default_factory=dict)


class ModelsDevIndex:
    """Queryable snapshot of the models.dev dataset."""

    def __init__(self, providers: dict[str, ModelsDevProvider]) -> None:
        self.providers = providers

    def __len__(self) -> int:
        return len(self.providers)

    def candidates(self, provider_id: str) -> list[ModelsDevProvider]:
        """models.dev providers that may hold data for a starmap provider."""
        ids = (provider_id, *PROVIDER_ALIASES.get(provider_id, ()))
        return [self.providers[pid] for pid in ids if pid in self.providers]

    def provider(self, provider_id: str) -> Optional[ModelsDevProvider]:
        found = self.candidates(provider_id)
        return found[0] if found else None

    def find_model(self, provider_id: str, model_id: str) -> Optional[ModelsDevModel]:
        """Look up a model by exact ID, then by common alternate spellings."""
        providers = self.candidates(provider_id)
        for candidate in (model_id, *alternate_ids(model_id)):
            for md_provider in providers:
                record = md_provider.models.get(candidate)
                if record is not None:
                    return record
        return None


def alternate_ids(model_id: str) -> list[str]:
    """Alternate spellings of a model ID, in lookup order, without duplicates."""
    alternates: list[str] = []
    if "/" in model_id:
        alternates.append(model_id.rsplit("/", 1)[1])
    else:
        alternates.extend(prefix + model_id for prefix in _AUTHOR_PREFIXES)
    if "-" in model_id:
        alternates.append(model_id.replace("-", "_"))
    if "_" in model_id:
        alternates.append(model_id.replace("_", "-"))

    seen = {model_id}
    unique = []
    for alternate in alternates:
        if alternate not in seen:
            seen.add(alternate)
            unique.append(alternate)
    return unique


__all__ = [
    "PROVIDER_ALIASES",
    "ModelsDevCost",
    "ModelsDevIndex",
    "ModelsDevLimit",
    "ModelsDevModel",
    "ModelsDevProvider",
    "alternate_ids",
]
