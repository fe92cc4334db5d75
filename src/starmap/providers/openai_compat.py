"""Clients for OpenAI and OpenAI-compatible model listing endpoints.

OpenAI, Groq, DeepSeek, Cerebras and Moonshot all expose ``GET /models`` in
the OpenAI shape, so one client parameterised by base URL serves them all
through the ``openai`` SDK. Provider-specific extras (Groq's
``context_window`` and ``max_completion_tokens``) are read when present.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Optional

import openai

from starmap.catalogs.types import Author, Model, ModelLimits
from starmap.providers.base import text_features
from starmap.providers.registry import register_client

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, Optional[str], Optional[float]], Any]

# owned_by values mapped to catalog author IDs and display names.
_AUTHOR_ALIASES: dict[str, tuple[str, str]] = {
    "openai": ("openai", "OpenAI"),
    "openai-internal": ("openai", "OpenAI"),
    "system": ("openai", "OpenAI"),
    "meta": ("meta", "Meta"),
    "meta-llama": ("meta", "Meta"),
    "google": ("google", "Google"),
    "mistralai": ("mistral", "Mistral AI"),
    "mistral ai": ("mistral", "Mistral AI"),
    "mistral": ("mistral", "Mistral AI"),
    "microsoft": ("microsoft", "Microsoft"),
    "deepseek": ("deepseek", "DeepSeek"),
    "alibaba cloud": ("alibaba", "Alibaba Cloud"),
    "qwen": ("alibaba", "Alibaba Cloud"),
    "moonshot": ("moonshot-ai", "Moonshot AI"),
    "moonshotai": ("moonshot-ai", "Moonshot AI"),
}


def _default_factory(api_key: str, base_url: Optional[str], timeout: Optional[float]) -> openai.OpenAI:
    # Retries stay off: a failed fetch is reported, never retried.
    return openai.OpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)


def normalize_author(owned_by: str) -> Author:
    key = owned_by.strip().lower()
    author_id, name = _AUTHOR_ALIASES.get(key, (key.replace(" ", "-"), owned_by.strip()))
    return Author(id=author_id, name=name)


def infer_features(model_id: str):
    """Capability flags guessed from the model ID."""
    features = text_features()
    lowered = model_id.lower()
    if "embedding" in lowered:
        features.modalities.output = []
        features.temperature = None
        features.top_p = None
        features.streaming = None
    elif "gpt-4" in lowered or "gpt-3.5-turbo" in lowered:
        features.tool_calls = True
        features.tools = True
        features.tool_choice = True
        features.structured_outputs = True
    return features


def _extra(entry: Any, name: str) -> Any:
    value = getattr(entry, name, None)
    if value is None and isinstance(entry, dict):
        value = entry.get(name)
    return value


class OpenAICompatibleClient:
    """List models from an OpenAI-shaped ``/models`` endpoint."""

    def __init__(
        self,
        name: str,
        *,
        base_url: Optional[str] = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.name = name
        self.base_url = base_url
        self._client_factory = client_factory or _default_factory

    def list_models(self, provider, *, timeout: Optional[float] = None) -> list[Model]:
        client = self._client_factory(provider.api_key_value or "", self.base_url, timeout)
        response = client.models.list()  # type: ignore[call-arg]
        entries = getattr(response, "data", None)
        if entries is None:
            entries = list(response)

        models: list[Model] = []
        for entry in entries:
            model = self.to_model(entry)
            if model is not None:
                models.append(model)
        logger.debug("%s listed %d models", self.name, len(models))
        return models

    def to_model(self, entry: Any) -> Model | None:
        model_id = _extra(entry, "id")
        if not model_id:
            return None
        if _extra(entry, "active") is False:
            logger.debug("%s: skipping inactive model %s", self.name, model_id)
            return None

        model = Model(id=model_id, name=model_id, features=infer_features(model_id))

        owned_by = _extra(entry, "owned_by")
        if owned_by:
            model.authors = [normalize_author(owned_by)]

        created = _extra(entry, "created")
        if isinstance(created, (int, float)) and created > 0:
            stamp = datetime.fromtimestamp(created, tz=timezone.utc)
            model.created_at = stamp.isoformat().replace("+00:00", "Z")

        context_window = _extra(entry, "context_window") or _extra(entry, "context_length")
        output_tokens = _extra(entry, "max_completion_tokens")
        if context_window or output_tokens:
            model.limits = ModelLimits(
                context_window=int(context_window) if context_window else None,
                output_tokens=int(output_tokens) if output_tokens else None,
            )
        return model


# Base URLs of the OpenAI-compatible providers; None uses the SDK default.
OPENAI_COMPATIBLE_ENDPOINTS: dict[str, Optional[str]] = {
    "openai": None,
    "groq": "https://api.groq.com/openai/v1",
    "deepseek": "https://api.deepseek.com",
    "cerebras": "https://api.cerebras.ai/v1",
    "moonshot-ai": "https://api.moonshot.ai/v1",
}

for _provider_id, _base_url in OPENAI_COMPATIBLE_ENDPOINTS.items():
    register_client(OpenAICompatibleClient(_provider_id, base_url=_base_url))


__all__ = [
    "OPENAI_COMPATIBLE_ENDPOINTS",
    "OpenAICompatibleClient",
    "infer_features",
    "normalize_author",
]
