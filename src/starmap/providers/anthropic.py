"""Anthropic model listing via the official SDK."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime
from typing import Any, Optional

import anthropic

from starmap.catalogs.types import Model, ModelMetadata
from starmap.providers.base import author, text_features
from starmap.providers.registry import register_client

logger = logging.getLogger(__name__)

_DISCOVERY_PAGE_LIMIT = 100


def _default_factory(api_key: str, timeout: Optional[float]) -> anthropic.Anthropic:
    return anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=0)


def _release_date(value: Any) -> Optional[str]:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and len(value) >= 10:
        return value[:10]
    return None


class AnthropicClient:
    """Client leveraging Anthropic's model listing endpoint."""

    name = "anthropic"

    def __init__(self, *, client_factory: Callable[[str, Optional[float]], Any] | None = None) -> None:
        self._client_factory = client_factory or _default_factory

    def list_models(self, provider, *, timeout: Optional[float] = None) -> list[Model]:
        client = self._client_factory(provider.api_key_value or "", timeout)

        paginator = client.models.list(limit=_DISCOVERY_PAGE_LIMIT)  # type: ignore[no-untyped-call]
        iterator = getattr(paginator, "iter_pages", None)
        pages = iterator() if callable(iterator) else (paginator,)

        models: list[Model] = []
        for page in pages:
            for entry in getattr(page, "data", None) or []:
                model = self.to_model(entry)
                if model is not None:
                    models.append(model)
        return models

    def to_model(self, entry: Any) -> Model | None:
        model_id = getattr(entry, "id", None)
        if model_id is None and isinstance(entry, dict):
            model_id = entry.get("id")
        if not model_id:
            return None

        display = getattr(entry, "display_name", None) or getattr(entry, "displayName", None)
        created = getattr(entry, "created_at", None)

        features = text_features()
        if model_id.startswith("claude"):
            features.modalities.input = ["text", "image"]
            features.tool_calls = True
            features.tools = True
            features.tool_choice = True
            features.attachments = True

        model = Model(
            id=model_id,
            name=display or model_id,
            authors=[author("anthropic", "Anthropic")],
            features=features,
        )
        release = _release_date(created)
        if release:
            model.metadata = ModelMetadata(release_date=release, open_weights=False)
        return model


register_client(AnthropicClient())


__all__ = ["AnthropicClient"]
