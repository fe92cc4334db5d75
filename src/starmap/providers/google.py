"""Google AI Studio (Gemini API) model listing over HTTP."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Optional

import httpx

from starmap.catalogs.types import Model, ModelLimits
from starmap.core.exceptions import ProviderAPIError
from starmap.providers.base import author, text_features
from starmap.providers.registry import register_client

logger = logging.getLogger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta"
_PAGE_SIZE = 1000
_MAX_PAGES = 50


def _default_http_factory(timeout: Optional[float]) -> httpx.Client:
    return httpx.Client(timeout=timeout)


class GoogleAIStudioClient:
    """List Gemini API models, keeping only ``generateContent`` models."""

    name = "google-ai-studio"

    def __init__(
        self,
        *,
        base_url: str = GEMINI_API_URL,
        http_client_factory: Callable[[Optional[float]], httpx.Client] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http_client_factory = http_client_factory or _default_http_factory

    def list_models(self, provider, *, timeout: Optional[float] = None) -> list[Model]:
        models: list[Model] = []
        params: dict[str, Any] = {"key": provider.api_key_value or "", "pageSize": _PAGE_SIZE}

        with self._http_client_factory(timeout) as client:
            for _ in range(_MAX_PAGES):
                resp = client.get(f"{self.base_url}/models", params=params)
                resp.raise_for_status()
                try:
                    payload = resp.json()
                except ValueError as exc:
                    raise ProviderAPIError(
                        "google-ai-studio returned invalid JSON",
                        context={"provider": self.name},
                    ) from exc

                for entry in payload.get("models") or []:
                    model = self.to_model(entry)
                    if model is not None:
                        models.append(model)

                token = payload.get("nextPageToken")
                if not token:
                    break
                params["pageToken"] = token
            else:
                logger.warning("google-ai-studio: stopped after %d pages", _MAX_PAGES)

        return models

    def to_model(self, entry: dict[str, Any]) -> Model | None:
        methods = entry.get("supportedGenerationMethods") or []
        if methods and "generateContent" not in methods:
            return None
        raw_name = entry.get("name") or ""
        model_id = raw_name.split("/", 1)[1] if raw_name.startswith("models/") else raw_name
        if not model_id:
            return None

        features = text_features()
        if model_id.startswith("gemini"):
            features.modalities.input = ["text", "image", "audio", "video"]
            features.tool_calls = True
            features.tools = True
            features.structured_outputs = True
        if entry.get("thinking"):
            features.reasoning = True

        model = Model(
            id=model_id,
            name=entry.get("displayName") or model_id,
            description=entry.get("description") or None,
            authors=[author("google", "Google")],
            features=features,
        )
        context_window = entry.get("inputTokenLimit")
        output_tokens = entry.get("outputTokenLimit")
        if context_window or output_tokens:
            model.limits = ModelLimits(
                context_window=int(context_window) if context_window else None,
                output_tokens=int(output_tokens) if output_tokens else None,
            )
        return model


register_client(GoogleAIStudioClient())


__all__ = ["GEMINI_API_URL", "GoogleAIStudioClient"]
