"""Parse the models.dev ``api.json`` payload into a :class:`ModelsDevIndex`."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from starmap.core.exceptions import EnrichmentError
from starmap.modelsdev.types import (
    ModelsDevCost,
    ModelsDevIndex,
    ModelsDevLimit,
    ModelsDevModel,
    ModelsDevProvider,
)

logger = logging.getLogger(__name__)


def parse_date(value: Any) -> Optional[str]:
    """Normalize ``YYYY-MM-DD``, ``YYYY-MM``, ``YYYY`` or RFC3339 to a date string.

    Partial dates keep their precision (``2024-03`` stays ``2024-03``).
    Unparseable values yield None.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    for fmt in ("%Y-%m-%d", "%Y-%m", "%Y"):
        try:
            datetime.strptime(text, fmt)
        except ValueError:
            continue
        return text
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        logger.debug("Unparseable models.dev date %r", text)
        return None


def _float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _int(value: Any) -> int:
    number = _float(value)
    return int(number) if number is not None else 0


def _bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _strings(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(item) for item in value if item)


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def parse_model(model_id: str, data: Mapping[str, Any]) -> ModelsDevModel:
    modalities = _mapping(data.get("modalities"))
    cost = data.get("cost")
    limit = _mapping(data.get("limit"))
    return ModelsDevModel(
        id=str(data.get("id") or model_id),
        name=str(data.get("name") or ""),
        attachment=_bool(data.get("attachment")),
        reasoning=_bool(data.get("reasoning")),
        temperature=_bool(data.get("temperature")),
        tool_call=_bool(data.get("tool_call")),
        knowledge=parse_date(data.get("knowledge")),
        release_date=parse_date(data.get("release_date")),
        last_updated=parse_date(data.get("last_updated")),
        modalities_input=_strings(modalities.get("input")),
        modalities_output=_strings(modalities.get("output")),
        open_weights=_bool(data.get("open_weights")),
        cost=(
            ModelsDevCost(
                input=_float(cost.get("input")),
                output=_float(cost.get("output")),
                reasoning=_float(cost.get("reasoning")),
                cache_read=_float(cost.get("cache_read", cost.get("cache"))),
                cache_write=_float(cost.get("cache_write")),
            )
            if isinstance(cost, Mapping)
            else None
        ),
        limit=ModelsDevLimit(context=_int(limit.get("context")), output=_int(limit.get("output"))),
    )


def parse_payload(payload: Any) -> ModelsDevIndex:
    """Build an index from the decoded JSON document.

    Raises:
        EnrichmentError: If the document is not a provider mapping.
    """
    if not isinstance(payload, Mapping):
        raise EnrichmentError("models.dev payload must be a JSON object")

    providers: dict[str, ModelsDevProvider] = {}
    for provider_id, data in payload.items():
        if not isinstance(data, Mapping):
            logger.debug("Skipping malformed models.dev provider %r", provider_id)
            continue
        raw_models = data.get("models")
        if raw_models is not None and not isinstance(raw_models, Mapping):
            logger.debug("Ignoring malformed models for models.dev provider %r", provider_id)
        models = {}
        for model_id, model_data in _mapping(raw_models).items():
            if isinstance(model_data, Mapping):
                models[model_id] = parse_model(model_id, model_data)
            else:
                logger.debug("Skipping malformed models.dev model %r/%r", provider_id, model_id)
        providers[provider_id] = ModelsDevProvider(
            id=str(data.get("id") or provider_id),
            name=str(data.get("name") or ""),
            env=_strings(data.get("env")),
            npm=data.get("npm"),
            api=data.get("api"),
            doc=data.get("doc"),
            models=models,
        )
    return ModelsDevIndex(providers)


def parse(path: Union[str, os.PathLike]) -> ModelsDevIndex:
    """Read and parse an ``api.json`` file.

    Raises:
        EnrichmentError: If the file is unreadable or not valid JSON.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except json.JSONDecodeError as exc:
        raise EnrichmentError(f"invalid models.dev JSON in {path}: {exc}", context={"path": str(path)}) from exc
    except OSError as exc:
        raise EnrichmentError(f"cannot read {path}: {exc}", context={"path": str(path)}) from exc

    index = parse_payload(payload)
    logger.debug("Parsed models.dev index with %d providers", len(index))
    return index


__all__ = ["parse", "parse_date", "parse_model", "parse_payload"]
