"""Fill gaps in live provider models with models.dev data.

Enhancement is a pure transform. Live API values always win: a field is
only filled when the fetched model leaves it empty, and the input models
are never modified.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from starmap.catalogs.merge import merge_model
from starmap.catalogs.types import Model
from starmap.modelsdev.types import ModelsDevIndex

logger = logging.getLogger(__name__)


def enhance_models(
    models: Sequence[Model], provider_id: str, index: Optional[ModelsDevIndex]
) -> tuple[list[Model], int]:
    """Return enhanced copies of ``models`` and how many gained at least one field."""
    if index is None:
        return [model.copy() for model in models], 0

    enhanced: list[Model] = []
    count = 0
    for model in models:
        record = index.find_model(provider_id, model.id)
        if record is None:
            enhanced.append(model.copy())
            continue
        candidate = record.to_model()
        candidate.id = model.id
        merged, changed = merge_model(model, candidate)
        enhanced.append(merged)
        if changed:
            count += 1

    logger.debug("Enhanced %d/%d %s models from models.dev", count, len(models), provider_id)
    return enhanced, count


__all__ = ["enhance_models"]
