"""Field-authority merging for catalog entities.

Sources are ranked: live API data first, then the models.dev enrichment
dataset, then the embedded baseline. A lower-ranked source may only fill
fields the higher-ranked value leaves empty; it never replaces a populated
field. :func:`fill_missing` implements that rule over the catalog
dataclasses, recursing into nested records.
"""

from __future__ import annotations

import copy
from dataclasses import fields, is_dataclass
from typing import Any

from starmap.catalogs.types import Model


def _empty(value: Any) -> bool:
    if is_dataclass(value) and not isinstance(value, type):
        return not value.to_dict()
    return value is None or (isinstance(value, (str, list, tuple, dict)) and len(value) == 0)


def fill_missing(target: Any, source: Any) -> bool:
    """Copy values from ``source`` into empty fields of ``target`` in place.

    Runtime-only fields are skipped. Returns True if anything was filled.
    """
    if target is None or source is None:
        return False

    changed = False
    for f in fields(target):
        if f.metadata.get("runtime"):
            continue
        current = getattr(target, f.name)
        incoming = getattr(source, f.name, None)
        if _empty(incoming):
            continue
        if _empty(current):
            setattr(target, f.name, copy.deepcopy(incoming))
            changed = True
        elif is_dataclass(current) and is_dataclass(incoming):
            changed = fill_missing(current, incoming) or changed
    return changed


def merge_model(primary: Model, fallback: Model) -> tuple[Model, bool]:
    """Return a copy of ``primary`` with empty fields taken from ``fallback``.

    A name equal to the model ID is a placeholder that listing endpoints fill
    in when they have no display name, so it counts as empty.
    """
    merged = primary.copy()
    changed = False
    if (not merged.name or merged.name == merged.id) and fallback.name and fallback.name != merged.id:
        merged.name = fallback.name
        changed = True
    changed = fill_missing(merged, fallback) or changed
    return merged, changed


__all__ = ["fill_missing", "merge_model"]
