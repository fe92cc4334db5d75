"""Per-provider changesets.

:func:`compare_provider_models` diffs the models already known for a
provider against a fresh fetch. Every model ID in the union of both sides
lands in exactly one of four buckets: added, updated, removed, or unchanged
(omitted). Comparison is on content; ``created_at``/``updated_at`` alone
never make a model "updated".

Examples:
    >>> from starmap.catalogs.types import Model
    >>> existing = {"a": Model(id="a", name="A"), "b": Model(id="b", name="B")}
    >>> fetched = [Model(id="a", name="A2"), Model(id="c", name="C")]
    >>> cs = compare_provider_models("acme", existing, fetched)
    >>> [m.id for m in cs.added], [u.model_id for u in cs.updated], [m.id for m in cs.removed]
    (['c'], ['a'], ['b'])
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from starmap.catalogs.types import Model

# Top-level fields reported in FieldChange entries, in display order.
COMPARED_FIELDS = (
    "name",
    "description",
    "authors",
    "metadata",
    "features",
    "limits",
    "pricing",
)


@dataclass(frozen=True)
class FieldChange:
    field: str
    old_value: Any
    new_value: Any


@dataclass
class ModelUpdate:
    model_id: str
    existing: Model
    new: Model
    changes: list[FieldChange] = field(default_factory=list)


@dataclass
class ProviderChangeset:
    provider_id: str
    added: list[Model] = field(default_factory=list)
    updated: list[ModelUpdate] = field(default_factory=list)
    removed: list[Model] = field(default_factory=list)

    def has_changes(self) -> bool:
        return bool(self.added or self.updated or self.removed)

    def total(self) -> int:
        return len(self.added) + len(self.updated) + len(self.removed)

    def model_ids(self) -> dict[str, list[str]]:
        return {
            "added": [model.id for model in self.added],
            "updated": [update.model_id for update in self.updated],
            "removed": [model.id for model in self.removed],
        }


def diff_fields(existing: Model, new: Model) -> list[FieldChange]:
    """Top-level content fields whose serialized values differ."""
    old_data = existing.content_dict()
    new_data = new.content_dict()
    changes = []
    for name in COMPARED_FIELDS:
        old_value = old_data.get(name)
        new_value = new_data.get(name)
        if old_value != new_value:
            changes.append(FieldChange(name, old_value, new_value))
    return changes


def compare_provider_models(
    provider_id: str, existing: Mapping[str, Model], fetched: Sequence[Model]
) -> ProviderChangeset:
    """Diff existing models against a fetch. Pure and deterministic.

    If ``fetched`` repeats an ID, the last occurrence wins. All three lists
    are sorted by model ID.
    """
    latest: dict[str, Model] = {}
    for model in fetched:
        latest[model.id] = model

    changeset = ProviderChangeset(provider_id=provider_id)
    for model_id in sorted(latest):
        model = latest[model_id]
        current = existing.get(model_id)
        if current is None:
            changeset.added.append(model)
        elif not current.same_content(model):
            changeset.updated.append(
                ModelUpdate(
                    model_id=model_id,
                    existing=current,
                    new=model,
                    changes=diff_fields(current, model),
                )
            )

    for model_id in sorted(existing):
        if model_id not in latest:
            changeset.removed.append(existing[model_id])

    return changeset


def fresh_changeset(provider_id: str, fetched: Sequence[Model]) -> ProviderChangeset:
    """Treat every fetched model as added, ignoring what exists."""
    return compare_provider_models(provider_id, {}, fetched)


def format_tokens(count: int | None) -> str:
    """Compact token count: 1200000 -> '1.2M', 3500 -> '3.5K'."""
    if not count:
        return "0"
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)


def _describe_value(name: str, value: Any) -> str:
    if value is None:
        return "-"
    if name == "limits" and isinstance(value, dict):
        return "/".join(
            format_tokens(value.get(key)) for key in ("context_window", "output_tokens")
        )
    if name == "authors" and isinstance(value, list):
        return ", ".join(str(item.get("id", item)) for item in value if isinstance(item, dict))
    return str(value)


def describe_changeset(changeset: ProviderChangeset, *, max_items: int = 20) -> str:
    """Multi-line human-readable rendering used by the CLI."""
    lines = [f"{changeset.provider_id}:"]
    if not changeset.has_changes():
        lines.append("  no changes")
        return "\n".join(lines)

    def _section(label: str, items: list[str]) -> None:
        if not items:
            return
        lines.append(f"  {label} ({len(items)}):")
        for item in items[:max_items]:
            lines.append(f"    {item}")
        if len(items) > max_items:
            lines.append(f"    ... and {len(items) - max_items} more")

    _section("added", [model.id for model in changeset.added])
    updated = []
    for update in changeset.updated:
        parts = [
            f"{change.field}: {_describe_value(change.field, change.old_value)}"
            f" -> {_describe_value(change.field, change.new_value)}"
            if change.field in ("name", "limits", "authors")
            else change.field
            for change in update.changes
        ]
        updated.append(f"{update.model_id} ({'; '.join(parts)})" if parts else update.model_id)
    _section("updated", updated)
    _section("removed", [model.id for model in changeset.removed])
    return "\n".join(lines)


__all__ = [
    "COMPARED_FIELDS",
    "FieldChange",
    "ModelUpdate",
    "ProviderChangeset",
    "compare_provider_models",
    "describe_changeset",
    "diff_fields",
    "format_tokens",
    "fresh_changeset",
]
