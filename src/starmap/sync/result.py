"""Outcome of a sync run, per provider and in aggregate."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from starmap.core.exceptions import StarmapError
from starmap.sync.changeset import ProviderChangeset


@dataclass
class ProviderResult:
    provider_id: str
    api_models_count: int = 0
    existing_models_count: int = 0
    enhanced_count: int = 0
    added_count: int = 0
    updated_count: int = 0
    removed_count: int = 0
    changeset: Optional[ProviderChangeset] = None
    error: Optional[StarmapError] = None
    skipped_reason: Optional[str] = None
    fetch_seconds: float = 0.0

    @property
    def failed(self) -> bool:
        return self.error is not None

    def has_changes(self) -> bool:
        return self.changeset is not None and self.changeset.has_changes()

    def record_changeset(self, changeset: ProviderChangeset) -> None:
        self.changeset = changeset
        self.added_count = len(changeset.added)
        self.updated_count = len(changeset.updated)
        self.removed_count = len(changeset.removed)

    @property
    def status(self) -> str:
        if self.error is not None:
            return "error"
        if self.skipped_reason:
            return "skipped"
        return "changed" if self.has_changes() else "unchanged"


@dataclass
class SyncResult:
    """Everything a caller needs to present, confirm and apply a run."""

    provider_results: dict[str, ProviderResult] = field(default_factory=dict)
    dry_run: bool = False
    fresh: bool = False
    applied: bool = False
    output_dir: str = ""
    enrichment_error: Optional[StarmapError] = None

    @property
    def providers_changed(self) -> int:
        return sum(1 for result in self.provider_results.values() if result.has_changes())

    @property
    def total_changes(self) -> int:
        return sum(
            result.changeset.total()
            for result in self.provider_results.values()
            if result.changeset is not None
        )

    @property
    def errors(self) -> dict[str, StarmapError]:
        return {
            provider_id: result.error
            for provider_id, result in sorted(self.provider_results.items())
            if result.error is not None
        }

    @property
    def skipped(self) -> dict[str, str]:
        return {
            provider_id: result.skipped_reason
            for provider_id, result in sorted(self.provider_results.items())
            if result.error is None and result.skipped_reason
        }

    def has_changes(self) -> bool:
        return self.total_changes > 0

    def changesets(self) -> list[ProviderChangeset]:
        """Changesets with changes, sorted by provider ID."""
        return [
            self.provider_results[provider_id].changeset
            for provider_id in sorted(self.provider_results)
            if self.provider_results[provider_id].has_changes()
        ]

    def summary(self) -> str:
        added = sum(r.added_count for r in self.provider_results.values())
        updated = sum(r.updated_count for r in self.provider_results.values())
        removed = sum(r.removed_count for r in self.provider_results.values())
        parts = [
            f"{len(self.provider_results)} providers",
            f"{self.providers_changed} changed",
            f"{added} added",
            f"{updated} updated",
            f"{removed} removed",
        ]
        if self.errors:
            parts.append(f"{len(self.errors)} failed")
        if self.skipped:
            parts.append(f"{len(self.skipped)} skipped")
        text = ", ".join(parts)
        if self.dry_run:
            text = f"[dry run] {text}"
        elif self.fresh:
            text = f"[fresh] {text}"
        return text


__all__ = ["ProviderResult", "SyncResult"]
