"""Per-model YAML persistence.

Each model lives in its own file at ``<output_dir>/<provider_id>/<model_id>.yaml``.
Model IDs containing ``/`` map to nested directories. There is no cross-file
transaction: every write or delete is a single-file operation, so a failed
apply leaves each file either fully old or fully new.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

import yaml

from starmap.catalogs.types import Model
from starmap.core.exceptions import CatalogLoadError, PersistenceError, ValidationError

if TYPE_CHECKING:
    from starmap.catalogs.catalog import Catalog
    from starmap.sync.changeset import ProviderChangeset

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

MODEL_SUFFIX = ".yaml"


def _safe_parts(model_id: str) -> list[str]:
    parts = model_id.split("/")
    if any(part in ("", ".", "..") for part in parts) or os.path.isabs(model_id):
        raise PersistenceError(
            f"model ID {model_id!r} cannot be mapped to a file path",
            context={"model_id": model_id},
        )
    return parts


def provider_dir(output_dir: PathLike, provider_id: str) -> Path:
    if not provider_id or "/" in provider_id or provider_id in (".", ".."):
        raise PersistenceError(
            f"invalid provider ID {provider_id!r}", context={"provider_id": provider_id}
        )
    return Path(output_dir) / provider_id


def model_path(output_dir: PathLike, provider_id: str, model_id: str) -> Path:
    """Return the file path for a model, nesting directories for ``/`` in the ID."""
    parts = _safe_parts(model_id)
    directory = provider_dir(output_dir, provider_id).joinpath(*parts[:-1])
    return directory / f"{parts[-1]}{MODEL_SUFFIX}"


def dump_model_yaml(model: Model) -> str:
    """Render a model as a YAML document with a one-line header comment."""
    header = f"# {model.id}"
    if model.name and model.name != model.id:
        header += f" - {model.name}"
    body = yaml.safe_dump(
        model.to_dict(), default_flow_style=False, sort_keys=False, allow_unicode=True
    )
    return f"{header}\n{body}"


def read_model_file(path: PathLike) -> Model:
    """Load one model file.

    Raises:
        CatalogLoadError: If the file is unreadable, not YAML, or has no ID.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise CatalogLoadError(f"invalid YAML in {path}: {exc}", context={"path": str(path)}) from exc
    except OSError as exc:
        raise CatalogLoadError(f"error reading {path}: {exc}", context={"path": str(path)}) from exc

    try:
        return Model.from_dict(data or {})
    except ValidationError as exc:
        raise CatalogLoadError(f"invalid model file {path}: {exc}", context={"path": str(path)}) from exc


def load_provider_models(output_dir: PathLike, provider_id: str) -> dict[str, Model]:
    """Load every model file under a provider directory, keyed by model ID."""
    directory = provider_dir(output_dir, provider_id)
    if not directory.is_dir():
        return {}

    models: dict[str, Model] = {}
    for path in sorted(directory.rglob(f"*{MODEL_SUFFIX}")):
        if not path.is_file():
            continue
        model = read_model_file(path)
        models[model.id] = model
    return models


def get_provider_models(
    catalog: Optional["Catalog"], provider_id: str, output_dir: Optional[PathLike] = None
) -> dict[str, Model]:
    """Existing models for a provider: catalog models overlaid by persisted files."""
    result: dict[str, Model] = {}
    if catalog is not None:
        provider, found = catalog.providers.get(provider_id)
        if found:
            result.update({model_id: model.copy() for model_id, model in provider.models.items()})
    if output_dir is not None:
        result.update(load_provider_models(output_dir, provider_id))
    return result


def save_model(output_dir: PathLike, provider_id: str, model: Model) -> Path:
    """Write a model file atomically, creating directories as needed."""
    path = model_path(output_dir, provider_id, model.id)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=MODEL_SUFFIX)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(dump_model_yaml(model))
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise PersistenceError(
            f"writing model {model.id}: {exc}",
            context={"provider_id": provider_id, "model_id": model.id, "operation": "write"},
        ) from exc
    logger.debug("Wrote %s", path)
    return path


def _prune_empty_dirs(start: Path, stop: Path) -> None:
    current = start
    while current != stop and stop in current.parents:
        try:
            current.rmdir()
        except OSError:
            return
        current = current.parent


def delete_model(output_dir: PathLike, provider_id: str, model_id: str) -> bool:
    """Remove a model file. Returns False when the file did not exist."""
    path = model_path(output_dir, provider_id, model_id)
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise PersistenceError(
            f"removing model {model_id}: {exc}",
            context={"provider_id": provider_id, "model_id": model_id, "operation": "delete"},
        ) from exc
    _prune_empty_dirs(path.parent, provider_dir(output_dir, provider_id))
    logger.debug("Removed %s", path)
    return True


def clean_provider_directory(output_dir: PathLike, provider_id: str) -> int:
    """Remove all model files for a provider, keeping other files (logos).

    Returns:
        Number of files removed. A missing directory removes nothing.
    """
    directory = provider_dir(output_dir, provider_id)
    if not directory.is_dir():
        return 0

    removed = 0
    for path in sorted(directory.rglob(f"*{MODEL_SUFFIX}")):
        try:
            path.unlink()
        except OSError as exc:
            raise PersistenceError(
                f"cleaning provider directory {directory}: {exc}",
                context={"provider_id": provider_id, "operation": "clean"},
            ) from exc
        removed += 1
    logger.info("Removed %d model files for %s", removed, provider_id)
    return removed


def apply_changeset(
    changeset: "ProviderChangeset",
    output_dir: PathLike,
    catalog: Optional["Catalog"] = None,
) -> None:
    """Write Added, overwrite Updated and delete Removed model files.

    When a catalog is given, its view of the provider is updated to match
    the files just written.

    Raises:
        PersistenceError: On the first file operation that fails.
    """
    provider_id = changeset.provider_id
    for model in changeset.added:
        save_model(output_dir, provider_id, model)
    for update in changeset.updated:
        save_model(output_dir, provider_id, update.new)
    for model in changeset.removed:
        delete_model(output_dir, provider_id, model.id)

    if catalog is not None:
        catalog.apply_provider_changes(
            provider_id,
            upserts=[*changeset.added, *(update.new for update in changeset.updated)],
            removals=[model.id for model in changeset.removed],
        )

    logger.info(
        "Applied %s: %d added, %d updated, %d removed",
        provider_id,
        len(changeset.added),
        len(changeset.updated),
        len(changeset.removed),
    )


__all__ = [
    "apply_changeset",
    "clean_provider_directory",
    "delete_model",
    "dump_model_yaml",
    "get_provider_models",
    "load_provider_models",
    "model_path",
    "provider_dir",
    "read_model_file",
    "save_model",
]
