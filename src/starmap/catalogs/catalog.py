"""In-memory catalog store.

The catalog holds keyed collections of providers, authors and models. It is
populated from a directory laid out as::

    providers.yaml           # list of provider definitions
    authors.yaml             # list of author definitions
    providers/<id>/*.yaml    # one file per model, nested for IDs with "/"

The package ships such a directory as its embedded baseline dataset.

Examples:
    >>> from starmap.catalogs import Catalog
    >>> catalog = Catalog.embedded()
    >>> catalog.providers.get("openai")[1]
    True
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Callable, Dict, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar, Union

import yaml

from starmap.catalogs.persistence import load_provider_models
from starmap.catalogs.types import Author, Model, Provider
from starmap.core.exceptions import CatalogLoadError, ValidationError

logger = logging.getLogger(__name__)

EMBEDDED_CATALOG_DIR = Path(__file__).parent / "data"

T = TypeVar("T")


class Collection(Generic[T]):
    """Entities keyed by ID with get/set/batch-upsert/delete access."""

    def __init__(self, key: Callable[[T], str], items: Iterable[T] = ()) -> None:
        self._key = key
        self._items: Dict[str, T] = {}
        self.set_batch(items)

    def get(self, item_id: str) -> Tuple[Optional[T], bool]:
        item = self._items.get(item_id)
        return item, item is not None

    def set(self, item: T) -> None:
        item_id = self._key(item)
        if not item_id:
            raise ValidationError("cannot store an entity with an empty ID")
        self._items[item_id] = item

    def set_batch(self, items: Iterable[T]) -> None:
        for item in items:
            self.set(item)

    def delete(self, item_id: str) -> bool:
        return self._items.pop(item_id, None) is not None

    def list(self) -> List[T]:
        """Entities sorted by ID."""
        return [self._items[key] for key in sorted(self._items)]

    def ids(self) -> List[str]:
        return sorted(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.list())


def _read_list(path: Path) -> list:
    if not path.exists():
        return []
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or []
    except yaml.YAMLError as exc:
        raise CatalogLoadError(f"invalid YAML in {path}: {exc}", context={"path": str(path)}) from exc
    if not isinstance(data, list):
        raise CatalogLoadError(f"{path} must contain a list", context={"path": str(path)})
    return data


class Catalog:
    """Providers, authors and models, each in a keyed collection."""

    def __init__(
        self,
        providers: Iterable[Provider] = (),
        authors: Iterable[Author] = (),
        models: Iterable[Model] = (),
    ) -> None:
        self.providers: Collection[Provider] = Collection(lambda p: p.id, providers)
        self.authors: Collection[Author] = Collection(lambda a: a.id, authors)
        self.models: Collection[Model] = Collection(lambda m: m.id, models)

    @classmethod
    def from_directory(cls, root: Union[str, Path]) -> "Catalog":
        """Load a catalog directory.

        Raises:
            CatalogLoadError: If any definition or model file is invalid.
        """
        root = Path(root)
        try:
            providers = [Provider.from_dict(item) for item in _read_list(root / "providers.yaml")]
            authors = [Author.from_dict(item) for item in _read_list(root / "authors.yaml")]
        except ValidationError as exc:
            raise CatalogLoadError(f"invalid catalog definitions in {root}: {exc}") from exc

        catalog = cls(providers=providers, authors=authors)
        models_root = root / "providers"
        for provider in catalog.providers.list():
            for model in load_provider_models(models_root, provider.id).values():
                catalog.attach_model(provider.id, model)

        logger.debug(
            "Loaded catalog from %s: %d providers, %d authors, %d models",
            root,
            len(catalog.providers),
            len(catalog.authors),
            len(catalog.models),
        )
        return catalog

    @classmethod
    def embedded(cls) -> "Catalog":
        """The baseline dataset shipped with the package."""
        return cls.from_directory(EMBEDDED_CATALOG_DIR)

    def attach_model(self, provider_id: str, model: Model) -> None:
        """Record a model under its provider, its authors and the global collection."""
        provider, found = self.providers.get(provider_id)
        if found:
            provider.models[model.id] = model
        self.models.set(model)
        for credited in model.authors:
            author, known = self.authors.get(credited.id)
            if known:
                author.models[model.id] = model

    def detach_model(self, provider_id: str, model_id: str) -> None:
        provider, found = self.providers.get(provider_id)
        if found:
            provider.models.pop(model_id, None)
        for author in self.authors:
            author.models.pop(model_id, None)
        served_elsewhere = any(model_id in p.models for p in self.providers)
        if not served_elsewhere:
            self.models.delete(model_id)

    def apply_provider_changes(
        self, provider_id: str, upserts: Iterable[Model], removals: Iterable[str] = ()
    ) -> None:
        for model in upserts:
            self.attach_model(provider_id, model)
        for model_id in removals:
            self.detach_model(provider_id, model_id)

    def provider_models(self, provider_id: str) -> Dict[str, Model]:
        provider, found = self.providers.get(provider_id)
        return dict(provider.models) if found else {}

    def copy(self) -> "Catalog":
        """Deep copy; mutations to the copy never reach this catalog."""
        return copy.deepcopy(self)


__all__ = ["Catalog", "Collection", "EMBEDDED_CATALOG_DIR"]
