"""models.dev enrichment source lifecycle.

The sync engine drives the source through ``ensure_repository`` ->
``build_index`` -> ``parse`` once per run, then calls ``enhance`` per
provider. Any failure during setup is reported to the caller, which decides
to continue without enrichment.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from starmap.catalogs.types import Model
from starmap.core.config.schema import ModelsDevSettings
from starmap.core.exceptions import EnrichmentError
from starmap.modelsdev import parser
from starmap.modelsdev.client import GitClient, HTTPClient
from starmap.modelsdev.enhance import enhance_models
from starmap.modelsdev.types import ModelsDevIndex

logger = logging.getLogger(__name__)


class ModelsDevSource:
    """Enrichment source backed by either the HTTP or the git client."""

    def __init__(
        self,
        settings: Optional[ModelsDevSettings] = None,
        *,
        client: Union[HTTPClient, GitClient, None] = None,
    ) -> None:
        self.settings = settings or ModelsDevSettings()
        if client is None:
            client = self._make_client(self.settings)
        self.client = client
        self._api_path: Optional[Path] = None

    @staticmethod
    def _make_client(settings: ModelsDevSettings) -> Union[HTTPClient, GitClient]:
        if settings.mode == "git":
            return GitClient(settings.cache_dir, repo_url=settings.repo_url, branch=settings.branch)
        return HTTPClient(
            settings.cache_dir, api_url=settings.api_url, cache_ttl=settings.cache_ttl_seconds
        )

    @property
    def api_path(self) -> Path:
        return self._api_path or self.client.api_path

    def ensure_repository(self) -> None:
        """Make the raw dataset available locally (idempotent)."""
        if isinstance(self.client, GitClient):
            self.client.ensure_repository()
        else:
            self._api_path = self.client.ensure_api()

    def build_index(self) -> Path:
        """Materialize ``api.json`` from the raw dataset."""
        if isinstance(self.client, GitClient):
            self._api_path = self.client.build_api()
        if not self.api_path.exists():
            raise EnrichmentError(f"models.dev api file missing at {self.api_path}")
        return self.api_path

    def parse(self, path: Union[str, os.PathLike, None] = None) -> ModelsDevIndex:
        return parser.parse(path or self.api_path)

    def setup(self) -> ModelsDevIndex:
        """Run the full lifecycle and return the parsed index."""
        self.ensure_repository()
        path = self.build_index()
        index = self.parse(path)
        logger.info("models.dev index ready: %d providers", len(index))
        return index

    def enhance(
        self, models: Sequence[Model], provider_id: str, index: Optional[ModelsDevIndex]
    ) -> tuple[list[Model], int]:
        return enhance_models(models, provider_id, index)

    def copy_provider_logos(self, output_dir: Union[str, os.PathLike], provider_ids: Iterable[str]) -> int:
        """Copy ``providers/<id>/logo.svg`` from a git checkout into the output tree.

        Only the git client has logos; the HTTP client copies nothing. Missing
        logos are skipped. Returns the number of logos copied.
        """
        if not isinstance(self.client, GitClient):
            return 0

        copied = 0
        for provider_id in provider_ids:
            logo = self.client.providers_path / provider_id / "logo.svg"
            if not logo.is_file():
                logger.debug("No models.dev logo for %s", provider_id)
                continue
            target_dir = Path(output_dir) / provider_id
            target_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(logo, target_dir / "logo.svg")
            copied += 1
        return copied

    def cleanup(self) -> None:
        """Remove the local working copy or cache."""
        self.client.cleanup()
        self._api_path = None


__all__ = ["ModelsDevSource"]
