"""Obtain the models.dev dataset.

Two ways to get ``api.json``:

* :class:`HTTPClient` downloads the published file and caches it for an
  hour. A download that fails validation never replaces a good cache.
* :class:`GitClient` keeps a shallow clone of the models.dev repository and
  builds ``api.json`` locally with ``bun``. The checkout also carries
  provider logos.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
import tempfile
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, Optional, Union

import httpx

from starmap.core.exceptions import EnrichmentError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://models.dev/api.json"
DEFAULT_REPO_URL = "https://github.com/sst/models.dev.git"
DEFAULT_BRANCH = "dev"
DEFAULT_CACHE_TTL = 3600.0

MIN_VALID_SIZE = 100_000
MIN_PROVIDERS = 5

PathLike = Union[str, os.PathLike]


def _default_http_factory(timeout: Optional[float]) -> httpx.Client:
    return httpx.Client(timeout=timeout, follow_redirects=True)


def _remove_tree(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path)
        logger.info("Removed %s", path)


class HTTPClient:
    """Download and cache ``https://models.dev/api.json``."""

    def __init__(
        self,
        cache_dir: PathLike,
        *,
        api_url: str = DEFAULT_API_URL,
        cache_ttl: float = DEFAULT_CACHE_TTL,
        timeout: float = 60.0,
        min_size: int = MIN_VALID_SIZE,
        min_providers: int = MIN_PROVIDERS,
        http_client_factory: Callable[[Optional[float]], httpx.Client] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.root = Path(cache_dir).expanduser() / "models.dev"
        self.api_url = api_url
        self.cache_ttl = cache_ttl
        self.timeout = timeout
        self.min_size = min_size
        self.min_providers = min_providers
        self._http_client_factory = http_client_factory or _default_http_factory
        self._clock = clock

    @property
    def api_path(self) -> Path:
        return self.root / "api.json"

    def is_cache_fresh(self) -> bool:
        try:
            age = self._clock() - self.api_path.stat().st_mtime
        except OSError:
            return False
        return age < self.cache_ttl

    def ensure_api(self) -> Path:
        """Return a path to a usable ``api.json``, downloading when stale.

        Raises:
            EnrichmentError: If the download fails and no cached copy exists.
        """
        if self.is_cache_fresh():
            logger.debug("Using cached models.dev api.json at %s", self.api_path)
            return self.api_path

        try:
            self.download()
        except (httpx.HTTPError, EnrichmentError) as exc:
            if self.api_path.exists():
                logger.warning("models.dev download failed (%s); using cached copy", exc)
                return self.api_path
            raise EnrichmentError(
                f"models.dev download failed and no cache is available: {exc}",
                context={"url": self.api_url},
            ) from exc
        return self.api_path

    def download(self) -> None:
        with self._http_client_factory(self.timeout) as client:
            resp = client.get(self.api_url)
            resp.raise_for_status()
            content = resp.content

        self.validate(content)
        try:
            self._write_cache(content)
        except OSError as exc:
            raise EnrichmentError(
                f"cannot write models.dev cache under {self.root}: {exc}",
                context={"path": str(self.root)},
            ) from exc
        logger.info("Downloaded models.dev api.json (%d KB)", len(content) // 1024)

    def _write_cache(self, content: bytes) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".api-", suffix=".json")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(content)
            os.replace(tmp_name, self.api_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def validate(self, content: bytes) -> None:
        """Reject truncated or malformed downloads.

        Raises:
            EnrichmentError: If the payload is too small, not a JSON object,
                or lists too few providers.
        """
        if len(content) < self.min_size:
            raise EnrichmentError(
                f"models.dev response too small ({len(content)} bytes, expected >= {self.min_size})"
            )
        try:
            payload = json.loads(content)
        except ValueError as exc:
            raise EnrichmentError(f"models.dev response is not valid JSON: {exc}") from exc
        if not isinstance(payload, dict) or len(payload) < self.min_providers:
            found = len(payload) if isinstance(payload, dict) else 0
            raise EnrichmentError(f"models.dev response lists too few providers ({found})")

    def cleanup(self) -> None:
        _remove_tree(self.root)


Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class GitClient:
    """Maintain a shallow clone of the models.dev repository and build its API file."""

    def __init__(
        self,
        cache_dir: PathLike,
        *,
        repo_url: str = DEFAULT_REPO_URL,
        branch: str = DEFAULT_BRANCH,
        runner: Runner = subprocess.run,
    ) -> None:
        self.repo_path = Path(cache_dir).expanduser() / "models.dev-repo"
        self.repo_url = repo_url
        self.branch = branch
        self._runner = runner

    @property
    def api_path(self) -> Path:
        return self.repo_path / "packages" / "web" / "dist" / "_api.json"

    @property
    def providers_path(self) -> Path:
        return self.repo_path / "providers"

    def _run(self, args: Sequence[str], cwd: Optional[Path] = None) -> None:
        logger.debug("Running %s (cwd=%s)", " ".join(args), cwd)
        try:
            result: Any = self._runner(
                list(args), cwd=cwd, capture_output=True, text=True, check=False
            )
        except FileNotFoundError as exc:
            raise EnrichmentError(
                f"{args[0]} is not installed", context={"command": list(args)}
            ) from exc
        if result.returncode != 0:
            output = (result.stderr or result.stdout or "").strip()
            raise EnrichmentError(
                f"{' '.join(args)} failed: {output}",
                context={"command": list(args), "returncode": result.returncode},
            )

    def ensure_repository(self) -> None:
        """Clone the repository, or update an existing checkout."""
        if (self.repo_path / ".git").is_dir():
            logger.info("Updating models.dev checkout at %s", self.repo_path)
            self._run(["git", "reset", "--hard", "HEAD"], cwd=self.repo_path)
            self._run(["git", "pull", "origin", self.branch], cwd=self.repo_path)
            return

        logger.info("Cloning %s (%s)", self.repo_url, self.branch)
        try:
            self.repo_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise EnrichmentError(
                f"cannot create {self.repo_path.parent}: {exc}",
                context={"path": str(self.repo_path.parent)},
            ) from exc
        self._run(
            [
                "git",
                "clone",
                "--branch",
                self.branch,
                "--depth",
                "1",
                self.repo_url,
                str(self.repo_path),
            ]
        )

    def build_api(self) -> Path:
        """Install dependencies and build ``_api.json``.

        Raises:
            EnrichmentError: If the checkout is missing or the build fails.
        """
        if not self.repo_path.is_dir():
            raise EnrichmentError(f"models.dev checkout not found at {self.repo_path}")
        self._run(["bun", "install"], cwd=self.repo_path)
        self._run(["bun", "run", "script/build.ts"], cwd=self.repo_path / "packages" / "web")
        if not self.api_path.exists():
            raise EnrichmentError(f"build completed but {self.api_path} was not produced")
        return self.api_path

    def cleanup(self) -> None:
        _remove_tree(self.repo_path)


__all__ = [
    "DEFAULT_API_URL",
    "DEFAULT_BRANCH",
    "DEFAULT_CACHE_TTL",
    "DEFAULT_REPO_URL",
    "GitClient",
    "HTTPClient",
]
