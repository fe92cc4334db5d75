"""Options for a single sync run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from starmap.core.exceptions import ConfigurationError

DEFAULT_OUTPUT_DIR = "./catalog/providers"
DEFAULT_TIMEOUT = 30.0
DEFAULT_CONCURRENCY = 5


@dataclass
class SyncOptions:
    """How a sync run behaves.

    Attributes:
        provider: Restrict the run to one provider ID. None syncs every
            provider that has a client.
        dry_run: Compute changes without writing anything.
        fresh: Treat every fetched model as new and rebuild each provider
            directory from scratch on apply. A provider that returns no
            models keeps its existing files.
        auto_approve: Apply changes as soon as they are computed.
        output_dir: Root directory of per-provider model files.
        timeout: Seconds allowed for each provider fetch.
        concurrency: Maximum number of fetches in flight.
        clean_modelsdev_after: Remove the models.dev working copy at the end.
        confirm_fresh: Explicit acknowledgement required to apply a fresh run.
        enrich: Use models.dev to fill gaps in fetched models.
    """

    provider: Optional[str] = None
    dry_run: bool = False
    fresh: bool = False
    auto_approve: bool = False
    output_dir: str = DEFAULT_OUTPUT_DIR
    timeout: float = DEFAULT_TIMEOUT
    concurrency: int = DEFAULT_CONCURRENCY
    clean_modelsdev_after: bool = False
    confirm_fresh: bool = False
    enrich: bool = True

    def validate(self) -> None:
        """Raise ConfigurationError for values no run can honour."""
        if self.concurrency < 1:
            raise ConfigurationError(
                f"concurrency must be at least 1, got {self.concurrency}",
                context={"option": "concurrency"},
            )
        if self.timeout <= 0:
            raise ConfigurationError(
                f"timeout must be positive, got {self.timeout}",
                context={"option": "timeout"},
            )
        if not self.output_dir:
            raise ConfigurationError("output_dir must not be empty", context={"option": "output_dir"})
        if self.provider is not None and not self.provider.strip():
            raise ConfigurationError("provider must not be blank", context={"option": "provider"})


__all__ = ["DEFAULT_CONCURRENCY", "DEFAULT_OUTPUT_DIR", "DEFAULT_TIMEOUT", "SyncOptions"]
