"""Catalog synchronization engine.

A run has two phases. :meth:`Syncer.sync` fetches every selected provider
concurrently, enhances the results with models.dev data and diffs them
against what is already known, returning a :class:`SyncResult` preview.
:meth:`Syncer.apply` commits a preview to disk. Whether a human confirms in
between is up to the caller; with ``auto_approve`` the engine applies on its
own.

Fetches run on a thread pool, gated by a :class:`ConcurrencyLimiter` so at
most ``options.concurrency`` requests are in flight. Each worker tags its
result with the provider ID and puts it on a queue; all post-fetch work
(enhancement, comparison, persistence) happens on the calling thread, so
the catalog is never touched concurrently.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol, Sequence

from starmap._internal.concurrency import ConcurrencyLimiter, FetchContext
from starmap.catalogs.catalog import Catalog
from starmap.catalogs.merge import merge_model
from starmap.catalogs.persistence import (
    apply_changeset,
    clean_provider_directory,
    get_provider_models,
)
from starmap.catalogs.types import Model, Provider
from starmap.core.exceptions import (
    ApplyError,
    EnrichmentError,
    FetchCancelledError,
    MissingCredentialsError,
    ProviderAPIError,
    ProviderConfigError,
    StarmapError,
    SyncError,
    UnsupportedProviderError,
)
from starmap.modelsdev.types import ModelsDevIndex
from starmap.sync.changeset import compare_provider_models, fresh_changeset
from starmap.sync.options import SyncOptions
from starmap.sync.result import ProviderResult, SyncResult

logger = logging.getLogger(__name__)

# Extra time a worker gets past its own deadline before the collector gives up on it.
_DEADLINE_GRACE_S = 1.0
_POLL_INTERVAL_S = 0.05
_MAX_WORKERS = 32


class Fetcher(Protocol):
    def has_client(self, provider_id: str) -> bool: ...

    def fetch_models(self, ctx: FetchContext, provider: Provider) -> list[Model]: ...


class EnrichmentSource(Protocol):
    def setup(self) -> ModelsDevIndex: ...

    def enhance(
        self, models: Sequence[Model], provider_id: str, index: Optional[ModelsDevIndex]
    ) -> tuple[list[Model], int]: ...

    def copy_provider_logos(self, output_dir: str, provider_ids: Iterable[str]) -> int: ...

    def cleanup(self) -> None: ...


@dataclass
class FetchOutcome:
    """One provider's fetch, as reported by a worker."""

    provider_id: str
    models: list[Model] = field(default_factory=list)
    error: Optional[StarmapError] = None
    seconds: float = 0.0


class Syncer:
    """Fetch, compare and apply provider model catalogs."""

    def __init__(
        self,
        catalog: Catalog,
        fetcher: Fetcher,
        enrichment: Optional[EnrichmentSource] = None,
    ) -> None:
        self.catalog = catalog
        self.fetcher = fetcher
        self.enrichment = enrichment
        self._cleanup_pending = False

    # Provider selection

    def resolve_providers(self, options: SyncOptions) -> list[Provider]:
        """Providers this run will fetch, sorted by ID.

        Raises:
            ProviderConfigError: If the named provider is not in the catalog.
            UnsupportedProviderError: If the named provider has no client.
        """
        if options.provider:
            provider, found = self.catalog.providers.get(options.provider)
            if not found:
                raise ProviderConfigError(
                    f"provider {options.provider!r} not found in catalog",
                    context={"provider_id": options.provider},
                )
            if not self.fetcher.has_client(provider.id):
                raise UnsupportedProviderError(
                    f"provider {provider.id!r} has no client implementation",
                    context={"provider_id": provider.id},
                )
            return [provider]

        providers = [p for p in self.catalog.providers.list() if self.fetcher.has_client(p.id)]
        skipped = [p.id for p in self.catalog.providers.list() if not self.fetcher.has_client(p.id)]
        if skipped:
            logger.debug("No client for %s; skipping", ", ".join(skipped))
        return providers

    # Fetch phase

    def fetch_all(
        self,
        providers: Sequence[Provider],
        options: SyncOptions,
        ctx: Optional[FetchContext] = None,
    ) -> dict[str, FetchOutcome]:
        """Fetch all providers concurrently and collect their outcomes.

        Every provider gets exactly one outcome. Cancelling ``ctx`` stops new
        fetches from starting; providers that never finish are reported
        with a :class:`FetchCancelledError`.
        """
        ctx = ctx or FetchContext.background()
        if not providers:
            return {}

        limiter = ConcurrencyLimiter(options.concurrency)
        results: "queue.Queue[FetchOutcome]" = queue.Queue()
        started: dict[str, float] = {}
        started_lock = threading.Lock()

        def _worker(provider: Provider) -> None:
            with limiter.slot(cancel_event=ctx.cancel_event) as acquired:
                if not acquired:
                    results.put(
                        FetchOutcome(
                            provider.id,
                            error=FetchCancelledError(
                                f"fetch for {provider.id} cancelled before it started",
                                context={"provider_id": provider.id, "reason": "cancelled"},
                            ),
                        )
                    )
                    return
                begin = time.monotonic()
                with started_lock:
                    started[provider.id] = begin
                results.put(self._fetch_one(ctx.derive(options.timeout), provider, begin))

        outcomes: dict[str, FetchOutcome] = {}
        pending = {provider.id for provider in providers}
        executor = ThreadPoolExecutor(
            max_workers=min(len(providers), _MAX_WORKERS), thread_name_prefix="starmap-fetch"
        )
        try:
            for provider in providers:
                executor.submit(_worker, provider)

            while pending:
                if ctx.cancelled:
                    logger.warning("Sync cancelled with %d providers outstanding", len(pending))
                    break
                try:
                    outcome = results.get(timeout=_POLL_INTERVAL_S)
                except queue.Empty:
                    self._expire_stragglers(pending, started, started_lock, options.timeout, outcomes)
                    continue
                if outcome.provider_id not in pending:
                    logger.debug("Ignoring late result for %s", outcome.provider_id)
                    continue
                pending.discard(outcome.provider_id)
                outcomes[outcome.provider_id] = outcome
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        for provider_id in sorted(pending):
            outcomes[provider_id] = FetchOutcome(
                provider_id,
                error=FetchCancelledError(
                    f"fetch for {provider_id} cancelled",
                    context={"provider_id": provider_id, "reason": "cancelled"},
                ),
            )

        stats = limiter.get_stats()
        logger.debug(
            "Fetched %d providers (peak in flight %d, limit %d)",
            len(outcomes),
            stats["peak_inflight"],
            stats["limit"],
        )
        return outcomes

    def _fetch_one(self, ctx: FetchContext, provider: Provider, begin: float) -> FetchOutcome:
        try:
            models = self.fetcher.fetch_models(ctx, provider)
        except StarmapError as exc:
            return FetchOutcome(provider.id, error=exc, seconds=time.monotonic() - begin)
        except Exception as exc:
            return FetchOutcome(
                provider.id,
                error=ProviderAPIError(
                    f"{provider.id}: {exc}",
                    context={"provider_id": provider.id, "error_type": type(exc).__name__},
                ),
                seconds=time.monotonic() - begin,
            )
        logger.info("Fetched %d models from %s", len(models), provider.id)
        return FetchOutcome(provider.id, models=list(models), seconds=time.monotonic() - begin)

    @staticmethod
    def _expire_stragglers(
        pending: set[str],
        started: dict[str, float],
        lock: threading.Lock,
        timeout: float,
        outcomes: dict[str, FetchOutcome],
    ) -> None:
        now = time.monotonic()
        with lock:
            overdue = [
                pid
                for pid in pending
                if pid in started and now - started[pid] > timeout + _DEADLINE_GRACE_S
            ]
        for provider_id in overdue:
            logger.warning("Fetch for %s exceeded %.1fs; abandoning it", provider_id, timeout)
            pending.discard(provider_id)
            outcomes[provider_id] = FetchOutcome(
                provider_id,
                error=FetchCancelledError(
                    f"fetch for {provider_id} exceeded its {timeout:g}s deadline",
                    context={"provider_id": provider_id, "reason": "deadline"},
                ),
                seconds=now - started[provider_id],
            )

    # Preview phase

    def _setup_enrichment(self, options: SyncOptions, result: SyncResult) -> Optional[ModelsDevIndex]:
        if self.enrichment is None or not options.enrich:
            return None
        try:
            return self.enrichment.setup()
        except StarmapError as exc:
            error = exc
        except OSError as exc:
            error = EnrichmentError(
                f"models.dev setup failed: {exc}", context={"error_type": type(exc).__name__}
            )
        logger.warning("models.dev enrichment unavailable, continuing without it: %s", error)
        result.enrichment_error = error
        return None

    def _reconcile(
        self,
        provider: Provider,
        outcome: FetchOutcome,
        options: SyncOptions,
        index: Optional[ModelsDevIndex],
    ) -> ProviderResult:
        provider_result = ProviderResult(provider.id, fetch_seconds=outcome.seconds)
        if isinstance(outcome.error, MissingCredentialsError):
            logger.warning("Skipping %s: %s", provider.id, outcome.error)
            provider_result.skipped_reason = str(outcome.error)
            return provider_result
        if outcome.error is not None:
            logger.warning("Fetch failed for %s: %s", provider.id, outcome.error)
            provider_result.error = outcome.error
            return provider_result

        fetched = outcome.models
        provider_result.api_models_count = len(fetched)
        if index is not None and self.enrichment is not None:
            fetched, provider_result.enhanced_count = self.enrichment.enhance(fetched, provider.id, index)

        try:
            existing = get_provider_models(self.catalog, provider.id, options.output_dir)
        except StarmapError as exc:
            logger.warning("Cannot load existing models for %s: %s", provider.id, exc)
            provider_result.error = exc
            return provider_result
        provider_result.existing_models_count = len(existing)

        if options.fresh:
            if not fetched:
                logger.warning(
                    "%s returned no models; keeping its files despite fresh mode", provider.id
                )
            changeset = fresh_changeset(provider.id, fetched)
        else:
            # Baseline values fill whatever the live and models.dev data leave empty.
            merged = [
                merge_model(model, existing[model.id])[0] if model.id in existing else model
                for model in fetched
            ]
            changeset = compare_provider_models(provider.id, existing, merged)
        provider_result.record_changeset(changeset)

        logger.info(
            "%s: %d fetched, %d enhanced, %d added, %d updated, %d removed",
            provider.id,
            provider_result.api_models_count,
            provider_result.enhanced_count,
            provider_result.added_count,
            provider_result.updated_count,
            provider_result.removed_count,
        )
        return provider_result

    def sync(self, options: SyncOptions, ctx: Optional[FetchContext] = None) -> SyncResult:
        """Compute (and, with ``auto_approve``, apply) the changes for a run.

        Per-provider failures are recorded on the result and never abort the
        run. Setup problems raise.

        Raises:
            ConfigurationError: If ``options`` are invalid.
            ProviderConfigError: If the named provider is unknown.
            UnsupportedProviderError: If the named provider has no client.
            ApplyError: If auto-approved changes fail to apply.
        """
        options.validate()
        ctx = ctx or FetchContext.background()
        providers = self.resolve_providers(options)

        result = SyncResult(
            dry_run=options.dry_run, fresh=options.fresh, output_dir=options.output_dir
        )
        self._cleanup_pending = options.clean_modelsdev_after and self.enrichment is not None

        index = self._setup_enrichment(options, result)
        outcomes = self.fetch_all(providers, options, ctx)
        for provider in providers:
            result.provider_results[provider.id] = self._reconcile(
                provider, outcomes[provider.id], options, index
            )

        logger.info("Sync preview: %s", result.summary())

        if options.dry_run or not result.has_changes():
            self.finish()
            return result

        if options.auto_approve:
            return self.apply(result, confirm_fresh=options.confirm_fresh)

        return result

    # Apply phase

    def apply(self, result: SyncResult, *, confirm_fresh: bool = False) -> SyncResult:
        """Write a previewed result to its output directory.

        Providers are applied in ID order. The first failure stops the run;
        providers already applied stay applied.

        Raises:
            SyncError: For dry-run results, or fresh results without
                ``confirm_fresh``.
            ApplyError: If writing a provider's changes fails.
        """
        if result.dry_run:
            raise SyncError("cannot apply a dry-run result")
        if result.fresh and not confirm_fresh:
            raise SyncError(
                "fresh sync deletes existing model files; pass confirm_fresh=True to apply"
            )
        if result.applied:
            raise SyncError("result has already been applied")

        applied_ids = []
        try:
            for changeset in result.changesets():
                provider_id = changeset.provider_id
                operation = "apply"
                try:
                    if result.fresh:
                        operation = "clean"
                        clean_provider_directory(result.output_dir, provider_id)
                        self._forget_provider_models(provider_id)
                        operation = "apply"
                    apply_changeset(changeset, result.output_dir, self.catalog)
                except StarmapError as exc:
                    raise ApplyError(
                        f"applying changes for {provider_id} failed: {exc}",
                        context={"provider_id": provider_id, "operation": operation, **exc.context},
                    ) from exc
                applied_ids.append(provider_id)

            self._copy_logos(result.output_dir, applied_ids)
            result.applied = True
            logger.info("Applied %d providers to %s", len(applied_ids), result.output_dir)
        finally:
            self.finish()
        return result

    def _copy_logos(self, output_dir: str, provider_ids: list[str]) -> None:
        if self.enrichment is None or not provider_ids:
            return
        try:
            copied = self.enrichment.copy_provider_logos(output_dir, provider_ids)
        except (StarmapError, OSError) as exc:
            logger.warning("Could not copy provider logos: %s", exc)
            return
        if copied:
            logger.info("Copied %d provider logos", copied)

    def _forget_provider_models(self, provider_id: str) -> None:
        stale = list(self.catalog.provider_models(provider_id))
        self.catalog.apply_provider_changes(provider_id, upserts=(), removals=stale)

    def finish(self) -> None:
        """Release the enrichment working copy if this run asked for cleanup.

        ``sync`` and ``apply`` call this themselves; callers that discard a
        previewed result without applying it call it directly. Idempotent.
        """
        if not self._cleanup_pending or self.enrichment is None:
            return
        self._cleanup_pending = False
        try:
            self.enrichment.cleanup()
        except (StarmapError, OSError) as exc:
            logger.warning("models.dev cleanup failed: %s", exc)


__all__ = ["EnrichmentSource", "FetchOutcome", "Fetcher", "Syncer"]
