"""Shared fixtures: model/provider factories and in-memory sync collaborators."""

import threading
import time

import pytest

from starmap.catalogs.catalog import Catalog
from starmap.catalogs.types import (
    Model,
    ModelLimits,
    ModelPricing,
    ModelTokenPricing,
    Provider,
    ProviderAPIKey,
    TokenPrice,
)
from starmap.core.exceptions import ProviderAPIError


def build_model(model_id, name=None, *, context=None, input_price=None, **kwargs):
    model = Model(id=model_id, name=name if name is not None else model_id.upper(), **kwargs)
    if context is not None:
        model.limits = ModelLimits(context_window=context)
    if input_price is not None:
        model.pricing = ModelPricing(
            tokens=ModelTokenPricing(input=TokenPrice.from_per_1m(input_price)), currency="USD"
        )
    return model


def build_provider(provider_id, models=(), *, api_key_env=None):
    provider = Provider(id=provider_id, name=provider_id.title())
    if api_key_env:
        provider.api_key = ProviderAPIKey(name=api_key_env)
    for model in models:
        provider.models[model.id] = model
    return provider


class FakeFetcher:
    """Fetcher returning canned models or errors, recording concurrency."""

    def __init__(self, responses=None, *, delay=0.0, unsupported=()):
        self.responses = dict(responses or {})
        self.delay = delay
        self.unsupported = set(unsupported)
        self.calls = []
        self._lock = threading.Lock()
        self._inflight = 0
        self.peak = 0

    def has_client(self, provider_id):
        return provider_id not in self.unsupported

    def fetch_models(self, ctx, provider):
        with self._lock:
            self.calls.append(provider.id)
            self._inflight += 1
            self.peak = max(self.peak, self._inflight)
        try:
            if self.delay:
                time.sleep(self.delay)
            ctx.raise_if_cancelled()
            response = self.responses.get(provider.id, [])
            if isinstance(response, Exception):
                raise response
            return [model.copy() for model in response]
        finally:
            with self._lock:
                self._inflight -= 1


class FakeEnrichment:
    """Enrichment source that fills descriptions for known model IDs."""

    def __init__(self, descriptions=None, *, fail_setup=None):
        self.descriptions = dict(descriptions or {})
        self.fail_setup = fail_setup
        self.setup_calls = 0
        self.cleaned = False
        self.logo_calls = []

    def setup(self):
        self.setup_calls += 1
        if self.fail_setup is not None:
            raise self.fail_setup
        return object()

    def enhance(self, models, provider_id, index):
        enhanced, count = [], 0
        for model in models:
            copy = model.copy()
            if not copy.description and copy.id in self.descriptions:
                copy.description = self.descriptions[copy.id]
                count += 1
            enhanced.append(copy)
        return enhanced, count

    def copy_provider_logos(self, output_dir, provider_ids):
        self.logo_calls.append((output_dir, list(provider_ids)))
        return 0

    def cleanup(self):
        self.cleaned = True


@pytest.fixture
def make_model():
    return build_model


@pytest.fixture
def make_provider():
    return build_provider


@pytest.fixture
def acme_catalog():
    """Catalog with provider acme serving models a and b (v1)."""
    provider = build_provider("acme", [build_model("a", "A v1"), build_model("b", "B v1")])
    catalog = Catalog(providers=[provider])
    for model in provider.models.values():
        catalog.models.set(model)
    return catalog


@pytest.fixture
def fake_fetcher_cls():
    return FakeFetcher


@pytest.fixture
def fake_enrichment_cls():
    return FakeEnrichment


@pytest.fixture
def api_error():
    return ProviderAPIError("connection refused", context={"provider": "acme"})
