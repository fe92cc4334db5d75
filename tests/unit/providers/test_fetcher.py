"""Tests for ProviderFetcher."""

import pytest

from starmap._internal.concurrency import FetchContext
from starmap.catalogs.types import Model, Provider, ProviderAPIKey, ProviderEnvVar
from starmap.core.exceptions import (
    FetchCancelledError,
    MissingCredentialsError,
    ProviderAPIError,
    UnsupportedProviderError,
)
from starmap.providers import ProviderFetcher


class _RecordingClient:
    name = "acme"

    def __init__(self, result=None, error=None):
        self.result = result if result is not None else [Model(id="a")]
        self.error = error
        self.seen = []

    def list_models(self, provider, *, timeout=None):
        self.seen.append((provider, timeout))
        if self.error is not None:
            raise self.error
        return self.result


class _StatusError(Exception):
    status_code = 429


def _provider(**kwargs):
    return Provider(id="acme", api_key=ProviderAPIKey(name="ACME_API_KEY"), **kwargs)


def test_fetch_loads_credentials_on_a_copy():
    client = _RecordingClient()
    fetcher = ProviderFetcher({"acme": client}, environ={"ACME_API_KEY": "secret"})
    provider = _provider()
    provider.models["old"] = Model(id="old")

    models = fetcher.fetch_models(FetchContext.with_timeout(20), provider)

    assert [m.id for m in models] == ["a"]
    seen_provider, timeout = client.seen[0]
    assert seen_provider is not provider
    assert seen_provider.api_key_value == "secret"
    assert seen_provider.models == {}
    assert 0 < timeout <= 20
    assert provider.api_key_value is None
    assert "old" in provider.models


def test_configured_key_used_when_env_unset():
    client = _RecordingClient()
    fetcher = ProviderFetcher({"acme": client}, environ={}, api_keys={"acme": "from-config"})
    fetcher.fetch_models(FetchContext.background(), _provider())
    assert client.seen[0][0].api_key_value == "from-config"
    assert client.seen[0][1] is None


def test_unsupported_provider():
    fetcher = ProviderFetcher({}, environ={})
    assert not fetcher.has_client("acme")
    with pytest.raises(UnsupportedProviderError):
        fetcher.fetch_models(FetchContext.background(), _provider())


def test_missing_api_key():
    client = _RecordingClient()
    fetcher = ProviderFetcher({"acme": client}, environ={})
    with pytest.raises(MissingCredentialsError) as exc_info:
        fetcher.fetch_models(FetchContext.background(), _provider())
    assert "ACME_API_KEY" in str(exc_info.value)
    assert client.seen == []


def test_missing_required_env_var():
    provider = Provider(id="acme", env_vars=[ProviderEnvVar(name="ACME_PROJECT", required=True)])
    fetcher = ProviderFetcher({"acme": _RecordingClient()}, environ={})
    with pytest.raises(MissingCredentialsError) as exc_info:
        fetcher.fetch_models(FetchContext.background(), provider)
    assert exc_info.value.context["env_vars"] == ["ACME_PROJECT"]


def test_keyless_provider_needs_no_credentials():
    fetcher = ProviderFetcher({"acme": _RecordingClient()}, environ={})
    assert fetcher.fetch_models(FetchContext.background(), Provider(id="acme"))


def test_cancelled_context_skips_the_call():
    client = _RecordingClient()
    fetcher = ProviderFetcher({"acme": client}, environ={"ACME_API_KEY": "k"})
    ctx = FetchContext.background()
    ctx.cancel()
    with pytest.raises(FetchCancelledError):
        fetcher.fetch_models(ctx, _provider())
    assert client.seen == []


def test_sdk_errors_are_wrapped():
    client = _RecordingClient(error=_StatusError("rate limited"))
    fetcher = ProviderFetcher({"acme": client}, environ={"ACME_API_KEY": "k"})
    with pytest.raises(ProviderAPIError) as exc_info:
        fetcher.fetch_models(FetchContext.background(), _provider())
    assert exc_info.value.context == {
        "provider": "acme",
        "error_type": "_StatusError",
        "status_code": 429,
    }
    assert isinstance(exc_info.value.__cause__, _StatusError)


def test_defaults_to_registered_clients():
    fetcher = ProviderFetcher(environ={})
    assert {"openai", "anthropic", "google-ai-studio", "groq"} <= set(fetcher.client_ids())
