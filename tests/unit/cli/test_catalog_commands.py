"""Tests for the providers, models and fetch commands."""

import argparse
import json
from unittest.mock import patch

import pytest

from starmap.catalogs.catalog import Catalog
from starmap.cli.commands.catalog import cmd_fetch, cmd_models, cmd_providers
from starmap.core.config import StarmapConfig
from starmap.providers import ProviderFetcher

_MODULE = "starmap.cli.commands.catalog"


@pytest.fixture
def catalog(make_model, make_provider):
    return Catalog(
        providers=[
            make_provider("acme", [make_model("a", "A v1", context=128000, input_price=2.5)]),
            make_provider("zeta", [make_model("z")], api_key_env="ZETA_API_KEY"),
        ]
    )


@pytest.fixture
def patched(catalog):
    fetcher = ProviderFetcher({"acme": object()}, environ={"ZETA_API_KEY": "k"})
    with (
        patch(f"{_MODULE}.load_settings", return_value=StarmapConfig()),
        patch(f"{_MODULE}.load_catalog", return_value=catalog),
        patch(f"{_MODULE}.make_fetcher", return_value=fetcher),
    ):
        yield fetcher


def test_providers_json(patched, capsys):
    assert cmd_providers(argparse.Namespace(json=True, input=None)) == 0
    rows = json.loads(capsys.readouterr().out)
    assert rows == [
        {
            "id": "acme",
            "name": "Acme",
            "models": 1,
            "client": True,
            "api_key": None,
            "credentials": "not required",
        },
        {
            "id": "zeta",
            "name": "Zeta",
            "models": 1,
            "client": False,
            "api_key": "ZETA_API_KEY",
            "credentials": "set",
        },
    ]


def test_providers_table(patched, capsys):
    assert cmd_providers(argparse.Namespace(json=False, input=None)) == 0
    out = capsys.readouterr().out
    assert "Credentials" in out
    assert "ZETA_API_KEY" in out


def test_models_all_providers(patched, capsys):
    assert cmd_models(argparse.Namespace(provider=None, input=None)) == 0
    out = capsys.readouterr().out
    assert "Provider" in out
    assert "128.0K" in out
    assert "$2.50" in out
    assert "2 models" in out


def test_models_unknown_provider(patched, capsys):
    assert cmd_models(argparse.Namespace(provider="nope", input=None)) == 1
    assert "Provider 'nope' not found in catalog" in capsys.readouterr().out


def test_fetch_lists_live_models(patched, make_model, capsys):
    seen = {}

    def fake_fetch(ctx, provider):
        seen["remaining"] = ctx.remaining()
        return [make_model("b"), make_model("a")]

    with patch.object(patched, "fetch_models", side_effect=fake_fetch):
        code = cmd_fetch(argparse.Namespace(provider="acme", input=None, timeout=7.0))

    out = capsys.readouterr().out
    assert code == 0
    assert 0 < seen["remaining"] <= 7.0
    assert out.index("| a ") < out.index("| b ")
    assert "2 models from acme" in out


def test_fetch_unknown_provider(patched, capsys):
    assert cmd_fetch(argparse.Namespace(provider="nope", input=None, timeout=None)) == 1
