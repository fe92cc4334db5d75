"""`starmap providers`, `starmap models` and `starmap fetch`."""

import argparse
import json
from typing import Optional

from prettytable import PrettyTable

from starmap._internal.concurrency import FetchContext
from starmap.catalogs.catalog import Catalog
from starmap.catalogs.types import Model
from starmap.core.config import StarmapConfig, load_config
from starmap.core.utils.logging import set_component_level
from starmap.providers import ProviderFetcher
from starmap.sync.changeset import format_tokens


def load_catalog(path: Optional[str]) -> Catalog:
    """Catalog from a directory, or the embedded dataset when no path is given."""
    return Catalog.from_directory(path) if path else Catalog.embedded()


def load_settings(args: argparse.Namespace) -> StarmapConfig:
    """Load configuration and apply its log level unless --verbose was given."""
    config = load_config(args.config)
    if not getattr(args, "verbose", False):
        set_component_level("starmap", config.logging.level)
    return config


def make_fetcher(config: StarmapConfig) -> ProviderFetcher:
    api_keys = {
        provider_id: settings.api_key
        for provider_id, settings in config.providers.items()
        if settings.api_key
    }
    return ProviderFetcher(api_keys=api_keys)


def _price(model: Model, kind: str) -> str:
    tokens = model.pricing.tokens if model.pricing else None
    price = getattr(tokens, kind, None) if tokens else None
    if price is None or price.per_1m is None:
        return "-"
    return f"${price.per_1m:.2f}"


def model_table(with_provider: bool = False) -> PrettyTable:
    table = PrettyTable()
    columns = ["Model ID", "Name", "Context", "Output", "Input $/1M", "Output $/1M"]
    table.field_names = (["Provider"] + columns) if with_provider else columns
    table.align = "l"
    return table


def _model_row(model: Model) -> list[str]:
    limits = model.limits
    return [
        model.id,
        model.display_name,
        format_tokens(limits.context_window) if limits else "-",
        format_tokens(limits.output_tokens) if limits else "-",
        _price(model, "input"),
        _price(model, "output"),
    ]


def cmd_providers(args: argparse.Namespace) -> int:
    config = load_settings(args)
    catalog = load_catalog(args.input)
    fetcher = make_fetcher(config)

    rows = []
    for provider in catalog.providers.list():
        prepared = fetcher.prepare(provider)
        if not prepared.is_api_key_required():
            credentials = "not required"
        elif prepared.has_api_key():
            credentials = "set"
        else:
            credentials = "missing"
        rows.append(
            {
                "id": provider.id,
                "name": provider.name,
                "models": len(provider.models),
                "client": fetcher.has_client(provider.id),
                "api_key": provider.api_key.name if provider.api_key else None,
                "credentials": credentials,
            }
        )

    if args.json:
        print(json.dumps(rows, indent=2))
        return 0

    table = PrettyTable()
    table.field_names = ["Provider", "Name", "Models", "Client", "API Key", "Credentials"]
    table.align = "l"
    for row in rows:
        table.add_row(
            [
                row["id"],
                row["name"],
                row["models"],
                "yes" if row["client"] else "no",
                row["api_key"] or "-",
                row["credentials"],
            ]
        )
    print(table)
    return 0


def cmd_models(args: argparse.Namespace) -> int:
    catalog = load_catalog(args.input)

    if args.provider:
        provider, found = catalog.providers.get(args.provider)
        if not found:
            print(f"Provider '{args.provider}' not found in catalog")
            return 1
        providers = [provider]
    else:
        providers = catalog.providers.list()

    table = model_table(with_provider=not args.provider)
    count = 0
    for provider in providers:
        for model_id in sorted(provider.models):
            row = _model_row(provider.models[model_id])
            table.add_row(row if args.provider else [provider.id] + row)
            count += 1

    print(table)
    print(f"{count} models")
    return 0


def cmd_fetch(args: argparse.Namespace) -> int:
    config = load_settings(args)
    catalog = load_catalog(args.input)
    provider, found = catalog.providers.get(args.provider)
    if not found:
        print(f"Provider '{args.provider}' not found in catalog")
        return 1

    fetcher = make_fetcher(config)
    timeout = args.timeout or config.sync.timeout_seconds
    models = fetcher.fetch_models(FetchContext.with_timeout(timeout), provider)

    table = model_table()
    for model in sorted(models, key=lambda m: m.id):
        table.add_row(_model_row(model))
    print(table)
    print(f"{len(models)} models from {provider.id}")
    return 0


__all__ = [
    "cmd_fetch",
    "cmd_models",
    "cmd_providers",
    "load_catalog",
    "load_settings",
    "make_fetcher",
]
