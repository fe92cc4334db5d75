"""`starmap sync` (alias `update`)."""

import argparse
from typing import Callable

from prettytable import PrettyTable

from starmap.cli.commands.catalog import load_catalog, load_settings, make_fetcher
from starmap.core.config import StarmapConfig
from starmap.modelsdev import ModelsDevSource
from starmap.sync import SyncOptions, SyncResult, Syncer, describe_changeset
from starmap.sync.options import DEFAULT_OUTPUT_DIR

InputFn = Callable[[str], str]


def confirm(prompt: str, input_fn: InputFn = input) -> bool:
    """Ask a yes/no question; only "y" or "yes" count as yes."""
    try:
        answer = input_fn(prompt)
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def build_options(args: argparse.Namespace, config: StarmapConfig) -> SyncOptions:
    """Combine command-line flags with the loaded configuration. Flags win."""
    return SyncOptions(
        provider=args.provider,
        dry_run=args.dry_run,
        fresh=args.force,
        auto_approve=args.yes,
        output_dir=args.output or config.sync.output_dir or DEFAULT_OUTPUT_DIR,
        timeout=args.timeout if args.timeout is not None else config.sync.timeout_seconds,
        concurrency=(
            args.concurrency if args.concurrency is not None else config.sync.concurrency
        ),
        clean_modelsdev_after=args.cleanup or config.sync.cleanup_modelsdev,
        confirm_fresh=args.force and args.yes,
        enrich=not args.no_enrich and config.modelsdev.enabled,
    )


def render_results(result: SyncResult) -> str:
    table = PrettyTable()
    table.field_names = [
        "Provider",
        "Fetched",
        "Existing",
        "Enhanced",
        "Added",
        "Updated",
        "Removed",
        "Time",
        "Status",
    ]
    table.align = "l"
    for provider_id in sorted(result.provider_results):
        r = result.provider_results[provider_id]
        table.add_row(
            [
                provider_id,
                r.api_models_count,
                r.existing_models_count,
                r.enhanced_count,
                r.added_count,
                r.updated_count,
                r.removed_count,
                f"{r.fetch_seconds:.1f}s",
                r.status,
            ]
        )
    return table.get_string()


def _print_preview(result: SyncResult) -> None:
    print(render_results(result))
    for provider_id, error in result.errors.items():
        print(f"  {provider_id}: {error}")
    for provider_id, reason in result.skipped.items():
        print(f"  {provider_id}: skipped ({reason})")
    if result.enrichment_error is not None:
        print(f"models.dev enrichment skipped: {result.enrichment_error}")
    for changeset in result.changesets():
        print()
        print(describe_changeset(changeset))
    print()
    print(result.summary())


def cmd_sync(args: argparse.Namespace, input_fn: InputFn = input) -> int:
    config = load_settings(args)
    options = build_options(args, config)
    options.validate()

    if options.dry_run:
        print("Dry run: no files will be written.")
    if options.fresh and not options.dry_run:
        print(f"WARNING: fresh sync replaces every model file under {options.output_dir}.")
        if not args.yes:
            if not confirm("Continue with force update? (y/N) ", input_fn):
                print("Cancelled.")
                return 0
            options.confirm_fresh = True

    catalog = load_catalog(args.input)
    enrichment = ModelsDevSource(config.modelsdev) if options.enrich else None
    syncer = Syncer(catalog, make_fetcher(config), enrichment)

    result = syncer.sync(options)
    _print_preview(result)

    if result.provider_results and len(result.errors) == len(result.provider_results):
        print("All providers failed.")
        return 1
    if options.dry_run:
        return 0
    if not result.has_changes():
        print("Catalog is up to date.")
        return 0

    if not result.applied:
        if not confirm("Apply these changes? (y/N) ", input_fn):
            syncer.finish()
            print("Changes not applied.")
            return 0
        syncer.apply(result, confirm_fresh=options.confirm_fresh)

    print(f"Applied {result.total_changes} changes to {result.output_dir}")
    return 0


__all__ = ["build_options", "cmd_sync", "confirm", "render_results"]
