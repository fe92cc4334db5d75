"""starmap CLI entrypoint."""

import argparse
import sys
from typing import Optional, Sequence

from starmap.cli.commands.catalog import cmd_fetch, cmd_models, cmd_providers
from starmap.cli.commands.sync import cmd_sync
from starmap.core.utils.logging import configure_logging


def cmd_version(args: argparse.Namespace) -> int:
    del args

    import starmap

    print(f"starmap {starmap.__version__}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="starmap", description="starmap - keep an AI model catalog in sync with provider APIs"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    # Options shared by commands that read configuration or a catalog
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", help="Path to config file (default: ~/.starmap/config.yaml)")
    common.add_argument("--input", help="Catalog directory to use instead of the embedded one")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Sync command
    sync_parser = subparsers.add_parser(
        "sync",
        aliases=["update"],
        parents=[common],
        help="Fetch provider models and update the catalog",
    )
    sync_parser.add_argument("--provider", "-p", help="Sync a single provider")
    sync_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would change without writing"
    )
    sync_parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Fresh sync: delete existing model files and rewrite everything",
    )
    sync_parser.add_argument("--yes", "-y", action="store_true", help="Apply without prompting")
    sync_parser.add_argument("--output", "-o", help="Output directory for provider model files")
    sync_parser.add_argument("--timeout", type=float, help="Seconds allowed per provider fetch")
    sync_parser.add_argument("--concurrency", type=int, help="Maximum concurrent fetches")
    sync_parser.add_argument(
        "--cleanup", action="store_true", help="Remove the models.dev working copy afterwards"
    )
    sync_parser.add_argument(
        "--no-enrich", action="store_true", help="Skip models.dev enrichment"
    )
    sync_parser.set_defaults(func=cmd_sync)

    # Providers command
    providers_parser = subparsers.add_parser(
        "providers", parents=[common], help="List catalog providers"
    )
    providers_parser.add_argument("--json", action="store_true", help="Output JSON")
    providers_parser.set_defaults(func=cmd_providers)

    # Models command
    models_parser = subparsers.add_parser("models", parents=[common], help="List catalog models")
    models_parser.add_argument("--provider", "-p", help="Filter by provider")
    models_parser.set_defaults(func=cmd_models)

    # Fetch command
    fetch_parser = subparsers.add_parser(
        "fetch", parents=[common], help="List a provider's live models without writing"
    )
    fetch_parser.add_argument("provider", help="Provider ID")
    fetch_parser.add_argument("--timeout", type=float, help="Seconds allowed for the fetch")
    fetch_parser.set_defaults(func=cmd_fetch)

    # Version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    parser.set_defaults(func=None)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        int: Exit code for the shell
            - 0: Success
            - 1: General error
            - 2: Incorrect usage (shows help)
            - 130: Interrupted by user (Ctrl+C)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.func is None:
        parser.print_help()
        return 2

    configure_logging(verbose=args.verbose)

    try:
        ret = args.func(args)
        return int(ret)
    except KeyboardInterrupt:
        print("\nOperation cancelled.")
        return 130
    except SystemExit as e:
        return int(e.code) if isinstance(e.code, int) else 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
