"""Tests for the CLI entrypoint."""

from unittest.mock import patch

import starmap
from starmap.cli.commands.sync import cmd_sync
from starmap.cli.main import build_parser, main


def test_no_command_prints_help(capsys):
    assert main([]) == 2
    assert "usage: starmap" in capsys.readouterr().out


def test_version(capsys):
    assert main(["version"]) == 0
    assert capsys.readouterr().out.strip() == f"starmap {starmap.__version__}"


def test_update_is_alias_for_sync():
    args = build_parser().parse_args(["update", "-p", "groq", "--dry-run", "-y", "--timeout", "4"])
    assert args.func is cmd_sync
    assert args.provider == "groq"
    assert args.dry_run and args.yes
    assert args.timeout == 4.0
    assert args.concurrency is None


def test_fetch_requires_provider_argument():
    args = build_parser().parse_args(["fetch", "openai", "--input", "/tmp/catalog"])
    assert args.provider == "openai"
    assert args.input == "/tmp/catalog"


def test_errors_map_to_exit_code_one(capsys):
    with patch("starmap.cli.commands.sync.load_settings", side_effect=RuntimeError("bad config")):
        assert main(["sync"]) == 1
    assert "Error: bad config" in capsys.readouterr().err


def test_keyboard_interrupt(capsys):
    with patch("starmap.cli.commands.sync.load_settings", side_effect=KeyboardInterrupt):
        assert main(["sync"]) == 130
