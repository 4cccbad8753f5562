# SPDX-License-Identifier: MIT
"""Tests for the command-line entry point."""

from __future__ import annotations

import argparse

import pytest

from cli import main as cli_main
from runtime.settings import Settings


@pytest.fixture()
def quiet_cli(monkeypatch):
    """Skip Logfire configuration and capture the settings passed to commands."""
    seen: dict[str, object] = {}
    monkeypatch.setattr(cli_main, "init_logfire", lambda *a, **k: None)
    monkeypatch.setattr(
        cli_main,
        "load_settings",
        lambda path=None: Settings(
            song_host="https://song.test",
            ego_host="https://ego.test",
            ego_client_id="id",
            ego_client_secret="secret",
        ),
    )
    return seen


def test_no_command_prints_help_and_fails(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        cli_main.main([])
    assert exc.value.code == 1
    assert "usage" in capsys.readouterr().out


def test_migrate_success_exits_normally(quiet_cli, monkeypatch) -> None:
    async def fake_run(settings: Settings):
        quiet_cli["settings"] = settings
        return []

    monkeypatch.setattr(cli_main, "run_migration", fake_run)

    cli_main.main(
        ["migrate", "--chain", "dev", "--page-size", "7", "--study", "S1", "--study", "S2"]
    )

    settings = quiet_cli["settings"]
    assert settings.migration_chain == "dev"
    assert settings.song_page_size == 7
    assert settings.studies == ["S1", "S2"]


def test_uncaught_error_exits_with_status_one(quiet_cli, monkeypatch) -> None:
    async def broken_run(settings: Settings):
        raise RuntimeError("Unable to initialize migration chain")

    monkeypatch.setattr(cli_main, "run_migration", broken_run)

    with pytest.raises(SystemExit) as exc:
        cli_main.main(["migrate"])
    assert exc.value.code == 1


def test_invalid_configuration_exits_with_status_one(monkeypatch) -> None:
    def invalid(path=None):
        raise RuntimeError("Invalid configuration: song_host: Field required")

    monkeypatch.setattr(cli_main, "load_settings", invalid)
    with pytest.raises(SystemExit) as exc:
        cli_main.main(["migrate"])
    assert exc.value.code == 1


def test_chain_command_lists_steps(quiet_cli, capsys) -> None:
    cli_main.main(["chain", "--chain", "dev"])
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "consensus_sequence@3 -> consensus_sequence@4"
    assert "consensus_sequence@13 -> consensus_sequence@14" in lines


@pytest.mark.parametrize(
    "verbose, quiet, expected",
    [(0, 0, "info"), (1, 0, "debug"), (0, 3, "error"), (5, 0, "trace"), (0, 9, "fatal")],
)
def test_min_log_level(verbose: int, quiet: int, expected: str) -> None:
    args = argparse.Namespace(verbose=verbose, quiet=quiet)
    settings = Settings(song_host="https://s", ego_host="https://e", log_level="INFO")
    assert cli_main._min_log_level(args, settings) == expected


def test_version_flag(capsys) -> None:
    cli_main.main(["--version"])
    assert capsys.readouterr().out.startswith("analysis-schema-migrator ")
