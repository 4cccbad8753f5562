# SPDX-License-Identifier: MIT
"""Command-line interface for migrating analyses to the latest schema."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Callable, Coroutine, Sequence

import httpx
import logfire

from clients.record_store import RecordStoreClient
from core.result import Failure
from migration.transforms.consensus_sequence import build_migration_chain
from observability import telemetry
from observability.monitoring import init_logfire
from runtime.settings import Settings, load_settings
from tasks.run import run_migration
from tasks.studies import get_available_studies

LOG_LEVELS = ["fatal", "error", "warn", "notice", "info", "debug", "trace"]

_STDLIB_LEVELS = {
    "fatal": logging.CRITICAL,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "notice": logging.INFO,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}

# Module logger for CLI diagnostics mirroring
logger = logging.getLogger(__name__)


def _print_version() -> None:
    """Print the installed package version."""
    try:
        pkg_version = version("analysis-schema-migrator")
    except PackageNotFoundError:  # pragma: no cover - fallback for editable installs
        pkg_version = "unknown"
    print(f"analysis-schema-migrator {pkg_version}")


def _min_log_level(args: argparse.Namespace, settings: Settings) -> str:
    """Return the Logfire level from settings shifted by ``-v``/``-q`` flags."""
    configured = settings.log_level.lower()
    configured = "warn" if configured == "warning" else configured
    base = LOG_LEVELS.index(configured) if configured in LOG_LEVELS else 4
    index = base + args.verbose - args.quiet
    return LOG_LEVELS[max(0, min(len(LOG_LEVELS) - 1, index))]


def _configure_logging(args: argparse.Namespace, settings: Settings) -> None:
    """Configure Logfire and mirror the level to the standard library root."""
    level = _min_log_level(args, settings)
    logging.getLogger().setLevel(_STDLIB_LEVELS[level])
    init_logfire(settings.logfire_token, level)  # type: ignore[arg-type]


def _apply_args_to_settings(args: argparse.Namespace, settings: Settings) -> None:
    """Override settings fields based on CLI arguments."""
    arg_mapping = {
        "chain": "migration_chain",
        "page_size": "song_page_size",
        "max_concurrent": "song_max_concurrent",
        "studies": "studies",
    }
    for arg_name, attr in arg_mapping.items():
        value = getattr(args, arg_name, None)
        if value is not None:  # branch: override settings when flag provided
            setattr(settings, attr, value)


async def _cmd_migrate(args: argparse.Namespace, settings: Settings) -> None:
    """Migrate every selected study and record the outcome."""
    await run_migration(settings)


async def _cmd_list_studies(args: argparse.Namespace, settings: Settings) -> None:
    """Print the studies a migration run would process."""
    async with httpx.AsyncClient() as client:
        store = RecordStoreClient(
            settings.song_host,
            http_client=client,
            name=settings.song_name,
            page_timeout=settings.song_page_timeout,
        )
        studies = await get_available_studies(store, settings.studies)
    if isinstance(studies, Failure):
        raise RuntimeError(f"Unable to retrieve studies: {studies.message}")
    for study in studies.data:
        print(study)


async def _cmd_chain(args: argparse.Namespace, settings: Settings) -> None:
    """Print the steps of the configured migration chain."""
    chain = build_migration_chain(settings.migration_chain)
    for transform in chain:
        print(f"{transform.start} -> {transform.end}")


def _add_common_args(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Add CLI options shared across subcommands."""
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file (default config/app.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (repeatable)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="count",
        default=0,
        help="Decrease logging verbosity (repeatable)",
    )
    parser.add_argument(
        "--chain",
        choices=["prod", "dev"],
        default=None,
        help="Migration chain to run. Overrides SM_MIGRATION_CHAIN.",
    )
    parser.add_argument(
        "--study",
        dest="studies",
        action="append",
        default=None,
        help="Only migrate this study (repeatable)",
    )
    return parser


def _build_parser() -> argparse.ArgumentParser:
    """Return the top level argument parser."""
    parser = argparse.ArgumentParser(
        prog="schema-migrator",
        description="Migrate analyses in the record store to the latest schema version",
    )
    parser.add_argument(
        "--version", action="store_true", help="Print the package version and exit"
    )
    subparsers = parser.add_subparsers(dest="command")

    migrate = _add_common_args(
        subparsers.add_parser("migrate", help="Migrate and update all studies")
    )
    migrate.add_argument(
        "--page-size",
        type=int,
        default=None,
        help="Analyses requested per page. Overrides SM_SONG_PAGE_SIZE.",
    )
    migrate.add_argument(
        "--max-concurrent",
        type=int,
        default=None,
        help="Maximum update requests in flight. Overrides SM_SONG_MAX_CONCURRENT.",
    )
    migrate.set_defaults(func=_cmd_migrate)

    studies = _add_common_args(
        subparsers.add_parser("list-studies", help="List the studies to migrate")
    )
    studies.set_defaults(func=_cmd_list_studies)

    chain = _add_common_args(
        subparsers.add_parser("chain", help="Show the migration chain steps")
    )
    chain.set_defaults(func=_cmd_chain)
    return parser


def _run_async_with_signals(coro: Coroutine[Any, Any, Any]) -> Any:
    """Execute ``coro`` and cancel on SIGINT or SIGTERM.

    Raises:
        asyncio.CancelledError: Propagated when a termination signal is received.
    """

    async def _runner() -> Any:
        loop = asyncio.get_running_loop()
        task = asyncio.create_task(coro)
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, task.cancel)
        try:
            return await task
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)

    return asyncio.run(_runner())


def _execute_subcommand(args: argparse.Namespace, settings: Settings) -> None:
    """Initialise logging and dispatch to the chosen subcommand.

    Raises:
        SystemExit: With status 1 when the subcommand fails.
    """
    _configure_logging(args, settings)
    telemetry.reset()
    func: Callable[[argparse.Namespace, Settings], Coroutine[Any, Any, None]] = args.func
    try:
        _run_async_with_signals(func(args, settings))
    except (Exception, asyncio.CancelledError) as exc:
        logfire.exception("Uncaught error during pipeline execution", error=str(exc))
        raise SystemExit(1) from exc
    finally:
        telemetry.print_summary()
        logfire.info("All done! Exiting!")
        logfire.force_flush()


def main(argv: Sequence[str] | None = None) -> None:
    """Parse arguments and dispatch to the requested subcommand."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.version:
        _print_version()
        return
    if args.command is None:
        parser.print_help()
        raise SystemExit(1)
    try:
        settings = load_settings(args.config)
    except (RuntimeError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        print(exc)
        raise SystemExit(1) from exc
    _apply_args_to_settings(args, settings)
    _execute_subcommand(args, settings)


if __name__ == "__main__":
    # Allow module to be executed as a standalone script
    main()
