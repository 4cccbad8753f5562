# SPDX-License-Identifier: MIT
"""Top level migration run across all studies."""

from __future__ import annotations

import httpx
import logfire

from clients.auth import AuthClient
from clients.record_store import RecordStoreClient
from core.result import Failure
from core.task_queue import limit_concurrency
from migration.transform import TransformChain
from migration.transforms.consensus_sequence import build_migration_chain
from observability import telemetry
from runtime.settings import Settings
from utils.array_utils import map_async

from .migrate_study import MigrationSummary, migrate_and_update_study
from .studies import get_available_studies


async def run_migration(
    settings: Settings,
    *,
    http_client: httpx.AsyncClient | None = None,
    chain: TransformChain | None = None,
) -> list[MigrationSummary]:
    """Migrate every selected study, one study at a time.

    Args:
        settings: Validated application settings.
        http_client: Optional pre-configured HTTP client. If ``None`` a client
            is created for the duration of the run.
        chain: Transform chain override; defaults to the configured chain.

    Returns:
        One summary per study in processing order.

    Raises:
        RuntimeError: If credentials are missing, the chain cannot be built or
            the study list cannot be retrieved.
    """
    if not settings.has_credentials:
        raise RuntimeError(
            "Cannot run migration script, no Application Credentials are available."
        )
    chain = chain or build_migration_chain(settings.migration_chain)
    logfire.info(
        "Beginning migration",
        song=settings.song_host,
        ego=settings.ego_host,
        target_version=chain.end.version,
    )
    if http_client is not None:
        return await _run(settings, http_client, chain)
    async with httpx.AsyncClient() as client:
        return await _run(settings, client, chain)


async def _run(
    settings: Settings, http_client: httpx.AsyncClient, chain: TransformChain
) -> list[MigrationSummary]:
    auth = AuthClient(
        settings.ego_host,
        settings.ego_client_id,
        settings.ego_client_secret.get_secret_value(),
        http_client=http_client,
        timeout=settings.ego_timeout,
    )
    store = RecordStoreClient(
        settings.song_host,
        http_client=http_client,
        auth=auth,
        name=settings.song_name,
        page_timeout=settings.song_page_timeout,
        update_timeout=settings.song_update_timeout,
    )

    async def migrate(study: str) -> MigrationSummary:
        return await migrate_and_update_study(
            study,
            client=store,
            chain=chain,
            page_size=settings.song_page_size,
            max_concurrent=settings.song_max_concurrent,
            states=settings.analysis_states,
        )

    studies = await get_available_studies(store, settings.studies)
    if isinstance(studies, Failure):
        raise RuntimeError(f"Unable to retrieve studies: {studies.message}")

    one_study_at_a_time = limit_concurrency(1, migrate, name="studies")
    summaries = await map_async(one_study_at_a_time)(studies.data)

    for summary in summaries:
        telemetry.record_study(
            summary.study, completed=summary.completed, **summary.counts.model_dump()
        )
        logfire.info("Study summary", summary=summary.model_dump())
    incomplete = [summary.study for summary in summaries if not summary.completed]
    if incomplete:
        logfire.warning(
            "Some studies did not complete, the migration may need to be repeated",
            studies=incomplete,
        )
    logfire.info("Migration pipeline completed without error.")
    return summaries


__all__ = ["run_migration"]
