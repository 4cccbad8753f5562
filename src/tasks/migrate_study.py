# SPDX-License-Identifier: MIT
"""Migrate every analysis of one study and write the results back.

Analyses are fetched one page at a time. Each page is filtered, migrated
through the transform chain and sent back to the record store with at most
``max_concurrent`` updates in flight. All updates of a page finish before the
next page is requested.
"""

from __future__ import annotations

import math
from typing import Any, Protocol, Sequence

import logfire
from pydantic import BaseModel, Field

from core.pipe import async_pipe, pipe
from core.result import Failure, Result, failure, with_result_async
from core.task_queue import limit_concurrency
from clients.models import (
    ANALYSIS_STATES,
    AnalysisFilters,
    AnalysisState,
    PagedAnalysisResponse,
    Pagination,
)
from migration.transform import Record, TransformChain, Version
from utils.array_utils import map_async
from utils.error_handler import ErrorHandler, LoggingErrorHandler


class StudyRecordSource(Protocol):
    """Record store operations needed to migrate a study."""

    async def get_analyses_page(
        self, filters: AnalysisFilters, page: Pagination | None = None
    ) -> Result[PagedAnalysisResponse]: ...

    async def update_analysis(self, record: Record) -> Result[Record]: ...


class MigrationCounts(BaseModel):
    """Running tallies for one study."""

    successful: int = 0
    error: int = 0
    skipped: int = 0
    processed: int = 0
    total: int = 0


class MigrationSummary(BaseModel):
    """Outcome of migrating one study."""

    study: str
    completed: bool = False
    counts: MigrationCounts = Field(default_factory=MigrationCounts)


def migrate_analyses(chain: TransformChain, records: Sequence[Record]) -> list[Result[Record]]:
    """Migrate each record from its own version to the end of ``chain``."""
    results: list[Result[Record]] = []
    for record in records:
        version = Version.of(record)
        if version is None:
            results.append(
                failure(
                    "Analysis does not declare a usable analysisType",
                    record.get("studyId"),
                    record.get("analysisId"),
                )
            )
            continue
        sliced = chain.from_version(version)
        migrated = sliced.data.apply(record) if not isinstance(sliced, Failure) else sliced
        if isinstance(migrated, Failure):
            migrated = failure(
                "Unable to migrate analysis",
                {
                    "study": record.get("studyId"),
                    "analysis": record.get("analysisId"),
                    "version": version,
                },
                migrated,
            )
        results.append(migrated)
    return results


def _needs_migration(chain: TransformChain, record: Record) -> bool:
    version = Version.of(record)
    return version is None or version.version < chain.end.version


async def migrate_and_update_study(
    study: str,
    *,
    client: StudyRecordSource,
    chain: TransformChain,
    page_size: int = 100,
    max_concurrent: int = 5,
    states: Sequence[AnalysisState] = ANALYSIS_STATES,
    error_handler: ErrorHandler | None = None,
) -> MigrationSummary:
    """Migrate and update every analysis in ``study``.

    Args:
        study: Study identifier.
        client: Record store used for reading pages and writing updates.
        chain: Transform chain; records already at or past its end version
            are skipped.
        page_size: Number of analyses requested per page.
        max_concurrent: Maximum number of update requests in flight.
        states: Analysis states to include.
        error_handler: Receives every per-record and page failure.

    Returns:
        Summary with ``completed`` set only when every page was processed.
    """
    handler = error_handler or LoggingErrorHandler()
    filters = AnalysisFilters(study=study, states=tuple(states))
    summary = MigrationSummary(study=study)
    counts = summary.counts
    # Start above zero so the first page is always requested.
    total_analyses = 1
    next_offset = 0

    def skip_current(records: list[Record]) -> list[Record]:
        pending = [record for record in records if _needs_migration(chain, record)]
        skipped = len(records) - len(pending)
        counts.skipped += skipped
        counts.processed += skipped
        return pending

    apply_migrations = (
        pipe(lambda page: [analysis.to_record() for analysis in page.analyses])
        .into(skip_current)
        .into(lambda records: migrate_analyses(chain, records))
        .build()
    )

    async def fetch_next_page(_: Any) -> Result[PagedAnalysisResponse]:
        nonlocal total_analyses, next_offset
        result = await client.get_analyses_page(
            filters, Pagination(limit=page_size, offset=next_offset)
        )
        if isinstance(result, Failure):
            return result
        if next_offset == 0:
            counts.total = result.data.total_analyses
            logfire.info(
                "Beginning fetching analyses by pages",
                study=study,
                total_analyses=result.data.total_analyses,
                expected_pages=math.ceil(result.data.total_analyses / page_size),
            )
        total_analyses = result.data.total_analyses
        next_offset += page_size
        return result

    send_update = limit_concurrency(
        max_concurrent,
        with_result_async(client.update_analysis),
        name="record_store_updates",
    )

    process_page = (
        async_pipe(fetch_next_page)
        .into(apply_migrations)
        .await_(map_async(send_update))
        .build()
    )

    with logfire.span("migrate study {study}", study=study):
        while next_offset < total_analyses:
            page_result = await process_page(None)
            if isinstance(page_result, Failure):
                handler.handle("Stopping study migration", page_result, study=study)
                return summary
            for outcome in page_result.data:
                counts.processed += 1
                if isinstance(outcome, Failure):
                    counts.error += 1
                    handler.handle("Analysis migration failed", outcome, study=study)
                else:
                    counts.successful += 1
            logfire.info("Progress", study=study, counts=counts.model_dump())

    summary.completed = True
    return summary


__all__ = [
    "MigrationCounts",
    "MigrationSummary",
    "StudyRecordSource",
    "migrate_analyses",
    "migrate_and_update_study",
]
