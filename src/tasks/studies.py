# SPDX-License-Identifier: MIT
"""Discover which studies to migrate."""

from __future__ import annotations

from typing import Protocol, Sequence

import logfire

from core.pipe import async_pipe
from core.result import Result
from utils.pipe_utils import pipe_log


class StudyLister(Protocol):
    async def list_studies(self) -> Result[list[str]]: ...


async def get_available_studies(
    client: StudyLister, allow_list: Sequence[str] | None = None
) -> Result[list[str]]:
    """Return every study in the record store, narrowed to ``allow_list`` if set.

    Allow-listed studies the record store does not know about are logged and
    ignored.
    """

    async def _list(_: object) -> Result[list[str]]:
        return await client.list_studies()

    def _narrow(studies: list[str]) -> list[str]:
        if not allow_list:
            return studies
        unknown = sorted(set(allow_list) - set(studies))
        if unknown:
            logfire.warning("Configured studies not found in record store", studies=unknown)
        return [study for study in studies if study in allow_list]

    return await (
        async_pipe(_list)
        .into(pipe_log("debug", "Available studies"))
        .into(_narrow)
        .into(pipe_log("debug", "Studies to migrate"))
        .run()
    )


__all__ = ["StudyLister", "get_available_studies"]
