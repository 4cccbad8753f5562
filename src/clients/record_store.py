# SPDX-License-Identifier: MIT
"""Client for the record store ("Song") holding analyses."""

from __future__ import annotations

from typing import Any

import httpx
import logfire
from pydantic import TypeAdapter, ValidationError

from core.pipe import async_pipe
from core.result import Failure, Result, failure, success

from .auth import AuthClient
from .http import join_url, json_fetcher, with_timeout
from .models import AnalysisFilters, PagedAnalysisResponse, Pagination, SongErrorResponse

SERVER_MANAGED_FIELDS = frozenset(
    {
        "analysisState",
        "analysisId",
        "studyId",
        "createdAt",
        "updatedAt",
        "firstPublishedAt",
        "publishedAt",
        "analysisStateHistory",
        "files",
        "samples",
    }
)
"""Fields the record store refuses in an update body."""

_STUDY_LIST = TypeAdapter(list[str])


def update_body(record: dict[str, Any]) -> dict[str, Any]:
    """Return ``record`` without the fields owned by the record store."""
    return {key: value for key, value in record.items() if key not in SERVER_MANAGED_FIELDS}


class RecordStoreClient:
    """List studies, page through analyses and submit updated analyses."""

    def __init__(
        self,
        host: str,
        *,
        http_client: httpx.AsyncClient,
        auth: AuthClient | None = None,
        name: str | None = None,
        page_timeout: float = 10.0,
        update_timeout: float = 5.0,
    ) -> None:
        self.host = host
        self.name = name
        self._http = http_client
        self._auth = auth
        self._page_timeout = page_timeout
        self._update_timeout = update_timeout

    async def list_studies(self) -> Result[list[str]]:
        """Return the ids of every study in the record store."""
        logfire.info("Fetching all studies from the record store", store=self.name)
        fetch = (
            async_pipe(json_fetcher(self._http, "GET", join_url(self.host, "studies/all")))
            .into(_STUDY_LIST.validate_python)
            .build()
        )
        return await with_timeout(self._page_timeout, fetch)(None)

    async def get_analyses_page(
        self, filters: AnalysisFilters, page: Pagination | None = None
    ) -> Result[PagedAnalysisResponse]:
        """Return one page of analyses matching ``filters``."""
        page = page or Pagination()
        logfire.info(
            "Fetching analyses from the record store",
            study=filters.study,
            limit=page.limit,
            offset=page.offset,
        )
        url = join_url(self.host, "studies", filters.study, "analysis/paginated")
        fetch = (
            async_pipe(
                json_fetcher(
                    self._http,
                    "GET",
                    url,
                    params={
                        "limit": page.limit,
                        "offset": page.offset,
                        "analysisStates": ",".join(filters.states),
                    },
                )
            )
            .into(PagedAnalysisResponse.model_validate)
            .build()
        )
        return await with_timeout(self._page_timeout, fetch)(None)

    async def update_analysis(self, record: dict[str, Any]) -> Result[dict[str, Any]]:
        """Replace the stored analysis with ``record``.

        Returns:
            The submitted record on success, or a failure carrying the error
            reported by the record store.
        """
        study_id = record.get("studyId")
        analysis_id = record.get("analysisId")
        if self._auth is None:
            logfire.error("Unable to send update request, no application credentials")
            return failure(
                "Unable to send update request, no ego application credentials provided."
            )
        logfire.debug(
            "Sending analysis update request", study=study_id, analysis=analysis_id
        )
        url = join_url(self.host, "studies", str(study_id), "analysis", str(analysis_id))
        sent = await with_timeout(self._update_timeout, self._auth.fetch_with_auth)(
            "PUT", url, json=update_body(record)
        )
        if isinstance(sent, Failure):
            logfire.error(
                "Failed to update analysis in the record store",
                study=study_id,
                analysis=analysis_id,
                errors=list(sent.errors),
            )
            return failure(
                "Failed to update analysis in song", study_id, analysis_id, sent
            )
        response = sent.data
        if response.is_success:
            logfire.debug("Analysis update successful", study=study_id, analysis=analysis_id)
            return success(record)
        return self._rejected(response, study_id, analysis_id)

    def _rejected(
        self, response: httpx.Response, study_id: Any, analysis_id: Any
    ) -> Failure:
        headline = "Error response from Song for Update Analysis request"
        try:
            body = response.json()
        except ValueError as exc:
            logfire.error("Analysis update failed", study=study_id, analysis=analysis_id, error=str(exc))
            return failure(
                headline, study_id, analysis_id, "Unable to parse song response.", exc
            )
        try:
            rejection = SongErrorResponse.model_validate(body)
        except ValidationError as exc:
            logfire.error(
                "Analysis update failed, reason could not be parsed",
                study=study_id,
                analysis=analysis_id,
                status=response.status_code,
            )
            return failure(
                headline,
                study_id,
                analysis_id,
                "Unexpected JSON format in error response",
                exc,
            )
        logfire.error(
            "Analysis update failed",
            study=study_id,
            analysis=analysis_id,
            rejection=rejection.model_dump(by_alias=True),
        )
        return failure(
            headline, study_id, analysis_id, rejection.model_dump(by_alias=True)
        )


__all__ = ["RecordStoreClient", "SERVER_MANAGED_FIELDS", "update_body"]
