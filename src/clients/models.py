# SPDX-License-Identifier: MIT
"""Wire models for the record store and auth service."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

AnalysisState = Literal["PUBLISHED", "UNPUBLISHED", "SUPPRESSED"]

ANALYSIS_STATES: tuple[AnalysisState, ...] = ("PUBLISHED", "UNPUBLISHED", "SUPPRESSED")


class AnalysisType(BaseModel):
    """Schema identity declared by an analysis."""

    name: str
    version: int


class Analysis(BaseModel):
    """Analysis as returned by the record store.

    Only the server-managed fields are modelled. Schema specific content is
    kept as extra fields so it survives a round trip untouched.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    analysis_type: AnalysisType = Field(alias="analysisType")
    analysis_state: AnalysisState = Field(alias="analysisState")
    analysis_id: str = Field(alias="analysisId")
    study_id: str = Field(alias="studyId")
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")
    first_published_at: str | None = Field(alias="firstPublishedAt")
    published_at: str | None = Field(alias="publishedAt")
    analysis_state_history: list[dict[str, Any]] = Field(alias="analysisStateHistory")
    files: list[dict[str, Any]]
    samples: list[dict[str, Any]]

    def to_record(self) -> dict[str, Any]:
        """Return the analysis in its original JSON shape."""
        return self.model_dump(mode="json", by_alias=True)


class PagedAnalysisResponse(BaseModel):
    """One page of analyses plus the study totals."""

    model_config = ConfigDict(populate_by_name=True)

    total_analyses: int = Field(alias="totalAnalyses")
    current_total_analyses: int = Field(alias="currentTotalAnalyses")
    analyses: list[Analysis]


class SongErrorResponse(BaseModel):
    """Error body returned by the record store for rejected requests."""

    model_config = ConfigDict(populate_by_name=True)

    error_id: str = Field(alias="errorId")
    http_status_code: int = Field(alias="httpStatusCode")
    message: str


class AnalysisFilters(BaseModel):
    """Selects the analyses of one study in the given states."""

    model_config = ConfigDict(frozen=True)

    study: str
    states: tuple[AnalysisState, ...] = ANALYSIS_STATES


class Pagination(BaseModel):
    """Page window for a paginated request."""

    model_config = ConfigDict(frozen=True)

    limit: int = Field(default=20, ge=1)
    offset: int = Field(default=0, ge=0)


class ApplicationJwtResponse(BaseModel):
    """Token response for the client credentials grant."""

    access_token: str


__all__ = [
    "ANALYSIS_STATES",
    "Analysis",
    "AnalysisFilters",
    "AnalysisState",
    "AnalysisType",
    "ApplicationJwtResponse",
    "PagedAnalysisResponse",
    "Pagination",
    "SongErrorResponse",
]
