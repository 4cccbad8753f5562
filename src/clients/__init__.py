"""Clients for the record store and auth service."""

from .auth import AuthClient, TokenCache
from .http import with_timeout
from .models import (
    Analysis,
    AnalysisFilters,
    AnalysisState,
    PagedAnalysisResponse,
    Pagination,
    SongErrorResponse,
)
from .record_store import RecordStoreClient

__all__ = [
    "Analysis",
    "AnalysisFilters",
    "AnalysisState",
    "AuthClient",
    "PagedAnalysisResponse",
    "Pagination",
    "RecordStoreClient",
    "SongErrorResponse",
    "TokenCache",
    "with_timeout",
]
