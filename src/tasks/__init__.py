"""Migration tasks run against the record store."""

from .migrate_study import (
    MigrationCounts,
    MigrationSummary,
    StudyRecordSource,
    migrate_analyses,
    migrate_and_update_study,
)
from .studies import get_available_studies

__all__ = [
    "MigrationCounts",
    "MigrationSummary",
    "StudyRecordSource",
    "get_available_studies",
    "migrate_analyses",
    "migrate_and_update_study",
]
