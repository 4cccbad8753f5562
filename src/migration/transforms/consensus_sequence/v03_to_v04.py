# SPDX-License-Identifier: MIT
"""Version 3 to 4: validate ``sample_collection.fasta_header_name``."""

from __future__ import annotations

import re
from typing import Literal

from core.result import Result, failure, success
from migration.transform import Record, Version, define_transform
from migration.transforms import InputModel, matches_schema

from .constants import CS_NAME

FASTA_HEADER_NAME = re.compile(
    r"^hCoV-19/(canada)/[a-zA-Z0-9\-_.:/]{1,99}/20[1-2][0-9]$", re.IGNORECASE
)


class _AnalysisType(InputModel):
    name: Literal["consensus_sequence"]
    version: Literal[3]


class _SampleCollection(InputModel):
    fasta_header_name: str


class InputSchema(InputModel):
    """Fields read by the 3 to 4 transform."""

    analysisType: _AnalysisType
    sample_collection: _SampleCollection


def transform(record: Record) -> Result[Record]:
    """Accept the record only when its FASTA header name has the new format."""
    if not matches_schema(InputSchema, record):
        return failure(
            "Provided analysis does not match the version 3 schema and cannot "
            "be migrated to version 4"
        )
    header = record["sample_collection"]["fasta_header_name"]
    if not FASTA_HEADER_NAME.match(header):
        return failure(
            "Cannot update `sample_collection.fasta_header_name` since the "
            "available value does not match the required regular expression.",
            record.get("studyId"),
            record.get("analysisId"),
            header,
        )
    return success(record)


cs3to4 = define_transform(Version(CS_NAME, 3), Version(CS_NAME, 4), transform)
