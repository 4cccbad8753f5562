# SPDX-License-Identifier: MIT
"""Version 12 to 13: single-valued fields become lists."""

from __future__ import annotations

from typing import Literal

from core.result import Result, failure, success
from migration.transform import Record, Version, define_transform
from migration.transforms import InputModel, matches_schema

from .constants import CS_NAME


class _AnalysisType(InputModel):
    name: Literal["consensus_sequence"]
    version: Literal[12]


class _Experiment(InputModel):
    purpose_of_sequencing: str


class _SampleCollection(InputModel):
    anatomical_part: str


class InputSchema(InputModel):
    analysisType: _AnalysisType
    experiment: _Experiment
    sample_collection: _SampleCollection


def transform(record: Record) -> Result[Record]:
    """Wrap ``anatomical_part`` and ``purpose_of_sequencing`` in lists."""
    if not matches_schema(InputSchema, record):
        return failure(
            "Provided analysis does not match the version 12 schema and cannot "
            "be migrated to version 13"
        )
    sample_collection = record["sample_collection"]
    experiment = record["experiment"]
    return success(
        {
            **record,
            "sample_collection": {
                **sample_collection,
                "anatomical_part": [sample_collection["anatomical_part"]],
            },
            "experiment": {
                **experiment,
                "purpose_of_sequencing": [experiment["purpose_of_sequencing"]],
            },
        }
    )


cs12to13 = define_transform(Version(CS_NAME, 12), Version(CS_NAME, 13), transform)
