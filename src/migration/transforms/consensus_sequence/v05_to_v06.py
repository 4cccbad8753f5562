# SPDX-License-Identifier: MIT
"""Version 5 to 6: restructure host age bins.

* ``host_age`` must fall inside ``host_age_bin`` for the decade bins.
* ``90 - 99`` and ``100+`` collapse into ``90+`` with the exact age withheld.
"""

from __future__ import annotations

from typing import Literal, get_args

from core.result import Result, failure, success
from migration.transform import Record, Version, define_transform
from migration.transforms import InputModel, matches_schema

from .constants import CS_NAME

DecadeBin = Literal[
    "0 - 9",
    "10 - 19",
    "20 - 29",
    "30 - 39",
    "40 - 49",
    "50 - 59",
    "60 - 69",
    "70 - 79",
    "80 - 89",
]

AgeBin = Literal[
    DecadeBin,
    "90 - 99",
    "100+",
    "Not Applicable",
    "Missing",
    "Not Collected",
    "Not Provided",
    "Restricted Access",
]

DECADE_BINS: frozenset[str] = frozenset(get_args(DecadeBin))
RESTRICTED_BINS = frozenset({"90 - 99", "100+"})
RESTRICTED_BIN = "90+"
RESTRICTED_REASON = "Restricted Access"


class _AnalysisType(InputModel):
    name: Literal["consensus_sequence"]
    version: Literal[5]


class _Host(InputModel):
    host_age: float | None
    host_age_bin: AgeBin


class InputSchema(InputModel):
    """Fields read by the 5 to 6 transform."""

    analysisType: _AnalysisType
    host: _Host


def age_in_bin(bin_label: str, age: float | None) -> bool:
    """Return ``True`` when ``age`` is missing or inside the decade ``bin_label``."""
    if age is None:
        return True
    low = int(bin_label.split(" - ")[0])
    return low <= age <= low + 9


def transform(record: Record) -> Result[Record]:
    """Validate or restructure the host age fields of ``record``."""
    if not matches_schema(InputSchema, record):
        return failure(
            "Provided analysis does not match the version 5 schema and cannot "
            "be migrated to version 6"
        )
    host = record["host"]
    age_bin = host["host_age_bin"]
    if age_bin in DECADE_BINS:
        if age_in_bin(age_bin, host["host_age"]):
            return success(record)
        return failure(
            "host.host_age is non-null and that value is outside of the given age bin",
            {"bin": age_bin, "age": host["host_age"]},
        )
    if age_bin in RESTRICTED_BINS:
        return success(
            {
                **record,
                "host": {
                    **host,
                    "host_age": None,
                    "host_age_null_reason": RESTRICTED_REASON,
                    "host_age_bin": RESTRICTED_BIN,
                },
            }
        )
    return success(record)


cs5to6 = define_transform(Version(CS_NAME, 5), Version(CS_NAME, 6), transform)
