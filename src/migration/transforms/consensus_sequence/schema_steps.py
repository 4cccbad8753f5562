# SPDX-License-Identifier: MIT
"""Version steps that change the schema without changing record content.

These releases only tightened validation or added optional fields on the
record store, so existing records are re-stamped with the new version.
"""

from __future__ import annotations

from migration.transform import Record, Transform, Version, define_transform

from .constants import CS_NAME


def _unchanged(record: Record) -> Record:
    return record


def schema_only(start: int) -> Transform:
    """Return the transform stamping version ``start + 1`` on a ``start`` record."""
    return define_transform(
        Version(CS_NAME, start), Version(CS_NAME, start + 1), _unchanged
    )


cs4to5 = schema_only(4)
cs6to7 = schema_only(6)
cs7to8 = schema_only(7)
cs8to9 = schema_only(8)
cs9to10 = schema_only(9)
cs10to11 = schema_only(10)
cs11to12 = schema_only(11)
cs13to14 = schema_only(13)
