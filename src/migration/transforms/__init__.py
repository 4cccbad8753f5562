# SPDX-License-Identifier: MIT
"""Migration chains for each analysis family."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, ValidationError


class InputModel(BaseModel):
    """Base for the shape a record must have before a transform accepts it.

    Unknown fields are allowed so only the fields a transform touches are
    checked. Values are not coerced.
    """

    model_config = ConfigDict(extra="allow", strict=True)


def matches_schema(model: type[InputModel], record: Mapping[str, Any]) -> bool:
    """Return ``True`` when ``record`` validates against ``model``."""
    try:
        model.model_validate(record)
    except ValidationError:
        return False
    return True


__all__ = ["InputModel", "matches_schema"]
