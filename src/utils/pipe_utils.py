# SPDX-License-Identifier: MIT
"""Pipe steps for observing values in flight."""

from __future__ import annotations

from typing import Callable, Literal, TypeVar

import logfire

T = TypeVar("T")

LogLevel = Literal["debug", "info", "warn", "error"]


def pipe_log(level: LogLevel, label: str) -> Callable[[T], T]:
    """Return a step logging its input under ``label`` and passing it on."""

    def _log(value: T) -> T:
        logfire.log(level, label, attributes={"value": value})
        return value

    return _log


__all__ = ["LogLevel", "pipe_log"]
