# SPDX-License-Identifier: MIT
"""Sequence helpers returning results instead of raising."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

from core.result import Result, failure, success

T = TypeVar("T")
R = TypeVar("R")


def _first_index(items: Sequence[T], test: Callable[[T], bool]) -> int:
    return next((index for index, item in enumerate(items) if test(item)), -1)


def slice_from(items: Sequence[T], test: Callable[[T], bool]) -> Result[list[T]]:
    """Return ``items`` starting at the first element passing ``test``."""
    index = _first_index(items, test)
    if index < 0:
        return failure(
            "Unable to find item in array that matches provided starting position test."
        )
    return success(list(items[index:]))


def slice_to(
    items: Sequence[T], test: Callable[[T], bool], inclusive: bool = False
) -> Result[list[T]]:
    """Return ``items`` up to the first element passing ``test``.

    Args:
        items: Sequence to slice.
        test: Predicate locating the end position.
        inclusive: Keep the matching element in the output.
    """
    index = _first_index(items, test)
    if index < 0:
        return failure(
            "Unable to find item in array that matches provided end position test."
        )
    return success(list(items[: index + (1 if inclusive else 0)]))


def map_async(
    fn: Callable[[T], Awaitable[R]],
) -> Callable[[Sequence[T]], Awaitable[list[R]]]:
    """Return a coroutine function applying ``fn`` to every item concurrently."""

    async def _mapped(items: Sequence[T]) -> list[R]:
        return list(await asyncio.gather(*(fn(item) for item in items)))

    return _mapped


__all__ = ["map_async", "slice_from", "slice_to"]
