# SPDX-License-Identifier: MIT
"""Observable FIFO queue.

The queue performs no locking. It is only mutated from the event loop thread,
where ``add`` and ``take`` never yield, so listeners observe a consistent
length.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Generic, TypeVar

from .result import Result, failure, success

T = TypeVar("T")


@dataclass(frozen=True)
class QueueEvent(Generic[T]):
    """Queue length after the change and the item added or taken."""

    length: int
    item: T


QueueListener = Callable[[QueueEvent[T]], None]


class Queue(Generic[T]):
    """FIFO queue firing listeners whenever an item is added or taken."""

    def __init__(self) -> None:
        self._items: Deque[T] = deque()
        self._add_listeners: list[QueueListener[T]] = []
        self._take_listeners: list[QueueListener[T]] = []

    def __len__(self) -> int:
        return len(self._items)

    @property
    def size(self) -> int:
        """Return the number of queued items."""
        return len(self._items)

    def add(self, item: T) -> None:
        """Append ``item`` and notify add listeners."""
        self._items.append(item)
        event = QueueEvent(len(self._items), item)
        for listener in list(self._add_listeners):
            listener(event)

    def take(self) -> Result[T]:
        """Remove and return the oldest item, or a failure when empty."""
        if not self._items:
            return failure("Empty Queue")
        item = self._items.popleft()
        event = QueueEvent(len(self._items), item)
        for listener in list(self._take_listeners):
            listener(event)
        return success(item)

    def on_add(self, listener: QueueListener[T]) -> None:
        """Register ``listener`` for add events."""
        self._add_listeners.append(listener)

    def on_take(self, listener: QueueListener[T]) -> None:
        """Register ``listener`` for take events."""
        self._take_listeners.append(listener)


__all__ = ["Queue", "QueueEvent", "QueueListener"]
