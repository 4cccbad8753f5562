# SPDX-License-Identifier: MIT
"""Tests for the observable FIFO queue."""

from core.queue import Queue, QueueEvent
from core.result import Failure, Success


def test_take_returns_items_in_insertion_order() -> None:
    queue: Queue[str] = Queue()
    for item in ("a", "b", "c"):
        queue.add(item)
    assert [queue.take(), queue.take(), queue.take()] == [
        Success("a"),
        Success("b"),
        Success("c"),
    ]


def test_take_from_empty_queue_fails() -> None:
    assert Queue().take() == Failure(("Empty Queue",))


def test_falsy_items_are_real_items() -> None:
    queue: Queue[object] = Queue()
    queue.add(0)
    queue.add(None)
    assert queue.take() == Success(0)
    assert queue.take() == Success(None)
    assert isinstance(queue.take(), Failure)


def test_listeners_receive_length_and_item() -> None:
    queue: Queue[int] = Queue()
    added: list[QueueEvent[int]] = []
    taken: list[QueueEvent[int]] = []
    queue.on_add(added.append)
    queue.on_take(taken.append)

    queue.add(7)
    queue.add(8)
    queue.take()

    assert added == [QueueEvent(1, 7), QueueEvent(2, 8)]
    assert taken == [QueueEvent(1, 7)]
    assert queue.size == len(queue) == 1


def test_listeners_run_in_registration_order() -> None:
    queue: Queue[int] = Queue()
    order: list[str] = []
    queue.on_add(lambda _: order.append("first"))
    queue.on_add(lambda _: order.append("second"))
    queue.add(1)
    assert order == ["first", "second"]
