# SPDX-License-Identifier: MIT
"""Bounded concurrency runner for asynchronous work items.

:class:`TaskQueue` accepts zero-argument coroutine factories and runs at most
``max_concurrency`` of them at once. Extra work waits in a FIFO
:class:`~core.queue.Queue` and is started, in submission order, as soon as a
slot frees up. Each slot is served by a worker loop which keeps pulling the
next pending item until the queue is empty, so sustained load never deepens
the call stack.

Listeners may be registered for add, start, finish and error events. When a
work item raises and no error listener exists the runner treats the error as
fatal: it stops admitting work and :meth:`TaskQueue.join` re-raises it.
Callers that want failures as data submit work that returns a
:class:`~core.result.Result` (see :func:`core.result.with_result_async`) or
use :func:`limit_concurrency`, which hands errors back to the caller.

Example:
    ```python
    send_update = limit_concurrency(5, with_result_async(client.update_analysis))
    results = await asyncio.gather(*(send_update(a) for a in analyses))
    ```
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, ParamSpec, Protocol, TypeVar

import logfire

from .queue import Queue
from .result import Failure

P = ParamSpec("P")
R = TypeVar("R")
T = TypeVar("T", covariant=True)


class _CoroFactory(Protocol[T]):
    def __call__(self) -> Awaitable[T]: ...


@dataclass(frozen=True)
class TaskQueueEvent:
    """Snapshot of the runner passed to listeners."""

    running: int
    queued: int
    error: BaseException | None = None


TaskQueueListener = Callable[[TaskQueueEvent], None]


class TaskQueue:
    """Run queued coroutine factories with bounded concurrency."""

    def __init__(self, max_concurrency: int, *, name: str = "task_queue") -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.name = name
        self._max = max_concurrency
        self._running = 0
        self._pending: Queue[_CoroFactory[Any]] = Queue()
        self._start_listeners: list[TaskQueueListener] = []
        self._finish_listeners: list[TaskQueueListener] = []
        self._error_listeners: list[TaskQueueListener] = []
        self._workers: set[asyncio.Task[None]] = set()
        self._fatal: BaseException | None = None
        self._idle = asyncio.Event()
        self._idle.set()
        self._inflight = logfire.metric_gauge(f"{name}_inflight")
        self._submitted = logfire.metric_counter(f"{name}_submitted")
        self._completed = logfire.metric_counter(f"{name}_completed")
        self._failed = logfire.metric_counter(f"{name}_failed")
        # Admission runs before any user add listener sees the event.
        self._pending.on_add(lambda _event: self._admit())

    @property
    def max_concurrency(self) -> int:
        """Return the concurrency ceiling."""
        return self._max

    @property
    def size(self) -> int:
        """Return the number of items waiting for a slot."""
        return self._pending.size

    @property
    def running(self) -> int:
        """Return the number of items currently executing."""
        return self._running

    def add(self, work: _CoroFactory[Any]) -> None:
        """Queue ``work`` for execution without waiting for it.

        Must be called from a running event loop.
        """
        self._submitted.add(1)
        self._idle.clear()
        self._pending.add(work)

    async def join(self) -> None:
        """Wait until no work is running or pending.

        Raises:
            BaseException: The fatal error raised by a work item when no
                error listener was registered.
        """
        await self._idle.wait()
        if self._fatal is not None:
            raise self._fatal

    def on_add(self, listener: TaskQueueListener) -> None:
        """Register ``listener`` for work submissions."""
        self._pending.on_add(lambda _event: listener(self._event()))

    def on_start(self, listener: TaskQueueListener) -> None:
        """Register ``listener`` for work starting."""
        self._start_listeners.append(listener)

    def on_finish(self, listener: TaskQueueListener) -> None:
        """Register ``listener`` for work completing normally."""
        self._finish_listeners.append(listener)

    def on_error(self, listener: TaskQueueListener) -> None:
        """Register ``listener`` for work raising an exception.

        Registering any error listener makes the runner resilient: errors are
        reported and the queue keeps draining.
        """
        self._error_listeners.append(listener)

    def _event(self, error: BaseException | None = None) -> TaskQueueEvent:
        return TaskQueueEvent(
            running=self._running, queued=self._pending.size, error=error
        )

    def _emit(self, listeners: list[TaskQueueListener], event: TaskQueueEvent) -> None:
        for listener in list(listeners):
            listener(event)

    def _next(self) -> _CoroFactory[Any] | None:
        """Take the next pending item and claim a slot for it, if possible."""
        if self._fatal is not None or self._running >= self._max:
            return None
        taken = self._pending.take()
        if isinstance(taken, Failure):
            return None
        self._running += 1
        self._inflight.set(self._running)
        self._emit(self._start_listeners, self._event())
        return taken.data

    def _admit(self) -> None:
        work = self._next()
        if work is None:
            self._update_idle()
            return
        task = asyncio.create_task(self._worker(work), name=f"{self.name}-worker")
        self._workers.add(task)
        task.add_done_callback(self._workers.discard)

    async def _worker(self, work: _CoroFactory[Any] | None) -> None:
        while work is not None:
            try:
                await work()
            except Exception as exc:  # pylint: disable=broad-except
                self._running -= 1
                self._inflight.set(self._running)
                self._failed.add(1)
                if not self._error_listeners:
                    logfire.error(
                        "Task queue work item failed with no error listener",
                        queue=self.name,
                        error=str(exc),
                    )
                    self._fatal = exc
                    break
                self._emit(self._error_listeners, self._event(exc))
            else:
                self._running -= 1
                self._inflight.set(self._running)
                self._completed.add(1)
                self._emit(self._finish_listeners, self._event())
            work = self._next()
        self._update_idle()

    def _update_idle(self) -> None:
        if self._running == 0 and (self._fatal is not None or not self._pending.size):
            self._idle.set()


def limit_concurrency(
    max_concurrency: int,
    fn: Callable[P, Awaitable[R]],
    *,
    name: str | None = None,
) -> Callable[P, Awaitable[R]]:
    """Return ``fn`` wrapped so at most ``max_concurrency`` calls run at once.

    Each call is admitted through a private :class:`TaskQueue` and resolves
    with the return value of ``fn`` or raises its exception. The queue itself
    never sees the exception, so one failing call does not stall the others.
    """
    queue = TaskQueue(max_concurrency, name=name or getattr(fn, "__name__", "limited"))

    async def _limited(*args: P.args, **kwargs: P.kwargs) -> R:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[R] = loop.create_future()

        async def _work() -> None:
            try:
                value = await fn(*args, **kwargs)
            except Exception as exc:  # pylint: disable=broad-except
                if not future.done():
                    future.set_exception(exc)
            else:
                if not future.done():
                    future.set_result(value)

        with logfire.span("task_queue.submit", queue=queue.name):
            queue.add(_work)
            return await future

    _limited.queue = queue  # type: ignore[attr-defined]
    return _limited


__all__ = ["TaskQueue", "TaskQueueEvent", "TaskQueueListener", "limit_concurrency"]
