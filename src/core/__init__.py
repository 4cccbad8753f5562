"""Core building blocks for the migration pipeline.

Exports:
    Success, Failure, Result: Tagged outcome of a fallible step.
    success, failure, as_result: Result constructors.
    with_result, with_result_async: Lift plain functions into the result algebra.
    pipe, async_pipe: Builders for short-circuiting chains of steps.
    Queue: Observable FIFO queue.
    TaskQueue, limit_concurrency: Bounded concurrency for async work.
"""

from .pipe import AsyncPipe, Pipe, async_pipe, pipe
from .queue import Queue, QueueEvent
from .result import (
    Failure,
    Result,
    Success,
    as_result,
    failure,
    success,
    with_result,
    with_result_async,
)
from .task_queue import TaskQueue, TaskQueueEvent, limit_concurrency

__all__ = [
    "AsyncPipe",
    "Failure",
    "Pipe",
    "Queue",
    "QueueEvent",
    "Result",
    "Success",
    "TaskQueue",
    "TaskQueueEvent",
    "as_result",
    "async_pipe",
    "failure",
    "limit_concurrency",
    "pipe",
    "success",
    "with_result",
    "with_result_async",
]
