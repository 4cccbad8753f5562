# SPDX-License-Identifier: MIT
"""Declarative builders for chains of fallible steps.

A pipe wraps a first step and grows one step at a time. Every step may return
a bare value or a :class:`~core.result.Result`; raised exceptions become
failures. Once any step fails the remaining steps are skipped and the failure
is returned unchanged.

Example:
    ```python
    parse_page = (
        pipe(json.loads)
        .into(PagedAnalysisResponse.model_validate)
        .check(lambda page: page.analyses, "Page is empty")
        .build()
    )
    ```

Calling :meth:`Pipe.await_` switches to an :class:`AsyncPipe`; there is no
way back to a synchronous builder from that point on.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Generic, TypeVar

from .result import Failure, Result, failure, with_result, with_result_async

A = TypeVar("A")
B = TypeVar("B")
C = TypeVar("C")

PipeStep = Callable[[A], "Result[B] | B"]
AsyncPipeStep = Callable[[A], "Awaitable[Result[B] | B]"]


class Pipe(Generic[A, B]):
    """Synchronous pipe builder."""

    def __init__(self, step: Callable[[A], Any]) -> None:
        self._step: Callable[[Any], Result[B]] = with_result(step)

    def run(self, arg: A | None = None) -> Result[B]:
        """Execute the pipe immediately with ``arg``."""
        return self._step(arg)

    def build(self) -> Callable[[A], Result[B]]:
        """Return the composed pipe as a reusable function."""
        return self._step

    def into(self, step: Callable[[B], Any]) -> "Pipe[A, C]":
        """Append a synchronous step."""
        first = self._step
        second = with_result(step)
        return Pipe(lambda arg: second(first(arg)))

    def await_(self, step: Callable[[B], Awaitable[Any]]) -> "AsyncPipe[A, C]":
        """Append an asynchronous step, turning the builder asynchronous."""
        first = self._step
        second = with_result_async(step)

        async def _composed(arg: A) -> Result[C]:
            return await second(first(arg))

        return AsyncPipe(_composed)

    def check(self, predicate: Callable[[B], Any], message: str) -> "Pipe[A, B]":
        """Fail with ``message`` when ``predicate`` is falsy for the payload."""
        first = self._step

        def _checked(arg: A) -> Result[B]:
            outcome = first(arg)
            if not isinstance(outcome, Failure) and not predicate(outcome.data):
                return failure(message)
            return outcome

        return Pipe(_checked)


class AsyncPipe(Generic[A, B]):
    """Asynchronous pipe builder; ``run`` and built functions are coroutines."""

    def __init__(self, step: Callable[[A], Awaitable[Any]]) -> None:
        self._step: Callable[[Any], Awaitable[Result[B]]] = with_result_async(step)

    async def run(self, arg: A | None = None) -> Result[B]:
        """Execute the pipe with ``arg``."""
        return await self._step(arg)

    def build(self) -> Callable[[A], Awaitable[Result[B]]]:
        """Return the composed pipe as a reusable coroutine function."""
        return self._step

    def into(self, step: Callable[[B], Any]) -> "AsyncPipe[A, C]":
        """Append a synchronous step."""
        first = self._step
        second = with_result(step)

        async def _composed(arg: A) -> Result[C]:
            return second(await first(arg))

        return AsyncPipe(_composed)

    def await_(self, step: Callable[[B], Awaitable[Any]]) -> "AsyncPipe[A, C]":
        """Append an asynchronous step."""
        first = self._step
        second = with_result_async(step)

        async def _composed(arg: A) -> Result[C]:
            return await second(await first(arg))

        return AsyncPipe(_composed)

    def check(self, predicate: Callable[[B], Any], message: str) -> "AsyncPipe[A, B]":
        """Fail with ``message`` when ``predicate`` is falsy for the payload."""
        first = self._step

        async def _checked(arg: A) -> Result[B]:
            outcome = await first(arg)
            if not isinstance(outcome, Failure) and not predicate(outcome.data):
                return failure(message)
            return outcome

        return AsyncPipe(_checked)


def pipe(step: Callable[[A], Any]) -> Pipe[A, Any]:
    """Start a synchronous pipe with ``step``."""
    return Pipe(step)


def async_pipe(step: Callable[[A], Awaitable[Any]]) -> AsyncPipe[A, Any]:
    """Start an asynchronous pipe with ``step``."""
    return AsyncPipe(step)


__all__ = ["AsyncPipe", "AsyncPipeStep", "Pipe", "PipeStep", "async_pipe", "pipe"]
