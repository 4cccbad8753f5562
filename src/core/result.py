# SPDX-License-Identifier: MIT
"""Success/failure container used instead of exceptions for fallible steps.

Every boundary that can fail returns either :class:`Success` or
:class:`Failure`. Plain functions join the algebra through
:func:`with_result` and :func:`with_result_async`, which are the only places
where raised exceptions are converted into failures.

Example:
    ```python
    parse = with_result(int)
    parse("12")       # Success(data=12)
    parse("twelve")   # Failure(errors=("invalid literal for int() ...",))
    parse(failure("upstream broke"))  # passed through untouched
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    Any,
    Awaitable,
    Callable,
    ClassVar,
    Generic,
    Literal,
    TypeAlias,
    TypeVar,
)

from pydantic_core import to_json

T = TypeVar("T")
S = TypeVar("S")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """Successful outcome carrying ``data``."""

    data: T
    success: ClassVar[Literal[True]] = True


@dataclass(frozen=True, slots=True)
class Failure:
    """Failed outcome carrying one or more diagnostic messages."""

    errors: tuple[str, ...]
    success: ClassVar[Literal[False]] = False

    def __post_init__(self) -> None:
        if not self.errors:
            raise ValueError("Failure requires at least one error message")

    @property
    def message(self) -> str:
        """Return all errors joined into a single line."""
        return " - ".join(self.errors)


Result: TypeAlias = Success[T] | Failure


def _render(part: Any) -> list[str]:
    """Return diagnostic text for one ``failure`` argument."""
    if isinstance(part, Failure):
        return list(part.errors)
    if isinstance(part, str):
        return [part]
    if isinstance(part, BaseException):
        return [str(part) or type(part).__name__]
    # Diagnostics only, never parsed back.
    return [to_json(part, fallback=str).decode()]


def success(data: T) -> Success[T]:
    """Return a :class:`Success` wrapping ``data``."""
    return Success(data)


def failure(*parts: Any) -> Failure:
    """Return a :class:`Failure` whose errors are ``parts`` rendered as text.

    Strings are kept verbatim, exceptions contribute their message, nested
    failures contribute their own errors and anything else is serialised to
    JSON.
    """
    errors = [text for part in parts for text in _render(part)]
    return Failure(tuple(errors) or ("Unknown failure",))


def as_result(value: Result[T] | T) -> Result[T]:
    """Return ``value`` unchanged when it is a result, else wrap it."""
    if isinstance(value, (Success, Failure)):
        return value
    return Success(value)


def with_result(fn: Callable[[T], Result[S] | S]) -> Callable[[Result[T] | T], Result[S]]:
    """Lift ``fn`` into a total function over results.

    Failures are passed through without calling ``fn``. Exceptions raised by
    ``fn`` are captured as failures carrying the exception message.
    """

    def _wrapped(value: Result[T] | T) -> Result[S]:
        incoming = as_result(value)
        if isinstance(incoming, Failure):
            return incoming
        try:
            return as_result(fn(incoming.data))
        except Exception as exc:  # pylint: disable=broad-except
            return failure(exc)

    return _wrapped


def with_result_async(
    fn: Callable[[T], Awaitable[Result[S] | S]],
) -> Callable[[Result[T] | T], Awaitable[Result[S]]]:
    """Asynchronous counterpart of :func:`with_result`."""

    async def _wrapped(value: Result[T] | T) -> Result[S]:
        incoming = as_result(value)
        if isinstance(incoming, Failure):
            return incoming
        try:
            return as_result(await fn(incoming.data))
        except Exception as exc:  # pylint: disable=broad-except
            return failure(exc)

    return _wrapped


__all__ = [
    "Failure",
    "Result",
    "Success",
    "as_result",
    "failure",
    "success",
    "with_result",
    "with_result_async",
]
