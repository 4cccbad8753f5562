# SPDX-License-Identifier: MIT
"""HTTP helpers returning results instead of raising."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, ParamSpec, TypeVar

import httpx

from core.pipe import async_pipe
from core.result import Result, failure, success

P = ParamSpec("P")
T = TypeVar("T")


def with_timeout(
    timeout: float, fn: Callable[P, Awaitable[Result[T]]]
) -> Callable[P, Awaitable[Result[T]]]:
    """Return ``fn`` cancelled and failed when it runs longer than ``timeout``.

    Cancelling the awaited call closes the in-flight httpx request.
    """

    async def _timed(*args: P.args, **kwargs: P.kwargs) -> Result[T]:
        try:
            return await asyncio.wait_for(fn(*args, **kwargs), timeout)
        except asyncio.TimeoutError:
            return failure(
                "Request aborted", f"No response after {timeout} seconds"
            )

    return _timed


async def safe_request(
    client: httpx.AsyncClient, method: str, url: str, **kwargs: Any
) -> Result[httpx.Response]:
    """Send a request, reporting transport errors as a failure."""
    try:
        return success(await client.request(method, url, **kwargs))
    except httpx.HTTPError as exc:
        return failure(f"{type(exc).__name__} requesting {url}", exc)


def response_json(response: httpx.Response) -> Result[Any]:
    """Return the decoded JSON body of a 2xx ``response``."""
    if response.is_success:
        return success(response.json())
    return failure(
        f"Fetch response was not OK! Status: {response.status_code} - {response.text}"
    )


def response_text(response: httpx.Response) -> Result[str]:
    """Return the text body of a 2xx ``response``."""
    if response.is_success:
        return success(response.text)
    return failure(
        f"Fetch response was not OK! Status: {response.status_code} - {response.text}"
    )


def json_fetcher(
    client: httpx.AsyncClient, method: str, url: str, **kwargs: Any
) -> Callable[[Any], Awaitable[Result[Any]]]:
    """Return a coroutine function fetching ``url`` and decoding its JSON body."""

    async def _send(_: Any) -> Result[httpx.Response]:
        return await safe_request(client, method, url, **kwargs)

    return async_pipe(_send).into(response_json).build()


def text_fetcher(
    client: httpx.AsyncClient, method: str, url: str, **kwargs: Any
) -> Callable[[Any], Awaitable[Result[str]]]:
    """Return a coroutine function fetching ``url`` and returning its text body."""

    async def _send(_: Any) -> Result[httpx.Response]:
        return await safe_request(client, method, url, **kwargs)

    return async_pipe(_send).into(response_text).build()


def join_url(host: str, *parts: str) -> str:
    """Join ``host`` and path ``parts`` with single slashes."""
    segments = [host.rstrip("/")] + [part.strip("/") for part in parts if part]
    return "/".join(segments)


__all__ = [
    "join_url",
    "json_fetcher",
    "response_json",
    "response_text",
    "safe_request",
    "text_fetcher",
    "with_timeout",
]
