# SPDX-License-Identifier: MIT
"""Tests for pipe builders."""

import asyncio

import pytest

from core.pipe import async_pipe, pipe
from core.result import Failure, Success, failure


def test_pipe_runs_steps_in_order() -> None:
    built = pipe(lambda x: x + 1).into(lambda x: x * 10).build()
    assert built(1) == Success(20)
    assert built(2) == Success(30)


def test_pipe_short_circuits_on_first_failure() -> None:
    seen: list[int] = []

    def later(value: int) -> int:
        seen.append(value)
        return value

    outcome = (
        pipe(lambda _: failure("first"))
        .into(later)
        .into(later)
        .run()
    )
    assert outcome == Failure(("first",))
    assert seen == []


def test_pipe_turns_exceptions_into_failures() -> None:
    outcome = pipe(int).into(lambda x: 1 / x).run("0")
    assert isinstance(outcome, Failure)
    assert "division by zero" in outcome.message


def test_check_gates_on_predicate() -> None:
    checked = pipe(lambda x: x).check(lambda x: x > 0, "must be positive").build()
    assert checked(5) == Success(5)
    assert checked(-1) == Failure(("must be positive",))


def test_check_keeps_upstream_failure() -> None:
    outcome = pipe(lambda _: failure("early")).check(lambda _: False, "late").run()
    assert outcome.errors == ("early",)


@pytest.mark.asyncio()
async def test_await_switches_to_async_pipe() -> None:
    async def fetch(value: int) -> int:
        await asyncio.sleep(0)
        return value * 2

    built = pipe(lambda x: x + 1).await_(fetch).into(str).build()
    assert await built(1) == Success("4")


@pytest.mark.asyncio()
async def test_async_pipe_short_circuits_and_checks() -> None:
    calls: list[str] = []

    async def step(value: str) -> str:
        calls.append(value)
        return value

    outcome = await (
        async_pipe(step)
        .check(lambda value: value == "ok", "not ok")
        .await_(step)
        .run("bad")
    )
    assert outcome == Failure(("not ok",))
    assert calls == ["bad"]


@pytest.mark.asyncio()
async def test_async_pipe_captures_async_exceptions() -> None:
    async def explode(_: object) -> None:
        raise RuntimeError("kaput")

    assert await async_pipe(explode).run() == Failure(("kaput",))
