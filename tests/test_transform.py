# SPDX-License-Identifier: MIT
"""Tests for versioned transforms and transform chains."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from core.result import Failure, Success, failure
from migration.transform import (
    TransformChain,
    Version,
    create_transform_chain,
    define_transform,
)


def _stamp(record: dict) -> dict:
    return {**record, "touched": record.get("touched", 0) + 1}


def _steps(first: int, count: int, name: str = "t"):
    return [
        define_transform(Version(name, v), Version(name, v + 1), _stamp)
        for v in range(first, first + count)
    ]


def test_version_equality_is_field_wise() -> None:
    assert Version("a", 1) == Version("a", 1)
    assert Version("a", 1) != Version("b", 1)
    assert Version("a", 1) != Version("a", 2)


@pytest.mark.parametrize(
    "record, expected",
    [
        ({"analysisType": {"name": "cs", "version": 3}}, Version("cs", 3)),
        ({"analysisType": {"name": "cs"}}, None),
        ({"analysisType": {"name": "cs", "version": "3"}}, None),
        ({"analysisType": {"name": "cs", "version": True}}, None),
        ({"analysisType": "cs@3"}, None),
        ({}, None),
    ],
)
def test_version_of_record(record, expected) -> None:
    assert Version.of(record) == expected


def test_transform_refuses_other_versions() -> None:
    transform = define_transform(Version("t", 1), Version("t", 2), _stamp)
    outcome = transform.apply({"analysisType": {"name": "t", "version": 2}})
    assert isinstance(outcome, Failure)
    assert outcome.errors[0] == "Analysis type does not match expected input type"


def test_transform_stamps_end_version() -> None:
    transform = define_transform(Version("t", 1), Version("t", 2), _stamp)
    outcome = transform.apply({"analysisType": {"name": "t", "version": 1}, "x": 1})
    assert outcome == Success(
        {"analysisType": {"name": "t", "version": 2}, "x": 1, "touched": 1}
    )


def test_transform_reports_transformer_failures_with_versions() -> None:
    transform = define_transform(
        Version("t", 1), Version("t", 2), lambda _: failure("field missing")
    )
    outcome = transform.apply({"analysisType": {"name": "t", "version": 1}})
    assert isinstance(outcome, Failure)
    assert outcome.errors[0] == "Error applying transform"
    assert '"version":1' in outcome.errors[1] and '"version":2' in outcome.errors[1]
    assert outcome.errors[2] == "field missing"


def test_transform_captures_raised_errors() -> None:
    def explode(_: dict) -> dict:
        raise KeyError("host")

    transform = define_transform(Version("t", 1), Version("t", 2), explode)
    outcome = transform.apply({"analysisType": {"name": "t", "version": 1}})
    assert isinstance(outcome, Failure)
    assert outcome.errors[-1] == "'host'"


@pytest.mark.parametrize("returned", [None, ["not", "a", "record"], 7])
def test_transform_rejects_non_record_output(returned) -> None:
    transform = define_transform(Version("t", 1), Version("t", 2), lambda _: returned)
    outcome = transform.apply({"analysisType": {"name": "t", "version": 1}})
    assert isinstance(outcome, Failure)
    assert outcome.errors[0] == "Error applying transform"
    assert outcome.errors[-1].startswith(f"Transformer returned {type(returned).__name__}")


def test_create_chain_rejects_empty_input() -> None:
    assert isinstance(create_transform_chain(), Failure)


def test_create_chain_reports_first_break() -> None:
    a, b = _steps(1, 2)
    gap = define_transform(Version("t", 5), Version("t", 6), _stamp)
    outcome = create_transform_chain(a, b, gap)
    assert outcome == Failure(
        (
            "Transform provided at index 2 does not connect to the transform chain. "
            "Received: t@5 - Expected: t@3",
        )
    )


def test_chain_endpoints_and_inspection(counting_chain: TransformChain) -> None:
    assert counting_chain.start == Version("t", 1)
    assert counting_chain.end == Version("t", 4)
    assert len(counting_chain) == 3
    assert [t.start.version for t in counting_chain] == [1, 2, 3]


def test_chain_add_checks_adjacency(counting_chain: TransformChain) -> None:
    extended = counting_chain.add(
        define_transform(Version("t", 4), Version("t", 5), _stamp)
    )
    assert isinstance(extended, Success)
    assert extended.data.end == Version("t", 5)
    assert len(counting_chain) == 3

    broken = counting_chain.add(
        define_transform(Version("t", 9), Version("t", 10), _stamp)
    )
    assert isinstance(broken, Failure)
    assert broken.errors[0].startswith("Transform provided at index 3 ")


def test_from_and_to_version_slice(counting_chain: TransformChain) -> None:
    tail = counting_chain.from_version(Version("t", 2))
    assert isinstance(tail, Success)
    assert (tail.data.start, tail.data.end) == (Version("t", 2), Version("t", 4))

    head = counting_chain.to_version(Version("t", 3))
    assert isinstance(head, Success)
    assert (head.data.start, head.data.end) == (Version("t", 1), Version("t", 3))

    assert isinstance(counting_chain.from_version(Version("t", 4)), Failure)
    assert isinstance(counting_chain.to_version(Version("t", 1)), Failure)


def test_chain_apply_does_not_mutate_input(counting_chain: TransformChain) -> None:
    record = {"analysisType": {"name": "t", "version": 1}, "nested": {"keep": [1]}}
    outcome = counting_chain.apply(record)
    assert isinstance(outcome, Success)
    assert outcome.data["analysisType"] == {"name": "t", "version": 4}
    assert outcome.data["steps"] == 3
    assert record == {"analysisType": {"name": "t", "version": 1}, "nested": {"keep": [1]}}
    assert outcome.data["nested"] is not record["nested"]


def test_chain_apply_stops_at_first_failure() -> None:
    calls: list[int] = []

    def watch(record: dict) -> dict:
        calls.append(record["analysisType"]["version"])
        return record

    chain = create_transform_chain(
        define_transform(Version("t", 1), Version("t", 2), watch),
        define_transform(Version("t", 2), Version("t", 3), lambda _: failure("no")),
        define_transform(Version("t", 3), Version("t", 4), watch),
    )
    assert isinstance(chain, Success)
    outcome = chain.data.apply({"analysisType": {"name": "t", "version": 1}})
    assert isinstance(outcome, Failure)
    assert calls == [1]


@given(first=st.integers(min_value=0, max_value=50), count=st.integers(1, 20))
def test_connected_transforms_always_chain(first: int, count: int) -> None:
    """Any sequence of adjacent steps forms a chain with matching endpoints."""
    chain = create_transform_chain(*_steps(first, count))
    assert isinstance(chain, Success)
    assert chain.data.start == Version("t", first)
    assert chain.data.end == Version("t", first + count)


@given(
    count=st.integers(2, 10),
    data=st.data(),
)
def test_any_gap_breaks_the_chain(count: int, data) -> None:
    """Swapping in a step with the wrong start fails at exactly that index."""
    steps = _steps(0, count)
    index = data.draw(st.integers(1, count - 1))
    steps[index] = define_transform(Version("t", 100), Version("t", 101), _stamp)
    outcome = create_transform_chain(*steps)
    assert isinstance(outcome, Failure)
    assert outcome.errors[0].startswith(f"Transform provided at index {index} ")


@given(first=st.integers(0, 10), count=st.integers(1, 10), data=st.data())
def test_apply_from_any_start_reaches_the_end(first: int, count: int, data) -> None:
    chain = create_transform_chain(*_steps(first, count))
    assert isinstance(chain, Success)
    start = data.draw(st.integers(first, first + count - 1))
    sliced = chain.data.from_version(Version("t", start))
    assert isinstance(sliced, Success)
    outcome = sliced.data.apply({"analysisType": {"name": "t", "version": start}})
    assert isinstance(outcome, Success)
    assert outcome.data["analysisType"]["version"] == first + count
    assert outcome.data["touched"] == first + count - start
