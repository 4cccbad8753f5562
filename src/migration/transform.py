# SPDX-License-Identifier: MIT
"""Versioned transforms and validated transform chains.

A :class:`Transform` migrates a record from exactly one schema version to the
next. A :class:`TransformChain` is an ordered, non-empty sequence of
transforms in which every transform starts where the previous one ended. The
chain is validated when it is built, so a broken link is reported before any
record is touched.

Example:
    ```python
    chain = create_transform_chain(cs3to4, cs4to5, cs5to6)
    if isinstance(chain, Failure):
        raise RuntimeError(chain.message)
    migrated = chain.data.from_version(Version.of(record)).data.apply(record)
    ```
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass
from functools import reduce
from typing import Any, Callable, Iterator, Mapping

from core.result import Failure, Result, as_result, failure, success, with_result
from utils.array_utils import slice_from, slice_to

Record = dict[str, Any]
"""A record in the record store's JSON shape."""

TYPE_FIELD = "analysisType"
"""Record key holding the schema identity."""


@dataclass(frozen=True, order=True)
class Version:
    """Schema identity of a record: family ``name`` and integer ``version``.

    Equality is field-wise on the ``(name, version)`` pair.
    """

    name: str
    version: int

    @classmethod
    def of(cls, record: Mapping[str, Any]) -> "Version | None":
        """Return the schema identity declared by ``record``, if well formed."""
        declared = record.get(TYPE_FIELD)
        if not isinstance(declared, Mapping):
            return None
        name = declared.get("name")
        version = declared.get("version")
        if not isinstance(name, str) or isinstance(version, bool):
            return None
        if not isinstance(version, int):
            return None
        return cls(name, version)

    def as_dict(self) -> dict[str, Any]:
        """Return the JSON shape stored under ``analysisType``."""
        return {"name": self.name, "version": self.version}

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


Transformer = Callable[[Record], "Result[Record] | Record"]


@dataclass(frozen=True)
class Transform:
    """One migration step from ``start`` to ``end``."""

    start: Version
    end: Version
    transformer: Transformer

    def apply(self, record: Record) -> Result[Record]:
        """Migrate ``record`` from ``start`` to ``end``.

        Records declaring any other version are refused untouched. Failures
        raised or returned by the transformer are re-reported with the
        version pair attached.
        """
        declared = Version.of(record)
        if declared != self.start:
            return failure(
                "Analysis type does not match expected input type",
                {"expected": self.start, "received": declared},
            )
        outcome = with_result(self.transformer)(record)
        if isinstance(outcome, Failure):
            return failure(
                "Error applying transform",
                {"start": self.start, "end": self.end},
                outcome,
            )
        if not isinstance(outcome.data, Mapping):
            return failure(
                "Error applying transform",
                {"start": self.start, "end": self.end},
                f"Transformer returned {type(outcome.data).__name__}, "
                "expected a record",
            )
        return success({**outcome.data, TYPE_FIELD: self.end.as_dict()})


def define_transform(start: Version, end: Version, transformer: Transformer) -> Transform:
    """Return a :class:`Transform` migrating records from ``start`` to ``end``.

    Args:
        start: Version a record must declare to be accepted.
        end: Version stamped on the migrated record.
        transformer: Function producing the migrated payload. It may return a
            bare record or a result, and may raise.
    """
    return Transform(start=start, end=end, transformer=transformer)


class TransformChain:
    """Immutable, validated sequence of connected transforms.

    Instances are created through :func:`create_transform_chain` or the
    chain's own :meth:`add`, :meth:`from_version` and :meth:`to_version`,
    each of which returns a new chain.
    """

    __slots__ = ("_transforms",)

    def __init__(self, transforms: tuple[Transform, ...]) -> None:
        self._transforms = transforms

    def __len__(self) -> int:
        return len(self._transforms)

    def __iter__(self) -> Iterator[Transform]:
        return iter(self._transforms)

    def __repr__(self) -> str:
        return f"TransformChain({self.start} -> {self.end}, steps={len(self)})"

    @property
    def transforms(self) -> tuple[Transform, ...]:
        """Return the transforms in application order."""
        return self._transforms

    @property
    def start(self) -> Version:
        """Return the version the chain accepts."""
        return self._transforms[0].start

    @property
    def end(self) -> Version:
        """Return the version the chain produces."""
        return self._transforms[-1].end

    def add(self, transform: Transform) -> Result["TransformChain"]:
        """Return a new chain extended by ``transform`` if it connects."""
        return _extend(self._transforms, (transform,))

    def from_version(self, version: Version) -> Result["TransformChain"]:
        """Return the sub-chain starting at the first transform from ``version``."""
        sliced = slice_from(self._transforms, lambda t: t.start == version)
        if isinstance(sliced, Failure):
            return failure(
                "Migration chain does not have a transform to start from for "
                "analyses of this type",
                version,
                sliced,
            )
        return _extend(tuple(sliced.data), ())

    def to_version(self, version: Version) -> Result["TransformChain"]:
        """Return the sub-chain ending with the first transform to ``version``."""
        sliced = slice_to(self._transforms, lambda t: t.end == version, inclusive=True)
        if isinstance(sliced, Failure):
            return failure(
                "Migration chain does not have a transform to end on for "
                "analyses of this type",
                version,
                sliced,
            )
        return _extend(tuple(sliced.data), ())

    def apply(self, record: Record) -> Result[Record]:
        """Migrate a copy of ``record`` through every transform in order."""
        return reduce(
            lambda acc, transform: with_result(transform.apply)(acc),
            self._transforms,
            as_result(deepcopy(record)),
        )


def _extend(
    base: tuple[Transform, ...], transforms: tuple[Transform, ...]
) -> Result[TransformChain]:
    chain = list(base)
    for index, transform in enumerate(transforms):
        expected = chain[-1].end if chain else transform.start
        if transform.start != expected:
            return failure(
                f"Transform provided at index {len(base) + index} does not connect "
                f"to the transform chain. Received: {transform.start} - Expected: {expected}"
            )
        chain.append(transform)
    if not chain:
        return failure("A transform chain requires at least one transform")
    return success(TransformChain(tuple(chain)))


def create_transform_chain(*transforms: Transform) -> Result[TransformChain]:
    """Validate ``transforms`` and return them as a :class:`TransformChain`.

    Returns:
        A success holding the chain, or a failure naming the first transform
        whose start does not equal the previous transform's end.
    """
    return _extend((), transforms)


__all__ = [
    "Record",
    "Transform",
    "TransformChain",
    "Transformer",
    "Version",
    "create_transform_chain",
    "define_transform",
]
