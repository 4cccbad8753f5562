# SPDX-License-Identifier: MIT
"""Migration chain for ``consensus_sequence`` analyses.

The production chain ends at version 13. The development chain adds the
13 to 14 step, which is not deployed to production yet.
"""

from __future__ import annotations

from typing import Literal

import logfire

from core.result import Failure
from migration.transform import Transform, TransformChain, create_transform_chain

from .constants import CS_NAME
from .schema_steps import (
    cs4to5,
    cs6to7,
    cs7to8,
    cs8to9,
    cs9to10,
    cs10to11,
    cs11to12,
    cs13to14,
)
from .v03_to_v04 import cs3to4
from .v05_to_v06 import cs5to6
from .v12_to_v13 import cs12to13

ChainVariant = Literal["prod", "dev"]

PROD_TRANSFORMS: tuple[Transform, ...] = (
    cs3to4,
    cs4to5,
    cs5to6,
    cs6to7,
    cs7to8,
    cs8to9,
    cs9to10,
    cs10to11,
    cs11to12,
    cs12to13,
)
DEV_TRANSFORMS: tuple[Transform, ...] = (*PROD_TRANSFORMS, cs13to14)


def build_migration_chain(variant: ChainVariant = "prod") -> TransformChain:
    """Return the validated chain for ``variant``.

    Raises:
        RuntimeError: If the transforms do not form a connected chain.
    """
    transforms = DEV_TRANSFORMS if variant == "dev" else PROD_TRANSFORMS
    chain = create_transform_chain(*transforms)
    if isinstance(chain, Failure):
        raise RuntimeError(
            " -- ".join(["Unable to initialize migration chain", *chain.errors])
        )
    logfire.debug(
        "Built migration chain",
        variant=variant,
        start=str(chain.data.start),
        end=str(chain.data.end),
    )
    return chain.data


__all__ = [
    "CS_NAME",
    "ChainVariant",
    "DEV_TRANSFORMS",
    "PROD_TRANSFORMS",
    "build_migration_chain",
]
