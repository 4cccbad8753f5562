"""Versioned record migrations."""

from .transform import (
    Record,
    Transform,
    TransformChain,
    Version,
    create_transform_chain,
    define_transform,
)

__all__ = [
    "Record",
    "Transform",
    "TransformChain",
    "Version",
    "create_transform_chain",
    "define_transform",
]
