"""Caller-side orchestration: snapshots, generations and committed layouts."""

from .space import VectorSpace, SpaceLayout

__all__ = [
    "VectorSpace",
    "SpaceLayout",
]
