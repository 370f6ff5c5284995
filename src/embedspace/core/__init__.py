"""Core data types and errors shared by every embedspace module."""

from .types import (
    EmbeddingEntry,
    EmbeddingSet,
    ProjectedPoint,
    as_embedding_vector,
)
from .exceptions import (
    EmbedSpaceError,
    EmptyInputError,
    DimensionMismatchError,
    InvalidScaleError,
    AlignmentError,
    DuplicateKeyError,
    ProjectionWarning,
    NumericDegeneracyWarning,
    NonConvergenceWarning,
)

__all__ = [
    "EmbeddingEntry",
    "EmbeddingSet",
    "ProjectedPoint",
    "as_embedding_vector",
    "EmbedSpaceError",
    "EmptyInputError",
    "DimensionMismatchError",
    "InvalidScaleError",
    "AlignmentError",
    "DuplicateKeyError",
    "ProjectionWarning",
    "NumericDegeneracyWarning",
    "NonConvergenceWarning",
]
