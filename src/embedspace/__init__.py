"""embedspace - stable 3D layouts for semantic embedding collections.

Turns an ordered set of high-dimensional embeddings (some possibly still
pending) into 3D coordinates via power iteration with deflation, and gives
each entry a color related to its nearest semantic neighbour.

Modules:
- core: EmbeddingSet snapshots, ProjectedPoint, errors and warnings
- geometry: similarity kernel and the projection engine
- palette: neighbour-related color assignment
- space: generation-tracked orchestration for interactive callers
"""

from .core import (
    EmbeddingEntry,
    EmbeddingSet,
    ProjectedPoint,
    EmbedSpaceError,
    EmptyInputError,
    DimensionMismatchError,
    InvalidScaleError,
    AlignmentError,
    ProjectionWarning,
    NumericDegeneracyWarning,
    NonConvergenceWarning,
)
from .geometry import (
    ComparisonConfig,
    ProjectionConfig,
    ProjectionEngine,
    ProjectionResult,
    PrincipalAxis,
    project,
    cosine_similarity,
    euclidean_distance,
    dot,
    magnitude,
    compare,
)
from .palette import ColorAssigner, ColorConfig, HueColor
from .space import VectorSpace, SpaceLayout

__version__ = "0.1.0"

__all__ = [
    "EmbeddingEntry",
    "EmbeddingSet",
    "ProjectedPoint",
    "EmbedSpaceError",
    "EmptyInputError",
    "DimensionMismatchError",
    "InvalidScaleError",
    "AlignmentError",
    "ProjectionWarning",
    "NumericDegeneracyWarning",
    "NonConvergenceWarning",
    "ComparisonConfig",
    "ProjectionConfig",
    "ProjectionEngine",
    "ProjectionResult",
    "PrincipalAxis",
    "project",
    "cosine_similarity",
    "euclidean_distance",
    "dot",
    "magnitude",
    "compare",
    "ColorAssigner",
    "ColorConfig",
    "HueColor",
    "VectorSpace",
    "SpaceLayout",
]
