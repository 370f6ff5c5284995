"""Geometry of embedding spaces - similarity and 3D projection.

Key concepts:
- Similarity kernel: dot, magnitude, cosine, Euclidean distance
- ProjectionEngine: top-3 principal axes by power iteration with deflation
- ProjectionResult: points aligned 1:1 with the present keys of a snapshot

Every projection is a full recomputation from an immutable EmbeddingSet.
"""

from .config import (
    ComparisonConfig,
    ProjectionConfig,
    SOURCE_SCALES,
    DEFAULT_SCALE,
    scale_for_source,
)
from .similarity import (
    dot,
    magnitude,
    cosine_similarity,
    euclidean_distance,
    pairwise_cosine,
    compare,
    similarity_band,
    SimilarityBand,
    VectorComparison,
)
from .projection import (
    ProjectionEngine,
    ProjectionResult,
    PrincipalAxis,
    project,
)

__all__ = [
    "ComparisonConfig",
    "ProjectionConfig",
    "SOURCE_SCALES",
    "DEFAULT_SCALE",
    "scale_for_source",
    "dot",
    "magnitude",
    "cosine_similarity",
    "euclidean_distance",
    "pairwise_cosine",
    "compare",
    "similarity_band",
    "SimilarityBand",
    "VectorComparison",
    "ProjectionEngine",
    "ProjectionResult",
    "PrincipalAxis",
    "project",
]
