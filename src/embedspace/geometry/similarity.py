"""Vector similarity kernel.

Pure functions used on both full-dimension embeddings and projected 3D
coordinates. Inputs of different lengths are a programming error and raise
DimensionMismatchError; nothing is truncated or padded.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple
import math
import numpy as np

from ..core.exceptions import DimensionMismatchError
from ..core.types import VectorLike
from .config import ComparisonConfig


def _pair(a: VectorLike, b: VectorLike) -> Tuple[np.ndarray, np.ndarray]:
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.ndim != 1 or vb.ndim != 1:
        raise ValueError(f"Expected 1-D vectors, got shapes {va.shape} and {vb.shape}")
    if va.shape[0] != vb.shape[0]:
        raise DimensionMismatchError(
            f"Vector lengths differ: {va.shape[0]} vs {vb.shape[0]}",
            expected=va.shape[0],
            actual=vb.shape[0],
        )
    return va, vb


def dot(a: VectorLike, b: VectorLike) -> float:
    va, vb = _pair(a, b)
    return float(np.dot(va, vb))


def _rescaled(v: np.ndarray) -> Tuple[np.ndarray, float]:
    """Split v into (v / peak, peak) so norms neither overflow nor underflow."""
    peak = float(np.max(np.abs(v))) if v.size else 0.0
    if peak == 0.0 or not math.isfinite(peak):
        return v, 1.0
    return v / peak, peak


def magnitude(a: VectorLike) -> float:
    v, peak = _rescaled(np.asarray(a, dtype=np.float64))
    return float(np.linalg.norm(v) * peak)


def cosine_similarity(a: VectorLike, b: VectorLike) -> float:
    """Cosine of the angle between a and b; 0.0 when either is a zero vector."""
    va, vb = _pair(a, b)
    va, _ = _rescaled(va)
    vb, _ = _rescaled(vb)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    cos = np.dot(va / norm_a, vb / norm_b)
    if not np.isfinite(cos):
        return 0.0
    # Rounding can push |cos| a hair past 1
    return float(np.clip(cos, -1.0, 1.0))


def euclidean_distance(a: VectorLike, b: VectorLike) -> float:
    va, vb = _pair(a, b)
    return float(np.linalg.norm(va - vb))


def pairwise_cosine(matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity between every pair of rows (N x N).

    Rows with zero magnitude have similarity 0 with everything, themselves
    included.
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.ndim != 2:
        raise ValueError(f"Expected a 2-D matrix, got shape {matrix.shape}")
    if matrix.size:
        peaks = np.max(np.abs(matrix), axis=1)
        peaks = np.where((peaks > 0) & np.isfinite(peaks), peaks, 1.0)
        matrix = matrix / peaks[:, None]
    norms = np.linalg.norm(matrix, axis=1)
    safe = np.where(norms > 0, norms, 1.0)
    unit = matrix / safe[:, None]
    sims = unit @ unit.T
    zero = norms == 0
    sims[zero, :] = 0.0
    sims[:, zero] = 0.0
    return np.clip(sims, -1.0, 1.0)


class SimilarityBand(Enum):
    """Coarse similarity classes used by comparison views."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class VectorComparison:
    """All pairwise metrics between two vectors."""
    cosine: float
    euclidean: float
    dot: float
    magnitude_a: float
    magnitude_b: float
    band: SimilarityBand

    def to_dict(self) -> dict:
        return {
            "cosine": self.cosine,
            "euclidean": self.euclidean,
            "dot": self.dot,
            "magnitude_a": self.magnitude_a,
            "magnitude_b": self.magnitude_b,
            "band": self.band.value,
        }


def similarity_band(cosine: float, config: Optional[ComparisonConfig] = None) -> SimilarityBand:
    config = config or ComparisonConfig()
    if cosine > config.high_threshold:
        return SimilarityBand.HIGH
    if cosine > config.medium_threshold:
        return SimilarityBand.MEDIUM
    return SimilarityBand.LOW


def compare(
    a: VectorLike,
    b: VectorLike,
    config: Optional[ComparisonConfig] = None,
) -> VectorComparison:
    """Compare two vectors the way the comparison panel reports them."""
    cos = cosine_similarity(a, b)
    return VectorComparison(
        cosine=cos,
        euclidean=euclidean_distance(a, b),
        dot=dot(a, b),
        magnitude_a=magnitude(a),
        magnitude_b=magnitude(b),
        band=similarity_band(cos, config),
    )
