"""3D projection of embedding sets by power iteration with deflation.

Every call is a full recomputation from the snapshot it is given: the column
mean, the principal axes and the coordinates are all rebuilt, so each point's
position depends on the whole set and nothing leaks between calls.

Conventions:
- Start vectors are drawn from numpy's default generator seeded by
  (SEED_BASE, axis index, sample count), never by wall-clock time.
- Axis sign: the largest-magnitude component is made positive (ties go to
  the lowest index, as numpy.argmax returns it).
- Missing axes (rank < 3) are padded with standard basis
  directions orthogonalized against the axes actually found.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging
import math
import numpy as np

from ..core.exceptions import (
    AlignmentError,
    DimensionMismatchError,
    EmptyInputError,
    InvalidScaleError,
    NonConvergenceWarning,
    NumericDegeneracyWarning,
    ProjectionWarning,
)
from ..core.types import EmbeddingEntry, EmbeddingSet, ProjectedPoint
from .config import N_COMPONENTS, ProjectionConfig

logger = logging.getLogger(__name__)

SEED_BASE = 384
# Basis vectors with less than this much norm left after orthogonalization
# are considered dependent on the axes already found.
_PADDING_MIN_NORM = 1e-6


@dataclass
class PrincipalAxis:
    """One recovered direction of maximal variance."""
    index: int
    direction: np.ndarray
    eigenvalue: float = 0.0
    iterations: int = 0
    converged: bool = True
    fallback: bool = False  # Padding direction, not an eigenvector


@dataclass
class ProjectionResult:
    """Projected points aligned 1:1 with the present keys of the input set."""
    points: List[ProjectedPoint]
    axes: List[PrincipalAxis]
    scale: float
    source: Optional[str] = None
    total_variance: float = 0.0

    # Share of total variance carried by each axis
    explained_variance: Tuple[float, ...] = ()

    # Non-fatal conditions observed during this call
    warnings: List[ProjectionWarning] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    @property
    def keys(self) -> List[str]:
        return [p.key for p in self.points]

    @property
    def coordinates(self) -> np.ndarray:
        """Stacked coordinates (N x 3)."""
        if not self.points:
            return np.zeros((0, 3))
        return np.array([p.as_tuple() for p in self.points], dtype=np.float64)

    @property
    def converged(self) -> bool:
        return not any(isinstance(w, NonConvergenceWarning) for w in self.warnings)

    @property
    def degenerate(self) -> bool:
        return any(isinstance(w, NumericDegeneracyWarning) for w in self.warnings)

    def as_dict(self) -> Dict[str, Tuple[float, float, float]]:
        return {p.key: p.as_tuple() for p in self.points}


def _orthogonalize(v: np.ndarray, basis: List[np.ndarray]) -> np.ndarray:
    """Remove the components of v along each (unit) basis vector.

    Two Gram-Schmidt passes keep the result orthogonal to machine precision.
    """
    for _ in range(2):
        for b in basis:
            v = v - np.dot(v, b) * b
    return v


def _fix_sign(v: np.ndarray) -> np.ndarray:
    idx = int(np.argmax(np.abs(v)))
    if v[idx] < 0:
        return -v
    return v


class ProjectionEngine:
    """Projects embedding sets to 3D by power iteration with deflation.

    The engine holds only its configuration. Independent calls can run
    concurrently as long as each gets its own EmbeddingSet snapshot.

    Usage:
        engine = ProjectionEngine(ProjectionConfig.for_source("minilm"))
        result = engine.project(embeddings)
        for point in result.points:
            place(point.key, point.as_tuple())
    """

    def __init__(self, config: Optional[ProjectionConfig] = None):
        self.config = config or ProjectionConfig()
        self.config.validate()

    def project(self, embeddings: EmbeddingSet, scale: Optional[float] = None) -> ProjectionResult:
        """Project every present vector of the set to 3D.

        Args:
            embeddings: Snapshot to project; pending entries are skipped
            scale: Coordinate multiplier; defaults to config.scale

        Returns:
            ProjectionResult whose points follow the present-entry order

        Raises:
            InvalidScaleError: scale is not positive and finite
            EmptyInputError: no entry has a vector
            DimensionMismatchError: vectors have different lengths
            AlignmentError: output could not be matched to the present keys
        """
        scale = self._check_scale(scale)
        present = embeddings.present()
        if not present:
            raise EmptyInputError(
                f"Nothing to project: {len(embeddings)} entries, none with a vector"
            )

        matrix = self._stack(present)
        warnings: List[ProjectionWarning] = []

        finite_rows = np.isfinite(matrix).all(axis=1)
        if not finite_rows.all():
            bad = [present[i].key for i in np.flatnonzero(~finite_rows)]
            self._record(warnings, NumericDegeneracyWarning(
                f"Non-finite values in {len(bad)} vector(s) {bad[:5]}; placed at origin"
            ))

        usable = matrix[finite_rows]
        n_samples, dim = usable.shape

        # Iterate on data scaled to unit peak so sums of squares stay in range
        peak = float(np.max(np.abs(usable))) if usable.size else 0.0
        if peak == 0.0:
            peak = 1.0
        if n_samples > 0:
            # Mean is recomputed from this snapshot only
            normalized = usable / peak
            centered = normalized - normalized.mean(axis=0)
        else:
            centered = np.zeros((0, dim))

        unit_variance = float(np.sum(centered * centered))
        axes = self._find_axes(centered, unit_variance, warnings)
        if unit_variance > 0:
            shares = tuple(a.eigenvalue / unit_variance for a in axes)
        else:
            shares = tuple(0.0 for _ in axes)
        for axis in axes:
            axis.eigenvalue = axis.eigenvalue * peak * peak

        coords = np.zeros((len(present), len(axes)))
        if n_samples > 0:
            basis = np.vstack([a.direction for a in axes])
            coords[finite_rows] = (centered @ basis.T) * peak
        coords = coords * scale

        bad_coords = ~np.isfinite(coords).all(axis=1)
        if bad_coords.any():
            self._record(warnings, NumericDegeneracyWarning(
                f"{int(bad_coords.sum())} projected point(s) were non-finite; placed at origin"
            ))
            coords[bad_coords] = 0.0

        points = self._align(present, coords)

        logger.debug(
            "Projected %d of %d entries (dim=%d, scale=%.3g, warnings=%d)",
            len(points), len(embeddings), dim, scale, len(warnings),
        )

        return ProjectionResult(
            points=points,
            axes=axes,
            scale=scale,
            source=embeddings.source,
            total_variance=unit_variance * peak * peak,
            explained_variance=shares,
            warnings=warnings,
        )

    def _check_scale(self, scale: Optional[float]) -> float:
        if scale is None:
            scale = self.config.scale
        try:
            scale = float(scale)
        except (TypeError, ValueError):
            raise InvalidScaleError(f"Scale must be a number, got {scale!r}")
        if not (math.isfinite(scale) and scale > 0):
            raise InvalidScaleError(f"Scale must be positive and finite, got {scale}")
        return scale

    def _stack(self, present: List[EmbeddingEntry]) -> np.ndarray:
        expected = present[0].dimension
        for entry in present:
            if entry.dimension != expected:
                raise DimensionMismatchError(
                    f"Vector for {entry.key!r} has length {entry.dimension}, expected {expected}",
                    expected=expected,
                    actual=entry.dimension,
                )
        return np.vstack([entry.vector for entry in present]).astype(np.float64)

    def _align(self, present: List[EmbeddingEntry], coords: np.ndarray) -> List[ProjectedPoint]:
        if coords.shape[0] != len(present):
            raise AlignmentError(
                f"Projected {coords.shape[0]} rows for {len(present)} present entries"
            )
        return [
            ProjectedPoint(entry.key, float(row[0]), float(row[1]), float(row[2]))
            for entry, row in zip(present, coords)
        ]

    def _find_axes(
        self,
        centered: np.ndarray,
        total_variance: float,
        warnings: List[ProjectionWarning],
    ) -> List[PrincipalAxis]:
        """Recover N_COMPONENTS axes, padding any that are missing."""
        k = N_COMPONENTS
        n_samples, dim = centered.shape
        axes: List[PrincipalAxis] = []

        if n_samples > 0 and total_variance > 0 and math.isfinite(total_variance):
            for i in range(k):
                axis = self._power_iterate(centered, axes, i, total_variance, warnings)
                if axis is None:
                    break
                axes.append(axis)

        if len(axes) < k:
            self._record(warnings, NumericDegeneracyWarning(
                f"Only {len(axes)} of {k} axes carry variance "
                f"({n_samples} usable sample(s)); padding with basis directions",
                axis_index=len(axes),
            ))
            axes = self._pad_axes(axes, dim, k)

        return axes

    def _power_iterate(
        self,
        centered: np.ndarray,
        found: List[PrincipalAxis],
        axis_index: int,
        total_variance: float,
        warnings: List[ProjectionWarning],
    ) -> Optional[PrincipalAxis]:
        """Find the dominant direction orthogonal to the axes already found.

        Applies v <- M^T (M v) without forming the covariance matrix.
        Returns None when no variance is left in the orthogonal complement.
        """
        n_samples, dim = centered.shape
        previous = [a.direction for a in found]
        if len(previous) >= dim:
            return None

        rng = np.random.default_rng([SEED_BASE, axis_index, n_samples])
        v = _orthogonalize(rng.standard_normal(dim), previous)
        norm = np.linalg.norm(v)
        if norm < _PADDING_MIN_NORM:
            return None
        v = v / norm

        floor = self.config.degeneracy_threshold * total_variance
        converged = False
        change = float("inf")
        iterations = 0
        for iterations in range(1, self.config.max_iterations + 1):
            w = centered.T @ (centered @ v)
            w = _orthogonalize(w, previous)
            norm = np.linalg.norm(w)
            if not norm > floor:
                return None
            w = w / norm
            change = 1.0 - abs(float(np.dot(v, w)))
            v = w
            if change < self.config.tolerance:
                converged = True
                break

        v = _fix_sign(v)
        mv = centered @ v
        eigenvalue = float(np.dot(mv, mv) / np.dot(v, v))

        if not converged:
            self._record(warnings, NonConvergenceWarning(
                f"Axis {axis_index} did not converge in {iterations} iterations "
                f"(last change {change:.3e}); using best estimate",
                axis_index=axis_index,
                residual=change,
            ))

        return PrincipalAxis(
            index=axis_index,
            direction=v,
            eigenvalue=eigenvalue,
            iterations=iterations,
            converged=converged,
        )

    def _pad_axes(self, axes: List[PrincipalAxis], dim: int, k: int) -> List[PrincipalAxis]:
        axes = list(axes)
        for basis_idx in range(dim):
            if len(axes) >= k:
                break
            e = np.zeros(dim)
            e[basis_idx] = 1.0
            v = _orthogonalize(e, [a.direction for a in axes])
            norm = np.linalg.norm(v)
            if norm < _PADDING_MIN_NORM:
                continue
            axes.append(PrincipalAxis(
                index=len(axes),
                direction=_fix_sign(v / norm),
                fallback=True,
            ))
        # Fewer dimensions than axes: the extra coordinates are always 0
        while len(axes) < k:
            axes.append(PrincipalAxis(index=len(axes), direction=np.zeros(dim), fallback=True))
        return axes

    @staticmethod
    def _record(warnings: List[ProjectionWarning], warning: ProjectionWarning) -> None:
        warnings.append(warning)
        logger.warning("%s: %s", type(warning).__name__, warning)


def project(
    embeddings: EmbeddingSet,
    scale: Optional[float] = None,
    config: Optional[ProjectionConfig] = None,
) -> ProjectionResult:
    """Project an embedding set with a one-off engine."""
    return ProjectionEngine(config).project(embeddings, scale)
