"""Configuration for the projection engine."""

from dataclasses import dataclass, replace
from typing import Dict
import math


# Per-source spread compensation. Sources that cluster tightly get more spread.
SOURCE_SCALES: Dict[str, float] = {
    "minilm": 5.0,     # well-distributed, default scale
    "e5small": 8.0,    # clusters tightly
    "bgesmall": 9.0,   # clusters tightest
}
DEFAULT_SCALE = 5.0
N_COMPONENTS = 3


def scale_for_source(source: str) -> float:
    """Scale constant for an embedding source; unknown sources get the default."""
    return SOURCE_SCALES.get(source, DEFAULT_SCALE)


@dataclass
class ProjectionConfig:
    """Configuration for 3D projection by power iteration.

    Every call to the engine is a full recomputation; nothing here is
    cached between calls.
    """

    # Power iteration
    max_iterations: int = 100             # Cap per axis before flagging non-convergence
    tolerance: float = 1e-10              # Stop when 1 - |cos(prev, next)| falls below this
    degeneracy_threshold: float = 1e-12   # ||M^T M v|| below this x total variance: nothing left

    # Output
    scale: float = DEFAULT_SCALE          # Multiplier applied to every coordinate

    def validate(self) -> None:
        """Raise ValueError if any setting is out of range."""
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if not self.tolerance > 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if not self.degeneracy_threshold > 0:
            raise ValueError(
                f"degeneracy_threshold must be positive, got {self.degeneracy_threshold}"
            )
        if not (math.isfinite(self.scale) and self.scale > 0):
            raise ValueError(f"scale must be positive and finite, got {self.scale}")

    def with_scale(self, scale: float) -> "ProjectionConfig":
        return replace(self, scale=scale)

    @classmethod
    def for_source(cls, source: str) -> "ProjectionConfig":
        """Preset with the scale constant matching an embedding source."""
        return cls(scale=scale_for_source(source))

    @classmethod
    def for_testing(cls) -> "ProjectionConfig":
        """Unit scale so coordinates equal raw projections."""
        return cls(scale=1.0)


@dataclass
class ComparisonConfig:
    """Cosine thresholds splitting pairwise comparisons into bands."""

    high_threshold: float = 0.7     # Above this: high similarity
    medium_threshold: float = 0.3   # Above this (and not high): medium

    def validate(self) -> None:
        """Raise ValueError if the thresholds are out of order or range."""
        for name in ("high_threshold", "medium_threshold"):
            value = getattr(self, name)
            if not -1.0 <= value <= 1.0:
                raise ValueError(f"{name} must lie in [-1, 1], got {value}")
        if self.medium_threshold > self.high_threshold:
            raise ValueError("medium_threshold must not exceed high_threshold")
