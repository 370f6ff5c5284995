"""Vector space - caller-side owner of embeddings, layout and colors.

The space never patches positions. Every insertion, deletion or source
switch produces a new EmbeddingSet snapshot and a new generation number;
layouts are computed from a snapshot (possibly on a worker thread) and
committed back only if no newer generation has appeared in the meantime.
"""

from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple
import asyncio
import logging

from ..core.exceptions import EmptyInputError
from ..core.types import EmbeddingSet, ProjectedPoint, VectorLike
from ..geometry.config import ProjectionConfig, SOURCE_SCALES, DEFAULT_SCALE
from ..geometry.projection import ProjectionEngine, ProjectionResult
from ..palette.assigner import ColorAssigner, HueColor
from ..palette.config import ColorConfig

logger = logging.getLogger(__name__)


@dataclass
class SpaceLayout:
    """Positions and colors for one generation of the space."""
    generation: int
    source: Optional[str]
    scale: float
    projection: Optional[ProjectionResult] = None   # None when nothing is present
    colors: Dict[str, HueColor] = field(default_factory=dict)
    pending: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.projection is None or len(self.projection) == 0

    @property
    def points(self) -> List[ProjectedPoint]:
        return [] if self.projection is None else list(self.projection.points)

    def position(self, key: str) -> Optional[Tuple[float, float, float]]:
        for point in self.points:
            if point.key == key:
                return point.as_tuple()
        return None

    def items(self) -> Iterator[Tuple[str, Tuple[float, float, float], HueColor]]:
        """(key, position, color) for every placed entry, in set order."""
        for point in self.points:
            yield point.key, point.as_tuple(), self.colors[point.key]


class VectorSpace:
    """Holds the current embedding snapshot and its latest committed layout.

    Usage:
        space = VectorSpace(source="minilm")
        space.set_embedding("cat", cat_vec)
        space.set_embedding("dog", dog_vec)
        layout = space.rebuild()

    Or off the main thread:
        generation, snapshot = space.snapshot()
        layout = space.compute_layout(generation, snapshot)   # worker
        space.commit(layout)                                   # False if stale

    Thread-safe via Lock for all state mutations.
    """

    def __init__(
        self,
        source: str = "minilm",
        projection_config: Optional[ProjectionConfig] = None,
        color_config: Optional[ColorConfig] = None,
        scales: Optional[Mapping[str, float]] = None,
    ):
        self.engine = ProjectionEngine(projection_config)
        self.assigner = ColorAssigner(color_config)
        self._scales: Dict[str, float] = dict(SOURCE_SCALES)
        if scales:
            self._scales.update(scales)

        self._lock = Lock()
        self._embeddings = EmbeddingSet(source=source)
        self._generation = 0
        self._fixed_colors: Dict[str, HueColor] = {}
        self._layout = SpaceLayout(generation=0, source=source, scale=self.scale_for(source))

    # ------------------------------------------------------------------
    # Snapshot edits
    # ------------------------------------------------------------------

    @property
    def source(self) -> Optional[str]:
        return self._embeddings.source

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def embeddings(self) -> EmbeddingSet:
        return self._embeddings

    @property
    def layout(self) -> SpaceLayout:
        """Most recently committed layout."""
        return self._layout

    def scale_for(self, source: Optional[str]) -> float:
        return self._scales.get(source, DEFAULT_SCALE)

    def set_embedding(self, key: str, vector: Optional[VectorLike]) -> int:
        """Insert or replace an entry; None marks it pending. Returns the new generation."""
        with self._lock:
            return self._replace(self._embeddings.with_entry(key, vector))

    def remove(self, key: str) -> int:
        """Delete an entry. Missing keys raise KeyError."""
        with self._lock:
            self._fixed_colors.pop(key, None)
            return self._replace(self._embeddings.without(key))

    def clear(self, keys: Optional[Iterable[str]] = None) -> int:
        """Remove the given keys, or every entry when keys is None.

        Unknown keys are ignored. Returns the number of entries removed; the
        generation only advances when something was removed.
        """
        with self._lock:
            doomed = set(self._embeddings.keys if keys is None else keys)
            kept = [e for e in self._embeddings if e.key not in doomed]
            removed = len(self._embeddings) - len(kept)
            if removed == 0:
                return 0
            for key in doomed:
                self._fixed_colors.pop(key, None)
            self._replace(EmbeddingSet(kept, source=self._embeddings.source))
            logger.info("Cleared %d entries (generation %d)", removed, self._generation)
            return removed

    def switch_source(self, source: str, embeddings: Mapping[str, Optional[VectorLike]]) -> int:
        """Replace every vector with ones from another embedding source.

        Current keys keep their order; keys missing from `embeddings` become
        pending so vectors from two sources are never mixed. Keys only in
        `embeddings` are appended.
        """
        with self._lock:
            current = self._embeddings.keys
            pairs = [(key, embeddings.get(key)) for key in current]
            pairs.extend((key, vec) for key, vec in embeddings.items() if key not in self._embeddings)
            logger.info(
                "Switching source %r -> %r (%d entries)", self._embeddings.source, source, len(pairs)
            )
            return self._replace(EmbeddingSet.from_pairs(pairs, source=source))

    def pin_color(self, key: str, color: HueColor) -> None:
        """Fix a key's color; it is never reassigned."""
        with self._lock:
            self._fixed_colors[key] = color

    def unpin_color(self, key: str) -> None:
        with self._lock:
            self._fixed_colors.pop(key, None)

    def _replace(self, embeddings: EmbeddingSet) -> int:
        """Swap in a new snapshot (called under lock)."""
        self._embeddings = embeddings
        self._generation += 1
        return self._generation

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def snapshot(self) -> Tuple[int, EmbeddingSet]:
        with self._lock:
            return self._generation, self._embeddings

    def compute_layout(self, generation: int, embeddings: EmbeddingSet) -> SpaceLayout:
        """Project and color a snapshot. Does not touch the committed layout."""
        scale = self.scale_for(embeddings.source)
        layout = SpaceLayout(
            generation=generation,
            source=embeddings.source,
            scale=scale,
            pending=embeddings.pending_keys,
        )
        try:
            layout.projection = self.engine.project(embeddings, scale)
        except EmptyInputError:
            logger.debug("Generation %d has no present vectors; empty layout", generation)
            return layout

        with self._lock:
            existing = dict(self._layout.colors)
            fixed = dict(self._fixed_colors)
        layout.colors = self.assigner.assign_colors(embeddings, existing=existing, fixed=fixed)
        return layout

    def commit(self, layout: SpaceLayout) -> bool:
        """Adopt a layout if it belongs to the current generation (last writer wins)."""
        with self._lock:
            if layout.generation != self._generation:
                logger.info(
                    "Discarding stale layout for generation %d (current %d)",
                    layout.generation, self._generation,
                )
                return False
            self._layout = layout
            return True

    def rebuild(self) -> SpaceLayout:
        """Recompute the whole layout synchronously and commit it."""
        generation, embeddings = self.snapshot()
        layout = self.compute_layout(generation, embeddings)
        self.commit(layout)
        return layout

    async def rebuild_async(self) -> Optional[SpaceLayout]:
        """Recompute on a worker thread; returns None if superseded before commit."""
        generation, embeddings = self.snapshot()
        layout = await asyncio.to_thread(self.compute_layout, generation, embeddings)
        if self.commit(layout):
            return layout
        return None
