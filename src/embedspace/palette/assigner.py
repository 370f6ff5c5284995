"""Color assignment driven by full-dimension semantic similarity.

Similarity is measured on the full-dimension embeddings, not on the lossy 3D
projection. Assignment always terminates: after max_retries rejected
candidates the hue falls back to a hash of the key.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple
import colorsys
import hashlib
import logging
import numpy as np

from ..core.types import EmbeddingEntry, EmbeddingSet
from ..geometry.similarity import cosine_similarity
from .config import ColorConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HueColor:
    """HSV color; hue in degrees [0, 360), saturation and value in [0, 1]."""
    hue: float
    saturation: float = 0.65
    value: float = 0.9

    def to_rgb(self) -> Tuple[int, int, int]:
        r, g, b = colorsys.hsv_to_rgb((self.hue % 360.0) / 360.0, self.saturation, self.value)
        return (round(r * 255), round(g * 255), round(b * 255))

    def to_int(self) -> int:
        """Packed 0xRRGGBB."""
        r, g, b = self.to_rgb()
        return (r << 16) | (g << 8) | b

    def to_hex(self) -> str:
        return f"#{self.to_int():06x}"


def hue_distance(a: float, b: float) -> float:
    """Circular distance between two hues in degrees (0..180)."""
    d = abs(a - b) % 360.0
    return min(d, 360.0 - d)


def _key_digest(key: str) -> int:
    # md5 keeps hues stable across processes, unlike hash()
    return int(hashlib.md5(key.encode("utf-8")).hexdigest(), 16)


def stable_hue(key: str) -> float:
    """Deterministic fallback hue for a key."""
    return float(_key_digest(key) % 360)


class ColorAssigner:
    """Assigns related-but-distinct hues after every re-projection.

    Usage:
        assigner = ColorAssigner()
        colors = assigner.assign_colors(embeddings, existing=previous_colors)
    """

    def __init__(self, config: Optional[ColorConfig] = None):
        self.config = config or ColorConfig()
        self.config.validate()

    def assign_colors(
        self,
        embeddings: EmbeddingSet,
        existing: Optional[Mapping[str, HueColor]] = None,
        fixed: Optional[Mapping[str, HueColor]] = None,
    ) -> Dict[str, HueColor]:
        """Color every present entry of the set.

        Args:
            embeddings: Snapshot just projected; pending entries get no color
            existing: Colors from earlier passes, kept for keys still present
            fixed: Manually pinned colors, never changed

        Returns:
            Dict of key -> HueColor in set order
        """
        existing = existing or {}
        fixed = fixed or {}
        present = embeddings.present()

        colors: Dict[str, HueColor] = {}
        for entry in present:
            if entry.key in fixed:
                colors[entry.key] = fixed[entry.key]
            elif entry.key in existing:
                colors[entry.key] = existing[entry.key]

        vectors = {entry.key: entry.vector for entry in present}
        new_count = 0
        for entry in present:
            if entry.key in colors:
                continue
            colors[entry.key] = self._pick_color(entry, colors, vectors)
            new_count += 1

        logger.debug("Assigned %d new color(s), kept %d", new_count, len(present) - new_count)
        return {entry.key: colors[entry.key] for entry in present}

    def nearest_colored(
        self,
        entry: EmbeddingEntry,
        colors: Mapping[str, HueColor],
        vectors: Mapping[str, np.ndarray],
    ) -> List[Tuple[str, float]]:
        """Top-k colored neighbours by cosine similarity.

        Ordered by similarity (descending), ties by key (ascending).
        """
        scored = [
            (key, cosine_similarity(entry.vector, vectors[key]))
            for key in colors
            if key != entry.key and key in vectors
        ]
        scored.sort(key=lambda item: (-item[1], item[0]))
        return scored[:self.config.neighbor_count]

    def _pick_color(
        self,
        entry: EmbeddingEntry,
        colors: Mapping[str, HueColor],
        vectors: Mapping[str, np.ndarray],
    ) -> HueColor:
        cfg = self.config
        neighbors = self.nearest_colored(entry, colors, vectors)
        if not neighbors:
            # First colored entry
            return self._make(cfg.seed_hue_degrees % 360.0)

        used = [c.hue for c in colors.values()]
        rng = np.random.default_rng(_key_digest(entry.key) % (2 ** 63))
        low = min(cfg.min_hue_distance_degrees, cfg.hue_offset_range_degrees)

        for attempt in range(cfg.max_retries):
            anchor_key, _ = neighbors[attempt % len(neighbors)]
            magnitude = rng.uniform(low, cfg.hue_offset_range_degrees)
            sign = 1.0 if rng.random() < 0.5 else -1.0
            candidate = (colors[anchor_key].hue + sign * magnitude) % 360.0
            if all(hue_distance(candidate, h) >= cfg.min_hue_distance_degrees for h in used):
                return self._make(candidate)

        return self._make(self._fallback_hue(entry.key))

    def _fallback_hue(self, key: str) -> float:
        logger.debug("No free hue near neighbours of %r; using hash fallback", key)
        return stable_hue(key)

    def _make(self, hue: float) -> HueColor:
        return HueColor(hue=hue, saturation=self.config.saturation, value=self.config.value)
