"""Configuration for neighbour-related color assignment."""

from dataclasses import dataclass


@dataclass
class ColorConfig:
    """Tuning constants for the ColorAssigner.

    New entries take a hue near their most similar colored neighbour, but
    never closer than min_hue_distance_degrees to any hue already in use.
    """

    # Candidate search
    max_retries: int = 8                     # Candidates tried before the hash fallback
    min_hue_distance_degrees: float = 12.0   # Circular distance to every assigned hue
    hue_offset_range_degrees: float = 30.0   # Max distance from the neighbour's hue
    neighbor_count: int = 3                  # Colored neighbours considered (k)

    # First-ever color
    seed_hue_degrees: float = 200.0

    # HSV saturation/value shared by every assigned color
    saturation: float = 0.65
    value: float = 0.9

    def validate(self) -> None:
        """Raise ValueError if any setting is out of range."""
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {self.max_retries}")
        if not 0 <= self.min_hue_distance_degrees <= 180:
            raise ValueError(
                f"min_hue_distance_degrees must be in [0, 180], got {self.min_hue_distance_degrees}"
            )
        if not 0 < self.hue_offset_range_degrees <= 180:
            raise ValueError(
                f"hue_offset_range_degrees must be in (0, 180], got {self.hue_offset_range_degrees}"
            )
        if self.neighbor_count < 1:
            raise ValueError(f"neighbor_count must be >= 1, got {self.neighbor_count}")
        if not (0 <= self.saturation <= 1 and 0 <= self.value <= 1):
            raise ValueError("saturation and value must be in [0, 1]")

    @classmethod
    def for_dense_layouts(cls) -> "ColorConfig":
        """Tighter spacing and more retries for spaces with many entries."""
        return cls(
            max_retries=16,
            min_hue_distance_degrees=6.0,
            hue_offset_range_degrees=45.0,
        )
