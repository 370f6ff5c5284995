"""Neighbour-related color assignment for projected embeddings."""

from .config import ColorConfig
from .assigner import ColorAssigner, HueColor, hue_distance, stable_hue

__all__ = [
    "ColorConfig",
    "ColorAssigner",
    "HueColor",
    "hue_distance",
    "stable_hue",
]
