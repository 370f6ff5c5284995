"""Embedding snapshots and projected points.

An EmbeddingSet is the single structure pairing each key with its optional
vector. It is immutable: every edit returns a new set, so a snapshot handed
to the projection engine can never change underneath it.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union
import numpy as np

from .exceptions import DuplicateKeyError


VectorLike = Union[Sequence[float], np.ndarray]


def as_embedding_vector(values: VectorLike) -> np.ndarray:
    """Copy values into a read-only 1-D float64 array."""
    vector = np.array(values, dtype=np.float64)
    if vector.ndim != 1:
        raise ValueError(f"Embedding vector must be 1-D, got shape {vector.shape}")
    vector.setflags(write=False)
    return vector


@dataclass(frozen=True, eq=False)
class EmbeddingEntry:
    """One key and its vector, or None while the vector is pending."""
    key: str
    vector: Optional[np.ndarray] = None

    @property
    def is_pending(self) -> bool:
        return self.vector is None

    @property
    def dimension(self) -> Optional[int]:
        return None if self.vector is None else int(self.vector.shape[0])


class EmbeddingSet:
    """Ordered, immutable mapping of key -> embedding vector or pending.

    Usage:
        embeddings = EmbeddingSet.from_mapping({"cat": cat_vec, "dog": None})
        embeddings = embeddings.with_entry("dog", dog_vec)
        for entry in embeddings.present():
            ...
    """

    def __init__(self, entries: Iterable[EmbeddingEntry] = (), source: Optional[str] = None):
        entries = tuple(entries)
        seen = set()
        for entry in entries:
            if entry.key in seen:
                raise DuplicateKeyError(entry.key)
            seen.add(entry.key)
        self._entries: Tuple[EmbeddingEntry, ...] = entries
        self._index: Dict[str, int] = {e.key: i for i, e in enumerate(entries)}
        self.source = source

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[Tuple[str, Optional[VectorLike]]],
        source: Optional[str] = None,
    ) -> "EmbeddingSet":
        """Build from (key, vector-or-None) pairs, keeping their order."""
        entries = [
            EmbeddingEntry(key, None if vec is None else as_embedding_vector(vec))
            for key, vec in pairs
        ]
        return cls(entries, source=source)

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, Optional[VectorLike]],
        source: Optional[str] = None,
    ) -> "EmbeddingSet":
        """Build from a dict; dict insertion order becomes set order."""
        return cls.from_pairs(mapping.items(), source=source)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[EmbeddingEntry]:
        return iter(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __repr__(self) -> str:
        return (
            f"EmbeddingSet(entries={len(self)}, present={self.present_count}, "
            f"source={self.source!r})"
        )

    def get(self, key: str) -> Optional[EmbeddingEntry]:
        idx = self._index.get(key)
        return None if idx is None else self._entries[idx]

    @property
    def keys(self) -> List[str]:
        return [e.key for e in self._entries]

    def present(self) -> List[EmbeddingEntry]:
        """Entries that have a vector, in set order."""
        return [e for e in self._entries if e.vector is not None]

    @property
    def present_keys(self) -> List[str]:
        return [e.key for e in self.present()]

    @property
    def present_count(self) -> int:
        return sum(1 for e in self._entries if e.vector is not None)

    @property
    def pending_keys(self) -> List[str]:
        return [e.key for e in self._entries if e.vector is None]

    @property
    def dimension(self) -> Optional[int]:
        """Length of the first present vector, or None if nothing is present."""
        for entry in self._entries:
            if entry.vector is not None:
                return entry.dimension
        return None

    def with_entry(self, key: str, vector: Optional[VectorLike]) -> "EmbeddingSet":
        """Return a copy with key inserted (at the end) or replaced in place."""
        new_entry = EmbeddingEntry(key, None if vector is None else as_embedding_vector(vector))
        entries = list(self._entries)
        idx = self._index.get(key)
        if idx is None:
            entries.append(new_entry)
        else:
            entries[idx] = new_entry
        return EmbeddingSet(entries, source=self.source)

    def without(self, key: str) -> "EmbeddingSet":
        """Return a copy with key removed. Missing keys raise KeyError."""
        if key not in self._index:
            raise KeyError(key)
        return EmbeddingSet(
            (e for e in self._entries if e.key != key),
            source=self.source,
        )

    def with_source(self, source: Optional[str]) -> "EmbeddingSet":
        return EmbeddingSet(self._entries, source=source)


@dataclass(frozen=True)
class ProjectedPoint:
    """3D position of one present key."""
    key: str
    x: float
    y: float
    z: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_numpy(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)
