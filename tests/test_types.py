"""Tests for EmbeddingSet snapshots."""

import numpy as np
import pytest

from embedspace.core import DuplicateKeyError, EmbeddingEntry, EmbeddingSet, ProjectedPoint


class TestEmbeddingSet:
    """Construction and immutable edits."""

    def test_mapping_order_is_kept(self):
        """Dict insertion order becomes set order."""
        embeddings = EmbeddingSet.from_mapping({"b": [1.0], "a": None, "c": [2.0]})
        assert embeddings.keys == ["b", "a", "c"]
        assert embeddings.present_keys == ["b", "c"]
        assert embeddings.pending_keys == ["a"]
        assert embeddings.present_count == 2
        assert len(embeddings) == 3

    def test_duplicate_keys_rejected(self):
        """Keys are unique."""
        with pytest.raises(DuplicateKeyError):
            EmbeddingSet([EmbeddingEntry("x", None), EmbeddingEntry("x", None)])

    def test_with_entry_replaces_in_place(self):
        """Replacing a key keeps its position; new keys go last."""
        embeddings = EmbeddingSet.from_pairs([("a", None), ("b", [1.0, 2.0])])
        updated = embeddings.with_entry("a", [3.0, 4.0]).with_entry("c", None)

        assert updated.keys == ["a", "b", "c"]
        assert np.array_equal(updated.get("a").vector, [3.0, 4.0])
        # Original untouched
        assert embeddings.get("a").is_pending
        assert "c" not in embeddings

    def test_without(self):
        """Removing returns a new set; missing keys raise."""
        embeddings = EmbeddingSet.from_pairs([("a", [1.0]), ("b", [2.0])])
        assert embeddings.without("a").keys == ["b"]
        with pytest.raises(KeyError):
            embeddings.without("zzz")

    def test_vectors_are_read_only_copies(self):
        """Mutating the caller's array does not change the snapshot."""
        source = np.array([1.0, 2.0, 3.0])
        embeddings = EmbeddingSet.from_mapping({"a": source})
        source[0] = 99.0

        stored = embeddings.get("a").vector
        assert stored[0] == 1.0
        with pytest.raises(ValueError):
            stored[0] = 5.0

    def test_vectors_must_be_one_dimensional(self):
        """Matrices are rejected."""
        with pytest.raises(ValueError):
            EmbeddingSet.from_mapping({"a": np.ones((2, 2))})

    def test_dimension_and_source(self):
        """dimension comes from the first present vector."""
        embeddings = EmbeddingSet.from_pairs([("p", None), ("q", np.ones(384))], source="minilm")
        assert embeddings.dimension == 384
        assert embeddings.source == "minilm"
        assert embeddings.with_source("e5small").source == "e5small"
        assert EmbeddingSet().dimension is None


class TestProjectedPoint:
    """Point value type."""

    def test_conversions(self):
        """Tuple and array views agree."""
        point = ProjectedPoint("k", 1.0, -2.0, 0.5)
        assert point.as_tuple() == (1.0, -2.0, 0.5)
        assert np.array_equal(point.to_numpy(), [1.0, -2.0, 0.5])
