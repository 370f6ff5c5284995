"""Tests for the similarity kernel."""

import numpy as np
import pytest

from embedspace.core import DimensionMismatchError
from embedspace.geometry import (
    ComparisonConfig,
    SimilarityBand,
    compare,
    cosine_similarity,
    dot,
    euclidean_distance,
    magnitude,
    pairwise_cosine,
    similarity_band,
)


class TestBasicOperations:
    """dot, magnitude and distance on small vectors."""

    def test_dot_and_magnitude(self):
        """Known values for a 3-4-5 triangle."""
        assert dot([1, 2, 3], [4, 5, 6]) == 32.0
        assert magnitude([3, 4]) == 5.0
        assert magnitude(np.zeros(384)) == 0.0

    def test_euclidean_distance(self):
        """Distance is the magnitude of the difference."""
        assert euclidean_distance([0, 0, 0], [3, 4, 0]) == 5.0
        assert euclidean_distance([1, 1], [1, 1]) == 0.0

    def test_accepts_lists_tuples_and_arrays(self):
        """Any 1-D sequence works."""
        assert dot((1, 0), np.array([1.0, 0.0])) == 1.0


class TestCosineSimilarity:
    """Cosine similarity is bounded and handles zero vectors."""

    def test_bounds_over_random_pairs(self):
        """cos(a, b) is always in [-1, 1]."""
        np.random.seed(42)
        for _ in range(200):
            a = np.random.normal(0, 1, 16)
            b = np.random.normal(0, 1, 16)
            assert -1.0 <= cosine_similarity(a, b) <= 1.0

    def test_self_similarity(self):
        """cos(a, a) is 1 for nonzero a, including tiny and huge scales."""
        np.random.seed(7)
        for scale in (1e-150, 1.0, 1e150):
            a = np.random.normal(0, 1, 384) * scale
            assert cosine_similarity(a, a) == pytest.approx(1.0)

    def test_extreme_magnitudes(self):
        """Norms of tiny or huge vectors neither underflow nor overflow."""
        for scale in (1e-200, 1e200):
            a = np.array([1.0, 2.0]) * scale
            b = np.array([2.0, 1.0]) * scale
            assert cosine_similarity(a, a) == pytest.approx(1.0, abs=1e-9)
            assert cosine_similarity(a, -a) == pytest.approx(-1.0, abs=1e-9)
            assert cosine_similarity(a, b) == pytest.approx(0.8)
            assert magnitude(a) == pytest.approx(np.sqrt(5) * scale)

    def test_mixed_magnitudes(self):
        """Only direction matters, however far apart the lengths are."""
        a = np.array([3.0, 4.0]) * 1e-200
        b = np.array([3.0, 4.0]) * 1e200
        assert cosine_similarity(a, b) == pytest.approx(1.0)

    def test_opposite_and_orthogonal(self):
        """Opposite vectors give -1, orthogonal give 0."""
        assert cosine_similarity([1, 2], [-1, -2]) == pytest.approx(-1.0)
        assert cosine_similarity([1, 0], [0, 5]) == 0.0

    def test_zero_vector_gives_zero(self):
        """Zero magnitude is defined as similarity 0."""
        assert cosine_similarity([0, 0, 0], [1, 2, 3]) == 0.0
        assert cosine_similarity([0, 0], [0, 0]) == 0.0


class TestDimensionChecks:
    """Mismatched lengths fail fast."""

    @pytest.mark.parametrize("fn", [dot, cosine_similarity, euclidean_distance])
    def test_mismatch_raises(self, fn):
        """No silent truncation or padding."""
        with pytest.raises(DimensionMismatchError):
            fn([1.0, 2.0, 3.0], [1.0, 2.0])

    def test_mismatch_is_a_value_error(self):
        """Callers catching ValueError still see it."""
        with pytest.raises(ValueError):
            euclidean_distance(np.ones(384), np.ones(383))


class TestPairwiseCosine:
    """Full similarity matrices."""

    def test_matches_scalar_kernel(self):
        """Every entry equals cosine_similarity of the row pair."""
        np.random.seed(3)
        matrix = np.random.normal(0, 1, (6, 10))
        sims = pairwise_cosine(matrix)
        for i in range(6):
            for j in range(6):
                assert sims[i, j] == pytest.approx(cosine_similarity(matrix[i], matrix[j]))

    def test_zero_rows(self):
        """Zero rows are similar to nothing."""
        matrix = np.array([[1.0, 0.0], [0.0, 0.0], [1.0, 1.0]])
        sims = pairwise_cosine(matrix)
        assert np.all(sims[1] == 0.0)
        assert np.all(sims[:, 1] == 0.0)
        assert sims[0, 0] == pytest.approx(1.0)

    def test_extreme_magnitudes(self):
        """Row scale does not change the matrix."""
        np.random.seed(5)
        matrix = np.random.normal(0, 1, (4, 8))
        scaled = matrix * np.array([1e-200, 1.0, 1e200, 1e150])[:, None]
        assert np.allclose(pairwise_cosine(scaled), pairwise_cosine(matrix))
        assert np.allclose(np.diag(pairwise_cosine(scaled)), 1.0)


class TestCompare:
    """Comparison report between two vectors."""

    def test_compare_fields(self):
        """All metrics are filled in."""
        result = compare([1.0, 0.0, 0.0], [1.0, 1.0, 0.0])
        assert result.dot == 1.0
        assert result.magnitude_a == 1.0
        assert result.magnitude_b == pytest.approx(np.sqrt(2))
        assert result.euclidean == 1.0
        assert result.cosine == pytest.approx(1 / np.sqrt(2))
        assert result.band == SimilarityBand.HIGH
        assert result.to_dict()["band"] == "high"

    def test_bands(self):
        """Thresholds 0.7 and 0.3 split high/medium/low."""
        assert similarity_band(0.95) == SimilarityBand.HIGH
        assert similarity_band(0.5) == SimilarityBand.MEDIUM
        assert similarity_band(0.3) == SimilarityBand.LOW
        assert similarity_band(-0.4) == SimilarityBand.LOW

    def test_custom_thresholds(self):
        """Band thresholds come from config."""
        config = ComparisonConfig(high_threshold=0.9, medium_threshold=0.6)
        assert similarity_band(0.8, config) == SimilarityBand.MEDIUM
        assert similarity_band(0.5, config) == SimilarityBand.LOW

    def test_default_config_bands(self):
        """The default comparison config carries the 0.7 / 0.3 thresholds."""
        config = ComparisonConfig()
        assert config.high_threshold == 0.7
        assert config.medium_threshold == 0.3
        assert compare([1.0, 0.0], [1.0, 1.0], config).band == SimilarityBand.HIGH

    @pytest.mark.parametrize("high,medium", [(0.3, 0.7), (1.5, 0.3), (0.7, -2.0)])
    def test_invalid_thresholds(self, high, medium):
        """Out-of-order or out-of-range thresholds are rejected."""
        with pytest.raises(ValueError):
            ComparisonConfig(high_threshold=high, medium_threshold=medium).validate()
