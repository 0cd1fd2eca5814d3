"""
Tests for correlation matrix construction and Cholesky factorization.
"""
import numpy as np
import pytest

from firesim.config import CorrelationPair
from firesim.errors import NonPositiveDefiniteCorrelation
from firesim.portfolio.correlation import (
    CorrelationModel,
    build_correlation_matrix,
    cholesky_decompose,
)


class TestBuildCorrelationMatrix:
    def test_no_pairs_is_identity(self):
        matrix = build_correlation_matrix(["A", "B", "C"], [])
        np.testing.assert_array_equal(matrix, np.identity(3))

    def test_pairs_are_symmetric(self):
        matrix = build_correlation_matrix(
            ["A", "B", "C"],
            [CorrelationPair("A", "C", 0.3), CorrelationPair("B", "A", -0.2)]
        )
        assert matrix[0, 2] == matrix[2, 0] == 0.3
        assert matrix[0, 1] == matrix[1, 0] == -0.2
        assert matrix[1, 2] == 0.0
        np.testing.assert_array_equal(np.diag(matrix), np.ones(3))

    def test_unknown_asset_ignored(self):
        matrix = build_correlation_matrix(["A", "B"], [CorrelationPair("A", "Z", 0.9)])
        np.testing.assert_array_equal(matrix, np.identity(2))

    def test_self_pair_keeps_unit_diagonal(self):
        matrix = build_correlation_matrix(["A", "B"], [CorrelationPair("A", "A", 0.4)])
        assert matrix[0, 0] == 1.0


class TestCholeskyDecompose:
    def test_identity_factor(self):
        L = cholesky_decompose(np.identity(4))
        np.testing.assert_array_equal(L, np.identity(4))

    def test_reconstructs_matrix(self):
        corr = np.array([
            [1.0, 0.4, 0.2, 0.3],
            [0.4, 1.0, 0.5, 0.25],
            [0.2, 0.5, 1.0, 0.15],
            [0.3, 0.25, 0.15, 1.0]
        ])
        L = cholesky_decompose(corr)
        np.testing.assert_allclose(L @ L.T, corr, atol=1e-12)
        assert np.allclose(L, np.tril(L))

    def test_matches_numpy_for_positive_definite(self):
        corr = np.array([[1.0, 0.5], [0.5, 1.0]])
        np.testing.assert_allclose(cholesky_decompose(corr), np.linalg.cholesky(corr))

    def test_perfect_correlation_is_degenerate_not_error(self):
        corr = np.array([[1.0, 1.0], [1.0, 1.0]])
        L = cholesky_decompose(corr)
        assert L[1, 1] == 0.0
        np.testing.assert_allclose(L @ L.T, corr)

    def test_three_perfectly_correlated_assets(self):
        corr = np.ones((3, 3))
        L = cholesky_decompose(corr)
        np.testing.assert_allclose(L @ L.T, corr)
        assert L[2, 1] == 0.0

    def test_inconsistent_correlations_raise(self):
        matrix = build_correlation_matrix(
            ["A", "B", "C"],
            [
                CorrelationPair("A", "B", 1.0),
                CorrelationPair("A", "C", 1.0),
                CorrelationPair("B", "C", -1.0),
            ]
        )
        with pytest.raises(NonPositiveDefiniteCorrelation):
            cholesky_decompose(matrix)

    def test_negative_diagonal_reported(self):
        corr = np.array([
            [1.0, 0.9, 0.9],
            [0.9, 1.0, -0.9],
            [0.9, -0.9, 1.0]
        ])
        with pytest.raises(NonPositiveDefiniteCorrelation) as exc_info:
            cholesky_decompose(corr)
        assert exc_info.value.diagonal_value < 0
        assert exc_info.value.index == 2


class TestCorrelationModel:
    def test_correlate_identity(self):
        model = CorrelationModel(["A", "B"])
        z = np.array([0.5, -1.2])
        np.testing.assert_array_equal(model.correlate(z), z)

    def test_correlate_applies_factor(self):
        model = CorrelationModel(["A", "B"], [CorrelationPair("A", "B", 0.6)])
        z = np.array([1.0, 0.0])
        # Second asset picks up rho times the first draw
        np.testing.assert_allclose(model.correlate(z), [1.0, 0.6])

    def test_empirical_correlation(self):
        model = CorrelationModel(["A", "B"], [CorrelationPair("A", "B", 0.7)])
        rng = np.random.default_rng(0)
        draws = np.array([model.correlate(rng.standard_normal(2)) for _ in range(5000)])
        assert np.corrcoef(draws.T)[0, 1] == pytest.approx(0.7, abs=0.05)
