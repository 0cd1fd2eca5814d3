"""
Correlation matrix construction and Cholesky factorization.

The factor L (L @ L.T == R) turns a vector of independent standard normals
into correlated normals.
"""
import logging
from typing import TYPE_CHECKING, Iterable
import numpy as np

from firesim.errors import NonPositiveDefiniteCorrelation

if TYPE_CHECKING:
    from firesim.config import CorrelationPair

logger = logging.getLogger(__name__)

RESIDUAL_TOLERANCE = 1e-10


def build_correlation_matrix(
    names: list[str],
    pairs: Iterable["CorrelationPair"]
) -> np.ndarray:
    """
    Build a symmetric correlation matrix from named asset pairs.

    Args:
        names: Asset names; their order fixes the matrix indices
        pairs: Pairwise coefficients. Pairs naming an unknown asset are ignored,
            unreferenced pairs stay at 0.

    Returns:
        N x N matrix with a unit diagonal
    """
    index = {name: i for i, name in enumerate(names)}
    matrix = np.identity(len(names), dtype=np.float64)

    for pair in pairs:
        i = index.get(pair.asset_a)
        j = index.get(pair.asset_b)
        if i is None or j is None:
            logger.debug(
                "Ignoring correlation %s/%s: unknown asset", pair.asset_a, pair.asset_b
            )
            continue
        if i == j:
            continue
        matrix[i, j] = pair.coefficient
        matrix[j, i] = pair.coefficient

    return matrix


def cholesky_decompose(matrix: np.ndarray) -> np.ndarray:
    """
    Lower-triangular Cholesky factor of a correlation matrix.

    Unlike np.linalg.cholesky this accepts semi-definite input: a zero diagonal
    factor yields zeros below it instead of failing.

    Raises:
        NonPositiveDefiniteCorrelation: if a diagonal term is negative before
            the square root is taken, or a zero diagonal factor leaves an
            off-diagonal coefficient unexplained
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    n = matrix.shape[0]
    L = np.zeros((n, n), dtype=np.float64)

    for i in range(n):
        for j in range(i + 1):
            partial = float(np.dot(L[i, :j], L[j, :j]))
            if i == j:
                diag = matrix[i, i] - partial
                if diag < 0:
                    raise NonPositiveDefiniteCorrelation(diag, index=i)
                L[i, j] = np.sqrt(diag)
            elif L[j, j] == 0:
                # Degenerate column: only consistent if nothing is left to explain
                if abs(matrix[i, j] - partial) > RESIDUAL_TOLERANCE:
                    raise NonPositiveDefiniteCorrelation(0.0, index=j)
                L[i, j] = 0.0
            else:
                L[i, j] = (matrix[i, j] - partial) / L[j, j]

    return L


class CorrelationModel:
    """Correlation matrix and its Cholesky factor for a fixed asset order."""

    def __init__(self, names: list[str], pairs: Iterable["CorrelationPair"] = ()):
        self.names = list(names)
        self.matrix = build_correlation_matrix(self.names, pairs)
        self.cholesky = cholesky_decompose(self.matrix)

    @property
    def num_assets(self) -> int:
        return len(self.names)

    def correlate(self, independent: np.ndarray) -> np.ndarray:
        """Left-multiply independent standard normals by L."""
        return self.cholesky @ np.asarray(independent, dtype=np.float64)
