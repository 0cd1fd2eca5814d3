"""
Exceptions raised by the FIRE simulation engine.

Asset depletion inside a trial is not an error: it is recorded on the
TrialResult. Only invalid configuration and inconsistent correlations
abort a run.
"""


class FireSimError(Exception):
    """Base class for all simulator errors."""


class ConfigurationError(FireSimError, ValueError):
    """Raised when the simulation configuration is invalid."""


class NonPositiveDefiniteCorrelation(FireSimError):
    """Raised when the correlation matrix cannot be Cholesky-factorized."""

    def __init__(self, diagonal_value: float, index: int | None = None):
        self.diagonal_value = diagonal_value
        self.index = index
        location = f" at row {index}" if index is not None else ""
        super().__init__(
            f"Correlation matrix is not positive definite: diagonal "
            f"term {diagonal_value:.4f}{location}. Check the correlation "
            f"coefficients for contradictions."
        )
