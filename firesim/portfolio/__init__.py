from .portfolio import Portfolio, Asset
from .correlation import CorrelationModel, build_correlation_matrix, cholesky_decompose
