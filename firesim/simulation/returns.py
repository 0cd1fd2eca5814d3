"""
Correlated monthly returns (geometric Brownian motion, one step per month).
"""
from dataclasses import dataclass
from typing import Optional
import numpy as np

from firesim.portfolio.correlation import CorrelationModel
from firesim.portfolio.portfolio import Portfolio


class NormalSource:
    """
    Standard normal draws via the Box-Muller transform.

    Uniforms come from a numpy Generator, so a seed makes a run reproducible;
    without one the generator is seeded from OS entropy.
    """

    def __init__(self, random_seed: Optional[int] = None):
        self.rng = np.random.default_rng(random_seed)

    def _uniform(self) -> float:
        u = 0.0
        while u == 0.0:  # log(0) guard
            u = self.rng.random()
        return u

    def normal(self) -> float:
        u = self._uniform()
        v = self._uniform()
        return float(np.sqrt(-2.0 * np.log(u)) * np.cos(2.0 * np.pi * v))

    def standard_normals(self, n: int) -> np.ndarray:
        return np.array([self.normal() for _ in range(n)], dtype=np.float64)


@dataclass
class AssetDetail:
    """Per-asset snapshot at month end."""
    rate: float  # Monthly return, percent
    value: float  # units * price per unit
    units: int
    value_per_unit: float
    average_price: float
    tax_per_unit: float  # Informational unrealized tax per unit


@dataclass
class MonthlyReturn:
    financial_assets: float
    details: list[AssetDetail]


def monthly_rate(drift: float, volatility: float, z: float) -> float:
    """Multiplicative monthly return for one correlated normal draw."""
    return float(np.exp(drift - volatility ** 2 / 2 + volatility * z) - 1)


class ReturnGenerator:
    """Applies one month of correlated returns to a portfolio in place."""

    def __init__(self, correlation: CorrelationModel, source: NormalSource):
        self.correlation = correlation
        self.source = source

    def apply(self, portfolio: Portfolio, month: int, tax_rate: float) -> MonthlyReturn:
        """
        Draw, correlate and apply this month's returns.

        Args:
            portfolio: Trial portfolio, mutated in place
            month: Month index (for taxability of the display figure)
            tax_rate: Capital gains rate as a fraction

        Returns:
            MonthlyReturn with the end-of-month financial asset value
        """
        if portfolio.num_assets != self.correlation.num_assets:
            raise ValueError("Number of assets must match the correlation model")

        z = self.correlation.correlate(self.source.standard_normals(self.correlation.num_assets))

        details = []
        total = 0.0
        for i, asset in enumerate(portfolio.assets):
            if asset.units <= 0:
                details.append(AssetDetail(
                    rate=0.0, value=0.0, units=0, value_per_unit=0.0,
                    average_price=asset.average_price, tax_per_unit=0.0
                ))
                continue

            rate = monthly_rate(asset.monthly_drift(), asset.monthly_volatility(), z[i])
            asset.value_per_unit *= (1 + rate)

            value = asset.market_value
            total += value

            tax_per_unit = 0.0
            if asset.is_taxable(month) and asset.value_per_unit > asset.average_price:
                gain = (asset.value_per_unit - asset.average_price) / asset.unit_size
                tax_per_unit = gain * tax_rate

            details.append(AssetDetail(
                rate=rate * 100,
                value=value,
                units=asset.units,
                value_per_unit=asset.value_per_unit,
                average_price=asset.average_price,
                tax_per_unit=tax_per_unit
            ))

        return MonthlyReturn(financial_assets=total, details=details)
