"""
Holdings for the retirement simulation.

An Asset configured by the user is a template. Every trial builds its own
Portfolio from those templates, so price moves, purchases and sales inside one
trial never leak into another trial or back into the configuration.
"""
from dataclasses import dataclass, replace
from typing import Iterable, Optional
import numpy as np
import pandas as pd

from firesim.errors import ConfigurationError


@dataclass
class Asset:
    """A single held security."""

    name: str
    units: int
    value_per_unit: float  # Quoted value for `unit_size` units
    unit_size: float = 1.0  # e.g. 10000 for funds quoted per 10,000 units
    average_price: float = 0.0  # Weighted-average cost, same scale as value_per_unit
    expected_return: float = 0.0  # Annual, percent
    volatility: float = 0.0  # Annual, percent
    tax_start_year: Optional[int] = None
    tax_start_month: int = 0

    def __post_init__(self):
        if not self.name:
            raise ConfigurationError("Asset name must not be empty")
        if self.units < 0:
            raise ConfigurationError(f"{self.name}: held units cannot be negative")
        if self.unit_size <= 0:
            raise ConfigurationError(f"{self.name}: unit size must be positive")
        if self.value_per_unit < 0 or self.average_price < 0:
            raise ConfigurationError(f"{self.name}: prices cannot be negative")
        if self.volatility < 0:
            raise ConfigurationError(f"{self.name}: volatility cannot be negative")
        self.units = int(self.units)

    @property
    def price_per_unit(self) -> float:
        """Trading price of one unit."""
        return self.value_per_unit / self.unit_size

    @property
    def cost_per_unit(self) -> float:
        """Average acquisition cost of one unit."""
        return self.average_price / self.unit_size

    @property
    def market_value(self) -> float:
        return self.units * self.price_per_unit

    @property
    def tax_start_index(self) -> int:
        """Simulation month from which gains are taxed (0 = from the start)."""
        if self.tax_start_year is None:
            return 0
        return self.tax_start_year * 12 + (self.tax_start_month or 0)

    def is_taxable(self, month: int) -> bool:
        return self.tax_start_index <= month

    def monthly_drift(self) -> float:
        """Monthly drift from the annual expected return."""
        return self.expected_return / 100 / 12

    def monthly_volatility(self) -> float:
        """Monthly volatility from the annual volatility."""
        return self.volatility / 100 / np.sqrt(12)

    def copy(self) -> "Asset":
        return replace(self)


class Portfolio:
    """
    Mutable per-trial collection of assets.

    Assets keep their configured order; that order is also the sell order
    within a tax class.
    """

    def __init__(self, assets: Iterable[Asset]):
        self.assets = list(assets)
        self._index = {a.name: i for i, a in enumerate(self.assets)}

    @classmethod
    def from_templates(cls, templates: Iterable[Asset]) -> "Portfolio":
        """Create an independent portfolio from configured asset templates."""
        return cls(a.copy() for a in templates)

    @property
    def names(self) -> list[str]:
        return [a.name for a in self.assets]

    @property
    def num_assets(self) -> int:
        return len(self.assets)

    def get(self, name: str) -> Optional[Asset]:
        idx = self._index.get(name)
        return self.assets[idx] if idx is not None else None

    def total_value(self) -> float:
        """Liquidation value of all holdings."""
        return float(sum(a.market_value for a in self.assets))

    def split_by_taxability(self, month: int) -> tuple[list[Asset], list[Asset]]:
        """Return (taxable, non_taxable) assets for the given month, order kept."""
        taxable = [a for a in self.assets if a.is_taxable(month)]
        non_taxable = [a for a in self.assets if not a.is_taxable(month)]
        return taxable, non_taxable

    def to_dataframe(self) -> pd.DataFrame:
        """Convert holdings to a DataFrame for display."""
        return pd.DataFrame({
            'Name': self.names,
            'Units': [a.units for a in self.assets],
            'Value/Unit': [a.value_per_unit for a in self.assets],
            'Unit Size': [a.unit_size for a in self.assets],
            'Avg. Price': [a.average_price for a in self.assets],
            'Market Value': [a.market_value for a in self.assets],
            'Ann. Return %': [a.expected_return for a in self.assets],
            'Ann. Volatility %': [a.volatility for a in self.assets],
        })
