"""
Capital gains tax for asset sales.

Rates are configured in percent and handled internally as fractions.
Per-unit figures use whole currency units: the sale price is rounded down and
the cost basis rounded up, so the taxed gain is never overstated in the
seller's favour.
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable
import numpy as np

if TYPE_CHECKING:
    from firesim.config import TaxRateEvent
    from firesim.portfolio.portfolio import Asset

DEFAULT_TAX_RATE = 0.20315  # Japanese capital gains tax incl. reconstruction surtax


def resolve_tax_rate(month: int, events: Iterable["TaxRateEvent"]) -> float:
    """Rate (fraction) in force for `month`: latest event at or before it."""
    rate = DEFAULT_TAX_RATE
    for event in sorted(events, key=lambda e: e.month):
        if event.month > month:
            break
        rate = event.rate / 100
    return rate


@dataclass
class UnitSaleTerms:
    """What selling one unit yields."""
    sale_price: int
    cost_basis: int
    gain: float
    tax: float
    net_proceeds: float


def unit_sale_terms(asset: "Asset", tax_rate: float, taxable: bool) -> UnitSaleTerms:
    """Per-unit sale price, gain, tax and net proceeds for one asset."""
    sale_price = int(np.floor(asset.price_per_unit))
    cost_basis = int(np.ceil(asset.cost_per_unit))
    gain = float(sale_price - cost_basis)

    tax = gain * tax_rate if taxable and gain > 0 else 0.0
    return UnitSaleTerms(
        sale_price=sale_price,
        cost_basis=cost_basis,
        gain=gain,
        tax=tax,
        net_proceeds=sale_price - tax
    )
