"""
Entnahme (Withdrawal) - tax-aware liquidation of holdings.

When the month's cash cannot cover expenses, units are sold to fund the
shortfall: taxable holdings first, then tax-exempt ones, each class in the
configured asset order. The order is a fixed tie-break so results are
reproducible.
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
import numpy as np

from firesim.simulation.tax_costs import unit_sale_terms

if TYPE_CHECKING:
    from firesim.portfolio.portfolio import Asset, Portfolio

logger = logging.getLogger(__name__)


@dataclass
class SaleResult:
    cash: float
    tax: float
    proceeds: float  # Gross sale amount
    failed: bool


def _sell_from(
    assets: list["Asset"],
    remaining: float,
    tax_rate: float,
    taxable: bool
) -> tuple[float, float, float]:
    """
    Sell units from `assets` until `remaining` is covered.

    Returns:
        (remaining, gross proceeds, tax)
    """
    proceeds = 0.0
    tax = 0.0

    for asset in assets:
        if remaining <= 0:
            break

        terms = unit_sale_terms(asset, tax_rate, taxable)
        if terms.sale_price <= 0 or asset.units <= 0:
            continue

        if terms.net_proceeds > 0:
            wanted = int(np.ceil(remaining / terms.net_proceeds))
        else:
            # Nothing gained per unit after tax: liquidate fully instead of stalling
            wanted = asset.units

        sold = min(wanted, asset.units)
        if sold <= 0:
            continue

        gross = sold * terms.sale_price
        sale_tax = sold * terms.tax

        remaining -= gross - sale_tax
        asset.units -= sold
        proceeds += gross
        tax += sale_tax

    return remaining, proceeds, tax


def liquidate_for_shortfall(
    required: float,
    cash: float,
    portfolio: "Portfolio",
    tax_rate: float,
    month: int
) -> SaleResult:
    """
    Sell holdings to cover a cash shortfall.

    Args:
        required: Amount that must be raised
        cash: Cash available before selling (applied to the shortfall first)
        portfolio: Trial portfolio; units are reduced in place
        tax_rate: Capital gains rate as a fraction
        month: Month index, decides which assets are taxable

    Returns:
        SaleResult. `failed` is True when the shortfall cannot be covered;
        cash is then 0 and nothing is sold if total holdings were too small.
    """
    if required <= 0:
        return SaleResult(cash=float(np.floor(cash)), tax=0.0, proceeds=0.0, failed=False)

    needed = required - cash
    cash = 0.0

    if portfolio.num_assets == 0 or portfolio.total_value() < needed:
        return SaleResult(cash=0.0, tax=0.0, proceeds=0.0, failed=True)

    taxable, non_taxable = portfolio.split_by_taxability(month)

    remaining, proceeds, tax = _sell_from(taxable, needed, tax_rate, taxable=True)
    remaining, exempt_proceeds, _ = _sell_from(non_taxable, remaining, tax_rate, taxable=False)
    proceeds += exempt_proceeds

    if remaining > 0:
        logger.warning(
            "Month %d: shortfall of %.2f left after selling all holdings "
            "(portfolio value covered %.2f)", month, remaining, needed
        )
        return SaleResult(cash=0.0, tax=tax, proceeds=proceeds, failed=True)

    final_cash = float(np.floor(cash + proceeds - tax - needed))
    return SaleResult(cash=final_cash, tax=tax, proceeds=proceeds, failed=False)
