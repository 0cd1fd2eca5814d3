"""
Savings Plan (Sparplan) - scheduled additional purchases.
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable
import numpy as np

from firesim.config import SchedulePattern

if TYPE_CHECKING:
    from firesim.config import RecurringInvestmentRule
    from firesim.portfolio.portfolio import Portfolio

logger = logging.getLogger(__name__)


@dataclass
class SavingsPlanResult:
    cash: float
    invested: float


def is_rule_active(rule: "RecurringInvestmentRule", month: int) -> bool:
    """Whether a rule executes in the given month."""
    if month < rule.start_month:
        return False
    if rule.end_month is not None and month > rule.end_month:
        return False

    if rule.pattern is SchedulePattern.ONCE:
        return month == rule.start_month
    if rule.pattern is SchedulePattern.MONTHLY:
        return True
    return (month - rule.start_month) % 12 == 0


def apply_recurring_investments(
    month: int,
    cash: float,
    portfolio: "Portfolio",
    rules: Iterable["RecurringInvestmentRule"]
) -> SavingsPlanResult:
    """
    Execute this month's purchases in configuration order.

    A rule is skipped when cash does not cover its full amount (no partial
    buys). Only whole units are bought; the full amount is still debited and
    enters the cost basis.
    """
    invested = 0.0

    for rule in rules:
        if not is_rule_active(rule, month):
            continue

        asset = portfolio.get(rule.asset)
        if asset is None:
            logger.debug("Recurring investment for unknown asset %s ignored", rule.asset)
            continue
        if cash < rule.amount:
            continue

        price = asset.price_per_unit
        if price <= 0:
            continue

        cash -= rule.amount
        invested += rule.amount

        bought = int(np.floor(rule.amount / price))
        old_cost = asset.units * asset.cost_per_unit
        new_units = asset.units + bought
        asset.units = new_units

        if new_units > 0:
            asset.average_price = (old_cost + rule.amount) / new_units * asset.unit_size

    return SavingsPlanResult(cash=cash, invested=invested)
