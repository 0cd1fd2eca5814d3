"""
Monthly income and expenses.

Income is credited before anything else and is never withheld. Whatever the
cash balance cannot cover becomes a shortfall to be funded by asset sales.
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from firesim.config import BigExpenseEvent, IncomeEvent, LifeCostEvent


@dataclass
class CashFlowResult:
    cash: float
    income: float
    expense: float
    shortfall: float  # > 0 only when asset sales are needed


def handle_income_and_expense(
    month: int,
    cash: float,
    incomes: Iterable["IncomeEvent"],
    big_expenses: Iterable["BigExpenseEvent"],
    life_cost: float
) -> CashFlowResult:
    """
    Credit income, then pay this month's cost of living and one-off expenses.

    Args:
        month: Month index
        cash: Opening cash
        incomes: Income events (active ones are summed)
        big_expenses: One-off expenses (those dated this month are paid)
        life_cost: Inflation-adjusted monthly cost of living

    Returns:
        CashFlowResult with closing cash and the uncovered shortfall
    """
    income = sum(e.amount for e in incomes if e.is_active(month))
    cash += income

    expense = life_cost + sum(e.amount for e in big_expenses if e.month == month)

    if cash >= expense:
        return CashFlowResult(cash=cash - expense, income=income, expense=expense, shortfall=0.0)

    return CashFlowResult(cash=0.0, income=income, expense=expense, shortfall=expense - cash)


class LifeCostSchedule:
    """
    Step function of the monthly cost of living with annual inflation.

    The first event sets the baseline from month 0, even when it is dated
    later. A scheduled step replaces the running amount. Otherwise the amount
    grows by the inflation rate at months 12, 24, ... A step landing on such a
    month wins and is not inflated in that month.
    """

    def __init__(self, events: Iterable["LifeCostEvent"], inflation_rate: float):
        self.events = sorted(events, key=lambda e: e.month)
        self.inflation_factor = 1 + inflation_rate / 100
        self.reset()

    def reset(self):
        """Rewind to the start of a trial."""
        self._next = 0
        self.current = self.events[0].amount if self.events else 0.0

    def step(self, month: int) -> float:
        """Advance to `month` (called once per month, in order) and return the cost."""
        stepped = False
        while self._next < len(self.events) and self.events[self._next].month <= month:
            self.current = self.events[self._next].amount
            self._next += 1
            stepped = True

        if month > 0 and month % 12 == 0 and not stepped:
            self.current *= self.inflation_factor

        return self.current
