"""
Tests for monthly income/expense handling and the cost-of-living schedule.
"""
import pytest

from firesim.config import BigExpenseEvent, IncomeEvent, LifeCostEvent
from firesim.simulation.cashflow import LifeCostSchedule, handle_income_and_expense


class TestHandleIncomeAndExpense:
    def test_shortfall(self):
        result = handle_income_and_expense(0, 1000.0, [], [], 1500.0)
        assert result.shortfall == 500.0
        assert result.cash == 0.0
        assert result.income == 0.0
        assert result.expense == 1500.0

    def test_cash_covers_expense(self):
        result = handle_income_and_expense(0, 2000.0, [], [], 1500.0)
        assert result.cash == 500.0
        assert result.shortfall == 0.0

    def test_income_credited_first(self):
        incomes = [IncomeEvent(amount=600.0, start_month=0)]
        result = handle_income_and_expense(3, 1000.0, incomes, [], 1500.0)
        assert result.income == 600.0
        assert result.cash == 100.0
        assert result.shortfall == 0.0

    def test_income_window(self):
        incomes = [
            IncomeEvent(amount=100.0, start_month=2, end_month=4),
            IncomeEvent(amount=10.0, start_month=0),
        ]
        assert handle_income_and_expense(1, 0.0, incomes, [], 0.0).income == 10.0
        assert handle_income_and_expense(2, 0.0, incomes, [], 0.0).income == 110.0
        assert handle_income_and_expense(4, 0.0, incomes, [], 0.0).income == 110.0
        assert handle_income_and_expense(5, 0.0, incomes, [], 0.0).income == 10.0

    def test_big_expense_only_in_its_month(self):
        expenses = [BigExpenseEvent(month=6, amount=5000.0), BigExpenseEvent(month=6, amount=1000.0)]
        assert handle_income_and_expense(5, 10000.0, [], expenses, 100.0).expense == 100.0
        result = handle_income_and_expense(6, 10000.0, [], expenses, 100.0)
        assert result.expense == 6100.0
        assert result.cash == 3900.0

    def test_exact_cover_no_shortfall(self):
        result = handle_income_and_expense(0, 1500.0, [], [], 1500.0)
        assert result.cash == 0.0
        assert result.shortfall == 0.0


class TestLifeCostSchedule:
    def _run(self, schedule, months):
        return [schedule.step(m) for m in range(months)]

    def test_no_events_is_zero(self):
        assert self._run(LifeCostSchedule([], 2.0), 25) == [0.0] * 25

    def test_annual_inflation(self):
        costs = self._run(LifeCostSchedule([LifeCostEvent(0, 1000.0)], 2.0), 25)
        assert costs[0] == costs[11] == 1000.0
        assert costs[12] == pytest.approx(1020.0)
        assert costs[23] == pytest.approx(1020.0)
        assert costs[24] == pytest.approx(1040.4)

    def test_step_rebases(self):
        events = [LifeCostEvent(0, 1000.0), LifeCostEvent(18, 800.0)]
        costs = self._run(LifeCostSchedule(events, 10.0), 30)
        assert costs[12] == pytest.approx(1100.0)
        assert costs[18] == 800.0
        assert costs[24] == pytest.approx(880.0)

    def test_step_on_inflation_month_wins(self):
        events = [LifeCostEvent(0, 1000.0), LifeCostEvent(12, 500.0)]
        costs = self._run(LifeCostSchedule(events, 10.0), 25)
        # Reset replaces the running amount and is not inflated in the same month
        assert costs[12] == 500.0
        assert costs[23] == 500.0
        assert costs[24] == pytest.approx(550.0)

    def test_first_event_is_baseline_from_month_zero(self):
        costs = self._run(LifeCostSchedule([LifeCostEvent(3, 700.0)], 2.0), 5)
        assert costs == [700.0] * 5

    def test_late_first_event_still_inflates(self):
        events = [LifeCostEvent(18, 500.0), LifeCostEvent(30, 800.0)]
        costs = self._run(LifeCostSchedule(events, 10.0), 31)
        assert costs[0] == 500.0
        assert costs[12] == pytest.approx(550.0)
        # The dated event re-bases to its own amount
        assert costs[18] == 500.0
        assert costs[30] == 800.0

    def test_unsorted_events(self):
        events = [LifeCostEvent(6, 300.0), LifeCostEvent(0, 100.0)]
        costs = self._run(LifeCostSchedule(events, 0.0), 7)
        assert costs[0] == 100.0
        assert costs[6] == 300.0

    def test_reset_rewinds(self):
        schedule = LifeCostSchedule([LifeCostEvent(0, 1000.0)], 5.0)
        self._run(schedule, 13)
        schedule.reset()
        assert schedule.step(0) == 1000.0
