"""
Monte Carlo Simulation Engine for FIRE (early retirement) planning.

Each trial walks the horizon month by month: income and expenses, scheduled
purchases, tax-aware sales to cover any shortfall, then one step of correlated
returns. A trial fails the first month its holdings cannot fund the household.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from firesim.config import FireConfig
from firesim.portfolio.correlation import CorrelationModel
from firesim.portfolio.portfolio import Portfolio
from firesim.simulation.cashflow import LifeCostSchedule, handle_income_and_expense
from firesim.simulation.returns import AssetDetail, NormalSource, ReturnGenerator
from firesim.simulation.savings_plan import apply_recurring_investments
from firesim.simulation.tax_costs import resolve_tax_rate
from firesim.simulation.withdrawal import liquidate_for_shortfall

logger = logging.getLogger(__name__)


def format_year_month(month: int) -> str:
    """Label a month index as elapsed year and 1-based month, e.g. 'Y2 M3'."""
    return f"Y{month // 12} M{month % 12 + 1}"


@dataclass
class TrialHistoryEntry:
    """State of one trial at the end of one month."""
    month: int
    year_month: str
    transfer_assets: float  # Financial assets carried into the month
    expense: float
    income: float
    tax: float
    cash: float  # Closing cash
    investment: float  # Recurring purchases this month
    financial_assets: float  # Closing value of holdings
    total_assets: float
    asset_details: list[AssetDetail]
    is_failure: bool


@dataclass
class TrialResult:
    trial_id: int  # 1-based
    success: bool
    failure_month: int  # Horizon in months when the trial never failed
    history: list[TrialHistoryEntry] = field(default_factory=list)

    @property
    def final_total_assets(self) -> float:
        return self.history[-1].total_assets if self.history else 0.0


class FireSimulator:
    """
    Runs independent trials over a FIRE configuration.

    The configuration and the correlation factor are shared read-only; every
    trial gets its own portfolio, cost-of-living schedule and history.
    """

    def __init__(self, config: FireConfig, random_seed: Optional[int] = None):
        self.config = config
        seed = random_seed if random_seed is not None else config.simulation.random_seed
        self.source = NormalSource(seed)

    def run(
        self,
        progress: Optional[Callable[[int, int], None]] = None,
        should_cancel: Optional[Callable[[], bool]] = None
    ) -> list[TrialResult]:
        """
        Run all trials.

        Args:
            progress: Called as progress(completed, total) after each trial
            should_cancel: Checked before each trial; returning True stops the
                run and returns the trials completed so far

        Returns:
            TrialResults in submission order

        Raises:
            NonPositiveDefiniteCorrelation: if the correlation pairs are
                inconsistent (no trial is run)
        """
        sim = self.config.simulation
        if not self.config.assets:
            logger.warning("No assets configured; nothing to simulate")
            return []
        if sim.times == 0:
            return []

        correlation = CorrelationModel(self.config.asset_names, self.config.correlations)
        generator = ReturnGenerator(correlation, self.source)

        logger.info(
            "Running %d trials over %d months for %d assets",
            sim.times, sim.total_months, len(self.config.assets)
        )

        results = []
        for t in range(sim.times):
            if should_cancel is not None and should_cancel():
                logger.info("Simulation cancelled after %d trials", len(results))
                break
            results.append(self._run_trial(t + 1, generator))
            if progress is not None:
                progress(t + 1, sim.times)

        return results

    def _run_trial(
        self,
        trial_id: int,
        generator: ReturnGenerator
    ) -> TrialResult:
        sim = self.config.simulation
        portfolio = Portfolio.from_templates(self.config.assets)
        life_cost = LifeCostSchedule(self.config.life_costs, sim.inflation_rate)

        cash = sim.cash
        transfer_assets = portfolio.total_value()
        failed = False
        failure_month = sim.total_months
        history = []

        for month in range(sim.total_months):
            if failed:
                break

            tax_rate = resolve_tax_rate(month, self.config.tax_rates)
            monthly_cost = life_cost.step(month)

            flow = handle_income_and_expense(
                month, cash, self.config.incomes, self.config.big_expenses, monthly_cost
            )
            cash = flow.cash

            plan = apply_recurring_investments(month, cash, portfolio, self.config.recurring)
            cash = plan.cash

            tax = 0.0
            if flow.shortfall > 0:
                sale = liquidate_for_shortfall(flow.shortfall, cash, portfolio, tax_rate, month)
                cash = sale.cash
                tax = sale.tax
                if sale.failed:
                    failed = True
                    failure_month = month

            returns = generator.apply(portfolio, month, tax_rate)
            total_assets = returns.financial_assets + cash
            if total_assets < 0:
                failed = True
                failure_month = month

            history.append(TrialHistoryEntry(
                month=month,
                year_month=format_year_month(month),
                transfer_assets=transfer_assets,
                expense=flow.expense,
                income=flow.income,
                tax=tax,
                cash=cash,
                investment=plan.invested,
                financial_assets=returns.financial_assets,
                total_assets=total_assets,
                asset_details=returns.details,
                is_failure=failed
            ))
            transfer_assets = returns.financial_assets

        return TrialResult(
            trial_id=trial_id,
            success=not failed,
            failure_month=failure_month,
            history=history
        )
