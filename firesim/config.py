"""
Configuration data model for the FIRE simulation.

The configuration is passed explicitly into FireSimulator; nothing here is
global. Month fields are indices counted from the simulation start (month 0).
"""
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional

from firesim.errors import ConfigurationError
from firesim.portfolio.portfolio import Asset


class SchedulePattern(Enum):
    """Execution pattern of a recurring investment."""
    ONCE = "once"
    MONTHLY = "monthly"
    ANNUAL = "annual"


@dataclass
class SimulationConfig:
    """Horizon, trial count, starting cash and inflation."""
    years: int = 20
    times: int = 100
    cash: float = 0.0
    inflation_rate: float = 2.0  # Annual, percent
    random_seed: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.years, bool) or int(self.years) != self.years or self.years < 0:
            raise ConfigurationError("Horizon (years) must be a non-negative integer")
        if isinstance(self.times, bool) or int(self.times) != self.times or self.times < 0:
            raise ConfigurationError("Number of trials must be a non-negative integer")
        if self.inflation_rate <= -100:
            raise ConfigurationError("Inflation rate must be above -100%")
        self.years = int(self.years)
        self.times = int(self.times)

    @property
    def total_months(self) -> int:
        return self.years * 12


@dataclass
class CorrelationPair:
    asset_a: str
    asset_b: str
    coefficient: float

    def __post_init__(self):
        if not -1 <= self.coefficient <= 1:
            raise ConfigurationError(
                f"Correlation {self.asset_a}/{self.asset_b} must be between -1 and 1"
            )


@dataclass
class RecurringInvestmentRule:
    """Scheduled additional purchase of one asset."""
    asset: str
    amount: float
    pattern: SchedulePattern = SchedulePattern.MONTHLY
    start_month: int = 0
    end_month: Optional[int] = None  # None = until the end of the horizon

    def __post_init__(self):
        if not isinstance(self.pattern, SchedulePattern):
            try:
                self.pattern = SchedulePattern(self.pattern)
            except ValueError as e:
                raise ConfigurationError(f"Unknown schedule pattern: {self.pattern!r}") from e
        if self.amount < 0:
            raise ConfigurationError("Investment amount cannot be negative")
        if self.start_month < 0:
            raise ConfigurationError("Start month cannot be negative")
        if self.pattern is SchedulePattern.ONCE:
            self.end_month = self.start_month
        elif self.end_month is not None and self.end_month < self.start_month:
            raise ConfigurationError("End month must not be before start month")


@dataclass
class LifeCostEvent:
    """Monthly cost of living in force from `month` on."""
    month: int
    amount: float


@dataclass
class BigExpenseEvent:
    """One-off expense paid in `month`."""
    month: int
    amount: float


@dataclass
class IncomeEvent:
    amount: float
    start_month: int = 0
    end_month: Optional[int] = None  # None = open-ended

    def is_active(self, month: int) -> bool:
        if month < self.start_month:
            return False
        return self.end_month is None or month <= self.end_month


@dataclass
class TaxRateEvent:
    """Capital gains rate (percent) effective from `month`."""
    month: int
    rate: float

    def __post_init__(self):
        if not 0 <= self.rate <= 100:
            raise ConfigurationError("Tax rate must be between 0 and 100 percent")


@dataclass
class FireConfig:
    """Complete engine input."""
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    assets: list[Asset] = field(default_factory=list)
    correlations: list[CorrelationPair] = field(default_factory=list)
    recurring: list[RecurringInvestmentRule] = field(default_factory=list)
    life_costs: list[LifeCostEvent] = field(default_factory=list)
    big_expenses: list[BigExpenseEvent] = field(default_factory=list)
    incomes: list[IncomeEvent] = field(default_factory=list)
    tax_rates: list[TaxRateEvent] = field(default_factory=list)

    def __post_init__(self):
        names = self.asset_names
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate asset names: {', '.join(duplicates)}")

    @property
    def asset_names(self) -> list[str]:
        return [a.name for a in self.assets]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FireConfig":
        """
        Build a configuration from plain structured data.

        Expected keys: config, stocks, correlations, recurring, life_cost,
        big_expense, income, tax. Missing sections default to empty.
        Entry keys match the dataclass field names.
        """
        try:
            return cls(
                simulation=SimulationConfig(**data.get('config', {})),
                assets=[Asset(**s) for s in data.get('stocks', [])],
                correlations=[CorrelationPair(**c) for c in data.get('correlations', [])],
                recurring=[RecurringInvestmentRule(**r) for r in data.get('recurring', [])],
                life_costs=[LifeCostEvent(**e) for e in data.get('life_cost', [])],
                big_expenses=[BigExpenseEvent(**e) for e in data.get('big_expense', [])],
                incomes=[IncomeEvent(**e) for e in data.get('income', [])],
                tax_rates=[TaxRateEvent(**e) for e in data.get('tax', [])],
            )
        except TypeError as e:
            raise ConfigurationError(f"Malformed configuration: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Inverse of from_dict; the result is JSON-serializable."""
        recurring = []
        for rule in self.recurring:
            entry = asdict(rule)
            entry['pattern'] = rule.pattern.value
            recurring.append(entry)

        return {
            'config': asdict(self.simulation),
            'stocks': [asdict(a) for a in self.assets],
            'correlations': [asdict(c) for c in self.correlations],
            'recurring': recurring,
            'life_cost': [asdict(e) for e in self.life_costs],
            'big_expense': [asdict(e) for e in self.big_expenses],
            'income': [asdict(e) for e in self.incomes],
            'tax': [asdict(e) for e in self.tax_rates],
        }
