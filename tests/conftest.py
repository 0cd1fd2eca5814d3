"""
Shared test fixtures for all test modules.
"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from firesim.config import (
    FireConfig,
    SimulationConfig,
    CorrelationPair,
    LifeCostEvent,
    IncomeEvent,
    TaxRateEvent,
)
from firesim.portfolio.portfolio import Asset, Portfolio


@pytest.fixture
def taxable_asset() -> Asset:
    """100 units at 100 per unit, bought at 50, taxable from the start."""
    return Asset(
        name="Index Fund",
        units=100,
        value_per_unit=100.0,
        unit_size=1,
        average_price=50.0,
        expected_return=5.0,
        volatility=15.0
    )


@pytest.fixture
def exempt_asset() -> Asset:
    """Tax-exempt for the first 10 years."""
    return Asset(
        name="Tax-Free Account",
        units=200,
        value_per_unit=50.0,
        unit_size=1,
        average_price=40.0,
        expected_return=4.0,
        volatility=10.0,
        tax_start_year=10,
        tax_start_month=0
    )


@pytest.fixture
def simple_portfolio(taxable_asset, exempt_asset) -> Portfolio:
    return Portfolio.from_templates([taxable_asset, exempt_asset])


@pytest.fixture
def flat_asset() -> Asset:
    """Zero return and zero volatility: the price never moves."""
    return Asset(
        name="Flat",
        units=1000,
        value_per_unit=10000.0,
        unit_size=10000,
        average_price=10000.0,
        expected_return=0.0,
        volatility=0.0
    )


@pytest.fixture
def retirement_config(taxable_asset, exempt_asset) -> FireConfig:
    """Two correlated assets funding a modest cost of living for 5 years."""
    return FireConfig(
        simulation=SimulationConfig(years=5, times=20, cash=1000.0, inflation_rate=2.0, random_seed=42),
        assets=[taxable_asset, exempt_asset],
        correlations=[CorrelationPair("Index Fund", "Tax-Free Account", 0.5)],
        life_costs=[LifeCostEvent(month=0, amount=150.0)],
        incomes=[IncomeEvent(amount=50.0, start_month=0, end_month=23)],
        tax_rates=[TaxRateEvent(month=0, rate=20.0)],
    )
