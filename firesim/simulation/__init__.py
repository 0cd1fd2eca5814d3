from .monte_carlo import FireSimulator, TrialResult, TrialHistoryEntry, format_year_month
from .returns import NormalSource, ReturnGenerator, AssetDetail
from .cashflow import handle_income_and_expense, LifeCostSchedule, CashFlowResult
from .savings_plan import apply_recurring_investments, is_rule_active, SavingsPlanResult
from .tax_costs import resolve_tax_rate, unit_sale_terms, DEFAULT_TAX_RATE
from .withdrawal import liquidate_for_shortfall, SaleResult
