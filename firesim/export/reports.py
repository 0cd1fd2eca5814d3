"""
Export functionality for simulation results.
"""
import io
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Sequence
import pandas as pd

from firesim.portfolio.portfolio import Portfolio
from firesim.risk.metrics import summarize_trials

if TYPE_CHECKING:
    from firesim.config import FireConfig
    from firesim.risk.metrics import SimulationSummary
    from firesim.simulation.monte_carlo import TrialResult


HISTORY_COLUMNS = [
    'Month', 'Year/Month', 'Transferred Assets', 'Expense', 'Income', 'Tax',
    'Cash', 'Investment', 'Financial Assets', 'Total Assets', 'Failure'
]


def history_to_dataframe(
    result: "TrialResult",
    asset_names: Optional[Sequence[str]] = None
) -> pd.DataFrame:
    """
    Month-by-month table of one trial.

    Args:
        result: Trial to tabulate
        asset_names: If given, adds value and unit columns per asset

    Returns:
        DataFrame with one row per simulated month
    """
    rows = []
    for entry in result.history:
        row = {
            'Month': entry.month,
            'Year/Month': entry.year_month,
            'Transferred Assets': entry.transfer_assets,
            'Expense': entry.expense,
            'Income': entry.income,
            'Tax': entry.tax,
            'Cash': entry.cash,
            'Investment': entry.investment,
            'Financial Assets': entry.financial_assets,
            'Total Assets': entry.total_assets,
            'Failure': entry.is_failure,
        }
        if asset_names is not None:
            for name, detail in zip(asset_names, entry.asset_details):
                row[f'{name} Rate %'] = detail.rate
                row[f'{name} Value'] = detail.value
                row[f'{name} Units'] = detail.units
        rows.append(row)

    if not rows:
        return pd.DataFrame(columns=HISTORY_COLUMNS)
    return pd.DataFrame(rows)


def select_trials(
    results: Sequence["TrialResult"],
    failed_only: bool = False
) -> list["TrialResult"]:
    """Trials for the detail view, optionally only the failed ones."""
    if failed_only:
        return [r for r in results if not r.success]
    return list(results)


def results_to_dataframe(results: Sequence["TrialResult"]) -> pd.DataFrame:
    """One row per trial: outcome, failure month and final total assets."""
    return pd.DataFrame({
        'Trial': [r.trial_id for r in results],
        'Success': [r.success for r in results],
        'Failure Month': [r.failure_month for r in results],
        'Months Simulated': [len(r.history) for r in results],
        'Final Total Assets': [r.final_total_assets for r in results],
    })


def _summary_dataframe(summary: "SimulationSummary") -> pd.DataFrame:
    return pd.DataFrame({
        'Metric': [
            'Trials',
            'Successes',
            'Failures',
            'Success Rate',
            'Final Assets (Median, successful)',
            'Final Assets (10th pct, successful)',
            'Final Assets (Median, failed)',
            'Months to Failure (Median)',
        ],
        'Value': [
            summary.num_trials,
            summary.success_count,
            summary.failure_count,
            summary.success_rate,
            summary.median_final_assets,
            summary.worst_10th_final_assets,
            summary.median_failure_assets,
            summary.median_failure_month,
        ]
    })


def create_excel_report(
    config: "FireConfig",
    results: Sequence["TrialResult"],
    detail_trials: int = 10
) -> bytes:
    """
    Create an Excel report with multiple sheets.

    Args:
        config: Configuration the results were produced from
        results: Trial results
        detail_trials: Number of leading trials written as their own sheet

    Returns:
        Excel file as bytes
    """
    summary = summarize_trials(results)
    output = io.BytesIO()

    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        _summary_dataframe(summary).to_excel(writer, sheet_name='Summary', index=False)

        holdings = Portfolio.from_templates(config.assets).to_dataframe()
        holdings.to_excel(writer, sheet_name='Assets', index=False)

        results_to_dataframe(results).to_excel(writer, sheet_name='Trials', index=False)

        for result in list(results)[:detail_trials]:
            history_to_dataframe(result, config.asset_names).to_excel(
                writer, sheet_name=f'Trial {result.trial_id}', index=False
            )

    output.seek(0)
    return output.getvalue()


def create_csv_report(results: Sequence["TrialResult"]) -> str:
    """
    Create a simple CSV summary report.

    Returns:
        CSV content as string
    """
    summary = summarize_trials(results)
    lines = [
        "FIRE Monte Carlo Simulation Report",
        f"Created: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        "=== Summary ===",
        f"Trials,{summary.num_trials}",
        f"Success Rate,{summary.success_rate:.2%}",
        f"Final Assets (Median),{summary.median_final_assets:.2f}",
        f"Final Assets (10th pct),{summary.worst_10th_final_assets:.2f}",
        f"Failed Final Assets (Median),{summary.median_failure_assets:.2f}",
        f"Months to Failure (Median),{summary.median_failure_month:.1f}",
        "",
        "=== Trials ===",
        results_to_dataframe(results).to_csv(index=False).rstrip("\n"),
    ]
    return "\n".join(lines)


def format_currency(value: float, currency: str = "¥") -> str:
    """Format a number as whole currency units."""
    return f"{currency}{round(value):,}"
