"""
Tests for report export functions.
"""
import io

import pandas as pd
import pytest

from firesim.export.reports import (
    HISTORY_COLUMNS,
    create_csv_report,
    create_excel_report,
    format_currency,
    history_to_dataframe,
    results_to_dataframe,
    select_trials,
)
from firesim.simulation.monte_carlo import FireSimulator, TrialResult


@pytest.fixture
def results(retirement_config):
    return FireSimulator(retirement_config).run()


class TestHistoryToDataFrame:
    def test_columns(self, results):
        df = history_to_dataframe(results[0])
        assert list(df.columns) == HISTORY_COLUMNS
        assert len(df) == len(results[0].history)

    def test_asset_columns(self, results, retirement_config):
        df = history_to_dataframe(results[0], retirement_config.asset_names)
        assert 'Index Fund Value' in df.columns
        assert 'Tax-Free Account Units' in df.columns

    def test_empty_history(self):
        df = history_to_dataframe(TrialResult(trial_id=1, success=True, failure_month=0))
        assert df.empty
        assert list(df.columns) == HISTORY_COLUMNS


class TestResultsToDataFrame:
    def test_one_row_per_trial(self, results):
        df = results_to_dataframe(results)
        assert len(df) == 20
        assert df['Trial'].tolist() == list(range(1, 21))


class TestExcelReport:
    def test_sheets(self, results, retirement_config):
        data = create_excel_report(retirement_config, results, detail_trials=2)
        assert isinstance(data, bytes)
        assert len(data) > 0

        sheets = pd.read_excel(io.BytesIO(data), sheet_name=None, engine='openpyxl')
        assert list(sheets) == ['Summary', 'Assets', 'Trials', 'Trial 1', 'Trial 2']
        assert len(sheets['Trials']) == 20

        assets = sheets['Assets']
        assert assets['Name'].tolist() == ['Index Fund', 'Tax-Free Account']
        assert assets['Market Value'].tolist() == [10000.0, 10000.0]


class TestCsvReport:
    def test_content(self, results):
        csv = create_csv_report(results)
        assert "FIRE Monte Carlo Simulation Report" in csv
        assert "Success Rate" in csv
        assert "Final Total Assets" in csv


def test_format_currency():
    assert format_currency(1234567.4) == "¥1,234,567"
    assert format_currency(1500, currency="$") == "$1,500"


class TestSelectTrials:
    def test_failed_only(self):
        results = [
            TrialResult(trial_id=1, success=True, failure_month=12),
            TrialResult(trial_id=2, success=False, failure_month=4),
            TrialResult(trial_id=3, success=False, failure_month=7),
        ]
        assert [r.trial_id for r in select_trials(results)] == [1, 2, 3]
        assert [r.trial_id for r in select_trials(results, failed_only=True)] == [2, 3]

    def test_no_failures(self):
        results = [TrialResult(trial_id=1, success=True, failure_month=12)]
        assert select_trials(results, failed_only=True) == []
