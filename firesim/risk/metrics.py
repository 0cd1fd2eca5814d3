"""
Aggregate statistics over simulated FIRE trials.
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence
import numpy as np

if TYPE_CHECKING:
    from firesim.simulation.monte_carlo import TrialResult


def calculate_percentile(values: Sequence[float], percentile: float) -> float:
    """
    Percentile with linear interpolation between order statistics.

    Args:
        values: Sample values (any order)
        percentile: Percentile in [0, 100]

    Returns:
        Interpolated percentile, 0.0 for an empty sample
    """
    if len(values) == 0:
        return 0.0
    return float(np.percentile(np.asarray(values, dtype=np.float64), percentile))


@dataclass
class SimulationSummary:
    """Success statistics of a multi-trial run."""

    num_trials: int
    success_count: int
    median_final_assets: float  # Successful trials, 50th percentile
    worst_10th_final_assets: float  # Successful trials, 10th percentile
    median_failure_assets: float  # Failed trials, 50th percentile
    median_failure_month: float  # Failed trials, months until failure (1-based)

    @property
    def failure_count(self) -> int:
        return self.num_trials - self.success_count

    @property
    def success_rate(self) -> float:
        if self.num_trials == 0:
            return 0.0
        return self.success_count / self.num_trials

    @property
    def failure_rate(self) -> float:
        if self.num_trials == 0:
            return 0.0
        return 1 - self.success_rate


def summarize_trials(results: Sequence["TrialResult"]) -> SimulationSummary:
    """Compute success rate and final-asset/failure-month percentiles."""
    successful = [r.final_total_assets for r in results if r.success]
    failed = [r.final_total_assets for r in results if not r.success]
    failure_months = [r.failure_month + 1 for r in results if not r.success]

    return SimulationSummary(
        num_trials=len(results),
        success_count=len(successful),
        median_final_assets=calculate_percentile(successful, 50),
        worst_10th_final_assets=calculate_percentile(successful, 10),
        median_failure_assets=calculate_percentile(failed, 50),
        median_failure_month=calculate_percentile(failure_months, 50),
    )


@dataclass
class Assessment:
    stars: int  # Out of 10
    label: str
    low_tail_warning: bool


# (minimum success rate in percent, stars, label)
ASSESSMENT_TIERS = [
    (99, 10, "Consider the risk of not retiring"),
    (95, 9, "Very high certainty"),
    (90, 7, "High certainty with residual risk"),
    (80, 5, "Danger zone, review the plan"),
    (50, 3, "Very risky"),
    (40, 2, "Not viable"),
    (20, 1, "Far from viable"),
]


def assess_success_rate(success_rate_pct: float, worst_10th_assets: float) -> Assessment:
    """
    Rate a plan by its success rate.

    A warning is raised for otherwise passable plans (>= 50%) whose pessimistic
    successful outcome leaves nothing behind.
    """
    stars, label = 0, "Insufficient"
    for threshold, tier_stars, tier_label in ASSESSMENT_TIERS:
        if success_rate_pct >= threshold:
            stars, label = tier_stars, tier_label
            break

    return Assessment(
        stars=stars,
        label=label,
        low_tail_warning=success_rate_pct >= 50 and worst_10th_assets <= 0
    )
