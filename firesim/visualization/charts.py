"""
Plotly visualizations for FIRE simulation results.
"""
from typing import Sequence
import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from firesim.risk.metrics import ASSESSMENT_TIERS, assess_success_rate, summarize_trials
from firesim.simulation.monte_carlo import TrialResult


def plot_trial_history(result: TrialResult) -> go.Figure:
    """
    Plot total assets of one trial on a linear and a logarithmic axis.

    Months with total assets of zero or less are left out of the log trace.

    Args:
        result: Trial to plot

    Returns:
        Plotly figure
    """
    fig = make_subplots(specs=[[{"secondary_y": True}]])

    labels = [entry.year_month for entry in result.history]
    totals = [entry.total_assets for entry in result.history]
    # Non-positive totals have no log value; leave a gap
    log_totals = [t if t > 0 else None for t in totals]
    color = 'rgba(52, 152, 219, 1)' if result.success else 'rgba(231, 76, 60, 1)'

    fig.add_trace(go.Scatter(
        x=labels,
        y=totals,
        mode='lines',
        name='Total assets (linear)',
        line=dict(width=2, color=color)
    ), secondary_y=False)

    fig.add_trace(go.Scatter(
        x=labels,
        y=log_totals,
        mode='lines',
        name='Total assets (log)',
        line=dict(width=2, color='rgba(155, 89, 182, 1)')
    ), secondary_y=True)

    outcome = 'success' if result.success else 'failure'
    fig.update_layout(
        title=f'Trial #{result.trial_id} - total assets ({outcome})',
        xaxis_title='Period',
        hovermode='x unified',
        legend=dict(yanchor="top", y=0.99, xanchor="left", x=0.01)
    )
    fig.update_yaxes(title_text='Total assets (linear)', tickformat=',.0f', secondary_y=False)
    fig.update_yaxes(title_text='Total assets (log)', type='log', secondary_y=True)

    return fig


def plot_final_assets_distribution(results: Sequence[TrialResult]) -> go.Figure:
    """
    Histogram of final total assets, split by trial outcome.

    Args:
        results: Trial results

    Returns:
        Plotly figure
    """
    fig = go.Figure()

    successful = [r.final_total_assets for r in results if r.success]
    failed = [r.final_total_assets for r in results if not r.success]

    if successful:
        fig.add_trace(go.Histogram(
            x=successful,
            nbinsx=50,
            name='Successful',
            marker_color='rgba(100, 149, 237, 0.7)',
            opacity=0.7
        ))
    if failed:
        fig.add_trace(go.Histogram(
            x=failed,
            nbinsx=50,
            name='Failed',
            marker_color='rgba(255, 100, 100, 0.7)',
            opacity=0.7
        ))

    if successful:
        summary = summarize_trials(results)
        fig.add_vline(
            x=summary.median_final_assets,
            line_dash="dash",
            line_color="green",
            annotation_text=f"Median: {summary.median_final_assets:,.0f}"
        )
        fig.add_vline(
            x=summary.worst_10th_final_assets,
            line_dash="dash",
            line_color="orange",
            annotation_text=f"10th pct: {summary.worst_10th_final_assets:,.0f}"
        )

    fig.update_layout(
        title='Distribution of final total assets',
        xaxis_title='Final total assets',
        yaxis_title='Trials',
        barmode='overlay',
        xaxis_tickformat=',.0f'
    )

    return fig


def plot_failure_months_histogram(results: Sequence[TrialResult]) -> go.Figure:
    """
    Histogram of the years until failure for failed trials.

    Args:
        results: Trial results

    Returns:
        Plotly figure
    """
    fig = go.Figure()

    failure_years = np.array([(r.failure_month + 1) / 12 for r in results if not r.success])
    failure_rate = len(failure_years) / len(results) if results else 0.0

    if len(failure_years) > 0:
        fig.add_trace(go.Histogram(
            x=failure_years,
            nbinsx=30,
            name='Time to failure',
            marker_color='rgba(255, 100, 100, 0.7)',
            opacity=0.7
        ))

        median_years = float(np.median(failure_years))
        fig.add_vline(
            x=median_years,
            line_dash="dash",
            line_color="red",
            annotation_text=f"Median: {median_years:.1f} years"
        )

    fig.update_layout(
        title=f'Time to failure (failure rate: {failure_rate * 100:.1f}%)',
        xaxis_title='Years until failure',
        yaxis_title='Trials',
        showlegend=False
    )

    return fig


def _tier_color(stars: int, alpha: float) -> str:
    if stars >= 9:
        return f'rgba(46, 204, 113, {alpha})'
    if stars >= 5:
        return f'rgba(243, 156, 18, {alpha})'
    return f'rgba(231, 76, 60, {alpha})'


def plot_success_rate_gauge(success_rate: float) -> go.Figure:
    """
    Gauge of the success rate, banded by the assessment tiers.

    Args:
        success_rate: Success rate between 0 and 1

    Returns:
        Plotly figure; the title carries the tier label
    """
    rate_pct = success_rate * 100
    assessment = assess_success_rate(rate_pct, worst_10th_assets=0.0)
    stars, label = assessment.stars, assessment.label

    steps = []
    upper = 100
    for threshold, tier_stars, _ in ASSESSMENT_TIERS:
        steps.append({'range': [threshold, upper], 'color': _tier_color(tier_stars, 0.3)})
        upper = threshold
    steps.append({'range': [0, upper], 'color': _tier_color(0, 0.3)})

    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=rate_pct,
        title={'text': f"FIRE success rate<br><sub>{label} ({stars}/10)</sub>"},
        number={'suffix': '%', 'valueformat': '.1f'},
        gauge={
            'axis': {'range': [0, 100], 'tickvals': sorted([0] + [t for t, _, _ in ASSESSMENT_TIERS])},
            'bar': {'color': _tier_color(stars, 1)},
            'steps': steps,
        }
    ))

    fig.update_layout(height=300)

    return fig
