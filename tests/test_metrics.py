"""
Tests for fin_analytics/engine/metrics.py

Covers:
- Analyzer runners see the same monthly series as the analyzers
- A complete low-spending latest month is kept by income stability
"""

import pytest

from fin_analytics.config import DEFAULT_ENGINE_CONFIG
from fin_analytics.engine.metrics import (
    ANALYZER_RUNNERS,
    compute_metrics,
    run_income_stability,
    run_mom_trend,
)
from fin_analytics.engine.series import build_monthly_summaries
from fin_analytics.engine.trends import analyze_income_stability, analyze_mom_trend
from fin_analytics.models import AnalyzerName, CollectedData, Transaction


# =============================================================================
# Test Fixtures
# =============================================================================


def make_data(pairs: list[tuple[str, int, int]]) -> CollectedData:
    """Create a snapshot from (month, income, expense) triples."""
    transactions = []
    for month, income, expense in pairs:
        transactions += [
            Transaction(date=f"{month}-25", category="Salary", amount=income, type="income"),
            Transaction(date=f"{month}-10", category="Food", amount=expense, type="expense"),
        ]
    return CollectedData(transactions=transactions)


def make_bonus_month_data() -> CollectedData:
    """Three ordinary months, then a bonus month with very low spending."""
    return make_data([
        ("2025-01", 300_000, 200_000),
        ("2025-02", 300_000, 200_000),
        ("2025-03", 300_000, 200_000),
        ("2025-04", 600_000, 50_000),
    ])


# =============================================================================
# Analyzer Runners
# =============================================================================


class TestAnalyzerRunners:
    """Tests for the analyzer runners."""

    def test_every_analyzer_has_a_runner(self):
        assert set(ANALYZER_RUNNERS) == set(AnalyzerName)

    def test_income_stability_matches_analyzer(self):
        data = make_bonus_month_data()
        metrics = compute_metrics(data, DEFAULT_ENGINE_CONFIG)

        expected = analyze_income_stability(
            build_monthly_summaries(data.transactions), DEFAULT_ENGINE_CONFIG
        )
        result = run_income_stability(data, metrics, DEFAULT_ENGINE_CONFIG)

        assert result == expected

    def test_income_stability_keeps_low_spending_month(self):
        data = make_bonus_month_data()
        metrics = compute_metrics(data, DEFAULT_ENGINE_CONFIG)

        result = run_income_stability(data, metrics, DEFAULT_ENGINE_CONFIG)

        assert result.mean == pytest.approx(375_000)
        assert result.max_month.month == "2025-04"
        assert result.stability != "very_stable"

    def test_mom_trend_flags_but_keeps_low_spending_month(self):
        data = make_bonus_month_data()
        metrics = compute_metrics(data, DEFAULT_ENGINE_CONFIG)

        result = run_mom_trend(data, metrics, DEFAULT_ENGINE_CONFIG)

        assert result == analyze_mom_trend(
            build_monthly_summaries(data.transactions), DEFAULT_ENGINE_CONFIG
        )
        assert result.latest_month_partial is True
