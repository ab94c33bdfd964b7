"""
Metrics and analyzer wiring for the analytics engine.

Composes the aggregators and health score into one AnalyticsMetrics, and
maps each analyzer name to a runner that derives the analyzer's inputs
from a CollectedData snapshot.

All functions are:
- Pure (no side effects)
- Deterministic (same inputs -> same outputs)
"""

from typing import Callable

from fin_analytics.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from fin_analytics.engine.aggregators import (
    compute_balance,
    compute_growth,
    compute_investment,
    compute_liability,
    compute_savings,
    compute_spending,
)
from fin_analytics.engine.health_score import compute_health_score
from fin_analytics.engine.risk import analyze_portfolio_risk, analyze_spending_comparison
from fin_analytics.engine.series import (
    build_category_totals,
    build_daily_changes,
    build_holding_infos,
    build_monthly_summaries,
    latest_expense_month,
)
from fin_analytics.engine.trends import (
    analyze_income_stability,
    analyze_mom_trend,
    analyze_savings_trajectory,
)
from fin_analytics.models import (
    AnalyticsMetrics,
    AnalyzerName,
    CollectedData,
    IncomeStabilityResult,
    MoMTrendResult,
    PortfolioRiskResult,
    SavingsTrajectoryResult,
    SpendingComparisonResult,
)


# =============================================================================
# Metrics
# =============================================================================


def compute_metrics(
    data: CollectedData,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> AnalyticsMetrics:
    """
    Compute every aggregator and the health score for one snapshot.

    Args:
        data: Collected snapshot for one group
        config: Engine configuration

    Returns:
        AnalyticsMetrics
    """
    savings = compute_savings(data, config)
    investment = compute_investment(data, config)
    spending = compute_spending(data, config)
    growth = compute_growth(data, config)
    balance = compute_balance(data)
    liability = compute_liability(data, config)

    return AnalyticsMetrics(
        savings=savings,
        investment=investment,
        spending=spending,
        growth=growth,
        balance=balance,
        liability=liability,
        health_score=compute_health_score(savings, investment, spending, growth, balance),
    )


# =============================================================================
# Analyzer Runners
# =============================================================================


def run_mom_trend(
    data: CollectedData, metrics: AnalyticsMetrics, config: EngineConfig
) -> MoMTrendResult:
    return analyze_mom_trend(build_monthly_summaries(data.transactions), config)


def run_income_stability(
    data: CollectedData, metrics: AnalyticsMetrics, config: EngineConfig
) -> IncomeStabilityResult:
    return analyze_income_stability(build_monthly_summaries(data.transactions), config)


def run_savings_trajectory(
    data: CollectedData, metrics: AnalyticsMetrics, config: EngineConfig
) -> SavingsTrajectoryResult:
    return analyze_savings_trajectory(
        metrics.savings, build_monthly_summaries(data.transactions), config
    )


def run_spending_comparison(
    data: CollectedData, metrics: AnalyticsMetrics, config: EngineConfig
) -> SpendingComparisonResult:
    category_totals = build_category_totals(data.transactions, config)
    latest = latest_expense_month(category_totals)
    if latest is None:
        return SpendingComparisonResult()
    return analyze_spending_comparison(category_totals, latest, config)


def run_portfolio_risk(
    data: CollectedData, metrics: AnalyticsMetrics, config: EngineConfig
) -> PortfolioRiskResult:
    return analyze_portfolio_risk(
        build_holding_infos(data, config),
        build_daily_changes(data, config),
        metrics.investment.diversification_score,
        config,
    )


ANALYZER_RUNNERS: dict[AnalyzerName, Callable] = {
    AnalyzerName.MOM_TREND: run_mom_trend,
    AnalyzerName.INCOME_STABILITY: run_income_stability,
    AnalyzerName.SAVINGS_TRAJECTORY: run_savings_trajectory,
    AnalyzerName.SPENDING_COMPARISON: run_spending_comparison,
    AnalyzerName.PORTFOLIO_RISK: run_portfolio_risk,
}
