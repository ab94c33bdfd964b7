"""
Engine module for the analytics service.

Contains pure functions for metric aggregation, health scoring and the
historical trend/risk analyzers.
"""

from fin_analytics.engine.aggregators import (
    compute_balance,
    compute_growth,
    compute_investment,
    compute_liability,
    compute_savings,
    compute_spending,
    detect_anomalies,
    diversification_score,
)
from fin_analytics.engine.health_score import compute_health_score
from fin_analytics.engine.metrics import ANALYZER_RUNNERS, compute_metrics
from fin_analytics.engine.risk import analyze_portfolio_risk, analyze_spending_comparison
from fin_analytics.engine.series import (
    build_category_totals,
    build_daily_changes,
    build_holding_infos,
    build_monthly_summaries,
    exclude_month,
    latest_expense_month,
)
from fin_analytics.engine.trends import (
    analyze_income_stability,
    analyze_mom_trend,
    analyze_savings_trajectory,
    is_partial_month,
)

__all__ = [
    # Aggregators
    "compute_savings",
    "compute_investment",
    "compute_spending",
    "detect_anomalies",
    "diversification_score",
    "compute_liability",
    "compute_growth",
    "compute_balance",
    # Health score
    "compute_health_score",
    # Metrics
    "compute_metrics",
    "ANALYZER_RUNNERS",
    # Series
    "build_monthly_summaries",
    "build_category_totals",
    "latest_expense_month",
    "exclude_month",
    "build_holding_infos",
    "build_daily_changes",
    # Analyzers
    "analyze_mom_trend",
    "analyze_income_stability",
    "analyze_savings_trajectory",
    "is_partial_month",
    "analyze_spending_comparison",
    "analyze_portfolio_risk",
]
