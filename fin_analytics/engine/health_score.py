"""
Health score engine.

Maps aggregator outputs to a 0-100 composite score made of five
independent piecewise-linear sub-scores. Each sub-score is rounded
(half-up) before summing, so the total always equals the sum of the
category scores and never exceeds the sum of the maxima (100).
"""

from fin_analytics.engine.stats import round_half_up
from fin_analytics.models import (
    BalanceMetrics,
    GrowthMetrics,
    HealthScore,
    HealthScoreCategory,
    InvestmentMetrics,
    SavingsMetrics,
    SpendingMetrics,
)


EMERGENCY_FUND = "Emergency Fund"
SAVINGS_RATE = "Savings Rate"
DIVERSIFICATION = "Diversification"
ASSET_GROWTH = "Asset Growth"
SPENDING_STABILITY = "Spending Stability"

EMERGENCY_FUND_MAX = 25
SAVINGS_RATE_MAX = 25
DIVERSIFICATION_MAX = 20
ASSET_GROWTH_MAX = 15
SPENDING_STABILITY_MAX = 15


def lerp(value: float, low: float, high: float, out_low: float, out_high: float) -> float:
    """Linear interpolation with the fraction clamped to [0, 1]."""
    if high == low:
        return out_high
    t = max(0.0, min(1.0, (value - low) / (high - low)))
    return out_low + t * (out_high - out_low)


# =============================================================================
# Sub-scores
# =============================================================================


def score_emergency_fund(months: float) -> int:
    """0 months -> 0, 3 -> 15, 6+ -> 25."""
    if months >= 6:
        return EMERGENCY_FUND_MAX
    if months <= 0:
        return 0
    if months <= 3:
        return round_half_up(lerp(months, 0, 3, 0, 15))
    return round_half_up(lerp(months, 3, 6, 15, EMERGENCY_FUND_MAX))


def score_savings_rate(rate: float) -> int:
    """0% -> 0, 10% -> 8, 20% -> 17, 30%+ -> 25."""
    if rate >= 30:
        return SAVINGS_RATE_MAX
    if rate <= 0:
        return 0
    if rate <= 10:
        return round_half_up(lerp(rate, 0, 10, 0, 8))
    if rate <= 20:
        return round_half_up(lerp(rate, 10, 20, 8, 17))
    return round_half_up(lerp(rate, 20, 30, 17, SAVINGS_RATE_MAX))


def score_diversification(diversification: float) -> int:
    """Scale a 0-100 diversification score to 0-20."""
    clamped = max(0, min(100, diversification))
    return round_half_up(clamped / 100 * DIVERSIFICATION_MAX)


def score_growth(monthly_growth_rate: float) -> int:
    """-2%/month or worse -> 0, +2%/month or better -> 15."""
    if monthly_growth_rate >= 0.02:
        return ASSET_GROWTH_MAX
    if monthly_growth_rate <= -0.02:
        return 0
    return round_half_up(lerp(monthly_growth_rate, -0.02, 0.02, 0, ASSET_GROWTH_MAX))


def score_spending_stability(anomaly_count: int) -> int:
    """Each anomaly costs 5 points."""
    if anomaly_count == 0:
        return SPENDING_STABILITY_MAX
    if anomaly_count == 1:
        return 10
    if anomaly_count == 2:
        return 5
    return 0


# =============================================================================
# Composite
# =============================================================================


def compute_health_score(
    savings: SavingsMetrics,
    investment: InvestmentMetrics,
    spending: SpendingMetrics,
    growth: GrowthMetrics,
    balance: BalanceMetrics,
) -> HealthScore:
    """
    Compute the composite health score.

    Args:
        savings: Provides emergency_fund_months
        investment: Provides diversification_score
        spending: Provides anomalies
        growth: Provides monthly_growth_rate
        balance: Provides savings_rate

    Returns:
        HealthScore with five categories whose max scores sum to 100
    """
    categories = [
        HealthScoreCategory(
            name=EMERGENCY_FUND,
            score=score_emergency_fund(savings.emergency_fund_months),
            max_score=EMERGENCY_FUND_MAX,
        ),
        HealthScoreCategory(
            name=SAVINGS_RATE,
            score=score_savings_rate(balance.savings_rate),
            max_score=SAVINGS_RATE_MAX,
        ),
        HealthScoreCategory(
            name=DIVERSIFICATION,
            score=score_diversification(investment.diversification_score),
            max_score=DIVERSIFICATION_MAX,
        ),
        HealthScoreCategory(
            name=ASSET_GROWTH,
            score=score_growth(growth.monthly_growth_rate),
            max_score=ASSET_GROWTH_MAX,
        ),
        HealthScoreCategory(
            name=SPENDING_STABILITY,
            score=score_spending_stability(len(spending.anomalies)),
            max_score=SPENDING_STABILITY_MAX,
        ),
    ]

    return HealthScore(
        total_score=sum(c.score for c in categories),
        categories=categories,
    )
