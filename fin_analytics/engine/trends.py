"""
Historical trend analyzers.

Month-over-month trend, income stability and savings trajectory over a
MonthlySummary series. Each analyzer sorts its input by month itself and
returns a documented neutral result for empty input instead of raising.
"""

import math

from fin_analytics.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from fin_analytics.engine.stats import (
    average,
    change_rate,
    linear_slope,
    median,
    savings_rate,
    std_dev,
    streak,
)
from fin_analytics.models import (
    DiffFromMean,
    IncomeOutlier,
    IncomeStabilityResult,
    LatestVsAverage,
    MoMTrendResult,
    MonthComparison,
    MonthIncome,
    MonthlySummary,
    MonthNetIncome,
    RollingAverage,
    SavingsMetrics,
    SavingsRatePoint,
    SavingsTrajectoryResult,
    TrendStreaks,
)


def _sorted_by_month(summaries: list[MonthlySummary]) -> list[MonthlySummary]:
    return sorted(summaries, key=lambda m: m.month)


def _pct_of(diff: float, base: float) -> float:
    """diff / base as a percentage, 0 when base is not positive."""
    return diff / base * 100 if base > 0 else 0.0


# =============================================================================
# Month-over-Month Trend
# =============================================================================


def _compare_months(ordered: list[MonthlySummary]) -> list[MonthComparison]:
    comparisons: list[MonthComparison] = []
    for i, m in enumerate(ordered):
        prev = ordered[i - 1] if i > 0 else None
        comparisons.append(
            MonthComparison(
                month=m.month,
                total_income=m.total_income,
                total_expense=m.total_expense,
                net_income=m.net_income,
                savings_rate=savings_rate(m.total_income, m.total_expense),
                income_diff=m.total_income - prev.total_income if prev else None,
                expense_diff=m.total_expense - prev.total_expense if prev else None,
                net_income_diff=m.net_income - prev.net_income if prev else None,
                income_change_rate=change_rate(m.total_income, prev.total_income) if prev else None,
                expense_change_rate=(
                    change_rate(m.total_expense, prev.total_expense) if prev else None
                ),
                net_income_change_rate=(
                    change_rate(m.net_income, prev.net_income) if prev else None
                ),
            )
        )
    return comparisons


def _rolling_average(items: list[MonthlySummary]) -> RollingAverage:
    return RollingAverage(
        income=average([m.total_income for m in items]),
        expense=average([m.total_expense for m in items]),
        net_income=average([m.net_income for m in items]),
        savings_rate=average([savings_rate(m.total_income, m.total_expense) for m in items]),
    )


def _acceleration(comparisons: list[MonthComparison], config: EngineConfig) -> str:
    """Whether the month-over-month net income changes are themselves growing."""
    if len(comparisons) < 3:
        return "steady"

    diffs = [c.net_income_diff for c in comparisons[1:] if c.net_income_diff is not None]
    if len(diffs) < 2:
        return "steady"

    recent = diffs[-config.acceleration_window:]
    slope = linear_slope(recent)
    avg_abs_diff = average([abs(d) for d in recent])
    if avg_abs_diff > 0 and abs(slope) / avg_abs_diff > config.acceleration_ratio_threshold:
        return "accelerating" if slope > 0 else "decelerating"
    return "steady"


def is_partial_month(latest: MonthlySummary, prev: MonthlySummary, config: EngineConfig) -> bool:
    """Heuristic for an incomplete latest month (sharp drop vs the prior month)."""
    income_ratio = latest.total_income / prev.total_income if prev.total_income > 0 else 1
    expense_ratio = latest.total_expense / prev.total_expense if prev.total_expense > 0 else 1
    return income_ratio < config.partial_month_ratio or expense_ratio < config.partial_month_ratio


def analyze_mom_trend(
    monthly_summaries: list[MonthlySummary],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> MoMTrendResult:
    """
    Analyze month-over-month income/expense movement.

    Args:
        monthly_summaries: Monthly totals in any order
        config: Engine configuration with trend thresholds

    Returns:
        MoMTrendResult (neutral defaults for empty input)
    """
    if not monthly_summaries:
        return MoMTrendResult()

    ordered = _sorted_by_month(monthly_summaries)
    comparisons = _compare_months(ordered)

    streaks = TrendStreaks(
        income_streak=streak([m.total_income for m in ordered]),
        expense_streak=streak([m.total_expense for m in ordered]),
        net_income_streak=streak([m.net_income for m in ordered]),
        savings_rate_streak=streak([c.savings_rate for c in comparisons]),
    )

    overall_trend = "stable"
    if streaks.net_income_streak.months >= config.trend_streak_min_months:
        overall_trend = (
            "improving" if streaks.net_income_streak.direction == "increasing" else "worsening"
        )

    best = max(ordered, key=lambda m: m.net_income)
    worst = min(ordered, key=lambda m: m.net_income)

    three_month_avg = _rolling_average(ordered[-3:]) if len(ordered) >= 3 else None
    six_month_avg = _rolling_average(ordered[-6:]) if len(ordered) >= 6 else None

    latest = ordered[-1]
    latest_vs_three_month_avg = None
    if three_month_avg is not None:
        income_diff = latest.total_income - three_month_avg.income
        expense_diff = latest.total_expense - three_month_avg.expense
        latest_vs_three_month_avg = LatestVsAverage(
            income_diff=income_diff,
            income_diff_pct=_pct_of(income_diff, three_month_avg.income),
            expense_diff=expense_diff,
            expense_diff_pct=_pct_of(expense_diff, three_month_avg.expense),
            net_income_diff=latest.net_income - three_month_avg.net_income,
        )

    latest_month_partial = len(ordered) >= 2 and is_partial_month(latest, ordered[-2], config)

    return MoMTrendResult(
        latest_month_partial=latest_month_partial,
        monthly_comparisons=comparisons,
        streaks=streaks,
        overall_trend=overall_trend,
        acceleration=_acceleration(comparisons, config),
        best_month=MonthNetIncome(month=best.month, net_income=best.net_income),
        worst_month=MonthNetIncome(month=worst.month, net_income=worst.net_income),
        three_month_avg=three_month_avg,
        six_month_avg=six_month_avg,
        latest_vs_three_month_avg=latest_vs_three_month_avg,
    )


# =============================================================================
# Income Stability
# =============================================================================


def _stability_bucket(cv: float, config: EngineConfig) -> str:
    if cv < config.cv_very_stable:
        return "very_stable"
    if cv < config.cv_stable:
        return "stable"
    if cv < config.cv_variable:
        return "variable"
    return "highly_variable"


def analyze_income_stability(
    monthly_summaries: list[MonthlySummary],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> IncomeStabilityResult:
    """
    Measure how steady monthly income is.

    Coefficient of variation buckets the stability; months more than
    config.outlier_sigma standard deviations from the mean are outliers;
    the slope needs at least 3 points and must clear a dead-band of
    config.income_trend_dead_band x mean to count as a trend.
    """
    if not monthly_summaries:
        return IncomeStabilityResult()

    ordered = _sorted_by_month(monthly_summaries)
    incomes = [m.total_income for m in ordered]

    mean = average(incomes)
    sigma = std_dev(incomes, mean)
    cv = sigma / mean * 100 if mean > 0 else 0.0

    outliers = [
        IncomeOutlier(
            month=m.month,
            income=m.total_income,
            deviation_from_mean=m.total_income - mean,
            deviation_pct=_pct_of(m.total_income - mean, mean),
        )
        for m in ordered
        if sigma > 0 and abs(m.total_income - mean) > config.outlier_sigma * sigma
    ]

    slope = linear_slope(incomes)
    threshold = mean * config.income_trend_dead_band
    trend = "flat"
    if len(incomes) >= 3:
        if slope > threshold:
            trend = "increasing"
        elif slope < -threshold:
            trend = "decreasing"

    lowest = min(ordered, key=lambda m: m.total_income)
    highest = max(ordered, key=lambda m: m.total_income)
    latest = ordered[-1]

    return IncomeStabilityResult(
        mean=mean,
        median=median(incomes),
        std_dev=sigma,
        coefficient_of_variation=cv,
        stability=_stability_bucket(cv, config),
        outlier_months=outliers,
        trend=trend,
        trend_slope_per_month=slope,
        min_month=MonthIncome(month=lowest.month, income=lowest.total_income),
        max_month=MonthIncome(month=highest.month, income=highest.total_income),
        latest_vs_mean=DiffFromMean(
            diff=latest.total_income - mean,
            diff_pct=_pct_of(latest.total_income - mean, mean),
        ),
    )


# =============================================================================
# Savings Trajectory
# =============================================================================


def analyze_savings_trajectory(
    current: SavingsMetrics,
    monthly_summaries: list[MonthlySummary],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> SavingsTrajectoryResult:
    """
    Track the emergency fund and savings rate over time.

    The previous emergency fund is estimated as current liquid assets over
    the previous month's expense, so the change reflects expense movement
    as well as asset movement.

    Args:
        current: Current savings metrics (liquid assets, expense average)
        monthly_summaries: Monthly totals in any order
        config: Engine configuration with trajectory thresholds

    Returns:
        SavingsTrajectoryResult
    """
    current_fund_months = current.emergency_fund_months
    ordered = _sorted_by_month(monthly_summaries)

    history = [
        SavingsRatePoint(month=m.month, savings_rate=savings_rate(m.total_income, m.total_expense))
        for m in ordered
    ]
    rates = [p.savings_rate for p in history]
    average_rate = average(rates)

    rate_trend = "stable"
    if len(rates) >= 3:
        slope = linear_slope(rates)
        if slope > config.savings_rate_trend_threshold:
            rate_trend = "improving"
        elif slope < -config.savings_rate_trend_threshold:
            rate_trend = "declining"

    liquid_ratio = (
        current.liquid_assets / current.total_assets * 100 if current.total_assets > 0 else 0.0
    )

    previous_fund_months = None
    fund_change = None
    if len(ordered) >= 2:
        previous_expense = ordered[-2].total_expense
        if previous_expense > 0:
            previous_fund_months = current.liquid_assets / previous_expense
            fund_change = current_fund_months - previous_fund_months

    direction = "stable"
    if fund_change is not None:
        if fund_change > config.emergency_fund_change_threshold:
            direction = "improving"
        elif fund_change < -config.emergency_fund_change_threshold:
            direction = "declining"

    primary_factor = "mixed"
    if len(ordered) >= 2:
        prev_expense = ordered[-2].total_expense
        expense_changed = (
            prev_expense > 0
            and abs(current.monthly_expense_avg - prev_expense) / prev_expense
            > config.expense_change_threshold
        )
        if expense_changed and current.monthly_expense_avg > prev_expense:
            primary_factor = "expense_increase"
        elif expense_changed and current.monthly_expense_avg < prev_expense:
            primary_factor = "expense_decrease"
        elif direction == "improving":
            primary_factor = "asset_increase"
        elif direction == "declining":
            primary_factor = "asset_decrease"

    months_to_target = None
    target = config.emergency_fund_target_months
    if current_fund_months < target and average_rate > 0 and ordered:
        avg_income = average([m.total_income for m in ordered])
        monthly_saving = avg_income * (average_rate / 100)
        if monthly_saving > 0:
            gap = current.monthly_expense_avg * target - current.liquid_assets
            if gap > 0:
                months_to_target = math.ceil(gap / monthly_saving)

    return SavingsTrajectoryResult(
        current_emergency_fund_months=current_fund_months,
        previous_emergency_fund_months=previous_fund_months,
        emergency_fund_change=fund_change,
        direction=direction,
        primary_factor=primary_factor,
        months_to_six_month_target=months_to_target,
        savings_rate_history=history,
        average_savings_rate=average_rate,
        savings_rate_trend=rate_trend,
        cumulative_net_income=sum(m.net_income for m in ordered),
        liquid_assets_to_total_ratio=liquid_ratio,
    )
