"""
Spending comparison and portfolio risk analyzers.

Both analyzers work on pre-grouped inputs (category totals, holding
infos) built by engine.series, and return neutral results for empty
input.
"""

from typing import Optional

from fin_analytics.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from fin_analytics.engine.stats import average, linear_slope, std_dev
from fin_analytics.models import (
    CategoryComparison,
    CategoryMove,
    CategoryTotal,
    DailyChangeInfo,
    HoldingGain,
    HoldingInfo,
    HoldingShare,
    PortfolioRiskResult,
    SpendingComparisonResult,
    TopConcentration,
    TransactionType,
    VolatileHolding,
)


SEVERITY_ORDER = {"anomalous": 0, "elevated": 1, "normal": 2}


# =============================================================================
# Spending Comparison
# =============================================================================


def _trailing_average(values: list[int], window: int) -> Optional[float]:
    """Average of the last `window` values, None unless the window is full."""
    tail = values[-window:]
    return average(tail) if len(tail) >= window else None


def _deviation_pct(current: int, avg: Optional[float]) -> Optional[float]:
    if avg is None or avg == 0:
        return None
    return (current - avg) / avg * 100


def _severity(current: int, trailing: list[int], config: EngineConfig) -> str:
    """Z-score of the current amount against the trailing 3 months."""
    if len(trailing) < 3:
        return "normal"

    mean = average(trailing)
    sigma = std_dev(trailing, mean)
    if sigma > 0:
        z = abs(current - mean) / sigma
        if z > config.anomalous_z_threshold:
            return "anomalous"
        if z > config.elevated_z_threshold:
            return "elevated"
        return "normal"
    return "elevated" if current > mean else "normal"


def _category_trend(values: list[int], config: EngineConfig) -> str:
    if len(values) < 3:
        return "unknown"
    slope = linear_slope(values)
    threshold = average(values) * config.category_trend_dead_band
    if slope > threshold:
        return "increasing"
    if slope < -threshold:
        return "decreasing"
    return "stable"


def analyze_spending_comparison(
    category_totals: list[CategoryTotal],
    latest_month: str,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> SpendingComparisonResult:
    """
    Compare each expense category's latest month against its recent history.

    Trailing averages use the months strictly before latest_month; a month
    with no spend in a category counts as 0 for it.

    Args:
        category_totals: Per (month, category, type) totals; income rows are ignored
        latest_month: Month under review, YYYY-MM
        config: Engine configuration with severity thresholds

    Returns:
        SpendingComparisonResult with categories ranked by severity, then by
        absolute deviation from the 3-month average
    """
    expenses = [c for c in category_totals if c.type == TransactionType.EXPENSE]
    if not expenses:
        return SpendingComparisonResult()

    by_category: dict[str, dict[str, int]] = {}
    for e in expenses:
        by_category.setdefault(e.category, {})[e.month] = e.total_amount

    all_months = sorted({e.month for e in expenses})
    previous_months = [m for m in all_months if m < latest_month]
    previous_month = previous_months[-1] if previous_months else None

    total_current = sum(e.total_amount for e in expenses if e.month == latest_month)
    total_previous = (
        sum(e.total_amount for e in expenses if e.month == previous_month)
        if previous_month
        else None
    )
    total_change_rate = (
        (total_current - total_previous) / total_previous * 100
        if total_previous is not None and total_previous > 0
        else None
    )

    categories: list[CategoryComparison] = []
    new_categories: list[str] = []

    for category, month_data in by_category.items():
        current = month_data.get(latest_month, 0)
        if not previous_months and current > 0:
            new_categories.append(category)

        history = [month_data.get(m, 0) for m in previous_months]
        three_month_avg = _trailing_average(history, 3)
        six_month_avg = _trailing_average(history, 6)

        prev_amount = month_data.get(previous_month, 0) if previous_month else None
        previous_share = (
            prev_amount / total_previous * 100
            if prev_amount is not None and total_previous is not None and total_previous > 0
            else None
        )

        categories.append(
            CategoryComparison(
                category=category,
                current_amount=current,
                three_month_avg=three_month_avg,
                six_month_avg=six_month_avg,
                deviation_from_three_month=(
                    current - three_month_avg if three_month_avg is not None else None
                ),
                deviation_from_three_month_pct=_deviation_pct(current, three_month_avg),
                deviation_from_six_month=(
                    current - six_month_avg if six_month_avg is not None else None
                ),
                deviation_from_six_month_pct=_deviation_pct(current, six_month_avg),
                severity=_severity(current, history[-3:], config),
                trend_direction=_category_trend(
                    [month_data.get(m, 0) for m in all_months], config
                ),
                proportion_of_total=current / total_current * 100 if total_current > 0 else 0.0,
                previous_proportion_of_total=previous_share,
            )
        )

    categories.sort(
        key=lambda c: (
            SEVERITY_ORDER[c.severity],
            -abs(c.deviation_from_three_month or 0),
        )
    )

    with_deviation = [c for c in categories if c.deviation_from_three_month is not None]
    increasing = sorted(
        (c for c in with_deviation if c.deviation_from_three_month > 0),
        key=lambda c: c.deviation_from_three_month,
        reverse=True,
    )
    decreasing = sorted(
        (c for c in with_deviation if c.deviation_from_three_month < 0),
        key=lambda c: c.deviation_from_three_month,
    )

    def to_move(c: CategoryComparison) -> CategoryMove:
        return CategoryMove(
            category=c.category,
            diff=c.deviation_from_three_month,
            diff_pct=c.deviation_from_three_month_pct,
        )

    return SpendingComparisonResult(
        categories=categories,
        new_categories=new_categories,
        total_current_expense=total_current,
        total_previous_month_expense=total_previous,
        total_change_rate=total_change_rate,
        anomalous_count=sum(1 for c in categories if c.severity == "anomalous"),
        elevated_count=sum(1 for c in categories if c.severity == "elevated"),
        top_increasing=[to_move(c) for c in increasing[: config.top_moves_limit]],
        top_decreasing=[to_move(c) for c in decreasing[: config.top_moves_limit]],
    )


# =============================================================================
# Portfolio Risk
# =============================================================================


def _risk_level(diversification: int, top_share: float, config: EngineConfig) -> str:
    if (
        diversification < config.high_risk_diversification
        or top_share > config.high_risk_concentration_pct
    ):
        return "high"
    if (
        diversification < config.moderate_risk_diversification
        or top_share > config.moderate_risk_concentration_pct
    ):
        return "moderate"
    return "low"


def _holding_gain(h: HoldingInfo) -> HoldingGain:
    return HoldingGain(
        name=h.name,
        unrealized_gain=h.unrealized_gain,
        unrealized_gain_pct=h.unrealized_gain_pct,
    )


def analyze_portfolio_risk(
    holdings: list[HoldingInfo],
    daily_changes: list[DailyChangeInfo],
    diversification_score: int,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> PortfolioRiskResult:
    """
    Assess concentration, daily volatility and unrealized gains of a portfolio.

    Args:
        holdings: Investment holdings with amount and unrealized gain
        daily_changes: Daily change per holding name (holdings without one count as 0)
        diversification_score: Herfindahl-based score from the investment aggregator
        config: Engine configuration with risk thresholds

    Returns:
        PortfolioRiskResult (low risk, zeroed totals for no holdings)
    """
    if not holdings:
        return PortfolioRiskResult()

    total_value = sum(h.amount for h in holdings)
    total_gain = sum(h.unrealized_gain for h in holdings)
    cost_basis = total_value - total_gain
    total_gain_pct = total_gain / cost_basis * 100 if cost_basis > 0 else 0.0

    by_size = sorted(holdings, key=lambda h: h.amount, reverse=True)
    top = by_size[: config.concentration_top_n]
    top_share = sum(h.amount for h in top) / total_value * 100 if total_value > 0 else 0.0

    max_holding = None
    if total_value > 0:
        max_holding = HoldingShare(
            name=by_size[0].name,
            pct=by_size[0].amount / total_value * 100,
        )

    change_by_name = {d.name: d.daily_change for d in daily_changes}
    total_daily_change = sum(d.daily_change for d in daily_changes)

    volatile = [
        VolatileHolding(
            name=h.name,
            daily_change=change_by_name.get(h.name, 0),
            portfolio_impact_pct=(
                abs(change_by_name.get(h.name, 0)) / total_value * 100 if total_value > 0 else 0.0
            ),
        )
        for h in holdings
        if change_by_name.get(h.name, 0) != 0
    ]
    volatile.sort(key=lambda v: abs(v.daily_change), reverse=True)

    gainers = [h for h in holdings if h.unrealized_gain > 0]
    losers = [h for h in holdings if h.unrealized_gain < 0]

    return PortfolioRiskResult(
        top_concentration=TopConcentration(names=[h.name for h in top], total_pct=top_share),
        max_holding=max_holding,
        volatile_holdings=volatile[: config.volatile_holdings_limit],
        risk_level=_risk_level(diversification_score, top_share, config),
        max_gain_holding=(
            _holding_gain(max(gainers, key=lambda h: h.unrealized_gain)) if gainers else None
        ),
        max_loss_holding=(
            _holding_gain(min(losers, key=lambda h: h.unrealized_gain)) if losers else None
        ),
        total_daily_change=total_daily_change,
        total_daily_change_pct=total_daily_change / total_value * 100 if total_value > 0 else 0.0,
        holdings_count=len(holdings),
        positive_count=len(gainers),
        negative_count=len(losers),
        total_unrealized_gain=total_gain,
        total_unrealized_gain_pct=total_gain_pct,
    )
