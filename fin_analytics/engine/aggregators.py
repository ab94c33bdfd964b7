"""
Category aggregators for the analytics engine.

Six independent pure functions over a shared CollectedData snapshot:
savings, investment, spending (with anomaly detection), liability,
growth and balance.

All functions are:
- Pure (no side effects)
- Deterministic (same inputs -> same outputs, insertion-ordered grouping)
- Total (empty input yields zeroed structures, never raises)
"""

from fin_analytics.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from fin_analytics.engine.stats import (
    count_unique_months,
    month_of,
    months_between,
    round_half_up,
    savings_rate,
)
from fin_analytics.models import (
    BalanceMetrics,
    BalanceTrendPoint,
    CategoryAmount,
    CollectedData,
    GrowthMetrics,
    Holding,
    InvestmentHolding,
    InvestmentMetrics,
    LiabilityMetrics,
    Projection,
    SavingsMetrics,
    SpendingAnomaly,
    SpendingMetrics,
    Transaction,
    TransactionType,
)


# =============================================================================
# Helpers
# =============================================================================


def _expenses(transactions: list[Transaction]) -> list[Transaction]:
    return [t for t in transactions if t.type == TransactionType.EXPENSE]


def _share_pct(amount: float, total: float) -> float:
    """Share of total as a percentage rounded to 1 decimal (0 if total is 0)."""
    if total <= 0:
        return 0.0
    return round_half_up(amount / total * 100, 1)


def is_investment_category(category_name: str, config: EngineConfig) -> bool:
    """Substring match against the investment allow-list, in either direction."""
    return any(
        allowed in category_name or category_name in allowed
        for allowed in config.investment_categories
    )


def investment_holdings(data: CollectedData, config: EngineConfig) -> list[Holding]:
    """Asset holdings whose category is on the investment allow-list."""
    return [
        h for h in data.holdings
        if not h.is_liability
        and h.category_name
        and is_investment_category(h.category_name, config)
    ]


# =============================================================================
# Savings
# =============================================================================


def compute_savings(
    data: CollectedData,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> SavingsMetrics:
    """
    Compute emergency fund metrics.

    monthly_expense_avg = total expense / distinct expense months (rounded);
    emergency_fund_months = liquid_assets / monthly_expense_avg (1 decimal).
    """
    expenses = _expenses(data.transactions)
    total_expenses = sum(t.amount for t in expenses)
    months_count = count_unique_months(t.date for t in expenses)

    monthly_expense_avg = round_half_up(total_expenses / months_count) if months_count > 0 else 0
    emergency_fund_months = (
        round_half_up(data.liquid_assets / monthly_expense_avg, 1)
        if monthly_expense_avg > 0
        else 0.0
    )

    return SavingsMetrics(
        total_assets=data.total_assets,
        liquid_assets=data.liquid_assets,
        monthly_expense_avg=monthly_expense_avg,
        emergency_fund_months=emergency_fund_months,
    )


# =============================================================================
# Investment
# =============================================================================


def diversification_score(
    amounts: list[int],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    """
    Herfindahl-based diversification score in [0, 100].

    0 holdings -> 0, 1 holding -> config.single_holding_diversification,
    otherwise round(100 * (1 - sum(w_i^2))) clamped.
    """
    if not amounts:
        return 0
    if len(amounts) == 1:
        return config.single_holding_diversification

    total = sum(amounts)
    if total == 0:
        return 0

    herfindahl = sum((amount / total) ** 2 for amount in amounts)
    return min(100, max(0, round_half_up((1 - herfindahl) * 100)))


def compute_investment(
    data: CollectedData,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> InvestmentMetrics:
    """Compute investment totals, unrealized gain and diversification."""
    holdings = [
        InvestmentHolding(
            name=h.name,
            amount=h.amount,
            unrealized_gain=h.unrealized_gain or 0,
            unrealized_gain_pct=h.unrealized_gain_pct or 0.0,
        )
        for h in investment_holdings(data, config)
    ]

    total_investment = sum(h.amount for h in holdings)
    total_unrealized_gain = sum(h.unrealized_gain for h in holdings)

    # Cost basis = market value - unrealized gain
    cost = total_investment - total_unrealized_gain
    total_unrealized_gain_pct = (
        round_half_up(total_unrealized_gain / cost * 100, 2) if cost > 0 else 0.0
    )

    return InvestmentMetrics(
        holdings=holdings,
        total_investment=total_investment,
        total_unrealized_gain=total_unrealized_gain,
        total_unrealized_gain_pct=total_unrealized_gain_pct,
        diversification_score=diversification_score([h.amount for h in holdings], config),
    )


# =============================================================================
# Spending
# =============================================================================


def compute_spending(
    data: CollectedData,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> SpendingMetrics:
    """
    Compute monthly-normalized spending by category and anomalies.

    Categories keep first-seen order from the transaction list; ties in the
    top list keep that order too.
    """
    expenses = _expenses(data.transactions)

    by_category: dict[str, int] = {}
    for expense in expenses:
        category = expense.category or config.uncategorized_label
        by_category[category] = by_category.get(category, 0) + expense.amount

    total_expenses = sum(by_category.values())
    months_count = count_unique_months(t.date for t in expenses)

    def per_month(amount: int) -> int:
        return round_half_up(amount / months_count) if months_count > 0 else 0

    ranked = sorted(
        (
            CategoryAmount(
                category=category,
                amount=per_month(amount),
                pct=_share_pct(amount, total_expenses),
            )
            for category, amount in by_category.items()
        ),
        key=lambda c: c.amount,
        reverse=True,
    )

    return SpendingMetrics(
        monthly_average=per_month(total_expenses),
        by_category={category: per_month(amount) for category, amount in by_category.items()},
        top_categories=ranked[: config.top_categories_limit],
        anomalies=detect_anomalies(data.transactions, config),
    )


def detect_anomalies(
    transactions: list[Transaction],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[SpendingAnomaly]:
    """
    Flag latest-month categories whose spend is far above their history.

    History is every month before the latest one (a missing month counts as
    0). Requires config.anomaly_min_months distinct months. Categories with
    zero historical std dev, or no history at all, are never flagged.
    """
    by_month: dict[str, dict[str, int]] = {}
    for t in transactions:
        if t.type != TransactionType.EXPENSE:
            continue
        month_totals = by_month.setdefault(month_of(t.date), {})
        category = t.category or config.uncategorized_label
        month_totals[category] = month_totals.get(category, 0) + t.amount

    months = sorted(by_month)
    if len(months) < config.anomaly_min_months:
        return []

    latest_month = months[-1]
    previous_months = months[:-1]

    history_categories: dict[str, None] = {}
    for month in previous_months:
        for category in by_month[month]:
            history_categories.setdefault(category)

    stats: dict[str, tuple[float, float]] = {}
    for category in history_categories:
        values = [by_month[m].get(category, 0) for m in previous_months]
        mean = sum(values) / len(values)
        variance = sum((v - mean) ** 2 for v in values) / len(values)
        stats[category] = (mean, variance ** 0.5)

    anomalies: list[SpendingAnomaly] = []
    for category, amount in by_month[latest_month].items():
        if category not in stats:
            continue
        mean, std = stats[category]
        if std == 0:
            continue
        deviation = (amount - mean) / std
        if deviation > config.anomaly_z_threshold:
            anomalies.append(
                SpendingAnomaly(
                    category=category,
                    amount=amount,
                    deviation=round_half_up(deviation, 2),
                )
            )

    anomalies.sort(key=lambda a: a.deviation, reverse=True)
    return anomalies[: config.max_anomalies]


# =============================================================================
# Liability
# =============================================================================


def compute_liability(
    data: CollectedData,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> LiabilityMetrics:
    """Sum liabilities by category and relate them to total assets."""
    liabilities = [h for h in data.holdings if h.is_liability]
    total_liabilities = sum(h.amount for h in liabilities)

    by_category_map: dict[str, int] = {}
    for liability in liabilities:
        category = liability.liability_category or config.other_liability_label
        by_category_map[category] = by_category_map.get(category, 0) + liability.amount

    by_category = sorted(
        (
            CategoryAmount(
                category=category,
                amount=amount,
                pct=_share_pct(amount, total_liabilities),
            )
            for category, amount in by_category_map.items()
        ),
        key=lambda c: c.amount,
        reverse=True,
    )

    debt_to_asset_ratio = (
        round_half_up(total_liabilities / data.total_assets * 100, 1)
        if data.total_assets > 0
        else 0.0
    )

    return LiabilityMetrics(
        total_liabilities=total_liabilities,
        by_category=by_category,
        debt_to_asset_ratio=debt_to_asset_ratio,
    )


# =============================================================================
# Growth
# =============================================================================


def _flat_growth(total_assets: int, config: EngineConfig) -> GrowthMetrics:
    return GrowthMetrics(
        monthly_growth_rate=0.0,
        projected_annual_rate=0.0,
        projections=[Projection(years=y, amount=total_assets) for y in config.projection_years],
    )


def compute_growth(
    data: CollectedData,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> GrowthMetrics:
    """
    Compound monthly growth between the first and last snapshot.

    Falls back to flat growth (rate 0, projections = current total assets)
    when history is too short, the first value is not positive, the last
    value is negative, no calendar month has elapsed, or the rounded rate
    is within config.flat_growth_epsilon of zero.
    """
    history = data.asset_history
    if len(history) < 2:
        return _flat_growth(data.total_assets, config)

    ordered = sorted(history, key=lambda h: h.date)
    first, last = ordered[0], ordered[-1]

    if first.total_assets <= 0 or last.total_assets < 0:
        return _flat_growth(data.total_assets, config)

    months_elapsed = months_between(first.date, last.date)
    if months_elapsed <= 0:
        return _flat_growth(data.total_assets, config)

    ratio = last.total_assets / first.total_assets
    monthly_growth_rate = round_half_up(ratio ** (1 / months_elapsed) - 1, 4)

    if abs(monthly_growth_rate) < config.flat_growth_epsilon:
        return _flat_growth(data.total_assets, config)

    annual_rate = (1 + monthly_growth_rate) ** 12 - 1

    return GrowthMetrics(
        monthly_growth_rate=monthly_growth_rate,
        projected_annual_rate=round_half_up(annual_rate, 3),
        projections=[
            Projection(
                years=years,
                amount=round_half_up(data.total_assets * (1 + annual_rate) ** years),
            )
            for years in config.projection_years
        ],
    )


# =============================================================================
# Balance
# =============================================================================


def compute_balance(data: CollectedData) -> BalanceMetrics:
    """
    Monthly income/expense trend and average savings rate.

    Averages divide by the number of distinct months (minimum 1); the
    savings rate is taken from the rounded monthly averages.
    """
    by_month: dict[str, list[int]] = {}
    for t in data.transactions:
        income_expense = by_month.setdefault(month_of(t.date), [0, 0])
        if t.type == TransactionType.INCOME:
            income_expense[0] += t.amount
        else:
            income_expense[1] += t.amount

    trend = [
        BalanceTrendPoint(month=month, income=income, expense=expense, balance=income - expense)
        for month, (income, expense) in sorted(by_month.items())
    ]

    total_income = sum(p.income for p in trend)
    total_expense = sum(p.expense for p in trend)
    months_count = max(1, len(trend))

    monthly_income = round_half_up(total_income / months_count)
    monthly_expense = round_half_up(total_expense / months_count)
    rate = (
        round_half_up(savings_rate(monthly_income, monthly_expense), 1)
        if monthly_income > 0
        else 0.0
    )

    return BalanceMetrics(
        monthly_income=monthly_income,
        monthly_expense=monthly_expense,
        savings_rate=rate,
        trend=trend,
    )
