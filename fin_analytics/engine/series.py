"""
Series builders.

Derive the historical series consumed by the trend/risk analyzers
(monthly summaries, category totals, holding inputs) from a
CollectedData snapshot. Pure functions; grouping keeps first-seen order.
"""

from typing import Optional, Sequence, TypeVar

from fin_analytics.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from fin_analytics.engine.aggregators import investment_holdings
from fin_analytics.engine.stats import month_of
from fin_analytics.models import (
    CategoryTotal,
    CollectedData,
    DailyChangeInfo,
    HoldingInfo,
    MonthlySummary,
    Transaction,
    TransactionType,
)


T = TypeVar("T")


def build_monthly_summaries(transactions: list[Transaction]) -> list[MonthlySummary]:
    """Income/expense totals per month, ordered by month."""
    totals: dict[str, list[int]] = {}
    for t in transactions:
        income_expense = totals.setdefault(month_of(t.date), [0, 0])
        if t.type == TransactionType.INCOME:
            income_expense[0] += t.amount
        else:
            income_expense[1] += t.amount

    return [
        MonthlySummary(
            month=month,
            total_income=income,
            total_expense=expense,
            net_income=income - expense,
        )
        for month, (income, expense) in sorted(totals.items())
    ]


def build_category_totals(
    transactions: list[Transaction],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[CategoryTotal]:
    """
    Totals per (month, category, type).

    Ordered by month; within a month, categories keep first-seen order.
    """
    totals: dict[tuple[str, str, TransactionType], int] = {}
    for t in transactions:
        key = (month_of(t.date), t.category or config.uncategorized_label, t.type)
        totals[key] = totals.get(key, 0) + t.amount

    rows = [
        CategoryTotal(month=month, category=category, type=type_, total_amount=amount)
        for (month, category, type_), amount in totals.items()
    ]
    return sorted(rows, key=lambda r: r.month)


def latest_expense_month(category_totals: list[CategoryTotal]) -> Optional[str]:
    """Latest month with any expense total, or None."""
    months = [c.month for c in category_totals if c.type == TransactionType.EXPENSE]
    return max(months) if months else None


def exclude_month(items: Sequence[T], month: str) -> list[T]:
    """Drop items whose `month` attribute equals the given month."""
    return [item for item in items if item.month != month]


def build_holding_infos(
    data: CollectedData,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[HoldingInfo]:
    """Investment holdings as portfolio risk analyzer input."""
    return [
        HoldingInfo(
            name=h.name,
            amount=h.amount,
            unrealized_gain=h.unrealized_gain or 0,
            unrealized_gain_pct=h.unrealized_gain_pct or 0.0,
        )
        for h in investment_holdings(data, config)
    ]


def build_daily_changes(
    data: CollectedData,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[DailyChangeInfo]:
    """Daily changes of investment holdings that report one."""
    return [
        DailyChangeInfo(name=h.name, daily_change=h.daily_change)
        for h in investment_holdings(data, config)
        if h.daily_change is not None
    ]
