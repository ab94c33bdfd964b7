"""
Data collection for the analytics engine.

Scopes raw storage records for one group into the CollectedData snapshot
the engine consumes: applies the lookback window, drops the incomplete
current month and excluded transactions, splits liabilities from assets
and totals liquid assets from the category breakdown.
"""

import calendar
from datetime import date

from fin_analytics.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from fin_analytics.engine.stats import month_of
from fin_analytics.models import (
    CollectedData,
    Holding,
    RawFinancialRecords,
    RawHolding,
    Transaction,
)


def current_month(as_of: date) -> str:
    """Calendar month of as_of as YYYY-MM."""
    return as_of.strftime("%Y-%m")


def lookback_threshold(as_of: date, months: int) -> str:
    """
    as_of shifted back by `months` calendar months, as YYYY-MM-DD.

    The day is clamped to the end of the target month (Mar 31 -> Feb 28).
    """
    month_index = as_of.year * 12 + (as_of.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(as_of.day, calendar.monthrange(year, month)[1])
    return date(year, month, day).isoformat()


def _to_holding(raw: RawHolding, config: EngineConfig) -> Holding:
    is_liability = raw.type == "liability"
    return Holding(
        name=raw.name,
        category_name=raw.category_name,
        amount=raw.amount or 0,
        unrealized_gain=raw.unrealized_gain,
        unrealized_gain_pct=raw.unrealized_gain_pct,
        daily_change=raw.daily_change,
        is_liability=is_liability,
        liability_category=(
            raw.liability_category or config.other_liability_label if is_liability else None
        ),
    )


def collect_data(
    records: RawFinancialRecords,
    as_of: date,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> CollectedData:
    """
    Build the engine input snapshot from raw records.

    Args:
        records: Unscoped holdings, transactions, history and breakdown
        as_of: Reference date; its calendar month is treated as incomplete
        config: Engine configuration (lookback months, liquid categories)

    Returns:
        CollectedData ready for compute_metrics
    """
    threshold = lookback_threshold(as_of, config.analysis_months)
    this_month = current_month(as_of)

    transactions = [
        Transaction(date=t.date, category=t.category, amount=t.amount, type=t.type)
        for t in records.transactions
        if not t.is_excluded_from_calculation
        and t.date >= threshold
        and month_of(t.date) != this_month
    ]

    asset_history = [h for h in records.asset_history if h.date >= threshold]

    liquid_assets = sum(
        c.amount
        for c in records.category_breakdown
        if any(liquid in c.category for liquid in config.liquid_asset_categories)
    )

    return CollectedData(
        total_assets=records.latest_total_assets or 0,
        liquid_assets=liquid_assets,
        holdings=[_to_holding(h, config) for h in records.holdings],
        transactions=transactions,
        asset_history=asset_history,
    )
