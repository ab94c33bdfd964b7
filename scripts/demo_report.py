"""
Report Demo Script

Builds a narrative report for a sample household: raw records are scoped
by the collector, metrics and analyzers run on the snapshot, and the LLM
writes the insights. Uses OpenAI when OPENAI_API_KEY is set, otherwise
the mock client.

Usage:
    # Optional: use the real LLM
    export OPENAI_API_KEY=sk-...

    # Run the demo
    python -m scripts.demo_report
"""

import logging
import os
import sys
from datetime import date

from dotenv import load_dotenv

from fin_analytics.collector import collect_data
from fin_analytics.config import DEFAULT_ENGINE_CONFIG
from fin_analytics.exceptions import InfrastructureError
from fin_analytics.llm.interface import LLMClient
from fin_analytics.llm.mock import MockLLMClient
from fin_analytics.llm.openai_client import LLMError, OpenAILLMClient
from fin_analytics.models import (
    AssetSnapshot,
    CategoryBreakdown,
    RawFinancialRecords,
    RawHolding,
    RawTransaction,
)
from fin_analytics.orchestrator import build_report, run_analyzers


AS_OF = date(2025, 7, 10)


# =============================================================================
# Sample Household
# =============================================================================


def sample_records() -> RawFinancialRecords:
    """Seven months of salary and spending with a travel spike in June."""
    months = ["2024-12", "2025-01", "2025-02", "2025-03", "2025-04", "2025-05", "2025-06", "2025-07"]
    travel = {"2025-06": 180_000}

    transactions: list[RawTransaction] = []
    for i, month in enumerate(months):
        transactions += [
            RawTransaction(date=f"{month}-25", category="Salary", amount=420_000, type="income"),
            RawTransaction(date=f"{month}-01", category="Rent", amount=130_000, type="expense"),
            RawTransaction(date=f"{month}-10", category="Food", amount=60_000 + i * 1_000, type="expense"),
            RawTransaction(date=f"{month}-18", category="Utilities", amount=18_000, type="expense"),
            RawTransaction(
                date=f"{month}-20",
                category="Transfer",
                amount=100_000,
                type="expense",
                is_excluded_from_calculation=True,
            ),
        ]
        if month in travel:
            transactions.append(
                RawTransaction(date=f"{month}-15", category="Travel", amount=travel[month], type="expense")
            )

    return RawFinancialRecords(
        holdings=[
            RawHolding(name="World Equity ETF", category_name="Stocks", amount=1_800_000,
                       unrealized_gain=240_000, unrealized_gain_pct=15.4, daily_change=-12_000),
            RawHolding(name="Bond Fund", category_name="Mutual Funds", amount=600_000,
                       unrealized_gain=-15_000, unrealized_gain_pct=-2.4, daily_change=1_500),
            RawHolding(name="Checking", category_name="Deposits / Cash / Crypto", amount=900_000),
            RawHolding(name="Credit Card", type="liability", liability_category="Credit Card",
                       amount=85_000),
            RawHolding(name="Car Loan", type="liability", amount=1_200_000),
        ],
        transactions=transactions,
        asset_history=[
            AssetSnapshot(date="2024-07-01", total_assets=3_050_000),
            AssetSnapshot(date="2025-01-01", total_assets=3_200_000),
            AssetSnapshot(date="2025-07-09", total_assets=3_300_000),
        ],
        category_breakdown=[
            CategoryBreakdown(category="Deposits / Cash / Crypto", amount=900_000),
            CategoryBreakdown(category="Stocks", amount=1_800_000),
            CategoryBreakdown(category="Mutual Funds", amount=600_000),
        ],
        latest_total_assets=3_300_000,
    )


# =============================================================================
# Demo Function
# =============================================================================


def print_separator(char="=", length=80):
    """Print a separator line."""
    print(char * length)


def choose_llm() -> LLMClient:
    if os.environ.get("OPENAI_API_KEY"):
        print("✅ Using OpenAILLMClient")
        return OpenAILLMClient()
    print("ℹ️  OPENAI_API_KEY not set, using MockLLMClient")
    return MockLLMClient()


def main():
    """Run the report demo."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print_separator("=")
    print("FINANCIAL REPORT DEMO")
    print_separator("=")

    data = collect_data(sample_records(), AS_OF, DEFAULT_ENGINE_CONFIG)
    print(f"\nSnapshot as of {AS_OF.isoformat()}:")
    print(f"  Transactions: {len(data.transactions)}")
    print(f"  Holdings: {len(data.holdings)}")
    print(f"  Total Assets: {data.total_assets:,}")
    print(f"  Liquid Assets: {data.liquid_assets:,}")

    llm = choose_llm()

    try:
        response = build_report("demo-household", data, llm, AS_OF, DEFAULT_ENGINE_CONFIG)
    except (InfrastructureError, LLMError) as e:
        print(f"❌ Report failed: {e}")
        sys.exit(1)

    if response is None:
        print("❌ No data for the sample household")
        sys.exit(1)

    metrics = response.metrics
    print("\n" + "=" * 80)
    print("METRICS")
    print("=" * 80)
    print(f"\n📊 Health Score: {metrics.health_score.total_score}/100")
    for category in metrics.health_score.categories:
        print(f"  {category.name}: {category.score}/{category.max_score}")
    print(f"\n  Emergency Fund: {metrics.savings.emergency_fund_months} months")
    print(f"  Savings Rate: {metrics.balance.savings_rate}%")
    print(f"  Diversification: {metrics.investment.diversification_score}")
    print(f"  Debt to Assets: {metrics.liability.debt_to_asset_ratio}%")

    bundle = run_analyzers(data, metrics=metrics, config=DEFAULT_ENGINE_CONFIG)
    print("\n" + "=" * 80)
    print("ANALYZERS")
    print("=" * 80)
    print(f"\n  Overall trend: {bundle.mom_trend.overall_trend} ({bundle.mom_trend.acceleration})")
    print(f"  Income stability: {bundle.income_stability.stability}")
    print(f"  Emergency fund direction: {bundle.savings_trajectory.direction}")
    print(f"  Portfolio risk: {bundle.portfolio_risk.risk_level}")
    for category in bundle.spending_comparison.categories:
        if category.severity != "normal":
            print(f"  ⚠️  {category.category}: {category.current_amount:,} ({category.severity})")

    insights = response.report.insights
    print("\n" + "=" * 80)
    print(f"INSIGHTS ({response.report.model})")
    print("=" * 80)
    for field, text in insights.model_dump().items():
        if text:
            print(f"\n  {field}: {text}")
    print()


if __name__ == "__main__":
    main()
