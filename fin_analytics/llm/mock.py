"""
Mock LLM Client for testing.

This module provides a deterministic MockLLMClient for testing the insight
generator and API without making real LLM calls.

The mock is designed to be:
- Deterministic (same inputs -> same outputs)
- Controllable (custom memo/insights for specific test scenarios)
- Valid (always returns properly structured data)
"""

from typing import Optional

from fin_analytics.analysis_tools import AnalysisTool
from fin_analytics.models import AnalysisMemo, AnalyticsInsights, AnalyticsMetrics


class MockLLMClient:
    """
    Mock LLM client for testing.

    The analysis stage calls every tool exactly once, in registry order,
    in a single step. The insights stage derives one sentence per field
    from the metrics.

    Attributes:
        model_name: Reported model identifier
        custom_memo: Optional memo text to return (tools are still called)
        custom_insights: Optional insights to return
        call_counts: Track method call counts for assertions
        tool_calls: Names of every tool called, in order

    Example:
        ```python
        mock = MockLLMClient()
        memo = mock.generate_analysis_memo(metrics, tools)
        assert memo.tool_calls == list(tools)
        ```
    """

    def __init__(
        self,
        model_name: str = "mock",
        custom_memo: Optional[str] = None,
        custom_insights: Optional[AnalyticsInsights] = None,
    ):
        self.model_name = model_name
        self.custom_memo = custom_memo
        self.custom_insights = custom_insights

        # Track calls for testing
        self.call_counts = {
            "generate_analysis_memo": 0,
            "generate_insights": 0,
        }
        self.tool_calls: list[str] = []

    def generate_analysis_memo(
        self,
        metrics: AnalyticsMetrics,
        tools: dict[str, AnalysisTool],
    ) -> AnalysisMemo:
        """Call every tool once and summarize which ones returned data."""
        self.call_counts["generate_analysis_memo"] += 1

        called: list[str] = []
        lines = [f"Health score {metrics.health_score.total_score}/100."]
        for name, tool in tools.items():
            result = tool.run()
            called.append(name)
            lines.append(f"{name}: {len(result)} fields.")
        self.tool_calls.extend(called)

        text = self.custom_memo if self.custom_memo is not None else "\n".join(lines)
        return AnalysisMemo(text=text, tool_calls=called, steps=1 if called else 0)

    def generate_insights(
        self,
        memo: AnalysisMemo,
        metrics: AnalyticsMetrics,
    ) -> AnalyticsInsights:
        """Derive one deterministic sentence per insight field from the metrics."""
        self.call_counts["generate_insights"] += 1

        if self.custom_insights is not None:
            return self.custom_insights

        savings = metrics.savings
        investment = metrics.investment
        spending = metrics.spending
        balance = metrics.balance
        liability = metrics.liability

        top_category = spending.top_categories[0].category if spending.top_categories else None

        return AnalyticsInsights(
            summary=f"Financial health score is {metrics.health_score.total_score}/100.",
            savings_insight=(
                f"Emergency fund covers {savings.emergency_fund_months} months of expenses."
            ),
            investment_insight=(
                f"Investments total {investment.total_investment} with a diversification "
                f"score of {investment.diversification_score}."
                if investment.holdings
                else None
            ),
            spending_insight=(
                f"Average monthly spending is {spending.monthly_average}; "
                f"largest category is {top_category}."
                if top_category
                else None
            ),
            balance_insight=f"Savings rate is {balance.savings_rate}%.",
            liability_insight=(
                f"Liabilities total {liability.total_liabilities} "
                f"({liability.debt_to_asset_ratio}% of assets)."
                if liability.total_liabilities > 0
                else None
            ),
        )

    # =========================================================================
    # Test Helpers
    # =========================================================================

    def reset_counts(self) -> None:
        """Reset call counts and tool call history."""
        for key in self.call_counts:
            self.call_counts[key] = 0
        self.tool_calls.clear()

    def get_total_calls(self) -> int:
        """Get total number of method calls."""
        return sum(self.call_counts.values())
