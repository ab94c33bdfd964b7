"""
Analysis tool registry.

Exposes the metrics and the five historical analyzers as named,
parameterless tools over one CollectedData snapshot. The LLM calls them
during the analysis stage; each tool returns a JSON-serializable dict.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from fin_analytics.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from fin_analytics.engine.metrics import ANALYZER_RUNNERS, compute_metrics
from fin_analytics.models import AnalyticsMetrics, AnalyzerName, CollectedData


TOOL_DESCRIPTIONS: dict[str, str] = {
    "get_financial_metrics": (
        "Current financial metrics: savings and emergency fund, investments and "
        "diversification, spending by category with anomalies, asset growth, "
        "monthly balance, liabilities and the overall health score."
    ),
    "analyze_mom_trend": (
        "Month-over-month income/expense comparison: changes, streaks, overall "
        "trend, acceleration, best/worst month and rolling averages."
    ),
    "analyze_income_stability": (
        "Income stability: mean, median, coefficient of variation, outlier months "
        "and the income trend."
    ),
    "analyze_savings_trajectory": (
        "Emergency fund and savings rate over time, including the months needed "
        "to reach a six-month emergency fund."
    ),
    "analyze_spending_comparison": (
        "Latest month's spending per category versus its 3- and 6-month averages, "
        "with severity and top increasing/decreasing categories."
    ),
    "analyze_portfolio_risk": (
        "Portfolio concentration, volatile holdings, risk level and unrealized "
        "gains/losses of investment holdings."
    ),
}


@dataclass
class AnalysisTool:
    """
    A named analysis the LLM can call.

    Attributes:
        name: Tool name as shown to the LLM
        description: What the tool returns
        func: Zero-argument callable producing the JSON-serializable result
    """

    name: str
    description: str
    func: Callable[[], dict[str, Any]]

    def run(self) -> dict[str, Any]:
        return self.func()

    def to_openai_tool(self) -> dict[str, Any]:
        """Function-calling schema for the chat completions API."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {"type": "object", "properties": {}},
            },
        }


def create_analysis_tools(
    data: CollectedData,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    metrics: Optional[AnalyticsMetrics] = None,
) -> dict[str, AnalysisTool]:
    """
    Build the tool registry for one snapshot.

    Args:
        data: Collected snapshot the tools analyze
        config: Engine configuration
        metrics: Precomputed metrics for the same snapshot (computed if omitted)

    Returns:
        Tools keyed by name, in a stable order
    """
    snapshot_metrics = metrics if metrics is not None else compute_metrics(data, config)

    def metrics_tool() -> dict[str, Any]:
        return snapshot_metrics.model_dump(mode="json")

    def analyzer_tool(name: AnalyzerName) -> Callable[[], dict[str, Any]]:
        runner = ANALYZER_RUNNERS[name]

        def run() -> dict[str, Any]:
            return runner(data, snapshot_metrics, config).model_dump(mode="json")

        return run

    tools = [AnalysisTool("get_financial_metrics", TOOL_DESCRIPTIONS["get_financial_metrics"], metrics_tool)]
    for name in AnalyzerName:
        tool_name = f"analyze_{name.value}"
        tools.append(AnalysisTool(tool_name, TOOL_DESCRIPTIONS[tool_name], analyzer_tool(name)))

    return {tool.name: tool for tool in tools}


def run_tool(tools: dict[str, AnalysisTool], name: str) -> dict[str, Any]:
    """
    Run a tool by name.

    Raises:
        KeyError: If no tool has that name
    """
    if name not in tools:
        raise KeyError(f"Unknown analysis tool: {name}")
    return tools[name].run()
