"""
Two-stage insight generation.

Stage 1 gives the LLM the analysis tools and collects a free-form memo;
stage 2 turns that memo into structured AnalyticsInsights without tools.
"""

import logging

from fin_analytics.analysis_tools import create_analysis_tools
from fin_analytics.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from fin_analytics.llm.interface import LLMClient
from fin_analytics.models import AnalyticsInsights, AnalyticsMetrics, CollectedData

logger = logging.getLogger(__name__)


def generate_insights(
    data: CollectedData,
    metrics: AnalyticsMetrics,
    llm: LLMClient,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> AnalyticsInsights:
    """
    Generate narrative insights for one snapshot.

    Args:
        data: Collected snapshot the analysis tools run against
        metrics: Metrics already computed for the same snapshot
        llm: LLM client for both stages
        config: Engine configuration for the analysis tools

    Returns:
        AnalyticsInsights

    Raises:
        InfrastructureError: If the LLM is unreachable
        LLMError: If the LLM output is unusable
    """
    tools = create_analysis_tools(data, config, metrics=metrics)

    memo = llm.generate_analysis_memo(metrics, tools)
    tool_calls = ", ".join(memo.tool_calls) if memo.tool_calls else "none"
    logger.info(f"Stage 1 - Steps: {memo.steps}, Tool calls: {tool_calls}")

    insights = llm.generate_insights(memo, metrics)
    logger.info("Stage 2 - Steps: 1")

    return insights
