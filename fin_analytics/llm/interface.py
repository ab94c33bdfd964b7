"""
LLM Client Interface for the analytics service.

This module defines the abstract interface for LLM clients.
All LLM implementations (mock, OpenAI, etc.) must implement this Protocol.
"""

from typing import Protocol, runtime_checkable

from fin_analytics.analysis_tools import AnalysisTool
from fin_analytics.models import AnalysisMemo, AnalyticsInsights, AnalyticsMetrics


@runtime_checkable
class LLMClient(Protocol):
    """
    Protocol defining the LLM client interface.

    Insight generation runs in two stages: an analysis stage that may call
    tools and produces a free-form memo, then an insights stage that turns
    the memo into structured fields without tools.

    Attributes:
        model_name: Model identifier recorded on generated reports
    """

    model_name: str

    def generate_analysis_memo(
        self,
        metrics: AnalyticsMetrics,
        tools: dict[str, AnalysisTool],
    ) -> AnalysisMemo:
        """
        Stage 1: investigate with the analysis tools and write a memo.

        Args:
            metrics: Current metrics for prompt context
            tools: Analysis tools the model may call, keyed by name

        Returns:
            AnalysisMemo with the memo text, tool names called in order,
            and the number of steps that called tools
        """
        ...

    def generate_insights(
        self,
        memo: AnalysisMemo,
        metrics: AnalyticsMetrics,
    ) -> AnalyticsInsights:
        """
        Stage 2: turn the analysis memo into structured insights.

        Args:
            memo: Output of generate_analysis_memo
            metrics: Current metrics for grounding

        Returns:
            AnalyticsInsights
        """
        ...
