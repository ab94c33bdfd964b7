"""
Orchestrator for the analytics service.

A thin coordination layer that delegates all computation to other modules:
- Metrics and analyzers: fin_analytics.engine
- Narrative: fin_analytics.insights (two-stage LLM generation)
- Validation: fin_analytics.validation

Report persistence is left to the caller.
"""

import logging
from datetime import date
from typing import Optional

from fin_analytics.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from fin_analytics.engine.metrics import ANALYZER_RUNNERS, compute_metrics
from fin_analytics.insights import generate_insights
from fin_analytics.llm.interface import LLMClient
from fin_analytics.models import (
    AnalysisBundle,
    AnalyticsMetrics,
    AnalyticsReport,
    AnalyzerName,
    CollectedData,
    ReportResponse,
)
from fin_analytics.validation import validate_and_raise

logger = logging.getLogger(__name__)

__all__ = ["compute_metrics", "has_any_data", "run_analyzers", "build_report"]


def has_any_data(data: CollectedData) -> bool:
    """False when total assets are 0 and holdings, transactions and history are all empty."""
    return bool(
        data.total_assets
        or data.holdings
        or data.transactions
        or data.asset_history
    )


def run_analyzers(
    data: CollectedData,
    metrics: Optional[AnalyticsMetrics] = None,
    names: Optional[list[AnalyzerName]] = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> AnalysisBundle:
    """
    Run a subset of the historical analyzers.

    Args:
        data: Collected snapshot
        metrics: Metrics for the same snapshot (computed if omitted)
        names: Analyzers to run; None runs all five
        config: Engine configuration

    Returns:
        AnalysisBundle with only the requested analyzers populated
    """
    if metrics is None:
        metrics = compute_metrics(data, config)

    selected = list(AnalyzerName) if names is None else names
    results = {name.value: ANALYZER_RUNNERS[name](data, metrics, config) for name in selected}

    logger.debug(f"Ran analyzers: {', '.join(results) or 'none'}")
    return AnalysisBundle(**results)


def build_report(
    group_id: str,
    data: CollectedData,
    llm: LLMClient,
    report_date: date,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> Optional[ReportResponse]:
    """
    Compute metrics and generate the narrative report for one group.

    Args:
        group_id: Reporting group identifier
        data: Collected snapshot for the group
        llm: LLM client for insight generation
        report_date: Date the report is filed under
        config: Engine configuration

    Returns:
        ReportResponse, or None when the snapshot holds no data at all

    Raises:
        ValidationError: If the snapshot fails semantic validation
        InfrastructureError: If the LLM is unreachable
    """
    validate_and_raise(data=data)

    if not has_any_data(data):
        logger.info(f"No data for group {group_id}; skipping report")
        return None

    metrics = compute_metrics(data, config)
    logger.info(
        f"Computed metrics for group {group_id}: "
        f"health_score={metrics.health_score.total_score}"
    )

    insights = generate_insights(data, metrics, llm, config)

    report = AnalyticsReport(
        group_id=group_id,
        date=report_date.isoformat(),
        insights=insights,
        model=llm.model_name,
    )
    return ReportResponse(metrics=metrics, report=report)
