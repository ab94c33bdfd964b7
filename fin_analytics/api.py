"""
FastAPI Application for the analytics service.

A thin HTTP layer that delegates all computation to the orchestrator.

Endpoints:
    GET /health - Service health
    POST /api/metrics - Compute metrics for a snapshot
    POST /api/analysis - Run the historical analyzers for a snapshot
    POST /api/reports - Build and store a narrative report
    GET /api/reports/{group_id}/latest - Latest report for a group
    GET /api/reports - List reports for a group
"""

import logging
import os
from datetime import date
from pathlib import Path

# Load .env file if it exists
from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, status

from fin_analytics.config import DEFAULT_ENGINE_CONFIG
from fin_analytics.exceptions import InfrastructureError
from fin_analytics.llm.interface import LLMClient
from fin_analytics.llm.mock import MockLLMClient
from fin_analytics.llm.openai_client import LLMError, OpenAILLMClient
from fin_analytics.models import (
    AnalysisBundle,
    AnalysisRequest,
    AnalyticsMetrics,
    CollectedData,
    ErrorResponse,
    ReportResponse,
)
from fin_analytics.orchestrator import build_report, compute_metrics, run_analyzers
from fin_analytics.report_store import report_store
from fin_analytics.validation import ValidationError, validate_and_raise


logger = logging.getLogger(__name__)


def get_llm_client() -> LLMClient:
    """
    Get the LLM client based on environment configuration.

    Returns OpenAILLMClient if OPENAI_API_KEY is set, otherwise MockLLMClient.
    """
    if os.environ.get("OPENAI_API_KEY"):
        logger.info("Using OpenAILLMClient (OPENAI_API_KEY is set)")
        return OpenAILLMClient()
    logger.info("Using MockLLMClient (no OPENAI_API_KEY)")
    return MockLLMClient()


def _validation_failed(e: ValidationError) -> HTTPException:
    error_response = ErrorResponse(
        error="Validation failed",
        detail=str(e.errors),
        code="VALIDATION_FAILED",
    )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_response.model_dump())


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Financial Analytics API",
    version="1.0.0",
    description="Personal finance metrics, health score and trend analysis",
)


# =============================================================================
# Endpoints
# =============================================================================


@app.get(
    "/health",
    summary="Health check",
    description="Returns service health status",
    tags=["System"],
)
def health_check() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Financial Analytics API",
        "version": "1.0.0",
    }


@app.post(
    "/api/metrics",
    response_model=AnalyticsMetrics,
    responses={400: {"model": ErrorResponse, "description": "Invalid snapshot"}},
    summary="Compute metrics",
    tags=["Analytics"],
)
def create_metrics(data: CollectedData) -> AnalyticsMetrics:
    """
    Compute all aggregators and the health score for a snapshot.

    Status Codes:
        200: Success (an empty snapshot yields zeroed metrics)
        400: Semantic validation failure
        422: Pydantic validation error (automatic)
    """
    try:
        validate_and_raise(data=data)
    except ValidationError as e:
        raise _validation_failed(e)

    return compute_metrics(data, DEFAULT_ENGINE_CONFIG)


@app.post(
    "/api/analysis",
    response_model=AnalysisBundle,
    responses={400: {"model": ErrorResponse, "description": "Invalid snapshot"}},
    summary="Run historical analyzers",
    tags=["Analytics"],
)
def create_analysis(request: AnalysisRequest) -> AnalysisBundle:
    """
    Run the requested analyzers (all five by default).

    Status Codes:
        200: Success
        400: Semantic validation failure
        422: Pydantic validation error (automatic)
    """
    try:
        validate_and_raise(data=request.data)
    except ValidationError as e:
        raise _validation_failed(e)

    return run_analyzers(
        request.data,
        names=request.analyzers,
        config=DEFAULT_ENGINE_CONFIG,
    )


# =============================================================================
# Reports API Endpoints
# =============================================================================


@app.post(
    "/api/reports",
    status_code=status.HTTP_201_CREATED,
    response_model=ReportResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid snapshot"},
        404: {"model": ErrorResponse, "description": "No data for the group"},
        503: {"model": ErrorResponse, "description": "LLM unavailable"},
    },
    summary="Build and store a report",
    tags=["Reports"],
)
def create_report(
    data: CollectedData,
    group_id: str = Query(..., min_length=1, description="Reporting group identifier"),
    report_date: Optional[date] = Query(None, description="Report date (defaults to today)"),
) -> ReportResponse:
    """
    Compute metrics, generate insights and store the report.

    Status Codes:
        201: Report created (replaces any report for the same group and date)
        400: Semantic validation failure
        404: Snapshot holds no data at all
        422: Pydantic validation error (automatic)
        500: LLM returned unusable output or unexpected error
        503: Infrastructure error (LLM unreachable, etc.)
    """
    filed_on = report_date or date.today()
    logger.info(f"Creating report for group={group_id} date={filed_on}")

    try:
        llm = get_llm_client()
        response = build_report(group_id, data, llm, filed_on, DEFAULT_ENGINE_CONFIG)

    except ValidationError as e:
        logger.info(f"Report for group={group_id} failed (validation): {e.errors}")
        raise _validation_failed(e)

    except InfrastructureError as e:
        logger.error(f"Report for group={group_id} failed (infrastructure): {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=ErrorResponse(
                error="Infrastructure error",
                detail=str(e),
                code="LLM_UNAVAILABLE",
            ).model_dump(),
        )

    except LLMError as e:
        logger.error(f"Report for group={group_id} failed (LLM output): {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ErrorResponse(
                error="LLM error",
                detail=str(e),
                code="LLM_ERROR",
            ).model_dump(),
        )

    except Exception as e:
        logger.exception(f"Report for group={group_id} failed (unexpected)")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ErrorResponse(
                error="Internal error",
                detail=str(e),
                code="INTERNAL_ERROR",
            ).model_dump(),
        )

    if response is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ErrorResponse(
                error="No data",
                detail=f"No financial data for group {group_id}",
                code="NO_DATA",
            ).model_dump(),
        )

    report_store.save(response)
    logger.info(
        f"Report for group={group_id} date={filed_on} stored: "
        f"health_score={response.metrics.health_score.total_score}"
    )
    return response


@app.get(
    "/api/reports/{group_id}/latest",
    response_model=ReportResponse,
    responses={404: {"model": ErrorResponse, "description": "No report for the group"}},
    summary="Get the latest report for a group",
    tags=["Reports"],
)
def get_latest_report(group_id: str) -> ReportResponse:
    """
    Get the most recent report for a group.

    Status Codes:
        200: Report found
        404: No report for the group
    """
    response = report_store.get_latest(group_id)
    if response is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ErrorResponse(
                error="Report not found",
                detail=f"No report for group {group_id}",
                code="REPORT_NOT_FOUND",
            ).model_dump(),
        )
    return response


@app.get(
    "/api/reports",
    summary="List reports",
    description="Lists a group's reports, newest first.",
    tags=["Reports"],
)
def list_reports(
    group_id: str = Query(..., min_length=1, description="Reporting group identifier"),
    limit: int = Query(30, ge=1, le=100, description="Maximum reports to return"),
) -> list[dict]:
    """
    List reports for a group.

    Returns a summary list (without the metrics payload).

    Status Codes:
        200: Success (may be empty list)
    """
    responses = report_store.list_reports(group_id, limit=limit)

    return [
        {
            "group_id": r.report.group_id,
            "date": r.report.date,
            "model": r.report.model,
            "health_score": r.metrics.health_score.total_score,
            "summary": r.report.insights.summary if r.report.insights else None,
        }
        for r in responses
    ]
