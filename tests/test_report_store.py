"""
Tests for report_store module.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from fin_analytics.engine.metrics import compute_metrics
from fin_analytics.models import AnalyticsInsights, AnalyticsReport, CollectedData, ReportResponse
from fin_analytics.report_store import ReportStore


def make_response(group_id: str, date: str, summary: str = "Summary") -> ReportResponse:
    """Create a report response with empty metrics."""
    return ReportResponse(
        metrics=compute_metrics(CollectedData()),
        report=AnalyticsReport(
            group_id=group_id,
            date=date,
            insights=AnalyticsInsights(summary=summary),
            model="mock",
        ),
    )


class TestReportStorage:
    """Tests for report save/get/list operations."""

    @pytest.fixture
    def store(self) -> ReportStore:
        """Create a fresh store for each test."""
        return ReportStore()

    def test_save_and_get_by_date(self, store: ReportStore):
        store.save(make_response("g1", "2025-04-01"))

        result = store.get_by_date("g1", "2025-04-01")
        assert result is not None
        assert result.report.insights.summary == "Summary"

    def test_get_by_date_not_found(self, store: ReportStore):
        assert store.get_by_date("g1", "2025-04-01") is None

    def test_save_replaces_same_group_and_date(self, store: ReportStore):
        store.save(make_response("g1", "2025-04-01", "First"))
        store.save(make_response("g1", "2025-04-01", "Second"))

        reports = store.list_reports("g1")
        assert len(reports) == 1
        assert reports[0].report.insights.summary == "Second"

    def test_list_reports_newest_first(self, store: ReportStore):
        for date in ["2025-02-01", "2025-04-01", "2025-03-01"]:
            store.save(make_response("g1", date))

        result = store.list_reports("g1")
        assert [r.report.date for r in result] == ["2025-04-01", "2025-03-01", "2025-02-01"]

    def test_list_reports_respects_limit(self, store: ReportStore):
        for day in range(1, 6):
            store.save(make_response("g1", f"2025-04-0{day}"))

        result = store.list_reports("g1", limit=2)
        assert [r.report.date for r in result] == ["2025-04-05", "2025-04-04"]

    def test_groups_are_isolated(self, store: ReportStore):
        store.save(make_response("g1", "2025-04-01"))
        store.save(make_response("g2", "2025-04-02"))

        assert [r.report.group_id for r in store.list_reports("g1")] == ["g1"]
        assert store.get_by_date("g2", "2025-04-01") is None

    def test_get_latest(self, store: ReportStore):
        store.save(make_response("g1", "2025-03-01", "Older"))
        store.save(make_response("g1", "2025-04-01", "Newer"))

        assert store.get_latest("g1").report.insights.summary == "Newer"
        assert store.get_latest("g2") is None

    def test_clear(self, store: ReportStore):
        store.save(make_response("g1", "2025-04-01"))
        store.clear()

        assert store.list_reports("g1") == []

    def test_concurrent_saves(self, store: ReportStore):
        responses = [make_response("g1", f"2025-01-{day:02d}") for day in range(1, 29)]

        with ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(store.save, responses))

        assert len(store.list_reports("g1", limit=100)) == 28
