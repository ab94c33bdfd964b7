"""
In-memory report store.

This module provides a thread-safe in-memory store for generated reports,
keyed by (group_id, date). Saving a report for an existing key replaces it.

Note: This is an in-memory implementation. Data is lost on restart.
"""

import threading
from typing import Optional

from fin_analytics.models import ReportResponse


class ReportStore:
    """
    Thread-safe in-memory store for reports.

    Uses a dict keyed by (group_id, date) and a lock for thread safety.
    """

    def __init__(self) -> None:
        """Initialize empty store with lock."""
        self._reports: dict[tuple[str, str], ReportResponse] = {}
        self._lock = threading.Lock()

    def save(self, response: ReportResponse) -> None:
        """
        Store a report, replacing any report for the same group and date.

        Args:
            response: ReportResponse to store
        """
        key = (response.report.group_id, response.report.date)
        with self._lock:
            self._reports[key] = response

    def get_by_date(self, group_id: str, date: str) -> Optional[ReportResponse]:
        """
        Retrieve the report for a group on a date (YYYY-MM-DD).

        Returns:
            ReportResponse if found, None otherwise
        """
        with self._lock:
            return self._reports.get((group_id, date))

    def get_latest(self, group_id: str) -> Optional[ReportResponse]:
        """
        Retrieve the most recent report for a group.

        Returns:
            ReportResponse with the greatest date, None if the group has none
        """
        reports = self.list_reports(group_id, limit=1)
        return reports[0] if reports else None

    def list_reports(self, group_id: str, limit: int = 30) -> list[ReportResponse]:
        """
        List reports for a group.

        Args:
            group_id: Group to list reports for
            limit: Maximum number of reports to return (default 30)

        Returns:
            List of ReportResponse objects, newest date first
        """
        with self._lock:
            reports = [r for (gid, _), r in self._reports.items() if gid == group_id]

        reports.sort(key=lambda r: r.report.date, reverse=True)
        return reports[:limit]

    def clear(self) -> None:
        """Clear all reports. Useful for testing."""
        with self._lock:
            self._reports.clear()


# Singleton instance for use across the application
report_store = ReportStore()
