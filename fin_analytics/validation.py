"""
Input validation for the analytics service.

Pydantic enforces the shape of the inputs (types, YYYY-MM-DD patterns);
the functions here add the semantic checks on top. All functions are pure
and return lists of error messages.

Monthly summaries are not validated here: they are only ever built from
transactions by build_monthly_summaries, which yields one entry per month
with net_income = total_income - total_expense.
"""

from datetime import date
from typing import Optional

from fin_analytics.models import CollectedData


class ValidationError(Exception):
    """
    Raised when input validation fails.

    Attributes:
        errors: List of validation error messages
    """

    def __init__(self, errors: list[str]):
        self.errors = errors
        message = "; ".join(errors) if errors else "Validation failed"
        super().__init__(message)


def _is_calendar_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


# =============================================================================
# CollectedData Validation
# =============================================================================


def validate_collected_data(data: CollectedData) -> list[str]:
    """
    Validate a collected snapshot. Returns list of errors.

    Checks:
    - Liquid assets are non-negative
    - Transaction and snapshot dates are real calendar dates
    - Transaction and holding amounts are non-negative magnitudes

    total_assets may be zero or negative; the aggregators fall back to
    zero ratios in that case.
    """
    errors: list[str] = []

    if data.liquid_assets < 0:
        errors.append(f"liquid_assets must be >= 0 (got {data.liquid_assets})")

    for i, t in enumerate(data.transactions):
        if not _is_calendar_date(t.date):
            errors.append(f"Transaction {i}: invalid date {t.date!r}")
        if t.amount < 0:
            errors.append(f"Transaction {i}: amount must be >= 0 (got {t.amount})")

    for h in data.holdings:
        if h.amount < 0:
            errors.append(f"Holding {h.name}: amount must be >= 0 (got {h.amount})")

    for i, snapshot in enumerate(data.asset_history):
        if not _is_calendar_date(snapshot.date):
            errors.append(f"Asset snapshot {i}: invalid date {snapshot.date!r}")

    return errors


# =============================================================================
# Convenience Functions
# =============================================================================


def validate_and_raise(data: Optional[CollectedData] = None) -> None:
    """
    Validate inputs and raise ValidationError if any errors found.

    This is a convenience function for API boundary validation.
    """
    all_errors: list[str] = []

    if data is not None:
        all_errors.extend(validate_collected_data(data))

    if all_errors:
        raise ValidationError(all_errors)
