"""
Custom exceptions for the analytics service.

This module defines exceptions that are distinct from validation errors
and represent infrastructure or external service failures.
"""


class InfrastructureError(Exception):
    """
    Raised when external services (LLM, etc.) are unreachable or fail unexpectedly.

    The failure is due to infrastructure issues, not invalid input. API
    endpoints return 503 Service Unavailable when catching this exception.

    Examples:
        - LLM API connection timeout
        - LLM API returns 5xx error
    """

    pass
