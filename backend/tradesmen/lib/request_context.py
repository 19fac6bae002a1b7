"""
Request context utilities for accessing correlation_id and other request-scoped data.
"""
from fastapi import Request


def get_request_correlation_id(request: Request, default: str = "unknown") -> str:
    """
    Get the correlation ID assigned to a request by CorrelationIdMiddleware.

    Args:
        request: FastAPI Request object
        default: Value returned when the middleware did not run

    Returns:
        Correlation ID string
    """
    return getattr(request.state, "correlation_id", None) or default
