"""API package exports."""

from groov.api.middleware import CorrelationIdMiddleware, RequestLoggingMiddleware
from groov.api.routes import router

__all__ = ["router", "CorrelationIdMiddleware", "RequestLoggingMiddleware"]
