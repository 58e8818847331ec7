"""API package exports."""

from src.api.middleware import CorrelationIdMiddleware, RouteGateMiddleware

__all__ = ["CorrelationIdMiddleware", "RouteGateMiddleware"]
