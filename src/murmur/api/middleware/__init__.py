"""HTTP middleware for murmur."""

from murmur.api.middleware.correlation import CorrelationMiddleware

__all__ = ["CorrelationMiddleware"]
