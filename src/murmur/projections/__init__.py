"""Read projections maintained from domain events."""

from murmur.projections.search import SearchProjectionUpdater

__all__ = ["SearchProjectionUpdater"]
