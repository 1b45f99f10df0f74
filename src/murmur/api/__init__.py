"""HTTP API for murmur."""

from murmur.api.app import create_app

__all__ = ["create_app"]
