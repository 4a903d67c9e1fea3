"""HTTP boundary over the cache coordinator."""

from kevimage.server.app import create_app

__all__ = ["create_app"]
