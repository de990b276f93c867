"""HTTP surface of the gallery server."""

from .app import create_app

__all__ = ["create_app"]
