"""Base utilities for review queue server factories.

This package exports the base server factory interface that the web server
factory inherits.
"""

from .app import BaseServerFactory

__all__ = ["BaseServerFactory"]
