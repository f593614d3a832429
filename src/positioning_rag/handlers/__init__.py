"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on the pipeline (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .positioning_handler import PositioningHandler

__all__ = [
    "PositioningHandler",
]
