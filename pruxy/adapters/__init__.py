"""Adapter modules for external integrations."""

from .prusalink import PrusaLinkClient, create_session, join_url

__all__ = [
    "PrusaLinkClient",
    "create_session",
    "join_url",
]
