"""Exception types raised by pruxy components."""

from __future__ import annotations

from typing import Optional


class PruxyError(Exception):
    """Base class for pruxy failures."""


class ConfigurationError(PruxyError):
    """Raised when the resolved configuration cannot start the service."""


class UpstreamError(PruxyError):
    """Raised when the printer answers with an unexpected status code."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class PayloadError(PruxyError, ValueError):
    """Raised when a printer payload does not match the expected shape."""
