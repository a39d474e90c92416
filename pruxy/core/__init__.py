"""Core primitives for pruxy."""

from .errors import ConfigurationError, PayloadError, PruxyError, UpstreamError
from .models import JobInfo, PrinterInfo, PrinterStatus, Sample
from .protocols import SnapshotSource

__all__ = [
    "ConfigurationError",
    "JobInfo",
    "PayloadError",
    "PrinterInfo",
    "PrinterStatus",
    "PruxyError",
    "Sample",
    "SnapshotSource",
    "UpstreamError",
]
