"""Protocol definitions for printer snapshot sources."""

from __future__ import annotations

from typing import Optional, Protocol

from .models import JobInfo, PrinterInfo, PrinterStatus


class SnapshotSource(Protocol):
    """Minimal contract for components that fetch printer snapshots."""

    async def fetch_info(self, timeout: float) -> PrinterInfo:
        """Retrieve static device information."""
        ...

    async def fetch_status(self, timeout: float) -> PrinterStatus:
        """Retrieve live printer telemetry."""
        ...

    async def fetch_job(self, timeout: float) -> Optional[JobInfo]:
        """Retrieve the active job, or ``None`` when the printer is idle."""
        ...

    async def aclose(self) -> None:
        """Close any underlying resources."""
        ...
