"""Snapshot collector translating PrusaLink state into gauge samples.

Each call to :meth:`SnapshotCollector.collect` is one collection cycle:

- the info, status and job endpoints are fetched concurrently
- every present field becomes exactly one sample; absent fields emit nothing
- a failed fetch becomes a single ``prusa_error`` sample and never cancels
  or hides the other two

Nothing is cached between cycles.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from . import constants
from .core import JobInfo, PrinterInfo, PrinterStatus, Sample, SnapshotSource

LOGGER = logging.getLogger(__name__)

ERROR_METRIC = f"{constants.METRIC_PREFIX}error"


def _metric(name: str) -> str:
    return f"{constants.METRIC_PREFIX}{name}"


def _gauge(
    name: str, documentation: str, value: float, **labels: str
) -> Sample:
    return Sample(
        name=_metric(name),
        value=float(value),
        labels=labels,
        documentation=documentation,
    )


def _optional(
    samples: list[Sample],
    name: str,
    documentation: str,
    value: Optional[float],
    **labels: str,
) -> None:
    if value is None:
        return
    samples.append(_gauge(name, documentation, value, **labels))


def info_samples(info: PrinterInfo) -> list[Sample]:
    samples = [
        _gauge(
            "printer_info",
            "The hostname of the printer",
            1,
            hostname=info.hostname,
            serial=info.serial,
        )
    ]
    _optional(
        samples,
        "nozzle_diameter_millimeters",
        "The diameter of the nozzle",
        info.nozzle_diameter,
    )
    _optional(
        samples,
        "min_extrusion_temperature_celsius",
        "The minimum extrusion temperature",
        info.min_extrusion_temp,
    )
    return samples


def status_samples(status: PrinterStatus) -> list[Sample]:
    samples = [
        _gauge(
            "printer_state",
            "The current state of the printer",
            1,
            state=status.state.lower(),
        )
    ]

    for sensor, current, target in (
        ("nozzle", status.temp_nozzle, status.target_nozzle),
        ("bed", status.temp_bed, status.target_bed),
    ):
        _optional(
            samples,
            "temperature_celsius",
            "The current temperature reading",
            current,
            sensor=sensor,
        )
        _optional(
            samples,
            "target_temperature_celsius",
            "The target temperature",
            target,
            sensor=sensor,
        )

    for axis, position in (
        ("x", status.axis_x),
        ("y", status.axis_y),
        ("z", status.axis_z),
    ):
        _optional(
            samples, "axis_position", "The current axis position", position, axis=axis
        )

    _optional(samples, "flow_percent", "The current flow percentage", status.flow)
    _optional(samples, "speed_percent", "The current speed percentage", status.speed)

    for fan, rpm in (("hotend", status.fan_hotend), ("print", status.fan_print)):
        _optional(samples, "fan_speed_rpm", "The current fan RPM", rpm, fan=fan)

    return samples


def job_samples(job: Optional[JobInfo]) -> list[Sample]:
    # None means the printer reported no active job
    if job is None:
        return []

    samples = [
        _gauge(
            "job_state",
            "The current state of the job",
            1,
            state=job.state.lower(),
        )
    ]
    _optional(
        samples, "job_progress_percent", "The current job progress", job.progress
    )
    _optional(
        samples,
        "job_time_remaining_seconds",
        "The time remaining for the job",
        job.time_remaining,
    )
    _optional(
        samples,
        "job_time_printing_seconds",
        "The time the job has been printing",
        job.time_printing,
    )
    return samples


def error_sample(endpoint: str, exc: BaseException) -> Sample:
    """Represent a failed fetch as data so the rest of the cycle survives."""

    return Sample(
        name=ERROR_METRIC,
        value=1.0,
        labels={"endpoint": endpoint, "error": describe_error(exc)},
        documentation="An error occurred",
    )


def describe_error(exc: BaseException) -> str:
    if isinstance(exc, asyncio.TimeoutError) and not str(exc):
        return "request timed out"
    return str(exc) or type(exc).__name__


class SnapshotCollector:
    """Fan out the three PrusaLink queries and join their samples."""

    def __init__(
        self,
        source: SnapshotSource,
        *,
        timeout: float = constants.DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._source = source
        self._timeout = timeout

    def describe(self) -> list:
        """Return no static descriptors; every sample is described on the fly."""

        return []

    async def collect(self) -> list[Sample]:
        results = await asyncio.gather(
            self._run("info", self._collect_info),
            self._run("status", self._collect_status),
            self._run("job", self._collect_job),
        )

        samples: list[Sample] = []
        for group in results:
            samples.extend(group)
        return samples

    async def _run(
        self, endpoint: str, operation: Callable[[], Awaitable[list[Sample]]]
    ) -> list[Sample]:
        try:
            return await operation()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            LOGGER.warning(
                "Collecting %s from printer failed: %s", endpoint, describe_error(exc)
            )
            return [error_sample(endpoint, exc)]

    async def _collect_info(self) -> list[Sample]:
        info = await self._source.fetch_info(timeout=self._timeout)
        return info_samples(info)

    async def _collect_status(self) -> list[Sample]:
        status = await self._source.fetch_status(timeout=self._timeout)
        return status_samples(status)

    async def _collect_job(self) -> list[Sample]:
        job = await self._source.fetch_job(timeout=self._timeout)
        return job_samples(job)
