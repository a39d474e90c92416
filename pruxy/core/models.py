"""Domain models for printer snapshots and exported samples.

Every optional printer field is modelled as ``Optional[...]``: ``None`` means
the printer omitted the key or sent ``null``. Zero is a real reading and is
kept as such.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .errors import PayloadError


@dataclass(frozen=True, slots=True)
class Sample:
    """A single gauge reading emitted during one collection cycle."""

    name: str
    value: float
    labels: Mapping[str, str] = field(default_factory=dict)
    documentation: str = ""

    @property
    def key(self) -> tuple[str, tuple[tuple[str, str], ...]]:
        return self.name, tuple(sorted(self.labels.items()))


@dataclass(slots=True)
class PrinterInfo:
    hostname: str = ""
    serial: str = ""
    nozzle_diameter: Optional[float] = None
    min_extrusion_temp: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "PrinterInfo":
        data = _require_object(payload, "info")
        return cls(
            hostname=_string(data, "hostname"),
            serial=_string(data, "serial"),
            nozzle_diameter=_optional_float(data, "nozzle_diameter"),
            min_extrusion_temp=_optional_int(data, "min_extrusion_temp"),
        )


@dataclass(slots=True)
class PrinterStatus:
    state: str = ""
    temp_nozzle: Optional[float] = None
    target_nozzle: Optional[float] = None
    temp_bed: Optional[float] = None
    target_bed: Optional[float] = None
    axis_x: Optional[float] = None
    axis_y: Optional[float] = None
    axis_z: Optional[float] = None
    flow: Optional[int] = None
    speed: Optional[int] = None
    fan_hotend: Optional[int] = None
    fan_print: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "PrinterStatus":
        """Decode the ``printer`` section of a status response.

        The status endpoint nests printer readings under ``"printer"``; other
        sections (job, storage, transfer) are ignored here.
        """

        envelope = _require_object(payload, "status")
        data = _require_object(envelope.get("printer"), "status.printer")
        return cls(
            state=_string(data, "state"),
            temp_nozzle=_optional_float(data, "temp_nozzle"),
            target_nozzle=_optional_float(data, "target_nozzle"),
            temp_bed=_optional_float(data, "temp_bed"),
            target_bed=_optional_float(data, "target_bed"),
            axis_x=_optional_float(data, "axis_x"),
            axis_y=_optional_float(data, "axis_y"),
            axis_z=_optional_float(data, "axis_z"),
            flow=_optional_int(data, "flow"),
            speed=_optional_int(data, "speed"),
            fan_hotend=_optional_int(data, "fan_hotend"),
            fan_print=_optional_int(data, "fan_print"),
        )


@dataclass(slots=True)
class JobInfo:
    state: str = ""
    progress: Optional[float] = None
    time_remaining: Optional[int] = None
    time_printing: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "JobInfo":
        data = _require_object(payload, "job")
        return cls(
            state=_string(data, "state"),
            progress=_optional_float(data, "progress"),
            time_remaining=_optional_int(data, "time_remaining"),
            time_printing=_optional_int(data, "time_printing"),
        )


def _require_object(payload: Any, context: str) -> Mapping[str, Any]:
    # a bare null decodes to an empty document, as with an empty object
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise PayloadError(
            f"{context}: expected JSON object, got {type(payload).__name__}"
        )
    return payload


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise PayloadError(f"{key}: expected string, got {type(value).__name__}")
    return value


def _optional_float(data: Mapping[str, Any], key: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    # bool is an int subclass but never a reading
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PayloadError(f"{key}: expected number, got {type(value).__name__}")
    return float(value)


def _optional_int(data: Mapping[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise PayloadError(f"{key}: expected integer, got {type(value).__name__}")
    return value
