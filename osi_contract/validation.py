from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from osi_contract.geometry import in_field_of_view
from osi_contract.schemas.common import Vector3d
from osi_contract.schemas.logical_detection import (
    DataQualifier,
    LogicalDetection,
    LogicalDetectionData,
)
from osi_contract.schemas.sensor_view_configuration import (
    TECHNOLOGY_FIELDS,
    CameraSensorViewConfiguration,
    ChannelFormat,
    LidarSensorViewConfiguration,
    SensorViewConfiguration,
)


@dataclass(frozen=True)
class ValidationIssue:
    """A single contract violation found by a producer or consumer."""

    severity: str  # "error" | "warning"
    issue_type: str
    message: str
    path: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"severity": self.severity, "type": self.issue_type, "message": self.message, "path": self.path}


def has_errors(issues: List[ValidationIssue]) -> bool:
    return any(i.severity == "error" for i in issues)


def _lower_bound(issues: List[ValidationIssue], obj, name: str, bound: float, path: str) -> None:
    value = getattr(obj, name)
    if value is not None and value < bound:
        issues.append(
            ValidationIssue("error", "out_of_range", f"{name}={value} is below {bound}", f"{path}.{name}")
        )


def _in_interval(issues: List[ValidationIssue], obj, name: str, lo: float, hi: float, path: str) -> None:
    value = getattr(obj, name)
    if value is not None and not lo <= value <= hi:
        issues.append(
            ValidationIssue("error", "out_of_range", f"{name}={value} is outside [{lo}, {hi}]", f"{path}.{name}")
        )


def _non_negative_vector(issues: List[ValidationIssue], vec: Optional[Vector3d], name: str, path: str) -> None:
    if vec is None:
        return
    for axis in ("x", "y", "z"):
        _lower_bound(issues, vec, axis, 0.0, f"{path}.{name}")


class SensorViewConfigurationValidator:
    """Checks documented bounds of a requested or granted configuration."""

    def __init__(self, granted: bool = False, unit_tolerance: float = 1e-6):
        self.granted = granted
        self.unit_tolerance = unit_tolerance

    def validate(self, config: SensorViewConfiguration) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        _lower_bound(issues, config, "range", 0.0, "")
        if config.update_cycle_time is not None and config.update_cycle_time.total_nanos <= 0:
            issues.append(
                ValidationIssue("error", "out_of_range", "update_cycle_time must be positive", ".update_cycle_time")
            )
        if self.granted and config.simulation_start_time is None:
            issues.append(
                ValidationIssue(
                    "warning", "missing_start_time", "granted configuration without simulation_start_time",
                    ".simulation_start_time",
                )
            )
        for technology, attr in TECHNOLOGY_FIELDS.items():
            for idx, record in enumerate(getattr(config, attr)):
                path = f".{attr}[{idx}]"
                for name in (
                    "number_of_rays_horizontal",
                    "number_of_rays_vertical",
                    "max_number_of_interactions",
                    "num_of_pixels",
                    "number_of_pixels_horizontal",
                    "number_of_pixels_vertical",
                    "samples_per_pixel",
                ):
                    if hasattr(record, name):
                        _lower_bound(issues, record, name, 1, path)
                if hasattr(record, "emitter_frequency"):
                    _lower_bound(issues, record, "emitter_frequency", 0.0, path)
                if isinstance(record, LidarSensorViewConfiguration):
                    self._check_lidar(issues, record, path)
                elif isinstance(record, CameraSensorViewConfiguration):
                    self._check_camera(issues, record, path)
        return issues

    def _check_lidar(self, issues: List[ValidationIssue], record: LidarSensorViewConfiguration, path: str) -> None:
        for name in ("directions", "timings"):
            values = getattr(record, name)
            if values and len(values) != record.num_of_pixels:
                issues.append(
                    ValidationIssue(
                        "error",
                        "length_mismatch",
                        f"{len(values)} {name} for num_of_pixels={record.num_of_pixels}",
                        f"{path}.{name}",
                    )
                )
        if record.directions:
            dirs = np.array([[d.x or 0.0, d.y or 0.0, d.z or 0.0] for d in record.directions])
            norms = np.linalg.norm(dirs, axis=1)
            bad = np.flatnonzero(np.abs(norms - 1.0) > self.unit_tolerance)
            if bad.size:
                issues.append(
                    ValidationIssue(
                        "warning",
                        "not_unit_vector",
                        f"{bad.size} direction(s) are not unit vectors, first at index {int(bad[0])}",
                        f"{path}.directions",
                    )
                )
            outside = [
                i
                for i, d in enumerate(record.directions)
                if not in_field_of_view(d, record.field_of_view_horizontal, record.field_of_view_vertical)
            ]
            if outside:
                issues.append(
                    ValidationIssue(
                        "warning",
                        "outside_field_of_view",
                        f"{len(outside)} direction(s) point outside the lidar field of view, first at index {outside[0]}",
                        f"{path}.directions",
                    )
                )

    def _check_camera(self, issues: List[ValidationIssue], record: CameraSensorViewConfiguration, path: str) -> None:
        if ChannelFormat.UNKNOWN in record.channel_format:
            issues.append(
                ValidationIssue("warning", "unknown_enum", "channel_format contains UNKNOWN", f"{path}.channel_format")
            )
        if self.granted and len(record.channel_format) > 1:
            issues.append(
                ValidationIssue(
                    "error",
                    "multiple_granted_formats",
                    f"granted channel_format holds {len(record.channel_format)} entries",
                    f"{path}.channel_format",
                )
            )
        for idx, w in enumerate(record.wavelength_data):
            _lower_bound(issues, w, "samples_number", 1, f"{path}.wavelength_data[{idx}]")
            if w.start is not None and w.end is not None and w.start > w.end:
                issues.append(
                    ValidationIssue(
                        "warning", "inverted_interval", f"wavelength start {w.start} > end {w.end}",
                        f"{path}.wavelength_data[{idx}]",
                    )
                )


def check_grant(request: SensorViewConfiguration, granted: SensorViewConfiguration) -> List[ValidationIssue]:
    """A grant may only narrow the request: same or fewer records, formats taken from the request."""
    issues = SensorViewConfigurationValidator(granted=True).validate(granted)
    if request.sensor_id != granted.sensor_id:
        issues.append(ValidationIssue("error", "sensor_id_changed", "virtual sensor id differs", ".sensor_id"))
    for technology, attr in TECHNOLOGY_FIELDS.items():
        requested_records = getattr(request, attr)
        granted_records = getattr(granted, attr)
        if len(granted_records) > len(requested_records):
            issues.append(
                ValidationIssue(
                    "error",
                    "unrequested_record",
                    f"{len(granted_records)} {technology} record(s) granted, {len(requested_records)} requested",
                    f".{attr}",
                )
            )
            continue
        requested_ids = {r.sensor_id for r in requested_records}
        for idx, record in enumerate(granted_records):
            if record.sensor_id not in requested_ids:
                issues.append(
                    ValidationIssue("error", "unrequested_record", "granted record was not requested", f".{attr}[{idx}]")
                )
            if isinstance(record, CameraSensorViewConfiguration):
                match = next((r for r in requested_records if r.sensor_id == record.sensor_id), None)
                allowed = set(match.channel_format) if match is not None else set()
                if any(f not in allowed for f in record.channel_format):
                    issues.append(
                        ValidationIssue(
                            "error", "unrequested_format", "granted channel format was not requested",
                            f".{attr}[{idx}].channel_format",
                        )
                    )
    return issues


class LogicalDetectionValidator:
    """Checks LogicalDetectionData invariants."""

    def validate(self, data: LogicalDetectionData) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        header = data.header
        total = len(data.logical_detection)
        count = header.number_of_valid_logical_detections if header else None
        any_invalid = any(not d.is_valid for d in data.logical_detection)
        if any_invalid and count is None:
            issues.append(
                ValidationIssue(
                    "error",
                    "missing_valid_count",
                    "invalid detections present but number_of_valid_logical_detections is not set",
                    ".header.number_of_valid_logical_detections",
                )
            )
        if count is not None and count > total:
            issues.append(
                ValidationIssue(
                    "error",
                    "valid_count_exceeds_list",
                    f"number_of_valid_logical_detections={count} exceeds {total} detections",
                    ".header.number_of_valid_logical_detections",
                )
            )
        if count is not None:
            for idx, det in enumerate(data.logical_detection[:count]):
                if not det.is_valid:
                    issues.append(
                        ValidationIssue(
                            "warning", "invalid_in_valid_prefix", "invalid detection inside the valid prefix",
                            f".logical_detection[{idx}]",
                        )
                    )
        if header is not None and header.data_qualifier == DataQualifier.UNKNOWN:
            issues.append(
                ValidationIssue("warning", "unknown_enum", "data_qualifier is UNKNOWN", ".header.data_qualifier")
            )
        for idx, det in enumerate(data.logical_detection):
            self._check_detection(issues, det, f".logical_detection[{idx}]")
        return issues

    def _check_detection(self, issues: List[ValidationIssue], det: LogicalDetection, path: str) -> None:
        _in_interval(issues, det, "existence_probability", 0.0, 1.0, path)
        _in_interval(issues, det, "point_target_probability", 0.0, 1.0, path)
        _in_interval(issues, det, "intensity", 0.0, 100.0, path)
        _lower_bound(issues, det, "echo_pulse_width", 0.0, path)
        _non_negative_vector(issues, det.position_rmse, "position_rmse", path)
        _non_negative_vector(issues, det.velocity_rmse, "velocity_rmse", path)
