from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, FrozenSet, Iterable, Optional, Tuple

from .common import NO_OBJECT_ID_VALUE, Identifier, InterfaceVersion, Timestamp, Vector3d, tag


class DataQualifier(IntEnum):
    UNKNOWN = 0
    OTHER = 1
    AVAILABLE = 2
    AVAILABLE_REDUCED = 3
    NOT_AVAILABLE = 4
    BLINDNESS = 5
    TEMPORARY_AVAILABLE = 6
    INVALID = 7


class LogicalDetectionClassification(IntEnum):
    UNKNOWN = 0
    OTHER = 1
    INVALID = 2
    CLUTTER = 3
    OVERDRIVABLE = 4
    UNDERDRIVABLE = 5


@dataclass(frozen=True)
class LogicalDetectionDataHeader:
    logical_detection_time: Optional[Timestamp] = tag(1)
    data_qualifier: Optional[DataQualifier] = tag(2)
    number_of_valid_logical_detections: Optional[int] = tag(3)
    sensor_id: Tuple[Identifier, ...] = tag(4, ())  # unordered


@dataclass(frozen=True)
class LogicalDetection:
    """One fused detection in the virtual sensor frame."""

    existence_probability: Optional[float] = tag(1)  # [0, 1]
    object_id: Optional[Identifier] = tag(2)
    position: Optional[Vector3d] = tag(3)  # m
    position_rmse: Optional[Vector3d] = tag(4)
    velocity: Optional[Vector3d] = tag(5)  # m/s
    velocity_rmse: Optional[Vector3d] = tag(6)
    intensity: Optional[float] = tag(7)  # %, [0, 100]
    snr: Optional[float] = tag(8)  # dB
    point_target_probability: Optional[float] = tag(9)  # [0, 1]
    sensor_id: Tuple[Identifier, ...] = tag(10, ())  # unordered
    classification: Optional[LogicalDetectionClassification] = tag(11)
    echo_pulse_width: Optional[float] = tag(12)  # m

    @property
    def has_object(self) -> bool:
        return self.object_id is not None and self.object_id.value not in (None, NO_OBJECT_ID_VALUE)

    @property
    def is_valid(self) -> bool:
        return self.classification != LogicalDetectionClassification.INVALID


@dataclass(frozen=True)
class LogicalDetectionData:
    version: Optional[InterfaceVersion] = tag(1)
    header: Optional[LogicalDetectionDataHeader] = tag(2)
    logical_detection: Tuple[LogicalDetection, ...] = tag(3, ())

    def valid_detections(self) -> Tuple[LogicalDetection, ...]:
        """Valid entries are the prefix of declared length; all of them if undeclared."""
        count = self.header.number_of_valid_logical_detections if self.header else None
        if count is None:
            return self.logical_detection
        return self.logical_detection[:count]

    def contributing_sensor_ids(self) -> FrozenSet[Identifier]:
        if self.header is None:
            return frozenset()
        return frozenset(self.header.sensor_id)


def assemble_logical_detection_data(
    detections: Iterable[LogicalDetection],
    detection_time: Optional[Timestamp] = None,
    data_qualifier: Optional[DataQualifier] = None,
    sensor_ids: Iterable[Identifier] = (),
    is_valid: Callable[[LogicalDetection], bool] = lambda d: d.is_valid,
    version: Optional[InterfaceVersion] = None,
) -> LogicalDetectionData:
    """Publish one fusion cycle's detections.

    Valid entries are moved in front of invalid ones (keeping their relative
    order) and the valid count is populated whenever an invalid entry exists.
    """
    valid = []
    invalid = []
    for det in detections:
        (valid if is_valid(det) else invalid).append(det)
    header = LogicalDetectionDataHeader(
        logical_detection_time=detection_time,
        data_qualifier=data_qualifier,
        number_of_valid_logical_detections=len(valid) if invalid else None,
        sensor_id=tuple(sensor_ids),
    )
    return LogicalDetectionData(
        version=version or InterfaceVersion.current(),
        header=header,
        logical_detection=tuple(valid + invalid),
    )
