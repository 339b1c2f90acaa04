"""Shared data schemas for sensor view configuration and logical detections."""

from .common import (
    NO_OBJECT_ID,
    Identifier,
    InterfaceVersion,
    MountingPosition,
    Orientation3d,
    Timestamp,
    Vector3d,
    WavelengthData,
)
from .sensor_view_configuration import (
    TECHNOLOGY_FIELDS,
    AntennaDiagramEntry,
    CameraSensorViewConfiguration,
    ChannelFormat,
    GenericSensorViewConfiguration,
    LidarSensorViewConfiguration,
    PixelOrder,
    RadarSensorViewConfiguration,
    SensorViewConfiguration,
    UltrasonicSensorViewConfiguration,
)
from .logical_detection import (
    DataQualifier,
    LogicalDetection,
    LogicalDetectionClassification,
    LogicalDetectionData,
    LogicalDetectionDataHeader,
    assemble_logical_detection_data,
)

__all__ = [
    "NO_OBJECT_ID",
    "Identifier",
    "InterfaceVersion",
    "MountingPosition",
    "Orientation3d",
    "Timestamp",
    "Vector3d",
    "WavelengthData",
    "TECHNOLOGY_FIELDS",
    "AntennaDiagramEntry",
    "CameraSensorViewConfiguration",
    "ChannelFormat",
    "GenericSensorViewConfiguration",
    "LidarSensorViewConfiguration",
    "PixelOrder",
    "RadarSensorViewConfiguration",
    "SensorViewConfiguration",
    "UltrasonicSensorViewConfiguration",
    "DataQualifier",
    "LogicalDetection",
    "LogicalDetectionClassification",
    "LogicalDetectionData",
    "LogicalDetectionDataHeader",
    "assemble_logical_detection_data",
]
