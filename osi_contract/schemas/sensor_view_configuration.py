from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterator, Optional, Tuple

from .common import (
    Identifier,
    InterfaceVersion,
    MountingPosition,
    Timestamp,
    Vector3d,
    WavelengthData,
    tag,
)


class ChannelFormat(IntEnum):
    """Camera image format: number, kind and encoding of channels."""

    UNKNOWN = 0
    OTHER = 1
    MONO_U8_LIN = 2
    MONO_U16_LIN = 3
    MONO_U32_LIN = 4
    MONO_F32_LIN = 5
    RGB_U8_LIN = 6
    RGB_U16_LIN = 7
    RGB_U32_LIN = 8
    RGB_F32_LIN = 9
    BAYER_BGGR_U8_LIN = 10
    BAYER_BGGR_U16_LIN = 11
    BAYER_BGGR_U32_LIN = 12
    BAYER_BGGR_F32_LIN = 13
    BAYER_RGGB_U8_LIN = 14
    BAYER_RGGB_U16_LIN = 15
    BAYER_RGGB_U32_LIN = 16
    BAYER_RGGB_F32_LIN = 17
    RCCC_U8_LIN = 18
    RCCC_U16_LIN = 19
    RCCC_U32_LIN = 20
    RCCC_F32_LIN = 21
    RCCB_U8_LIN = 22
    RCCB_U16_LIN = 23
    RCCB_U32_LIN = 24
    RCCB_F32_LIN = 25


class PixelOrder(IntEnum):
    # left-to-right, top-to-bottom
    DEFAULT = 0
    OTHER = 1
    RIGHT_LEFT_TOP_BOTTOM = 2
    LEFT_RIGHT_BOTTOM_TOP = 3


@dataclass(frozen=True)
class AntennaDiagramEntry:
    horizontal_angle: Optional[float] = tag(1)  # rad
    vertical_angle: Optional[float] = tag(2)  # rad
    response: Optional[float] = tag(3)  # dB


@dataclass(frozen=True)
class GenericSensorViewConfiguration:
    sensor_id: Optional[Identifier] = tag(1)
    mounting_position: Optional[MountingPosition] = tag(2)
    mounting_position_rmse: Optional[MountingPosition] = tag(3)
    field_of_view_horizontal: Optional[float] = tag(4)
    field_of_view_vertical: Optional[float] = tag(5)


@dataclass(frozen=True)
class RadarSensorViewConfiguration:
    sensor_id: Optional[Identifier] = tag(1)
    mounting_position: Optional[MountingPosition] = tag(2)
    mounting_position_rmse: Optional[MountingPosition] = tag(3)
    field_of_view_horizontal: Optional[float] = tag(4)
    field_of_view_vertical: Optional[float] = tag(5)
    number_of_rays_horizontal: Optional[int] = tag(6)
    number_of_rays_vertical: Optional[int] = tag(7)
    max_number_of_interactions: Optional[int] = tag(8)
    emitter_frequency: Optional[float] = tag(9)  # Hz
    tx_antenna_diagram: Tuple[AntennaDiagramEntry, ...] = tag(10, ())
    rx_antenna_diagram: Tuple[AntennaDiagramEntry, ...] = tag(11, ())


@dataclass(frozen=True)
class LidarSensorViewConfiguration:
    """Lidar ray-tracing input request.

    ``directions`` and ``timings`` (microseconds from the frame timestamp) are
    per pixel and must both hold ``num_of_pixels`` entries when populated.
    """

    sensor_id: Optional[Identifier] = tag(1)
    mounting_position: Optional[MountingPosition] = tag(2)
    mounting_position_rmse: Optional[MountingPosition] = tag(3)
    field_of_view_horizontal: Optional[float] = tag(4)
    field_of_view_vertical: Optional[float] = tag(5)
    number_of_rays_horizontal: Optional[int] = tag(6)
    number_of_rays_vertical: Optional[int] = tag(7)
    max_number_of_interactions: Optional[int] = tag(8)
    emitter_frequency: Optional[float] = tag(9)  # Hz
    num_of_pixels: Optional[int] = tag(10)
    directions: Tuple[Vector3d, ...] = tag(11, ())
    timings: Tuple[int, ...] = tag(12, ())


@dataclass(frozen=True)
class CameraSensorViewConfiguration:
    """Camera image generation request.

    When requested, ``channel_format`` lists every acceptable format, most
    preferred first. When granted it holds exactly one format, or none if the
    simulator cannot deliver any of the requested ones.
    """

    sensor_id: Optional[Identifier] = tag(1)
    mounting_position: Optional[MountingPosition] = tag(2)
    mounting_position_rmse: Optional[MountingPosition] = tag(3)
    field_of_view_horizontal: Optional[float] = tag(4)
    field_of_view_vertical: Optional[float] = tag(5)
    number_of_pixels_horizontal: Optional[int] = tag(6)
    number_of_pixels_vertical: Optional[int] = tag(7)
    channel_format: Tuple[ChannelFormat, ...] = tag(8, ())
    samples_per_pixel: Optional[int] = tag(9)
    max_number_of_interactions: Optional[int] = tag(10)
    wavelength_data: Tuple[WavelengthData, ...] = tag(11, ())
    pixel_order: Optional[PixelOrder] = tag(12)


@dataclass(frozen=True)
class UltrasonicSensorViewConfiguration:
    sensor_id: Optional[Identifier] = tag(1)
    mounting_position: Optional[MountingPosition] = tag(2)
    mounting_position_rmse: Optional[MountingPosition] = tag(3)
    field_of_view_horizontal: Optional[float] = tag(4)
    field_of_view_vertical: Optional[float] = tag(5)


# technology name -> collection attribute on SensorViewConfiguration
TECHNOLOGY_FIELDS: Dict[str, str] = {
    "generic": "generic_sensor_view_configuration",
    "radar": "radar_sensor_view_configuration",
    "lidar": "lidar_sensor_view_configuration",
    "camera": "camera_sensor_view_configuration",
    "ultrasonic": "ultrasonic_sensor_view_configuration",
}


@dataclass(frozen=True)
class SensorViewConfiguration:
    """Input configuration of one virtual sensor.

    Sent by the sensor model as a request and answered by the simulator with a
    granted instance of the same type. ``update_cycle_offset`` is defined
    against a simulation start time of zero, whatever the simulator's actual
    ``simulation_start_time`` is.
    """

    version: Optional[InterfaceVersion] = tag(1)
    sensor_id: Optional[Identifier] = tag(2)
    mounting_position: Optional[MountingPosition] = tag(3)
    mounting_position_rmse: Optional[MountingPosition] = tag(4)
    field_of_view_horizontal: Optional[float] = tag(5)
    field_of_view_vertical: Optional[float] = tag(6)
    range: Optional[float] = tag(7)
    update_cycle_time: Optional[Timestamp] = tag(8)
    update_cycle_offset: Optional[Timestamp] = tag(9)
    simulation_start_time: Optional[Timestamp] = tag(10)
    omit_static_information: Optional[bool] = tag(11)
    generic_sensor_view_configuration: Tuple[GenericSensorViewConfiguration, ...] = tag(1000, ())
    radar_sensor_view_configuration: Tuple[RadarSensorViewConfiguration, ...] = tag(1001, ())
    lidar_sensor_view_configuration: Tuple[LidarSensorViewConfiguration, ...] = tag(1002, ())
    camera_sensor_view_configuration: Tuple[CameraSensorViewConfiguration, ...] = tag(1003, ())
    ultrasonic_sensor_view_configuration: Tuple[UltrasonicSensorViewConfiguration, ...] = tag(1004, ())

    def technology_records(self) -> Iterator[Tuple[str, object]]:
        for technology, attr in TECHNOLOGY_FIELDS.items():
            for record in getattr(self, attr):
                yield technology, record
