import math

import pytest

from osi_contract.negotiation import SimulatorCapability, TechnologyCapability
from osi_contract.schemas import (
    AntennaDiagramEntry,
    CameraSensorViewConfiguration,
    ChannelFormat,
    GenericSensorViewConfiguration,
    Identifier,
    LidarSensorViewConfiguration,
    MountingPosition,
    Orientation3d,
    PixelOrder,
    RadarSensorViewConfiguration,
    SensorViewConfiguration,
    Timestamp,
    UltrasonicSensorViewConfiguration,
    Vector3d,
    WavelengthData,
)


def mounting(x=0.0, y=0.0, z=0.0, yaw=0.0):
    return MountingPosition(position=Vector3d(x, y, z), orientation=Orientation3d(0.0, 0.0, yaw))


@pytest.fixture
def capability():
    return SimulatorCapability(
        simulation_start_time=Timestamp.from_seconds(0.030),
        simulation_step=Timestamp.from_seconds(0.001),
        min_update_cycle_time=Timestamp.from_seconds(0.010),
        default_update_cycle_time=Timestamp.from_seconds(0.050),
        max_range=300.0,
        default_range=150.0,
        max_field_of_view_horizontal=math.pi,
        technologies={
            "generic": TechnologyCapability(),
            "radar": TechnologyCapability(
                max_field_of_view_horizontal=1.0,
                max_number_of_rays_horizontal=100,
                max_number_of_rays_vertical=10,
                max_number_of_interactions=3,
                emitter_frequency_range=(76e9, 81e9),
                supports_antenna_diagram=False,
            ),
            "lidar": TechnologyCapability(max_num_of_pixels=4, max_number_of_interactions=2),
            "camera": TechnologyCapability(
                max_number_of_pixels_horizontal=1920,
                max_number_of_pixels_vertical=1080,
                max_samples_per_pixel=4,
                channel_formats=(ChannelFormat.MONO_U8_LIN, ChannelFormat.BAYER_RGGB_U16_LIN),
                pixel_orders=(PixelOrder.DEFAULT,),
                supports_spectral=True,
                max_wavelength_samples=8,
            ),
        },
    )


@pytest.fixture
def request_config():
    return SensorViewConfiguration(
        sensor_id=Identifier(1),
        mounting_position=mounting(x=1.5, z=1.2),
        mounting_position_rmse=mounting(x=0.01, y=0.01, z=0.01),
        field_of_view_horizontal=2 * math.pi,
        field_of_view_vertical=0.5,
        range=500.0,
        update_cycle_time=Timestamp.from_seconds(0.020),
        update_cycle_offset=Timestamp.from_seconds(0.008),
        simulation_start_time=Timestamp.from_seconds(99.0),
        omit_static_information=True,
        generic_sensor_view_configuration=(GenericSensorViewConfiguration(sensor_id=Identifier(10)),),
        radar_sensor_view_configuration=(
            RadarSensorViewConfiguration(
                sensor_id=Identifier(11),
                mounting_position=mounting(x=3.8),
                field_of_view_horizontal=1.2,
                number_of_rays_horizontal=400,
                number_of_rays_vertical=5,
                max_number_of_interactions=2,
                emitter_frequency=77e9,
                tx_antenna_diagram=(AntennaDiagramEntry(0.0, 0.0, -3.0),),
            ),
        ),
        lidar_sensor_view_configuration=(
            LidarSensorViewConfiguration(
                sensor_id=Identifier(12),
                num_of_pixels=3,
                directions=(Vector3d(1.0, 0.0, 0.0), Vector3d(0.0, 1.0, 0.0), Vector3d(0.0, 0.0, 1.0)),
                timings=(0, 10, 20),
            ),
        ),
        camera_sensor_view_configuration=(
            CameraSensorViewConfiguration(
                sensor_id=Identifier(13),
                number_of_pixels_horizontal=3840,
                number_of_pixels_vertical=720,
                channel_format=(
                    ChannelFormat.RGB_U8_LIN,
                    ChannelFormat.MONO_U8_LIN,
                    ChannelFormat.BAYER_RGGB_U16_LIN,
                ),
                samples_per_pixel=2,
                wavelength_data=(WavelengthData(start=4e-7, end=7e-7, samples_number=16),),
                pixel_order=PixelOrder.DEFAULT,
            ),
        ),
        ultrasonic_sensor_view_configuration=(UltrasonicSensorViewConfiguration(sensor_id=Identifier(14)),),
    )
