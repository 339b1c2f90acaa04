import math
from dataclasses import replace

from osi_contract.config import load_capability
from osi_contract.negotiation import (
    NegotiationResolver,
    SimulatorCapability,
    TechnologyCapability,
    resolve,
    select_preferred,
)
from osi_contract.schemas import (
    CameraSensorViewConfiguration,
    ChannelFormat,
    Identifier,
    InterfaceVersion,
    LidarSensorViewConfiguration,
    PixelOrder,
    SensorViewConfiguration,
    Timestamp,
    Vector3d,
    WavelengthData,
)
from osi_contract.validation import check_grant


F1, F2, F3 = ChannelFormat.RGB_U8_LIN, ChannelFormat.MONO_U8_LIN, ChannelFormat.BAYER_RGGB_U16_LIN


def camera_capability(formats):
    return SimulatorCapability(technologies={"camera": TechnologyCapability(channel_formats=tuple(formats))})


def camera_request(formats):
    return SensorViewConfiguration(
        sensor_id=Identifier(1),
        camera_sensor_view_configuration=(
            CameraSensorViewConfiguration(sensor_id=Identifier(2), channel_format=tuple(formats)),
        ),
    )


def test_channel_format_grants_highest_preference_supported():
    granted = resolve(camera_request([F1, F2, F3]), camera_capability({F2, F3}))
    assert granted.camera_sensor_view_configuration[0].channel_format == (F2,)


def test_channel_format_grants_nothing_without_support():
    result = NegotiationResolver(camera_capability(set())).resolve(camera_request([F1, F2, F3]))
    assert result.granted.camera_sensor_view_configuration[0].channel_format == ()
    assert any("channel formats" in n for n in result.notes)


def test_select_preferred_follows_request_order_not_support_order():
    assert select_preferred([F3, F2], [F2, F3]) == (F3,)
    assert select_preferred([], [F2]) == ()


def test_granted_scalars(request_config, capability):
    result = NegotiationResolver(capability).resolve(request_config)
    granted = result.granted
    assert granted.version == InterfaceVersion.current()
    assert granted.sensor_id == request_config.sensor_id
    assert granted.mounting_position == request_config.mounting_position
    assert granted.mounting_position_rmse == request_config.mounting_position_rmse
    assert granted.field_of_view_horizontal == math.pi
    assert granted.field_of_view_vertical == 0.5
    assert granted.range == 300.0
    assert granted.update_cycle_time == Timestamp.from_seconds(0.020)
    assert granted.update_cycle_offset == Timestamp.from_seconds(0.008)
    # start time comes from the simulator, not the request
    assert granted.simulation_start_time == Timestamp.from_seconds(0.030)
    assert granted.omit_static_information is True
    assert result.first_update == Timestamp.from_seconds(0.048)


def test_granted_technology_records(request_config, capability):
    granted = resolve(request_config, capability)

    (generic,) = granted.generic_sensor_view_configuration
    assert generic == request_config.generic_sensor_view_configuration[0]

    (radar,) = granted.radar_sensor_view_configuration
    assert radar.field_of_view_horizontal == 1.0
    assert (radar.number_of_rays_horizontal, radar.number_of_rays_vertical) == (100, 5)
    assert radar.max_number_of_interactions == 2
    assert radar.emitter_frequency == 77e9
    assert radar.tx_antenna_diagram == ()
    assert radar.mounting_position == request_config.radar_sensor_view_configuration[0].mounting_position

    (lidar,) = granted.lidar_sensor_view_configuration
    assert lidar.num_of_pixels == 3
    assert lidar.directions == request_config.lidar_sensor_view_configuration[0].directions
    assert lidar.timings == (0, 10, 20)

    (camera,) = granted.camera_sensor_view_configuration
    assert camera.channel_format == (ChannelFormat.MONO_U8_LIN,)
    assert (camera.number_of_pixels_horizontal, camera.number_of_pixels_vertical) == (1920, 720)
    assert camera.samples_per_pixel == 2
    assert camera.wavelength_data[0].samples_number == 8
    assert camera.pixel_order == PixelOrder.DEFAULT

    # no ultrasonic capability
    assert granted.ultrasonic_sensor_view_configuration == ()


def test_resolving_a_grant_changes_nothing(request_config, capability):
    granted = resolve(request_config, capability)
    assert resolve(granted, capability) == granted


def test_resolving_a_grant_against_shipped_preset_changes_nothing(request_config):
    preset = load_capability()
    granted = resolve(request_config, preset)
    assert resolve(granted, preset) == granted


def test_absent_request_fields_use_simulator_defaults(capability):
    granted = resolve(SensorViewConfiguration(sensor_id=Identifier(5)), capability)
    assert granted.range == 150.0
    assert granted.update_cycle_time == Timestamp.from_seconds(0.050)
    assert granted.update_cycle_offset is None
    assert granted.omit_static_information is None
    assert granted.field_of_view_horizontal is None


def test_absent_fields_stay_absent_without_defaults():
    granted = resolve(SensorViewConfiguration(), SimulatorCapability())
    assert granted.range is None
    assert granted.update_cycle_time is None
    assert granted.simulation_start_time == Timestamp(seconds=0, nanos=0)


def test_cycle_time_raised_to_minimum_and_aligned(capability):
    fast = resolve(SensorViewConfiguration(update_cycle_time=Timestamp.from_seconds(0.005)), capability)
    assert fast.update_cycle_time == Timestamp.from_seconds(0.010)
    odd = resolve(
        SensorViewConfiguration(
            update_cycle_time=Timestamp.from_seconds(0.0125),
            update_cycle_offset=Timestamp.from_seconds(0.0005),
        ),
        capability,
    )
    assert odd.update_cycle_time == Timestamp.from_seconds(0.013)
    assert odd.update_cycle_offset == Timestamp.from_seconds(0.001)


def test_unsatisfiable_values_are_left_unpopulated(capability):
    request = SensorViewConfiguration(
        range=-1.0,
        update_cycle_time=Timestamp.from_seconds(0.0),
        camera_sensor_view_configuration=(
            CameraSensorViewConfiguration(pixel_order=PixelOrder.LEFT_RIGHT_BOTTOM_TOP),
        ),
    )
    result = NegotiationResolver(capability).resolve(request)
    assert result.granted.range is None
    assert result.granted.update_cycle_time is None
    assert result.granted.camera_sensor_view_configuration[0].pixel_order is None
    assert result.first_update is None
    assert len(result.notes) == 3


def test_static_omission_falls_back_when_unsupported():
    cap = SimulatorCapability(supports_static_omission=False)
    granted = resolve(SensorViewConfiguration(omit_static_information=True), cap)
    assert granted.omit_static_information is False


def test_lidar_arrays_dropped_when_pixel_count_narrowed(capability):
    directions = tuple(Vector3d(1.0, 0.0, 0.0) for _ in range(6))
    request = SensorViewConfiguration(
        lidar_sensor_view_configuration=(
            LidarSensorViewConfiguration(num_of_pixels=6, directions=directions, timings=tuple(range(6))),
        )
    )
    granted = resolve(request, capability)
    (lidar,) = granted.lidar_sensor_view_configuration
    assert lidar.num_of_pixels == 4
    assert lidar.directions == ()
    assert lidar.timings == ()


def test_lidar_arrays_without_pixel_count_are_not_granted(capability):
    request = SensorViewConfiguration(
        lidar_sensor_view_configuration=(LidarSensorViewConfiguration(timings=(1, 2)),)
    )
    (lidar,) = resolve(request, capability).lidar_sensor_view_configuration
    assert lidar.num_of_pixels is None
    assert lidar.timings == ()


def test_emitter_frequency_clamped_into_band(request_config, capability):
    radar = replace(request_config.radar_sensor_view_configuration[0], emitter_frequency=24e9)
    request = replace(request_config, radar_sensor_view_configuration=(radar,))
    (granted,) = resolve(request, capability).radar_sensor_view_configuration
    assert granted.emitter_frequency == 76e9


def test_request_is_not_mutated(request_config, capability):
    before = replace(request_config)
    resolve(request_config, capability)
    assert request_config == before


def test_version_mismatch_is_noted_not_raised(capability):
    request = SensorViewConfiguration(version=InterfaceVersion(2, 0, 0))
    result = NegotiationResolver(capability).resolve(request)
    assert result.granted.version == InterfaceVersion.current()
    assert any("version" in n for n in result.notes)


def test_verbose_prints_notes(capability, capsys):
    NegotiationResolver(capability, verbose=True).resolve(SensorViewConfiguration(range=1000.0))
    assert "[NegotiationResolver] range limited to 300.0 m" in capsys.readouterr().out


def test_technology_records_follow_collection_order(request_config, capability):
    granted = resolve(request_config, capability)
    assert [t for t, _ in granted.technology_records()] == ["generic", "radar", "lidar", "camera"]
    assert len(list(request_config.technology_records())) == 5


def test_zero_sample_counts_are_raised_to_one(capability):
    request = SensorViewConfiguration(
        camera_sensor_view_configuration=(
            CameraSensorViewConfiguration(
                samples_per_pixel=0,
                wavelength_data=(WavelengthData(start=4e-7, end=7e-7, samples_number=0),),
            ),
        )
    )
    result = NegotiationResolver(capability).resolve(request)
    (camera,) = result.granted.camera_sensor_view_configuration
    assert camera.samples_per_pixel == 1
    assert camera.wavelength_data[0].samples_number == 1
    assert any("wavelength" in n for n in result.notes)
    assert not [i for i in check_grant(request, result.granted) if i.severity == "error"]


def test_whole_second_timestamps_without_nanos_are_not_noted(capability):
    request = SensorViewConfiguration(update_cycle_time=Timestamp(seconds=1), update_cycle_offset=Timestamp(seconds=1))
    result = NegotiationResolver(capability).resolve(request)
    assert result.notes == []
    assert result.granted.update_cycle_time == Timestamp(seconds=1)
    assert result.first_update.total_nanos == 1_000_000_000
