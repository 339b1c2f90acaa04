from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from osi_contract.negotiation.capability import SimulatorCapability, TechnologyCapability
from osi_contract.negotiation.timing import align_up, first_update_time
from osi_contract.schemas.common import Timestamp
from osi_contract.schemas.sensor_view_configuration import (
    TECHNOLOGY_FIELDS,
    CameraSensorViewConfiguration,
    ChannelFormat,
    GenericSensorViewConfiguration,
    LidarSensorViewConfiguration,
    RadarSensorViewConfiguration,
    SensorViewConfiguration,
    UltrasonicSensorViewConfiguration,
)

R = TypeVar("R")
F = TypeVar("F")


def select_preferred(requested: Sequence[F], supported: Sequence[F]) -> Tuple[F, ...]:
    """First requested entry the simulator supports, as a one-element tuple, else ()."""
    available = set(supported)
    for candidate in requested:
        if candidate in available:
            return (candidate,)
    return ()


def _at_most(value: Optional[float], limit: Optional[float]) -> Optional[float]:
    if value is None or limit is None:
        return value
    return min(value, limit)


def _count(value: Optional[int], limit: Optional[int]) -> Optional[int]:
    """Counts have a lower bound of 1; a limit below 1 means nothing can be offered."""
    if value is None:
        return None
    if limit is not None and limit < 1:
        return None
    return max(1, min(value, limit) if limit is not None else value)


@dataclass
class NegotiationResult:
    granted: SensorViewConfiguration
    notes: List[str] = field(default_factory=list)

    @property
    def first_update(self) -> Optional[Timestamp]:
        g = self.granted
        return first_update_time(g.update_cycle_time, g.update_cycle_offset, g.simulation_start_time)


class NegotiationResolver:
    """Turns a requested SensorViewConfiguration into the granted one.

    Never raises for unsatisfiable requests: whatever cannot be offered is left
    unpopulated (or empty for repeated fields) and described in the notes.
    """

    def __init__(self, capability: SimulatorCapability, verbose: bool = False):
        self.capability = capability
        self.verbose = verbose
        self._resolvers: Dict[str, Callable] = {
            "generic": self._resolve_generic,
            "radar": self._resolve_radar,
            "lidar": self._resolve_lidar,
            "camera": self._resolve_camera,
            "ultrasonic": self._resolve_ultrasonic,
        }

    def _note(self, notes: List[str], msg: str) -> None:
        notes.append(msg)
        if self.verbose:
            print(f"[NegotiationResolver] {msg}")

    def resolve(self, request: SensorViewConfiguration) -> NegotiationResult:
        cap = self.capability
        notes: List[str] = []

        if request.version is not None and not cap.version.is_compatible_with(request.version):
            self._note(notes, f"request interface version {request.version} differs from simulator {cap.version}")

        fov_h = _at_most(request.field_of_view_horizontal, cap.max_field_of_view_horizontal)
        fov_v = _at_most(request.field_of_view_vertical, cap.max_field_of_view_vertical)
        if fov_h != request.field_of_view_horizontal or fov_v != request.field_of_view_vertical:
            self._note(notes, f"field of view narrowed to ({fov_h}, {fov_v})")

        granted_range = self._resolve_range(request.range, notes)
        cycle_time = self._resolve_cycle_time(request.update_cycle_time, notes)
        cycle_offset = request.update_cycle_offset
        if cycle_offset is not None:
            cycle_offset = align_up(cycle_offset, cap.simulation_step)
            if cycle_offset.total_nanos == request.update_cycle_offset.total_nanos:
                cycle_offset = request.update_cycle_offset
            else:
                self._note(notes, f"update cycle offset aligned to {cycle_offset.to_seconds()}s")

        omit_static = request.omit_static_information
        if omit_static and not cap.supports_static_omission:
            omit_static = False
            self._note(notes, "static information will be retransmitted every cycle")

        collections = {}
        for technology, attr in TECHNOLOGY_FIELDS.items():
            records = getattr(request, attr)
            tech_cap = cap.technology(technology)
            if records and tech_cap is None:
                self._note(notes, f"{technology} input not supported, {len(records)} record(s) dropped")
                collections[attr] = ()
                continue
            resolve_one = self._resolvers[technology]
            collections[attr] = tuple(resolve_one(r, tech_cap, notes) for r in records)

        granted = replace(
            request,
            version=cap.version,
            field_of_view_horizontal=fov_h,
            field_of_view_vertical=fov_v,
            range=granted_range,
            update_cycle_time=cycle_time,
            update_cycle_offset=cycle_offset,
            simulation_start_time=cap.simulation_start_time,
            omit_static_information=omit_static,
            **collections,
        )
        return NegotiationResult(granted=granted, notes=notes)

    def _resolve_range(self, requested: Optional[float], notes: List[str]) -> Optional[float]:
        cap = self.capability
        if requested is None:
            return _at_most(cap.default_range, cap.max_range)
        if requested < 0:
            self._note(notes, f"range {requested} cannot be provided")
            return None
        granted = _at_most(requested, cap.max_range)
        if granted != requested:
            self._note(notes, f"range limited to {granted} m")
        return granted

    def _resolve_cycle_time(self, requested: Optional[Timestamp], notes: List[str]) -> Optional[Timestamp]:
        cap = self.capability
        cycle = requested if requested is not None else cap.default_update_cycle_time
        if cycle is None:
            return None
        if cycle.total_nanos <= 0:
            self._note(notes, "update cycle time must be positive, none granted")
            return None
        if cap.min_update_cycle_time is not None and cycle.total_nanos < cap.min_update_cycle_time.total_nanos:
            cycle = cap.min_update_cycle_time
        cycle = align_up(cycle, cap.simulation_step)
        if requested is not None and cycle.total_nanos == requested.total_nanos:
            return requested
        if requested is not None:
            self._note(notes, f"update cycle time set to {cycle.to_seconds()}s")
        return cycle

    def _common(self, record: R, tech: TechnologyCapability, notes: List[str]) -> R:
        fov_h = _at_most(record.field_of_view_horizontal, tech.max_field_of_view_horizontal)
        fov_v = _at_most(record.field_of_view_vertical, tech.max_field_of_view_vertical)
        if fov_h != record.field_of_view_horizontal or fov_v != record.field_of_view_vertical:
            self._note(notes, f"{self._label(record)}: field of view narrowed to ({fov_h}, {fov_v})")
        return replace(record, field_of_view_horizontal=fov_h, field_of_view_vertical=fov_v)

    @staticmethod
    def _label(record) -> str:
        sid = record.sensor_id.value if record.sensor_id is not None else "?"
        return f"{type(record).__name__}[{sid}]"

    def _emitter_frequency(self, record, tech: TechnologyCapability, notes: List[str]) -> Optional[float]:
        freq = record.emitter_frequency
        if freq is None:
            return None
        if freq < 0:
            self._note(notes, f"{self._label(record)}: emitter frequency {freq} cannot be provided")
            return None
        if tech.emitter_frequency_range is None:
            return freq
        lo, hi = tech.emitter_frequency_range
        granted = min(max(freq, lo), hi)
        if granted != freq:
            self._note(notes, f"{self._label(record)}: emitter frequency set to {granted} Hz")
        return granted

    def _rays(self, record: R, tech: TechnologyCapability, notes: List[str]) -> R:
        granted = replace(
            record,
            number_of_rays_horizontal=_count(record.number_of_rays_horizontal, tech.max_number_of_rays_horizontal),
            number_of_rays_vertical=_count(record.number_of_rays_vertical, tech.max_number_of_rays_vertical),
            max_number_of_interactions=_count(record.max_number_of_interactions, tech.max_number_of_interactions),
            emitter_frequency=self._emitter_frequency(record, tech, notes),
        )
        if (
            granted.number_of_rays_horizontal != record.number_of_rays_horizontal
            or granted.number_of_rays_vertical != record.number_of_rays_vertical
            or granted.max_number_of_interactions != record.max_number_of_interactions
        ):
            self._note(
                notes,
                f"{self._label(record)}: rays=({granted.number_of_rays_horizontal}, "
                f"{granted.number_of_rays_vertical}) interactions={granted.max_number_of_interactions}",
            )
        return granted

    def _resolve_generic(self, record: GenericSensorViewConfiguration, tech, notes):
        return self._common(record, tech, notes)

    def _resolve_ultrasonic(self, record: UltrasonicSensorViewConfiguration, tech, notes):
        return self._common(record, tech, notes)

    def _resolve_radar(self, record: RadarSensorViewConfiguration, tech: TechnologyCapability, notes):
        granted = self._rays(self._common(record, tech, notes), tech, notes)
        if not tech.supports_antenna_diagram and (record.tx_antenna_diagram or record.rx_antenna_diagram):
            self._note(notes, f"{self._label(record)}: antenna diagrams not supported")
            granted = replace(granted, tx_antenna_diagram=(), rx_antenna_diagram=())
        return granted

    def _resolve_lidar(self, record: LidarSensorViewConfiguration, tech: TechnologyCapability, notes):
        granted = self._rays(self._common(record, tech, notes), tech, notes)
        pixels = _count(record.num_of_pixels, tech.max_num_of_pixels)
        if pixels != record.num_of_pixels:
            self._note(notes, f"{self._label(record)}: num_of_pixels set to {pixels}")
        directions, timings = record.directions, record.timings
        if directions or timings:
            if not tech.supports_ray_directions:
                self._note(notes, f"{self._label(record)}: per-pixel ray directions not supported")
                directions, timings = (), ()
            else:
                if directions and len(directions) != pixels:
                    self._note(notes, f"{self._label(record)}: {len(directions)} directions do not match {pixels} pixels")
                    directions = ()
                if timings and len(timings) != pixels:
                    self._note(notes, f"{self._label(record)}: {len(timings)} timings do not match {pixels} pixels")
                    timings = ()
        return replace(granted, num_of_pixels=pixels, directions=directions, timings=timings)

    def _resolve_camera(self, record: CameraSensorViewConfiguration, tech: TechnologyCapability, notes):
        granted = self._common(record, tech, notes)
        label = self._label(record)
        formats: Tuple[ChannelFormat, ...] = select_preferred(record.channel_format, tech.channel_formats)
        if record.channel_format and not formats:
            self._note(notes, f"{label}: none of the requested channel formats can be provided")
        pixel_order = record.pixel_order
        if pixel_order is not None and pixel_order not in tech.pixel_orders:
            self._note(notes, f"{label}: pixel order {pixel_order.name} not supported")
            pixel_order = None
        wavelengths = record.wavelength_data
        if wavelengths and not tech.supports_spectral:
            self._note(notes, f"{label}: spectral sampling not supported")
            wavelengths = ()
        elif wavelengths:
            clamped = tuple(
                replace(w, samples_number=_count(w.samples_number, tech.max_wavelength_samples)) for w in wavelengths
            )
            if clamped != wavelengths:
                self._note(notes, f"{label}: wavelength sample counts adjusted")
            wavelengths = clamped
        granted = replace(
            granted,
            number_of_pixels_horizontal=_count(record.number_of_pixels_horizontal, tech.max_number_of_pixels_horizontal),
            number_of_pixels_vertical=_count(record.number_of_pixels_vertical, tech.max_number_of_pixels_vertical),
            channel_format=formats,
            samples_per_pixel=_count(record.samples_per_pixel, tech.max_samples_per_pixel),
            max_number_of_interactions=_count(record.max_number_of_interactions, tech.max_number_of_interactions),
            wavelength_data=wavelengths,
            pixel_order=pixel_order,
        )
        if (granted.number_of_pixels_horizontal, granted.number_of_pixels_vertical) != (
            record.number_of_pixels_horizontal,
            record.number_of_pixels_vertical,
        ):
            self._note(
                notes,
                f"{label}: resolution set to {granted.number_of_pixels_horizontal}x{granted.number_of_pixels_vertical}",
            )
        return granted


def resolve(request: SensorViewConfiguration, capability: SimulatorCapability, verbose: bool = False) -> SensorViewConfiguration:
    return NegotiationResolver(capability, verbose=verbose).resolve(request).granted
