from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from osi_contract.codec import parse_enum
from osi_contract.schemas.common import InterfaceVersion, Timestamp
from osi_contract.schemas.sensor_view_configuration import TECHNOLOGY_FIELDS, ChannelFormat, PixelOrder


def _timestamp(raw) -> Optional[Timestamp]:
    if raw is None:
        return None
    if isinstance(raw, dict):
        return Timestamp(seconds=int(raw.get("seconds", 0)), nanos=int(raw.get("nanos", 0)))
    return Timestamp.from_seconds(float(raw))


def _opt(raw, cast):
    return None if raw is None else cast(raw)


@dataclass
class TechnologyCapability:
    """What the simulator can render/ray-trace for one sensor technology.

    A limit left as None is unlimited.
    """

    max_field_of_view_horizontal: Optional[float] = None
    max_field_of_view_vertical: Optional[float] = None
    max_number_of_rays_horizontal: Optional[int] = None
    max_number_of_rays_vertical: Optional[int] = None
    max_number_of_interactions: Optional[int] = None
    emitter_frequency_range: Optional[Tuple[float, float]] = None  # Hz
    supports_antenna_diagram: bool = False
    max_num_of_pixels: Optional[int] = None
    supports_ray_directions: bool = True
    max_number_of_pixels_horizontal: Optional[int] = None
    max_number_of_pixels_vertical: Optional[int] = None
    max_samples_per_pixel: Optional[int] = None
    channel_formats: Tuple[ChannelFormat, ...] = ()
    pixel_orders: Tuple[PixelOrder, ...] = (PixelOrder.DEFAULT,)
    supports_spectral: bool = False
    max_wavelength_samples: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TechnologyCapability":
        data = data or {}
        freq = data.get("emitter_frequency_range")
        if freq is not None:
            lo, hi = (float(v) for v in freq)
            freq = (min(lo, hi), max(lo, hi))
        kwargs: Dict[str, Any] = {
            "max_field_of_view_horizontal": _opt(data.get("max_field_of_view_horizontal"), float),
            "max_field_of_view_vertical": _opt(data.get("max_field_of_view_vertical"), float),
            "max_number_of_rays_horizontal": _opt(data.get("max_number_of_rays_horizontal"), int),
            "max_number_of_rays_vertical": _opt(data.get("max_number_of_rays_vertical"), int),
            "max_number_of_interactions": _opt(data.get("max_number_of_interactions"), int),
            "emitter_frequency_range": freq,
            "supports_antenna_diagram": bool(data.get("supports_antenna_diagram", False)),
            "max_num_of_pixels": _opt(data.get("max_num_of_pixels"), int),
            "supports_ray_directions": bool(data.get("supports_ray_directions", True)),
            "max_number_of_pixels_horizontal": _opt(data.get("max_number_of_pixels_horizontal"), int),
            "max_number_of_pixels_vertical": _opt(data.get("max_number_of_pixels_vertical"), int),
            "max_samples_per_pixel": _opt(data.get("max_samples_per_pixel"), int),
            "channel_formats": tuple(parse_enum(ChannelFormat, v) for v in data.get("channel_formats") or ()),
            "supports_spectral": bool(data.get("supports_spectral", False)),
            "max_wavelength_samples": _opt(data.get("max_wavelength_samples"), float),
        }
        if "pixel_orders" in data:
            kwargs["pixel_orders"] = tuple(parse_enum(PixelOrder, v) for v in data.get("pixel_orders") or ())
        return cls(**kwargs)


@dataclass
class SimulatorCapability:
    """Everything the environment simulator is able to provide to a sensor model."""

    version: InterfaceVersion = field(default_factory=InterfaceVersion.current)
    simulation_start_time: Timestamp = field(default_factory=lambda: Timestamp(seconds=0, nanos=0))
    simulation_step: Optional[Timestamp] = None
    min_update_cycle_time: Optional[Timestamp] = None
    default_update_cycle_time: Optional[Timestamp] = None
    max_range: Optional[float] = None
    default_range: Optional[float] = None
    max_field_of_view_horizontal: Optional[float] = None
    max_field_of_view_vertical: Optional[float] = None
    supports_static_omission: bool = True
    technologies: Dict[str, TechnologyCapability] = field(default_factory=dict)

    def technology(self, name: str) -> Optional[TechnologyCapability]:
        return self.technologies.get(name)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulatorCapability":
        data = data or {}
        technologies: Dict[str, TechnologyCapability] = {}
        for name, tech in (data.get("technologies") or {}).items():
            if name not in TECHNOLOGY_FIELDS:
                warnings.warn(f"[SimulatorCapability] Unknown technology: {name}")
                continue
            technologies[name] = TechnologyCapability.from_dict(tech)
        cap = cls(
            simulation_step=_timestamp(data.get("simulation_step")),
            min_update_cycle_time=_timestamp(data.get("min_update_cycle_time")),
            default_update_cycle_time=_timestamp(data.get("default_update_cycle_time")),
            max_range=_opt(data.get("max_range"), float),
            default_range=_opt(data.get("default_range"), float),
            max_field_of_view_horizontal=_opt(data.get("max_field_of_view_horizontal"), float),
            max_field_of_view_vertical=_opt(data.get("max_field_of_view_vertical"), float),
            supports_static_omission=bool(data.get("supports_static_omission", True)),
            technologies=technologies,
        )
        if data.get("simulation_start_time") is not None:
            cap.simulation_start_time = _timestamp(data["simulation_start_time"])
        version = data.get("version")
        if isinstance(version, str):
            parts = [int(p) for p in version.split(".")] + [0, 0, 0]
            cap.version = InterfaceVersion(*parts[:3])
        elif isinstance(version, dict):
            cap.version = InterfaceVersion(
                version_major=version.get("version_major"),
                version_minor=version.get("version_minor"),
                version_patch=version.get("version_patch"),
            )
        return cap
