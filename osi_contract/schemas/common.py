from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

NANOS_PER_SECOND = 1_000_000_000

# Identifier value meaning "no associated object".
NO_OBJECT_ID_VALUE = 2**64 - 1


def tag(number: int, default=None):
    """Dataclass field carrying its stable wire tag."""
    return field(default=default, metadata={"tag": number})


@dataclass(frozen=True)
class Identifier:
    value: Optional[int] = tag(1)


NO_OBJECT_ID = Identifier(NO_OBJECT_ID_VALUE)


@dataclass(frozen=True)
class Timestamp:
    """Point in time or duration as whole seconds plus nanoseconds.

    nanos stays in [0, 999999999]; negative times carry the sign in seconds.
    """

    seconds: Optional[int] = tag(1)
    nanos: Optional[int] = tag(2)

    @classmethod
    def from_nanos(cls, total: int) -> "Timestamp":
        seconds, nanos = divmod(int(total), NANOS_PER_SECOND)
        return cls(seconds=seconds, nanos=nanos)

    @classmethod
    def from_seconds(cls, value: float) -> "Timestamp":
        return cls.from_nanos(round(float(value) * NANOS_PER_SECOND))

    @property
    def total_nanos(self) -> int:
        return (self.seconds or 0) * NANOS_PER_SECOND + (self.nanos or 0)

    def to_seconds(self) -> float:
        return self.total_nanos / NANOS_PER_SECOND


@dataclass(frozen=True)
class Vector3d:
    x: Optional[float] = tag(1)
    y: Optional[float] = tag(2)
    z: Optional[float] = tag(3)


@dataclass(frozen=True)
class Orientation3d:
    roll: Optional[float] = tag(1)  # rad
    pitch: Optional[float] = tag(2)  # rad
    yaw: Optional[float] = tag(3)  # rad


@dataclass(frozen=True)
class MountingPosition:
    """Sensor frame relative to the parent frame (x forward, z up)."""

    position: Optional[Vector3d] = tag(1)
    orientation: Optional[Orientation3d] = tag(2)


@dataclass(frozen=True)
class WavelengthData:
    start: Optional[float] = tag(1)  # m
    end: Optional[float] = tag(2)  # m
    samples_number: Optional[float] = tag(3)


@dataclass(frozen=True)
class InterfaceVersion:
    version_major: Optional[int] = tag(1)
    version_minor: Optional[int] = tag(2)
    version_patch: Optional[int] = tag(3)

    @classmethod
    def current(cls) -> "InterfaceVersion":
        return cls(version_major=3, version_minor=7, version_patch=0)

    def is_compatible_with(self, other: Optional["InterfaceVersion"]) -> bool:
        if other is None or self.version_major is None or other.version_major is None:
            return False
        return self.version_major == other.version_major

    def __str__(self) -> str:
        return f"{self.version_major or 0}.{self.version_minor or 0}.{self.version_patch or 0}"
