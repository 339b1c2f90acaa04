from __future__ import annotations

import math
from typing import Optional, Sequence, Union

import numpy as np

from osi_contract.schemas.common import MountingPosition, Vector3d

PointLike = Union[Vector3d, Sequence[float], np.ndarray]


def _xyz(point: PointLike) -> np.ndarray:
    if isinstance(point, Vector3d):
        return np.array([point.x or 0.0, point.y or 0.0, point.z or 0.0], dtype=float)
    return np.asarray(point, dtype=float).reshape(3)


def rotation_matrix(roll: float, pitch: float, yaw: float) -> np.ndarray:
    """R = Rz(yaw) @ Ry(pitch) @ Rx(roll); angles in radians."""
    cr, sr = math.cos(roll), math.sin(roll)
    cp, sp = math.cos(pitch), math.sin(pitch)
    cy, sy = math.cos(yaw), math.sin(yaw)
    return np.array(
        [
            [cy * cp, cy * sp * sr - sy * cr, cy * sp * cr + sy * sr],
            [sy * cp, sy * sp * sr + cy * cr, sy * sp * cr - cy * sr],
            [-sp, cp * sr, cp * cr],
        ]
    )


def mounting_matrix(mounting: Optional[MountingPosition]) -> np.ndarray:
    """4x4 homogeneous transform from the sensor frame to its parent frame.

    Only the nominal position is used; RMSE values live in a separate field.
    """
    T = np.eye(4)
    if mounting is None:
        return T
    if mounting.orientation is not None:
        o = mounting.orientation
        T[:3, :3] = rotation_matrix(o.roll or 0.0, o.pitch or 0.0, o.yaw or 0.0)
    if mounting.position is not None:
        T[:3, 3] = _xyz(mounting.position)
    return T


def sensor_to_vehicle(mounting: Optional[MountingPosition], point: PointLike) -> np.ndarray:
    p = np.append(_xyz(point), 1.0)
    return (mounting_matrix(mounting) @ p)[:3]


def vehicle_to_sensor(mounting: Optional[MountingPosition], point: PointLike) -> np.ndarray:
    p = np.append(_xyz(point), 1.0)
    return (np.linalg.inv(mounting_matrix(mounting)) @ p)[:3]


def in_field_of_view(
    point: PointLike,
    field_of_view_horizontal: Optional[float] = None,
    field_of_view_vertical: Optional[float] = None,
    max_range: Optional[float] = None,
) -> bool:
    """Whether a sensor-frame point lies in the symmetric cones [-fov/2, fov/2].

    An unspecified limit does not restrict.
    """
    x, y, z = _xyz(point)
    dist = math.sqrt(x * x + y * y + z * z)
    if max_range is not None and dist > max_range:
        return False
    azimuth = math.atan2(y, x)
    elevation = math.atan2(z, math.hypot(x, y))
    if field_of_view_horizontal is not None and abs(azimuth) > field_of_view_horizontal / 2.0:
        return False
    if field_of_view_vertical is not None and abs(elevation) > field_of_view_vertical / 2.0:
        return False
    return True
