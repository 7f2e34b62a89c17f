"""Rotation, quaternion and angle helpers built on numpy.

Quaternions are arrays in ``(x, y, z, w)`` order.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

_I3 = np.eye(3)


def rad_to_deg(rad: float) -> float:
    """Convert radians to degrees."""
    return rad * 180.0 / math.pi


def deg_to_rad(deg: float) -> float:
    """Convert degrees to radians."""
    return deg / 180.0 * math.pi


def normalize_rad(rad: float) -> float:
    """Wrap an angle in radians into ``[-pi, pi)``."""
    rad = math.fmod(rad + math.pi, 2 * math.pi)
    if rad < 0:
        rad += 2 * math.pi
    return rad - math.pi


def normalize_deg(deg: float) -> float:
    """Wrap an angle in degrees into ``[-180, 180)``."""
    deg = math.fmod(deg + 180.0, 360.0)
    if deg < 0:
        deg += 360.0
    return deg - 180.0


def rad_lt(a: float, b: float) -> bool:
    """True if angle ``a`` lies before ``b`` on the shortest arc."""
    return normalize_rad(a - b) < 0


def rad_gt(a: float, b: float) -> bool:
    """True if angle ``a`` lies after ``b`` on the shortest arc."""
    return normalize_rad(a - b) > 0


def scale_point(p: Sequence[float], scale: float) -> np.ndarray:
    """Return a copy of ``p`` with its x, y and z scaled; extra fields are kept."""
    out = np.array(p, dtype=float)
    out[:3] *= scale
    return out


def calc_squared_diff(a: Sequence[float], b: Sequence[float], wb: float = 1.0) -> float:
    """Squared distance between ``a`` and ``b * wb`` over x, y and z."""
    diff = np.asarray(a, dtype=float)[:3] - np.asarray(b, dtype=float)[:3] * wb
    return float(diff @ diff)


def calc_point_distance(p: Sequence[float]) -> float:
    """Euclidean norm of the point's x, y and z."""
    return math.sqrt(calc_squared_point_distance(p))


def calc_squared_point_distance(p: Sequence[float]) -> float:
    """Squared Euclidean norm of the point's x, y and z."""
    xyz = np.asarray(p, dtype=float)[:3]
    return float(xyz @ xyz)


def delta_q(theta: Sequence[float]) -> np.ndarray:
    """Small-angle quaternion (not normalised) for a rotation vector."""
    half = np.asarray(theta, dtype=float) / 2.0
    return np.array([half[0], half[1], half[2], 1.0])


def skew_symmetric(v: Sequence[float]) -> np.ndarray:
    """Cross-product matrix of a 3-vector."""
    x, y, z = (float(c) for c in v)
    return np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])


def _quat_matrix(q: Sequence[float], sign: float) -> np.ndarray:
    q = np.asarray(q, dtype=float)
    vec, w = q[:3], q[3]
    m = np.empty((4, 4))
    m[:3, :3] = w * _I3 + sign * skew_symmetric(vec)
    m[3, :3] = -vec
    m[:3, 3] = vec
    m[3, 3] = w
    return m


def left_quat_matrix(q: Sequence[float]) -> np.ndarray:
    """Matrix ``L(q)`` such that ``q * p == L(q) @ p``."""
    return _quat_matrix(q, 1.0)


def right_quat_matrix(p: Sequence[float]) -> np.ndarray:
    """Matrix ``R(p)`` such that ``q * p == R(p) @ q``."""
    return _quat_matrix(p, -1.0)


def r2ypr(rotation: np.ndarray) -> np.ndarray:
    """Yaw, pitch and roll in degrees of a rotation matrix."""
    r = np.asarray(rotation, dtype=float)
    n, o, a = r[:, 0], r[:, 1], r[:, 2]
    y = math.atan2(n[1], n[0])
    p = math.atan2(-n[2], n[0] * math.cos(y) + n[1] * math.sin(y))
    roll = math.atan2(
        a[0] * math.sin(y) - a[1] * math.cos(y),
        -o[0] * math.sin(y) + o[1] * math.cos(y),
    )
    return np.array([y, p, roll]) / math.pi * 180.0


def ypr2r(ypr: Sequence[float]) -> np.ndarray:
    """Rotation matrix ``Rz(yaw) @ Ry(pitch) @ Rx(roll)`` from degrees."""
    y, p, r = (deg_to_rad(float(c)) for c in ypr)
    rz = np.array([[math.cos(y), -math.sin(y), 0.0], [math.sin(y), math.cos(y), 0.0], [0.0, 0.0, 1.0]])
    ry = np.array([[math.cos(p), 0.0, math.sin(p)], [0.0, 1.0, 0.0], [-math.sin(p), 0.0, math.cos(p)]])
    rx = np.array([[1.0, 0.0, 0.0], [0.0, math.cos(r), -math.sin(r)], [0.0, math.sin(r), math.cos(r)]])
    return rz @ ry @ rx


def quaternion_from_matrix(rotation: np.ndarray) -> np.ndarray:
    """Quaternion ``(x, y, z, w)`` of a rotation matrix."""
    m = np.asarray(rotation, dtype=float)
    q = np.zeros(4)
    trace = m[0, 0] + m[1, 1] + m[2, 2]
    if trace > 0:
        t = math.sqrt(trace + 1.0)
        q[3] = 0.5 * t
        t = 0.5 / t
        q[0] = (m[2, 1] - m[1, 2]) * t
        q[1] = (m[0, 2] - m[2, 0]) * t
        q[2] = (m[1, 0] - m[0, 1]) * t
        return q
    i = 0
    if m[1, 1] > m[0, 0]:
        i = 1
    if m[2, 2] > m[i, i]:
        i = 2
    j = (i + 1) % 3
    k = (j + 1) % 3
    t = math.sqrt(m[i, i] - m[j, j] - m[k, k] + 1.0)
    q[i] = 0.5 * t
    t = 0.5 / t
    q[3] = (m[k, j] - m[j, k]) * t
    q[j] = (m[j, i] + m[i, j]) * t
    q[k] = (m[k, i] + m[i, k]) * t
    return q


def g2r(gravity: Sequence[float]) -> np.ndarray:
    """Unit quaternion whose z axis points against ``gravity``."""
    g = np.asarray(gravity, dtype=float)
    z_axis = -g / np.linalg.norm(g)
    e_1 = np.array([1.0, 0.0, 0.0])
    x_axis = e_1 - z_axis * (z_axis @ e_1)
    x_axis = x_axis / np.linalg.norm(x_axis)
    y_axis = skew_symmetric(z_axis) @ x_axis
    ro = np.column_stack([x_axis, y_axis, z_axis])
    q = quaternion_from_matrix(ro)
    return q / np.linalg.norm(q)


def rotation_matrix(angle: float, axis: Sequence[float]) -> np.ndarray:
    """Rotation of ``angle`` radians about ``axis`` (Rodrigues' formula)."""
    u = np.asarray(axis, dtype=float)
    u = u / np.linalg.norm(u)
    c, s = math.cos(angle), math.sin(angle)
    return c * _I3 + (1 - c) * np.outer(u, u) + s * skew_symmetric(u)


def rotation_from_two_vectors(from_vector: Sequence[float], to_vector: Sequence[float]) -> np.ndarray:
    """Rotation that turns the direction of ``from_vector`` into ``to_vector``."""
    a = np.asarray(from_vector, dtype=float)
    b = np.asarray(to_vector, dtype=float)
    axis = np.cross(a, b)
    if np.linalg.norm(axis) == 0.0:
        raise ValueError("vectors are parallel; rotation axis is undefined")
    cos_angle = float(np.clip(a @ b / np.linalg.norm(a) / np.linalg.norm(b), -1.0, 1.0))
    return rotation_matrix(math.acos(cos_angle), axis)


def calculate_angle(v1: Sequence[float], v2: Sequence[float]) -> float:
    """Angle between two vectors in degrees."""
    a = np.asarray(v1, dtype=float)
    b = np.asarray(v2, dtype=float)
    cos_angle = float(np.clip(a @ b / (np.linalg.norm(a) * np.linalg.norm(b)), -1.0, 1.0))
    return math.acos(cos_angle) / math.pi * 180.0


def sort_descending(vec: Sequence[float]) -> tuple[np.ndarray, np.ndarray]:
    """Sort values from large to small; return them and their original indices."""
    values = np.asarray(vec, dtype=float)
    indices = np.argsort(-values, kind="stable")
    return values[indices], indices