"""Point-to-plane correspondences from surfel associations and their spread."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

import numpy as np


def _vector(values: Sequence[float], size: int, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float).reshape(-1)
    if arr.shape != (size,):
        raise ValueError(f"{name} must have {size} values, got {arr.size}")
    return arr


@dataclass
class SurfelPoint:
    """A LiDAR point associated with a surfel plane.

    ``point`` is the measured xyz in the LiDAR frame and ``point_raw``
    holds ``(ring, horizon angle, depth)``.
    """

    timestamp: float
    point: np.ndarray
    point_raw: np.ndarray
    plane_id: int

    def __post_init__(self) -> None:
        self.point = _vector(self.point, 3, "point")
        self.point_raw = _vector(self.point_raw, 3, "point_raw")
        self.plane_id = int(self.plane_id)


@dataclass
class PointCorrespondence:
    """A point measured at ``t_point`` lying on a plane of the map built at ``t_map``.

    ``geo_plane`` is ``(nx, ny, nz, d)`` with the plane ``n . p + d = 0``.
    """

    t_map: float
    t_point: float
    point: np.ndarray
    point_raw: np.ndarray
    geo_plane: np.ndarray
    geo_type: str = field(default="plane")

    def __post_init__(self) -> None:
        self.point = _vector(self.point, 3, "point")
        self.point_raw = _vector(self.point_raw, 3, "point_raw")
        self.geo_plane = _vector(self.geo_plane, 4, "geo_plane")

    @property
    def normal(self) -> np.ndarray:
        """Normal part of the plane."""
        return self.geo_plane[:3].copy()


def collect_correspondences(
    surfel_points: Iterable[SurfelPoint],
    plane_coefficients: Sequence[Sequence[float]],
    map_time: float,
    selected_time: tuple[float, float],
) -> tuple[list[PointCorrespondence], tuple[float, float]]:
    """Plane correspondences of the surfel points timed in ``[start, end)``.

    Returns the correspondences and the span ``(earliest, latest)`` of their
    times.  With no point selected the span is ``(end, start)``.
    """
    start, end = selected_time
    valid_min, valid_max = end, start
    correspondences: list[PointCorrespondence] = []
    count = len(plane_coefficients)
    for sp in surfel_points:
        if sp.timestamp < start or sp.timestamp >= end:
            continue
        if not 0 <= sp.plane_id < count:
            raise IndexError(f"plane id {sp.plane_id} outside 0..{count - 1}")
        pc = PointCorrespondence(
            t_map=map_time,
            t_point=sp.timestamp,
            point=sp.point,
            point_raw=sp.point_raw,
            geo_plane=plane_coefficients[sp.plane_id],
        )
        correspondences.append(pc)
        valid_min = min(valid_min, pc.t_point)
        valid_max = max(valid_max, pc.t_point)
    return correspondences, (valid_min, valid_max)


def lidar_cov(correspondences: Sequence[PointCorrespondence]) -> np.ndarray:
    """Singular values, largest first, of the mean outer product of plane normals.

    An empty input gives zeros.
    """
    if not correspondences:
        return np.zeros(3)
    normals = np.array([pc.geo_plane[:3] for pc in correspondences])
    nnt = normals.T @ normals / len(correspondences)
    return np.linalg.svd(nnt, compute_uv=False)