"""Organising raw Velodyne point clouds into a ring-by-firing grid."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

logger = logging.getLogger(__name__)

RAD2DEG = 180.0 / math.pi
LIDAR_FOV_DOWN = -15.0
LIDAR_FOV_RESOLUTION = 2.0
MAX_DEPTH = 40.0
SCAN_PERIOD = 0.1


class VelodyneType(IntEnum):
    """Supported Velodyne models."""

    VLP16 = 0
    VLP32E = 1
    VLS128 = 2
    HDL_32E = 3


_LAYOUT = {
    VelodyneType.VLP16: (16, 1824),
    VelodyneType.VLP32E: (32, 2170),
    VelodyneType.VLS128: (128, 384),
    VelodyneType.HDL_32E: (32, 704),
}

# channel -> laser id for the VLP-32E
_VLP32E_LASER_ID = {
    **{channel: index for index, channel in enumerate(range(31, 0, -2))},
    **{channel: 16 + index for index, channel in enumerate(range(30, -1, -2))},
}


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def clockwise_angle(before_angle: float, after_angle: float) -> float:
    """Clockwise rotation in degrees from ``before_angle`` to ``after_angle``."""
    d_angle = before_angle - after_angle
    if d_angle < 0:
        d_angle += 360
    return d_angle


@dataclass
class LidarScan:
    """One raw scan: xyz points plus optional per-point time and ring fields."""

    timestamp: float
    points: np.ndarray
    time: np.ndarray | None = None
    ring: np.ndarray | None = None

    def __post_init__(self) -> None:
        self.points = np.asarray(self.points, dtype=float).reshape(-1, 3) if np.size(self.points) else np.empty((0, 3))
        count = len(self.points)
        if self.time is not None:
            self.time = np.asarray(self.time, dtype=float)
            if self.time.shape != (count,):
                raise ValueError("time field must have one value per point")
        if self.ring is not None:
            self.ring = np.asarray(self.ring, dtype=int)
            if self.ring.shape != (count,):
                raise ValueError("ring field must have one value per point")

    @property
    def fields(self) -> tuple[str, ...]:
        """Names of the fields the scan carries."""
        names = ["x", "y", "z"]
        if self.time is not None:
            names.append("time")
        if self.ring is not None:
            names.append("ring")
        return tuple(names)


@dataclass
class OrganizedScan:
    """Scan arranged as ``[ring, firing]`` cells.

    ``full_features`` holds ``(x, y, z, timestamp)``; ``raw_data`` holds
    ``(ring, horizon angle in radians, depth, time offset)``.  Empty cells
    have NaN coordinates.
    """

    timestamp: float
    full_features: np.ndarray
    raw_data: np.ndarray
    reverse_firings: int = field(default=0)

    @property
    def height(self) -> int:
        return self.full_features.shape[0]

    @property
    def width(self) -> int:
        return self.full_features.shape[1]


class VelodynePoints:
    """Turns raw scans of one Velodyne model into organised grids."""

    def __init__(self, vlp_type: VelodyneType) -> None:
        self.vlp_type = VelodyneType(vlp_type)
        self.num_lasers, self.num_firing = _LAYOUT[self.vlp_type]
        self.first_msg = True
        self.has_time_field = False
        self.has_ring_field = False
        self.one_scan_angle = 360.0
        self.horizon_resolution = self.one_scan_angle / self.num_firing
        self.laser_id_mapping = dict(_VLP32E_LASER_ID) if self.vlp_type is VelodyneType.VLP32E else {}
        self._start_angle = 0.0
        self._half_rotation = False
        self._circle_count = 0.0

    def check_cloud_field(self, scan: LidarScan, name: str) -> bool:
        """Whether ``scan`` carries the field ``name``."""
        present = name in scan.fields
        if not present:
            logger.warning("PointCloud2 not has channel [%s]", name)
        return present

    def rotation_travelled_clockwise(self, now_angle: float, reset: bool = False) -> float:
        """Total clockwise rotation in degrees since the last reset."""
        if reset:
            self._start_angle = now_angle
            self._half_rotation = False
            self._circle_count = 0.0
            return 0.0
        d_angle = clockwise_angle(self._start_angle, now_angle)
        if 100 < d_angle < 270:
            self._half_rotation = True
        if self._half_rotation and d_angle < 80:
            self._half_rotation = False
            self._circle_count += 360
        return self._circle_count + d_angle

    def _horizon_angles(self, scan: LidarScan):
        first = True
        for index, (x, y, z) in enumerate(scan.points.tolist()):
            if math.isnan(x) or math.isnan(y) or math.isnan(z):
                continue
            angle = math.atan2(y, x) * RAD2DEG
            if first:
                first = False
                self.rotation_travelled_clockwise(angle, reset=True)
            yield index, x, y, z, angle, self.rotation_travelled_clockwise(angle)

    def init_scan_param(self, scan: LidarScan) -> bool:
        """Detect the scan's fields and the angle one revolution covers."""
        self.has_time_field = self.check_cloud_field(scan, "time")
        self.has_ring_field = self.check_cloud_field(scan, "ring")
        if not self.has_time_field:
            logger.warning(
                "Input scan has no [time] field; point times assume constant rotation speed"
            )
        rotation = 0.0
        for *_, rotation in self._horizon_angles(scan):
            pass
        one_scan_angle = _round_half_away(rotation / 360.0) * 363.0
        if one_scan_angle == 0:
            raise ValueError("scan covers less than half a revolution")
        self.one_scan_angle = one_scan_angle
        self.horizon_resolution = one_scan_angle / self.num_firing
        logger.info("one_scan_angle: %g, horizon_resolution: %g", self.one_scan_angle, self.horizon_resolution)
        return True

    def organize(self, scan: LidarScan) -> OrganizedScan:
        """Place each point of ``scan`` into its ``[ring, firing]`` cell."""
        if self.first_msg:
            self.init_scan_param(scan)
            self.first_msg = False

        timebase = float(scan.timestamp)
        shape = (self.num_lasers, self.num_firing, 4)
        full = np.full(shape, np.nan)
        raw = np.full(shape, np.nan)
        full[..., 3] = timebase
        raw[..., 3] = timebase

        last_firing = 0
        reverse_count = 0
        positive_count = 0
        for index, x, y, z, angle, rotation in self._horizon_angles(scan):
            firing = _round_half_away(rotation / self.horizon_resolution)
            if index > 0:
                if firing - last_firing >= 0:
                    positive_count += 1
                else:
                    reverse_count += 1
            last_firing = firing
            if firing < 0 or firing >= self.num_firing:
                continue

            if self.has_time_field:
                dt = float(scan.time[index])
            else:
                dt = SCAN_PERIOD * rotation / self.one_scan_angle

            depth = math.sqrt(x * x + y * y + z * z)
            if self.has_ring_field:
                ring = int(scan.ring[index])
            else:
                if depth == 0.0:
                    continue
                pitch = math.asin(z / depth) * RAD2DEG
                ring = _round_half_away((pitch - LIDAR_FOV_DOWN) / LIDAR_FOV_RESOLUTION)
                if ring < 0 or ring >= 16:
                    continue

            if depth > MAX_DEPTH:
                continue
            if not 0 <= ring < self.num_lasers:
                raise IndexError(f"ring {ring} outside 0..{self.num_lasers - 1}")

            full[ring, firing] = (x, y, z, timebase + dt)
            raw[ring, firing] = (ring, angle / RAD2DEG, depth, dt)

        if reverse_count > 10:
            logger.warning(
                "firing order counter [positive/reverse] = [%d/%d]; check the horizon angle",
                positive_count,
                reverse_count,
            )
        return OrganizedScan(timebase, full, raw, reverse_count)