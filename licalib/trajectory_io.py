"""Reading and writing trajectories: TUM odometry files and spline control points."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

import numpy as np

from licalib.mathutils import quaternion_from_matrix

logger = logging.getLogger(__name__)

Knot = tuple[np.ndarray, np.ndarray]


@dataclass
class OdomData:
    """A timestamped 4x4 homogeneous pose."""

    timestamp: float
    pose: np.ndarray = field(default_factory=lambda: np.eye(4))

    def __post_init__(self) -> None:
        self.pose = np.asarray(self.pose, dtype=float)
        if self.pose.shape != (4, 4):
            raise ValueError(f"pose must be 4x4, got shape {self.pose.shape}")

    @property
    def position(self) -> np.ndarray:
        """Translation part of the pose."""
        return self.pose[:3, 3].copy()

    @property
    def rotation(self) -> np.ndarray:
        """Rotation part of the pose."""
        return self.pose[:3, :3].copy()

    @property
    def quaternion(self) -> np.ndarray:
        """Rotation as a quaternion ``(x, y, z, w)``."""
        return quaternion_from_matrix(self.pose[:3, :3])


def normalize_angle(ang_degree: float) -> float:
    """Bring an angle in degrees back by one turn if it lies outside ``[-180, 180]``."""
    if ang_degree > 180:
        ang_degree -= 360
    if ang_degree < -180:
        ang_degree += 360
    return ang_degree


def odom_file_name(relative_start_time: float, relative_end_time: float) -> str:
    """File name of an odometry dump for a segment."""
    return f"ndt-odom-{relative_start_time:f}-{relative_end_time:f}.txt"


def trajectory_file_name(relative_start_time: float, relative_end_time: float, iteration_num: int) -> str:
    """File name of a trajectory dump for a segment and iteration."""
    return (
        f"trajectory-lidar-{relative_start_time:f}-{relative_end_time:f}"
        f"-iter{int(iteration_num)}.txt"
    )


def write_odom_tum(
    file_path: str | Path,
    odom_data: Iterable[OdomData],
    relative_start_time: float,
    relative_end_time: float,
) -> Path:
    """Write odometry in TUM format into directory ``file_path``; return the file written.

    Each line is ``time x y z qx qy qz qw`` where time is the odometry
    timestamp shifted by ``relative_start_time``.
    """
    traj_path = Path(file_path) / odom_file_name(relative_start_time, relative_end_time)
    lines = []
    for item in odom_data:
        bag_time = item.timestamp + relative_start_time
        p = item.pose[:3, 3]
        q = quaternion_from_matrix(item.pose[:3, :3])
        values = " ".join(f"{float(v):.5g}" for v in (*p, *q))
        lines.append(f"{bag_time:.9g} {values}\n")
    with open(traj_path, "w", encoding="utf-8") as handle:
        handle.writelines(lines)
    logger.info("Save ndt odom at %s", traj_path)
    return traj_path


def save_control_points(path: str | Path, knots: Iterable[Sequence[Sequence[float]]]) -> None:
    """Write knots ``(position, quaternion xyzw)`` one per line as ``x y z qx qy qz qw``."""
    lines = []
    for position, quaternion in knots:
        p = np.asarray(position, dtype=float).reshape(3)
        q = np.asarray(quaternion, dtype=float).reshape(4)
        lines.append(" ".join(f"{float(v):g}" for v in (*p, *q)) + "\n")
    with open(path, "w", encoding="utf-8") as handle:
        handle.writelines(lines)


def load_control_points(path: str | Path) -> list[Knot]:
    """Read knots written by :func:`save_control_points`; quaternions are normalised."""
    knots: list[Knot] = []
    with open(path, encoding="utf-8") as handle:
        for line_no, line in enumerate(handle, start=1):
            fields = [f for f in line.rstrip("\n").split(" ") if f]
            if not fields:
                continue
            if len(fields) < 7:
                raise ValueError(f"{path}:{line_no}: expected 7 values, got {len(fields)}")
            try:
                values = [float(f) for f in fields]
            except ValueError as exc:
                raise ValueError(f"{path}:{line_no}: {exc}") from exc
            position = np.array(values[:3])
            quaternion = np.array(values[3:7])
            norm = np.linalg.norm(quaternion)
            if norm < 1e-10:
                raise ValueError(f"{path}:{line_no}: quaternion has zero norm")
            knots.append((position, quaternion / norm))
    return knots