"""Map quality metrics: mean map entropy and mean plane variance."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from scipy.spatial import cKDTree

logger = logging.getLogger(__name__)

_RANSAC_PROBABILITY = 0.99
_RANSAC_MAX_ITERATIONS = 10000


def _as_points(cloud) -> np.ndarray:
    pts = np.asarray(cloud, dtype=float)
    if pts.size == 0:
        return np.empty((0, 3))
    return pts.reshape(-1, pts.shape[-1])[:, :3]


def compute_entropy(cloud) -> float:
    """Differential entropy of the normalised covariance of a point set."""
    pts = _as_points(cloud)
    if len(pts) == 0:
        raise ValueError("cannot compute entropy of an empty cloud")
    centred = pts - pts.mean(axis=0)
    covariance = centred.T @ centred / len(pts)
    determinant = float(np.linalg.det(2 * math.pi * math.e * covariance))
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(0.5 * np.log(determinant))


def _fit_plane(pts: np.ndarray, threshold: float, rng: np.random.Generator):
    count = len(pts)
    if count < 3:
        return None
    best_inliers = 0
    best_mask = None
    iterations = 0
    needed = float(_RANSAC_MAX_ITERATIONS)
    eps = np.finfo(float).eps
    while iterations < needed and iterations < _RANSAC_MAX_ITERATIONS:
        iterations += 1
        p0, p1, p2 = pts[rng.choice(count, 3, replace=False)]
        normal = np.cross(p1 - p0, p2 - p0)
        norm = np.linalg.norm(normal)
        if norm < 1e-12:
            continue
        normal /= norm
        mask = np.abs(pts @ normal - normal @ p0) < threshold
        inliers = int(mask.sum())
        if inliers > best_inliers:
            best_inliers, best_mask = inliers, mask
            w = inliers / count
            p_no_outliers = min(1.0 - eps, max(eps, 1.0 - w**3))
            needed = math.log(1.0 - _RANSAC_PROBABILITY) / math.log(p_no_outliers)
    if best_mask is None or best_inliers < 3:
        return None
    inlier_pts = pts[best_mask]
    centroid = inlier_pts.mean(axis=0)
    centred = inlier_pts - centroid
    _, vectors = np.linalg.eigh(centred.T @ centred)
    normal = vectors[:, 0]
    return normal, -float(normal @ centroid)


def compute_plane_variance(cloud, distance_threshold: float = 0.005, seed: int | None = None) -> float:
    """Mean of the largest quarter of point-to-plane distances of a RANSAC plane.

    Returns infinity when no plane can be fitted.
    """
    pts = _as_points(cloud)
    model = _fit_plane(pts, distance_threshold, np.random.default_rng(seed))
    if model is None:
        logger.error("Could not estimate a planar model for the given subset of points.")
        return math.inf
    normal, offset = model
    distances = np.sort(np.abs(pts @ normal + offset))
    quarter = len(distances) // 4
    total = float(distances[quarter * 3:].sum())
    if quarter == 0:
        return math.inf if total > 0 else math.nan
    return total / quarter


@dataclass
class MapEvaluationResult:
    """Per-map metrics and the per-point ``(x, y, z, entropy, plane variance)`` rows."""

    mean_map_entropy: float
    mean_plane_variance: float
    lonely_points: int
    points: np.ndarray


class MapEvaluationTool:
    """Evaluate a point-cloud map by local entropy and plane variance."""

    def __init__(
        self,
        map_path: str | Path,
        step_size: int = 1,
        radius: float = 0.3,
        min_neighbors: int = 15,
        punish_solitary_points: bool = False,
    ) -> None:
        if step_size < 1:
            raise ValueError("step_size must be positive")
        self.map_path = str(map_path)
        self.step_size = step_size
        self.radius = radius
        self.min_neighbors = min_neighbors
        self.punish_solitary_points = punish_solitary_points

    def evaluate(self, points) -> MapEvaluationResult:
        """Compute the metrics for an ``(N, 3)`` point array."""
        cloud = _as_points(points)
        total = len(cloud)
        sampled = total // self.step_size
        if sampled == 0:
            raise ValueError("point cloud has too few points to evaluate")
        tree = cKDTree(cloud)
        report_every = max(1, total // 20)

        entropy_sum = 0.0
        plane_variance_sum = 0.0
        lonely = 0
        rows = []
        for i in range(0, total, self.step_size):
            if i % report_every == 0:
                logger.debug("%d %%", i * 100 // total)
            neighbours = tree.query_ball_point(cloud[i], self.radius)
            if len(neighbours) > self.min_neighbors or not self.punish_solitary_points:
                local = cloud[neighbours]
                entropy = compute_entropy(local)
                plane_variance = compute_plane_variance(local, seed=i)
            else:
                entropy = math.inf
                plane_variance = math.inf
                lonely += 1

            if math.isfinite(plane_variance):
                plane_variance_sum += plane_variance
                point_variance = plane_variance
            elif self.punish_solitary_points:
                plane_variance_sum += self.radius
                point_variance = self.radius
            else:
                point_variance = 0.0

            if math.isfinite(entropy):
                entropy_sum += entropy
                point_entropy = entropy
            else:
                point_entropy = 0.0

            x, y, z = cloud[i]
            rows.append((x, y, z, point_entropy, point_variance))

        return MapEvaluationResult(
            mean_map_entropy=entropy_sum / sampled,
            mean_plane_variance=plane_variance_sum / sampled,
            lonely_points=lonely,
            points=np.asarray(rows, dtype=np.float32),
        )

    def process(self, points) -> MapEvaluationResult:
        """Evaluate, append a summary line to ``map_MME.txt`` and save the scored cloud."""
        path = Path(self.map_path)
        if "." not in path.name:
            raise ValueError(f"map path has no extension: {self.map_path}")
        result = self.evaluate(points)
        logger.info("Mean Map Entropy is : %g", result.mean_map_entropy)
        logger.info("Mean Plane Variance is : %g", result.mean_plane_variance)

        summary = path.parent.parent / "map_MME.txt"
        with open(summary, "a", encoding="utf-8") as handle:
            handle.write(f"{self.map_path},{result.mean_map_entropy:g},{result.mean_plane_variance:g}\n")

        stem, _, ext = path.name.rpartition(".")
        scored = path.with_name(f"{stem}_entrop.{ext}")
        if len(result.points):
            _write_pcd(scored, result.points)
        else:
            logger.error("Empty cloud. Saving error.")
        return result


def _write_pcd(path: Path, rows: np.ndarray) -> None:
    count = len(rows)
    header = (
        "# .PCD v0.7 - Point Cloud Data file format\n"
        "VERSION 0.7\n"
        "FIELDS x y z entropy planeVariance\n"
        "SIZE 4 4 4 4 4\n"
        "TYPE F F F F F\n"
        "COUNT 1 1 1 1 1\n"
        f"WIDTH {count}\n"
        "HEIGHT 1\n"
        "VIEWPOINT 0 0 0 1 0 0 0\n"
        f"POINTS {count}\n"
        "DATA ascii\n"
    )
    body = "".join(" ".join(f"{float(v):.8g}" for v in row) + "\n" for row in rows)
    path.write_text(header + body, encoding="utf-8")