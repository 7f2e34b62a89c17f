# licalib

Building blocks for calibrating a LiDAR against an IMU, written in plain
Python on top of NumPy and SciPy.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## What is inside

- `licalib.mathutils` – angle conversion and normalisation (`rad_to_deg`,
  `deg_to_rad`, `normalize_rad`, `normalize_deg`, `rad_lt`, `rad_gt`),
  point helpers (`scale_point`, `calc_squared_diff`, `calc_point_distance`,
  `calc_squared_point_distance`), skew-symmetric and quaternion
  multiplication matrices (`skew_symmetric`, `delta_q`, `left_quat_matrix`,
  `right_quat_matrix`), yaw/pitch/roll conversions in degrees (`r2ypr`,
  `ypr2r`), `quaternion_from_matrix`, gravity alignment (`g2r`), axis-angle
  rotations (`rotation_matrix`, `rotation_from_two_vectors`, which raises
  `ValueError` for parallel vectors), `calculate_angle` and
  `sort_descending`. Quaternions are arrays in `(x, y, z, w)` order.
- `licalib.timing` – `TicToc`, a stopwatch started on creation; `tic()`
  restarts it and `toc()` returns elapsed milliseconds.
- `licalib.state_log` – `CheckStateCallback`. Register parameter blocks
  with `add_check_state(description, block)`; each call logs one line with
  the iteration number and the current block values. Numpy arrays are kept
  by reference, so in-place changes show up. Given a filename, a header line
  is written on the first call and lines are appended; otherwise lines go to
  standard output with the block names.
- `licalib.velodyne` – `VelodynePoints` turns an unordered scan
  (`LidarScan`: xyz points with optional `time` and `ring` fields) into an
  `OrganizedScan` arranged as `[ring, firing]` cells, for the models in
  `VelodyneType` (VLP16, VLP32E, VLS128, HDL_32E). Without a time field,
  point times assume constant rotation over 0.1 s; without a ring field, the
  ring is derived from the pitch angle. Points beyond 40 m are dropped.
- `licalib.map_evaluation` – `MapEvaluationTool.evaluate(points)` computes
  the mean map entropy and mean plane variance of a point array and returns
  a `MapEvaluationResult`; `process(points)` also appends a summary line to
  `map_MME.txt` two directories above `map_path` and writes the scored
  points as an ASCII PCD file named `<stem>_entrop.<ext>`. The
  per-neighbourhood measures are `compute_entropy` and
  `compute_plane_variance` (a seeded RANSAC plane fit).
- `licalib.trajectory_io` – `OdomData` (timestamped 4x4 pose),
  `normalize_angle`, the file-name helpers `odom_file_name` and
  `trajectory_file_name`, TUM-format odometry output (`write_odom_tum`) and
  saving/loading of spline control points (`save_control_points`,
  `load_control_points`).
- `licalib.plane_stats` – `SurfelPoint`, `PointCorrespondence`,
  `collect_correspondences` (selects points in a time window and reports the
  span of their times) and `lidar_cov`, the singular values of the mean
  outer product of plane normals.

## Example

```python
import numpy as np
from licalib.mathutils import ypr2r, r2ypr
from licalib.timing import TicToc

timer = TicToc()
rotation = ypr2r(np.array([30.0, 10.0, -5.0]))
print(r2ypr(rotation))          # approximately [30, 10, -5]
print(f"{timer.toc():.3f} ms")
```

## What the package does not do

`licalib` is a library of parts, not a calibration program. It has no
command-line tool, no reader for configuration files, and no trajectory
optimiser or solver: `CheckStateCallback` only logs values that some other
code changes. It does not read point-cloud or sensor recording files either;
`MapEvaluationTool` and `VelodynePoints` take the points as arrays.