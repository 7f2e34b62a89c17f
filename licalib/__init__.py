"""Building blocks for LiDAR-IMU calibration: rotation maths, timing, state logging,
Velodyne scan organisation, map evaluation, trajectory files and plane statistics."""

__version__ = "0.1.0"