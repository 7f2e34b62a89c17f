[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "licalib"
version = "0.1.0"
description = "Building blocks for LiDAR-IMU calibration: rotation maths, Velodyne scan organisation, map entropy evaluation and trajectory files"
requires-python = ">=3.10"
keywords = ["lidar", "imu", "calibration", "velodyne", "point cloud", "trajectory", "rotation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["licalib"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
