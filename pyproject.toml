[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hector_mpc"
version = "0.1.0"
description = "Convex model predictive control building blocks for a bipedal robot: gaits, constraints, QP setup and solution, and rotation utilities."
requires-python = ">=3.10"
keywords = ["robotics", "mpc", "biped", "locomotion", "quadratic-programming", "control"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
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
packages = ["hector_mpc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
