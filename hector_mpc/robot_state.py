"""Rigid-body state of the robot as seen by the MPC."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from .orientation import quaternion_to_rotation_matrix

BODY_INERTIA = (0.5413, 0.5200, 0.0691)
BODY_MASS = 13.0


def _as_vector(value, size: int, what: str) -> np.ndarray:
    arr = np.asarray(value, dtype=float).reshape(-1)
    if arr.shape != (size,):
        raise ValueError(f"{what} must have {size} elements, got shape {np.shape(value)}")
    return arr


def _yaw_rotation(yaw: float) -> np.ndarray:
    c, s = math.cos(yaw), math.sin(yaw)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


@dataclass
class RobotState:
    """Body position, velocities, orientation and foot positions.

    ``q`` is the orientation quaternion ``[w, x, y, z]``; ``rotation`` is the
    body-to-world rotation it describes. ``r_feet`` holds one foot position
    per column.
    """

    p: np.ndarray = field(default_factory=lambda: np.zeros(3))
    v: np.ndarray = field(default_factory=lambda: np.zeros(3))
    w: np.ndarray = field(default_factory=lambda: np.zeros(3))
    q: np.ndarray = field(default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0]))
    r_feet: np.ndarray = field(default_factory=lambda: np.zeros((3, 2)))
    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    yaw_rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    body_inertia: np.ndarray = field(default_factory=lambda: np.diag(BODY_INERTIA))
    yaw: float = 0.0
    mass: float = BODY_MASS

    @classmethod
    def from_arrays(cls, p, v, q, w, r, yaw) -> "RobotState":
        """Build a state from flat arrays; ``r`` holds foot positions row by row (3x2)."""
        quat = _as_vector(q, 4, "quaternion")
        yaw = float(yaw)
        return cls(
            p=_as_vector(p, 3, "position"),
            v=_as_vector(v, 3, "velocity"),
            w=_as_vector(w, 3, "angular velocity"),
            q=quat,
            r_feet=_as_vector(r, 6, "foot positions").reshape(3, 2),
            rotation=quaternion_to_rotation_matrix(quat).T,
            yaw_rotation=_yaw_rotation(yaw),
            yaw=yaw,
        )

    def describe(self) -> str:
        """Human-readable summary of the state."""
        return "\n".join(
            [
                "Robot State:",
                "Position",
                str(self.p),
                "Velocity",
                str(self.v),
                "Angular Velocity",
                str(self.w),
                "Rotation",
                str(self.rotation),
                "Yaw Rotation",
                str(self.yaw_rotation),
                "Foot Locations",
                str(self.r_feet),
                "Inertia",
                str(self.body_inertia),
            ]
        )