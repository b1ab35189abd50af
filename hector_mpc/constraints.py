"""Friction-cone, line-contact and force-limit constraints of the convex MPC."""

from __future__ import annotations

import math

import numpy as np

from .robot_state import RobotState

NUM_VARIABLES = 12
CONSTRAINTS_PER_STEP = 16
FRICTION_COEFFICIENT = 5.0
TOE_LENGTH = 0.09
HEEL_LENGTH = 0.06
MAX_ROLL_MOMENT = 0.01


def _leg_foot_rotation(q0, q1, q2, q3, q4) -> np.ndarray:
    s0, c0 = math.sin(q0), math.cos(q0)
    s1, c1 = math.sin(q1), math.cos(q1)
    s2, c2 = math.sin(q2), math.cos(q2)
    s3, c3 = math.sin(q3), math.cos(q3)
    s4, c4 = math.sin(q4), math.cos(q4)
    a = c0 * s2 + c2 * s0 * s1
    b = c0 * c2 - s0 * s1 * s2
    c = c2 * s0 + c0 * s1 * s2
    d = s0 * s2 - c0 * c2 * s1
    pitch = q2 + q3 + q4
    return np.array(
        [
            [
                -s4 * (c3 * a + s3 * b) - c4 * (s3 * a - c3 * b),
                -c1 * s0,
                c4 * (c3 * a + s3 * b) - s4 * (s3 * a - c3 * b),
            ],
            [
                c4 * (c3 * c - s3 * d) - s4 * (s3 * c + c3 * d),
                c0 * c1,
                c4 * (s3 * c + c3 * d) + s4 * (c3 * c - s3 * d),
            ],
            [-math.sin(pitch) * c1, s1, math.cos(pitch) * c1],
        ]
    )


def foot_rotation_matrices(q) -> tuple[np.ndarray, np.ndarray]:
    """Rotations of the left and right feet relative to the body from 10 joint angles."""
    angles = np.asarray(q, dtype=float).reshape(-1)
    if angles.size < 10:
        raise ValueError(f"expected 10 joint angles, got {angles.size}")
    return _leg_foot_rotation(*angles[0:5]), _leg_foot_rotation(*angles[5:10])


class Constraints:
    """Linear constraint matrix and bounds for the ground reaction wrench QP.

    The decision vector of one step is ``[F_left, F_right, M_left, M_right]``.
    """

    def __init__(
        self,
        robot_state: RobotState,
        joint_angles,
        horizon: int,
        num_constraints: int,
        motor_torque_limit: float,
        big_number: float,
        f_max: float,
        gait,
    ):
        if horizon <= 0:
            raise ValueError(f"horizon must be positive, got {horizon}")
        if num_constraints < CONSTRAINTS_PER_STEP:
            raise ValueError(
                f"need at least {CONSTRAINTS_PER_STEP} constraints per step, got {num_constraints}"
            )
        gait_flags = np.asarray(gait, dtype=float).reshape(-1)
        if gait_flags.size < 2 * horizon:
            raise ValueError(f"gait table needs {2 * horizon} entries, got {gait_flags.size}")

        self.robot_state = robot_state
        self.horizon = horizon
        self.num_constraints = num_constraints
        self.num_variables = NUM_VARIABLES
        self.motor_torque_limit = motor_torque_limit
        self.big_number = big_number
        self.f_max = f_max
        self.gait = gait_flags
        self.foot_rotation_left, self.foot_rotation_right = foot_rotation_matrices(joint_angles)

        self._upper = np.zeros(horizon * num_constraints)
        self._lower = np.zeros(horizon * num_constraints)
        self._matrix = np.zeros((num_constraints, NUM_VARIABLES))
        self._compute_bounds()
        self._compute_matrix()

    def _compute_bounds(self) -> None:
        big = self.big_number
        for leg in range(2):
            for i in range(self.horizon):
                base = 8 * leg + CONSTRAINTS_PER_STEP * i
                self._upper[base:base + 4] = big
                self._lower[base:base + 4] = 0.0
                self._upper[base + 4:base + 8] = (
                    MAX_ROLL_MOMENT,
                    0.0,
                    0.0,
                    self.f_max * self.gait[2 * i],
                )
                self._lower[base + 4:base + 8] = (0.0, -big, -big, 0.0)

    def _compute_matrix(self) -> None:
        mu = FRICTION_COEFFICIENT
        body_t = self.robot_state.rotation.T
        moment_selection = np.array([1.0, 0.0, 0.0])
        toe = np.array([0.0, 0.0, TOE_LENGTH])
        heel = np.array([0.0, 0.0, HEEL_LENGTH])
        lateral = np.array([0.0, 1.0, 0.0])
        a = self._matrix

        for leg, foot in enumerate((self.foot_rotation_left, self.foot_rotation_right)):
            to_world = foot.T @ body_t
            row = 8 * leg
            force = slice(3 * leg, 3 * leg + 3)
            moment = slice(6 + 3 * leg, 9 + 3 * leg)
            fx, fy, fz = 3 * leg, 3 * leg + 1, 3 * leg + 2

            a[row, [fx, fz]] = (-mu, 1.0)
            a[row + 1, [fx, fz]] = (mu, 1.0)
            a[row + 2, [fy, fz]] = (-mu, 1.0)
            a[row + 3, [fy, fz]] = (mu, 1.0)
            a[row + 4, moment] = moment_selection @ to_world
            a[row + 5, force] = -toe @ to_world
            a[row + 5, moment] = lateral @ to_world
            a[row + 6, force] = -heel @ to_world
            # The heel row flips the lateral moment sign for the left leg only.
            a[row + 6, moment] = (-lateral if leg == 0 else lateral) @ to_world
            a[row + 7, fz] = 2.0

    def upper_bound(self) -> np.ndarray:
        """Upper bounds for every step of the horizon."""
        return self._upper.copy()

    def lower_bound(self) -> np.ndarray:
        """Lower bounds for every step of the horizon."""
        return self._lower.copy()

    def constraint_matrix(self) -> np.ndarray:
        """Constraint matrix of one step."""
        return self._matrix.copy()