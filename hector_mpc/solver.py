"""Condensed convex MPC for the biped: dynamics, QP assembly and solution.

The state is ``[roll, pitch, yaw, p, omega, v, g]`` (13 values). The input
of one step is ``[F_left, F_right, M_left, M_right]`` (12 values).
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field

import numpy as np
from scipy.linalg import solve_triangular
from scipy.optimize import nnls

from .constraints import foot_rotation_matrices
from .orientation import quat_to_rpy as _orientation_quat_to_rpy
from .orientation import vector_to_skew_mat
from .robot_state import RobotState
from .timer import Timer

logger = logging.getLogger(__name__)

BIG_NUMBER = 5e10
MAX_GAIT_SEGMENTS = 36
MAX_HORIZON = 19
STATE_SIZE = 13
INPUT_SIZE = 12
CONSTRAINTS_PER_STEP = 16
GRAVITY = 9.81
MODEL_MASS = 10.0
FRICTION_COEFFICIENT = 2.0
TOE_LENGTH = 0.09
HEEL_LENGTH = 0.06
MAX_ROLL_MOMENT = 0.01
_PI = 3.14159265359


@dataclass
class ProblemSetup:
    """Timing and limits of the MPC problem."""

    dt: float = 0.0
    mu: float = 0.0
    f_max: float = 0.0
    horizon: int = 0


@dataclass
class UpdateData:
    """Measured state, references and solver settings for one MPC solve.

    ``r`` holds the foot positions relative to the body row by row (3x2),
    ``traj`` holds 12 reference states per horizon step and ``gait`` holds
    one contact flag per leg per horizon step.
    """

    p: np.ndarray = field(default_factory=lambda: np.zeros(3))
    v: np.ndarray = field(default_factory=lambda: np.zeros(3))
    q: np.ndarray = field(default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0]))
    w: np.ndarray = field(default_factory=lambda: np.zeros(3))
    r: np.ndarray = field(default_factory=lambda: np.zeros(6))
    joint_angles: np.ndarray = field(default_factory=lambda: np.zeros(10))
    yaw: float = 0.0
    weights: np.ndarray = field(default_factory=lambda: np.zeros(12))
    traj: np.ndarray = field(default_factory=lambda: np.zeros(12 * MAX_GAIT_SEGMENTS))
    alpha_k: np.ndarray = field(default_factory=lambda: np.zeros(12))
    gait: np.ndarray = field(default_factory=lambda: np.zeros(MAX_GAIT_SEGMENTS, dtype=int))
    max_iterations: int = 0
    rho: float = 0.0
    sigma: float = 0.0
    solver_alpha: float = 0.0
    terminate: float = 0.0


def _flat(value, what: str, size: int | None = None, minimum: int | None = None) -> np.ndarray:
    arr = np.asarray(value, dtype=float).reshape(-1)
    if size is not None and arr.size != size:
        raise ValueError(f"{what} must have {size} elements, got {arr.size}")
    if minimum is not None and arr.size < minimum:
        raise ValueError(f"{what} needs at least {minimum} elements, got {arr.size}")
    return arr


def euler_to_rotation(roll: float, pitch: float, yaw: float) -> np.ndarray:
    """Map from world angular velocity to roll/pitch/yaw rates (not a rotation)."""
    cy, sy = np.cos(yaw), np.sin(yaw)
    cp, sp = np.cos(pitch), np.sin(pitch)
    rb = np.array(
        [
            [cy * cp, -sy, 0.0],
            [sy * cp, cy, 0.0],
            [-sp, 0.0, 1.0],
        ]
    )
    return np.linalg.inv(rb)


def near_zero(a):
    """True where ``a`` lies strictly within 1e-4 of zero; elementwise for arrays."""
    return abs(a) < 0.0001


def near_one(a):
    """True where ``a`` lies within 1e-4 of 2, the vertical-force coefficient."""
    return near_zero(a - 2)


def cross_mat(i_inv, r) -> np.ndarray:
    """``i_inv @ skew(r)``: torque-to-acceleration map of a force applied at ``r``."""
    return np.asarray(i_inv, dtype=float) @ vector_to_skew_mat(r)


def ct_ss_mats(i_world, m, r_feet, r_yaw) -> tuple[np.ndarray, np.ndarray]:
    """Continuous-time state-space matrices ``(A, B)`` of the single rigid body."""
    i_world = np.asarray(i_world, dtype=float)
    r_feet = np.asarray(r_feet, dtype=float)
    if i_world.shape != (3, 3):
        raise ValueError(f"inertia must be 3x3, got shape {i_world.shape}")
    if r_feet.shape != (3, 2):
        raise ValueError(f"foot positions must be 3x2, got shape {r_feet.shape}")

    a = np.zeros((STATE_SIZE, STATE_SIZE))
    a[0:3, 6:9] = np.asarray(r_yaw, dtype=float)
    a[3:6, 9:12] = np.eye(3)
    a[9:12, 12] = (0.0, 0.0, -1.0)

    b = np.zeros((STATE_SIZE, INPUT_SIZE))
    i_inv = np.linalg.inv(i_world)
    for leg in range(2):
        b[6:9, 3 * leg:3 * leg + 3] = cross_mat(i_inv, r_feet[:, leg])
    b[6:9, 6:9] = i_inv
    b[6:9, 9:12] = i_inv
    b[9:12, 0:3] = np.eye(3) / m
    b[9:12, 3:6] = np.eye(3) / m
    return a, b


def c2qp(ac, bc, dt, horizon) -> tuple[np.ndarray, np.ndarray]:
    """Condensed prediction matrices from a forward-Euler discretisation.

    Returns ``(A_qp, B_qp)`` so that the stacked predicted states are
    ``A_qp @ x0 + B_qp @ U``.
    """
    if horizon > MAX_HORIZON:
        raise ValueError("horizon is too long!")
    if horizon <= 0:
        raise ValueError(f"horizon must be positive, got {horizon}")
    ac = np.asarray(ac, dtype=float)
    bc = np.asarray(bc, dtype=float)
    acd = np.eye(STATE_SIZE) + dt * ac
    bcd = dt * bc

    powers = [np.eye(STATE_SIZE)]
    for _ in range(horizon):
        powers.append(powers[-1] @ acd)

    a_qp = np.vstack(powers[1:horizon + 1])
    b_qp = np.zeros((STATE_SIZE * horizon, INPUT_SIZE * horizon))
    for i in range(horizon):
        for j in range(i + 1):
            b_qp[i * STATE_SIZE:(i + 1) * STATE_SIZE, j * INPUT_SIZE:(j + 1) * INPUT_SIZE] = (
                powers[i - j] @ bcd
            )
    return a_qp, b_qp


def quat_to_rpy(q) -> np.ndarray:
    """Roll, pitch and yaw of quaternion ``[w, x, y, z]``."""
    return _orientation_quat_to_rpy(q)


def correct_joint_angles(joint_angles) -> np.ndarray:
    """Shift the thigh, knee and ankle angles to the foot-rotation convention, wrapped to 2π."""
    q = _flat(joint_angles, "joint angles", size=10).copy()
    for first in (0, 5):
        q[first + 2] += 0.3 * _PI
        q[first + 3] -= 0.6 * _PI
        q[first + 4] += 0.3 * _PI
    return np.fmod(q, 2 * _PI)


def _step_constraint_matrix(foot_left, foot_right, body_rotation) -> np.ndarray:
    mu = FRICTION_COEFFICIENT
    body_t = body_rotation.T
    f = np.zeros((CONSTRAINTS_PER_STEP, INPUT_SIZE))
    for leg, foot in enumerate((foot_left, foot_right)):
        to_world = foot.T @ body_t
        row = 8 * leg
        force = slice(3 * leg, 3 * leg + 3)
        moment = slice(6 + 3 * leg, 9 + 3 * leg)
        fx, fy, fz = 3 * leg, 3 * leg + 1, 3 * leg + 2

        f[row, [fx, fz]] = (-mu, 1.0)
        f[row + 1, [fx, fz]] = (mu, 1.0)
        f[row + 2, [fy, fz]] = (-mu, 1.0)
        f[row + 3, [fy, fz]] = (mu, 1.0)
        f[row + 4, moment] = to_world[0]
        f[row + 5, force] = -TOE_LENGTH * to_world[2]
        f[row + 5, moment] = to_world[1]
        f[row + 6, force] = -HEEL_LENGTH * to_world[2]
        # Only the left leg's heel row takes the negated lateral moment.
        f[row + 6, moment] = (-to_world[1]) if leg == 0 else to_world[1]
        f[row + 7, fz] = 2.0
    return f


def _bounds(horizon: int, f_max: float, gait: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    lower = np.zeros(CONSTRAINTS_PER_STEP * horizon)
    upper = np.zeros(CONSTRAINTS_PER_STEP * horizon)
    for i in range(horizon):
        for leg in range(2):
            base = CONSTRAINTS_PER_STEP * i + 8 * leg
            upper[base:base + 4] = BIG_NUMBER
            lower[base:base + 4] = 0.0
            upper[base + 4:base + 8] = (MAX_ROLL_MOMENT, 0.0, 0.0, f_max * gait[2 * i + leg])
            lower[base + 4:base + 8] = (0.0, -BIG_NUMBER, -BIG_NUMBER, 0.0)
    return lower, upper


def _eliminate(fmat, lower, upper) -> tuple[np.ndarray, np.ndarray]:
    """Drop the wrench and constraints of every leg whose vertical force is pinned to zero."""
    n_cons, n_vars = fmat.shape
    var_elim = np.zeros(n_vars, dtype=bool)
    con_elim = np.zeros(n_cons, dtype=bool)
    for i in np.flatnonzero(near_zero(lower) & near_zero(upper)):
        for j in np.flatnonzero(near_one(fmat[i])):
            j = int(j)
            cs = (j + 4) // 6 * 8 - 1 if j % 2 == 0 else (j + 1) // 6 * 8 + 7
            var_elim[[j - 2, j - 1, j, j + 4, j + 5, j + 6]] = True
            con_elim[cs - 7:cs + 1] = True
    return var_elim, con_elim


def _solve_qp(h, g, a, lower, upper) -> np.ndarray:
    """Minimise ``x'Hx/2 + g'x`` subject to ``lower <= A x <= upper``.

    The problem is turned into a least-distance problem and solved exactly
    with non-negative least squares.
    """
    n = g.size
    if n == 0:
        return np.zeros(0)
    try:
        chol = np.linalg.cholesky(h)
    except np.linalg.LinAlgError as exc:
        raise ValueError("QP Hessian is not positive definite") from exc
    c = solve_triangular(chol, g, lower=True)

    has_low = lower > -BIG_NUMBER
    has_up = upper < BIG_NUMBER
    g_mat = np.vstack([a[has_low], -a[has_up]])
    rhs = np.concatenate([lower[has_low], -upper[has_up]])

    if rhs.size == 0:
        y = np.zeros(n)
    else:
        e = solve_triangular(chol, g_mat.T, lower=True).T
        f = rhs + e @ c
        stacked = np.vstack([e.T, f])
        target = np.zeros(n + 1)
        target[-1] = 1.0
        try:
            u, _ = nnls(stacked, target)
        except RuntimeError:
            warnings.warn("failed to solve!", RuntimeWarning, stacklevel=3)
            return np.zeros(n)
        residual = stacked @ u - target
        if np.linalg.norm(residual) < 1e-12 or abs(residual[-1]) < 1e-12:
            warnings.warn("failed to solve!", RuntimeWarning, stacklevel=3)
            return np.zeros(n)
        y = -residual[:n] / residual[-1]
    return solve_triangular(chol.T, y - c, lower=False)


def solve_mpc(update: UpdateData, setup: ProblemSetup) -> np.ndarray:
    """Solve the MPC problem and return the input sequence, 12 values per step."""
    horizon = int(setup.horizon)
    if horizon <= 0:
        raise ValueError(f"horizon must be positive, got {horizon}")
    traj = _flat(update.traj, "trajectory", minimum=12 * horizon)
    gait = _flat(update.gait, "gait", minimum=2 * horizon)
    weights = _flat(update.weights, "weights", size=12)
    alpha = _flat(update.alpha_k, "alpha", size=12)

    joints = correct_joint_angles(update.joint_angles)
    rs = RobotState.from_arrays(update.p, update.v, update.q, update.w, update.r, update.yaw)

    rpy = quat_to_rpy(rs.q)
    rb = euler_to_rotation(*rpy)
    x0 = np.concatenate([rpy, rs.p, rs.w, rs.v, [GRAVITY]])
    i_world = rs.rotation @ rs.body_inertia @ rs.rotation.T
    a_ct, b_ct = ct_ss_mats(i_world, MODEL_MASS, rs.r_feet, rb)
    foot_left, foot_right = foot_rotation_matrices(joints)

    a_qp, b_qp = c2qp(a_ct, b_ct, setup.dt, horizon)

    s = np.diag(np.tile(np.append(weights, 0.0), horizon))
    x_des = np.zeros((horizon, STATE_SIZE))
    x_des[:, :12] = traj[:12 * horizon].reshape(horizon, 12)
    x_des = x_des.reshape(-1)

    lower, upper = _bounds(horizon, setup.f_max, gait)
    fmat = np.kron(np.eye(horizon), _step_constraint_matrix(foot_left, foot_right, rs.rotation))
    alpha_rep = np.diag(np.tile(alpha, horizon))

    q_h = 2.0 * (b_qp.T @ s @ b_qp + alpha_rep)
    q_g = 2.0 * b_qp.T @ s @ (a_qp @ x0 - x_des)

    var_elim, con_elim = _eliminate(fmat, lower, upper)
    keep_v = ~var_elim
    keep_c = ~con_elim

    timer = Timer()
    reduced = _solve_qp(
        q_h[np.ix_(keep_v, keep_v)],
        q_g[keep_v],
        fmat[np.ix_(keep_c, keep_v)],
        lower[keep_c],
        upper[keep_c],
    )
    logger.debug(
        "solve time: %.3f ms, size %d, %d",
        timer.elapsed_ms(),
        int(keep_v.sum()),
        int(keep_c.sum()),
    )

    solution = np.zeros(INPUT_SIZE * horizon)
    solution[keep_v] = reduced
    return solution