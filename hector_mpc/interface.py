"""Stateful front end of the convex MPC: configure, feed measurements, read forces."""

from __future__ import annotations

import numpy as np

from .solver import MAX_HORIZON, ProblemSetup, UpdateData, solve_mpc


def _flat(value, what: str, size: int | None = None, minimum: int | None = None) -> np.ndarray:
    arr = np.asarray(value, dtype=float).reshape(-1)
    if size is not None and arr.size != size:
        raise ValueError(f"{what} must have {size} elements, got {arr.size}")
    if minimum is not None and arr.size < minimum:
        raise ValueError(f"{what} needs at least {minimum} elements, got {arr.size}")
    return arr


class MPCInterface:
    """Holds the problem configuration, the latest update and the latest solution."""

    def __init__(self):
        self.problem = ProblemSetup()
        self.update = UpdateData()
        self._solution: np.ndarray | None = None

    @property
    def has_solved(self) -> bool:
        """True once a problem has been solved."""
        return self._solution is not None

    def setup_problem(self, dt: float, horizon: int, mu: float, f_max: float) -> None:
        """Set the time step, horizon length, friction coefficient and force limit."""
        horizon = int(horizon)
        if horizon <= 0:
            raise ValueError(f"horizon must be positive, got {horizon}")
        if horizon > MAX_HORIZON:
            raise ValueError("horizon is too long!")
        self.problem.horizon = horizon
        self.problem.f_max = float(f_max)
        self.problem.mu = float(mu)
        self.problem.dt = float(dt)

    def update_problem_data(
        self, p, v, q, w, r, joint_angles, yaw, weights, state_trajectory, alpha_k, gait
    ) -> np.ndarray:
        """Store the measurements and references, solve, and return the solution."""
        horizon = self.problem.horizon
        if horizon <= 0:
            raise ValueError("problem is not set up; call setup_problem first")
        update = self.update
        update.p = _flat(p, "position", size=3)
        update.v = _flat(v, "velocity", size=3)
        update.q = _flat(q, "quaternion", size=4)
        update.w = _flat(w, "angular velocity", size=3)
        update.r = _flat(r, "foot positions", size=6)
        update.joint_angles = _flat(joint_angles, "joint angles", size=10)
        update.yaw = float(yaw)
        update.weights = _flat(weights, "weights", size=12)
        update.traj = _flat(state_trajectory, "trajectory", minimum=12 * horizon)[: 12 * horizon].copy()
        update.alpha_k = _flat(alpha_k, "alpha", size=12)
        gait_flags = np.asarray(gait, dtype=int).reshape(-1)
        if gait_flags.size < 2 * horizon:
            raise ValueError(f"gait needs at least {2 * horizon} elements, got {gait_flags.size}")
        update.gait = gait_flags[: 2 * horizon].copy()

        self._solution = solve_mpc(update, self.problem)
        return self._solution.copy()

    def get_solution(self, index: int) -> float:
        """Element ``index`` of the latest solution, or 0.0 before any solve."""
        if self._solution is None:
            return 0.0
        return float(self._solution[index])

    def update_solver_settings(self, max_iter, rho, sigma, solver_alpha, terminate, use_jcqp) -> None:
        """Store iterative-solver settings alongside the update data."""
        self.update.max_iterations = int(max_iter)
        self.update.rho = float(rho)
        self.update.sigma = float(sigma)
        self.update.solver_alpha = float(solver_alpha)
        self.update.terminate = float(terminate)